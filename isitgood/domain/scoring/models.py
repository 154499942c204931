"""
Scoring domain models.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from isitgood.domain.analysis.models import (
    Alternative,
    DIYRecipe,
    GreenwashAlert,
    IngredientNote,
    Verdict,
    verdict_for_score,
)


class Deduction(BaseModel):
    """One yellow-flag deduction applied by a rule set."""

    model_config = ConfigDict(frozen=True)

    name: str
    points: int = Field(..., ge=0)
    description: str = ""


class RuleAssessment(BaseModel):
    """Deterministic rule outcome over an ingredient list.

    Example:
        >>> assessment = RuleAssessment(score=100)
        >>> assessment.verdict
        <Verdict.EXCELLENT: 'EXCELLENT'>
    """

    model_config = ConfigDict(frozen=True)

    score: Optional[int] = Field(None, ge=0, le=100)
    red_flags: List[IngredientNote] = Field(default_factory=list)
    watch_outs: List[IngredientNote] = Field(default_factory=list)
    deductions: List[Deduction] = Field(default_factory=list)

    @property
    def verdict(self) -> Verdict:
        return verdict_for_score(self.score)

    @property
    def total_deducted(self) -> int:
        return sum(d.points for d in self.deductions)


class ScoreCard(BaseModel):
    """Scoring engine output, before verification fields are attached."""

    model_config = ConfigDict(frozen=True)

    score: Optional[int] = Field(None, ge=0, le=100)
    verdict: Verdict
    headline: str
    summary: str = ""
    red_flags: List[IngredientNote] = Field(default_factory=list)
    watch_outs: List[IngredientNote] = Field(default_factory=list)
    good_stuff: List[str] = Field(default_factory=list)
    greenwash_alert: Optional[GreenwashAlert] = None
    alternatives: List[Alternative] = Field(default_factory=list)
    diy_recipes: List[DIYRecipe] = Field(default_factory=list)
