"""
Scoring engine.

Combines the deterministic rule outcome (score, verdict, red flags,
watch-outs) with the reasoning collaborator's narrative (headline,
summary, good stuff, greenwash alert, alternatives, DIY recipe).
"""

from typing import Any, Iterable, List, Optional

import structlog

from isitgood.domain.analysis.models import (
    DEFAULT_HEADLINES,
    UNVERIFIED_HEADLINE,
    UNVERIFIED_SUMMARY_PREFIX,
    Alternative,
    DIYRecipe,
    GreenwashAlert,
    IngredientNote,
    ProductCategory,
    Verdict,
)
from isitgood.domain.profile.models import UserProfile
from isitgood.domain.reasoning.ports import GenerationConfig, IReasoningProvider
from isitgood.domain.reference.models import ReferenceProduct
from isitgood.domain.scoring.models import ScoreCard
from isitgood.domain.scoring.prompts import build_analysis_prompt, build_claims_only_prompt
from isitgood.domain.scoring.rules import body_good_stuff, find_allergens, rules_for
from isitgood.domain.shared.structured_decode import decode_structured_or_raise

logger = structlog.get_logger(__name__)

UNVERIFIED_SUMMARY_FALLBACK = "Try scanning the ingredient panel for a full analysis."
REANALYSIS_FALLBACK_SCORE = 75


# ═══════════════════════════════════════════════════════════
# COLLABORATOR OUTPUT PARSING
# ═══════════════════════════════════════════════════════════


def _as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def parse_notes(raw: Any) -> List[IngredientNote]:
    """Parse [{"name", "description"}] entries, skipping malformed ones."""
    notes = []
    for item in _as_list(raw):
        if isinstance(item, dict) and item.get("name"):
            notes.append(
                IngredientNote(
                    name=str(item["name"]), description=str(item.get("description") or "")
                )
            )
    return notes


def parse_good_stuff(raw: Any) -> List[str]:
    return [str(item) for item in _as_list(raw) if isinstance(item, str) and item.strip()]


def parse_alternatives(raw: Any) -> List[Alternative]:
    alternatives = []
    for item in _as_list(raw):
        if isinstance(item, dict) and item.get("name"):
            alternatives.append(
                Alternative(
                    name=str(item["name"]),
                    brand=item.get("brand") or None,
                    reason=str(item.get("reason") or ""),
                    product_url=item.get("productUrl") or None,
                )
            )
    return alternatives


def parse_greenwash(raw: Any) -> Optional[GreenwashAlert]:
    """Kept only when the collaborator actually suggests greenwashing."""
    if isinstance(raw, dict) and raw.get("suggested") is True:
        return GreenwashAlert(suggested=True, reason=str(raw.get("reason") or ""))
    return None


def parse_diy_recipes(raw: Any) -> List[DIYRecipe]:
    if not isinstance(raw, dict) or not raw.get("title"):
        return []
    return [
        DIYRecipe(
            title=str(raw["title"]),
            description=str(raw.get("description") or ""),
            ingredients=[str(i) for i in _as_list(raw.get("ingredients"))],
            steps=[str(s) for s in _as_list(raw.get("steps"))],
        )
    ]


def _collaborator_allergen_flags(
    parsed_red_flags: List[IngredientNote], profile: UserProfile
) -> List[IngredientNote]:
    """Collaborator red flags that name one of the user's critical allergies."""
    return [
        note
        for note in parsed_red_flags
        if find_allergens(f"{note.name} {note.description}", profile)
    ]


class ScoringEngine:
    """Scores verified products and describes unverified ones.

    Example:
        >>> engine = ScoringEngine(reasoning)
        >>> card = await engine.score_verified(
        ...     category=ProductCategory.FOOD,
        ...     product_name="Masala Chai",
        ...     brand="Meria",
        ...     ingredients="Organic Black Tea, Organic Cinnamon, Organic Ginger",
        ...     additional_info="",
        ...     profile=UserProfile(),
        ... )
        >>> card.score, card.verdict
        (100, <Verdict.EXCELLENT: 'EXCELLENT'>)
    """

    def __init__(
        self,
        reasoning: IReasoningProvider,
        generation_config: Optional[GenerationConfig] = None,
    ) -> None:
        self._reasoning = reasoning
        self._config = generation_config or GenerationConfig()

    async def score_verified(
        self,
        category: ProductCategory,
        product_name: str,
        brand: Optional[str],
        ingredients: Optional[str],
        additional_info: str,
        profile: UserProfile,
        reference: Optional[ReferenceProduct] = None,
        claims: Optional[List[str]] = None,
        allergen_tags: Iterable[str] = (),
    ) -> ScoreCard:
        """
        Full-mode scoring over verified ingredients.

        Args:
            category: Product category
            product_name: Product name
            brand: Brand, if known
            ingredients: Verified ingredient text (None for trusted-claims products)
            additional_info: Supplementary text for the prompt
            profile: User profile
            reference: Reference database record, if found
            claims: Marketing claims
            allergen_tags: Reference database allergen tags

        Returns:
            ScoreCard with a score, or BAD with red flags

        Raises:
            ReasoningError: If the collaborator call fails
            StructuredDecodeError: If its response is not a JSON object
        """
        assessment = rules_for(category).assess(ingredients, profile, allergen_tags)

        prompt = build_analysis_prompt(
            category,
            product_name,
            brand,
            ingredients,
            additional_info,
            profile,
            reference=reference,
            claims=claims,
        )
        raw = await self._reasoning.generate(prompt, config=self._config)
        parsed = decode_structured_or_raise(raw)

        red_flags = list(assessment.red_flags)
        known = {note.name.lower() for note in red_flags}
        for note in _collaborator_allergen_flags(parse_notes(parsed.get("redFlags")), profile):
            if note.name.lower() not in known:
                red_flags.append(note)
                known.add(note.name.lower())

        if red_flags:
            score: Optional[int] = None
            verdict = Verdict.BAD
        else:
            score = assessment.score
            verdict = assessment.verdict

        headline = DEFAULT_HEADLINES[verdict]
        parsed_headline = parsed.get("headline")
        if isinstance(parsed_headline, str) and parsed_headline.strip():
            if str(parsed.get("verdict", "")).upper() == verdict.value:
                headline = parsed_headline.strip()

        good_stuff = parse_good_stuff(parsed.get("goodStuff"))
        if not good_stuff and category == ProductCategory.BODY:
            good_stuff = body_good_stuff(ingredients)

        logger.info(
            "Product scored",
            category=category.value,
            score=score,
            verdict=verdict.value,
            red_flags=len(red_flags),
            deductions=assessment.total_deducted,
        )
        return ScoreCard(
            score=score,
            verdict=verdict,
            headline=headline,
            summary=str(parsed.get("summary") or ""),
            red_flags=red_flags,
            watch_outs=list(assessment.watch_outs),
            good_stuff=good_stuff,
            greenwash_alert=parse_greenwash(parsed.get("greenwashAlert")),
            alternatives=parse_alternatives(parsed.get("alternatives")),
            diy_recipes=parse_diy_recipes(parsed.get("diyRecipe")),
        )

    async def score_claims_only(
        self,
        category: ProductCategory,
        product_name: str,
        brand: Optional[str],
        additional_info: str,
        profile: UserProfile,
        claims: List[str],
    ) -> ScoreCard:
        """
        Describe a product whose ingredients could not be verified.

        Scoring is disabled: score null, verdict MEH, no red flags or
        watch-outs, and good stuff limited to the claims themselves.

        Raises:
            ReasoningError: If the collaborator call fails
            StructuredDecodeError: If its response is not a JSON object
        """
        prompt = build_claims_only_prompt(
            category, product_name, brand, additional_info, profile, claims
        )
        raw = await self._reasoning.generate(prompt, config=self._config)
        parsed = decode_structured_or_raise(raw)

        summary = str(parsed.get("summary") or "") or UNVERIFIED_SUMMARY_FALLBACK
        logger.info("Claims-only description", category=category.value, claims=len(claims))
        return ScoreCard(
            score=None,
            verdict=Verdict.MEH,
            headline=UNVERIFIED_HEADLINE,
            summary=f"{UNVERIFIED_SUMMARY_PREFIX}{summary}",
            good_stuff=[f"{claim} (claim)" for claim in claims],
            alternatives=parse_alternatives(parsed.get("alternatives")),
        )

    @staticmethod
    def reanalysis_fallback(ingredient_source: str) -> ScoreCard:
        """Safe default once ingredients are in hand but scoring failed."""
        return ScoreCard(
            score=REANALYSIS_FALLBACK_SCORE,
            verdict=Verdict.GOOD,
            headline=DEFAULT_HEADLINES[Verdict.GOOD],
            summary=(
                f"Ingredients verified from {ingredient_source}. "
                "Full ingredient list available."
            ),
        )
