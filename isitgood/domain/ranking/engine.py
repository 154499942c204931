"""
Selection ranking engine.
"""

from typing import Any, List, Optional

import structlog

from isitgood.domain.analysis.models import (
    AlsoGoodOption,
    CautionItem,
    CleanestOption,
    MenuSelectionResult,
)
from isitgood.domain.profile.models import UserProfile
from isitgood.domain.ranking.prompts import build_menu_selection_prompt
from isitgood.domain.reasoning.ports import GenerationConfig, IReasoningProvider
from isitgood.domain.shared.structured_decode import decode_structured_or_raise

logger = structlog.get_logger(__name__)

MAX_PER_BUCKET = 5
DEFAULT_TITLE = "Menu Analysis"
ERROR_TITLE = "Analysis Error"
ERROR_ADVICE = "We encountered an error analyzing this menu or selection. Please try again."


def _entries(raw: Any) -> List[dict]:
    if not isinstance(raw, list):
        return []
    return [item for item in raw if isinstance(item, dict) and item.get("name")][:MAX_PER_BUCKET]


def _optional_text(value: Any) -> Optional[str]:
    return str(value) if value else None


class SelectionRankingEngine:
    """Buckets menu or selection items into cleanest / also good / caution.

    Never raises: a failed call or unparseable answer yields the error
    result, which still carries the disclaimer.

    Example:
        >>> engine = SelectionRankingEngine(reasoning)
        >>> result = await engine.rank(menu_text, profile, ["Grilled Salmon", "Fries"])
        >>> [o.name for o in result.cleanest_options]
        ['Grilled Salmon']
    """

    def __init__(
        self,
        reasoning: IReasoningProvider,
        generation_config: Optional[GenerationConfig] = None,
    ) -> None:
        self._reasoning = reasoning
        self._config = generation_config or GenerationConfig()

    async def rank(
        self,
        text: str,
        profile: UserProfile,
        detected_items: Optional[List[str]] = None,
    ) -> MenuSelectionResult:
        prompt = build_menu_selection_prompt(text, profile, detected_items)
        try:
            raw = await self._reasoning.generate(prompt, config=self._config)
            parsed = decode_structured_or_raise(raw)
        except Exception as e:
            logger.warning("Selection ranking failed", error=str(e))
            return MenuSelectionResult(title=ERROR_TITLE, general_advice=ERROR_ADVICE)

        cleanest = [
            CleanestOption(
                name=str(item["name"]),
                why_it_stands_out=str(item.get("whyItStandsOut") or ""),
                notes=_optional_text(item.get("notes")),
            )
            for item in _entries(parsed.get("cleanestOptions"))
        ]
        also_good = [
            AlsoGoodOption(name=str(item["name"]), notes=_optional_text(item.get("notes")))
            for item in _entries(parsed.get("alsoGoodOptions"))
        ]
        caution = [
            CautionItem(
                name=str(item["name"]),
                reason=str(item.get("reason") or "Worth double-checking with staff."),
            )
            for item in _entries(parsed.get("cautionItems"))
        ]

        item_count = parsed.get("itemCount")
        if not isinstance(item_count, int) or isinstance(item_count, bool) or item_count <= 0:
            item_count = len(detected_items or [])

        logger.info(
            "Selection ranked",
            cleanest=len(cleanest),
            also_good=len(also_good),
            caution=len(caution),
            item_count=item_count,
        )
        return MenuSelectionResult(
            title=str(parsed.get("title") or DEFAULT_TITLE),
            cleanest_options=cleanest,
            also_good_options=also_good,
            caution_items=caution,
            general_advice=str(parsed.get("generalAdvice") or ""),
            item_count=item_count,
        )
