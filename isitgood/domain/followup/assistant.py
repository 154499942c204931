"""
Conversational follow-up over a previous result.

Stateless: the caller passes the full history on every call.
"""

from typing import List, Optional, Union

import structlog

from isitgood.domain.analysis.models import MenuSelectionResult, ProductCategory, ScanResult
from isitgood.domain.profile.models import ChatMessage, UserProfile
from isitgood.domain.reasoning.ports import GenerationConfig, IReasoningProvider

logger = structlog.get_logger(__name__)

FOLLOWUP_FALLBACK = "I'm having trouble connecting. Please try again!"
FOLLOWUP_CONFIG = GenerationConfig(temperature=0.7, max_output_tokens=512, json_output=False)

_CATEGORY_LABELS = {
    ProductCategory.BODY: "body/beauty",
    ProductCategory.MENU: "menu item",
    ProductCategory.FOOD: "food",
}


def _joined(values: List[str]) -> str:
    return ", ".join(values) or "None"


def _result_context(result: Union[ScanResult, MenuSelectionResult]) -> str:
    if isinstance(result, MenuSelectionResult):
        return (
            f"SELECTION ANALYZED: {result.title}\n"
            f"CLEANEST PICKS: {_joined([o.name for o in result.cleanest_options])}\n"
            f"ALSO GOOD: {_joined([o.name for o in result.also_good_options])}\n"
            f"GO EASY ON: {_joined([c.name for c in result.caution_items])}\n"
            f"ADVICE: {result.general_advice}\n"
        )

    product = result.product_name + (f" by {result.brand}" if result.brand else "")
    return (
        f"PRODUCT ANALYZED: {product}\n"
        f"CATEGORY: {_CATEGORY_LABELS[result.category]}\n"
        f"VERDICT: {result.verdict.value}\n"
        f"SUMMARY: {result.summary}\n"
        f"RED FLAGS: {_joined([f.name for f in result.red_flags])}\n"
        f"WATCH-OUTS: {_joined([w.name for w in result.watch_outs])}\n"
        f"GOOD STUFF: {_joined(result.good_stuff)}\n"
    )


def build_followup_prompt(
    result: Union[ScanResult, MenuSelectionResult],
    profile: UserProfile,
    history: List[ChatMessage],
    question: str,
) -> str:
    """Context block for a single follow-up turn."""
    history_lines = "\n".join(f"{m.role.value}: {m.content}" for m in history)
    return (
        'You are a helpful clean living assistant for "Is It Good?".\n\n'
        f"{_result_context(result)}\n"
        "USER PROFILE:\n"
        f"- Allergies: {_joined(profile.critical_allergies)}\n"
        f"- Sensitivities: {_joined(profile.sensitivities)}\n"
        f"- Preferences: {_joined(profile.dietary_preferences)}\n\n"
        f"CHAT HISTORY:\n{history_lines}\n\n"
        "Answer helpfully and concisely (under 150 words). Focus on clean living principles. "
        "Be supportive: point toward cleaner matches rather than lecturing.\n\n"
        f"USER QUESTION: {question}"
    )


class FollowupAssistant:
    """Single-turn Q&A about a result.

    Example:
        >>> assistant = FollowupAssistant(reasoning)
        >>> await assistant.answer(result, profile, [], "Is this safe for kids?")
        'Yes, this lotion is a gentle choice...'
    """

    def __init__(
        self,
        reasoning: IReasoningProvider,
        generation_config: Optional[GenerationConfig] = None,
    ) -> None:
        self._reasoning = reasoning
        self._config = generation_config or FOLLOWUP_CONFIG

    async def answer(
        self,
        result: Union[ScanResult, MenuSelectionResult],
        profile: UserProfile,
        history: List[ChatMessage],
        question: str,
    ) -> str:
        """Answer a question; the fixed apology replaces any failure."""
        prompt = build_followup_prompt(result, profile, history, question)
        try:
            answer = await self._reasoning.generate(prompt, config=self._config)
        except Exception as e:
            logger.warning("Follow-up answer failed", error=str(e))
            return FOLLOWUP_FALLBACK

        if not answer or not answer.strip():
            return FOLLOWUP_FALLBACK
        return answer.strip()
