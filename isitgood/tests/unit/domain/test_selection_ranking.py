"""
Unit tests for selection ranking.
"""

from isitgood.domain.analysis.models import MENU_DISCLAIMER
from isitgood.domain.profile.models import UserProfile
from isitgood.domain.ranking.engine import SelectionRankingEngine
from isitgood.domain.ranking.prompts import build_menu_selection_prompt
from isitgood.domain.shared.errors import ReasoningError
from isitgood.tests.fakes import ScriptedReasoning

MENU_TEXT = "Grilled Salmon $18\nKale Caesar $12\nFried Calamari $14"


class TestSelectionRankingEngine:
    """Bucketing via the collaborator."""

    async def test_buckets(self, allergic_profile: UserProfile) -> None:
        """Test the three buckets and the disclaimer."""
        reasoning = ScriptedReasoning(
            {
                "title": "Harbor Grill",
                "itemCount": 3,
                "cleanestOptions": [
                    {"name": "Grilled Salmon", "whyItStandsOut": "Simple protein", "notes": ""}
                ],
                "alsoGoodOptions": [{"name": "Kale Caesar", "notes": "Dressing on the side"}],
                "cautionItems": [{"name": "Fried Calamari"}],
                "generalAdvice": "Ask about the cooking oil.",
            }
        )

        result = await SelectionRankingEngine(reasoning).rank(MENU_TEXT, allergic_profile)

        assert result.title == "Harbor Grill"
        assert result.item_count == 3
        assert result.cleanest_options[0].why_it_stands_out == "Simple protein"
        assert result.cleanest_options[0].notes is None
        assert result.also_good_options[0].notes == "Dressing on the side"
        assert result.caution_items[0].reason == "Worth double-checking with staff."
        assert result.general_advice == "Ask about the cooking oil."
        assert result.disclaimer == MENU_DISCLAIMER
        assert "CRITICAL ALLERGIES: Peanuts" in reasoning.prompts[0]

    async def test_buckets_are_capped(self, empty_profile: UserProfile) -> None:
        """Test at most five entries per bucket and malformed entries dropped."""
        entries = [{"name": f"Item {i}"} for i in range(8)]
        reasoning = ScriptedReasoning({"cleanestOptions": ["bad", {"notes": "x"}, *entries]})

        result = await SelectionRankingEngine(reasoning).rank(MENU_TEXT, empty_profile)

        assert [o.name for o in result.cleanest_options] == [f"Item {i}" for i in range(5)]
        assert result.title == "Menu Analysis"

    async def test_item_count_falls_back_to_detected(self, empty_profile: UserProfile) -> None:
        """Test a missing count uses the detected items."""
        reasoning = ScriptedReasoning({"itemCount": True})

        result = await SelectionRankingEngine(reasoning).rank(
            MENU_TEXT, empty_profile, ["Grilled Salmon", "Kale Caesar"]
        )

        assert result.item_count == 2
        assert "DETECTED ITEMS (2):\n1. Grilled Salmon\n2. Kale Caesar" in reasoning.prompts[0]

    async def test_failure_gives_error_result(self, empty_profile: UserProfile) -> None:
        """Test a failed call never raises."""
        reasoning = ScriptedReasoning(ReasoningError("down"))

        result = await SelectionRankingEngine(reasoning).rank(MENU_TEXT, empty_profile)

        assert result.title == "Analysis Error"
        assert result.cleanest_options == []
        assert result.disclaimer == MENU_DISCLAIMER

    async def test_unparseable_gives_error_result(self, empty_profile: UserProfile) -> None:
        """Test prose output is treated as a failure."""
        result = await SelectionRankingEngine(ScriptedReasoning("Salmon is best")).rank(
            MENU_TEXT, empty_profile
        )

        assert result.title == "Analysis Error"


def test_prompt_forbids_scores() -> None:
    """Test the ranking prompt contract."""
    prompt = build_menu_selection_prompt(MENU_TEXT, UserProfile())

    assert "Assign any numeric scores" in prompt
    assert MENU_TEXT in prompt
    assert "CRITICAL ALLERGIES" not in prompt
