"""
Unit tests for the deterministic clean-score rules.
"""

import pytest

from isitgood.domain.analysis.models import ProductCategory, Verdict
from isitgood.domain.profile.models import UserProfile
from isitgood.domain.scoring.rules import (
    BodyCareRules,
    FoodRules,
    MenuItemRules,
    body_good_stuff,
    find_allergens,
    rules_for,
)

EARLY_SILICONE = (
    "Water, Dimethicone, Glycerin, Squalane, Shea Butter, Aloe Vera, Tocopherol, "
    "Jojoba Oil, Panthenol, Allantoin"
)
LATE_SILICONE = (
    "Water, Glycerin, Squalane, Shea Butter, Aloe Vera, Tocopherol, Jojoba Oil, "
    "Dimethicone, Panthenol, Allantoin"
)
MANY_YELLOW_FLAGS = (
    "Water, Dimethicone, Alcohol Denat., Glycerin, Carbomer, Lavender Oil, Phenoxyethanol, "
    "1,2-Hexanediol, Tocopherol, Aloe"
)


@pytest.fixture
def sensitive_profile() -> UserProfile:
    """Profile avoiding drying alcohols and essential oils."""
    return UserProfile(body_sensitivities=["Alcohol (denat.)", "Essential Oils"])


# ═══════════════════════════════════════════════════════════
# BODY CARE
# ═══════════════════════════════════════════════════════════


class TestBodyCareRules:
    """Body care rule set."""

    def test_clean_list_scores_100(
        self, clean_serum_ingredients: str, empty_profile: UserProfile
    ) -> None:
        """Test a list with no flags."""
        assessment = BodyCareRules().assess(clean_serum_ingredients, empty_profile)

        assert assessment.score == 100
        assert assessment.verdict == Verdict.EXCELLENT
        assert assessment.watch_outs == []

    def test_paraben_forces_bad(self, empty_profile: UserProfile) -> None:
        """Test a paraben anywhere gives a null score."""
        assessment = BodyCareRules().assess(
            "Water, Glycerin, Squalane, Aloe Vera, Tocopherol, Methylparaben", empty_profile
        )

        assert assessment.score is None
        assert assessment.verdict == Verdict.BAD
        assert [flag.name for flag in assessment.red_flags] == ["Parabens"]

    def test_generic_fragrance_is_a_red_flag(self, empty_profile: UserProfile) -> None:
        """Test bare Fragrance (Parfum) forces BAD."""
        assessment = BodyCareRules().assess(
            "Water, Glycerin, Fragrance (Parfum), Aloe", empty_profile
        )

        assert assessment.score is None
        assert assessment.red_flags[0].name == "Fragrance"

    def test_natural_fragrance_only_counts_with_sensitivity(self) -> None:
        """Test natural fragrance is a -5 watch-out for fragrance-sensitive users."""
        text = "Water, Glycerin, Natural Fragrance, Aloe"

        assert BodyCareRules().assess(text, UserProfile()).score == 100
        assert BodyCareRules().assess(text, UserProfile(body_sensitivities=["Fragrance"])).score == 95

    def test_silicone_in_first_half(self, empty_profile: UserProfile) -> None:
        """Test Dimethicone at #2 of 10 costs 5 points."""
        assessment = BodyCareRules().assess(EARLY_SILICONE, empty_profile)

        assert assessment.score == 95
        assert [d.name for d in assessment.deductions] == ["Dimethicone"]

    def test_silicone_in_second_half(self, empty_profile: UserProfile) -> None:
        """Test Dimethicone at #8 of 10 costs nothing."""
        early = BodyCareRules().assess(EARLY_SILICONE, empty_profile)
        late = BodyCareRules().assess(LATE_SILICONE, empty_profile)

        assert late.score == 100
        assert late.deductions == []
        assert late.score >= early.score  # type: ignore[operator]

    def test_floor_of_70(self, sensitive_profile: UserProfile) -> None:
        """Test 40 points of yellow flags still score 70."""
        assessment = BodyCareRules().assess(MANY_YELLOW_FLAGS, sensitive_profile)

        assert assessment.total_deducted == 40
        assert assessment.score == 70
        assert assessment.verdict == Verdict.GOOD
        assert assessment.red_flags == []
        assert {note.name for note in assessment.watch_outs} == {
            "1,2-Hexanediol, Phenoxyethanol",
            "Synthetic polymers",
            "Dimethicone",
            "Alcohol Denat.",
            "Essential oils",
        }

    def test_sensitivities_change_deductions(self, empty_profile: UserProfile) -> None:
        """Test essential oils are ignored and alcohol costs 5 without sensitivities."""
        assessment = BodyCareRules().assess(MANY_YELLOW_FLAGS, empty_profile)

        assert assessment.total_deducted == 25
        assert assessment.score == 75

    def test_body_allergen_forces_bad(self) -> None:
        """Test a critical allergy in a body-care list."""
        profile = UserProfile(critical_allergies=["Almonds"])

        assessment = BodyCareRules().assess(
            "Water, Sweet Almond Oil, Glycerin, Tocopherol", profile
        )

        assert assessment.score is None
        assert assessment.red_flags[0].name == "Almonds"

    def test_body_good_stuff(self, clean_serum_ingredients: str) -> None:
        """Test beneficial ingredients are recognised."""
        assert body_good_stuff(clean_serum_ingredients) == [
            "Aloe",
            "Glycerin",
            "Niacinamide",
            "Squalane",
            "Hyaluronic Acid",
            "Vitamin E",
        ]
        assert body_good_stuff(None) == []


# ═══════════════════════════════════════════════════════════
# FOOD
# ═══════════════════════════════════════════════════════════


class TestFoodRules:
    """Packaged food rule set."""

    def test_whole_food_list_scores_100(
        self, chai_ingredients: str, empty_profile: UserProfile
    ) -> None:
        """Test an all-whole-food list."""
        assessment = FoodRules().assess(chai_ingredients, empty_profile)

        assert assessment.score == 100
        assert assessment.verdict == Verdict.EXCELLENT

    def test_artificial_color_forces_bad(self, empty_profile: UserProfile) -> None:
        """Test a synthetic dye."""
        assessment = FoodRules().assess("Sugar, Corn Starch, Red 40, Salt", empty_profile)

        assert assessment.score is None
        assert assessment.red_flags[0].name == "Artificial colors"

    def test_yellow_flags_add_up(self, empty_profile: UserProfile) -> None:
        """Test food deductions have no floor."""
        assessment = FoodRules().assess(
            "Enriched Wheat Flour, Sugar, Canola Oil, Xanthan Gum, Natural Flavors, Salt",
            empty_profile,
        )

        assert assessment.total_deducted == 40
        assert assessment.score == 60
        assert assessment.verdict == Verdict.MEH

    def test_sugar_outside_top_three(self, empty_profile: UserProfile) -> None:
        """Test sugar low in the list costs nothing."""
        assessment = FoodRules().assess(
            "Rolled Oats, Almonds, Pumpkin Seeds, Coconut, Cane Sugar", empty_profile
        )

        assert assessment.score == 100

    def test_whole_grain_flour_is_not_refined(self, empty_profile: UserProfile) -> None:
        """Test "whole wheat flour" is not a refined grain."""
        assessment = FoodRules().assess(
            "Whole Wheat Flour, Water, Olive Oil, Sea Salt", empty_profile
        )

        assert assessment.score == 100

    def test_allergy_forces_bad(self, allergic_profile: UserProfile) -> None:
        """Test a critical allergy in the list."""
        assessment = FoodRules().assess("Roasted Peanuts, Sea Salt, Honey", allergic_profile)

        assert assessment.score is None
        assert assessment.red_flags[0].name == "Peanuts"

    def test_allergy_from_database_tags(self, allergic_profile: UserProfile) -> None:
        """Test database allergen tags count as evidence."""
        assessment = FoodRules().assess(
            "Cocoa, Dates, Sea Salt, Vanilla", allergic_profile, allergen_tags=["en:peanuts"]
        )

        assert assessment.score is None

    def test_sensitivity_is_a_watch_out(self, allergic_profile: UserProfile) -> None:
        """Test sensitivities do not change the score."""
        assessment = FoodRules().assess("Oats, Dairy Milk, Honey, Almonds", allergic_profile)

        assert assessment.score == 100
        assert [note.name for note in assessment.watch_outs] == ["Dairy"]


# ═══════════════════════════════════════════════════════════
# MENU ITEMS
# ═══════════════════════════════════════════════════════════


class TestMenuItemRules:
    """Menu item rule set."""

    def test_fried_forces_bad(self, empty_profile: UserProfile) -> None:
        """Test frying."""
        assert MenuItemRules().assess("Crispy fried chicken", empty_profile).score is None

    def test_concerns(self, empty_profile: UserProfile) -> None:
        """Test -10 per concern."""
        assessment = MenuItemRules().assess(
            "Grilled salmon with creamy dill sauce on a brioche bun", empty_profile
        )

        assert assessment.score == 80
        assert [d.name for d in assessment.deductions] == ["Creamy sauce", "Refined bread"]

    def test_allergen(self, allergic_profile: UserProfile) -> None:
        """Test an allergen in the description."""
        assessment = MenuItemRules().assess("Rice noodles with peanut sauce", allergic_profile)

        assert assessment.score is None


class TestRuleHelpers:
    """Allergen matching and rule dispatch."""

    def test_allergen_singular_form(self) -> None:
        """Test plural allergies match singular mentions."""
        profile = UserProfile(critical_allergies=["Peanuts", "Shellfish"])

        found = find_allergens("Contains peanut oil", profile)

        assert [note.name for note in found] == ["Peanuts"]

    def test_allergen_is_not_a_word_prefix(self) -> None:
        """Test "Nuts" does not flag nutmeg and "Eggs" does not flag eggplant."""
        profile = UserProfile(critical_allergies=["Nuts", "Eggs", "Pea"])

        assessment = FoodRules().assess(
            "Oats, Nutmeg, Cinnamon, Raisins, Eggplant, Peach", profile
        )

        assert assessment.score == 100
        assert assessment.red_flags == []

    def test_allergen_plural_and_tags_are_whole_words(self) -> None:
        """Test plural mentions match and tags do not match by prefix."""
        profile = UserProfile(critical_allergies=["Nut", "Pea"])

        found = find_allergens("Mixed nuts, salt", profile, allergen_tags=["en:peanuts"])

        assert [note.name for note in found] == ["Nut"]

    @pytest.mark.parametrize(
        "category,expected",
        [
            (ProductCategory.BODY, BodyCareRules),
            (ProductCategory.FOOD, FoodRules),
            (ProductCategory.MENU, MenuItemRules),
        ],
    )
    def test_rules_for(self, category: ProductCategory, expected: type) -> None:
        """Test category dispatch."""
        assert isinstance(rules_for(category), expected)
