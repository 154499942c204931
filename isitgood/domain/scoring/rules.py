"""
Deterministic clean-score rules.

Each rule set reads a verified ingredient list (label order, highest
concentration first) plus the user profile and returns the score, red
flags and watch-outs. The same contract is written into the scoring
prompt; these rule sets are what the final result is built from.

Body care:
    Hard red flags force BAD. Yellow flags: mild preservatives -5 each
    capped at -10, polymers -5 as a group, silicones -5 when in the first
    half of the list, alcohol denat -5 (or -10 with the sensitivity).
    Essential oils (-10), natural fragrance (-5) and gentle preservatives
    (-5) only count with the matching sensitivity. Floor of 70 without
    red flags.

Food:
    Hard red flags force BAD. Seed oils -10, sugar in the first three
    ingredients -10, refined grains -10, natural flavors -5, gums -5.
    Whole-food lists score 100.

Menu item:
    Frying or a critical allergen forces BAD; -10 per other concern.
"""

import re
from typing import Iterable, List, Optional, Pattern, Protocol, Sequence, Tuple

from isitgood.domain.analysis.models import IngredientNote, ProductCategory
from isitgood.domain.profile.models import BodySensitivity, UserProfile
from isitgood.domain.scoring.models import Deduction, RuleAssessment
from isitgood.domain.verification.ingredients import split_ingredients

BODY_SCORE_FLOOR = 70

# ═══════════════════════════════════════════════════════════
# BODY CARE VOCABULARY
# ═══════════════════════════════════════════════════════════

BODY_RED_FLAGS: Tuple[Tuple[str, Pattern[str], str], ...] = (
    ("Parabens", re.compile(r"paraben", re.I), "Preservatives linked to hormone disruption."),
    (
        "Phthalates",
        re.compile(r"phthalate|\bdbp\b|\bdehp\b", re.I),
        "Plasticizers often hidden in fragrance blends.",
    ),
    (
        "Formaldehyde releasers",
        re.compile(
            r"dmdm hydantoin|quaternium-15|imidazolidinyl urea|diazolidinyl urea", re.I
        ),
        "Preservatives that slowly release formaldehyde.",
    ),
    (
        "Harsh sulfates",
        re.compile(r"sodium laur(?:yl|eth) sulfate|\bsls\b|\bsles\b", re.I),
        "Stripping detergents that can irritate skin.",
    ),
    ("PEG compounds", re.compile(r"\bpeg-", re.I), "Can carry 1,4-dioxane contamination."),
    ("Triclosan", re.compile(r"triclosan", re.I), "Antibacterial agent linked to hormone disruption."),
)

GENERIC_FRAGRANCE_NAMES = frozenset(
    {"fragrance", "parfum", "fragrance/parfum", "parfum/fragrance", "perfume"}
)

MILD_PRESERVATIVES: Tuple[Tuple[str, Pattern[str]], ...] = (
    ("1,2-Hexanediol", re.compile(r"hexanediol", re.I)),
    ("Hydroxyacetophenone", re.compile(r"hydroxyacetophenone", re.I)),
    ("Phenoxyethanol", re.compile(r"phenoxyethanol", re.I)),
)
MILD_PRESERVATIVE_POINTS = 5
MILD_PRESERVATIVE_CAP = 10

SYNTHETIC_POLYMERS = re.compile(r"carbomer|acrylates|crosspolymer|vp/va copolymer", re.I)
SILICONES = re.compile(
    r"dimethicone|cyclomethicone|cyclopentasiloxane|cyclohexasiloxane|dimethiconol|"
    r"trimethicone|siloxane",
    re.I,
)
ALCOHOL_DENAT = re.compile(r"alcohol denat|denatured alcohol|\bsd alcohol", re.I)
ESSENTIAL_OILS = re.compile(
    r"lavender|peppermint|bergamot|cedarwood|tea tree|eucalyptus|essential oil", re.I
)
NATURAL_FRAGRANCE = re.compile(r"natural fragrance|natural parfum", re.I)
GENTLE_PRESERVATIVES = re.compile(r"benzyl alcohol|sorbic acid", re.I)

BODY_GOOD_STUFF: Tuple[Tuple[str, Pattern[str]], ...] = (
    ("Ceramides", re.compile(r"ceramide", re.I)),
    ("Aloe", re.compile(r"aloe", re.I)),
    ("Glycerin", re.compile(r"glycerin", re.I)),
    ("Niacinamide", re.compile(r"niacinamide", re.I)),
    ("Shea Butter", re.compile(r"shea", re.I)),
    ("Squalane", re.compile(r"squalane", re.I)),
    ("Hyaluronic Acid", re.compile(r"hyaluron", re.I)),
    ("Vitamin E", re.compile(r"tocopherol|vitamin e\b", re.I)),
    ("Jojoba Oil", re.compile(r"jojoba", re.I)),
    ("Argan Oil", re.compile(r"argan", re.I)),
    ("Coconut Oil", re.compile(r"coconut oil|cocos nucifera", re.I)),
    ("Rosehip Oil", re.compile(r"rosehip|rosa canina", re.I)),
    ("Green Tea", re.compile(r"green tea|camellia sinensis", re.I)),
    ("Centella Asiatica", re.compile(r"centella|cica\b", re.I)),
    ("Panthenol", re.compile(r"panthenol", re.I)),
    ("Peptides", re.compile(r"peptide", re.I)),
)

# ═══════════════════════════════════════════════════════════
# FOOD VOCABULARY
# ═══════════════════════════════════════════════════════════

FOOD_RED_FLAGS: Tuple[Tuple[str, Pattern[str], str], ...] = (
    (
        "Artificial colors",
        re.compile(
            r"\b(?:red|yellow|blue|green)\s+(?:no\.?\s*)?\d{1,2}\b|fd\s*&\s*c|artificial colou?rs?",
            re.I,
        ),
        "Synthetic dyes with no nutritional purpose.",
    ),
    (
        "Artificial flavors",
        re.compile(r"artificial flavou?rs?|artificially flavou?red", re.I),
        "Lab-made flavorings.",
    ),
    (
        "High fructose corn syrup",
        re.compile(r"high[- ]fructose corn syrup|\bhfcs\b", re.I),
        "Highly processed sweetener.",
    ),
    (
        "Partially hydrogenated oils",
        re.compile(r"partially hydrogenated", re.I),
        "Source of artificial trans fats.",
    ),
    (
        "Artificial preservatives",
        re.compile(
            r"\bbha\b|\bbht\b|\btbhq\b|butylated hydroxy(?:anisole|toluene)|"
            r"tert-?butylhydroquinone",
            re.I,
        ),
        "Synthetic antioxidant preservatives (BHA/BHT/TBHQ).",
    ),
)

FOOD_YELLOW_FLAGS: Tuple[Tuple[str, Pattern[str], int, str], ...] = (
    (
        "Seed oils",
        re.compile(
            r"canola|rapeseed|soybean oil|soy oil|sunflower oil|safflower oil|"
            r"cottonseed oil|corn oil|grapeseed oil",
            re.I,
        ),
        10,
        "Highly refined industrial oils.",
    ),
    ("Natural flavors", re.compile(r"natural flavou?rs?", re.I), 5, "Unclear source."),
    (
        "Gums and thickeners",
        re.compile(
            r"xanthan|guar gum|gellan|carrageenan|gum arabic|locust bean gum|cellulose gum", re.I
        ),
        5,
        "Texture additives.",
    ),
)

ADDED_SUGARS = re.compile(
    r"\bsugar\b|syrup|dextrose|sucrose|\bglucose\b|maltodextrin|cane juice", re.I
)
ADDED_SUGAR_WINDOW = 3
REFINED_GRAINS = re.compile(
    r"enriched|bleached|white flour|wheat flour|all[- ]purpose flour|refined flour|white rice",
    re.I,
)

# ═══════════════════════════════════════════════════════════
# MENU ITEM VOCABULARY
# ═══════════════════════════════════════════════════════════

FRIED = re.compile(r"deep[- ]fried|\bfried\b|tempura|battered|\bfritters?\b", re.I)
MENU_CONCERNS: Tuple[Tuple[str, Pattern[str], str], ...] = (
    (
        "Creamy sauce",
        re.compile(r"cream sauce|creamy|alfredo|aioli|mayo|ranch", re.I),
        "Heavy, often made with seed oils.",
    ),
    (
        "Added sugar",
        re.compile(r"glaze|syrup|candied|sweetened|caramel", re.I),
        "Likely added sugar.",
    ),
    (
        "Processed meat",
        re.compile(r"bacon|sausage|salami|pepperoni|\bham\b|hot dog", re.I),
        "Processed meat.",
    ),
    (
        "Refined bread",
        re.compile(r"white bread|brioche|\bbuns?\b|croutons?", re.I),
        "Refined grains.",
    ),
    ("Cheese-heavy", re.compile(r"cheesy|loaded|queso", re.I), "Likely processed cheese."),
)
MENU_CONCERN_POINTS = 10


def _allergen_terms(allergy: str) -> List[str]:
    """Lowercase search terms for an allergy, with a simple singular form.

    Example:
        >>> _allergen_terms("Peanuts")
        ['peanuts', 'peanut']
    """
    term = allergy.strip().lower()
    if not term:
        return []
    terms = [term]
    if term.endswith("s") and len(term) > 3:
        terms.append(term[:-1])
    return terms


def find_allergens(
    text: str, profile: UserProfile, allergen_tags: Iterable[str] = ()
) -> List[IngredientNote]:
    """Critical allergens from the profile present in text or database tags."""
    lowered = text.lower()
    tags = " ".join(tag.lower() for tag in allergen_tags)
    found = []
    for allergy in profile.critical_allergies:
        # Whole words with an optional plural; "nut" must not match "nutmeg"
        patterns = [re.compile(rf"\b{re.escape(t)}(?:e?s)?\b") for t in _allergen_terms(allergy)]
        if any(p.search(lowered) or p.search(tags) for p in patterns):
            found.append(
                IngredientNote(
                    name=allergy,
                    description=f"Contains {allergy}, one of your critical allergies.",
                )
            )
    return found


def body_good_stuff(ingredients: Optional[str]) -> List[str]:
    """Beneficial body-care ingredients present in the list."""
    if not ingredients:
        return []
    return [label for label, pattern in BODY_GOOD_STUFF if pattern.search(ingredients)]


def _assessment(
    red_flags: List[IngredientNote],
    deductions: List[Deduction],
    watch_outs: List[IngredientNote],
    floor: int = 0,
) -> RuleAssessment:
    if red_flags:
        return RuleAssessment(
            score=None, red_flags=red_flags, watch_outs=watch_outs, deductions=deductions
        )
    total = sum(d.points for d in deductions)
    score = max(floor, 100 - total, 0)
    return RuleAssessment(score=score, watch_outs=watch_outs, deductions=deductions)


def _watch_outs(deductions: Sequence[Deduction]) -> List[IngredientNote]:
    return [IngredientNote(name=d.name, description=d.description) for d in deductions]


class ScoringRules(Protocol):
    """A category rule set."""

    def assess(
        self,
        ingredients: Optional[str],
        profile: UserProfile,
        allergen_tags: Iterable[str] = (),
    ) -> RuleAssessment:
        ...


class BodyCareRules:
    """Body, skin and hair care rule set.

    Example:
        >>> rules = BodyCareRules()
        >>> rules.assess("Water, Glycerin, Methylparaben, Aloe", UserProfile()).score is None
        True
    """

    def assess(
        self,
        ingredients: Optional[str],
        profile: UserProfile,
        allergen_tags: Iterable[str] = (),
    ) -> RuleAssessment:
        text = ingredients or ""
        ordered = split_ingredients(text) if text else []

        red_flags = [
            IngredientNote(name=name, description=description)
            for name, pattern, description in BODY_RED_FLAGS
            if pattern.search(text)
        ]
        if self._has_generic_fragrance(ordered):
            red_flags.append(
                IngredientNote(
                    name="Fragrance",
                    description="Undisclosed fragrance blend that can hide dozens of chemicals.",
                )
            )
        red_flags += find_allergens(text, profile, allergen_tags)

        deductions: List[Deduction] = []

        preservatives = [name for name, pattern in MILD_PRESERVATIVES if pattern.search(text)]
        if preservatives:
            deductions.append(
                Deduction(
                    name=", ".join(preservatives),
                    points=min(
                        MILD_PRESERVATIVE_POINTS * len(preservatives), MILD_PRESERVATIVE_CAP
                    ),
                    description="Mild synthetic preservatives, common in modern formulas.",
                )
            )

        if SYNTHETIC_POLYMERS.search(text):
            deductions.append(
                Deduction(
                    name="Synthetic polymers",
                    points=5,
                    description="Film-forming thickeners such as carbomer or acrylates.",
                )
            )

        silicone = self._early_silicone(ordered)
        if silicone:
            deductions.append(
                Deduction(
                    name=silicone,
                    points=5,
                    description="Silicone high in the list; can feel occlusive.",
                )
            )

        if ALCOHOL_DENAT.search(text):
            sensitive = profile.has_alcohol_sensitivity()
            deductions.append(
                Deduction(
                    name="Alcohol Denat.",
                    points=10 if sensitive else 5,
                    description=(
                        "You prefer to avoid drying alcohols."
                        if sensitive
                        else "Drying alcohol that can be harsh on skin."
                    ),
                )
            )

        if profile.has_essential_oil_sensitivity() and ESSENTIAL_OILS.search(text):
            deductions.append(
                Deduction(
                    name="Essential oils",
                    points=10,
                    description="Since you prefer to avoid essential oils, note them in this formula.",
                )
            )

        if profile.has_fragrance_sensitivity() and NATURAL_FRAGRANCE.search(text):
            deductions.append(
                Deduction(
                    name="Natural fragrance",
                    points=5,
                    description="Plant-derived scent; you flagged fragrance sensitivity.",
                )
            )

        if profile.has_body_sensitivity(
            BodySensitivity.GENTLE_PRESERVATIVES
        ) and GENTLE_PRESERVATIVES.search(text):
            deductions.append(
                Deduction(
                    name="Benzyl Alcohol / Sorbic Acid",
                    points=5,
                    description="Gentle preservatives you asked us to watch for.",
                )
            )

        return _assessment(red_flags, deductions, _watch_outs(deductions), floor=BODY_SCORE_FLOOR)

    @staticmethod
    def _has_generic_fragrance(ordered: Sequence[str]) -> bool:
        """A bare "Fragrance"/"Parfum" entry; "Natural Fragrance" does not count."""
        for ingredient in ordered:
            base = re.sub(r"\([^)]*\)", "", ingredient).strip().lower()
            if base in GENERIC_FRAGRANCE_NAMES:
                return True
        return False

    @staticmethod
    def _early_silicone(ordered: Sequence[str]) -> Optional[str]:
        """Silicone within positions 1..total/2; None when order is unknown."""
        total = len(ordered)
        if total < 2:
            return None
        for position, ingredient in enumerate(ordered, start=1):
            if SILICONES.search(ingredient):
                return ingredient if position <= total / 2 else None
        return None


class FoodRules:
    """Packaged food rule set.

    Example:
        >>> rules = FoodRules()
        >>> rules.assess(
        ...     "Organic Black Tea, Organic Cinnamon, Organic Ginger, Organic Cardamom",
        ...     UserProfile(),
        ... ).score
        100
    """

    def assess(
        self,
        ingredients: Optional[str],
        profile: UserProfile,
        allergen_tags: Iterable[str] = (),
    ) -> RuleAssessment:
        text = ingredients or ""
        ordered = split_ingredients(text) if text else []

        red_flags = find_allergens(text, profile, allergen_tags)
        red_flags += [
            IngredientNote(name=name, description=description)
            for name, pattern, description in FOOD_RED_FLAGS
            if pattern.search(text)
        ]

        deductions = [
            Deduction(name=name, points=points, description=description)
            for name, pattern, points, description in FOOD_YELLOW_FLAGS
            if pattern.search(text)
        ]
        if any(ADDED_SUGARS.search(i) for i in ordered[:ADDED_SUGAR_WINDOW]):
            deductions.append(
                Deduction(
                    name="Added sugar",
                    points=10,
                    description="Sugar is one of the main ingredients.",
                )
            )
        if any(REFINED_GRAINS.search(i) and "whole" not in i.lower() for i in ordered):
            deductions.append(
                Deduction(name="Refined grains", points=10, description="Stripped of fiber.")
            )

        watch_outs = _watch_outs(deductions)
        lowered = text.lower()
        for sensitivity in profile.sensitivities:
            if sensitivity.strip() and sensitivity.strip().lower() in lowered:
                watch_outs.append(
                    IngredientNote(
                        name=sensitivity,
                        description=f"Contains {sensitivity}, which you are sensitive to.",
                    )
                )

        return _assessment(red_flags, deductions, watch_outs)


class MenuItemRules:
    """Single menu item rule set, judged from the item description."""

    def assess(
        self,
        ingredients: Optional[str],
        profile: UserProfile,
        allergen_tags: Iterable[str] = (),
    ) -> RuleAssessment:
        text = ingredients or ""

        red_flags = find_allergens(text, profile, allergen_tags)
        if FRIED.search(text):
            red_flags.append(
                IngredientNote(name="Fried", description="Deep fried, usually in seed oils.")
            )

        deductions = [
            Deduction(name=name, points=MENU_CONCERN_POINTS, description=description)
            for name, pattern, description in MENU_CONCERNS
            if pattern.search(text)
        ]
        return _assessment(red_flags, deductions, _watch_outs(deductions))


def rules_for(category: ProductCategory) -> ScoringRules:
    """Rule set for a category."""
    if category == ProductCategory.BODY:
        return BodyCareRules()
    if category == ProductCategory.MENU:
        return MenuItemRules()
    return FoodRules()
