"""
Scoring prompts.

The full prompt carries the deterministic scoring contract so the
collaborator's narrative (headline, summary, good stuff) agrees with the
rule outcome. The claims-only prompt disables scoring entirely.
"""

from typing import List, Optional

from isitgood.domain.analysis.models import ProductCategory
from isitgood.domain.profile.models import UserProfile
from isitgood.domain.reference.helpers import format_additives, nova_description
from isitgood.domain.reference.models import ReferenceProduct

APP_NAME = "Is It Good?"

# ═══════════════════════════════════════════════════════════
# CATEGORY RULE BLOCKS
# ═══════════════════════════════════════════════════════════

BODY_HARD_RED_FLAGS = """
═══════════════════════════════════════════════════════════
HARD RED FLAGS (score = null, verdict = "BAD")
These ingredients ALWAYS trigger a BAD verdict, no score given:
═══════════════════════════════════════════════════════════
- Parabens (methylparaben, propylparaben, butylparaben, ethylparaben, etc.)
- Phthalates (diethyl phthalate, DBP, DEHP, etc.)
- Formaldehyde releasers (DMDM hydantoin, quaternium-15, imidazolidinyl urea, diazolidinyl urea)
- Harsh sulfates (SLS/Sodium Lauryl Sulfate, SLES/Sodium Laureth Sulfate)
- PEG compounds (PEG-anything, e.g., PEG-40, PEG-100)
- Triclosan
- Synthetic "Fragrance" or "Parfum" when listed generically (undisclosed fragrance blend)
"""

BODY_UNIVERSAL_YELLOW_FLAGS = """
═══════════════════════════════════════════════════════════
UNIVERSAL YELLOW FLAGS (apply to ALL users)
═══════════════════════════════════════════════════════════

1. MILD SYNTHETIC PRESERVATIVES: -5 each, CAPPED at -10 total
   - 1,2-Hexanediol, Hydroxyacetophenone, Phenoxyethanol

2. SYNTHETIC POLYMERS: -5 total (grouped as one category)
   - Carbomer, Acrylates/C10-30 Alkyl Acrylate Crosspolymer, VP/VA Copolymer
   - Carbomer AND Acrylates together are still only -5

3. SILICONES: -5 ONLY if in the FIRST HALF of the ingredient list
   - Dimethicone, Cyclomethicone, Cyclopentasiloxane, Cyclohexasiloxane,
     Dimethiconol, Phenyl Trimethicone
   - Positions 1 to (total_ingredients / 2) -> -5; second half -> no deduction
   - If ingredient order cannot be determined, skip this penalty entirely
"""

BODY_IMPORTANT_RULES = """
═══════════════════════════════════════════════════════════
IMPORTANT RULES
═══════════════════════════════════════════════════════════

1. MINIMUM SCORE: Products with NO red flags cannot score below 70.
2. COMPLEXITY IS NOT A FLAG: never penalize a product for having many ingredients.
3. FATTY ALCOHOLS ARE GOOD: cetearyl, cetyl and stearyl alcohol are never flagged.
4. NATURAL PLANT OILS ARE GOOD: jojoba, marula, shea, coconut, argan, rosehip are never flagged.
5. GENTLE PRESERVATIVES: benzyl alcohol and sorbic acid are only flagged if the user
   selected the "Benzyl Alcohol / Sorbic Acid" sensitivity.
6. USE RAW INGREDIENT ORDER for silicone position. Do not estimate positions.

TONE FOR BODY PRODUCTS:
Be elegant and informative, not alarming.
- GOOD: "A beautifully formulated cream with nourishing botanical extracts."
- GOOD: "Since you prefer to avoid essential oils, note the lavender oil in this formula."
- AVOID: "Contains irritants" or "Potentially harmful"

GOOD STUFF to highlight:
Ceramides, Aloe, Glycerin, Niacinamide, Shea Butter, Squalane, Hyaluronic Acid, Plant Oils,
Vitamin E (Tocopherol), Panthenol, Peptides, Botanical Extracts, Centella Asiatica, Green Tea
"""

FOOD_RULES = """
--- FOOD PRODUCT 0-100 CLEAN SCORE SYSTEM ---

Start at 100 points. ONLY deduct for SPECIFIC concerns listed below.

HARD RED FLAGS (score = null, verdict = "BAD"):
- Contains user's critical allergens
- Artificial colors (Red 40, Yellow 5, Blue 1, etc.)
- Artificial flavors
- High fructose corn syrup
- Partially hydrogenated oils (trans fats)
- Excessive artificial preservatives (BHA, BHT, TBHQ)

YELLOW FLAGS, ONLY if ACTUALLY PRESENT:
- Seed oils (canola, soybean, sunflower, safflower): -10
- Added sugars (if excessive, not naturally occurring): -10
- Refined grains: -10
- "Natural flavors" (unclear source): -5
- Gums and thickeners (xanthan, guar): -5

CRITICAL SCORING RULES:
1. ONLY whole food ingredients (spices, tea, herbs, fruits, vegetables, nuts, seeds,
   olive/coconut oil) with NO additives -> score = 100
2. Certified organic with simple ingredients -> score = 100
3. Explicit "No Sugar, No Fillers, No Additives" claims confirmed by ingredients -> score = 100
4. DO NOT deduct for uncertainty or lack of information
5. DO NOT deduct because a product is powdered or instant
6. Organic spices, herbs and teas are ALWAYS 100 unless they contain actual additives

EXAMPLE: "Organic Black Tea, Organic Cinnamon, Organic Ginger, Organic Cardamom" -> 100
"""

MENU_ITEM_RULES = """
--- MENU ITEM ANALYSIS INSTRUCTIONS ---
Analyze this menu item for clean eating standards.
Consider: cooking methods, likely ingredients, hidden sugars/oils, portion context.

SCORING:
- Start at 100, deduct 10 per concern
- Red flags (deep fried, contains allergens): score = null, verdict = BAD
"""

SCORE_BRACKETS = """
SCORE BRACKETS:
- 90-100: EXCELLENT
- 70-89: GOOD
- 50-69: MEH
- 0-49: POOR
- null (red flag found): BAD
"""

FULL_RESPONSE_SCHEMA = """
Respond with ONLY valid JSON (no markdown, no code blocks):
{
  "score": 100,
  "verdict": "EXCELLENT or GOOD or MEH or POOR or BAD",
  "headline": "PERFECTION. or Beautifully clean. or Could be better. or Nope.",
  "summary": "2-3 sentence summary in gentle, elegant tone",
  "redFlags": [{"name": "Ingredient", "description": "Why it's concerning"}],
  "watchOuts": [{"name": "Ingredient", "description": "Brief, gentle note"}],
  "goodStuff": ["Positive aspects"],
  "greenwashAlert": {"suggested": false, "reason": "Only if marketing claims contradict ingredients"},
  "alternatives": [{"name": "Product", "brand": "Brand", "reason": "Why it's better"}],
  "diyRecipe": {"title": "Homemade version", "description": "Brief desc", "ingredients": ["..."], "steps": ["..."]}
}

IMPORTANT JSON RULES:
- "score" must be a number 0-100, or null if a RED FLAG is detected
- If score is null, verdict MUST be "BAD"
- The verdict must match the score bracket exactly"""


def _category_label(category: ProductCategory) -> str:
    if category == ProductCategory.BODY:
        return "Skin & Body Product"
    if category == ProductCategory.MENU:
        return "Menu Item"
    return "Food Product"


def _analyst_intro(category: ProductCategory) -> str:
    if category == ProductCategory.BODY:
        return (
            f'You are a clean beauty analyst for "{APP_NAME}". '
            "Analyze this body/skincare/haircare product.\n\n"
        )
    if category == ProductCategory.MENU:
        return f'You are a clean eating analyst for "{APP_NAME}". Analyze this menu item.\n\n'
    return f'You are a clean food analyst for "{APP_NAME}". Analyze this food product.\n\n'


def _reference_block(reference: Optional[ReferenceProduct]) -> str:
    if reference is None:
        return ""
    lines = ["\nDATABASE INFO (Verified):"]
    if reference.nova_group:
        lines.append(
            f"- Processing Level: NOVA {reference.nova_group} "
            f"({nova_description(reference.nova_group)})"
        )
    if reference.nutriscore_grade and reference.nutriscore_grade.value != "unknown":
        lines.append(f"- Nutri-Score: {reference.nutriscore_grade.value.upper()}")
    if reference.additives_tags:
        lines.append(f"- Additives: {', '.join(format_additives(reference.additives_tags))}")
    if reference.labels:
        lines.append(f"- Labels/Certifications: {reference.labels}")
    if len(lines) == 1:
        return ""
    return "\n".join(lines) + "\n"


def _profile_block(category: ProductCategory, profile: UserProfile) -> str:
    block = "\n--- USER PROFILE ---\n"
    if profile.critical_allergies:
        block += f"CRITICAL ALLERGIES (RED FLAG if found): {', '.join(profile.critical_allergies)}\n"
    if profile.sensitivities:
        block += f"SENSITIVITIES (WATCH-OUT if found): {', '.join(profile.sensitivities)}\n"
    if profile.dietary_preferences:
        block += f"DIETARY/LIFESTYLE PREFERENCES: {', '.join(profile.dietary_preferences)}\n"
    if category == ProductCategory.BODY and profile.body_sensitivities:
        block += f"SKIN & BODY SENSITIVITIES: {', '.join(profile.body_sensitivities)}\n"
    return block


def _body_rules(profile: UserProfile) -> str:
    if profile.has_alcohol_sensitivity():
        alcohol = (
            "\n4. ALCOHOL DENAT.: -10 (user has sensitivity; do NOT stack with the universal -5)\n"
        )
    else:
        alcohol = "\n4. ALCOHOL DENAT.: -5\n"

    if profile.has_essential_oil_sensitivity():
        essential_oils = (
            "ESSENTIAL OILS: -10 total (user IS sensitive)\n"
            "- Lavender, Peppermint, Bergamot, Cedarwood, Tea Tree, Eucalyptus, etc.\n"
            "- Count ALL essential oils as ONE -10 deduction total\n"
        )
    else:
        essential_oils = (
            "ESSENTIAL OILS: NO deduction (user is NOT sensitive)\n"
            "- Do NOT penalize lavender, peppermint or other essential oils\n"
        )

    if profile.has_fragrance_sensitivity():
        fragrance = "NATURAL FRAGRANCE: -5 (user IS sensitive)\n"
    else:
        fragrance = "NATURAL FRAGRANCE: NO deduction (user is NOT sensitive)\n"

    conditional = (
        "\n═══════════════════════════════════════════════════════════\n"
        "CONDITIONAL YELLOW FLAGS (only if user has the sensitivity)\n"
        "═══════════════════════════════════════════════════════════\n\n"
        f"{essential_oils}\n{fragrance}"
    )

    return (
        "\n--- BODY PRODUCT 0-100 CLEAN SCORE SYSTEM ---\n"
        "Start at 100 points. Apply deductions based on the rules below.\n"
        f"{BODY_HARD_RED_FLAGS}{BODY_UNIVERSAL_YELLOW_FLAGS}{alcohol}{conditional}"
        f"{BODY_IMPORTANT_RULES}"
    )


def build_analysis_prompt(
    category: ProductCategory,
    product_name: str,
    brand: Optional[str],
    ingredients: Optional[str],
    additional_info: str,
    profile: UserProfile,
    reference: Optional[ReferenceProduct] = None,
    claims: Optional[List[str]] = None,
) -> str:
    """
    Build the full-mode scoring prompt.

    Args:
        category: Product category
        product_name: Product name
        brand: Brand, if known
        ingredients: Verified ingredient text
        additional_info: Page description / web snippets
        profile: User profile
        reference: Reference database record, if found
        claims: Marketing claims visible on packaging or page

    Returns:
        Prompt text
    """
    prompt = _analyst_intro(category)
    prompt += f"PRODUCT: {product_name}\n"
    if brand:
        prompt += f"BRAND: {brand}\n"
    prompt += f"CATEGORY: {_category_label(category)}\n"
    prompt += f"\nINGREDIENTS: {ingredients or 'Not available'}\n"
    prompt += _reference_block(reference)

    if additional_info:
        prompt += f"\nADDITIONAL WEB INFO: {additional_info.strip()}\n"

    if claims:
        prompt += "\n--- CLEAN CLAIMS VISIBLE ON PACKAGING ---\n"
        prompt += f"This product displays the following claims: {', '.join(claims)}\n"
        prompt += (
            "IMPORTANT: These visible claims should be given significant weight. If a product "
            'claims "Organic", "No Sugar", "No Additives", "No Fillers" etc., and no '
            "contradicting evidence is found, treat these as reliable.\n"
        )

    prompt += _profile_block(category, profile)

    if category == ProductCategory.BODY:
        prompt += _body_rules(profile)
    elif category == ProductCategory.MENU:
        prompt += MENU_ITEM_RULES
    else:
        prompt += FOOD_RULES
    prompt += SCORE_BRACKETS

    if category == ProductCategory.BODY:
        prompt += (
            "\nFor DIY recipe, suggest a simple homemade body care alternative "
            "(e.g., sugar scrub, face mask, hair treatment).\n"
        )
    else:
        prompt += "\nFor DIY recipe, suggest a homemade version of this product.\n"

    return prompt + FULL_RESPONSE_SCHEMA


def build_claims_only_prompt(
    category: ProductCategory,
    product_name: str,
    brand: Optional[str],
    additional_info: str,
    profile: UserProfile,
    claims: List[str],
) -> str:
    """Build the limited prompt used when ingredients are unverified.

    Scoring is disabled: the response must carry a null score, a MEH
    verdict and claim-derived good stuff only.
    """
    if category == ProductCategory.BODY:
        analyst = "clean beauty analyst"
    else:
        analyst = "clean food analyst"
    prompt = (
        f'You are a {analyst} for "{APP_NAME}". You are reviewing a product but DO NOT '
        "have access to the verified ingredient list.\n\n"
    )
    prompt += f"PRODUCT: {product_name}\n"
    if brand:
        prompt += f"BRAND: {brand}\n"
    body = category == ProductCategory.BODY
    prompt += f"CATEGORY: {'Skin & Body Product' if body else 'Food Product'}\n"

    prompt += "\nIMPORTANT: We could NOT verify the ingredients for this product.\n"
    prompt += (
        "This analysis is based ONLY on visible claims and product information, "
        "NOT on a verified ingredient list.\n\n"
    )
    if claims:
        prompt += f"VISIBLE CLAIMS ON PACKAGING: {', '.join(claims)}\n"
    if additional_info:
        prompt += f"ADDITIONAL INFO: {additional_info.strip()}\n"
    if profile.critical_allergies:
        prompt += f"USER ALLERGIES: {', '.join(profile.critical_allergies)}\n"

    good_stuff = ", ".join(f'"{c} (claim)"' for c in claims) or (
        '"No verified good stuff - ingredients not available"'
    )
    prompt += f"""
--- INSTRUCTIONS FOR CLAIMS-ONLY ANALYSIS ---

Since we DON'T have the verified ingredient list, you CANNOT:
- Assign a CleanScore (score must be null)
- Give a confident verdict like "EXCELLENT" or "PERFECTION"
- Claim the product is "100% clean"

You CAN:
- Note the claims visible on packaging (Vegan, Gluten-Free, Organic, etc.)
- Provide general information about the brand
- Explain that without ingredients, we can't verify the claims
- Suggest the user scan the ingredient panel for a full analysis

TONE: Be helpful but honest. Don't make claims you can't verify.

Respond with ONLY valid JSON:
{{
  "score": null,
  "verdict": "MEH",
  "headline": "Ingredients Not Verified",
  "summary": "Based on visible claims: [list claims]. For a complete CleanScore, try scanning the ingredient panel directly.",
  "redFlags": [],
  "watchOuts": [],
  "goodStuff": [{good_stuff}],
  "greenwashAlert": {{"suggested": false, "reason": ""}},
  "alternatives": [],
  "diyRecipe": null
}}

CRITICAL:
- score MUST be null
- verdict should be "MEH" (neutral, unverified state)
- Be clear in the summary that this is based on claims only"""
    return prompt
