"""
Selection ranking prompt.

Menus, shelves and multi-product comparisons are ranked relative to
each other. The prompt forbids numeric scores and single-product
vocabulary.
"""

from typing import List, Optional

from isitgood.domain.profile.models import UserProfile

APP_NAME = "Is It Good?"
SECTION_RULE = "═══════════════════════════════════════════════════════════"

RANKING_GUIDELINES = f"""
{SECTION_RULE}
RANKING GUIDELINES:
{SECTION_RULE}

CLEANEST OPTIONS should be items that are:
- Whole food based (grilled proteins, fresh vegetables, salads)
- Minimally processed, not deep fried
- Cooked cleanly (grilled, steamed, roasted, raw)
- Aligned with the user's dietary preferences

ALSO GOOD OPTIONS are items that are:
- Generally clean with minor caveats
- Still solid choices overall

CAUTION ITEMS are items that:
- Are deep fried or heavily processed
- Have hidden sugars, seed oils, or additives
- Conflict with the user's allergies or sensitivities

TONE:
- Use "Your Cleanest Picks", "Best Bets Here", "Go Easy On These"
- NEVER "PERFECTION", "100/100" or "Official Clean Pick"
"""

RANKING_RESPONSE_SCHEMA = f"""
{SECTION_RULE}
REQUIRED JSON OUTPUT:
{SECTION_RULE}

Return ONLY valid JSON (no markdown, no code blocks):

{{
  "type": "menu_or_selection_analysis",
  "title": "Menu/Selection title (e.g., 'Cafe Menu' or 'Protein Powder Comparison')",
  "cleanestOptions": [
    {{"name": "Item name", "whyItStandsOut": "Brief reason", "notes": "Optional notes"}}
  ],
  "alsoGoodOptions": [
    {{"name": "Item name", "notes": "Brief note"}}
  ],
  "cautionItems": [
    {{"name": "Item name", "reason": "Why to be cautious (e.g., 'Likely deep fried')"}}
  ],
  "generalAdvice": "1-2 sentences of helpful context",
  "itemCount": 0
}}

RULES:
- cleanestOptions: 2-5 items (your TOP recommendations)
- alsoGoodOptions: 2-5 items (solid alternatives)
- cautionItems: 0-5 items (only if genuinely concerning), each with a reason
- Every analyzed item belongs to exactly one bucket
- If the user has allergies, ALWAYS put potentially problematic items in cautionItems
  and name the allergen in the reason
- itemCount is the total number of items you analyzed"""


def build_menu_selection_prompt(
    input_text: str,
    profile: UserProfile,
    detected_items: Optional[List[str]] = None,
) -> str:
    """
    Build the ranking prompt.

    Args:
        input_text: Menu or selection text
        profile: User profile
        detected_items: Items found by the classifier, if any

    Returns:
        Prompt text
    """
    prompt = f"""You are a clean eating advisor for "{APP_NAME}".

You are analyzing a MENU or MULTI-ITEM SELECTION, NOT a single product.

Your job is to RANK the items relative to each other based on clean eating principles.

DO NOT:
- Assign any numeric scores (no 0-100)
- Use product-mode language like "PERFECTION" or "Official Clean Pick"
- Verify ingredients (you don't have ingredient lists)
- Treat this as a single product

DO:
- Identify the cleanest options available
- Rank items relative to each other
- Consider cooking methods, likely ingredients, and preparation
- Be practical and helpful, not fear-based

{SECTION_RULE}
INPUT TO ANALYZE:
{SECTION_RULE}
{input_text}
"""

    if detected_items:
        numbered = "\n".join(f"{i}. {item}" for i, item in enumerate(detected_items, start=1))
        prompt += f"\nDETECTED ITEMS ({len(detected_items)}):\n{numbered}\n"

    prompt += f"\n{SECTION_RULE}\nUSER PROFILE:\n{SECTION_RULE}\n"
    if profile.critical_allergies:
        prompt += f"CRITICAL ALLERGIES: {', '.join(profile.critical_allergies)}\n"
        prompt += "IMPORTANT: Flag ANY items that might contain these allergens!\n"
    if profile.sensitivities:
        prompt += f"Sensitivities: {', '.join(profile.sensitivities)}\n"
    if profile.dietary_preferences:
        prompt += f"Preferences: {', '.join(profile.dietary_preferences)}\n"

    return prompt + RANKING_GUIDELINES + RANKING_RESPONSE_SCHEMA
