"""
Prompts for image evidence extraction.
"""

IMAGE_EXTRACTION_PROMPT = """Analyze this image and determine what type of product it is.

CATEGORIES:
- "food" = Food or beverage product (packaged food, drinks, snacks, groceries)
- "menu" = Restaurant menu, cafe menu, or food service menu
- "body" = Skincare, haircare, body care, cosmetics, beauty products

Extract the following:
1. Product/item name
2. Brand name (if visible)
3. Barcode number (if visible)
4. Category (food, menu, or body)
5. Ingredients list (if visible on the product), copied in label order
6. Clean/health claims visible on packaging (like "Organic", "No Sugar", "No Additives", "No Fillers", "Non-GMO", "Gluten-Free", "Vegan", "100% Natural", etc.)

Respond with ONLY valid JSON, no markdown:
{
  "name": "product name",
  "brand": "brand name or null",
  "barcode": "barcode number or null",
  "category": "food or menu or body",
  "ingredients": "ingredients text if visible or null",
  "cleanClaims": ["list", "of", "visible", "clean", "claims"]
}"""
