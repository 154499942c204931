"""
Reference database data mapper.

Transforms Open Food Facts / Open Beauty Facts API payloads into
ReferenceProduct records.
"""

from typing import Any, List, Optional

from isitgood.domain.reference.models import NutriscoreGrade, ReferenceProduct


class ProductFactsMapper:
    """Maps product-facts API data to domain models."""

    @staticmethod
    def parse_product(
        product_data: dict[str, Any],
        fallback_name: str = "Unknown",
        include_food_fields: bool = True,
    ) -> ReferenceProduct:
        """Parse one product object.

        Args:
            product_data: The "product" object (barcode API) or one
                element of "products" (search API)
            fallback_name: Name used when neither product_name nor
                product_name_en is present
            include_food_fields: Parse additives, Nutri-Score and NOVA

        Returns:
            ReferenceProduct

        Example:
            >>> product = ProductFactsMapper.parse_product(
            ...     {"code": "123", "ingredients_text_en": "Water, glycerin"}
            ... )
            >>> product.ingredients_text
            'Water, glycerin'
        """
        text = product_data.get("ingredients_text") or ""
        text_en = product_data.get("ingredients_text_en") or ""

        product = ReferenceProduct(
            code=str(product_data.get("code") or ""),
            product_name=(
                product_data.get("product_name")
                or product_data.get("product_name_en")
                or fallback_name
            ),
            brands=product_data.get("brands") or "",
            ingredients_text=text or text_en,
            ingredients_text_en=text_en or text,
            allergens_tags=_string_list(product_data.get("allergens_tags")),
            image_url=product_data.get("image_url") or "",
            categories=product_data.get("categories") or "",
            labels=product_data.get("labels") or "",
        )
        if not include_food_fields:
            return product

        return product.model_copy(
            update={
                "additives_tags": _string_list(product_data.get("additives_tags")),
                "nutriscore_grade": _parse_nutriscore(product_data.get("nutriscore_grade")),
                "nova_group": _parse_nova(product_data.get("nova_group")),
            }
        )

    @staticmethod
    def has_ingredients(product_data: dict[str, Any]) -> bool:
        return bool(product_data.get("ingredients_text") or product_data.get("ingredients_text_en"))


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(v) for v in value if v]


def _parse_nutriscore(raw: Any) -> Optional[NutriscoreGrade]:
    if not raw:
        return None
    try:
        return NutriscoreGrade(str(raw).lower())
    except ValueError:
        return NutriscoreGrade.UNKNOWN


def _parse_nova(raw: Any) -> Optional[int]:
    try:
        group = int(raw)
    except (TypeError, ValueError):
        return None
    return group if 1 <= group <= 4 else None
