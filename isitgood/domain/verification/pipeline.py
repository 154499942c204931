"""
Ingredient verification pipeline.

The trust gate between evidence and scoring. Sources are tried in a
fixed priority order and the first success wins:

1. Direct evidence carried by the input (scanned label, pasted list)
2. Resolved product page
3. Reference database record
4. First-party brand trusted on its own claims
5. Unverified
"""

from typing import List, Optional

import structlog

from isitgood.domain.extraction.models import CandidateItem
from isitgood.domain.reference.models import LookupResult
from isitgood.domain.verification.catalog import TrustCatalog
from isitgood.domain.verification.ingredients import has_direct_evidence
from isitgood.domain.verification.models import (
    SCANNED_IMAGE_SOURCE,
    PageContent,
    ProductUrl,
    VerificationOutcome,
    VerificationState,
)
from isitgood.domain.verification.page_extraction import ProductPageReader

logger = structlog.get_logger(__name__)


def merge_claims(existing: List[str], found: List[str]) -> List[str]:
    """Union preserving first-seen order.

    Example:
        >>> merge_claims(["Organic", "Vegan"], ["Vegan", "Non-GMO"])
        ['Organic', 'Vegan', 'Non-GMO']
    """
    merged = list(existing)
    for claim in found:
        if claim not in merged:
            merged.append(claim)
    return merged


class IngredientVerificationPipeline:
    """Decides whether ingredients are verified, and from where.

    Example:
        >>> pipeline = IngredientVerificationPipeline(page_reader, TrustCatalog())
        >>> outcome = await pipeline.verify(candidate, lookup, product_url)
        >>> outcome.state.verified, outcome.state.source
        (True, 'ulta.com')
    """

    def __init__(
        self,
        page_reader: Optional[ProductPageReader],
        catalog: Optional[TrustCatalog] = None,
    ) -> None:
        self._page_reader = page_reader
        self._catalog = catalog or TrustCatalog()

    async def verify(
        self,
        candidate: CandidateItem,
        lookup: Optional[LookupResult] = None,
        product_url: Optional[ProductUrl] = None,
    ) -> VerificationOutcome:
        """
        Run the source cascade for one candidate.

        Args:
            candidate: Extracted candidate (after any database overrides)
            lookup: Reference database result, if a lookup ran
            product_url: Confidently resolved product page, if any

        Returns:
            VerificationOutcome with state, merged claims, supplementary
            text for the prompt and the page result when a page was read
        """
        claims = list(candidate.claims)
        additional_info = ""

        if has_direct_evidence(candidate.ingredients):
            logger.info("Ingredients verified from direct evidence", name=candidate.name)
            return VerificationOutcome(
                state=VerificationState(
                    verified=True,
                    source=SCANNED_IMAGE_SOURCE,
                    from_scan=True,
                    ingredients=candidate.ingredients,
                ),
                claims=claims,
            )

        page: Optional[PageContent] = None
        if product_url is not None and self._page_reader is not None:
            page = await self._page_reader.read(product_url.url)
            claims = merge_claims(claims, page.claims)
            if page.description:
                additional_info += f" Product description: {page.description}"
            if page.success and page.ingredients:
                logger.info(
                    "Ingredients verified from product page",
                    source=page.source,
                    tier=product_url.source.value,
                )
                return VerificationOutcome(
                    state=VerificationState(
                        verified=True,
                        source=page.source,
                        ingredients=page.ingredients,
                    ),
                    claims=claims,
                    additional_info=additional_info,
                    page=page,
                )
            logger.info("Product page gave no ingredients", error=page.error)

        if lookup is not None and lookup.is_found() and lookup.product is not None:
            db_ingredients = lookup.product.preferred_ingredients
            if has_direct_evidence(db_ingredients):
                logger.info(
                    "Ingredients verified from reference database",
                    database=lookup.database.value,
                )
                return VerificationOutcome(
                    state=VerificationState(
                        verified=True,
                        source=lookup.database.value,
                        ingredients=db_ingredients,
                    ),
                    claims=claims,
                    additional_info=additional_info,
                    page=page,
                )

        first_party = self._catalog.first_party_brand(candidate.name, candidate.brand)
        if first_party is not None and len(claims) >= first_party.min_claims:
            logger.info(
                "Claims accepted for first-party brand",
                brand=candidate.brand,
                claim_count=len(claims),
            )
            return VerificationOutcome(
                state=VerificationState(verified=True, source=first_party.source_label),
                claims=claims,
                additional_info=additional_info,
                page=page,
            )

        logger.info("Ingredients unverified", name=candidate.name, claim_count=len(claims))
        return VerificationOutcome(
            state=VerificationState(verified=False),
            claims=claims,
            additional_info=additional_info,
            page=page,
        )
