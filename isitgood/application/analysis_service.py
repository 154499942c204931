"""
Analysis Service.

The only entry points a caller may use. Coordinates extraction,
reference lookup, URL resolution, ingredient verification and scoring
for products, and ranking for menus and selections.

Every entry point returns a well-formed result: failures of external
collaborators are caught at the call boundary, logged, and turned into
degraded results rather than exceptions.

Design Pattern: Service Layer + Dependency Injection
"""

from typing import List, Optional, Union

import structlog

from isitgood.domain.analysis.models import (
    ERROR_HEADLINE,
    ERROR_SUMMARY,
    AnalysisMode,
    MenuSelectionResult,
    ProductCategory,
    ScanResult,
    SmartAnalysisResult,
    Verdict,
)
from isitgood.domain.classification.image_classifier import ImageModeClassifier
from isitgood.domain.classification.mode_classifier import ModeClassifier
from isitgood.domain.extraction.extractor import EvidenceExtractor
from isitgood.domain.extraction.models import UNKNOWN_PRODUCT_NAME, CandidateItem
from isitgood.domain.followup.assistant import FollowupAssistant
from isitgood.domain.profile.models import ChatMessage, UserProfile
from isitgood.domain.ranking.engine import SelectionRankingEngine
from isitgood.domain.reasoning.ports import ImagePayload
from isitgood.domain.reference.models import LookupResult
from isitgood.domain.reference.ports import IReferenceLookup
from isitgood.domain.scoring.engine import ScoringEngine
from isitgood.domain.scoring.models import ScoreCard
from isitgood.domain.verification.deep_search import DeepIngredientSearch, ProgressCallback
from isitgood.domain.verification.models import DeepSearchResult, ProductSearchResult
from isitgood.domain.verification.pipeline import IngredientVerificationPipeline
from isitgood.domain.verification.ports import IWebSearchClient
from isitgood.domain.verification.url_resolution import UrlResolver, build_search_url

logger = structlog.get_logger(__name__)

AnalysisInput = Union[str, ImagePayload]

IMAGE_INPUT_PLACEHOLDER = "[Image input]"
WEB_INFO_RESULTS = 5


async def search_product_info(
    search_client: Optional[IWebSearchClient],
    name: str,
    brand: Optional[str] = None,
) -> str:
    """
    Gather search snippets as supplementary prompt context.

    Snippets never verify ingredients; they only give the collaborator
    something to describe an unverified product with.

    Returns:
        Joined snippets, or "" when search is unavailable or fails
    """
    if search_client is None:
        return ""

    query = f"{brand} {name} ingredients nutrition facts" if brand else (
        f"{name} ingredients nutrition facts"
    )
    try:
        hits = await search_client.search(query, num=WEB_INFO_RESULTS)
    except Exception as e:
        logger.warning("Web info search failed", query=query, error=str(e))
        return ""

    return " ".join(hit.snippet for hit in hits if hit.snippet)


class AnalysisService:
    """
    Caller-facing analysis service.

    Dependencies (injected via ports):
    - extractor: EvidenceExtractor - text/image to CandidateItem
    - scoring: ScoringEngine - product scoring
    - ranking: SelectionRankingEngine - menu/selection ranking
    - followup: FollowupAssistant - follow-up questions
    - food_lookup / body_lookup: IReferenceLookup - reference databases (optional)
    - url_resolver: UrlResolver - product page resolution (optional)
    - pipeline: IngredientVerificationPipeline - trust gate
    - deep_search: DeepIngredientSearch - user-triggered escalation (optional)
    - search_client: IWebSearchClient - supplementary web info (optional)

    Example:
        >>> service = AnalysisService(
        ...     extractor=EvidenceExtractor(reasoning),
        ...     scoring=ScoringEngine(reasoning),
        ...     ranking=SelectionRankingEngine(reasoning),
        ...     followup=FollowupAssistant(reasoning),
        ...     image_classifier=ImageModeClassifier(reasoning),
        ... )
        >>> outcome = await service.smart_analyze("Cetaphil Gentle Cleanser", profile)
        >>> outcome.mode
        <AnalysisMode.PRODUCT: 'product'>
    """

    def __init__(
        self,
        extractor: EvidenceExtractor,
        scoring: ScoringEngine,
        ranking: SelectionRankingEngine,
        followup: FollowupAssistant,
        image_classifier: Optional[ImageModeClassifier] = None,
        mode_classifier: Optional[ModeClassifier] = None,
        food_lookup: Optional[IReferenceLookup] = None,
        body_lookup: Optional[IReferenceLookup] = None,
        url_resolver: Optional[UrlResolver] = None,
        pipeline: Optional[IngredientVerificationPipeline] = None,
        deep_search: Optional[DeepIngredientSearch] = None,
        search_client: Optional[IWebSearchClient] = None,
    ):
        self.extractor = extractor
        self.scoring = scoring
        self.ranking = ranking
        self.followup = followup
        self.image_classifier = image_classifier
        self.mode_classifier = mode_classifier or ModeClassifier()
        self.food_lookup = food_lookup
        self.body_lookup = body_lookup
        self.url_resolver = url_resolver
        self.pipeline = pipeline or IngredientVerificationPipeline(page_reader=None)
        self.deep_search = deep_search
        self.search_client = search_client

    # ═══════════════════════════════════════════════════════════
    # PRODUCT MODE
    # ═══════════════════════════════════════════════════════════

    async def analyze_input(self, input: AnalysisInput, profile: UserProfile) -> ScanResult:
        """
        Analyze a single product from text or an image.

        Workflow:
        1. Extract a candidate
        2. Reference lookup (barcode first, then name); skipped for menu items
        3. Resolve a product URL; skipped for menu items
        4. Verify ingredients
        5. Add web snippets when still unverified
        6. Score (full mode) or describe (claims-only mode)

        Args:
            input: Free text or an image
            profile: User profile

        Returns:
            ScanResult; an "ANALYSIS ERROR" result when scoring fails
        """
        candidate = CandidateItem(name=UNKNOWN_PRODUCT_NAME)
        try:
            candidate = await self._extract(input)

            lookup: Optional[LookupResult] = None
            resolution: Optional[ProductSearchResult] = None
            if candidate.category != ProductCategory.MENU:
                lookup = await self._lookup(candidate)
                candidate = self._apply_lookup(candidate, lookup)
                resolution = await self._resolve_url(candidate)

            product_url = resolution.product_url if resolution else None
            outcome = await self.pipeline.verify(candidate, lookup, product_url)
            state = outcome.state

            additional_info = outcome.additional_info
            if not state.verified and candidate.category != ProductCategory.MENU:
                web_info = await search_product_info(
                    self.search_client, candidate.name, candidate.brand
                )
                if web_info:
                    additional_info += f" {web_info}"

            if state.verified:
                reference = lookup.product if lookup is not None and lookup.is_found() else None
                card = await self.scoring.score_verified(
                    category=candidate.category,
                    product_name=candidate.name,
                    brand=candidate.brand,
                    ingredients=state.ingredients,
                    additional_info=additional_info,
                    profile=profile,
                    reference=reference,
                    claims=outcome.claims,
                    allergen_tags=reference.allergens_tags if reference else (),
                )
            else:
                card = await self.scoring.score_claims_only(
                    category=candidate.category,
                    product_name=candidate.name,
                    brand=candidate.brand,
                    additional_info=additional_info,
                    profile=profile,
                    claims=outcome.claims,
                )

            result = ScanResult(
                category=candidate.category,
                product_name=candidate.name,
                brand=candidate.brand,
                **self._card_fields(card),
                product_url=product_url.url if product_url else None,
                product_url_source=product_url.source if product_url else None,
                search_url=resolution.search_url if resolution else None,
                verified_online=lookup is not None and lookup.is_found(),
                ingredients_verified=state.verified,
                ingredient_source=state.source,
                ingredients_from_scan=state.from_scan,
                claims_only=not state.verified and bool(outcome.claims),
                ingredients=state.ingredients if state.verified else None,
            )
        except Exception as e:
            logger.error(
                "Product analysis failed",
                product=candidate.name,
                category=candidate.category.value,
                error=str(e),
            )
            return self._error_result(candidate)

        logger.info(
            "Product analyzed",
            product=result.product_name,
            verdict=result.verdict.value,
            score=result.score,
            verified=result.ingredients_verified,
            source=result.ingredient_source,
        )
        return result

    async def re_analyze_with_ingredients(
        self,
        prior: ScanResult,
        ingredients: str,
        source: str,
        url: Optional[str],
        profile: UserProfile,
    ) -> ScanResult:
        """
        Re-score a result once ingredients have been found.

        On a collaborator failure the result still leaves the unverified
        state: it gets the fixed re-analysis default naming the source.

        Args:
            prior: Result to derive from
            ingredients: Newly found ingredient text
            source: Where the ingredients came from
            url: Page the ingredients came from, if any
            profile: User profile

        Returns:
            New ScanResult marked verified from ``source``
        """
        verified_fields = {
            "ingredients": ingredients,
            "ingredients_verified": True,
            "ingredient_source": source,
            "ingredients_from_scan": False,
            "claims_only": False,
            "product_url": url or prior.product_url,
        }

        try:
            card = await self.scoring.score_verified(
                category=prior.category,
                product_name=prior.product_name,
                brand=prior.brand,
                ingredients=ingredients,
                additional_info="",
                profile=profile,
            )
            fields = self._card_fields(card)
            fields["summary"] = card.summary or prior.summary
            fields["good_stuff"] = card.good_stuff or prior.good_stuff
            fields["alternatives"] = card.alternatives or prior.alternatives
            result = prior.derive(**fields, **verified_fields)
        except Exception as e:
            logger.warning(
                "Re-analysis failed, using verified default",
                product=prior.product_name,
                source=source,
                error=str(e),
            )
            fallback = ScoringEngine.reanalysis_fallback(source)
            return prior.derive(
                verdict=fallback.verdict,
                score=fallback.score,
                headline=fallback.headline,
                summary=fallback.summary,
                red_flags=[],
                watch_outs=[],
                **verified_fields,
            )

        logger.info(
            "Product re-analyzed",
            product=result.product_name,
            verdict=result.verdict.value,
            score=result.score,
            source=source,
        )
        return result

    async def deep_search_for_ingredients(
        self,
        name: str,
        brand: Optional[str] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> DeepSearchResult:
        """
        Run the slow multi-query ingredient search.

        Its result feeds :meth:`re_analyze_with_ingredients`.
        """
        if self.deep_search is None:
            logger.warning("Deep search not configured", name=name)
            return DeepSearchResult(success=False)

        try:
            return await self.deep_search.run(name, brand, on_progress)
        except Exception as e:
            logger.error("Deep search failed", name=name, brand=brand, error=str(e))
            return DeepSearchResult(success=False)

    # ═══════════════════════════════════════════════════════════
    # MENU / SELECTION MODE
    # ═══════════════════════════════════════════════════════════

    async def analyze_menu_selection(
        self,
        text: str,
        profile: UserProfile,
        detected_items: Optional[List[str]] = None,
    ) -> MenuSelectionResult:
        """Rank the items of a menu or selection. Never raises."""
        return await self.ranking.rank(text, profile, detected_items)

    async def smart_analyze(
        self,
        input: AnalysisInput,
        profile: UserProfile,
        force_mode: Optional[AnalysisMode] = None,
    ) -> SmartAnalysisResult:
        """
        Route an input to product or menu/selection analysis.

        Text is classified by rules. Images are classified by the
        reasoning collaborator; a menu image is transcribed to text
        before ranking, and a failed classification means product.

        Args:
            input: Free text or an image
            profile: User profile
            force_mode: Skip classification and use this mode

        Returns:
            SmartAnalysisResult with the mode that ran and its result
        """
        if force_mode == AnalysisMode.MENU_SELECTION:
            text = input if isinstance(input, str) else IMAGE_INPUT_PLACEHOLDER
            return SmartAnalysisResult(
                mode=AnalysisMode.MENU_SELECTION,
                result=await self.analyze_menu_selection(text, profile),
            )
        if force_mode == AnalysisMode.PRODUCT:
            return await self._as_product(input, profile)

        if isinstance(input, str):
            detection = self.mode_classifier.classify(input)
            logger.info(
                "Text mode detected",
                is_menu_or_selection=detection.is_menu_or_selection,
                confidence=detection.confidence,
                reason=detection.reason,
            )
            if detection.is_menu_or_selection:
                return SmartAnalysisResult(
                    mode=AnalysisMode.MENU_SELECTION,
                    result=await self.analyze_menu_selection(
                        input, profile, detection.detected_items
                    ),
                )
            return await self._as_product(input, profile)

        if self.image_classifier is None:
            return await self._as_product(input, profile)

        try:
            image_type = await self.image_classifier.classify(input)
            if image_type.is_menu_or_selection:
                menu_text = await self.image_classifier.transcribe_menu(input)
                logger.info(
                    "Image routed to menu analysis",
                    kind=image_type.kind.value,
                    items=len(image_type.items),
                )
                return SmartAnalysisResult(
                    mode=AnalysisMode.MENU_SELECTION,
                    result=await self.analyze_menu_selection(
                        menu_text, profile, image_type.items
                    ),
                )
        except Exception as e:
            logger.warning("Image type detection failed, defaulting to product", error=str(e))

        return await self._as_product(input, profile)

    # ═══════════════════════════════════════════════════════════
    # FOLLOW-UP
    # ═══════════════════════════════════════════════════════════

    async def ask_followup_question(
        self,
        result: Union[ScanResult, MenuSelectionResult],
        profile: UserProfile,
        history: List[ChatMessage],
        question: str,
    ) -> str:
        """Answer a question about a prior result. Never raises."""
        return await self.followup.answer(result, profile, history, question)

    # ═══════════════════════════════════════════════════════════
    # HELPERS
    # ═══════════════════════════════════════════════════════════

    async def _as_product(self, input: AnalysisInput, profile: UserProfile) -> SmartAnalysisResult:
        return SmartAnalysisResult(
            mode=AnalysisMode.PRODUCT,
            result=await self.analyze_input(input, profile),
        )

    async def _extract(self, input: AnalysisInput) -> CandidateItem:
        if isinstance(input, str):
            return self.extractor.extract_from_text(input)
        return await self.extractor.extract_from_image(input)

    def _lookup_client(self, category: ProductCategory) -> Optional[IReferenceLookup]:
        if category == ProductCategory.BODY:
            return self.body_lookup
        if category == ProductCategory.FOOD:
            return self.food_lookup
        return None

    async def _lookup(self, candidate: CandidateItem) -> Optional[LookupResult]:
        """Barcode lookup first, then name search. Misses are not errors."""
        client = self._lookup_client(candidate.category)
        if client is None:
            return None

        lookup: Optional[LookupResult] = None
        try:
            if candidate.barcode:
                lookup = await client.lookup_by_barcode(candidate.barcode)
            if (lookup is None or not lookup.is_found()) and candidate.name:
                lookup = await client.search_by_name(candidate.search_query)
        except Exception as e:
            logger.warning("Reference lookup failed", name=candidate.name, error=str(e))
            return lookup
        return lookup

    @staticmethod
    def _apply_lookup(candidate: CandidateItem, lookup: Optional[LookupResult]) -> CandidateItem:
        """Take the database name and brand. Its ingredients stay with the lookup."""
        if lookup is None or not lookup.is_found() or lookup.product is None:
            return candidate

        product = lookup.product
        name = product.product_name.strip()
        if not name or name == "Unknown":
            name = candidate.name
        return candidate.model_copy(
            update={"name": name, "brand": product.brands.strip() or candidate.brand}
        )

    async def _resolve_url(self, candidate: CandidateItem) -> ProductSearchResult:
        if self.url_resolver is None:
            return ProductSearchResult(search_url=build_search_url(candidate.name, candidate.brand))
        return await self.url_resolver.resolve(candidate.name, candidate.brand)

    @staticmethod
    def _card_fields(card: ScoreCard) -> dict:
        return {
            "verdict": card.verdict,
            "score": card.score,
            "headline": card.headline,
            "summary": card.summary,
            "red_flags": card.red_flags,
            "watch_outs": card.watch_outs,
            "good_stuff": card.good_stuff,
            "greenwash_alert": card.greenwash_alert,
            "alternatives": card.alternatives,
            "diy_recipes": card.diy_recipes,
        }

    @staticmethod
    def _error_result(candidate: CandidateItem) -> ScanResult:
        return ScanResult(
            category=candidate.category,
            product_name=candidate.name or UNKNOWN_PRODUCT_NAME,
            brand=candidate.brand,
            verdict=Verdict.MEH,
            score=None,
            headline=ERROR_HEADLINE,
            summary=ERROR_SUMMARY,
        )
