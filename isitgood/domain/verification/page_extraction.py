"""
Product page content extraction.

Given raw HTML of a resolved product page: retailer-specific patterns
first, generic patterns second, and every candidate string must pass
the ingredient validity test. Also pulls a description and marketing
claims. Reading a page never raises; failures come back as an
unsuccessful PageContent with an error string.
"""

import re
from typing import Iterable, List, Optional, Pattern

import structlog
from bs4 import BeautifulSoup

from isitgood.domain.shared.errors import PageFetchError
from isitgood.domain.verification.catalog import extract_domain
from isitgood.domain.verification.ingredients import (
    clean_ingredient_string,
    is_valid_ingredient_list,
)
from isitgood.domain.verification.models import PageContent
from isitgood.domain.verification.ports import IPageFetcher

logger = structlog.get_logger(__name__)

MAX_MATCHES_PER_PATTERN = 25

# Shared by several retailers: "Ingredients: Capitalised, Comma, List"
_TITLE_CASE_LIST = re.compile(
    r"Ingredients\s*[:\s]*((?:[A-Z][a-z]+[^,<]*,\s*)+[A-Z][a-z]+[^<]*)", re.I
)
_JSON_INGREDIENTS = re.compile(r'"ingredients"\s*:\s*"([^"]+)"', re.I)

# ═══════════════════════════════════════════════════════════
# RETAILER-SPECIFIC PATTERNS (matched against raw HTML)
# ═══════════════════════════════════════════════════════════

RETAILER_PATTERNS: dict[str, tuple[Pattern[str], ...]] = {
    # Accordion sections; INCI lists usually open with Water/Aqua
    "ulta.com": (
        re.compile(r"Ingredients[\s\S]*?<[^>]*>(Water[^<]*)</", re.I),
        re.compile(r"(Water \(Aqua\)[^<]+)", re.I),
        re.compile(r"(Aqua[^<]+)", re.I),
        re.compile(
            r"Ingredients\s*[:\s]*((?:[A-Z][a-z]+(?:\s+[A-Z][a-z]+)*(?:\s*\([^)]+\))?\s*,\s*)+"
            r"[A-Z][a-z]+(?:\s+[A-Z][a-z]+)*(?:\s*\([^)]+\))?\.?)"
        ),
    ),
    # Tabbed details plus embedded JSON
    "sephora.com": (
        re.compile(r"Ingredients\s*[-:]\s*([^<]+)", re.I),
        _JSON_INGREDIENTS,
        re.compile(r'"description"[^}]*"ingredients"\s*:\s*"([^"]+)"', re.I),
    ),
    "amazon.com": (_TITLE_CASE_LIST, _JSON_INGREDIENTS),
    "target.com": (_TITLE_CASE_LIST,),
    "peachandlily.com": (
        re.compile(r"(?:Full Ingredients?|Ingredients|INCI)\s*[:\s]*(Water[^<]+)", re.I),
        re.compile(r"(?:Full Ingredients?|Ingredients|INCI)\s*[:\s]*(Aqua[^<]+)", re.I),
    ),
    # Food site: "Made with", spice and tea lists
    "meriachai.com": (
        re.compile(r"Ingredients\s*[:\s]*([^<]+)", re.I),
        re.compile(r"(?:Made\s+with|Contains)\s*[:\s]*([^<]+)", re.I),
        _JSON_INGREDIENTS,
        re.compile(r"((?:Black Tea|Green Tea|Assam|Ceylon|Darjeeling)[^<]+)", re.I),
        re.compile(r"((?:Cinnamon|Ginger|Cardamom|Clove|Black Pepper)[^<]+)", re.I),
    ),
}

# ═══════════════════════════════════════════════════════════
# GENERIC PATTERNS (matched against visible text)
# ═══════════════════════════════════════════════════════════

GENERIC_TEXT_PATTERNS: tuple[Pattern[str], ...] = (
    re.compile(r"Ingredients\s*[:\s]*((?:Water|Aqua)[^.]+)", re.I),
    re.compile(r"((?:Water|Aqua)\s*(?:\([^)]+\))?\s*,\s*[A-Za-z][^.]{50,})", re.I),
    re.compile(r"made\s+with\s*:?\s*([^.]+)", re.I),
    re.compile(
        r"ingredients\s*:?\s*((?:[A-Za-z][a-z]+(?:\s+[A-Za-z][a-z]+)*(?:\s*\([^)]+\))?\s*,\s*){5,}"
        r"[A-Za-z][a-z]+(?:\s+[A-Za-z][a-z]+)*)",
        re.I,
    ),
    re.compile(
        r"ingredients\s*:?\s*((?:Organic\s+)?"
        r"(?:Black Tea|Green Tea|Cane Sugar|Sugar|Honey|Cinnamon|Ginger)[^<.]*)",
        re.I,
    ),
    re.compile(r"contains\s*:?\s*([^<.]+)", re.I),
    re.compile(r"(?:ingredients|made\s+from)\s*[:\s]*([A-Za-z][^<.]*)", re.I),
)

# ═══════════════════════════════════════════════════════════
# CLAIM VOCABULARY
# ═══════════════════════════════════════════════════════════

PAGE_CLAIM_PATTERNS: tuple[tuple[Pattern[str], str], ...] = (
    (re.compile(r"organic", re.I), "Organic"),
    (re.compile(r"no sugar|sugar.?free|zero sugar", re.I), "No Sugar"),
    (re.compile(r"no artificial", re.I), "No Artificial Ingredients"),
    (re.compile(r"no preservatives", re.I), "No Preservatives"),
    (re.compile(r"no additives", re.I), "No Additives"),
    (re.compile(r"no fillers", re.I), "No Fillers"),
    (re.compile(r"non.?gmo", re.I), "Non-GMO"),
    (re.compile(r"gluten.?free", re.I), "Gluten-Free"),
    (re.compile(r"vegan", re.I), "Vegan"),
    (re.compile(r"dairy.?free", re.I), "Dairy-Free"),
    (re.compile(r"keto", re.I), "Keto-Friendly"),
    (re.compile(r"paleo", re.I), "Paleo-Friendly"),
    (re.compile(r"whole.?30", re.I), "Whole30 Approved"),
    (re.compile(r"no seed oils", re.I), "No Seed Oils"),
    (re.compile(r"clean ingredients?", re.I), "Clean Ingredients"),
    (re.compile(r"lead.?tested", re.I), "Lead-Tested"),
    (re.compile(r"third.?party tested", re.I), "Third-Party Tested"),
    (re.compile(r"lab.?tested", re.I), "Lab Tested"),
)


def _first_valid(patterns: Iterable[Pattern[str]], content: str) -> Optional[str]:
    for pattern in patterns:
        for count, match in enumerate(pattern.finditer(content)):
            if count >= MAX_MATCHES_PER_PATTERN:
                break
            if not match.group(1):
                continue
            cleaned = clean_ingredient_string(match.group(1))
            if is_valid_ingredient_list(cleaned):
                return cleaned
    return None


def extract_text_from_html(html: str) -> str:
    """Visible text with script/style/noscript removed and entities decoded.

    Example:
        >>> extract_text_from_html("<p>Water &amp; Aloe</p><script>x()</script>")
        'Water & Aloe'
    """
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()
    return re.sub(r"\s+", " ", soup.get_text(" ")).strip()


def extract_ingredients_retailer_specific(html: str, domain: str) -> Optional[str]:
    """Try the pattern set for the page's retailer, if one exists."""
    for retailer, patterns in RETAILER_PATTERNS.items():
        if retailer in domain:
            logger.debug("Using retailer-specific extraction", retailer=retailer)
            found = _first_valid(patterns, html)
            if found:
                return found
    return None


def extract_ingredients_generic(html: str, text_content: str) -> Optional[str]:
    """Generic text patterns, then elements whose class, id or data-*
    attribute mentions "ingredient"."""
    found = _first_valid(GENERIC_TEXT_PATTERNS, text_content)
    if found:
        return found

    soup = BeautifulSoup(html, "html.parser")
    ingredient_attr = re.compile("ingredient", re.I)
    candidates = soup.find_all(["div", "section", "p"], class_=ingredient_attr)
    candidates += soup.find_all(["div", "section", "p"], id=ingredient_attr)
    candidates += [
        tag
        for tag in soup.find_all(["div", "section"])
        if any(
            name.startswith("data-") and ingredient_attr.search(str(value))
            for name, value in tag.attrs.items()
        )
    ]
    for tag in candidates:
        section_text = re.sub(r"\s+", " ", tag.get_text(" ")).strip()
        cleaned = clean_ingredient_string(section_text)
        if is_valid_ingredient_list(cleaned):
            return cleaned
    return None


def extract_description(html: str) -> Optional[str]:
    """Meta description, then og:description, then a description block."""
    soup = BeautifulSoup(html, "html.parser")

    for attrs in ({"name": "description"}, {"property": "og:description"}):
        meta = soup.find("meta", attrs=attrs)
        content = meta.get("content") if meta else None
        if isinstance(content, str) and len(content) > 50:
            return content

    block = soup.find(
        ["div", "section"], class_=re.compile(r"product-description|description|about", re.I)
    )
    if block:
        text = re.sub(r"\s+", " ", block.get_text(" ")).strip()
        if 50 < len(text) < 1000:
            return text
    return None


def extract_claims(text_content: str) -> List[str]:
    """Marketing-claim labels found anywhere in the page text."""
    return [claim for pattern, claim in PAGE_CLAIM_PATTERNS if pattern.search(text_content)]


def read_page(html: str, url: str) -> PageContent:
    """Extract ingredients, description and claims from fetched HTML."""
    domain = extract_domain(url)
    text_content = extract_text_from_html(html)

    ingredients = extract_ingredients_retailer_specific(html, domain)
    if not ingredients:
        ingredients = extract_ingredients_generic(html, text_content)

    description = extract_description(html)
    claims = extract_claims(text_content)

    if ingredients:
        logger.info(
            "Extracted ingredients from page",
            domain=domain,
            ingredient_count=ingredients.count(",") + 1,
        )
        return PageContent(
            success=True,
            ingredients=ingredients,
            source=domain,
            claims=claims,
            description=description,
        )

    logger.info("Ingredients not found on page", domain=domain)
    return PageContent(
        success=False,
        source=domain,
        claims=claims,
        description=description,
        error="Ingredients section not found on page",
    )


class ProductPageReader:
    """Fetches a product page and reads it. Never raises.

    Example:
        >>> reader = ProductPageReader(fetcher)
        >>> content = await reader.read("https://www.ulta.com/p/serum-123")
        >>> content.success, content.source
        (True, 'ulta.com')
    """

    def __init__(self, fetcher: IPageFetcher) -> None:
        self._fetcher = fetcher

    async def read(self, url: str) -> PageContent:
        domain = extract_domain(url)
        try:
            html = await self._fetcher.fetch(url)
        except PageFetchError as e:
            logger.warning("Product page fetch failed", domain=domain, error=str(e))
            return PageContent(success=False, error=str(e))
        except Exception as e:
            logger.warning("Product page fetch errored", domain=domain, error=str(e))
            return PageContent(success=False, error=str(e) or type(e).__name__)

        try:
            return read_page(html, url)
        except Exception as e:
            logger.warning("Product page parse errored", domain=domain, error=str(e))
            return PageContent(success=False, source=domain, error=str(e) or type(e).__name__)
