"""HTML scraper fallback for articles whose feed content is too thin."""

from typing import Callable, List, Optional, Sequence

import httpx
from feedbeep.services.logger import logger
from lxml import etree
from lxml import html as lxml_html

from feedbeep.models.items import NormalizedArticle
from feedbeep.tools.normalizer import clean_content, has_sufficient_content
from feedbeep.tools.rate_limiter import RateLimiter

_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}

# Removed before any strategy looks at the page
_NOISE_SELECTORS = (
    "script", "style", "noscript", "nav", "header", "footer", "aside",
    "[class~='ad']", "[class*='sidebar']", "[class*='widget']",
    "[class*='social']", "[class*='share']",
)

ExtractionStrategy = Callable[[lxml_html.HtmlElement], str]


# ---------------------------------------------------------------------------
# Extraction strategies: each returns text or "" when it does not apply
# ---------------------------------------------------------------------------

def _first_match(selector: str) -> ExtractionStrategy:
    def strategy(doc: lxml_html.HtmlElement) -> str:
        for el in doc.cssselect(selector):
            text = clean_content(el.text_content())
            if text:
                return text
        return ""
    strategy.__name__ = f"first_match({selector})"
    return strategy


extract_article_tag = _first_match("article")
extract_content_div = _first_match("div[class*='content']")
extract_post_div = _first_match("div[class*='post']")
extract_entry_div = _first_match("div[class*='entry']")
extract_main_tag = _first_match("main")
extract_body = _first_match("body")

DEFAULT_STRATEGIES: List[ExtractionStrategy] = [
    extract_article_tag,
    extract_content_div,
    extract_post_div,
    extract_entry_div,
    extract_main_tag,
    extract_body,
]


def strip_noise(doc: lxml_html.HtmlElement) -> lxml_html.HtmlElement:
    for sel in _NOISE_SELECTORS:
        for el in doc.cssselect(sel):
            if el.getparent() is not None:
                el.drop_tree()
    return doc


def extract_content_from_html(html_text: str,
                              strategies: Sequence[ExtractionStrategy] = DEFAULT_STRATEGIES) -> str:
    """Run strategies in order; the first non-empty result wins."""
    if not html_text or not html_text.strip():
        return ""
    try:
        doc = lxml_html.fromstring(html_text)
    except (etree.ParserError, ValueError) as e:
        logger.warning(f"Could not parse HTML: {e}")
        return ""

    strip_noise(doc)
    for strategy in strategies:
        text = strategy(doc)
        if text:
            return text
    return ""


class ContentScraper:
    def __init__(self, enabled: bool = True, timeout: float = 10.0, min_content_length: int = 100,
                 strategies: Sequence[ExtractionStrategy] = DEFAULT_STRATEGIES,
                 rate_limiter: Optional[RateLimiter] = None,
                 transport: httpx.AsyncBaseTransport = None):
        self.enabled = enabled
        self.timeout = timeout
        self.min_content_length = min_content_length
        self.strategies = list(strategies)
        self.rate_limiter = rate_limiter
        self.transport = transport

    def is_available(self) -> bool:
        return self.enabled

    async def scrape(self, article: NormalizedArticle) -> Optional[NormalizedArticle]:
        """Returns the article with scraped content, or None on any failure."""
        url = article.canonical_url
        if not url:
            logger.warning(f"No URL to scrape for: {article.short_title()}")
            return None

        logger.info(f"Attempting to scrape article content: {url}")
        try:
            if self.rate_limiter:
                await self.rate_limiter.acquire()
            async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True,
                                         headers=_HEADERS, transport=self.transport) as client:
                resp = await client.get(url)
                resp.raise_for_status()
                html_text = resp.text
        except httpx.HTTPError as e:
            logger.warning(f"Failed to scrape {url}: {e}")
            return None

        content = extract_content_from_html(html_text, self.strategies)
        if len(content) < self.min_content_length:
            logger.warning(f"Insufficient content extracted from {url} ({len(content)} chars)")
            return None

        logger.info(f"Scraped {url}: {len(article.content)} -> {len(content)} chars")
        return article.model_copy(update={
            "content": content,
            "has_full_content": has_sufficient_content(content),
            "content_source": "scraper",
        })
