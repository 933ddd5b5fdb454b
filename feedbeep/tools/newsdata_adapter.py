import httpx
from typing import List, Optional
from datetime import datetime
from feedbeep.services.logger import logger
from feedbeep.tools.base_adapter import SourceAdapter
from feedbeep.tools.rate_limiter import RateLimiter
from feedbeep.models.items import RawItem

class NewsDataAdapter(SourceAdapter):
    """NewsData.io latest-news endpoint."""
    name = "newsdata"

    def __init__(self, api_key: str, base_url: str = "https://newsdata.io/api/1/news",
                 max_articles: int = 10, timeout: float = 15.0,
                 rate_limiter: Optional[RateLimiter] = None, transport: httpx.AsyncBaseTransport = None):
        self.api_key = api_key
        self.base_url = base_url
        self.max_articles = max_articles
        self.timeout = timeout
        self.rate_limiter = rate_limiter
        self.transport = transport

    async def fetch_articles(self, topics: List[str], language: str = "en") -> List[RawItem]:
        logger.info(f"Fetching articles from NewsData.io (topics={topics}, language={language})")
        params = {
            "apikey": self.api_key,
            "q": " OR ".join(topics),
            "language": language,
            "full_content": 1,
            "size": self.max_articles,
        }

        if self.rate_limiter:
            await self.rate_limiter.acquire()
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            resp = await client.get(self.base_url, params=params)
            resp.raise_for_status()
            data = resp.json()

        if data.get("status") != "success":
            raise RuntimeError(f"NewsData API error: {data.get('message') or data.get('results') or 'Unknown error'}")

        items = [self._to_raw_item(a) for a in data.get("results") or []]
        logger.info(f"Fetched {len(items)} articles from NewsData.io")
        return items

    def _to_raw_item(self, article: dict) -> RawItem:
        return RawItem(
            title=article.get("title"),
            link=article.get("link"),
            content=article.get("content") or "",
            description=article.get("description"),
            published_at=_parse_date(article.get("pubDate")),
            category=article.get("category") or [],
            keywords=article.get("keywords") or [],
            image_url=article.get("image_url"),
            provider=self.name,
        )


def _parse_date(value) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        logger.debug(f"Unparsable publish date: {value}")
        return None
