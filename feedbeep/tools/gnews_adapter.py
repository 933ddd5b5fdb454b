import httpx
from typing import List, Optional
from feedbeep.services.logger import logger
from feedbeep.tools.base_adapter import SourceAdapter
from feedbeep.tools.newsdata_adapter import _parse_date
from feedbeep.tools.rate_limiter import RateLimiter
from feedbeep.models.items import RawItem

class GNewsAdapter(SourceAdapter):
    """GNews search endpoint, used when NewsData.io is unavailable."""
    name = "gnews"

    def __init__(self, api_key: str, base_url: str = "https://gnews.io/api/v4/search",
                 max_articles: int = 10, timeout: float = 15.0,
                 rate_limiter: Optional[RateLimiter] = None, transport: httpx.AsyncBaseTransport = None):
        self.api_key = api_key
        self.base_url = base_url
        self.max_articles = max_articles
        self.timeout = timeout
        self.rate_limiter = rate_limiter
        self.transport = transport

    async def fetch_articles(self, topics: List[str], language: str = "en") -> List[RawItem]:
        logger.info(f"Fetching articles from GNews (topics={topics}, language={language})")
        params = {
            "q": " OR ".join(topics) or "news",
            "lang": language,
            "max": self.max_articles,
            "token": self.api_key,
        }

        if self.rate_limiter:
            await self.rate_limiter.acquire()
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            resp = await client.get(self.base_url, params=params)
            resp.raise_for_status()
            data = resp.json()

        if "articles" not in data:
            raise RuntimeError("Invalid GNews API response")

        items = []
        for article in data["articles"]:
            items.append(RawItem(
                title=article.get("title"),
                link=article.get("url"),
                content=article.get("content") or article.get("description") or "",
                description=article.get("description"),
                published_at=_parse_date(article.get("publishedAt")),
                image_url=article.get("image"),
                provider=self.name,
            ))
        logger.info(f"Fetched {len(items)} articles from GNews")
        return items
