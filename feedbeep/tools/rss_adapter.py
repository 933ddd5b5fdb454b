import re
import httpx
import feedparser
from typing import List, Optional
from datetime import datetime, timezone
from feedbeep.services.logger import logger
from feedbeep.tools.base_adapter import SourceAdapter
from feedbeep.tools.rate_limiter import RateLimiter
from feedbeep.models.items import RawItem
from feedbeep.feeds_config import DEFAULT_RSS_FEEDS

class RSSAdapter(SourceAdapter):
    """
    Last-resort provider. RSS has no query API, so topics only filter entries
    whose title, summary or tags mention one of them.
    """
    name = "rss"

    def __init__(self, feed_urls: List[str] = None, timeout: float = 10.0, max_articles: int = 10,
                 rate_limiter: Optional[RateLimiter] = None, transport: httpx.AsyncBaseTransport = None):
        self.feed_urls = DEFAULT_RSS_FEEDS if feed_urls is None else feed_urls
        self.timeout = timeout
        self.max_articles = max_articles
        self.rate_limiter = rate_limiter
        self.transport = transport

    async def fetch_articles(self, topics: List[str], language: str = "en") -> List[RawItem]:
        logger.info(f"Fetching RSS feeds: {len(self.feed_urls)} sources")
        items = []
        failures = 0
        async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True, transport=self.transport) as client:
            for url in self.feed_urls:
                try:
                    if self.rate_limiter:
                        await self.rate_limiter.acquire()
                    resp = await client.get(url)
                    if resp.status_code != 200:
                        logger.warning(f"RSS fetch failed {url} status {resp.status_code}")
                        failures += 1
                        continue
                    feed = feedparser.parse(resp.content)
                    feed_items = [self._to_raw_item(entry) for entry in feed.entries]
                except Exception as e:
                    logger.warning(f"Failed to fetch RSS {url}: {e}")
                    failures += 1
                    continue
                items.extend(item for item in feed_items if self._matches(item, topics))

        if self.feed_urls and failures == len(self.feed_urls):
            raise RuntimeError(f"All {failures} RSS feeds failed")

        logger.info(f"Found {len(items)} RSS items")
        return items[:self.max_articles]

    def _to_raw_item(self, entry) -> RawItem:
        published = entry.get('published_parsed') or entry.get('updated_parsed')
        dt = datetime(*published[:6], tzinfo=timezone.utc) if published else None

        content = ""
        if entry.get('content'):
            content = entry['content'][0].get('value', '')
        content = content or entry.get('summary', '') or entry.get('description', '')

        return RawItem(
            title=entry.get('title'),
            link=entry.get('link'),
            content=content,
            description=entry.get('summary'),
            published_at=dt,
            keywords=[t.get('term') for t in entry.get('tags', []) if t.get('term')],
            provider=self.name,
        )

    @staticmethod
    def _matches(item: RawItem, topics: List[str]) -> bool:
        if not topics:
            return True
        haystack = " ".join([item.title or "", item.description or "", " ".join(item.keywords)]).lower()
        return any(re.search(rf"\b{re.escape(t.lower())}\b", haystack) for t in topics)
