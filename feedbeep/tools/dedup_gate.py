import asyncio
from typing import Optional, Protocol

from feedbeep.services.logger import logger

from feedbeep.exceptions import ArticleValidationError
from feedbeep.models.items import PersistedArticle, RewrittenArticle
from feedbeep.tools.normalizer import generate_fingerprint

REQUIRED_FIELDS = ("title", "summary", "body", "canonical_url")


class ArticleRepository(Protocol):
    async def find_by_url(self, url: str) -> Optional[PersistedArticle]: ...

    async def insert(self, article: PersistedArticle) -> PersistedArticle: ...

    async def count(self) -> int: ...


class DeduplicationGate:
    """
    Admits at most one persisted article per canonical URL.

    Exact canonical URL equality is the uniqueness key; the fingerprint stored
    alongside is advisory only.
    """

    def __init__(self, store: ArticleRepository):
        self.store = store
        # check-then-insert must not interleave across overlapping runs
        self._lock = asyncio.Lock()

    async def is_duplicate(self, canonical_url: str) -> bool:
        """Fails open: an unreachable store counts as 'not a duplicate'."""
        try:
            existing = await self.store.find_by_url(canonical_url)
        except Exception as e:
            logger.warning(f"Error checking for duplicates, allowing save: {e}")
            return False
        return existing is not None

    @staticmethod
    def validate(article: RewrittenArticle) -> RewrittenArticle:
        missing = [f for f in REQUIRED_FIELDS if not (getattr(article, f) or "").strip()]
        if missing:
            raise ArticleValidationError(missing)
        return article.model_copy(update={
            "title": article.title.strip(),
            "summary": article.summary.strip(),
            "body": article.body.strip(),
        })

    async def admit(self, article: RewrittenArticle) -> Optional[PersistedArticle]:
        """
        Validate, check for a duplicate, then persist.

        Returns the stored record, or None when the URL is already stored.
        Raises ArticleValidationError for missing required fields and lets
        store insert errors propagate.
        """
        article = self.validate(article)

        async with self._lock:
            if await self.is_duplicate(article.canonical_url):
                logger.warning(f"Duplicate article found, skipping: {article.canonical_url}")
                return None

            record = PersistedArticle(
                **article.model_dump(),
                fingerprint=generate_fingerprint(article.title, article.canonical_url),
            )
            saved = await self.store.insert(record)
        logger.info(f"Article saved: {saved.id} | {saved.short_title()}... | {saved.source_domain}")
        return saved
