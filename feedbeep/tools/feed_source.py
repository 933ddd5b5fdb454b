from typing import List, Optional, Sequence

from feedbeep.services.logger import logger
from pydantic import BaseModel, ConfigDict, Field

from feedbeep.exceptions import FetchError
from feedbeep.models.items import RawItem
from feedbeep.tools.base_adapter import SourceAdapter


class FetchOutcome(BaseModel):
    """Result of one provider attempt: items on success, error text on failure."""
    model_config = ConfigDict(frozen=True)

    provider: str
    items: List[RawItem] = Field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def has_items(self) -> bool:
        return self.ok and bool(self.items)


async def attempt(provider: SourceAdapter, topics: List[str], language: str) -> FetchOutcome:
    try:
        items = await provider.fetch_articles(topics, language)
    except Exception as e:
        logger.warning(f"Feed provider '{provider.name}' failed: {e}")
        return FetchOutcome(provider=provider.name, error=str(e) or type(e).__name__)
    return FetchOutcome(provider=provider.name, items=items)


class FeedSource:
    """
    Tries providers in order and stops at the first that yields items.

    Raises FetchError only when every provider failed; if some provider
    answered with nothing, the batch is simply empty.
    """

    def __init__(self, providers: Sequence[SourceAdapter]):
        self.providers = list(providers)

    async def fetch_articles(self, topics: List[str], language: str = "en") -> List[RawItem]:
        outcomes: List[FetchOutcome] = []
        for provider in self.providers:
            outcome = await attempt(provider, topics, language)
            outcomes.append(outcome)
            if outcome.has_items:
                logger.info(f"Using {len(outcome.items)} items from '{outcome.provider}'")
                return outcome.items

        failures = [f"{o.provider}: {o.error}" for o in outcomes if not o.ok]
        if not outcomes or len(failures) == len(outcomes):
            raise FetchError(failures or ["no feed providers configured"])

        logger.warning("Feed providers answered but returned no articles")
        return []
