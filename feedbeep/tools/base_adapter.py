from abc import ABC, abstractmethod
from typing import List
from feedbeep.models.items import RawItem

class SourceAdapter(ABC):
    name: str = "source"

    @abstractmethod
    async def fetch_articles(self, topics: List[str], language: str = "en") -> List[RawItem]:
        pass
