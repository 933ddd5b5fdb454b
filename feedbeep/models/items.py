from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any
from datetime import datetime, timezone
from enum import Enum
import uuid


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RawItem(BaseModel):
    """An article as delivered by a feed provider. Every field may be missing."""
    title: Optional[str] = None
    link: Optional[str] = None
    content: Optional[str] = None
    description: Optional[str] = None
    published_at: Optional[datetime] = None
    category: List[str] = Field(default_factory=list)
    keywords: List[str] = Field(default_factory=list)
    image_url: Optional[str] = None
    provider: str = ""


class NormalizedArticle(BaseModel):
    title: str
    content: str
    canonical_url: Optional[str] = None
    source_domain: Optional[str] = None
    topics: List[str] = Field(default_factory=list)
    has_full_content: bool = False
    image_url: Optional[str] = None
    published_at: Optional[datetime] = None
    content_source: str = "feed"  # "feed" or "scraper"

    def short_title(self, length: int = 50) -> str:
        return self.title[:length]


class RewrittenArticle(NormalizedArticle):
    summary: str = ""
    body: str = ""
    ai_generated: bool = False


class PersistedArticle(RewrittenArticle):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    canonical_url: str
    fingerprint: str
    created_at: datetime = Field(default_factory=utcnow)


class QualityLevel(str, Enum):
    POOR = "poor"
    FAIR = "fair"
    GOOD = "good"
    EXCELLENT = "excellent"


class FieldQuality(BaseModel):
    score: int
    issues: List[str] = Field(default_factory=list)


class QualityAnalysis(BaseModel):
    word_count: int
    readability_score: float
    has_quotes: bool
    has_numbers: bool
    has_links: bool
    title_quality: FieldQuality
    summary_quality: FieldQuality
    overall_score: int
    quality_level: QualityLevel
    issues: List[str] = Field(default_factory=list)


class ItemError(BaseModel):
    article: Optional[str]  # truncated title
    error: str
    step: str  # "rewrite" or "persist"


class BatchResult(BaseModel):
    total_fetched: int = 0
    with_content: int = 0
    processed: int = 0
    saved: int = 0
    duplicates: int = 0
    below_quality: int = 0
    errors: List[ItemError] = Field(default_factory=list)
    duration_ms: int = 0


class PipelineStatus(BaseModel):
    store_connected: bool
    ai_service_available: bool
    total_articles: int
    timestamp: datetime = Field(default_factory=utcnow)
    error: Optional[str] = None


class RunSnapshot(BaseModel):
    started_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None
    articles_processed: int = 0
    articles_saved: int = 0
    errors: List[Dict[str, Any]] = Field(default_factory=list)
    quality_scores: List[int] = Field(default_factory=list)
