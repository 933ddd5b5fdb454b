from typing import List, Optional, Protocol
from datetime import datetime, timezone
from feedbeep.config import Settings, settings as default_settings
from feedbeep.models.items import (
    RawItem, NormalizedArticle, RewrittenArticle, PersistedArticle,
    BatchResult, ItemError, PipelineStatus,
)
from feedbeep.services.database import ArticleStore
from feedbeep.services.llm import LLMService
from feedbeep.services.logger import logger
from feedbeep.services.monitoring import RunMonitor
from feedbeep.services.rewriter import RewriteService
from feedbeep.tools.dedup_gate import DeduplicationGate
from feedbeep.tools.feed_source import FeedSource
from feedbeep.tools.gnews_adapter import GNewsAdapter
from feedbeep.tools.newsdata_adapter import NewsDataAdapter
from feedbeep.tools.normalizer import normalize
from feedbeep.tools.quality_analyzer import ContentQualityAnalyzer
from feedbeep.tools.rate_limiter import RateLimiter
from feedbeep.tools.rss_adapter import RSSAdapter
from feedbeep.tools.scraper import ContentScraper

ERROR_TITLE_LENGTH = 50


class ArticleFeed(Protocol):
    async def fetch_articles(self, topics: List[str], language: str = "en") -> List[RawItem]: ...


class Scraper(Protocol):
    def is_available(self) -> bool: ...

    async def scrape(self, article: NormalizedArticle) -> Optional[NormalizedArticle]: ...


class Pipeline:
    """
    Fetch -> normalize -> (scrape fallback) -> rewrite -> score -> dedup gate -> persist.

    Articles are rewritten and persisted one at a time. A failure on one
    article is recorded in the batch result and the batch carries on.
    """

    def __init__(self, feed: ArticleFeed, rewriter: RewriteService, gate: DeduplicationGate,
                 analyzer: ContentQualityAnalyzer = None, scraper: Optional[Scraper] = None,
                 monitor: RunMonitor = None, enforce_quality: bool = False):
        self.feed = feed
        self.rewriter = rewriter
        self.gate = gate
        self.analyzer = analyzer or ContentQualityAnalyzer()
        self.scraper = scraper
        self.monitor = monitor or RunMonitor()
        self.enforce_quality = enforce_quality

    async def run_pipeline(self, topics: List[str], language: str = "en") -> BatchResult:
        monitor = self.monitor
        run = monitor.start_run()
        log = run.log
        log.info(f"Starting article processing pipeline (topics={topics}, language={language})")

        # 1. Fetch (FetchError propagates: nothing to salvage)
        try:
            raw_items = await self.feed.fetch_articles(topics, language)
        except Exception as e:
            run.record_error(e, {"step": "fetch"})
            monitor.end_run(run)
            raise

        if not raw_items:
            log.warning("No articles fetched, ending pipeline")
            return BatchResult(duration_ms=monitor.end_run(run))

        # 2. Normalize
        normalized = [a for a in (normalize(r) for r in raw_items) if a is not None]
        log.info(f"Normalized {len(normalized)}/{len(raw_items)} fetched articles")

        # 3. Split by content sufficiency, try the scraper on the thin ones
        with_content = [a for a in normalized if a.has_full_content]
        thin = [a for a in normalized if not a.has_full_content]
        if thin:
            with_content.extend(await self._scrape_fallback(thin, log))

        log.info(
            f"Articles with sufficient content: total={len(raw_items)} "
            f"with_content={len(with_content)} skipped={len(normalized) - len(with_content)}"
        )

        # 4. Rewrite and score
        errors: List[ItemError] = []
        rewritten: List[RewrittenArticle] = []
        below_quality = 0
        processed = 0
        for article in with_content:
            try:
                result = await self.rewriter.rewrite_article(article)
            except Exception as e:
                errors.append(self._item_error(article, e, "rewrite"))
                run.record_error(e, {"step": "rewrite", "article": article.short_title()})
                continue

            processed += 1
            analysis = self.analyzer.analyze(result)
            run.record_article_processed(result, analysis.overall_score)
            log.info(
                f"Quality {analysis.overall_score}/100 ({analysis.quality_level.value}) "
                f"for {result.short_title()}..."
            )
            if self.enforce_quality and not self.analyzer.meets_quality_standards(analysis):
                log.info(f"Below quality standards, skipping: {analysis.issues}")
                below_quality += 1
                continue
            rewritten.append(result)

        # 5. Deduplicate and persist
        saved: List[PersistedArticle] = []
        duplicates = 0
        for article in rewritten:
            try:
                record = await self.gate.admit(article)
            except Exception as e:
                errors.append(self._item_error(article, e, "persist"))
                run.record_error(e, {"step": "persist", "article": article.short_title()})
                continue
            if record is None:
                duplicates += 1
                continue
            saved.append(record)
            run.record_article_saved(record)

        log.info(
            f"Batch save completed: total={len(rewritten)} saved={len(saved)} "
            f"duplicates={duplicates} errors={len(errors)}"
        )

        return BatchResult(
            total_fetched=len(raw_items),
            with_content=len(with_content),
            processed=processed,
            saved=len(saved),
            duplicates=duplicates,
            below_quality=below_quality,
            errors=errors,
            duration_ms=monitor.end_run(run),
        )

    async def _scrape_fallback(self, articles: List[NormalizedArticle], log=logger) -> List[NormalizedArticle]:
        if self.scraper is None or not self.scraper.is_available():
            return []

        upgraded = []
        for article in articles:
            try:
                scraped = await self.scraper.scrape(article)
            except Exception as e:
                log.warning(f"Scraper raised for {article.canonical_url}: {e}")
                scraped = None
            if scraped is not None:
                upgraded.append(scraped)
        log.info(f"Scraper fallback recovered {len(upgraded)}/{len(articles)} articles")
        return upgraded

    @staticmethod
    def _item_error(article: NormalizedArticle, error: Exception, step: str) -> ItemError:
        return ItemError(
            article=article.title[:ERROR_TITLE_LENGTH] if article.title else None,
            error=str(error) or type(error).__name__,
            step=step,
        )

    async def process_single_article(self, raw: RawItem) -> Optional[PersistedArticle]:
        """Debug path for one article. Raises on any failure; None means duplicate."""
        logger.info(f"Processing single article: {(raw.title or '')[:50]}...")
        article = normalize(raw)
        if article is None:
            raise ValueError("Article is missing title, link or content (more than 100 characters required)")

        rewritten = await self.rewriter.rewrite_article(article)
        return await self.gate.admit(rewritten)

    async def get_status(self) -> PipelineStatus:
        try:
            total = await self.gate.store.count()
            ai_available = await self.rewriter.is_available()
            return PipelineStatus(
                store_connected=True,
                ai_service_available=ai_available,
                total_articles=total,
            )
        except Exception as e:
            logger.error(f"Error getting pipeline status: {e}")
            return PipelineStatus(
                store_connected=False,
                ai_service_available=False,
                total_articles=0,
                error=str(e),
                timestamp=datetime.now(timezone.utc),
            )


def create_pipeline(cfg: Settings = default_settings, monitor: RunMonitor = None) -> Pipeline:
    """Wire the production collaborators from settings."""
    http_limiter = RateLimiter(cfg.HTTP_RATE_LIMIT_MAX_REQUESTS, cfg.HTTP_RATE_LIMIT_WINDOW_SECONDS, name="http")
    ai_limiter = RateLimiter(cfg.AI_RATE_LIMIT_MAX_REQUESTS, cfg.AI_RATE_LIMIT_WINDOW_SECONDS, name="ai")

    providers = []
    if cfg.NEWSDATA_API_KEY:
        providers.append(NewsDataAdapter(
            cfg.NEWSDATA_API_KEY, cfg.NEWSDATA_BASE_URL, cfg.MAX_ARTICLES_PER_FETCH,
            cfg.FETCH_TIMEOUT, rate_limiter=http_limiter,
        ))
    if cfg.GNEWS_API_KEY:
        providers.append(GNewsAdapter(
            cfg.GNEWS_API_KEY, cfg.GNEWS_BASE_URL, cfg.MAX_ARTICLES_PER_FETCH,
            cfg.FETCH_TIMEOUT, rate_limiter=http_limiter,
        ))
    if cfg.RSS_FEEDS:
        providers.append(RSSAdapter(
            cfg.RSS_FEEDS, timeout=cfg.FETCH_TIMEOUT, max_articles=cfg.MAX_ARTICLES_PER_FETCH,
            rate_limiter=http_limiter,
        ))

    llm = LLMService(cfg.OLLAMA_BASE_URL, cfg.OLLAMA_MODEL, cfg.LLM_MAX_ATTEMPTS)
    store = ArticleStore(cfg.db_path)

    return Pipeline(
        feed=FeedSource(providers),
        rewriter=RewriteService(llm, rate_limiter=ai_limiter),
        gate=DeduplicationGate(store),
        analyzer=ContentQualityAnalyzer(),
        scraper=ContentScraper(
            enabled=cfg.SCRAPER_ENABLED,
            timeout=cfg.SCRAPER_TIMEOUT,
            min_content_length=cfg.SCRAPER_MIN_CONTENT_LENGTH,
            rate_limiter=http_limiter,
        ),
        monitor=monitor or RunMonitor(),
        enforce_quality=cfg.ENFORCE_QUALITY_STANDARDS,
    )
