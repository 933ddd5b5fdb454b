"""
Run monitoring for the pipeline.

A RunMonitor is constructed by whoever builds the pipeline and handed to it.
Each run gets its own RunContext from start_run(); the context carries the
per-run counters and a logger bound to the run id, and is folded into the
monitor's totals by end_run(context). Overlapping runs never share state.
"""
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from feedbeep.services.logger import logger
from feedbeep.models.items import NormalizedArticle, PersistedArticle, RunSnapshot


class RunContext:
    def __init__(self):
        self.run_id = uuid.uuid4().hex[:8]
        self.log = logger.bind(run_id=self.run_id)
        self.started = time.monotonic()
        self.snapshot = RunSnapshot(started_at=datetime.now(timezone.utc))
        self.finished = False

    def record_article_processed(self, article: NormalizedArticle, quality_score: Optional[int] = None):
        self.snapshot.articles_processed += 1
        if quality_score is not None:
            self.snapshot.quality_scores.append(quality_score)
        self.log.debug(f"Article processed: {article.short_title()}... (quality={quality_score})")

    def record_article_saved(self, article: PersistedArticle):
        self.snapshot.articles_saved += 1
        self.log.debug(f"Article saved: {article.short_title()}... (id={article.id})")

    def record_error(self, error: Exception, context: Optional[Dict[str, Any]] = None):
        self.snapshot.errors.append({
            "message": str(error),
            "context": context or {},
            "timestamp": datetime.now(timezone.utc).isoformat(),
        })
        self.log.error(f"Pipeline error recorded: {error} {context or ''}")


class RunMonitor:
    def __init__(self):
        self.current_run = RunSnapshot()
        self.reset_metrics(quiet=True)

    def reset_metrics(self, quiet: bool = False):
        self.pipeline_runs = 0
        self.total_articles_processed = 0
        self.total_articles_saved = 0
        self.total_errors = 0
        self.average_processing_time_ms = 0
        self.quality_scores: List[int] = []
        self.last_run_time: Optional[datetime] = None
        self.success_rate = 0
        if not quiet:
            logger.info("Monitoring metrics reset")

    def start_run(self) -> RunContext:
        run = RunContext()
        self.current_run = run.snapshot
        run.log.info(f"Pipeline run {run.run_id} started")
        return run

    def end_run(self, run: RunContext) -> int:
        """Close a run, fold it into the totals and return its duration in ms."""
        if run.finished:
            raise RuntimeError(f"Pipeline run {run.run_id} already ended")
        run.finished = True

        snapshot = run.snapshot
        duration_ms = int((time.monotonic() - run.started) * 1000)
        snapshot.ended_at = datetime.now(timezone.utc)

        self.pipeline_runs += 1
        self.total_articles_processed += snapshot.articles_processed
        self.total_articles_saved += snapshot.articles_saved
        self.total_errors += len(snapshot.errors)
        self.last_run_time = snapshot.ended_at

        if self.total_articles_processed > 0:
            self.success_rate = round(self.total_articles_saved / self.total_articles_processed * 100)

        self.average_processing_time_ms = round(
            (self.average_processing_time_ms * (self.pipeline_runs - 1) + duration_ms) / self.pipeline_runs
        )
        self.quality_scores.extend(snapshot.quality_scores)

        run.log.info(
            f"Pipeline run {run.run_id} completed in {duration_ms}ms: "
            f"processed={snapshot.articles_processed} saved={snapshot.articles_saved} "
            f"errors={len(snapshot.errors)} success_rate={self.success_rate}%"
        )
        if snapshot.errors:
            run.log.warning(f"Pipeline run had errors: {snapshot.errors}")
        return duration_ms

    def average_quality_score(self) -> int:
        if not self.quality_scores:
            return 0
        return round(sum(self.quality_scores) / len(self.quality_scores))

    def quality_distribution(self) -> Dict[str, int]:
        distribution = {"excellent": 0, "good": 0, "fair": 0, "poor": 0}
        for score in self.quality_scores:
            if score >= 80:
                distribution["excellent"] += 1
            elif score >= 60:
                distribution["good"] += 1
            elif score >= 40:
                distribution["fair"] += 1
            else:
                distribution["poor"] += 1
        return distribution

    def get_metrics(self) -> Dict[str, Any]:
        return {
            "pipeline_runs": self.pipeline_runs,
            "total_articles_processed": self.total_articles_processed,
            "total_articles_saved": self.total_articles_saved,
            "total_errors": self.total_errors,
            "average_processing_time_ms": self.average_processing_time_ms,
            "success_rate": self.success_rate,
            "last_run_time": self.last_run_time.isoformat() if self.last_run_time else None,
            "average_quality_score": self.average_quality_score(),
            "quality_distribution": self.quality_distribution(),
            "current_run": self.current_run.model_dump(mode="json"),
        }

    def get_performance_insights(self) -> List[str]:
        insights = []
        if self.pipeline_runs == 0:
            return insights

        if self.success_rate < 80:
            insights.append(f"Low success rate: {self.success_rate}%. Consider investigating errors.")
        if self.average_processing_time_ms > 30000:
            insights.append(f"Slow processing time: {self.average_processing_time_ms}ms. Consider optimization.")
        avg_quality = self.average_quality_score()
        if self.quality_scores and avg_quality < 60:
            insights.append(f"Low average quality score: {avg_quality}. Consider improving content processing.")
        if self.total_errors > self.pipeline_runs * 2:
            insights.append(f"High error rate: {self.total_errors} errors in {self.pipeline_runs} runs.")
        return insights
