import aiosqlite
import json
from datetime import datetime
from pathlib import Path
from typing import Optional
from feedbeep.services.logger import logger
from feedbeep.models.items import PersistedArticle
from feedbeep.tools.normalizer import has_sufficient_content

# original_url is indexed, not UNIQUE: the deduplication gate owns one-record-per-URL.
INIT_SQL = """
CREATE TABLE IF NOT EXISTS articles (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    summary TEXT NOT NULL,
    body TEXT NOT NULL,
    original_url TEXT NOT NULL,
    source TEXT,
    topics JSON,
    ai_generated INTEGER DEFAULT 1,
    image_url TEXT,
    published_at TIMESTAMP,
    content_source TEXT,
    content_hash TEXT,
    created_at TIMESTAMP NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_articles_original_url ON articles(original_url);
CREATE INDEX IF NOT EXISTS idx_articles_content_hash ON articles(content_hash);
CREATE INDEX IF NOT EXISTS idx_articles_created_at ON articles(created_at DESC);
"""

class ArticleStore:
    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)

    async def init(self):
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        async with aiosqlite.connect(self.db_path) as db:
            await db.executescript(INIT_SQL)
            await db.commit()
        logger.info(f"Database initialized at {self.db_path}")

    def get_connection(self):
        return aiosqlite.connect(self.db_path)

    async def find_by_url(self, url: str) -> Optional[PersistedArticle]:
        async with self.get_connection() as conn:
            conn.row_factory = aiosqlite.Row
            cursor = await conn.execute(
                "SELECT * FROM articles WHERE original_url = ? LIMIT 1", (url,)
            )
            row = await cursor.fetchone()
        return self._row_to_article(row) if row else None

    async def insert(self, article: PersistedArticle) -> PersistedArticle:
        """Single INSERT of a new record. Errors propagate to the caller."""
        async with self.get_connection() as conn:
            await conn.execute(
                """
                INSERT INTO articles (id, title, summary, body, original_url, source, topics,
                                      ai_generated, image_url, published_at, content_source,
                                      content_hash, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    article.id,
                    article.title,
                    article.summary,
                    article.body,
                    article.canonical_url,
                    article.source_domain,
                    json.dumps(article.topics),
                    int(article.ai_generated),
                    article.image_url,
                    article.published_at.isoformat() if article.published_at else None,
                    article.content_source,
                    article.fingerprint,
                    article.created_at.isoformat(),
                )
            )
            await conn.commit()
        return article

    async def count(self) -> int:
        async with self.get_connection() as conn:
            cursor = await conn.execute("SELECT COUNT(*) FROM articles")
            row = await cursor.fetchone()
        return row[0] if row else 0

    async def get_recent_articles(self, limit: int = 20):
        async with self.get_connection() as conn:
            conn.row_factory = aiosqlite.Row
            cursor = await conn.execute(
                "SELECT * FROM articles ORDER BY created_at DESC LIMIT ?", (limit,)
            )
            rows = await cursor.fetchall()
        return [self._row_to_article(r) for r in rows]

    def _row_to_article(self, row: aiosqlite.Row) -> PersistedArticle:
        published_at = None
        if row["published_at"]:
            try:
                published_at = datetime.fromisoformat(row["published_at"])
            except ValueError:
                logger.debug(f"Unparsable published_at on article {row['id']}: {row['published_at']}")
        return PersistedArticle(
            id=row["id"],
            title=row["title"],
            content=row["body"],
            summary=row["summary"],
            body=row["body"],
            canonical_url=row["original_url"],
            source_domain=row["source"],
            topics=json.loads(row["topics"]) if row["topics"] else [],
            has_full_content=has_sufficient_content(row["body"]),
            ai_generated=bool(row["ai_generated"]),
            image_url=row["image_url"],
            published_at=published_at,
            content_source=row["content_source"] or "feed",
            fingerprint=row["content_hash"] or "",
            created_at=datetime.fromisoformat(row["created_at"]),
        )
