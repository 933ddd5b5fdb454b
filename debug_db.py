import asyncio
from feedbeep.config import settings
from feedbeep.services.database import ArticleStore

async def show_recent():
    store = ArticleStore(settings.db_path)
    await store.init()
    print(f"Stored articles: {await store.count()}")
    for article in await store.get_recent_articles(limit=10):
        print(f"{article.created_at:%Y-%m-%d %H:%M} | {article.fingerprint} | {article.short_title(60)} | {article.canonical_url}")

if __name__ == "__main__":
    asyncio.run(show_recent())
