import asyncio

import pytest

from feedbeep.exceptions import ArticleValidationError
from feedbeep.services.database import ArticleStore
from feedbeep.tools.dedup_gate import DeduplicationGate
from feedbeep.tools.normalizer import generate_fingerprint


class BrokenStore:
    """Lookups fail, inserts succeed."""

    def __init__(self):
        self.inserted = []

    async def find_by_url(self, url):
        raise ConnectionError("store unreachable")

    async def insert(self, article):
        self.inserted.append(article)
        return article

    async def count(self):
        return len(self.inserted)


class SlowStore:
    """Yields to the event loop on every call."""

    def __init__(self):
        self.records = []

    async def find_by_url(self, url):
        await asyncio.sleep(0)
        return next((r for r in self.records if r.canonical_url == url), None)

    async def insert(self, article):
        await asyncio.sleep(0)
        self.records.append(article)
        return article

    async def count(self):
        return len(self.records)


@pytest.fixture
def store(tmp_path):
    store = ArticleStore(tmp_path / "articles.db")
    asyncio.run(store.init())
    return store


class TestValidate:
    @pytest.mark.parametrize("field", ["title", "summary", "body", "canonical_url"])
    def test_missing_field_raises(self, make_rewritten, field):
        article = make_rewritten(**{field: "   " if field != "canonical_url" else None})
        with pytest.raises(ArticleValidationError) as exc:
            DeduplicationGate.validate(article)
        assert exc.value.missing == [field]

    def test_strips_text_fields(self, make_rewritten):
        article = DeduplicationGate.validate(make_rewritten(title="  Padded Title  ", summary=" A summary. Two. "))
        assert article.title == "Padded Title"
        assert article.summary == "A summary. Two."


class TestAdmit:
    def test_persists_new_article(self, store, make_rewritten):
        gate = DeduplicationGate(store)

        saved = asyncio.run(gate.admit(make_rewritten()))

        assert saved is not None
        assert saved.fingerprint == generate_fingerprint(saved.title, saved.canonical_url)
        assert asyncio.run(store.count()) == 1

    def test_second_submission_is_skipped(self, store, make_rewritten):
        gate = DeduplicationGate(store)

        async def go():
            first = await gate.admit(make_rewritten())
            second = await gate.admit(make_rewritten(title="A Different Headline Entirely"))
            return first, second

        first, second = asyncio.run(go())

        assert first is not None
        assert second is None
        assert asyncio.run(store.count()) == 1

    def test_different_urls_both_persist(self, store, make_rewritten):
        gate = DeduplicationGate(store)

        async def go():
            await gate.admit(make_rewritten(canonical_url="https://example.com/a"))
            await gate.admit(make_rewritten(canonical_url="https://example.com/b"))

        asyncio.run(go())
        assert asyncio.run(store.count()) == 2

    def test_invalid_article_never_reaches_store(self, memory_store, make_rewritten):
        gate = DeduplicationGate(memory_store)
        with pytest.raises(ArticleValidationError):
            asyncio.run(gate.admit(make_rewritten(body="")))
        assert memory_store.records == []

    def test_concurrent_admits_persist_once(self, make_rewritten):
        gate = DeduplicationGate(SlowStore())

        async def go():
            return await asyncio.gather(gate.admit(make_rewritten()), gate.admit(make_rewritten()))

        results = asyncio.run(go())

        assert sum(r is not None for r in results) == 1
        assert len(gate.store.records) == 1


class TestFailOpen:
    def test_lookup_failure_counts_as_not_duplicate(self):
        gate = DeduplicationGate(BrokenStore())
        assert asyncio.run(gate.is_duplicate("https://example.com/a")) is False

    def test_lookup_failure_still_saves(self, make_rewritten):
        store = BrokenStore()
        gate = DeduplicationGate(store)

        saved = asyncio.run(gate.admit(make_rewritten()))

        assert saved is not None
        assert len(store.inserted) == 1
