import pytest

from feedbeep.models.items import NormalizedArticle, RawItem, RewrittenArticle

# 335 characters, six sentences
LONG_TEXT = ("The city council approved a new transit plan on Monday. " * 6).strip()


class MemoryStore:
    """Dict-backed ArticleRepository."""

    def __init__(self):
        self.records = []

    async def find_by_url(self, url):
        for record in self.records:
            if record.canonical_url == url:
                return record
        return None

    async def insert(self, article):
        self.records.append(article)
        return article

    async def count(self):
        return len(self.records)


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def long_text():
    return LONG_TEXT


@pytest.fixture
def make_raw():
    def _make(title="Council Approves Transit Plan", link="https://example.com/transit",
              content=LONG_TEXT, **kwargs):
        return RawItem(title=title, link=link, content=content, **kwargs)
    return _make


@pytest.fixture
def make_article():
    def _make(title="Council Approves Transit Plan", content=LONG_TEXT,
              canonical_url="https://example.com/transit", **kwargs):
        kwargs.setdefault("has_full_content", len(content) > 200)
        return NormalizedArticle(title=title, content=content, canonical_url=canonical_url,
                                 source_domain="example.com", **kwargs)
    return _make


@pytest.fixture
def make_rewritten():
    def _make(title="Council Approves Transit Plan", canonical_url="https://example.com/transit",
              summary="The council approved a transit plan. It takes effect next year.",
              body=LONG_TEXT, **kwargs):
        return RewrittenArticle(title=title, content=body, canonical_url=canonical_url,
                                source_domain="example.com", has_full_content=True,
                                summary=summary, body=body, ai_generated=True, **kwargs)
    return _make
