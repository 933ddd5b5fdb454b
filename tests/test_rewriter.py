import asyncio

import pytest

from feedbeep.services.llm import LLMService
from feedbeep.services.rewriter import RewriteService
from feedbeep.tools.rate_limiter import RateLimiter


class FakeLLM:
    """Answers by prompt type; anything listed in `fail` raises."""

    def __init__(self, title='"Sharper Headline"', summary="Key point one. Key point two.",
                 body="<p>Rewritten   body text.</p>", fail=()):
        self.replies = {"title": title, "summary": summary, "body": body}
        self.fail = set(fail)
        self.prompts = []
        self.available = True

    async def generate_text(self, prompt):
        self.prompts.append(prompt)
        if "Rewritten title:" in prompt:
            kind = "title"
        elif "Summary:" in prompt:
            kind = "summary"
        else:
            kind = "body"
        if kind in self.fail:
            raise RuntimeError(f"{kind} generation failed")
        return self.replies[kind]

    async def is_available(self):
        return self.available


class TestRewriteSteps:
    def test_title_strips_quotes(self):
        service = RewriteService(FakeLLM())
        assert asyncio.run(service.rewrite_title("Old headline")) == "Sharper Headline"

    def test_title_falls_back_to_original(self):
        service = RewriteService(FakeLLM(fail={"title"}))
        assert asyncio.run(service.rewrite_title("Old headline")) == "Old headline"

    def test_empty_reply_counts_as_failure(self):
        service = RewriteService(FakeLLM(title="   "))
        assert asyncio.run(service.rewrite_title("Old headline")) == "Old headline"

    def test_summary_truncates_input(self):
        llm = FakeLLM()
        service = RewriteService(llm)
        asyncio.run(service.summarize("a" * 5000))
        assert "a" * 2000 in llm.prompts[0]
        assert "a" * 2001 not in llm.prompts[0]

    def test_summary_fallback_is_truncated_content(self):
        service = RewriteService(FakeLLM(fail={"summary"}))
        assert asyncio.run(service.summarize("b" * 500)) == "b" * 200 + "..."

    def test_body_is_cleaned(self):
        service = RewriteService(FakeLLM())
        assert asyncio.run(service.rewrite_body("original")) == "Rewritten body text."

    def test_body_fallback_is_cleaned_original(self):
        service = RewriteService(FakeLLM(fail={"body"}))
        assert asyncio.run(service.rewrite_body("<b>original</b>   text")) == "original text"

    def test_empty_inputs_skip_the_llm(self):
        llm = FakeLLM()
        service = RewriteService(llm)

        async def go():
            return (await service.rewrite_title(""), await service.summarize(""), await service.rewrite_body(""))

        assert asyncio.run(go()) == ("", "", "")
        assert llm.prompts == []


class TestRewriteArticle:
    def test_combines_all_three_steps(self, make_article):
        article = make_article(topics=["transit"])
        rewritten = asyncio.run(RewriteService(FakeLLM()).rewrite_article(article))

        assert rewritten.title == "Sharper Headline"
        assert rewritten.summary == "Key point one. Key point two."
        assert rewritten.body == "Rewritten body text."
        assert rewritten.ai_generated is True
        assert rewritten.canonical_url == article.canonical_url
        assert rewritten.topics == ["transit"]
        assert rewritten.content == article.content

    def test_steps_fall_back_independently(self, make_article):
        article = make_article()
        rewritten = asyncio.run(RewriteService(FakeLLM(fail={"title", "body"})).rewrite_article(article))

        assert rewritten.title == article.title
        assert rewritten.summary == "Key point one. Key point two."
        assert rewritten.body == article.content

    def test_uses_rate_limiter(self, make_article):
        limiter = RateLimiter(max_requests=10, time_window=60.0)
        asyncio.run(RewriteService(FakeLLM(), rate_limiter=limiter).rewrite_article(make_article()))
        assert limiter.current_count() == 3

    def test_availability_delegates(self):
        llm = FakeLLM()
        llm.available = False
        assert asyncio.run(RewriteService(llm).is_available()) is False


class FakeOllamaClient:
    def __init__(self, reply="hello", error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    async def chat(self, model, messages, options):
        self.calls.append((model, messages, options))
        if self.error:
            raise self.error
        return {"message": {"content": self.reply}}

    async def list(self):
        if self.error:
            raise self.error
        return {"models": []}


class TestLLMService:
    def test_generate_text(self):
        service = LLMService("http://localhost:11434", "test-model", max_attempts=1)
        service.client = FakeOllamaClient(reply="generated")

        assert asyncio.run(service.generate_text("prompt", temperature=0.5)) == "generated"
        model, messages, options = service.client.calls[0]
        assert model == "test-model"
        assert messages == [{"role": "user", "content": "prompt"}]
        assert options == {"temperature": 0.5}

    def test_error_is_reraised_after_attempts(self):
        service = LLMService("http://localhost:11434", "test-model", max_attempts=1)
        service.client = FakeOllamaClient(error=ConnectionError("no host"))

        with pytest.raises(ConnectionError):
            asyncio.run(service.generate_text("prompt"))

    def test_is_available(self):
        service = LLMService("http://localhost:11434", "test-model", max_attempts=1)
        service.client = FakeOllamaClient()
        assert asyncio.run(service.is_available()) is True

        service.client = FakeOllamaClient(error=ConnectionError("no host"))
        assert asyncio.run(service.is_available()) is False
