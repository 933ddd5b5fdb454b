import asyncio
from typing import Optional, Protocol

from feedbeep.services.logger import logger

from feedbeep.models.items import NormalizedArticle, RewrittenArticle
from feedbeep.tools.normalizer import clean_content
from feedbeep.tools.rate_limiter import RateLimiter

SUMMARY_INPUT_CHARS = 2000
SUMMARY_FALLBACK_CHARS = 200

TITLE_PROMPT = """
Rewrite this news headline to be more engaging and clear.
Keep it concise (under 100 characters) and maintain the core meaning.

Original title: "{title}"

Rewritten title:"""

SUMMARY_PROMPT = """
Create a concise summary (2-3 sentences) of this article content.
Focus on the key points and main takeaways.

Article content: "{content}..."

Summary:"""

BODY_PROMPT = """
Rewrite this article content to improve readability and flow.
Remove any redundant information, fix grammar issues, and make it more engaging.
Keep the same length or slightly shorter.
Maintain all factual information and quotes.

Article content: "{content}"

Rewritten content:"""


class TextGenerator(Protocol):
    async def generate_text(self, prompt: str) -> str: ...

    async def is_available(self) -> bool: ...


class RewriteService:
    """
    Rewrites title, summary and body independently. Each step falls back on
    its own: original title, truncated content, cleaned original body.
    """

    def __init__(self, llm: TextGenerator, rate_limiter: Optional[RateLimiter] = None):
        self.llm = llm
        self.rate_limiter = rate_limiter

    async def _generate(self, prompt: str) -> str:
        if self.rate_limiter:
            await self.rate_limiter.acquire()
        text = (await self.llm.generate_text(prompt) or "").strip()
        if not text:
            raise ValueError("empty response from LLM")
        return text

    async def rewrite_title(self, title: str) -> str:
        if not title:
            return ""
        try:
            return (await self._generate(TITLE_PROMPT.format(title=title))).replace('"', '').strip() or title
        except Exception as e:
            logger.warning(f"Failed to rewrite title, using original: {e}")
            return title

    async def summarize(self, content: str) -> str:
        if not content:
            return ""
        try:
            return await self._generate(SUMMARY_PROMPT.format(content=content[:SUMMARY_INPUT_CHARS]))
        except Exception as e:
            logger.warning(f"Failed to generate summary, using truncated content: {e}")
            return content[:SUMMARY_FALLBACK_CHARS] + "..."

    async def rewrite_body(self, content: str) -> str:
        if not content:
            return ""
        try:
            return clean_content(await self._generate(BODY_PROMPT.format(content=content))) or clean_content(content)
        except Exception as e:
            logger.warning(f"Failed to rewrite body, using cleaned original: {e}")
            return clean_content(content)

    async def rewrite_article(self, article: NormalizedArticle) -> RewrittenArticle:
        logger.info(f"Starting AI rewrite: {article.short_title()}... ({len(article.content)} chars)")

        # Independent steps over the same input; all must settle before we continue
        title, summary, body = await asyncio.gather(
            self.rewrite_title(article.title),
            self.summarize(article.content),
            self.rewrite_body(article.content),
        )

        rewritten = RewrittenArticle(
            **article.model_dump(exclude={"title"}),
            title=title,
            summary=summary,
            body=body,
            ai_generated=True,
        )
        logger.info(
            f"AI rewrite completed: title {len(article.title)}->{len(title)} chars, "
            f"summary {len(summary)} chars, body {len(body)} chars"
        )
        return rewritten

    async def is_available(self) -> bool:
        return await self.llm.is_available()
