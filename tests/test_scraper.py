import asyncio

import httpx
import pytest

from feedbeep.tools.scraper import (
    ContentScraper,
    extract_article_tag,
    extract_body,
    extract_content_from_html,
)

PARAGRAPH = "Researchers published results showing the new battery lasts twice as long as current designs. "

ARTICLE_PAGE = f"""
<html>
  <head><title>Battery news</title><script>var tracking = 1;</script></head>
  <body>
    <nav>Home | World | Tech</nav>
    <article>
      <h1>Battery breakthrough</h1>
      <p>{PARAGRAPH}</p>
      <p>{PARAGRAPH}</p>
      <div class="share-buttons">Share on social</div>
    </article>
    <footer>Copyright</footer>
  </body>
</html>
"""

CONTENT_DIV_PAGE = f"""
<html><body>
  <div class="sidebar">Trending now</div>
  <div class="post-content"><p>{PARAGRAPH}</p><p>{PARAGRAPH}</p></div>
</body></html>
"""


class TestExtraction:
    def test_prefers_article_tag_and_drops_noise(self):
        text = extract_content_from_html(ARTICLE_PAGE)

        assert text.startswith("Battery breakthrough")
        assert "Researchers published results" in text
        assert "Share on social" not in text
        assert "Home | World" not in text
        assert "tracking" not in text

    def test_falls_through_to_content_div(self):
        text = extract_content_from_html(CONTENT_DIV_PAGE)
        assert text.startswith("Researchers published results")
        assert "Trending now" not in text

    def test_body_is_last_resort(self):
        text = extract_content_from_html("<html><body><p>Just a paragraph.</p></body></html>")
        assert text == "Just a paragraph."

    def test_custom_strategy_order(self):
        text = extract_content_from_html(ARTICLE_PAGE, [extract_body, extract_article_tag])
        assert text.startswith("Battery breakthrough")

    @pytest.mark.parametrize("html", ["", "   ", None])
    def test_empty_input(self, html):
        assert extract_content_from_html(html) == ""


class TestContentScraper:
    def _scraper(self, handler, **kwargs):
        return ContentScraper(transport=httpx.MockTransport(handler), **kwargs)

    def test_scrape_replaces_content(self, make_article):
        article = make_article(title="AI breakthrough announced", content="lorem ipsum " * 12,
                               canonical_url="https://example.com/a")
        scraper = self._scraper(lambda r: httpx.Response(200, text=ARTICLE_PAGE))

        scraped = asyncio.run(scraper.scrape(article))

        assert scraped is not None
        assert scraped.content_source == "scraper"
        assert "Researchers published results" in scraped.content
        assert scraped.title == article.title

    def test_http_failure_returns_none(self, make_article):
        scraper = self._scraper(lambda r: httpx.Response(404))
        assert asyncio.run(scraper.scrape(make_article())) is None

    def test_connection_error_returns_none(self, make_article):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        assert asyncio.run(self._scraper(handler).scrape(make_article())) is None

    def test_thin_page_returns_none(self, make_article):
        scraper = self._scraper(lambda r: httpx.Response(200, text="<html><body><p>Too short.</p></body></html>"))
        assert asyncio.run(scraper.scrape(make_article())) is None

    def test_missing_url_returns_none(self, make_article):
        scraper = self._scraper(lambda r: httpx.Response(200, text=ARTICLE_PAGE))
        assert asyncio.run(scraper.scrape(make_article(canonical_url=None))) is None

    def test_availability_follows_flag(self):
        assert ContentScraper(enabled=True).is_available() is True
        assert ContentScraper(enabled=False).is_available() is False
