from typing import List

# Topics used by the manual trigger when the caller sends none
DEFAULT_TOPICS: List[str] = ["technology", "ai"]

# Topics for the scheduled run
SCHEDULED_TOPICS: List[str] = ["technology", "ai", "startup", "innovation"]

DEFAULT_LANGUAGE = "en"

# Last-resort RSS feeds, used only when the news APIs fail or return nothing
DEFAULT_RSS_FEEDS = [
    "https://techcrunch.com/feed/",
    "https://www.theverge.com/rss/index.xml",
    "https://www.wired.com/feed/rss",
    "https://venturebeat.com/category/ai/feed/",
    "https://www.technologyreview.com/feed/",
]
