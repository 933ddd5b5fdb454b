"""
Content normalizer: turns a provider's RawItem into a NormalizedArticle.

Pure functions only. Markup removal is a tag-pattern strip, not an HTML parser.
"""
import re
from typing import Iterable, List, Optional
from urllib.parse import urlparse, urlunparse

from feedbeep.models.items import RawItem, NormalizedArticle

MIN_RAW_CONTENT_LENGTH = 100
FULL_CONTENT_LENGTH = 200

# a tag cut off at the end of a truncated feed excerpt has no closing bracket
_TAG_RE = re.compile(r"<[^>]*>|<[^>]*$")
_WS_RE = re.compile(r"\s+")


def clean_content(content: Optional[str]) -> str:
    """Strip HTML tags and collapse whitespace."""
    if not content:
        return ""
    text = _TAG_RE.sub(" ", content)
    return _WS_RE.sub(" ", text).strip()


def clean_url(url: Optional[str]) -> Optional[str]:
    """Return the absolute form of url, or None when it does not parse as one."""
    if not url:
        return None
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return None
    if not parsed.scheme or not parsed.netloc:
        return None
    return urlunparse((
        parsed.scheme.lower(),
        parsed.netloc.lower(),
        parsed.path or "/",
        parsed.params,
        parsed.query,
        parsed.fragment,
    ))


def extract_domain(url: Optional[str]) -> Optional[str]:
    if not url:
        return None
    try:
        host = urlparse(url.strip()).hostname
    except ValueError:
        return None
    if not host:
        return None
    return host.removeprefix("www.")


def extract_topics(*groups: Iterable[str]) -> List[str]:
    topics = []
    for group in groups:
        for topic in group or []:
            if not isinstance(topic, str):
                continue
            topic = topic.strip().lower()
            if topic and topic not in topics:
                topics.append(topic)
    return topics


def generate_fingerprint(title: str, url: str) -> str:
    """Cheap 32-bit rolling hash of title+url in base 36. Collisions are tolerated."""
    h = 0
    for ch in f"{title}{url}".lower():
        h = ((h << 5) - h + ord(ch)) & 0xFFFFFFFF
    # Interpret as signed 32-bit, then take the magnitude
    if h >= 0x80000000:
        h -= 0x100000000
    return _to_base36(abs(h))


def _to_base36(value: int) -> str:
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    if value == 0:
        return "0"
    out = []
    while value:
        value, rem = divmod(value, 36)
        out.append(digits[rem])
    return "".join(reversed(out))


def has_required_fields(title: str, link: Optional[str], content: str) -> bool:
    """Checks the markup-cleaned title and content along with the raw link."""
    return bool(
        title
        and link
        and link.strip()
        and len(content) > MIN_RAW_CONTENT_LENGTH
    )


def has_sufficient_content(content: str) -> bool:
    return len(content) > FULL_CONTENT_LENGTH


def normalize(raw: RawItem) -> Optional[NormalizedArticle]:
    """
    Returns None for items missing title, link or content, or with content of
    100 characters or fewer. Title and content are judged after markup is
    stripped. An unparsable link does not reject the item; it only leaves
    canonical_url and source_domain empty.
    """
    title = clean_content(raw.title)
    content = clean_content(raw.content)
    if not has_required_fields(title, raw.link, content):
        return None

    canonical_url = clean_url(raw.link)

    return NormalizedArticle(
        title=title,
        content=content,
        canonical_url=canonical_url,
        source_domain=extract_domain(canonical_url),
        topics=extract_topics(raw.category, raw.keywords),
        has_full_content=has_sufficient_content(content),
        image_url=raw.image_url,
        published_at=raw.published_at,
    )
