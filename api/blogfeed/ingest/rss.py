import io
import logging
import re
from typing import List, Optional

import feedparser
import requests
from bs4 import BeautifulSoup

from ..schemas import PostSummary
from ..settings import settings

logger = logging.getLogger(__name__)

ACCEPT = "application/rss+xml, application/xml, text/xml;q=0.9, */*;q=0.8"

# &amp; first
ENTITIES = (
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#39;", "'"),
    ("&nbsp;", " "),
)

_WS = re.compile(r"\s+")
_CONTINUE_READING = re.compile(r"Continue reading.*$", re.IGNORECASE)


class FeedError(Exception):
    """Upstream feed could not be fetched or understood."""


def fetch_feed(url: str, timeout: float = 30) -> bytes:
    try:
        r = requests.get(url, timeout=timeout, headers={"Accept": ACCEPT})
    except requests.RequestException as exc:
        raise FeedError(f"Feed request failed: {exc}") from exc
    if not 200 <= r.status_code < 300:
        raise FeedError(f"Feed request failed with status {r.status_code}")
    return r.content


def decode_entities(value: Optional[str]) -> str:
    value = value or ""
    for entity, char in ENTITIES:
        value = value.replace(entity, char)
    return value


def strip_tags(value: Optional[str]) -> str:
    value = value or ""
    if "<" not in value:
        return value
    return BeautifulSoup(value, "lxml").get_text(" ")


def plain_text(value: Optional[str]) -> str:
    return decode_entities(strip_tags(value)).strip()


def html_text(html: Optional[str]) -> str:
    """Text content of an HTML fragment, references resolved by the HTML parser."""
    if not html:
        return ""
    return BeautifulSoup(html, "lxml").get_text(" ")


def summarize(html: Optional[str], length: int = 160,
              placeholder: Optional[str] = None) -> str:
    """Turn an HTML body into a short single-line excerpt.

    Markup is dropped, entities decoded, whitespace collapsed and a trailing
    "Continue reading ..." marker removed. Anything longer than `length`
    is cut to `length - 3` characters and suffixed with "...".
    """
    text = _WS.sub(" ", decode_entities(html_text(html)))
    text = _CONTINUE_READING.sub("", text).strip()
    if not text:
        return placeholder or settings.placeholder_excerpt
    if len(text) <= length:
        return text
    return text[:length - 3].rstrip() + "..."


def extract_image(html: Optional[str]) -> Optional[str]:
    if not html or "<img" not in html.lower():
        return None
    for img in BeautifulSoup(html, "lxml").find_all("img"):
        src = (img.get("src") or "").strip()
        if src:
            return src
    return None


def _entry_to_summary(e, excerpt_length: int, placeholder: Optional[str]) -> PostSummary:
    description_html = e.get("summary", "") or ""
    content_html = ""
    for c in e.get("content", []):
        if isinstance(c, dict) and c.get("value"):
            content_html = c["value"]
            break
    content_html = content_html or description_html

    return PostSummary(
        title=plain_text(e.get("title")),
        link=plain_text(e.get("link")),
        pubDate=plain_text(e.get("published") or e.get("updated")),
        excerpt=summarize(content_html, excerpt_length, placeholder),
        image=extract_image(content_html) or extract_image(description_html),
    )


def parse_feed(xml: bytes, limit: int = 6, excerpt_length: int = 160,
               placeholder: Optional[str] = None) -> List[PostSummary]:
    if not isinstance(xml, (bytes, bytearray)):
        raise TypeError(f"feed document must be bytes, not {type(xml).__name__}")
    # a stream is never taken for a URL or a file name
    feed = feedparser.parse(io.BytesIO(xml))
    if feed.bozo:
        if not feed.entries:
            raise FeedError(f"Feed could not be parsed: {feed.get('bozo_exception')}")
        logger.warning("Feed is not well-formed, using %d recovered entries: %s",
                       len(feed.entries), feed.get("bozo_exception"))

    out = []
    for idx, e in enumerate(feed.entries):
        if len(out) >= limit:
            break
        try:
            out.append(_entry_to_summary(e, excerpt_length, placeholder))
        except Exception as exc:
            # skip the entry, keep the rest
            logger.warning("Skipping feed entry %d: %s", idx, exc)
    return out
