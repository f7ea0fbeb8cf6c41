"""Turn /api/blog JSON into card markup for the blog carousel."""
import logging
from datetime import datetime
from email.utils import parsedate_to_datetime
from typing import Optional

import httpx

from .client import BlogUnavailable, load_posts
from .settings import settings
from .templates import render_string

logger = logging.getLogger(__name__)

MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
          "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def _parse_date(value: str) -> Optional[datetime]:
    try:
        return parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        pass
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def format_blog_date(value, placeholder: Optional[str] = None) -> str:
    """Short en-US date ("Jan 5, 2024"), or `placeholder` when unparsable."""
    placeholder = placeholder or settings.FEED_SOURCE_NAME
    if not isinstance(value, str) or not value.strip():
        return placeholder
    dt = _parse_date(value.strip())
    if dt is None:
        return placeholder
    return f"{MONTHS[dt.month - 1]} {dt.day}, {dt.year}"


def _field(post, key: str) -> str:
    value = post.get(key) if isinstance(post, dict) else None
    if value is None or value == "":
        return ""
    return str(value)


def card_context(post) -> dict:
    return {
        "title": _field(post, "title") or "Untitled",
        "excerpt": _field(post, "excerpt") or settings.placeholder_excerpt,
        "link": _field(post, "link") or settings.FEED_PROFILE_URL,
        "date": format_blog_date(_field(post, "pubDate")),
        "image": _field(post, "image"),
    }


def render_blog_posts(posts: list) -> str:
    return render_string("blog_cards.html", {"cards": [card_context(p) for p in posts]})


def render_fallback() -> str:
    return render_string("blog_fallback.html", {
        "source_name": settings.FEED_SOURCE_NAME,
        "profile_url": settings.FEED_PROFILE_URL,
    })


async def render_blog_section(api_url: str, client: httpx.AsyncClient) -> str:
    """Cards for the latest posts, or the static fallback card. Never raises."""
    try:
        posts = await load_posts(api_url, client, limit=settings.MAX_CARDS)
        return render_blog_posts(posts)
    except BlogUnavailable as exc:
        logger.info("rendering blog fallback: %s", exc)
    except Exception:
        logger.exception("rendering blog cards failed")
    return render_fallback()
