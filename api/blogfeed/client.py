'''Reads the /api/blog JSON contract over HTTP.'''
import logging

import httpx

logger = logging.getLogger(__name__)


class BlogUnavailable(Exception):
    """The blog API gave nothing worth rendering."""


async def load_posts(api_url: str, client: httpx.AsyncClient, limit: int = 3) -> list:
    try:
        r = await client.get(api_url, headers={"Accept": "application/json"})
    except httpx.HTTPError as exc:
        raise BlogUnavailable(f"Blog API request failed: {exc}") from exc
    if not r.is_success:
        raise BlogUnavailable(f"Blog API error: {r.status_code}")

    try:
        data = r.json()
    except ValueError as exc:
        raise BlogUnavailable(f"Blog API returned invalid JSON: {exc}") from exc

    posts = data.get("posts") if isinstance(data, dict) else None
    if not isinstance(posts, list) or not posts:
        raise BlogUnavailable("No blog posts available")
    if data.get("error"):
        logger.info("blog API reported: %s", data["error"])
    return posts[:limit]
