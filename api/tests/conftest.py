import asyncio

import httpx
import pytest
import requests
from fastapi.testclient import TestClient

from blogfeed.cache import MemoryCache, get_cache
from blogfeed.main import app, get_http_client
from blogfeed.render import render_blog_section

FEED_HEAD = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:content="http://purl.org/rss/1.0/modules/content/">
<channel>
<title>Stories by Test Author on Medium</title>
<link>https://medium.com/@tester</link>
<description>Stories by Test Author on Medium</description>
"""
FEED_TAIL = "</channel>\n</rss>\n"


def make_item(i, content=None, description=None, title=None, pub_date="Mon, 01 Jan 2024 10:00:00 GMT"):
    parts = [
        "<item>",
        f"<title><![CDATA[{title if title is not None else f'Post {i}'}]]></title>",
        f"<link>https://medium.com/p/post-{i}</link>",
        f"<pubDate>{pub_date}</pubDate>",
    ]
    if description is not None:
        parts.append(f"<description><![CDATA[{description}]]></description>")
    if content is not None:
        parts.append(f"<content:encoded><![CDATA[{content}]]></content:encoded>")
    parts.append("</item>")
    return "\n".join(parts)


def make_feed(*items) -> bytes:
    return (FEED_HEAD + "\n".join(items) + FEED_TAIL).encode("utf-8")


def simple_feed(count: int) -> bytes:
    return make_feed(*[make_item(i, content=f"<p>Body of post {i}</p>") for i in range(count)])


class FakeResponse:
    def __init__(self, status_code=200, content=b"", payload=None, bad_json=False):
        self.status_code = status_code
        self.content = content
        self._payload = payload
        self._bad_json = bad_json

    def json(self):
        if self._bad_json:
            raise ValueError("Expecting value")
        return self._payload


class FakeGet:
    """Stand-in for requests.get that records calls and replays a response or error."""

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def __call__(self, url, timeout=None, headers=None, **kwargs):
        self.calls.append({"url": url, "timeout": timeout, "headers": headers or {}})
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def fake_get(monkeypatch):
    def install(response=None, error=None):
        fg = FakeGet(response, error)
        monkeypatch.setattr(requests, "get", fg)
        return fg
    return install


@pytest.fixture
def cache():
    return MemoryCache(ttl=1800)


@pytest.fixture
def client(cache):
    app.dependency_overrides[get_cache] = lambda: cache
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def posts_payload(n):
    return {"posts": [
        {"title": f"Post {i}", "link": f"https://medium.com/p/post-{i}",
         "pubDate": "Mon, 01 Jan 2024 10:00:00 GMT", "excerpt": f"Excerpt {i}", "image": None}
        for i in range(n)
    ]}


class BlogApi:
    """httpx MockTransport handler standing in for the /api/blog endpoint."""

    def __init__(self, status_code=200, error=None, **kwargs):
        self.status_code = status_code
        self.error = error
        self.kwargs = kwargs
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, **self.kwargs)


@pytest.fixture
def blog_api():
    def install(*args, **kwargs):
        api = BlogApi(*args, **kwargs)

        async def _client():
            async with httpx.AsyncClient(transport=httpx.MockTransport(api)) as c:
                yield c

        app.dependency_overrides[get_http_client] = _client
        return api
    return install


def render_section(api: BlogApi, url: str = "http://api.test/api/blog") -> str:
    async def go():
        async with httpx.AsyncClient(transport=httpx.MockTransport(api)) as c:
            return await render_blog_section(url, c)
    return asyncio.run(go())
