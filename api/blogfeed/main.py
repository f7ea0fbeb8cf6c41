import logging
import pathlib
from datetime import datetime, timezone

import httpx
from fastapi import FastAPI, Request, BackgroundTasks, Depends
from fastapi.responses import HTMLResponse, Response
from fastapi.staticfiles import StaticFiles

from .cache import ResponseCache, get_cache
from .ingest.rss import FeedError, fetch_feed, parse_feed
from .render import render_blog_section
from .schemas import BlogResponse
from .settings import settings
from .templates import render

logger = logging.getLogger(__name__)

app = FastAPI(title="Blog Feed")
app.mount("/static", StaticFiles(directory=str(pathlib.Path(__file__).parent / "static")), name="static")

@app.on_event("startup")
def startup_event():
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

def json_response(body: str) -> Response:
    return Response(
        content=body,
        status_code=200,
        media_type="application/json; charset=UTF-8",
        headers={"cache-control": f"public, max-age={settings.CACHE_SECONDS}, s-maxage={settings.CACHE_SECONDS}"},
    )

def load_blog() -> BlogResponse:
    try:
        xml = fetch_feed(settings.FEED_URL, timeout=settings.FEED_TIMEOUT)
        posts = parse_feed(
            xml,
            limit=settings.MAX_POSTS,
            excerpt_length=settings.EXCERPT_LENGTH,
            placeholder=settings.placeholder_excerpt,
        )
    except FeedError as exc:
        logger.warning("feed unavailable: %s", exc)
        return BlogResponse(posts=[], error=f"Unable to fetch {settings.FEED_SOURCE_NAME} posts right now.")
    except Exception:
        logger.exception("unexpected failure loading %s", settings.FEED_URL)
        return BlogResponse(posts=[], error=f"Unable to fetch {settings.FEED_SOURCE_NAME} posts right now.")
    logger.info("fetched %d posts from %s", len(posts), settings.FEED_URL)
    return BlogResponse(posts=posts)

@app.get("/api/blog")
def blog(request: Request, background_tasks: BackgroundTasks, cache: ResponseCache = Depends(get_cache)):
    key = request.url.path
    cached = cache.lookup(key)
    if cached is not None:
        logger.debug("cache hit %s", key)
        return json_response(cached)

    result = load_blog()
    body = result.to_json()
    if result.error is None:
        # written after the response is sent
        background_tasks.add_task(cache.store, key, body)
    return json_response(body)

async def get_http_client():
    async with httpx.AsyncClient(timeout=settings.BLOG_API_TIMEOUT) as client:
        yield client

def blog_api_url(request: Request) -> str:
    return settings.BLOG_API_URL or str(request.url_for("blog"))

@app.get("/blog/cards", response_class=HTMLResponse)
async def blog_cards(request: Request, client: httpx.AsyncClient = Depends(get_http_client)):
    return HTMLResponse(await render_blog_section(blog_api_url(request), client))

@app.get("/", response_class=HTMLResponse)
async def home(request: Request, client: httpx.AsyncClient = Depends(get_http_client)):
    return render("index.html", {
        "source_name": settings.FEED_SOURCE_NAME,
        "blog_section": await render_blog_section(blog_api_url(request), client),
    })

@app.get("/healthz")
def healthz():
    return {"status": "ok", "time": datetime.now(timezone.utc).isoformat()}

def run():
    import uvicorn
    uvicorn.run("blogfeed.main:app", host=settings.API_HOST, port=settings.API_PORT)

if __name__ == "__main__":
    run()
