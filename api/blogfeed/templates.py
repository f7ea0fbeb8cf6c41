from fastapi.responses import HTMLResponse
from jinja2 import Environment, FileSystemLoader, select_autoescape
import pathlib

env = Environment(
    loader=FileSystemLoader(str(pathlib.Path(__file__).parent / "templates")),
    autoescape=select_autoescape()
)

def render_string(name: str, ctx: dict) -> str:
    return env.get_template(name).render(**ctx)

def render(name: str, ctx: dict) -> HTMLResponse:
    return HTMLResponse(render_string(name, ctx))
