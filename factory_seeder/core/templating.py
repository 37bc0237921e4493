"""Jinja2 rendering for the dashboard pages."""

import json
from functools import lru_cache
from pathlib import Path
from typing import Any

from fastapi.responses import HTMLResponse
from jinja2 import Environment, FileSystemLoader, select_autoescape

TEMPLATE_DIR = Path(__file__).resolve().parents[1] / "templates"


def _to_pretty_json(value: Any) -> str:
    return json.dumps(value, indent=2, default=str)


@lru_cache
def get_environment() -> Environment:
    """Template environment (HTML autoescaped)."""
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=select_autoescape(["html", "xml"]),
    )
    env.filters["pretty_json"] = _to_pretty_json
    return env


def render(template_name: str, status_code: int = 200, **context: Any) -> HTMLResponse:
    """Render a template into an HTML response."""
    template = get_environment().get_template(template_name)
    return HTMLResponse(template.render(**context), status_code=status_code)
