"""FastAPI application factory for the HeatCheck dashboard."""

from __future__ import annotations

from pathlib import Path

from fastapi import FastAPI
from fastapi.templating import Jinja2Templates

from heatcheck.storage.models import NO_SCORE, NONE_IDENTIFIED, NOT_SPECIFIED

WEB_DIR = Path(__file__).parent
TEMPLATES_DIR = WEB_DIR / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


# Register template globals after import
def _setup_template_globals():
    from heatcheck.config import list_clients

    def placeholder(value, kind: str = "text") -> str:
        """Label a missing extracted field for display."""
        if value is not None:
            return str(value)
        return {"score": NO_SCORE, "objection": NONE_IDENTIFIED}.get(kind, NOT_SPECIFIED)

    templates.env.globals["list_all_clients"] = list_clients
    templates.env.filters["placeholder"] = placeholder

_setup_template_globals()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(title="HeatCheck", docs_url=None, redoc_url=None)

    # Register all routes
    from heatcheck.web.routes import register_routes

    register_routes(app)

    return app
