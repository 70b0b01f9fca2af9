"""Route registration for the HeatCheck web UI."""

from __future__ import annotations

from fastapi import FastAPI


def register_routes(app: FastAPI):
    """Include all route modules."""
    from heatcheck.web.routes import calls, clients, dashboard, metrics

    # Specific routes first; dashboard catch-all /{slug} must be last
    app.include_router(clients.router, prefix="/api")
    app.include_router(calls.router)
    app.include_router(metrics.router)
    app.include_router(dashboard.router)
