"""Client registry routes."""

from __future__ import annotations

from fastapi import APIRouter

from heatcheck.config import list_clients

router = APIRouter()


@router.get("/clients")
async def clients_list():
    """List all registered clients."""
    return {"clients": list_clients()}
