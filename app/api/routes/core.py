from __future__ import annotations

from fastapi import APIRouter

from app.services import contract_facade as facade

router = APIRouter()


@router.get("/")
async def root():
    """Health check."""
    return {"message": "contract engine server", "docs": "/docs"}


@router.get("/api/status")
async def api_status():
    """Current day, offer/active counts and success streak."""
    return facade.get_status()
