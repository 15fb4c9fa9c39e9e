from __future__ import annotations

import logging
import os

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.router import api_router
from app.services.contract_facade import get_status

logger = logging.getLogger(__name__)

ADMIN_TOKEN_ENV = "CONTRACTS_ADMIN_TOKEN"

app = FastAPI(title="Contract Engine Server")


@app.on_event("startup")
def _startup_init_system() -> None:
    # Build the process-wide system and deal the opening offers before the first request.
    status = get_status()
    logger.info(
        "contract system ready: day=%d offers=%d seeded=%s",
        status["day"],
        status["available"],
        bool((os.environ.get("CONTRACTS_RNG_SEED") or "").strip()),
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def _admin_token_middleware(request: Request, call_next):
    """Optional admin guard.

    When CONTRACTS_ADMIN_TOKEN is set, every POST under /api/ must carry the
    same value in X-Admin-Token. Reads and PUT upserts stay open.
    """
    expected = (os.environ.get(ADMIN_TOKEN_ENV) or "").strip()
    if not expected:
        return await call_next(request)

    if (request.method or "GET").upper() != "POST" or not (request.url.path or "").startswith("/api/"):
        return await call_next(request)

    if (request.headers.get("X-Admin-Token") or "").strip() != expected:
        logger.warning("rejected %s %s: bad admin token", request.method, request.url.path)
        return JSONResponse(status_code=401, content={"detail": "Unauthorized: invalid X-Admin-Token"})

    return await call_next(request)


app.include_router(api_router)
