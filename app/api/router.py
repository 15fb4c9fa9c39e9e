from fastapi import APIRouter

from app.api.routes import contracts, core

api_router = APIRouter()
api_router.include_router(core.router)
api_router.include_router(contracts.router)
