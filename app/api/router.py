from fastapi import APIRouter

from app.api.routes import evolution, sim

api_router = APIRouter()
api_router.include_router(sim.router)
api_router.include_router(evolution.router)
