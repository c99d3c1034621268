#To aggregate all routes under /api


from fastapi import APIRouter

from app.api.routes.flights import router as flights_router

api_router = APIRouter(prefix="/api")
api_router.include_router(flights_router, prefix="/flights", tags=["flights"])
