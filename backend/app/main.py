import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.api.deps import ProviderDep
from app.api.router import api_router
from app.config import settings
from app.services.providers.errors import FlightSearchError
from app.services.providers.factory import build_provider

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: un solo client HTTP e un solo provider (con la sua cache token) per processo
    async with httpx.AsyncClient() as client:
        app.state.provider = build_provider(settings, client)
        logger.info(
            "RedeFlights backend pronto: provider=%s mock_mode=%s",
            app.state.provider.name, settings.mock_mode,
        )

        yield

    # Shutdown: il client viene chiuso all'uscita dal context manager


app = FastAPI(
    title="RedeFlights API",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(FlightSearchError)
async def flight_search_error_handler(request: Request, exc: FlightSearchError) -> JSONResponse:
    logger.error("SEARCH ERROR: %s", exc)
    return JSONResponse(status_code=500, content={"error": str(exc)})


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Nessuna classificazione 4xx: ogni errore viene riportato come 500 + messaggio
    errors = exc.errors()
    msg = errors[0]["msg"] if errors else "Invalid request"
    return JSONResponse(status_code=500, content={"error": msg})


app.include_router(api_router)


@app.get("/")
async def root():
    return {"message": "RedeFlights Backend is running!"}


@app.get("/api/health")
async def health(provider: ProviderDep):
    """Verifica l'autenticazione verso il provider configurato."""
    try:
        token = await provider.get_token()
    except FlightSearchError as exc:
        return JSONResponse(
            status_code=500,
            content={"status": f"{provider.name} Connection Failed", "error": str(exc)},
        )
    return {
        "status": f"Connected to {provider.name}",
        "hasToken": bool(token),
        "mockMode": settings.mock_mode,
    }
