from dataclasses import asdict
from typing import Annotated

from fastapi import APIRouter, Body, Query, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from app.api.deps import ProviderDep
from app.config import settings
from app.models.schemas import AirportSuggestionOut, ErrorOut, OfferOut, SearchIn
from app.services.providers.base import FlightProvider
from app.services.search_engine import search_flights
from app.utils.locations import suggest_airports

router = APIRouter()

# Ogni errore di ricerca (validazione inclusa) risponde 500 con {"error": ...}
_ERROR_RESPONSES = {500: {"model": ErrorOut}}


"""
Endpoint Flight Search.-----------------------------------------------------------------------------------

POST /api/flights/search
  {"origin": "New Delhi", "destination": "Mumbai (BOM)", "departureDate": "2026-06-01",
   "returnDate": "2026-06-08", "adults": 2, "children": 1, "travelClass": "ECONOMY"}

GET /api/flights/search?origin=DEL&destination=BOM&departureDate=2026-06-01
  stessi campi in query string (per i no-code builder)

Errori: sempre HTTP 500 con {"error": "<messaggio>"}.
"""
async def _handle_search(provider: FlightProvider, payload: dict) -> list[OfferOut] | JSONResponse:
    try:
        request = SearchIn.model_validate(payload)
    except ValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(p) for p in first["loc"]) or "body"
        return JSONResponse(status_code=500, content={"error": f"Invalid {field}: {first['msg']}"})

    # FlightSearchError → handler globale in main.py
    offers = await search_flights(provider, request, mock_mode=settings.mock_mode)
    return [OfferOut.model_validate(asdict(o)) for o in offers]


@router.post("/search", response_model=list[OfferOut], responses=_ERROR_RESPONSES)
async def search_post(
    provider: ProviderDep,
    payload: Annotated[dict | None, Body()] = None,
):
    return await _handle_search(provider, payload or {})


@router.get("/search", response_model=list[OfferOut], responses=_ERROR_RESPONSES)
async def search_get(provider: ProviderDep, request: Request):
    return await _handle_search(provider, dict(request.query_params))


@router.get("/suggestions", response_model=list[AirportSuggestionOut])
async def suggestions(
    q: Annotated[str, Query(description="Città, codice IATA o nome aeroporto")] = "",
) -> list[AirportSuggestionOut]:
    """To get popular airports matching q (almeno 2 caratteri)."""
    return [AirportSuggestionOut(**a) for a in suggest_airports(q)]
