"""
AmadeusProvider — Amadeus Self-Service API (Flight Offers Search v2).

Token OAuth2 client-credentials (~30 min) con client_id/client_secret nel body
form-encoded, cachato nel TokenManager dell'istanza.
La ricerca è una GET con query string; un solo endpoint, nessun fallback.

Documentazione: https://developers.amadeus.com/self-service/category/flights
"""
import logging

import httpx

from app.services.normalizer import normalize_amadeus
from app.services.providers.auth import TokenManager, form_credentials
from app.services.providers.base import (
    FlightProvider,
    Offer,
    SearchEndpoint,
    SearchQuery,
    try_in_order,
)
from app.services.providers.errors import TransportError, provider_message

logger = logging.getLogger(__name__)

_AUTH_PATH = "/v1/security/oauth2/token"
_SEARCH_PATH = "/v2/shopping/flight-offers"

# Amadeus accetta direttamente i nomi dell'enum
_CABINS = {
    "ECONOMY": "ECONOMY",
    "PREMIUM_ECONOMY": "PREMIUM_ECONOMY",
    "BUSINESS": "BUSINESS",
    "FIRST": "FIRST",
}


class AmadeusProvider(FlightProvider):

    name = "Amadeus"

    def __init__(
        self,
        client: httpx.AsyncClient,
        client_id: str,
        client_secret: str,
        base_url: str = "https://test.api.amadeus.com",
        currency: str = "INR",
        max_results: int = 20,
        auth_timeout: float = 15,
        search_timeout: float = 25,
    ) -> None:
        tokens = TokenManager(
            client,
            f"{base_url}{_AUTH_PATH}",
            client_id,
            client_secret,
            form_credentials,
            provider_name=self.name,
            timeout=auth_timeout,
        )
        super().__init__(client, tokens, search_timeout)
        self.base_url = base_url
        self.currency = currency
        self.max_results = max_results
        self.endpoints = [SearchEndpoint("v2", _SEARCH_PATH)]

    def build_query(self, query: SearchQuery) -> dict:
        params: dict = {
            "originLocationCode": query.origin,
            "destinationLocationCode": query.destination,
            "departureDate": query.departure_date,
            "adults": query.adults,
            "currencyCode": self.currency,
            "max": self.max_results,
        }
        if query.return_date:
            params["returnDate"] = query.return_date
        if query.children > 0:
            params["children"] = query.children
        if query.infants > 0:
            params["infants"] = query.infants
        params["travelClass"] = _CABINS.get(query.cabin.value, "ECONOMY")
        return params

    async def send(self, payload: dict, token: str) -> dict:
        async def _get(endpoint: SearchEndpoint) -> dict:
            resp = await self.client.get(
                f"{self.base_url}{endpoint.path}",
                params=payload,
                headers={"Authorization": f"Bearer {token}"},
                timeout=self.search_timeout,
            )
            resp.raise_for_status()
            return resp.json()

        try:
            return await try_in_order(self.endpoints, _get, "Amadeus search")
        except Exception as exc:
            status = exc.response.status_code if isinstance(exc, httpx.HTTPStatusError) else None
            raise TransportError(provider_message(exc), status_code=status) from exc

    def normalize(self, raw: dict) -> list[Offer]:
        offers = normalize_amadeus(raw, default_currency=self.currency)
        logger.debug("Amadeus: %d offers normalizzate", len(offers))
        return offers
