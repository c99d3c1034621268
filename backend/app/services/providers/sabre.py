"""
SabreProvider — Sabre Bargain Finder Max (REST, OTA_AirLowFareSearchRQ).

Particolarità rispetto ad Amadeus:
  - auth: header Basic provato prima con doppia codifica base64 e poi singola
    (vedi providers/auth.py)
  - ricerca: POST con body JSON in stile OTA; si prova /v4.3.0/shop/flights e,
    su qualsiasi errore, una sola volta /v5/offers/shop/flights con lo stesso payload
  - risposta: formato OTA oppure grouped itinerary (gestiti dal normalizer)

Documentazione: https://developer.sabre.com/docs/rest_apis/air/search/bargain_finder_max
"""
import logging

import httpx

from app.services.normalizer import normalize_sabre
from app.services.providers.auth import TokenManager, sabre_basic_credentials
from app.services.providers.base import (
    FlightProvider,
    Offer,
    SearchEndpoint,
    SearchQuery,
    try_in_order,
)
from app.services.providers.errors import TransportError, provider_message

logger = logging.getLogger(__name__)

_AUTH_PATH = "/v2/auth/token"

_CABINS = {
    "ECONOMY": "Y",
    "PREMIUM_ECONOMY": "S",
    "BUSINESS": "C",
    "FIRST": "F",
}


class SabreProvider(FlightProvider):

    name = "Sabre"

    def __init__(
        self,
        client: httpx.AsyncClient,
        client_id: str,
        client_secret: str,
        base_url: str = "https://api.test.sabre.com",
        pcc: str = "IPCC",
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
            sabre_basic_credentials,
            provider_name=self.name,
            timeout=auth_timeout,
        )
        super().__init__(client, tokens, search_timeout)
        self.base_url = base_url
        self.pcc = pcc
        self.currency = currency
        self.max_results = max_results
        self.endpoints = [
            SearchEndpoint("v4.3.0", "/v4.3.0/shop/flights"),
            SearchEndpoint("v5", "/v5/offers/shop/flights?forceitinerary=true"),
        ]

    def build_query(self, query: SearchQuery) -> dict:
        cabin = _CABINS.get(query.cabin.value, "Y")

        origin_dest = [
            {
                "RPH": "1",
                "DepartureDateTime": f"{query.departure_date}T00:00:00",
                "OriginLocation": {"LocationCode": query.origin},
                "DestinationLocation": {"LocationCode": query.destination},
                "TPA_Extensions": {"CabinPref": {"Cabin": cabin, "PreferLevel": "Preferred"}},
            }
        ]
        if query.return_date:
            origin_dest.append(
                {
                    "RPH": "2",
                    "DepartureDateTime": f"{query.return_date}T00:00:00",
                    "OriginLocation": {"LocationCode": query.destination},
                    "DestinationLocation": {"LocationCode": query.origin},
                }
            )

        passenger_types = [{"Code": "ADT", "Quantity": query.adults}]
        if query.children > 0:
            passenger_types.append({"Code": "CNN", "Quantity": query.children})
        if query.infants > 0:
            passenger_types.append({"Code": "INF", "Quantity": query.infants})

        return {
            "OTA_AirLowFareSearchRQ": {
                "Version": "5.3.0",
                "POS": {
                    "Source": [
                        {
                            "PseudoCityCode": self.pcc,
                            "RequestorID": {
                                "Type": "1",
                                "ID": "FLT",
                                "CompanyName": {"Code": "TN"},
                            },
                        }
                    ]
                },
                "OriginDestinationInformation": origin_dest,
                "TravelPreferences": {
                    "TPA_Extensions": {"NumTrips": {"Number": self.max_results}},
                },
                "TravelerInfoSummary": {
                    "SeatsRequested": [query.adults],
                    "AirTravelerAvail": [{"PassengerTypeQuantity": passenger_types}],
                    "PriceRequestInformation": {"CurrencyCode": self.currency},
                },
                "TPA_Extensions": {
                    "IntelliSellTransaction": {
                        "ServiceTag": "BFM",
                        "RequestType": {"Name": "50ITINS"},
                    },
                },
            }
        }

    async def send(self, payload: dict, token: str) -> dict:
        async def _post(endpoint: SearchEndpoint) -> dict:
            resp = await self.client.post(
                f"{self.base_url}{endpoint.path}",
                json=payload,
                headers={
                    "Authorization": f"Bearer {token}",
                    "Content-Type": "application/json",
                },
                timeout=self.search_timeout,
            )
            resp.raise_for_status()
            return resp.json()

        try:
            return await try_in_order(self.endpoints, _post, "Sabre search")
        except Exception as exc:
            status = exc.response.status_code if isinstance(exc, httpx.HTTPStatusError) else None
            raise TransportError(provider_message(exc), status_code=status) from exc

    def normalize(self, raw: dict) -> list[Offer]:
        offers = normalize_sabre(raw, default_currency=self.currency)
        logger.debug("Sabre: %d offers normalizzate", len(offers))
        return offers
