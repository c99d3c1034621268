"""
Search Orchestrator — core logic per la ricerca voli.

Flusso:
  1. Risolve origin/destination in codici IATA (testo libero accettato).
  2. MOCK_MODE → restituisce offerte demo e si ferma (nessuna chiamata al provider).
  3. Token dal TokenManager del provider (cache se ancora valido).
  4. Costruisce e invia la query (Sabre: v4.3.0 e poi v5 sullo stesso payload).
  5. Normalizza la risposta grezza.
  6. Zero offerte → EmptyResultError (strict mode: mai dati demo come ripiego).
  7. Price Diversification Pass e restituzione.
"""
import logging

from app.models.schemas import SearchIn
from app.services.demo import build_demo_offers
from app.services.pricing import diversify_prices
from app.services.providers.base import CabinClass, FlightProvider, Offer, SearchQuery
from app.services.providers.errors import EmptyResultError, FlightSearchError
from app.utils.locations import resolve_iata

logger = logging.getLogger(__name__)


def build_search_query(request: SearchIn) -> SearchQuery:
    """Richiesta HTTP → SearchQuery con codici risolti e adulti >= 1."""
    return SearchQuery(
        origin=resolve_iata(request.origin),
        destination=resolve_iata(request.destination),
        departure_date=request.departure_date,
        return_date=request.return_date or None,
        adults=request.adults or request.passengers or 1,
        children=request.children,
        infants=request.infants,
        cabin=CabinClass.parse(request.travel_class),
    )


async def search_flights(
    provider: FlightProvider,
    request: SearchIn,
    mock_mode: bool = False,
) -> list[Offer]:
    """
    Esegue una ricerca completa e restituisce le offerte normalizzate.

    Raises:
        ConfigurationError, AuthFailure, TransportError: dal provider.
        EmptyResultError: il provider ha risposto senza itinerari utilizzabili.
    """
    query = build_search_query(request)

    if mock_mode:
        logger.info("Demo data (MOCK_MODE): %s→%s %s", query.origin, query.destination, query.departure_date)
        return build_demo_offers(query)

    logger.info(
        "Ricerca %s: %s→%s %s (ritorno %s, %d ADT)",
        provider.name, query.origin, query.destination,
        query.departure_date, query.return_date or "-", query.adults,
    )
    try:
        token = await provider.get_token()
        payload = provider.build_query(query)
        raw = await provider.send(payload, token)
        offers = provider.normalize(raw)

        if not offers:
            raise EmptyResultError(
                f"No flights returned from {provider.name} for the selected route/date."
            )
    except FlightSearchError as exc:
        logger.error("%s search error (strict mode): %s: %s", provider.name, type(exc).__name__, exc)
        raise

    logger.info("%s ha restituito %d offerte", provider.name, len(offers))
    return diversify_prices(offers)
