"""
Fixture condivise per la test suite RedeFlights.

Tutte le dipendenze esterne (endpoint token e ricerca dei provider) vengono
simulate con httpx.MockTransport o unittest.mock — nessun servizio reale è
necessario per eseguire i test.
"""
import pytest

from app.models.schemas import SearchIn
from app.services.providers.base import CabinClass, SearchQuery

from factories import (
    amadeus_offer,
    amadeus_response,
    amadeus_segment,
    sabre_itinerary,
    sabre_response,
    sabre_segment,
)


# ---------------------------------------------------------------------------
# Richieste di ricerca
# ---------------------------------------------------------------------------

@pytest.fixture
def one_way_query():
    """DEL→BOM solo andata, 2 adulti, economy."""
    return SearchQuery(origin="DEL", destination="BOM", departure_date="2026-06-01", adults=2)


@pytest.fixture
def round_trip_query():
    """DEL→BOM andata/ritorno con bambino e neonato, business."""
    return SearchQuery(
        origin="DEL",
        destination="BOM",
        departure_date="2026-06-01",
        return_date="2026-06-08",
        adults=2,
        children=1,
        infants=1,
        cabin=CabinClass.BUSINESS,
    )


@pytest.fixture
def search_in():
    """Richiesta HTTP in testo libero, come la invia il frontend."""
    return SearchIn.model_validate({
        "origin": "New Delhi",
        "destination": "Mumbai (BOM)",
        "departureDate": "2026-06-01",
        "adults": 1,
    })


# ---------------------------------------------------------------------------
# Risposte grezze
# ---------------------------------------------------------------------------

@pytest.fixture
def amadeus_connecting_raw():
    """Un'offerta Amadeus DEL→BLR→BOM (due segmenti concatenati)."""
    offer = amadeus_offer([
        ("PT4H30M", [
            amadeus_segment("DEL", "BLR", "2026-06-01T06:00:00", "2026-06-01T08:45:00",
                            number="501", duration="PT2H45M", seg_id="1"),
            amadeus_segment("BLR", "BOM", "2026-06-01T09:00:00", "2026-06-01T10:30:00",
                            number="502", duration="PT1H30M", seg_id="2"),
        ]),
    ])
    return amadeus_response([offer])


@pytest.fixture
def sabre_round_trip_raw():
    """Un itinerario Sabre OTA andata (con scalo) e ritorno (diretto)."""
    outbound = [
        sabre_segment("DEL", "BLR", "2026-06-01T06:00:00", "2026-06-01T08:45:00", number=501, elapsed=165),
        sabre_segment("BLR", "BOM", "2026-06-01T09:30:00", "2026-06-01T11:15:00", number=502, elapsed=105),
    ]
    inbound = [
        sabre_segment("BOM", "DEL", "2026-06-08T18:00:00", "2026-06-08T20:10:00", number=660, elapsed=130),
    ]
    return sabre_response([sabre_itinerary([outbound, inbound])])
