"""
Flight Provider Layer — modello canonico e interfaccia astratta (Strategy Pattern).

Il codice applicativo (search_engine, routes) usa solo queste classi.
Il provider concreto viene scelto dalla factory tramite FLIGHT_PROVIDER nel .env.

Modello offerta:
  Offer → 1-2 Leg (andata, ritorno opzionale) → 1+ Segment (volo diretto singolo)
Gli scali sono rappresentati come segmenti separati: Segment.stops è sempre 0.
"""
import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import TypeVar

import httpx

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


class CabinClass(str, Enum):
    ECONOMY = "ECONOMY"
    PREMIUM_ECONOMY = "PREMIUM_ECONOMY"
    BUSINESS = "BUSINESS"
    FIRST = "FIRST"

    @classmethod
    def parse(cls, value: str | None) -> "CabinClass":
        """'Premium Economy', 'premium-economy', 'FIRST_CLASS'... → enum. Sconosciuto = ECONOMY."""
        key = (value or "").strip().upper().replace(" ", "_").replace("-", "_")
        key = {"ECONOMY_SAVER": "ECONOMY", "FIRST_CLASS": "FIRST"}.get(key, key)
        try:
            return cls(key)
        except ValueError:
            return cls.ECONOMY


@dataclass(frozen=True)
class SearchQuery:
    """Richiesta di ricerca con località già risolte in codici IATA."""
    origin: str
    destination: str
    departure_date: str          # passato al provider così com'è (es. "2026-06-01")
    return_date: str | None = None
    adults: int = 1
    children: int = 0
    infants: int = 0
    cabin: CabinClass = CabinClass.ECONOMY


@dataclass
class Endpoint:
    airport: str
    terminal: str
    time: str                    # ISO datetime string così come restituita dal provider


@dataclass
class Segment:
    departure: Endpoint
    arrival: Endpoint
    airline: str                 # codice vettore (es. "AI")
    airline_name: str
    flight_number: str
    aircraft: str
    duration: int                # minuti
    cabin: str
    stops: int = 0


@dataclass
class Leg:
    """Una tratta direzionale: segmenti volati in sequenza."""
    segments: list[Segment]
    total_duration: int
    origin: str
    destination: str
    departure_time: str
    arrival_time: str
    stops: int


@dataclass
class Price:
    total: float
    base: float
    tax: float
    currency: str


@dataclass
class Offer:
    """Risultato normalizzato indipendente dal provider."""
    id: str
    trip_type: str               # "One Way" | "Round Trip"
    price: Price
    legs: list[Leg] = field(default_factory=list)
    validating_carrier: str = ""
    is_demo: bool = False


@dataclass(frozen=True)
class SearchEndpoint:
    """Versione dell'endpoint di ricerca; send() le prova nell'ordine configurato."""
    label: str
    path: str


def build_leg(segments: list[Segment], total_duration: int | None = None) -> Leg:
    """
    Assembla i segmenti in una Leg con i campi derivati.
    Se total_duration non è fornita si usa la somma delle durate dei segmenti.
    """
    if not segments:
        raise ValueError("una Leg richiede almeno un segmento")
    first, last = segments[0], segments[-1]
    if total_duration is None:
        total_duration = sum(s.duration for s in segments)
    return Leg(
        segments=segments,
        total_duration=total_duration,
        origin=first.departure.airport,
        destination=last.arrival.airport,
        departure_time=first.departure.time,
        arrival_time=last.arrival.time,
        stops=len(segments) - 1,
    )


def trip_type_for(legs: list[Leg]) -> str:
    return "Round Trip" if len(legs) > 1 else "One Way"


async def try_in_order(
    attempts: Sequence[T],
    call: Callable[[T], Awaitable[R]],
    what: str,
) -> R:
    """
    Esegue `call` su ogni tentativo nell'ordine dato e restituisce il primo successo.

    Ogni tentativo ha il proprio try/except: un fallimento viene loggato e si passa
    al successivo. Se falliscono tutti viene rilanciato l'errore dell'ULTIMO tentativo.
    Gli oggetti in `attempts` devono esporre un attributo `label`.
    """
    if not attempts:
        raise ValueError(f"{what}: nessun tentativo configurato")

    last_exc: Exception | None = None
    for attempt in attempts:
        try:
            return await call(attempt)
        except Exception as exc:
            logger.warning("%s (%s) fallito: %s: %s", what, attempt.label, type(exc).__name__, exc)
            last_exc = exc
    raise last_exc


class FlightProvider(ABC):
    """
    Un provider incapsula client HTTP condiviso, TokenManager e le regole
    specifiche del formato (query + normalizzazione).
    """

    name: str = ""

    def __init__(self, client: httpx.AsyncClient, tokens, search_timeout: float = 25) -> None:
        self.client = client
        self.tokens = tokens
        self.search_timeout = search_timeout

    async def get_token(self) -> str:
        return await self.tokens.acquire()

    @abstractmethod
    def build_query(self, query: SearchQuery) -> dict:
        """Costruisce il payload specifico del provider dalla richiesta canonica."""
        ...

    @abstractmethod
    async def send(self, payload: dict, token: str) -> dict:
        """
        Invia la ricerca e restituisce il body JSON grezzo.

        Raises:
            TransportError: timeout o HTTP non-2xx (dopo gli eventuali tentativi alternativi).
        """
        ...

    @abstractmethod
    def normalize(self, raw: dict) -> list[Offer]:
        """Converte la risposta grezza in lista di Offer (eventualmente vuota)."""
        ...
