"""
Flight Provider Factory — sceglie il provider tramite FLIGHT_PROVIDER nel .env.

Il provider viene costruito una sola volta nel lifespan dell'app e condiviso
da tutte le richieste: il TokenManager (e quindi la cache del token) vive
dentro l'istanza.

Funzioni esposte:
  build_provider(settings, client) → AmadeusProvider | SabreProvider
  PROVIDER_ALIASES                → nomi accettati per FLIGHT_PROVIDER
"""
import httpx

from app.config import Settings
from app.services.providers.amadeus import AmadeusProvider
from app.services.providers.base import FlightProvider
from app.services.providers.errors import ConfigurationError
from app.services.providers.sabre import SabreProvider

PROVIDER_ALIASES: dict[str, str] = {
    "amadeus": "amadeus",
    "sabre": "sabre",
    "sabre-bfm": "sabre",
    "bfm": "sabre",
}


def build_provider(settings: Settings, client: httpx.AsyncClient) -> FlightProvider:
    """
    Raises:
        ConfigurationError: se FLIGHT_PROVIDER non corrisponde a nessun provider.
    """
    name = PROVIDER_ALIASES.get(settings.flight_provider.strip().lower())

    if name == "amadeus":
        return AmadeusProvider(
            client,
            client_id=settings.amadeus_client_id,
            client_secret=settings.amadeus_client_secret,
            base_url=settings.amadeus_base_url,
            currency=settings.currency,
            max_results=settings.max_results,
            auth_timeout=settings.auth_timeout_seconds,
            search_timeout=settings.search_timeout_seconds,
        )
    if name == "sabre":
        return SabreProvider(
            client,
            client_id=settings.sabre_client_id,
            client_secret=settings.sabre_client_secret,
            base_url=settings.sabre_base_url,
            pcc=settings.sabre_pcc,
            currency=settings.currency,
            max_results=settings.max_results,
            auth_timeout=settings.auth_timeout_seconds,
            search_timeout=settings.search_timeout_seconds,
        )

    raise ConfigurationError(f"Unknown flight provider: {settings.flight_provider}")
