"""
Token Manager — OAuth2 client-credentials con cache del bearer token.

Stati:
  Unauthenticated → nessun token in cache (avvio o dopo un fallimento)
  Authenticated   → token + scadenza assoluta (clock monotonic)

acquire() restituisce il token in cache finché now < expires_at, dove
expires_at = istante di emissione + expires_in - 60s di margine.
Altrimenti prova le AuthStrategy nell'ordine configurato e memorizza il primo
token ottenuto.

Il lock asincrono rende atomico il check-and-set di token/scadenza: i task
concorrenti attendono il primo e poi trovano il token in cache.

Quirk Sabre: l'header Basic va provato prima con doppia codifica base64
(b64(b64(id):b64(secret))) e poi con codifica singola (b64(id:secret)).
"""
import asyncio
import base64
import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

import httpx

from app.services.providers.base import try_in_order
from app.services.providers.errors import AuthFailure, ConfigurationError, provider_message

logger = logging.getLogger(__name__)

# Margine prima della scadenza dichiarata dal provider
EXPIRY_MARGIN_SECONDS = 60


@dataclass(frozen=True)
class AuthStrategy:
    """Un modo di presentare le credenziali all'endpoint token."""
    label: str
    form: dict[str, str] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)


def _b64(value: str) -> str:
    return base64.b64encode(value.encode("utf-8")).decode("ascii")


def form_credentials(client_id: str, client_secret: str) -> list[AuthStrategy]:
    """Amadeus: client_id/client_secret nel body form-encoded."""
    return [
        AuthStrategy(
            label="form credentials",
            form={"client_id": client_id, "client_secret": client_secret},
        )
    ]


def sabre_basic_credentials(client_id: str, client_secret: str) -> list[AuthStrategy]:
    """Sabre: Basic con doppia codifica, poi Basic standard."""
    double = _b64(f"{_b64(client_id)}:{_b64(client_secret)}")
    single = _b64(f"{client_id}:{client_secret}")
    return [
        AuthStrategy(label="Double Base64", headers={"Authorization": f"Basic {double}"}),
        AuthStrategy(label="Single Base64", headers={"Authorization": f"Basic {single}"}),
    ]


class TokenManager:

    def __init__(
        self,
        client: httpx.AsyncClient,
        token_url: str,
        client_id: str,
        client_secret: str,
        strategies: Callable[[str, str], Sequence[AuthStrategy]],
        provider_name: str,
        timeout: float = 15,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.client = client
        self.token_url = token_url
        self.client_id = client_id
        self.client_secret = client_secret
        self.strategies = strategies
        self.provider_name = provider_name
        self.timeout = timeout
        self._clock = clock

        self._token: str | None = None
        self._expires_at: float = 0.0
        self._lock = asyncio.Lock()

    @property
    def is_authenticated(self) -> bool:
        return self._token is not None and self._clock() < self._expires_at

    def invalidate(self) -> None:
        """Torna allo stato Unauthenticated (il prossimo acquire() rifà l'auth)."""
        self._token = None
        self._expires_at = 0.0

    async def acquire(self) -> str:
        """
        Restituisce un bearer token valido, usando la cache se disponibile.

        Raises:
            ConfigurationError: client id o secret mancanti.
            AuthFailure: tutte le strategie sono fallite (messaggio dell'ultima).
        """
        async with self._lock:
            if self._token and self._clock() < self._expires_at:
                return self._token

            if not self.client_id or not self.client_secret:
                raise ConfigurationError(
                    f"{self.provider_name} client id or client secret is missing"
                )

            try:
                token, expires_in = await try_in_order(
                    self.strategies(self.client_id, self.client_secret),
                    self._request_token,
                    f"{self.provider_name} auth",
                )
            except Exception as exc:
                self.invalidate()
                msg = provider_message(exc)
                logger.error("%s auth error: %s", self.provider_name, msg)
                raise AuthFailure(f"{self.provider_name} auth failed: {msg}") from exc

            self._token = token
            self._expires_at = self._clock() + expires_in - EXPIRY_MARGIN_SECONDS
            return token

    async def _request_token(self, strategy: AuthStrategy) -> tuple[str, int]:
        resp = await self.client.post(
            self.token_url,
            data={"grant_type": "client_credentials", **strategy.form},
            headers={"Content-Type": "application/x-www-form-urlencoded", **strategy.headers},
            timeout=self.timeout,
        )
        resp.raise_for_status()
        data = resp.json()
        token: str = data["access_token"]
        expires_in = int(data.get("expires_in", 1799))
        logger.info("%s auth OK (%s)", self.provider_name, strategy.label)
        return token, expires_in
