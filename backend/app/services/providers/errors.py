"""
Tassonomia errori del Flight Provider Layer.

Tutte le eccezioni derivano da FlightSearchError: il layer HTTP intercetta
solo la radice e risponde 500 con {"error": str(exc)}.

  ConfigurationError → credenziali/provider mancanti (fatale, nessun retry)
  AuthFailure        → endpoint token ha rifiutato le credenziali o timeout
  TransportError     → timeout o HTTP non-2xx dall'endpoint di ricerca
  EmptyResultError   → il provider ha risposto ma senza itinerari utilizzabili
  PartialParseError  → una singola offerta non è leggibile (scartata, mai propagata)
"""
import httpx


class FlightSearchError(Exception):
    """Radice di tutti gli errori di ricerca voli."""


class ConfigurationError(FlightSearchError):
    pass


class AuthFailure(FlightSearchError):
    pass


class TransportError(FlightSearchError):

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class EmptyResultError(FlightSearchError):
    pass


class PartialParseError(FlightSearchError):
    pass


def provider_message(exc: Exception) -> str:
    """
    Estrae il messaggio più utile dall'errore di un provider.

    Per le risposte HTTP prova, nell'ordine, i campi usati da Amadeus e Sabre:
    errors[0].detail, error_description, error, message. Altrimenti la status line.
    """
    if isinstance(exc, httpx.HTTPStatusError):
        resp = exc.response
        try:
            body = resp.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            errors = body.get("errors")
            if isinstance(errors, list) and errors and isinstance(errors[0], dict):
                detail = errors[0].get("detail") or errors[0].get("title")
                if detail:
                    return str(detail)
            for key in ("error_description", "error", "message"):
                if body.get(key):
                    return str(body[key])
        return f"HTTP {resp.status_code} {resp.reason_phrase}".strip()
    if isinstance(exc, httpx.TimeoutException):
        return f"timeout ({type(exc).__name__})"
    return str(exc) or type(exc).__name__
