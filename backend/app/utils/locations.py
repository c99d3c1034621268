"""
Risoluzione località → codice IATA e lista statica degli aeroporti più richiesti.

Usate da:
  - Search Orchestrator (origin/destination in testo libero)
  - Endpoint /api/flights/suggestions
"""
import re

# Città → aeroporto principale (chiavi già lowercase)
CITY_CODES: dict[str, str] = {
    "delhi": "DEL", "new delhi": "DEL",
    "mumbai": "BOM", "bombay": "BOM",
    "bangalore": "BLR", "bengaluru": "BLR",
    "hyderabad": "HYD",
    "chennai": "MAA", "madras": "MAA",
    "kolkata": "CCU", "calcutta": "CCU",
    "pune": "PNQ",
    "ahmedabad": "AMD",
    "goa": "GOI",
    "kochi": "COK", "cochin": "COK",
    "jaipur": "JAI",
    "dubai": "DXB",
    "london": "LHR",
    "new york": "JFK",
    "singapore": "SIN",
    "bangkok": "BKK",
}

POPULAR_AIRPORTS: list[dict[str, str]] = [
    {"name": "Indira Gandhi International Airport", "code": "DEL", "city": "New Delhi"},
    {"name": "Chhatrapati Shivaji Maharaj International Airport", "code": "BOM", "city": "Mumbai"},
    {"name": "Kempegowda International Airport", "code": "BLR", "city": "Bangalore"},
    {"name": "Rajiv Gandhi International Airport", "code": "HYD", "city": "Hyderabad"},
    {"name": "Chennai International Airport", "code": "MAA", "city": "Chennai"},
    {"name": "Netaji Subhas Chandra Bose International Airport", "code": "CCU", "city": "Kolkata"},
    {"name": "Pune Airport", "code": "PNQ", "city": "Pune"},
    {"name": "Sardar Vallabhbhai Patel International Airport", "code": "AMD", "city": "Ahmedabad"},
    {"name": "Goa International Airport", "code": "GOI", "city": "Goa"},
    {"name": "Cochin International Airport", "code": "COK", "city": "Kochi"},
    {"name": "Jaipur International Airport", "code": "JAI", "city": "Jaipur"},
    {"name": "Biju Patnaik International Airport", "code": "BBI", "city": "Bhubaneswar"},
    {"name": "Dubai International Airport", "code": "DXB", "city": "Dubai"},
    {"name": "London Heathrow Airport", "code": "LHR", "city": "London"},
    {"name": "John F. Kennedy International Airport", "code": "JFK", "city": "New York"},
    {"name": "Singapore Changi Airport", "code": "SIN", "city": "Singapore"},
    {"name": "Bangkok Suvarnabhumi Airport", "code": "BKK", "city": "Bangkok"},
    {"name": "Kuala Lumpur International Airport", "code": "KUL", "city": "Kuala Lumpur"},
    {"name": "Frankfurt Airport", "code": "FRA", "city": "Frankfurt"},
    {"name": "Paris Charles de Gaulle Airport", "code": "CDG", "city": "Paris"},
]

_PAREN_CODE_RE = re.compile(r"\(([A-Z]{3})\)")
_NON_LETTERS_RE = re.compile(r"[^A-Z]")


def resolve_iata(text: str | None) -> str:
    """
    Converte testo libero in codice IATA, senza mai fallire.

    Ordine:
      1. codice tra parentesi, es. "Some City (XYZ)" → "XYZ"
      2. tabella CITY_CODES, es. "New Delhi" → "DEL"
      3. fallback: maiuscolo, solo lettere, primi 3 caratteri
         (può restituire un codice corto o senza senso: lo rifiuterà il provider)
    """
    if not text:
        return ""
    match = _PAREN_CODE_RE.search(text)
    if match:
        return match.group(1)

    code = CITY_CODES.get(text.lower().strip())
    if code:
        return code
    return _NON_LETTERS_RE.sub("", text.upper())[:3]


def suggest_airports(query: str | None) -> list[dict[str, str]]:
    """To get airports matching the query (substring su città, codice o nome)."""
    q = (query or "").lower()
    if len(q) < 2:
        return []
    return [
        a for a in POPULAR_AIRPORTS
        if q in a["city"].lower() or q in a["code"].lower() or q in a["name"].lower()
    ]
