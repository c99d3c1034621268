"""
Demo offer generator — SOLO per MOCK_MODE=true (demo, sviluppo frontend, test).

Genera offerte sintetiche deterministiche da una piccola tabella fissa di
compagnie e orari. Non viene mai usato come fallback in modalità reale:
le offerte prodotte hanno sempre is_demo=True.
"""
from datetime import date, datetime, timedelta

from app.services.providers.base import (
    Endpoint,
    Offer,
    Price,
    SearchQuery,
    Segment,
    build_leg,
    trip_type_for,
)

# (codice, nome, numero volo, tariffa per adulto INR, durata minuti)
_DEMO_AIRLINES = [
    ("6E", "IndiGo", "2341", 4850, 115),
    ("AI", "Air India", "657", 6200, 120),
    ("SG", "SpiceJet", "9214", 4250, 110),
    ("UK", "Vistara", "985", 7800, 125),
    ("G8", "Go First", "116", 3990, 118),
    ("I5", "AirAsia India", "760", 4100, 113),
]

_DEPARTURE_TIMES = [(5, 15), (8, 30), (11, 45), (14, 0), (17, 20), (21, 10)]

# Offerte con scalo (indice in _DEMO_AIRLINES), via Bengaluru
_CONNECTING = {1, 3}
_HUB = "BLR"

_DEMO_TAX_RATE = 0.18


def _parse_day(value: str | None) -> date:
    try:
        return date.fromisoformat(value) if value else date.today()
    except ValueError:
        return date.today()


def _iso(dt: datetime) -> str:
    return dt.isoformat(timespec="seconds")


def _segment(origin, dest, dep_terminal, arr_terminal, dep, minutes, code, name, number, aircraft) -> Segment:
    return Segment(
        departure=Endpoint(origin, dep_terminal, _iso(dep)),
        arrival=Endpoint(dest, arr_terminal, _iso(dep + timedelta(minutes=minutes))),
        airline=code,
        airline_name=name,
        flight_number=number,
        aircraft=aircraft,
        duration=minutes,
        cabin="Y",
    )


def build_demo_offers(query: SearchQuery) -> list[Offer]:
    """Sei offerte fisse (una per compagnia), con ritorno se return_date è presente."""
    origin = (query.origin or "DEL").upper()[:3]
    destination = (query.destination or "BOM").upper()[:3]
    depart_day = _parse_day(query.departure_date)
    adults = max(1, query.adults)

    offers: list[Offer] = []
    for i, (code, name, number, fare, minutes) in enumerate(_DEMO_AIRLINES):
        hh, mm = _DEPARTURE_TIMES[i]
        dep = datetime.combine(depart_day, datetime.min.time()).replace(hour=hh, minute=mm)

        if i in _CONNECTING:
            segments = [
                _segment(origin, _HUB, "T3", "T2", dep, 60, code, name, number + "1", "320"),
                _segment(_HUB, destination, "T2", "T1", dep + timedelta(minutes=90),
                         minutes - 90, code, name, number + "2", "320"),
            ]
            # la durata della tratta include la sosta a BLR
            outbound = build_leg(segments, minutes)
        else:
            terminal = "T1" if i % 2 == 0 else "T2"
            aircraft = "737" if i % 3 == 0 else "320"
            segments = [
                _segment(origin, destination, terminal, "T1", dep, minutes, code, name, number, aircraft)
            ]
            outbound = build_leg(segments)

        legs = [outbound]
        if query.return_date:
            ret_day = _parse_day(query.return_date)
            ret_dep = datetime.combine(ret_day, datetime.min.time()) + timedelta(hours=hh + 2, minutes=mm)
            legs.append(build_leg([
                _segment(destination, origin, "T1", "T1" if i % 2 == 0 else "T2",
                         ret_dep, minutes, code, name, "R" + number, "320"),
            ]))

        base = fare * adults
        tax = round(base * _DEMO_TAX_RATE)
        offers.append(
            Offer(
                id=f"flight-demo-{i}",
                trip_type=trip_type_for(legs),
                price=Price(total=float(base + tax), base=float(base), tax=float(tax), currency="INR"),
                legs=legs,
                validating_carrier=code,
                is_demo=True,
            )
        )

    return offers
