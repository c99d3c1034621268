"""
Response Normalizer — dai formati grezzi dei provider al modello Offer canonico.

Formati supportati:
  Amadeus  → {"data": [flight-offer, ...], "dictionaries": {"carriers": {...}}}
  Sabre    → {"OTA_AirLowFareSearchRS": {"PricedItineraries": {"PricedItinerary": [...]}}}
  Sabre    → {"groupedItineraryResponse": {scheduleDescs, legDescs, itineraryGroups}}

Regole comuni:
  - contenitore principale assente → lista vuota (il chiamante decide se è un errore)
  - al massimo MAX_ITINERARIES itinerari grezzi vengono letti
  - id offerta deterministico per posizione: "<prefisso>-<indice grezzo>"
  - un itinerario con campi annidati mancanti viene loggato e scartato,
    senza far fallire l'intera risposta (PartialParseError)

Le letture annidate passano da _require(): ogni livello viene verificato prima
di scendere, così l'errore riporta il percorso mancante.
"""
import logging
from collections.abc import Callable
from datetime import date, timedelta

from app.services.providers.base import (
    Endpoint,
    Leg,
    Offer,
    Price,
    Segment,
    build_leg,
    trip_type_for,
)
from app.services.providers.errors import PartialParseError
from app.utils.duration import as_minutes, parse_duration_minutes

logger = logging.getLogger(__name__)

MAX_ITINERARIES = 20

AIRLINE_NAMES: dict[str, str] = {
    "AI": "Air India", "6E": "IndiGo", "SG": "SpiceJet", "UK": "Vistara",
    "G8": "Go First", "I5": "AirAsia India", "IX": "Air India Express",
    "EK": "Emirates", "QR": "Qatar Airways", "EY": "Etihad Airways",
    "BA": "British Airways", "LH": "Lufthansa", "AF": "Air France",
    "SQ": "Singapore Airlines", "TG": "Thai Airways", "MH": "Malaysia Airlines",
    "CX": "Cathay Pacific", "TK": "Turkish Airlines", "KL": "KLM",
    "AA": "American Airlines", "UA": "United Airlines", "DL": "Delta Air Lines",
}


# ---------------------------------------------------------------------------
# Accesso sicuro alla struttura grezza
# ---------------------------------------------------------------------------

def _require(node, *path):
    """Scende lungo path (chiavi o indici) verificando ogni livello."""
    current = node
    for depth, key in enumerate(path):
        if isinstance(key, int):
            ok = isinstance(current, list) and -len(current) <= key < len(current)
        else:
            ok = isinstance(current, dict) and current.get(key) is not None
        if not ok:
            missing = ".".join(str(k) for k in path[: depth + 1])
            raise PartialParseError(f"campo mancante: {missing}")
        current = current[key]
    return current


def _as_list(value) -> list:
    """Sabre a volte restituisce un oggetto singolo al posto di una lista di uno."""
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def _require_list(node, *path) -> list:
    items = _as_list(_require(node, *path))
    if not items:
        raise PartialParseError(f"lista vuota: {'.'.join(str(k) for k in path)}")
    return items


def _to_float(value, what: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise PartialParseError(f"importo non numerico in {what}: {value!r}") from None


def carrier_name(code: str, dictionary: dict | None = None) -> str:
    """Nome compagnia: dizionario del provider → tabella statica → codice stesso."""
    if dictionary and dictionary.get(code):
        return str(dictionary[code])
    return AIRLINE_NAMES.get(code, code)


def _normalize_each(items: list, prefix: str, parse_one: Callable[[dict, str], Offer]) -> list[Offer]:
    offers: list[Offer] = []
    for index, item in enumerate(items[:MAX_ITINERARIES]):
        offer_id = f"{prefix}-{index}"
        try:
            offers.append(parse_one(item, offer_id))
        except (PartialParseError, KeyError, TypeError, ValueError, AttributeError) as exc:
            logger.warning("Itinerario %s scartato: %s: %s", offer_id, type(exc).__name__, exc)
    return offers


# ---------------------------------------------------------------------------
# Amadeus
# ---------------------------------------------------------------------------

def normalize_amadeus(raw: dict, default_currency: str = "INR") -> list[Offer]:
    """Normalizza una risposta Amadeus /v2/shopping/flight-offers."""
    data = raw.get("data") if isinstance(raw, dict) else None
    if not isinstance(data, list):
        return []

    dictionaries = raw.get("dictionaries") or {}
    carriers = dictionaries.get("carriers") if isinstance(dictionaries, dict) else None

    return _normalize_each(
        data,
        "amadeus",
        lambda item, offer_id: _parse_amadeus_offer(item, offer_id, carriers or {}, default_currency),
    )


def _amadeus_cabins(item: dict) -> dict[str, str]:
    """segmentId → cabina, dal primo traveler (uguale per tutti i passeggeri)."""
    pricings = item.get("travelerPricings") or []
    if not pricings or not isinstance(pricings[0], dict):
        return {}
    return {
        str(fd.get("segmentId")): fd.get("cabin") or ""
        for fd in pricings[0].get("fareDetailsBySegment") or []
        if isinstance(fd, dict)
    }


def _parse_amadeus_offer(item: dict, offer_id: str, carriers: dict, default_currency: str) -> Offer:
    cabins = _amadeus_cabins(item)
    legs = [
        _parse_amadeus_itinerary(itinerary, carriers, cabins)
        for itinerary in _require_list(item, "itineraries")
    ]

    price = item.get("price") or {}
    total = _to_float(price.get("total") or 0, "price.total")
    base = _to_float(price.get("base") or total, "price.base")

    vac = item.get("validatingAirlineCodes") or []
    return Offer(
        id=offer_id,
        trip_type=trip_type_for(legs),
        price=Price(
            total=total,
            base=base,
            tax=round(total - base, 2),
            currency=price.get("currency") or default_currency,
        ),
        legs=legs,
        validating_carrier=str(vac[0]) if vac else "",
    )


def _parse_amadeus_itinerary(itinerary: dict, carriers: dict, cabins: dict[str, str]) -> Leg:
    itinerary_duration = itinerary.get("duration")
    segments: list[Segment] = []
    for seg in _require_list(itinerary, "segments"):
        code = str(_require(seg, "carrierCode"))
        aircraft = seg.get("aircraft") or {}
        segments.append(
            Segment(
                departure=Endpoint(
                    airport=_require(seg, "departure", "iataCode"),
                    terminal=str(seg["departure"].get("terminal") or ""),
                    time=_require(seg, "departure", "at"),
                ),
                arrival=Endpoint(
                    airport=_require(seg, "arrival", "iataCode"),
                    terminal=str(seg["arrival"].get("terminal") or ""),
                    time=_require(seg, "arrival", "at"),
                ),
                airline=code,
                airline_name=carrier_name(code, carriers),
                flight_number=str(seg.get("number") or ""),
                aircraft=str(aircraft.get("code") or ""),
                duration=parse_duration_minutes(seg.get("duration") or itinerary_duration),
                cabin=cabins.get(str(seg.get("id"))) or seg.get("cabin") or "",
            )
        )

    total = parse_duration_minutes(itinerary_duration) if itinerary_duration else None
    return build_leg(segments, total)


# ---------------------------------------------------------------------------
# Sabre (OTA + Grouped Itinerary Response)
# ---------------------------------------------------------------------------

def normalize_sabre(raw: dict, default_currency: str = "INR") -> list[Offer]:
    """Normalizza una risposta Sabre Bargain Finder Max, in formato OTA o grouped."""
    if not isinstance(raw, dict):
        return []
    ota = raw.get("OTA_AirLowFareSearchRS")
    if isinstance(ota, dict):
        return _normalize_ota(ota, default_currency)
    grouped = raw.get("groupedItineraryResponse")
    if isinstance(grouped, dict):
        return _normalize_grouped(grouped, default_currency)
    return []


def _normalize_ota(rs: dict, default_currency: str) -> list[Offer]:
    priced = rs.get("PricedItineraries")
    if not isinstance(priced, dict):
        return []
    items = _as_list(priced.get("PricedItinerary"))
    return _normalize_each(
        items, "flight", lambda item, offer_id: _parse_ota_itinerary(item, offer_id, default_currency)
    )


def _parse_ota_itinerary(item: dict, offer_id: str, default_currency: str) -> Offer:
    options = _require_list(item, "AirItinerary", "OriginDestinationOptions", "OriginDestinationOption")
    legs = [_parse_ota_option(option) for option in options]

    pricing = _require_list(item, "AirItineraryPricingInfo")[0]
    fare = _require(pricing, "ItinTotalFare")
    total = _to_float(_require(fare, "TotalFare", "Amount"), "TotalFare.Amount")
    base = _to_float(_require(fare, "BaseFare", "Amount"), "BaseFare.Amount")

    taxes = _as_list((fare.get("Taxes") or {}).get("Tax"))
    if taxes and isinstance(taxes[0], dict) and taxes[0].get("Amount") is not None:
        tax = _to_float(taxes[0]["Amount"], "Taxes.Tax.Amount")
    else:
        tax = round(total - base, 2)

    validating = ((pricing.get("TPA_Extensions") or {}).get("ValidatingCarrier") or {})
    return Offer(
        id=offer_id,
        trip_type=trip_type_for(legs),
        price=Price(
            total=total,
            base=base,
            tax=tax,
            currency=fare["TotalFare"].get("CurrencyCode") or default_currency,
        ),
        legs=legs,
        validating_carrier=str(validating.get("Code") or "") if isinstance(validating, dict) else "",
    )


def _parse_ota_option(option: dict) -> Leg:
    option_elapsed = option.get("ElapsedTime")
    segments: list[Segment] = []
    for seg in _require_list(option, "FlightSegment"):
        code = str(_require(seg, "MarketingAirline", "Code"))
        equipment = _as_list(seg.get("Equipment"))
        aircraft = equipment[0].get("AirEquipType") if equipment and isinstance(equipment[0], dict) else ""
        segments.append(
            Segment(
                departure=Endpoint(
                    airport=_require(seg, "DepartureAirport", "LocationCode"),
                    terminal=str(seg["DepartureAirport"].get("TerminalID") or ""),
                    time=_require(seg, "DepartureDateTime"),
                ),
                arrival=Endpoint(
                    airport=_require(seg, "ArrivalAirport", "LocationCode"),
                    terminal=str(seg["ArrivalAirport"].get("TerminalID") or ""),
                    time=_require(seg, "ArrivalDateTime"),
                ),
                airline=code,
                airline_name=carrier_name(code),
                flight_number=str(seg.get("FlightNumber") or ""),
                aircraft=str(aircraft or ""),
                duration=as_minutes(seg.get("ElapsedTime") or option_elapsed),
                cabin=seg.get("ResBookDesigCode") or "",
            )
        )
    return build_leg(segments)


def _normalize_grouped(gir: dict, default_currency: str) -> list[Offer]:
    """
    Grouped Itinerary Response: segmenti e tratte sono descritti una sola volta
    (scheduleDescs, legDescs) e referenziati per id dagli itinerari.
    """
    groups = gir.get("itineraryGroups")
    if not isinstance(groups, list):
        return []

    schedules = {s.get("id"): s for s in gir.get("scheduleDescs") or [] if isinstance(s, dict)}
    leg_descs = {d.get("id"): d for d in gir.get("legDescs") or [] if isinstance(d, dict)}

    items: list[tuple[dict, dict]] = []
    for group in groups:
        if not isinstance(group, dict):
            continue
        for itinerary in group.get("itineraries") or []:
            items.append((group, itinerary))

    return _normalize_each(
        items,
        "flight",
        lambda pair, offer_id: _parse_grouped_itinerary(
            pair[0], pair[1], offer_id, schedules, leg_descs, default_currency
        ),
    )


def _shift(day: str, days) -> date:
    try:
        return date.fromisoformat(day) + timedelta(days=int(days or 0))
    except (TypeError, ValueError):
        raise PartialParseError(f"data non valida: {day!r}") from None


def _parse_grouped_itinerary(
    group: dict,
    itinerary: dict,
    offer_id: str,
    schedules: dict,
    leg_descs: dict,
    default_currency: str,
) -> Offer:
    leg_dates = _require_list(group, "groupDescription", "legDescriptions")
    pricing = _require_list(itinerary, "pricingInformation")[0]
    fare = _require(pricing, "fare")

    # Cabina per segmento, nell'ordine di volo su tutto l'itinerario
    booking_codes: list[str] = []
    for pax in _as_list(fare.get("passengerInfoList"))[:1]:
        for component in _as_list((pax.get("passengerInfo") or {}).get("fareComponents")):
            for s in _as_list(component.get("segments")):
                seg_info = s.get("segment") or {}
                booking_codes.append(seg_info.get("bookingCode") or seg_info.get("cabinCode") or "")

    legs: list[Leg] = []
    position = 0
    for leg_index, leg_ref in enumerate(_require_list(itinerary, "legs")):
        leg_desc = leg_descs.get(_require(leg_ref, "ref"))
        if leg_desc is None:
            raise PartialParseError(f"legDesc {leg_ref.get('ref')} non trovato")
        if leg_index >= len(leg_dates):
            raise PartialParseError(f"data mancante per la tratta {leg_index}")
        leg_day = _require(leg_dates[leg_index], "departureDate")

        segments: list[Segment] = []
        for schedule_ref in _require_list(leg_desc, "schedules"):
            schedule = schedules.get(_require(schedule_ref, "ref"))
            if schedule is None:
                raise PartialParseError(f"scheduleDesc {schedule_ref.get('ref')} non trovato")

            dep_day = _shift(leg_day, schedule_ref.get("departureDateAdjustment"))
            dep = _require(schedule, "departure")
            arr = _require(schedule, "arrival")
            arr_day = dep_day + timedelta(days=int(arr.get("dateAdjustment") or 0))
            carrier = _require(schedule, "carrier")
            code = str(_require(carrier, "marketing"))

            segments.append(
                Segment(
                    departure=Endpoint(
                        airport=_require(dep, "airport"),
                        terminal=str(dep.get("terminal") or ""),
                        time=f"{dep_day.isoformat()}T{_require(dep, 'time')}",
                    ),
                    arrival=Endpoint(
                        airport=_require(arr, "airport"),
                        terminal=str(arr.get("terminal") or ""),
                        time=f"{arr_day.isoformat()}T{_require(arr, 'time')}",
                    ),
                    airline=code,
                    airline_name=carrier_name(code),
                    flight_number=str(carrier.get("marketingFlightNumber") or ""),
                    aircraft=str((carrier.get("equipment") or {}).get("code") or ""),
                    duration=as_minutes(schedule.get("elapsedTime")),
                    cabin=booking_codes[position] if position < len(booking_codes) else "",
                )
            )
            position += 1

        elapsed = leg_desc.get("elapsedTime")
        legs.append(build_leg(segments, as_minutes(elapsed) if elapsed is not None else None))

    total_fare = _require(fare, "totalFare")
    total = _to_float(_require(total_fare, "totalPrice"), "totalFare.totalPrice")
    tax_amount = total_fare.get("totalTaxAmount")
    base_amount = total_fare.get("equivalentAmount", total_fare.get("baseFareAmount"))
    if tax_amount is not None:
        tax = _to_float(tax_amount, "totalFare.totalTaxAmount")
        base = _to_float(base_amount, "totalFare.baseFareAmount") if base_amount is not None else round(total - tax, 2)
    elif base_amount is not None:
        base = _to_float(base_amount, "totalFare.baseFareAmount")
        tax = round(total - base, 2)
    else:
        raise PartialParseError("totalFare senza base né tasse")

    return Offer(
        id=offer_id,
        trip_type=trip_type_for(legs),
        price=Price(
            total=total,
            base=base,
            tax=tax,
            currency=total_fare.get("currency") or default_currency,
        ),
        legs=legs,
        validating_carrier=str(fare.get("validatingCarrierCode") or ""),
    )
