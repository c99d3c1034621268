"""
Test Response Normalizer: Amadeus, Sabre OTA e Sabre grouped itinerary.

Copertura:
  - assemblaggio Leg multi-segmento (stops, origin, destination, orari)
  - scomposizione tariffa (tasse itemizzate o total - base)
  - tolleranza ai fallimenti parziali (itinerario malformato scartato)
  - limite di 20 itinerari e id deterministici per posizione
"""
import copy
import logging

import pytest

from app.services.normalizer import MAX_ITINERARIES, carrier_name, normalize_amadeus, normalize_sabre

from factories import (
    amadeus_direct_offer,
    amadeus_offer,
    amadeus_response,
    amadeus_segment,
    sabre_direct_itinerary,
    sabre_itinerary,
    sabre_response,
    sabre_segment,
)


# ---------------------------------------------------------------------------
# Amadeus
# ---------------------------------------------------------------------------

class TestNormalizeAmadeus:

    def test_missing_container_returns_empty(self):
        assert normalize_amadeus({}) == []
        assert normalize_amadeus({"errors": [{"detail": "boom"}]}) == []
        assert normalize_amadeus(None) == []

    def test_two_chained_segments_make_one_leg(self, amadeus_connecting_raw):
        offers = normalize_amadeus(amadeus_connecting_raw)

        assert len(offers) == 1
        leg = offers[0].legs[0]
        assert leg.stops == 1
        assert leg.origin == "DEL"
        assert leg.destination == "BOM"
        assert leg.departure_time == "2026-06-01T06:00:00"
        assert leg.arrival_time == "2026-06-01T10:30:00"
        assert leg.total_duration == 270
        assert [s.duration for s in leg.segments] == [165, 90]
        assert all(s.stops == 0 for s in leg.segments)

    def test_segment_fields(self, amadeus_connecting_raw):
        seg = normalize_amadeus(amadeus_connecting_raw)[0].legs[0].segments[0]

        assert seg.departure.airport == "DEL"
        assert seg.departure.terminal == "3"
        assert seg.arrival.terminal == ""
        assert seg.airline == "AI"
        assert seg.airline_name == "AIR INDIA"    # dal dizionario carriers della risposta
        assert seg.flight_number == "501"
        assert seg.aircraft == "32N"
        assert seg.cabin == "ECONOMY"             # da travelerPricings.fareDetailsBySegment

    def test_price_tax_is_total_minus_base(self):
        raw = amadeus_response([amadeus_direct_offer(total="5432.10", base="4500.00")])

        price = normalize_amadeus(raw)[0].price

        assert price.total == pytest.approx(5432.10)
        assert price.base == pytest.approx(4500.00)
        assert price.tax == pytest.approx(932.10)
        assert price.currency == "INR"

    def test_missing_base_means_zero_tax(self):
        offer = amadeus_direct_offer(total="3000.00")
        del offer["price"]["base"]

        price = normalize_amadeus(amadeus_response([offer]))[0].price

        assert price.base == 3000.0
        assert price.tax == 0

    def test_round_trip(self):
        offer = amadeus_offer([
            ("PT2H", [amadeus_segment("DEL", "BOM", "2026-06-01T06:00:00", "2026-06-01T08:00:00", seg_id="1")]),
            ("PT2H5M", [amadeus_segment("BOM", "DEL", "2026-06-08T18:00:00", "2026-06-08T20:05:00", seg_id="2")]),
        ])

        result = normalize_amadeus(amadeus_response([offer]))[0]

        assert result.trip_type == "Round Trip"
        assert [leg.origin for leg in result.legs] == ["DEL", "BOM"]
        assert result.legs[1].total_duration == 125

    def test_one_way_trip_type_and_validating_carrier(self):
        result = normalize_amadeus(amadeus_response([amadeus_direct_offer(carrier="6E")]))[0]

        assert result.trip_type == "One Way"
        assert result.validating_carrier == "6E"
        assert result.is_demo is False

    def test_segment_duration_falls_back_to_itinerary(self):
        offer = amadeus_direct_offer()
        del offer["itineraries"][0]["segments"][0]["duration"]

        seg = normalize_amadeus(amadeus_response([offer]))[0].legs[0].segments[0]

        assert seg.duration == 130

    def test_unknown_carrier_name_falls_back_to_code(self):
        offer = amadeus_direct_offer(carrier="ZZ")

        seg = normalize_amadeus(amadeus_response([offer], carriers={}))[0].legs[0].segments[0]

        assert seg.airline_name == "ZZ"

    def test_malformed_itinerary_is_dropped(self, caplog):
        broken = amadeus_direct_offer()
        del broken["itineraries"][0]["segments"][0]["departure"]
        raw = amadeus_response([amadeus_direct_offer(), broken, amadeus_direct_offer()])

        with caplog.at_level(logging.WARNING, logger="app.services.normalizer"):
            offers = normalize_amadeus(raw)

        assert len(offers) == 2
        assert [o.id for o in offers] == ["amadeus-0", "amadeus-2"]
        assert any("amadeus-1" in msg for msg in caplog.messages)

    def test_ids_are_positional(self):
        raw = amadeus_response([amadeus_direct_offer() for _ in range(3)])

        assert [o.id for o in normalize_amadeus(raw)] == ["amadeus-0", "amadeus-1", "amadeus-2"]

    def test_bounded_to_first_20(self):
        raw = amadeus_response([amadeus_direct_offer() for _ in range(25)])

        offers = normalize_amadeus(raw)

        assert len(offers) == MAX_ITINERARIES == 20
        assert offers[-1].id == "amadeus-19"

    def test_default_currency(self):
        offer = amadeus_direct_offer()
        del offer["price"]["currency"]

        price = normalize_amadeus(amadeus_response([offer]), default_currency="EUR")[0].price

        assert price.currency == "EUR"


# ---------------------------------------------------------------------------
# Sabre OTA
# ---------------------------------------------------------------------------

class TestNormalizeSabreOta:

    def test_missing_container_returns_empty(self):
        assert normalize_sabre({}) == []
        assert normalize_sabre({"OTA_AirLowFareSearchRS": {"Errors": {}}}) == []

    def test_round_trip_legs(self, sabre_round_trip_raw):
        offers = normalize_sabre(sabre_round_trip_raw)

        assert len(offers) == 1
        offer = offers[0]
        assert offer.id == "flight-0"
        assert offer.trip_type == "Round Trip"

        outbound, inbound = offer.legs
        assert outbound.stops == 1
        assert outbound.origin == "DEL"
        assert outbound.destination == "BOM"
        assert outbound.total_duration == 165 + 105
        assert inbound.stops == 0
        assert inbound.origin == "BOM"
        assert inbound.arrival_time == "2026-06-08T20:10:00"

    def test_segment_fields(self, sabre_round_trip_raw):
        seg = normalize_sabre(sabre_round_trip_raw)[0].legs[0].segments[0]

        assert seg.airline == "AI"
        assert seg.airline_name == "Air India"
        assert seg.flight_number == "501"
        assert seg.aircraft == "320"
        assert seg.cabin == "Y"
        assert seg.departure.terminal == "3"
        assert seg.stops == 0

    def test_itemized_tax(self, sabre_round_trip_raw):
        offer = normalize_sabre(sabre_round_trip_raw)[0]

        assert offer.price.total == 6500.0
        assert offer.price.base == 5500.0
        assert offer.price.tax == 1000.0
        assert offer.price.currency == "INR"
        assert offer.validating_carrier == "AI"

    def test_tax_not_itemized_is_total_minus_base(self):
        raw = sabre_response([sabre_direct_itinerary(total="7200.50", base="6000.00", tax=None)])

        price = normalize_sabre(raw)[0].price

        assert price.tax == pytest.approx(1200.50)

    def test_single_object_instead_of_list(self):
        # Sabre a volte restituisce un oggetto al posto di una lista di un elemento
        itinerary = sabre_direct_itinerary()
        itinerary["AirItineraryPricingInfo"] = itinerary["AirItineraryPricingInfo"][0]
        raw = sabre_response(itinerary)

        offers = normalize_sabre(raw)

        assert len(offers) == 1
        assert offers[0].price.total == 6500.0

    def test_three_itineraries_one_malformed(self):
        broken = sabre_direct_itinerary()
        del broken["AirItinerary"]["OriginDestinationOptions"]
        raw = sabre_response([sabre_direct_itinerary(), broken, sabre_direct_itinerary()])

        offers = normalize_sabre(raw)

        assert len(offers) == 2
        assert [o.id for o in offers] == ["flight-0", "flight-2"]

    def test_non_numeric_fare_is_dropped(self):
        raw = sabre_response([sabre_direct_itinerary(total="n/a")])

        assert normalize_sabre(raw) == []

    def test_missing_equipment_gives_empty_aircraft(self):
        seg = sabre_segment("DEL", "BOM", "2026-06-01T06:00:00", "2026-06-01T08:00:00")
        del seg["Equipment"]
        raw = sabre_response([sabre_itinerary([[seg]])])

        assert normalize_sabre(raw)[0].legs[0].segments[0].aircraft == ""


# ---------------------------------------------------------------------------
# Sabre grouped itinerary response
# ---------------------------------------------------------------------------

_GROUPED = {
    "groupedItineraryResponse": {
        "version": "6.1.0",
        "scheduleDescs": [
            {
                "id": 1,
                "departure": {"airport": "DEL", "city": "DEL", "time": "22:30:00+05:30", "terminal": "3"},
                "arrival": {"airport": "BLR", "city": "BLR", "time": "01:15:00+05:30", "dateAdjustment": 1},
                "carrier": {"marketing": "AI", "marketingFlightNumber": 503, "equipment": {"code": "321"}},
                "elapsedTime": 165,
            },
            {
                "id": 2,
                "departure": {"airport": "BLR", "time": "06:00:00+05:30"},
                "arrival": {"airport": "BOM", "time": "07:45:00+05:30", "terminal": "2"},
                "carrier": {"marketing": "AI", "marketingFlightNumber": 640},
                "elapsedTime": 105,
            },
        ],
        "legDescs": [
            {"id": 1, "elapsedTime": 555, "schedules": [{"ref": 1}, {"ref": 2, "departureDateAdjustment": 1}]},
        ],
        "itineraryGroups": [
            {
                "groupDescription": {
                    "legDescriptions": [
                        {"departureDate": "2026-06-01", "departureLocation": "DEL", "arrivalLocation": "BOM"},
                    ]
                },
                "itineraries": [
                    {
                        "id": 1,
                        "legs": [{"ref": 1}],
                        "pricingInformation": [
                            {
                                "fare": {
                                    "validatingCarrierCode": "AI",
                                    "passengerInfoList": [
                                        {
                                            "passengerInfo": {
                                                "passengerType": "ADT",
                                                "fareComponents": [
                                                    {"segments": [
                                                        {"segment": {"bookingCode": "T", "cabinCode": "Y"}},
                                                        {"segment": {"bookingCode": "T", "cabinCode": "Y"}},
                                                    ]}
                                                ],
                                            }
                                        }
                                    ],
                                    "totalFare": {
                                        "totalPrice": 8120,
                                        "totalTaxAmount": 1120,
                                        "equivalentAmount": 7000,
                                        "currency": "INR",
                                    },
                                }
                            }
                        ],
                    },
                    {
                        "id": 2,
                        "legs": [{"ref": 99}],
                        "pricingInformation": [{"fare": {"totalFare": {"totalPrice": 1, "totalTaxAmount": 0}}}],
                    },
                ],
            }
        ],
    }
}


class TestNormalizeSabreGrouped:

    def test_grouped_format_is_supported(self):
        offers = normalize_sabre(copy.deepcopy(_GROUPED))

        # il secondo itinerario referenzia un legDesc inesistente → scartato
        assert len(offers) == 1
        offer = offers[0]
        assert offer.id == "flight-0"
        assert offer.trip_type == "One Way"
        assert offer.validating_carrier == "AI"

    def test_grouped_leg_and_dates(self):
        leg = normalize_sabre(copy.deepcopy(_GROUPED))[0].legs[0]

        assert leg.origin == "DEL"
        assert leg.destination == "BOM"
        assert leg.stops == 1
        assert leg.total_duration == 555
        assert leg.departure_time == "2026-06-01T22:30:00+05:30"
        # arrivo del primo segmento il giorno dopo (dateAdjustment)
        assert leg.segments[0].arrival.time == "2026-06-02T01:15:00+05:30"
        # secondo segmento parte il giorno dopo (departureDateAdjustment)
        assert leg.segments[1].departure.time == "2026-06-02T06:00:00+05:30"
        assert leg.arrival_time == "2026-06-02T07:45:00+05:30"

    def test_grouped_segment_fields(self):
        seg = normalize_sabre(copy.deepcopy(_GROUPED))[0].legs[0].segments[0]

        assert seg.flight_number == "503"
        assert seg.aircraft == "321"
        assert seg.cabin == "T"
        assert seg.duration == 165
        assert seg.departure.terminal == "3"

    def test_grouped_price(self):
        price = normalize_sabre(copy.deepcopy(_GROUPED))[0].price

        assert price.total == 8120
        assert price.tax == 1120
        assert price.base == 7000
        assert price.base + price.tax == price.total


def test_carrier_name_lookup_order():
    assert carrier_name("EK", {"EK": "EMIRATES"}) == "EMIRATES"
    assert carrier_name("EK") == "Emirates"
    assert carrier_name("XX") == "XX"
