from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


# ---------------------------------------------------------------------------
# Richiesta di ricerca (POST body JSON oppure GET query string)
# ---------------------------------------------------------------------------

class SearchIn(BaseModel):
    """
    Campi in camelCase come li invia il frontend; accettati anche in snake_case.
    Date e codici non vengono validati: li rifiuterà il provider se malformati.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    origin: str = ""
    destination: str = ""
    departure_date: str = ""
    return_date: str | None = None
    adults: int | None = Field(None, ge=0)
    passengers: int | None = Field(None, ge=0)   # campo generico, usato se manca adults
    children: int = Field(0, ge=0)
    infants: int = Field(0, ge=0)
    travel_class: str = Field(
        "ECONOMY",
        validation_alias=AliasChoices("travelClass", "cabinClass", "travel_class", "cabin_class"),
    )
    trip_type: str | None = None                 # informativo: conta solo return_date

    @field_validator("adults", "passengers", mode="before")
    @classmethod
    def blank_to_none(cls, value):
        return None if value == "" else value

    @field_validator("children", "infants", mode="before")
    @classmethod
    def blank_to_zero(cls, value):
        return 0 if value in ("", None) else value

    @field_validator("return_date", mode="before")
    @classmethod
    def blank_return_date(cls, value):
        return value or None


# ---------------------------------------------------------------------------
# Offerta normalizzata (strutture nidificate, output in camelCase)
# ---------------------------------------------------------------------------

class _CamelOut(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class EndpointOut(_CamelOut):
    airport: str
    terminal: str
    time: str


class SegmentOut(_CamelOut):
    departure: EndpointOut
    arrival: EndpointOut
    airline: str
    airline_name: str
    flight_number: str
    aircraft: str
    duration: int
    stops: int
    cabin: str


class LegOut(_CamelOut):
    segments: list[SegmentOut]
    total_duration: int
    origin: str
    destination: str
    departure_time: str
    arrival_time: str
    stops: int


class PriceOut(_CamelOut):
    total: float
    base: float
    tax: float
    currency: str


class OfferOut(_CamelOut):
    id: str
    trip_type: str = Field(alias="type")    # "One Way" | "Round Trip"
    price: PriceOut
    legs: list[LegOut]
    validating_carrier: str
    is_demo: bool = False


# ---------------------------------------------------------------------------
# Aeroporti / errori
# ---------------------------------------------------------------------------

class AirportSuggestionOut(BaseModel):
    name: str
    code: str
    city: str


class ErrorOut(BaseModel):
    error: str
