from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from fuel_tracker.services.types import (
    Favorite,
    FuelKind,
    GeocodeResult,
    HistorySummary,
    ImportResult,
    Preferences,
    PriceQuote,
    StorageInfo,
    TripRecord,
    TripResult,
)


class Coordinate(BaseModel):
    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)


class TripRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    departure: str = Field(max_length=300)
    destination: str = Field(max_length=300)
    # Missing consumption or fuel kind falls back to the saved preferences.
    consumption: float | None = None
    fuel_kind: FuelKind | None = None
    departure_coordinate: Coordinate | None = None
    destination_coordinate: Coordinate | None = None


class PriceQuoteResponse(BaseModel):
    fuel_kind: FuelKind
    display_name: str
    amount: float
    source_name: str
    retrieved_at: datetime

    @classmethod
    def from_quote(cls, quote: PriceQuote) -> PriceQuoteResponse:
        return cls(
            fuel_kind=quote.fuel_kind,
            display_name=quote.fuel_kind.display_name,
            amount=round(quote.amount, 3),
            source_name=quote.source_name,
            retrieved_at=quote.retrieved_at,
        )


class TripRecordResponse(BaseModel):
    departure_label: str
    destination_label: str
    distance_km: float
    duration_min: float
    consumption_l_per_100km: float
    fuel_kind: FuelKind
    price_per_liter: float
    fuel_liters: float
    cost_total: float
    co2_kg: float
    created_at: datetime

    @classmethod
    def from_record(cls, record: TripRecord) -> TripRecordResponse:
        return cls.model_validate(record.to_dict())


class TripResponse(BaseModel):
    trip: TripRecordResponse
    start: Coordinate
    finish: Coordinate
    route_geojson: dict
    price: PriceQuoteResponse
    departure_match: str | None = None
    destination_match: str | None = None

    @classmethod
    def from_result(cls, result: TripResult) -> TripResponse:
        return cls(
            trip=TripRecordResponse.from_record(result.record),
            start=Coordinate(
                latitude=round(result.departure.latitude, 6),
                longitude=round(result.departure.longitude, 6),
            ),
            finish=Coordinate(
                latitude=round(result.destination.latitude, 6),
                longitude=round(result.destination.longitude, 6),
            ),
            route_geojson={
                "type": "LineString",
                "coordinates": [list(coord) for coord in result.route.coordinates],
            },
            price=PriceQuoteResponse.from_quote(result.quote),
            departure_match=result.departure_match,
            destination_match=result.destination_match,
        )


class HistorySummaryResponse(BaseModel):
    trip_count: int
    total_distance_km: float
    total_cost: float
    average_cost_per_km: float

    @classmethod
    def from_summary(cls, summary: HistorySummary) -> HistorySummaryResponse:
        return cls(
            trip_count=summary.trip_count,
            total_distance_km=summary.total_distance_km,
            total_cost=summary.total_cost,
            average_cost_per_km=summary.average_cost_per_km,
        )


class HistoryResponse(BaseModel):
    trips: list[TripRecordResponse]
    summary: HistorySummaryResponse


class SuggestionResponse(BaseModel):
    label: str
    country_code: str
    latitude: float
    longitude: float

    @classmethod
    def from_result(cls, result: GeocodeResult) -> SuggestionResponse:
        return cls(
            label=result.label,
            country_code=result.country_code,
            latitude=result.point.latitude,
            longitude=result.point.longitude,
        )


class FavoriteRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    departure: str = Field(max_length=300)
    destination: str = Field(max_length=300)
    consumption: float | None = None
    fuel_kind: FuelKind | None = None


class FavoriteResponse(BaseModel):
    id: int | None
    departure_label: str
    destination_label: str
    consumption_l_per_100km: float | None
    fuel_kind: FuelKind | None
    added_at: datetime

    @classmethod
    def from_favorite(cls, favorite: Favorite) -> FavoriteResponse:
        return cls.model_validate(favorite.to_dict())


class PreferencesUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    default_fuel_kind: FuelKind | None = None
    default_consumption: float | None = None
    language: str | None = Field(default=None, max_length=5)
    units: str | None = Field(default=None, max_length=10)


class PreferencesResponse(BaseModel):
    default_fuel_kind: FuelKind
    default_consumption: float | None
    language: str
    units: str

    @classmethod
    def from_preferences(cls, preferences: Preferences) -> PreferencesResponse:
        return cls.model_validate(preferences.to_dict())


class StorageInfoResponse(BaseModel):
    trip_count: int
    favorite_count: int
    size_bytes: int
    formatted_size: str

    @classmethod
    def from_info(cls, info: StorageInfo) -> StorageInfoResponse:
        return cls(
            trip_count=info.trip_count,
            favorite_count=info.favorite_count,
            size_bytes=info.size_bytes,
            formatted_size=info.formatted_size,
        )


class ImportResponse(BaseModel):
    trips: int | None
    favorites: int | None
    preferences: bool

    @classmethod
    def from_result(cls, result: ImportResult) -> ImportResponse:
        return cls(trips=result.trips, favorites=result.favorites, preferences=result.preferences)
