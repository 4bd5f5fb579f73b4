from __future__ import annotations

import json
from typing import Any

from django.http import HttpRequest, HttpResponse, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods, require_POST
from pydantic import ValidationError as PayloadValidationError

from fuel_tracker.exceptions import (
    AddressNotFoundError,
    ExternalServiceError,
    FavoriteNotFoundError,
    HistoryIndexError,
    NoRouteFoundError,
    ValidationError,
)
from fuel_tracker.schemas import (
    FavoriteRequest,
    FavoriteResponse,
    HistoryResponse,
    HistorySummaryResponse,
    ImportResponse,
    PreferencesResponse,
    PreferencesUpdate,
    PriceQuoteResponse,
    StorageInfoResponse,
    SuggestionResponse,
    TripRecordResponse,
    TripRequest,
    TripResponse,
)
from fuel_tracker.services.backup import DataBackup
from fuel_tracker.services.calculator import TripCalculator
from fuel_tracker.services.favorites import FavoritesStore
from fuel_tracker.services.history import HistoryStore
from fuel_tracker.services.preferences import PreferencesStore
from fuel_tracker.services.types import GeoPoint

_trip_calculator: TripCalculator | None = None


def get_trip_calculator() -> TripCalculator:
    global _trip_calculator
    if _trip_calculator is None:
        _trip_calculator = TripCalculator()
    return _trip_calculator


def get_history_store() -> HistoryStore:
    return HistoryStore()


@require_GET
def health_view(_: HttpRequest) -> HttpResponse:
    summary = get_history_store().summary()
    return JsonResponse({"status": "ok", "history": {"trips": summary.trip_count}})


@require_GET
def fuel_price_view(_: HttpRequest, fuel_kind: str) -> HttpResponse:
    try:
        quote = get_trip_calculator().price_resolver.resolve(fuel_kind)
    except ValidationError as exc:
        return _error_response("validation_error", str(exc), status=400)

    return JsonResponse(PriceQuoteResponse.from_quote(quote).model_dump(mode="json"), status=200)


@require_GET
def suggestions_view(request: HttpRequest) -> HttpResponse:
    query = request.GET.get("q", "")
    try:
        results = get_trip_calculator().geocoding_client.suggest(query)
    except ExternalServiceError as exc:
        return _error_response("upstream_error", str(exc), status=502)

    return JsonResponse(
        {"suggestions": [SuggestionResponse.from_result(result).model_dump() for result in results]}
    )


@csrf_exempt
@require_http_methods(["GET", "POST"])
def trips_view(request: HttpRequest) -> HttpResponse:
    if request.method == "GET":
        return _history_response()
    return _create_trip(request)


@csrf_exempt
@require_http_methods(["DELETE"])
def trip_detail_view(_: HttpRequest, index: int) -> HttpResponse:
    try:
        get_history_store().remove_at(index)
    except HistoryIndexError as exc:
        return _error_response("not_found", str(exc), status=404)

    return _history_response()


@require_GET
def export_data_view(_: HttpRequest) -> HttpResponse:
    response = HttpResponse(DataBackup().export_data(), content_type="application/json")
    response["Content-Disposition"] = 'attachment; filename="fueltracker_export.json"'
    return response


@csrf_exempt
@require_POST
def import_data_view(request: HttpRequest) -> HttpResponse:
    try:
        result = DataBackup().import_data(request.body.decode("utf-8"))
    except (ValidationError, UnicodeDecodeError) as exc:
        return _error_response("invalid_import", str(exc), status=400)

    return JsonResponse({"imported": ImportResponse.from_result(result).model_dump()}, status=200)


@csrf_exempt
@require_http_methods(["GET", "POST"])
def favorites_view(request: HttpRequest) -> HttpResponse:
    store = FavoritesStore()
    if request.method == "GET":
        return _favorites_response(store)

    payload = _parse_json_payload(request)
    if isinstance(payload, JsonResponse):
        return payload
    try:
        favorite_request = FavoriteRequest.model_validate(payload)
    except PayloadValidationError as exc:
        return _payload_error_response(exc)

    try:
        favorite = store.add(
            favorite_request.departure,
            favorite_request.destination,
            favorite_request.consumption,
            favorite_request.fuel_kind,
        )
    except ValidationError as exc:
        return _error_response("validation_error", str(exc), status=400)

    return JsonResponse(FavoriteResponse.from_favorite(favorite).model_dump(mode="json"), status=201)


@csrf_exempt
@require_http_methods(["DELETE"])
def favorite_detail_view(_: HttpRequest, favorite_id: int) -> HttpResponse:
    store = FavoritesStore()
    try:
        store.delete(favorite_id)
    except FavoriteNotFoundError as exc:
        return _error_response("not_found", str(exc), status=404)

    return _favorites_response(store)


@csrf_exempt
@require_http_methods(["GET", "PUT"])
def preferences_view(request: HttpRequest) -> HttpResponse:
    store = PreferencesStore()
    if request.method == "GET":
        return JsonResponse(PreferencesResponse.from_preferences(store.load()).model_dump(mode="json"))

    payload = _parse_json_payload(request)
    if isinstance(payload, JsonResponse):
        return payload
    try:
        update = PreferencesUpdate.model_validate(payload)
    except PayloadValidationError as exc:
        return _payload_error_response(exc)

    try:
        preferences = store.update(**update.model_dump(exclude_unset=True))
    except ValidationError as exc:
        return _error_response("validation_error", str(exc), status=400)

    return JsonResponse(PreferencesResponse.from_preferences(preferences).model_dump(mode="json"))


@require_GET
def storage_view(_: HttpRequest) -> HttpResponse:
    return JsonResponse(StorageInfoResponse.from_info(DataBackup().storage_info()).model_dump())


def _create_trip(request: HttpRequest) -> HttpResponse:
    payload = _parse_json_payload(request)
    if isinstance(payload, JsonResponse):
        return payload

    try:
        trip_request = TripRequest.model_validate(payload)
    except PayloadValidationError as exc:
        return _payload_error_response(exc)

    consumption = trip_request.consumption
    fuel_kind = trip_request.fuel_kind
    if consumption is None or fuel_kind is None:
        preferences = PreferencesStore().load()
        if consumption is None:
            consumption = preferences.default_consumption
        fuel_kind = fuel_kind or preferences.default_fuel_kind
    if consumption is None:
        return _error_response(
            "validation_error",
            "Fuel consumption is required when no default consumption is saved",
            status=400,
        )

    calculator = get_trip_calculator()
    try:
        result = calculator.compute_trip(
            trip_request.departure,
            trip_request.destination,
            consumption,
            fuel_kind,
            departure_point=_to_point(trip_request.departure_coordinate),
            destination_point=_to_point(trip_request.destination_coordinate),
        )
    except ValidationError as exc:
        return _error_response("validation_error", str(exc), status=400)
    except AddressNotFoundError as exc:
        return _error_response("address_not_found", str(exc), status=404)
    except NoRouteFoundError as exc:
        return _error_response("route_not_found", str(exc), status=422)

    get_history_store().append(result.record)
    return JsonResponse(TripResponse.from_result(result).model_dump(mode="json"), status=201)


def _history_response() -> JsonResponse:
    store = get_history_store()
    response = HistoryResponse(
        trips=[TripRecordResponse.from_record(record) for record in store.load_all()],
        summary=HistorySummaryResponse.from_summary(store.summary()),
    )
    return JsonResponse(response.model_dump(mode="json"), status=200)


def _to_point(coordinate: Any) -> GeoPoint | None:
    if coordinate is None:
        return None
    return GeoPoint(latitude=coordinate.latitude, longitude=coordinate.longitude)


def _parse_json_payload(request: HttpRequest) -> dict[str, Any] | JsonResponse:
    if not request.body:
        return {}

    try:
        payload = json.loads(request.body)
    except json.JSONDecodeError:
        return _error_response("invalid_json", "Request body must be valid JSON", status=400)

    if not isinstance(payload, dict):
        return _error_response("invalid_json", "JSON body must be an object", status=400)

    return payload


def _error_response(code: str, message: str, status: int) -> JsonResponse:
    return JsonResponse({"error": {"code": code, "message": message}}, status=status)


def _payload_error_response(exc: PayloadValidationError) -> JsonResponse:
    return JsonResponse(
        {
            "error": {
                "code": "validation_error",
                "message": "Invalid request payload",
                "details": exc.errors(include_url=False, include_context=False),
            }
        },
        status=400,
    )


def _favorites_response(store: FavoritesStore) -> JsonResponse:
    favorites = [FavoriteResponse.from_favorite(favorite) for favorite in store.load_all()]
    return JsonResponse({"favorites": [favorite.model_dump(mode="json") for favorite in favorites]})
