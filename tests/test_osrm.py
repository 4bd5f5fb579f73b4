from __future__ import annotations

import httpx
import pytest

from fuel_tracker.exceptions import ExternalServiceError, NoRouteFoundError
from fuel_tracker.services.osrm import OsrmClient
from fuel_tracker.services.types import GeoPoint

BRUSSELS = GeoPoint(latitude=50.8467, longitude=4.3525)
GHENT = GeoPoint(latitude=51.0538, longitude=3.7250)


def test_route_parses_geometry_distance_and_duration(mocker, json_response) -> None:
    get = mocker.patch(
        "fuel_tracker.services.osrm.httpx.get",
        return_value=json_response(
            {
                "code": "Ok",
                "routes": [
                    {
                        "distance": 56123.4,
                        "duration": 2710.0,
                        "geometry": {"coordinates": [[4.3525, 50.8467], [4.0, 51.0], [3.725, 51.0538]]},
                    }
                ],
            }
        ),
    )
    client = OsrmClient()

    route = client.route(BRUSSELS, GHENT)
    cached = client.route(BRUSSELS, GHENT)

    assert route.distance_meters == pytest.approx(56123.4)
    assert route.duration_seconds == pytest.approx(2710.0)
    assert route.coordinates[0] == (4.3525, 50.8467)
    assert cached == route
    get.assert_called_once()
    assert "4.352500,50.846700;3.725000,51.053800" in get.call_args.args[0]


@pytest.mark.parametrize(
    "payload",
    [
        {"code": "NoRoute", "routes": []},
        {"code": "Ok", "routes": []},
        {"code": "Ok", "routes": [{"distance": 1.0, "geometry": {"coordinates": [[4.3, 50.8]]}}]},
    ],
)
def test_unusable_route_raises_no_route(mocker, json_response, payload) -> None:
    mocker.patch("fuel_tracker.services.osrm.httpx.get", return_value=json_response(payload))

    with pytest.raises(NoRouteFoundError, match="route not found"):
        OsrmClient().route(BRUSSELS, GHENT)


def test_unroutable_pair_reported_with_400_is_not_retried(mocker, json_response) -> None:
    get = mocker.patch(
        "fuel_tracker.services.osrm.httpx.get",
        return_value=json_response({"code": "NoSegment", "message": "No road nearby"}, status_code=400),
    )

    with pytest.raises(NoRouteFoundError):
        OsrmClient().route(BRUSSELS, GHENT)

    get.assert_called_once()


def test_route_retries_then_raises_external_error(mocker, settings) -> None:
    settings.OSRM_RETRY_COUNT = 1
    sleep = mocker.patch("fuel_tracker.services.osrm.time.sleep")
    get = mocker.patch(
        "fuel_tracker.services.osrm.httpx.get",
        side_effect=httpx.ReadTimeout("slow"),
    )

    with pytest.raises(ExternalServiceError):
        OsrmClient().route(BRUSSELS, GHENT)

    assert get.call_count == 2
    sleep.assert_called_once_with(0.3)


def test_route_geometry_with_altitude_keeps_lon_lat(mocker, json_response) -> None:
    mocker.patch(
        "fuel_tracker.services.osrm.httpx.get",
        return_value=json_response(
            {
                "code": "Ok",
                "routes": [
                    {
                        "distance": 12000.0,
                        "duration": 900.0,
                        "geometry": {"coordinates": [[4.3, 50.8, 12.0], [4.4, 50.9, 13.0]]},
                    }
                ],
            }
        ),
    )

    route = OsrmClient().route(BRUSSELS, GHENT)

    assert route.coordinates == [(4.3, 50.8), (4.4, 50.9)]


@pytest.mark.parametrize(
    "route",
    [
        "not a route",
        {"distance": "far", "geometry": {"coordinates": [[4.3, 50.8], [4.4, 50.9]]}},
        {"distance": 1.0, "geometry": {"coordinates": [[4.3], [4.4]]}},
        {"distance": 1.0, "geometry": {"coordinates": [None, None]}},
        {"distance": 1.0, "geometry": "line"},
    ],
)
def test_malformed_ok_route_raises_no_route(mocker, json_response, route) -> None:
    mocker.patch(
        "fuel_tracker.services.osrm.httpx.get",
        return_value=json_response({"code": "Ok", "routes": [route]}),
    )

    with pytest.raises(NoRouteFoundError, match="route not found"):
        OsrmClient().route(BRUSSELS, GHENT)
