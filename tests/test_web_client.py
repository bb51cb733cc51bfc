import json

import pytest
import requests

from conftest import FakeSession, make_response
from routeclient import (
    ClientSettings,
    CustomModel,
    GeoPoint,
    HttpTransport,
    JsonFeature,
    JsonFeatureCollection,
    Op,
    Polygon,
    RouteRequest,
    RoutingWebClient,
    Statement,
)
from routeclient.errors import InvalidRequestStateError, ServerError
from routeclient.polyline import encode_polyline

ROUTE_URL_TAIL = (
    "type=json&instructions=true&points_encoded=true&points_encoded_multiplier=1000000"
    "&calc_points=true&algorithm=&locale=en_US&elevation=false&optimize=false"
)


@pytest.mark.parametrize("use_post", [True, False])
def test_timeout_hint_overrides_transport_timeouts(use_post, andorra_points):
    client = RoutingWebClient(None).set_post_request(use_post)
    request = RouteRequest.between(*andorra_points).set_profile("car")
    request.put_hint("timeout", 5)

    transport = client.get_client_for_request(request)

    assert transport.connect_timeout_ms == 5
    assert transport.read_timeout_ms == 5
    # the configured transport is left alone
    assert client.downloader.connect_timeout_ms == 5000


def test_fractional_timeout_hint_is_truncated_to_milliseconds(andorra_points):
    client = RoutingWebClient(None)
    request = RouteRequest.between(*andorra_points).put_hint("timeout", "2500.5")

    transport = client.get_client_for_request(request)

    assert transport.connect_timeout_ms == 2500
    assert transport.read_timeout_ms == 2500


@pytest.mark.parametrize("value", ["soon", "", None, 0, "-10"])
def test_unusable_timeout_hint_is_rejected(value, andorra_points):
    client = RoutingWebClient(None)
    request = RouteRequest.between(*andorra_points).put_hint("timeout", value)

    with pytest.raises(ValueError):
        client.get_client_for_request(request)


def test_profile_included_as_given():
    client = RoutingWebClient("https://localhost:8000/route")

    # no profile -> empty profile
    assert client.create_get_request(RouteRequest()).url == \
        "https://localhost:8000/route?profile=&" + ROUTE_URL_TAIL

    # profile given -> profile used in url
    assert client.create_get_request(RouteRequest().set_profile("my_car")).url == \
        "https://localhost:8000/route?profile=my_car&" + ROUTE_URL_TAIL


def test_headings_repeat_in_input_order(andorra_points):
    client = RoutingWebClient("http://localhost:8080/route")
    request = RouteRequest.between(*andorra_points).set_headings([10.0, 90.0]).set_profile("car")

    assert client.create_get_request(request).url == (
        "http://localhost:8080/route?profile=car&point=42.509225,1.534728&point=42.512602,1.551558&"
        + ROUTE_URL_TAIL + "&heading=10.0&heading=90.0"
    )


def test_get_request_appends_key_and_unknown_hints():
    client = RoutingWebClient("http://localhost:8080/route").set_key("abc")
    request = RouteRequest().set_profile("bike").put_hint("ch.disable", True).put_hint("turn_description", False)

    url = client.create_get_request(request).url

    assert url.endswith("&key=abc&ch.disable=true")
    assert "turn_description" not in url


def test_get_request_rejects_instructions_without_points():
    client = RoutingWebClient("http://localhost:8080/route").set_calc_points(False)

    with pytest.raises(InvalidRequestStateError):
        client.create_get_request(RouteRequest())

    # disabling both is fine
    url = client.create_get_request(RouteRequest().put_hint("instructions", "false")).url
    assert "instructions=false" in url and "calc_points=false" in url


def test_custom_model_requires_post(andorra_points):
    client = RoutingWebClient("http://localhost:8080/route")
    area_1 = Polygon.from_ring([
        (48.019324184801185, 11.28021240234375),
        (48.019324184801185, 11.53564453125),
        (48.11843396091691, 11.53564453125),
        (48.11843396091691, 11.28021240234375),
        (48.019324184801185, 11.28021240234375),
    ])
    area_2 = Polygon.from_ring([
        (48.15509285476017, 11.53289794921875),
        (48.15509285476017, 11.8212890625),
        (48.281365151571755, 11.8212890625),
        (48.281365151571755, 11.53289794921875),
        (48.15509285476017, 11.53289794921875),
    ])
    areas = JsonFeatureCollection()
    areas.add(JsonFeature("area_1", area_1)).add(JsonFeature("area_2", area_2))
    custom_model = (CustomModel()
                    .add_to_speed(Statement.if_("road_class == MOTORWAY", Op.LIMIT, "80"))
                    .add_to_priority(Statement.if_("surface == DIRT", Op.MULTIPLY, "0.7"))
                    .add_to_priority(Statement.if_("surface == SAND", Op.MULTIPLY, "0.6"))
                    .set_distance_influence(69)
                    .set_heading_penalty(22)
                    .set_areas(areas))
    request = RouteRequest.between(*andorra_points).set_custom_model(custom_model).set_profile("car")

    with pytest.raises(ValueError) as excinfo:
        client.create_get_request(request)
    assert str(excinfo.value) == "Custom models cannot be used for GET requests. Use setPostRequest(true)"

    expected = json.loads(
        '{"distance_influence":69.0,"heading_penalty":22.0,"areas":{'
        '"type":"FeatureCollection","features":['
        '{"id":"area_1","type":"Feature","geometry":{"type":"Polygon","coordinates":[[[48.019324184801185,11.28021240234375],[48.019324184801185,11.53564453125],[48.11843396091691,11.53564453125],[48.11843396091691,11.28021240234375],[48.019324184801185,11.28021240234375]]]},"properties":{}},'
        '{"id":"area_2","type":"Feature","geometry":{"type":"Polygon","coordinates":[[[48.15509285476017,11.53289794921875],[48.15509285476017,11.8212890625],[48.281365151571755,11.8212890625],[48.281365151571755,11.53289794921875],[48.15509285476017,11.53289794921875]]]},"properties":{}}]},'
        '"priority":[{"if":"surface == DIRT","multiply_by":"0.7"},{"if":"surface == SAND","multiply_by":"0.6"}],'
        '"speed":[{"if":"road_class == MOTORWAY","limit_to":"80"}]}'
    )
    body = client.request_to_json(request)
    # compare through JSON text so tuples/lists do not matter
    assert json.loads(json.dumps(body["custom_model"])) == expected

    assert CustomModel.from_dict(json.loads('{"distance_influence":null}')).distance_influence is None


def test_set_key_validation():
    client = RoutingWebClient()

    with pytest.raises(TypeError) as excinfo:
        client.set_key(None)
    assert str(excinfo.value) == "Key must not be null"

    with pytest.raises(ValueError) as excinfo:
        client.set_key("")
    assert str(excinfo.value) == "Key must not be empty"

    assert client.set_key("my-api-key") is client


def test_post_body_layout(andorra_points):
    client = RoutingWebClient("http://localhost:8080/route")
    request = (RouteRequest.between(*andorra_points)
               .set_profile("car")
               .set_headings([90])
               .set_path_details(["street_name"])
               .put_hint("ch.disable", True)
               .put_hint("key", "leaked")
               .put_hint("elevation", "true"))

    body = client.request_to_json(request)

    assert body["points"] == [[1.534728, 42.509225], [1.551558, 42.512602]]
    assert body["profile"] == "car"
    assert body["headings"] == [90.0]
    assert body["details"] == ["street_name"]
    assert body["locale"] == "en_US"
    assert body["points_encoded"] is True
    assert body["points_encoded_multiplier"] == 1000000
    assert body["instructions"] is True
    assert body["calc_points"] is True
    assert body["elevation"] is True
    assert body["optimize"] == "false"
    assert body["ch.disable"] is True
    assert "key" not in body
    assert "algorithm" not in body
    assert "custom_model" not in body


def test_post_request_puts_key_in_url():
    client = RoutingWebClient("https://unused/route").set_key("k")
    call = client.create_post_request(RouteRequest().set_profile("car"))

    assert call.method == "POST"
    assert call.url == "https://unused/route?key=k"
    assert call.headers["Content-Type"] == "application/json"
    assert "X-Client-Version" in call.headers


def test_route_error_json_sets_errors_and_drops_turn_description():
    session = FakeSession(make_response({"message": "Point 0 is out of bounds", "hints": []}, status_code=400))
    client = (RoutingWebClient("https://unused/route")
              .set_post_request(True)
              .set_key("s3cr3t-pw")
              .set_downloader(session))
    request = (RouteRequest()
               .add_point(GeoPoint(45.5, -73.6))
               .add_point(GeoPoint(45.4, -73.7))
               .set_profile("car"))
    request.hints.put("turn_description", True)

    response = client.route(request)

    assert response.has_errors()
    assert response.paths == []
    assert isinstance(response.errors[0], ServerError)
    assert str(response.errors[0]) == "Point 0 is out of bounds"

    assert session.calls[0]["method"] == "POST"
    assert "turn_description" not in session.last_body
    # the caller's request is not modified
    assert request.hints.has("turn_description")


def test_route_success_copies_headers_and_hints():
    session = FakeSession(make_response(
        {"paths": [], "hints": {"abcd": "val-42"}},
        headers={"X-Rate-Limit-Remaining": "123", "X-Trace": "trace-0042"},
    ))
    client = RoutingWebClient("https://unused/route").set_post_request(True).set_key("k").set_downloader(session)
    request = RouteRequest().add_point(GeoPoint(45.0, -73.0)).add_point(GeoPoint(45.1, -73.1)).set_profile("car")

    response = client.route(request)

    assert not response.has_errors()
    assert response.paths == []
    assert response.hints["x-rate-limit-remaining"] == ["123"]
    assert "X-Rate-Limit-Remaining" in response.hints.to_dict()
    assert response.hints["X-Trace"] == ["trace-0042"]
    assert response.hints["abcd"] == "val-42"


def test_route_get_mode_parses_paths_with_request_timeout(andorra_points):
    points = [GeoPoint(42.509225, 1.534728), GeoPoint(42.512602, 1.551558)]
    payload = {
        "paths": [{
            "distance": 1830.5,
            "time": 203000,
            "points_encoded": True,
            "points_encoded_multiplier": 1e6,
            "points": encode_polyline(points, multiplier=1e6),
            "instructions": [
                {"sign": 0, "text": "Continue onto Avinguda Meritxell", "street_name": "Avinguda Meritxell",
                 "distance": 1830.5, "time": 203000, "interval": [0, 1]},
            ],
        }],
        "hints": {},
    }
    session = FakeSession(make_response(payload))
    client = RoutingWebClient("http://localhost:8080/route").set_post_request(False).set_downloader(session)
    request = RouteRequest.between(*andorra_points).set_profile("car").put_hint("timeout", 2500)

    response = client.route(request)

    assert session.calls[0]["method"] == "GET"
    assert session.calls[0]["timeout"] == (2.5, 2.5)
    best = response.get_best()
    assert best.distance == 1830.5
    assert best.time == 203000
    assert best.points == points
    assert best.instructions[0].text == "Continue onto Avinguda Meritxell"
    assert not response.has_alternatives()


def test_route_without_turn_description_uses_street_names(andorra_points):
    payload = {"paths": [{"instructions": [
        {"sign": 2, "text": "Turn right onto Carrer Major", "street_name": "Carrer Major",
         "distance": 10.0, "time": 1000, "interval": [0, 1]},
    ]}]}
    session = FakeSession(make_response(payload))
    client = RoutingWebClient("http://localhost:8080/route").set_downloader(session)
    request = RouteRequest.between(*andorra_points).put_hint("turn_description", "false")

    response = client.route(request)

    assert response.get_best().instructions[0].text == "Carrer Major"
    assert "turn_description" not in session.last_body


def test_route_malformed_json_raises(andorra_points):
    session = FakeSession(make_response("<html>502 Bad Gateway</html>", status_code=502))
    client = RoutingWebClient("http://localhost:8080/route").set_downloader(session)

    with pytest.raises(ValueError):
        client.route(RouteRequest.between(*andorra_points))


def test_route_transport_errors_propagate(andorra_points):
    session = FakeSession(error=requests.ConnectionError("connection refused"))
    client = RoutingWebClient("http://localhost:8080/route").set_downloader(session)

    with pytest.raises(requests.ConnectionError):
        client.route(RouteRequest.between(*andorra_points))
    assert len(session.calls) == 1


def test_from_settings():
    settings = ClientSettings(service_url="http://routing.local/route", api_key="k",
                              post_request=False, timeout_ms=1500)

    client = RoutingWebClient.from_settings(settings)

    assert client.service_url == "http://routing.local/route"
    assert client.key == "k"
    assert client.post_request is False
    assert client.downloader.timeout == (1.5, 1.5)


def test_set_downloader_keeps_timeouts():
    session = FakeSession()
    client = RoutingWebClient().set_downloader(HttpTransport(connect_timeout_ms=100, read_timeout_ms=200))

    client.set_downloader(session)

    assert client.downloader.session is session
    assert client.downloader.timeout == (0.1, 0.2)
