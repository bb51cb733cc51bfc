"""
Purpose: The routing service client.
Sole responsibility: turn a RouteRequest into one HTTP call (GET query string
or POST JSON body), send it through the pluggable transport and hand the
answer to response_parser.

Encapsulates service-specific details:
- query parameter names and their fixed order for GET
- JSON body layout for POST (custom models need POST)
- API key handling and per-request timeouts

It does not retry. Transport and JSON errors propagate to the caller;
errors reported by the service end up in RouteResponse.errors.
"""
from __future__ import annotations

import json
import logging
from dataclasses import replace
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from .config import DEFAULT_SERVICE_URL, ClientSettings
from .errors import InvalidRequestStateError
from .hints import Hints
from .models import RouteRequest, RouteResponse
from .response_parser import parse_response
from .transport import HttpTransport, PreparedCall, redact_key

logger = logging.getLogger(__name__)

CLIENT_VERSION = "1.0.0"
CLIENT_VERSION_HEADER = "X-Client-Version"

# hint names understood by the client itself
TIMEOUT = "timeout"
INSTRUCTIONS = "instructions"
CALC_POINTS = "calc_points"
ELEVATION = "elevation"
OPTIMIZE = "optimize"
TURN_DESCRIPTION = "turn_description"
KEY = "key"
SERVICE_URL = "service_url"

POINTS_ENCODED_MULTIPLIER = 1_000_000

# already written as first-class query parameters, or client-only
_IGNORED_GET_HINTS = frozenset({
    CALC_POINTS, "calcpoints", INSTRUCTIONS, ELEVATION, KEY, TIMEOUT, SERVICE_URL,
    TURN_DESCRIPTION, OPTIMIZE, "algorithm", "locale", "point", "profile", "type",
    "points_encoded", "pointsencoded", "points_encoded_multiplier",
    "heading", "details", "point_hint", "curbside", "snap_prevention",
})

# client-only hints that must never reach the POST body
_IGNORED_POST_HINTS = frozenset({KEY, SERVICE_URL, TIMEOUT, TURN_DESCRIPTION})


def _bool(value: bool) -> str:
    return "true" if value else "false"


def _encode(value: Any) -> str:
    return quote(str(value), safe="")


class RoutingWebClient:
    """
    Client for a routing service speaking the /route JSON API.

    Setters return the client itself, so it can be configured in one chain:

        client = RoutingWebClient(url).set_key("...").set_post_request(True)
        response = client.route(RouteRequest.between(a, b, profile="car"))
        if response.has_errors(): ...
    """

    def __init__(self, service_url: Optional[str] = DEFAULT_SERVICE_URL):
        self.service_url = service_url
        self.key = ""
        self.post_request = True
        self.instructions = True
        self.calc_points = True
        self.elevation = False
        self.points_encoded = True
        self.optimize = "false"
        self.downloader = HttpTransport()

    @classmethod
    def from_settings(cls, settings: ClientSettings) -> RoutingWebClient:
        client = cls(settings.service_url).set_post_request(settings.post_request)
        client.set_downloader(HttpTransport(
            connect_timeout_ms=settings.timeout_ms,
            read_timeout_ms=settings.timeout_ms,
        ))
        if settings.api_key is not None:
            client.set_key(settings.api_key)
        return client

    #----------------
    # configuration
    #----------------
    def set_key(self, key: Optional[str]) -> RoutingWebClient:
        if key is None:
            raise TypeError("Key must not be null")
        if key == "":
            raise ValueError("Key must not be empty")
        self.key = key
        return self

    def set_post_request(self, post_request: bool) -> RoutingWebClient:
        self.post_request = post_request
        return self

    def set_downloader(self, downloader) -> RoutingWebClient:
        """Accepts an HttpTransport or any requests.Session-like object."""
        if not isinstance(downloader, HttpTransport):
            downloader = replace(self.downloader, session=downloader)
        self.downloader = downloader
        return self

    def set_instructions(self, instructions: bool) -> RoutingWebClient:
        self.instructions = instructions
        return self

    def set_calc_points(self, calc_points: bool) -> RoutingWebClient:
        self.calc_points = calc_points
        return self

    def set_elevation(self, elevation: bool) -> RoutingWebClient:
        self.elevation = elevation
        return self

    def set_points_encoded(self, points_encoded: bool) -> RoutingWebClient:
        self.points_encoded = points_encoded
        return self

    def set_optimize(self, optimize: str) -> RoutingWebClient:
        self.optimize = optimize
        return self

    def get_client_for_request(self, request: RouteRequest) -> HttpTransport:
        """The transport to use for this request; the "timeout" hint (ms) overrides both timeouts."""
        if request.hints.has(TIMEOUT):
            value = request.hints.get(TIMEOUT)
            try:
                timeout_ms = int(float(value))
            except (TypeError, ValueError):
                raise ValueError(f"timeout hint must be a number of milliseconds, got {value!r}") from None
            if timeout_ms <= 0:
                raise ValueError(f"timeout hint must be positive, got {value!r}")
            return self.downloader.with_timeout(timeout_ms)
        return self.downloader

    #----------------
    # request building
    #----------------
    def _headers(self) -> Dict[str, str]:
        return {CLIENT_VERSION_HEADER: CLIENT_VERSION}

    def create_get_request(self, request: RouteRequest) -> PreparedCall:
        if request.custom_model is not None:
            raise ValueError("Custom models cannot be used for GET requests. Use setPostRequest(true)")

        hints = request.hints
        instructions = hints.get_bool(INSTRUCTIONS, self.instructions)
        calc_points = hints.get_bool(CALC_POINTS, self.calc_points)
        elevation = hints.get_bool(ELEVATION, self.elevation)
        optimize = hints.get_str(OPTIMIZE, self.optimize)
        if instructions and not calc_points:
            raise InvalidRequestStateError(
                "Cannot calculate instructions without points (only points without instructions). "
                "Use calc_points=false and instructions=false to disable point and instruction calculation")

        params: List[str] = [f"profile={_encode(request.profile)}"]
        params.extend(f"point={point.query_string()}" for point in request.points)
        params.extend([
            f"type={_encode(hints.get_str('type', 'json'))}",
            f"instructions={_bool(instructions)}",
            f"points_encoded={_bool(self.points_encoded)}",
            f"points_encoded_multiplier={POINTS_ENCODED_MULTIPLIER}",
            f"calc_points={_bool(calc_points)}",
            f"algorithm={_encode(request.algorithm)}",
            f"locale={_encode(request.locale)}",
            f"elevation={_bool(elevation)}",
            f"optimize={_encode(optimize)}",
        ])
        params.extend(f"heading={float(heading)!r}" for heading in request.headings)
        params.extend(f"details={_encode(detail)}" for detail in request.path_details)
        # point hints and curbsides are positional, so send all of them or none
        if any(request.point_hints):
            params.extend(f"point_hint={_encode(hint)}" for hint in request.point_hints)
        if any(request.curbsides):
            params.extend(f"curbside={_encode(curbside)}" for curbside in request.curbsides)
        params.extend(f"snap_prevention={_encode(prevention)}" for prevention in request.snap_preventions)
        if self.key:
            params.append(f"key={_encode(self.key)}")

        for name in hints:
            if name.lower() in _IGNORED_GET_HINTS:
                continue
            value = hints.get_str(name, None)
            if value:
                params.append(f"{_encode(name)}={_encode(value)}")

        url = f"{self.service_url}?" + "&".join(params)
        logger.debug("GET %s", redact_key(url))
        return PreparedCall("GET", url, self._headers())

    def request_to_json(self, request: RouteRequest) -> Dict[str, Any]:
        hints = request.hints
        body: Dict[str, Any] = {"points": [point.to_lon_lat() for point in request.points]}
        if request.point_hints:
            body["point_hints"] = list(request.point_hints)
        if request.headings:
            body["headings"] = [float(heading) for heading in request.headings]
        if request.curbsides:
            body["curbsides"] = list(request.curbsides)
        if request.snap_preventions:
            body["snap_preventions"] = list(request.snap_preventions)
        if request.path_details:
            body["details"] = list(request.path_details)

        body["locale"] = request.locale
        if request.profile:
            body["profile"] = request.profile
        if request.algorithm:
            body["algorithm"] = request.algorithm

        body["points_encoded"] = self.points_encoded
        body["points_encoded_multiplier"] = POINTS_ENCODED_MULTIPLIER
        body[INSTRUCTIONS] = hints.get_bool(INSTRUCTIONS, self.instructions)
        body[CALC_POINTS] = hints.get_bool(CALC_POINTS, self.calc_points)
        body[ELEVATION] = hints.get_bool(ELEVATION, self.elevation)
        body[OPTIMIZE] = hints.get_str(OPTIMIZE, self.optimize)
        if request.custom_model is not None:
            body["custom_model"] = request.custom_model.to_dict()

        written = {name.lower() for name in body}
        for name, value in hints.items():
            if name.lower() in _IGNORED_POST_HINTS or name.lower() in written:
                continue
            body[name] = value
        return body

    def create_post_request(self, request: RouteRequest) -> PreparedCall:
        url = self.service_url
        if self.key:
            url += f"?key={_encode(self.key)}"
        headers = self._headers()
        headers["Content-Type"] = "application/json"
        logger.debug("POST %s", redact_key(url))
        return PreparedCall("POST", url, headers, json.dumps(self.request_to_json(request)))

    #----------------
    # public API
    #----------------
    def route(self, request: RouteRequest) -> RouteResponse:
        """
        Sends one routing request and parses the answer.

        turn_description only controls how instruction texts are read back,
        so it is taken out of the hints before the request is serialized.
        The caller's request object is left untouched.
        """
        elevation = request.hints.get_bool(ELEVATION, self.elevation)
        turn_description = request.hints.get_bool(TURN_DESCRIPTION, True)

        outbound_hints: Hints = request.hints.copy()
        outbound_hints.remove(TURN_DESCRIPTION)
        outbound = replace(request, hints=outbound_hints)

        call = self.create_post_request(outbound) if self.post_request else self.create_get_request(outbound)
        rsp = self.get_client_for_request(outbound).send(call)

        try:
            response = parse_response(
                rsp.status_code,
                rsp.headers,
                rsp.content,
                elevation=elevation,
                turn_description=turn_description,
            )
        except ValueError as exc:
            logger.warning("Could not parse routing response for %s (HTTP %s): %s",
                           [str(point) for point in request.points], rsp.status_code, exc)
            raise

        return response
