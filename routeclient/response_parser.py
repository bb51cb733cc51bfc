"""
Purpose: turn the routing service's JSON answer into a RouteResponse.

Error shape:   {"message": "...", "hints": [{"message": "...", "details": "<ExceptionClass>", ...}]}
Success shape: {"paths": [...], "hints": {...}, "info": {...}}

A top-level "message" always means the request failed, whatever the HTTP status.
Errors are collected into RouteResponse.errors, never raised from here.
"""
from __future__ import annotations

import json
import logging
from typing import Any, List, Mapping, Optional, Union

from .errors import (
    ConnectionNotFoundError,
    DetailedError,
    InvalidArgumentError,
    MaximumNodesExceededError,
    PointNotFoundError,
    PointOutOfBoundsError,
    ServerError,
    UnsupportedOperationError,
)
from .models import GeoPoint, Instruction, ResponsePath, RouteResponse
from .polyline import decode_polyline

logger = logging.getLogger(__name__)

DEFAULT_POINTS_MULTIPLIER = 1e5


def read_errors(body: Mapping[str, Any]) -> List[Exception]:
    """
    Collects the errors described by an error-shaped payload.
    Returns an empty list when there is no top-level "message".
    """
    errors: List[Exception] = []
    if "message" not in body:
        return errors

    message = str(body.get("message"))
    error_hints = body.get("hints")
    # the service sends an array, but an object keyed by index carries the same entries
    if isinstance(error_hints, Mapping):
        error_hints = list(error_hints.values())
    if isinstance(error_hints, list):
        for error in error_hints:
            if isinstance(error, Mapping):
                errors.append(_error_from_hint(error))

    # nothing specific in the hints -> the top-level message is the error
    if not errors:
        errors.append(ServerError(message))
    return errors


def _error_from_hint(error: Mapping[str, Any]) -> Exception:
    # "details" carries the server-side exception class, e.g.
    # "com.example.util.exceptions.PointNotFoundException"; only the simple name matters
    exception_class = str(error.get("details") or "")
    simple_name = exception_class.rsplit(".", 1)[-1]
    error_text = str(error.get("message", ""))
    details = dict(error)

    if simple_name == "IllegalArgumentException":
        return InvalidArgumentError(error_text)
    if simple_name == "UnsupportedOperationException":
        return UnsupportedOperationError(error_text)
    if simple_name == "PointNotFoundException":
        return PointNotFoundError(error_text, int(error.get("point_index", 0)))
    if simple_name == "PointOutOfBoundsException":
        return PointOutOfBoundsError(error_text, int(error.get("point_index", 0)))
    if simple_name == "ConnectionNotFoundException":
        return ConnectionNotFoundError(error_text, details)
    if simple_name == "MaximumNodesExceededException":
        return MaximumNodesExceededError(error_text, int(error.get(MaximumNodesExceededError.NODES_KEY, 0)))
    if not exception_class:
        return DetailedError(error_text, details)
    return DetailedError(f"{exception_class} {error_text}", details)


def _read_points(path: Mapping[str, Any], key: str, elevation: bool) -> List[GeoPoint]:
    raw = path.get(key)
    if raw is None:
        return []

    if path.get("points_encoded", True) and isinstance(raw, str):
        multiplier = float(path.get("points_encoded_multiplier", DEFAULT_POINTS_MULTIPLIER))
        return decode_polyline(raw, is_3d=elevation, multiplier=multiplier)

    # GeoJSON LineString: [[lon, lat(, ele)], ...]
    coordinates = raw.get("coordinates", []) if isinstance(raw, Mapping) else raw
    points = []
    for coordinate in coordinates:
        if elevation and len(coordinate) > 2:
            points.append(GeoPoint(coordinate[1], coordinate[0], coordinate[2]))
        else:
            points.append(GeoPoint(coordinate[1], coordinate[0]))
    return points


def _read_instruction(data: Mapping[str, Any], turn_description: bool) -> Instruction:
    street_name = data.get("street_name", "")
    # without turn descriptions the service text is replaced by the bare street name
    text = data.get("text", "") if turn_description else street_name
    return Instruction(
        sign=int(data.get("sign", 0)),
        text=text,
        distance=float(data.get("distance", 0.0)),
        time=int(data.get("time", 0)),
        interval=list(data.get("interval", [])),
        street_name=street_name,
        heading=data.get("heading"),
        exit_number=data.get("exit_number"),
        turn_angle=data.get("turn_angle"),
        exited=data.get("exited"),
    )


def create_response_path(path: Mapping[str, Any], elevation: bool, turn_description: bool = True) -> ResponsePath:
    return ResponsePath(
        distance=float(path.get("distance", 0.0)),
        time=int(path.get("time", 0)),
        weight=float(path.get("weight", 0.0)),
        ascend=float(path.get("ascend", 0.0)),
        descend=float(path.get("descend", 0.0)),
        points=_read_points(path, "points", elevation),
        waypoints=_read_points(path, "snapped_waypoints", elevation),
        bbox=list(path["bbox"]) if path.get("bbox") is not None else None,
        instructions=[_read_instruction(item, turn_description) for item in path.get("instructions") or []],
        path_details={name: list(values) for name, values in (path.get("details") or {}).items()},
        points_order=list(path.get("points_order") or []),
        description=list(path.get("description") or []),
    )


def parse_response(
        status_code: int,
        headers: Optional[Mapping[str, str]],
        body: Union[str, bytes, Mapping[str, Any]],
        *,
        elevation: bool = False,
        turn_description: bool = True,
) -> RouteResponse:
    """
    Builds a RouteResponse from one HTTP answer.

    - body may be raw text/bytes (decoded here, malformed JSON raises ValueError)
      or an already decoded dict
    - every header is copied into response.hints as [value]
    """
    if isinstance(body, (str, bytes, bytearray)):
        body = json.loads(body)
    if not isinstance(body, Mapping):
        raise ValueError(f"Expected a JSON object from the routing service, got {type(body).__name__}")

    response = RouteResponse()
    errors = read_errors(body)
    if errors:
        logger.warning("Routing service reported %d error(s) (HTTP %s): %s",
                       len(errors), status_code, body.get("message"))
        response.add_errors(errors)
    else:
        for path in body.get("paths") or []:
            response.add(create_response_path(path, elevation, turn_description))

        json_hints = body.get("hints")
        if isinstance(json_hints, Mapping):
            for key, value in json_hints.items():
                response.hints.put(key, value)

    for name, value in (headers or {}).items():
        response.hints.put(name, [value])

    return response
