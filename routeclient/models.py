"""
Purpose: Value objects exchanged with the routing service.
What it does:
- GeoPoint: a (lat, lon[, ele]) coordinate
- RouteRequest: what the caller wants routed (points, profile, hints, custom model ...)
- Instruction / ResponsePath: one routed alternative as returned by the service
- RouteResponse: all alternatives + merged hints + server-reported errors

Rule: No HTTP, no JSON parsing. Models only.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence

from .hints import Hints

if TYPE_CHECKING:
    from .custom_model import CustomModel


@dataclass(frozen=True)
class GeoPoint:
    lat: float
    lon: float
    ele: Optional[float] = None

    def query_string(self) -> str:
        """'lat,lon' as used by the point= query parameter."""
        return f"{round(self.lat, 6)},{round(self.lon, 6)}"

    def to_lon_lat(self) -> List[float]:
        """[lon, lat] (or [lon, lat, ele]) as used in JSON bodies."""
        if self.ele is None:
            return [self.lon, self.lat]
        return [self.lon, self.lat, self.ele]

    @property
    def is_3d(self) -> bool:
        return self.ele is not None

    def __str__(self) -> str:
        return f"{self.lat},{self.lon}"


@dataclass
class RouteRequest:
    """
    A single routing request. Setters return the same instance so calls can be chained:

        RouteRequest().add_point(a).add_point(b).set_profile("car")
    """
    points: List[GeoPoint] = field(default_factory=list)
    profile: str = ""
    hints: Hints = field(default_factory=Hints)
    custom_model: Optional[CustomModel] = None
    headings: List[float] = field(default_factory=list)
    point_hints: List[str] = field(default_factory=list)
    curbsides: List[str] = field(default_factory=list)
    snap_preventions: List[str] = field(default_factory=list)
    path_details: List[str] = field(default_factory=list)
    algorithm: str = ""
    locale: str = "en_US"

    @classmethod
    def between(cls, start: GeoPoint, end: GeoPoint, **kwargs) -> RouteRequest:
        return cls(points=[start, end], **kwargs)

    def add_point(self, point: GeoPoint) -> RouteRequest:
        self.points.append(point)
        return self

    def set_points(self, points: Sequence[GeoPoint]) -> RouteRequest:
        self.points = list(points)
        return self

    def set_profile(self, profile: str) -> RouteRequest:
        self.profile = profile
        return self

    def set_headings(self, headings: Sequence[float]) -> RouteRequest:
        self.headings = [float(heading) for heading in headings]
        return self

    def set_point_hints(self, point_hints: Sequence[str]) -> RouteRequest:
        self.point_hints = list(point_hints)
        return self

    def set_curbsides(self, curbsides: Sequence[str]) -> RouteRequest:
        self.curbsides = list(curbsides)
        return self

    def set_snap_preventions(self, snap_preventions: Sequence[str]) -> RouteRequest:
        self.snap_preventions = list(snap_preventions)
        return self

    def set_path_details(self, path_details: Sequence[str]) -> RouteRequest:
        self.path_details = list(path_details)
        return self

    def set_custom_model(self, custom_model: Optional[CustomModel]) -> RouteRequest:
        self.custom_model = custom_model
        return self

    def set_algorithm(self, algorithm: str) -> RouteRequest:
        self.algorithm = algorithm
        return self

    def set_locale(self, locale: str) -> RouteRequest:
        self.locale = locale
        return self

    def put_hint(self, key: str, value: Any) -> RouteRequest:
        self.hints.put(key, value)
        return self


@dataclass
class Instruction:
    """
    One turn instruction. `interval` indexes into ResponsePath.points.
    Roundabout instructions also carry exit_number / turn_angle / exited.
    """
    sign: int
    text: str
    distance: float
    time: int
    interval: List[int] = field(default_factory=list)
    street_name: str = ""
    heading: Optional[float] = None
    exit_number: Optional[int] = None
    turn_angle: Optional[float] = None
    exited: Optional[bool] = None


@dataclass
class ResponsePath:
    distance: float = 0.0       # metres
    time: int = 0               # milliseconds
    weight: float = 0.0
    ascend: float = 0.0
    descend: float = 0.0
    points: List[GeoPoint] = field(default_factory=list)
    waypoints: List[GeoPoint] = field(default_factory=list)  # snapped input points
    bbox: Optional[List[float]] = None                       # [min_lon, min_lat, max_lon, max_lat]
    instructions: List[Instruction] = field(default_factory=list)
    path_details: Dict[str, List[Any]] = field(default_factory=dict)
    points_order: List[int] = field(default_factory=list)
    description: List[str] = field(default_factory=list)


@dataclass
class RouteResponse:
    """
    Result of one route() call. Server-side failures are collected in `errors`
    instead of being raised, so check has_errors() before reading paths.
    """
    paths: List[ResponsePath] = field(default_factory=list)
    hints: Hints = field(default_factory=Hints)
    errors: List[Exception] = field(default_factory=list)

    def add(self, path: ResponsePath) -> RouteResponse:
        self.paths.append(path)
        return self

    def add_error(self, error: Exception) -> RouteResponse:
        self.errors.append(error)
        return self

    def add_errors(self, errors: Sequence[Exception]) -> RouteResponse:
        self.errors.extend(errors)
        return self

    def has_errors(self) -> bool:
        return bool(self.errors)

    def has_alternatives(self) -> bool:
        return len(self.paths) > 1

    def get_best(self) -> ResponsePath:
        if not self.paths:
            raise IndexError("Cannot fetch best response if list is empty")
        return self.paths[0]

    def __str__(self) -> str:
        if self.has_errors():
            return "errors: " + ", ".join(str(error) for error in self.errors)
        return f"paths: {len(self.paths)}, hints: {self.hints.to_dict()}"
