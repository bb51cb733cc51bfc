"""
Purpose: Client-side custom model (per-request routing cost adjustments).

A custom model is a list of conditional statements applied to speed and
priority, plus named polygon areas the conditions may refer to
(e.g. "in_area_1"). It is only sent in POST bodies, under "custom_model".

JSON shape:
{
  "distance_influence": 69.0,          # omitted when None
  "heading_penalty": 22.0,             # omitted when None
  "areas": {"type": "FeatureCollection", "features": [...]},
  "priority": [{"if": "surface == DIRT", "multiply_by": "0.7"}],
  "speed": [{"if": "road_class == MOTORWAY", "limit_to": "80"}]
}
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

Coordinate = Tuple[float, ...]


class Keyword(str, Enum):
    IF = "if"
    ELSEIF = "else_if"
    ELSE = "else"


class Op(str, Enum):
    MULTIPLY = "multiply_by"
    LIMIT = "limit_to"
    ADD = "add"


@dataclass(frozen=True)
class Statement:
    keyword: Keyword
    condition: str
    op: Op
    value: str

    @classmethod
    def if_(cls, condition: str, op: Op, value) -> Statement:
        return cls(Keyword.IF, condition, op, str(value))

    @classmethod
    def else_if(cls, condition: str, op: Op, value) -> Statement:
        return cls(Keyword.ELSEIF, condition, op, str(value))

    @classmethod
    def else_(cls, op: Op, value) -> Statement:
        return cls(Keyword.ELSE, "", op, str(value))

    def to_dict(self) -> Dict[str, str]:
        return {self.keyword.value: self.condition, self.op.value: self.value}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Statement:
        keywords = [keyword for keyword in Keyword if keyword.value in data]
        ops = [op for op in Op if op.value in data]
        if len(keywords) != 1:
            raise ValueError(f"Statement needs exactly one of if/else_if/else: {data}")
        if len(ops) != 1:
            raise ValueError(f"Statement needs exactly one operation: {data}")

        keyword, op = keywords[0], ops[0]
        condition = data[keyword.value]
        if keyword is Keyword.ELSE:
            # else has no condition; accept null or "" on the wire
            condition = condition or ""
        elif not condition:
            raise ValueError(f"Statement '{keyword.value}' needs a condition: {data}")

        return cls(keyword, condition, op, str(data[op.value]))


@dataclass
class Polygon:
    """
    Polygon geometry as GeoJSON rings. Coordinates are kept in the order given
    (x, y) and are not reprojected or reordered.
    """
    coordinates: List[List[Coordinate]]

    def __post_init__(self):
        if not self.coordinates:
            raise ValueError("Polygon needs at least one ring")
        rings = []
        for ring in self.coordinates:
            ring = [tuple(float(value) for value in coordinate) for coordinate in ring]
            if len(ring) < 4:
                raise ValueError(f"Invalid number of points in polygon ring (found {len(ring)} - must be >= 4)")
            if ring[0] != ring[-1]:
                raise ValueError("Points of polygon ring do not form a closed linestring")
            rings.append(ring)
        self.coordinates = rings

    @classmethod
    def from_ring(cls, ring: Sequence[Sequence[float]]) -> Polygon:
        return cls([list(ring)])

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": "Polygon",
            "coordinates": [[list(coordinate) for coordinate in ring] for ring in self.coordinates],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Polygon:
        if data.get("type") != "Polygon":
            raise ValueError(f"Unsupported area geometry type: {data.get('type')}")
        return cls([list(ring) for ring in data.get("coordinates", [])])


@dataclass
class JsonFeature:
    id: str
    geometry: Polygon
    type: str = "Feature"
    bbox: Optional[List[float]] = None
    properties: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"id": self.id, "type": self.type}
        if self.bbox is not None:
            data["bbox"] = list(self.bbox)
        data["geometry"] = self.geometry.to_dict()
        data["properties"] = dict(self.properties or {})
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> JsonFeature:
        return cls(
            id=data.get("id"),
            type=data.get("type", "Feature"),
            bbox=data.get("bbox"),
            geometry=Polygon.from_dict(data["geometry"]),
            properties=data.get("properties") or {},
        )


@dataclass
class JsonFeatureCollection:
    features: List[JsonFeature] = field(default_factory=list)

    def add(self, feature: JsonFeature) -> JsonFeatureCollection:
        self.features.append(feature)
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": "FeatureCollection",
            "features": [feature.to_dict() for feature in self.features],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> JsonFeatureCollection:
        if data.get("type", "FeatureCollection") != "FeatureCollection":
            raise ValueError(f"areas must be a FeatureCollection, got {data.get('type')}")
        return cls([JsonFeature.from_dict(feature) for feature in data.get("features", [])])


@dataclass
class CustomModel:
    distance_influence: Optional[float] = None
    heading_penalty: Optional[float] = None
    priority: List[Statement] = field(default_factory=list)
    speed: List[Statement] = field(default_factory=list)
    areas: JsonFeatureCollection = field(default_factory=JsonFeatureCollection)

    def add_to_priority(self, statement: Statement) -> CustomModel:
        self.priority.append(statement)
        return self

    def add_to_speed(self, statement: Statement) -> CustomModel:
        self.speed.append(statement)
        return self

    def set_distance_influence(self, distance_influence: Optional[float]) -> CustomModel:
        self.distance_influence = None if distance_influence is None else float(distance_influence)
        return self

    def set_heading_penalty(self, heading_penalty: Optional[float]) -> CustomModel:
        self.heading_penalty = None if heading_penalty is None else float(heading_penalty)
        return self

    def set_areas(self, areas: JsonFeatureCollection) -> CustomModel:
        self.areas = areas
        return self

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if self.distance_influence is not None:
            data["distance_influence"] = float(self.distance_influence)
        if self.heading_penalty is not None:
            data["heading_penalty"] = float(self.heading_penalty)
        data["areas"] = self.areas.to_dict()
        data["priority"] = [statement.to_dict() for statement in self.priority]
        data["speed"] = [statement.to_dict() for statement in self.speed]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> CustomModel:
        distance_influence = data.get("distance_influence")
        heading_penalty = data.get("heading_penalty")
        areas = data.get("areas")
        return cls(
            distance_influence=None if distance_influence is None else float(distance_influence),
            heading_penalty=None if heading_penalty is None else float(heading_penalty),
            priority=[Statement.from_dict(item) for item in data.get("priority") or []],
            speed=[Statement.from_dict(item) for item in data.get("speed") or []],
            areas=JsonFeatureCollection.from_dict(areas) if areas else JsonFeatureCollection(),
        )
