#Purpose: encoded polyline codec for the "points" of a path.
#Same scheme as the Google polyline format: zig-zag varints in 5-bit chunks,
#lat then lon (then elevation in centimetres when 3D), each delta-encoded.
#The service encodes with a multiplier of 1e5 unless points_encoded_multiplier says otherwise.

from typing import List, Sequence

from .models import GeoPoint


def decode_polyline(encoded: str, is_3d: bool = False, multiplier: float = 1e5) -> List[GeoPoint]:
    if multiplier < 1:
        raise ValueError(f"multiplier cannot be smaller than 1 but was {multiplier} for polyline {encoded}")

    points: List[GeoPoint] = []
    index = 0
    length = len(encoded)
    lat = lon = ele = 0

    while index < length:
        delta, index = _read_value(encoded, index)
        lat += delta
        delta, index = _read_value(encoded, index)
        lon += delta

        if is_3d:
            delta, index = _read_value(encoded, index)
            ele += delta
            points.append(GeoPoint(lat / multiplier, lon / multiplier, ele / 100.0))
        else:
            points.append(GeoPoint(lat / multiplier, lon / multiplier))

    return points


def encode_polyline(points: Sequence[GeoPoint], is_3d: bool = False, multiplier: float = 1e5) -> str:
    if multiplier < 1:
        raise ValueError(f"multiplier cannot be smaller than 1 but was {multiplier}")

    chunks: List[str] = []
    prev_lat = prev_lon = prev_ele = 0
    for point in points:
        lat = int(round(point.lat * multiplier))
        lon = int(round(point.lon * multiplier))
        chunks.append(_write_value(lat - prev_lat))
        chunks.append(_write_value(lon - prev_lon))
        prev_lat, prev_lon = lat, lon

        if is_3d:
            ele = int(round((point.ele or 0.0) * 100))
            chunks.append(_write_value(ele - prev_ele))
            prev_ele = ele

    return "".join(chunks)


def _read_value(encoded: str, index: int):
    result = 0
    shift = 0
    while True:
        if index >= len(encoded):
            raise ValueError(f"Truncated polyline at position {index}")
        byte = ord(encoded[index]) - 63
        index += 1
        result |= (byte & 0x1F) << shift
        shift += 5
        if byte < 0x20:
            break
    delta = ~(result >> 1) if result & 1 else result >> 1
    return delta, index


def _write_value(value: int) -> str:
    value = ~(value << 1) if value < 0 else value << 1
    out = []
    while value >= 0x20:
        out.append(chr((0x20 | (value & 0x1F)) + 63))
        value >>= 5
    out.append(chr(value + 63))
    return "".join(out)
