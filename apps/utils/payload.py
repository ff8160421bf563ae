from __future__ import annotations

from typing import Any, Mapping

def remap_keys(data: Any, field_mapping: Mapping[str, str]) -> Any:
    # camelCase request keys -> snake_case serializer fields
    if not isinstance(data, Mapping):
        return data
    converted = {}
    for key, value in data.items():
        converted[field_mapping.get(key, key)] = value
    return converted

def object_id_str(value) -> str | None:
    return str(value) if value is not None else None

def point_to_dict(point) -> dict | None:
    if not point:
        return None
    coordinates = point.get("coordinates") if isinstance(point, dict) else point
    longitude, latitude = coordinates
    return {"type": "Point", "coordinates": [longitude, latitude], "latitude": latitude, "longitude": longitude}

def make_point(latitude: float, longitude: float) -> dict:
    return {"type": "Point", "coordinates": [float(longitude), float(latitude)]}
