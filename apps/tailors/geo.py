"""
Great-circle distance and radius-bounded search over tailor candidates.

Pure Python, framework-agnostic.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional

EARTH_RADIUS_MILES = 3958.8
DEFAULT_RADIUS_MILES = 10.0

SORT_BY_DISTANCE = "distance"
SORT_BY_RATING = "rating"
SORT_OPTIONS = (SORT_BY_DISTANCE, SORT_BY_RATING)

def calculate_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Haversine distance in miles between two (latitude, longitude) points."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_MILES * c

@dataclass
class Candidate:
    item: Any
    latitude: Optional[float]
    longitude: Optional[float]
    rating: float = 0.0
    distance: Optional[float] = None

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None

def sort_candidates(candidates: List[Candidate], sort_by: str) -> List[Candidate]:
    if sort_by == SORT_BY_RATING:
        return sorted(candidates, key=lambda candidate: candidate.rating or 0.0, reverse=True)
    if sort_by == SORT_BY_DISTANCE:
        return sorted(
            candidates,
            key=lambda candidate: (candidate.distance is None, candidate.distance or 0.0),
        )
    return list(candidates)

def search_tailors(
    candidates: Iterable[Candidate],
    latitude: Optional[float] = None,
    longitude: Optional[float] = None,
    radius: float = DEFAULT_RADIUS_MILES,
    sort_by: str = SORT_BY_DISTANCE,
) -> List[Candidate]:
    """
    Keep candidates within ``radius`` miles of the origin, sorted by ``sort_by``.

    Candidates without coordinates are dropped. Without an origin nothing is
    filtered by distance and only a rating sort applies.
    """
    if latitude is None or longitude is None:
        candidates = list(candidates)
        return sort_candidates(candidates, sort_by) if sort_by == SORT_BY_RATING else candidates

    within_radius = []
    for candidate in candidates:
        if not candidate.has_coordinates:
            continue
        candidate.distance = calculate_distance(latitude, longitude, candidate.latitude, candidate.longitude)
        if candidate.distance <= radius:
            within_radius.append(candidate)
    return sort_candidates(within_radius, sort_by)
