from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from django.conf import settings

from apps.users.mongo_models import ROLE_TAILOR, User
from apps.users.permissions import require_role
from apps.utils.exceptions import InvalidRequest, NotAuthorized, NotFound
from apps.utils.repository import get_repository

from .geo import SORT_BY_DISTANCE, SORT_OPTIONS, Candidate, search_tailors
from .mongo_models import Tailor

logger = logging.getLogger(__name__)

def get_tailor(tailor_id) -> Tailor:
    tailor = get_repository(Tailor).get(tailor_id)
    if tailor is None:
        raise NotFound("Tailor not found")
    return tailor

def get_tailor_for_user(user) -> Optional[Tailor]:
    if user is None or getattr(user, "id", None) is None:
        return None
    return get_repository(Tailor).first(user_id=user.id)

def is_tailor_owner(user, tailor_id) -> bool:
    """True when ``tailor_id`` is the profile belonging to ``user``."""
    profile = get_tailor_for_user(user)
    return profile is not None and str(profile.id) == str(tailor_id)

def _split_specialties(raw) -> List[str]:
    if not raw:
        return []
    if isinstance(raw, str):
        raw = raw.split(",")
    return [item.strip().lower() for item in raw if item and item.strip()]

def find_tailors(
    latitude: Optional[float] = None,
    longitude: Optional[float] = None,
    radius: Optional[float] = None,
    specialties: Iterable[str] | str | None = None,
    min_rating: Optional[float] = None,
    sort_by: str = SORT_BY_DISTANCE,
) -> List[Candidate]:
    if sort_by not in SORT_OPTIONS:
        raise InvalidRequest(f"sortBy must be one of: {', '.join(SORT_OPTIONS)}")
    if radius is None:
        radius = settings.TAILOR_SEARCH_RADIUS_MILES
    if radius <= 0:
        raise InvalidRequest("radius must be positive")

    wanted = set(_split_specialties(specialties))
    users = get_repository(User)

    candidates = []
    for tailor in get_repository(Tailor).filter(order_by="-rating", is_available=True):
        if min_rating is not None and (tailor.rating or 0) < min_rating:
            continue
        if wanted and not wanted & {specialty.lower() for specialty in tailor.specialties}:
            continue
        owner = users.get(tailor.user_id)
        candidates.append(
            Candidate(
                item=(tailor, owner),
                latitude=getattr(owner, "latitude", None),
                longitude=getattr(owner, "longitude", None),
                rating=tailor.rating or 0.0,
            )
        )

    return search_tailors(candidates, latitude, longitude, radius=radius, sort_by=sort_by)

def upsert_profile(user, data: dict) -> tuple[Tailor, bool]:
    require_role(user, ROLE_TAILOR, message="Only tailors can manage a tailor profile")
    tailors = get_repository(Tailor)
    tailor = tailors.first(user_id=user.id)
    created = tailor is None
    if created:
        tailor = Tailor(user_id=user.id)

    for key, value in data.items():
        setattr(tailor, key, value)

    if created:
        tailors.add(tailor)
        logger.info("Created tailor profile %s for user %s", tailor.id, user.id)
    else:
        tailors.save(tailor)
    return tailor, created

def add_portfolio_images(user, tailor_id, images: List[str]) -> Tailor:
    tailor = get_tailor(tailor_id)
    if tailor.user_id != user.id:
        raise NotAuthorized("You can only update your own portfolio")
    tailor.portfolio = list(tailor.portfolio) + list(images)
    get_repository(Tailor).save(tailor)
    return tailor
