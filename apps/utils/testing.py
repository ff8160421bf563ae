from __future__ import annotations

from itertools import count

from django.test import SimpleTestCase, override_settings
from rest_framework.test import APIClient

from apps.users.mongo_models import ROLE_CUSTOMER, User

from .repository import get_repository, reset_memory_stores

_sequence = count(1)

def make_user(role: str = ROLE_CUSTOMER, password: str = "secret123", **fields) -> User:
    number = next(_sequence)
    fields.setdefault("first_name", role.title())
    fields.setdefault("last_name", f"Number{number}")
    fields.setdefault("email", f"{role}{number}@example.com")
    user = User(role=role, **fields)
    user.set_password(password)
    return get_repository(User).add(user)

@override_settings(PERSISTENCE_BACKEND="memory", STRIPE_SECRET_KEY="")
class MemoryBackendTestCase(SimpleTestCase):
    """Runs against the in-memory repositories, emptied before every test."""

    client_class = APIClient

    def setUp(self):
        super().setUp()
        reset_memory_stores()
        self.addCleanup(reset_memory_stores)

    def anonymous_client(self) -> APIClient:
        # APIClient.logout() needs django.contrib.sessions, which is not installed.
        return self.client_class()
