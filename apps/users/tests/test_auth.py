from __future__ import annotations

from apps.users.mongo_models import ROLE_ADMIN, ROLE_TAILOR, User
from apps.utils.repository import get_repository
from apps.utils.testing import MemoryBackendTestCase, make_user

class AuthFlowTests(MemoryBackendTestCase):

    def _register(self, **body):
        body.setdefault("firstName", "Ada")
        body.setdefault("lastName", "Stitch")
        body.setdefault("email", "Ada@Example.com")
        body.setdefault("password", "needle123")
        return self.client.post("/api/v1/auth/register", body, format="json")

    def test_register_issues_tokens(self):
        response = self._register()

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["status"], "success")
        self.assertEqual(response.data["data"]["user"]["email"], "ada@example.com")
        self.assertEqual(response.data["data"]["user"]["role"], "customer")
        self.assertIn("access", response.data["data"]["tokens"])
        stored = get_repository(User).first(email="ada@example.com")
        self.assertNotEqual(stored.password, "needle123")
        self.assertTrue(stored.check_password("needle123"))

    def test_register_as_tailor(self):
        response = self._register(isTailor=True)

        self.assertEqual(response.data["data"]["user"]["role"], ROLE_TAILOR)

    def test_duplicate_email(self):
        self._register()

        response = self._register(email="ada@example.com")

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["status"], "error")

    def test_short_password(self):
        self.assertEqual(self._register(password="abc").status_code, 400)

    def test_login_and_me(self):
        self._register()

        login = self.client.post(
            "/api/v1/auth/login", {"email": "ada@example.com", "password": "needle123"}, format="json"
        )
        self.assertEqual(login.status_code, 200)

        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {login.data['data']['tokens']['access']}")
        me = self.client.get("/api/v1/auth/me")

        self.assertEqual(me.status_code, 200)
        self.assertEqual(me.data["data"]["user"]["firstName"], "Ada")

    def test_wrong_password(self):
        self._register()

        response = self.client.post(
            "/api/v1/auth/login", {"email": "ada@example.com", "password": "wrong"}, format="json"
        )

        self.assertEqual(response.status_code, 401)

    def test_refresh(self):
        refresh = self._register().data["data"]["tokens"]["refresh"]

        response = self.client.post("/api/v1/auth/refresh", {"refresh": refresh}, format="json")
        rejected = self.client.post("/api/v1/auth/refresh", {"refresh": "garbage"}, format="json")

        self.assertEqual(response.status_code, 200)
        self.assertIn("access", response.data["data"]["tokens"])
        self.assertEqual(rejected.status_code, 401)

    def test_me_requires_authentication(self):
        self.assertEqual(self.client.get("/api/v1/auth/me").status_code, 401)

    def test_trailing_slash_is_optional(self):
        self._register()

        response = self.client.post(
            "/api/v1/auth/login/", {"email": "ada@example.com", "password": "needle123"}, format="json"
        )

        self.assertEqual(response.status_code, 200)

class UserApiTests(MemoryBackendTestCase):

    def test_listing_is_admin_only(self):
        make_user(role=ROLE_TAILOR)
        self.client.force_authenticate(user=make_user())
        self.assertEqual(self.client.get("/api/v1/users").status_code, 403)

        self.client.force_authenticate(user=make_user(role=ROLE_ADMIN))
        response = self.client.get("/api/v1/users", {"role": ROLE_TAILOR})

        self.assertEqual(response.status_code, 200)
        self.assertEqual([user["role"] for user in response.data["data"]["users"]], [ROLE_TAILOR])

    def test_users_edit_themselves_only(self):
        first = make_user()
        second = make_user()
        self.client.force_authenticate(user=first)

        own = self.client.put(f"/api/v1/users/{first.id}", {"city": "Brooklyn", "latitude": 40.67}, format="json")
        other = self.client.put(f"/api/v1/users/{second.id}", {"city": "Queens"}, format="json")

        self.assertEqual(own.status_code, 200)
        self.assertEqual(own.data["data"]["user"]["city"], "Brooklyn")
        self.assertEqual(get_repository(User).get(first.id).latitude, 40.67)
        self.assertEqual(other.status_code, 403)

    def test_email_must_stay_unique(self):
        first = make_user()
        second = make_user()
        self.client.force_authenticate(user=first)

        response = self.client.put(f"/api/v1/users/{first.id}", {"email": second.email}, format="json")

        self.assertEqual(response.status_code, 400)
