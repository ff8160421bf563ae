from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path

from django.test import SimpleTestCase
from django.urls import resolve

from apps.utils.exceptions import marketplace_exception_handler

PROJECT_ROOT = Path(__file__).resolve().parents[3]

class UrlConfTests(SimpleTestCase):

    def test_routes_resolve(self):
        cases = {
            "/api/v1/auth/login": "auth-login",
            "/api/v1/deliveries/tracking/ABCD1234": "delivery-tracking",
            "/api/v1/payments/webhook": "payment-webhook",
            "/api/v1/measurements/suggestion": "measurement-suggestion",
            "/api/v1/tailors/64b7f0c2a1b2c3d4e5f60718": "tailor-detail",
        }
        for path, name in cases.items():
            self.assertEqual(resolve(path).url_name, name, path)

    def test_fresh_interpreter_can_load_urlconf(self):
        # The exception handler module sits on the authentication import path.
        script = (
            "import django; django.setup(); "
            "import apps.utils.exceptions, apps.utils.repository, config.urls"
        )
        env = {**os.environ, "DJANGO_SETTINGS_MODULE": "config.test_settings"}

        result = subprocess.run(
            [sys.executable, "-c", script],
            cwd=PROJECT_ROOT,
            env=env,
            capture_output=True,
            text=True,
        )

        self.assertEqual(result.returncode, 0, result.stderr)

    def test_exception_handler_is_the_configured_one(self):
        from django.conf import settings

        self.assertEqual(
            settings.REST_FRAMEWORK["EXCEPTION_HANDLER"],
            f"{marketplace_exception_handler.__module__}.{marketplace_exception_handler.__name__}",
        )
