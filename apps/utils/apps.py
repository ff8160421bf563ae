from django.apps import AppConfig

class UtilsConfig(AppConfig):
    name = "apps.utils"
    label = "marketplace_utils"

    def ready(self):
        # Every DRF renderer emits ObjectIds as strings once this is imported.
        from . import json_encoder  # noqa: F401
