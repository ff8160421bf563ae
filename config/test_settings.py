from .settings import *  # noqa: F401,F403

PERSISTENCE_BACKEND = "memory"

STRIPE_SECRET_KEY = ""
STRIPE_WEBHOOK_SECRET = ""

SECRET_KEY = "test-secret-key"
SIMPLE_JWT = {**SIMPLE_JWT, "SIGNING_KEY": SECRET_KEY}  # noqa: F405

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "handlers": {
        "null": {
            "class": "logging.NullHandler",
        },
    },
    "root": {
        "handlers": ["null"],
        "level": "WARNING",
    },
}
