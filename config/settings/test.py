# config/settings/test.py
import os

from .base import *  # noqa

DEBUG = False

# PostgreSQL (as in base) when TEST_DB_ENGINE=postgresql; the booking race test needs row locks.
if os.getenv("TEST_DB_ENGINE", "sqlite").lower() not in ("postgres", "postgresql"):
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": BASE_DIR / "test.sqlite3",
            "TEST": {"NAME": BASE_DIR / "test.sqlite3"},
        }
    }

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

SIMPLE_JWT = {
    **SIMPLE_JWT,
    "ALGORITHM": "HS256",
    "SIGNING_KEY": "test-idp-signing-key-for-hs256-tokens",
    "VERIFYING_KEY": None,
    "ISSUER": None,
    "AUDIENCE": None,
    "JWK_URL": None,
}

IDP_WEBHOOK_SECRET = "whsec_dGVzdC13ZWJob29rLXNlY3JldA=="

PAYMENT_GATEWAY = {
    **PAYMENT_GATEWAY,
    "KEY_ID": "rzp_test_key",
    "KEY_SECRET": "rzp_test_secret",
}

VIDEO_PROVIDER = {
    **VIDEO_PROVIDER,
    "ACCESS_KEY": "hms-test-access",
    "SECRET": "hms-test-app-secret-for-management-tokens",
    "TEMPLATE_ID": "tmpl-test",
}

REALTIME_BUS = {
    **REALTIME_BUS,
    "APP_ID": "1000001",
    "KEY": "pusher-test-key",
    "SECRET": "pusher-test-secret",
}

OBJECT_STORAGE = {
    **OBJECT_STORAGE,
    "CLOUD_NAME": "test-cloud",
}

LOGGING = {
    **LOGGING,
    "root": {"handlers": ["console"], "level": "WARNING"},
}
