# config/settings/base.py
from pathlib import Path
import os
from dotenv import load_dotenv
from datetime import timedelta


BASE_DIR = Path(__file__).resolve().parent.parent.parent
load_dotenv(BASE_DIR / ".env")

SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "unsafe-dev-key")
DEBUG = os.getenv("DJANGO_DEBUG", "0") == "1"
ALLOWED_HOSTS = ["*"]

INSTALLED_APPS = [
    # Django
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",

    # Third-party
    "corsheaders",
    "rest_framework",
    "drf_spectacular",
    "django_filters",

    # Domain apps (modular monolith)
    "tm_core.common.apps.CommonConfig",
    "tm_core.iam.apps.IamConfig",
    "tm_core.doctors.apps.DoctorsConfig",
    "tm_core.clinical.apps.ClinicalConfig",
    "tm_core.billing.apps.BillingConfig",
    "tm_core.appointments.apps.AppointmentsConfig",
    "tm_core.chat.apps.ChatConfig",
    "tm_core.audit.apps.AuditConfig",
]

MIDDLEWARE = [
    "corsheaders.middleware.CorsMiddleware",
    "tm_core.common.middleware.RequestIdMiddleware",
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]


ROOT_URLCONF = "config.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    }
]

WSGI_APPLICATION = "config.wsgi.application"

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.postgresql",
        "NAME": os.getenv("DB_NAME", "telemed"),
        "USER": os.getenv("DB_USER", "telemed"),
        "PASSWORD": os.getenv("DB_PASSWORD", "telemed"),
        "HOST": os.getenv("DB_HOST", "127.0.0.1"),
        "PORT": os.getenv("DB_PORT", "5432"),
        "CONN_MAX_AGE": int(os.getenv("DB_CONN_MAX_AGE", "60")),
    }
}

AUTH_PASSWORD_VALIDATORS = [
    {"NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator"},
    {"NAME": "django.contrib.auth.password_validation.MinimumLengthValidator"},
    {"NAME": "django.contrib.auth.password_validation.CommonPasswordValidator"},
    {"NAME": "django.contrib.auth.password_validation.NumericPasswordValidator"},
]

LANGUAGE_CODE = "en-us"
TIME_ZONE = "Asia/Kolkata"
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": (
        "tm_core.iam.auth.IdentityProviderJWTAuthentication",
    ),
    "DEFAULT_PERMISSION_CLASSES": (
        "rest_framework.permissions.IsAuthenticated",
    ),
    "DEFAULT_SCHEMA_CLASS": "drf_spectacular.openapi.AutoSchema",

    # Standard error envelope
    "EXCEPTION_HANDLER": "tm_core.common.api.exceptions.api_exception_handler",

    "DEFAULT_FILTER_BACKENDS": [
        "django_filters.rest_framework.DjangoFilterBackend",
        "rest_framework.filters.OrderingFilter",
    ],

    "DEFAULT_PAGINATION_CLASS": "tm_core.common.api.pagination.DefaultPagination",
}

SPECTACULAR_SETTINGS = {
    "TITLE": "Telemed API",
    "DESCRIPTION": "Appointments, payment entitlements, chat and video for patients and doctors",
    "VERSION": "0.1.0",
    "COMPONENT_SPLIT_REQUEST": True,
    "SORT_OPERATIONS": True,
    "SORT_OPERATION_PARAMETERS": True,
    "SECURITY": [
        {"IdentityProviderJWT": []}
    ],
}

# Identity provider tokens. The provider signs the JWT; we only verify it.
# "sub" carries the provider's user id, mapped to UserProfile.external_id.
SIMPLE_JWT = {
    "ALGORITHM": os.getenv("IDP_JWT_ALGORITHM", "HS256"),
    "SIGNING_KEY": os.getenv("IDP_JWT_SIGNING_KEY", SECRET_KEY),
    "VERIFYING_KEY": os.getenv("IDP_JWT_VERIFYING_KEY") or None,
    "ISSUER": os.getenv("IDP_JWT_ISSUER") or None,
    "AUDIENCE": os.getenv("IDP_JWT_AUDIENCE") or None,
    "JWK_URL": os.getenv("IDP_JWK_URL") or None,
    "LEEWAY": timedelta(seconds=int(os.getenv("IDP_JWT_LEEWAY_SECONDS", "30"))),
    "USER_ID_CLAIM": "sub",
    "TOKEN_TYPE_CLAIM": None,
    "JTI_CLAIM": None,
    "AUTH_HEADER_TYPES": ("Bearer",),

    # Cookie fallback (provider session cookie)
    "AUTH_COOKIE": os.getenv("IDP_SESSION_COOKIE", "__session"),
}

# Identity provider webhooks (svix-signed user.created / user.updated / user.deleted)
IDP_WEBHOOK_SECRET = os.getenv("IDP_WEBHOOK_SECRET", "")

PAYMENT_GATEWAY = {
    "BASE_URL": os.getenv("RAZORPAY_BASE_URL", "https://api.razorpay.com/v1"),
    "KEY_ID": os.getenv("RAZORPAY_KEY_ID", ""),
    "KEY_SECRET": os.getenv("RAZORPAY_KEY_SECRET", ""),
    "CURRENCY": os.getenv("PAYMENT_CURRENCY", "INR"),
    "TIMEOUT_SECONDS": float(os.getenv("PAYMENT_GATEWAY_TIMEOUT", "10")),
}

REALTIME_BUS = {
    "APP_ID": os.getenv("PUSHER_APP_ID", ""),
    "KEY": os.getenv("PUSHER_KEY", ""),
    "SECRET": os.getenv("PUSHER_SECRET", ""),
    "CLUSTER": os.getenv("PUSHER_CLUSTER", "ap2"),
    "TIMEOUT_SECONDS": float(os.getenv("PUSHER_TIMEOUT", "5")),
}

VIDEO_PROVIDER = {
    "BASE_URL": os.getenv("HMS_BASE_URL", "https://api.100ms.live/v2"),
    "ACCESS_KEY": os.getenv("HMS_API_KEY", ""),
    "SECRET": os.getenv("HMS_APP_SECRET", ""),
    "TEMPLATE_ID": os.getenv("HMS_TEMPLATE_ID", ""),
    "TIMEOUT_SECONDS": float(os.getenv("HMS_TIMEOUT", "10")),
}

OBJECT_STORAGE = {
    "CLOUD_NAME": os.getenv("CLOUDINARY_CLOUD_NAME", ""),
    "UPLOAD_PRESET": os.getenv("CLOUDINARY_UPLOAD_PRESET", "med-tech-preset"),
    "TIMEOUT_SECONDS": float(os.getenv("CLOUDINARY_TIMEOUT", "30")),
}

# CORS settings
# Development
CORS_ALLOW_ALL_ORIGINS = True  # Only for development!
CORS_ALLOW_CREDENTIALS = True
CORS_EXPOSE_HEADERS = ["X-Request-Id"]

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "%(asctime)s %(levelname)s %(name)s %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": os.getenv("DJANGO_LOG_LEVEL", "INFO"),
    },
    "loggers": {
        "django.db.backends": {"level": "WARNING"},
        "httpx": {"level": "WARNING"},
    },
}
