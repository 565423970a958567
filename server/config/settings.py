import os
from datetime import timedelta
from pathlib import Path
from urllib.parse import urlparse

from dotenv import load_dotenv

load_dotenv()

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent


SECRET_KEY = os.environ.get("DJANGO_SECRET_KEY", "")

# SECURITY WARNING: don't run with debug turned on in production!
def _env_bool(name: str, default: bool = False) -> bool:
    value = os.environ.get(name, "")
    if not value:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}

DEBUG = _env_bool("DEBUG", True)

if not SECRET_KEY and DEBUG:
    SECRET_KEY = "giftlist-insecure-development-key"

_raw_allowed_hosts = os.environ.get("ALLOWED_HOSTS", "localhost,127.0.0.1,testserver")
ALLOWED_HOSTS = [h.strip() for h in _raw_allowed_hosts.split(",") if h.strip()]


def _database_from_url(database_url: str):
    if not database_url:
        return {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": BASE_DIR / "db.sqlite3",
        }

    parsed = urlparse(database_url)
    scheme = (parsed.scheme or "").lower()

    if scheme in {"sqlite", "sqlite3"}:
        db_path = parsed.path or ""
        if not db_path or db_path == "/":
            return {
                "ENGINE": "django.db.backends.sqlite3",
                "NAME": BASE_DIR / "db.sqlite3",
            }
        if db_path.startswith("//"):
            return {"ENGINE": "django.db.backends.sqlite3", "NAME": db_path[1:]}
        return {"ENGINE": "django.db.backends.sqlite3", "NAME": BASE_DIR / db_path.lstrip("/")}

    if scheme in {"postgres", "postgresql"}:
        return {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": (parsed.path or "").lstrip("/"),
            "USER": parsed.username or "",
            "PASSWORD": parsed.password or "",
            "HOST": parsed.hostname or "",
            "PORT": parsed.port or "",
        }

    return {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": BASE_DIR / "db.sqlite3",
    }

# Application definition

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",

    # Third-party
    "rest_framework",
    "rest_framework_simplejwt",
    "corsheaders",
    "drf_spectacular",

    # Local apps
    "giftlist.apps.GiftlistConfig",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "corsheaders.middleware.CorsMiddleware",
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
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

WSGI_APPLICATION = "config.wsgi.application"


# Database

DATABASES = {
    "default": _database_from_url(os.environ.get("DATABASE_URL", "")),
}


# Password validation - Empty since users only ever sign in with passkeys

AUTH_PASSWORD_VALIDATORS = []


# Internationalization

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True


# Static files (CSS, JavaScript, Images)

STATIC_URL = "/static/"
STATIC_ROOT = BASE_DIR / "staticfiles"

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# Custom user model
AUTH_USER_MODEL = "giftlist.User"

# Django REST Framework
REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": (
        "giftlist.authentication.SessionCookieAuthentication",
        "rest_framework.authentication.SessionAuthentication",
    ),
    "DEFAULT_PERMISSION_CLASSES": (
        "rest_framework.permissions.IsAuthenticated",
    ),
    "DEFAULT_RENDERER_CLASSES": (
        "rest_framework.renderers.JSONRenderer",
        "rest_framework.renderers.BrowsableAPIRenderer",
    ),
    "DEFAULT_PARSER_CLASSES": (
        "rest_framework.parsers.JSONParser",
    ),
    "EXCEPTION_HANDLER": "giftlist.utils.exception_handler",
    "DEFAULT_SCHEMA_CLASS": "drf_spectacular.openapi.AutoSchema",
}

# Session tokens (signed, stateless, no server-side revocation)
SESSION_SECRET = os.environ.get("SESSION_SECRET", "").strip() or SECRET_KEY

SIMPLE_JWT = {
    "ALGORITHM": "HS256",
    "SIGNING_KEY": SESSION_SECRET,
    "USER_ID_FIELD": "id",
    "USER_ID_CLAIM": "user_id",
    "UPDATE_LAST_LOGIN": False,
}

GIFTLIST_SESSION_LIFETIME = timedelta(days=30)
GIFTLIST_SESSION_COOKIE_NAME = os.environ.get("GIFTLIST_SESSION_COOKIE_NAME", "session").strip() or "session"
GIFTLIST_SESSION_COOKIE_SECURE = _env_bool("GIFTLIST_SESSION_COOKIE_SECURE", True)
GIFTLIST_INVITE_TTL_HOURS = int(os.environ.get("GIFTLIST_INVITE_TTL_HOURS", "24"))

# WebAuthn relying party. Validated once at startup by GiftlistConfig.ready().
WEBAUTHN_RP_ID = os.environ.get("WEBAUTHN_RP_ID", "localhost" if DEBUG else "").strip()
WEBAUTHN_RP_NAME = os.environ.get("WEBAUTHN_RP_NAME", "Giftlist").strip()
WEBAUTHN_ORIGIN = os.environ.get("WEBAUTHN_ORIGIN", "http://localhost:3000" if DEBUG else "").strip()
WEBAUTHN_USER_VERIFICATION = os.environ.get("WEBAUTHN_USER_VERIFICATION", "preferred").strip().lower()
WEBAUTHN_CHALLENGE_TTL_SECONDS = int(os.environ.get("WEBAUTHN_CHALLENGE_TTL_SECONDS", "300"))

# CORS Settings
_raw_cors = os.environ.get("CORS_ALLOWED_ORIGINS", "").strip()

if _raw_cors:
    CORS_ALLOWED_ORIGINS = [
        o.strip().strip("'\"")
        for o in _raw_cors.split(",")
        if o.strip()
    ]
else:
    CORS_ALLOWED_ORIGINS = [WEBAUTHN_ORIGIN or "http://localhost:3000"]

# Session cookies are sent cross-origin by the frontend
CORS_ALLOW_CREDENTIALS = _env_bool("CORS_ALLOW_CREDENTIALS", True)

# Celery
_redis_url = os.environ.get("REDIS_URL", "").strip()

_celery_broker_url = os.environ.get("CELERY_BROKER_URL", "").strip()
if not _celery_broker_url:
    _celery_broker_url = _redis_url
if not _celery_broker_url and DEBUG:
    _celery_broker_url = "memory://"

CELERY_BROKER_URL = _celery_broker_url
CELERY_TASK_SERIALIZER = "json"
CELERY_ACCEPT_CONTENT = ["json"]
CELERY_TIMEZONE = "UTC"
CELERY_ENABLE_UTC = True

# Rate Limiting
RATELIMIT_ENABLE = _env_bool("RATELIMIT_ENABLE", True)
RATELIMIT_USE_CACHE = "default"

# Cache
if _redis_url:
    CACHES = {
        "default": {
            "BACKEND": "django.core.cache.backends.redis.RedisCache",
            "LOCATION": _redis_url,
        }
    }
else:
    CACHES = {
        "default": {
            "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
            "LOCATION": "giftlist-default",
        }
    }

SPECTACULAR_SETTINGS = {
    "TITLE": "Giftlist API",
    "DESCRIPTION": "Shared wish lists with passkey sign-in",
    "VERSION": "1.0.0",
    "SERVE_INCLUDE_SCHEMA": False,
    "COMPONENT_SPLIT_REQUEST": True,
    "SCHEMA_PATH_PREFIX": "/api",
}

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "simple"},
    },
    "loggers": {
        "giftlist": {
            "handlers": ["console"],
            "level": os.environ.get("LOG_LEVEL", "INFO").upper(),
        },
    },
}

# Security Settings (production)
if not DEBUG:
    SECURE_SSL_REDIRECT = True
    SESSION_COOKIE_SECURE = True
    CSRF_COOKIE_SECURE = True
    SECURE_CONTENT_TYPE_NOSNIFF = True
    SECURE_HSTS_SECONDS = 31536000
    SECURE_HSTS_INCLUDE_SUBDOMAINS = True
    SECURE_HSTS_PRELOAD = True
