"""
Django settings for the crudml project.

Configuration is read from the environment:

    PORT                  listen port for ``manage.py runserver`` (default 3001)
    DATABASE_URL          store connection string (default sqlite:///db.sqlite3)
    DJANGO_SECRET_KEY     secret key
    DJANGO_DEBUG          "1"/"true" to enable debug mode
    DJANGO_ALLOWED_HOSTS  comma-separated host names
    DJANGO_NUM_PROXIES    trusted reverse proxies in front of the app (default 0)
    REGISTRY_API_URL      base URL the ``registros`` client command talks to
    REGISTRY_DENYLIST     comma-separated words masked before storage
    REGISTRY_LOG_LEVEL    level of the ``registros`` logger
"""

import os
from pathlib import Path
from typing import Dict, List, Tuple
from urllib.parse import unquote, urlsplit

BASE_DIR = Path(__file__).resolve().parent.parent

DB_ENGINES = {
    "sqlite": "django.db.backends.sqlite3",
    "postgres": "django.db.backends.postgresql",
    "postgresql": "django.db.backends.postgresql",
    "mysql": "django.db.backends.mysql",
}


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: str = "") -> List[str]:
    return [item.strip() for item in os.environ.get(name, default).split(",") if item.strip()]


def database_config(url: str) -> Dict:
    """
    Translate a connection URL into a Django ``DATABASES`` entry.

    Supported schemes: sqlite, postgres/postgresql, mysql. For SQLite a
    relative path is resolved against the project root.
    """
    parts = urlsplit(url)
    try:
        engine = DB_ENGINES[parts.scheme]
    except KeyError:
        raise ValueError(f"Unsupported DATABASE_URL scheme: {parts.scheme!r}") from None

    if parts.scheme == "sqlite":
        # sqlite:///relative.db and sqlite:////absolute/path.db
        path = unquote(parts.path[1:] if parts.path.startswith("/") else parts.path)
        if path in ("", ":memory:"):
            return {"ENGINE": engine, "NAME": ":memory:"}
        name = Path(path)
        if not name.is_absolute():
            name = BASE_DIR / name
        return {"ENGINE": engine, "NAME": str(name)}

    return {
        "ENGINE": engine,
        "NAME": unquote(parts.path.lstrip("/")),
        "USER": unquote(parts.username or ""),
        "PASSWORD": unquote(parts.password or ""),
        "HOST": parts.hostname or "",
        "PORT": str(parts.port or ""),
    }


def denylist_config(words: List[str]) -> List[Tuple[str, str]]:
    """Each denylisted word is masked with asterisks of the same length."""
    return [(word, "*" * len(word)) for word in words]


SECRET_KEY = os.environ.get("DJANGO_SECRET_KEY", "django-insecure-crudml-development-key")

DEBUG = _env_bool("DJANGO_DEBUG", default=False)

ALLOWED_HOSTS = _env_list("DJANGO_ALLOWED_HOSTS", "localhost,127.0.0.1,testserver")

PORT = int(os.environ.get("PORT", "3001"))

# Proxy hops in front of the app whose X-Forwarded-For entries are trusted.
# 0 keys clients on REMOTE_ADDR and ignores the header.
NUM_PROXIES = int(os.environ.get("DJANGO_NUM_PROXIES", "0"))

INSTALLED_APPS = [
    "django.contrib.contenttypes",
    "django.contrib.auth",
    "rest_framework",
    "drf_spectacular",
    "registros",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "crudml.urls"

WSGI_APPLICATION = "crudml.wsgi.application"

DATABASES = {
    "default": database_config(os.environ.get("DATABASE_URL", "sqlite:///db.sqlite3")),
}

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# The API contract has no trailing slashes.
APPEND_SLASH = False

LANGUAGE_CODE = "es"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "crudml-default",
    },
}

REST_FRAMEWORK = {
    "DEFAULT_RENDERER_CLASSES": ["rest_framework.renderers.JSONRenderer"],
    "DEFAULT_PARSER_CLASSES": ["rest_framework.parsers.JSONParser"],
    "DEFAULT_AUTHENTICATION_CLASSES": [],
    "DEFAULT_PERMISSION_CLASSES": ["rest_framework.permissions.AllowAny"],
    "UNAUTHENTICATED_USER": None,
    "NUM_PROXIES": NUM_PROXIES,
    "EXCEPTION_HANDLER": "registros.exceptions.registry_exception_handler",
    "DEFAULT_SCHEMA_CLASS": "drf_spectacular.openapi.AutoSchema",
    "TEST_REQUEST_DEFAULT_FORMAT": "json",
}

SPECTACULAR_SETTINGS = {
    "TITLE": "CRUD ML registry API",
    "DESCRIPTION": "Create, list, edit and delete short text records.",
    "VERSION": "1.0.0",
    "SERVE_INCLUDE_SCHEMA": False,
}

# Registry settings
REGISTRY_API_URL = os.environ.get("REGISTRY_API_URL", f"http://localhost:{PORT}/registros")

REGISTRY_CONTENT_FILTER = denylist_config(_env_list("REGISTRY_DENYLIST"))

REGISTRY_RATE_LIMIT = {
    "window": 15 * 60,  # seconds
    "max_requests": 30,
}

REGISTRY_PAGE_SIZE = 20

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "{asctime} {levelname} {name}: {message}",
            "style": "{",
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
        "level": "WARNING",
    },
    "loggers": {
        "registros": {
            "handlers": ["console"],
            "level": os.environ.get("REGISTRY_LOG_LEVEL", "INFO"),
            "propagate": False,
        },
    },
}
