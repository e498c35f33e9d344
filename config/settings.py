"""
KSA – Django Settings (Infrastructure Only)
============================================
Django serves as the framework container for the billing engine.
The engine architecture is the authority — Django does not dictate
structure. The only persisted table owned here is the keyed counter
store (core.sequences); bookings and offers belong to collaborators.
"""

import os
from pathlib import Path

# ── Paths ─────────────────────────────────────────────────────
BASE_DIR = Path(__file__).resolve().parent.parent

# ── Security ──────────────────────────────────────────────────
SECRET_KEY = os.environ.get("DJANGO_SECRET_KEY", "ksa-dev-key-replace-before-deployment")

DEBUG = os.environ.get("DJANGO_DEBUG", "1") == "1"

ALLOWED_HOSTS = []

# ── Installed Apps ────────────────────────────────────────────
INSTALLED_APPS = [
    "django.contrib.auth",
    "django.contrib.contenttypes",
    # ── KSA Modules ───────────────────────────────────────
    "core.sequences",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
]

# ── Database ──────────────────────────────────────────────────
# SQLite for development. Production DB configured separately;
# counters need a backend with row-level locking (PostgreSQL).
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": BASE_DIR / "db.sqlite3",
    }
}

# ── Internationalization ──────────────────────────────────────
LANGUAGE_CODE = "de-de"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# ── Billing ───────────────────────────────────────────────────
BILLING = {
    "DEFAULT_CURRENCY": os.environ.get("BILLING_DEFAULT_CURRENCY", "EUR"),
    "DEFAULT_TYPE_CODE": "INV",
    "SEQUENCE_MAX_ATTEMPTS": int(os.environ.get("BILLING_SEQUENCE_MAX_ATTEMPTS", "5")),
    "TYPE_CODES": {
        "Foerdertraining": "FO",
        "Kindergarten": "KIGA",
        "Athletiktraining": "AT",
        "AthleticTraining": "AT",
    },
    "SUBTYPE_CODES": {
        "powertraining": "PW",
    },
}

# ── Logging ───────────────────────────────────────────────────
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "plain": {
            "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "plain",
        },
    },
    "loggers": {
        "ksa": {
            "handlers": ["console"],
            "level": os.environ.get("KSA_LOG_LEVEL", "INFO"),
        },
    },
}
