# bid_desk/settings.py
import os
from pathlib import Path
from dotenv import load_dotenv
import dj_database_url

BASE_DIR = Path(__file__).resolve().parent.parent

# Load .env early so os.getenv sees values (do this BEFORE reading secrets)
load_dotenv(BASE_DIR / ".env")

# Environment flags
ON_RENDER = os.getenv("RENDER", "") != ""
DEBUG = os.getenv("DEBUG", "False").lower() == "true"

# DATA_DIR: persistent location on Render when using a mounted disk
DATA_DIR = Path(os.getenv("DATA_DIR", BASE_DIR / "data"))
if ON_RENDER:
    DATA_DIR = Path("/opt/render/project/src/data")
DATA_DIR.mkdir(parents=True, exist_ok=True)

# Security / secret
SECRET_KEY = os.getenv("SECRET_KEY", "dev-insecure-key")
# ALLOWED_HOSTS: handle empty env safely
if DEBUG:
    ALLOWED_HOSTS = ["*"]
else:
    hosts_env = os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1,testserver")
    ALLOWED_HOSTS = [h.strip() for h in hosts_env.split(",") if h.strip()]

# If Render provides hostname, add to CSRF trusted origins
RENDER_HOST = os.getenv("RENDER_EXTERNAL_HOSTNAME")
if RENDER_HOST:
    CSRF_TRUSTED_ORIGINS = [f"https://{RENDER_HOST}"]

# App config
INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "bids",
]

# Middleware (WhiteNoise should be directly after SecurityMiddleware)
MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "whitenoise.middleware.WhiteNoiseMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "bid_desk.urls"

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
    },
]

WSGI_APPLICATION = "bid_desk.wsgi.application"

TIME_ZONE = os.getenv("TIME_ZONE", "UTC")
USE_I18N = True
USE_TZ = True

# Database: prefer DATABASE_URL (Postgres) if provided; otherwise SQLite on DATA_DIR
if os.getenv("DATABASE_URL"):
    DATABASES = {
        "default": dj_database_url.parse(os.environ["DATABASE_URL"], conn_max_age=600)
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": DATA_DIR / "db.sqlite3",
        }
    }

# Password validators
AUTH_PASSWORD_VALIDATORS = [
    {"NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator"},
    {"NAME": "django.contrib.auth.password_validation.MinimumLengthValidator"},
    {"NAME": "django.contrib.auth.password_validation.CommonPasswordValidator"},
    {"NAME": "django.contrib.auth.password_validation.NumericPasswordValidator"},
]

# Static files
STATIC_URL = "/static/"
STATIC_ROOT = BASE_DIR / "staticfiles"
STORAGES = {
    "default": {"BACKEND": "django.core.files.storage.FileSystemStorage"},
    "staticfiles": {"BACKEND": "whitenoise.storage.CompressedManifestStaticFilesStorage"},
}

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# Auth redirects (the dashboard is API-only, so reuse the admin login page)
LOGIN_URL = "/admin/login/"
LOGIN_REDIRECT_URL = "/api/dashboard/"

# Seed key for freshly created AI settings rows; each user can override it
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")

# Conversation policy: reject out-of-turn client/me messages instead of warning
BID_DESK_STRICT_ALTERNATION = os.getenv("BID_DESK_STRICT_ALTERNATION", "False").lower() in ("1", "true", "yes")

# Marketplace (Freelancer.com) HTTP timeout in seconds
MARKETPLACE_TIMEOUT = int(os.getenv("MARKETPLACE_TIMEOUT", 15))

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "simple"},
    },
    "root": {"handlers": ["console"], "level": "WARNING"},
    "loggers": {
        "bids": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
    },
}

# Security hardening for production
if not DEBUG and ON_RENDER:
    SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")
    SESSION_COOKIE_SECURE = True
    CSRF_COOKIE_SECURE = True
    SECURE_SSL_REDIRECT = True
    SECURE_HSTS_SECONDS = int(os.getenv("SECURE_HSTS_SECONDS", 3600))
    SECURE_HSTS_INCLUDE_SUBDOMAINS = os.getenv("SECURE_HSTS_INCLUDE_SUBDOMAINS", "True").lower() in ("1", "true", "yes")
    SECURE_HSTS_PRELOAD = os.getenv("SECURE_HSTS_PRELOAD", "True").lower() in ("1", "true", "yes")
else:
    # Helpful defaults for local dev
    SESSION_COOKIE_SECURE = False
    CSRF_COOKIE_SECURE = False
    SECURE_SSL_REDIRECT = False
