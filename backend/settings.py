"""
Django settings for the CraftHub backend - Production Ready
"""

import os
import dj_database_url
from pathlib import Path
from datetime import timedelta

# .env file for development
from dotenv import load_dotenv

load_dotenv()

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent

# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = os.environ.get(
    "SECRET_KEY", "django-insecure-c7r@fth0b-k3y-f0r-l0c4l-d3v-0nly-9x!q2m#v8w"
)

# SECURITY WARNING: don't run with debug turned on in production!
DEBUG = os.environ.get("DEBUG", "True").lower() == "true"

# Production-ready ALLOWED_HOSTS
ALLOWED_HOSTS = os.environ.get("ALLOWED_HOSTS", "localhost,127.0.0.1").split(",")

# Application definition
INSTALLED_APPS = [
    "jazzmin",
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "django_extensions",
    # Third Party Apps
    "corsheaders",
    "rest_framework",
    "rest_framework_simplejwt",
    "rest_framework_simplejwt.token_blacklist",
    # Local Apps
    "storefront.apps.StorefrontConfig",
    "core.payments.apps.PaymentsConfig",
    # Stripe App
    "djstripe",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "whitenoise.middleware.WhiteNoiseMiddleware",
    "corsheaders.middleware.CorsMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

# CORS Settings - Production-ready
CORS_ALLOWED_ORIGINS = os.environ.get(
    "CORS_ALLOWED_ORIGINS", "http://localhost:5173,http://localhost:5174"
).split(",")
CORS_ALLOW_CREDENTIALS = True
CORS_ALLOW_METHODS = [
    "DELETE",
    "GET",
    "OPTIONS",
    "PATCH",
    "POST",
    "PUT",
]
CORS_ALLOW_HEADERS = [
    "accept",
    "accept-encoding",
    "authorization",
    "content-type",
    "dnt",
    "origin",
    "user-agent",
    "x-csrftoken",
    "x-requested-with",
    "x-device-session",
    "cache-control",
]
CORS_ALLOWED_ORIGIN_REGEXES = [
    r"^http://localhost:517[0-9]$",
    r"^http://127\.0\.0\.1:517[0-9]$",
]

ROOT_URLCONF = "backend.urls"

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

WSGI_APPLICATION = "backend.wsgi.application"

# Database - PostgreSQL via DATABASE_URL in production
if os.environ.get("DATABASE_URL"):
    DATABASES = {"default": dj_database_url.parse(os.environ.get("DATABASE_URL"))}
else:
    # Development: SQLite
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": BASE_DIR / "db.sqlite3",
        }
    }

# Cache Configuration - Redis in production
if os.environ.get("REDIS_URL"):
    CACHES = {
        "default": {
            "BACKEND": "django_redis.cache.RedisCache",
            "LOCATION": os.environ.get("REDIS_URL"),
            "OPTIONS": {
                "CLIENT_CLASS": "django_redis.client.DefaultClient",
                "CONNECTION_POOL_KWARGS": {
                    "max_connections": 20,
                    "retry_on_timeout": True,
                },
                "PICKLE_VERSION": -1,
            },
        }
    }
    SESSION_ENGINE = "django.contrib.sessions.backends.cache"
    SESSION_CACHE_ALIAS = "default"
else:
    # Development: In-Memory Cache
    CACHES = {
        "default": {
            "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
            "LOCATION": "crafthub-cache",
        }
    }

# Password validation
AUTH_PASSWORD_VALIDATORS = [
    {
        "NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator"
    },
    {"NAME": "django.contrib.auth.password_validation.MinimumLengthValidator"},
    {"NAME": "django.contrib.auth.password_validation.CommonPasswordValidator"},
    {"NAME": "django.contrib.auth.password_validation.NumericPasswordValidator"},
]

# Sign-in by email first, username as fallback for the admin site
AUTHENTICATION_BACKENDS = [
    "storefront.users.backends.EmailBackend",
    "django.contrib.auth.backends.ModelBackend",
]

# Internationalization
LANGUAGE_CODE = "en-us"
TIME_ZONE = "Asia/Kolkata"
USE_I18N = True
USE_TZ = True

# Static files (CSS, JavaScript, Images) - Production-ready
STATIC_URL = "/static/"
STATIC_ROOT = BASE_DIR / "staticfiles"
STORAGES = {
    "default": {"BACKEND": "django.core.files.storage.FileSystemStorage"},
    "staticfiles": {
        "BACKEND": (
            "django.contrib.staticfiles.storage.StaticFilesStorage"
            if DEBUG
            else "whitenoise.storage.CompressedManifestStaticFilesStorage"
        )
    },
}

# Security Settings für Production
if not DEBUG:
    SECURE_CONTENT_TYPE_NOSNIFF = True
    SECURE_HSTS_INCLUDE_SUBDOMAINS = True
    SECURE_HSTS_SECONDS = 31536000
    SECURE_REDIRECT_EXEMPT = []
    SECURE_SSL_REDIRECT = True
    SESSION_COOKIE_SECURE = True
    CSRF_COOKIE_SECURE = True

# Default primary key field type
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# REST Framework Settings
REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": (
        "backend.custom_auth.JWTAuthentication",
        "rest_framework_simplejwt.authentication.JWTAuthentication",
    ),
    "DEFAULT_PERMISSION_CLASSES": ("rest_framework.permissions.AllowAny",),
}

# Simple JWT Settings
SIMPLE_JWT = {
    "ACCESS_TOKEN_LIFETIME": timedelta(
        minutes=int(os.environ.get("JWT_ACCESS_TOKEN_LIFETIME_MINUTES", "15"))
    ),
    "REFRESH_TOKEN_LIFETIME": timedelta(
        days=int(os.environ.get("JWT_REFRESH_TOKEN_LIFETIME_DAYS", "7"))
    ),
    "ROTATE_REFRESH_TOKENS": True,
    "BLACKLIST_AFTER_ROTATION": True,
    "UPDATE_LAST_LOGIN": True,
    "ALGORITHM": "HS256",
    "SIGNING_KEY": SECRET_KEY,
    "AUTH_HEADER_TYPES": ("Bearer",),
    "AUTH_HEADER_NAME": "HTTP_AUTHORIZATION",
    "USER_ID_FIELD": "id",
    "USER_ID_CLAIM": "user_id",
    "AUTH_TOKEN_CLASSES": ("rest_framework_simplejwt.tokens.AccessToken",),
    "TOKEN_TYPE_CLAIM": "token_type",
    "JTI_CLAIM": "jti",
}

# Auth cookies (JWT pair is http-only; the device session token is readable by the page)
AUTH_COOKIE_ACCESS = "access_token"
AUTH_COOKIE_REFRESH = "refresh_token"
DEVICE_SESSION_COOKIE = "device_session_token"
DEVICE_SESSION_HEADER = "X-Device-Session"
AUTH_COOKIE_SECURE = os.environ.get("AUTH_COOKIE_SECURE", str(not DEBUG)).lower() == "true"
AUTH_COOKIE_SAMESITE = os.environ.get("AUTH_COOKIE_SAMESITE", "Lax")

# Email Settings
EMAIL_BACKEND = os.environ.get(
    "EMAIL_BACKEND", "django.core.mail.backends.console.EmailBackend"
)
EMAIL_HOST = os.environ.get("EMAIL_HOST", "localhost")
EMAIL_PORT = int(os.environ.get("EMAIL_PORT", "587"))
EMAIL_USE_TLS = os.environ.get("EMAIL_USE_TLS", "False").lower() == "true"
EMAIL_HOST_USER = os.environ.get("EMAIL_HOST_USER", "")
EMAIL_HOST_PASSWORD = os.environ.get("EMAIL_HOST_PASSWORD", "")
DEFAULT_FROM_EMAIL = os.environ.get("DEFAULT_FROM_EMAIL", "noreply@crafthub.example")

# Frontend URL for links in emails etc.
FRONTEND_URL = os.environ.get("FRONTEND_URL", "http://localhost:5173")
PASSWORD_RESET_TIMEOUT = int(os.environ.get("PASSWORD_RESET_TIMEOUT", "3600"))

# Google sign-in (ID tokens from the frontend popup are checked against this audience)
GOOGLE_CLIENT_ID = os.environ.get("GOOGLE_CLIENT_ID", "")
GOOGLE_TOKENINFO_URL = "https://oauth2.googleapis.com/tokeninfo"

# ---- Storefront ----
CURRENCY_SYMBOL = os.environ.get("CURRENCY_SYMBOL", "₹")
MAX_PRODUCT_IMAGES = int(os.environ.get("MAX_PRODUCT_IMAGES", "5"))
MAX_IMAGE_UPLOAD_BYTES = int(os.environ.get("MAX_IMAGE_UPLOAD_BYTES", str(5 * 1024 * 1024)))

# Orders and enrollments are handed to the operator through a WhatsApp deep link
OPERATOR_WHATSAPP_NUMBER = os.environ.get("OPERATOR_WHATSAPP_NUMBER", "")

# Image host (S3-compatible bucket)
IMAGE_HOST_BUCKET = os.environ.get("IMAGE_HOST_BUCKET", "crafthub-images")
IMAGE_HOST_ENDPOINT_URL = os.environ.get("IMAGE_HOST_ENDPOINT_URL", "")
IMAGE_HOST_REGION = os.environ.get("IMAGE_HOST_REGION", "")
IMAGE_HOST_ACCESS_KEY_ID = os.environ.get("IMAGE_HOST_ACCESS_KEY_ID", "")
IMAGE_HOST_SECRET_ACCESS_KEY = os.environ.get("IMAGE_HOST_SECRET_ACCESS_KEY", "")
IMAGE_HOST_PUBLIC_BASE_URL = os.environ.get("IMAGE_HOST_PUBLIC_BASE_URL", "")

# Course playback deterrents (overlay configuration only)
CONTENT_PROTECTION = {
    "disable_context_menu": True,
    "block_print_screen": True,
    "print_screen_warning": "Screen recording is disabled.",
    "block_copy": True,
    "copy_scope_selector": ".video-container",
    "watermark": {
        "enabled": True,
        "interval_seconds": int(os.environ.get("WATERMARK_INTERVAL_SECONDS", "5")),
    },
}

# Logging
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "{asctime} {levelname} {name} {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
    },
    "root": {"handlers": ["console"], "level": LOG_LEVEL},
    "loggers": {
        "django": {"handlers": ["console"], "level": "WARNING", "propagate": False},
        "djstripe": {"handlers": ["console"], "level": "INFO", "propagate": False},
    },
}

# Jazzmin Settings
JAZZMIN_SETTINGS = {
    "site_title": "CraftHub Admin",
    "site_header": "CraftHub",
    "site_brand": "CraftHub",
    "welcome_sign": "Welcome to the CraftHub back office",
    "copyright": "CraftHub",
    "search_model": ["storefront.Product", "storefront.Order"],
    "topmenu_links": [
        {"name": "Home", "url": "admin:index", "permissions": ["auth.view_user"]},
        {"name": "Storefront", "url": FRONTEND_URL, "new_window": True},
    ],
    "usermenu_links": [
        {"name": "My Profile", "url": "admin:auth_user_change", "id_field": "user.id"},
    ],
    "icons": {
        "auth": "fas fa-users-cog",
        "auth.user": "fas fa-user",
        "auth.Group": "fas fa-users",
        "storefront": "fas fa-store",
        "storefront.Product": "fas fa-palette",
        "storefront.Order": "fas fa-receipt",
        "storefront.CartItem": "fas fa-shopping-cart",
        "storefront.Course": "fas fa-video",
        "storefront.Enrollment": "fas fa-user-graduate",
    },
    "changeform_format": "horizontal_tabs",
    "changeform_format_overrides": {
        "auth.user": "collapsible",
    },
    "order_with_respect_to": [
        "storefront",
        "auth",
        "djstripe",
    ],
}

# Jazzmin UI tweaks (amber storefront theme)
JAZZMIN_UI_TWEAKS = {
    "brand_colour": "navbar-warning",
    "accent": "accent-warning",
    "navbar": "navbar-dark",
    "navbar_fixed": True,
    "sidebar_fixed": True,
    "sidebar": "sidebar-dark-warning",
    "sidebar_nav_child_indent": True,
}

# ---- Payments / Stripe / dj-stripe ----
# STRIPE_LIVE_MODE=True → LIVE Stripe environment (real payments),
# otherwise the TEST environment.
STRIPE_LIVE_MODE = os.environ.get("STRIPE_LIVE_MODE", "False").lower() == "true"

# Secret keys (backend only, never exposed to the frontend)
STRIPE_TEST_SECRET_KEY = os.environ.get("STRIPE_TEST_SECRET_KEY", "")  # sk_test_xxx
STRIPE_LIVE_SECRET_KEY = os.environ.get("STRIPE_LIVE_SECRET_KEY", "")  # sk_live_xxx

# Publishable keys (frontend safe)
STRIPE_TEST_PUBLISHABLE_KEY = os.environ.get(
    "STRIPE_TEST_PUBLISHABLE_KEY", ""
)  # pk_test_xxx
STRIPE_LIVE_PUBLISHABLE_KEY = os.environ.get(
    "STRIPE_LIVE_PUBLISHABLE_KEY", ""
)  # pk_live_xxx

# Webhook signing secret of the /stripe/webhook/ endpoint
DJSTRIPE_WEBHOOK_SECRET = os.environ.get("DJSTRIPE_WEBHOOK_SECRET", "")

# Default currency for payment intents (minor units = paise)
DEFAULT_CURRENCY = os.environ.get("DEFAULT_CURRENCY", "inr")

DJSTRIPE_STRIPE_API_VERSION = os.environ.get(
    "DJSTRIPE_STRIPE_API_VERSION", "2024-06-20"
)

# Active secret key at runtime
STRIPE_SECRET_KEY = (
    STRIPE_LIVE_SECRET_KEY if STRIPE_LIVE_MODE else STRIPE_TEST_SECRET_KEY
)

# dj-stripe relation mode: use Stripe object "id" (e.g. "cus_...") as FK target
DJSTRIPE_FOREIGN_KEY_TO_FIELD = "id"
DJSTRIPE_USE_NATIVE_JSONFIELD = True
