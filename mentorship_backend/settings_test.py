import os

os.environ.setdefault("USE_SQLITE_FOR_TESTS", "1")
os.environ.setdefault("RAZORPAY_KEY_SECRET", "test_razorpay_secret")

from .settings import *  # noqa: F401,F403


PASSWORD_HASHERS = [
    "django.contrib.auth.hashers.MD5PasswordHasher",
]

DEBUG = False

ALLOWED_HOSTS = [*ALLOWED_HOSTS, "testserver"]

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"

CLERK_JWKS_URL = "https://identity.test/.well-known/jwks.json"
CLERK_SECRET_KEY = ""
SIMPLE_JWT = {**SIMPLE_JWT, "JWK_URL": CLERK_JWKS_URL}

RAZORPAY_KEY_SECRET = os.environ["RAZORPAY_KEY_SECRET"]

LOGGING = {**LOGGING, "loggers": {**LOGGING["loggers"], "core": {"handlers": ["console"], "level": "CRITICAL"}}}
