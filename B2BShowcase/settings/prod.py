"""
Production settings for B2BShowcase.
"""

import os

from .base import *  # noqa: F403, F401

DEBUG = False

ALLOWED_HOSTS = os.environ.get("ALLOWED_HOSTS", "").split(",")

# Security settings
SECURE_SSL_REDIRECT = True
SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True
SECURE_CONTENT_TYPE_NOSNIFF = True
X_FRAME_OPTIONS = "DENY"

# Secret key from environment
SECRET_KEY = os.environ.get("SECRET_KEY", SECRET_KEY)  # noqa: F405

# The catalog mirror shares Redis with the default cache in production
CACHES["catalog"] = {  # noqa: F405
    "BACKEND": "django.core.cache.backends.redis.RedisCache",
    "LOCATION": os.environ.get("CATALOG_REDIS_URL", os.environ.get("REDIS_URL", "redis://127.0.0.1:6379/2")),
    "TIMEOUT": None,
    "OPTIONS": {
        "socket_connect_timeout": 5,
        "socket_timeout": 5,
    },
}

# Logging in production
LOGGING = get_logging_config("production")  # noqa: F405
LOGGING["handlers"]["file"] = {
    "class": "logging.handlers.RotatingFileHandler",
    "filename": os.environ.get("LOG_FILE", "/var/log/b2b_showcase/app.log"),
    "maxBytes": 1024 * 1024 * 10,  # 10 MB
    "backupCount": 10,
    "formatter": "json",
}
LOGGING["root"]["handlers"].append("file")
