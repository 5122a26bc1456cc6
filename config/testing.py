import os

from config.config import *  # noqa: F401,F403

ENVIRONMENT = "testing"

SECRET_KEY = "test-secret"

DEBUG = False
TESTING = True

STORE_BACKEND = os.getenv("STORE_BACKEND", "memory").lower()
REQUIRE_CSRF = False
ALLOWED_ORIGINS = ()

LOG_LEVEL = "WARNING"
LOG_FILE = None

AUTO_INIT_DB = False
AUTO_SEED_DB = False
