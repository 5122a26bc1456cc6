import os

from config.config import *  # noqa: F401,F403
from config.config import env_flag

ENVIRONMENT = "development"

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

REQUIRE_CSRF = env_flag("REQUIRE_CSRF", "0")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = env_flag("AUTO_INIT_DB", "1")
# Optional: also seed demo events and attendees on startup
AUTO_SEED_DB = env_flag("AUTO_SEED_DB", "0")
