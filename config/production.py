import os

from config.config import *  # noqa: F401,F403
from config.config import env_flag

ENVIRONMENT = "production"

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DEBUG = False

# Browsers must send x-csrf-token on every API call in production.
REQUIRE_CSRF = env_flag("REQUIRE_CSRF", "1")

AUTO_INIT_DB = env_flag("AUTO_INIT_DB", "0")
AUTO_SEED_DB = env_flag("AUTO_SEED_DB", "0")
