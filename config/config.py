"""Settings shared by every environment module."""

import os


def env_flag(name: str, default: str = "0") -> bool:
    return bool(int(os.getenv(name, default)))


def env_list(name: str) -> tuple:
    return tuple(part.strip() for part in os.getenv(name, "").split(",") if part.strip())


DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "checkin_db"),
    "connection_timeout": int(os.getenv("DB_CONNECT_TIMEOUT", "10")),
}

# mysql | memory
STORE_BACKEND = os.getenv("STORE_BACKEND", "mysql").lower()

# Comma-separated origins; empty disables the origin check.
ALLOWED_ORIGINS = env_list("ALLOWED_ORIGINS")

APP_VERSION = os.getenv("APP_VERSION", "1.0.0")
BADGE_PRINT_TEMPLATE = os.getenv("BADGE_PRINT_TEMPLATE", "TPL_A6_V1")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE") or None
