# playtime_monitor/config.py

import os

from dotenv import load_dotenv

load_dotenv()


def _get_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# Database
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./playtime_monitor.db")

# JWT
SECRET_KEY = os.getenv("SECRET_KEY", "change-this-secret-key")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24)))

# Steam Web API
STEAM_API_KEY = os.getenv("STEAM_API_KEY", "")
STEAM_API_URL = os.getenv(
    "STEAM_API_URL",
    "https://api.steampowered.com/IPlayerService/GetRecentlyPlayedGames/v1/",
)

# Outbound calls (Steam, Discord, SMTP) share one timeout
HTTP_TIMEOUT_SECONDS = float(os.getenv("HTTP_TIMEOUT_SECONDS", "10"))

# SMTP
EMAIL_HOST = os.getenv("EMAIL_HOST", "")
EMAIL_PORT = int(os.getenv("EMAIL_PORT", "587"))
EMAIL_USER = os.getenv("EMAIL_USER", "")
EMAIL_PASS = os.getenv("EMAIL_PASS", "")
EMAIL_FROM = os.getenv("EMAIL_FROM", EMAIL_USER)

# Scheduler
SCHEDULER_ENABLED = _get_bool("SCHEDULER_ENABLED", True)
SWEEP_INTERVAL_HOURS = int(os.getenv("SWEEP_INTERVAL_HOURS", "6"))

# First-run admin account
ADMIN_USERNAME = os.getenv("ADMIN_USERNAME", "admin")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "password")

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "*").split(",")
    if origin.strip()
]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
