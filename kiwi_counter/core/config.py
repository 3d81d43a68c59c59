import os

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./data/data.db")
DATABASE_TIMEOUT = float(os.getenv("DATABASE_TIMEOUT", "30"))

SESSION_SECRET = os.getenv("SESSION_SECRET", "dev-secret-change-me")
SESSION_COOKIE = os.getenv("SESSION_COOKIE", "kiwi_session")
SESSION_MAX_AGE_SECONDS = int(os.getenv("SESSION_MAX_AGE_SECONDS", "28800"))

APP_ENV = os.getenv("APP_ENV", "development")
HTTPS_ONLY = os.getenv(
    "HTTPS_ONLY", "true" if APP_ENV == "production" else "false"
).lower() in {"1", "true", "yes", "y"}

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_DIR = os.getenv("LOG_DIR")

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "3000"))

USERNAME_MAX_LENGTH = 64
PASSWORD_MAX_LENGTH = 128
