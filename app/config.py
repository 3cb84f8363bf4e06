import os
from pydantic_settings import BaseSettings
from typing import List

class Settings(BaseSettings):
    """Application settings."""
    # Base settings
    DEBUG: bool = False
    APP_NAME: str = "Streaker"

    # CORS settings
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",  # Frontend development server
        "http://localhost:8000",  # Backend server
    ]

    # Firebase settings
    FIREBASE_PROJECT_ID: str = ""
    # Explicit Firebase Admin SDK credentials JSON path
    FIREBASE_SERVICE_ACCOUNT_JSON: str = os.getenv("FIREBASE_SERVICE_ACCOUNT_JSON", "./firebase-service-account.json")
    # Accept X-User-ID in place of a bearer token (local development only)
    ALLOW_USER_ID_HEADER: bool = os.getenv("ALLOW_USER_ID_HEADER", "false").lower() == "true"

    # Motivational text service
    OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
    OPENAI_MODEL: str = os.getenv("OPENAI_MODEL", "gpt-4o-mini")

    # Database settings
    DB_HOST: str = os.getenv("DB_HOST", "localhost")
    DB_PORT: str = os.getenv("DB_PORT", "5432")
    DB_USER: str = os.getenv("DB_USER", "postgres")
    DB_PASSWORD: str = os.getenv("DB_PASSWORD", "postgres")
    DB_NAME: str = os.getenv("DB_NAME", "streaker")
    DATABASE_URL: str = os.getenv(
        "DATABASE_URL",
        f"postgresql://{DB_USER}:{DB_PASSWORD}@{DB_HOST}:{DB_PORT}/{DB_NAME}"
    )

    # Redis settings
    REDIS_HOST: str = os.getenv("REDIS_HOST", "localhost")
    REDIS_PORT: int = int(os.getenv("REDIS_PORT", "6379"))
    RATE_LIMIT_ENABLED: bool = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"

    # Calendar-day arithmetic uses the user's timezone, falling back to this one
    DEFAULT_TIMEZONE: str = os.getenv("DEFAULT_TIMEZONE", "UTC")

    class Config:
        env_file = ".env"
        case_sensitive = True

# Create settings instance
settings = Settings()

# XP economy
XP_PER_DAY = 10
START_BONUS = 10  # awarded just for starting a streak
MAX_LEVEL = 10
XP_CONSTANT = 100  # XP = 100 * Level^2, so level 10 needs 10,000 XP

# Bump when the accrual formula changes: 1 = 10 XP/day, 2 = flat badge XP
CURRENT_XP_VERSION = 2

# Level projection horizon (10 years)
MAX_SIMULATION_DAYS = 3650

RELAPSE_REASONS = [
    "Stress / Anxiety",
    "Boredom",
    "Social Pressure",
    "Urge / Cravings",
    "Emotional Overwhelm",
    "Fatigue / Tiredness",
    "Accidental",
    "Other",
]

MOODS = {
    1: "Terrible",
    2: "Bad",
    3: "Okay",
    4: "Good",
    5: "Great",
}
