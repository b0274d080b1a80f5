import os

from dotenv import load_dotenv

load_dotenv()


def _split_origins(raw: str) -> list:
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


class Settings:
    # Gemini API (read from environment; API_KEY kept for older deployments)
    GEMINI_API_KEY = os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY", "")
    GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
    CORS_ORIGINS = _split_origins(os.getenv("CORS_ORIGINS", "*"))

    # In-memory form sessions: idle expiry and hard cap
    SESSION_TTL_SECONDS = int(os.getenv("SESSION_TTL_SECONDS", 1800))
    MAX_SESSIONS = int(os.getenv("MAX_SESSIONS", 1000))

    # Accepted ranges for the clinical measurements (inclusive)
    AGE_RANGE = (0, 120)
    GLUCOSE_RANGE = (30, 600)
    BMI_RANGE = (10, 100)

    # Probability thresholds (percent) for the result bar colour
    BAR_DANGER_ABOVE = 50
    BAR_WARNING_ABOVE = 20

settings = Settings()
