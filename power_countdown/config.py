import os


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret")

    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Puzzle / hint provider: "gemini" or "local" (local is used when no key is set)
    PUZZLE_SOURCE = os.environ.get("PUZZLE_SOURCE", "")
    GEMINI_API_KEY = os.environ.get("GEMINI_API_KEY") or os.environ.get("API_KEY")
    GEMINI_MODEL = os.environ.get("GEMINI_MODEL", "gemini-2.5-flash")
    GEMINI_TIMEOUT = float(os.environ.get("GEMINI_TIMEOUT", "10"))

    DEFAULT_DIFFICULTY = os.environ.get("DEFAULT_DIFFICULTY", "MEDIUM")

    RATELIMIT_DEFAULT = "200 per hour; 50 per minute"
    COUNTDOWN_AI_LIMIT = os.environ.get("COUNTDOWN_AI_LIMIT", "10 per minute")

    # in-memory players kept per process; least recently used are evicted
    COUNTDOWN_MAX_SESSIONS = int(os.environ.get("COUNTDOWN_MAX_SESSIONS", "1000"))
