import os

# Base directory
BASE_DIR = os.path.dirname(os.path.abspath(__file__))

# Paths
DATA_DIR = os.getenv("QUIZ_DATA_DIR", os.path.join(BASE_DIR, "data"))
STATIC_DIR = os.getenv("QUIZ_STATIC_DIR", os.path.join(BASE_DIR, "public"))
LOG_FILE = os.getenv("QUIZ_LOG_FILE", os.path.join(BASE_DIR, "launch.log"))

# Server
DEFAULT_HOST = os.getenv("HOST", "0.0.0.0")
DEFAULT_PORT = int(os.getenv("PORT", "3000"))
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("QUIZ_CORS_ORIGINS", "http://localhost").split(",")
    if origin.strip()
]


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# Quiz sessions
SESSION_MINUTES = int(os.getenv("QUIZ_SESSION_MINUTES", "60"))
REQUIRE_END_TIME = _env_flag("QUIZ_REQUIRE_END_TIME", False)   # teacher must send endTime
ENFORCE_SUBMIT_WINDOW = _env_flag("QUIZ_ENFORCE_SUBMIT_WINDOW", True)
