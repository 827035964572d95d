import os
from typing import Dict, Any, List

from dotenv import load_dotenv

load_dotenv()


def get_database_url() -> str:
    """Database URL for SQLAlchemy, defaults to a SQLite file in the cwd"""
    return os.getenv("TIMETABLE_DATABASE_URL", "sqlite:///./timetable.db")


def get_cors_origins() -> List[str]:
    raw = os.getenv(
        "TIMETABLE_CORS_ORIGINS",
        "http://localhost,http://localhost:8501,http://127.0.0.1:8501,http://localhost:8502",
    )
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def get_app_config() -> Dict[str, Any]:
    """Get application configuration from environment variables"""
    return {
        "database_url": get_database_url(),
        "cors_origins": get_cors_origins(),
        "seed_dir": os.getenv("TIMETABLE_SEED_DIR") or None,
        "log_level": os.getenv("LOG_LEVEL", "INFO"),
    }
