import os
from typing import Dict, Any

from dotenv import load_dotenv

load_dotenv()


def get_client_config() -> Dict[str, Any]:
    """Get API client configuration from environment variables"""
    return {
        "api_base": os.getenv("TIMETABLE_API_URL", "http://127.0.0.1:8000"),
        "token": os.getenv("TIMETABLE_API_TOKEN") or None,
        "user_name": os.getenv("TIMETABLE_USER_NAME") or None,
        "dark_mode": os.getenv("TIMETABLE_DARK_MODE", "false").lower() in ("1", "true", "yes"),
        "timeout": float(os.getenv("TIMETABLE_API_TIMEOUT", 8)),
        "log_level": os.getenv("LOG_LEVEL", "INFO"),
    }
