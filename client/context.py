from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .config import get_client_config

DARK_CSS = """
<style>
  .stApp, [data-testid="stSidebar"] {background-color: #0f172a; color: #e2e8f0}
  .stMetric {border-color: #334155}
  .badge {background: #334155; color: #e2e8f0}
</style>
"""


@dataclass
class AppContext:
    """
    Session and display state shared by the admin and viewer pages.

    Created once per Streamlit session and handed explicitly to whatever
    needs it (the API client, page renderers). Nothing reads it from a
    module-level global.

    Attributes:
        api_base: Base URL of the timetable API (no trailing /api)
        token: Bearer token obtained from the external auth provider, if any
        user: Profile of the signed-in user as returned by that provider
        dark_mode: Display preference
        timeout: Per-request timeout in seconds
    """
    api_base: str = "http://127.0.0.1:8000"
    token: Optional[str] = None
    user: Dict[str, Any] = field(default_factory=dict)
    dark_mode: bool = False
    timeout: float = 8.0

    @classmethod
    def from_config(cls, config: Optional[Dict[str, Any]] = None) -> "AppContext":
        config = config or get_client_config()
        user = {"name": config["user_name"]} if config.get("user_name") else {}
        return cls(api_base=config["api_base"], token=config["token"], user=user,
                   dark_mode=config.get("dark_mode", False), timeout=config["timeout"])

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    @property
    def display_name(self) -> str:
        return self.user.get("name") or self.user.get("email") or "guest"

    def session_caption(self) -> str:
        if not self.is_authenticated:
            return "Not signed in (requests go out without a token)"
        return f"Signed in as {self.display_name}"

    @property
    def chart_template(self) -> str:
        return "plotly_dark" if self.dark_mode else "plotly_white"

    def page_css(self) -> str:
        """Extra page CSS for the current display mode ('' in light mode)."""
        return DARK_CSS if self.dark_mode else ""

    def auth_headers(self) -> Dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}
