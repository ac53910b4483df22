# fpl_squads/services/fpl/client.py
from __future__ import annotations

import copy
import logging
from typing import Any, Dict, List, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from fpl_squads.core.config import settings
from fpl_squads.core.errors import UpstreamUnavailableError

logger = logging.getLogger(__name__)

# Served when FPL_FAKE_MODE is on (offline dev)
_FAKE_BOOTSTRAP: Dict[str, Any] = {
    "elements": [
        {"id": 1, "first_name": "David", "second_name": "Raya Martin", "web_name": "Raya",
         "element_type": 1, "team": 1, "total_points": 120, "clean_sheets": 12, "goals_scored": 0, "assists": 0},
        {"id": 328, "first_name": "Mohamed", "second_name": "Salah", "web_name": "M.Salah",
         "element_type": 3, "team": 12, "total_points": 260, "clean_sheets": 10, "goals_scored": 21, "assists": 13},
        {"id": 351, "first_name": "Erling", "second_name": "Haaland", "web_name": "Haaland",
         "element_type": 4, "team": 13, "total_points": 210, "clean_sheets": 8, "goals_scored": 22, "assists": 3},
    ],
    "teams": [
        {"id": 1, "name": "Arsenal", "short_name": "ARS"},
        {"id": 12, "name": "Liverpool", "short_name": "LIV"},
        {"id": 13, "name": "Man City", "short_name": "MCI"},
        {"id": 9, "name": "Ipswich", "short_name": "IPS"},
    ],
}
_FAKE_FIXTURES: List[Dict[str, Any]] = [
    {"id": 1, "event": 1, "team_h": 1, "team_a": 9, "team_h_score": 2, "team_a_score": 0, "finished": True},
    {"id": 2, "event": 1, "team_h": 12, "team_a": 13, "team_h_score": 1, "team_a_score": 1, "finished": True},
    {"id": 3, "event": 2, "team_h": 9, "team_a": 12, "team_h_score": None, "team_a_score": None, "finished": False},
]


def build_session(max_retries: int, backoff_factor: float, user_agent: str) -> requests.Session:
    session = requests.Session()
    session.headers.update({"User-Agent": user_agent, "Accept": "application/json"})
    session.mount(
        "https://",
        HTTPAdapter(
            pool_connections=4,
            pool_maxsize=8,
            max_retries=Retry(
                total=max_retries,
                backoff_factor=backoff_factor,
                status_forcelist=[429, 500, 502, 503, 504],
                allowed_methods=["GET"],
            ),
        ),
    )
    return session


class FPLClient:
    """
    Read-only client for the public FPL feed.
    Every failure (network, non-2xx, bad JSON) surfaces as UpstreamUnavailableError.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        backoff_factor: Optional[float] = None,
        user_agent: Optional[str] = None,
        fake_mode: Optional[bool] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = (base_url or settings.FPL_API_BASE).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.FPL_TIMEOUT_SECONDS
        self.fake_mode = settings.FPL_FAKE_MODE if fake_mode is None else fake_mode
        self.session = session or build_session(
            max_retries=settings.FPL_MAX_RETRIES if max_retries is None else max_retries,
            backoff_factor=settings.FPL_BACKOFF_FACTOR if backoff_factor is None else backoff_factor,
            user_agent=user_agent or settings.FPL_USER_AGENT,
        )

    @classmethod
    def from_settings(cls, app_settings, session: Optional[requests.Session] = None) -> "FPLClient":
        return cls(
            app_settings.FPL_API_BASE,
            timeout=app_settings.FPL_TIMEOUT_SECONDS,
            max_retries=app_settings.FPL_MAX_RETRIES,
            backoff_factor=app_settings.FPL_BACKOFF_FACTOR,
            user_agent=app_settings.FPL_USER_AGENT,
            fake_mode=app_settings.FPL_FAKE_MODE,
            session=session,
        )

    def _get(self, path: str) -> Any:
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            resp = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.error("FPL request failed for %s: %s", url, exc)
            raise UpstreamUnavailableError(f"FPL feed unreachable ({path})") from exc

        if not resp.ok:
            logger.error("FPL API responded with status %s on %s", resp.status_code, url)
            raise UpstreamUnavailableError(f"FPL API responded with status: {resp.status_code}")

        try:
            return resp.json()
        except ValueError as exc:
            raise UpstreamUnavailableError(f"FPL API returned invalid JSON ({path})") from exc

    def get_bootstrap(self) -> Dict[str, List[Dict[str, Any]]]:
        """Players ('elements') and teams from /bootstrap-static/, trimmed to what scoring needs."""
        data = copy.deepcopy(_FAKE_BOOTSTRAP) if self.fake_mode else self._get("/bootstrap-static/")
        if not isinstance(data, dict):
            raise UpstreamUnavailableError("Unexpected bootstrap shape from FPL API")
        return {"players": data.get("elements") or [], "teams": data.get("teams") or []}

    def get_fixtures(self) -> List[Dict[str, Any]]:
        data = copy.deepcopy(_FAKE_FIXTURES) if self.fake_mode else self._get("/fixtures/")
        if not isinstance(data, list):
            raise UpstreamUnavailableError("Unexpected fixtures shape from FPL API")
        return data

    def close(self) -> None:
        self.session.close()
