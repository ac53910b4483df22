import os

# Settings are read at import time; keep tests off any real .env database
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("APP_ENV", "local")

import pytest
from fastapi.testclient import TestClient

from fpl_squads.core.config import Settings
from fpl_squads.db.engine import Database
from fpl_squads.main import create_app
from fpl_squads.schemas.squad import RosterEntryOut, SquadOut
from fpl_squads.services.cache import clear_cache
from fpl_squads.services.fpl import FPLClient, parse_snapshot

BOOTSTRAP = {
    "elements": [
        {"id": 1, "first_name": "David", "second_name": "Raya Martin", "web_name": "Raya",
         "element_type": 1, "team": 1, "total_points": 120, "clean_sheets": 4, "goals_scored": 0, "assists": 0},
        {"id": 2, "first_name": "Alisson", "second_name": "Becker", "web_name": "Alisson",
         "element_type": 1, "team": 2, "total_points": 90, "clean_sheets": 3, "goals_scored": 0, "assists": 1},
        {"id": 10, "first_name": "Mohamed", "second_name": "Salah", "web_name": "M.Salah",
         "element_type": 3, "team": 2, "total_points": 200, "clean_sheets": 5, "goals_scored": 5, "assists": 3},
        {"id": 11, "first_name": "Erling", "second_name": "Haaland", "web_name": "Haaland",
         "element_type": 4, "team": 3, "total_points": 180, "clean_sheets": 2, "goals_scored": 7, "assists": 0},
        {"id": 12, "first_name": "Bukayo", "second_name": "Saka", "web_name": "Saka",
         "element_type": 3, "team": 1, "total_points": 150, "clean_sheets": 4, "goals_scored": 0, "assists": 0},
    ],
    "teams": [
        {"id": 1, "name": "Arsenal", "short_name": "ARS"},
        {"id": 2, "name": "Liverpool", "short_name": "LIV"},
        {"id": 3, "name": "Man City", "short_name": "MCI"},
        {"id": 4, "name": "Ipswich", "short_name": "IPS"},
        {"id": 5, "name": "Brentford", "short_name": "BRE"},
    ],
}

# Arsenal (1): W 2-0, W 1-0 (away), D 2-2, L 0-1 -> 2W 1D 5GF
# Ipswich (4) has the mirror record against Brentford (5)
FIXTURES = [
    {"id": 1, "event": 1, "team_h": 1, "team_a": 2, "team_h_score": 2, "team_a_score": 0, "finished": True},
    {"id": 2, "event": 2, "team_h": 3, "team_a": 1, "team_h_score": 0, "team_a_score": 1, "finished": True},
    {"id": 3, "event": 3, "team_h": 1, "team_a": 3, "team_h_score": 2, "team_a_score": 2, "finished": True},
    {"id": 4, "event": 4, "team_h": 2, "team_a": 1, "team_h_score": 1, "team_a_score": 0, "finished": True},
    {"id": 5, "event": 1, "team_h": 4, "team_a": 5, "team_h_score": 2, "team_a_score": 0, "finished": True},
    {"id": 6, "event": 2, "team_h": 5, "team_a": 4, "team_h_score": 0, "team_a_score": 1, "finished": True},
    {"id": 7, "event": 3, "team_h": 4, "team_a": 5, "team_h_score": 2, "team_a_score": 2, "finished": True},
    {"id": 8, "event": 4, "team_h": 5, "team_a": 4, "team_h_score": 1, "team_a_score": 0, "finished": True},
    # not played yet / postponed with the flag set but no score
    {"id": 9, "event": 5, "team_h": 1, "team_a": 4, "team_h_score": None, "team_a_score": None, "finished": False},
    {"id": 10, "event": 5, "team_h": 2, "team_a": 3, "team_h_score": None, "team_a_score": None, "finished": True},
]


class FakeResponse:
    def __init__(self, payload, status_code=200, url="https://fpl.test/api/"):
        self._payload = payload
        self.status_code = status_code
        self.url = url

    @property
    def ok(self):
        return 200 <= self.status_code < 300

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class FakeSession:
    """Stands in for requests.Session; routes by URL suffix."""

    def __init__(self, routes):
        self.routes = routes
        self.calls = []
        self.closed = False

    def get(self, url, timeout=None, **kwargs):
        self.calls.append(url)
        for suffix, result in self.routes.items():
            if url.endswith(suffix):
                if isinstance(result, Exception):
                    raise result
                return result
        return FakeResponse({"detail": "not found"}, status_code=404, url=url)

    def close(self):
        self.closed = True


def make_fpl_client(routes=None):
    routes = routes or {
        "/bootstrap-static/": FakeResponse(BOOTSTRAP),
        "/fixtures/": FakeResponse(FIXTURES),
    }
    return FPLClient("https://fpl.test/api", fake_mode=False, session=FakeSession(routes))


def entry(id, name, added_date=None):
    return RosterEntryOut(id=id, name=name, added_date=added_date)


@pytest.fixture(autouse=True)
def _clear_caches():
    clear_cache()
    yield
    clear_cache()


@pytest.fixture
def snapshot():
    return parse_snapshot(BOOTSTRAP, FIXTURES)


@pytest.fixture
def make_squad():
    def _make(goalkeeper=None, teams=(), players=(), id=1, name="Test Squad"):
        return SquadOut(id=id, name=name, goalkeeper=goalkeeper, teams=list(teams), players=list(players))
    return _make


@pytest.fixture
def database():
    """Fresh in-memory database per test."""
    db = Database("sqlite://")
    db.create_tables()
    yield db
    db.close()


@pytest.fixture
def db_session(database):
    session = database.session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def fpl_client():
    return make_fpl_client()


@pytest.fixture
def client(database, fpl_client):
    app = create_app(Settings(APP_ENV="local", DATABASE_URL="sqlite://"), database=database, fpl_client=fpl_client)
    with TestClient(app) as c:
        yield c
