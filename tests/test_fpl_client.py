import pytest
import requests

from fpl_squads.core.errors import UpstreamUnavailableError
from fpl_squads.services.fpl import FPLClient, build_session, fetch_snapshot, parse_snapshot

from conftest import BOOTSTRAP, FIXTURES, FakeResponse, FakeSession, make_fpl_client


def test_bootstrap_is_trimmed_to_players_and_teams():
    client = make_fpl_client({
        "/bootstrap-static/": FakeResponse(dict(BOOTSTRAP, events=[{"id": 1}], element_types=[])),
    })
    data = client.get_bootstrap()

    assert set(data) == {"players", "teams"}
    assert len(data["players"]) == 5
    assert client.session.calls == ["https://fpl.test/api/bootstrap-static/"]


def test_fixtures_are_returned_as_list(fpl_client):
    assert fpl_client.get_fixtures() == FIXTURES


@pytest.mark.parametrize(
    "result",
    [
        FakeResponse({"detail": "Service unavailable"}, status_code=503),
        FakeResponse({"detail": "Forbidden"}, status_code=403),
        FakeResponse(ValueError("Expecting value")),
        requests.ConnectionError("connection refused"),
        requests.Timeout("read timed out"),
    ],
)
def test_feed_failures_raise_upstream_error(result):
    client = make_fpl_client({"/bootstrap-static/": result, "/fixtures/": result})

    with pytest.raises(UpstreamUnavailableError) as exc:
        client.get_bootstrap()
    assert exc.value.status_code == 502

    with pytest.raises(UpstreamUnavailableError):
        client.get_fixtures()


def test_unexpected_shapes_raise_upstream_error():
    client = make_fpl_client({
        "/bootstrap-static/": FakeResponse(["not", "a", "dict"]),
        "/fixtures/": FakeResponse({"fixtures": []}),
    })
    with pytest.raises(UpstreamUnavailableError):
        client.get_bootstrap()
    with pytest.raises(UpstreamUnavailableError):
        client.get_fixtures()


def test_fake_mode_never_touches_the_network():
    session = FakeSession({})
    client = FPLClient("https://fpl.test/api", fake_mode=True, session=session)

    bootstrap = client.get_bootstrap()
    fixtures = client.get_fixtures()

    assert session.calls == []
    assert bootstrap["players"] and bootstrap["teams"]
    assert fixtures
    # callers mutating the result do not change the canned data
    bootstrap["players"].clear()
    assert client.get_bootstrap()["players"]


def test_close_closes_session(fpl_client):
    fpl_client.close()
    assert fpl_client.session.closed


def test_build_session_mounts_retrying_adapter():
    session = build_session(max_retries=3, backoff_factor=0.5, user_agent="test-agent")
    adapter = session.get_adapter("https://fantasy.premierleague.com/api/fixtures/")

    assert session.headers["User-Agent"] == "test-agent"
    assert adapter.max_retries.total == 3
    assert 503 in adapter.max_retries.status_forcelist
    session.close()


def test_parse_snapshot_skips_malformed_rows():
    bootstrap = {
        "players": BOOTSTRAP["elements"] + [{"id": "not-a-number", "web_name": "Broken"}],
        "teams": BOOTSTRAP["teams"] + [{"short_name": "???"}],
    }
    snap = parse_snapshot(bootstrap, FIXTURES + [{"id": 99}])

    assert [p.id for p in snap.players] == [1, 2, 10, 11, 12]
    assert len(snap.teams) == 5
    assert len(snap.fixtures) == 10


def test_parse_snapshot_accepts_raw_bootstrap():
    snap = parse_snapshot(BOOTSTRAP, [])
    assert len(snap.players) == 5
    assert snap.players[0].is_goalkeeper
    assert snap.players[2].full_name == "Mohamed Salah"


def test_fetch_snapshot_is_cached(fpl_client):
    first = fetch_snapshot(fpl_client, ttl_seconds=60)
    calls = len(fpl_client.session.calls)
    second = fetch_snapshot(fpl_client, ttl_seconds=60)

    assert calls == 2
    assert len(fpl_client.session.calls) == calls
    assert second is first


def test_fetch_snapshot_without_ttl_refetches(fpl_client):
    fetch_snapshot(fpl_client, ttl_seconds=0)
    fetch_snapshot(fpl_client, ttl_seconds=0)
    assert len(fpl_client.session.calls) == 4


def test_fetch_snapshot_failure_is_not_cached():
    flaky = make_fpl_client({"/bootstrap-static/": FakeResponse({}, status_code=500)})
    with pytest.raises(UpstreamUnavailableError):
        fetch_snapshot(flaky, ttl_seconds=60)

    flaky.session.routes = {
        "/bootstrap-static/": FakeResponse(BOOTSTRAP),
        "/fixtures/": FakeResponse(FIXTURES),
    }
    assert len(fetch_snapshot(flaky, ttl_seconds=60).players) == 5


def test_client_from_settings():
    from fpl_squads.core.config import Settings

    s = Settings(_env_file=None, FPL_API_BASE="https://example.invalid/api/", FPL_FAKE_MODE=True, FPL_TIMEOUT_SECONDS=4)
    client = FPLClient.from_settings(s, session=FakeSession({}))

    assert client.base_url == "https://example.invalid/api"
    assert client.fake_mode is True
    assert client.timeout == 4
