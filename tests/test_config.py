import pytest

from fpl_squads.core.config import Settings


@pytest.fixture
def bare_env(monkeypatch):
    for name in ("DATABASE_URL", "APP_ENV", "CORS_ORIGINS", "FPL_FAKE_MODE", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


def _settings(**kwargs):
    return Settings(_env_file=None, **kwargs)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ('["https://a.example","https://b.example"]', ["https://a.example", "https://b.example"]),
        ("https://a.example, https://b.example", ["https://a.example", "https://b.example"]),
        ("https://a.example", ["https://a.example"]),
        ("", []),
        (["https://c.example"], ["https://c.example"]),
    ],
)
def test_cors_origins_parsing(bare_env, raw, expected):
    assert _settings(CORS_ORIGINS=raw).CORS_ORIGINS == expected


def test_defaults_are_local(bare_env):
    s = _settings()
    assert s.IS_LOCAL
    assert s.database_url.startswith("sqlite:///")
    assert s.FPL_API_BASE == "https://fantasy.premierleague.com/api"
    s.validate_at_startup()


def test_log_level_is_uppercased(bare_env):
    assert _settings(LOG_LEVEL=" debug ").LOG_LEVEL == "DEBUG"


def test_prod_requires_database_url(bare_env):
    with pytest.raises(RuntimeError, match="DATABASE_URL"):
        _settings(APP_ENV="prod").validate_at_startup()


def test_prod_rejects_fake_mode_and_empty_cors(bare_env):
    s = _settings(APP_ENV="prod", DATABASE_URL="postgresql+psycopg2://u:p@db/fpl", CORS_ORIGINS="", FPL_FAKE_MODE=True)
    with pytest.raises(RuntimeError) as exc:
        s.validate_at_startup()
    assert "CORS_ORIGINS" in str(exc.value)
    assert "FPL_FAKE_MODE" in str(exc.value)


def test_prod_with_database_url_is_valid(bare_env):
    s = _settings(APP_ENV="prod", DATABASE_URL="postgresql+psycopg2://u:p@db/fpl")
    s.validate_at_startup()
    assert s.database_url == "postgresql+psycopg2://u:p@db/fpl"
