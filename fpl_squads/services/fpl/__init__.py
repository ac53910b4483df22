"""
FPL feed package: HTTP client, record parsers and the cached statistics snapshot.
"""

from fpl_squads.core.config import settings
from fpl_squads.schemas.stats import StatsSnapshot
from fpl_squads.services.cache import cached_call, key_tuple

from .client import FPLClient, build_session
from .parsers import parse_fixtures, parse_players, parse_snapshot, parse_teams

SNAPSHOT_NAMESPACE = "fpl_snapshot"


def fetch_snapshot(client: FPLClient, *, ttl_seconds: int | None = None) -> StatsSnapshot:
    """Bootstrap + fixtures as one snapshot, cached in-process per feed base URL."""
    ttl = settings.FPL_CACHE_TTL_SECONDS if ttl_seconds is None else ttl_seconds

    def _load() -> StatsSnapshot:
        return parse_snapshot(client.get_bootstrap(), client.get_fixtures())

    return cached_call(
        namespace=SNAPSHOT_NAMESPACE,
        ttl_seconds=ttl,
        key=key_tuple("snapshot", client.base_url, client.fake_mode),
        fn=_load,
    )


__all__ = [
    "FPLClient",
    "build_session",
    "fetch_snapshot",
    "parse_fixtures",
    "parse_players",
    "parse_snapshot",
    "parse_teams",
]
