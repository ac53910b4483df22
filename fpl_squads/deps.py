from fastapi import Depends, Request

from fpl_squads.core.config import Settings
from fpl_squads.schemas.stats import StatsSnapshot
from fpl_squads.services.fpl import FPLClient, fetch_snapshot


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_fpl_client(request: Request) -> FPLClient:
    return request.app.state.fpl_client


def get_stats_snapshot(
    client: FPLClient = Depends(get_fpl_client),
    settings: Settings = Depends(get_settings),
) -> StatsSnapshot:
    """Fresh (or TTL-cached) FPL snapshot; raises UpstreamUnavailableError if the feed is down."""
    return fetch_snapshot(client, ttl_seconds=settings.FPL_CACHE_TTL_SECONDS)
