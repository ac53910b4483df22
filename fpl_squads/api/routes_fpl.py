from fastapi import APIRouter, Depends, Response

from fpl_squads.core.config import Settings
from fpl_squads.deps import get_fpl_client, get_settings
from fpl_squads.services.cache import cache_route, key_tuple
from fpl_squads.services.fpl import FPLClient

router = APIRouter(prefix="/fpl", tags=["fpl"])


def _feed_ttl(*args, **kwargs) -> int:
    return kwargs["settings"].FPL_CACHE_TTL_SECONDS


# ---------------- BOOTSTRAP (players + teams) ----------------
@router.get("/bootstrap")
@cache_route(
    namespace="fpl_bootstrap",
    ttl_seconds=_feed_ttl,
    key_builder=lambda *args, **kwargs: key_tuple("bootstrap", kwargs["client"].base_url),
)
def fpl_bootstrap(
    client: FPLClient = Depends(get_fpl_client),
    settings: Settings = Depends(get_settings),
    response: Response = None,  # used by decorator to set headers
):
    """
    Players and teams from the FPL feed, trimmed to what the squad pages use.
    """
    return client.get_bootstrap()


# ---------------- FIXTURES ----------------
@router.get("/fixtures")
@cache_route(
    namespace="fpl_fixtures",
    ttl_seconds=_feed_ttl,
    key_builder=lambda *args, **kwargs: key_tuple("fixtures", kwargs["client"].base_url),
)
def fpl_fixtures(
    client: FPLClient = Depends(get_fpl_client),
    settings: Settings = Depends(get_settings),
    response: Response = None,
):
    return client.get_fixtures()
