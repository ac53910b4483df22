from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Type, TypeVar

from pydantic import BaseModel, ValidationError

from fpl_squads.schemas.stats import Fixture, PlayerStat, StatsSnapshot, TeamStat

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def _parse_many(model: Type[M], rows: Iterable[Any]) -> List[M]:
    """Validate each row; a malformed record is skipped, not fatal."""
    out: List[M] = []
    skipped = 0
    for row in rows or []:
        try:
            out.append(model.model_validate(row))
        except ValidationError:
            skipped += 1
    if skipped:
        logger.warning("Skipped %d malformed %s record(s) from FPL feed", skipped, model.__name__)
    return out


def parse_players(elements: Iterable[Dict[str, Any]]) -> List[PlayerStat]:
    return _parse_many(PlayerStat, elements)


def parse_teams(teams: Iterable[Dict[str, Any]]) -> List[TeamStat]:
    return _parse_many(TeamStat, teams)


def parse_fixtures(fixtures: Iterable[Dict[str, Any]]) -> List[Fixture]:
    return _parse_many(Fixture, fixtures)


def parse_snapshot(bootstrap: Dict[str, Any], fixtures: Iterable[Dict[str, Any]]) -> StatsSnapshot:
    # accept both the trimmed client shape and raw bootstrap-static
    players = bootstrap.get("players")
    if players is None:
        players = bootstrap.get("elements", [])
    return StatsSnapshot(
        players=parse_players(players),
        teams=parse_teams(bootstrap.get("teams", [])),
        fixtures=parse_fixtures(fixtures),
    )
