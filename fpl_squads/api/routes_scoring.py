# fpl_squads/api/routes_scoring.py
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from fpl_squads.db.session import get_db
from fpl_squads.deps import get_stats_snapshot
from fpl_squads.schemas.squad import SquadOut
from fpl_squads.schemas.stats import GoalkeeperRow, PlayerRow, SquadScore, StatsSnapshot, TeamRecord
from fpl_squads.services.scoring import (
    goalkeeper_table,
    player_table,
    rank_squads,
    score_squad,
    team_records,
)
from fpl_squads.services.squads import get_squad, list_squads

router = APIRouter(prefix="/scoring", tags=["scoring"])


@router.get("/squads", response_model=List[SquadScore])
def scoring_leaderboard(
    db: Session = Depends(get_db),
    snapshot: StatsSnapshot = Depends(get_stats_snapshot),
):
    """
    Every squad scored against the current FPL snapshot, highest total first.
    """
    squads = [SquadOut(**s) for s in list_squads(db)]
    return rank_squads(squads, snapshot)


@router.get("/squads/{squad_id}", response_model=SquadScore)
def scoring_squad(
    squad_id: int,
    db: Session = Depends(get_db),
    snapshot: StatsSnapshot = Depends(get_stats_snapshot),
):
    squad = SquadOut(**get_squad(db, squad_id))
    return SquadScore(squad=squad, points=score_squad(squad, snapshot))


@router.get("/team-records", response_model=List[TeamRecord])
def scoring_team_records(snapshot: StatsSnapshot = Depends(get_stats_snapshot)):
    """W/D/L, goals and fantasy points for every Premier League team."""
    return team_records(snapshot)


@router.get("/goalkeepers", response_model=List[GoalkeeperRow])
def scoring_goalkeepers(snapshot: StatsSnapshot = Depends(get_stats_snapshot)):
    return goalkeeper_table(snapshot)


@router.get("/players", response_model=List[PlayerRow])
def scoring_players(snapshot: StatsSnapshot = Depends(get_stats_snapshot)):
    return player_table(snapshot)
