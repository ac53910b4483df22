from __future__ import annotations
from typing import Dict, List, Optional

from pydantic import BaseModel

from fpl_squads.schemas.squad import SquadOut

GOALKEEPER_ELEMENT_TYPE = 1  # FPL element_type: 1 GK, 2 DEF, 3 MID, 4 FWD


class PlayerStat(BaseModel):
    id: int
    first_name: str = ""
    second_name: str = ""
    web_name: str = ""
    element_type: int = 0
    team: Optional[int] = None
    total_points: int = 0
    clean_sheets: int = 0
    goals_scored: int = 0
    assists: int = 0

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.second_name}".strip()

    @property
    def is_goalkeeper(self) -> bool:
        return self.element_type == GOALKEEPER_ELEMENT_TYPE


class TeamStat(BaseModel):
    id: int
    name: str
    short_name: Optional[str] = None


class Fixture(BaseModel):
    id: int
    event: Optional[int] = None  # gameweek; null for unscheduled fixtures
    team_h: int
    team_a: int
    team_h_score: Optional[int] = None
    team_a_score: Optional[int] = None
    finished: bool = False


class StatsSnapshot(BaseModel):
    players: List[PlayerStat] = []
    teams: List[TeamStat] = []
    fixtures: List[Fixture] = []


class ScoreBreakdown(BaseModel):
    goalkeeper: int = 0
    teams: Dict[int, int] = {}
    players: Dict[int, int] = {}
    total: int = 0
    unmatched: List[str] = []   # roster names the snapshot could not resolve


class SquadScore(BaseModel):
    squad: SquadOut
    points: ScoreBreakdown


class TeamRecord(BaseModel):
    id: int
    name: str
    wins: int = 0
    draws: int = 0
    losses: int = 0
    goals_for: int = 0
    goals_against: int = 0
    clean_sheets: int = 0
    multiplier: float = 1.0
    fantasy_points: int = 0


class GoalkeeperRow(BaseModel):
    id: int
    name: str
    web_name: str
    clean_sheets: int
    total_points: int


class PlayerRow(BaseModel):
    id: int
    name: str
    web_name: str
    goals_scored: int
    assists: int
    total_points: int
