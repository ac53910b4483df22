# fpl_squads/services/scoring.py
"""
Squad scoring against an FPL statistics snapshot.

Formula:
  - goalkeeper: clean sheets x 25 (only if the matched player is a goalkeeper)
  - team: (wins x 10 + draws x 4 + goals for x 2) x team multiplier, rounded half-up
  - player: (goals + assists) x 12

Roster entries resolve by FPL id first and fall back to name matching.
Anything the snapshot cannot resolve scores 0 and is listed in `unmatched`.
"""
from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Optional, Sequence, TypeVar

from fpl_squads.schemas.squad import RosterEntryOut, SquadOut
from fpl_squads.schemas.stats import (
    Fixture,
    GoalkeeperRow,
    PlayerRow,
    PlayerStat,
    ScoreBreakdown,
    SquadScore,
    StatsSnapshot,
    TeamRecord,
    TeamStat,
)

logger = logging.getLogger(__name__)

GOALKEEPER_CLEAN_SHEET_POINTS = 25
PLAYER_GOAL_INVOLVEMENT_POINTS = 12
TEAM_WIN_POINTS = 10
TEAM_DRAW_POINTS = 4
TEAM_GOAL_POINTS = 2

# keys are lowercased; both the feed's full and short names are listed
TEAM_MULTIPLIERS: Dict[str, Decimal] = {
    "arsenal": Decimal("0.8"),
    "liverpool": Decimal("0.8"),
    "manchester city": Decimal("0.8"),
    "man city": Decimal("0.8"),
    "ipswich town": Decimal("1.25"),
    "ipswich": Decimal("1.25"),
    "leicester city": Decimal("1.25"),
    "leicester": Decimal("1.25"),
    "southampton": Decimal("1.25"),
}

T = TypeVar("T")


def team_multiplier(team_name: Optional[str]) -> Decimal:
    return TEAM_MULTIPLIERS.get((team_name or "").strip().lower(), Decimal("1"))


def round_half_up(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


# ---------------- name / id resolution ----------------

def _match_by_name(name: str, candidates: Iterable[T], names_of) -> Optional[T]:
    """
    Exact case-insensitive match on any of the candidate's names first,
    then substring containment in either direction.
    """
    needle = (name or "").strip().lower()
    if not needle:
        return None
    pool = list(candidates)

    for c in pool:
        if needle in (n.lower() for n in names_of(c) if n):
            return c

    for c in pool:
        for n in names_of(c):
            hay = (n or "").lower()
            if hay and (needle in hay or hay in needle):
                return c
    return None


def _player_names(p: PlayerStat) -> List[str]:
    return [p.full_name, p.web_name]


def _team_names(t: TeamStat) -> List[str]:
    return [t.name, t.short_name or ""]


def find_player(snapshot: StatsSnapshot, entry: RosterEntryOut) -> Optional[PlayerStat]:
    if entry.id:
        for p in snapshot.players:
            if p.id == entry.id:
                return p
    return _match_by_name(entry.name, snapshot.players, _player_names)


def find_team(snapshot: StatsSnapshot, entry: RosterEntryOut) -> Optional[TeamStat]:
    # team ids are renumbered between seasons; a stale id falls back to the name
    if entry.id:
        for t in snapshot.teams:
            if t.id == entry.id:
                return t
    return _match_by_name(entry.name, snapshot.teams, _team_names)


def _multiplier_name(stored_name: str, feed_team: Optional[TeamStat]) -> str:
    # stored names may be abbreviations ("ARS"); the feed's name decides then
    if stored_name.strip().lower() in TEAM_MULTIPLIERS or feed_team is None:
        return stored_name
    return feed_team.name


# ---------------- per-slot scores ----------------

def goalkeeper_points(player: Optional[PlayerStat]) -> int:
    if player is None or not player.is_goalkeeper:
        return 0
    return player.clean_sheets * GOALKEEPER_CLEAN_SHEET_POINTS


def player_points(player: Optional[PlayerStat]) -> int:
    if player is None:
        return 0
    return (player.goals_scored + player.assists) * PLAYER_GOAL_INVOLVEMENT_POINTS


def _played(fixtures: Iterable[Fixture]) -> Iterable[Fixture]:
    # `finished` with a null score has been seen on postponed games
    for f in fixtures:
        if f.finished and f.team_h_score is not None and f.team_a_score is not None:
            yield f


def team_record(team_id: int, team_name: str, fixtures: Sequence[Fixture]) -> TeamRecord:
    rec = TeamRecord(id=team_id, name=team_name, multiplier=float(team_multiplier(team_name)))
    for f in _played(fixtures):
        if f.team_h == team_id:
            scored, conceded = f.team_h_score, f.team_a_score
        elif f.team_a == team_id:
            scored, conceded = f.team_a_score, f.team_h_score
        else:
            continue
        if scored > conceded:
            rec.wins += 1
        elif scored == conceded:
            rec.draws += 1
        else:
            rec.losses += 1
        rec.goals_for += scored
        rec.goals_against += conceded
        if conceded == 0:
            rec.clean_sheets += 1
    rec.fantasy_points = team_points_from_record(rec.wins, rec.draws, rec.goals_for, team_name)
    return rec


def team_points_from_record(wins: int, draws: int, goals_for: int, team_name: Optional[str]) -> int:
    raw = wins * TEAM_WIN_POINTS + draws * TEAM_DRAW_POINTS + goals_for * TEAM_GOAL_POINTS
    return round_half_up(Decimal(raw) * team_multiplier(team_name))


def team_points(team_id: int, team_name: str, fixtures: Sequence[Fixture]) -> int:
    return team_record(team_id, team_name, fixtures).fantasy_points


# ---------------- squad scoring ----------------

def score_squad(squad: SquadOut, snapshot: StatsSnapshot) -> ScoreBreakdown:
    """Pure: no I/O, never raises on missing data."""
    out = ScoreBreakdown()

    gk = squad.goalkeeper
    if gk is not None:
        matched = find_player(snapshot, gk)
        if matched is None:
            out.unmatched.append(gk.name)
        elif not matched.is_goalkeeper:
            logger.warning("Goalkeeper %r matched non-goalkeeper %s (%s)", gk.name, matched.id, matched.web_name)
        out.goalkeeper = goalkeeper_points(matched)

    for team in squad.teams:
        feed_team = find_team(snapshot, team)
        if feed_team is not None:
            team_id = feed_team.id
        elif team.id and not snapshot.teams:
            # no team list to check against; the stored id still keys the fixtures
            team_id = team.id
        else:
            out.unmatched.append(team.name)
            if team.id:
                out.teams[team.id] = 0
            continue
        key = team.id or team_id
        points = team_points(team_id, _multiplier_name(team.name, feed_team), snapshot.fixtures)
        out.teams[key] = out.teams.get(key, 0) + points

    for player in squad.players:
        matched = find_player(snapshot, player)
        if matched is None:
            out.unmatched.append(player.name)
        key = player.id or (matched.id if matched else None)
        if key is not None:
            out.players[key] = out.players.get(key, 0) + player_points(matched)

    if out.unmatched:
        logger.warning("Squad %s: no FPL match for %s", squad.id, ", ".join(out.unmatched))

    out.total = out.goalkeeper + sum(out.teams.values()) + sum(out.players.values())
    return out


def rank_squads(squads: Sequence[SquadOut], snapshot: StatsSnapshot) -> List[SquadScore]:
    scored = [SquadScore(squad=s, points=score_squad(s, snapshot)) for s in squads]
    # sorted() is stable: ties keep their listing order
    return sorted(scored, key=lambda s: s.points.total, reverse=True)


# ---------------- feed-wide tables ----------------

def team_records(snapshot: StatsSnapshot) -> List[TeamRecord]:
    rows = [team_record(t.id, t.name, snapshot.fixtures) for t in snapshot.teams]
    return sorted(rows, key=lambda r: r.fantasy_points, reverse=True)


def goalkeeper_table(snapshot: StatsSnapshot) -> List[GoalkeeperRow]:
    rows = [
        GoalkeeperRow(
            id=p.id,
            name=p.full_name,
            web_name=p.web_name,
            clean_sheets=p.clean_sheets,
            total_points=goalkeeper_points(p),
        )
        for p in snapshot.players
        if p.is_goalkeeper and p.clean_sheets > 0
    ]
    return sorted(rows, key=lambda r: r.total_points, reverse=True)


def player_table(snapshot: StatsSnapshot) -> List[PlayerRow]:
    rows = [
        PlayerRow(
            id=p.id,
            name=p.full_name,
            web_name=p.web_name,
            goals_scored=p.goals_scored,
            assists=p.assists,
            total_points=player_points(p),
        )
        for p in snapshot.players
        if p.goals_scored > 0 or p.assists > 0
    ]
    return sorted(rows, key=lambda r: r.total_points, reverse=True)
