# fpl_squads/services/transfers.py
"""
Roster diff + transfer log.

`diff_roster` is pure: old squad + new payload -> added/removed events.
`apply_roster_update` writes those events and swaps the roster in a single
session transaction; on any failure the session is rolled back and neither
the transfers nor the roster change survive.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from fpl_squads.core.errors import RosterValidationError, StorageFailureError
from fpl_squads.db.models import Goalkeeper, Player, Squad, Team, Transfer
from fpl_squads.schemas.squad import RosterEntryIn, RosterEntryOut, SquadOut, SquadPayload, roster_key
from fpl_squads.services.squads import build_entry, get_squad, load_squad, to_squad_out, utcnow

logger = logging.getLogger(__name__)

GOALKEEPER = "goalkeeper"
TEAM = "team"
PLAYER = "player"
ADDED = "added"
REMOVED = "removed"


@dataclass(frozen=True)
class TransferEvent:
    type: str
    player_id: Optional[int]
    player_name: str
    action: str


def _key(entry: Union[RosterEntryIn, RosterEntryOut]) -> Tuple[str, Any]:
    return roster_key(entry.id, entry.name)


def _diff_goalkeeper(old: Optional[RosterEntryOut], new: Optional[RosterEntryIn]) -> List[TransferEvent]:
    events: List[TransferEvent] = []
    changed = old is None or new is None or _key(old) != _key(new)
    if old is not None and changed:
        events.append(TransferEvent(GOALKEEPER, old.id, old.name, REMOVED))
    if new is not None and changed:
        events.append(TransferEvent(GOALKEEPER, new.id, new.name, ADDED))
    return events


def _diff_set(
    entry_type: str, old: Sequence[RosterEntryOut], new: Sequence[RosterEntryIn]
) -> List[TransferEvent]:
    old_keys = {_key(e) for e in old}
    new_keys = {_key(e) for e in new}
    removed = [TransferEvent(entry_type, e.id, e.name, REMOVED) for e in old if _key(e) not in new_keys]
    added = [TransferEvent(entry_type, e.id, e.name, ADDED) for e in new if _key(e) not in old_keys]
    return removed + added


def diff_roster(old: SquadOut, new: SquadPayload) -> List[TransferEvent]:
    """Per category, independently; entries kept on both sides produce nothing."""
    return (
        _diff_goalkeeper(old.goalkeeper, new.goalkeeper)
        + _diff_set(TEAM, old.teams, new.teams)
        + _diff_set(PLAYER, old.players, new.players)
    )


def coerce_payload(payload: Union[SquadPayload, Dict[str, Any]]) -> SquadPayload:
    if isinstance(payload, SquadPayload):
        return payload
    try:
        return SquadPayload.model_validate(payload)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'payload'}: {err['msg']}" for err in exc.errors()
        )
        raise RosterValidationError(f"Invalid squad payload: {problems}") from exc


def _replace_roster(db: Session, squad: Squad, old: SquadOut, new: SquadPayload, now: datetime) -> None:
    # retained entries keep the date they originally joined the squad
    gk_dates = {_key(old.goalkeeper): old.goalkeeper.added_date} if old.goalkeeper else {}
    team_dates = {_key(t): t.added_date for t in old.teams}
    player_dates = {_key(p): p.added_date for p in old.players}

    squad.goalkeeper = None
    squad.teams = []
    squad.players = []
    # old rows must be gone before inserting: goalkeepers.squad_id is unique
    db.flush()

    if new.goalkeeper:
        squad.goalkeeper = build_entry(
            Goalkeeper, new.goalkeeper, added_date=gk_dates.get(_key(new.goalkeeper)), now=now
        )
    squad.teams = [build_entry(Team, t, added_date=team_dates.get(_key(t)), now=now) for t in new.teams]
    squad.players = [build_entry(Player, p, added_date=player_dates.get(_key(p)), now=now) for p in new.players]
    squad.name = new.name
    # onupdate only fires on squads-row changes; roster-only edits count too
    squad.updated_at = now
    db.flush()


def apply_roster_update(
    db: Session, squad_id: int, payload: Union[SquadPayload, Dict[str, Any]]
) -> Dict[str, Any]:
    """
    Replace a squad's name and roster, appending one Transfer row per change.
    Raises RosterValidationError / NotFoundError before touching storage,
    StorageFailureError (after rollback) if the write fails.
    """
    new = coerce_payload(payload)
    squad = load_squad(db, squad_id)
    old = to_squad_out(squad)
    events = diff_roster(old, new)
    now = utcnow()

    try:
        db.add_all(
            Transfer(
                squad_id=squad_id,
                squad_name=new.name,
                type=e.type,
                player_id=e.player_id,
                player_name=e.player_name,
                action=e.action,
                date=now,
            )
            for e in events
        )
        db.flush()
        _replace_roster(db, squad, old, new, now)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Error updating squad %s, rolled back: %s", squad_id, exc)
        raise StorageFailureError(f"Failed to update squad {squad_id}") from exc
    except Exception:
        db.rollback()
        raise

    logger.info("Updated squad %s (%s): %d transfer(s)", squad_id, new.name, len(events))
    return get_squad(db, squad_id)


def transfer_to_dict(t: Transfer) -> Dict[str, Any]:
    return {
        "id": t.id,
        "squad_id": t.squad_id,
        "squad_name": t.squad_name,
        "type": t.type,
        "player_id": t.player_id,
        "player_name": t.player_name,
        "action": t.action,
        "date": t.date,
    }


def list_transfers(db: Session, squad_id: Optional[int] = None, limit: Optional[int] = None) -> List[Dict[str, Any]]:
    """Newest first; rows from the same update share a date and fall back to id order."""
    stmt = select(Transfer).order_by(Transfer.date.desc(), Transfer.id.desc())
    if squad_id is not None:
        stmt = stmt.where(Transfer.squad_id == squad_id)
    if limit:
        stmt = stmt.limit(limit)
    return [transfer_to_dict(t) for t in db.execute(stmt).scalars().all()]
