# fpl_squads/services/squads.py
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from fpl_squads.core.errors import NotFoundError, StorageFailureError
from fpl_squads.db.models import Goalkeeper, Player, Squad, Team
from fpl_squads.schemas.squad import RosterEntryIn, SquadOut, SquadPayload

logger = logging.getLogger(__name__)

_ROSTER_LOAD = (
    selectinload(Squad.goalkeeper),
    selectinload(Squad.teams),
    selectinload(Squad.players),
)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _entry_to_dict(entry) -> Dict[str, Any]:
    return {"id": entry.fpl_id, "name": entry.name, "added_date": entry.added_date}


def squad_to_dict(squad: Squad) -> Dict[str, Any]:
    return {
        "id": squad.id,
        "name": squad.name,
        "goalkeeper": _entry_to_dict(squad.goalkeeper) if squad.goalkeeper else None,
        "teams": [_entry_to_dict(t) for t in squad.teams],
        "players": [_entry_to_dict(p) for p in squad.players],
        "created_at": squad.created_at,
        "updated_at": squad.updated_at,
    }


def to_squad_out(squad: Squad) -> SquadOut:
    return SquadOut(**squad_to_dict(squad))


def build_entry(model, entry: RosterEntryIn, *, added_date: Optional[datetime] = None, now: Optional[datetime] = None):
    """Goalkeeper/Team/Player row for a payload entry; an explicit payload date wins."""
    return model(
        fpl_id=entry.id,
        name=entry.name,
        added_date=entry.added_date or added_date or now or utcnow(),
    )


def load_squad(db: Session, squad_id: int) -> Squad:
    squad = db.execute(
        select(Squad).options(*_ROSTER_LOAD).where(Squad.id == squad_id)
    ).scalar_one_or_none()
    if squad is None:
        raise NotFoundError(f"Squad {squad_id} not found")
    return squad


def list_squads(db: Session) -> List[Dict[str, Any]]:
    squads = db.execute(select(Squad).options(*_ROSTER_LOAD).order_by(Squad.id)).scalars().all()
    logger.debug("Found %d squads", len(squads))
    return [squad_to_dict(s) for s in squads]


def get_squad(db: Session, squad_id: int) -> Dict[str, Any]:
    return squad_to_dict(load_squad(db, squad_id))


def create_squad(db: Session, payload: SquadPayload) -> Dict[str, Any]:
    now = utcnow()
    squad = Squad(name=payload.name)
    if payload.goalkeeper:
        squad.goalkeeper = build_entry(Goalkeeper, payload.goalkeeper, now=now)
    squad.teams = [build_entry(Team, t, now=now) for t in payload.teams]
    squad.players = [build_entry(Player, p, now=now) for p in payload.players]
    try:
        db.add(squad)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Error creating squad %r: %s", payload.name, exc)
        raise StorageFailureError("Failed to create squad") from exc
    logger.info("Created squad %s (%s)", squad.id, squad.name)
    return get_squad(db, squad.id)


def delete_squad(db: Session, squad_id: int) -> None:
    """Removes the squad and its roster. Its transfer history stays."""
    squad = load_squad(db, squad_id)
    try:
        db.delete(squad)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Error deleting squad %s: %s", squad_id, exc)
        raise StorageFailureError("Failed to delete squad") from exc
    logger.info("Deleted squad %s", squad_id)
