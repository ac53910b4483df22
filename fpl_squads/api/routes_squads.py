# fpl_squads/api/routes_squads.py
from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from fpl_squads.core.errors import SquadServiceError
from fpl_squads.db.session import get_db
from fpl_squads.schemas.squad import SquadOut, SquadPayload
from fpl_squads.services.squads import create_squad, delete_squad, get_squad, list_squads
from fpl_squads.services.transfers import apply_roster_update

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/squads", tags=["squads"])


@router.get("", response_model=List[SquadOut])
def squads_list(db: Session = Depends(get_db)):
    """
    All squads with their goalkeeper, teams and players.
    """
    try:
        squads = list_squads(db)
    except (SquadServiceError, OperationalError):
        raise
    except Exception:
        logger.exception("Error fetching squads")
        raise HTTPException(status_code=500, detail="Failed to fetch squads")
    return [SquadOut(**s) for s in squads]


@router.post("", response_model=SquadOut, status_code=status.HTTP_201_CREATED)
def squads_create(payload: SquadPayload, db: Session = Depends(get_db)):
    try:
        squad = create_squad(db, payload)
    except (SquadServiceError, OperationalError):
        raise
    except Exception:
        logger.exception("Error creating squad")
        raise HTTPException(status_code=500, detail="Failed to create squad")
    return SquadOut(**squad)


@router.get("/{squad_id}", response_model=SquadOut)
def squads_get(squad_id: int, db: Session = Depends(get_db)):
    return SquadOut(**get_squad(db, squad_id))


@router.put("/{squad_id}", response_model=SquadOut)
def squads_update(squad_id: int, payload: SquadPayload, db: Session = Depends(get_db)):
    """
    Replace the squad's name and roster. Every goalkeeper/team/player that
    leaves or joins is appended to the transfer log in the same transaction.
    """
    try:
        squad = apply_roster_update(db, squad_id, payload)
    except (SquadServiceError, OperationalError):
        raise
    except Exception:
        logger.exception("Error updating squad %s", squad_id)
        raise HTTPException(status_code=500, detail="Failed to update squad")
    return SquadOut(**squad)


@router.delete("/{squad_id}")
def squads_delete(squad_id: int, db: Session = Depends(get_db)):
    delete_squad(db, squad_id)
    return {"message": "Squad deleted successfully"}
