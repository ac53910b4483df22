from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from fpl_squads.db.session import get_db
from fpl_squads.schemas.transfer import TransferOut
from fpl_squads.services.transfers import list_transfers

router = APIRouter(prefix="/transfers", tags=["transfers"])


@router.get("", response_model=List[TransferOut])
def transfers_list(
    squad_id: Optional[int] = Query(default=None, description="Only transfers of this squad"),
    limit: Optional[int] = Query(default=None, ge=1, le=500),
    db: Session = Depends(get_db),
):
    """Transfer log, newest first."""
    return [TransferOut(**t) for t in list_transfers(db, squad_id=squad_id, limit=limit)]
