from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel

EntryType = Literal["goalkeeper", "team", "player"]
TransferAction = Literal["added", "removed"]


class TransferOut(BaseModel):
    id: int
    squad_id: int
    squad_name: str
    type: EntryType
    player_id: Optional[int] = None   # FPL id of the goalkeeper/team/player
    player_name: str
    action: TransferAction
    date: datetime
