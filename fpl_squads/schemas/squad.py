from __future__ import annotations
from datetime import datetime
from typing import Any, List, Optional, Tuple

from pydantic import AliasChoices, BaseModel, Field, field_validator

MAX_TEAMS = 2
MAX_PLAYERS = 3


def roster_key(entry_id: Optional[int], name: str) -> Tuple[str, Any]:
    """Identity of a roster slot: the FPL id when known, else the lowercased name."""
    if entry_id:
        return ("id", int(entry_id))
    return ("name", (name or "").strip().lower())


def _is_blank_slot(value: Any) -> bool:
    # UI forms post {"id": 0, "name": ""} for an empty slot
    return isinstance(value, dict) and not value.get("id") and not (value.get("name") or "").strip()


class RosterEntryIn(BaseModel):
    id: Optional[int] = Field(default=None, ge=0, description="FPL feed id")
    name: str = Field(min_length=1)
    added_date: Optional[datetime] = Field(
        default=None, validation_alias=AliasChoices("added_date", "addedDate")
    )

    @field_validator("id")
    @classmethod
    def _zero_is_unset(cls, v: Optional[int]) -> Optional[int]:
        return v or None

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v

    @property
    def key(self) -> Tuple[str, Any]:
        return roster_key(self.id, self.name)


def _dedupe(entries: List[RosterEntryIn]) -> List[RosterEntryIn]:
    """First wins per key; a name-only entry naming an id-keyed entry of the same list is dropped."""
    id_names = {e.name.lower() for e in entries if e.id}
    seen = set()
    out: List[RosterEntryIn] = []
    for e in entries:
        if e.key in seen or (not e.id and e.name.lower() in id_names):
            continue
        seen.add(e.key)
        out.append(e)
    return out


class SquadPayload(BaseModel):
    name: str = Field(min_length=1)
    goalkeeper: Optional[RosterEntryIn] = None
    teams: List[RosterEntryIn] = []
    players: List[RosterEntryIn] = []

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("squad name must not be blank")
        return v

    @field_validator("goalkeeper", mode="before")
    @classmethod
    def _blank_goalkeeper(cls, v):
        return None if _is_blank_slot(v) else v

    @field_validator("teams", "players", mode="before")
    @classmethod
    def _drop_blank_slots(cls, v):
        if v is None:
            return []
        if isinstance(v, list):
            return [item for item in v if not _is_blank_slot(item)]
        return v

    @field_validator("teams")
    @classmethod
    def _check_teams(cls, v: List[RosterEntryIn]) -> List[RosterEntryIn]:
        v = _dedupe(v)
        if len(v) > MAX_TEAMS:
            raise ValueError(f"a squad holds at most {MAX_TEAMS} teams (got {len(v)})")
        return v

    @field_validator("players")
    @classmethod
    def _check_players(cls, v: List[RosterEntryIn]) -> List[RosterEntryIn]:
        v = _dedupe(v)
        if len(v) > MAX_PLAYERS:
            raise ValueError(f"a squad holds at most {MAX_PLAYERS} players (got {len(v)})")
        return v


class RosterEntryOut(BaseModel):
    id: Optional[int] = None
    name: str
    added_date: Optional[datetime] = None


class SquadOut(BaseModel):
    id: int
    name: str
    goalkeeper: Optional[RosterEntryOut] = None
    teams: List[RosterEntryOut] = []
    players: List[RosterEntryOut] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
