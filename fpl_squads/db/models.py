from datetime import datetime
from typing import List, Optional

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


class Squad(Base):
    __tablename__ = "squads"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), onupdate=func.now(), nullable=True)

    goalkeeper: Mapped[Optional["Goalkeeper"]] = relationship(
        back_populates="squad", uselist=False, cascade="all, delete-orphan"
    )
    teams: Mapped[List["Team"]] = relationship(
        back_populates="squad", cascade="all, delete-orphan", order_by="Team.pk"
    )
    players: Mapped[List["Player"]] = relationship(
        back_populates="squad", cascade="all, delete-orphan", order_by="Player.pk"
    )


class _RosterEntry:
    # fpl_id lives in the FPL feed's id space; null when only a name is known
    pk: Mapped[int] = mapped_column(Integer, primary_key=True)
    fpl_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, index=True)
    name: Mapped[str] = mapped_column(Text)
    added_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class Goalkeeper(_RosterEntry, Base):
    __tablename__ = "goalkeepers"
    squad_id: Mapped[int] = mapped_column(ForeignKey("squads.id", ondelete="CASCADE"), unique=True)
    squad: Mapped[Squad] = relationship(back_populates="goalkeeper")


class Team(_RosterEntry, Base):
    __tablename__ = "teams"
    squad_id: Mapped[int] = mapped_column(ForeignKey("squads.id", ondelete="CASCADE"), index=True)
    squad: Mapped[Squad] = relationship(back_populates="teams")


class Player(_RosterEntry, Base):
    __tablename__ = "players"
    squad_id: Mapped[int] = mapped_column(ForeignKey("squads.id", ondelete="CASCADE"), index=True)
    squad: Mapped[Squad] = relationship(back_populates="players")


class Transfer(Base):
    """Append-only ledger row. squad_id is a plain column: rows outlive their squad."""
    __tablename__ = "transfers"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    squad_id: Mapped[int] = mapped_column(Integer, index=True)
    squad_name: Mapped[str] = mapped_column(Text)
    type: Mapped[str] = mapped_column(String(16))      # goalkeeper | team | player
    player_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    player_name: Mapped[str] = mapped_column(Text)
    action: Mapped[str] = mapped_column(String(16))    # added | removed
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), index=True)
