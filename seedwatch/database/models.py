"""
seedwatch.database.models — SQLAlchemy 2.0 Data Models
=======================================================

Tables:
- players    — Whitelisted players known to the tracker (SteamID64 PK)
- playtimes  — Per-player, per-UTC-day minute counters

A ``playtimes`` row is created lazily on the first qualifying tick of the
day and only ever incremented afterwards.  History is never pruned here;
deleting a player cascades to its counters.
"""

from __future__ import annotations

import datetime
import enum

from sqlalchemy import Date, ForeignKey, Index, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------
class Base(DeclarativeBase):
    """Shared base for all Seedwatch ORM models."""


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class TickKind(enum.StrEnum):
    """How a single accumulator tick is classified.

    The classification is population-wide: every tracked player present
    during a tick gets the same kind.
    """
    SKIP = "SKIP"
    SEEDED = "SEEDED"
    PLAYED = "PLAYED"


# ---------------------------------------------------------------------------
# Players — one row per whitelisted SteamID
# ---------------------------------------------------------------------------
class Player(Base):
    __tablename__ = "players"

    steam_id: Mapped[str] = mapped_column(String(32), primary_key=True)
    clan_tag: Mapped[str | None] = mapped_column(String(255), default=None)

    playtimes: Mapped[list[Playtime]] = relationship(
        back_populates="player", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Player steam_id={self.steam_id} clan={self.clan_tag!r}>"


# ---------------------------------------------------------------------------
# Playtime — per-day seeded / played minute counters
# ---------------------------------------------------------------------------
class Playtime(Base):
    __tablename__ = "playtimes"

    steam_id: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("players.steam_id", ondelete="CASCADE"),
        primary_key=True,
    )
    date: Mapped[datetime.date] = mapped_column(Date, primary_key=True)  # UTC calendar day
    minutes_played: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    minutes_seeded: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    player: Mapped[Player] = relationship(back_populates="playtimes")

    __table_args__ = (
        Index("ix_playtimes_date", "date"),
    )

    def __repr__(self) -> str:
        return (
            f"<Playtime steam_id={self.steam_id} date={self.date} "
            f"played={self.minutes_played} seeded={self.minutes_seeded}>"
        )
