"""
tests/conftest.py — Shared Test Fixtures
=========================================
"""

from __future__ import annotations

from datetime import date

import pytest
from sqlalchemy import Engine, create_engine, select
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from seedwatch.database.models import Base, Player, Playtime


@pytest.fixture
def db_engine() -> Engine:
    """Create an in-memory SQLite engine with the Seedwatch tables.

    Uses StaticPool so all threads share the same in-memory database
    (required by ``asyncio.to_thread`` behind ``run_db``).
    """
    engine = create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return engine


# ---------------------------------------------------------------------------
# Factories — importable via ``from conftest import …``
# ---------------------------------------------------------------------------
def add_players(engine: Engine, players: dict[str, str | None]) -> None:
    """Insert ``{steam_id: clan_tag}`` into ``players``."""
    with Session(engine) as session:
        session.add_all(
            Player(steam_id=steam_id, clan_tag=tag) for steam_id, tag in players.items()
        )
        session.commit()


def add_playtime(
    engine: Engine, steam_id: str, day: date, *, seeded: int = 0, played: int = 0,
) -> None:
    with Session(engine) as session:
        session.add(Playtime(
            steam_id=steam_id, date=day, minutes_seeded=seeded, minutes_played=played,
        ))
        session.commit()


def get_playtimes(engine: Engine) -> dict[tuple[str, date], tuple[int, int]]:
    """Return ``{(steam_id, date): (seeded, played)}`` for every row."""
    with Session(engine) as session:
        rows = session.scalars(select(Playtime)).all()
        return {
            (r.steam_id, r.date): (r.minutes_seeded, r.minutes_played) for r in rows
        }


def get_tags(engine: Engine) -> dict[str, str | None]:
    with Session(engine) as session:
        return {p.steam_id: p.clan_tag for p in session.scalars(select(Player)).all()}
