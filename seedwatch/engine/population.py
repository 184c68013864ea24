"""
seedwatch.engine.population — Tick Classification
===================================================

Pure function, no I/O.  Decides what one accumulator tick means for the
whole server:

    population <  lower          → SKIP    (server empty, nothing counts)
    lower <= population <= upper → SEEDED
    population >  upper          → PLAYED

The band is closed on both ends: exactly ``lower`` or exactly ``upper``
players still counts as seeding.
"""

from __future__ import annotations

from seedwatch.config import SeedingThresholds
from seedwatch.database.models import TickKind


def classify_population(population: int, thresholds: SeedingThresholds) -> TickKind:
    """Classify *population* against the seeding band."""
    if population < thresholds.lower:
        return TickKind.SKIP
    if population > thresholds.upper:
        return TickKind.PLAYED
    return TickKind.SEEDED


def is_seeded(population: int, thresholds: SeedingThresholds) -> bool:
    """True once the server is past seeding (used by the seed call)."""
    return population > thresholds.upper
