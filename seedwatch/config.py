"""
seedwatch.config — YAML Configuration Loader
=============================================

**Why this file exists:**
This module reads ``config.yaml`` for everything that isn't a secret:
which channel receives the weekly report, where the live server status
lives, the whitelister endpoint, seeding thresholds and schedule times.
Secrets (``DISCORD_TOKEN``, ``DATABASE_URL``, ``ROSTER_API_KEY``) come
from ``.env``.

Usage::

    from seedwatch.config import load_config

    cfg = load_config()              # reads ./config.yaml by default
    print(cfg.seeding.lower)         # 4
    print(cfg.report_channel_id)     # 667741905228136459
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import UTC, time
from pathlib import Path

import yaml

DEFAULT_SEEDING_LOWER = 4
DEFAULT_SEEDING_UPPER = 60


# ---------------------------------------------------------------------------
# Typed settings objects
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class FeedSettings:
    """Where to poll the live server population from."""

    url: str
    timeout_seconds: float = 10.0


@dataclass(frozen=True, slots=True)
class RosterSettings:
    """Whitelister API endpoint and credentials."""

    base_url: str
    api_key: str
    list_id: str
    sync_interval_hours: float = 24.0
    timeout_seconds: float = 10.0


@dataclass(frozen=True, slots=True)
class SeedingThresholds:
    """Population band in which minutes count as *seeded*.

    ``population < lower`` is ignored, ``population > upper`` counts as
    played, everything in ``[lower, upper]`` counts as seeded.
    """

    lower: int = DEFAULT_SEEDING_LOWER
    upper: int = DEFAULT_SEEDING_UPPER


@dataclass(frozen=True, slots=True)
class ReportSettings:
    """When the weekly report fires (UTC) and how far back it looks."""

    weekday: int = 0  # Monday
    hour: int = 12
    window_days: int = 7


@dataclass(frozen=True, slots=True)
class SeedCallSettings:
    """Daily "we're seeding" call-out."""

    channel_id: int
    at: time
    message: str
    ping_roles: tuple[int, ...] = ()


@dataclass(frozen=True, slots=True)
class SeedwatchConfig:
    """Immutable configuration loaded from ``config.yaml``."""

    # Discord
    bot_prefix: str
    guild_id: int
    report_channel_id: int  # Where the weekly report is posted

    feed: FeedSettings
    roster: RosterSettings

    seeding: SeedingThresholds = field(default_factory=SeedingThresholds)
    report: ReportSettings = field(default_factory=ReportSettings)
    tick_seconds: float = 60.0

    # Optional
    admin_role_id: int | None = None  # Role required for admin slash commands
    seed_call: SeedCallSettings | None = None


# ---------------------------------------------------------------------------
# Parsing helpers
# ---------------------------------------------------------------------------
def _parse_time(value: str) -> time:
    """Parse ``"HH:MM"`` into a UTC-aware :class:`datetime.time`."""
    try:
        hours, minutes = (int(part) for part in str(value).split(":"))
    except ValueError:
        raise ValueError(f"Invalid time {value!r}, expected HH:MM") from None
    if not (0 <= hours < 24 and 0 <= minutes < 60):
        raise ValueError(f"Invalid time {value!r}, expected HH:MM")
    return time(hour=hours, minute=minutes, tzinfo=UTC)


def _parse_seeding(raw: dict | None) -> SeedingThresholds:
    raw = raw or {}
    thresholds = SeedingThresholds(
        lower=int(raw.get("lower", DEFAULT_SEEDING_LOWER)),
        upper=int(raw.get("upper", DEFAULT_SEEDING_UPPER)),
    )
    if thresholds.lower < 0 or thresholds.lower > thresholds.upper:
        raise ValueError(
            f"Invalid seeding thresholds: lower={thresholds.lower} "
            f"upper={thresholds.upper} (need 0 <= lower <= upper)"
        )
    return thresholds


def _parse_report(raw: dict | None) -> ReportSettings:
    raw = raw or {}
    report = ReportSettings(
        weekday=int(raw.get("weekday", 0)),
        hour=int(raw.get("hour", 12)),
        window_days=int(raw.get("window_days", 7)),
    )
    if not 0 <= report.weekday <= 6:
        raise ValueError(f"report.weekday must be 0-6, got {report.weekday}")
    if not 0 <= report.hour <= 23:
        raise ValueError(f"report.hour must be 0-23, got {report.hour}")
    if report.window_days < 1:
        raise ValueError(f"report.window_days must be >= 1, got {report.window_days}")
    return report


def _parse_roster(raw: dict) -> RosterSettings:
    # The API key may live in .env instead of the YAML file
    api_key = os.getenv("ROSTER_API_KEY") or raw.get("api_key")
    if not api_key:
        raise KeyError("api_key")
    return RosterSettings(
        base_url=str(raw["base_url"]).rstrip("/"),
        api_key=str(api_key),
        list_id=str(raw["list_id"]),
        sync_interval_hours=float(raw.get("sync_interval_hours", 24)),
        timeout_seconds=float(raw.get("timeout_seconds", 10)),
    )


def _parse_seed_call(raw: dict | None) -> SeedCallSettings | None:
    if not raw:
        return None
    return SeedCallSettings(
        channel_id=int(raw["channel_id"]),
        at=_parse_time(raw["time"]),
        message=str(raw["message"]),
        ping_roles=tuple(int(r) for r in raw.get("ping_roles") or ()),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def parse_config(raw: dict) -> SeedwatchConfig:
    """Build a :class:`SeedwatchConfig` from an already-parsed mapping."""
    feed_raw = raw["feed"]
    return SeedwatchConfig(
        bot_prefix=raw.get("bot_prefix", "!"),
        guild_id=int(raw["guild_id"]),
        report_channel_id=int(raw["report_channel_id"]),
        feed=FeedSettings(
            url=str(feed_raw["url"]),
            timeout_seconds=float(feed_raw.get("timeout_seconds", 10)),
        ),
        roster=_parse_roster(raw["roster"]),
        seeding=_parse_seeding(raw.get("seeding")),
        report=_parse_report(raw.get("report")),
        tick_seconds=float(raw.get("tick_seconds", 60)),
        admin_role_id=(
            int(raw["admin_role_id"]) if raw.get("admin_role_id") else None
        ),
        seed_call=_parse_seed_call(raw.get("seed_call")),
    )


def load_config(path: str | Path = "config.yaml") -> SeedwatchConfig:
    """Read *path* and return a :class:`SeedwatchConfig` instance.

    Parameters
    ----------
    path:
        Filesystem path to the YAML configuration file.
        Defaults to ``config.yaml`` in the current working directory.

    Raises
    ------
    FileNotFoundError
        If the YAML file doesn't exist.
    KeyError
        If a required key is missing from the YAML file.
    ValueError
        If thresholds or schedule values are out of range.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {config_path.resolve()}\n"
            "Hint: copy config.yaml.example → config.yaml and edit it."
        )

    with open(config_path, encoding="utf-8") as fh:
        raw: dict = yaml.safe_load(fh)

    return parse_config(raw)
