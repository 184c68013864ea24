"""
tests/test_tracker_cog.py — Scheduling Cog Tests
=================================================
Loop wiring (start on load, cancel on unload), the weekly report's weekday
gate and the optional seed call.  Loop bodies are awaited directly through
``Loop.coro`` so no real timers run.
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime, time, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

from seedwatch.bot.cogs.tracker import Tracker, is_report_day
from seedwatch.config import parse_config

MONDAY = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)
TUESDAY = datetime(2026, 10, 20, 12, 0, tzinfo=UTC)

RAW_CONFIG = {
    "guild_id": 1,
    "report_channel_id": 2,
    "feed": {"url": "http://host/status"},
    "roster": {
        "base_url": "https://whitelister.test",
        "api_key": "key",
        "list_id": "list-1",
        "sync_interval_hours": 6,
    },
    "tick_seconds": 30,
    "report": {"weekday": 0, "hour": 18},
}

SEED_CALL = {"channel_id": 100, "time": "15:30", "message": "Seed now!"}

LOOPS = ("roster_loop", "tick_loop", "report_loop", "seed_call_loop")


def run_async(coro):
    """Run an async coroutine to completion."""
    return asyncio.run(coro)


def _mock_bot(*, now: datetime = MONDAY, seed_call: dict | None = None) -> MagicMock:
    bot = MagicMock()
    bot.cfg = parse_config({**RAW_CONFIG, "seed_call": seed_call})
    bot.tracker = MagicMock()
    bot.tracker.clock = lambda: now
    bot.tracker.report = AsyncMock()
    bot.tracker.tick = AsyncMock()
    bot.tracker.sync = AsyncMock()
    return bot


def _cog_with_mock_loops(bot: MagicMock) -> Tracker:
    cog = Tracker(bot)
    for name in LOOPS:
        setattr(cog, name, MagicMock())
    return cog


# ===========================================================================
# Weekday gate
# ===========================================================================
class TestIsReportDay:

    def test_matching_weekday(self):
        assert is_report_day(MONDAY, 0) is True

    def test_other_weekday(self):
        assert is_report_day(TUESDAY, 0) is False

    def test_uses_utc_weekday(self):
        # Monday 01:30 at UTC+2 is Sunday in UTC
        local = datetime(2026, 10, 19, 1, 30, tzinfo=timezone(timedelta(hours=2)))
        assert is_report_day(local, 0) is False
        assert is_report_day(local, 6) is True


# ===========================================================================
# Load / unload
# ===========================================================================
class TestLifecycle:

    def test_cog_load_applies_intervals_and_starts_loops(self):
        cog = _cog_with_mock_loops(_mock_bot())

        run_async(cog.cog_load())

        cog.roster_loop.change_interval.assert_called_once_with(hours=6)
        cog.tick_loop.change_interval.assert_called_once_with(seconds=30)
        cog.report_loop.change_interval.assert_called_once_with(
            time=time(hour=18, tzinfo=UTC),
        )
        cog.roster_loop.start.assert_called_once()
        cog.tick_loop.start.assert_called_once()
        cog.report_loop.start.assert_called_once()

    def test_seed_call_loop_not_started_without_settings(self):
        cog = _cog_with_mock_loops(_mock_bot())

        run_async(cog.cog_load())

        cog.seed_call_loop.start.assert_not_called()

    def test_seed_call_loop_started_at_configured_time(self):
        cog = _cog_with_mock_loops(_mock_bot(seed_call=SEED_CALL))

        run_async(cog.cog_load())

        cog.seed_call_loop.change_interval.assert_called_once_with(
            time=time(15, 30, tzinfo=UTC),
        )
        cog.seed_call_loop.start.assert_called_once()

    def test_cog_unload_cancels_every_loop(self):
        cog = _cog_with_mock_loops(_mock_bot(seed_call=SEED_CALL))

        run_async(cog.cog_load())
        run_async(cog.cog_unload())

        for name in LOOPS:
            getattr(cog, name).cancel.assert_called_once()


# ===========================================================================
# Loop bodies
# ===========================================================================
class TestReportLoop:

    def test_posts_on_configured_weekday(self):
        bot = _mock_bot(now=MONDAY)
        cog = Tracker(bot)

        run_async(cog.report_loop.coro(cog))

        bot.tracker.report.assert_awaited_once()

    def test_skips_other_weekdays(self):
        bot = _mock_bot(now=TUESDAY)
        cog = Tracker(bot)

        run_async(cog.report_loop.coro(cog))

        bot.tracker.report.assert_not_awaited()

    def test_report_failure_does_not_escape(self):
        bot = _mock_bot(now=MONDAY)
        bot.tracker.report.side_effect = RuntimeError("boom")
        cog = Tracker(bot)

        run_async(cog.report_loop.coro(cog))

        bot.tracker.report.assert_awaited_once()


class TestTickAndRosterLoops:

    def test_tick_loop_calls_tick(self):
        bot = _mock_bot()
        cog = Tracker(bot)

        run_async(cog.tick_loop.coro(cog))

        bot.tracker.tick.assert_awaited_once()

    def test_tick_failure_does_not_escape(self):
        bot = _mock_bot()
        bot.tracker.tick.side_effect = RuntimeError("boom")
        cog = Tracker(bot)

        run_async(cog.tick_loop.coro(cog))

    def test_roster_loop_calls_sync(self):
        bot = _mock_bot()
        cog = Tracker(bot)

        run_async(cog.roster_loop.coro(cog))

        bot.tracker.sync.assert_awaited_once()


class TestSeedCallLoop:

    def test_skipped_without_settings(self, monkeypatch):
        send = AsyncMock()
        monkeypatch.setattr("seedwatch.bot.cogs.tracker.send_seed_call", send)
        cog = Tracker(_mock_bot())

        run_async(cog.seed_call_loop.coro(cog))

        send.assert_not_awaited()

    def test_sends_with_live_feed_and_thresholds(self, monkeypatch):
        send = AsyncMock()
        monkeypatch.setattr("seedwatch.bot.cogs.tracker.send_seed_call", send)
        bot = _mock_bot(seed_call=SEED_CALL)
        cog = Tracker(bot)

        run_async(cog.seed_call_loop.coro(cog))

        send.assert_awaited_once()
        feed, notifier, settings, thresholds = send.await_args.args
        assert feed is bot.tracker.feed
        assert notifier.channel_id == 100
        assert settings is bot.cfg.seed_call
        assert thresholds is bot.cfg.seeding
