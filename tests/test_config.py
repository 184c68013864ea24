"""
tests/test_config.py — Configuration Loader Tests
==================================================
"""

from __future__ import annotations

from datetime import UTC, time

import pytest
import yaml

from seedwatch.config import load_config, parse_config

MINIMAL = {
    "guild_id": 1,
    "report_channel_id": 2,
    "feed": {"url": "http://host/status"},
    "roster": {
        "base_url": "https://whitelister.test/",
        "api_key": "yaml-key",
        "list_id": "list-1",
    },
}


@pytest.fixture(autouse=True)
def _no_env_key(monkeypatch):
    monkeypatch.delenv("ROSTER_API_KEY", raising=False)


class TestParseConfig:

    def test_defaults(self):
        cfg = parse_config(MINIMAL)

        assert cfg.seeding.lower == 4
        assert cfg.seeding.upper == 60
        assert cfg.tick_seconds == 60
        assert cfg.report.weekday == 0
        assert cfg.report.window_days == 7
        assert cfg.roster.base_url == "https://whitelister.test"
        assert cfg.roster.sync_interval_hours == 24
        assert cfg.admin_role_id is None
        assert cfg.seed_call is None

    def test_env_api_key_wins(self, monkeypatch):
        monkeypatch.setenv("ROSTER_API_KEY", "env-key")
        assert parse_config(MINIMAL).roster.api_key == "env-key"

    def test_missing_api_key(self):
        raw = {**MINIMAL, "roster": {"base_url": "x", "list_id": "y"}}
        with pytest.raises(KeyError):
            parse_config(raw)

    def test_missing_required_key(self):
        raw = {k: v for k, v in MINIMAL.items() if k != "report_channel_id"}
        with pytest.raises(KeyError):
            parse_config(raw)

    def test_inverted_thresholds_rejected(self):
        with pytest.raises(ValueError):
            parse_config({**MINIMAL, "seeding": {"lower": 70, "upper": 60}})

    @pytest.mark.parametrize("report", [{"weekday": 7}, {"hour": 24}, {"window_days": 0}])
    def test_bad_report_schedule(self, report):
        with pytest.raises(ValueError):
            parse_config({**MINIMAL, "report": report})

    def test_seed_call(self):
        cfg = parse_config({
            **MINIMAL,
            "seed_call": {
                "channel_id": 5,
                "time": "15:00",
                "message": "Seeding has started.",
                "ping_roles": [11, "12"],
            },
        })

        assert cfg.seed_call.at == time(15, 0, tzinfo=UTC)
        assert cfg.seed_call.ping_roles == (11, 12)

    @pytest.mark.parametrize("value", ["25:00", "15", "ab:cd", "12:60"])
    def test_seed_call_bad_time(self, value):
        raw = {**MINIMAL, "seed_call": {"channel_id": 5, "time": value, "message": "m"}}
        with pytest.raises(ValueError):
            parse_config(raw)


class TestLoadConfig:

    def test_reads_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump({**MINIMAL, "seeding": {"lower": 2, "upper": 40}}))

        cfg = load_config(path)

        assert cfg.seeding.lower == 2
        assert cfg.seeding.upper == 40

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.yaml")
