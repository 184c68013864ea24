"""
Seedwatch — Playtime & Seeding Tracker for Game Server Communities
===================================================================
Watches a game server's live roster, counts how many minutes each
whitelisted player spends seeding (low population) or playing (full
server), and posts a weekly per-clan summary to Discord.

Package layout::

    seedwatch/
    ├── config.py          # YAML → typed Python config
    ├── errors.py          # Exception taxonomy
    ├── feed.py            # Live population feed (server status poller)
    ├── notifier.py        # Discord channel notifier
    ├── database/
    │   ├── engine.py      # SQLAlchemy engine + async helper
    │   └── models.py      # players + playtimes tables
    ├── engine/
    │   ├── population.py  # Tick classification (skip / seeded / played)
    │   └── tracker.py     # PlaytimeTracker — sync / tick / report
    ├── services/
    │   ├── roster_service.py    # Whitelister clan sync
    │   ├── playtime_service.py  # Per-day counter upserts
    │   ├── report_service.py    # Trailing-window aggregation + table
    │   ├── seed_call_service.py # Daily seeding call-out
    │   └── embeds.py            # Discord embed builders
    └── bot/
        ├── core.py        # Bot subclass, cog loader
        └── cogs/
            ├── tracker.py # tasks.loop scheduling
            └── admin.py   # /roster-sync, /playtime-report
"""

__version__ = "0.1.0"
