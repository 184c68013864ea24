"""
seedwatch.errors — Exception Taxonomy
======================================

Every failure here is recoverable: it is logged by the loop that hit it
and the next scheduled iteration starts from scratch.

Database errors are not wrapped — callers catch
:class:`sqlalchemy.exc.SQLAlchemyError` directly.
"""

from __future__ import annotations


class SeedwatchError(Exception):
    """Base class for all Seedwatch errors."""


class RosterSyncError(SeedwatchError):
    """The whitelister API failed or returned a payload we can't use."""


class FeedError(SeedwatchError):
    """The live server status could not be read."""
