"""
Scheduler error kinds.

All of these are caller/programmer errors rather than transient failures:
nothing in the engine retries, and callers should surface them instead of
persisting the offending state.
"""

from __future__ import annotations


class SchedulerError(Exception):
    """Base class for every error raised by the scheduling engine."""


class InvalidState(SchedulerError, ValueError):
    """A MemoryState (or a numeric input derived from one) breaks an invariant."""


class InvalidRating(SchedulerError, ValueError):
    """A rating outside Again/Hard/Good/Easy."""


class ConfigError(SchedulerError, ValueError):
    """The weight table or interval configuration is internally inconsistent."""
