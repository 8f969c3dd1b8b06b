"""
Clock abstraction for time-window calculations.

Services never read the wall clock directly.  They ask ``get_clock()`` for
the active clock, which is the app's ``CLOCK`` config value when one is set
(tests install a ``FixedClock``) and the system clock otherwise.

All instants are naive UTC datetimes, matching how timestamps are stored.
"""
from datetime import datetime, timedelta, timezone

from flask import current_app, has_app_context


class SystemClock:
    """Wall-clock time in UTC."""

    def now(self):
        return datetime.now(timezone.utc).replace(tzinfo=None)

    def today(self):
        return self.now().date()


class FixedClock:
    """A clock frozen at a given instant.  ``advance`` moves it forward."""

    def __init__(self, instant):
        if instant.tzinfo is not None:
            instant = instant.astimezone(timezone.utc).replace(tzinfo=None)
        self.instant = instant

    def now(self):
        return self.instant

    def today(self):
        return self.instant.date()

    def advance(self, **kwargs):
        self.instant = self.instant + timedelta(**kwargs)
        return self.instant


_system_clock = SystemClock()


def get_clock():
    """Return the clock configured on the current app, or the system clock."""
    if has_app_context():
        clock = current_app.config.get('CLOCK')
        if clock is not None:
            return clock
    return _system_clock
