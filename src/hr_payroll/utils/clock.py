from datetime import datetime, timedelta


class SystemClock:
    """Wall clock used outside tests"""

    def now(self) -> datetime:
        return datetime.now()


class FixedClock:
    """Clock that only moves when told to, for deterministic tests"""

    def __init__(self, now: datetime):
        self._now = now

    def now(self) -> datetime:
        return self._now

    def set(self, now: datetime):
        self._now = now

    def advance(self, **kwargs) -> datetime:
        """Move forward by a timedelta given as keyword arguments (days=31)"""
        self._now = self._now + timedelta(**kwargs)
        return self._now
