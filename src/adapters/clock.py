from datetime import UTC, datetime


class SystemClock:
    def now_utc(self) -> datetime:
        return datetime.now(UTC)


class FrozenClock:
    """Clock pinned to a fixed instant, for deterministic timestamps."""

    def __init__(self, at: datetime) -> None:
        self.at = at

    def now_utc(self) -> datetime:
        return self.at
