from datetime import UTC, datetime


class SystemClock:
    def now_utc(self) -> datetime:
        return datetime.now(UTC)

    def now_millis(self) -> int:
        return int(self.now_utc().timestamp() * 1000)


class FixedClock:
    """Clock pinned to one instant, for tests and replays."""

    def __init__(self, millis: int) -> None:
        self.millis = millis

    def now_utc(self) -> datetime:
        return datetime.fromtimestamp(self.millis / 1000, UTC)

    def now_millis(self) -> int:
        return self.millis
