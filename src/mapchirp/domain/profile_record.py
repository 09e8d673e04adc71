from dataclasses import dataclass


@dataclass(frozen=True)
class ProfileRecord:
    """Cached location for one username.

    ``timestamp`` is the epoch-seconds time the record was written.
    """

    username: str
    location: str
    timestamp: float

    def age(self, now: float) -> float:
        return now - self.timestamp

    def is_fresh(self, now: float, ttl_seconds: float) -> bool:
        return self.age(now) < ttl_seconds
