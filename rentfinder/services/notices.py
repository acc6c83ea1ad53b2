import time
from dataclasses import dataclass, field


@dataclass
class Notice:
    """A banner that disappears on its own after ``ttl`` seconds."""

    message: str
    kind: str = "error"  # "error" or "success"
    ttl: float = 5.0
    created_at: float = field(default_factory=time.monotonic)
    dismissed: bool = False

    def expired(self, now: float | None = None) -> bool:
        now = time.monotonic() if now is None else now
        return self.dismissed or now - self.created_at >= self.ttl

    def dismiss(self):
        self.dismissed = True

    @property
    def ttl_ms(self) -> int:
        return int(self.ttl * 1000)
