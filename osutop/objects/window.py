from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class TimeWindow:
    start: datetime
    end: datetime

    def __repr__(self) -> str:
        return f"<{self.start:%Y-%m-%d} - {self.end:%Y-%m-%d}>"

    def __contains__(self, timestamp: datetime) -> bool:
        return self.contains(timestamp)

    def contains(self, timestamp: datetime) -> bool:
        # both bounds are exclusive
        return self.start < timestamp < self.end
