from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Sample:
    timestamp: datetime
    t: float
    raw_value: float
    scaled_value: float
