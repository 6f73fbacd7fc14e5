from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class SampleRead(BaseModel):
    timestamp: datetime
    t: float
    raw_value: float
    scaled_value: float


class StreamStats(BaseModel):
    state: str
    connection: str
    math_function: str
    interface_name: str
    interval_ms: int = Field(ge=1)
    scale: float
    started_at: datetime | None = None
    ticks: int = Field(ge=0)
    sent: int = Field(ge=0)
    failed: int = Field(ge=0)
    last_sample: SampleRead | None = None
    last_error: str | None = None


class Health(BaseModel):
    status: str
    state: str
