from __future__ import annotations

from typing import Protocol

from streamer.models.config import PartialConfig


class ConfigSource(Protocol):
    name: str

    def load(self) -> PartialConfig: ...
