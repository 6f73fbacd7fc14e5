from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from uuid import UUID

from streamer.models.config import Credential


@dataclass(frozen=True)
class MqttPlan:
    realm: str
    device_id: str
    credential: Credential
    pairing_url: str
    store_directory: Path
    ignore_ssl_errors: bool


@dataclass(frozen=True)
class GrpcPlan:
    endpoint: str
    node_id: UUID | None
    store_directory: Path


TransportPlan = MqttPlan | GrpcPlan
