from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Mapping
from uuid import UUID

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from streamer.core.errors import InvalidValueError
from streamer.services.waveforms import MathFunction


class ConnectionKind(str, Enum):
    MQTT = "mqtt"
    GRPC = "grpc"


class CredentialKind(str, Enum):
    SECRET = "credentials_secret"
    PAIRING_TOKEN = "pairing_token"


class PartialConfig(BaseModel):
    """One source's view of the configuration. Absent fields are ``None``."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    connection_kind: ConnectionKind | None = None
    realm: str | None = None
    device_id: str | None = None
    pairing_url: str | None = None
    credentials_secret: str | None = None
    pairing_token: str | None = None
    store_directory: Path | None = None
    ignore_ssl_errors: bool | None = None
    grpc_endpoint: str | None = None
    grpc_node_id: UUID | None = None
    math_function: MathFunction | None = None
    interface_name: str | None = None
    interval_ms: int | None = None
    scale: float | None = None

    @field_validator("connection_kind", mode="before")
    @classmethod
    def _connection_kind_ci(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("store_directory", mode="before")
    @classmethod
    def _store_directory_not_blank(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            raise ValueError("must not be blank")
        return v

    @field_validator("math_function", mode="before")
    @classmethod
    def _math_function_ci(cls, v: Any) -> Any:
        if isinstance(v, str):
            try:
                return MathFunction.parse(v)
            except ValueError:
                return v
        return v

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> PartialConfig:
        values = {k: v for k, v in data.items() if v is not None}
        try:
            return cls(**values)
        except ValidationError as e:
            first = e.errors()[0]
            loc = first.get("loc") or ("config",)
            raise InvalidValueError(str(loc[0]), first.get("msg", "invalid value")) from e


@dataclass(frozen=True)
class Credential:
    kind: CredentialKind
    value: str

    def __repr__(self) -> str:
        return f"Credential(kind={self.kind.value!r}, value='***')"


@dataclass(frozen=True)
class MqttConnection:
    store_directory: Path
    device_id: str
    realm: str
    credential: Credential
    pairing_url: str
    ignore_ssl_errors: bool


@dataclass(frozen=True)
class GrpcConnection:
    store_directory: Path
    endpoint: str
    node_id: UUID | None = None


@dataclass(frozen=True)
class StreamOptions:
    math_function: MathFunction
    interface_name: str
    interval_ms: int
    scale: float


@dataclass(frozen=True)
class ResolvedConfig:
    connection: MqttConnection | GrpcConnection
    stream: StreamOptions

    @property
    def kind(self) -> ConnectionKind:
        if isinstance(self.connection, MqttConnection):
            return ConnectionKind.MQTT
        return ConnectionKind.GRPC
