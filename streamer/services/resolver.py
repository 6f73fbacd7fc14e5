"""Layered configuration resolution.

Each field is taken from the first source that sets it, in the order
CLI, environment, file. The merged connection kind then decides which
schema has to validate; missing fields are reported one at a time in a
fixed order so the same input always yields the same error.
"""

from __future__ import annotations

import math
from typing import Any

from streamer.core.config import (
    DEFAULT_INTERFACE_NAME,
    DEFAULT_INTERVAL_MS,
    DEFAULT_MATH_FUNCTION,
    DEFAULT_SCALE,
)
from streamer.core.errors import InvalidValueError, MissingFieldError
from streamer.models.config import (
    ConnectionKind,
    Credential,
    CredentialKind,
    GrpcConnection,
    MqttConnection,
    PartialConfig,
    ResolvedConfig,
    StreamOptions,
)

CREDENTIAL_FIELD = "credentials_secret|pairing_token"


def merge(*partials: PartialConfig) -> PartialConfig:
    """Fold partials by priority, highest first."""
    merged: dict[str, Any] = {}
    for name in PartialConfig.model_fields:
        for partial in partials:
            value = getattr(partial, name)
            if value is not None:
                merged[name] = value
                break
    return PartialConfig(**merged)


def _require(merged: PartialConfig, name: str) -> Any:
    value = getattr(merged, name)
    if value is None:
        raise MissingFieldError(name)
    if isinstance(value, str) and not value.strip():
        raise InvalidValueError(name, "must not be blank")
    return value


def _credential(merged: PartialConfig) -> Credential:
    if merged.credentials_secret is not None:
        kind, value = CredentialKind.SECRET, merged.credentials_secret
    elif merged.pairing_token is not None:
        kind, value = CredentialKind.PAIRING_TOKEN, merged.pairing_token
    else:
        raise MissingFieldError(CREDENTIAL_FIELD)
    if not value.strip():
        raise InvalidValueError(kind.value, "must not be blank")
    return Credential(kind=kind, value=value)


def _mqtt(merged: PartialConfig) -> MqttConnection:
    store_directory = _require(merged, "store_directory")
    device_id = _require(merged, "device_id")
    realm = _require(merged, "realm")
    credential = _credential(merged)
    pairing_url = _require(merged, "pairing_url")
    ignore_ssl_errors = _require(merged, "ignore_ssl_errors")
    return MqttConnection(
        store_directory=store_directory,
        device_id=device_id,
        realm=realm,
        credential=credential,
        pairing_url=pairing_url,
        ignore_ssl_errors=ignore_ssl_errors,
    )


def _grpc(merged: PartialConfig) -> GrpcConnection:
    store_directory = _require(merged, "store_directory")
    endpoint = _require(merged, "grpc_endpoint")
    return GrpcConnection(
        store_directory=store_directory,
        endpoint=endpoint,
        node_id=merged.grpc_node_id,
    )


def _stream(merged: PartialConfig) -> StreamOptions:
    interval_ms = merged.interval_ms if merged.interval_ms is not None else DEFAULT_INTERVAL_MS
    if interval_ms <= 0:
        raise InvalidValueError("interval_ms", "must be a positive number of milliseconds")

    scale = merged.scale if merged.scale is not None else DEFAULT_SCALE
    if not math.isfinite(scale) or scale <= 0:
        raise InvalidValueError("scale", "must be a positive finite number")

    interface_name = (
        merged.interface_name if merged.interface_name is not None else DEFAULT_INTERFACE_NAME
    )
    if not interface_name.strip():
        raise InvalidValueError("interface_name", "must not be blank")

    return StreamOptions(
        math_function=merged.math_function or DEFAULT_MATH_FUNCTION,
        interface_name=interface_name,
        interval_ms=interval_ms,
        scale=scale,
    )


def resolve(cli: PartialConfig, env: PartialConfig, file: PartialConfig) -> ResolvedConfig:
    merged = merge(cli, env, file)

    kind = merged.connection_kind
    if kind is None:
        raise MissingFieldError("connection_kind")

    if kind is ConnectionKind.MQTT:
        connection: MqttConnection | GrpcConnection = _mqtt(merged)
    else:
        connection = _grpc(merged)

    return ResolvedConfig(connection=connection, stream=_stream(merged))
