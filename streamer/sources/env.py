from __future__ import annotations

from pathlib import Path

from pydantic import ValidationError

from streamer.core.config import Settings
from streamer.core.errors import InvalidValueError
from streamer.models.config import PartialConfig

_FIELD_TO_ENV = {
    "connection_kind": "ASTARTE_CONNECTION",
    "realm": "ASTARTE_REALM",
    "device_id": "ASTARTE_DEVICE_ID",
    "credentials_secret": "ASTARTE_CREDENTIALS_SECRET",
    "pairing_token": "ASTARTE_PAIRING_TOKEN",
    "pairing_url": "ASTARTE_PAIRING_URL",
    "store_directory": "ASTARTE_STORE_DIRECTORY",
    "ignore_ssl_errors": "ASTARTE_IGNORE_SSL_ERRORS",
    "grpc_endpoint": "ASTARTE_MSGHUB_ENDPOINT",
    "grpc_node_id": "ASTARTE_MSGHUB_NODE_ID",
    "math_function": "MATH_FUNCTION",
    "interface_name": "INTERFACE_NAME",
    "interval_ms": "INTERVAL_BTW_SAMPLES",
    "scale": "SCALE",
}


def read_settings(**overrides) -> Settings:
    try:
        return Settings(**overrides)
    except ValidationError as e:
        first = e.errors()[0]
        loc = first.get("loc") or ("environment",)
        raise InvalidValueError(str(loc[0]), first.get("msg", "invalid value")) from e


class EnvironmentSource:
    name = "environment"

    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    @property
    def config_path(self) -> Path | None:
        if self._settings.config_path is None:
            return None
        return Path(self._settings.config_path)

    def load(self) -> PartialConfig:
        s = self._settings
        raw = {
            "connection_kind": s.astarte_connection,
            "realm": s.realm,
            "device_id": s.device_id,
            "credentials_secret": s.credentials_secret,
            "pairing_token": s.pairing_token,
            "pairing_url": s.pairing_url,
            "store_directory": s.store_directory,
            "ignore_ssl_errors": s.ignore_ssl_errors,
            "grpc_endpoint": s.msghub_endpoint,
            "grpc_node_id": s.msghub_node_id,
            "math_function": s.math_function,
            "interface_name": s.interface_name,
            "interval_ms": s.interval_btw_samples,
            "scale": s.scale,
        }
        try:
            return PartialConfig.from_mapping(raw)
        except InvalidValueError as e:
            # Report the variable the user actually set.
            env_name = _FIELD_TO_ENV.get(e.field, e.field)
            raise InvalidValueError(env_name, e.reason) from e
