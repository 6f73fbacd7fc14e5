from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

from streamer.core.config import CONFIG_FILE_NAME
from streamer.core.errors import InvalidValueError
from streamer.models.config import ConnectionKind, PartialConfig

logger = logging.getLogger(__name__)


class _Section(BaseModel):
    model_config = ConfigDict(extra="ignore")


class MqttSection(_Section):
    realm: str | None = None
    device_id: str | None = None
    pairing_url: str | None = None
    credentials_secret: str | None = None
    pairing_token: str | None = None
    astarte_ignore_ssl: bool | None = None

    def partial_fields(self) -> dict[str, Any]:
        return {
            "realm": self.realm,
            "device_id": self.device_id,
            "pairing_url": self.pairing_url,
            "credentials_secret": self.credentials_secret,
            "pairing_token": self.pairing_token,
            "ignore_ssl_errors": self.astarte_ignore_ssl,
        }


class GrpcSection(_Section):
    endpoint: str | None = None
    node_id: str | None = None

    def partial_fields(self) -> dict[str, Any]:
        return {"grpc_endpoint": self.endpoint, "grpc_node_id": self.node_id}


class AstarteSection(_Section):
    connection: str | None = None
    store_directory: str | None = None
    # Kept raw: only the table matching the connection kind gets validated.
    mqtt: dict[str, Any] = {}
    grpc: dict[str, Any] = {}


class ConfigDocument(_Section):
    astarte: AstarteSection = AstarteSection()


_SECTIONS: dict[ConnectionKind, type[MqttSection] | type[GrpcSection]] = {
    ConnectionKind.MQTT: MqttSection,
    ConnectionKind.GRPC: GrpcSection,
}


def _validate(model: type[BaseModel], data: Any, prefix: tuple[str, ...] = ()) -> Any:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        first = e.errors()[0]
        loc = prefix + tuple(str(part) for part in first.get("loc", ()))
        raise InvalidValueError(".".join(loc) or "astarte", first.get("msg", "invalid value")) from e


def parse_document(text: str, connection_kind: ConnectionKind | None = None) -> PartialConfig:
    """Parse a ``config.toml`` document.

    ``connection_kind`` is the kind already chosen on the command line or in
    the environment; without it the document's own ``connection`` key decides.
    Only the ``mqtt`` or ``grpc`` table for that kind is read.
    """
    try:
        data: dict[str, Any] = tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        raise InvalidValueError("astarte_config_path", f"malformed TOML: {e}") from e

    a = _validate(ConfigDocument, data).astarte
    common = PartialConfig.from_mapping(
        {"connection_kind": a.connection, "store_directory": a.store_directory}
    )

    kind = connection_kind or common.connection_kind
    if kind is None:
        return common

    raw = a.mqtt if kind is ConnectionKind.MQTT else a.grpc
    section = _validate(_SECTIONS[kind], raw, ("astarte", kind.value))
    return PartialConfig.from_mapping(
        {**common.model_dump(exclude_none=True), **section.partial_fields()}
    )


class FileSource:
    """Reads ``config.toml`` from a configuration directory."""

    name = "file"

    def __init__(
        self, directory: Path | None, *, connection_kind: ConnectionKind | None = None
    ) -> None:
        self._directory = directory
        self._connection_kind = connection_kind

    @property
    def path(self) -> Path | None:
        if self._directory is None:
            return None
        return self._directory / CONFIG_FILE_NAME

    def load(self) -> PartialConfig:
        path = self.path
        if path is None:
            return PartialConfig()
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.warning("config file %s not found, ignoring it", path)
            return PartialConfig()
        except OSError as e:
            raise InvalidValueError("astarte_config_path", f"cannot read {path}: {e}") from e
        logger.debug("loaded config file %s", path)
        return parse_document(text, self._connection_kind)
