from __future__ import annotations

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from streamer.services.waveforms import MathFunction

VERSION = "0.1.0"

DEFAULT_INTERVAL_MS = 1000
DEFAULT_SCALE = 1.0
DEFAULT_MATH_FUNCTION = MathFunction.DEFAULT
DEFAULT_INTERFACE_NAME = "org.astarte-platform.genericsensors.Values"
DEFAULT_ENDPOINT_PATH = "/test/value"
DEFAULT_GRPC_NODE_ID = "d72a6187-7cf1-44cc-87e8-e991936166dc"
CONFIG_FILE_NAME = "config.toml"


def _env(name: str):
    return Field(default=None, validation_alias=AliasChoices(name))


class Settings(BaseSettings):
    """Raw process environment.

    Values are kept as strings here; typing and validation happen when they
    are turned into a :class:`~streamer.models.config.PartialConfig`.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_ignore_empty=True,
        extra="ignore",
    )

    astarte_connection: str | None = _env("ASTARTE_CONNECTION")
    realm: str | None = _env("ASTARTE_REALM")
    device_id: str | None = _env("ASTARTE_DEVICE_ID")
    credentials_secret: str | None = _env("ASTARTE_CREDENTIALS_SECRET")
    pairing_token: str | None = _env("ASTARTE_PAIRING_TOKEN")
    pairing_url: str | None = _env("ASTARTE_PAIRING_URL")
    store_directory: str | None = _env("ASTARTE_STORE_DIRECTORY")
    ignore_ssl_errors: str | None = _env("ASTARTE_IGNORE_SSL_ERRORS")
    msghub_endpoint: str | None = _env("ASTARTE_MSGHUB_ENDPOINT")
    msghub_node_id: str | None = _env("ASTARTE_MSGHUB_NODE_ID")
    config_path: str | None = _env("ASTARTE_CONFIG_PATH")
    math_function: str | None = _env("MATH_FUNCTION")
    interface_name: str | None = _env("INTERFACE_NAME")
    interval_btw_samples: str | None = _env("INTERVAL_BTW_SAMPLES")
    scale: str | None = _env("SCALE")

    log_level: str = Field(default="INFO", validation_alias=AliasChoices("LOG_LEVEL"))
    status_port: int | None = Field(
        default=None, ge=1, le=65535, validation_alias=AliasChoices("STATUS_PORT")
    )
