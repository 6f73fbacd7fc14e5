from __future__ import annotations

from pathlib import Path

import pytest

from streamer.models.config import PartialConfig

ENV_VARS = [
    "ASTARTE_CONNECTION",
    "ASTARTE_REALM",
    "ASTARTE_DEVICE_ID",
    "ASTARTE_CREDENTIALS_SECRET",
    "ASTARTE_PAIRING_TOKEN",
    "ASTARTE_PAIRING_URL",
    "ASTARTE_STORE_DIRECTORY",
    "ASTARTE_IGNORE_SSL_ERRORS",
    "ASTARTE_MSGHUB_ENDPOINT",
    "ASTARTE_MSGHUB_NODE_ID",
    "ASTARTE_CONFIG_PATH",
    "MATH_FUNCTION",
    "INTERFACE_NAME",
    "INTERVAL_BTW_SAMPLES",
    "SCALE",
    "LOG_LEVEL",
    "STATUS_PORT",
]


@pytest.fixture()
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> pytest.MonkeyPatch:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # Keep a stray .env in the working directory out of the way.
    monkeypatch.chdir(tmp_path)
    return monkeypatch


@pytest.fixture()
def empty() -> PartialConfig:
    return PartialConfig()


@pytest.fixture()
def mqtt_fields(tmp_path: Path) -> dict:
    return {
        "store_directory": tmp_path / "store",
        "device_id": "2TBn-jNESuuHamE2Zo1anA",
        "realm": "test",
        "credentials_secret": "s3cr3t",
        "pairing_url": "https://api.astarte.localhost/pairing",
        "ignore_ssl_errors": True,
    }


@pytest.fixture()
def full_mqtt(mqtt_fields: dict) -> PartialConfig:
    return PartialConfig(connection_kind="mqtt", **mqtt_fields)


@pytest.fixture()
def full_grpc(tmp_path: Path) -> PartialConfig:
    return PartialConfig(
        connection_kind="grpc",
        store_directory=tmp_path / "store",
        grpc_endpoint="http://localhost:50051",
    )
