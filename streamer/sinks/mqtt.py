"""MQTT sink built on paho-mqtt.

This is a thin publisher, not the Astarte device SDK: the broker host is
taken from the pairing URL and the credential is used as the MQTT password.
"""

from __future__ import annotations

import asyncio
import json
import logging
import ssl
import threading
from typing import Any, Callable
from urllib.parse import urlparse

import paho.mqtt.client as mqtt

from streamer.core.config import DEFAULT_ENDPOINT_PATH
from streamer.core.errors import TerminalSinkError, TransientSinkError
from streamer.models.sample import Sample
from streamer.models.transport import MqttPlan
from streamer.sinks.base import sample_payload

logger = logging.getLogger(__name__)

MQTT_TLS_PORT = 8883


def _default_client(client_id: str) -> mqtt.Client:
    return mqtt.Client(
        callback_api_version=mqtt.CallbackAPIVersion.VERSION2,
        client_id=client_id,
        protocol=mqtt.MQTTv311,
    )


class MqttSink:
    def __init__(
        self,
        plan: MqttPlan,
        *,
        endpoint_path: str = DEFAULT_ENDPOINT_PATH,
        qos: int = 1,
        connect_timeout: float = 10.0,
        publish_timeout: float = 5.0,
        client_factory: Callable[[str], Any] = _default_client,
    ) -> None:
        parsed = urlparse(plan.pairing_url)
        self.broker_host = parsed.hostname or plan.pairing_url
        self.broker_port = MQTT_TLS_PORT
        self.client_id = f"{plan.realm}/{plan.device_id}"

        self._plan = plan
        self._endpoint_path = endpoint_path
        self._qos = qos
        self._connect_timeout = connect_timeout
        self._publish_timeout = publish_timeout

        self._client = client_factory(self.client_id)
        self._client.on_connect = self._on_connect
        self._client.on_disconnect = self._on_disconnect
        self._connected = threading.Event()
        self._handshake_done = threading.Event()
        self._refused: str | None = None
        self._closed = False

    @property
    def is_connected(self) -> bool:
        return self._connected.is_set()

    def topic(self, interface_name: str) -> str:
        return f"{self._plan.realm}/{self._plan.device_id}/{interface_name}{self._endpoint_path}"

    async def connect(self) -> None:
        self._client.username_pw_set(self.client_id, self._plan.credential.value)
        if self._plan.ignore_ssl_errors:
            self._client.tls_set(cert_reqs=ssl.CERT_NONE)
            self._client.tls_insecure_set(True)
        else:
            self._client.tls_set()

        logger.info("connecting to %s:%d as %s", self.broker_host, self.broker_port, self.client_id)
        try:
            await asyncio.to_thread(
                self._client.connect, self.broker_host, self.broker_port, 60
            )
        except OSError as e:
            raise TerminalSinkError(f"cannot reach {self.broker_host}: {e}") from e
        self._client.loop_start()

        ok = await asyncio.to_thread(self._handshake_done.wait, self._connect_timeout)
        if self._refused is not None:
            await self.close()
            raise TerminalSinkError(f"connection refused: {self._refused}")
        if not ok:
            await self.close()
            raise TerminalSinkError("connection timeout")

    async def send(self, interface_name: str, sample: Sample) -> None:
        if self._closed:
            raise TerminalSinkError("sink closed")
        if self._refused is not None:
            raise TerminalSinkError(f"connection refused: {self._refused}")
        if not self._connected.is_set():
            raise TransientSinkError("not connected to broker")

        info = self._client.publish(
            self.topic(interface_name), json.dumps(sample_payload(sample)), qos=self._qos
        )
        if info.rc != mqtt.MQTT_ERR_SUCCESS:
            raise TransientSinkError(f"publish failed: {mqtt.error_string(info.rc)}")

        try:
            await asyncio.to_thread(info.wait_for_publish, self._publish_timeout)
        except (RuntimeError, ValueError) as e:
            raise TransientSinkError(f"publish failed: {e}") from e
        if not info.is_published():
            raise TransientSinkError("publish not acknowledged in time")

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._client.loop_stop()
            self._client.disconnect()
        except Exception as e:  # noqa: BLE001 - best effort on shutdown
            logger.warning("disconnect error: %s", e)
        self._connected.clear()

    def _on_connect(self, client, userdata, flags, reason_code, properties=None) -> None:
        if reason_code.is_failure:
            self._refused = str(reason_code)
            logger.error("broker refused connection: %s", reason_code)
            self._handshake_done.set()
            return
        logger.info("connected to broker")
        self._connected.set()
        self._handshake_done.set()

    def _on_disconnect(self, client, userdata, flags, reason_code, properties=None) -> None:
        self._connected.clear()
        if not self._closed:
            logger.warning("disconnected from broker (%s), reconnecting", reason_code)
