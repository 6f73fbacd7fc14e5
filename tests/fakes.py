from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any

import paho.mqtt.client as mqtt

from streamer.models.sample import Sample


class FakeSink:
    """Records samples; raises queued errors (``None`` means deliver)."""

    def __init__(
        self,
        *,
        errors: list[Exception | None] | None = None,
        stop: asyncio.Event | None = None,
        stop_after: int | None = None,
    ) -> None:
        self.sent: list[tuple[str, Sample]] = []
        self.calls = 0
        self.closed = False
        self._errors = list(errors or [])
        self._stop = stop
        self._stop_after = stop_after

    async def send(self, interface_name: str, sample: Sample) -> None:
        self.calls += 1
        if self._errors:
            err = self._errors.pop(0)
            if err is not None:
                raise err
        self.sent.append((interface_name, sample))
        if self._stop is not None and self._stop_after is not None:
            if len(self.sent) >= self._stop_after:
                self._stop.set()

    async def close(self) -> None:
        self.closed = True


class BlockingSink(FakeSink):
    """A sink whose send never completes until cancelled."""

    def __init__(self) -> None:
        super().__init__()
        self.started = asyncio.Event()
        self.cancelled = False

    async def send(self, interface_name: str, sample: Sample) -> None:
        self.calls += 1
        self.started.set()
        try:
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            self.cancelled = True
            raise


class FakeClock:
    """Monotonic clock advanced only by the scheduler's sleeps."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def monotonic(self) -> float:
        return self.now

    async def sleep(self, seconds: float, stop: asyncio.Event) -> bool:
        if stop.is_set():
            return True
        self.sleeps.append(seconds)
        self.now += seconds
        await asyncio.sleep(0)
        return stop.is_set()


@dataclass
class FakeReasonCode:
    is_failure: bool = False
    name: str = "Success"

    def __str__(self) -> str:
        return self.name


@dataclass
class FakeMessageInfo:
    rc: int = mqtt.MQTT_ERR_SUCCESS
    published: bool = True

    def wait_for_publish(self, timeout: float | None = None) -> None:
        return None

    def is_published(self) -> bool:
        return self.published


@dataclass
class FakeMqttClient:
    client_id: str
    reason_code: FakeReasonCode = field(default_factory=FakeReasonCode)
    next_info: FakeMessageInfo = field(default_factory=FakeMessageInfo)
    published: list[tuple[str, str, int]] = field(default_factory=list)
    credentials: tuple[str, str] | None = None
    tls: dict[str, Any] | None = None
    insecure: bool = False
    connected_to: tuple[str, int] | None = None
    loop_running: bool = False
    disconnected: bool = False
    on_connect: Any = None
    on_disconnect: Any = None

    def username_pw_set(self, username: str, password: str) -> None:
        self.credentials = (username, password)

    def tls_set(self, **kwargs: Any) -> None:
        self.tls = kwargs

    def tls_insecure_set(self, value: bool) -> None:
        self.insecure = value

    def connect(self, host: str, port: int, keepalive: int = 60) -> None:
        self.connected_to = (host, port)

    def loop_start(self) -> None:
        self.loop_running = True
        self.on_connect(self, None, {}, self.reason_code, None)

    def loop_stop(self) -> None:
        self.loop_running = False

    def disconnect(self) -> None:
        self.disconnected = True

    def publish(self, topic: str, payload: str, qos: int = 0) -> FakeMessageInfo:
        if self.next_info.rc == mqtt.MQTT_ERR_SUCCESS:
            self.published.append((topic, payload, qos))
        return self.next_info


class FakeUnaryCall:
    def __init__(self) -> None:
        self.requests: list[tuple[dict[str, Any], float | None, tuple]] = []
        self.error: Exception | None = None

    async def __call__(self, request, *, timeout=None, metadata=()):
        self.requests.append((request, timeout, tuple(metadata)))
        if self.error is not None:
            raise self.error
        return {}


class FakeGrpcChannel:
    def __init__(self) -> None:
        self.call = FakeUnaryCall()
        self.method: str | None = None
        self.closed = False

    def unary_unary(self, method, request_serializer=None, response_deserializer=None):
        self.method = method
        return self.call

    async def channel_ready(self) -> None:
        return None

    async def close(self) -> None:
        self.closed = True
