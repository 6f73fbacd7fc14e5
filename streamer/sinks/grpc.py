"""gRPC sink talking to a message hub that is already connected to Astarte.

Samples are sent through a generic unary call with a JSON body; the node id
travels as call metadata.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any
from urllib.parse import urlparse

import grpc

from streamer.core.config import DEFAULT_ENDPOINT_PATH, DEFAULT_GRPC_NODE_ID
from streamer.core.errors import TerminalSinkError, TransientSinkError
from streamer.models.sample import Sample
from streamer.models.transport import GrpcPlan
from streamer.sinks.base import sample_payload

logger = logging.getLogger(__name__)

SEND_METHOD = "/astarteplatform.msghub.MessageHub/Send"

TRANSIENT_CODES = frozenset(
    {
        grpc.StatusCode.UNAVAILABLE,
        grpc.StatusCode.DEADLINE_EXCEEDED,
        grpc.StatusCode.RESOURCE_EXHAUSTED,
        grpc.StatusCode.ABORTED,
        grpc.StatusCode.INTERNAL,
    }
)


def _encode(message: dict[str, Any]) -> bytes:
    return json.dumps(message).encode("utf-8")


def _decode(data: bytes) -> dict[str, Any]:
    if not data:
        return {}
    return json.loads(data)


def channel_target(endpoint: str) -> tuple[str, bool]:
    """Return ``(host:port, secure)`` for an endpoint URL or bare address."""
    parsed = urlparse(endpoint)
    if parsed.scheme in ("http", "https") and parsed.netloc:
        return parsed.netloc, parsed.scheme == "https"
    return endpoint, False


def is_transient(code: grpc.StatusCode) -> bool:
    return code in TRANSIENT_CODES


class GrpcSink:
    def __init__(
        self,
        plan: GrpcPlan,
        *,
        endpoint_path: str = DEFAULT_ENDPOINT_PATH,
        call_timeout: float = 5.0,
        channel: Any | None = None,
    ) -> None:
        self.node_id = str(plan.node_id or DEFAULT_GRPC_NODE_ID)
        self.target, secure = channel_target(plan.endpoint)
        if channel is None:
            if secure:
                channel = grpc.aio.secure_channel(self.target, grpc.ssl_channel_credentials())
            else:
                channel = grpc.aio.insecure_channel(self.target)
        self._channel = channel
        self._endpoint_path = endpoint_path
        self._call_timeout = call_timeout
        self._send = channel.unary_unary(
            SEND_METHOD, request_serializer=_encode, response_deserializer=_decode
        )
        self._closed = False

    async def connect(self, timeout: float = 10.0) -> None:
        logger.info("connecting to message hub at %s as node %s", self.target, self.node_id)
        try:
            await asyncio.wait_for(self._channel.channel_ready(), timeout=timeout)
        except asyncio.TimeoutError as e:
            await self.close()
            raise TerminalSinkError(f"message hub at {self.target} not reachable") from e

    async def send(self, interface_name: str, sample: Sample) -> None:
        if self._closed:
            raise TerminalSinkError("sink closed")
        request = {
            "interface_name": interface_name,
            "path": self._endpoint_path,
            "payload": sample_payload(sample),
        }
        try:
            await self._send(
                request,
                timeout=self._call_timeout,
                metadata=(("node-id", self.node_id),),
            )
        except grpc.aio.AioRpcError as e:
            message = f"{e.code().name}: {e.details()}"
            if is_transient(e.code()):
                raise TransientSinkError(message) from e
            raise TerminalSinkError(message) from e

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self._channel.close()
