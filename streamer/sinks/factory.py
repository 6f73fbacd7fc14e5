from __future__ import annotations

import logging
from pathlib import Path

from streamer.core.errors import InvalidValueError, TransportInvariantError
from streamer.models.transport import GrpcPlan, MqttPlan, TransportPlan
from streamer.sinks.base import Sink
from streamer.sinks.grpc import GrpcSink
from streamer.sinks.mqtt import MqttSink

logger = logging.getLogger(__name__)


def prepare_store(store_directory: Path) -> Path:
    try:
        store_directory.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise InvalidValueError("store_directory", f"cannot create {store_directory}: {e}") from e
    logger.info("using store directory %s", store_directory)
    return store_directory


async def open_sink(plan: TransportPlan) -> Sink:
    prepare_store(plan.store_directory)
    if isinstance(plan, MqttPlan):
        mqtt_sink = MqttSink(plan)
        await mqtt_sink.connect()
        return mqtt_sink
    if isinstance(plan, GrpcPlan):
        grpc_sink = GrpcSink(plan)
        await grpc_sink.connect()
        return grpc_sink
    raise TransportInvariantError(f"unsupported transport plan: {type(plan).__name__}")
