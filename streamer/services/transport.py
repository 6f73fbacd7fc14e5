from __future__ import annotations

from streamer.core.errors import TransportInvariantError
from streamer.models.config import GrpcConnection, MqttConnection, ResolvedConfig
from streamer.models.transport import GrpcPlan, MqttPlan, TransportPlan


def select(config: ResolvedConfig) -> TransportPlan:
    conn = config.connection
    if isinstance(conn, MqttConnection):
        return MqttPlan(
            realm=conn.realm,
            device_id=conn.device_id,
            credential=conn.credential,
            pairing_url=conn.pairing_url,
            store_directory=conn.store_directory,
            ignore_ssl_errors=conn.ignore_ssl_errors,
        )
    if isinstance(conn, GrpcConnection):
        return GrpcPlan(
            endpoint=conn.endpoint,
            node_id=conn.node_id,
            store_directory=conn.store_directory,
        )
    raise TransportInvariantError(f"unsupported connection object: {type(conn).__name__}")
