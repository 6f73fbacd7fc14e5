from __future__ import annotations

from fastapi import FastAPI

from streamer.api.router import api_router
from streamer.core.config import VERSION
from streamer.models.config import ConnectionKind
from streamer.services.scheduler import ScheduleParams, SchedulerStats


def create_app(
    *,
    stats: SchedulerStats,
    params: ScheduleParams,
    connection_kind: ConnectionKind,
) -> FastAPI:
    app = FastAPI(
        title="Astarte stream status",
        version=VERSION,
        docs_url=None,
        redoc_url=None,
    )
    app.state.stats = stats
    app.state.params = params
    app.state.connection_kind = connection_kind

    @app.get("/", tags=["meta"])
    def root():
        return {"name": "astarte-stream", "version": VERSION, "state": stats.state.value}

    app.include_router(api_router)
    return app
