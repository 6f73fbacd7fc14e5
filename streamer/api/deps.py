from __future__ import annotations

from fastapi import Request

from streamer.models.config import ConnectionKind
from streamer.services.scheduler import ScheduleParams, SchedulerStats


def get_stats(request: Request) -> SchedulerStats:
    return request.app.state.stats


def get_params(request: Request) -> ScheduleParams:
    return request.app.state.params


def get_connection_kind(request: Request) -> ConnectionKind:
    return request.app.state.connection_kind
