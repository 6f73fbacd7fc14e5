from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from streamer.api.deps import get_connection_kind, get_params, get_stats
from streamer.models.config import ConnectionKind
from streamer.schemas.status import Health, SampleRead, StreamStats
from streamer.services.scheduler import ScheduleParams, SchedulerState, SchedulerStats

router = APIRouter()


@router.get("/health", response_model=Health)
def health(
    response: Response,
    stats: Annotated[SchedulerStats, Depends(get_stats)],
) -> Health:
    if stats.state is SchedulerState.FAILED:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return Health(status="error", state=stats.state.value)
    return Health(status="ok", state=stats.state.value)


@router.get("/stats", response_model=StreamStats)
def read_stats(
    stats: Annotated[SchedulerStats, Depends(get_stats)],
    params: Annotated[ScheduleParams, Depends(get_params)],
    kind: Annotated[ConnectionKind, Depends(get_connection_kind)],
) -> StreamStats:
    last = stats.last_sample
    return StreamStats(
        state=stats.state.value,
        connection=kind.value,
        math_function=params.math_function.value,
        interface_name=params.interface_name,
        interval_ms=params.interval_ms,
        scale=params.scale,
        started_at=stats.started_at,
        ticks=stats.ticks,
        sent=stats.sent,
        failed=stats.failed,
        last_sample=(
            SampleRead(
                timestamp=last.timestamp,
                t=last.t,
                raw_value=last.raw_value,
                scaled_value=last.scaled_value,
            )
            if last is not None
            else None
        ),
        last_error=stats.last_error,
    )
