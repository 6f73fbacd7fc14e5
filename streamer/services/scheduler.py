from __future__ import annotations

import asyncio
import logging
import random
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Awaitable, Callable

from streamer.core.errors import SinkError, TerminalSinkError, TransientSinkError
from streamer.models.config import StreamOptions
from streamer.models.sample import Sample
from streamer.services.waveforms import MathFunction, evaluate
from streamer.sinks.base import Sink

logger = logging.getLogger(__name__)

Sleep = Callable[[float, asyncio.Event], Awaitable[bool]]


class SchedulerState(str, Enum):
    IDLE = "idle"
    TICKING = "ticking"
    STOPPED = "stopped"
    FAILED = "failed"


@dataclass(frozen=True)
class ScheduleParams:
    interface_name: str
    math_function: MathFunction
    interval_ms: int
    scale: float

    @classmethod
    def from_options(cls, options: StreamOptions) -> ScheduleParams:
        return cls(
            interface_name=options.interface_name,
            math_function=options.math_function,
            interval_ms=options.interval_ms,
            scale=options.scale,
        )


class SchedulerStats:
    def __init__(self) -> None:
        self.state = SchedulerState.IDLE
        self.ticks = 0
        self.sent = 0
        self.failed = 0
        self.started_at: datetime | None = None
        self.last_sample: Sample | None = None
        self.last_error: str | None = None


async def wait_or_stop(seconds: float, stop: asyncio.Event) -> bool:
    """Sleep for ``seconds``; return ``True`` early if ``stop`` gets set."""
    try:
        await asyncio.wait_for(stop.wait(), timeout=seconds)
    except asyncio.TimeoutError:
        return False
    return True


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


def _report(error: SinkError) -> None:
    logger.warning("sample not delivered: %s", error)


class SampleScheduler:
    def __init__(
        self,
        params: ScheduleParams,
        *,
        stop: asyncio.Event | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Sleep = wait_or_stop,
        now: Callable[[], datetime] = _utcnow,
        rng: random.Random | None = None,
        on_error: Callable[[SinkError], None] = _report,
        stats: SchedulerStats | None = None,
    ) -> None:
        self._params = params
        self._stop = stop or asyncio.Event()
        self._clock = clock
        self._sleep = sleep
        self._now = now
        self._rng = rng
        self._on_error = on_error
        self._stats = stats or SchedulerStats()

    @property
    def params(self) -> ScheduleParams:
        return self._params

    @property
    def stats(self) -> SchedulerStats:
        return self._stats

    def make_sample(self, t: float) -> Sample:
        raw = evaluate(self._params.math_function, t, self._rng)
        return Sample(
            timestamp=self._now(),
            t=t,
            raw_value=raw,
            scaled_value=raw * self._params.scale,
        )

    async def run(self, sink: Sink) -> None:
        """Tick until stopped.

        Returns when the stop event is set. Raises :class:`TerminalSinkError`
        when the sink reports that the connection is gone.
        """
        if self._stats.state is not SchedulerState.IDLE:
            raise RuntimeError(f"scheduler already {self._stats.state.value}")

        start = self._clock()
        interval = self._params.interval_ms / 1000.0
        self._stats.started_at = self._now()
        self._stats.state = SchedulerState.TICKING
        logger.info(
            "streaming %s samples on %s every %d ms (scale %g)",
            self._params.math_function.value,
            self._params.interface_name,
            self._params.interval_ms,
            self._params.scale,
        )

        try:
            while not self._stop.is_set():
                if await self._sleep(interval, self._stop):
                    break

                sample = self.make_sample(self._clock() - start)
                self._stats.ticks += 1
                try:
                    delivered = await self._deliver(sink, sample)
                except TransientSinkError as e:
                    self._stats.failed += 1
                    self._stats.last_error = str(e)
                    self._on_error(e)
                    continue

                if not delivered:
                    break
                self._stats.sent += 1
                self._stats.last_sample = sample
                logger.debug(
                    "sent %s on %s at t=%.3f", sample.scaled_value, self._params.interface_name, sample.t
                )
        except TerminalSinkError as e:
            self._stats.state = SchedulerState.FAILED
            self._stats.last_error = str(e)
            logger.error("sink closed, stopping: %s", e)
            raise
        except Exception as e:
            self._stats.state = SchedulerState.FAILED
            self._stats.last_error = str(e)
            logger.exception("sample loop crashed")
            raise

        self._stats.state = SchedulerState.STOPPED
        logger.info("stopped after %d ticks", self._stats.ticks)

    async def _deliver(self, sink: Sink, sample: Sample) -> bool:
        send = asyncio.ensure_future(sink.send(self._params.interface_name, sample))
        stopped = asyncio.ensure_future(self._stop.wait())
        try:
            done, _ = await asyncio.wait({send, stopped}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            send.cancel()
            raise
        finally:
            stopped.cancel()

        if send in done:
            send.result()
            return True

        send.cancel()
        logger.debug("in-flight send abandoned on shutdown")
        return False
