from __future__ import annotations

from typing import Protocol

from streamer.models.sample import Sample


class Sink(Protocol):
    """Delivers one sample to the remote platform.

    ``send`` raises :class:`~streamer.core.errors.TransientSinkError` when only
    this sample was lost and :class:`~streamer.core.errors.TerminalSinkError`
    when the connection cannot be used anymore.
    """

    async def send(self, interface_name: str, sample: Sample) -> None: ...

    async def close(self) -> None: ...


def sample_payload(sample: Sample) -> dict[str, object]:
    return {
        "v": sample.scaled_value,
        "t": sample.timestamp.isoformat().replace("+00:00", "Z"),
    }
