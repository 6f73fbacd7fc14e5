from __future__ import annotations

import asyncio
import logging
import signal

logger = logging.getLogger(__name__)

SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)


def install_shutdown_handlers(stop: asyncio.Event) -> None:
    """Set ``stop`` on SIGINT or SIGTERM."""
    loop = asyncio.get_running_loop()

    def _on_signal(signum: int) -> None:
        logger.info("received %s, shutting down", signal.Signals(signum).name)
        stop.set()

    for sig in SHUTDOWN_SIGNALS:
        try:
            loop.add_signal_handler(sig, _on_signal, sig)
        except (NotImplementedError, RuntimeError):
            # No loop signal support (e.g. Windows): fall back to the plain handler.
            signal.signal(sig, lambda signum, frame: loop.call_soon_threadsafe(_on_signal, signum))
