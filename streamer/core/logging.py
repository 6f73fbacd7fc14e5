from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        numeric = logging.INFO
    logging.basicConfig(
        level=numeric,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler()],
    )
    # paho and grpc are chatty at DEBUG.
    logging.getLogger("paho").setLevel(max(numeric, logging.INFO))
    logging.getLogger("grpc").setLevel(max(numeric, logging.INFO))
