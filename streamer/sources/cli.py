from __future__ import annotations

import argparse
from pathlib import Path
from typing import Sequence

from streamer.core.config import VERSION
from streamer.models.config import ConnectionKind, PartialConfig
from streamer.services.waveforms import MathFunction


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="astarte-stream",
        description="Stream synthetic waveform samples to Astarte over MQTT or gRPC.",
    )
    p.add_argument("-d", "--device", dest="device_id", help="device id")
    p.add_argument(
        "-f",
        "--function",
        dest="math_function",
        type=str.lower,
        choices=[f.value for f in MathFunction],
        help="waveform used to generate the samples",
    )
    p.add_argument(
        "-i", "--interval", dest="interval_ms", type=int, help="milliseconds between two samples"
    )
    p.add_argument("-s", "--scale", type=float, help="factor applied to every sample")
    p.add_argument("--interface", dest="interface_name", help="interface the samples are sent on")
    p.add_argument(
        "-c",
        "--astarte_connection",
        "--astarte-connection",
        dest="connection_kind",
        type=str.lower,
        choices=[k.value for k in ConnectionKind],
        help="transport used to reach Astarte",
    )
    p.add_argument(
        "-a",
        "--astarte_config_path",
        "--astarte-config-path",
        dest="config_path",
        type=Path,
        help="directory containing a config.toml file",
    )
    p.add_argument(
        "--status-port",
        type=int,
        default=None,
        help="serve the status API on this port",
    )
    p.add_argument("--log-level", default=None, help="logging level (default: INFO)")
    p.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    return p


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


class CliSource:
    name = "cli"

    def __init__(self, args: argparse.Namespace) -> None:
        self._args = args

    @property
    def config_path(self) -> Path | None:
        return getattr(self._args, "config_path", None)

    def load(self) -> PartialConfig:
        fields = PartialConfig.model_fields
        return PartialConfig.from_mapping(
            {k: v for k, v in vars(self._args).items() if k in fields}
        )
