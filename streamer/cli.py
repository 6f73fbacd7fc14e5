from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
from typing import Sequence

import uvicorn

from streamer.core.config import Settings
from streamer.core.errors import ConfigError, TerminalSinkError
from streamer.core.logging import configure_logging
from streamer.core.shutdown import install_shutdown_handlers
from streamer.factory import create_app
from streamer.models.config import PartialConfig, ResolvedConfig
from streamer.services.resolver import resolve
from streamer.services.scheduler import SampleScheduler, ScheduleParams
from streamer.services.transport import select
from streamer.sinks.factory import open_sink
from streamer.sources.base import ConfigSource
from streamer.sources.cli import CliSource, parse_args
from streamer.sources.env import EnvironmentSource, read_settings
from streamer.sources.file import FileSource

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_CONFIG = 1
EXIT_SINK = 2


class StatusServer(uvicorn.Server):
    # SIGINT/SIGTERM belong to the stream's stop event.
    def install_signal_handlers(self) -> None:
        pass

    @contextlib.contextmanager
    def capture_signals(self):
        yield


def _load(source: ConfigSource) -> PartialConfig:
    partial = source.load()
    logger.debug("loaded %s configuration", source.name)
    return partial


def load_config(args: argparse.Namespace, settings: Settings) -> ResolvedConfig:
    cli = CliSource(args)
    env = EnvironmentSource(settings)
    from_cli, from_env = _load(cli), _load(env)
    # A kind picked on the command line or in the environment selects the file table.
    file = FileSource(
        cli.config_path or env.config_path,
        connection_kind=from_cli.connection_kind or from_env.connection_kind,
    )
    return resolve(from_cli, from_env, _load(file))


async def stream(config: ResolvedConfig, *, status_port: int | None = None) -> int:
    stop = asyncio.Event()
    install_shutdown_handlers(stop)

    plan = select(config)
    logger.info("selected %s transport", config.kind.value)
    try:
        sink = await open_sink(plan)
    except ConfigError as e:
        logger.error("configuration error: %s", e)
        return EXIT_CONFIG
    except TerminalSinkError as e:
        logger.error("cannot open %s sink: %s", config.kind.value, e)
        return EXIT_SINK

    scheduler = SampleScheduler(ScheduleParams.from_options(config.stream), stop=stop)

    server: StatusServer | None = None
    server_task: asyncio.Task | None = None
    if status_port:
        app = create_app(
            stats=scheduler.stats,
            params=scheduler.params,
            connection_kind=config.kind,
        )
        server = StatusServer(
            uvicorn.Config(app, host="0.0.0.0", port=status_port, log_level="warning")
        )
        server_task = asyncio.create_task(server.serve(), name="status-server")
        logger.info("status API on port %d", status_port)

    try:
        await scheduler.run(sink)
    except TerminalSinkError:
        return EXIT_SINK
    finally:
        await sink.close()
        if server is not None and server_task is not None:
            server.should_exit = True
            await server_task
    return EXIT_OK


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        settings = read_settings()
    except ConfigError as e:
        configure_logging(args.log_level or "INFO")
        logger.error("configuration error: %s", e)
        return EXIT_CONFIG

    configure_logging(args.log_level or settings.log_level)

    try:
        config = load_config(args, settings)
    except ConfigError as e:
        logger.error("configuration error: %s", e)
        return EXIT_CONFIG
    logger.debug("resolved configuration: %r", config)

    status_port = args.status_port if args.status_port is not None else settings.status_port
    return asyncio.run(stream(config, status_port=status_port))
