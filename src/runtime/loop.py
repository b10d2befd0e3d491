"""Runtime orchestration: shared session, control server and tick loop."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional, TextIO

from activity import ActivityLog, CommandWindowSampler, NullWindowSampler, WindowSampler
from app_config import AppConfig
from contracts.control_protocol import EVENT_BLOCK
from pomodoro import DEFAULT_CLOCK, BlockTimer, BlockTransition
from server import ControlServer, ControlServerConfig
from server.service import CommandHandler

from .command_dispatch import CommandDispatcher
from .hooks import NullShellRunner, ShellRunner, SubprocessShellRunner
from .session import BlockSession
from .status_line import StatusLineRenderer, StatusLineStyle
from .ticks import TickDependencies, TickLoop


@dataclass(frozen=True)
class RuntimeHooks:
    """Injectable lifecycle hooks used by runtime startup and shutdown flow."""
    setup_signal_handlers: Callable[[threading.Event], None]


@dataclass(frozen=True)
class RuntimeBootstrap:
    """Dependency bundle required to construct the runtime engine."""
    logger: logging.Logger
    app_config: AppConfig
    stream: TextIO
    hooks: RuntimeHooks
    clock: Callable[[], float] = DEFAULT_CLOCK
    sampler: Optional[WindowSampler] = None
    shell_runner: Optional[ShellRunner] = None
    control_server_factory: Optional[Callable[[ControlServerConfig, CommandHandler], Any]] = None


@dataclass
class RuntimeResources:
    """Mutable runtime resources created for the loop lifecycle."""
    stop_event: threading.Event = field(default_factory=threading.Event)
    control_server: Optional[Any] = None


class RuntimeEngine:
    """Wires the block session to the control server and drives the tick loop."""
    def __init__(self, bootstrap: RuntimeBootstrap):
        self._bootstrap = bootstrap
        self._logger = bootstrap.logger
        config = bootstrap.app_config

        self._session = BlockSession(
            timer=BlockTimer(
                cooldown_seconds=config.timer.cooldown_seconds,
                clock=bootstrap.clock,
                logger=logging.getLogger("block"),
            ),
            activity_log=ActivityLog(logger=logging.getLogger("activity")),
            clock=bootstrap.clock,
            warn_flash_ticks=config.status_bar.warn_flash_ticks,
            error_flash_ticks=config.status_bar.error_flash_ticks,
        )
        self._dispatcher = CommandDispatcher(
            session=self._session,
            logger=logging.getLogger("runtime.dispatch"),
            default_block_seconds=config.timer.default_block_seconds,
        )
        self._tick_loop = TickLoop(
            TickDependencies(
                session=self._session,
                sampler=bootstrap.sampler or _build_sampler(config),
                shell_runner=bootstrap.shell_runner or _build_shell_runner(config),
                renderer=StatusLineRenderer(StatusLineStyle.from_settings(config.status_bar)),
                stream=bootstrap.stream,
                logger=self._logger,
                publish_transition=self._publish_transition,
            ),
            interval_seconds=config.timer.tick_interval_seconds,
            clock=bootstrap.clock,
        )
        self._resources = RuntimeResources()

    @property
    def session(self) -> BlockSession:
        return self._session

    @property
    def dispatcher(self) -> CommandDispatcher:
        return self._dispatcher

    @property
    def stop_event(self) -> threading.Event:
        return self._resources.stop_event

    def run(self) -> int:
        try:
            self._bootstrap.hooks.setup_signal_handlers(self._resources.stop_event)
            if not self._start_control_server():
                return 1
            self._logger.info(
                "Ready; writing status line every %ss",
                self._bootstrap.app_config.timer.tick_interval_seconds,
            )
            return self._tick_loop.run(self._resources.stop_event)
        except KeyboardInterrupt:
            self._logger.info("Shutdown requested by keyboard interrupt.")
            return 0
        except Exception as error:
            self._logger.error("Unexpected error: %s", error, exc_info=True)
            return 1
        finally:
            self._shutdown()

    def _handle_command(self, name: str, arguments: Mapping[str, Any]) -> Mapping[str, Any]:
        return self._dispatcher.handle_command(name, arguments).to_payload()

    def _start_control_server(self) -> bool:
        settings = self._bootstrap.app_config.control_server
        if not settings.enabled:
            self._logger.warning("Control server disabled; the block cannot be controlled.")
            return True

        factory = self._bootstrap.control_server_factory or _default_control_server
        try:
            server_config = ControlServerConfig.from_settings(settings)
            server = factory(server_config, self._handle_command)
            server.start(timeout_seconds=5.0)
        except Exception as error:
            self._logger.error("Control server startup failed: %s", error)
            return False

        self._resources.control_server = server
        return True

    def _publish_transition(self, transition: BlockTransition) -> None:
        server = self._resources.control_server
        if server is None:
            return
        snapshot = transition.snapshot
        server.publish(
            EVENT_BLOCK,
            transition=transition.kind,
            phase=snapshot.phase,
            duration_seconds=snapshot.duration_seconds,
            remaining_seconds=snapshot.remaining_seconds,
        )

    def _shutdown(self) -> None:
        self._resources.stop_event.set()
        server = self._resources.control_server
        if server is not None:
            self._logger.info("Stopping control server...")
            try:
                server.stop(timeout_seconds=5.0)
            except Exception as error:
                self._logger.error("Error stopping control server: %s", error, exc_info=True)
            self._resources.control_server = None


def _default_control_server(
    config: ControlServerConfig,
    handler: CommandHandler,
) -> ControlServer:
    return ControlServer(config, handler, logger=logging.getLogger("control_server"))


def _build_sampler(config: AppConfig) -> WindowSampler:
    if not config.sampler.enabled:
        return NullWindowSampler()
    return CommandWindowSampler(
        config.sampler.command,
        timeout_seconds=config.sampler.timeout_seconds,
        logger=logging.getLogger("activity.sampler"),
    )


def _build_shell_runner(config: AppConfig) -> ShellRunner:
    command = config.hooks.block_end_command
    if not command:
        return NullShellRunner()
    return SubprocessShellRunner(command, logger=logging.getLogger("runtime.hooks"))
