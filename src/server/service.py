from __future__ import annotations

import asyncio
import contextlib
import logging
import threading
from http import HTTPStatus
from typing import Any, Callable, Mapping, Optional
from urllib.parse import urlsplit

import websockets
from websockets.asyncio.server import ServerConnection, broadcast
from websockets.http11 import Request, Response

from contracts.control_protocol import COMMAND_NAME_ORDER, EVENT_ERROR, EVENT_HELLO, EVENT_RESULT

from .config import HEALTHZ_PATH, ControlServerConfig
from .events import ControlMessageError, make_event, parse_command_message

CommandHandler = Callable[[str, Mapping[str, Any]], Mapping[str, Any]]


class ControlServer:
    """Threaded asyncio websocket endpoint that accepts control commands.

    Each inbound message is handed to `command_handler` synchronously and the
    returned payload is sent back as a `result` event. The handler must be
    quick; it runs on the server's event loop thread.
    """

    def __init__(
        self,
        config: ControlServerConfig,
        command_handler: CommandHandler,
        logger: Optional[logging.Logger] = None,
    ):
        self._config = config
        self._command_handler = command_handler
        self._logger = logger or logging.getLogger("control_server")
        self._thread: Optional[threading.Thread] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._stop_async: Optional[asyncio.Event] = None
        self._started = threading.Event()
        self._startup_error: Optional[Exception] = None
        self._connected_clients: set[ServerConnection] = set()

    @property
    def is_running(self) -> bool:
        return (
            self._thread is not None
            and self._thread.is_alive()
            and self._startup_error is None
        )

    def start(self, timeout_seconds: float = 5.0) -> None:
        if self.is_running:
            self._logger.warning("Control server is already running")
            return

        self._startup_error = None
        self._started.clear()
        self._thread = threading.Thread(
            target=self._run_loop,
            daemon=True,
            name="control-server",
        )
        self._thread.start()

        if not self._started.wait(timeout_seconds):
            raise RuntimeError(
                f"Control server did not start within {timeout_seconds:.1f}s"
            )

        if self._startup_error is not None:
            raise RuntimeError(f"Control server startup failed: {self._startup_error}")

    def stop(self, timeout_seconds: float = 5.0) -> None:
        if self._thread is None:
            return

        if self._loop and self._stop_async:
            self._loop.call_soon_threadsafe(self._stop_async.set)

        self._thread.join(timeout=timeout_seconds)
        if self._thread.is_alive():
            self._logger.error(
                "Control server thread did not stop within %.1fs",
                timeout_seconds,
            )

        self._thread = None
        self._loop = None
        self._stop_async = None

    def publish(self, event_type: str, **payload) -> None:
        if not self.is_running or self._loop is None:
            return

        message = make_event(event_type, **payload)
        try:
            self._loop.call_soon_threadsafe(self._broadcast, message)
        except RuntimeError:
            # Loop may be shutting down.
            return

    def handle_message(self, raw: str | bytes) -> str:
        """Run one inbound control message and return the serialized reply."""
        try:
            name, arguments = parse_command_message(raw)
        except ControlMessageError as error:
            self._logger.warning("Rejected control message: %s", error)
            return make_event(EVENT_ERROR, message=str(error))

        try:
            payload = dict(self._command_handler(name, arguments))
        except Exception as error:
            self._logger.error("Control command %s failed: %s", name, error, exc_info=True)
            return make_event(EVENT_ERROR, command=name, message=str(error))

        self._logger.info(
            "Control command %s: accepted=%s reason=%s",
            name,
            payload.get("accepted"),
            payload.get("reason"),
        )
        return make_event(EVENT_RESULT, **payload)

    def _run_loop(self) -> None:
        self._loop = asyncio.new_event_loop()
        asyncio.set_event_loop(self._loop)
        self._stop_async = asyncio.Event()

        try:
            self._loop.run_until_complete(self._serve())
        except Exception as error:
            self._startup_error = error
            self._logger.error("Control server failed: %s", error, exc_info=True)
            self._started.set()
        finally:
            if self._loop is not None:
                pending = asyncio.all_tasks(self._loop)
                for task in pending:
                    task.cancel()
                with contextlib.suppress(Exception):
                    self._loop.run_until_complete(
                        asyncio.gather(*pending, return_exceptions=True)
                    )
                self._loop.close()

    async def _serve(self) -> None:
        async with websockets.serve(
            self._handler,
            host=self._config.host,
            port=self._config.port,
            process_request=self._process_request,
            logger=self._logger,
        ):
            self._logger.info("Control server listening at %s", self._config.url)
            self._started.set()
            await self._stop_async.wait()
            await self._close_clients()

    async def _handler(self, websocket: ServerConnection) -> None:
        self._connected_clients.add(websocket)
        self._logger.debug("Control client connected: %s", websocket.remote_address)
        try:
            await websocket.send(
                make_event(
                    EVENT_HELLO,
                    message="Control channel connected",
                    commands=list(COMMAND_NAME_ORDER),
                )
            )
            async for message in websocket:
                await websocket.send(self.handle_message(message))
        except websockets.exceptions.ConnectionClosed:
            self._logger.debug("Control client disconnected: %s", websocket.remote_address)
        finally:
            self._connected_clients.discard(websocket)

    def _process_request(
        self,
        connection: ServerConnection,
        request: Request,
    ) -> Optional[Response]:
        path = urlsplit(request.path).path
        if path == self._config.path:
            return None
        if path == HEALTHZ_PATH:
            return connection.respond(HTTPStatus.OK, "ok\n")
        return connection.respond(HTTPStatus.NOT_FOUND, "not found\n")

    async def _close_clients(self) -> None:
        if not self._connected_clients:
            return

        tasks = [
            client.close(code=1001, reason="Server shutting down")
            for client in tuple(self._connected_clients)
        ]
        await asyncio.gather(*tasks, return_exceptions=True)
        self._connected_clients.clear()

    def _broadcast(self, message: str) -> None:
        broadcast(self._connected_clients, message)
