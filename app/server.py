"""Bind a port and serve the ASGI app on it with uvicorn.

The socket is bound here rather than inside uvicorn so that a bind failure
comes back to the caller as a ``BindError`` instead of uvicorn's
``sys.exit(1)``. The success callback fires only once uvicorn has finished
its startup on that socket.
"""

from __future__ import annotations

import contextlib
import logging
import signal
import socket
import threading
from collections.abc import Callable, Generator
from types import FrameType

import uvicorn
from uvicorn.server import HANDLED_SIGNALS

logger = logging.getLogger(__name__)

OnListening = Callable[[], None]


class BindError(Exception):
    """The listen socket could not be bound."""

    def __init__(self, host: str, port: int, reason: str, errno: int | None = None):
        super().__init__(host, port, reason)
        self.host = host
        self.port = port
        self.reason = reason
        self.errno = errno

    def __str__(self) -> str:
        return f"cannot bind {self.host}:{self.port}: {self.reason}"


def bind_socket(host: str, port: int, backlog: int = 2048) -> socket.socket:
    """Create a TCP socket bound to (host, port) and already listening."""
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    sock = socket.socket(family, socket.SOCK_STREAM)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((host, port))
        sock.listen(backlog)
    except (OSError, OverflowError) as exc:
        sock.close()
        reason = getattr(exc, "strerror", None) or str(exc)
        raise BindError(host, port, reason, getattr(exc, "errno", None)) from exc
    sock.set_inheritable(True)
    return sock


class _NotifyingServer(uvicorn.Server):
    """uvicorn server that calls back once startup has completed."""

    def __init__(self, config: uvicorn.Config, on_started: OnListening | None):
        super().__init__(config)
        self._on_started = on_started
        self.stop_signal: int | None = None

    @contextlib.contextmanager
    def capture_signals(self) -> Generator[None, None, None]:
        # uvicorn re-raises the captured signal after shutdown; a stop by
        # SIGINT/SIGTERM is a normal exit here, so only record it.
        if threading.current_thread() is not threading.main_thread():
            yield
            return
        original_handlers = {sig: signal.signal(sig, self._record_exit) for sig in HANDLED_SIGNALS}
        try:
            yield
        finally:
            for sig, handler in original_handlers.items():
                signal.signal(sig, handler)

    def _record_exit(self, sig: int, frame: FrameType | None) -> None:
        if self.stop_signal is None:
            self.stop_signal = sig
        logger.info(f"Received {signal.Signals(sig).name}, shutting down")
        if self.should_exit and sig == signal.SIGINT:
            self.force_exit = True
        else:
            self.should_exit = True

    async def startup(self, sockets: list[socket.socket] | None = None) -> None:
        await super().startup(sockets=sockets)
        # startup() returns without setting `started` if the lifespan failed
        if self.started and self._on_started is not None:
            callback, self._on_started = self._on_started, None
            callback()


class Listener:
    """One listen operation: bind, notify, serve until stopped."""

    def __init__(self, app, port: int, host: str = "0.0.0.0", log_level: str = "info"):
        self.app = app
        self.host = host
        self.port = port
        self.log_level = log_level
        self._server: _NotifyingServer | None = None
        self._stop_requested = False

    def run(self, on_listening: OnListening | None = None) -> None:
        """Bind the port and serve until shutdown.

        Raises BindError before anything is served if the port cannot be
        bound; `on_listening` is not called in that case.
        """
        sock = bind_socket(self.host, self.port)
        # port 0 asks the OS for a free port, report the real one
        self.port = sock.getsockname()[1]
        logger.debug(f"Bound {self.host}:{self.port}")

        config = uvicorn.Config(
            self.app,
            host=self.host,
            port=self.port,
            log_level=self.log_level,
        )
        self._server = _NotifyingServer(config, on_listening)
        self._server.should_exit = self._stop_requested
        try:
            self._server.run(sockets=[sock])
        finally:
            sock.close()
            logger.debug(f"Closed {self.host}:{self.port}")

    @property
    def started(self) -> bool:
        return self._server is not None and self._server.started

    @property
    def stop_signal(self) -> int | None:
        """SIGINT/SIGTERM that ended the serve loop, if one did."""
        return self._server.stop_signal if self._server is not None else None

    def stop(self) -> None:
        """Ask the serve loop to exit. Safe to call from another thread."""
        self._stop_requested = True
        if self._server is not None:
            self._server.should_exit = True


def listen(
    app,
    port: int,
    on_listening: OnListening | None = None,
    *,
    host: str = "0.0.0.0",
    log_level: str = "info",
) -> None:
    """Serve `app` on `port`, calling `on_listening()` once the bind completes."""
    Listener(app, port, host=host, log_level=log_level).run(on_listening)
