import logging
import threading
from typing import Callable, Optional

from websockets.exceptions import ConnectionClosed
from websockets.sync.server import Server, serve

logger = logging.getLogger(__name__)


class WebSocketServer:
    """
    Threaded WebSocket server

    Runs `serve_forever()` in a daemon thread. Every accepted connection is
    handed to `on_connect`, held open until the client disconnects, then
    handed to `on_disconnect`. Inbound messages are ignored.
    """

    def __init__(self, host: str, port: int,
                 on_connect: Callable, on_disconnect: Callable):
        """
        Args:
            host: Interface to bind
            port: TCP port to bind
            on_connect: Called with each new connection
            on_disconnect: Called with each closed connection
        """
        self.host = host
        self.port = port
        self.on_connect = on_connect
        self.on_disconnect = on_disconnect
        self._server: Optional[Server] = None
        self.thread: threading.Thread = None

    def start(self):
        """Bind the socket and start serving in the background"""
        if self._server is not None:
            logger.warning("WebSocket server is already running")
            return

        self._server = serve(self._handle, self.host, self.port)
        self.thread = threading.Thread(
            target=self._server.serve_forever,
            daemon=True,
            name="WebSocketServer"
        )
        self.thread.start()
        logger.info(f"WebSocket server listening on ws://{self.host}:{self.port}")

    def stop(self):
        """Stop accepting connections and close the listening socket"""
        if self._server is None:
            return

        logger.info("Stopping WebSocket server...")
        self._server.shutdown()
        if self.thread and self.thread.is_alive():
            self.thread.join(timeout=5)
        self._server = None
        logger.info("WebSocket server stopped")

    def is_running(self) -> bool:
        return self._server is not None

    @property
    def bound_port(self) -> Optional[int]:
        """Actual listening port (useful when started with port 0)"""
        if self._server is None:
            return None
        return self._server.socket.getsockname()[1]

    def _handle(self, connection):
        try:
            self.on_connect(connection)
            for message in connection:
                logger.debug(f"Ignoring inbound WebSocket message: {message!r:.100}")
        except ConnectionClosed:
            pass
        finally:
            self.on_disconnect(connection)
