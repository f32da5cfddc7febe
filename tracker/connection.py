"""A single line-oriented request/response connection to a tracker host."""

import socket
from typing import Callable, Mapping, Optional, Sequence

from common.exceptions import (
    ReadError,
    TrackerConnectionError,
    TrackerTimeoutError,
    WriteError,
)
from common.logging_config import get_logger
from common.types import HostEndpoint
from tracker.wire_codec import Response, decode, encode

logger = get_logger(__name__)

SocketFactory = Callable[[tuple, float], socket.socket]


class TrackerConnection:
    """
    Owns one live socket to a tracker.

    The connection is created by connect() and released by close(). A failed
    send() leaves the socket as-is; closing or reconnecting is up to the caller.
    """

    def __init__(
        self,
        connect_timeout: float,
        read_timeout: float,
        socket_factory: Optional[SocketFactory] = None
    ):
        """
        Initialize a disconnected tracker connection.

        Args:
            connect_timeout: Seconds allowed per connect attempt
            read_timeout: Seconds allowed per reply read
            socket_factory: Callable(address, timeout) returning a connected
                socket; defaults to socket.create_connection
        """
        self.connect_timeout = connect_timeout
        self.read_timeout = read_timeout
        self._socket_factory = socket_factory or socket.create_connection
        self._sock = None
        self._reader = None
        self.endpoint: Optional[HostEndpoint] = None

    @property
    def connected(self) -> bool:
        return self._sock is not None

    def connect(self, endpoints: Sequence[HostEndpoint]) -> None:
        """
        Connect to the first reachable endpoint, in the given order.

        Does nothing when already connected.

        Args:
            endpoints: Candidate trackers, already in the desired try order

        Raises:
            TrackerConnectionError: If every endpoint fails
        """
        if self.connected:
            return

        last_error = "no tracker hosts configured"
        for endpoint in endpoints:
            try:
                sock = self._socket_factory((endpoint.host, endpoint.port), self.connect_timeout)
            except OSError as e:
                last_error = f"{endpoint}: {e}"
                logger.warning(f"Tracker {endpoint} unreachable: {e}")
                continue

            sock.settimeout(self.read_timeout)
            self._sock = sock
            self._reader = sock.makefile('rb')
            self.endpoint = endpoint
            logger.debug(f"Connected to tracker {endpoint}")
            return

        raise TrackerConnectionError(f"Unable to connect to tracker: {last_error}")

    def send(self, command: str, domain: Optional[str] = None, args: Optional[Mapping[str, object]] = None) -> Response:
        """
        Send one command and read its single-line reply.

        Args:
            command: Tracker command name
            domain: Optional domain scoping the request
            args: Command parameters

        Returns:
            Decoded reply mapping

        Raises:
            WriteError: If the request could not be written
            TrackerTimeoutError: If the reply did not arrive within read_timeout
            ReadError: If no reply line could be read
            ProtocolError: If the reply is malformed (RemoteError for ERR replies)
        """
        if not self.connected:
            raise WriteError("Error writing command: not connected")

        line = encode(command, domain, args)
        logger.debug(f"Tracker request: {line.rstrip()}")
        try:
            self._sock.sendall(line.encode('utf-8'))
        except OSError as e:
            raise WriteError(f"Error writing command: {e}") from e

        try:
            reply = self._reader.readline()
        except socket.timeout as e:
            raise TrackerTimeoutError(
                f"Tracker {self.endpoint} did not reply within {self.read_timeout}s"
            ) from e
        except OSError as e:
            raise ReadError(f"Error reading response: {e}") from e

        if not reply:
            raise ReadError("Error reading response: connection closed by tracker")

        reply = reply.decode('utf-8', errors='replace')
        logger.debug(f"Tracker reply: {reply.rstrip()}")
        return decode(reply)

    def close(self) -> None:
        """Release the socket. Safe to call repeatedly."""
        if self._reader is not None:
            try:
                self._reader.close()
            except OSError:
                logger.debug("Ignoring error while closing tracker reader", exc_info=True)
            self._reader = None
        if self._sock is not None:
            try:
                self._sock.close()
            except OSError:
                logger.debug("Ignoring error while closing tracker socket", exc_info=True)
            self._sock = None
            logger.debug(f"Closed tracker connection {self.endpoint}")
        self.endpoint = None

    def __enter__(self) -> 'TrackerConnection':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __del__(self):
        self.close()
