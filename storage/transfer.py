"""HTTP transfer of object bytes to and from storage nodes."""

from contextlib import contextmanager
from typing import BinaryIO, Iterator, Optional, Sequence, Tuple

import httpx

from common.constants import COMMAND_TIMEOUT_SECONDS, STREAM_PIECE_SIZE_BYTES
from common.exceptions import TransferError, UnavailableError
from common.logging_config import get_logger

logger = get_logger(__name__)


class ObjectTransfer:
    """
    Moves bytes over HTTP: PUT for uploads, streaming GET for downloads.
    """

    def __init__(self, timeout: float = COMMAND_TIMEOUT_SECONDS, session: Optional[httpx.Client] = None):
        """
        Initialize transfer helper.

        Args:
            timeout: Overall bound for each HTTP transfer, in seconds
            session: Optional httpx.Client (tests inject a MockTransport-backed one)
        """
        self.timeout = timeout
        self.session = session or httpx.Client(timeout=timeout)

    def close(self) -> None:
        self.session.close()

    def upload(self, path: str, source: BinaryIO, length: int) -> None:
        """
        PUT exactly ``length`` bytes read from ``source`` to ``path``.

        Args:
            path: Storage node URL from CREATE_OPEN
            source: Readable binary stream
            length: Number of bytes to send

        Raises:
            TransferError: On transport failure, short source or non-2xx status
        """
        def body() -> Iterator[bytes]:
            remaining = length
            while remaining > 0:
                piece = source.read(min(STREAM_PIECE_SIZE_BYTES, remaining))
                if not piece:
                    raise TransferError(f"Source ended {remaining} bytes short of {length} for {path}")
                remaining -= len(piece)
                yield piece

        headers = {'Content-Length': str(length), 'Expect': ''}
        try:
            response = self.session.put(path, content=body(), headers=headers, timeout=self.timeout)
        except httpx.HTTPError as e:
            raise TransferError(f"HTTP PUT {path} failed: {e}") from e

        if not response.is_success:
            raise TransferError(f"HTTP PUT {path} failed: status {response.status_code} {response.text[:200]}")
        logger.debug(f"Uploaded {length} bytes to {path}")

    def download(self, path: str) -> Iterator[bytes]:
        """
        Stream the bytes stored at ``path``.

        The iterator is finite and not restartable; a failure mid-stream raises
        TransferError instead of ending early.
        """
        response = self._send_get(path)
        try:
            yield from self._iter_body(path, response)
        finally:
            response.close()

    def _send_get(self, path: str) -> httpx.Response:
        try:
            request = self.session.build_request('GET', path, timeout=self.timeout)
            response = self.session.send(request, stream=True)
        except httpx.HTTPError as e:
            raise TransferError(f"HTTP GET {path} failed: {e}") from e
        if not response.is_success:
            response.close()
            raise TransferError(f"HTTP GET {path} failed: status {response.status_code}")
        return response

    def _iter_body(self, path: str, response: httpx.Response) -> Iterator[bytes]:
        try:
            yield from response.iter_bytes(STREAM_PIECE_SIZE_BYTES)
        except httpx.HTTPError as e:
            raise TransferError(f"HTTP GET {path} failed mid-stream: {e}") from e

    @contextmanager
    def open_replica(self, paths: Sequence[str]) -> Iterator[Tuple[str, Iterator[bytes]]]:
        """
        Open the first readable replica, trying paths in the given order.

        Yields:
            Tuple of (chosen path, byte iterator over its body)

        Raises:
            UnavailableError: If no path could be opened
        """
        for path in paths:
            try:
                response = self._send_get(path)
            except TransferError as e:
                logger.warning(f"Replica unavailable, trying next: {e}")
                continue
            try:
                yield path, self._iter_body(path, response)
            finally:
                response.close()
            return

        raise UnavailableError(f"Unable to open paths: {', '.join(paths) or '(none)'}")

    def select_replica(self, paths: Sequence[str]) -> str:
        """Return the first replica path that can be opened for reading."""
        with self.open_replica(paths) as (path, _):
            return path

    def fetch(self, paths: Sequence[str]) -> Tuple[str, bytes]:
        """Read a whole object from its first openable replica."""
        with self.open_replica(paths) as (path, body):
            return path, b''.join(body)

    def copy_to(self, paths: Sequence[str], out: BinaryIO) -> int:
        """Stream an object from its first openable replica into ``out``."""
        written = 0
        with self.open_replica(paths) as (path, body):
            for piece in body:
                out.write(piece)
                written += len(piece)
        logger.debug(f"Copied {written} bytes from {path}")
        return written
