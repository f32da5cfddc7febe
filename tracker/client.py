"""High-level tracker client: directory operations plus the plain store and read paths."""

import io
import os
import random
from typing import BinaryIO, Dict, Iterator, List, Optional

from common.constants import LIST_KEYS_DEFAULT_LIMIT
from common.exceptions import ConfigurationError
from common.logging_config import get_logger
from common.types import ByKey, ByPaths, CreateOpenResult, Destination, ReproxyTarget
from storage.transfer import ObjectTransfer
from tracker.config import ClientConfig
from tracker.connection import TrackerConnection
from tracker.directory import ObjectDirectory

logger = get_logger(__name__)


class MogileClient:
    """
    Client for one tracker pool and domain.

    Tracker hosts are shuffled once at construction; the connection is opened
    lazily by the first request and is never re-established automatically.
    """

    def __init__(
        self,
        config: ClientConfig,
        connection: Optional[TrackerConnection] = None,
        transfer: Optional[ObjectTransfer] = None,
        rng: Optional[random.Random] = None
    ):
        """
        Initialize the client.

        Args:
            config: Client configuration
            connection: Optional TrackerConnection (dependency injection for tests)
            transfer: Optional ObjectTransfer (dependency injection for tests)
            rng: Optional random source used to shuffle the tracker list
        """
        self.config = config
        endpoints = list(config.trackers)
        (rng or random.Random()).shuffle(endpoints)
        self.endpoints = endpoints

        self.connection = connection or TrackerConnection(config.connect_timeout, config.read_timeout)
        self.transfer = transfer or ObjectTransfer(timeout=config.command_timeout)
        self.directory = ObjectDirectory(self.connection, self.endpoints, config.domain)
        logger.info(f"Initialized MogileClient [trackers={len(self.endpoints)}, domain={config.domain}]")

    @property
    def domain(self) -> Optional[str]:
        return self.config.domain

    def connect(self) -> None:
        self.connection.connect(self.endpoints)

    def reconnect(self) -> None:
        """Drop the current tracker connection and open a new one."""
        self.connection.close()
        self.connection.connect(self.endpoints)

    def close(self) -> None:
        self.connection.close()
        self.transfer.close()

    def __enter__(self) -> 'MogileClient':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # Directory operations

    def get_domains(self) -> Dict[str, Dict[str, int]]:
        return self.directory.get_domains()

    def get_paths(self, key: str) -> List[str]:
        return self.directory.get_paths(key)

    def delete(self, key: str) -> None:
        self.directory.delete(key)

    def rename(self, from_key: str, to_key: str) -> None:
        self.directory.rename(from_key, to_key)

    def list_keys(self, prefix: str = '', after: Optional[str] = None, limit: int = LIST_KEYS_DEFAULT_LIMIT):
        return self.directory.list_keys(prefix, after, limit)

    def iter_keys(self, prefix: str = '', limit: int = LIST_KEYS_DEFAULT_LIMIT) -> Iterator[str]:
        """
        Iterate over every key with the given prefix, one LIST_KEYS page at a time.

        Stops when a page holds fewer than ``limit`` keys or no continuation marker.
        """
        if limit <= 0:
            raise ConfigurationError("limit must be positive")
        after = None
        while True:
            next_after, keys = self.directory.list_keys(prefix, after, limit)
            yield from keys
            if len(keys) < limit or not next_after:
                return
            after = next_after

    # Store path

    def store_stream(self, key: str, cls: str, source: BinaryIO, length: int) -> CreateOpenResult:
        """
        Store ``length`` bytes from ``source`` under ``key``.

        Args:
            key: Object key
            cls: Storage class
            source: Readable binary stream
            length: Number of bytes to upload

        Returns:
            The CreateOpenResult the object was written to
        """
        target = self.directory.create_open(key, cls)
        self.transfer.upload(target.path, source, length)
        self.directory.create_close(key, cls, target.devid, target.fid, target.path)
        logger.debug(f"Stored {key} ({length} bytes) at {target.path}")
        return target

    def store_data(self, key: str, cls: str, data: bytes) -> CreateOpenResult:
        if isinstance(data, str):
            data = data.encode('utf-8')
        return self.store_stream(key, cls, io.BytesIO(data), len(data))

    def store_file(self, key: str, cls: str, filename: str) -> CreateOpenResult:
        """Store a local file under ``key``."""
        try:
            size = os.path.getsize(filename)
            source = open(filename, 'rb')
        except OSError as e:
            raise ConfigurationError(f"Unable to open {filename!r}: {e}") from e
        with source:
            return self.store_stream(key, cls, source, size)

    # Read path

    def resolve_paths(self, destination: Destination) -> List[str]:
        """
        Resolve a read destination to its candidate replica paths.

        Raises:
            ConfigurationError: If destination is neither ByKey nor ByPaths
        """
        if isinstance(destination, ByKey):
            return self.get_paths(destination.key)
        if isinstance(destination, ByPaths):
            return list(destination.paths)
        raise ConfigurationError(f"Invalid destination: {destination!r}")

    def get_file_data(self, destination: Destination) -> bytes:
        _, data = self.transfer.fetch(self.resolve_paths(destination))
        return data

    def passthru(self, destination: Destination, out: BinaryIO) -> int:
        """Stream an object into ``out``; returns the number of bytes written."""
        return self.transfer.copy_to(self.resolve_paths(destination), out)

    def reproxy(self, destination: Destination) -> ReproxyTarget:
        """Return the replica URLs for the serving layer to redirect to."""
        return ReproxyTarget(tuple(self.resolve_paths(destination)))
