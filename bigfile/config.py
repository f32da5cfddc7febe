"""Configuration for chunked big-file storage."""

import math
from dataclasses import dataclass

from common.constants import (
    BIG_FILE_THRESHOLD_BYTES,
    CHUNK_SIZE_BYTES,
    MAX_BUFFER_BYTES,
    REPLICATION_POLL_INTERVAL_SECONDS,
    REPLICATION_TARGET,
    REPLICATION_WAIT_SECONDS,
)
from common.exceptions import ConfigurationError


@dataclass(frozen=True)
class ChunkingConfig:
    """
    Size limits and replication-wait settings for big files.

    Attributes:
        big_threshold_bytes: Payloads must be strictly larger than this
        chunk_size_bytes: Default chunk size
        max_buffer_bytes: Largest chunk held in memory at once
        replication_wait_seconds: Time allowed per chunk to reach the replication target
        replication_target: Distinct replica paths required per chunk
        poll_interval_seconds: Delay between GET_PATHS polls
    """
    big_threshold_bytes: int = BIG_FILE_THRESHOLD_BYTES
    chunk_size_bytes: int = CHUNK_SIZE_BYTES
    max_buffer_bytes: int = MAX_BUFFER_BYTES
    replication_wait_seconds: float = REPLICATION_WAIT_SECONDS
    replication_target: int = REPLICATION_TARGET
    poll_interval_seconds: float = REPLICATION_POLL_INTERVAL_SECONDS

    def __post_init__(self):
        self.check_chunk_size(self.chunk_size_bytes)
        if self.replication_target < 1:
            raise ConfigurationError("replication_target must be at least 1")
        if self.replication_wait_seconds < 0:
            raise ConfigurationError("replication_wait_seconds can't be negative")
        if self.poll_interval_seconds <= 0:
            raise ConfigurationError("poll_interval_seconds must be positive")

    def check_chunk_size(self, chunk_size: int) -> None:
        """
        Validate a chunk size against the big-file threshold and buffer ceiling.

        Raises:
            ConfigurationError: If the chunk size is not usable
        """
        if not isinstance(chunk_size, int) or chunk_size <= 0:
            raise ConfigurationError(f"Chunk size must be a positive integer, got {chunk_size!r}")
        if chunk_size > self.big_threshold_bytes:
            raise ConfigurationError("Big-file threshold must be at least the chunk size")
        if chunk_size > self.max_buffer_bytes:
            raise ConfigurationError("Chunk size can't be bigger than the maximum buffer size")

    @property
    def poll_attempts(self) -> int:
        """
        Number of GET_PATHS polls covering the replication wait.

        A partial interval counts as a full poll; a zero wait means no polls,
        so the store fails as soon as replication is checked.
        """
        # strip float noise before ceil
        return math.ceil(round(self.replication_wait_seconds / self.poll_interval_seconds, 6))
