"""Chunked storage of objects larger than the big-file threshold."""

import os
import random
import threading
import time
from pathlib import Path
from typing import BinaryIO, List, Optional

from bigfile.config import ChunkingConfig
from bigfile.manifest import BigFileManifest, ChunkDescriptor
from common.checksum import IncrementalChecksumCalculator, compute_checksum
from common.constants import BIG_INFO_PREFIX, BIG_PRE_PREFIX, CHUNK_KEY_SEPARATOR
from common.exceptions import (
    ConfigurationError,
    IntegrityError,
    OperationCancelledError,
    ProtocolError,
    RemoteError,
    ReplicationTimeoutError,
)
from common.logging_config import get_logger
from common.types import ByKey
from tracker.client import MogileClient

logger = get_logger(__name__)


def chunk_key(key: str, index: int) -> str:
    return f"{key}{CHUNK_KEY_SEPARATOR}{index}"


def info_key(key: str) -> str:
    return f"{BIG_INFO_PREFIX}{key}"


def pre_key(key: str) -> str:
    return f"{BIG_PRE_PREFIX}{key}"


def _read_block(source: BinaryIO, size: int) -> bytes:
    """Read up to ``size`` bytes, looping over short reads until EOF."""
    block = bytearray()
    while len(block) < size:
        piece = source.read(size - len(block))
        if not piece:
            break
        block.extend(piece)
    return bytes(block)


class ChunkedObjectCodec:
    """
    Splits big payloads into independently stored chunks and reassembles them.

    Store: write a ``_big_pre:`` marker, upload chunks sequentially (one chunk
    buffered at a time), wait for each chunk to replicate, write the
    ``_big_info:`` manifest, then remove the marker.

    Retrieve: parse the manifest, download chunks in ascending order, verify
    each checksum before any of its bytes are emitted.
    """

    def __init__(self, client: MogileClient, config: Optional[ChunkingConfig] = None, rng: Optional[random.Random] = None):
        self.client = client
        self.config = config or ChunkingConfig()
        self._rng = rng or random.Random()

    def store(
        self,
        key: str,
        cls: str,
        source: BinaryIO,
        total_size: int,
        chunk_size: Optional[int] = None,
        filename: Optional[str] = None,
        cancel: Optional[threading.Event] = None
    ) -> BigFileManifest:
        """
        Store a big payload as chunks plus a manifest.

        Args:
            key: Logical key of the big file
            cls: Storage class for chunks, marker and manifest
            source: Readable binary stream yielding exactly ``total_size`` bytes
            total_size: Payload size; must exceed the big-file threshold
            chunk_size: Chunk size in bytes (config default when None)
            filename: Name recorded in the manifest (defaults to ``key``)
            cancel: Event that aborts the replication wait when set

        Returns:
            The manifest that was written

        Raises:
            ConfigurationError: On an undersized payload, bad chunk size or short source
            ReplicationTimeoutError: If a chunk never reaches the replication target
            OperationCancelledError: If ``cancel`` is set during the replication wait
        """
        chunk_size = self.config.chunk_size_bytes if chunk_size is None else chunk_size
        self.config.check_chunk_size(chunk_size)
        if total_size <= self.config.big_threshold_bytes:
            raise ConfigurationError(
                f"{total_size} bytes is too small to be stored as a big file "
                f"(threshold {self.config.big_threshold_bytes})"
            )
        filename = key if filename is None else filename
        if not os.path.basename(filename):
            raise ConfigurationError(f"Big file name {filename!r} has no base name")
        cancel = cancel or threading.Event()

        self.client.store_data(pre_key(key), cls, f"starttime: {int(time.time())}")

        chunks: List[ChunkDescriptor] = []
        stored = 0
        while True:
            data = _read_block(source, chunk_size)
            if not data:
                break
            index = len(chunks) + 1
            self.client.store_data(chunk_key(key, index), cls, data)
            chunks.append(ChunkDescriptor(index=index, byte_length=len(data), checksum=compute_checksum(data)))
            stored += len(data)
            logger.info(f"Stored chunk {index} of {key} ({len(data)} bytes, {stored}/{total_size})")

        if stored != total_size:
            raise ConfigurationError(f"Source yielded {stored} bytes for {key}, expected {total_size}")

        for chunk in chunks:
            chunk.paths = self._await_replication(chunk_key(key, chunk.index), cancel)

        manifest = BigFileManifest(
            filename=filename,
            total_size=total_size,
            chunk_count=len(chunks),
            chunks={chunk.index: chunk for chunk in chunks},
        )
        self.client.store_data(info_key(key), cls, manifest.render())
        self.client.delete(pre_key(key))
        logger.info(f"Stored big file {key}: {manifest.chunk_count} chunks, {total_size} bytes")
        return manifest

    def store_file(self, key: str, cls: str, path: str, chunk_size: Optional[int] = None,
                   cancel: Optional[threading.Event] = None) -> BigFileManifest:
        """Store a local file as a big file, recording its base name in the manifest."""
        try:
            size = os.path.getsize(path)
            source = open(path, 'rb')
        except OSError as e:
            raise ConfigurationError(f"File {path} is not readable for injection: {e}") from e
        with source:
            return self.store(key, cls, source, size, chunk_size=chunk_size,
                              filename=os.path.basename(path), cancel=cancel)

    def _await_replication(self, key: str, cancel: threading.Event) -> List[str]:
        target = self.config.replication_target
        for attempt in range(1, self.config.poll_attempts + 1):
            paths = list(dict.fromkeys(self.client.get_paths(key)))
            if len(paths) >= target:
                logger.debug(f"{key} replicated to {len(paths)} paths after {attempt} poll(s)")
                return paths
            if cancel.wait(self.config.poll_interval_seconds):
                raise OperationCancelledError(f"Replication wait for {key} was cancelled")
        raise ReplicationTimeoutError(
            f"{key} did not replicate to {target} paths, we waited "
            f"{self.config.replication_wait_seconds} seconds"
        )

    def parse_manifest(self, key: str) -> BigFileManifest:
        """
        Fetch and parse the manifest of a big file.

        Raises:
            ProtocolError: If the manifest is malformed or incomplete
        """
        raw = self.client.get_file_data(ByKey(info_key(key)))
        try:
            text = raw.decode('utf-8')
        except UnicodeDecodeError as e:
            raise ProtocolError(f"Manifest for {key} is not valid UTF-8") from e
        return BigFileManifest.parse(text)

    def retrieve(self, key: str, out: BinaryIO) -> BigFileManifest:
        """
        Reassemble a big file into ``out``.

        Chunks are written strictly in ascending order and only after their
        checksum verified. On error ``out`` may hold a verified prefix, which
        must not be treated as the object.

        Raises:
            ProtocolError: If the manifest is malformed or incomplete
            ConfigurationError: If a chunk exceeds the maximum buffer size
            UnavailableError: If no replica of a chunk can be read
            IntegrityError: On a checksum or length mismatch
        """
        return self._write_chunks(key, self.parse_manifest(key), out)

    def _write_chunks(self, key: str, manifest: BigFileManifest, out: BinaryIO) -> BigFileManifest:
        for chunk in manifest.chunks.values():
            if chunk.byte_length > self.config.max_buffer_bytes:
                raise ConfigurationError(
                    f"Chunk {chunk.index} of {key} is bigger than the maximum buffer size"
                )

        for chunk in manifest.ordered_chunks():
            out.write(self._fetch_chunk(key, chunk))
        logger.info(f"Retrieved big file {key}: {manifest.chunk_count} chunks, {manifest.total_size} bytes")
        return manifest

    def _fetch_chunk(self, key: str, chunk: ChunkDescriptor) -> bytes:
        candidates = list(chunk.paths)
        self._rng.shuffle(candidates)

        calculator = IncrementalChecksumCalculator()
        buffer = bytearray()
        with self.client.transfer.open_replica(candidates) as (path, body):
            for piece in body:
                buffer.extend(piece)
                if len(buffer) > chunk.byte_length:
                    raise IntegrityError(f"Chunk {chunk.index} of {key} from {path} is longer than {chunk.byte_length} bytes")
                calculator.update(piece)

        if len(buffer) != chunk.byte_length:
            raise IntegrityError(
                f"Chunk {chunk.index} of {key} from {path} has {len(buffer)} bytes, expected {chunk.byte_length}"
            )
        if calculator.finalize() != chunk.checksum:
            raise IntegrityError(f"Mismatched md5 sum on chunk {chunk.index} of {key} from {path}")
        return bytes(buffer)

    def get_file(self, key: str, directory: str = '.') -> Path:
        """
        Write a big file to ``directory`` under its original file name.

        The file appears only once every chunk verified; a failed retrieval
        leaves nothing behind.

        Returns:
            Path of the written file
        """
        manifest = self.parse_manifest(key)
        name = os.path.basename(manifest.filename)
        if not name:
            raise ProtocolError(f"Manifest for {key} has no usable file name: {manifest.filename!r}")
        target = Path(directory) / name
        partial = target.with_name(target.name + '.part')
        try:
            with open(partial, 'wb') as out:
                self._write_chunks(key, manifest, out)
            os.replace(partial, target)
        except Exception:
            partial.unlink(missing_ok=True)
            raise
        return target

    def delete(self, key: str) -> BigFileManifest:
        """Delete every chunk, the manifest and any leftover marker of a big file."""
        manifest = self.parse_manifest(key)
        for index in range(1, manifest.chunk_count + 1):
            self.client.delete(chunk_key(key, index))
        self.client.delete(info_key(key))
        try:
            self.client.delete(pre_key(key))
        except RemoteError as e:
            logger.debug(f"No marker left for {key}: {e}")
        return manifest
