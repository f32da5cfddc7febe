"""Command handler functions for CLI operations."""

import os
from pathlib import Path
from typing import Optional

from bigfile.codec import ChunkedObjectCodec
from cli.config import Config
from cli.models import (
    DeleteCommand,
    DomainsCommand,
    GetBigCommand,
    GetCommand,
    ListCommand,
    PathsCommand,
    PutBigCommand,
    PutCommand,
    RenameCommand,
)
from cli.utils import ProgressReader, format_file_size
from common.exceptions import MogileError
from common.logging_config import get_logger
from common.types import ByKey
from tracker.client import MogileClient

logger = get_logger(__name__)


_config: Optional[Config] = None
_client: Optional[MogileClient] = None
_codec: Optional[ChunkedObjectCodec] = None


def get_config() -> Config:
    global _config
    if _config is None:
        _config = Config(Path.home() / '.mogile' / 'config.json')
    return _config


def get_client() -> MogileClient:
    """
    Get or create global MogileClient instance.

    Returns:
        MogileClient instance
    """
    global _client
    if _client is None:
        logger.debug("Creating new MogileClient instance")
        _client = MogileClient(get_config().get_client_config())
    return _client


def get_codec() -> ChunkedObjectCodec:
    global _codec
    if _codec is None:
        _codec = ChunkedObjectCodec(get_client(), get_config().get_chunking_config())
    return _codec


def close_client() -> None:
    """Close the global client, if one was created."""
    global _client, _codec
    if _client is not None:
        _client.close()
    _client = None
    _codec = None


def handle_domains(cmd: DomainsCommand, client: Optional[MogileClient] = None) -> str:
    """
    Handle 'domains' command.

    Args:
        cmd: DomainsCommand
        client: Optional MogileClient for dependency injection (testing)

    Returns:
        Formatted domain and class listing, or error message
    """
    client = client or get_client()
    try:
        domains = client.get_domains()
    except MogileError as e:
        return f"Error: {e}"

    if not domains:
        return "No domains found."
    output = [f"Found {len(domains)} domain(s):"]
    for domain, classes in sorted(domains.items()):
        output.append(f"  - {domain}")
        for name, mindevcount in sorted(classes.items()):
            output.append(f"      {name} (mindevcount={mindevcount})")
    return '\n'.join(output)


def handle_paths(cmd: PathsCommand, client: Optional[MogileClient] = None) -> str:
    client = client or get_client()
    try:
        paths = client.get_paths(cmd.key)
    except MogileError as e:
        return f"Error: {e}"

    if not paths:
        return f"No paths found for key: {cmd.key}"
    return '\n'.join([f"{len(paths)} path(s) for {cmd.key}:"] + [f"  {p}" for p in paths])


def handle_list(cmd: ListCommand, client: Optional[MogileClient] = None) -> str:
    """
    Handle 'list' command.

    Args:
        cmd: ListCommand with prefix
        client: Optional MogileClient for dependency injection (testing)

    Returns:
        Formatted list of keys
    """
    logger.info(f"Executing list command: prefix={cmd.prefix!r}")
    client = client or get_client()
    try:
        keys = list(client.iter_keys(cmd.prefix))
    except MogileError as e:
        return f"Error: {e}"

    if not keys:
        return f"No keys found matching prefix: {cmd.prefix or '(all)'}"
    return '\n'.join([f"Found {len(keys)} key(s):"] + [f"  - {k}" for k in keys])


def handle_delete(cmd: DeleteCommand, client: Optional[MogileClient] = None) -> str:
    client = client or get_client()
    try:
        client.delete(cmd.key)
    except MogileError as e:
        return f"Error: {e}"
    return f"Deleted: {cmd.key}"


def handle_rename(cmd: RenameCommand, client: Optional[MogileClient] = None) -> str:
    client = client or get_client()
    try:
        client.rename(cmd.from_key, cmd.to_key)
    except MogileError as e:
        return f"Error: {e}"
    return f"Renamed: {cmd.from_key} -> {cmd.to_key}"


def handle_put(cmd: PutCommand, client: Optional[MogileClient] = None, default_class: Optional[str] = None) -> str:
    """
    Handle 'put' command.

    Args:
        cmd: PutCommand with key, file_path and optional storage_class
        client: Optional MogileClient for dependency injection (testing)
        default_class: Class used when the command names none

    Returns:
        Success or error message
    """
    if not os.path.isfile(cmd.file_path):
        return f"Error: File not found: {cmd.file_path}"

    client = client or get_client()
    storage_class = cmd.storage_class or default_class or get_config().get_default_class()
    size = os.path.getsize(cmd.file_path)
    logger.info(f"Executing put command: key={cmd.key} file={cmd.file_path} class={storage_class}")
    try:
        with open(cmd.file_path, 'rb') as f:
            target = client.store_stream(cmd.key, storage_class, ProgressReader(f, size, cmd.key), size)
    except MogileError as e:
        return f"Error: {e}"
    return f"Stored: {cmd.key} ({format_file_size(size)}, class {storage_class}) at {target.path}"


def handle_get(cmd: GetCommand, client: Optional[MogileClient] = None) -> str:
    """
    Handle 'get' command.

    Args:
        cmd: GetCommand with key and optional output_path
        client: Optional MogileClient for dependency injection (testing)

    Returns:
        Success or error message
    """
    client = client or get_client()
    output = Path(cmd.output_path or os.path.basename(cmd.key) or 'download.bin')
    partial = output.with_name(output.name + '.part')
    try:
        with open(partial, 'wb') as out:
            written = client.passthru(ByKey(cmd.key), out)
    except MogileError as e:
        partial.unlink(missing_ok=True)
        return f"Error: {e}"
    except OSError as e:
        partial.unlink(missing_ok=True)
        return f"Error: Cannot write {output}: {e}"
    os.replace(partial, output)
    return f"Downloaded: {cmd.key} -> {output} ({format_file_size(written)})"


def handle_put_big(cmd: PutBigCommand, codec: Optional[ChunkedObjectCodec] = None,
                   default_class: Optional[str] = None) -> str:
    """
    Handle 'putbig' command.

    Args:
        cmd: PutBigCommand with key, file_path and optional storage_class
        codec: Optional ChunkedObjectCodec for dependency injection (testing)
        default_class: Class used when the command names none

    Returns:
        Success or error message with chunk count
    """
    if not os.path.isfile(cmd.file_path):
        return f"Error: File not found: {cmd.file_path}"

    codec = codec or get_codec()
    storage_class = cmd.storage_class or default_class or get_config().get_default_class()
    logger.info(f"Executing putbig command: key={cmd.key} file={cmd.file_path} class={storage_class}")
    try:
        manifest = codec.store_file(cmd.key, storage_class, cmd.file_path)
    except MogileError as e:
        return f"Error: {e}"
    return (
        f"Stored big file: {cmd.key} ({format_file_size(manifest.total_size)} "
        f"in {manifest.chunk_count} chunk(s), class {storage_class})"
    )


def handle_get_big(cmd: GetBigCommand, codec: Optional[ChunkedObjectCodec] = None) -> str:
    codec = codec or get_codec()
    try:
        path = codec.get_file(cmd.key, cmd.directory)
    except MogileError as e:
        return f"Error: {e}"
    except OSError as e:
        return f"Error: Cannot write into {cmd.directory}: {e}"
    return f"Downloaded big file: {cmd.key} -> {path}"
