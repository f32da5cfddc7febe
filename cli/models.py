"""Command request data types for CLI."""

from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True)
class DomainsCommand:
    """List domains and classes."""

    command: Literal["domains"] = "domains"


@dataclass(frozen=True)
class PathsCommand:
    """Show replica paths of a key."""

    key: str
    command: Literal["paths"] = "paths"


@dataclass(frozen=True)
class ListCommand:
    """List keys matching a prefix."""

    prefix: str = ""
    command: Literal["list"] = "list"


@dataclass(frozen=True)
class DeleteCommand:
    """Delete a key."""

    key: str
    command: Literal["delete"] = "delete"


@dataclass(frozen=True)
class RenameCommand:
    """Rename a key."""

    from_key: str
    to_key: str
    command: Literal["rename"] = "rename"


@dataclass(frozen=True)
class PutCommand:
    """Store a local file under a key."""

    key: str
    file_path: str
    storage_class: str | None = None
    command: Literal["put"] = "put"


@dataclass(frozen=True)
class GetCommand:
    """Download a key to a local file."""

    key: str
    output_path: str | None = None
    command: Literal["get"] = "get"


@dataclass(frozen=True)
class PutBigCommand:
    """Store a large local file in chunks."""

    key: str
    file_path: str
    storage_class: str | None = None
    command: Literal["putbig"] = "putbig"


@dataclass(frozen=True)
class GetBigCommand:
    """Reassemble a chunked file into a directory."""

    key: str
    directory: str = "."
    command: Literal["getbig"] = "getbig"


CommandRequest = (
    DomainsCommand
    | PathsCommand
    | ListCommand
    | DeleteCommand
    | RenameCommand
    | PutCommand
    | GetCommand
    | PutBigCommand
    | GetBigCommand
)
