"""Command parser for CLI input."""

import shlex

from cli.models import (
    CommandRequest,
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


class ParseError(Exception):
    """Raised when command parsing fails."""

    pass


def parse_command(input_line: str) -> CommandRequest:
    """Parse user input into a CommandRequest object.

    Args:
        input_line: Raw user input from REPL

    Returns:
        CommandRequest object

    Raises:
        ParseError: If command syntax is invalid
    """
    if not input_line.strip():
        raise ParseError("Empty command")

    try:
        tokens = shlex.split(input_line)
    except ValueError as e:
        raise ParseError(f"Invalid syntax: {e}")

    if not tokens:
        raise ParseError("Empty command")

    command_name = tokens[0].lower()
    args = tokens[1:]

    if command_name == "domains":
        _expect(args, 0, 0, "domains takes no arguments")
        return DomainsCommand()
    elif command_name == "paths":
        _expect(args, 1, 1, "paths requires exactly 1 argument: <key>")
        return PathsCommand(key=args[0])
    elif command_name == "list":
        _expect(args, 0, 1, "list takes at most 1 argument: [prefix]")
        return ListCommand(prefix=args[0] if args else "")
    elif command_name == "delete":
        _expect(args, 1, 1, "delete requires exactly 1 argument: <key>")
        return DeleteCommand(key=args[0])
    elif command_name == "rename":
        _expect(args, 2, 2, "rename requires exactly 2 arguments: <from> <to>")
        return RenameCommand(from_key=args[0], to_key=args[1])
    elif command_name == "put":
        _expect(args, 2, 3, "put requires 2 or 3 arguments: <key> <file> [class]")
        return PutCommand(key=args[0], file_path=args[1], storage_class=_optional(args, 2))
    elif command_name == "get":
        _expect(args, 1, 2, "get requires 1 or 2 arguments: <key> [output_path]")
        return GetCommand(key=args[0], output_path=_optional(args, 1))
    elif command_name == "putbig":
        _expect(args, 2, 3, "putbig requires 2 or 3 arguments: <key> <file> [class]")
        return PutBigCommand(key=args[0], file_path=args[1], storage_class=_optional(args, 2))
    elif command_name == "getbig":
        _expect(args, 1, 2, "getbig requires 1 or 2 arguments: <key> [directory]")
        return GetBigCommand(key=args[0], directory=_optional(args, 1) or ".")
    else:
        raise ParseError(f"Unknown command: {command_name}")


def _expect(args: list[str], minimum: int, maximum: int, message: str) -> None:
    """Raise ParseError unless minimum <= len(args) <= maximum."""
    if not minimum <= len(args) <= maximum:
        raise ParseError(message)


def _optional(args: list[str], index: int) -> str | None:
    return args[index] if len(args) > index else None
