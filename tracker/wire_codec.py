"""Encoding of tracker commands and decoding of tracker reply lines."""

from typing import Dict, Mapping, Optional
from urllib.parse import parse_qsl, quote_plus, unquote_plus

from common.exceptions import ProtocolError, RemoteError

Response = Dict[str, str]


def encode(command: str, domain: Optional[str] = None, args: Optional[Mapping[str, object]] = None) -> str:
    """
    Build one newline-terminated request line.

    Args:
        command: Tracker command name, e.g. "GET_PATHS"
        domain: Domain prepended as the first parameter when set
        args: Command parameters; values are converted with str()

    Returns:
        "<COMMAND> key1=val1&key2=val2\\n", or "<COMMAND>\\n" without parameters
    """
    params = []
    if domain:
        params.append(f"domain={quote_plus(domain)}")
    for key, value in (args or {}).items():
        params.append(f"{quote_plus(str(key))}={quote_plus(str(value))}")

    if params:
        return f"{command} {'&'.join(params)}\n"
    return f"{command}\n"


def decode(line: str) -> Response:
    """
    Decode one reply line into a Response mapping.

    Args:
        line: Raw reply line, with or without its line terminator

    Returns:
        Ordered mapping of reply keys to values

    Raises:
        RemoteError: On an ``ERR`` reply
        ProtocolError: On any other status token, a missing argument blob
            or a malformed query string
    """
    stripped = line.rstrip("\r\n")
    status, sep, blob = stripped.partition(" ")

    if status == "ERR":
        code, _, message = blob.strip().partition(" ")
        raise RemoteError(stripped.strip(), code=code, message=unquote_plus(message))
    if status != "OK":
        raise ProtocolError(f"Unrecognized tracker reply: {stripped.strip()}")
    if not sep:
        raise ProtocolError(f"Tracker reply lacks an argument section: {stripped.strip()}")

    blob = blob.strip()
    if not blob:
        return {}
    try:
        return dict(parse_qsl(blob, keep_blank_values=True, strict_parsing=True))
    except ValueError as e:
        raise ProtocolError(f"Malformed tracker reply {stripped.strip()!r}: {e}") from e
