"""Command-specific wrappers over the tracker connection."""

from typing import Dict, List, Optional, Sequence, Tuple
from urllib.parse import unquote, urlsplit

from common.constants import LIST_KEYS_DEFAULT_LIMIT
from common.exceptions import ProtocolError
from common.logging_config import get_logger
from common.types import CreateOpenResult, HostEndpoint
from tracker.connection import TrackerConnection
from tracker.wire_codec import Response

logger = get_logger(__name__)


def _require(response: Response, field: str, command: str) -> str:
    if field not in response:
        raise ProtocolError(f"Unrecognized {command} response: missing '{field}'")
    return response[field]


def _require_int(response: Response, field: str, command: str) -> int:
    value = _require(response, field, command)
    try:
        return int(value)
    except ValueError:
        raise ProtocolError(f"Unrecognized {command} response: '{field}' is not a number: {value!r}")


def is_absolute_url(path: str) -> bool:
    """Return True if path is an absolute http(s) URL with a host."""
    parts = urlsplit(path)
    return parts.scheme in ('http', 'https') and bool(parts.netloc)


class ObjectDirectory:
    """
    Logical tracker operations: domains, paths, create, delete, rename, listing.

    Each method owns the reply-shape contract of its command and raises
    ProtocolError when the tracker answers with an unexpected shape.
    """

    def __init__(self, connection: TrackerConnection, endpoints: Sequence[HostEndpoint], domain: Optional[str] = None):
        self.connection = connection
        self.endpoints = list(endpoints)
        self.domain = domain

    def _request(self, command: str, args: Optional[dict] = None) -> Response:
        self.connection.connect(self.endpoints)
        return self.connection.send(command, self.domain, args)

    def get_domains(self) -> Dict[str, Dict[str, int]]:
        """
        List every domain with its classes.

        Returns:
            Mapping of domain name to a mapping of class name to minimum device count

        Raises:
            ProtocolError: If an indexed field is missing from the reply
        """
        response = self._request('GET_DOMAINS')
        domains = {}
        for i in range(1, _require_int(response, 'domains', 'GET_DOMAINS') + 1):
            prefix = f"domain{i}"
            classes = {}
            for j in range(1, _require_int(response, f"{prefix}classes", 'GET_DOMAINS') + 1):
                class_prefix = f"{prefix}class{j}"
                name = _require(response, f"{class_prefix}name", 'GET_DOMAINS')
                classes[name] = _require_int(response, f"{class_prefix}mindevcount", 'GET_DOMAINS')
            domains[_require(response, prefix, 'GET_DOMAINS')] = classes
        return domains

    def get_paths(self, key: str) -> List[str]:
        """
        Get the replica URLs of a key.

        Returns:
            Replica paths in reply order; empty if the object has no known replicas
        """
        response = self._request('GET_PATHS', {'key': key})
        response.pop('paths', None)
        return list(response.values())

    def delete(self, key: str) -> None:
        self._request('DELETE', {'key': key})

    def rename(self, from_key: str, to_key: str) -> None:
        self._request('RENAME', {'from_key': from_key, 'to_key': to_key})

    def create_open(self, key: str, cls: str) -> CreateOpenResult:
        """
        Ask the tracker for a write target for a new object.

        Args:
            key: Object key
            cls: Storage class

        Returns:
            CreateOpenResult with path, devid and fid

        Raises:
            ProtocolError: If the reply lacks a field or the path is not an absolute URL
        """
        response = self._request('CREATE_OPEN', {'key': key, 'class': cls})
        path = _require(response, 'path', 'CREATE_OPEN')
        if not is_absolute_url(path):
            raise ProtocolError(f"Unrecognized CREATE_OPEN response: invalid path {path!r}")
        return CreateOpenResult(
            path=path,
            devid=_require(response, 'devid', 'CREATE_OPEN'),
            fid=_require(response, 'fid', 'CREATE_OPEN'),
        )

    def create_close(self, key: str, cls: str, devid: str, fid: str, path: str) -> None:
        """Commit a finished upload; path is sent in its percent-decoded form."""
        self._request('CREATE_CLOSE', {
            'key': key,
            'class': cls,
            'devid': devid,
            'fid': fid,
            'path': unquote(path),
        })

    def list_keys(
        self,
        prefix: str = '',
        after: Optional[str] = None,
        limit: int = LIST_KEYS_DEFAULT_LIMIT
    ) -> Tuple[Optional[str], List[str]]:
        """
        List one page of keys.

        Args:
            prefix: Only keys starting with this prefix
            after: Return keys after this one, or from the first key if None
            limit: Maximum number of keys returned

        Returns:
            Tuple of (next_after or None, keys)

        Raises:
            ProtocolError: If key_count, next_after or an indexed key is missing
        """
        args = {'prefix': prefix, 'limit': limit}
        if after:
            args['after'] = after
        response = self._request('LIST_KEYS', args)

        key_count = _require_int(response, 'key_count', 'LIST_KEYS')
        next_after = _require(response, 'next_after', 'LIST_KEYS')

        keys = [_require(response, f"key_{i}", 'LIST_KEYS') for i in range(1, key_count + 1)]
        return (next_after or None), keys
