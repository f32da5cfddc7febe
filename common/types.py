"""Shared value types (HostEndpoint, Destination variants, ReproxyTarget)."""

from dataclasses import dataclass
from typing import Tuple, Union

from common.constants import DEFAULT_TRACKER_PORT, REPROXY_HEADER
from common.exceptions import ConfigurationError


@dataclass(frozen=True)
class HostEndpoint:
    """
    Address of one tracker host.
    """
    host: str
    port: int = DEFAULT_TRACKER_PORT

    @classmethod
    def parse(cls, value: str) -> 'HostEndpoint':
        """
        Parse a ``host[:port]`` string.

        Args:
            value: Tracker address, e.g. "10.0.0.5:7001" or "tracker1"

        Returns:
            HostEndpoint with the default tracker port when none is given

        Raises:
            ConfigurationError: If the host is empty or the port is invalid
        """
        host, sep, port_text = value.strip().partition(':')
        if not host:
            raise ConfigurationError(f"Invalid tracker address: {value!r}")
        if not sep:
            return cls(host)
        try:
            port = int(port_text)
        except ValueError:
            raise ConfigurationError(f"Invalid tracker port in {value!r}")
        if port <= 0 or port > 65535:
            raise ConfigurationError(f"Invalid tracker port in {value!r}")
        return cls(host, port)

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


@dataclass(frozen=True)
class ByKey:
    """Read destination addressed by object key."""
    key: str


@dataclass(frozen=True)
class ByPaths:
    """Read destination addressed by an explicit list of replica URLs."""
    paths: Tuple[str, ...]

    def __init__(self, paths):
        object.__setattr__(self, 'paths', tuple(paths))


Destination = Union[ByKey, ByPaths]


@dataclass(frozen=True)
class ReproxyTarget:
    """
    Candidate URLs handed to the serving layer instead of streaming bytes.
    """
    paths: Tuple[str, ...]

    def header(self) -> Tuple[str, str]:
        """Return the (name, value) pair of the redirect-style response header."""
        return REPROXY_HEADER, ' '.join(self.paths)


@dataclass(frozen=True)
class CreateOpenResult:
    """Write target granted by the tracker for a new object."""
    path: str
    devid: str
    fid: str


