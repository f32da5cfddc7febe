"""Configuration settings for the tracker client."""

import os
from dataclasses import dataclass, field
from typing import Iterable, List, Mapping, Optional

from common.constants import (
    COMMAND_TIMEOUT_SECONDS,
    CONNECT_TIMEOUT_SECONDS,
    READ_TIMEOUT_SECONDS,
)
from common.exceptions import ConfigurationError
from common.types import HostEndpoint


_OPTION_ALIASES = {
    'connectTimeout': 'connect_timeout',
    'connect_timeout': 'connect_timeout',
    'socketTimeout': 'connect_timeout',
    'readTimeout': 'read_timeout',
    'read_timeout': 'read_timeout',
    'streamTimeout': 'read_timeout',
    'commandTimeout': 'command_timeout',
    'command_timeout': 'command_timeout',
}


@dataclass
class ClientConfig:
    """
    Connection and transfer settings for one client instance.

    Attributes:
        trackers: Candidate tracker hosts
        domain: Namespace applied to every request, or None
        connect_timeout: Seconds allowed for each tracker connect attempt
        read_timeout: Seconds allowed for each tracker reply read
        command_timeout: Seconds allowed for each HTTP transfer
    """
    trackers: List[HostEndpoint] = field(default_factory=list)
    domain: Optional[str] = None
    connect_timeout: float = CONNECT_TIMEOUT_SECONDS
    read_timeout: float = READ_TIMEOUT_SECONDS
    command_timeout: float = COMMAND_TIMEOUT_SECONDS

    def __post_init__(self):
        self.trackers = [
            t if isinstance(t, HostEndpoint) else HostEndpoint.parse(t)
            for t in self.trackers
        ]
        if not self.trackers:
            raise ConfigurationError("At least one tracker host is required")
        for name in ('connect_timeout', 'read_timeout', 'command_timeout'):
            if getattr(self, name) <= 0:
                raise ConfigurationError(f"{name} must be positive")

    @classmethod
    def from_options(
        cls,
        hosts: Iterable[str],
        domain: Optional[str] = None,
        options: Optional[Mapping[str, object]] = None
    ) -> 'ClientConfig':
        """
        Build a configuration from host strings and a loose option mapping.

        Args:
            hosts: Tracker addresses as 'host[:port]'
            domain: Optional domain
            options: Timeout overrides keyed by option name

        Returns:
            ClientConfig instance

        Raises:
            ConfigurationError: On an unrecognized option name or invalid value
        """
        kwargs = {}
        for name, value in (options or {}).items():
            attr = _OPTION_ALIASES.get(name)
            if attr is None:
                raise ConfigurationError(f"Unrecognized option: {name}")
            try:
                kwargs[attr] = float(value)
            except (TypeError, ValueError):
                raise ConfigurationError(f"Invalid value for option {name}: {value!r}")
        return cls(trackers=[HostEndpoint.parse(h) for h in hosts], domain=domain, **kwargs)

    @classmethod
    def from_env(cls) -> 'ClientConfig':
        """Build a configuration from MOGILE_* environment variables."""
        hosts = [h for h in os.environ.get("MOGILE_TRACKERS", "localhost:7001").split(",") if h.strip()]
        options = {}
        for env_name, option in (
            ("MOGILE_CONNECT_TIMEOUT", "connect_timeout"),
            ("MOGILE_READ_TIMEOUT", "read_timeout"),
            ("MOGILE_COMMAND_TIMEOUT", "command_timeout"),
        ):
            if os.environ.get(env_name):
                options[option] = os.environ[env_name]
        return cls.from_options(hosts, os.environ.get("MOGILE_DOMAIN") or None, options)
