"""Configuration management for the mogclient CLI."""

import json
import os
import shutil
import tempfile
from pathlib import Path
from typing import Optional

from bigfile.config import ChunkingConfig
from common.constants import MEBIBYTE
from common.logging_config import get_logger
from tracker.config import ClientConfig

logger = get_logger(__name__)


class Config:
    """Manages CLI configuration stored in JSON file."""

    DEFAULT_CONFIG = {
        "trackers": [h.strip() for h in os.environ.get("MOGILE_TRACKERS", "localhost:7001").split(",") if h.strip()],
        "domain": os.environ.get("MOGILE_DOMAIN") or None,
        "default_class": "default",
        "connect_timeout": 0.5,
        "read_timeout": 5.0,
        "command_timeout": 60.0,
        "chunk_size_mb": 64,
        "big_threshold_mb": 64,
        "max_buffer_mb": 256,
        "replication_wait_seconds": 30,
    }

    def __init__(self, config_path: Path):
        """
        Initialize configuration manager.

        Args:
            config_path: Path to config JSON file (typically ~/.mogile/config.json)
        """
        self.config_path = config_path
        self.data = self._load()

    def _load(self) -> dict:
        """
        Load configuration from file, creating defaults if necessary.

        Returns:
            Configuration dictionary
        """
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
        except PermissionError:
            self.config_path = Path(tempfile.gettempdir()) / '.mogile' / 'config.json'
            self.config_path.parent.mkdir(parents=True, exist_ok=True)

        if self.config_path.exists():
            try:
                with open(self.config_path, 'r') as f:
                    data = json.load(f)
                config = self.DEFAULT_CONFIG.copy()
                config.update(data)
                return config
            except (json.JSONDecodeError, IOError) as e:
                logger.warning(f"Config file {self.config_path} unreadable, using defaults: {e}")
                backup_path = self.config_path.with_suffix('.json.bak')
                try:
                    shutil.copy(self.config_path, backup_path)
                except OSError as copy_error:
                    logger.warning(f"Could not back up config file: {copy_error}")
                return self.DEFAULT_CONFIG.copy()
        else:
            config = self.DEFAULT_CONFIG.copy()
            try:
                with open(self.config_path, 'w') as f:
                    json.dump(config, f, indent=2)
            except IOError as e:
                logger.warning(f"Could not write default config file: {e}")
            return config

    def save(self) -> None:
        """Save current configuration to file."""
        try:
            with open(self.config_path, 'w') as f:
                json.dump(self.data, f, indent=2)
        except IOError as e:
            logger.warning(f"Could not save config file: {e}")

    def get_default_class(self) -> str:
        return self.data.get('default_class', 'default')

    def set_domain(self, domain: Optional[str]) -> None:
        """
        Set the domain and save to file.

        Args:
            domain: Domain name, or None to clear it
        """
        self.data['domain'] = domain
        self.save()

    def get_client_config(self) -> ClientConfig:
        """
        Build the tracker client configuration.

        Returns:
            ClientConfig instance

        Raises:
            ConfigurationError: If trackers or timeouts are invalid
        """
        options = {
            name: self.data[name]
            for name in ('connect_timeout', 'read_timeout', 'command_timeout')
            if self.data.get(name) is not None
        }
        return ClientConfig.from_options(self.data.get('trackers', []), self.data.get('domain'), options)

    def get_chunking_config(self) -> ChunkingConfig:
        """Build the big-file configuration from the *_mb settings."""
        return ChunkingConfig(
            big_threshold_bytes=int(self.data.get('big_threshold_mb', 64)) * MEBIBYTE,
            chunk_size_bytes=int(self.data.get('chunk_size_mb', 64)) * MEBIBYTE,
            max_buffer_bytes=int(self.data.get('max_buffer_mb', 256)) * MEBIBYTE,
            replication_wait_seconds=self.data.get('replication_wait_seconds', 30),
        )
