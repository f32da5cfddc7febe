"""Project-wide constants (default ports, timeouts, chunking limits, key prefixes)."""

DEFAULT_TRACKER_PORT: int = 7001

CONNECT_TIMEOUT_SECONDS: float = 0.01
READ_TIMEOUT_SECONDS: float = 1.0
COMMAND_TIMEOUT_SECONDS: float = 4.0

MEBIBYTE: int = 1024 * 1024
BIG_FILE_THRESHOLD_BYTES: int = 64 * MEBIBYTE
CHUNK_SIZE_BYTES: int = 64 * MEBIBYTE  # 64 MiB default chunk size
MAX_BUFFER_BYTES: int = 256 * MEBIBYTE

REPLICATION_WAIT_SECONDS: int = 30
REPLICATION_TARGET: int = 2
REPLICATION_POLL_INTERVAL_SECONDS: float = 1.0

STREAM_PIECE_SIZE_BYTES: int = 8192

LIST_KEYS_DEFAULT_LIMIT: int = 1000

BIG_INFO_PREFIX: str = "_big_info:"
BIG_PRE_PREFIX: str = "_big_pre:"
CHUNK_KEY_SEPARATOR: str = ","

REPROXY_HEADER: str = "X-Reproxy-URL"
