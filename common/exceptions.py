"""Exception taxonomy shared by the tracker, storage and big-file layers."""


class MogileError(Exception):
    """
    Base exception class for all client errors.

    ``retryable`` tells callers whether repeating the same operation
    (possibly after a reconnect) can succeed.
    """
    retryable = False


class ConfigurationError(MogileError):
    """
    Raised for invalid configuration values, sizes, thresholds or arguments.
    """
    pass


class TrackerConnectionError(MogileError):
    """
    Raised when no tracker host could be reached.
    """
    retryable = True


class WriteError(MogileError):
    """
    Raised when a command could not be written to the tracker socket.
    """
    pass


class ReadError(MogileError):
    """
    Raised when no reply line could be read from the tracker socket.
    """
    pass


class TrackerTimeoutError(ReadError):
    """
    Raised when the tracker did not reply within the configured read timeout.
    """
    retryable = True


class ProtocolError(MogileError):
    """
    Raised when a reply violates the wire format or the expected reply shape.
    """
    pass


class RemoteError(ProtocolError):
    """
    Raised when the tracker answers with a well-formed ``ERR`` reply.
    """

    def __init__(self, line: str, code: str = "", message: str = ""):
        super().__init__(line)
        self.line = line
        self.code = code
        self.message = message


class TransferError(MogileError):
    """
    Raised when an HTTP PUT or GET against a storage node fails.
    """
    retryable = True


class UnavailableError(MogileError):
    """
    Raised when none of the replica paths of an object could be opened.
    """
    retryable = True


class IntegrityError(MogileError):
    """
    Raised when a downloaded chunk does not match its recorded checksum or length.
    """
    pass


class ReplicationTimeoutError(MogileError):
    """
    Raised when a chunk never reached the replication target in time.
    """
    pass


class OperationCancelledError(MogileError):
    """
    Raised when the caller aborts a replication wait.
    """
    pass
