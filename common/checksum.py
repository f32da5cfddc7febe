"""MD5 checksum helpers for chunk payloads."""

import hashlib


def compute_checksum(data: bytes) -> str:
    """
    Compute MD5 checksum for given data.

    Args:
        data: Bytes to compute checksum for

    Returns:
        Lowercase hexadecimal string representation of the 128-bit digest
    """
    return hashlib.md5(data).hexdigest()


class IncrementalChecksumCalculator:
    """
    Calculate MD5 checksum incrementally for streaming data.

    Usage:
        calculator = IncrementalChecksumCalculator()
        calculator.update(piece1)
        calculator.update(piece2)
        final_checksum = calculator.finalize()
    """

    def __init__(self):
        self._hasher = hashlib.md5()
        self._finalized = False

    def update(self, data: bytes) -> None:
        """
        Update checksum with new data.

        Args:
            data: Bytes to add to checksum calculation
        """
        if self._finalized:
            raise ValueError("Cannot update after finalization")
        self._hasher.update(data)

    def finalize(self) -> str:
        """
        Finalize checksum calculation and return result.

        Returns:
            Hexadecimal string representation of the MD5 digest
        """
        self._finalized = True
        return self._hasher.hexdigest()
