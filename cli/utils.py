"""Utility functions for CLI operations."""

import sys
from typing import BinaryIO

from cli.constants import GREEN, RESET


class ProgressReader:
    """Binary-stream wrapper that displays transfer progress to stdout."""

    def __init__(self, source: BinaryIO, total_size: int, label: str):
        """
        Initialize the progress reader.

        Args:
            source: Readable binary stream
            total_size: Total number of bytes expected
            label: Display name for the transfer
        """
        self._source = source
        self.total_size = total_size
        self.label = label
        self._transferred = 0
        self._finished = False

    def read(self, size: int = -1) -> bytes:
        """
        Read bytes from the source and update progress display.

        Args:
            size: Number of bytes to read (-1 for everything)

        Returns:
            Bytes read from the source
        """
        data = self._source.read(size)
        if data:
            self._transferred += len(data)
            self._display_progress()
        elif not self._finished:
            self._finish_progress()
        return data

    def _display_progress(self) -> None:
        progress = (self._transferred / self.total_size) * 100 if self.total_size else 100.0
        sys.stdout.write(
            f"\rUploading {self.label}: {format_file_size(self._transferred)} / "
            f"{format_file_size(self.total_size)} ({GREEN}{progress:.1f}%{RESET})"
        )
        sys.stdout.flush()
        if self._transferred >= self.total_size:
            self._finish_progress()

    def _finish_progress(self) -> None:
        if self._finished:
            return
        self._finished = True
        sys.stdout.write('\n')
        sys.stdout.flush()


def format_file_size(size_bytes: int) -> str:
    """
    Format file size in bytes to human-readable format with appropriate unit.

    Uses binary units (1024-based) and automatically selects the most
    appropriate unit (B, KiB, MiB, GiB, TiB).

    Args:
        size_bytes: File size in bytes

    Returns:
        Formatted string with size and unit (e.g., "1.50 MiB", "512 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"

    units = ['KiB', 'MiB', 'GiB', 'TiB']
    size = size_bytes / 1024.0

    for unit in units:
        if size < 1024.0:
            return f"{size:.2f} {unit}"
        size /= 1024.0

    return f"{size:.2f} PiB"
