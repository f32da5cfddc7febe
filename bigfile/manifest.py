"""Big-file manifest model and its line-oriented text format."""

import re
from dataclasses import dataclass, field
from typing import Dict, List

from common.exceptions import ProtocolError

DEFAULT_DESCRIPTION = "no description"

_PART_LINE = re.compile(
    r'^part (?P<index>\d+) bytes=(?P<bytes>\d+) md5=(?P<md5>[0-9a-fA-F]{32}) paths: (?P<paths>.*)$'
)
_HEADER_KEYS = ('des', 'type', 'compressed', 'filename', 'chunks', 'size')


@dataclass
class ChunkDescriptor:
    """
    Placement and checksum of one chunk.
    """
    index: int
    byte_length: int
    checksum: str
    paths: List[str] = field(default_factory=list)

    def to_line(self) -> str:
        return f"part {self.index} bytes={self.byte_length} md5={self.checksum} paths: {', '.join(self.paths)}"

    @classmethod
    def from_line(cls, line: str) -> 'ChunkDescriptor':
        """
        Parse one ``part`` line.

        Raises:
            ProtocolError: If the line is malformed or lists no paths
        """
        match = _PART_LINE.match(line)
        if match is None:
            raise ProtocolError(f"Malformed manifest part line: {line!r}")
        paths = [p.strip() for p in match.group('paths').split(',') if p.strip()]
        if not paths:
            raise ProtocolError(f"Manifest part {match.group('index')} lists no paths")
        return cls(
            index=int(match.group('index')),
            byte_length=int(match.group('bytes')),
            checksum=match.group('md5').lower(),
            paths=paths,
        )


@dataclass
class BigFileManifest:
    """
    Descriptor of a chunked object: original name, size and chunk table.

    ``chunks`` is keyed by 1-based chunk index.
    """
    filename: str
    total_size: int
    chunk_count: int
    chunks: Dict[int, ChunkDescriptor] = field(default_factory=dict)
    description: str = DEFAULT_DESCRIPTION

    def ordered_chunks(self) -> List[ChunkDescriptor]:
        return [self.chunks[i] for i in range(1, self.chunk_count + 1)]

    def validate(self) -> None:
        """
        Check that the chunk table is complete and consistent.

        Raises:
            ProtocolError: On a gap, an out-of-range index or a size mismatch
        """
        if self.chunk_count < 1:
            raise ProtocolError(f"Manifest declares {self.chunk_count} chunks")
        expected = set(range(1, self.chunk_count + 1))
        missing = sorted(expected - set(self.chunks))
        if missing:
            raise ProtocolError(f"Manifest for {self.filename} is missing chunk{missing[0]}")
        extra = sorted(set(self.chunks) - expected)
        if extra:
            raise ProtocolError(f"Manifest for {self.filename} has unexpected chunk{extra[0]}")
        declared = sum(c.byte_length for c in self.chunks.values())
        if declared != self.total_size:
            raise ProtocolError(
                f"Manifest for {self.filename} chunk sizes sum to {declared}, expected {self.total_size}"
            )

    def render(self) -> str:
        """Serialize to the manifest text format."""
        lines = [
            f"des {self.description}",
            "type file",
            "compressed 0",
            f"filename {self.filename}",
            f"chunks {self.chunk_count}",
            f"size {self.total_size}",
            "",
        ]
        lines.extend(chunk.to_line() for chunk in self.ordered_chunks())
        return '\n'.join(lines) + '\n'

    @classmethod
    def parse(cls, text: str) -> 'BigFileManifest':
        """
        Parse and validate manifest text.

        The header is a block of ``<key> <value>`` lines ended by a blank
        line; every following non-empty line must be a ``part`` line.

        Raises:
            ProtocolError: If the manifest is malformed or incomplete
        """
        lines = text.split('\n')
        header = {}
        position = 0
        for position, line in enumerate(lines):
            if not line.strip():
                break
            key, _, value = line.partition(' ')
            if key not in _HEADER_KEYS:
                raise ProtocolError(f"Unexpected manifest header line: {line!r}")
            header[key] = value
        else:
            raise ProtocolError("Manifest has no chunk section")

        for required in ('filename', 'chunks', 'size'):
            if required not in header:
                raise ProtocolError(f"Manifest header lacks '{required}'")
        if header.get('type', 'file') != 'file':
            raise ProtocolError(f"Unsupported manifest type: {header['type']!r}")
        if header.get('compressed', '0') != '0':
            raise ProtocolError("Compressed manifests are not supported")
        try:
            chunk_count = int(header['chunks'])
            total_size = int(header['size'])
        except ValueError:
            raise ProtocolError("Manifest chunks/size are not numbers")

        chunks = {}
        for line in lines[position + 1:]:
            if not line.strip():
                continue
            chunk = ChunkDescriptor.from_line(line.strip())
            if chunk.index in chunks:
                raise ProtocolError(f"Manifest lists chunk{chunk.index} twice")
            chunks[chunk.index] = chunk

        manifest = cls(
            filename=header['filename'],
            total_size=total_size,
            chunk_count=chunk_count,
            chunks=chunks,
            description=header.get('des', DEFAULT_DESCRIPTION),
        )
        manifest.validate()
        return manifest
