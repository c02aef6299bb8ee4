from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class RawBlock:
    """
    One length-delimited chunk of the container, before any field decoding.

    Notes
    - identifier is kept as the raw 4 bytes; matching is byte-for-byte, so
      trailing spaces ('fmt ', 'ecg ') are significant.
    - checksum is captured as read and never validated.
    - offset is the position of the identifier within the file (diagnostics only).
    """
    identifier: bytes
    length: int
    content: bytes
    checksum: int
    offset: int = 0

    @property
    def tag(self) -> str:
        """Identifier as text (latin-1, so any byte value round-trips)."""
        return self.identifier.decode("latin-1")

    @property
    def size(self) -> int:
        """Total bytes consumed in the file: identifier + length + content + checksum."""
        return 4 + 4 + self.length + 4


@dataclass(frozen=True)
class RawFile:
    signature: bytes
    version: int
    blocks: Tuple[RawBlock, ...] = ()
