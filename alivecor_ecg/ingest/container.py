from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple, Union

from alivecor_ecg.errors import InvalidSignature, TruncatedBlock, UnsupportedVersion
from alivecor_ecg.ingest.cursor import ByteCursor
from alivecor_ecg.models.container import RawBlock, RawFile


SIGNATURE = b"ALIVE\x00\x00\x00"
SUPPORTED_VERSION = 4

INFO_ID = b"info"
FORMAT_ID = b"fmt "
ANNOTATION_ID = b"ann "

# (block identifier, lead name) in the fixed device order.
LEAD_BLOCKS: Tuple[Tuple[bytes, str], ...] = (
    (b"ecg ", "leadI"),
    (b"ecg2", "leadII"),
    (b"ecg3", "leadIII"),
    (b"ecg4", "aVR"),
    (b"ecg5", "aVL"),
    (b"ecg6", "aVF"),
)

KNOWN_IDS = frozenset([INFO_ID, FORMAT_ID, ANNOTATION_ID] + [ident for ident, _ in LEAD_BLOCKS])

Identifier = Union[str, bytes]


def read_container(data: bytes) -> RawFile:
    """
    Split a whole file into its header and an ordered tuple of raw blocks.

    Policy:
      - signature and version are checked before any block is read
      - blocks are read until the buffer is exhausted exactly
      - checksums are captured, never validated
      - an empty block sequence is valid here (required blocks are checked by the assembler)
    """
    data = bytes(data)

    signature = data[:len(SIGNATURE)]
    if signature != SIGNATURE:
        raise InvalidSignature(f"not an AliveCor ECG file: signature={signature.hex()} (expected {SIGNATURE.hex()})")

    header = ByteCursor(data, start=len(SIGNATURE), error=UnsupportedVersion, what="file header")
    version = header.read_u32le("version")
    if version != SUPPORTED_VERSION:
        raise UnsupportedVersion(f"unsupported AliveCor ECG file version {version} (expected {SUPPORTED_VERSION})")

    cur = ByteCursor(data, start=header.position, error=TruncatedBlock, what="block")

    blocks: List[RawBlock] = []
    while not cur.at_end():
        offset = cur.position
        identifier = cur.read_bytes(4, f"identifier of block #{len(blocks)}")
        length = cur.read_u32le(f"length of block {identifier!r}")
        content = cur.read_bytes(length, f"content of block {identifier!r}")
        checksum = cur.read_u32le(f"checksum of block {identifier!r}")
        blocks.append(RawBlock(identifier=identifier, length=length, content=content, checksum=checksum, offset=offset))

    return RawFile(signature=signature, version=version, blocks=tuple(blocks))


def _as_identifier(identifier: Identifier) -> bytes:
    if isinstance(identifier, str):
        identifier = identifier.encode("ascii")
    identifier = bytes(identifier)
    if len(identifier) != 4:
        raise ValueError(f"block identifiers are exactly 4 bytes, got {identifier!r}")
    return identifier


def find_block(blocks: Sequence[RawBlock], identifier: Identifier) -> Optional[RawBlock]:
    """First block whose identifier matches exactly (case-sensitive, untrimmed), else None."""
    ident = _as_identifier(identifier)
    for b in blocks:
        if b.identifier == ident:
            return b
    return None


def find_blocks(blocks: Iterable[RawBlock], identifier: Identifier) -> List[RawBlock]:
    ident = _as_identifier(identifier)
    return [b for b in blocks if b.identifier == ident]
