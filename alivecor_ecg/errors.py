"""Decode failures.

Every failure is terminal for the decode call that raised it. All kinds derive
from :class:`EcgDecodeError`, itself a ``ValueError``, so callers that only care
about "this file could not be read" can catch one type.
"""

from __future__ import annotations


class EcgDecodeError(ValueError):
    """Base class for every structural decode failure."""


class InvalidSignature(EcgDecodeError):
    """The first 8 bytes are not the ``ALIVE\\0\\0\\0`` signature."""


class UnsupportedVersion(EcgDecodeError):
    """The container version field is missing or not 4."""


class TruncatedBlock(EcgDecodeError):
    """A block header, body or checksum runs past the end of the buffer."""


class MissingFormatBlock(EcgDecodeError):
    """The file has no ``fmt `` block."""


class UnsupportedFormat(EcgDecodeError):
    """The ``fmt `` block declares an ECG format other than 1."""


class MissingInfoBlock(EcgDecodeError):
    """The file has no ``info`` block."""


class MissingLeadBlock(EcgDecodeError):
    """Raised only when the reader is configured with ``require_lead_i=True``."""


class MalformedInfoBlock(EcgDecodeError):
    """The ``info`` block is shorter than its 264-byte field layout."""


class MalformedFormatBlock(EcgDecodeError):
    """The ``fmt `` block is shorter than 8 bytes."""


class MalformedSignalBlock(EcgDecodeError):
    """A lead block has an odd byte length."""


class MalformedAnnotationBlock(EcgDecodeError):
    """The ``ann `` block lacks its header or ends with a partial tick record."""


__all__ = [
    "EcgDecodeError",
    "InvalidSignature",
    "UnsupportedVersion",
    "TruncatedBlock",
    "MissingFormatBlock",
    "UnsupportedFormat",
    "MissingInfoBlock",
    "MissingLeadBlock",
    "MalformedInfoBlock",
    "MalformedFormatBlock",
    "MalformedSignalBlock",
    "MalformedAnnotationBlock",
]
