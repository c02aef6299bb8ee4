from __future__ import annotations

import struct
from typing import Type

from alivecor_ecg.errors import EcgDecodeError


_U16 = struct.Struct("<H")
_U32 = struct.Struct("<I")


class ByteCursor:
    """
    Forward-only little-endian reader over an in-memory buffer.

    Every read advances the position. A read that needs more bytes than remain
    raises ``error`` (the failure kind of whichever layer owns the cursor), so
    callers never see IndexError or struct.error.
    """

    def __init__(
        self,
        data: bytes,
        *,
        start: int = 0,
        error: Type[EcgDecodeError] = EcgDecodeError,
        what: str = "buffer",
    ):
        self._data = memoryview(data)
        self._pos = int(start)
        self._error = error
        self._what = what

    @property
    def position(self) -> int:
        return self._pos

    @property
    def remaining(self) -> int:
        return len(self._data) - self._pos

    def at_end(self) -> bool:
        return self._pos >= len(self._data)

    def _need(self, n: int, field: str) -> None:
        if n > self.remaining:
            raise self._error(
                f"{self._what}: need {n} byte(s) for {field} at offset {self._pos}, "
                f"only {self.remaining} left"
            )

    def read_bytes(self, n: int, field: str = "bytes") -> bytes:
        n = int(n)
        if n < 0:
            raise ValueError("n must be >= 0")
        self._need(n, field)
        out = self._data[self._pos:self._pos + n].tobytes()
        self._pos += n
        return out

    def read_u8(self, field: str = "u8") -> int:
        self._need(1, field)
        v = self._data[self._pos]
        self._pos += 1
        return int(v)

    def read_u16le(self, field: str = "u16") -> int:
        self._need(2, field)
        (v,) = _U16.unpack_from(self._data, self._pos)
        self._pos += 2
        return int(v)

    def read_u32le(self, field: str = "u32") -> int:
        self._need(4, field)
        (v,) = _U32.unpack_from(self._data, self._pos)
        self._pos += 4
        return int(v)

    def read_bits(self, field: str = "flags") -> "BitCursor":
        """Consume one byte and return a bit cursor over it."""
        return BitCursor(self.read_u8(field))


class BitCursor:
    """Reads the bits of a single byte, least-significant bit first."""

    def __init__(self, byte: int):
        if not 0 <= int(byte) <= 0xFF:
            raise ValueError(f"not a byte: {byte!r}")
        self._byte = int(byte)
        self._bit = 0

    @property
    def remaining(self) -> int:
        return 8 - self._bit

    def read_bit(self) -> int:
        if self._bit >= 8:
            raise ValueError("all 8 bits already consumed")
        v = (self._byte >> self._bit) & 1
        self._bit += 1
        return v

    def read_flag(self) -> bool:
        return self.read_bit() == 1

    def skip(self, n: int = 1) -> None:
        for _ in range(int(n)):
            self.read_bit()
