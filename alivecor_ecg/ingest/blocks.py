"""Per-block field decoders.

Each decoder takes the content bytes of one block and returns a frozen model,
or raises the Malformed* failure of its block type. Decoders are independent
of each other and of the container; the assembler decides which block feeds
which decoder.

Layouts (all multi-byte integers little-endian)
-----------------------------------------------
info : 7 NUL-padded text fields of 32, 40, 44, 32, 32, 32, 52 bytes
fmt  : u8 format, u16 rate, u16 resolution, u8 flags (LSB first), u16 reserved
ann  : u32 tick frequency, then repeating {u32 offset, u16 beat type}
ecg* : repeating int16 samples
"""

from __future__ import annotations

from typing import Tuple

import numpy as np

from alivecor_ecg.errors import (
    MalformedAnnotationBlock,
    MalformedFormatBlock,
    MalformedInfoBlock,
    MalformedSignalBlock,
)
from alivecor_ecg.ingest.cursor import ByteCursor
from alivecor_ecg.models.record import EcgAnnotation, EcgFormat, EcgInfo


INFO_LAYOUT: Tuple[Tuple[str, int], ...] = (
    ("date_recorded", 32),
    ("recording_uuid", 40),
    ("mobile_phone_uuid", 44),
    ("mobile_phone_model", 32),
    ("recorder_software", 32),
    ("recorder_hardware", 32),
    ("device_data", 52),
)
INFO_SIZE = sum(n for _, n in INFO_LAYOUT)  # 264

FORMAT_SIZE = 8

SAMPLE_DTYPE = np.dtype("<i2")
TICK_DTYPE = np.dtype([("offset", "<u4"), ("beat_type", "<u2")])  # packed, itemsize 6
TICK_HEADER_SIZE = 4


def _text(raw: bytes, encoding: str, errors: str) -> str:
    nul = raw.find(b"\x00")
    if nul >= 0:
        raw = raw[:nul]
    return raw.decode(encoding, errors=errors).strip()


def decode_info(content: bytes, *, encoding: str = "utf-8", errors: str = "replace") -> EcgInfo:
    if len(content) < INFO_SIZE:
        raise MalformedInfoBlock(f"info block has {len(content)} bytes, expected at least {INFO_SIZE}")
    cur = ByteCursor(content, error=MalformedInfoBlock, what="info block")
    values = {name: _text(cur.read_bytes(width, name), encoding, errors) for name, width in INFO_LAYOUT}
    return EcgInfo(**values)


def decode_format(content: bytes) -> EcgFormat:
    if len(content) < FORMAT_SIZE:
        raise MalformedFormatBlock(f"fmt block has {len(content)} bytes, expected at least {FORMAT_SIZE}")
    cur = ByteCursor(content, error=MalformedFormatBlock, what="fmt block")
    ecg_format = cur.read_u8("ecgFormat")
    sampling_rate_hz = cur.read_u16le("samplingRateHz")
    amplitude_resolution_nv = cur.read_u16le("amplitudeResolutionNV")

    bits = cur.read_bits("flags")
    polarity = bits.read_flag()
    mains_frequency = 60 if bits.read_flag() else 50
    mains_filter = bits.read_flag()
    low_pass_filter = bits.read_flag()
    base_line_filter = bits.read_flag()
    notch_mains_filter = bits.read_flag()
    enhanced_filter = bits.read_flag()
    bits.skip(1)  # unused

    reserved = cur.read_u16le("reserved")
    return EcgFormat(
        ecg_format=ecg_format,
        sampling_rate_hz=sampling_rate_hz,
        amplitude_resolution_nv=amplitude_resolution_nv,
        polarity=polarity,
        mains_frequency=mains_frequency,
        mains_filter=mains_filter,
        low_pass_filter=low_pass_filter,
        base_line_filter=base_line_filter,
        notch_mains_filter=notch_mains_filter,
        enhanced_filter=enhanced_filter,
        reserved=reserved,
    )


def _frozen(arr: np.ndarray) -> np.ndarray:
    arr.setflags(write=False)
    return arr


def decode_signal(content: bytes) -> np.ndarray:
    """Whole block as int16 samples, native byte order, read-only. No scaling."""
    n = len(content)
    if n % SAMPLE_DTYPE.itemsize != 0:
        raise MalformedSignalBlock(f"signal block length {n} is not a multiple of {SAMPLE_DTYPE.itemsize}")
    return _frozen(np.frombuffer(content, dtype=SAMPLE_DTYPE).astype(np.int16))


def decode_annotation(content: bytes) -> EcgAnnotation:
    n = len(content)
    if n < TICK_HEADER_SIZE:
        raise MalformedAnnotationBlock(f"ann block has {n} bytes, need {TICK_HEADER_SIZE} for tickCountFrequencyHz")
    body = n - TICK_HEADER_SIZE
    rem = body % TICK_DTYPE.itemsize
    if rem != 0:
        raise MalformedAnnotationBlock(
            f"ann block ends with a partial tick record: {body} byte(s) after the header "
            f"is not a multiple of {TICK_DTYPE.itemsize} ({rem} trailing)"
        )

    cur = ByteCursor(content, error=MalformedAnnotationBlock, what="ann block")
    tick_hz = cur.read_u32le("tickCountFrequencyHz")
    recs = np.frombuffer(content, dtype=TICK_DTYPE, offset=cur.position)
    return EcgAnnotation(
        tick_count_frequency_hz=tick_hz,
        offsets=_frozen(recs["offset"].astype(np.uint32)),
        beat_types=_frozen(recs["beat_type"].astype(np.uint16)),
    )
