"""Ingest package - container reader and block decoders.

This package handles:
- Splitting a file into its header and raw blocks (container)
- Locating blocks by their 4-byte identifier
- Decoding info, fmt, ann and ecg* blocks into frozen models
- Assembling the final EcgRecord (reader)

Design principle:
- Decoding is a pure function of the byte buffer; file access lives only in AtcReader.read
- Any structural violation raises a typed EcgDecodeError; nothing is partially returned
"""
from .container import LEAD_BLOCKS, find_block, find_blocks, read_container
from .reader import AtcReader, AtcReaderConfig, decode, read_file

__all__ = [
    "LEAD_BLOCKS",
    "find_block",
    "find_blocks",
    "read_container",
    "AtcReader",
    "AtcReaderConfig",
    "decode",
    "read_file",
]
