"""AliveCor ECG reader -- Python tooling for AliveCor (Kardia) ECG recordings.

This package provides tools for:
- Decoding the device's binary container (signature 'ALIVE', version 4)
- Reading recording metadata, acquisition format and beat annotations
- Exposing each lead as a read-only int16 numpy array
- Exporting records to JSON-friendly dicts, pandas DataFrames and CSV
- Plotting leads against time

Key principles:
- No scaling on decode: samples are raw units; amplitude resolution is metadata
- No partial results: every structural violation raises a typed EcgDecodeError
- Immutable output: all models are frozen dataclasses

Main subpackages:
- ingest: Container reader, block decoders and the AtcReader facade
- models: Data models (RawFile, RawBlock, EcgRecord and its parts)
"""

from .errors import EcgDecodeError
from .ingest.reader import AtcReader, AtcReaderConfig, decode, read_file
from .models.record import EcgRecord

__all__ = [
    "AtcReader",
    "AtcReaderConfig",
    "EcgDecodeError",
    "EcgRecord",
    "decode",
    "read_file",
]
