from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional
import logging

import numpy as np

from alivecor_ecg.errors import (
    MissingFormatBlock,
    MissingInfoBlock,
    MissingLeadBlock,
    UnsupportedFormat,
)
from alivecor_ecg.ingest.blocks import (
    FORMAT_SIZE,
    INFO_SIZE,
    decode_annotation,
    decode_format,
    decode_info,
    decode_signal,
)
from alivecor_ecg.ingest.container import (
    ANNOTATION_ID,
    FORMAT_ID,
    INFO_ID,
    KNOWN_IDS,
    LEAD_BLOCKS,
    find_block,
    read_container,
)
from alivecor_ecg.models.container import RawFile
from alivecor_ecg.models.record import FILE_VERSION, EcgLeads, EcgRecord


logger = logging.getLogger(__name__)

SUPPORTED_ECG_FORMAT = 1


@dataclass(frozen=True)
class AtcReaderConfig:
    """
    Reader configuration for AliveCor ECG files.

    text_encoding / text_errors:
      Codec and error policy for the fixed-width text fields of the info block.
    require_lead_i:
      - False: a file without an 'ecg ' block decodes to a record without leadI.
      - True: such a file fails with MissingLeadBlock.
    collect_warnings:
      Record non-fatal diagnostics (unknown or repeated blocks, surplus bytes)
      on EcgRecord.warnings. Decoded values are identical either way.
    """
    text_encoding: str = "utf-8"
    text_errors: str = "replace"
    require_lead_i: bool = False
    collect_warnings: bool = True


class AtcReader:
    """
    Decoder for AliveCor ECG files (signature 'ALIVE', container version 4, ECG format 1).

    HARD REQUIREMENTS:
      - 'fmt ' and 'info' blocks must be present, in any order
      - checksums are read but never validated
      - any failure aborts the whole decode (no partial records)
    """

    def __init__(self, config: Optional[AtcReaderConfig] = None):
        self.config = config or AtcReaderConfig()

    def read(self, file_path: str | Path) -> EcgRecord:
        path = Path(file_path).expanduser().resolve()
        if not path.exists():
            raise FileNotFoundError(str(path))
        data = path.read_bytes()
        logger.info("reading %s (%d bytes)", path.name, len(data))
        return self.decode(data)

    def decode(self, data: bytes) -> EcgRecord:
        cfg = self.config
        raw = read_container(data)
        blocks = raw.blocks
        logger.debug(
            "container version %d: %s",
            raw.version,
            ", ".join(f"{b.tag!r}@{b.offset}({b.length})" for b in blocks) or "no blocks",
        )

        fmt_block = find_block(blocks, FORMAT_ID)
        if fmt_block is None:
            raise MissingFormatBlock("no 'fmt ' block in AliveCor ECG file")
        fmt = decode_format(fmt_block.content)
        if fmt.ecg_format != SUPPORTED_ECG_FORMAT:
            raise UnsupportedFormat(
                f"unsupported ECG format {fmt.ecg_format} in AliveCor ECG file (expected {SUPPORTED_ECG_FORMAT})"
            )

        info_block = find_block(blocks, INFO_ID)
        if info_block is None:
            raise MissingInfoBlock("no 'info' block in AliveCor ECG file")
        info = decode_info(info_block.content, encoding=cfg.text_encoding, errors=cfg.text_errors)

        ann_block = find_block(blocks, ANNOTATION_ID)
        annotation = decode_annotation(ann_block.content) if ann_block is not None else None

        by_name: Dict[str, np.ndarray] = {}
        for ident, name in LEAD_BLOCKS:
            lead_block = find_block(blocks, ident)
            if lead_block is not None:
                by_name[name] = decode_signal(lead_block.content)
        if cfg.require_lead_i and "leadI" not in by_name:
            raise MissingLeadBlock("no 'ecg ' (lead I) block in AliveCor ECG file")

        warnings = _diagnostics(raw) if cfg.collect_warnings else []
        for w in warnings:
            logger.debug(w)

        return EcgRecord(
            info=info,
            format=fmt,
            leads=EcgLeads.from_mapping(by_name),
            annotation=annotation,
            warnings=tuple(warnings),
            file_version=FILE_VERSION,
        )


def _diagnostics(raw: RawFile) -> List[str]:
    warnings: List[str] = []
    counts = Counter(b.identifier for b in raw.blocks)
    seen = set()
    for b in raw.blocks:
        if b.identifier in seen:
            continue
        seen.add(b.identifier)
        if b.identifier not in KNOWN_IDS:
            warnings.append(f"ignored unknown block {b.tag!r} at offset {b.offset} ({b.length} bytes)")
        elif counts[b.identifier] > 1:
            warnings.append(
                f"block {b.tag!r} appears {counts[b.identifier]} times; using the first at offset {b.offset}"
            )

    info_block = find_block(raw.blocks, INFO_ID)
    if info_block is not None and info_block.length > INFO_SIZE:
        warnings.append(f"info block has {info_block.length - INFO_SIZE} surplus byte(s) after {INFO_SIZE}; ignored")
    fmt_block = find_block(raw.blocks, FORMAT_ID)
    if fmt_block is not None and fmt_block.length > FORMAT_SIZE:
        warnings.append(f"fmt block has {fmt_block.length - FORMAT_SIZE} surplus byte(s) after {FORMAT_SIZE}; ignored")
    return warnings


def decode(data: bytes) -> EcgRecord:
    """Decode a complete AliveCor ECG file held in memory, with the default configuration."""
    return AtcReader().decode(data)


def read_file(file_path: str | Path, config: Optional[AtcReaderConfig] = None) -> EcgRecord:
    return AtcReader(config).read(file_path)
