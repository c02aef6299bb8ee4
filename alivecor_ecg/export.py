"""Export helpers: JSON-friendly dicts, pandas DataFrames and CSV files.

These helpers sit outside the decoder; they never change decoded values.

Naming
------
``record_to_dict`` uses the camelCase keys of the device's own JSON form
(``fileVersion``, ``samplingRateHz``, ``leadI`` ...), so exported files can be
consumed by tools written against that form.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Literal, Optional, Sequence

import numpy as np
import pandas as pd

from alivecor_ecg.models.record import EcgAnnotation, EcgFormat, EcgInfo, EcgRecord


Scale = Literal["raw", "mV"]

_INFO_KEYS = {
    "date_recorded": "dateRecorded",
    "recording_uuid": "recordingUuid",
    "mobile_phone_uuid": "mobilePhoneUuid",
    "mobile_phone_model": "mobilePhoneModel",
    "recorder_software": "recorderSoftware",
    "recorder_hardware": "recorderHardware",
    "device_data": "deviceData",
}

_FORMAT_KEYS = {
    "ecg_format": "ecgFormat",
    "sampling_rate_hz": "samplingRateHz",
    "amplitude_resolution_nv": "amplitudeResolutionNV",
    "polarity": "polarity",
    "mains_frequency": "mainsFrequency",
    "mains_filter": "mainsFilter",
    "low_pass_filter": "lowPassFilter",
    "base_line_filter": "baseLineFilter",
    "notch_mains_filter": "notchMainsFilter",
    "enhanced_filter": "enhancedFilter",
    "reserved": "reserved",
}


def info_to_dict(info: EcgInfo) -> Dict[str, str]:
    return {key: getattr(info, attr) for attr, key in _INFO_KEYS.items()}


def format_to_dict(fmt: EcgFormat) -> Dict[str, Any]:
    return {key: getattr(fmt, attr) for attr, key in _FORMAT_KEYS.items()}


def annotation_to_dict(ann: EcgAnnotation) -> Dict[str, Any]:
    return {
        "tickCountFrequencyHz": ann.tick_count_frequency_hz,
        "ticks": [{"offset": t.offset, "beatType": t.beat_type} for t in ann.ticks],
    }


def record_to_dict(record: EcgRecord, *, include_warnings: bool = False) -> Dict[str, Any]:
    """Return a JSON-serialisable dict. ``annotation`` is omitted when absent."""
    d: Dict[str, Any] = {
        "fileVersion": record.file_version,
        "info": info_to_dict(record.info),
        "format": format_to_dict(record.format),
        "leads": {name: data.tolist() for name, data in record.leads.items()},
    }
    if record.annotation is not None:
        d["annotation"] = annotation_to_dict(record.annotation)
    if include_warnings:
        d["warnings"] = list(record.warnings)
    return d


def write_json(record: EcgRecord, output_path: str | Path, *, indent: Optional[int] = None) -> Path:
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(record_to_dict(record), f, indent=indent)
    return output_path


def scale_factor(fmt: EcgFormat, scale: Scale) -> float:
    """Multiplier from raw sample units to the requested scale."""
    if scale == "raw":
        return 1.0
    if scale == "mV":
        return fmt.amplitude_resolution_nv / 1e6
    raise ValueError(f"Unknown scale: {scale!r}")


def leads_frame(
    record: EcgRecord,
    *,
    scale: Scale = "raw",
    leads: Optional[Sequence[str]] = None,
) -> pd.DataFrame:
    """One row per sample: ``t`` [s] followed by one column per lead.

    Leads of unequal length are padded with NaN (the column then becomes float).
    With ``scale="raw"`` and equal lengths, lead columns keep the int16 dtype.
    """
    names = list(leads) if leads is not None else list(record.leads.names)
    missing = [n for n in names if n not in record.leads]
    if missing:
        raise KeyError(f"lead(s) not present in record: {missing}")

    n = max((int(record.leads[name].size) for name in names), default=0)
    fs = record.format.sampling_rate_hz
    t = np.arange(n, dtype=np.float64) / float(fs) if fs > 0 else np.full((n,), np.nan)

    k = scale_factor(record.format, scale)
    cols: Dict[str, Any] = {"t": t}
    for name in names:
        data = record.leads[name]
        col: np.ndarray = data if scale == "raw" else data.astype(np.float64) * k
        if col.size < n:
            pad = np.full((n,), np.nan)
            pad[: col.size] = col
            col = pad
        cols[name] = col
    return pd.DataFrame(cols)


def ticks_frame(record: EcgRecord) -> pd.DataFrame:
    """Annotation ticks as ``offset``, ``beat_type`` and ``t`` [s]; empty when absent."""
    ann = record.annotation
    if ann is None:
        return pd.DataFrame(
            {
                "offset": np.array([], dtype=np.uint32),
                "beat_type": np.array([], dtype=np.uint16),
                "t": np.array([], dtype=np.float64),
            }
        )
    fs = ann.tick_count_frequency_hz
    t = ann.offsets.astype(np.float64) / float(fs) if fs > 0 else np.full((ann.n_ticks,), np.nan)
    return pd.DataFrame({"offset": ann.offsets, "beat_type": ann.beat_types, "t": t})


def record_metadata(record: EcgRecord) -> Dict[str, Any]:
    """Flat provenance dictionary (for CSV sidecars)."""
    d: Dict[str, Any] = {"fileVersion": record.file_version}
    d.update(info_to_dict(record.info))
    d.update(format_to_dict(record.format))
    d["leads"] = list(record.leads.names)
    d["durationS"] = record.duration_s
    if record.annotation is not None:
        d["tickCountFrequencyHz"] = record.annotation.tick_count_frequency_hz
        d["nTicks"] = record.annotation.n_ticks
    if record.warnings:
        d["warnings"] = list(record.warnings)
    return d


def export_leads_csv(
    record: EcgRecord,
    output_path: str | Path,
    *,
    scale: Scale = "raw",
    write_sidecar_json: bool = True,
) -> Path:
    """Write leads to CSV with an optional metadata JSON sidecar next to it.

    Returns
    -------
    Path
        Path to the written CSV file
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    leads_frame(record, scale=scale).to_csv(output_path, index=False)

    if write_sidecar_json:
        meta = record_metadata(record)
        meta["scale"] = scale
        json_path = output_path.with_suffix(".json")
        with open(json_path, "w", encoding="utf-8") as f:
            json.dump(meta, f, indent=2, default=str)

    return output_path
