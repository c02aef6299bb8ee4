from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, Optional, Tuple

import numpy as np


FILE_VERSION = "1.6"

# (attribute, lead name) in the fixed device order.
LEAD_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("lead_i", "leadI"),
    ("lead_ii", "leadII"),
    ("lead_iii", "leadIII"),
    ("avr", "aVR"),
    ("avl", "aVL"),
    ("avf", "aVF"),
)
LEAD_NAMES: Tuple[str, ...] = tuple(name for _, name in LEAD_FIELDS)
_ATTR_BY_NAME: Dict[str, str] = {name: attr for attr, name in LEAD_FIELDS}


@dataclass(frozen=True)
class EcgInfo:
    """Recording metadata from the ``info`` block. All fields are trimmed text."""
    date_recorded: str
    recording_uuid: str
    mobile_phone_uuid: str
    mobile_phone_model: str
    recorder_software: str
    recorder_hardware: str
    device_data: str


@dataclass(frozen=True)
class EcgFormat:
    """
    Acquisition format from the ``fmt `` block.

    mains_frequency is already mapped from its flag bit (0 -> 50 Hz, 1 -> 60 Hz).
    amplitude_resolution_nv is the voltage of one raw sample unit in nanovolts;
    samples are never scaled by the decoder.
    """
    ecg_format: int
    sampling_rate_hz: int
    amplitude_resolution_nv: int
    polarity: bool
    mains_frequency: int
    mains_filter: bool
    low_pass_filter: bool
    base_line_filter: bool
    notch_mains_filter: bool
    enhanced_filter: bool
    reserved: int = 0


@dataclass(frozen=True)
class Tick:
    offset: int
    beat_type: int


@dataclass(frozen=True, eq=False)
class EcgAnnotation:
    """
    Beat annotations from the ``ann `` block.

    offsets and beat_types are parallel arrays in file order, shape ``(n_ticks,)``.
    Offsets count ticks at ``tick_count_frequency_hz``.
    """
    tick_count_frequency_hz: int
    offsets: np.ndarray  # uint32
    beat_types: np.ndarray  # uint16

    @property
    def n_ticks(self) -> int:
        return int(self.offsets.size)

    @property
    def ticks(self) -> Tuple[Tick, ...]:
        return tuple(
            Tick(offset=int(o), beat_type=int(b))
            for o, b in zip(self.offsets.tolist(), self.beat_types.tolist())
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EcgAnnotation):
            return NotImplemented
        return (
            self.tick_count_frequency_hz == other.tick_count_frequency_hz
            and np.array_equal(self.offsets, other.offsets)
            and np.array_equal(self.beat_types, other.beat_types)
        )

    __hash__ = None  # arrays are not hashable


@dataclass(frozen=True, eq=False)
class EcgLeads:
    """
    Raw int16 samples per lead. Absent leads are None.

    Also behaves as a read-only mapping keyed by lead name
    (``"leadI"``, ``"leadII"``, ``"leadIII"``, ``"aVR"``, ``"aVL"``, ``"aVF"``)
    over the leads that are present, iterated in the fixed lead order.
    """
    lead_i: Optional[np.ndarray] = None
    lead_ii: Optional[np.ndarray] = None
    lead_iii: Optional[np.ndarray] = None
    avr: Optional[np.ndarray] = None
    avl: Optional[np.ndarray] = None
    avf: Optional[np.ndarray] = None

    @classmethod
    def from_mapping(cls, by_name: Dict[str, np.ndarray]) -> "EcgLeads":
        unknown = set(by_name) - set(LEAD_NAMES)
        if unknown:
            raise KeyError(f"unknown lead name(s): {sorted(unknown)}")
        return cls(**{_ATTR_BY_NAME[name]: data for name, data in by_name.items()})

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(name for attr, name in LEAD_FIELDS if getattr(self, attr) is not None)

    def get(self, name: str, default=None):
        attr = _ATTR_BY_NAME.get(name)
        if attr is None:
            return default
        value = getattr(self, attr)
        return default if value is None else value

    def __getitem__(self, name: str) -> np.ndarray:
        value = self.get(name)
        if value is None:
            raise KeyError(name)
        return value

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.get(name) is not None

    def __iter__(self) -> Iterator[str]:
        return iter(self.names)

    def __len__(self) -> int:
        return len(self.names)

    def items(self) -> Iterator[Tuple[str, np.ndarray]]:
        for name in self.names:
            yield name, self[name]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EcgLeads):
            return NotImplemented
        return self.names == other.names and all(
            np.array_equal(data, other[name]) for name, data in self.items()
        )

    __hash__ = None  # arrays are not hashable


@dataclass(frozen=True)
class EcgRecord:
    """
    Fully decoded recording.

    Notes
    - file_version is a fixed tag for the decoded layout, not the container version.
    - warnings carries non-fatal diagnostics (ignored or repeated blocks, surplus bytes).
      They never change the decoded values.
    """
    info: EcgInfo
    format: EcgFormat
    leads: EcgLeads
    annotation: Optional[EcgAnnotation] = None
    warnings: Tuple[str, ...] = ()
    file_version: str = FILE_VERSION

    @property
    def duration_s(self) -> float:
        """Length of the longest lead in seconds (0.0 without leads or sampling rate)."""
        n = max((int(v.size) for _, v in self.leads.items()), default=0)
        fs = self.format.sampling_rate_hz
        if n == 0 or fs <= 0:
            return 0.0
        return n / float(fs)

