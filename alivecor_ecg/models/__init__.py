from .container import RawBlock, RawFile
from .record import (
    FILE_VERSION,
    LEAD_NAMES,
    EcgAnnotation,
    EcgFormat,
    EcgInfo,
    EcgLeads,
    EcgRecord,
    Tick,
)

__all__ = [
    "RawBlock",
    "RawFile",
    "FILE_VERSION",
    "LEAD_NAMES",
    "EcgAnnotation",
    "EcgFormat",
    "EcgInfo",
    "EcgLeads",
    "EcgRecord",
    "Tick",
]
