"""Read-only plots of decoded recordings.

Design goals:
- Plot against the sample time axis implied by the sampling rate.
- Downsampling is decimation only: keep every Kth sample (no interpolation).
- Never mutate the record.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence

import matplotlib.pyplot as plt
import numpy as np

from alivecor_ecg.export import Scale, scale_factor, ticks_frame
from alivecor_ecg.models.record import EcgRecord


def _decimate(x: np.ndarray, k: int) -> np.ndarray:
    k = int(k)
    if k <= 1:
        return x
    return x[::k]


def plot_leads(
    record: EcgRecord,
    *,
    leads: Optional[Sequence[str]] = None,
    scale: Scale = "mV",
    decimate: int = 1,
    show_ticks: bool = True,
    title: Optional[str] = None,
):
    """One stacked axis per lead, sharing the time axis. Returns the Figure.

    Annotation ticks (if any) are drawn as vertical lines on every axis.
    """
    names = list(leads) if leads is not None else list(record.leads.names)
    if not names:
        raise ValueError("record has no leads to plot")
    missing = [n for n in names if n not in record.leads]
    if missing:
        raise KeyError(f"lead(s) not present in record: {missing}")

    fs = float(record.format.sampling_rate_hz)
    if fs <= 0:
        raise ValueError("sampling_rate_hz must be > 0 to build a time axis")
    k = scale_factor(record.format, scale)
    unit = "mV" if scale == "mV" else "raw units"

    fig, axes = plt.subplots(len(names), 1, sharex=True, squeeze=False, figsize=(12, 1.8 * len(names) + 1))
    tick_t = ticks_frame(record)["t"].to_numpy() if show_ticks else np.array([])

    for ax, name in zip(axes[:, 0], names):
        y = record.leads[name].astype(np.float64) * k
        t = np.arange(y.size, dtype=np.float64) / fs
        ax.plot(_decimate(t, decimate), _decimate(y, decimate), lw=0.7, color="black")
        for tt in tick_t[np.isfinite(tick_t)]:
            ax.axvline(tt, color="tab:red", lw=0.5, alpha=0.5)
        ax.set_ylabel(f"{name} ({unit})")
        ax.grid(True, alpha=0.3)

    axes[-1, 0].set_xlabel("time (s)")
    if title is None:
        title = record.info.date_recorded or record.info.recording_uuid or None
    if title:
        fig.suptitle(title)
    fig.tight_layout()
    return fig


def savefig(fig, output_path: str | Path) -> Path:
    """Save *fig* (format from the suffix, PNG by default) and close it."""
    path = Path(output_path)
    if not path.suffix:
        path = path.with_suffix(".png")
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(str(path), bbox_inches="tight", dpi=150, facecolor="white")
    plt.close(fig)
    return path
