from __future__ import annotations

import codecs
from pathlib import Path
from typing import Optional, Sequence

from alivecor_ecg.errors import EcgDecodeError
from alivecor_ecg.export import export_leads_csv, write_json
from alivecor_ecg.ingest.reader import AtcReader, AtcReaderConfig


def _print_summary(path: Path, record) -> None:
    fmt = record.format
    info = record.info
    print(f"[info] {path.name}: file version {record.file_version}")
    print(f"  recorded: {info.date_recorded or '<unknown>'}  uuid: {info.recording_uuid or '<unknown>'}")
    print(f"  recorder: {info.recorder_software} / {info.recorder_hardware}")
    print(
        f"  format: {fmt.sampling_rate_hz} Hz, {fmt.amplitude_resolution_nv} nV/unit, "
        f"mains {fmt.mains_frequency} Hz, polarity={int(fmt.polarity)}"
    )
    filters = [
        name
        for name, on in (
            ("mains", fmt.mains_filter),
            ("low-pass", fmt.low_pass_filter),
            ("baseline", fmt.base_line_filter),
            ("notch", fmt.notch_mains_filter),
            ("enhanced", fmt.enhanced_filter),
        )
        if on
    ]
    print(f"  filters: {', '.join(filters) if filters else 'none'}")
    leads_txt = ", ".join(f"{name}[{data.size}]" for name, data in record.leads.items())
    print(f"  leads: {leads_txt or 'none'}  duration: {record.duration_s:.3f} s")
    if record.annotation is not None:
        ann = record.annotation
        print(f"  annotation: {ann.n_ticks} tick(s) at {ann.tick_count_frequency_hz} Hz")
    for w in record.warnings:
        print(f"[warn] {w}")


def main(argv: Optional[Sequence[str]] = None) -> int:
    import argparse
    import textwrap

    p = argparse.ArgumentParser(
        prog="alivecor-ecg",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description=textwrap.dedent(
            """\
            Decode an AliveCor ECG file and print a summary.

            Optionally write the decoded record as JSON, the leads as CSV
            (with a JSON metadata sidecar), or a PNG plot of the leads.
            """
        ),
    )
    p.add_argument("file", help="AliveCor ECG file (.atc)")
    p.add_argument("--json", dest="json_out", default=None, help="Write the decoded record as JSON to this path")
    p.add_argument("--csv", dest="csv_out", default=None, help="Write leads as CSV (plus .json sidecar) to this path")
    p.add_argument("--plot", dest="plot_out", default=None, help="Write a plot of the leads to this path")
    p.add_argument("--scale", choices=("raw", "mV"), default="raw", help="Sample scale for CSV export")
    p.add_argument("--encoding", default="utf-8", help="Text encoding of info fields")
    p.add_argument("--require-lead-i", action="store_true", help="Fail if the file has no lead I block")
    p.add_argument("--quiet", action="store_true", help="Do not print the summary")

    ns = p.parse_args(list(argv) if argv is not None else None)

    try:
        codecs.lookup(ns.encoding)
    except LookupError:
        print(f"[error] unknown text encoding: {ns.encoding!r}")
        return 1

    cfg = AtcReaderConfig(text_encoding=ns.encoding, require_lead_i=bool(ns.require_lead_i))
    path = Path(ns.file)
    try:
        record = AtcReader(cfg).read(path)
    except FileNotFoundError as e:
        print(f"[error] file not found: {e}")
        return 1
    except OSError as e:
        print(f"[error] cannot read {path}: {e}")
        return 1
    except EcgDecodeError as e:
        print(f"[error] {path.name}: {type(e).__name__}: {e}")
        return 1

    if not ns.quiet:
        _print_summary(path, record)

    if ns.json_out:
        out = write_json(record, ns.json_out)
        print(f"[info] wrote: {out}")
    if ns.csv_out:
        out = export_leads_csv(record, ns.csv_out, scale=ns.scale)
        print(f"[info] wrote: {out}")
    if ns.plot_out:
        import matplotlib

        matplotlib.use("Agg")
        from alivecor_ecg.plotting import plot_leads, savefig

        out = savefig(plot_leads(record), ns.plot_out)
        print(f"[info] wrote: {out}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
