import tempfile
import unittest
from pathlib import Path

import numpy as np

from alivecor_ecg import decode, errors, read_file
from alivecor_ecg.errors import (
    EcgDecodeError,
    InvalidSignature,
    MalformedSignalBlock,
    MissingFormatBlock,
    MissingInfoBlock,
    MissingLeadBlock,
    UnsupportedFormat,
)
from alivecor_ecg.export import record_to_dict
from alivecor_ecg.ingest.reader import AtcReader, AtcReaderConfig

from ._synth import (
    ann_content,
    atc_file,
    block,
    fmt_content,
    info_content,
    minimal_file,
    samples_content,
)


class TestDecodeMinimal(unittest.TestCase):
    def test_fmt_info_lead_i(self):
        rec = decode(minimal_file())
        self.assertEqual(rec.file_version, "1.6")
        self.assertEqual(rec.format.sampling_rate_hz, 300)
        self.assertEqual(rec.format.amplitude_resolution_nv, 1000)
        self.assertEqual(rec.format.mains_frequency, 50)
        self.assertTrue(rec.format.polarity)
        self.assertEqual(rec.leads["leadI"].tolist(), [100, -200, 300])
        self.assertEqual(rec.leads.names, ("leadI",))
        self.assertIsNone(rec.leads.lead_ii)
        self.assertNotIn("leadII", rec.leads)
        self.assertIsNone(rec.annotation)
        self.assertEqual(rec.info.date_recorded, "2020-01-01")
        self.assertEqual(rec.warnings, ())
        self.assertAlmostEqual(rec.duration_s, 3 / 300)

    def test_deterministic(self):
        data = atc_file(
            block(b"fmt ", fmt_content(flags=0x7F)),
            block(b"info", info_content(recording_uuid="abc")),
            block(b"ann ", ann_content(1000, [(10, 1), (20, 2)])),
            block(b"ecg ", samples_content([1, 2, 3])),
            block(b"ecg4", samples_content([-1, -2])),
        )
        a = decode(data)
        b = decode(data)
        self.assertIsNot(a, b)
        self.assertEqual(a, b)
        self.assertEqual(a.leads, b.leads)
        self.assertEqual(a.annotation, b.annotation)
        self.assertEqual(record_to_dict(a, include_warnings=True), record_to_dict(b, include_warnings=True))

    def test_records_differ_on_samples(self):
        a = decode(minimal_file(samples=(1, 2, 3)))
        b = decode(minimal_file(samples=(1, 2, 4)))
        self.assertNotEqual(a, b)
        self.assertNotEqual(a.leads, b.leads)

    def test_records_differ_on_ticks(self):
        def with_ticks(ticks):
            return decode(atc_file(
                block(b"fmt ", fmt_content()),
                block(b"info", info_content()),
                block(b"ann ", ann_content(1000, ticks)),
            ))

        self.assertEqual(with_ticks([(10, 1)]).annotation, with_ticks([(10, 1)]).annotation)
        self.assertNotEqual(with_ticks([(10, 1)]).annotation, with_ticks([(10, 2)]).annotation)

    def test_record_is_unhashable(self):
        with self.assertRaises(TypeError):
            hash(decode(minimal_file()))

    def test_mains_frequency_60(self):
        rec = decode(minimal_file(flags=0x02))
        self.assertEqual(rec.format.mains_frequency, 60)
        self.assertFalse(rec.format.polarity)


class TestRequiredBlocks(unittest.TestCase):
    def test_missing_fmt_any_order(self):
        for blocks in (
            [block(b"info", info_content()), block(b"ecg ", b"")],
            [block(b"ecg ", b""), block(b"info", info_content())],
        ):
            with self.assertRaises(MissingFormatBlock):
                decode(atc_file(*blocks))

    def test_missing_info_any_order(self):
        for blocks in (
            [block(b"fmt ", fmt_content()), block(b"ecg ", b"")],
            [block(b"ecg ", b""), block(b"fmt ", fmt_content())],
        ):
            with self.assertRaises(MissingInfoBlock):
                decode(atc_file(*blocks))

    def test_blocks_in_reverse_order(self):
        data = atc_file(
            block(b"ecg ", samples_content([5])),
            block(b"info", info_content()),
            block(b"fmt ", fmt_content()),
        )
        self.assertEqual(decode(data).leads["leadI"].tolist(), [5])

    def test_unsupported_format(self):
        data = atc_file(block(b"fmt ", fmt_content(ecg_format=2)), block(b"info", info_content()))
        with self.assertRaises(UnsupportedFormat):
            decode(data)

    def test_format_checked_before_info(self):
        # an unsupported format wins even when info is absent
        with self.assertRaises(UnsupportedFormat):
            decode(atc_file(block(b"fmt ", fmt_content(ecg_format=0))))

    def test_odd_lead_fails_whole_decode(self):
        data = atc_file(
            block(b"fmt ", fmt_content()),
            block(b"info", info_content()),
            block(b"ecg ", samples_content([1, 2])),
            block(b"ecg3", b"\x00" * 5),
        )
        with self.assertRaises(MalformedSignalBlock):
            decode(data)

    def test_all_failures_are_value_errors(self):
        with self.assertRaises(ValueError):
            decode(b"nope")
        with self.assertRaises(EcgDecodeError):
            decode(b"nope")
        with self.assertRaises(InvalidSignature):
            decode(b"nope")


class TestLeads(unittest.TestCase):
    def test_all_six_leads_in_fixed_order(self):
        ids = [b"ecg6", b"ecg5", b"ecg4", b"ecg3", b"ecg2", b"ecg "]
        blocks = [block(i, samples_content([k])) for k, i in enumerate(ids)]
        data = atc_file(block(b"fmt ", fmt_content()), block(b"info", info_content()), *blocks)
        rec = decode(data)
        self.assertEqual(rec.leads.names, ("leadI", "leadII", "leadIII", "aVR", "aVL", "aVF"))
        self.assertEqual(rec.leads["aVF"].tolist(), [0])
        self.assertEqual(rec.leads["leadI"].tolist(), [5])
        self.assertEqual(len(rec.leads), 6)
        self.assertEqual(list(rec.leads), list(rec.leads.names))

    def test_no_lead_i_is_permitted_by_default(self):
        data = atc_file(
            block(b"fmt ", fmt_content()),
            block(b"info", info_content()),
            block(b"ecg2", samples_content([7, 8])),
        )
        rec = decode(data)
        self.assertNotIn("leadI", rec.leads)
        self.assertEqual(rec.leads["leadII"].tolist(), [7, 8])
        with self.assertRaises(KeyError):
            rec.leads["leadI"]

    def test_require_lead_i(self):
        data = atc_file(block(b"fmt ", fmt_content()), block(b"info", info_content()))
        reader = AtcReader(AtcReaderConfig(require_lead_i=True))
        with self.assertRaises(MissingLeadBlock):
            reader.decode(data)
        self.assertEqual(len(AtcReader().decode(data).leads), 0)

    def test_samples_read_only(self):
        rec = decode(minimal_file())
        with self.assertRaises(ValueError):
            rec.leads["leadI"][0] = 1

    def test_annotation_attached(self):
        data = atc_file(
            block(b"fmt ", fmt_content()),
            block(b"info", info_content()),
            block(b"ann ", ann_content(1000, [(150, 1)])),
            block(b"ecg ", samples_content([0, 0])),
        )
        ann = decode(data).annotation
        self.assertIsNotNone(ann)
        self.assertEqual(ann.tick_count_frequency_hz, 1000)
        self.assertEqual([(t.offset, t.beat_type) for t in ann.ticks], [(150, 1)])


class TestDiagnostics(unittest.TestCase):
    def test_unknown_block_ignored(self):
        plain = decode(minimal_file())
        data = atc_file(
            block(b"xtra", b"\x01\x02\x03"),
            block(b"fmt ", fmt_content(flags=0x05)),
            block(b"zzzz", b""),
            block(b"info", info_content(date_recorded="2020-01-01")),
            block(b"ecg ", samples_content([100, -200, 300])),
        )
        rec = decode(data)
        self.assertEqual(record_to_dict(rec), record_to_dict(plain))
        self.assertEqual(len(rec.warnings), 2)
        self.assertIn("'xtra'", rec.warnings[0])

    def test_duplicate_block_first_wins(self):
        data = atc_file(
            block(b"fmt ", fmt_content(rate_hz=300)),
            block(b"info", info_content()),
            block(b"fmt ", fmt_content(rate_hz=500)),
        )
        rec = decode(data)
        self.assertEqual(rec.format.sampling_rate_hz, 300)
        self.assertTrue(any("appears 2 times" in w for w in rec.warnings))

    def test_surplus_bytes_reported(self):
        data = atc_file(
            block(b"fmt ", fmt_content() + b"\x00\x00"),
            block(b"info", info_content(surplus=b"\x00" * 4)),
        )
        rec = decode(data)
        self.assertTrue(any("info block has 4 surplus" in w for w in rec.warnings))
        self.assertTrue(any("fmt block has 2 surplus" in w for w in rec.warnings))

    def test_warnings_can_be_disabled(self):
        data = atc_file(block(b"xtra", b""), block(b"fmt ", fmt_content()), block(b"info", info_content()))
        rec = AtcReader(AtcReaderConfig(collect_warnings=False)).decode(data)
        self.assertEqual(rec.warnings, ())


class TestReadFile(unittest.TestCase):
    def test_read_from_disk(self):
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "rec.atc"
            p.write_bytes(minimal_file())
            rec = read_file(p)
            np.testing.assert_array_equal(rec.leads["leadI"], np.array([100, -200, 300], dtype=np.int16))

    def test_missing_file(self):
        with tempfile.TemporaryDirectory() as d:
            with self.assertRaises(FileNotFoundError):
                read_file(Path(d) / "absent.atc")


class TestErrorKinds(unittest.TestCase):
    def test_closed_set_is_documented(self):
        for name in errors.__all__:
            cls = getattr(errors, name)
            self.assertTrue(issubclass(cls, errors.EcgDecodeError), name)
            self.assertTrue(cls.__dict__.get("__doc__"), name)


if __name__ == "__main__":
    unittest.main()
