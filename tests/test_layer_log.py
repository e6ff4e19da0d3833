import tempfile
import unittest
from pathlib import Path

from core.layer_log import discover_application_names, parse_application_names

SAMPLE = """\
2022-01-10 12:00:01 -0800: XR_APILAYER_NOVENDOR_nis_scaler layer is active
2022-01-10 12:00:01 -0800: Loading config for "FS2020"
2022-01-10 12:05:42 -0800: Could not load config for "Hello XR"
2022-01-10 12:07:00 -0800: Loading config for "FS2020"
2022-01-10 12:07:00 -0800: Loading config for ""
"""


class LayerLogTests(unittest.TestCase):
    def test_names_are_distinct_in_first_seen_order(self):
        self.assertEqual(parse_application_names(SAMPLE), ["FS2020", "Hello XR"])

    def test_missing_log_yields_no_names(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            self.assertEqual(discover_application_names(Path(temp_dir) / "missing.log"), [])

    def test_reads_log_file(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / "layer.log"
            path.write_text(SAMPLE, encoding="utf-8")
            self.assertEqual(discover_application_names(path), ["FS2020", "Hello XR"])
