from __future__ import annotations

from contextlib import redirect_stdout
import io
import json
from pathlib import Path
import tempfile
import unittest

from PIL import Image

import main as cli


class CliTests(unittest.TestCase):
    def setUp(self) -> None:
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.root = Path(tmp.name)

    def _run(self, argv: list[str]) -> str:
        out = io.StringIO()
        with redirect_stdout(out):
            cli.main(argv)
        return out.getvalue()

    def test_render_writes_png(self) -> None:
        target = self.root / "chart.png"
        text = self._run(["render", "--random", "80", "--width", "320", "--out", str(target), "--highlight", "100", "50"])
        self.assertIn("entities=80", text)
        with Image.open(target) as image:
            self.assertEqual(image.size, (320, 448))

    def test_inspect_reports_each_panel(self) -> None:
        report = json.loads(self._run(["inspect", "--random", "30", "--width", "300", "--scroll", "-12"]))
        self.assertEqual([item["kind"] for item in report], ["candle", "kdj", "macd"])
        first = report[0]
        self.assertEqual(first["main_area"]["right"], 300.0)
        self.assertEqual(len(first["concat"]), 3)
        self.assertEqual(first["fix_x"], [[1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [0.0, 0.0, 1.0]])

    def test_config_and_data_files(self) -> None:
        data = self.root / "candles.json"
        data.write_text(
            json.dumps([{"high": str(11 + i), "low": str(9 + i), "open": str(10 + i), "close": str(10.5 + i)} for i in range(20)]),
            encoding="utf-8",
        )
        config = self.root / "chart.toml"
        config.write_text(
            '[chart]\nscroll_smoothly = false\n\n[[panels]]\nkind = "avg_price"\nheight = 90\n',
            encoding="utf-8",
        )
        report = json.loads(self._run(["inspect", "--data", str(data), "--config", str(config), "--start", "5", "--end", "14"]))
        self.assertEqual(len(report), 1)
        self.assertEqual(report[0]["kind"], "avg_price")
        self.assertEqual(report[0]["main_area"]["bottom"], 80.0)

    def test_export_pads_and_writes_candles(self) -> None:
        target = self.root / "candles.json"
        text = self._run(["export", "--random", "10", "--pad", "15", "--out", str(target)])
        self.assertIn("entities=15", text)
        rows = json.loads(target.read_text(encoding="utf-8"))
        self.assertEqual(len(rows), 10)
        self.assertEqual(set(rows[0]), {"high", "low", "open", "close", "volume", "time"})

    def test_missing_config_file(self) -> None:
        with self.assertRaises(FileNotFoundError):
            self._run(["inspect", "--config", str(self.root / "nope.toml")])


if __name__ == "__main__":
    unittest.main()
