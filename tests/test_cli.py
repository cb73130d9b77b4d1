from __future__ import annotations

import io
import json
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path

from skill_rotation import cli


class CliTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.config_path = Path(self._tmp.name) / "setup.json"
        self.config_path.write_text(
            json.dumps(
                {
                    "time_limit": 11,
                    "skills": [
                        {"name": "A", "cast_time": 1, "recast_time": 5, "damage": 10, "gear_options": [0, 10]},
                    ],
                }
            ),
            encoding="utf-8",
        )

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _run(self, *argv: str) -> tuple[int, str]:
        buffer = io.StringIO()
        with redirect_stdout(buffer):
            code = cli.main(list(argv))
        return code, buffer.getvalue()

    def test_table_report(self) -> None:
        code, output = self._run("--config", str(self.config_path))

        self.assertEqual(code, 0)
        self.assertIn("Evaluating combo 1/2 => [0]", output)
        self.assertIn("Evaluating combo 2/2 => [10]", output)
        self.assertIn("Time limit: 11 seconds", output)
        self.assertIn("Total Damage: 20.00", output)
        self.assertIn("DPS: 1.82", output)
        self.assertIn("Chosen Gear Percents: [0]", output)
        self.assertIn("Cast Sequence: A -> A -> END", output)

    def test_quiet_timeline_and_time_override(self) -> None:
        code, output = self._run("--config", str(self.config_path), "--quiet", "--timeline", "--time-limit", "12.5")

        self.assertEqual(code, 0)
        self.assertNotIn("Evaluating combo", output)
        # 10% gear shortens recast to 4.5s, which fits a third cast into 12.5s.
        self.assertIn("Cast Sequence: A -> A -> A -> END", output)
        self.assertIn("Chosen Gear Percents: [10]", output)
        self.assertIn("Timeline:", output)

    def test_json_output(self) -> None:
        code, output = self._run("--config", str(self.config_path), "--format", "json")

        self.assertEqual(code, 0)
        payload = json.loads(output)
        self.assertEqual(payload["best_damage"], 20.0)
        self.assertEqual(payload["best_gear"], [0.0])
        self.assertEqual(payload["best_sequence"], ["A", "A"])
        self.assertEqual([cast["start"] for cast in payload["casts"]], [0.0, 6.0])

    def test_invalid_config_exits_with_usage_error(self) -> None:
        self.config_path.write_text(json.dumps({"time_limit": 5, "skills": []}), encoding="utf-8")

        with redirect_stderr(io.StringIO()) as err, self.assertRaises(SystemExit) as ctx:
            self._run("--config", str(self.config_path))

        self.assertEqual(ctx.exception.code, 2)
        self.assertIn("at least one skill", err.getvalue())

    def test_negative_time_override_is_rejected(self) -> None:
        with redirect_stderr(io.StringIO()), self.assertRaises(SystemExit) as ctx:
            self._run("--config", str(self.config_path), "--time-limit", "-1")
        self.assertEqual(ctx.exception.code, 2)


if __name__ == "__main__":
    unittest.main()
