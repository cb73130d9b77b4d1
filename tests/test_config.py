from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path

from skill_rotation.calculator import gear_assignments
from skill_rotation.config import ConfigError, config_from_dict, default_config, load_config
from skill_rotation.models import Skill


class ConfigLoaderTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _write(self, name: str, text: str) -> Path:
        path = self.root / name
        path.write_text(text, encoding="utf-8")
        return path

    def test_loads_json(self) -> None:
        path = self._write(
            "setup.json",
            json.dumps(
                {
                    "time_limit": 12,
                    "skills": [
                        {"name": "Fireball", "cast_time": 1, "recast_time": 6.7, "damage": 10300, "gear_options": [0, 15]},
                        {"name": "Pet", "cast_time": 1, "recast_time": 15, "damage": 2400},
                    ],
                }
            ),
        )

        config = load_config(path)

        self.assertEqual(config.time_limit, 12.0)
        self.assertEqual(
            config.skills[0],
            Skill(name="Fireball", cast_time=1.0, recast_time=6.7, damage=10300.0, gear_options=(0.0, 15.0)),
        )
        self.assertEqual(config.skills[1].gear_options, (0.0,))

    def test_loads_yaml(self) -> None:
        path = self._write(
            "setup.yaml",
            "time_limit: 4\n"
            "skills:\n"
            "  - {name: Ice Blast, cast_time: 4, recast_time: 20, damage: 14000, gear_options: [0, 30]}\n",
        )

        config = load_config(path)

        self.assertEqual(config.time_limit, 4.0)
        self.assertEqual(config.skills[0].name, "Ice Blast")
        self.assertEqual(config.skills[0].gear_options, (0.0, 30.0))

    def test_bundled_demo_yaml_matches_defaults(self) -> None:
        path = Path(__file__).resolve().parents[1] / "configs" / "demo.yaml"
        self.assertEqual(tuple(load_config(path).skills), tuple(default_config().skills))

    def test_missing_file(self) -> None:
        with self.assertRaises(ConfigError):
            load_config(self.root / "missing.json")

    def test_unsupported_suffix(self) -> None:
        path = self._write("setup.toml", "time_limit = 1")
        with self.assertRaises(ConfigError):
            load_config(path)

    def test_broken_json(self) -> None:
        path = self._write("setup.json", "{not json")
        with self.assertRaises(ConfigError):
            load_config(path)

    def test_invalid_skill_mentions_name(self) -> None:
        with self.assertRaises(ConfigError) as ctx:
            config_from_dict({"time_limit": 5, "skills": [{"name": "Broken", "cast_time": "fast", "damage": 1}]})
        self.assertIn("Broken", str(ctx.exception))

    def test_missing_required_field(self) -> None:
        with self.assertRaises(ConfigError):
            config_from_dict({"time_limit": 5, "skills": [{"name": "NoDamage", "cast_time": 1}]})

    def test_semantic_validation(self) -> None:
        cases = [
            {"time_limit": 5, "skills": []},
            {"time_limit": -1, "skills": [{"name": "A", "cast_time": 1, "damage": 1}]},
            {"time_limit": 5, "skills": [{"name": "A", "cast_time": 0, "damage": 1}]},
            {"time_limit": 5, "skills": [{"name": "A", "cast_time": 1, "damage": 1, "gear_options": []}]},
            {"time_limit": 5, "skills": [{"name": "A", "cast_time": 1, "damage": 1, "gear_options": [-5]}]},
            {"time_limit": 5, "skills": [{"name": "A", "cast_time": 1, "damage": 1, "gear_options": "10"}]},
            {"time_limit": "soon", "skills": [{"name": "A", "cast_time": 1, "damage": 1}]},
            ["not", "a", "mapping"],
        ]
        for payload in cases:
            with self.subTest(payload=payload):
                with self.assertRaises(ConfigError):
                    config_from_dict(payload)

    def test_default_config(self) -> None:
        config = default_config()

        self.assertEqual(len(config.skills), 8)
        self.assertEqual(config.time_limit, 10.0)
        self.assertEqual(len(gear_assignments(config.skills)), 8)


if __name__ == "__main__":
    unittest.main()
