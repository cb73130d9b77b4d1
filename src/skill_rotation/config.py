from __future__ import annotations

import json
import math
from pathlib import Path
from typing import Any, Dict, Iterable, List, Sequence

from .models import RotationConfig, Skill


class ConfigError(RuntimeError):
    """Raised when a skill setup or configuration file is invalid."""


DEFAULT_TIME_LIMIT = 10.0

DEFAULT_SKILLS: Sequence[Dict[str, Any]] = (
    {"name": "Fireball", "cast_time": 1, "recast_time": 6.7, "damage": 10300, "gear_options": [0, 15]},
    {"name": "Fire Storm", "cast_time": 3, "recast_time": 15, "damage": 11100, "gear_options": [0, 30]},
    {"name": "Ice Blast", "cast_time": 4, "recast_time": 20, "damage": 14000, "gear_options": [0]},
    {"name": "Ice Shards", "cast_time": 2, "recast_time": 15, "damage": 11765, "gear_options": [0, 30]},
    {"name": "FrostBite", "cast_time": 3, "recast_time": 20, "damage": 9500, "gear_options": [0]},
    {"name": "Pet", "cast_time": 1, "recast_time": 15, "damage": 2400, "gear_options": [0]},
    {"name": "Offhand", "cast_time": 2, "recast_time": 90, "damage": 9000, "gear_options": [0]},
    {"name": "Mainhand", "cast_time": 1, "recast_time": 45, "damage": 9000, "gear_options": [0]},
)


def _read_raw(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")

    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")

    if suffix == ".json":
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Invalid JSON in {path}: {exc}") from exc

    if suffix in {".yaml", ".yml"}:
        import yaml

        try:
            return yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc

    raise ConfigError(f"Unsupported config format '{suffix}'. Use .json or .yaml/.yml.")


def _load_skills(payload: Iterable[Dict[str, Any]]) -> Sequence[Skill]:
    skills: List[Skill] = []
    for raw in payload:
        if not isinstance(raw, dict):
            raise ConfigError(f"Skill definition must be an object, got {type(raw).__name__}.")
        try:
            skills.append(Skill.from_dict(raw))
        except ValueError as exc:
            name = raw.get("name", "<unknown>")
            raise ConfigError(f"Invalid skill definition '{name}': {exc}") from exc
    return tuple(skills)


def validate_setup(skills: Sequence[Skill], time_limit: float) -> None:
    """Reject setups the search cannot run on.

    Called before any enumeration so that a broken setup never yields an
    empty product or a meaningless DPS figure.
    """
    if not skills:
        raise ConfigError("Setup must contain at least one skill.")

    try:
        limit = float(time_limit)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"time_limit must be a number, got {time_limit!r}.") from exc
    if not math.isfinite(limit) or limit < 0.0:
        raise ConfigError(f"time_limit must be a finite number >= 0 (got {time_limit}).")

    for skill in skills:
        issues = skill.problems()
        if issues:
            raise ConfigError(f"Invalid skill '{skill.name}': {'; '.join(issues)}.")


def config_from_dict(payload: Any) -> RotationConfig:
    if not isinstance(payload, dict):
        raise ConfigError("Config root must be an object (JSON/YAML mapping).")

    try:
        time_limit = float(payload.get("time_limit", DEFAULT_TIME_LIMIT))
    except (TypeError, ValueError) as exc:
        raise ConfigError("Field 'time_limit' must be a number.") from exc

    skills_payload = payload.get("skills", [])
    if not isinstance(skills_payload, list):
        raise ConfigError("Field 'skills' must be a list.")
    skills = _load_skills(skills_payload)

    validate_setup(skills, time_limit)
    return RotationConfig(skills=skills, time_limit=time_limit)


def load_config(path: Path | str) -> RotationConfig:
    path = Path(path)
    return config_from_dict(_read_raw(path))


def default_config() -> RotationConfig:
    return config_from_dict({"time_limit": DEFAULT_TIME_LIMIT, "skills": list(DEFAULT_SKILLS)})
