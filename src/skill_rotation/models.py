from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional, Sequence, Tuple

GearAssignment = Tuple[float, ...]


def _normalize_gear_options(raw: Optional[Iterable], name: str) -> Tuple[float, ...]:
    if raw is None:
        return (0.0,)
    if isinstance(raw, (str, bytes)) or not isinstance(raw, Iterable):
        raise ValueError(f"Skill '{name}' must define 'gear_options' as a list of percentages.")
    options = []
    for value in raw:
        try:
            options.append(float(value))
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Skill '{name}' has non-numeric gear option {value!r}.") from exc
    return tuple(options)


@dataclass(slots=True, frozen=True)
class Skill:
    name: str
    cast_time: float
    recast_time: float
    damage: float
    gear_options: Tuple[float, ...] = (0.0,)

    @classmethod
    def from_dict(cls, payload: Dict) -> "Skill":
        try:
            name = str(payload["name"])
            cast_time = float(payload["cast_time"])
            recast_time = float(payload.get("recast_time", 0.0))
            damage = float(payload["damage"])
        except KeyError as exc:
            raise ValueError(f"Missing field in skill definition: {exc}") from exc
        except (TypeError, ValueError) as exc:
            raise ValueError(
                f"Invalid skill definition for '{payload.get('name', '<unknown>')}': {exc}"
            ) from exc

        gear_options = _normalize_gear_options(payload.get("gear_options"), name)
        return cls(
            name=name,
            cast_time=cast_time,
            recast_time=recast_time,
            damage=damage,
            gear_options=gear_options,
        )

    def effective_recast(self, gear_percent: float) -> float:
        return self.recast_time * (1.0 - gear_percent / 100.0)

    def problems(self) -> Tuple[str, ...]:
        """Return human readable reasons this skill cannot be scheduled."""
        issues = []
        if not math.isfinite(self.cast_time) or self.cast_time <= 0.0:
            issues.append(f"cast_time must be > 0 (got {self.cast_time})")
        if not math.isfinite(self.recast_time) or self.recast_time < 0.0:
            issues.append(f"recast_time must be >= 0 (got {self.recast_time})")
        if not math.isfinite(self.damage) or self.damage < 0.0:
            issues.append(f"damage must be >= 0 (got {self.damage})")
        if not self.gear_options:
            issues.append("gear_options must not be empty")
        for percent in self.gear_options:
            if not 0.0 <= percent <= 100.0:
                issues.append(f"gear option {percent} is outside [0, 100]")
        return tuple(issues)


@dataclass(slots=True)
class RotationConfig:
    skills: Sequence[Skill]
    time_limit: float


@dataclass(slots=True, frozen=True)
class CastEvent:
    skill: str
    start: float
    end: float


@dataclass(slots=True)
class ScheduleResult:
    total_damage: float
    sequence: Tuple[str, ...] = field(default_factory=tuple)
    casts: Tuple[CastEvent, ...] = field(default_factory=tuple)
    nodes_visited: int = 0


@dataclass(slots=True)
class OptimizationResult:
    best_damage: float
    best_dps: float
    best_gear: GearAssignment
    best_sequence: Tuple[str, ...]
    best_casts: Tuple[CastEvent, ...] = field(default_factory=tuple)
    gear_cost: float = 0.0
    time_limit: float = 0.0
    combinations_evaluated: int = 0
