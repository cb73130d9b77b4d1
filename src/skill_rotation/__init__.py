"""Skill rotation DPS calculator package."""

from .calculator import (
    EPSILON,
    find_best_schedule,
    find_best_setup,
    gear_assignments,
    gear_cost,
)
from .config import ConfigError, config_from_dict, default_config, load_config, validate_setup
from .formatting import format_progress, format_report, format_sequence, result_to_dict
from .models import (
    CastEvent,
    GearAssignment,
    OptimizationResult,
    RotationConfig,
    ScheduleResult,
    Skill,
)

__all__ = [
    "EPSILON",
    "find_best_schedule",
    "find_best_setup",
    "gear_assignments",
    "gear_cost",
    "load_config",
    "config_from_dict",
    "default_config",
    "validate_setup",
    "ConfigError",
    "format_progress",
    "format_report",
    "format_sequence",
    "result_to_dict",
    "CastEvent",
    "GearAssignment",
    "OptimizationResult",
    "RotationConfig",
    "ScheduleResult",
    "Skill",
]
