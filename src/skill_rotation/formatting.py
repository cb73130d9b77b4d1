from __future__ import annotations

from typing import Dict, Iterable, List, Sequence

from .models import CastEvent, OptimizationResult

SEQUENCE_SEPARATOR = " -> "
SEQUENCE_END = "END"


def _format_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"


def format_gear(gear: Iterable[float]) -> str:
    return "[" + ", ".join(_format_number(percent) for percent in gear) + "]"


def format_sequence(sequence: Sequence[str]) -> str:
    return SEQUENCE_SEPARATOR.join([*sequence, SEQUENCE_END])


def format_progress(index: int, total: int, gear: Sequence[float]) -> str:
    return f"[Gear Combo Progress] Evaluating combo {index}/{total} => {format_gear(gear)}"


def format_timeline(casts: Sequence[CastEvent]) -> str:
    if not casts:
        return "Timeline: (no casts)"
    lines: List[str] = ["Timeline:"]
    for cast in casts:
        lines.append(f"  {cast.start:7.2f}s -> {cast.end:7.2f}s  {cast.skill}")
    return "\n".join(lines)


def format_report(result: OptimizationResult, include_timeline: bool = False) -> str:
    lines: List[str] = []
    lines.append("=== Best DPS Setup ===")
    lines.append(f"Time limit: {_format_number(result.time_limit)} seconds")
    lines.append(f"Total Damage: {result.best_damage:.2f}")
    lines.append(f"DPS: {result.best_dps:.2f}")
    lines.append(f"Chosen Gear Percents: {format_gear(result.best_gear)}")
    lines.append(f"Gear Cost: {_format_number(result.gear_cost)}")
    lines.append(f"Combinations Evaluated: {result.combinations_evaluated}")
    lines.append(f"Cast Sequence: {format_sequence(result.best_sequence)}")
    if include_timeline:
        lines.append("")
        lines.append(format_timeline(result.best_casts))
    return "\n".join(lines)


def result_to_dict(result: OptimizationResult) -> Dict:
    return {
        "time_limit": result.time_limit,
        "best_damage": result.best_damage,
        "best_dps": result.best_dps,
        "best_gear": list(result.best_gear),
        "gear_cost": result.gear_cost,
        "combinations_evaluated": result.combinations_evaluated,
        "best_sequence": list(result.best_sequence),
        "casts": [
            {"skill": cast.skill, "start": cast.start, "end": cast.end}
            for cast in result.best_casts
        ],
    }
