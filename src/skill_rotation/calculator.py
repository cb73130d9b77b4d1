"""Exhaustive rotation search.

Three layers, composed top-down:

* ``gear_assignments`` enumerates every pick of one gear percent per skill.
* ``find_best_schedule`` walks every feasible cast order for one assignment
  and keeps the highest damage sequence it sees at any node of the tree.
* ``find_best_setup`` runs the search once per assignment and keeps the best
  result, preferring the cheaper gear (lowest sum of percents) on ties.

The search is brute force on purpose: there is no memoization and no bound.
Its cost grows exponentially with ``time_limit / cast_time``, so keep windows
short when many skills are available.
"""

from __future__ import annotations

import logging
import math
import sys
from concurrent.futures import ProcessPoolExecutor
from itertools import product
from typing import Callable, Iterator, List, Optional, Sequence, Tuple

from .config import ConfigError, validate_setup
from .models import CastEvent, GearAssignment, OptimizationResult, ScheduleResult, Skill

LOGGER = logging.getLogger(__name__)

# Tolerance for cast-end admission and damage ties.
EPSILON = 1e-9

_FRAME_HEADROOM = 200

ProgressCallback = Callable[[int, int, GearAssignment], None]


def gear_assignments(skills: Sequence[Skill]) -> List[GearAssignment]:
    """Return every way of picking exactly one gear percent per skill.

    The first skill varies slowest. A skill without options makes the
    product empty.
    """
    return [tuple(choice) for choice in product(*(skill.gear_options for skill in skills))]


def gear_cost(gear: GearAssignment) -> float:
    return float(sum(gear))


def _ensure_recursion_headroom(skills: Sequence[Skill], time_limit: float) -> None:
    shortest = min(skill.cast_time for skill in skills)
    max_depth = int(time_limit / shortest) + 1
    needed = max_depth + _FRAME_HEADROOM
    if needed > sys.getrecursionlimit():
        sys.setrecursionlimit(needed)


def find_best_schedule(
    skills: Sequence[Skill],
    gear: GearAssignment,
    time_limit: float,
) -> ScheduleResult:
    validate_setup(skills, time_limit)
    if len(gear) != len(skills):
        raise ValueError(
            f"Gear assignment has {len(gear)} entries but there are {len(skills)} skills."
        )
    for skill, percent in zip(skills, gear):
        if not 0.0 <= percent <= 100.0:
            raise ValueError(f"Gear percent {percent} for skill '{skill.name}' is outside [0, 100].")
    _ensure_recursion_headroom(skills, time_limit)

    effective_recast = [skill.effective_recast(percent) for skill, percent in zip(skills, gear)]
    next_available = [0.0] * len(skills)
    casts: List[CastEvent] = []
    best = ScheduleResult(total_damage=0.0)
    nodes = 0

    def dfs(current_time: float, damage: float) -> None:
        nonlocal best, nodes
        nodes += 1

        # Any node can be the optimum, not only the ones that cannot extend.
        if damage > best.total_damage:
            best = ScheduleResult(
                total_damage=damage,
                sequence=tuple(cast.skill for cast in casts),
                casts=tuple(casts),
            )

        for index, skill in enumerate(skills):
            earliest = next_available[index]
            if earliest > time_limit:
                continue

            start = max(current_time, earliest)
            end = start + skill.cast_time
            if end > time_limit + EPSILON:
                continue

            saved = next_available[index]
            next_available[index] = end + effective_recast[index]
            casts.append(CastEvent(skill=skill.name, start=start, end=end))
            try:
                dfs(end, damage + skill.damage)
            finally:
                casts.pop()
                next_available[index] = saved

    dfs(0.0, 0.0)
    best.nodes_visited = nodes
    return best


def _schedule_to_payload(result: ScheduleResult) -> Tuple:
    return (
        result.total_damage,
        result.sequence,
        tuple((cast.skill, cast.start, cast.end) for cast in result.casts),
        result.nodes_visited,
    )


def _schedule_from_payload(payload: Tuple) -> ScheduleResult:
    total_damage, sequence, casts, nodes = payload
    return ScheduleResult(
        total_damage=total_damage,
        sequence=tuple(sequence),
        casts=tuple(CastEvent(skill=name, start=start, end=end) for name, start, end in casts),
        nodes_visited=nodes,
    )


def _schedule_worker(args: Tuple) -> Tuple:
    """Process pool entry point. Takes and returns plain tuples."""
    skill_rows, gear, time_limit = args
    skills = tuple(
        Skill(name=name, cast_time=cast_time, recast_time=recast_time, damage=damage, gear_options=options)
        for name, cast_time, recast_time, damage, options in skill_rows
    )
    return _schedule_to_payload(find_best_schedule(skills, gear, time_limit))


def _evaluate_sequential(
    skills: Sequence[Skill],
    combos: Sequence[GearAssignment],
    time_limit: float,
    progress_callback: Optional[ProgressCallback],
) -> Iterator[Tuple[GearAssignment, ScheduleResult]]:
    total = len(combos)
    for index, gear in enumerate(combos, start=1):
        if progress_callback is not None:
            progress_callback(index, total, gear)
        yield gear, find_best_schedule(skills, gear, time_limit)


def _evaluate_parallel(
    skills: Sequence[Skill],
    combos: Sequence[GearAssignment],
    time_limit: float,
    progress_callback: Optional[ProgressCallback],
    workers: int,
) -> Iterator[Tuple[GearAssignment, ScheduleResult]]:
    total = len(combos)
    skill_rows = tuple(
        (skill.name, skill.cast_time, skill.recast_time, skill.damage, tuple(skill.gear_options))
        for skill in skills
    )
    with ProcessPoolExecutor(max_workers=workers) as executor:
        futures = []
        for index, gear in enumerate(combos, start=1):
            if progress_callback is not None:
                progress_callback(index, total, gear)
            futures.append(executor.submit(_schedule_worker, (skill_rows, gear, time_limit)))

        # Merge in enumeration order so ties resolve exactly as in a serial run.
        for gear, future in zip(combos, futures):
            yield gear, _schedule_from_payload(future.result())


def _is_better(damage: float, cost: float, best_damage: float, best_cost: float) -> bool:
    if damage > best_damage:
        return True
    if abs(damage - best_damage) < EPSILON:
        return cost < best_cost
    return False


def find_best_setup(
    skills: Sequence[Skill],
    time_limit: float,
    progress_callback: ProgressCallback | None = None,
    workers: int = 1,
) -> OptimizationResult:
    validate_setup(skills, time_limit)
    if int(workers) < 1:
        raise ConfigError(f"workers must be >= 1 (got {workers}).")

    combos = gear_assignments(skills)
    if not combos:
        raise ConfigError("No gear combinations to evaluate: every skill needs at least one gear option.")

    total = len(combos)
    LOGGER.info(
        "Evaluating %d gear combination(s) for %d skill(s) over %.3fs with %d worker(s)",
        total,
        len(skills),
        time_limit,
        workers,
    )

    if workers > 1 and total > 1:
        evaluations = _evaluate_parallel(skills, combos, time_limit, progress_callback, int(workers))
    else:
        evaluations = _evaluate_sequential(skills, combos, time_limit, progress_callback)

    best_gear: GearAssignment | None = None
    best_schedule: ScheduleResult | None = None
    best_cost = math.inf
    nodes = 0

    for gear, schedule in evaluations:
        nodes += schedule.nodes_visited
        cost = gear_cost(gear)
        if best_schedule is None or _is_better(schedule.total_damage, cost, best_schedule.total_damage, best_cost):
            LOGGER.debug("New best: %s damage with gear %s (cost %s)", schedule.total_damage, list(gear), cost)
            best_gear = gear
            best_schedule = schedule
            best_cost = cost

    best_dps = best_schedule.total_damage / time_limit if time_limit > 0 else 0.0
    LOGGER.info(
        "Search finished: %d node(s) visited, best damage %.2f (%.2f DPS)",
        nodes,
        best_schedule.total_damage,
        best_dps,
    )

    return OptimizationResult(
        best_damage=best_schedule.total_damage,
        best_dps=best_dps,
        best_gear=best_gear,
        best_sequence=best_schedule.sequence,
        best_casts=best_schedule.casts,
        gear_cost=best_cost,
        time_limit=float(time_limit),
        combinations_evaluated=total,
    )
