from __future__ import annotations

from typing import Any, Dict, List

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from .calculator import find_best_setup, gear_assignments
from .config import DEFAULT_SKILLS, DEFAULT_TIME_LIMIT, ConfigError, config_from_dict
from .formatting import result_to_dict
from .models import GearAssignment, RotationConfig


app = FastAPI(
    title="Skill Rotation API",
    description="Exhaustive search for the best gear choice and cast sequence in a time window.",
    version="1.0.0",
)


class SkillInput(BaseModel):
    name: str = Field(..., description="Skill label shown in the cast sequence.")
    cast_time: float = Field(..., description="Seconds the cast occupies.")
    recast_time: float = Field(0.0, description="Base cooldown after the cast completes.")
    damage: float = Field(..., description="Damage dealt when the cast completes.")
    gear_options: List[float] = Field(default_factory=lambda: [0.0], description="Recast reduction percents.")


class SetupRequest(BaseModel):
    time_limit: float = Field(DEFAULT_TIME_LIMIT, description="Time window in seconds.")
    skills: List[SkillInput] = Field(..., description="Skills available to the rotation.")


class OptimizeRequest(SetupRequest):
    workers: int = Field(1, ge=1, le=64, description="Worker processes for gear combinations.")


def _to_config(payload: SetupRequest) -> RotationConfig:
    try:
        return config_from_dict(
            {
                "time_limit": payload.time_limit,
                "skills": [skill.model_dump() for skill in payload.skills],
            }
        )
    except ConfigError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@app.get("/api/v1/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.get("/api/v1/defaults")
def defaults() -> Dict[str, Any]:
    return {"time_limit": DEFAULT_TIME_LIMIT, "skills": [dict(skill) for skill in DEFAULT_SKILLS]}


@app.post("/api/v1/gear/combinations")
def combinations(payload: SetupRequest) -> Dict[str, Any]:
    config = _to_config(payload)
    combos = gear_assignments(config.skills)
    return {"count": len(combos), "combinations": [list(gear) for gear in combos]}


@app.post("/api/v1/optimize")
def optimize(payload: OptimizeRequest) -> Dict[str, Any]:
    config = _to_config(payload)
    progress: List[Dict[str, Any]] = []

    def _record(index: int, total: int, gear: GearAssignment) -> None:
        progress.append({"index": index, "total": total, "gear": list(gear)})

    try:
        result = find_best_setup(
            config.skills,
            config.time_limit,
            progress_callback=_record,
            workers=payload.workers,
        )
    except ConfigError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    response = result_to_dict(result)
    response["progress"] = progress
    return response
