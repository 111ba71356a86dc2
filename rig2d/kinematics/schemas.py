"""Kinematics Schemas - serializable skeletons, solve requests and pose results."""
from __future__ import annotations

import math
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, ValidationInfo, field_validator, model_validator


def _require_finite(values: List[float], label: str) -> List[float]:
    for value in values:
        if not math.isfinite(value):
            raise ValueError(f"{label} contains NaN/Inf: {values}")
    return values


class AngleUnit(str, Enum):
    RADIANS = "radians"
    DEGREES = "degrees"


class SolverKind(str, Enum):
    FABRIK = "fabrik"
    ANALYTICAL = "analytical"
    CCD = "ccd"


# --- Skeleton Structure ---

class BoneModel(BaseModel):
    """Editor-side bone record. Rotations use the owning skeleton's angle unit."""
    id: str
    name: str
    parent_id: Optional[str] = None
    length: float = Field(default=50.0, ge=0.0)
    rotation: float = 0.0
    position: List[float] = Field(default_factory=lambda: [0.0, 0.0], min_length=2, max_length=2)

    # IK hints, consumed when this bone is part of a solved chain
    min_angle: Optional[float] = None
    max_angle: Optional[float] = None
    bend_direction: Optional[int] = None

    @field_validator("length", "rotation", "min_angle", "max_angle")
    @classmethod
    def _finite_scalar(cls, value: Optional[float]) -> Optional[float]:
        if value is not None and not math.isfinite(value):
            raise ValueError("must be finite")
        return value

    @field_validator("position")
    @classmethod
    def _finite_position(cls, value: List[float]) -> List[float]:
        return _require_finite(value, "position")

    @field_validator("bend_direction")
    @classmethod
    def _unit_bend(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and value not in (1, -1):
            raise ValueError("bend_direction must be 1 or -1")
        return value

    @model_validator(mode="after")
    def _ordered_limits(self) -> "BoneModel":
        if self.min_angle is not None and self.max_angle is not None and self.min_angle > self.max_angle:
            raise ValueError(f"min_angle {self.min_angle} exceeds max_angle {self.max_angle}")
        return self


class SkeletonModel(BaseModel):
    """Arena of bone records; parents may appear after their children."""
    id: str = "skeleton"
    bones: List[BoneModel] = Field(default_factory=list)
    angle_unit: AngleUnit = AngleUnit.RADIANS


# --- Solving ---

class SolveRequest(BaseModel):
    """Rebuild a skeleton, solve one chain toward a target, and report the pose."""
    skeleton: SkeletonModel
    effector_id: str
    target: List[float] = Field(..., min_length=2, max_length=2)
    solver: SolverKind = SolverKind.FABRIK
    chain_length: Optional[int] = Field(default=None, ge=1)

    # None -> runtime config defaults
    iterations: Optional[int] = Field(default=None, ge=1)
    tolerance: Optional[float] = Field(default=None, gt=0.0)
    spring_factor: Optional[float] = Field(default=None, ge=0.0, le=1.0)

    # Per-chain overrides (root -> effector), in the skeleton's angle unit.
    # When omitted, limits and bend hints come from the bone records.
    min_angles: Optional[List[float]] = None
    max_angles: Optional[List[float]] = None
    bend_directions: Optional[List[int]] = None
    use_constraints: bool = True

    @field_validator("target")
    @classmethod
    def _finite_target(cls, value: List[float]) -> List[float]:
        return _require_finite(value, "target")

    @field_validator("min_angles", "max_angles")
    @classmethod
    def _finite_limits(cls, value: Optional[List[float]], info: ValidationInfo) -> Optional[List[float]]:
        return value if value is None else _require_finite(value, info.field_name)

    @field_validator("bend_directions")
    @classmethod
    def _unit_bends(cls, value: Optional[List[int]]) -> Optional[List[int]]:
        if value is not None and any(v not in (1, -1) for v in value):
            raise ValueError("bend_directions entries must be 1 or -1")
        return value

    @model_validator(mode="after")
    def _paired_limits(self) -> "SolveRequest":
        if (self.min_angles is None) != (self.max_angles is None):
            raise ValueError("min_angles and max_angles must be supplied together")
        if self.min_angles is not None and len(self.min_angles) != len(self.max_angles):
            raise ValueError("min_angles and max_angles must have the same length")
        if self.min_angles is not None:
            for i, (lo, hi) in enumerate(zip(self.min_angles, self.max_angles)):
                if lo > hi:
                    raise ValueError(f"min_angles[{i}] {lo} exceeds max_angles[{i}] {hi}")
        return self


# --- Results ---

class BonePose(BaseModel):
    id: str
    name: str
    parent_id: Optional[str] = None
    rotation: float
    world_position: List[float]
    world_rotation: float
    tip: List[float]


class PoseResult(BaseModel):
    skeleton_id: str
    angle_unit: AngleUnit = AngleUnit.RADIANS
    bones: List[BonePose] = Field(default_factory=list)

    def bone(self, bone_id: str) -> Optional[BonePose]:
        return next((b for b in self.bones if b.id == bone_id), None)


class SolverMetrics(BaseModel):
    """Per-solve diagnostics for metrics display."""
    solver: SolverKind
    iterations: int
    distance: float  # effector tip to target after the final FK pass
    reached: bool
    chain: List[str] = Field(default_factory=list)


class SolveResult(BaseModel):
    pose: PoseResult
    metrics: SolverMetrics
