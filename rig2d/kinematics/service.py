"""Kinematics Service: rebuild a skeleton from editor state, pose it, solve one chain."""
from __future__ import annotations

import logging
import math
from typing import Callable, Dict, List, Optional, Set

from rig2d.config import runtime_config
from rig2d.kinematics.bone import Bone
from rig2d.kinematics.chain import effector_distance, extract_chain
from rig2d.kinematics.constraints import LimitConstraint, apply_limit_constraint
from rig2d.kinematics.schemas import (
    AngleUnit, BoneModel, BonePose, PoseResult, SkeletonModel, SolveRequest,
    SolveResult, SolverKind, SolverMetrics,
)
from rig2d.kinematics.skeleton import Skeleton
from rig2d.kinematics.solvers.analytical import solve_analytical_ik
from rig2d.kinematics.solvers.ccd import solve_ccd
from rig2d.kinematics.solvers.fabrik import solve_fabrik
from rig2d.kinematics.vector import Vector2

logger = logging.getLogger(__name__)


class KinematicsError(ValueError):
    """Request-level problem the kernel cannot degrade around."""

    def __init__(self, code: str, message: str, resource_kind: str = "skeleton"):
        super().__init__(message)
        self.code = code
        self.message = message
        self.resource_kind = resource_kind


def _angle_codec(unit: AngleUnit) -> tuple[Callable[[float], float], Callable[[float], float]]:
    if unit == AngleUnit.DEGREES:
        return math.radians, math.degrees
    return float, float


def _parent_first(records: List[BoneModel]) -> List[BoneModel]:
    """Order records so every resolvable parent precedes its children."""
    by_id: Dict[str, BoneModel] = {}
    for record in records:
        if record.id in by_id:
            raise KinematicsError("skeleton.duplicate_bone", f"Duplicate bone id {record.id!r}")
        by_id[record.id] = record

    ordered: List[BoneModel] = []
    placed: Set[str] = set()
    for record in records:
        path: List[BoneModel] = []
        on_path: Set[str] = set()
        current: Optional[BoneModel] = record
        while current is not None and current.id not in placed:
            if current.id in on_path:
                raise KinematicsError("skeleton.cycle", f"Bone {current.id!r} is its own ancestor")
            path.append(current)
            on_path.add(current.id)
            current = by_id.get(current.parent_id) if current.parent_id else None
        for item in reversed(path):
            ordered.append(item)
            placed.add(item.id)
    return ordered


class KinematicsService:
    """
    Stateless pose/solve service over serializable skeletons.

    Each call rebuilds the core Skeleton from the supplied records, so callers
    can treat the request as the authoritative editor state.
    """

    def build_skeleton(self, model: SkeletonModel, skeleton: Optional[Skeleton] = None) -> Skeleton:
        to_radians, _ = _angle_codec(model.angle_unit)
        skeleton = skeleton if skeleton is not None else Skeleton()
        skeleton.clear()
        for record in _parent_first(model.bones):
            bone = Bone(
                record.id,
                record.name,
                length=record.length,
                rotation=to_radians(record.rotation),
                position=Vector2(record.position[0], record.position[1]),
            )
            skeleton.add_bone(bone, record.parent_id)
        return skeleton

    def compute_pose(self, model: SkeletonModel) -> PoseResult:
        skeleton = self.build_skeleton(model)
        skeleton.update_world_transform()
        return self._pose(skeleton, model)

    def solve(self, request: SolveRequest) -> SolveResult:
        model = request.skeleton
        to_radians, _ = _angle_codec(model.angle_unit)
        skeleton = self.build_skeleton(model)
        skeleton.update_world_transform()

        chain = extract_chain(skeleton, request.effector_id, request.chain_length)
        if not chain:
            raise KinematicsError(
                "chain.effector_not_found",
                f"Effector bone {request.effector_id!r} not found",
                resource_kind="chain",
            )
        records = {record.id: record for record in model.bones}
        chain_records = [records[bone.id] for bone in chain]
        target = Vector2(request.target[0], request.target[1])

        if request.solver == SolverKind.ANALYTICAL:
            if len(chain) != 2:
                raise KinematicsError(
                    "solver.chain_length_mismatch",
                    f"Analytical IK solves exactly 2 bones, chain has {len(chain)}",
                    resource_kind="solver",
                )
            solve_analytical_ik(chain[0], chain[1], target)
            iterations = 1
            tolerance = request.tolerance or runtime_config.get_fabrik_tolerance()
        elif request.solver == SolverKind.CCD:
            tolerance = request.tolerance or runtime_config.get_ccd_tolerance()
            iterations = solve_ccd(
                chain,
                target,
                iterations=request.iterations or runtime_config.get_ccd_iterations(),
                tolerance=tolerance,
            )
            if request.use_constraints:
                for record in chain_records:
                    if record.min_angle is None and record.max_angle is None:
                        continue
                    apply_limit_constraint(skeleton, LimitConstraint(
                        bone_id=record.id,
                        min_rotation=None if record.min_angle is None else to_radians(record.min_angle),
                        max_rotation=None if record.max_angle is None else to_radians(record.max_angle),
                    ))
        else:
            tolerance = request.tolerance or runtime_config.get_fabrik_tolerance()
            spring = request.spring_factor
            if spring is None:
                spring = runtime_config.get_spring_factor()
            min_angles, max_angles, bends = self._chain_constraints(request, chain_records, to_radians)
            iterations = solve_fabrik(
                chain,
                target,
                iterations=request.iterations or runtime_config.get_fabrik_iterations(),
                tolerance=tolerance,
                min_angles=min_angles,
                max_angles=max_angles,
                spring_factor=spring,
                bend_directions=bends,
            )

        skeleton.update_world_transform()
        distance = effector_distance(chain, target)
        logger.debug(
            "Solved %s chain to %r: iterations=%d distance=%.6f",
            request.solver.value, request.effector_id, iterations, distance,
        )
        return SolveResult(
            pose=self._pose(skeleton, model),
            metrics=SolverMetrics(
                solver=request.solver,
                iterations=iterations,
                distance=distance,
                reached=distance <= tolerance,
                chain=[str(bone.id) for bone in chain],
            ),
        )

    def _chain_constraints(
        self,
        request: SolveRequest,
        chain_records: List[BoneModel],
        to_radians: Callable[[float], float],
    ) -> tuple[Optional[List[float]], Optional[List[float]], Optional[List[int]]]:
        if not request.use_constraints:
            return None, None, None
        n = len(chain_records)

        min_angles: Optional[List[float]] = None
        max_angles: Optional[List[float]] = None
        if request.min_angles is not None:
            if len(request.min_angles) < n:
                raise KinematicsError(
                    "chain.constraint_length",
                    f"Angle limits cover {len(request.min_angles)} bones, chain has {n}",
                    resource_kind="chain",
                )
            min_angles = [to_radians(a) for a in request.min_angles]
            max_angles = [to_radians(a) for a in request.max_angles]
        elif any(r.min_angle is not None or r.max_angle is not None for r in chain_records):
            min_angles = [-math.inf if r.min_angle is None else to_radians(r.min_angle) for r in chain_records]
            max_angles = [math.inf if r.max_angle is None else to_radians(r.max_angle) for r in chain_records]

        bends: Optional[List[int]] = None
        if request.bend_directions is not None:
            if len(request.bend_directions) < n:
                raise KinematicsError(
                    "chain.constraint_length",
                    f"Bend directions cover {len(request.bend_directions)} bones, chain has {n}",
                    resource_kind="chain",
                )
            bends = list(request.bend_directions)
        elif any(r.bend_direction is not None for r in chain_records):
            # 0 leaves a bone without a hint untouched
            bends = [r.bend_direction or 0 for r in chain_records]
        return min_angles, max_angles, bends

    def _pose(self, skeleton: Skeleton, model: SkeletonModel) -> PoseResult:
        _, from_radians = _angle_codec(model.angle_unit)
        bones = []
        for record in model.bones:
            bone = skeleton.get_bone(record.id)
            bones.append(BonePose(
                id=record.id,
                name=bone.name,
                parent_id=bone.parent.id if bone.parent is not None else None,
                rotation=from_radians(bone.rotation),
                world_position=bone.world_position.to_list(),
                world_rotation=from_radians(bone.world_rotation),
                tip=bone.tip().to_list(),
            ))
        return PoseResult(skeleton_id=model.id, angle_unit=model.angle_unit, bones=bones)


_default_service: Optional[KinematicsService] = None


def get_kinematics_service() -> KinematicsService:
    global _default_service
    if _default_service is None:
        _default_service = KinematicsService()
    return _default_service


def set_kinematics_service(service: KinematicsService) -> None:
    global _default_service
    _default_service = service
