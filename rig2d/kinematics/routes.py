"""
FastAPI routes for 2D skeleton posing and IK solving.

POST /kinematics/pose
- Input: SkeletonModel (bone arena)
- Output: PoseResult with world positions/rotations after FK

POST /kinematics/solve
- Input: SolveRequest (skeleton, effector, target, solver options)
- Output: SolveResult with the solved pose and solver metrics
"""
from __future__ import annotations

from fastapi import APIRouter, Depends

from rig2d.common.error_envelope import raise_for_error
from rig2d.kinematics.schemas import PoseResult, SkeletonModel, SolveRequest, SolveResult
from rig2d.kinematics.service import KinematicsError, KinematicsService, get_kinematics_service

router = APIRouter(prefix="/kinematics", tags=["kinematics"])


def get_service() -> KinematicsService:
    return get_kinematics_service()


@router.post("/pose", response_model=PoseResult)
def compute_pose(
    payload: SkeletonModel,
    service: KinematicsService = Depends(get_service),
) -> PoseResult:
    try:
        return service.compute_pose(payload)
    except KinematicsError as exc:
        raise_for_error(exc, details={"skeleton_id": payload.id})


@router.post("/solve", response_model=SolveResult)
def solve(
    payload: SolveRequest,
    service: KinematicsService = Depends(get_service),
) -> SolveResult:
    try:
        return service.solve(payload)
    except KinematicsError as exc:
        raise_for_error(
            exc,
            details={"effector_id": payload.effector_id, "solver": payload.solver.value},
        )
