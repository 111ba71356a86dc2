"""
Per-bone rotation constraints used by the IK solvers.

These mutate `bone.rotation` (local radians) in place and are exported for
callers running their own solve loops.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Hashable, Optional

from rig2d.kinematics.bone import Bone

if TYPE_CHECKING:
    from rig2d.kinematics.skeleton import Skeleton

logger = logging.getLogger(__name__)


def apply_soft_angle_limit(
    bone: Bone,
    min_angle: float,
    max_angle: float,
    spring_factor: float = 0.2,
) -> None:
    """
    Pull `bone.rotation` back toward [min_angle, max_angle].

    Moves by `spring_factor` of the violation: 0 disables the correction,
    1 clamps immediately. Repeated application converges on the violated
    bound without crossing it.
    """
    angle = bone.rotation
    if angle < min_angle:
        bone.rotation = angle + (min_angle - angle) * spring_factor
    elif angle > max_angle:
        bone.rotation = angle - (angle - max_angle) * spring_factor


def apply_bend_direction(bone: Bone, center_angle: float, bend_direction: int) -> None:
    """
    Keep a joint on the `bend_direction` side (+1 / -1) of `center_angle`.

    A rotation on the wrong side is mirrored across the center with the same
    deviation magnitude.
    """
    offset = bone.rotation - center_angle
    if offset * bend_direction < 0:
        bone.rotation = center_angle + bend_direction * abs(offset)


@dataclass(frozen=True)
class LimitConstraint:
    """Hard rotation bounds for a single bone. Either bound may be omitted."""
    bone_id: Hashable
    min_rotation: Optional[float] = None
    max_rotation: Optional[float] = None


def apply_limit_constraint(skeleton: "Skeleton", constraint: LimitConstraint) -> None:
    bone = skeleton.get_bone(constraint.bone_id)
    if bone is None:
        logger.warning("Limit constraint targets unknown bone %r", constraint.bone_id)
        return
    if constraint.min_rotation is not None and bone.rotation < constraint.min_rotation:
        bone.rotation = constraint.min_rotation
    if constraint.max_rotation is not None and bone.rotation > constraint.max_rotation:
        bone.rotation = constraint.max_rotation
