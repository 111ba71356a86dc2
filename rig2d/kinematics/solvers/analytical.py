"""
Analytic two-bone IK (law of cosines).

For sides l1, l2 and root-to-target distance d:

    cos(bend)   = (d^2 - l1^2 - l2^2) / (2 * l1 * l2)
    cos(offset) = (l1^2 + d^2 - l2^2) / (2 * l1 * d)

`bend` is the second joint's deviation from straight (0 = fully extended);
the first bone is aimed `offset` clockwise of the target so the second bone
bends counter-clockwise onto it.
"""
from __future__ import annotations

import logging
import math

from rig2d.kinematics.bone import Bone
from rig2d.kinematics.vector import Vector2

logger = logging.getLogger(__name__)


def _clamp_unit(value: float) -> float:
    return max(-1.0, min(1.0, value))


def solve_analytical_ik(bone1: Bone, bone2: Bone, target: Vector2) -> None:
    """
    Solve a parent->child bone pair so bone2's tip lands on `target`.

    Unreachable targets resolve to the closest configuration (fully extended
    or fully folded). Reads bone1's cached world position, so run FK first.
    Writes `bone1.rotation` relative to its parent's world rotation and
    `bone2.rotation` relative to bone1.
    """
    l1 = bone1.length
    l2 = bone2.length
    if l1 <= 0.0 or l2 <= 0.0:
        logger.warning(
            "Analytical IK needs positive bone lengths (l1=%s, l2=%s); rotations unchanged", l1, l2
        )
        return

    base = bone1.world_position
    dx = target.x - base.x
    dy = target.y - base.y
    dist = math.hypot(dx, dy)

    max_reach = l1 + l2
    min_reach = abs(l1 - l2)
    clamped = min(max_reach, max(dist, min_reach))

    bend = math.acos(_clamp_unit((clamped * clamped - l1 * l1 - l2 * l2) / (2.0 * l1 * l2)))

    base_angle = math.atan2(dy, dx)
    if clamped > 0.0:
        offset = math.acos(_clamp_unit((l1 * l1 + clamped * clamped - l2 * l2) / (2.0 * l1 * clamped)))
    else:
        # Equal lengths folded onto the root: any aim works.
        offset = 0.0

    parent_rot = bone1.parent.world_rotation if bone1.parent is not None else 0.0
    bone1.rotation = (base_angle - offset) - parent_rot
    bone2.rotation = bend
    logger.debug(
        "Analytical IK: dist=%.6f clamped=%.6f bend=%.6f offset=%.6f", dist, clamped, bend, offset
    )
