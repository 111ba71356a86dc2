"""Cyclic coordinate descent IK for a single bone chain."""
from __future__ import annotations

import logging
from typing import List

from rig2d.kinematics.bone import Bone
from rig2d.kinematics.solvers.joints import snapshot_joint_positions, write_rotations
from rig2d.kinematics.vector import Vector2

logger = logging.getLogger(__name__)

DEFAULT_ITERATIONS = 10
DEFAULT_TOLERANCE = 0.01


def solve_ccd(
    chain: List[Bone],
    target: Vector2,
    iterations: int = DEFAULT_ITERATIONS,
    tolerance: float = DEFAULT_TOLERANCE,
) -> int:
    """
    Rotate each joint, effector-side first, so the effector points at the target.

    Same chain preconditions and write-back as `solve_fabrik`. Returns the
    number of sweeps used (0 for an empty chain).
    """
    n = len(chain)
    if n == 0:
        return 0

    positions = snapshot_joint_positions(chain)
    used = iterations
    for iteration in range(iterations):
        for i in range(n - 1, -1, -1):
            pivot = positions[i]
            to_end = positions[n].sub(pivot)
            to_target = target.sub(pivot)
            if to_end.length() == 0.0 or to_target.length() == 0.0:
                continue
            angle = to_target.angle() - to_end.angle()
            for j in range(i + 1, n + 1):
                positions[j] = pivot.add(positions[j].sub(pivot).rotate(angle))

        if positions[n].distance_to(target) <= tolerance:
            used = iteration + 1
            break

    write_rotations(chain, positions)
    logger.debug(
        "CCD solved %d bones in %d iterations (residual %.6f)",
        n, used, positions[n].distance_to(target),
    )
    return used
