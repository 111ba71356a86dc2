"""
FABRIK (Forward And Backward Reaching IK) for a single bone chain, with soft
angle limits and bend-direction hints.
"""
from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from rig2d.kinematics.bone import Bone
from rig2d.kinematics.constraints import apply_bend_direction, apply_soft_angle_limit
from rig2d.kinematics.solvers.joints import snapshot_joint_positions, write_rotations
from rig2d.kinematics.vector import Vector2

logger = logging.getLogger(__name__)

DEFAULT_ITERATIONS = 10
DEFAULT_TOLERANCE = 0.001
DEFAULT_SPRING_FACTOR = 0.2
BEND_CENTER_ANGLE = 0.0


def solve_fabrik(
    chain: List[Bone],
    target: Vector2,
    iterations: int = DEFAULT_ITERATIONS,
    tolerance: float = DEFAULT_TOLERANCE,
    min_angles: Optional[Sequence[float]] = None,
    max_angles: Optional[Sequence[float]] = None,
    spring_factor: float = DEFAULT_SPRING_FACTOR,
    bend_directions: Optional[Sequence[int]] = None,
) -> int:
    """
    Move the chain's end-effector toward `target` by rewriting local rotations.

    Args:
        chain: Bones ordered root -> end-effector. Each bone must be the
            previous bone's child, attached at its tip (zero local offset).
        target: World-space goal for the tip of the last bone.
        iterations: Cap on forward/backward passes.
        tolerance: Stop once the end-effector is this close to the target.
        min_angles, max_angles: Per-bone local rotation limits (radians),
            applied as soft limits only when both are given.
        spring_factor: Soft-limit correction per application (0-1).
        bend_directions: Per-bone +1 / -1 bend hints.

    Constraint arrays, when given, must be at least as long as the chain.

    Reads the cached FK pose; run `update_world_transform` before solving and
    again afterwards to refresh world poses.

    Returns:
        Iterations used: 0 for an empty chain, 1 when the target is out of
        reach (the chain is stretched straight at it), otherwise the pass on
        which the tolerance was met, or `iterations` if it never was.
    """
    n = len(chain)
    if n == 0:
        return 0

    positions = snapshot_joint_positions(chain)
    lengths = [bone.length for bone in chain]
    total_length = sum(lengths)
    root_pos = positions[0]

    reach = root_pos.distance_to(target)
    if reach > total_length:
        for i in range(n):
            direction = target.sub(positions[i]).normalize()
            positions[i + 1] = positions[i].add(direction.scale(lengths[i]))
        used = 1
        logger.debug("FABRIK target out of reach (%.6f > %.6f); stretched", reach, total_length)
    else:
        used = iterations
        for iteration in range(iterations):
            # Forward reaching: pin the effector, walk back to the root.
            positions[n] = target
            for i in range(n - 1, -1, -1):
                direction = positions[i].sub(positions[i + 1]).normalize()
                positions[i] = positions[i + 1].add(direction.scale(lengths[i]))

            # Backward reaching: re-pin the root, walk out to the effector.
            positions[0] = root_pos
            for i in range(n):
                direction = positions[i + 1].sub(positions[i]).normalize()
                positions[i + 1] = positions[i].add(direction.scale(lengths[i]))

            if positions[n].distance_to(target) <= tolerance:
                used = iteration + 1
                break

    use_limits = min_angles is not None and max_angles is not None

    def constrain(i: int, bone: Bone) -> None:
        if use_limits:
            apply_soft_angle_limit(bone, min_angles[i], max_angles[i], spring_factor)
        if bend_directions is not None:
            apply_bend_direction(bone, BEND_CENTER_ANGLE, bend_directions[i])

    write_rotations(chain, positions, constrain)
    logger.debug(
        "FABRIK solved %d bones in %d iterations (residual %.6f)",
        n, used, positions[n].distance_to(target),
    )
    return used
