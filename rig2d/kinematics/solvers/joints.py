"""Joint-position snapshots and rotation write-back shared by the chain solvers."""
from __future__ import annotations

import math
from typing import Callable, List, Optional

from rig2d.kinematics.bone import Bone
from rig2d.kinematics.vector import Vector2

BoneHook = Callable[[int, Bone], None]


def snapshot_joint_positions(chain: List[Bone]) -> List[Vector2]:
    """
    World origins of every chain bone plus the end-effector (tip of the last bone).

    Uses the cached FK pose, so the skeleton must be up to date.
    """
    positions = [bone.world_position for bone in chain]
    if chain:
        positions.append(chain[-1].tip())
    return positions


def base_rotation(chain: List[Bone]) -> float:
    """World rotation the chain root is measured against."""
    root_parent = chain[0].parent
    return root_parent.world_rotation if root_parent is not None else 0.0


def write_rotations(
    chain: List[Bone],
    positions: List[Vector2],
    hook: Optional[BoneHook] = None,
) -> None:
    """
    Turn solved joint positions into local rotations.

    Each bone's new world angle is the direction of its segment; the parent
    contribution is the root parent's world rotation for the first bone and the
    freshly written world rotation of the previous chain bone after that.
    `hook(index, bone)` runs after each write (constraints) and its result is
    carried into the next bone's parent rotation.
    """
    parent_rot = base_rotation(chain)
    for i, bone in enumerate(chain):
        delta = positions[i + 1].sub(positions[i])
        world_angle = math.atan2(delta.y, delta.x)
        bone.rotation = world_angle - parent_rot
        if hook is not None:
            hook(i, bone)
        parent_rot += bone.rotation
