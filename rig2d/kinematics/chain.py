"""Chain extraction: root-to-effector bone lists for single-chain IK."""
from __future__ import annotations

import logging
import math
from typing import Hashable, List, Optional

from rig2d.kinematics.bone import Bone
from rig2d.kinematics.skeleton import Skeleton
from rig2d.kinematics.vector import Vector2

logger = logging.getLogger(__name__)


def extract_chain(
    skeleton: Skeleton,
    effector_id: Hashable,
    max_length: Optional[int] = None,
) -> List[Bone]:
    """
    Walk parent links from `effector_id` up to its root.

    Returns bones ordered root -> effector. With `max_length`, only the
    `max_length` bones nearest the effector are kept.
    """
    effector = skeleton.get_bone(effector_id)
    if effector is None:
        logger.warning("Chain effector %r not found", effector_id)
        return []
    if max_length is not None and max_length <= 0:
        return []

    chain: List[Bone] = []
    current: Optional[Bone] = effector
    while current is not None:
        chain.append(current)
        if max_length is not None and len(chain) >= max_length:
            break
        current = current.parent
    chain.reverse()
    return chain


def chain_length(chain: List[Bone]) -> float:
    return sum(bone.length for bone in chain)


def effector_distance(chain: List[Bone], target: Vector2) -> float:
    """Distance from the chain's cached tip to `target`; inf for an empty chain."""
    if not chain:
        return math.inf
    return chain[-1].tip().distance_to(target)
