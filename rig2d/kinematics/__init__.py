"""2D skeletal FK/IK kernel."""

from .vector import Vector2
from .matrix import HomogeneousPoint, Matrix3
from .bone import Bone
from .skeleton import Skeleton
from .constraints import (
    LimitConstraint,
    apply_bend_direction,
    apply_limit_constraint,
    apply_soft_angle_limit,
)
from .chain import chain_length, effector_distance, extract_chain
from .solvers.analytical import solve_analytical_ik
from .solvers.ccd import solve_ccd
from .solvers.fabrik import solve_fabrik

__all__ = [
    "Vector2",
    "HomogeneousPoint",
    "Matrix3",
    "Bone",
    "Skeleton",
    "LimitConstraint",
    "apply_bend_direction",
    "apply_limit_constraint",
    "apply_soft_angle_limit",
    "chain_length",
    "effector_distance",
    "extract_chain",
    "solve_analytical_ik",
    "solve_ccd",
    "solve_fabrik",
]
