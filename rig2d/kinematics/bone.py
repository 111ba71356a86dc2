"""Bone node with parent/child links and forward-kinematics propagation."""
from __future__ import annotations

import math
from typing import Hashable, List, Optional

from rig2d.kinematics.matrix import Matrix3
from rig2d.kinematics.vector import Vector2


class Bone:
    """
    A node in a rooted bone tree.

    Local state (`length`, `rotation`, `position`) is authored by callers and
    solvers. `world_position` and `world_rotation` are cached results of the
    last `update_world_transform` pass and must not be edited by hand.

    `position` is the offset from the parent's tip, expressed in the parent's
    frame. `rotation` is radians relative to the parent's world rotation.
    `parent` is a non-owning back-reference; the owning Skeleton keeps bones
    alive. Callers must not create cycles through `add_child`.
    """

    def __init__(
        self,
        id: Hashable,
        name: str,
        length: float = 50.0,
        rotation: float = 0.0,
        position: Optional[Vector2] = None,
        parent: Optional[Bone] = None,
    ):
        self.id = id
        self.name = name
        self.length = length
        self.rotation = rotation
        self.position = position if position is not None else Vector2.zero()
        self.parent = parent
        self.children: List[Bone] = []
        self.world_position = Vector2.zero()
        self.world_rotation = 0.0

    def add_child(self, child: Bone) -> None:
        child.parent = self
        self.children.append(child)

    def remove_child(self, child: Bone) -> None:
        if child in self.children:
            self.children.remove(child)
            child.parent = None

    def local_transform(self) -> Matrix3:
        return Matrix3.from_translation(self.position.x, self.position.y).multiply(
            Matrix3.from_rotation(self.rotation)
        )

    def update_world_transform(
        self,
        parent_pos: Optional[Vector2] = None,
        parent_rot: float = 0.0,
    ) -> None:
        """
        Recompute this bone's world pose from its parent's, then recurse.

        Children receive this bone's tip as their parent position and this
        bone's world rotation as their parent rotation. Roots are updated
        with (origin, 0).
        """
        if parent_pos is None:
            parent_pos = Vector2.zero()
        parent_matrix = Matrix3.from_translation(parent_pos.x, parent_pos.y).multiply(
            Matrix3.from_rotation(parent_rot)
        )
        world_matrix = parent_matrix.multiply(self.local_transform())

        self.world_rotation = parent_rot + self.rotation
        self.world_position = world_matrix.apply_to(Vector2.zero()).to_vector()

        tip = world_matrix.multiply(Matrix3.from_translation(self.length, 0.0))
        tip_pos = tip.apply_to(Vector2.zero()).to_vector()
        for child in self.children:
            child.update_world_transform(tip_pos, self.world_rotation)

    def tip(self) -> Vector2:
        """World-space end of the bone; valid after an FK pass."""
        return Vector2(
            self.world_position.x + self.length * math.cos(self.world_rotation),
            self.world_position.y + self.length * math.sin(self.world_rotation),
        )

    def is_root(self) -> bool:
        return self.parent is None

    def __repr__(self) -> str:
        return (
            f"Bone(id={self.id!r}, name={self.name!r}, length={self.length}, "
            f"rotation={self.rotation})"
        )
