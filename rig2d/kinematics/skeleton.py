"""Skeleton: owns a bone tree and drives full-tree FK updates."""
from __future__ import annotations

import logging
from typing import Dict, Hashable, Iterator, List, Optional

from rig2d.kinematics.bone import Bone
from rig2d.kinematics.vector import Vector2

logger = logging.getLogger(__name__)


class Skeleton:
    """
    Collection of bones keyed by id, plus the ordered list of roots.

    Every bone in `bones` is reachable from exactly one root. Rebuilding a
    skeleton wholesale each frame (`clear()` then `add_bone()` per bone) is a
    supported pattern.
    """

    def __init__(self):
        self.bones: Dict[Hashable, Bone] = {}
        self.roots: List[Bone] = []

    def add_bone(self, bone: Bone, parent_id: Optional[Hashable] = None) -> None:
        """Insert `bone`; an unresolved `parent_id` makes it a root."""
        self.bones[bone.id] = bone
        if parent_id is None:
            self.roots.append(bone)
            return
        parent = self.bones.get(parent_id)
        if parent is None:
            logger.warning("Parent bone %r not found for %r; adding as root", parent_id, bone.id)
            self.roots.append(bone)
            return
        parent.add_child(bone)

    def remove_bone(self, bone_id: Hashable) -> None:
        """Remove a bone and its whole subtree. Unknown ids are a no-op."""
        bone = self.bones.get(bone_id)
        if bone is None:
            logger.warning("remove_bone: bone %r not found", bone_id)
            return

        if bone.is_root():
            self.roots = [root for root in self.roots if root is not bone]
        else:
            bone.parent.remove_child(bone)

        for child in list(bone.children):
            self.remove_bone(child.id)

        del self.bones[bone_id]

    def update_world_transform(self) -> None:
        for root in self.roots:
            root.update_world_transform(Vector2.zero(), 0.0)

    def get_bone(self, bone_id: Hashable) -> Optional[Bone]:
        return self.bones.get(bone_id)

    def clear(self) -> None:
        """Drop every bone, unlinking them so the same instances can be re-added."""
        for bone in self.bones.values():
            bone.children = []
            bone.parent = None
        self.bones = {}
        self.roots = []

    def walk(self) -> Iterator[Bone]:
        """Depth-first, pre-order traversal over every root's subtree."""
        stack = list(reversed(self.roots))
        while stack:
            bone = stack.pop()
            yield bone
            stack.extend(reversed(bone.children))

    def __len__(self) -> int:
        return len(self.bones)

    def __contains__(self, bone_id: Hashable) -> bool:
        return bone_id in self.bones
