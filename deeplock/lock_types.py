"""
deeplock Lock Types.

This module defines the closed enums shared by the resolver, the locker
and the read-only projection.

CLOSED ENUMS - No new members may be added.
"""
from enum import Enum, auto
from typing import Dict, FrozenSet


class Permission(Enum):
    """A kind of write an immutability lock can refuse.

    CLOSED ENUM - No new members may be added.

    Members:
        ADD: Create an own slot that does not exist yet
        MODIFY: Rebind the value of an existing own slot
        DELETE: Remove an existing own slot
        RECONFIGURE: Reorder own slots without changing their values
    """
    ADD = auto()
    MODIFY = auto()
    DELETE = auto()
    RECONFIGURE = auto()


class LockAction(Enum):
    """Strength of an immutability lock.

    CLOSED ENUM - No new members may be added.

    Permission matrix:
    | Action             | ADD | MODIFY | DELETE | RECONFIGURE |
    |--------------------|-----|--------|--------|-------------|
    | PREVENT_EXTENSIONS |  -  |   +    |   +    |      +      |
    | SEAL               |  -  |   +    |   -    |      -      |
    | FREEZE             |  -  |   -    |   -    |      -      |
    """
    PREVENT_EXTENSIONS = "preventExtensions"
    SEAL = "seal"
    FREEZE = "freeze"

    @property
    def strength(self) -> int:
        """Position in the PREVENT_EXTENSIONS < SEAL < FREEZE order."""
        return _STRENGTH[self]

    def allows(self, permission: Permission) -> bool:
        """Return True if a node locked with this action permits ``permission``."""
        return permission in _ALLOWED[self]

    def covers(self, other: "LockAction") -> bool:
        """Return True if this action is at least as strong as ``other``."""
        return self.strength >= other.strength


class NodeKind(Enum):
    """How the locker treats a value it meets in the graph.

    CLOSED ENUM - No new members may be added.

    Members:
        PRIMITIVE: Scalar value, not a node
        SHARED: Class, module, builtin, method or enum member, not a node
        CALLABLE: Function or partial, never locked but its __dict__ is walked
        BUFFER: Binary buffer view, opaque leaf
        IMMUTABLE: Immutable by construction, contents are walked
        OBJECT: Lockable node, own slots are walked
    """
    PRIMITIVE = auto()
    SHARED = auto()
    CALLABLE = auto()
    BUFFER = auto()
    IMMUTABLE = auto()
    OBJECT = auto()


_STRENGTH: Dict[LockAction, int] = {
    LockAction.PREVENT_EXTENSIONS: 1,
    LockAction.SEAL: 2,
    LockAction.FREEZE: 3,
}

_ALLOWED: Dict[LockAction, FrozenSet[Permission]] = {
    LockAction.PREVENT_EXTENSIONS: frozenset({
        Permission.MODIFY,
        Permission.DELETE,
        Permission.RECONFIGURE,
    }),
    LockAction.SEAL: frozenset({Permission.MODIFY}),
    LockAction.FREEZE: frozenset(),
}

WALKABLE_KINDS: FrozenSet[NodeKind] = frozenset({
    NodeKind.CALLABLE,
    NodeKind.IMMUTABLE,
    NodeKind.OBJECT,
})
"""Node kinds whose own slots are enumerated."""
