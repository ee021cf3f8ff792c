"""
deeplock State.

Read-only inspection of lock state, the counterparts of JavaScript's
Object.isFrozen, Object.isSealed and Object.isExtensible.

All functions are pure (no side effects).
"""
from typing import Any, Optional

from .guards import locked_action
from .lock_types import LockAction, NodeKind
from .nodes import classify


def _buffer_is_readonly(value: Any) -> bool:
    try:
        with memoryview(value) as view:
            return view.readonly
    except (TypeError, ValueError):
        return False


def lock_state(value: Any) -> Optional[LockAction]:
    """Return the strongest LockAction ``value`` satisfies.

    Decision table:
    | Kind | → State |
    |------|---------|
    | PRIMITIVE | FREEZE |
    | IMMUTABLE | FREEZE |
    | BUFFER, read-only | FREEZE |
    | BUFFER, writable | None |
    | SHARED | None |
    | CALLABLE | None |
    | OBJECT, locked | its action |
    | OBJECT, unlocked | None |

    Args:
        value: Any Python value

    Returns:
        LockAction or None if the value is still fully mutable
    """
    kind = classify(value)
    if kind in (NodeKind.PRIMITIVE, NodeKind.IMMUTABLE):
        return LockAction.FREEZE
    if kind is NodeKind.BUFFER:
        return LockAction.FREEZE if _buffer_is_readonly(value) else None
    if kind is NodeKind.OBJECT:
        return locked_action(value)
    return None


def is_locked(value: Any, action: LockAction) -> bool:
    """Return True if ``value`` satisfies at least ``action``."""
    state = lock_state(value)
    return state is not None and state.covers(action)


def is_frozen(value: Any) -> bool:
    """Return True if nothing can be added, changed or removed on ``value``."""
    return is_locked(value, LockAction.FREEZE)


def is_sealed(value: Any) -> bool:
    """Return True if nothing can be added to or removed from ``value``."""
    return is_locked(value, LockAction.SEAL)


def is_extensible(value: Any) -> bool:
    """Return True if new own slots can still be added to ``value``."""
    return not is_locked(value, LockAction.PREVENT_EXTENSIONS)
