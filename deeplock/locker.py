"""
deeplock Graph Locker.

This module walks the object graph reachable from a root and applies one
LockAction to every node exactly once.

The walk is depth-first and pre-order: a node is locked before its own
slots are enumerated. An explicit stack of iterators replaces recursion
so deep chains are not bounded by the interpreter's recursion limit.
"""
import logging
from typing import Any, Iterator, List, Optional, TypeVar

from .constants import LOGGER_NAMESPACE
from .guards import apply_lock
from .lock_types import LockAction
from .nodes import IdentitySet, child_nodes
from .options import LockOptionsLike, resolve_action

logger = logging.getLogger(f"{LOGGER_NAMESPACE}.locker")

T = TypeVar("T")


def lock(root: T, action: LockAction, visited: Optional[IdentitySet] = None) -> T:
    """Lock ``root`` and every node reachable through its own slots.

    Algorithm:
    | Step | Rule |
    |------|------|
    | 1 | Node already in ``visited`` → skip (cycles, shared sub-graphs) |
    | 2 | Apply the lock primitive to the node |
    | 3 | Record the node in ``visited`` |
    | 4 | Enumerate own slots; classes and shared definitions have none |
    | 5 | Descend into each slot value that is a node, never into buffers |

    Args:
        root: Value to lock in place
        action: Resolved LockAction
        visited: Identity set shared by the whole traversal

    Returns:
        ``root`` itself

    Raises:
        UnlockableObjectError: If a node cannot be locked in place. Nodes
            visited before it stay locked.
    """
    if visited is None:
        visited = IdentitySet()

    stack: List[Iterator[Any]] = [iter((root,))]
    while stack:
        for node in stack[-1]:
            if node in visited:
                continue
            apply_lock(node, action)
            visited.add(node)
            stack.append(child_nodes(node))
            break
        else:
            stack.pop()

    logger.debug("%s applied to %d node(s)", action.value, len(visited))
    return root


def deep_lock(value: T, options: LockOptionsLike = None) -> T:
    """Recursively apply a lock action to ``value`` and everything it owns.

    Freezes by default.

    Permission matrix:
    | Action             | Add | Modify | Delete | Reconfigure |
    |--------------------|-----|--------|--------|-------------|
    | preventExtensions  |  -  |   +    |   +    |      +      |
    | seal               |  -  |   +    |   -    |      -      |
    | freeze             |  -  |   -    |   -    |      -      |

    Args:
        value: Root of the graph, locked in place
        options: None, LockOptions, {"action": ...}, LockAction or action name

    Returns:
        ``value`` itself, now locked

    Raises:
        InvalidActionError: If the action is not recognized. Nothing is locked.
        UnlockableObjectError: If a reachable node cannot be locked in place
    """
    action = resolve_action(options)
    return lock(value, action)


def deep_freeze(value: T) -> T:
    """deep_lock with LockAction.FREEZE."""
    return lock(value, LockAction.FREEZE)


def deep_seal(value: T) -> T:
    """deep_lock with LockAction.SEAL."""
    return lock(value, LockAction.SEAL)


def deep_prevent_extensions(value: T) -> T:
    """deep_lock with LockAction.PREVENT_EXTENSIONS."""
    return lock(value, LockAction.PREVENT_EXTENSIONS)
