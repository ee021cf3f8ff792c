"""
deeplock

Recursively lock an object graph in place: freeze, seal or prevent
extensions on the root and on every node it owns, with cycles and shared
sub-graphs visited once.

Exports:
    Enums:
        LockAction: Lock strength (PREVENT_EXTENSIONS, SEAL, FREEZE)
        Permission: Write kind (ADD, MODIFY, DELETE, RECONFIGURE)
        NodeKind: Traversal category (PRIMITIVE, SHARED, CALLABLE, BUFFER, IMMUTABLE, OBJECT)

    Dataclasses (all frozen=True):
        LockOptions: Options for deep_lock

    Functions:
        deep_lock: Resolve options and lock a graph in place
        deep_freeze / deep_seal / deep_prevent_extensions: Fixed-action shortcuts
        resolve_action: Validate options and return a LockAction
        lock: Lock a graph with an already resolved LockAction
        lock_state / is_frozen / is_sealed / is_extensible / is_locked: Inspection
        readonly_view: Deep read-only projection
        lockable: Copy builtin containers into lockable subclasses

    Errors:
        DeepLockError, InvalidActionError, UnlockableObjectError, LockViolationError
"""
from deeplock.constants import PACKAGE_NAME, PACKAGE_VERSION

from deeplock.lock_types import LockAction, NodeKind, Permission

from deeplock.errors import (
    DeepLockError,
    InvalidActionError,
    LockViolationError,
    UnlockableObjectError,
)

from deeplock.options import DEFAULT_ACTION, LockOptions, resolve_action

from deeplock.locker import (
    deep_freeze,
    deep_lock,
    deep_prevent_extensions,
    deep_seal,
    lock,
)

from deeplock.state import (
    is_extensible,
    is_frozen,
    is_locked,
    is_sealed,
    lock_state,
)

from deeplock.readonly import (
    ReadOnlyFuture,
    ReadOnlyMapping,
    ReadOnlyObject,
    ReadOnlySequence,
    ReadOnlySet,
    ReadOnlyView,
    is_readonly_view,
    readonly_view,
)

from deeplock.containers import (
    LockableDict,
    LockableList,
    LockableSet,
    Record,
    lockable,
)

__version__ = PACKAGE_VERSION

__all__ = [
    # Package
    'PACKAGE_NAME',
    'PACKAGE_VERSION',
    # Enums
    'LockAction',
    'NodeKind',
    'Permission',
    # Errors
    'DeepLockError',
    'InvalidActionError',
    'LockViolationError',
    'UnlockableObjectError',
    # Options
    'DEFAULT_ACTION',
    'LockOptions',
    'resolve_action',
    # Locker
    'deep_lock',
    'deep_freeze',
    'deep_seal',
    'deep_prevent_extensions',
    'lock',
    # State
    'lock_state',
    'is_locked',
    'is_frozen',
    'is_sealed',
    'is_extensible',
    # Projection
    'ReadOnlyView',
    'ReadOnlyObject',
    'ReadOnlyMapping',
    'ReadOnlySequence',
    'ReadOnlySet',
    'ReadOnlyFuture',
    'readonly_view',
    'is_readonly_view',
    # Containers
    'Record',
    'LockableDict',
    'LockableList',
    'LockableSet',
    'lockable',
]
