"""
deeplock Guards.

The lock primitive. A node is locked in place by swapping its class for a
generated subclass that declares no storage of its own and refuses every
write its LockAction forbids.

The generated class has the unlocked class as its only base, so its
instance layout is identical and CPython accepts the __class__ assignment.
The guard methods are copied into its namespace from the method sets below
and reach the unlocked implementation through unlocked_type(self).

Generated classes are cached per (class, action). Reapplying an equal or
weaker action is a no-op; a stronger action upgrades the class.
"""
import copyreg
import logging
import types
from collections import OrderedDict, deque
from typing import Any, Dict, Iterable, Optional, Tuple

from .constants import (
    LOCK_ACTION_ATTRIBUTE,
    LOCK_BASE_ATTRIBUTE,
    LOCKED_CLASS_PREFIXES,
    LOGGER_NAMESPACE,
)
from .errors import LockViolationError, UnlockableObjectError
from .lock_types import LockAction, NodeKind, Permission
from .nodes import classify, instance_dict, is_heap_instance

logger = logging.getLogger(f"{LOGGER_NAMESPACE}.guards")

_LOCKED_CLASSES: Dict[Tuple[type, LockAction], type] = {}

# Heap subclasses of these keep their contents in storage no guard can reach.
_UNGUARDED_CONTAINERS = (deque,)

_STATE_WORDS: Dict[LockAction, str] = {
    LockAction.PREVENT_EXTENSIONS: "not extensible",
    LockAction.SEAL: "sealed",
    LockAction.FREEZE: "frozen",
}

_VERBS: Dict[Permission, str] = {
    Permission.ADD: "add",
    Permission.MODIFY: "assign to",
    Permission.DELETE: "delete",
    Permission.RECONFIGURE: "reorder",
}


# =============================================================================
# PERMISSION CHECKS
# =============================================================================

def locked_action(value: Any) -> Optional[LockAction]:
    """Return the LockAction applied to ``value``, or None if it is unlocked."""
    return getattr(type(value), LOCK_ACTION_ATTRIBUTE, None)


def unlocked_type(value: Any) -> type:
    """Return the class ``value`` had before it was locked."""
    return getattr(type(value), LOCK_BASE_ATTRIBUTE, type(value))


def _require(node: Any, permission: Permission, key: Any = None) -> None:
    action = locked_action(node)
    if action is None or action.allows(permission):
        return
    raise LockViolationError(
        message=f"Cannot {_VERBS[permission]} {key!r}, object is {_STATE_WORDS[action]}",
        permission=permission,
        type_name=unlocked_type(node).__qualname__,
        key=key,
    )


def _require_resize(node: Any, removed: int, added: int, key: Any) -> None:
    if added > removed:
        _require(node, Permission.ADD, key)
    if added < removed:
        _require(node, Permission.DELETE, key)
    if min(added, removed) > 0:
        _require(node, Permission.MODIFY, key)


def _require_keys(node: Any, incoming: Dict[Any, Any]) -> None:
    for key in incoming:
        _require(node, Permission.MODIFY if dict.__contains__(node, key) else Permission.ADD, key)


def _plain_update(node: Any) -> bool:
    return unlocked_type(node).update is dict.update


def _require_set_result(node: Any, result: set) -> None:
    current = set(set.__iter__(node))
    if result - current:
        _require(node, Permission.ADD, next(iter(result - current)))
    if current - result:
        _require(node, Permission.DELETE, next(iter(current - result)))


def _new_unlocked(cls: type, *args: Any) -> Any:
    return cls.__new__(cls, *args)


def _new_unlocked_ex(cls: type, args: Tuple[Any, ...], kwargs: Dict[str, Any]) -> Any:
    return cls.__new__(cls, *args, **kwargs)


def has_own_attribute(value: Any, name: str) -> bool:
    """Return True if ``name`` is stored on the instance itself."""
    namespace = instance_dict(value)
    if namespace is not None and name in namespace:
        return True
    for klass in type(value).__mro__:
        descriptor = klass.__dict__.get(name)
        if isinstance(descriptor, types.MemberDescriptorType):
            try:
                descriptor.__get__(value, type(value))
            except AttributeError:
                return False
            return True
    return False


def _class_handles(cls: type, name: str) -> bool:
    """True if ``name`` resolves to a class-level data descriptor such as a property."""
    for klass in cls.__mro__:
        if name in klass.__dict__:
            attr = klass.__dict__[name]
            if isinstance(attr, types.MemberDescriptorType):
                return False
            return hasattr(type(attr), "__set__") or hasattr(type(attr), "__delete__")
    return False


# =============================================================================
# GUARD METHOD SETS
# =============================================================================

class LockedObject:
    """Refuses attribute writes forbidden by the class's LockAction.

    Never used as a base. Its methods, and those of the subclasses below,
    are copied into each generated class.
    """

    __slots__ = ()

    def __new__(cls, *args: Any, **kwargs: Any) -> Any:
        # Constructing from a locked class builds an ordinary, unlocked instance.
        return getattr(cls, LOCK_BASE_ATTRIBUTE)(*args, **kwargs)

    def __setattr__(self, name: str, value: Any) -> None:
        if name in ("__class__", "__dict__"):
            raise LockViolationError(
                message=f"Cannot replace {name} of a locked object",
                permission=Permission.RECONFIGURE,
                type_name=unlocked_type(self).__qualname__,
                key=name,
            )
        if has_own_attribute(self, name):
            _require(self, Permission.MODIFY, name)
        elif not _class_handles(type(self), name):
            _require(self, Permission.ADD, name)
        unlocked_type(self).__setattr__(self, name, value)

    def __delattr__(self, name: str) -> None:
        if has_own_attribute(self, name):
            _require(self, Permission.DELETE, name)
        unlocked_type(self).__delattr__(self, name)

    def __reduce_ex__(self, protocol: Any) -> Any:
        # Copies and pickles are rebuilt from the unlocked class.
        reduced = unlocked_type(self).__reduce_ex__(self, protocol)
        if not isinstance(reduced, tuple) or len(reduced) < 2:
            return reduced
        func, args = reduced[0], tuple(reduced[1] or ())
        # pickle refuses __newobj__ when args[0] is not the object's own class.
        if func is copyreg.__newobj__:
            func = _new_unlocked
        elif func is copyreg.__newobj_ex__:
            func = _new_unlocked_ex
        elif func is type(self):
            func = unlocked_type(self)
        if args and args[0] is type(self):
            args = (unlocked_type(self),) + args[1:]
        return (func, args) + tuple(reduced[2:])


class LockedDict(LockedObject):
    """Guards dict storage."""

    __slots__ = ()

    def __setitem__(self, key: Any, value: Any) -> None:
        _require(self, Permission.MODIFY if dict.__contains__(self, key) else Permission.ADD, key)
        unlocked_type(self).__setitem__(self, key, value)

    def __delitem__(self, key: Any) -> None:
        if dict.__contains__(self, key):
            _require(self, Permission.DELETE, key)
        unlocked_type(self).__delitem__(self, key)

    def setdefault(self, key: Any, default: Any = None) -> Any:
        if not dict.__contains__(self, key):
            _require(self, Permission.ADD, key)
        return unlocked_type(self).setdefault(self, key, default)

    def update(self, *args: Any, **kwargs: Any) -> None:
        if not _plain_update(self):
            # A custom update cannot be inspected ahead of time.
            _require(self, Permission.ADD)
            unlocked_type(self).update(self, *args, **kwargs)
            return
        incoming = dict(*args, **kwargs)
        _require_keys(self, incoming)
        unlocked_type(self).update(self, incoming)

    def __ior__(self, other: Any) -> Any:
        if not _plain_update(self):
            _require(self, Permission.ADD)
            return unlocked_type(self).__ior__(self, other)
        incoming = dict(other)
        _require_keys(self, incoming)
        return unlocked_type(self).__ior__(self, incoming)

    def pop(self, key: Any, *default: Any) -> Any:
        if dict.__contains__(self, key):
            _require(self, Permission.DELETE, key)
        return unlocked_type(self).pop(self, key, *default)

    def popitem(self, *args: Any, **kwargs: Any) -> Any:
        if dict.__len__(self):
            _require(self, Permission.DELETE)
        return unlocked_type(self).popitem(self, *args, **kwargs)

    def clear(self) -> None:
        if dict.__len__(self):
            _require(self, Permission.DELETE)
        unlocked_type(self).clear(self)


class LockedOrderedDict(LockedDict):
    """Guards OrderedDict storage, including its ordering."""

    __slots__ = ()

    def move_to_end(self, key: Any, last: bool = True) -> None:
        _require(self, Permission.RECONFIGURE, key)
        unlocked_type(self).move_to_end(self, key, last)


class LockedList(LockedObject):
    """Guards list storage."""

    __slots__ = ()

    def __setitem__(self, index: Any, value: Any) -> None:
        if isinstance(index, slice):
            value = list(value)
            replaced = len(range(*index.indices(list.__len__(self))))
            _require_resize(self, replaced, len(value), index)
        else:
            _require(self, Permission.MODIFY, index)
        unlocked_type(self).__setitem__(self, index, value)

    def __delitem__(self, index: Any) -> None:
        if isinstance(index, slice):
            if len(range(*index.indices(list.__len__(self)))):
                _require(self, Permission.DELETE, index)
        else:
            _require(self, Permission.DELETE, index)
        unlocked_type(self).__delitem__(self, index)

    def append(self, item: Any) -> None:
        _require(self, Permission.ADD, list.__len__(self))
        unlocked_type(self).append(self, item)

    def insert(self, index: int, item: Any) -> None:
        _require(self, Permission.ADD, index)
        unlocked_type(self).insert(self, index, item)

    def extend(self, items: Iterable[Any]) -> None:
        items = list(items)
        if items:
            _require(self, Permission.ADD, list.__len__(self))
        unlocked_type(self).extend(self, items)

    def __iadd__(self, items: Iterable[Any]) -> Any:
        items = list(items)
        if items:
            _require(self, Permission.ADD, list.__len__(self))
        return unlocked_type(self).__iadd__(self, items)

    def __imul__(self, count: int) -> Any:
        if list.__len__(self):
            if count <= 0:
                _require(self, Permission.DELETE)
            elif count > 1:
                _require(self, Permission.ADD)
        return unlocked_type(self).__imul__(self, count)

    def pop(self, *args: Any) -> Any:
        if list.__len__(self):
            _require(self, Permission.DELETE, args[0] if args else -1)
        return unlocked_type(self).pop(self, *args)

    def remove(self, item: Any) -> None:
        if list.__contains__(self, item):
            _require(self, Permission.DELETE, item)
        unlocked_type(self).remove(self, item)

    def clear(self) -> None:
        if list.__len__(self):
            _require(self, Permission.DELETE)
        unlocked_type(self).clear(self)

    def sort(self, *args: Any, **kwargs: Any) -> None:
        _require(self, Permission.RECONFIGURE)
        unlocked_type(self).sort(self, *args, **kwargs)

    def reverse(self) -> None:
        _require(self, Permission.RECONFIGURE)
        unlocked_type(self).reverse(self)


class LockedSet(LockedObject):
    """Guards set storage."""

    __slots__ = ()

    def add(self, element: Any) -> None:
        if not set.__contains__(self, element):
            _require(self, Permission.ADD, element)
        unlocked_type(self).add(self, element)

    def discard(self, element: Any) -> None:
        if set.__contains__(self, element):
            _require(self, Permission.DELETE, element)
        unlocked_type(self).discard(self, element)

    def remove(self, element: Any) -> None:
        if set.__contains__(self, element):
            _require(self, Permission.DELETE, element)
        unlocked_type(self).remove(self, element)

    def pop(self) -> Any:
        if set.__len__(self):
            _require(self, Permission.DELETE)
        return unlocked_type(self).pop(self)

    def clear(self) -> None:
        if set.__len__(self):
            _require(self, Permission.DELETE)
        unlocked_type(self).clear(self)

    def update(self, *others: Iterable[Any]) -> None:
        incoming = set().union(*others)
        _require_set_result(self, set(set.__iter__(self)) | incoming)
        unlocked_type(self).update(self, incoming)

    def __ior__(self, other: Any) -> Any:
        incoming = set(other)
        _require_set_result(self, set(set.__iter__(self)) | incoming)
        return unlocked_type(self).__ior__(self, incoming)

    def difference_update(self, *others: Iterable[Any]) -> None:
        incoming = set().union(*others)
        _require_set_result(self, set(set.__iter__(self)) - incoming)
        unlocked_type(self).difference_update(self, incoming)

    def __isub__(self, other: Any) -> Any:
        incoming = set(other)
        _require_set_result(self, set(set.__iter__(self)) - incoming)
        return unlocked_type(self).__isub__(self, incoming)

    def intersection_update(self, *others: Iterable[Any]) -> None:
        incoming = [set(other) for other in others]
        _require_set_result(self, set(set.__iter__(self)).intersection(*incoming))
        unlocked_type(self).intersection_update(self, *incoming)

    def __iand__(self, other: Any) -> Any:
        incoming = set(other)
        _require_set_result(self, set(set.__iter__(self)) & incoming)
        return unlocked_type(self).__iand__(self, incoming)

    def symmetric_difference_update(self, other: Iterable[Any]) -> None:
        incoming = set(other)
        _require_set_result(self, set(set.__iter__(self)) ^ incoming)
        unlocked_type(self).symmetric_difference_update(self, incoming)

    def __ixor__(self, other: Any) -> Any:
        incoming = set(other)
        _require_set_result(self, set(set.__iter__(self)) ^ incoming)
        return unlocked_type(self).__ixor__(self, incoming)


# =============================================================================
# LOCKED CLASS FACTORY
# =============================================================================

def _mixin_for(base: type) -> type:
    if issubclass(base, OrderedDict):
        return LockedOrderedDict
    if issubclass(base, dict):
        return LockedDict
    if issubclass(base, list):
        return LockedList
    if issubclass(base, set):
        return LockedSet
    if issubclass(base, _UNGUARDED_CONTAINERS):
        raise UnlockableObjectError(
            message="container storage cannot be guarded",
            type_name=base.__qualname__,
        )
    return LockedObject


def _guard_methods(mixin: type) -> Dict[str, Any]:
    """Collect the guard methods of ``mixin`` and the method sets it extends."""
    methods: Dict[str, Any] = {}
    for klass in reversed(mixin.__mro__[:-1]):
        for name, attr in vars(klass).items():
            if isinstance(attr, (types.FunctionType, staticmethod)):
                methods[name] = attr
    return methods


def locked_class(base: type, action: LockAction) -> type:
    """Return the generated subclass of ``base`` that enforces ``action``.

    Args:
        base: Unlocked heap class
        action: LockAction to enforce

    Returns:
        Cached subclass named after the action (FrozenX, SealedX, NonExtensibleX)

    Raises:
        UnlockableObjectError: If ``base`` cannot be subclassed
    """
    key = (base, action)
    cached = _LOCKED_CLASSES.get(key)
    if cached is not None:
        return cached
    name = f"{LOCKED_CLASS_PREFIXES[action.value]}{base.__name__}"
    namespace = _guard_methods(_mixin_for(base))
    namespace.update({
        "__slots__": (),
        "__module__": base.__module__,
        "__qualname__": name,
        "__doc__": base.__doc__,
        LOCK_ACTION_ATTRIBUTE: action,
        LOCK_BASE_ATTRIBUTE: base,
    })
    try:
        cls = type(base)(name, (base,), namespace)
    except TypeError as exc:
        raise UnlockableObjectError(
            message=f"cannot derive a locked class: {exc}",
            type_name=base.__qualname__,
        ) from exc
    logger.debug("generated %s for %s.%s", name, base.__module__, base.__qualname__)
    return _LOCKED_CLASSES.setdefault(key, cls)


def apply_lock(value: Any, action: LockAction) -> Any:
    """Lock ``value`` in place with ``action``.

    Only OBJECT nodes change. Every other kind is immutable already or is
    never locked, and is returned untouched.

    Args:
        value: Any Python value
        action: LockAction to apply

    Returns:
        The same value

    Raises:
        UnlockableObjectError: If the node cannot be locked in place
    """
    if classify(value) is not NodeKind.OBJECT:
        return value
    current = locked_action(value)
    if current is not None and current.covers(action):
        return value
    if current is None and not is_heap_instance(value):
        raise UnlockableObjectError(
            message="instances of builtin types cannot be locked in place, use a subclass",
            type_name=type(value).__qualname__,
        )
    target = locked_class(unlocked_type(value), action)
    try:
        object.__setattr__(value, "__class__", target)
    except TypeError as exc:
        raise UnlockableObjectError(
            message=f"class cannot be swapped in place: {exc}",
            type_name=type(value).__qualname__,
        ) from exc
    return value
