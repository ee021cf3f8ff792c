"""
deeplock Containers.

Builtin dict, list, set and SimpleNamespace instances cannot change class,
so they cannot be locked in place. This module provides subclasses that
can, and ``lockable`` to convert a tree of builtin containers into them.

``lockable`` copies builtin containers and rebinds the copies into the
objects that hold them; ``deep_lock`` never copies.
"""
import types
from typing import Any, Callable, Dict

from .guards import locked_action
from .lock_types import NodeKind
from .nodes import classify, instance_dict, is_heap_instance, populated_slots


class Record(types.SimpleNamespace):
    """Attribute bag that can be locked in place."""


class LockableDict(dict):
    """dict that can be locked in place."""


class LockableList(list):
    """list that can be locked in place."""


class LockableSet(set):
    """set that can be locked in place."""


class _Converter:
    """Copies builtin containers into lockable ones, memoized by identity."""

    def __init__(self) -> None:
        self.memo: Dict[int, Any] = {}
        self.dispatch: Dict[type, Callable[[Any], Any]] = {
            dict: self._dict,
            list: self._list,
            set: self._set,
            types.SimpleNamespace: self._namespace,
            tuple: self._tuple,
            frozenset: self._frozenset,
        }

    def convert(self, value: Any) -> Any:
        if id(value) in self.memo:
            return self.memo[id(value)]
        handler = self.dispatch.get(type(value))
        if handler is not None:
            return handler(value)
        if self._holds_containers(value):
            return self._object(value)
        return value

    def _holds_containers(self, value: Any) -> bool:
        kind = classify(value)
        if kind is NodeKind.CALLABLE:
            return True
        # A locked object keeps what it holds.
        return kind is NodeKind.OBJECT and is_heap_instance(value) and locked_action(value) is None

    def _object(self, value: Any) -> Any:
        """Convert what ``value`` holds and rebind it in place."""
        self.memo[id(value)] = value
        namespace = instance_dict(value)
        if namespace is not None:
            for name, item in list(namespace.items()):
                converted = self.convert(item)
                if converted is not item:
                    namespace[name] = converted
        for descriptor, item in list(populated_slots(value)):
            converted = self.convert(item)
            if converted is not item:
                descriptor.__set__(value, converted)
        if isinstance(value, dict):
            for key, item in list(dict.items(value)):
                converted = self.convert(item)
                if converted is not item:
                    dict.__setitem__(value, key, converted)
        elif isinstance(value, list):
            for index, item in enumerate(list(list.__iter__(value))):
                converted = self.convert(item)
                if converted is not item:
                    list.__setitem__(value, index, converted)
        return value

    def _dict(self, value: dict) -> LockableDict:
        result = self.memo[id(value)] = LockableDict()
        for key, item in value.items():
            result[self.convert(key)] = self.convert(item)
        return result

    def _list(self, value: list) -> LockableList:
        result = self.memo[id(value)] = LockableList()
        result.extend(self.convert(item) for item in value)
        return result

    def _set(self, value: set) -> LockableSet:
        result = self.memo[id(value)] = LockableSet()
        result.update(self.convert(item) for item in value)
        return result

    def _namespace(self, value: types.SimpleNamespace) -> Record:
        result = self.memo[id(value)] = Record()
        for name, item in vars(value).items():
            setattr(result, name, self.convert(item))
        return result

    def _tuple(self, value: tuple) -> tuple:
        items = [self.convert(item) for item in value]
        # A cycle through a mutable member may have built this tuple already.
        if id(value) in self.memo:
            return self.memo[id(value)]
        result = tuple(items) if any(a is not b for a, b in zip(items, value)) else value
        self.memo[id(value)] = result
        return result

    def _frozenset(self, value: frozenset) -> frozenset:
        items = [self.convert(item) for item in value]
        if id(value) in self.memo:
            return self.memo[id(value)]
        result = frozenset(items) if any(a is not b for a, b in zip(items, value)) else value
        self.memo[id(value)] = result
        return result


def lockable(value: Any) -> Any:
    """Copy builtin containers in ``value`` into lockable subclasses.

    dict → LockableDict, list → LockableList, set → LockableSet and
    SimpleNamespace → Record. Tuples and frozensets are rebuilt only when
    a member changed. Instances of Python classes and functions are kept,
    not copied: builtin containers found in their __dict__, their __slots__
    and their dict or list storage are converted and rebound in place.
    Locked objects, buffers and shared definitions are left alone.
    Shared references stay shared and cycles are preserved.

    Args:
        value: Tree of builtin containers and the objects holding them

    Returns:
        Equivalent tree that deep_lock can lock in place
    """
    return _Converter().convert(value)
