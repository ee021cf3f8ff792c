"""
deeplock Nodes.

This module classifies values met during a traversal and enumerates the
own slots of a node.

Own slots are the values physically stored on the instance: its __dict__
entries, its populated __slots__ and the contents of dict, list, set,
tuple and frozenset storage. Nothing is ever read through the class.
"""
import array
import datetime
import functools
import mmap
import numbers
import re
import types
from collections import deque
from enum import Enum
from typing import Any, Dict, Iterator, Optional, Tuple

import numpy as np

from .lock_types import NodeKind, WALKABLE_KINDS

# CPython's Py_TPFLAGS_HEAPTYPE: set on classes created by a class statement.
_HEAPTYPE = 1 << 9
# Py_TPFLAGS_IMMUTABLETYPE (3.10+): heap types that refuse __class__ assignment,
# such as re.Pattern.
_IMMUTABLETYPE = 1 << 8

_PRIMITIVE_TYPES = (
    bool,
    numbers.Number,
    str,
    bytes,
    np.generic,
    type(Ellipsis),
    type(NotImplemented),
)

_SHARED_TYPES = (
    type,
    types.ModuleType,
    types.BuiltinFunctionType,
    types.MethodType,
    types.MethodWrapperType,
    types.WrapperDescriptorType,
    types.MethodDescriptorType,
    types.ClassMethodDescriptorType,
    types.GetSetDescriptorType,
    types.MemberDescriptorType,
    types.CodeType,
    property,
    staticmethod,
    classmethod,
    Enum,
)

# Callables that carry a __dict__ of their own but cannot change class.
_CALLABLE_TYPES = (
    types.FunctionType,
    functools.partial,
)

_BUFFER_TYPES = (
    bytearray,
    memoryview,
    array.array,
    mmap.mmap,
    np.ndarray,
)

_IMMUTABLE_TYPES = (
    tuple,
    frozenset,
    range,
    slice,
    types.MappingProxyType,
    datetime.date,
    datetime.time,
    datetime.timedelta,
    datetime.tzinfo,
    re.Pattern,
    re.Match,
)

# Builtin containers whose storage cannot be guarded in place.
_MUTABLE_BUILTINS = (
    dict,
    list,
    set,
    deque,
    types.SimpleNamespace,
)


def is_heap_instance(value: Any) -> bool:
    """Return True if ``value`` is an instance of a Python-defined class.

    Heap types flagged immutable, as most stdlib extension types are since
    3.10, do not count: their instances cannot change class.
    """
    flags = type(value).__flags__
    return bool(flags & _HEAPTYPE) and not flags & _IMMUTABLETYPE


def instance_dict(value: Any) -> Optional[Dict[Any, Any]]:
    """Return the instance __dict__ of ``value`` without consulting overrides."""
    try:
        return object.__getattribute__(value, "__dict__")
    except AttributeError:
        return None


def classify(value: Any) -> NodeKind:
    """Classify a value for the traversal.

    Args:
        value: Any Python value

    Returns:
        NodeKind
    """
    if value is None or isinstance(value, _PRIMITIVE_TYPES):
        return NodeKind.PRIMITIVE
    if isinstance(value, _SHARED_TYPES):
        return NodeKind.SHARED
    if type(value) in _CALLABLE_TYPES:
        return NodeKind.CALLABLE
    if isinstance(value, _BUFFER_TYPES):
        return NodeKind.BUFFER
    if is_heap_instance(value):
        return NodeKind.OBJECT
    if isinstance(value, _IMMUTABLE_TYPES):
        return NodeKind.IMMUTABLE
    if isinstance(value, _MUTABLE_BUILTINS) or instance_dict(value) is not None:
        return NodeKind.OBJECT
    # Builtin type without a __dict__: nothing can be added to it.
    return NodeKind.IMMUTABLE


def is_node(value: Any) -> bool:
    """Return True if the traversal should visit ``value``."""
    return classify(value) in WALKABLE_KINDS


def populated_slots(value: Any) -> Iterator[Tuple[types.MemberDescriptorType, Any]]:
    """Yield (descriptor, value) for each populated __slots__ entry along the MRO."""
    seen = set()
    for klass in type(value).__mro__:
        names = klass.__dict__.get("__slots__", ())
        if isinstance(names, str):
            names = (names,)
        for name in names:
            if name.startswith("__") and not name.endswith("__"):
                name = f"_{klass.__name__.lstrip('_')}{name}"
            if name not in seen:
                seen.add(name)
                descriptor = klass.__dict__.get(name)
                if not isinstance(descriptor, types.MemberDescriptorType):
                    continue
                try:
                    item = descriptor.__get__(value, type(value))
                except AttributeError:
                    # Declared but never assigned: not an own slot.
                    continue
                yield descriptor, item


def slot_values(value: Any) -> Iterator[Any]:
    """Yield the values of the populated __slots__ declared along the MRO."""
    for _, item in populated_slots(value):
        yield item


def storage_values(value: Any) -> Iterator[Any]:
    """Yield the contents of builtin container storage, bypassing overrides."""
    if isinstance(value, dict):
        for key, item in list(dict.items(value)):
            yield key
            yield item
    elif isinstance(value, types.MappingProxyType):
        for key, item in list(value.items()):
            yield key
            yield item
    elif isinstance(value, list):
        yield from list(list.__iter__(value))
    elif isinstance(value, tuple):
        yield from tuple.__iter__(value)
    elif isinstance(value, set):
        yield from list(set.__iter__(value))
    elif isinstance(value, frozenset):
        yield from frozenset.__iter__(value)


def own_values(value: Any) -> Iterator[Any]:
    """Yield every value held in an own slot of ``value``.

    Order: instance __dict__ (insertion order, keys included when they are
    not strings), then __slots__ along the MRO, then container storage.
    """
    namespace = instance_dict(value)
    if namespace is not None:
        for key, item in list(namespace.items()):
            if not isinstance(key, str):
                yield key
            yield item
    yield from slot_values(value)
    yield from storage_values(value)


def child_nodes(value: Any) -> Iterator[Any]:
    """Yield the own-slot values of ``value`` that the traversal must visit.

    None, primitives, shared definitions and buffers are skipped.
    """
    if classify(value) not in WALKABLE_KINDS:
        return
    for item in own_values(value):
        if is_node(item):
            yield item


class IdentitySet:
    """Set of objects compared by identity.

    Holds a reference to every member so ids are not reused while the
    set is alive.
    """

    __slots__ = ("_members",)

    def __init__(self) -> None:
        self._members: Dict[int, Any] = {}

    def __contains__(self, value: Any) -> bool:
        return id(value) in self._members

    def __len__(self) -> int:
        return len(self._members)

    def __iter__(self) -> Iterator[Any]:
        return iter(list(self._members.values()))

    def add(self, value: Any) -> None:
        self._members[id(value)] = value
