"""
deeplock Read-Only Projection.

Runtime-checked deep read-only views. ``readonly_view(value)`` wraps a
value so every read is projected again and every write raises
LockViolationError, mirroring what deep_lock(value) with FREEZE
guarantees.

Projection rules:
| Value | → View |
|-------|--------|
| primitive, callable, date/time, exception, pattern | unchanged |
| class, module, function, buffer | unchanged |
| view | unchanged |
| Future (asyncio, concurrent.futures) | ReadOnlyFuture |
| Mapping (dict, weak dictionaries, ...) | ReadOnlyMapping |
| Set (set, frozenset, WeakSet, ...) | ReadOnlySet |
| Sequence (list, tuple, ...) | ReadOnlySequence |
| any other object | ReadOnlyObject |

Views are lazy: nothing is wrapped until it is read, so cycles need no
bookkeeping. Full static parity with a structural DeepReadonly type is not
attempted; the overloads below cover the common shapes.
"""
import asyncio
import concurrent.futures
import datetime
import re
from collections.abc import Mapping, Sequence, Set
from typing import (
    Any,
    Callable,
    Generic,
    Iterator,
    Mapping as MappingT,
    Sequence as SequenceT,
    AbstractSet,
    TypeVar,
    Union,
    overload,
)

from .errors import LockViolationError
from .lock_types import NodeKind, Permission
from .nodes import classify

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)
K = TypeVar("K")
V_co = TypeVar("V_co", covariant=True)

Builtin = Union[
    None,
    bool,
    int,
    float,
    complex,
    str,
    bytes,
    Callable[..., Any],
    datetime.date,
    datetime.time,
    datetime.timedelta,
    BaseException,
    re.Pattern,
]
_B = TypeVar("_B", bound=Builtin)

_PASSTHROUGH_KINDS = frozenset({
    NodeKind.PRIMITIVE,
    NodeKind.SHARED,
    NodeKind.CALLABLE,
    NodeKind.BUFFER,
})
_PASSTHROUGH_TYPES = (
    datetime.date,
    datetime.time,
    datetime.timedelta,
    BaseException,
    re.Pattern,
)
_FUTURE_TYPES = (asyncio.Future, concurrent.futures.Future)


def _target(value: Any) -> Any:
    if isinstance(value, ReadOnlyView):
        return object.__getattribute__(value, "_ReadOnlyView__target")
    return value


class ReadOnlyView:
    """Marker base for every read-only view."""

    # Mangled, so a read of "_target" on a view is projected like any other.
    __slots__ = ("__target",)

    def __init__(self, target: Any) -> None:
        object.__setattr__(self, "_ReadOnlyView__target", target)

    def _refuse(self, permission: Permission, key: Any) -> LockViolationError:
        return LockViolationError(
            message="view is read-only",
            permission=permission,
            type_name=type(_target(self)).__qualname__,
            key=key,
        )

    def __setattr__(self, name: str, value: Any) -> None:
        raise self._refuse(Permission.MODIFY, name)

    def __delattr__(self, name: str) -> None:
        raise self._refuse(Permission.DELETE, name)

    def __setitem__(self, key: Any, value: Any) -> None:
        raise self._refuse(Permission.MODIFY, key)

    def __delitem__(self, key: Any) -> None:
        raise self._refuse(Permission.DELETE, key)

    def __eq__(self, other: Any) -> bool:
        return _target(self) == _target(other)

    def __hash__(self) -> int:
        return hash(_target(self))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({_target(self)!r})"


class ReadOnlyObject(ReadOnlyView, Generic[T]):
    """Attribute reads are projected; attribute writes raise."""

    __slots__ = ()

    def __getattr__(self, name: str) -> Any:
        return readonly_view(getattr(_target(self), name))

    def __dir__(self) -> Any:
        return dir(_target(self))


class ReadOnlyMapping(ReadOnlyView, Mapping, Generic[K, V_co]):
    """Read-only mapping whose keys and values are projected."""

    __slots__ = ()

    def __getitem__(self, key: Any) -> Any:
        return readonly_view(_target(self)[_target(key)])

    def __iter__(self) -> Iterator[Any]:
        return (readonly_view(key) for key in _target(self))

    def __len__(self) -> int:
        return len(_target(self))

    def __contains__(self, key: Any) -> bool:
        return _target(key) in _target(self)


class ReadOnlySequence(ReadOnlyView, Sequence, Generic[T_co]):
    """Read-only sequence whose items are projected."""

    __slots__ = ()

    def __getitem__(self, index: Any) -> Any:
        if isinstance(index, slice):
            return ReadOnlySequence(_target(self)[index])
        return readonly_view(_target(self)[index])

    def __iter__(self) -> Iterator[Any]:
        return (readonly_view(item) for item in _target(self))

    def __len__(self) -> int:
        return len(_target(self))

    def __contains__(self, item: Any) -> bool:
        return _target(item) in _target(self)


class ReadOnlySet(ReadOnlyView, Set, Generic[T_co]):
    """Read-only set whose members are projected."""

    __slots__ = ()

    @classmethod
    def _from_iterable(cls, iterable: Any) -> frozenset:
        return frozenset(iterable)

    def __iter__(self) -> Iterator[Any]:
        return (readonly_view(member) for member in _target(self))

    def __len__(self) -> int:
        return len(_target(self))

    def __contains__(self, member: Any) -> bool:
        return _target(member) in _target(self)


class ReadOnlyFuture(ReadOnlyView, Generic[T_co]):
    """Deferred value whose result is projected. It cannot be resolved or cancelled."""

    __slots__ = ()

    def done(self) -> bool:
        return _target(self).done()

    def cancelled(self) -> bool:
        return _target(self).cancelled()

    def result(self, *args: Any) -> Any:
        return readonly_view(_target(self).result(*args))

    def exception(self, *args: Any) -> Any:
        return _target(self).exception(*args)

    def __await__(self) -> Any:
        value = yield from _target(self).__await__()
        return readonly_view(value)


@overload
def readonly_view(value: _B) -> _B: ...
@overload
def readonly_view(value: "asyncio.Future[T]") -> ReadOnlyFuture[T]: ...
@overload
def readonly_view(value: "concurrent.futures.Future[T]") -> ReadOnlyFuture[T]: ...
@overload
def readonly_view(value: MappingT[K, T]) -> ReadOnlyMapping[K, T]: ...
@overload
def readonly_view(value: AbstractSet[T]) -> ReadOnlySet[T]: ...
@overload
def readonly_view(value: SequenceT[T]) -> ReadOnlySequence[T]: ...
@overload
def readonly_view(value: T) -> ReadOnlyObject[T]: ...


def readonly_view(value: Any) -> Any:
    """Project ``value`` into a deep read-only view.

    Args:
        value: Any Python value

    Returns:
        ``value`` itself for leaves, otherwise a ReadOnlyView
    """
    if isinstance(value, ReadOnlyView):
        return value
    if classify(value) in _PASSTHROUGH_KINDS:
        return value
    if isinstance(value, _PASSTHROUGH_TYPES) or callable(value):
        return value
    if isinstance(value, _FUTURE_TYPES):
        return ReadOnlyFuture(value)
    if isinstance(value, Mapping):
        return ReadOnlyMapping(value)
    if isinstance(value, Set):
        return ReadOnlySet(value)
    if isinstance(value, Sequence):
        return ReadOnlySequence(value)
    return ReadOnlyObject(value)


def is_readonly_view(value: Any) -> bool:
    """Return True if ``value`` is a read-only view."""
    return isinstance(value, ReadOnlyView)
