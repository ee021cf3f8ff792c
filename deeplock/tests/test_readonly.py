"""
Tests for deeplock Read-Only Projection.

Tests:
- Projection table
- Reads are projected lazily, writes raise
- Cycles and identity of the wrapped value
"""
import asyncio
import concurrent.futures
import datetime
import re
import types

import pytest


class Node:
    def __init__(self, **attrs):
        self.__dict__.update(attrs)

    def describe(self):
        return "node"


class TestProjectionTable:
    """Test which view each value gets."""

    @pytest.mark.parametrize("value", [
        None, 1, 1.5, "s", b"b", True,
        len, Node, types,
        datetime.date(2020, 1, 1), ValueError("x"), re.compile("x"),
        bytearray(b"x"),
    ])
    def test_leaves_pass_through(self, value):
        """Primitives, callables, classes, dates, errors, patterns and buffers are unchanged."""
        from deeplock.readonly import readonly_view

        assert readonly_view(value) is value

    def test_bound_method_passes_through(self):
        """Callables are not wrapped."""
        from deeplock.readonly import readonly_view

        method = Node().describe
        assert readonly_view(method) is method

    def test_functions_pass_through(self):
        """Plain functions and partials are not wrapped."""
        import functools
        from deeplock.readonly import readonly_view

        def handler():
            return None

        parse = functools.partial(int, base=2)
        assert readonly_view(handler) is handler
        assert readonly_view(parse) is parse

    def test_mapping(self):
        """Mappings become ReadOnlyMapping."""
        from deeplock.readonly import ReadOnlyMapping, readonly_view

        assert isinstance(readonly_view({"a": 1}), ReadOnlyMapping)
        assert isinstance(readonly_view(types.MappingProxyType({})), ReadOnlyMapping)

    def test_sequence(self):
        """Lists and tuples become ReadOnlySequence."""
        from deeplock.readonly import ReadOnlySequence, readonly_view

        assert isinstance(readonly_view([1]), ReadOnlySequence)
        assert isinstance(readonly_view((1,)), ReadOnlySequence)

    def test_set(self):
        """Sets become ReadOnlySet."""
        from deeplock.readonly import ReadOnlySet, readonly_view

        assert isinstance(readonly_view({1}), ReadOnlySet)
        assert isinstance(readonly_view(frozenset({1})), ReadOnlySet)

    def test_future(self):
        """Futures become ReadOnlyFuture."""
        from deeplock.readonly import ReadOnlyFuture, readonly_view

        assert isinstance(readonly_view(concurrent.futures.Future()), ReadOnlyFuture)

    def test_object(self):
        """Anything else becomes ReadOnlyObject."""
        from deeplock.readonly import ReadOnlyObject, readonly_view

        assert isinstance(readonly_view(Node()), ReadOnlyObject)

    def test_view_is_not_wrapped_again(self):
        """Projecting a view returns it."""
        from deeplock.readonly import is_readonly_view, readonly_view

        view = readonly_view(Node())
        assert readonly_view(view) is view
        assert is_readonly_view(view)
        assert not is_readonly_view(Node())


class TestReadOnlyObject:
    """Test attribute access through ReadOnlyObject."""

    def test_reads_are_projected(self):
        """Nested attributes come back as views."""
        from deeplock.readonly import ReadOnlyMapping, ReadOnlyObject, readonly_view

        view = readonly_view(Node(child=Node(value=1), data={"k": [1]}))
        assert isinstance(view.child, ReadOnlyObject)
        assert view.child.value == 1
        assert isinstance(view.data, ReadOnlyMapping)
        assert view.describe() == "node"

    def test_writes_raise(self):
        """Attribute writes and deletes raise at every depth."""
        from deeplock.errors import LockViolationError
        from deeplock.readonly import readonly_view

        target = Node(child=Node(value=1))
        view = readonly_view(target)
        with pytest.raises(LockViolationError):
            view.child = None
        with pytest.raises(LockViolationError):
            view.child.value = 2
        with pytest.raises(LockViolationError):
            del view.child
        assert target.child.value == 1

    def test_target_is_not_locked(self):
        """The wrapped value stays writable through other references."""
        from deeplock.readonly import readonly_view

        target = Node(value=1)
        view = readonly_view(target)
        target.value = 2
        assert view.value == 2

    def test_cycles(self):
        """Views are lazy, so cycles need no bookkeeping."""
        from deeplock.readonly import readonly_view

        target = Node()
        target.me = target
        view = readonly_view(target)
        assert view.me.me == view

    def test_wrapped_value_is_not_reachable_by_name(self):
        """No attribute of the view hands out the writable target."""
        from deeplock.errors import LockViolationError
        from deeplock.readonly import readonly_view

        target = Node(value=1)
        view = readonly_view(target)
        with pytest.raises(AttributeError):
            view._target
        with pytest.raises(LockViolationError):
            view._target = Node()
        assert target.value == 1

    def test_target_named_attribute_is_projected(self):
        """A target attribute called _target is read like any other."""
        from deeplock.errors import LockViolationError
        from deeplock.readonly import ReadOnlyObject, readonly_view

        view = readonly_view(Node(_target=Node(x=1)))
        assert isinstance(view._target, ReadOnlyObject)
        with pytest.raises(LockViolationError):
            view._target.x = 5

    def test_missing_attribute(self):
        """Missing attributes still raise AttributeError."""
        from deeplock.readonly import readonly_view

        with pytest.raises(AttributeError):
            readonly_view(Node()).missing

    def test_dir_and_repr(self):
        """dir() and repr() describe the target."""
        from deeplock.readonly import readonly_view

        view = readonly_view(Node(value=1))
        assert "value" in dir(view)
        assert repr(view).startswith("ReadOnlyObject(")


class TestReadOnlyMapping:
    """Test ReadOnlyMapping."""

    def test_reads(self):
        """Mapping protocol reads work and project values."""
        from deeplock.readonly import ReadOnlySequence, readonly_view

        view = readonly_view({"a": [1], "b": 2})
        assert len(view) == 2
        assert "a" in view
        assert list(view) == ["a", "b"]
        assert view.get("b") == 2
        assert view.get("missing") is None
        assert isinstance(view["a"], ReadOnlySequence)
        assert dict(view.items())["b"] == 2

    def test_equality(self):
        """Views compare equal to their targets."""
        from deeplock.readonly import readonly_view

        assert readonly_view({"a": 1}) == {"a": 1}

    def test_writes_raise(self):
        """Item writes and deletes raise; mutators do not exist."""
        from deeplock.errors import LockViolationError
        from deeplock.readonly import readonly_view

        view = readonly_view({"a": {"b": 1}})
        with pytest.raises(LockViolationError):
            view["a"] = 1
        with pytest.raises(LockViolationError):
            del view["a"]
        with pytest.raises(LockViolationError):
            view["a"]["b"] = 2
        assert not hasattr(view, "update")
        assert not hasattr(view, "pop")


class TestReadOnlySequence:
    """Test ReadOnlySequence."""

    def test_reads(self):
        """Indexing, slicing and iteration project values."""
        from deeplock.readonly import ReadOnlyObject, ReadOnlySequence, readonly_view

        view = readonly_view([Node(), 2, 3])
        assert isinstance(view[0], ReadOnlyObject)
        assert isinstance(view[1:], ReadOnlySequence)
        assert list(view[1:]) == [2, 3]
        assert len(view) == 3
        assert 2 in view
        assert view.index(3) == 2

    def test_writes_raise(self):
        """Item writes raise; list mutators do not exist."""
        from deeplock.errors import LockViolationError
        from deeplock.readonly import readonly_view

        view = readonly_view([1, 2])
        with pytest.raises(LockViolationError):
            view[0] = 5
        with pytest.raises(LockViolationError):
            del view[0]
        assert not hasattr(view, "append")
        assert not hasattr(view, "sort")


class TestReadOnlySet:
    """Test ReadOnlySet."""

    def test_reads(self):
        """Membership, iteration and set algebra work."""
        from deeplock.readonly import readonly_view

        view = readonly_view({1, 2})
        assert 1 in view
        assert len(view) == 2
        assert view | {3} == {1, 2, 3}
        assert isinstance(view & {1}, frozenset)

    def test_mutators_do_not_exist(self):
        """add and discard are not available."""
        from deeplock.readonly import readonly_view

        view = readonly_view({1})
        assert not hasattr(view, "add")
        assert not hasattr(view, "discard")


class TestReadOnlyFuture:
    """Test ReadOnlyFuture."""

    def test_result_is_projected(self):
        """The resolved value comes back as a view."""
        from deeplock.readonly import ReadOnlyMapping, readonly_view

        future = concurrent.futures.Future()
        future.set_result({"a": 1})
        view = readonly_view(future)
        assert view.done()
        assert not view.cancelled()
        assert isinstance(view.result(), ReadOnlyMapping)
        assert view.exception() is None

    def test_cannot_resolve(self):
        """Resolving methods are not available."""
        from deeplock.readonly import readonly_view

        view = readonly_view(concurrent.futures.Future())
        assert not hasattr(view, "set_result")
        assert not hasattr(view, "cancel")

    def test_awaiting_projects_result(self):
        """Awaiting an asyncio future yields a view."""
        from deeplock.readonly import ReadOnlySequence, readonly_view

        async def scenario():
            future = asyncio.get_running_loop().create_future()
            future.set_result([1, 2])
            return await readonly_view(future)

        result = asyncio.run(scenario())
        assert isinstance(result, ReadOnlySequence)
        assert list(result) == [1, 2]
