"""Unit tests for :mod:`call_mox.context`."""

from __future__ import annotations

from call_mox.cases import Case
from call_mox.context import Context, ContextStack
from call_mox.records import MockRecord


def _record(name: str, *case_names: str) -> MockRecord:
    record = MockRecord(name)
    for case_name in case_names:
        record.add_case(Case(name=case_name))
    return record


def test_stack_starts_at_root() -> None:
    """A new stack has only its root context."""
    stack = ContextStack()

    assert stack.current is stack.root
    assert stack.root.is_root
    assert stack.depth == 0
    assert list(stack) == [stack.root]


def test_push_and_pop_track_parents() -> None:
    """Pushed contexts link to their parent and pop restores it."""
    stack = ContextStack()
    first = stack.push()
    second = stack.push()

    assert second.parent is first
    assert first.parent is stack.root
    assert stack.depth == 2
    assert list(stack) == [second, first, stack.root]

    assert stack.pop() is second
    assert stack.current is first


def test_pop_at_root_is_noop() -> None:
    """Popping the root leaves it current."""
    stack = ContextStack()

    assert stack.pop() is stack.root
    assert stack.current is stack.root


def test_lookup_prefers_innermost_record() -> None:
    """The innermost record for a name shadows outer ones."""
    stack = ContextStack()
    outer = _record("fetch", "outer")
    stack.root.mocks["fetch"] = outer
    stack.push()

    assert stack.lookup("fetch") is outer

    inner = _record("fetch", "inner")
    stack.current.mocks["fetch"] = inner

    assert stack.lookup("fetch") is inner
    assert stack.find_record("fetch") is inner
    assert stack.lookup("missing") is None


def test_lookup_case_stays_in_innermost_record() -> None:
    """Case lookup does not continue into outer records."""
    stack = ContextStack()
    stack.root.mocks["fetch"] = _record("fetch", "only-outer")
    stack.push()
    stack.current.mocks["fetch"] = _record("fetch", "only-inner")

    assert stack.lookup("fetch", "only-outer") is None
    found = stack.lookup("fetch", "only-inner")
    assert isinstance(found, Case)
    assert found.name == "only-inner"


def test_lookup_ignores_fallback_links() -> None:
    """Visibility follows parents, never ``fallback``."""
    stack = ContextStack()
    orphan = _record("fetch", "orphan")
    stack.push().mocks["other"] = MockRecord("other", fallback=orphan)

    assert stack.lookup("fetch") is None


def test_context_depth_and_repr() -> None:
    """Contexts know their depth and list their mocks."""
    root = Context()
    child = Context(root)
    child.mocks["b"] = MockRecord("b")
    child.mocks["a"] = MockRecord("a")

    assert child.depth == 1
    assert not child.is_root
    assert repr(child) == "Context(depth=1, mocks=['a', 'b'])"
