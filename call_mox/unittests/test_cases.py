"""Unit tests for :mod:`call_mox.cases`."""

from __future__ import annotations

import types

import pytest

from call_mox.cases import (
    ALWAYS,
    DEFAULT_CASE_NAME,
    CallRecord,
    Case,
    describe_predicate,
)
from call_mox.comparators import Where


def _is_admin(user: str) -> bool:
    return user == "admin"


def test_case_defaults() -> None:
    """A bare case accepts everything and returns ``None``."""
    case = Case()

    assert case.is_default
    assert case.predicate is ALWAYS
    assert case.name == DEFAULT_CASE_NAME
    assert case.invoke(CallRecord(args=(1, 2))) is None
    assert case.count == 0


def test_case_name_from_named_function() -> None:
    """Named predicates render as their qualified name."""
    case = Case(predicate=_is_admin)

    assert not case.is_default
    assert case.name == f"{__name__}._is_admin"


def test_case_name_from_lambda_is_stable() -> None:
    """Lambdas render with their file and line."""
    predicate = lambda p: p == "x"  # noqa: E731
    line = predicate.__code__.co_firstlineno

    assert describe_predicate(predicate) == f"<lambda at test_cases.py:{line}>"
    assert Case(predicate=predicate).name == describe_predicate(predicate)


def test_case_name_from_comparator_repr() -> None:
    """Predicate objects with a custom repr use it as their name."""
    assert Case(predicate=Where(p="x")).name == "Where(p=Eq('x'))"


def test_explicit_case_name_wins() -> None:
    """An explicit name overrides the rendered predicate."""
    assert Case(predicate=_is_admin, name="admins").name == "admins"


def test_explicit_always_predicate_is_default() -> None:
    """Passing ``ALWAYS`` explicitly still produces a default case."""
    assert Case(predicate=ALWAYS).is_default


def test_matches_spreads_call_arguments() -> None:
    """Plain predicates receive the call's positional and keyword arguments."""
    case = Case(predicate=lambda a, b=0: a + b == 3)
    kwargs = types.MappingProxyType({"b": 2})

    assert case.matches(CallRecord(args=(1,), kwargs=kwargs))
    assert not case.matches(CallRecord(args=(1,)))


def test_matches_passes_record_to_call_predicates() -> None:
    """Call predicates inspect bound parameters."""
    fetch_call = CallRecord.capture(("x",), {}, lambda p: None)

    assert Case(predicate=Where(p="x")).matches(fetch_call)
    assert not Case(predicate=Where(p="y")).matches(fetch_call)


def test_capture_binds_against_signature() -> None:
    """Positional arguments are named using the signature source."""

    def add(a: int, b: int = 1) -> int:
        return a + b

    call = CallRecord.capture((2,), {"b": 5}, add)

    assert call.args == (2,)
    assert dict(call.kwargs) == {"b": 5}
    assert dict(call.bound) == {"a": 2, "b": 5}
    assert call["a"] == 2


def test_capture_does_not_apply_defaults() -> None:
    """Only arguments actually passed appear in ``bound``."""

    def add(a: int, b: int = 1) -> int:
        return a + b

    assert dict(CallRecord.capture((2,), {}, add).bound) == {"a": 2}


def test_capture_without_signature_keeps_keywords() -> None:
    """Without a signature source only keywords are named."""
    call = CallRecord.capture((1, 2), {"flag": True})

    assert dict(call.bound) == {"flag": True}


def test_capture_tolerates_mismatched_signature() -> None:
    """Calls that do not bind fall back to the keyword mapping."""

    def one(a: int) -> int:
        return a

    call = CallRecord.capture((1, 2, 3), {"z": 0}, one)

    assert dict(call.bound) == {"z": 0}


def test_call_record_is_immutable() -> None:
    """Recorded calls cannot be altered after capture."""
    call = CallRecord.capture((1,), {"b": 2})

    with pytest.raises(TypeError):
        call.kwargs["b"] = 3  # type: ignore[index]
    with pytest.raises(AttributeError):
        call.args = ()  # type: ignore[misc]


def test_fluent_returns_raises_and_runs() -> None:
    """Fluent helpers swap the replacement and return the case."""
    call = CallRecord(args=(4,))
    case = Case()

    assert case.returns("fixed") is case
    assert case.invoke(call) == "fixed"

    case.runs(lambda n: n * 2)
    assert case.invoke(call) == 8

    case.raises(KeyError("boom"))
    with pytest.raises(KeyError, match="boom"):
        case.invoke(call)


def test_count_tracks_recorded_calls() -> None:
    """``count`` always equals the length of ``calls``."""
    case = Case()
    case.record(CallRecord(args=(1,)))
    case.record(CallRecord(args=(2,)))

    assert case.count == len(case.calls) == 2
    assert [c.args for c in case.calls] == [(1,), (2,)]
