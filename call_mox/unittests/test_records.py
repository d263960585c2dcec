"""Unit tests for :mod:`call_mox.records`."""

from __future__ import annotations

import pytest

from call_mox.cases import CallRecord, Case
from call_mox.records import MockRecord


def _specific(label: str) -> Case:
    return Case(predicate=lambda *a, **k: True, name=label)


def _default(label: str) -> Case:
    return Case(name=label)


@pytest.mark.parametrize(
    ("additions", "expected"),
    [
        (["s1", "s2", "s3"], ["s3", "s2", "s1"]),
        (["d1", "d2", "d3"], ["d3", "d2", "d1"]),
        (["s1", "d1", "s2", "d2"], ["s2", "s1", "d2", "d1"]),
        (["d1", "s1", "d2", "s2"], ["s2", "s1", "d2", "d1"]),
    ],
    ids=["specific-only", "default-only", "interleaved", "default-first"],
)
def test_case_insertion_order(additions: list[str], expected: list[str]) -> None:
    """Specific cases lead most-recent-first; defaults trail most-recent-first."""
    record = MockRecord("fetch")
    for label in additions:
        record.add_case(_specific(label) if label[0] == "s" else _default(label))

    assert [case.name for case in record.cases] == expected


def test_select_returns_first_matching_case() -> None:
    """Dispatch order decides between several matching cases."""
    record = MockRecord("fetch")
    older = record.add_case(Case(predicate=lambda p: p.startswith("a"), name="a*"))
    newer = record.add_case(Case(predicate=lambda p: p == "ab", name="ab"))
    fallback = record.add_case(Case(name="default"))

    assert record.select(CallRecord(args=("ab",))) is newer
    assert record.select(CallRecord(args=("ac",))) is older
    assert record.select(CallRecord(args=("zz",))) is fallback


def test_select_without_match_returns_none() -> None:
    """``select`` returns ``None`` when every predicate rejects the call."""
    record = MockRecord("fetch")
    record.add_case(Case(predicate=lambda p: False))

    assert record.select(CallRecord(args=("x",))) is None


def test_record_logs_call_on_case_and_record() -> None:
    """Calls are appended to the case and to the aggregate log."""
    record = MockRecord("fetch")
    case_a = record.add_case(_specific("a"))
    case_b = record.add_case(_default("b"))
    first, second = CallRecord(args=(1,)), CallRecord(args=(2,))

    record.record(case_a, first)
    record.record(case_b, second)

    assert record.calls == [first, second]
    assert record.count == 2
    assert case_a.calls == [first]
    assert case_b.calls == [second]


def test_remove_cases_by_name() -> None:
    """Only cases with the given name are removed."""
    record = MockRecord("fetch")
    record.add_case(_specific("dup"))
    record.add_case(_specific("keep"))
    record.add_case(_default("dup"))

    removed = record.remove_cases("dup")

    assert [case.name for case in removed] == ["dup", "dup"]
    assert [case.name for case in record.cases] == ["keep"]
    assert not record.is_empty
    assert record.remove_cases("missing") == []


def test_find_case_uses_dispatch_order() -> None:
    """``find_case`` returns the first case of that name in dispatch order."""
    record = MockRecord("fetch")
    record.add_case(_default("same"))
    newer = record.add_case(_specific("same"))

    assert record.find_case("same") is newer
    assert record.find_case("other") is None


def test_record_keeps_original_and_fallback() -> None:
    """Original and fallback are stored as given."""
    outer = MockRecord("fetch")
    record = MockRecord("fetch", original=len, fallback=outer)

    assert record.original is len
    assert record.fallback is outer
    assert record.is_empty
    assert "fetch" in repr(record)
