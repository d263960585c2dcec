"""Per-name mock records holding ordered cases and an aggregate call log."""

from __future__ import annotations

import typing as t

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .cases import CallRecord, Case


class MockRecord:
    """All cases registered for one callable name within one context.

    Cases are kept in dispatch order. Specific (non-default) cases come first,
    most recent first; default cases follow, also most recent first.

    ``original`` is captured once when the record is created. ``fallback``
    points at the record that existed for the same name in an enclosing
    context at that moment; it belongs to that context and is only read here.
    """

    def __init__(
        self,
        name: str,
        *,
        original: t.Callable[..., t.Any] | None = None,
        fallback: MockRecord | None = None,
    ) -> None:
        self.name = name
        self.original = original
        self.fallback = fallback
        self.cases: list[Case] = []
        self.calls: list[CallRecord] = []

    @property
    def count(self) -> int:
        """Return the number of calls handled by any case of this record."""
        return len(self.calls)

    @property
    def is_empty(self) -> bool:
        """Return ``True`` once every case has been removed."""
        return not self.cases

    def add_case(self, case: Case) -> Case:
        """Insert ``case`` at its dispatch position and return it."""
        if case.is_default:
            self.cases.insert(self._first_default_index(), case)
        else:
            self.cases.insert(0, case)
        return case

    def _first_default_index(self) -> int:
        for index, existing in enumerate(self.cases):
            if existing.is_default:
                return index
        return len(self.cases)

    def find_case(self, case_name: str) -> Case | None:
        """Return the first case called ``case_name`` in dispatch order."""
        return next((case for case in self.cases if case.name == case_name), None)

    def remove_cases(self, case_name: str) -> list[Case]:
        """Remove every case called ``case_name`` and return them."""
        removed = [case for case in self.cases if case.name == case_name]
        self.cases = [case for case in self.cases if case.name != case_name]
        return removed

    def select(self, call: CallRecord) -> Case | None:
        """Return the first case whose predicate accepts ``call``."""
        for case in self.cases:
            if case.matches(call):
                return case
        return None

    def record(self, case: Case, call: CallRecord) -> None:
        """Log ``call`` against ``case`` and against this record."""
        case.record(call)
        self.calls.append(call)

    def __repr__(self) -> str:
        """Return a debug representation."""
        names = ", ".join(repr(case.name) for case in self.cases)
        return f"MockRecord(name={self.name!r}, cases=[{names}], count={self.count})"


__all__ = ["MockRecord"]
