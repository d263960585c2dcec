"""Comparators for argument values and predicates over whole calls.

Value comparators (``Any``, ``Eq``, ``IsA`` ...) test a single argument.
:class:`Where` and :class:`ArgsMatch` combine them into case predicates; they
receive the full :class:`~call_mox.cases.CallRecord` rather than the raw
arguments, and their ``repr`` doubles as the default case name.
"""

from __future__ import annotations

import re
import typing as t

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .cases import CallRecord


class Comparator(t.Protocol):
    """Callable returning ``True`` when a value matches."""

    def __call__(self, value: t.Any) -> bool:  # noqa: ANN401
        """Return ``True`` if *value* satisfies the comparison."""
        ...


class Any:
    """Match any value."""

    def __call__(self, value: object) -> bool:
        """Return ``True`` for any input."""
        return True

    def __repr__(self) -> str:
        """Return a debug representation."""
        return "Any()"


class Eq:
    """Match values equal to ``expected``."""

    def __init__(self, expected: object) -> None:
        self.expected = expected

    def __call__(self, value: object) -> bool:
        """Return ``True`` if *value* equals ``expected``."""
        return bool(value == self.expected)

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"Eq({self.expected!r})"


class IsA:
    """Match instances of ``typ``.

    Strings also match when they convert to ``typ``, so ``IsA(int)`` accepts
    ``"42"`` as passed on a command line.
    """

    def __init__(self, typ: type) -> None:
        self.typ = typ

    def __call__(self, value: object) -> bool:
        """Return ``True`` when ``value`` is, or converts to, ``typ``."""
        if isinstance(value, self.typ):
            return True
        if not isinstance(value, str):
            return False
        try:
            self.typ(value)
        except Exception:  # noqa: BLE001 - conversion may fail
            return False
        return True

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"IsA(typ={self.typ!r})"


class Regex:
    """Match if *value* matches ``pattern``."""

    def __init__(self, pattern: str) -> None:
        self._pattern = re.compile(pattern)

    def __call__(self, value: str) -> bool:
        """Return ``True`` if the regex matches *value*."""
        return bool(self._pattern.search(value))

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"Regex(pattern={self._pattern.pattern!r})"


class Contains:
    """Match if ``item`` is found in *value*."""

    def __init__(self, item: object) -> None:
        self.item = item

    def __call__(self, value: t.Container[object]) -> bool:
        """Return ``True`` if ``item`` is in *value*."""
        return self.item in value

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"Contains({self.item!r})"


class StartsWith:
    """Match if *value* begins with ``prefix``."""

    def __init__(self, prefix: str) -> None:
        self.prefix = prefix

    def __call__(self, value: str) -> bool:
        """Return ``True`` if *value* starts with ``prefix``."""
        return value.startswith(self.prefix)

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"StartsWith({self.prefix!r})"


class Predicate:
    """Use a custom ``func`` to determine a match."""

    def __init__(self, func: t.Callable[[t.Any], object]) -> None:
        self.func = func

    def __call__(self, value: object) -> bool:
        """Return ``True`` if ``func(value)`` is truthy."""
        return bool(self.func(value))

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"Predicate(func={self.func!r})"


def _as_comparator(value: object) -> t.Callable[[t.Any], bool]:
    """Wrap plain values in :class:`Eq`; callables are used as they are."""
    if callable(value) and not isinstance(value, type):
        return t.cast("t.Callable[[t.Any], bool]", value)
    return Eq(value)


class CallPredicate:
    """Base class for predicates that inspect a whole call.

    :class:`~call_mox.cases.Case` calls :meth:`match_call` with the recorded
    call instead of spreading the call's arguments into the predicate.
    """

    def match_call(self, call: CallRecord) -> bool:
        """Return ``True`` if *call* is accepted."""
        raise NotImplementedError

    def __call__(self, call: CallRecord) -> bool:
        """Alias for :meth:`match_call`."""
        return self.match_call(call)


class Where(CallPredicate):
    """Match calls whose bound parameters satisfy the given comparators.

    Plain values are compared for equality. Parameters missing from the call
    never match.
    """

    def __init__(self, **matchers: object) -> None:
        self.matchers = {
            name: _as_comparator(value) for name, value in matchers.items()
        }

    def match_call(self, call: CallRecord) -> bool:
        """Return ``True`` if every named parameter satisfies its comparator."""
        for name, matcher in self.matchers.items():
            if name not in call.bound:
                return False
            if not matcher(call.bound[name]):
                return False
        return True

    def __repr__(self) -> str:
        """Return a debug representation."""
        parts = ", ".join(
            f"{name}={matcher!r}" for name, matcher in self.matchers.items()
        )
        return f"Where({parts})"


class ArgsMatch(CallPredicate):
    """Match positional arguments one comparator per argument."""

    def __init__(self, *matchers: object) -> None:
        self.matchers = [_as_comparator(value) for value in matchers]

    def match_call(self, call: CallRecord) -> bool:
        """Return ``True`` if the positional arguments satisfy the comparators."""
        if len(call.args) != len(self.matchers):
            return False
        return all(
            matcher(arg) for arg, matcher in zip(call.args, self.matchers, strict=True)
        )

    def __repr__(self) -> str:
        """Return a debug representation."""
        parts = ", ".join(repr(matcher) for matcher in self.matchers)
        return f"ArgsMatch({parts})"


__all__ = [
    "Any",
    "ArgsMatch",
    "CallPredicate",
    "Comparator",
    "Contains",
    "Eq",
    "IsA",
    "Predicate",
    "Regex",
    "StartsWith",
    "Where",
]
