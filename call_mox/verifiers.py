"""Call-count assertions for mock records and cases."""

from __future__ import annotations

import typing as t
from textwrap import indent

from .errors import CallCountError

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .cases import CallRecord, Case


def _format_call(name: str, call: CallRecord) -> str:
    parts = [repr(arg) for arg in call.args]
    parts.extend(f"{key}={value!r}" for key, value in call.kwargs.items())
    return f"{name}({', '.join(parts)})"


def _numbered(entries: t.Sequence[str], *, start: int = 1) -> str:
    if not entries:
        return "(none)"
    return "\n".join(
        f"{index}. {entry}" for index, entry in enumerate(entries, start=start)
    )


def _format_sections(title: str, sections: list[tuple[str, str]]) -> str:
    parts = [title]
    for label, body in sections:
        if not body:
            continue
        parts.append("")
        parts.append(f"{label}:")
        parts.append(indent(body, "  "))
    return "\n".join(parts)


def _describe_expectation(
    name: str,
    times: int,
    *,
    exactly: bool,
    case_name: str | None,
    where: object | None,
) -> str:
    quantifier = "exactly" if exactly else "at least"
    lines = [f"{name} called {quantifier} {times} time{'s' if times != 1 else ''}"]
    if case_name is not None:
        lines.append(f"case={case_name!r}")
    if where is not None:
        lines.append(f"where={where!r}")
    return "\n".join(lines)


def filter_calls(
    calls: t.Iterable[CallRecord], where: t.Callable[..., t.Any] | None
) -> list[CallRecord]:
    """Return the calls accepted by *where*, or all calls when it is ``None``."""
    if where is None:
        return list(calls)
    match_call = getattr(where, "match_call", None)
    if match_call is not None:
        return [call for call in calls if match_call(call)]
    return [call for call in calls if call.invoke(where)]


class CallCountVerifier:
    """Compare the calls recorded for a name with an expected count."""

    def verify(
        self,
        name: str,
        calls: t.Sequence[CallRecord],
        times: int = 1,
        *,
        exactly: bool = False,
        case: Case | None = None,
        where: t.Callable[..., t.Any] | None = None,
    ) -> list[CallRecord]:
        """Raise :class:`CallCountError` unless *calls* satisfy the count.

        Returns the calls that were counted so callers can inspect them.
        """
        if times < 0:
            msg = "times must be >= 0"
            raise ValueError(msg)
        matched = filter_calls(calls, where)
        observed = len(matched)
        if observed == times or (not exactly and observed > times):
            return matched
        case_name = None if case is None else case.name
        msg = _format_sections(
            "Unexpected number of calls.",
            [
                (
                    "Expected",
                    _describe_expectation(
                        name, times, exactly=exactly, case_name=case_name, where=where
                    ),
                ),
                ("Observed calls", str(observed)),
                (
                    "Recorded calls",
                    _numbered([_format_call(name, call) for call in calls]),
                ),
            ],
        )
        raise CallCountError(msg, name, case_name)


__all__ = ["CallCountVerifier", "filter_calls"]
