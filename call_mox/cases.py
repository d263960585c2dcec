"""Conditional replacements ("cases") and the calls they record."""

from __future__ import annotations

import dataclasses as dc
import inspect
import types
import typing as t
from pathlib import Path

DEFAULT_CASE_NAME: t.Final[str] = "default"


def _empty_mapping() -> t.Mapping[str, t.Any]:
    return types.MappingProxyType({})


class _Always:
    """Predicate accepting every call."""

    def __call__(self, *args: object, **kwargs: object) -> bool:
        return True

    def __repr__(self) -> str:
        return "ALWAYS"


ALWAYS: t.Final = _Always()


def _noop(*args: object, **kwargs: object) -> None:
    return None


@dc.dataclass(slots=True, frozen=True)
class CallRecord:
    """A single intercepted call.

    ``args`` and ``kwargs`` hold the arguments exactly as passed. ``bound``
    maps parameter names to values when the call could be bound against the
    original implementation's signature; otherwise it only holds the keyword
    arguments.
    """

    args: tuple[t.Any, ...] = ()
    kwargs: t.Mapping[str, t.Any] = dc.field(default_factory=_empty_mapping)
    bound: t.Mapping[str, t.Any] = dc.field(default_factory=_empty_mapping)

    @classmethod
    def capture(
        cls,
        args: tuple[t.Any, ...],
        kwargs: t.Mapping[str, t.Any],
        signature_source: t.Callable[..., t.Any] | None = None,
    ) -> CallRecord:
        """Build a record for a call, binding it to ``signature_source``."""
        frozen_kwargs = types.MappingProxyType(dict(kwargs))
        return cls(
            args=tuple(args),
            kwargs=frozen_kwargs,
            bound=types.MappingProxyType(
                _bind_arguments(signature_source, args, kwargs)
            ),
        )

    def __getitem__(self, key: str) -> t.Any:  # noqa: ANN401 - arbitrary values
        """Return the bound value of parameter ``key``."""
        return self.bound[key]

    def invoke(self, func: t.Callable[..., t.Any]) -> t.Any:  # noqa: ANN401
        """Call ``func`` with the recorded arguments."""
        return func(*self.args, **self.kwargs)


def _bind_arguments(
    func: t.Callable[..., t.Any] | None,
    args: tuple[t.Any, ...],
    kwargs: t.Mapping[str, t.Any],
) -> dict[str, t.Any]:
    if func is None:
        return dict(kwargs)
    try:
        bound = inspect.signature(func).bind(*args, **kwargs)
    except (TypeError, ValueError):
        # Builtins without signatures or calls that do not fit the original.
        return dict(kwargs)
    return dict(bound.arguments)


def describe_predicate(predicate: t.Callable[..., t.Any]) -> str:
    """Return a stable, human readable name for ``predicate``."""
    if predicate is ALWAYS:
        return DEFAULT_CASE_NAME
    if isinstance(predicate, types.FunctionType):
        if predicate.__name__ == "<lambda>":
            code = predicate.__code__
            filename = Path(code.co_filename).name
            return f"<lambda at {filename}:{code.co_firstlineno}>"
        return f"{predicate.__module__}.{predicate.__qualname__}"
    if type(predicate).__repr__ is not object.__repr__:
        return repr(predicate)
    qualname = getattr(predicate, "__qualname__", type(predicate).__qualname__)
    return str(qualname)


class Case:
    """One conditional replacement registered against a callable name."""

    def __init__(
        self,
        replacement: t.Callable[..., t.Any] | None = None,
        predicate: t.Callable[..., t.Any] | None = None,
        name: str | None = None,
    ) -> None:
        self.predicate = ALWAYS if predicate is None else predicate
        self.replacement = _noop if replacement is None else replacement
        self.name = describe_predicate(self.predicate) if name is None else name
        self.calls: list[CallRecord] = []

    @property
    def is_default(self) -> bool:
        """Return ``True`` when the case accepts every call."""
        return self.predicate is ALWAYS

    @property
    def count(self) -> int:
        """Return the number of calls this case has handled."""
        return len(self.calls)

    def matches(self, call: CallRecord) -> bool:
        """Return ``True`` if this case should handle ``call``."""
        match_call = getattr(self.predicate, "match_call", None)
        if match_call is not None:
            return bool(match_call(call))
        return bool(call.invoke(self.predicate))

    def record(self, call: CallRecord) -> None:
        """Append ``call`` to the call log."""
        self.calls.append(call)

    def invoke(self, call: CallRecord) -> t.Any:  # noqa: ANN401 - user defined
        """Run the replacement with the arguments of ``call``."""
        return call.invoke(self.replacement)

    # ------------------------------------------------------------------
    # Fluent configuration
    # ------------------------------------------------------------------
    def returns(self, value: object) -> Case:
        """Make the case return ``value`` whatever the arguments."""

        def _return_value(*args: object, **kwargs: object) -> object:
            return value

        self.replacement = _return_value
        return self

    def raises(self, exc: BaseException | type[BaseException]) -> Case:
        """Make the case raise ``exc`` when selected."""

        def _raise(*args: object, **kwargs: object) -> t.NoReturn:
            raise exc

        self.replacement = _raise
        return self

    def runs(self, func: t.Callable[..., t.Any]) -> Case:
        """Use ``func`` as the replacement."""
        self.replacement = func
        return self

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"Case(name={self.name!r}, count={self.count})"


__all__ = [
    "ALWAYS",
    "DEFAULT_CASE_NAME",
    "CallRecord",
    "Case",
    "describe_predicate",
]
