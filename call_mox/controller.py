"""CallMox controller: registration, lookup, removal and context scoping."""

from __future__ import annotations

import contextlib
import logging
import types  # noqa: TC003
import typing as t

from .cases import Case
from .context import Context, ContextStack
from .dispatch import Dispatcher
from .errors import (
    CallMoxError,
    InvalidCallableError,
    NoMockRegisteredError,
    UnsupportedTargetError,
)
from .installers import AttributeInstaller, Indirection, Installer
from .records import MockRecord
from .verifiers import CallCountVerifier

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .cases import CallRecord

logger = logging.getLogger(__name__)

P = t.ParamSpec("P")
R = t.TypeVar("R")

CleanupError = tuple[str, Exception]


class Registration(t.NamedTuple):
    """The record and case produced by :meth:`CallMox.register_case`."""

    record: MockRecord
    case: Case


class CallMox:
    """Registry of mocked callables organised in nested contexts.

    Registrations land in the current context. Leaving a context removes
    everything registered in it, restoring whatever was visible before it
    was entered.
    """

    _default: t.ClassVar[CallMox | None] = None

    @classmethod
    def get_default(cls) -> CallMox:
        """Return the process-wide controller, creating it on first use."""
        if cls._default is None:
            cls._default = cls()
        return cls._default

    @classmethod
    def reset_default(cls) -> None:
        """Tear down and discard the process-wide controller."""
        mox, cls._default = cls._default, None
        if mox is not None:
            mox.teardown()

    def __init__(self, *, installer: Installer | None = None) -> None:
        """Create a controller with an empty root context.

        Parameters
        ----------
        installer:
            Collaborator that resolves names to their real implementation and
            rebinds them to the dispatcher. Defaults to an
            :class:`~call_mox.installers.AttributeInstaller` working on dotted
            ``"module.attribute"`` names.
        """
        self.installer: Installer = (
            installer if installer is not None else AttributeInstaller()
        )
        self._stack = ContextStack()
        self._dispatcher = Dispatcher(self._stack)
        self._verifier = CallCountVerifier()

    # ------------------------------------------------------------------
    # Context state
    # ------------------------------------------------------------------
    @property
    def current_context(self) -> Context:
        """Return the innermost context."""
        return self._stack.current

    @property
    def root_context(self) -> Context:
        """Return the root context."""
        return self._stack.root

    @property
    def depth(self) -> int:
        """Return how many contexts are entered above the root."""
        return self._stack.depth

    @property
    def dispatcher(self) -> Dispatcher:
        """Return the dispatcher interceptors route calls to."""
        return self._dispatcher

    # ------------------------------------------------------------------
    # Context manager protocol
    # ------------------------------------------------------------------
    def __enter__(self) -> CallMox:
        """Return the controller; registrations are torn down on exit."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: types.TracebackType | None,
    ) -> None:
        """Remove every registration in every context."""
        self._teardown(propagating=exc_type is not None)

    # ------------------------------------------------------------------
    # Registration and lookup
    # ------------------------------------------------------------------
    def register_case(
        self,
        name: str,
        replacement: t.Callable[..., t.Any] | None = None,
        *,
        predicate: t.Callable[..., t.Any] | None = None,
        case_name: str | None = None,
        create: bool = False,
    ) -> Registration:
        """Add a case for *name* in the current context.

        Registering never replaces an existing case. Specific predicates are
        tried before older specific predicates and before any default case;
        among default cases the most recent one wins.

        Parameters
        ----------
        name:
            The callable to intercept, as understood by the installer.
        replacement:
            Called instead of the original when the case is selected.
            Defaults to a no-op returning ``None``.
        predicate:
            Decides whether the case handles a call. Defaults to accepting
            every call, which makes this a default case.
        case_name:
            Label used by :meth:`get_mock` and :meth:`remove_mock`. Defaults
            to ``"default"`` or a rendering of *predicate*.
        create:
            Allow mocking a name that has no implementation yet.

        Raises
        ------
        UnsupportedTargetError
            When *name* redirects to another name.
        InvalidCallableError
            When *name* does not resolve to anything callable and *create* is
            not set.
        """
        context = self._stack.current
        record = context.mocks.get(name)
        if record is None:
            record = self._create_record(name, create=create)
            context.mocks[name] = record
        case = record.add_case(Case(replacement, predicate, case_name))
        logger.debug(
            "Registered case %r for %r at depth %d", case.name, name, context.depth
        )
        return Registration(record, case)

    def mock(
        self,
        name: str,
        replacement: t.Callable[..., t.Any] | None = None,
        *,
        predicate: t.Callable[..., t.Any] | None = None,
        case_name: str | None = None,
        create: bool = False,
    ) -> Case:
        """Register a case for *name* and return it."""
        return self.register_case(
            name,
            replacement,
            predicate=predicate,
            case_name=case_name,
            create=create,
        ).case

    def _create_record(self, name: str, *, create: bool) -> MockRecord:
        """Build a record for *name* and bind it if nothing outside has."""
        fallback = self._stack.find_record(name)
        original = self._resolve_original(
            name, has_fallback=fallback is not None, create=create
        )
        record = MockRecord(name, original=original, fallback=fallback)
        if fallback is None:
            self.installer.bind(name, self._dispatcher, original)
        return record

    def _resolve_original(
        self, name: str, *, has_fallback: bool, create: bool
    ) -> t.Callable[..., t.Any] | None:
        resolved = self.installer.resolve_original(name)
        if isinstance(resolved, Indirection):
            raise UnsupportedTargetError(name, resolved.target)
        if resolved is None and not (has_fallback or create):
            raise InvalidCallableError(
                name, "nothing of that name exists; pass create=True to mock it"
            )
        return resolved

    def get_mock(
        self, name: str, case_name: str | None = None
    ) -> MockRecord | Case | None:
        """Return the innermost record for *name*, or one of its cases."""
        return self._stack.lookup(name, case_name)

    # ------------------------------------------------------------------
    # Removal
    # ------------------------------------------------------------------
    def remove_mock(self, name: str, case_name: str | None = None) -> None:
        """Remove *name*'s record from the current context.

        With *case_name* only cases of that name are removed; the record
        survives while other cases remain.

        Raises
        ------
        NoMockRegisteredError
            When the current context has no record for *name*. An unknown
            *case_name* leaves the record untouched.
        """
        context = self._stack.current
        record = context.mocks.get(name)
        if record is None:
            raise NoMockRegisteredError(name)
        if case_name is not None:
            if not record.remove_cases(case_name):
                logger.debug("No case %r registered for %r", case_name, name)
                return
            if not record.is_empty:
                logger.debug("Removed case %r from %r", case_name, name)
                return
        self._discard(context, record)

    def _discard(self, context: Context, record: MockRecord) -> None:
        """Drop *record* and unbind its name if no outer record needs it."""
        del context.mocks[record.name]
        logger.debug("Removed mock %r at depth %d", record.name, context.depth)
        if record.fallback is None:
            self.installer.unbind(record.name)

    def clear_mocks(self) -> None:
        """Remove every record in the current context.

        Every record is removed even if unbinding one of them fails; failures
        are reported together afterwards.
        """
        errors = self._clear_context(self._stack.current)
        self._report_cleanup_errors(errors, propagating=False)

    def _clear_context(self, context: Context) -> list[CleanupError]:
        errors: list[CleanupError] = []
        for name in reversed(list(context.mocks)):
            record = context.mocks[name]
            try:
                self._discard(context, record)
            except Exception as exc:  # noqa: BLE001 - reported after the loop
                logger.warning("Failed to remove mock %r: %s", name, exc)
                errors.append((name, exc))
        return errors

    def _report_cleanup_errors(
        self, errors: list[CleanupError], *, propagating: bool
    ) -> None:
        """Log and, unless another error is propagating, raise *errors*."""
        if not errors:
            return
        message = "; ".join(f"{name}: {exc}" for name, exc in errors)
        logger.error("Mock cleanup encountered errors: %s", message)
        if propagating:
            return
        msg = f"Cleanup failed: {message}"
        raise CallMoxError(msg) from errors[0][1]

    # ------------------------------------------------------------------
    # Contexts
    # ------------------------------------------------------------------
    def enter_context(self) -> Context:
        """Enter a new nested context and return it."""
        return self._stack.push()

    def exit_context(self) -> None:
        """Remove the current context's records and return to its parent.

        At the root the records are cleared and the root stays current.
        """
        self._exit_current(propagating=False)

    def _exit_current(self, *, propagating: bool) -> None:
        context = self._stack.current
        errors = self._clear_context(context)
        self._stack.pop()
        self._report_cleanup_errors(errors, propagating=propagating)

    @contextlib.contextmanager
    def context(self) -> t.Iterator[Context]:
        """Run the ``with`` block inside a fresh context.

        The context is exited however the block ends. Contexts the block
        entered and left open are exited first.
        """
        ctx = self.enter_context()
        propagating = True
        try:
            yield ctx
            propagating = False
        finally:
            self._unwind(ctx, propagating=propagating)

    def _unwind(self, ctx: Context, *, propagating: bool) -> None:
        """Exit contexts down to and including *ctx*, if still entered."""
        if ctx not in self._stack:
            return
        while True:
            leaving = self._stack.current
            self._exit_current(propagating=propagating)
            if leaving is ctx:
                return

    def run_in_context(
        self, work: t.Callable[P, R], /, *args: P.args, **kwargs: P.kwargs
    ) -> R:
        """Call ``work(*args, **kwargs)`` inside a fresh context."""
        with self.context():
            return work(*args, **kwargs)

    def teardown(self) -> None:
        """Exit every nested context, innermost first, then clear the root."""
        self._teardown(propagating=False)

    def _teardown(self, *, propagating: bool) -> None:
        errors: list[CleanupError] = []
        while True:
            context = self._stack.current
            errors.extend(self._clear_context(context))
            if context.is_root:
                break
            self._stack.pop()
        self._report_cleanup_errors(errors, propagating=propagating)

    # ------------------------------------------------------------------
    # Assertions
    # ------------------------------------------------------------------
    def assert_called(
        self,
        name: str,
        times: int = 1,
        *,
        exactly: bool = False,
        case_name: str | None = None,
        where: t.Callable[..., t.Any] | None = None,
    ) -> list[CallRecord]:
        """Assert *name* was called at least (or exactly) *times* times.

        Calls are taken from the innermost record for *name*, or from its
        case called *case_name*. *where* narrows the calls counted, using the
        same calling convention as case predicates. Returns the counted calls.

        Raises
        ------
        NoMockRegisteredError
            When no record or case matches.
        CallCountError
            When the number of calls does not satisfy the assertion.
        """
        record = self._stack.find_record(name)
        if record is None:
            raise NoMockRegisteredError(name)
        case: Case | None = None
        calls = record.calls
        if case_name is not None:
            case = record.find_case(case_name)
            if case is None:
                raise NoMockRegisteredError(name, case_name)
            calls = case.calls
        return self._verifier.verify(
            name, calls, times, exactly=exactly, case=case, where=where
        )

    def assert_not_called(
        self,
        name: str,
        *,
        case_name: str | None = None,
        where: t.Callable[..., t.Any] | None = None,
    ) -> None:
        """Assert *name* (or one of its cases) was never called."""
        self.assert_called(name, 0, exactly=True, case_name=case_name, where=where)


__all__ = ["CallMox", "Registration"]
