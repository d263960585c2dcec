"""Resolution of intercepted calls to cases, originals and fallbacks."""

from __future__ import annotations

import logging
import typing as t

from .errors import NoMockRegisteredError

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .cases import CallRecord
    from .context import ContextStack
    from .records import MockRecord

logger = logging.getLogger(__name__)


class Dispatcher:
    """Route intercepted calls through the records visible in a context stack."""

    def __init__(self, stack: ContextStack) -> None:
        self._stack = stack

    def __call__(self, name: str, call: CallRecord) -> t.Any:  # noqa: ANN401
        """Alias for :meth:`invoke` so the dispatcher can be passed as a handler."""
        return self.invoke(name, call)

    def invoke(self, name: str, call: CallRecord) -> t.Any:  # noqa: ANN401
        """Dispatch ``call`` made to ``name`` and return its result.

        The innermost record's cases are tried in order. When none matches,
        the record's original implementation handles the call. Only records
        without an original defer to their ``fallback`` record; when that
        chain runs out the call has no effect and returns ``None``.

        Raises
        ------
        NoMockRegisteredError
            When no record is visible for ``name``. Interception points only
            exist while a record does, so this signals a lifecycle bug.
        """
        record: MockRecord | None = self._stack.find_record(name)
        if record is None:
            logger.error("Intercepted call to %r with no registered mock", name)
            raise NoMockRegisteredError(name)

        while record is not None:
            case = record.select(call)
            if case is not None:
                record.record(case, call)
                logger.debug("Dispatching %r to case %r", name, case.name)
                return case.invoke(call)
            if record.original is not None:
                logger.debug("No case matched %r; calling original", name)
                return call.invoke(record.original)
            record = record.fallback

        logger.debug("No case matched %r and no fallback remains", name)
        return None


__all__ = ["Dispatcher"]
