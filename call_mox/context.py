"""Nested registration scopes."""

from __future__ import annotations

import logging
import typing as t

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .cases import Case
    from .records import MockRecord

logger = logging.getLogger(__name__)


class Context:
    """A scope mapping callable names to the records registered within it."""

    def __init__(self, parent: Context | None = None) -> None:
        self.mocks: dict[str, MockRecord] = {}
        self._parent = parent
        self._depth = 0 if parent is None else parent.depth + 1

    @property
    def parent(self) -> Context | None:
        """Return the enclosing context, or ``None`` for the root."""
        return self._parent

    @property
    def depth(self) -> int:
        """Return how many contexts enclose this one."""
        return self._depth

    @property
    def is_root(self) -> bool:
        """Return ``True`` for the outermost context."""
        return self._parent is None

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"Context(depth={self._depth}, mocks={sorted(self.mocks)})"


class ContextStack:
    """Stack of :class:`Context` objects rooted in a single root context."""

    def __init__(self) -> None:
        self._root = Context()
        self._current = self._root

    @property
    def root(self) -> Context:
        """Return the root context."""
        return self._root

    @property
    def current(self) -> Context:
        """Return the innermost context."""
        return self._current

    @property
    def depth(self) -> int:
        """Return the nesting depth of the current context."""
        return self._current.depth

    def push(self) -> Context:
        """Enter a new, empty context nested in the current one."""
        self._current = Context(self._current)
        logger.debug("Entered mock context at depth %d", self._current.depth)
        return self._current

    def pop(self) -> Context:
        """Leave the current context and return it.

        Popping the root is a no-op; the root stays current.
        """
        leaving = self._current
        if leaving.parent is not None:
            self._current = leaving.parent
            logger.debug("Left mock context at depth %d", leaving.depth)
        return leaving

    def __iter__(self) -> t.Iterator[Context]:
        """Yield contexts from the innermost outwards."""
        context: Context | None = self._current
        while context is not None:
            yield context
            context = context.parent

    def lookup(
        self, name: str, case_name: str | None = None
    ) -> MockRecord | Case | None:
        """Return the innermost record for ``name``.

        With ``case_name`` the first case of that name within the innermost
        record is returned instead. ``fallback`` links are never followed.
        """
        record = self.find_record(name)
        if record is None or case_name is None:
            return record
        return record.find_case(case_name)

    def find_record(self, name: str) -> MockRecord | None:
        """Return the innermost record registered for ``name``."""
        for context in self:
            record = context.mocks.get(name)
            if record is not None:
                return record
        return None


__all__ = ["Context", "ContextStack"]
