"""Exception hierarchy for CallMox."""

from __future__ import annotations


class CallMoxError(Exception):
    """Base class for all CallMox errors."""


class NoMockRegisteredError(CallMoxError):
    """Raised when no mock record exists for a callable name."""

    def __init__(self, name: str, case_name: str | None = None) -> None:
        if case_name is None:
            msg = f"No mock registered for {name!r}"
        else:
            msg = f"No mock case named {case_name!r} registered for {name!r}"
        super().__init__(msg)
        self.name = name
        self.case_name = case_name


class UnsupportedTargetError(CallMoxError):
    """Raised when attempting to mock a name that redirects elsewhere."""

    def __init__(self, name: str, target: str) -> None:
        msg = (
            f"Cannot mock {name!r}: it is an indirection to {target!r}. "
            f"Mock {target!r} instead."
        )
        super().__init__(msg)
        self.name = name
        self.target = target
        self.case_name: str | None = None


class InvalidCallableError(CallMoxError):
    """Raised when a name does not resolve to something that can be called."""

    def __init__(self, name: str, reason: str) -> None:
        super().__init__(f"Cannot mock {name!r}: {reason}")
        self.name = name
        self.reason = reason
        self.case_name: str | None = None


class VerificationError(CallMoxError, AssertionError):
    """Base class for call assertion failures."""


class CallCountError(VerificationError):
    """Raised when a mock was called a different number of times than asserted."""

    def __init__(self, message: str, name: str, case_name: str | None = None) -> None:
        super().__init__(message)
        self.name = name
        self.case_name = case_name


__all__ = [
    "CallCountError",
    "CallMoxError",
    "InvalidCallableError",
    "NoMockRegisteredError",
    "UnsupportedTargetError",
    "VerificationError",
]
