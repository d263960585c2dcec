"""Replace named functions and commands with conditional mocks in nested scopes.

Mocks are registered per callable name as ordered "cases", each with its own
predicate, replacement and call log. Contexts scope registrations so that
leaving a context restores whatever was mocked (or real) before it.
"""

from __future__ import annotations

from .cases import ALWAYS, DEFAULT_CASE_NAME, CallRecord, Case
from .commands import (
    CALL_MOX_COMMAND_TIMEOUT_ENV,
    CommandInstaller,
    CommandResult,
    CommandTable,
    RealCommand,
    run,
)
from .comparators import (
    Any,
    ArgsMatch,
    CallPredicate,
    Contains,
    Eq,
    IsA,
    Predicate,
    Regex,
    StartsWith,
    Where,
)
from .context import Context, ContextStack
from .controller import CallMox, Registration
from .dispatch import Dispatcher
from .errors import (
    CallCountError,
    CallMoxError,
    InvalidCallableError,
    NoMockRegisteredError,
    UnsupportedTargetError,
    VerificationError,
)
from .installers import Alias, AttributeInstaller, Indirection, Installer, Interceptor
from .records import MockRecord

__all__ = [
    "ALWAYS",
    "CALL_MOX_COMMAND_TIMEOUT_ENV",
    "DEFAULT_CASE_NAME",
    "Alias",
    "Any",
    "ArgsMatch",
    "AttributeInstaller",
    "CallCountError",
    "CallMox",
    "CallMoxError",
    "CallPredicate",
    "CallRecord",
    "Case",
    "CommandInstaller",
    "CommandResult",
    "CommandTable",
    "Contains",
    "Context",
    "ContextStack",
    "Dispatcher",
    "Eq",
    "Indirection",
    "Installer",
    "Interceptor",
    "InvalidCallableError",
    "IsA",
    "MockRecord",
    "NoMockRegisteredError",
    "Predicate",
    "RealCommand",
    "Regex",
    "Registration",
    "StartsWith",
    "UnsupportedTargetError",
    "VerificationError",
    "Where",
    "run",
]
