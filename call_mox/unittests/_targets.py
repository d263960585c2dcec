"""Callables used as mocking targets across the test suite."""

from __future__ import annotations

import types

from call_mox.installers import Alias


def ping() -> str:
    """Return a fixed reply; mocked by dotted name in tests."""
    return "pong"


def make_namespace() -> types.ModuleType:
    """Return a fresh module holding functions, an alias and a constant."""
    module = types.ModuleType("call_mox_targets")

    def fetch(p: str) -> str:
        return "orig"

    def add(a: int, b: int = 1) -> int:
        return a + b

    def announce(message: str, *, loud: bool = False) -> str:
        return message.upper() if loud else message

    module.fetch = fetch  # type: ignore[attr-defined]
    module.add = add  # type: ignore[attr-defined]
    module.announce = announce  # type: ignore[attr-defined]
    module.get = Alias(module, "fetch")  # type: ignore[attr-defined]
    module.VERSION = "1.0"  # type: ignore[attr-defined]
    return module
