"""Global test configuration and shared fixtures."""

from __future__ import annotations

import shutil
import types
import typing as t

import pytest

from call_mox.controller import CallMox
from call_mox.installers import AttributeInstaller
from call_mox.unittests._targets import make_namespace

pytest_plugins = ("call_mox.pytest_plugin", "pytester")


def _posix_commands_available() -> bool:
    """Return ``True`` when the executables used by command tests exist."""
    return all(shutil.which(name) is not None for name in ("echo", "cat", "sh"))


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "requires_posix_commands: mark test as needing echo, cat and sh on PATH",
    )


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Skip tests needing real executables when they are unavailable."""
    if _posix_commands_available():
        return
    skip = pytest.mark.skip(reason="POSIX executables are not available on PATH")
    for item in items:
        if "requires_posix_commands" in item.keywords:
            item.add_marker(skip)


@pytest.fixture(autouse=True)
def reset_default_controller() -> t.Generator[None, None, None]:
    """Ensure every test starts and ends without a process-wide controller."""
    CallMox.reset_default()
    yield
    CallMox.reset_default()


@pytest.fixture
def targets() -> types.ModuleType:
    """Provide a fresh namespace of functions to mock."""
    return make_namespace()


@pytest.fixture
def mox(targets: types.ModuleType) -> t.Generator[CallMox, None, None]:
    """Provide a controller intercepting attributes of ``targets``."""
    with CallMox(installer=AttributeInstaller(targets)) as controller:
        yield controller
