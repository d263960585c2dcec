"""Pytest plugin providing the ``call_mox`` and ``command_mox`` fixtures."""

from __future__ import annotations

import logging
import typing as t

import pytest

from .commands import CommandInstaller
from .controller import CallMox

logger = logging.getLogger(__name__)


def pytest_addoption(parser: pytest.Parser) -> None:
    """Register command-line and ini options for the plugin."""
    group = parser.getgroup("call_mox")
    group.addoption(
        "--call-mox-check-leaks",
        action="store_true",
        dest="call_mox_check_leaks",
        default=None,
        help=(
            "Fail tests that leave mock contexts entered when they finish. "
            "Overrides the pytest.ini setting."
        ),
    )
    group.addoption(
        "--no-call-mox-check-leaks",
        action="store_false",
        dest="call_mox_check_leaks",
        default=None,
        help="Silently unwind contexts left entered by a test.",
    )
    parser.addini(
        "call_mox_check_leaks",
        "Fail tests that leave mock contexts entered when they finish.",
        type="bool",
        default=True,
    )


def pytest_configure(config: pytest.Config) -> None:
    """Register plugin-specific markers."""
    config.addinivalue_line(
        "markers",
        (
            "call_mox(check_leaks: bool = True): override context leak "
            "checking for a single test."
        ),
    )


def _check_leaks_enabled(request: pytest.FixtureRequest) -> bool:
    """Return whether a test leaving contexts entered should fail."""
    # Priority order: marker > CLI option > INI setting
    marker = request.node.get_closest_marker("call_mox")
    if marker is not None and "check_leaks" in marker.kwargs:
        return bool(marker.kwargs["check_leaks"])

    config = request.config
    cli_value = config.getoption("call_mox_check_leaks")
    if cli_value is not None:
        return bool(cli_value)

    return bool(config.getini("call_mox_check_leaks"))


def _scoped(
    mox: CallMox, request: pytest.FixtureRequest
) -> t.Generator[CallMox, None, None]:
    """Run the test inside a fresh context of *mox*."""
    check_leaks = _check_leaks_enabled(request)
    base_depth = mox.depth
    leaked = 0
    try:
        with mox.context() as ctx:
            yield mox
            leaked = mox.depth - ctx.depth
    except Exception:
        logger.exception("Error during call_mox fixture teardown")
        raise
    if leaked > 0 and check_leaks:
        pytest.fail(
            f"test left {leaked} mock context(s) entered "
            f"(depth {base_depth + 1 + leaked}, expected {base_depth + 1})"
        )


@pytest.fixture
def call_mox(request: pytest.FixtureRequest) -> t.Generator[CallMox, None, None]:
    """Provide the process-wide :class:`CallMox` scoped to the test.

    Mocks registered through the fixture are removed when the test ends;
    mocks registered in the root context beforehand stay visible.
    """
    yield from _scoped(CallMox.get_default(), request)


@pytest.fixture
def command_mox(request: pytest.FixtureRequest) -> t.Generator[CallMox, None, None]:
    """Provide a :class:`CallMox` intercepting commands of the default table."""
    mox = CallMox(installer=CommandInstaller())
    try:
        yield from _scoped(mox, request)
    finally:
        mox.teardown()
