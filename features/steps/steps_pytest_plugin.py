"""Steps for testing the pytest plugin."""

from __future__ import annotations

import shutil
import subprocess
import sys
import tempfile
import typing as t
from pathlib import Path

from behave import given, then, when  # type: ignore[attr-defined]


class BehaveContext(t.Protocol):
    """Behave step context for plugin tests."""

    test_file: Path
    tmpdir: Path
    result: subprocess.CompletedProcess[str]


def _write_test_file(context: BehaveContext, test_code: str) -> None:
    tmpdir = Path(tempfile.mkdtemp())
    context.test_file = tmpdir / "test_example.py"
    context.tmpdir = tmpdir
    context.test_file.write_text(test_code)


@given("a temporary test file using the call_mox fixture")
def step_create_test_file(context: BehaveContext) -> None:
    """Write a pytest file that exercises the fixture."""
    test_code = """
pytest_plugins = ("call_mox.pytest_plugin",)

def greet():
    return "hello"

def test_example(call_mox):
    call_mox.mock(f"{__name__}.greet").returns("hi")
    assert greet() == "hi"
    call_mox.assert_called(f"{__name__}.greet", 1, exactly=True)

def test_restored():
    assert greet() == "hello"
"""
    _write_test_file(context, test_code)


@given("a temporary test file that leaves a context entered")
def step_create_leaky_test_file(context: BehaveContext) -> None:
    """Write a pytest file that never exits the context it enters."""
    test_code = """
pytest_plugins = ("call_mox.pytest_plugin",)

def test_leaky(call_mox):
    call_mox.enter_context()
"""
    _write_test_file(context, test_code)


@when("I run pytest on the file")
def step_run_pytest(context: BehaveContext) -> None:
    """Execute pytest on the generated file."""
    result = subprocess.run(  # noqa: S603
        [
            sys.executable,
            "-m",
            "pytest",
            "-p",
            "no:cacheprovider",
            str(context.test_file),
        ],
        capture_output=True,
        text=True,
        cwd=context.tmpdir,
    )
    context.result = result
    shutil.rmtree(context.tmpdir)


@then("the run should pass")
def step_check_pass(context: BehaveContext) -> None:
    """Assert that pytest exited successfully."""
    assert context.result.returncode == 0  # noqa: S101


@then("the run should report a leaked context")
def step_check_leak(context: BehaveContext) -> None:
    """Assert that pytest reported the leaked context."""
    assert context.result.returncode != 0  # noqa: S101
    assert "test left 1 mock context(s) entered" in context.result.stdout  # noqa: S101
