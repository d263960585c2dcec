"""Step definitions for context-scoped mock scenarios."""
# pyright: reportMissingImports=false, reportUnknownMemberType=false

from __future__ import annotations

import types
import typing as t

from behave import given, then, when  # type: ignore[attr-defined]

from call_mox.controller import CallMox
from call_mox.installers import AttributeInstaller
from call_mox.unittests._targets import make_namespace


class BehaveContext(t.Protocol):
    """Behave step context with attributes used in tests."""

    mox: CallMox
    targets: types.ModuleType
    failure: BaseException | None

    def add_cleanup(self, cleanup_func: t.Callable[..., object]) -> None:
        """Register *cleanup_func* to run after the scenario."""
        ...


class WorkFailedError(RuntimeError):
    """Raised by the failing work in scenarios."""


@given("a controller intercepting the sample functions")
def step_create_controller(context: BehaveContext) -> None:
    """Create a :class:`CallMox` over a fresh namespace."""
    context.targets = make_namespace()
    context.mox = CallMox(installer=AttributeInstaller(context.targets))
    context.add_cleanup(context.mox.teardown)


@given('a case of "{name}" returns "{text}" when called with "{value}"')
def step_mock_specific(
    context: BehaveContext, name: str, text: str, value: str
) -> None:
    """Register a case matching a single argument value."""
    context.mox.mock(
        name, predicate=lambda p: p == value, case_name=f"p=={value}"
    ).returns(text)


@given('"{name}" is mocked to return "{text}"')
@when('"{name}" is mocked to return "{text}"')
def step_mock_default(context: BehaveContext, name: str, text: str) -> None:
    """Register a default case."""
    context.mox.mock(name).returns(text)


@when('I remove the case "{case_name}" of "{name}"')
def step_remove_case(context: BehaveContext, name: str, case_name: str) -> None:
    """Remove a named case."""
    context.mox.remove_mock(name, case_name)


@when("I enter a new context")
def step_enter_context(context: BehaveContext) -> None:
    """Push a nested context."""
    context.mox.enter_context()


@when("I exit the context")
def step_exit_context(context: BehaveContext) -> None:
    """Pop the current context."""
    context.mox.exit_context()


@when('I run failing work that mocks "{name}" to return "{text}"')
def step_run_failing_work(context: BehaveContext, name: str, text: str) -> None:
    """Run work in a fresh context that registers a mock and then fails."""

    def work() -> None:
        context.mox.mock(name).returns(text)
        msg = "work failed"
        raise WorkFailedError(msg)

    context.failure = None
    try:
        context.mox.run_in_context(work)
    except WorkFailedError as exc:
        context.failure = exc


@when('I call "{name}" with "{value}"')
def step_call_target(context: BehaveContext, name: str, value: str) -> None:
    """Call a sample function, discarding the result."""
    getattr(context.targets, name)(value)


@then('calling "{name}" with "{value}" returns "{text}"')
def step_check_result(
    context: BehaveContext, name: str, value: str, text: str
) -> None:
    """Call a sample function and compare the result."""
    assert getattr(context.targets, name)(value) == text  # noqa: S101


@then("the context depth is {depth:d}")
def step_check_depth(context: BehaveContext, depth: int) -> None:
    """Compare the controller depth."""
    assert context.mox.depth == depth  # noqa: S101


@then('the work failed with "{message}"')
def step_check_failure(context: BehaveContext, message: str) -> None:
    """The original error reached the caller."""
    assert context.failure is not None  # noqa: S101
    assert str(context.failure) == message  # noqa: S101


@then('"{name}" was called {count:d} times')
def step_check_record_calls(context: BehaveContext, name: str, count: int) -> None:
    """Compare the number of calls handled by the record."""
    context.mox.assert_called(name, count, exactly=True)


@then('the case "{case_name}" of "{name}" was called {count:d} times')
def step_check_case_calls(
    context: BehaveContext, name: str, case_name: str, count: int
) -> None:
    """Compare the number of calls handled by one case."""
    context.mox.assert_called(name, count, exactly=True, case_name=case_name)
