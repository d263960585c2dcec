"""Example tests demonstrating function mocks."""

from __future__ import annotations

import typing as t

from call_mox.comparators import Regex, Where
from examples import _app

pytest_plugins = ("call_mox.pytest_plugin",)

if t.TYPE_CHECKING:  # pragma: no cover - typing only
    from pathlib import Path

    from call_mox.controller import CallMox

SETTINGS = "examples._app.load_settings"


def test_default_case_replaces_function(call_mox: CallMox) -> None:
    """A case without a predicate handles every call."""
    call_mox.mock(SETTINGS).returns({"name": "demo", "version": "1.2"})

    assert _app.describe("/does/not/exist.json") == "demo v1.2"
    call_mox.assert_called(SETTINGS, 1, exactly=True)


def test_cases_selected_by_arguments(call_mox: CallMox) -> None:
    """Specific cases win; other calls fall through to the default."""
    call_mox.mock(SETTINGS, predicate=Where(path=Regex(r"staging"))).returns(
        {"name": "staging", "version": "2.0-rc1"}
    )
    call_mox.mock(SETTINGS).returns({"name": "prod", "version": "1.9"})

    assert _app.describe("/etc/app/staging.json") == "staging v2.0-rc1"
    assert _app.describe("/etc/app/prod.json") == "prod v1.9"


def test_unmatched_calls_use_the_real_function(
    call_mox: CallMox, tmp_path: Path
) -> None:
    """Calls no case accepts run the original implementation."""
    real = tmp_path / "real.json"
    real.write_text('{"name": "real", "version": "0.1"}')
    call_mox.mock(SETTINGS, predicate=lambda path: path.endswith("fake.json")).returns(
        {"name": "fake", "version": "9"}
    )

    assert _app.describe(str(real)) == "real v0.1"
    assert _app.describe("fake.json") == "fake v9"
    call_mox.assert_called(SETTINGS, 1, exactly=True)


def test_nested_context_shadows_outer_mocks(call_mox: CallMox) -> None:
    """Mocks registered in a nested context disappear when it exits."""
    call_mox.mock(SETTINGS).returns({"name": "outer", "version": "1"})

    with call_mox.context():
        call_mox.mock(SETTINGS).returns({"name": "inner", "version": "2"})
        assert _app.describe("any.json") == "inner v2"

    assert _app.describe("any.json") == "outer v1"
