"""Shared validation helpers."""

from __future__ import annotations

import math
import os
import typing as t


def validate_positive_finite_timeout(timeout: float) -> None:
    """Ensure *timeout* represents a usable command timeout value."""
    if isinstance(timeout, bool):
        msg = "timeout must be a real number"
        raise TypeError(msg)

    if not (timeout > 0 and math.isfinite(timeout)):
        msg = "timeout must be > 0 and finite"
        raise ValueError(msg)


def timeout_from_env(
    key: str, default: float, environ: t.Mapping[str, str] | None = None
) -> float:
    """Return the timeout configured in environment variable *key*.

    Falls back to *default* when the variable is unset or blank.
    """
    source = os.environ if environ is None else environ
    raw = source.get(key, "").strip()
    if not raw:
        return default
    try:
        timeout = float(raw)
    except ValueError:
        msg = f"{key} must be a number of seconds, got {raw!r}"
        raise ValueError(msg) from None
    validate_positive_finite_timeout(timeout)
    return timeout
