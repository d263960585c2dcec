"""A tiny application whose collaborators the examples replace."""

from __future__ import annotations

import json
from pathlib import Path

from call_mox.commands import run


def load_settings(path: str) -> dict[str, object]:
    """Read JSON settings from *path*."""
    return json.loads(Path(path).read_text())


def describe(path: str) -> str:
    """Return a one-line summary of the settings stored at *path*."""
    settings = load_settings(path)
    return f"{settings['name']} v{settings['version']}"


def current_branch() -> str:
    """Return the checked-out git branch, or ``"unknown"``."""
    result = run("git", "rev-parse", "--abbrev-ref", "HEAD")
    if not result.ok:
        return "unknown"
    return result.stdout.strip()


def publish(version: str) -> bool:
    """Tag *version* and push it; return ``True`` when both succeed."""
    tagged = run("git", "tag", f"v{version}")
    return tagged.ok and run("git", "push", "origin", f"v{version}").ok
