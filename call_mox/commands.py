"""External commands as interceptable names.

Code under test runs commands through a :class:`CommandTable` (usually the
module-level :func:`run`). The table consults its handlers before falling back
to the real executable on ``PATH``, which gives :class:`CommandInstaller` a
single place to route command calls into the dispatcher.
"""

from __future__ import annotations

import dataclasses as dc
import logging
import os
import shutil
import subprocess
import typing as t
from pathlib import Path

from ._validators import timeout_from_env, validate_positive_finite_timeout
from .errors import UnsupportedTargetError
from .installers import Indirection, Interceptor

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .installers import Handler

logger = logging.getLogger(__name__)

CALL_MOX_COMMAND_TIMEOUT_ENV = "CALL_MOX_COMMAND_TIMEOUT"
DEFAULT_COMMAND_TIMEOUT: t.Final[float] = 30.0

CommandHandler = t.Callable[..., t.Any]


@dc.dataclass(slots=True, frozen=True)
class CommandResult:
    """Outcome of running a command."""

    stdout: str = ""
    stderr: str = ""
    exit_code: int = 0

    @property
    def ok(self) -> bool:
        """Return ``True`` when the command exited successfully."""
        return self.exit_code == 0


def coerce_result(value: object) -> CommandResult:
    """Normalise a handler's return value into a :class:`CommandResult`.

    ``None`` means an empty successful run and a string is taken as stdout.
    """
    if isinstance(value, CommandResult):
        return value
    if value is None:
        return CommandResult()
    if isinstance(value, str):
        return CommandResult(stdout=value)
    msg = (
        "command handlers must return CommandResult, str or None, "
        f"got {type(value).__name__}"
    )
    raise TypeError(msg)


def resolve_command_path(command: str, path: str | None = None) -> Path | None:
    """Locate *command* within *path*, returning ``None`` if unusable."""
    real = shutil.which(command, path=path)
    if real is None:
        return None
    resolved = Path(real)
    if not resolved.is_absolute():
        return None
    resolved = resolved.resolve()
    if not resolved.is_file() or not os.access(resolved, os.X_OK):
        return None
    return resolved


class RealCommand:
    """Run an executable with :mod:`subprocess`.

    Common failures follow POSIX-like shell conventions:

    * ``127`` - command not found
    * ``126`` - command found but execution failed
    * ``124`` - execution timed out
    """

    def __init__(
        self, name: str, path: Path, *, timeout: float | None = None
    ) -> None:
        self.name = name
        self.path = path
        if timeout is None:
            timeout = timeout_from_env(
                CALL_MOX_COMMAND_TIMEOUT_ENV, DEFAULT_COMMAND_TIMEOUT
            )
        validate_positive_finite_timeout(timeout)
        self.timeout = timeout

    def __call__(
        self,
        *args: str,
        stdin: str | None = None,
        env: t.Mapping[str, str] | None = None,
    ) -> CommandResult:
        """Execute the command with *args*."""
        run_env = None if env is None else os.environ | dict(env)
        try:
            result = subprocess.run(  # noqa: S603 - shell=False prevents injection
                [str(self.path), *args],
                input=stdin,
                capture_output=True,
                text=True,
                env=run_env,
                shell=False,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            duration = int(self.timeout)
            return CommandResult(
                stderr=f"{self.name}: timeout after {duration} seconds",
                exit_code=124,
            )
        except FileNotFoundError:
            return CommandResult(stderr=f"{self.name}: not found", exit_code=127)
        except OSError as exc:
            return CommandResult(
                stderr=f"{self.name}: execution failed: {exc}", exit_code=126
            )
        return CommandResult(
            stdout=result.stdout,
            stderr=result.stderr,
            exit_code=result.returncode,
        )

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"RealCommand({self.name!r}, {str(self.path)!r})"


class CommandTable:
    """Name-keyed table of command handlers and aliases.

    Parameters
    ----------
    path:
        Search path for real executables. ``None`` uses ``PATH`` at call time.
    """

    def __init__(self, *, path: str | None = None) -> None:
        self._path = path
        self._handlers: dict[str, CommandHandler] = {}
        self._aliases: dict[str, str] = {}

    # ------------------------------------------------------------------
    # Table maintenance
    # ------------------------------------------------------------------
    def register(self, name: str, handler: CommandHandler) -> None:
        """Handle calls to *name* with *handler*."""
        self._handlers[name] = handler

    def unregister(self, name: str) -> None:
        """Forget the handler for *name*, if any."""
        self._handlers.pop(name, None)

    def handler_for(self, name: str) -> CommandHandler | None:
        """Return the handler registered for *name*."""
        return self._handlers.get(name)

    def alias(self, name: str, target: str) -> None:
        """Make *name* run *target*."""
        if name == target:
            msg = f"{name!r} cannot alias itself"
            raise ValueError(msg)
        self._aliases[name] = target

    def unalias(self, name: str) -> None:
        """Remove the alias *name*, if any."""
        self._aliases.pop(name, None)

    def alias_target(self, name: str) -> str | None:
        """Return the name *name* redirects to, if it is an alias."""
        return self._aliases.get(name)

    # ------------------------------------------------------------------
    # Resolution and execution
    # ------------------------------------------------------------------
    def resolve(self, name: str) -> CommandHandler | Indirection | None:
        """Return what *name* currently refers to.

        Aliases resolve to an :class:`Indirection`, registered handlers to
        themselves and anything else to a :class:`RealCommand` when the
        executable exists.
        """
        target = self._aliases.get(name)
        if target is not None:
            return Indirection(target)
        handler = self._handlers.get(name)
        if handler is not None:
            return handler
        path = resolve_command_path(name, self._path)
        if path is None:
            return None
        return RealCommand(name, path)

    def _follow_aliases(self, name: str) -> str:
        seen = {name}
        while (target := self._aliases.get(name)) is not None:
            if target in seen:
                msg = f"alias loop while resolving {name!r}"
                raise RuntimeError(msg)
            seen.add(target)
            name = target
        return name

    def run(
        self,
        name: str,
        *args: str,
        stdin: str | None = None,
        env: t.Mapping[str, str] | None = None,
    ) -> CommandResult:
        """Run *name* with *args* and return its result."""
        target = self._follow_aliases(name)
        handler = self._handlers.get(target)
        if handler is None:
            path = resolve_command_path(target, self._path)
            if path is None:
                return CommandResult(stderr=f"{name}: not found", exit_code=127)
            handler = RealCommand(target, path)
        kwargs: dict[str, t.Any] = {}
        if stdin is not None:
            kwargs["stdin"] = stdin
        if env is not None:
            kwargs["env"] = env
        return coerce_result(handler(*args, **kwargs))


@dc.dataclass(slots=True)
class _CommandBinding:
    saved: CommandHandler | None
    original: CommandHandler | None


class CommandInstaller:
    """Installer routing commands of a :class:`CommandTable` to a dispatcher."""

    def __init__(self, table: CommandTable | None = None) -> None:
        self.table = default_table if table is None else table
        self._bindings: dict[str, _CommandBinding] = {}

    def resolve_original(self, name: str) -> CommandHandler | Indirection | None:
        """Return the handler or executable *name* ran before interception."""
        binding = self._bindings.get(name)
        if binding is not None:
            return binding.original
        return self.table.resolve(name)

    def bind(
        self,
        name: str,
        dispatch: Handler,
        original: CommandHandler | None,
    ) -> None:
        """Register an :class:`Interceptor` for *name* in the table."""
        if name in self._bindings:
            return
        target = self.table.alias_target(name)
        if target is not None:
            raise UnsupportedTargetError(name, target)
        saved = self.table.handler_for(name)
        self.table.register(name, Interceptor(name, dispatch, original))
        self._bindings[name] = _CommandBinding(saved, original)
        logger.debug("Bound command %r to dispatcher", name)

    def unbind(self, name: str) -> None:
        """Restore the handler *name* had before :meth:`bind`."""
        binding = self._bindings.pop(name, None)
        if binding is None:
            return
        if binding.saved is None:
            self.table.unregister(name)
        else:
            self.table.register(name, binding.saved)
        logger.debug("Unbound command %r", name)

    def is_bound(self, name: str) -> bool:
        """Return ``True`` if *name* is currently intercepted."""
        return name in self._bindings


default_table = CommandTable()


def run(
    name: str,
    *args: str,
    stdin: str | None = None,
    env: t.Mapping[str, str] | None = None,
) -> CommandResult:
    """Run *name* through the default :class:`CommandTable`."""
    return default_table.run(name, *args, stdin=stdin, env=env)


__all__ = [
    "CALL_MOX_COMMAND_TIMEOUT_ENV",
    "DEFAULT_COMMAND_TIMEOUT",
    "CommandInstaller",
    "CommandResult",
    "CommandTable",
    "RealCommand",
    "coerce_result",
    "default_table",
    "resolve_command_path",
    "run",
]
