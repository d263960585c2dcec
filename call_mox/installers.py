"""Interception points that route calls for a name into the dispatcher.

An installer knows how to find the real implementation behind a name and how
to rebind that name to an :class:`Interceptor`. :class:`AttributeInstaller`
handles module and object attributes; :mod:`call_mox.commands` provides the
equivalent for external commands.
"""

from __future__ import annotations

import dataclasses as dc
import functools
import inspect
import logging
import pkgutil
import typing as t

from .cases import CallRecord
from .errors import InvalidCallableError, UnsupportedTargetError

logger = logging.getLogger(__name__)

Handler = t.Callable[[str, CallRecord], t.Any]

_MISSING: t.Final = object()


@dc.dataclass(slots=True, frozen=True)
class Indirection:
    """A name that redirects to another name instead of an implementation."""

    target: str


class Installer(t.Protocol):
    """Collaborator that binds callable names to a dispatch handler."""

    def resolve_original(
        self, name: str
    ) -> t.Callable[..., t.Any] | Indirection | None:
        """Return the real implementation of *name* outside any interception."""
        ...

    def bind(
        self,
        name: str,
        dispatch: Handler,
        original: t.Callable[..., t.Any] | None,
    ) -> None:
        """Route future calls to *name* through *dispatch*."""
        ...

    def unbind(self, name: str) -> None:
        """Restore *name* to the state it had before :meth:`bind`."""
        ...

    def is_bound(self, name: str) -> bool:
        """Return ``True`` if *name* currently routes to a dispatcher."""
        ...


class Interceptor:
    """Callable installed in place of a mocked name.

    Each call is captured as a :class:`CallRecord` bound against the original
    implementation's signature and handed to the dispatcher.
    """

    def __init__(
        self,
        name: str,
        dispatch: Handler,
        original: t.Callable[..., t.Any] | None = None,
    ) -> None:
        if original is not None:
            functools.update_wrapper(self, original, updated=())
        self.name = name
        self.original = original
        self._dispatch = dispatch

    def __call__(self, *args: t.Any, **kwargs: t.Any) -> t.Any:  # noqa: ANN401
        """Dispatch the call."""
        call = CallRecord.capture(args, kwargs, self.original)
        return self._dispatch(self.name, call)

    def __get__(self, instance: object, owner: type | None = None) -> t.Any:  # noqa: ANN401
        """Bind like a function when installed on a class."""
        if instance is None:
            return self
        return functools.partial(self, instance)

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"<Interceptor for {self.name!r}>"


class Alias:
    """Attribute forwarding calls to another attribute of the same owner.

    Aliases are indirections and cannot be mocked themselves.
    """

    def __init__(self, owner: object, target: str) -> None:
        self.owner = owner
        self.target = target

    def __call__(self, *args: t.Any, **kwargs: t.Any) -> t.Any:  # noqa: ANN401
        """Call the current value of the target attribute."""
        return getattr(self.owner, self.target)(*args, **kwargs)

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"Alias({self.target!r})"


@dc.dataclass(slots=True)
class _Binding:
    interceptor: Interceptor
    saved: object
    original: t.Callable[..., t.Any] | None


class AttributeInstaller:
    """Intercept attributes of modules, classes or other objects.

    With a ``namespace`` every name is an attribute of that object. Without
    one, names are dotted paths such as ``"os.path.exists"`` whose owner is
    imported on demand.
    """

    def __init__(self, namespace: object | None = None) -> None:
        self._namespace = namespace
        self._bindings: dict[str, _Binding] = {}

    def _locate(self, name: str) -> tuple[object, str]:
        """Return the owner object and attribute name behind *name*."""
        if self._namespace is not None:
            return self._namespace, name
        owner_path, sep, attr = name.rpartition(".")
        if not sep or not owner_path or not attr:
            raise InvalidCallableError(
                name, "expected a dotted 'module.attribute' path"
            )
        try:
            owner = pkgutil.resolve_name(owner_path)
        except (ImportError, AttributeError, ValueError) as exc:
            raise InvalidCallableError(
                name, f"cannot resolve {owner_path!r}: {exc}"
            ) from exc
        return owner, attr

    def resolve_original(
        self, name: str
    ) -> t.Callable[..., t.Any] | Indirection | None:
        """Return the real implementation behind *name*.

        Names already bound by this installer resolve to what they were bound
        over. Aliases and interceptors owned by another controller resolve to
        an :class:`Indirection`. Class methods resolve to their underlying
        function, which receives the class as its first argument.

        Raises
        ------
        InvalidCallableError
            When the attribute exists but is not callable.
        """
        binding = self._bindings.get(name)
        if binding is not None:
            return binding.original
        owner, attr = self._locate(name)
        value = getattr(owner, attr, _MISSING)
        if value is _MISSING:
            return None
        raw = _raw_attribute(owner, attr)
        redirect = _redirect_target(_unwrap_method(raw))
        if redirect is not None:
            return Indirection(redirect)
        if isinstance(raw, classmethod):
            value = raw.__func__
        if not callable(value):
            raise InvalidCallableError(
                name, f"{type(value).__name__!r} object is not callable"
            )
        return t.cast("t.Callable[..., t.Any]", value)

    def bind(
        self,
        name: str,
        dispatch: Handler,
        original: t.Callable[..., t.Any] | None,
    ) -> None:
        """Replace the attribute behind *name* with an :class:`Interceptor`.

        Static and class methods keep their kind. Only the owner's own
        attribute is saved; inherited attributes are deleted again on
        :meth:`unbind`.
        """
        if name in self._bindings:
            return
        owner, attr = self._locate(name)
        raw = _raw_attribute(owner, attr)
        redirect = _redirect_target(_unwrap_method(raw))
        if redirect is not None:
            raise UnsupportedTargetError(name, redirect)
        interceptor = Interceptor(name, dispatch, original)
        installed: object = interceptor
        if isinstance(raw, staticmethod):
            installed = staticmethod(interceptor)
        elif isinstance(raw, classmethod):
            installed = classmethod(interceptor)
        saved = _own_attribute(owner, attr)
        setattr(owner, attr, installed)
        self._bindings[name] = _Binding(interceptor, saved, original)
        logger.debug("Bound %r to dispatcher", name)

    def unbind(self, name: str) -> None:
        """Put back whatever *name* referred to before :meth:`bind`."""
        binding = self._bindings.pop(name, None)
        if binding is None:
            return
        owner, attr = self._locate(name)
        if binding.saved is _MISSING:
            delattr(owner, attr)
        else:
            setattr(owner, attr, binding.saved)
        logger.debug("Unbound %r", name)

    def is_bound(self, name: str) -> bool:
        """Return ``True`` if *name* is currently intercepted."""
        return name in self._bindings


def _raw_attribute(owner: object, attr: str) -> object:
    """Return *attr* without invoking descriptors when *owner* is a class."""
    if isinstance(owner, type):
        return inspect.getattr_static(owner, attr, _MISSING)
    return getattr(owner, attr, _MISSING)


def _own_attribute(owner: object, attr: str) -> object:
    """Return the value stored on *owner* itself, or ``_MISSING``."""
    try:
        namespace = vars(owner)
    except TypeError:
        return getattr(owner, attr, _MISSING)
    return namespace.get(attr, _MISSING)


def _unwrap_method(value: object) -> object:
    if isinstance(value, (staticmethod, classmethod)):
        return value.__func__
    return value


def _redirect_target(value: object) -> str | None:
    if isinstance(value, Alias):
        return value.target
    if isinstance(value, Interceptor):
        return value.name
    return None


__all__ = [
    "Alias",
    "AttributeInstaller",
    "Handler",
    "Indirection",
    "Installer",
    "Interceptor",
]
