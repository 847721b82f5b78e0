"""Core domain models for reload routing.

A Candidate is a live host object registered to react to reloads:
- class identity captured at registration time
- non-owning reference to the host
- reload callback (weak when it is a bound method of the host)
- optional direct children, also held weakly
"""

import types
import weakref
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field, replace
from typing import Any
from uuid import uuid4

ReloadCallback = Callable[[], Any]


def generate_token() -> str:
    """Generate an opaque registration token (rl-xxxxxxxx)."""
    return f"rl-{uuid4().hex[:8]}"


def class_identity(obj: Any) -> str:
    """Get the dotted class identity of an object or class.

    ``class_identity(Foo)`` and ``class_identity(Foo())`` are equal.
    """
    cls = obj if isinstance(obj, type) else type(obj)
    return f"{cls.__module__}.{cls.__qualname__}"


def _weak(obj: Any) -> Callable[[], Any]:
    try:
        return weakref.ref(obj)
    except TypeError:
        # Objects without __weakref__ slots (ints, tuples, ...) are held strongly
        def strong() -> Any:
            return obj

        return strong


@dataclass(frozen=True)
class ChildRef:
    """A direct child of a hierarchical candidate."""

    class_identity: str
    ref: Callable[[], Any] = field(compare=False, repr=False)

    @classmethod
    def of(cls, child: Any) -> "ChildRef":
        return cls(class_identity=class_identity(child), ref=_weak(child))

    @property
    def obj(self) -> Any:
        return self.ref()


@dataclass(frozen=True, eq=False)
class Candidate:
    """A registered live object eligible to react to a reload event.

    Equality is identity: two Candidates are never equal by value.
    """

    class_identity: str
    host_ref: Callable[[], Any] = field(repr=False)
    callback_ref: Callable[[], ReloadCallback | None] = field(repr=False)
    children: tuple[ChildRef, ...] = ()

    @classmethod
    def for_host(
        cls,
        host: Any,
        callback: ReloadCallback | None = None,
        children: Iterable[Any] = (),
    ) -> "Candidate":
        """Build a candidate for a host object.

        Args:
            host: The live object to track.
            callback: Zero-argument reload callback. Defaults to ``host.injected``.
            children: Direct child objects for hierarchical hosts.

        Raises:
            TypeError: If no callback is given and the host has no ``injected`` method.
        """
        if callback is None:
            callback = getattr(host, "injected", None)
            if not callable(callback):
                raise TypeError(f"{class_identity(host)} has no injected() method and no callback was given")

        callback_ref: Callable[[], ReloadCallback | None] | None = None
        if isinstance(callback, types.MethodType) and callback.__self__ is host:
            try:
                callback_ref = weakref.WeakMethod(callback)
            except TypeError:
                # Host without __weakref__, held strongly like the host itself
                pass
        if callback_ref is None:

            def callback_ref() -> ReloadCallback:
                return callback

        return cls(
            class_identity=class_identity(host),
            host_ref=_weak(host),
            callback_ref=callback_ref,
            children=tuple(ChildRef.of(child) for child in children),
        )

    @property
    def host(self) -> Any:
        """The host object, or None once it has been collected."""
        return self.host_ref()

    @property
    def callback(self) -> ReloadCallback | None:
        """The reload callback, or None once it has been collected."""
        return self.callback_ref()

    @property
    def is_alive(self) -> bool:
        return self.host is not None

    @property
    def has_children(self) -> bool:
        return bool(self.children)

    def with_children(self, children: Iterable[Any]) -> "Candidate":
        """Return a copy of this candidate with a new set of direct children."""
        return replace(self, children=tuple(ChildRef.of(child) for child in children))
