"""Marker-filtered method discovery across a class hierarchy."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

_MARKERS_ATTR = "_typeloader_markers"

# Constructors are not methods
_CONSTRUCTOR_NAMES = frozenset(("__init__", "__new__"))


def _unwrap(member: Any) -> Any:
    """Return the plain function behind a class member, or None for non-methods."""
    if isinstance(member, (staticmethod, classmethod)):
        return member.__func__
    if isinstance(member, property):
        return member.fget
    if callable(member) and hasattr(member, "__code__"):
        return member
    return None


class Marker:
    """A named tag attached to methods with decorator syntax.

    Usage:
        transactional = Marker("transactional")

        class Service:
            @transactional
            def save(self): ...
    """

    def __init__(self, name: str):
        self.name = name

    def __call__(self, member):
        func = _unwrap(member)
        if func is None:
            raise TypeError(f"@{self.name} can only mark functions, got {type(member).__name__}")
        markers = getattr(func, _MARKERS_ATTR, ())
        if self not in markers:
            setattr(func, _MARKERS_ATTR, (*markers, self))
        return member

    def is_present(self, member: Any) -> bool:
        func = _unwrap(member)
        return func is not None and self in getattr(func, _MARKERS_ATTR, ())

    def __repr__(self) -> str:
        return f"Marker({self.name!r})"


@dataclass(frozen=True)
class MethodHandle:
    """A method as declared on one specific class of a hierarchy."""

    owner: type
    name: str
    member: Any

    @property
    def function(self):
        return _unwrap(self.member)

    @property
    def markers(self) -> tuple[Marker, ...]:
        return getattr(self.function, _MARKERS_ATTR, ())

    def invoke(self, target: Any, *args: Any, **kwargs: Any) -> Any:
        """Call this level's implementation, bypassing overrides in subclasses."""
        if isinstance(self.member, property):
            if args or kwargs:
                raise TypeError(f"Property {self} takes no arguments")
            return self.member.fget(target)
        return self.member.__get__(target, self.owner)(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.owner.__module__}.{self.owner.__qualname__}.{self.name}"


def get_annotated_methods(cls: type, marker: Marker | None = None) -> list[MethodHandle]:
    """Collect methods declared on ``cls`` and each of its ancestors.

    The walk follows the MRO from ``cls`` upward and stops before ``object``.
    Each level contributes only members declared directly on it, in
    declaration order, so private and overridden methods of ancestors are
    all reported.

    Args:
        cls: Class to scan
        marker: Only collect methods carrying this marker (None: all methods)

    Returns:
        Method handles, most-derived class first
    """
    if not isinstance(cls, type):
        raise TypeError(f"Expected a class, got {type(cls).__name__}")

    methods: list[MethodHandle] = []
    for owner in cls.__mro__:
        if owner is object:
            break
        for name, member in vars(owner).items():
            if name in _CONSTRUCTOR_NAMES or _unwrap(member) is None:
                continue
            if marker is None or marker.is_present(member):
                methods.append(MethodHandle(owner, name, member))
    return methods
