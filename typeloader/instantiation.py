"""Reflective construction of resolved classes.

A class's public constructors are:
- ``__init__``, exposed as one handle per positional arity (parameters with
  defaults make the shorter signatures available)
- public classmethods decorated with ``@constructor``

Constructor lookup matches the runtime types of the supplied arguments
exactly against the annotated parameter types. There is no overload
resolution by static type and no subclass widening: a ``bool`` argument does
not match an ``int`` parameter. Unannotated and ``Any`` parameters accept
any argument.
"""

from __future__ import annotations

import inspect
import logging
import types
import typing
from collections.abc import Callable
from dataclasses import dataclass
from dataclasses import field
from typing import Any

from .exceptions import ConstructorNotFoundError
from .exceptions import InstantiationFailedError

logger = logging.getLogger(__name__)

_CONSTRUCTOR_ATTR = "_typeloader_constructor"

# None means "any type"
ParameterTypes = tuple[tuple[type, ...] | None, ...]


def _qualified_name(cls: type) -> str:
    return f"{cls.__module__}.{cls.__qualname__}"


def _type_label(accepted: tuple[type, ...] | None) -> str:
    if accepted is None:
        return "Any"
    return " | ".join(t.__name__ for t in accepted)


@dataclass(frozen=True)
class ConstructorHandle:
    """A public constructor bound to its positional parameter types."""

    owner: type
    name: str
    parameter_types: ParameterTypes
    factory: Callable[..., Any] = field(repr=False, compare=False)

    def accepts(self, arg_types: tuple[type, ...]) -> bool:
        if len(arg_types) != len(self.parameter_types):
            return False
        return all(accepted is None or t in accepted for t, accepted in zip(arg_types, self.parameter_types))

    def __str__(self) -> str:
        params = ", ".join(_type_label(accepted) for accepted in self.parameter_types)
        return f"{_qualified_name(self.owner)}.{self.name}({params})"


def constructor(method):
    """Mark a classmethod as a public alternate constructor.

    Use it alone or above ``@classmethod``; a plain function is wrapped in a
    classmethod.
    """
    is_classmethod = isinstance(method, classmethod)
    func = method.__func__ if is_classmethod else method
    setattr(func, _CONSTRUCTOR_ATTR, True)
    return method if is_classmethod else classmethod(method)


def _accepted_types(annotation: Any) -> tuple[type, ...] | None:
    """Map an annotation to the exact runtime types it accepts (None = any)."""
    if annotation is inspect.Parameter.empty or annotation is Any:
        return None
    if annotation is None:
        return (types.NoneType,)

    origin = typing.get_origin(annotation)
    if origin is typing.Union or origin is types.UnionType:
        members: list[type] = []
        for arg in typing.get_args(annotation):
            accepted = _accepted_types(arg)
            if accepted is None:
                return None
            members.extend(accepted)
        return tuple(members)
    if isinstance(origin, type):
        return (origin,)
    if isinstance(annotation, type):
        return (annotation,)
    # TypeVars, Literals, unresolved string annotations
    return None


def _type_hints(hints_from: Any) -> dict[str, Any]:
    """Resolve annotations, one at a time when some cannot be resolved.

    A name that only exists under ``TYPE_CHECKING`` leaves that one
    annotation as a string, which accepts any type.
    """
    try:
        return typing.get_type_hints(hints_from)
    except Exception:
        pass

    try:
        annotations = dict(getattr(hints_from, "__annotations__", {}))
    except Exception:
        # Lazily evaluated annotations can fail on access
        return {}

    globalns = getattr(inspect.unwrap(hints_from), "__globals__", {})
    hints = {}
    for name, annotation in annotations.items():
        if not isinstance(annotation, str):
            hints[name] = annotation
            continue
        try:
            hints[name] = eval(annotation, globalns)  # noqa: S307
        except Exception:
            logger.debug(f"Unresolvable annotation {annotation!r} on {hints_from!r}")
    return hints


def _positional_handles(owner: type, name: str, call: Callable[..., Any], hints_from: Any) -> list[ConstructorHandle]:
    try:
        signature = inspect.signature(call)
    except (TypeError, ValueError):
        # Builtins without introspectable signatures expose no typed constructors
        return []

    hints = _type_hints(hints_from)

    positional = []
    for param in signature.parameters.values():
        if param.kind is inspect.Parameter.KEYWORD_ONLY and param.default is inspect.Parameter.empty:
            return []
        if param.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD):
            positional.append(param)

    required = sum(1 for p in positional if p.default is inspect.Parameter.empty)
    accepted = tuple(_accepted_types(hints.get(p.name, p.annotation)) for p in positional)
    return [ConstructorHandle(owner, name, accepted[:arity], call) for arity in range(required, len(positional) + 1)]


def get_constructors(cls: type) -> list[ConstructorHandle]:
    """List the public constructors of a class, ``__init__`` first."""
    init = cls.__init__ if cls.__init__ is not object.__init__ else cls.__new__
    handles = _positional_handles(cls, "__init__", cls, init)

    for name, member in vars(cls).items():
        if name.startswith("_") or not isinstance(member, classmethod):
            continue
        if getattr(member.__func__, _CONSTRUCTOR_ATTR, False):
            handles.extend(_positional_handles(cls, name, getattr(cls, name), member.__func__))

    return handles


def get_constructor(cls: type, *arg_types: type) -> ConstructorHandle:
    """Find the public constructor whose parameter types match exactly.

    Raises:
        ConstructorNotFoundError: No constructor accepts ``arg_types``
    """
    handles = get_constructors(cls)
    for handle in handles:
        if handle.accepts(arg_types):
            return handle
    raise ConstructorNotFoundError(cls, arg_types, [str(h) for h in handles])


def instantiate(handle: ConstructorHandle | None, *args: Any) -> Any:
    """Invoke a constructor handle.

    Raises:
        InstantiationFailedError: The handle is missing, or the constructor raised
    """
    if handle is None:
        raise InstantiationFailedError("Constructor argument cannot be None.")

    try:
        return handle.factory(*args)
    except Exception as e:
        raise InstantiationFailedError(
            f"Unable to instantiate [{_qualified_name(handle.owner)}] with constructor [{handle}]", target=handle
        ) from e


def new_instance(cls: type | None, *args: Any) -> Any:
    """Construct ``cls``, choosing the constructor from the arguments' runtime types.

    Args:
        cls: Class to construct
        *args: Constructor arguments; none means the zero-argument constructor

    Returns:
        New instance (a fresh one on every call)

    Raises:
        ConstructorNotFoundError: No constructor matches the argument types
        InstantiationFailedError: ``cls`` is missing, or construction failed
    """
    if cls is None:
        raise InstantiationFailedError("Class argument cannot be None.")
    if not isinstance(cls, type):
        raise InstantiationFailedError(f"[{cls!r}] is not a class.", target=cls)

    if not args:
        try:
            return cls()
        except Exception as e:
            raise InstantiationFailedError(f"Unable to instantiate class [{_qualified_name(cls)}]", target=cls) from e

    arg_types = tuple(type(arg) for arg in args)
    handle = get_constructor(cls, *arg_types)
    logger.debug(f"Instantiating {_qualified_name(cls)} via {handle}")
    return instantiate(handle, *args)
