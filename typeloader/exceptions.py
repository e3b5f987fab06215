"""Error taxonomy for class resolution and reflective construction.

Callers only ever see one of three conditions:
- ClassNotResolvedError: every loader source and the primitive table missed
- ConstructorNotFoundError: no public constructor matches the argument types
- InstantiationFailedError: a constructor was found but invoking it failed

Resource lookup has no error type - a miss is a normal ``None`` result.
"""

from __future__ import annotations


class TypeLoaderError(Exception):
    """Base class for all typeloader errors."""

    pass


class ClassNotResolvedError(TypeLoaderError):
    """Raised when a class name cannot be resolved from any source."""

    def __init__(self, name: str, message: str | None = None):
        self.name = name
        if message is None:
            message = (
                f"Unable to load class named [{name}] from the thread context, library, additional, "
                f"or system loader sources. All heuristics have been exhausted. Class could not be found."
            )
        super().__init__(message)


class ConstructorNotFoundError(TypeLoaderError):
    """Raised when no public constructor matches the given argument types."""

    def __init__(self, cls: type, arg_types: tuple[type, ...], available: list[str] | None = None):
        self.cls = cls
        self.arg_types = arg_types
        wanted = ", ".join(t.__name__ for t in arg_types)
        message = f"No public constructor of [{cls.__module__}.{cls.__qualname__}] accepts ({wanted})"
        if available:
            message += "\nAvailable constructors:\n" + "\n".join(f"  - {sig}" for sig in available)
        super().__init__(message)


class InstantiationFailedError(TypeLoaderError):
    """Raised when invoking a constructor fails.

    The underlying exception is chained as ``__cause__``.
    """

    def __init__(self, message: str, target: object = None):
        self.target = target
        super().__init__(message)
