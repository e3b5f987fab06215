"""Class and resource resolution through the accessor chain.

Resolution order (first match wins):
1. Thread context source (live import system)
2. Library source (path entry owning typeloader)
3. Additional source (thread-scoped override, else library source)
4. System source (sys.path + extra paths)
5. Primitive keywords (classes only)

Class resolution raises ClassNotResolvedError when everything misses.
Resource resolution returns None instead; a missing resource is not an error.
"""

from __future__ import annotations

import logging
from typing import Any
from typing import BinaryIO

from .accessors import AccessorChain
from .accessors import SourceProvider
from .accessors import build_chain
from .exceptions import ClassNotResolvedError
from .instantiation import new_instance as _new_instance
from .logging_setup import TRACE
from .primitives import get_primitive_type
from .settings import ResolverSettings
from .settings import load_settings
from .sources import LoaderSource

logger = logging.getLogger(__name__)

PRIMITIVE = "primitive"


class ClassResolver:
    """Resolve classes and resources through the fixed four-source chain."""

    def __init__(
        self,
        *,
        context_source: LoaderSource | SourceProvider | None = None,
        library_source: LoaderSource | SourceProvider | None = None,
        system_source: LoaderSource | SourceProvider | None = None,
        settings: ResolverSettings | None = None,
    ):
        """Initialize the resolver.

        Args:
            context_source: Source (or provider) for the thread context accessor
            library_source: Source (or provider) for the library accessor; also
                the additional accessor's fallback
            system_source: Source (or provider) for the system accessor
            settings: Extra paths and the configured additional source
        """
        self.settings = settings or ResolverSettings()
        self.chain: AccessorChain = build_chain(context_source, library_source, system_source, self.settings)

    def for_name(self, name: str) -> type:
        """Resolve a class name.

        Raises:
            ClassNotResolvedError: No source and no primitive keyword matched
        """
        cls, _label = self.resolve_with_accessor(name)
        return cls

    def resolve_with_accessor(self, name: str) -> tuple[type, str]:
        """Resolve a class name and report which accessor supplied it.

        Returns:
            Tuple of (class, label)
            label is one of: context, library, additional, system, primitive
        """
        found = self.chain.load_class(name)
        if found is not None:
            logger.debug(f"[class:resolve] {name} -> {found[1]}")
            return found

        primitive = get_primitive_type(name)
        if primitive is not None:
            logger.debug(f"[class:resolve] {name} -> primitive")
            return primitive, PRIMITIVE

        raise ClassNotResolvedError(name)

    def get_resource_as_stream(self, name: str) -> BinaryIO | None:
        """Open a resource as a binary stream, or return None if no source has it."""
        found = self.chain.get_resource_stream(name)
        if found is None:
            if logger.isEnabledFor(TRACE):
                logger.log(TRACE, f"Resource [{name}] was not found by any loader source. Returning None.")
            return None
        stream, label = found
        logger.debug(f"[resource:resolve] {name} -> {label}")
        return stream

    def is_available(self, name: str) -> bool:
        try:
            self.for_name(name)
            return True
        except ClassNotResolvedError:
            return False

    def new_instance(self, target: str | type | None, *args: Any) -> Any:
        """Resolve ``target`` if it is a name, then construct it.

        Raises:
            ClassNotResolvedError: The name could not be resolved
            ConstructorNotFoundError: No constructor matches the argument types
            InstantiationFailedError: Construction failed
        """
        cls = self.for_name(target) if isinstance(target, str) else target
        return _new_instance(cls, *args)

    def __repr__(self) -> str:
        return f"ClassResolver({', '.join(a.label for a in self.chain)})"


# Singleton instance
_resolver: ClassResolver | None = None


def get_default_resolver() -> ClassResolver:
    """Get the process-wide resolver, built from settings on first use."""
    global _resolver
    if _resolver is None:
        _resolver = ClassResolver(settings=load_settings())
    return _resolver


def reset_default_resolver() -> None:
    """Drop the process-wide resolver so the next call re-reads settings."""
    global _resolver
    _resolver = None


def for_name(name: str) -> type:
    return get_default_resolver().for_name(name)


def get_resource_as_stream(name: str) -> BinaryIO | None:
    return get_default_resolver().get_resource_as_stream(name)


def is_available(name: str) -> bool:
    return get_default_resolver().is_available(name)


def new_instance(target: str | type | None, *args: Any) -> Any:
    return get_default_resolver().new_instance(target, *args)
