"""Loader accessors and the thread-scoped override.

An accessor pairs a provider of a LoaderSource with two lookups that never
raise. Four accessors form the fixed resolution chain:

1. context    - the calling thread's live import system
2. library    - the path entry that owns the typeloader package
3. additional - the thread-scoped override, else the library source
4. system     - sys.path plus configured extra paths

The override is stored per thread. ``set_additional_source()`` must be
paired with ``remove_additional_source()``; an unpaired set keeps the source
referenced for the lifetime of the thread, which matters for pooled threads.
Prefer the ``additional_source()`` context manager, which always clears.
"""

from __future__ import annotations

import logging
import sys
import threading
from collections.abc import Callable
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO

from .logging_setup import TRACE
from .settings import ResolverSettings
from .sources import ImportSource
from .sources import LoaderSource
from .sources import PathSource
from .sources import parse_source

logger = logging.getLogger(__name__)

SourceProvider = Callable[[], LoaderSource | None]

CONTEXT = "context"
LIBRARY = "library"
ADDITIONAL = "additional"
SYSTEM = "system"

_override = threading.local()


# ===== THREAD-SCOPED OVERRIDE =====


def set_additional_source(source: LoaderSource | None) -> None:
    """Set the calling thread's additional loader source.

    Must be paired with remove_additional_source().
    """
    _override.source = source


def remove_additional_source() -> None:
    """Remove the calling thread's additional loader source."""
    try:
        del _override.source
    except AttributeError:
        pass


def get_additional_source() -> LoaderSource | None:
    return getattr(_override, "source", None)


@contextmanager
def additional_source(source: LoaderSource) -> Iterator[LoaderSource]:
    """Scope an additional loader source to a ``with`` block on this thread.

    A value set before entering is restored on exit.
    """
    previous = get_additional_source()
    set_additional_source(source)
    try:
        yield source
    finally:
        if previous is None:
            remove_additional_source()
        else:
            set_additional_source(previous)


# ===== ACCESSORS =====


class LoaderAccessor:
    """Fault-tolerant wrapper around one loader source."""

    def __init__(self, label: str, provider: SourceProvider):
        self.label = label
        self._provider = provider

    def get_source(self) -> LoaderSource | None:
        try:
            return self._provider()
        except Exception:
            logger.debug(f"Unable to acquire {self.label} loader source.", exc_info=True)
            return None

    def load_class(self, name: str) -> type | None:
        source = self.get_source()
        if source is None:
            return None
        try:
            return source.load_class(name)
        except Exception as e:
            if logger.isEnabledFor(TRACE):
                logger.log(TRACE, f"Unable to load class named [{name}] from {self.label} source [{source!r}]: {e}")
            return None

    def get_resource_stream(self, name: str) -> BinaryIO | None:
        source = self.get_source()
        if source is None:
            return None
        try:
            return source.get_resource_as_stream(name)
        except Exception as e:
            if logger.isEnabledFor(TRACE):
                logger.log(TRACE, f"Unable to open resource [{name}] from {self.label} source [{source!r}]: {e}")
            return None

    def __repr__(self) -> str:
        return f"LoaderAccessor({self.label})"


class AccessorChain:
    """Fixed, ordered sequence of accessors: context, library, additional, system."""

    def __init__(
        self,
        context: LoaderAccessor,
        library: LoaderAccessor,
        additional: LoaderAccessor,
        system: LoaderAccessor,
    ):
        self.accessors: tuple[LoaderAccessor, ...] = (context, library, additional, system)

    def load_class(self, name: str) -> tuple[type, str] | None:
        """Return (class, accessor label) from the first accessor that hits."""
        for accessor in self.accessors:
            cls = accessor.load_class(name)
            if cls is not None:
                return cls, accessor.label
            if logger.isEnabledFor(TRACE):
                logger.log(TRACE, f"Class [{name}] was not found via the {accessor.label} source.")
        return None

    def get_resource_stream(self, name: str) -> tuple[BinaryIO, str] | None:
        for accessor in self.accessors:
            stream = accessor.get_resource_stream(name)
            if stream is not None:
                return stream, accessor.label
            if logger.isEnabledFor(TRACE):
                logger.log(TRACE, f"Resource [{name}] was not found via the {accessor.label} source.")
        return None

    def __iter__(self) -> Iterator[LoaderAccessor]:
        return iter(self.accessors)

    def __len__(self) -> int:
        return len(self.accessors)


# ===== DEFAULT PROVIDERS =====


def library_root() -> Path:
    """Path entry the typeloader package was imported from."""
    return Path(__file__).resolve().parent.parent


def context_source() -> LoaderSource:
    return ImportSource()


def library_source() -> LoaderSource:
    return PathSource([library_root()])


def system_source(settings: ResolverSettings | None = None) -> LoaderSource:
    extra = list(settings.extra_paths) if settings else []
    return PathSource(lambda: [*sys.path, *extra])


def as_provider(source: LoaderSource | SourceProvider | None, default: SourceProvider) -> SourceProvider:
    """Normalize a source argument to a provider callable."""
    if source is None:
        return default
    if isinstance(source, LoaderSource):
        return lambda: source
    return source


def build_chain(
    context: LoaderSource | SourceProvider | None = None,
    library: LoaderSource | SourceProvider | None = None,
    system: LoaderSource | SourceProvider | None = None,
    settings: ResolverSettings | None = None,
) -> AccessorChain:
    """Build the four-accessor chain.

    The additional accessor is not configurable here: it always reads the
    thread-scoped override, then ``settings.additional_source``, then the
    library source.
    """
    library_provider = as_provider(library, library_source)
    fallback_provider = library_provider
    if settings and settings.additional_source is not None:
        configured = settings.additional_source
        # Parsed on use so a bad value only disables this accessor
        fallback_provider = lambda: parse_source(configured)  # noqa: E731

    def additional_provider() -> LoaderSource | None:
        override = get_additional_source()
        return override if override is not None else fallback_provider()

    return AccessorChain(
        LoaderAccessor(CONTEXT, as_provider(context, context_source)),
        LoaderAccessor(LIBRARY, library_provider),
        LoaderAccessor(ADDITIONAL, additional_provider),
        LoaderAccessor(SYSTEM, as_provider(system, lambda: system_source(settings))),
    )
