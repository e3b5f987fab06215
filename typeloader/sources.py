"""Loader source implementations.

A loader source is one origin of classes and resources:
- ImportSource: the live import system (sys.meta_path / sys.modules)
- PathSource: explicit path entries, searched with PathFinder
- RegistrySource: classes and resources registered ahead of time

Sources are allowed to raise on a class miss. The accessors in
``typeloader.accessors`` are responsible for turning failures into misses.
"""

from __future__ import annotations

import importlib.resources
import importlib.util
import io
import logging
import pkgutil
import sys
from abc import ABC
from abc import abstractmethod
from collections.abc import Callable
from collections.abc import Iterable
from collections.abc import Mapping
from importlib.machinery import ModuleSpec
from importlib.machinery import PathFinder
from pathlib import Path
from pathlib import PurePosixPath
from typing import Any
from typing import BinaryIO

logger = logging.getLogger(__name__)


def _split_resource_name(name: str) -> list[str]:
    parts = [p for p in PurePosixPath(name.lstrip("/")).parts if p not in ("", ".")]
    if ".." in parts:
        return []
    return parts


class LoaderSource(ABC):
    """Base class for loader sources."""

    @abstractmethod
    def load_class(self, name: str) -> type:
        """Resolve a dotted class name.

        Args:
            name: ``pkg.mod.Class``, ``pkg.mod.Outer.Inner`` or ``pkg.mod:Class``

        Returns:
            The class object

        Raises:
            ImportError, AttributeError, LookupError, ValueError: name not resolvable here
        """
        pass

    @abstractmethod
    def get_resource_as_stream(self, name: str) -> BinaryIO | None:
        """Open a slash-delimited resource, or return None if this source lacks it."""
        pass


class ImportSource(LoaderSource):
    """The import system of the running interpreter."""

    def load_class(self, name: str) -> type:
        obj = pkgutil.resolve_name(name)
        if not isinstance(obj, type):
            raise LookupError(f"[{name}] resolves to a {type(obj).__name__}, not a class")
        return obj

    def get_resource_as_stream(self, name: str) -> BinaryIO | None:
        """Open ``a/b/file.txt`` from the longest importable package prefix (``a.b``, then ``a``)."""
        parts = _split_resource_name(name)
        if len(parts) < 2:
            return None

        for i in range(len(parts) - 1, 0, -1):
            package = ".".join(parts[:i])
            try:
                root = importlib.resources.files(package)
            except (ImportError, TypeError):
                continue
            resource = root.joinpath("/".join(parts[i:]))
            if resource.is_file():
                return resource.open("rb")
        return None

    def __repr__(self) -> str:
        return "ImportSource(sys.meta_path)"


class PathSource(LoaderSource):
    """Explicit path entries, the closest analog of a classpath.

    Modules found here are executed privately and are not registered in
    ``sys.modules``, unless a module with the same origin file is already
    imported, in which case that module is reused.
    """

    def __init__(self, paths: Iterable[str | Path] | Callable[[], Iterable[str | Path]]):
        """Initialize with path entries.

        Args:
            paths: Directories (``file://`` prefixes allowed), or a callable
                returning them, evaluated on every lookup
        """
        if callable(paths):
            self._provider = paths
        else:
            entries = list(paths)
            self._provider = lambda: entries

    @property
    def paths(self) -> list[Path]:
        result = []
        for entry in self._provider():
            entry = str(entry)
            if entry.startswith("file://"):
                entry = entry[7:]
            # An empty sys.path entry means the current directory
            result.append(Path(entry or ".").resolve())
        return result

    def load_class(self, name: str) -> type:
        search = [str(p) for p in self.paths]

        for module_name, attr_path in self._candidates(name):
            spec = self._find_spec(module_name, search)
            if spec is None:
                continue
            obj: Any = self._load_module(spec)
            for attr in attr_path.split("."):
                obj = getattr(obj, attr)
            if not isinstance(obj, type):
                raise LookupError(f"[{name}] resolves to a {type(obj).__name__}, not a class")
            return obj

        raise ModuleNotFoundError(f"No module for [{name}] under {search}")

    def get_resource_as_stream(self, name: str) -> BinaryIO | None:
        parts = _split_resource_name(name)
        if not parts:
            return None
        for root in self.paths:
            candidate = root.joinpath(*parts)
            if candidate.is_file():
                return candidate.open("rb")
        return None

    def _candidates(self, name: str) -> list[tuple[str, str]]:
        """Split a class name into (module, attribute path) pairs, longest module first."""
        if ":" in name:
            module_name, _, attr_path = name.partition(":")
            if not module_name or not attr_path:
                raise ValueError(f"Invalid class name: {name!r}")
            return [(module_name, attr_path)]

        parts = name.split(".")
        if not all(part.isidentifier() for part in parts):
            raise ValueError(f"Invalid class name: {name!r}")
        return [(".".join(parts[:i]), ".".join(parts[i:])) for i in range(len(parts) - 1, 0, -1)]

    def _find_spec(self, module_name: str, search: list[str]) -> ModuleSpec | None:
        parts = module_name.split(".")
        spec = None
        for i in range(len(parts)):
            spec = PathFinder.find_spec(".".join(parts[: i + 1]), search)
            if spec is None:
                return None
            if i < len(parts) - 1:
                if spec.submodule_search_locations is None:
                    return None
                search = list(spec.submodule_search_locations)
        return spec

    def _load_module(self, spec: ModuleSpec):
        existing = sys.modules.get(spec.name)
        existing_file = getattr(existing, "__file__", None)
        if existing_file and spec.origin and Path(existing_file).resolve() == Path(spec.origin).resolve():
            return existing

        if spec.loader is None:
            raise ImportError(f"No loader for module {spec.name}", name=spec.name)
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        return module

    def __repr__(self) -> str:
        return f"PathSource({[str(p) for p in self.paths]})"


class RegistrySource(LoaderSource):
    """Classes and resources registered ahead of time under explicit names."""

    def __init__(
        self,
        classes: Mapping[str, type] | None = None,
        resources: Mapping[str, bytes | str] | None = None,
    ):
        self._classes: dict[str, type] = {}
        self._resources: dict[str, bytes] = {}
        for name, cls in (classes or {}).items():
            self.register(cls, name)
        for name, data in (resources or {}).items():
            self.register_resource(name, data)

    def register(self, cls: type, name: str | None = None) -> type:
        """Register a class; usable as a decorator.

        Args:
            cls: Class to register
            name: Lookup name (default: ``module.QualName``)

        Returns:
            The class, unchanged
        """
        if not isinstance(cls, type):
            raise TypeError(f"Only classes can be registered, got {type(cls).__name__}")
        self._classes[name or f"{cls.__module__}.{cls.__qualname__}"] = cls
        return cls

    def register_resource(self, name: str, data: bytes | str) -> None:
        if isinstance(data, str):
            data = data.encode("utf-8")
        self._resources["/".join(_split_resource_name(name))] = data

    def unregister(self, name: str) -> None:
        self._classes.pop(name, None)
        self._resources.pop("/".join(_split_resource_name(name)), None)

    def load_class(self, name: str) -> type:
        try:
            return self._classes[name]
        except KeyError:
            raise LookupError(f"[{name}] is not registered") from None

    def get_resource_as_stream(self, name: str) -> BinaryIO | None:
        data = self._resources.get("/".join(_split_resource_name(name)))
        if data is None:
            return None
        return io.BytesIO(data)

    def __repr__(self) -> str:
        return f"RegistrySource({len(self._classes)} classes, {len(self._resources)} resources)"


def parse_source(source: str | Mapping[str, Any] | LoaderSource) -> LoaderSource:
    """Parse a source specification into a LoaderSource.

    Args:
        source: String (path, ``file://`` URI or ``import:``), mapping
            (``{"type": "path", "paths": [...]}`` or ``{"type": "import"}``),
            or an existing LoaderSource

    Returns:
        LoaderSource instance

    Raises:
        ValueError: Invalid source format
    """
    if isinstance(source, LoaderSource):
        return source

    if isinstance(source, Mapping):
        source_type = source.get("type")
        if source_type == "import":
            return ImportSource()
        if source_type == "path":
            paths = source.get("paths")
            if isinstance(paths, str):
                paths = [paths]
            if not paths:
                raise ValueError("Path source requires a non-empty 'paths' entry")
            return PathSource(paths)
        raise ValueError(f"Invalid source type '{source_type}'")

    source = str(source).strip()
    if not source:
        raise ValueError("Empty source specification")
    if source == "import:":
        return ImportSource()
    if source.startswith("file://") or source.startswith("/") or source.startswith(".") or source.startswith("~"):
        return PathSource([str(Path(source.removeprefix("file://")).expanduser())])
    if Path(source).is_dir():
        return PathSource([source])
    raise ValueError(f"Unrecognized source specification: {source!r}")
