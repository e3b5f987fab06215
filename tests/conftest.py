"""Shared fixtures for typeloader tests."""

import io
import logging
import sys
from pathlib import Path
from textwrap import dedent

import pytest
from rich.logging import RichHandler

from typeloader.accessors import remove_additional_source
from typeloader.logging_setup import JsonlHandler
from typeloader.resolver import reset_default_resolver
from typeloader.sources import LoaderSource

SAMPLE_PACKAGE = "tlsample"


class SentinelSource(LoaderSource):
    """In-memory source that records every lookup it answers."""

    def __init__(self, label: str, classes: dict | None = None, resources: dict | None = None):
        self.label = label
        self.classes = classes or {}
        self.resources = resources or {}
        self.class_lookups: list[str] = []
        self.resource_lookups: list[str] = []

    def load_class(self, name: str) -> type:
        self.class_lookups.append(name)
        if name not in self.classes:
            raise LookupError(f"{self.label} has no {name}")
        return self.classes[name]

    def get_resource_as_stream(self, name: str):
        self.resource_lookups.append(name)
        data = self.resources.get(name)
        return io.BytesIO(data) if data is not None else None

    def __repr__(self) -> str:
        return f"SentinelSource({self.label})"


class ExplodingSource(LoaderSource):
    """Source whose every lookup raises."""

    def load_class(self, name: str) -> type:
        raise RuntimeError("loader exploded")

    def get_resource_as_stream(self, name: str):
        raise RuntimeError("loader exploded")


@pytest.fixture(autouse=True)
def clean_state():
    """Never leak an override or a default resolver between tests."""
    remove_additional_source()
    reset_default_resolver()
    yield
    remove_additional_source()
    reset_default_resolver()


@pytest.fixture
def sample_root(tmp_path: Path) -> Path:
    """
    Create a package tree outside sys.path:

    - tlsample/__init__.py
    - tlsample/widgets.py (Widget, Gadget with nested Part, Broken, helper)
    - tlsample/data/config.txt
    - top.txt
    """
    root = tmp_path / "classpath"
    package = root / SAMPLE_PACKAGE
    (package / "data").mkdir(parents=True)
    (package / "__init__.py").write_text("")
    (package / "data" / "__init__.py").write_text("")
    (package / "data" / "config.txt").write_text("answer=42\n")
    (package / "widgets.py").write_text(
        dedent("""
            class Widget:
                def __init__(self, name: str = "widget"):
                    self.name = name


            class Gadget:
                class Part:
                    pass


            class Broken:
                def __init__(self):
                    raise RuntimeError("cannot build")


            def helper():
                return None
        """)
    )
    (root / "top.txt").write_text("top-level resource")

    yield root

    for module_name in list(sys.modules):
        if module_name == SAMPLE_PACKAGE or module_name.startswith(f"{SAMPLE_PACKAGE}."):
            del sys.modules[module_name]


@pytest.fixture
def sentinel():
    """Factory for SentinelSource: sentinel("library", classes={...})."""
    return SentinelSource


@pytest.fixture
def exploding() -> ExplodingSource:
    return ExplodingSource()


@pytest.fixture(autouse=True)
def isolate_logging():
    """Undo logger levels and handlers installed by the CLI or logging setup."""
    root = logging.getLogger()
    package = logging.getLogger("typeloader")
    levels = (root.level, package.level)
    yield
    root.setLevel(levels[0])
    package.setLevel(levels[1])
    for logger in (root, package):
        for handler in list(logger.handlers):
            if isinstance(handler, (JsonlHandler, RichHandler)):
                logger.removeHandler(handler)
                handler.close()
