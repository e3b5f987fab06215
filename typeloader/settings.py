"""Settings for typeloader.

Scope priority (most specific wins):
1. project (.typeloader/settings.yaml)
2. global (~/.typeloader/settings.yaml)

The TYPELOADER_PATH environment variable (os.pathsep separated, like
PYTHONPATH) prepends entries to ``extra_paths``.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel
from pydantic import Field
from pydantic import ValidationError

logger = logging.getLogger(__name__)

PATH_ENV_VAR = "TYPELOADER_PATH"


@dataclass
class SettingsPaths:
    """Standard paths for settings files."""

    global_settings: Path
    project_settings: Path

    @classmethod
    def default(cls) -> SettingsPaths:
        return cls(
            global_settings=Path.home() / ".typeloader" / "settings.yaml",
            project_settings=Path.cwd() / ".typeloader" / "settings.yaml",
        )


class ResolverSettings(BaseModel):
    """Resolution settings."""

    extra_paths: list[Path] = Field(
        default_factory=list, description="Path entries searched by the system source after sys.path"
    )
    additional_source: str | dict[str, Any] | None = Field(
        None, description="Default source for the additional accessor when no thread override is set"
    )


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with open(path) as f:
            content = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Failed to read {path}: {e}")
        return {}
    if not isinstance(content, dict):
        logger.warning(f"Ignoring {path}: expected a mapping, got {type(content).__name__}")
        return {}
    return content


def load_settings(paths: SettingsPaths | None = None, environ: dict[str, str] | None = None) -> ResolverSettings:
    """Load and merge settings from all scopes.

    Args:
        paths: Settings file locations (default: SettingsPaths.default())
        environ: Environment mapping (default: os.environ)

    Returns:
        Merged ResolverSettings; malformed scopes are skipped with a warning
    """
    paths = paths or SettingsPaths.default()
    environ = os.environ if environ is None else environ

    merged: dict[str, Any] = {}
    for path in [paths.global_settings, paths.project_settings]:
        content = _read_yaml(path)
        try:
            ResolverSettings.model_validate(content)
        except ValidationError as e:
            logger.warning(f"Ignoring invalid settings in {path}: {e}")
            continue
        merged.update(content)

    settings = ResolverSettings.model_validate(merged)

    if env_value := environ.get(PATH_ENV_VAR):
        env_paths = [Path(p) for p in env_value.split(os.pathsep) if p]
        settings.extra_paths = env_paths + settings.extra_paths

    return settings
