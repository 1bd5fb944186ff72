# src/therasched/dataloader/config_loader.py
from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from therasched.errors import ConfigError
from therasched.schemas.models import EngineConfig


class ConfigLoader:
    """
    @brief
    Loader for the engine's runtime configuration.

    @details
    Reads config.yaml, checks that it holds a mapping, and validates it
    against `EngineConfig`. Every failure surfaces as a `ConfigError`
    carrying the source and a suggested fix.
    """

    def load(self, path: Path) -> EngineConfig:
        """
        @brief
        Load and validate configuration from a YAML file.

        @params
            path : Path
                Filesystem path to configuration file (.yaml or .yml).

        @returns
            Validated EngineConfig with defaults applied.

        @raises
            ConfigError
                If the file is missing, malformed, or fails schema validation.
        """
        # (1) Read and parse YAML
        data = self._read_yaml(path)

        # (2) Validate mapping against schema
        return self._validate(data)

    def _read_yaml(self, path: Path) -> dict[str, Any]:
        """
        @brief
        Read a YAML file into a plain dict with strict checks.

        @raises
            ConfigError
                On wrong path type, missing file, wrong extension, I/O error,
                syntax error, empty file, or non-mapping root.
        """
        # (1) Path type and existence
        if not isinstance(path, Path):
            raise ConfigError(
                message=f"Invalid path type: expected pathlib.Path, got {type(path).__name__}",
                source="ConfigLoader._read_yaml",
                suggested_action="Pass a pathlib.Path object pointing to config.yaml.",
            )

        if not path.exists():
            raise ConfigError(
                message=f"Configuration file not found: {path}",
                source="ConfigLoader._read_yaml",
                suggested_action="Ensure config.yaml exists and the path is correct.",
            )

        # (2) Extension
        if path.suffix.lower() not in {".yaml", ".yml"}:
            raise ConfigError(
                message=f"Invalid configuration file extension: {path.suffix}",
                source="ConfigLoader._read_yaml",
                suggested_action="Use .yaml or .yml extension for configuration files.",
            )

        # (3) Parse
        try:
            with path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(
                message=f"YAML parsing failed: {e}",
                source="ConfigLoader._read_yaml",
                suggested_action="Fix YAML syntax or indentation in config.yaml.",
            ) from e
        except OSError as e:
            raise ConfigError(
                message=f"Unable to read configuration file: {e}",
                source="ConfigLoader._read_yaml",
                suggested_action="Check file permissions and path accessibility.",
            ) from e

        # (4) Structure
        if data is None:
            raise ConfigError(
                message="Configuration file is empty.",
                source="ConfigLoader._read_yaml",
                suggested_action="Populate config.yaml or remove it to use the defaults.",
            )

        if not isinstance(data, Mapping):
            raise ConfigError(
                message="Configuration root must be a mapping (key: value pairs).",
                source="ConfigLoader._read_yaml",
                suggested_action="Ensure top-level YAML structure uses key: value mappings.",
            )

        return dict(data)

    def _validate(self, data: dict[str, Any]) -> EngineConfig:
        try:
            return EngineConfig(**data)
        except ValidationError as e:
            raise ConfigError(
                message=f"Invalid configuration structure: {e}",
                source="ConfigLoader._validate",
                suggested_action=(
                    "Check field names, types, and bounds in config.yaml. "
                    "Unknown keys are rejected."
                ),
            ) from e


__all__ = ["ConfigLoader"]
