# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration model and the per-session configuration store."""

from __future__ import annotations

import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigError
from .severity import DiagnosticSeverity, parse_severity

PYPROJECT_FILENAME: Final[str] = "pyproject.toml"
CONFIG_FILENAME: Final[str] = ".aderyn-diagnostics.toml"
PYPROJECT_TOOL_KEY: Final[str] = "aderyn-diagnostics"


def _default_severity_map() -> dict[str, DiagnosticSeverity]:
    """Return the default mapping of report categories to editor severities."""

    return {"high": DiagnosticSeverity.ERROR, "low": DiagnosticSeverity.HINT}


class AderynConfig(BaseModel):
    """User-tunable settings for the analyzer integration."""

    model_config = ConfigDict(validate_assignment=True, extra="allow")

    enabled: bool = True
    # Directory Aderyn runs in; empty means "discover from project markers".
    aderyn_root: str = ""
    severity_map: dict[str, DiagnosticSeverity] = Field(default_factory=_default_severity_map)
    # Used when a report category has no entry in ``severity_map``.
    default_severity: DiagnosticSeverity = DiagnosticSeverity.INFO
    minimum_severity: DiagnosticSeverity = DiagnosticSeverity.HINT
    extra_args: list[str] = Field(default_factory=list)
    filetypes: list[str] = Field(default_factory=lambda: ["solidity"])
    executable: str = "aderyn"
    timeout: float | None = None

    @field_validator("default_severity", "minimum_severity", mode="before")
    @classmethod
    def _coerce_severity(cls, value: object) -> DiagnosticSeverity:
        """Coerce names and numeric levels into a severity.

        Args:
            value: Raw value supplied for a severity setting.

        Returns:
            DiagnosticSeverity: Parsed severity.

        Raises:
            ValueError: If ``value`` is not a supported level.
        """

        return parse_severity(value)

    @field_validator("severity_map", mode="before")
    @classmethod
    def _coerce_severity_map(cls, value: object) -> dict[str, DiagnosticSeverity]:
        """Coerce the levels of a ``label -> severity`` table.

        Args:
            value: Raw ``severity_map`` value.

        Returns:
            dict[str, DiagnosticSeverity]: Table with parsed severities.

        Raises:
            ValueError: If ``value`` is not a mapping or holds an unknown level.
        """

        if not isinstance(value, Mapping):
            raise ValueError("severity_map must be a table of label = severity")
        return {str(label): parse_severity(level) for label, level in value.items()}

    @field_validator("extra_args", "filetypes", mode="before")
    @classmethod
    def _coerce_string_list(cls, value: object) -> list[str]:
        """Accept a single string or a sequence of strings.

        Args:
            value: Raw value for a string list setting.

        Returns:
            list[str]: Normalised list of strings.

        Raises:
            ValueError: If ``value`` holds anything other than strings.
        """

        if isinstance(value, str):
            return [value]
        if isinstance(value, (list, tuple)):
            if not all(isinstance(item, str) for item in value):
                raise ValueError("entries must be strings")
            return list(value)
        raise ValueError("must be a string or array of strings")

    def severity_for(self, label: str) -> DiagnosticSeverity:
        """Return the editor severity for the report category ``label``."""

        return self.severity_map.get(label, self.default_severity)


def _deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Merge ``override`` into ``base``, recursing into nested mappings.

    Args:
        base: Current values.
        override: Partial values that take precedence.

    Returns:
        dict[str, Any]: New merged mapping; inputs are left untouched.
    """

    result: dict[str, Any] = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], Mapping) and isinstance(value, Mapping):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _format_value(value: object) -> str:
    """Render a configuration value for :meth:`ConfigStore.describe`.

    Args:
        value: Dumped configuration value.

    Returns:
        str: Display form, e.g. ``HINT (4)`` for severities.
    """

    if isinstance(value, DiagnosticSeverity):
        return f"{value.name} ({int(value)})"
    if isinstance(value, Mapping):
        inner = ", ".join(f"{key} = {_format_value(entry)}" for key, entry in value.items())
        return "{ " + inner + " }" if inner else "{}"
    if isinstance(value, list):
        return "[" + ", ".join(repr(item) for item in value) + "]"
    return str(value)


class ConfigStore:
    """Own the configuration of a plugin session and mediate every mutation."""

    def __init__(self, config: AderynConfig | None = None) -> None:
        self._config = config or AderynConfig()

    @property
    def config(self) -> AderynConfig:
        """Return the live configuration instance."""

        return self._config

    def snapshot(self) -> AderynConfig:
        """Return a detached copy suitable for threading through one run."""

        return self._config.model_copy(deep=True)

    def setup(self, opts: Mapping[str, Any] | None) -> AderynConfig:
        """Deep-merge ``opts`` over the current values.

        Unknown keys are kept as extra settings. When validation fails the
        store keeps its previous configuration.

        Args:
            opts: Partial configuration mapping; ``None`` leaves the store untouched.

        Returns:
            AderynConfig: The configuration in effect after the merge.

        Raises:
            ConfigError: If a known setting receives an invalid value.
        """

        if not opts:
            return self._config
        merged = _deep_merge(self._config.model_dump(), opts)
        try:
            self._config = AderynConfig.model_validate(merged)
        except ValidationError as exc:
            raise ConfigError(str(exc)) from exc
        return self._config

    def set_enabled(self, enabled: bool) -> None:
        """Set the enabled flag."""

        self._config.enabled = enabled

    def set_minimum_severity(self, level: object) -> DiagnosticSeverity:
        """Validate and store the minimum severity shown to the user.

        Args:
            level: Severity member, numeric level, or name.

        Returns:
            DiagnosticSeverity: The newly stored threshold.

        Raises:
            ConfigError: If ``level`` is not a supported severity.
        """

        try:
            severity = parse_severity(level)
        except ValueError as exc:
            raise ConfigError("Invalid severity level") from exc
        self._config.minimum_severity = severity
        return severity

    def describe(self) -> list[str]:
        """Return the configuration rendered as ``key: value`` lines."""

        lines = ["Current Aderyn Configuration:"]
        for key, value in self._config.model_dump().items():
            lines.append(f"{key}: {_format_value(value)}")
        return lines


def load_config_file(root: Path) -> dict[str, Any]:
    """Load file-based configuration for the project at ``root``.

    ``[tool.aderyn-diagnostics]`` in ``pyproject.toml`` is read first and the
    top level of ``.aderyn-diagnostics.toml`` is merged over it.

    Args:
        root: Project directory to inspect.

    Returns:
        dict[str, Any]: Options mapping suitable for :meth:`ConfigStore.setup`.

    Raises:
        ConfigError: If a configuration file cannot be read or decoded.
    """

    options: dict[str, Any] = {}
    pyproject = root / PYPROJECT_FILENAME
    if pyproject.is_file():
        data = _read_toml(pyproject)
        section = data.get("tool", {}).get(PYPROJECT_TOOL_KEY, {})
        if not isinstance(section, Mapping):
            raise ConfigError(f"tool.{PYPROJECT_TOOL_KEY} in {pyproject} must be a table")
        options = _deep_merge(options, section)
    dedicated = root / CONFIG_FILENAME
    if dedicated.is_file():
        options = _deep_merge(options, _read_toml(dedicated))
    return options


def _read_toml(path: Path) -> dict[str, Any]:
    """Decode the TOML document at ``path``.

    Args:
        path: File to read.

    Returns:
        dict[str, Any]: Parsed document.

    Raises:
        ConfigError: If the file cannot be read or is not valid TOML.
    """

    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"unable to read {path}: {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"invalid TOML in {path}: {exc}") from exc


__all__ = [
    "CONFIG_FILENAME",
    "AderynConfig",
    "ConfigError",
    "ConfigStore",
    "load_config_file",
]
