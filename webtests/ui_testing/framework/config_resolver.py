"""
================================================================================
Configuration Resolver
================================================================================

YAML-based run configuration with runtime override support.

Features:
    - Environment profile selection (config/<env>.yaml)
    - Strict schema validation with dotted-path error messages
    - Dotted-key overrides (browser.type=firefox) with explicit coercion
    - Built-in defaults for browser.timeout and execution.threadCount

Precedence (highest to lowest):
    1. Overrides (CLI / runtime properties)
    2. Environment YAML file
    3. Built-in defaults

Override coercion table:
    bool    true/yes/on/1 -> True, false/no/off/0 -> False (case-insensitive)
    int     optional sign followed by decimal digits
    browser chromium | firefox | webkit (case-insensitive)
    str     taken verbatim

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional

import yaml
from loguru import logger

from .config_model import (
    SCHEMA,
    SECTION_TYPES,
    BrowserType,
    FieldSpec,
    RunConfig,
    build_config,
    canonical_section,
    lookup_field,
)
from .exceptions import (
    ConfigNotFoundError,
    ConfigOverrideError,
    ConfigParseError,
)


# Default configuration directory: <repo root>/config
DEFAULT_CONFIG_DIR = Path(__file__).resolve().parents[3] / "config"

DEFAULT_ENVIRONMENT = "qa"
ENVIRONMENT_VARIABLE = "TEST_ENV"

_TRUE_VALUES = frozenset({"true", "yes", "on", "1"})
_FALSE_VALUES = frozenset({"false", "no", "off", "0"})
_INT_PATTERN = re.compile(r"[+-]?\d+")


# =============================================================================
# Runtime property helpers
# =============================================================================

def select_environment(cli_value: Optional[str] = None) -> str:
    """
    Pick the environment name.

    CLI value wins, then the TEST_ENV environment variable, then 'qa'.
    """
    if cli_value:
        return cli_value
    return os.environ.get(ENVIRONMENT_VARIABLE) or DEFAULT_ENVIRONMENT


def parse_override_args(args: Optional[Iterable[str]]) -> Dict[str, str]:
    """
    Parse 'key=value' strings into an override mapping.

    Later entries win over earlier ones for the same key.

    Raises:
        ConfigOverrideError: If an entry has no '=' or an empty key
    """
    overrides: Dict[str, str] = {}
    for arg in args or []:
        key, sep, value = arg.partition("=")
        key = key.strip()
        if not sep or not key:
            raise ConfigOverrideError(
                f"Invalid override '{arg}', expected KEY=VALUE", path=key or None
            )
        overrides[key] = value
    return overrides


def coerce_override(spec: FieldSpec, raw: str) -> Any:
    """
    Convert an override string to the field's type.

    Raises:
        ConfigOverrideError: If the string is not a valid value for the field
    """
    text = raw.strip()

    if spec.kind == "bool":
        lowered = text.lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        raise ConfigOverrideError(
            f"Cannot convert '{raw}' to bool for '{spec.path}'", path=spec.path
        )

    if spec.kind == "int":
        if not _INT_PATTERN.fullmatch(text):
            raise ConfigOverrideError(
                f"Cannot convert '{raw}' to int for '{spec.path}'", path=spec.path
            )
        return int(text)

    if spec.kind == "browser":
        try:
            return BrowserType(text.lower())
        except ValueError:
            raise ConfigOverrideError(
                f"Unsupported browser '{raw}' for '{spec.path}', "
                f"expected one of {', '.join(BrowserType.names())}",
                path=spec.path,
            ) from None

    return raw


# =============================================================================
# Resolver
# =============================================================================

class ConfigResolver:
    """
    Resolves a RunConfig from an environment profile and overrides.

    Usage:
        >>> resolver = ConfigResolver(Path("config"))
        >>> config = resolver.resolve("qa", {"browser.type": "firefox"})
        >>> config.browser.type
        <BrowserType.FIREFOX: 'firefox'>
    """

    def __init__(self, config_dir: Optional[Path] = None) -> None:
        self.config_dir = Path(config_dir) if config_dir else DEFAULT_CONFIG_DIR

    def config_path(self, environment_name: str) -> Path:
        """
        Locate the YAML file for an environment.

        Raises:
            ConfigNotFoundError: If no <name>.yaml / <name>.yml exists
        """
        if not environment_name or Path(environment_name).name != environment_name:
            raise ConfigNotFoundError(
                f"Invalid environment name: '{environment_name}'"
            )

        for suffix in (".yaml", ".yml"):
            candidate = self.config_dir / f"{environment_name}{suffix}"
            if candidate.is_file():
                return candidate

        raise ConfigNotFoundError(
            f"No configuration for environment '{environment_name}' "
            f"(expected {self.config_dir / (environment_name + '.yaml')})"
        )

    def resolve(
        self,
        environment_name: str,
        overrides: Optional[Mapping[str, str]] = None,
    ) -> RunConfig:
        """
        Load, validate and merge the configuration for one run.

        Args:
            environment_name: Profile name, selects <config_dir>/<name>.yaml
            overrides: Dotted-path keys to string values

        Returns:
            Immutable RunConfig

        Raises:
            ConfigNotFoundError: Profile file missing
            ConfigParseError: Invalid YAML or schema mismatch
            ConfigOverrideError: Unknown override path or bad value
        """
        path = self.config_path(environment_name)
        values = self._parse_file(path)

        for key, raw in (overrides or {}).items():
            spec = lookup_field(key)
            if spec is None:
                raise ConfigOverrideError(f"Unknown configuration key: '{key}'", path=key)
            value = coerce_override(spec, str(raw))
            problem = spec.check_range(value)
            if problem:
                raise ConfigOverrideError(problem, path=spec.path)
            values[spec.path] = value
            logger.debug(f"Override applied: {spec.path}={value!r}")

        missing = [
            spec.path for spec in SCHEMA if spec.required and spec.path not in values
        ]
        if missing:
            raise ConfigParseError(
                f"Missing required configuration in {path.name}: {', '.join(missing)}",
                path=missing[0],
            )

        config = build_config(values)
        logger.debug(
            f"Resolved configuration '{environment_name}': "
            f"browser={config.browser.type.value} headless={config.browser.headless} "
            f"workers={config.execution.effective_workers}"
        )
        return config

    def _parse_file(self, path: Path) -> Dict[str, Any]:
        """Read the YAML file into validated values keyed by dotted path."""
        try:
            with open(path, "r", encoding="utf-8") as f:
                document = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigParseError(f"Invalid YAML in {path}: {e}") from e
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigParseError(f"Cannot read {path}: {e}") from e

        if document is None:
            document = {}
        if not isinstance(document, dict):
            raise ConfigParseError(f"{path.name}: top level must be a mapping")

        values: Dict[str, Any] = {}
        seen_sections: Dict[str, str] = {}

        for section_name, section in document.items():
            canonical = canonical_section(str(section_name))
            if canonical not in SECTION_TYPES:
                raise ConfigParseError(
                    f"{path.name}: unknown section '{section_name}'", path=str(section_name)
                )
            if canonical in seen_sections:
                raise ConfigParseError(
                    f"{path.name}: section '{section_name}' duplicates "
                    f"'{seen_sections[canonical]}'",
                    path=str(section_name),
                )
            seen_sections[canonical] = str(section_name)

            if section is None:
                continue
            if not isinstance(section, dict):
                raise ConfigParseError(
                    f"{path.name}: section '{section_name}' must be a mapping",
                    path=str(section_name),
                )

            for key, value in section.items():
                spec = lookup_field(f"{canonical}.{key}")
                if spec is None:
                    raise ConfigParseError(
                        f"{path.name}: unknown key '{section_name}.{key}'",
                        path=f"{section_name}.{key}",
                    )
                values[spec.path] = self._check_file_value(spec, value, path)

        logger.debug(f"Loaded configuration from: {path}")
        return values

    @staticmethod
    def _check_file_value(spec: FieldSpec, value: Any, path: Path) -> Any:
        """Type-check a YAML value against its field spec."""

        def mismatch(expected: str) -> ConfigParseError:
            return ConfigParseError(
                f"{path.name}: '{spec.path}' must be {expected}, "
                f"got {type(value).__name__} ({value!r})",
                path=spec.path,
            )

        if spec.kind == "bool":
            if not isinstance(value, bool):
                raise mismatch("a boolean")
        elif spec.kind == "int":
            # bool is a subclass of int; reject it explicitly
            if isinstance(value, bool) or not isinstance(value, int):
                raise mismatch("an integer")
        elif spec.kind == "browser":
            if not isinstance(value, str) or value.lower() not in BrowserType.names():
                raise mismatch(f"one of {', '.join(BrowserType.names())}")
            value = BrowserType(value.lower())
        elif not isinstance(value, str):
            raise mismatch("a string")

        problem = spec.check_range(value)
        if problem:
            raise ConfigParseError(f"{path.name}: {problem}", path=spec.path)
        return value


def resolve(
    environment_name: str,
    overrides: Optional[Mapping[str, str]] = None,
    config_dir: Optional[Path] = None,
) -> RunConfig:
    """Convenience wrapper around ConfigResolver.resolve()."""
    return ConfigResolver(config_dir).resolve(environment_name, overrides)


__all__ = [
    "DEFAULT_CONFIG_DIR",
    "DEFAULT_ENVIRONMENT",
    "ENVIRONMENT_VARIABLE",
    "ConfigResolver",
    "coerce_override",
    "parse_override_args",
    "resolve",
    "select_environment",
]
