"""
================================================================================
Configuration Model
================================================================================

Typed, immutable representation of a test run configuration.

Sections:
    - environment: target environment name and base URL
    - browser: engine type, headless flag, slow motion, default timeout
    - screenshot: failure capture behaviour
    - execution: parallel execution settings

The schema table (SCHEMA) maps YAML dotted paths to dataclass attributes and
is shared by the resolver for file parsing and override coercion.

================================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple


DEFAULT_TIMEOUT_MS = 30000
DEFAULT_THREAD_COUNT = 1


class BrowserType(str, Enum):
    """Supported browser engines."""

    CHROMIUM = "chromium"
    FIREFOX = "firefox"
    WEBKIT = "webkit"

    @classmethod
    def names(cls) -> Tuple[str, ...]:
        return tuple(member.value for member in cls)


@dataclass(frozen=True)
class EnvironmentConfig:
    name: str
    base_url: str


@dataclass(frozen=True)
class BrowserConfig:
    type: BrowserType
    headless: bool
    slow_mo: int
    timeout: int = DEFAULT_TIMEOUT_MS

    def launch_options(self) -> Dict[str, Any]:
        """Keyword arguments for `BrowserType.launch()`."""
        return {"headless": self.headless, "slow_mo": self.slow_mo}


@dataclass(frozen=True)
class ScreenshotConfig:
    take_on_failure: bool
    full_page: bool


@dataclass(frozen=True)
class ExecutionConfig:
    parallel: bool
    thread_count: int = DEFAULT_THREAD_COUNT

    @property
    def effective_workers(self) -> int:
        """Worker count actually used; thread_count is ignored when not parallel."""
        return self.thread_count if self.parallel else 1


@dataclass(frozen=True)
class RunConfig:
    """
    Resolved configuration for one test run.

    Created once per run by the resolver and never mutated afterwards.
    """

    environment: EnvironmentConfig
    browser: BrowserConfig
    screenshot: ScreenshotConfig
    execution: ExecutionConfig

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        """Return the configuration using the YAML (camelCase) layout."""
        result: Dict[str, Dict[str, Any]] = {}
        for spec in SCHEMA:
            value = getattr(getattr(self, spec.section), spec.attr)
            if isinstance(value, BrowserType):
                value = value.value
            result.setdefault(spec.section, {})[spec.key] = value
        return result


# =============================================================================
# Schema
# =============================================================================

@dataclass(frozen=True)
class FieldSpec:
    """
    One configuration field.

    Attributes:
        section: Canonical section name (YAML top-level key)
        key: YAML key inside the section
        attr: Dataclass attribute name
        kind: Value kind - 'str', 'bool', 'int' or 'browser'
        required: Whether the field must be provided
        default: Built-in default for optional fields
        minimum: Lower bound for int fields
    """

    section: str
    key: str
    attr: str
    kind: str
    required: bool = True
    default: Any = None
    minimum: Optional[int] = None

    @property
    def path(self) -> str:
        return f"{self.section}.{self.key}"

    def check_range(self, value: Any) -> Optional[str]:
        """Return an error message if value violates the field constraints."""
        if self.kind == "str" and not value.strip():
            return f"'{self.path}' must not be empty"
        if self.minimum is not None and value < self.minimum:
            return f"'{self.path}' must be >= {self.minimum}, got {value}"
        return None


SCHEMA: Tuple[FieldSpec, ...] = (
    FieldSpec("environment", "name", "name", "str"),
    FieldSpec("environment", "baseUrl", "base_url", "str"),
    FieldSpec("browser", "type", "type", "browser"),
    FieldSpec("browser", "headless", "headless", "bool"),
    FieldSpec("browser", "slowMo", "slow_mo", "int", minimum=0),
    FieldSpec(
        "browser", "timeout", "timeout", "int",
        required=False, default=DEFAULT_TIMEOUT_MS, minimum=1,
    ),
    FieldSpec("screenshot", "takeOnFailure", "take_on_failure", "bool"),
    FieldSpec("screenshot", "fullPage", "full_page", "bool"),
    FieldSpec("execution", "parallel", "parallel", "bool"),
    FieldSpec(
        "execution", "threadCount", "thread_count", "int",
        required=False, default=DEFAULT_THREAD_COUNT, minimum=1,
    ),
)

SCHEMA_BY_PATH: Dict[str, FieldSpec] = {spec.path: spec for spec in SCHEMA}

SECTION_TYPES = {
    "environment": EnvironmentConfig,
    "browser": BrowserConfig,
    "screenshot": ScreenshotConfig,
    "execution": ExecutionConfig,
}

# Alternate section spellings accepted in files and override keys
SECTION_ALIASES: Dict[str, str] = {
    "testExecution": "execution",
}


def canonical_section(name: str) -> str:
    return SECTION_ALIASES.get(name, name)


def lookup_field(dotted_key: str) -> Optional[FieldSpec]:
    """Find the schema field for a dotted key, honouring section aliases."""
    parts = dotted_key.split(".")
    if len(parts) != 2:
        return None
    section, key = parts
    return SCHEMA_BY_PATH.get(f"{canonical_section(section)}.{key}")


def build_config(values: Dict[str, Any]) -> RunConfig:
    """
    Build a RunConfig from validated values keyed by dotted path.

    Optional fields missing from `values` take their built-in default.
    Callers must have checked required fields beforehand.
    """
    sections: Dict[str, Dict[str, Any]] = {name: {} for name in SECTION_TYPES}
    for spec in SCHEMA:
        if spec.path in values:
            sections[spec.section][spec.attr] = values[spec.path]
        elif not spec.required:
            sections[spec.section][spec.attr] = spec.default

    return RunConfig(
        **{name: SECTION_TYPES[name](**kwargs) for name, kwargs in sections.items()}
    )


__all__ = [
    "DEFAULT_TIMEOUT_MS",
    "DEFAULT_THREAD_COUNT",
    "BrowserType",
    "EnvironmentConfig",
    "BrowserConfig",
    "ScreenshotConfig",
    "ExecutionConfig",
    "RunConfig",
    "FieldSpec",
    "SCHEMA",
    "SECTION_ALIASES",
    "lookup_field",
    "build_config",
]
