# Copyright 2026 sdlgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Data model and YAML parser for the ``.sdlgen.yaml`` configuration file."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml

from sdlgen.codegen.writer import ContextType
from sdlgen.compiler.type_mapper import BUILTIN_SCALAR_MAPPINGS, GRAPHQL_MODULE, ScalarMapping

# ###############
# Public Interface
# ###############

CONFIG_FILENAME = ".sdlgen.yaml"


class ConfigError(Exception):
    """Raised when a configuration file is invalid or cannot be loaded."""


@dataclass
class WorkspaceConfig:
    """The parsed configuration of an sdlgen workspace.

    Attributes:
        output_directory: Relative path (from the workspace root) that
            generated sources are written to.
        schema_directories: Directories searched for ``.graphql`` files.
        exclude_directories: Directories skipped during discovery.
        context_type: Type of the resolver ``context`` parameter, if any.
        scalars: Custom scalar mappings.
        jobs: Number of parser threads.
    """

    output_directory: str
    schema_directories: list[str] = field(default_factory=lambda: ["."])
    exclude_directories: list[str] = field(default_factory=list)
    context_type: ContextType | None = None
    scalars: list[ScalarMapping] = field(default_factory=list)
    jobs: int = 1


def load_workspace_config(path: Path) -> WorkspaceConfig:
    """Load and parse a configuration file.

    Args:
        path: Path to the ``.sdlgen.yaml`` file.

    Returns:
        A WorkspaceConfig instance populated from the file.

    Raises:
        ConfigError: If the file cannot be read or the configuration is invalid.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ConfigError(f"Configuration file not found: {path}") from None
    except OSError as exc:
        raise ConfigError(f"Cannot read configuration file: {exc}") from exc

    return parse_workspace_config(text, source_label=str(path))


def parse_workspace_config(text: str, source_label: str = "<string>") -> WorkspaceConfig:
    """Parse configuration YAML text into a WorkspaceConfig.

    Args:
        text: Raw YAML content.
        source_label: Human-readable label used in error messages (e.g. the file path).

    Raises:
        ConfigError: If the YAML is invalid or a field has the wrong shape.
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {source_label}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"{source_label}: configuration must be a YAML mapping")

    unknown = sorted(str(key) for key in data if key not in _KNOWN_KEYS)
    if unknown:
        raise ConfigError(f"{source_label}: unknown field(s): {', '.join(unknown)}")

    config = WorkspaceConfig(output_directory=_require_string(data, "output-directory", source_label))
    if "schema-directories" in data:
        config.schema_directories = _string_list(data, "schema-directories", source_label)
        if not config.schema_directories:
            raise ConfigError(f"{source_label}: 'schema-directories' must not be empty")
    if "exclude-directories" in data:
        config.exclude_directories = _string_list(data, "exclude-directories", source_label)
    if "context-type" in data:
        config.context_type = _parse_context_type(data["context-type"], source_label)
    if "scalars" in data:
        raw_scalars = data["scalars"]
        if not isinstance(raw_scalars, list):
            raise ConfigError(f"{source_label}: 'scalars' must be a list")
        config.scalars = [_parse_scalar(entry, index, source_label) for index, entry in enumerate(raw_scalars)]
        _check_duplicate_scalars(config.scalars, source_label)
    if "jobs" in data:
        jobs = data["jobs"]
        if not isinstance(jobs, int) or isinstance(jobs, bool) or jobs < 1:
            raise ConfigError(f"{source_label}: 'jobs' must be a positive integer")
        config.jobs = jobs
    return config


def render_default_config() -> str:
    """Return the text of a starter configuration file."""
    return _DEFAULT_CONFIG


# ################
# Implementation
# ################

_KNOWN_KEYS = frozenset(
    {"output-directory", "schema-directories", "exclude-directories", "context-type", "scalars", "jobs"}
)

_DEFAULT_CONFIG = """\
# sdlgen configuration
output-directory: generated
schema-directories:
  - schema
exclude-directories:
  - node_modules
# context-type:
#   name: Context
#   module: ../../src/context
# scalars:
#   - name: DateTime
#     server: string
#     graphql: GraphQLDateTime
#     module: graphql-scalars
"""


def _require_string(mapping: dict[str, object], key: str, source_label: str) -> str:
    """Extract a required non-empty string field, raising ConfigError if missing."""
    if key not in mapping:
        raise ConfigError(f"{source_label}: missing required field '{key}'")
    value = mapping[key]
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"{source_label}: '{key}' must be a non-empty string")
    return value


def _string_list(mapping: dict[str, object], key: str, source_label: str) -> list[str]:
    value = mapping[key]
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ConfigError(f"{source_label}: '{key}' must be a list of strings")
    return list(value)


def _parse_context_type(entry: object, source_label: str) -> ContextType:
    location = f"{source_label}: context-type"
    if not isinstance(entry, dict):
        raise ConfigError(f"{location} must be a YAML mapping")
    return ContextType(name=_require_string(entry, "name", location), module=_require_string(entry, "module", location))


def _parse_scalar(entry: object, index: int, source_label: str) -> ScalarMapping:
    """Parse a single custom scalar entry from the YAML list."""
    location = f"{source_label}: scalars[{index}]"
    if not isinstance(entry, dict):
        raise ConfigError(f"{location} must be a YAML mapping")
    name = _require_string(entry, "name", location)
    if name in BUILTIN_SCALAR_MAPPINGS:
        raise ConfigError(f"{location}: cannot redefine built-in scalar '{name}'")
    module = _require_string(entry, "module", location) if "module" in entry else GRAPHQL_MODULE
    return ScalarMapping(
        name=name,
        server=_require_string(entry, "server", location),
        graphql=_require_string(entry, "graphql", location),
        module=module,
    )


def _check_duplicate_scalars(scalars: list[ScalarMapping], source_label: str) -> None:
    seen: set[str] = set()
    for scalar in scalars:
        if scalar.name in seen:
            raise ConfigError(f"{source_label}: scalar '{scalar.name}' is defined more than once")
        seen.add(scalar.name)
