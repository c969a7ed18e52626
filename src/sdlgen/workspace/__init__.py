# Copyright 2026 sdlgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Workspace configuration and schema file loading for sdlgen."""

from sdlgen.workspace.config import (
    CONFIG_FILENAME,
    ConfigError,
    WorkspaceConfig,
    load_workspace_config,
    parse_workspace_config,
    render_default_config,
)
from sdlgen.workspace.loader import (
    SCHEMA_SUFFIX,
    SourceLoadError,
    discover_schema_files,
    load_sources,
    source_path,
)

__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "SCHEMA_SUFFIX",
    "SourceLoadError",
    "WorkspaceConfig",
    "discover_schema_files",
    "load_sources",
    "load_workspace_config",
    "parse_workspace_config",
    "render_default_config",
    "source_path",
]
