# Copyright 2026 sdlgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Discovery and loading of ``.graphql`` schema files.

Only files whose name ends in :data:`SCHEMA_SUFFIX` are considered; the
directory layout is otherwise unconstrained. Paths handed to the compiler
are POSIX paths relative to the workspace root, so diagnostics and generated
output do not depend on where the workspace is checked out.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from sdlgen.compiler.build import SchemaSource

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############

SCHEMA_SUFFIX = ".graphql"


class SourceLoadError(Exception):
    """Raised when a schema directory or file cannot be read."""


def discover_schema_files(
    root: Path,
    schema_directories: Iterable[str] = (".",),
    exclude_directories: Iterable[str] = (),
) -> list[Path]:
    """Find all schema files below the configured directories.

    Args:
        root: Workspace root; relative directories are resolved against it.
        schema_directories: Directories to search recursively.
        exclude_directories: Directories whose contents are skipped, e.g.
            the output directory or ``node_modules``.

    Returns:
        Absolute, de-duplicated paths sorted by their path relative to *root*.

    Raises:
        SourceLoadError: If a schema directory does not exist.
    """
    root = root.resolve()
    excluded = [(root / d).resolve() for d in exclude_directories]
    found: dict[Path, None] = {}
    for directory in schema_directories:
        base = (root / directory).resolve()
        if not base.is_dir():
            raise SourceLoadError(f"Schema directory '{directory}' does not exist in '{root}'")
        for path in base.rglob(f"*{SCHEMA_SUFFIX}"):
            if not path.is_file():
                continue
            if any(ex == path or ex in path.parents for ex in excluded):
                continue
            found[path] = None
    files = sorted(found, key=lambda p: source_path(root, p))
    logger.debug("Discovered %d schema file(s) below %s", len(files), root)
    return files


def load_sources(root: Path, files: Iterable[Path]) -> list[SchemaSource]:
    """Read *files* into :class:`~sdlgen.compiler.build.SchemaSource` objects.

    Raises:
        SourceLoadError: If a file cannot be read or is not valid UTF-8.
    """
    root = root.resolve()
    sources: list[SchemaSource] = []
    for path in files:
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise SourceLoadError(f"Cannot read schema file '{path}': {exc}") from exc
        sources.append(SchemaSource(path=source_path(root, path), text=text))
    return sources


def source_path(root: Path, path: Path) -> str:
    """Return *path* as a POSIX path relative to *root* when it lies below it."""
    try:
        return path.resolve().relative_to(root).as_posix()
    except ValueError:
        return path.resolve().as_posix()
