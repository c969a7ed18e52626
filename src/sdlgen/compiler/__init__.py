# Copyright 2026 sdlgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Compiler pipeline for SDL schemas: parsing, merging, classification and type mapping.

The orchestrating :func:`~sdlgen.compiler.build.compile_sources` lives in
:mod:`sdlgen.compiler.build`, which also pulls in the emitters.
"""

from sdlgen.compiler.artifact import (
    MANIFEST_FILENAME,
    deserialize_graph,
    read_manifest,
    serialize_graph,
    write_manifest,
)
from sdlgen.compiler.classifier import classify, classify_field
from sdlgen.compiler.diagnostics import (
    Diagnostic,
    DiagnosticKind,
    RelatedSpan,
    Severity,
    StageResult,
    blocked_types,
    render_diagnostic,
    sort_diagnostics,
)
from sdlgen.compiler.parser import ParseError, parse
from sdlgen.compiler.type_graph import build_type_graph
from sdlgen.compiler.type_mapper import (
    Axis,
    MappedType,
    ScalarMapping,
    TypeMapper,
    TypeMappingError,
    check_type_mappings,
    map_type,
)

__all__ = [
    "parse",
    "ParseError",
    "build_type_graph",
    "classify",
    "classify_field",
    "Axis",
    "MappedType",
    "ScalarMapping",
    "TypeMapper",
    "TypeMappingError",
    "map_type",
    "check_type_mappings",
    "Diagnostic",
    "DiagnosticKind",
    "RelatedSpan",
    "Severity",
    "StageResult",
    "blocked_types",
    "render_diagnostic",
    "sort_diagnostics",
    "serialize_graph",
    "deserialize_graph",
    "write_manifest",
    "read_manifest",
    "MANIFEST_FILENAME",
]
