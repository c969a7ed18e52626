# Copyright 2026 sdlgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Emitters turning a classified type graph into TypeScript sources."""

from sdlgen.codegen.graphql_runtime import emit_graphql
from sdlgen.codegen.resolvers import emit_resolvers
from sdlgen.codegen.server import emit_server
from sdlgen.codegen.writer import ContextType, EmitOptions, GeneratedFile, emit_indexes

__all__ = [
    "emit_server",
    "emit_graphql",
    "emit_resolvers",
    "emit_indexes",
    "EmitOptions",
    "ContextType",
    "GeneratedFile",
]
