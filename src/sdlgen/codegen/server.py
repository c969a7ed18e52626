# Copyright 2026 sdlgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Server emitter: TypeScript enums and structural interfaces.

Enums become string-valued ``export enum`` declarations. Objects and
interfaces become ``export interface`` declarations containing exactly their
server-projected fields; an object that implements interfaces extends the
server types of those interfaces that have one.
"""

from __future__ import annotations

import logging

from sdlgen.codegen.writer import (
    SERVER_DIR,
    EmitOptions,
    GeneratedFile,
    ImportBlock,
    SourceWriter,
    generated_module,
    module_path,
    ts_string,
)
from sdlgen.compiler.type_mapper import Axis, TypeMapper
from sdlgen.model.declarations import DeprecatedDirective, TypeKind
from sdlgen.model.graph import TypeDefinition

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


def emit_server(type_def: TypeDefinition, mapper: TypeMapper, options: EmitOptions) -> GeneratedFile | None:
    """Emit ``server/<Name>.ts`` for *type_def*.

    Returns:
        The generated file, or ``None`` when the type has no server-side
        representation (an object or interface whose fields are all
        GraphQL-only).
    """
    if not type_def.has_server_type:
        return None
    imports = ImportBlock()
    body = SourceWriter()
    if type_def.kind is TypeKind.ENUM:
        _write_enum(type_def, body)
    else:
        _write_interface(type_def, mapper, imports, body)
    logger.debug("Emitted server type for '%s'", type_def.name)
    return GeneratedFile(
        path=module_path(SERVER_DIR, type_def.name),
        content=generated_module(imports, body),
        type_name=type_def.name,
    )


def deprecation_tags(deprecated: DeprecatedDirective | None) -> list[str]:
    """JSDoc tags for a ``@deprecated`` directive."""
    if deprecated is None:
        return []
    return [f"@deprecated {deprecated.reason}" if deprecated.reason else "@deprecated"]


# ################
# Implementation
# ################


def _write_enum(type_def: TypeDefinition, body: SourceWriter) -> None:
    body.doc_comment(type_def.description)
    body.line(f"export enum {type_def.name} {{")
    with body.indented():
        for value in type_def.values:
            body.doc_comment(value.description, deprecation_tags(value.deprecated))
            body.line(f"{value.name} = {ts_string(value.internal_value)},")
    body.line("}")


def _write_interface(type_def: TypeDefinition, mapper: TypeMapper, imports: ImportBlock, body: SourceWriter) -> None:
    bases: list[str] = []
    for ref in type_def.interfaces:
        base = mapper.graph.get(ref.name)
        if base is None or not base.has_server_type:
            continue
        bases.append(ref.name)
        imports.add_type(f"./{ref.name}", ref.name)
    extends = f" extends {', '.join(bases)}" if bases else ""

    body.doc_comment(type_def.description)
    body.line(f"export interface {type_def.name}{extends} {{")
    with body.indented():
        for field_def in type_def.server_fields():
            mapped = mapper.map(field_def.type_ref, Axis.SERVER)
            for name in sorted(mapped.type_names - {type_def.name}):
                imports.add_type(f"./{name}", name)
            body.doc_comment(field_def.description, deprecation_tags(field_def.deprecated))
            body.line(f"{field_def.name}: {mapped.text};")
    body.line("}")
