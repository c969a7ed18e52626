# Copyright 2026 sdlgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Resolver-interface emitter.

For every ``@resolvers(file)`` binding of a type, an interface is emitted with
one method per ``@resolve`` field bound to that module. The module named in
the directive is expected to export functions matching it; the GraphQL
runtime module checks this by assigning the module namespace to a constant
of the interface type.
"""

from __future__ import annotations

import logging

from sdlgen.codegen.server import deprecation_tags
from sdlgen.codegen.writer import (
    RESOLVERS_DIR,
    SERVER_DIR,
    EmitOptions,
    GeneratedFile,
    ImportBlock,
    SourceWriter,
    generated_module,
    module_path,
)
from sdlgen.compiler.type_mapper import Axis, MappedType, TypeMapper
from sdlgen.model.graph import ClassifiedField, ResolverModule, TypeDefinition

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############

EMPTY_ROOT_TYPE = "Record<string, never>"
UNKNOWN_CONTEXT_TYPE = "unknown"


def emit_resolvers(type_def: TypeDefinition, mapper: TypeMapper, options: EmitOptions) -> GeneratedFile | None:
    """Emit ``resolvers/<Name>.ts`` for a type with resolver bindings.

    Returns ``None`` for types without any ``@resolvers`` binding.
    """
    if not type_def.resolver_modules:
        return None
    imports = ImportBlock()
    body = SourceWriter()
    root_type = _root_type(type_def, imports)
    context_type = _context_type(options, imports)

    for index, module in enumerate(type_def.resolver_modules):
        if index:
            body.line()
        body.doc_comment(f"Resolvers for `{type_def.name}` implemented in `{module.file}`.")
        body.line(f"export interface {module.interface_name} {{")
        with body.indented():
            for field_def in bound_fields(type_def, module):
                _write_method(field_def, root_type, context_type, mapper, imports, body)
        body.line("}")

    logger.debug("Emitted %d resolver interface(s) for '%s'", len(type_def.resolver_modules), type_def.name)
    return GeneratedFile(
        path=module_path(RESOLVERS_DIR, type_def.name),
        content=generated_module(imports, body),
        type_name=type_def.name,
    )


def bound_fields(type_def: TypeDefinition, module: ResolverModule) -> list[ClassifiedField]:
    """Fields of *type_def* resolved by a function of *module*, in field order."""
    return [
        f
        for f in type_def.classified_fields()
        if f.resolved and f.resolver is not None and f.resolver.module.path == module.path
    ]


def resolver_return_type(value_type: str) -> str:
    """The declared return type of a resolver producing *value_type*."""
    return f"{value_type} | Promise<{value_type}>"


# ################
# Implementation
# ################


def _root_type(type_def: TypeDefinition, imports: ImportBlock) -> str:
    if not type_def.has_server_type:
        return EMPTY_ROOT_TYPE
    imports.add_type(f"../{SERVER_DIR}/{type_def.name}", type_def.name)
    return type_def.name


def _context_type(options: EmitOptions, imports: ImportBlock) -> str:
    if options.context_type is None:
        return UNKNOWN_CONTEXT_TYPE
    imports.add_type(options.context_type.module, options.context_type.name)
    return options.context_type.name


def _server_type(mapped: MappedType, imports: ImportBlock) -> str:
    for name in sorted(mapped.type_names):
        imports.add_type(f"../{SERVER_DIR}/{name}", name)
    return mapped.text


def _write_method(
    field_def: ClassifiedField,
    root_type: str,
    context_type: str,
    mapper: TypeMapper,
    imports: ImportBlock,
    body: SourceWriter,
) -> None:
    assert field_def.resolver is not None
    params = [f"root: {root_type}", f"context: {context_type}"]
    if field_def.arguments:
        members = [
            f"{arg.name}: {_server_type(mapper.map(arg.type_ref, Axis.SERVER), imports)}"
            for arg in field_def.arguments
        ]
        params.append(f"args: {{ {'; '.join(members)} }}")
    returns = _server_type(mapper.map(field_def.type_ref, Axis.SERVER), imports)
    body.doc_comment(field_def.description, deprecation_tags(field_def.deprecated))
    body.line(f"{field_def.resolver.function}({', '.join(params)}): {resolver_return_type(returns)};")
