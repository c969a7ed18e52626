# Copyright 2026 sdlgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""GraphQL emitter: ``graphql-js`` runtime type construction.

Each type becomes one module exporting ``<Name>Type``, built with
``GraphQLEnumType``, ``GraphQLObjectType`` or ``GraphQLInterfaceType``.
Object and interface modules list every field projected onto the GraphQL
axis; server-only fields are left out.
Fields and interfaces are declared through thunks so that modules may refer
to each other in cycles.

Fields backed by ``@resolve`` are wired to the bound resolver module, which
is imported as a namespace and checked against the generated resolver
interface.
"""

from __future__ import annotations

import logging

from sdlgen.codegen.resolvers import bound_fields
from sdlgen.codegen.writer import (
    GRAPHQL_DIR,
    RESOLVERS_DIR,
    EmitOptions,
    GeneratedFile,
    ImportBlock,
    SourceWriter,
    generated_module,
    lower_first,
    module_path,
    relative_specifier,
    ts_string,
)
from sdlgen.compiler.type_mapper import GRAPHQL_MODULE, Axis, MappedType, TypeMapper, graphql_type_name
from sdlgen.model.declarations import ConstValue, DeprecatedDirective, InputValueDecl, TypeKind, ValueKind, named_type
from sdlgen.model.graph import ClassifiedField, TypeDefinition

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############

DEFAULT_DEPRECATION_REASON = "No longer supported"


def emit_graphql(type_def: TypeDefinition, mapper: TypeMapper, options: EmitOptions) -> GeneratedFile:
    """Emit ``graphql/<Name>.ts`` for *type_def*."""
    emitter = _RuntimeEmitter(type_def, mapper, options)
    content = emitter.emit()
    logger.debug("Emitted GraphQL runtime type for '%s'", type_def.name)
    return GeneratedFile(path=module_path(GRAPHQL_DIR, type_def.name), content=content, type_name=type_def.name)


# ################
# Implementation
# ################

_CONSTRUCTORS: dict[TypeKind, str] = {
    TypeKind.ENUM: "GraphQLEnumType",
    TypeKind.OBJECT: "GraphQLObjectType",
    TypeKind.INTERFACE: "GraphQLInterfaceType",
}


def _deprecation_reason(deprecated: DeprecatedDirective | None) -> str | None:
    if deprecated is None:
        return None
    return deprecated.reason if deprecated.reason is not None else DEFAULT_DEPRECATION_REASON


class _RuntimeEmitter:
    def __init__(self, type_def: TypeDefinition, mapper: TypeMapper, options: EmitOptions) -> None:
        self._type_def = type_def
        self._mapper = mapper
        self._options = options
        self._imports = ImportBlock()
        self._body = SourceWriter()
        self._resolver_consts: dict[str, str] = {}

    def emit(self) -> str:
        type_def = self._type_def
        constructor = _CONSTRUCTORS[type_def.kind]
        self._imports.add(GRAPHQL_MODULE, constructor)

        if type_def.kind is not TypeKind.ENUM:
            self._write_resolver_bindings()

        body = self._body
        body.doc_comment(type_def.description)
        body.line(f"export const {graphql_type_name(type_def.name)}: {constructor} = new {constructor}({{")
        with body.indented():
            body.line(f"name: {ts_string(type_def.name)},")
            if type_def.description is not None:
                body.line(f"description: {ts_string(type_def.description)},")
            if type_def.kind is TypeKind.ENUM:
                self._write_values()
            else:
                self._write_interfaces()
                self._write_fields()
        body.line("});")
        return generated_module(self._imports, body)

    def _write_resolver_bindings(self) -> None:
        """Import each bound resolver module and check it against its interface."""
        type_def = self._type_def
        from_dir = f"{self._options.output_directory.strip('/')}/{GRAPHQL_DIR}".lstrip("/")
        wrote = False
        for module in type_def.resolver_modules:
            if not bound_fields(type_def, module):
                continue
            alias = f"{module.interface_name}Module"
            const = lower_first(module.interface_name)
            self._imports.add_namespace(relative_specifier(from_dir, module.path), alias)
            self._imports.add_type(f"../{RESOLVERS_DIR}/{type_def.name}", module.interface_name)
            self._body.line(f"const {const}: {module.interface_name} = {alias};")
            self._resolver_consts[module.path] = const
            wrote = True
        if wrote:
            self._body.line()

    def _write_values(self) -> None:
        body = self._body
        body.line("values: {")
        with body.indented():
            for value in self._type_def.values:
                props = [f"value: {ts_string(value.internal_value)}"]
                if value.description is not None:
                    props.append(f"description: {ts_string(value.description)}")
                reason = _deprecation_reason(value.deprecated)
                if reason is not None:
                    props.append(f"deprecationReason: {ts_string(reason)}")
                body.line(f"{value.name}: {{ {', '.join(props)} }},")
        body.line("},")

    def _write_interfaces(self) -> None:
        refs = self._type_def.interfaces
        if not refs:
            return
        names = []
        for ref in refs:
            names.append(graphql_type_name(ref.name))
            self._import_type_module(ref.name)
        self._body.line(f"interfaces: () => [{', '.join(names)}],")

    def _write_fields(self) -> None:
        body = self._body
        fields = self._type_def.graphql_fields()
        if not fields:
            body.line("fields: () => ({}),")
            return
        body.line("fields: () => ({")
        with body.indented():
            for field_def in fields:
                self._write_field(field_def)
        body.line("}),")

    def _write_field(self, field_def: ClassifiedField) -> None:
        body = self._body
        field_type = self._graphql_type(self._mapper.map(field_def.type_ref, Axis.GRAPHQL))
        props: list[str] = []
        if field_def.description is not None:
            props.append(f"description: {ts_string(field_def.description)},")
        reason = _deprecation_reason(field_def.deprecated)
        if reason is not None:
            props.append(f"deprecationReason: {ts_string(reason)},")
        resolve = self._resolve_wiring(field_def)
        if resolve is not None:
            props.append(f"resolve: {resolve},")

        if not props and not field_def.arguments:
            body.line(f"{field_def.name}: {{ type: {field_type} }},")
            return
        body.line(f"{field_def.name}: {{")
        with body.indented():
            body.line(f"type: {field_type},")
            if field_def.arguments:
                body.line("args: {")
                with body.indented():
                    for arg in field_def.arguments:
                        body.line(f"{arg.name}: {{ {', '.join(self._argument_props(arg))} }},")
                body.line("},")
            body.lines(props)
        body.line("},")

    def _argument_props(self, arg: InputValueDecl) -> list[str]:
        props = [f"type: {self._graphql_type(self._mapper.map(arg.type_ref, Axis.GRAPHQL))}"]
        if arg.default_value is not None:
            props.append(f"defaultValue: {self._default_value(arg.default_value, named_type(arg.type_ref).name)}")
        if arg.description is not None:
            props.append(f"description: {ts_string(arg.description)}")
        return props

    def _resolve_wiring(self, field_def: ClassifiedField) -> str | None:
        if field_def.resolver is None:
            return None
        const = self._resolver_consts.get(field_def.resolver.module.path)
        if const is None:
            return None
        call_args = "root, context, args" if field_def.arguments else "root, context"
        args_param = "args" if field_def.arguments else "_args"
        return f"(root, {args_param}, context) => {const}.{field_def.resolver.function}({call_args})"

    def _graphql_type(self, mapped: MappedType) -> str:
        for module, name in sorted(mapped.imports):
            self._imports.add(module, name)
        for name in sorted(mapped.type_names):
            self._import_type_module(name)
        return mapped.text

    def _import_type_module(self, type_name: str) -> None:
        if type_name != self._type_def.name:
            self._imports.add(f"./{type_name}", graphql_type_name(type_name))

    def _default_value(self, value: ConstValue, type_name: str) -> str:
        """Render a constant as a JavaScript literal of its internal value."""
        if value.kind is ValueKind.STRING:
            return ts_string(value.text)
        if value.kind is ValueKind.ENUM:
            enum_def = self._mapper.graph.get(type_name)
            if enum_def is not None and enum_def.kind is TypeKind.ENUM:
                for enum_value in enum_def.values:
                    if enum_value.name == value.text:
                        return ts_string(enum_value.internal_value)
            return ts_string(value.text)
        if value.kind is ValueKind.LIST:
            return "[" + ", ".join(self._default_value(item, type_name) for item in value.items) + "]"
        if value.kind is ValueKind.OBJECT:
            members = ", ".join(f"{f.name}: {self._default_value(f.value, type_name)}" for f in value.fields)
            return f"{{ {members} }}" if members else "{}"
        # INT, FLOAT, BOOLEAN and NULL keep their source text.
        return value.text
