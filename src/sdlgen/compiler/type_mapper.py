# Copyright 2026 sdlgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Translation of SDL type references into target type expressions.

Every reference maps independently onto two axes:

* the **server** axis, producing TypeScript type expressions in which
  GraphQL's default nullability becomes an explicit ``| null``;
* the **GraphQL** axis, producing ``graphql-js`` runtime type expressions in
  which non-null and list wrappers become ``GraphQLNonNull``/``GraphQLList``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict

from sdlgen.compiler.diagnostics import Diagnostic, DiagnosticKind, RelatedSpan
from sdlgen.model.declarations import ListTypeRef, NamedTypeRef, NonNullTypeRef, TypeKind, TypeRef, named_type
from sdlgen.model.graph import TypeGraph
from sdlgen.model.source import SourceSpan

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############

GRAPHQL_MODULE = "graphql"


class Axis(Enum):
    SERVER = "server"
    GRAPHQL = "graphql"


@dataclass(frozen=True)
class ScalarMapping:
    """How one scalar appears on each axis.

    Attributes:
        name: The SDL scalar name.
        server: TypeScript type used on the server axis.
        graphql: Name of the ``graphql-js`` scalar object.
        module: Module the GraphQL scalar object is imported from.
    """

    name: str
    server: str
    graphql: str
    module: str = GRAPHQL_MODULE


BUILTIN_SCALAR_MAPPINGS: dict[str, ScalarMapping] = {
    "String": ScalarMapping("String", "string", "GraphQLString"),
    "Int": ScalarMapping("Int", "number", "GraphQLInt"),
    "Float": ScalarMapping("Float", "number", "GraphQLFloat"),
    "Boolean": ScalarMapping("Boolean", "boolean", "GraphQLBoolean"),
    "ID": ScalarMapping("ID", "string", "GraphQLID"),
}


class MappedType(BaseModel):
    """A target type expression and what it needs in scope.

    Attributes:
        text: The expression text.
        span: Span of the SDL type reference it was mapped from.
        type_names: Schema types the expression refers to (imported from
            their sibling generated modules).
        imports: ``(module, name)`` pairs of library symbols it uses.
    """

    model_config = ConfigDict(frozen=True)

    text: str
    span: SourceSpan
    type_names: frozenset[str] = frozenset()
    imports: frozenset[tuple[str, str]] = frozenset()


class TypeMappingError(Exception):
    """Raised when a reference has no representation on the requested axis."""

    def __init__(self, message: str, span: SourceSpan) -> None:
        super().__init__(message)
        self.message = message
        self.span = span


def graphql_type_name(type_name: str) -> str:
    """Name of the runtime object generated for a schema type."""
    return f"{type_name}Type"


class TypeMapper:
    """Maps type references against a classified type graph."""

    def __init__(self, graph: TypeGraph, scalars: Mapping[str, ScalarMapping] | None = None) -> None:
        self._graph = graph
        self._scalars = dict(BUILTIN_SCALAR_MAPPINGS)
        if scalars:
            self._scalars.update(scalars)

    @property
    def graph(self) -> TypeGraph:
        return self._graph

    @property
    def scalars(self) -> Mapping[str, ScalarMapping]:
        return self._scalars

    def map(self, type_ref: TypeRef, axis: Axis) -> MappedType:
        """Map *type_ref* onto *axis*.

        Raises:
            TypeMappingError: If a referenced name is unknown, or if an
                object or interface without a server type is mapped onto the
                server axis.
        """
        if axis is Axis.SERVER:
            return self._map_server(type_ref, nullable=True)
        return self._map_graphql(type_ref)

    # ------------------------------------------------------------------
    # Server axis
    # ------------------------------------------------------------------

    def _map_server(self, type_ref: TypeRef, nullable: bool) -> MappedType:
        if isinstance(type_ref, NonNullTypeRef):
            return self._map_server(type_ref.of_type, nullable=False)
        if isinstance(type_ref, ListTypeRef):
            inner = self._map_server(type_ref.of_type, nullable=True)
            mapped = MappedType(
                text=f"Array<{inner.text}>",
                span=type_ref.span,
                type_names=inner.type_names,
                imports=inner.imports,
            )
        else:
            mapped = self._map_server_named(type_ref)
        if nullable:
            return mapped.model_copy(update={"text": f"{mapped.text} | null"})
        return mapped

    def _map_server_named(self, ref: NamedTypeRef) -> MappedType:
        scalar = self._scalars.get(ref.name)
        if scalar is not None:
            return MappedType(text=scalar.server, span=ref.span)
        target = self._graph.get(ref.name)
        if target is None:
            raise TypeMappingError(f"Unknown type '{ref.name}'", ref.span)
        if target.kind is not TypeKind.ENUM and not target.has_server_type:
            raise TypeMappingError(f"'{ref.name}' has no server-side type", ref.span)
        return MappedType(text=ref.name, span=ref.span, type_names=frozenset({ref.name}))

    # ------------------------------------------------------------------
    # GraphQL axis
    # ------------------------------------------------------------------

    def _map_graphql(self, type_ref: TypeRef) -> MappedType:
        if isinstance(type_ref, NonNullTypeRef):
            return self._wrap(type_ref, "GraphQLNonNull")
        if isinstance(type_ref, ListTypeRef):
            return self._wrap(type_ref, "GraphQLList")
        scalar = self._scalars.get(type_ref.name)
        if scalar is not None:
            return MappedType(
                text=scalar.graphql,
                span=type_ref.span,
                imports=frozenset({(scalar.module, scalar.graphql)}),
            )
        if type_ref.name not in self._graph:
            raise TypeMappingError(f"Unknown type '{type_ref.name}'", type_ref.span)
        return MappedType(
            text=graphql_type_name(type_ref.name),
            span=type_ref.span,
            type_names=frozenset({type_ref.name}),
        )

    def _wrap(self, type_ref: ListTypeRef | NonNullTypeRef, wrapper: str) -> MappedType:
        inner = self._map_graphql(type_ref.of_type)
        return MappedType(
            text=f"new {wrapper}({inner.text})",
            span=type_ref.span,
            type_names=inner.type_names,
            imports=inner.imports | {(GRAPHQL_MODULE, wrapper)},
        )


def map_type(
    type_ref: TypeRef,
    axis: Axis,
    graph: TypeGraph,
    scalars: Mapping[str, ScalarMapping] | None = None,
) -> MappedType:
    """Map a single type reference; see :meth:`TypeMapper.map`."""
    return TypeMapper(graph, scalars).map(type_ref, axis)


def check_type_mappings(graph: TypeGraph, scalars: Mapping[str, ScalarMapping] | None = None) -> list[Diagnostic]:
    """Report fields whose type has no representation on an axis the field needs.

    An object or interface whose fields are all GraphQL-only produces no
    server type, so neither a server or two-sided field nor a resolver
    return value can refer to it. Likewise a type whose fields are all
    server-only has no GraphQL fields, so no GraphQL-visible field may
    return it. Unknown names are skipped here; the type graph builder
    reports them.
    """
    mapper = TypeMapper(graph, scalars)
    diagnostics: list[Diagnostic] = []
    for type_def in graph:
        if type_def.kind is TypeKind.ENUM:
            continue
        for field_def in type_def.classified_fields():
            target = graph.get(named_type(field_def.type_ref).name)
            if target is None:
                continue
            if field_def.projection.on_graphql and target.kind is not TypeKind.ENUM and not target.graphql_fields():
                diagnostics.append(
                    Diagnostic.error(
                        DiagnosticKind.CLASSIFICATION,
                        f"Field '{type_def.name}.{field_def.name}' is exposed through GraphQL, but "
                        f"'{target.name}' has no GraphQL fields",
                        field_def.span,
                        related=[RelatedSpan(span=target.name_span, note=f"'{target.name}' defined here")],
                        type_name=type_def.name,
                    )
                )
            if not (field_def.projection.on_server or field_def.resolved):
                continue
            try:
                mapper.map(field_def.type_ref, Axis.SERVER)
            except TypeMappingError as exc:
                usage = "is generated for the server" if field_def.projection.on_server else "is resolved"
                diagnostics.append(
                    Diagnostic.error(
                        DiagnosticKind.CLASSIFICATION,
                        f"Field '{type_def.name}.{field_def.name}' {usage}, but {exc.message}",
                        field_def.span,
                        related=[RelatedSpan(span=target.name_span, note=f"'{target.name}' defined here")],
                        type_name=type_def.name,
                    )
                )
    logger.debug("Checked type mappings: %d diagnostic(s)", len(diagnostics))
    return diagnostics
