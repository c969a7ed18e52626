# Copyright 2026 sdlgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Merged, name-keyed model of all types declared across a schema."""

from __future__ import annotations

from collections.abc import Iterator

from pydantic import BaseModel, ConfigDict
from pydantic import Field as _Field

from sdlgen.model.declarations import (
    DeprecatedDirective,
    EnumValueDecl,
    GenerateDirective,
    InputValueDecl,
    NamedTypeRef,
    Projection,
    TypeKind,
    TypeRef,
)
from sdlgen.model.source import SourceSpan

# ###############
# Public Interface
# ###############


class ResolverModule(BaseModel):
    """A ``@resolvers(file)`` binding of a type to an external module.

    Attributes:
        file: The path exactly as written in the directive.
        path: *file* joined onto the directory of the declaring SDL file and
            normalized (POSIX separators).
        interface_name: Name of the generated resolver interface.
        span: Span of the ``@resolvers`` directive.
    """

    model_config = ConfigDict(frozen=True)

    file: str
    path: str
    interface_name: str
    span: SourceSpan


class FieldResolver(BaseModel):
    """The function of a resolver module that supplies one field's value."""

    model_config = ConfigDict(frozen=True)

    module: ResolverModule
    function: str
    span: SourceSpan


class FieldDefinition(BaseModel):
    """A field after merging, before classification.

    Attributes:
        generate: The field's own ``@generate`` directive, if any.
        enclosing_generate: The ``@generate`` directive of the declaration
            (base type or extension) that contains the field, if any.
        resolvers_span: Span of the ``@resolvers`` directive on the declaration
            that contains the field, if it carries one.
        resolver: The resolver function bound through ``@resolve``.
        resolve_span: Span of the ``@resolve`` directive, kept even when no
            enclosing ``@resolvers`` binding exists.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    type_ref: TypeRef
    arguments: list[InputValueDecl] = _Field(default_factory=list)
    description: str | None = None
    deprecated: DeprecatedDirective | None = None
    generate: GenerateDirective | None = None
    enclosing_generate: GenerateDirective | None = None
    resolvers_span: SourceSpan | None = None
    resolver: FieldResolver | None = None
    resolve_span: SourceSpan | None = None
    span: SourceSpan


class ClassifiedField(FieldDefinition):
    """A field with its computed projection."""

    projection: Projection
    resolved: bool


class TypeDefinition(BaseModel):
    """The canonical view of one named type.

    Mutated only while the type graph is being merged.
    """

    name: str
    kind: TypeKind
    description: str | None = None
    span: SourceSpan
    name_span: SourceSpan
    extension_spans: list[SourceSpan] = _Field(default_factory=list)
    interfaces: list[NamedTypeRef] = _Field(default_factory=list)
    fields: list[FieldDefinition] = _Field(default_factory=list)
    values: list[EnumValueDecl] = _Field(default_factory=list)
    resolver_modules: list[ResolverModule] = _Field(default_factory=list)
    resolver_bindings: dict[str, FieldResolver] = _Field(default_factory=dict)

    def get_field(self, name: str) -> FieldDefinition | None:
        for field_def in self.fields:
            if field_def.name == name:
                return field_def
        return None

    def classified_fields(self) -> list[ClassifiedField]:
        """Return the fields, which must already have been classified."""
        result: list[ClassifiedField] = []
        for field_def in self.fields:
            if not isinstance(field_def, ClassifiedField):
                raise TypeError(f"Field '{self.name}.{field_def.name}' has not been classified")
            result.append(field_def)
        return result

    def server_fields(self) -> list[ClassifiedField]:
        """Return the fields projected onto the server axis."""
        return [f for f in self.classified_fields() if f.projection.on_server]

    def graphql_fields(self) -> list[ClassifiedField]:
        return [f for f in self.classified_fields() if f.projection.on_graphql]

    @property
    def has_server_type(self) -> bool:
        """Whether a server-side type is generated for this definition."""
        if self.kind is TypeKind.ENUM:
            return True
        return any(f.projection.on_server for f in self.classified_fields())


class TypeGraph(BaseModel):
    """Mapping from type name to definition, in first-declared order."""

    types: dict[str, TypeDefinition] = _Field(default_factory=dict)

    def __contains__(self, name: object) -> bool:
        return name in self.types

    def __iter__(self) -> Iterator[TypeDefinition]:  # type: ignore[override]
        return iter(self.types.values())

    def __len__(self) -> int:
        return len(self.types)

    def get(self, name: str) -> TypeDefinition | None:
        return self.types.get(name)

    def sorted_types(self) -> list[TypeDefinition]:
        """Return all definitions ordered by name (the emission order)."""
        return [self.types[name] for name in sorted(self.types)]
