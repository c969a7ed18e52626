# Copyright 2026 sdlgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Syntactic and semantic model for SDL schemas."""

from sdlgen.model.declarations import (
    BUILTIN_SCALARS,
    CompositeDeclaration,
    ConstValue,
    Declaration,
    DeprecatedDirective,
    DirectiveApplication,
    EnumDecl,
    EnumExtension,
    EnumValueDecl,
    FieldDecl,
    GenerateDirective,
    InputValueDecl,
    InterfaceDecl,
    InterfaceExtension,
    ListTypeRef,
    NamedTypeRef,
    NonNullTypeRef,
    ObjectTypeDecl,
    ObjectTypeExtension,
    ObjectValueField,
    Projection,
    ResolveDirective,
    ResolversDirective,
    ServerDirective,
    TypeKind,
    TypeRef,
    ValueKind,
    format_type_ref,
    named_type,
)
from sdlgen.model.graph import (
    ClassifiedField,
    FieldDefinition,
    FieldResolver,
    ResolverModule,
    TypeDefinition,
    TypeGraph,
)
from sdlgen.model.source import SourceSpan

__all__ = [
    "BUILTIN_SCALARS",
    # Provenance
    "SourceSpan",
    # Type references and values
    "NamedTypeRef",
    "ListTypeRef",
    "NonNullTypeRef",
    "TypeRef",
    "named_type",
    "format_type_ref",
    "ValueKind",
    "ConstValue",
    "ObjectValueField",
    # Directives
    "Projection",
    "ServerDirective",
    "GenerateDirective",
    "ResolversDirective",
    "ResolveDirective",
    "DeprecatedDirective",
    "DirectiveApplication",
    # Declarations
    "TypeKind",
    "InputValueDecl",
    "FieldDecl",
    "EnumValueDecl",
    "EnumDecl",
    "EnumExtension",
    "ObjectTypeDecl",
    "ObjectTypeExtension",
    "InterfaceDecl",
    "InterfaceExtension",
    "CompositeDeclaration",
    "Declaration",
    # Type graph
    "ResolverModule",
    "FieldResolver",
    "FieldDefinition",
    "ClassifiedField",
    "TypeDefinition",
    "TypeGraph",
]
