# Copyright 2026 sdlgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Syntactic model produced by the SDL parser.

Every node carries the :class:`~sdlgen.model.source.SourceSpan` it was parsed
from. Declarations are immutable once constructed; later stages read them
but never modify them.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic import Field as _Field

from sdlgen.model.source import SourceSpan

# ###############
# Public Interface
# ###############


BUILTIN_SCALARS: frozenset[str] = frozenset({"String", "Int", "Float", "Boolean", "ID"})


class TypeKind(Enum):
    """Kinds of named types a schema may declare."""

    ENUM = "enum"
    OBJECT = "object"
    INTERFACE = "interface"


class Projection(Enum):
    """Output axis (or axes) a field is generated for.

    The values double as the enum literals accepted by ``@generate(for: ...)``.
    """

    SERVER_ONLY = "Server"
    GRAPHQL_ONLY = "GraphQL"
    BOTH = "Both"

    @property
    def on_server(self) -> bool:
        return self is not Projection.GRAPHQL_ONLY

    @property
    def on_graphql(self) -> bool:
        return self is not Projection.SERVER_ONLY


class _Node(BaseModel):
    model_config = ConfigDict(frozen=True)


# ------------------------------------------------------------------
# Type references
# ------------------------------------------------------------------


class NamedTypeRef(_Node):
    """Reference to a scalar, enum, object or interface by name."""

    kind: Literal["named"] = "named"
    name: str
    span: SourceSpan


class ListTypeRef(_Node):
    """A ``[T]`` wrapper."""

    kind: Literal["list"] = "list"
    of_type: TypeRef
    span: SourceSpan


class NonNullTypeRef(_Node):
    """A ``T!`` wrapper."""

    kind: Literal["non_null"] = "non_null"
    of_type: TypeRef
    span: SourceSpan


TypeRef = Annotated[
    NamedTypeRef | ListTypeRef | NonNullTypeRef,
    _Field(discriminator="kind"),
]


def named_type(type_ref: TypeRef) -> NamedTypeRef:
    """Strip all list and non-null wrappers from *type_ref*."""
    while not isinstance(type_ref, NamedTypeRef):
        type_ref = type_ref.of_type
    return type_ref


def format_type_ref(type_ref: TypeRef) -> str:
    """Render *type_ref* back to SDL notation, e.g. ``[String!]!``."""
    if isinstance(type_ref, NamedTypeRef):
        return type_ref.name
    if isinstance(type_ref, ListTypeRef):
        return f"[{format_type_ref(type_ref.of_type)}]"
    return f"{format_type_ref(type_ref.of_type)}!"


# ------------------------------------------------------------------
# Constant values (directive arguments and argument defaults)
# ------------------------------------------------------------------


class ValueKind(Enum):
    STRING = "string"
    INT = "int"
    FLOAT = "float"
    BOOLEAN = "boolean"
    NULL = "null"
    ENUM = "enum"
    LIST = "list"
    OBJECT = "object"


class ObjectValueField(_Node):
    name: str
    value: ConstValue


class ConstValue(_Node):
    """A constant SDL value literal.

    Scalar literals keep their text in ``text``: the decoded content for
    strings, the source digits for numbers, the bare name for enum values and
    ``"true"``/``"false"``/``"null"`` for the keyword literals.
    """

    kind: ValueKind
    span: SourceSpan
    text: str = ""
    items: list[ConstValue] = _Field(default_factory=list)
    fields: list[ObjectValueField] = _Field(default_factory=list)


# ------------------------------------------------------------------
# Directive applications
# ------------------------------------------------------------------


class ServerDirective(_Node):
    """``@server(value: String!)`` on an enum value."""

    name: Literal["server"] = "server"
    value: str
    span: SourceSpan


class GenerateDirective(_Node):
    """``@generate(for: Server | GraphQL | Both)`` on a type, extension or field."""

    name: Literal["generate"] = "generate"
    target: Projection
    span: SourceSpan


class ResolversDirective(_Node):
    """``@resolvers(file: String!)`` on a type or extension."""

    name: Literal["resolvers"] = "resolvers"
    file: str
    span: SourceSpan


class ResolveDirective(_Node):
    """``@resolve(function: String!)`` on a field."""

    name: Literal["resolve"] = "resolve"
    function: str
    span: SourceSpan


class DeprecatedDirective(_Node):
    """The standard ``@deprecated(reason: String)`` directive."""

    name: Literal["deprecated"] = "deprecated"
    reason: str | None = None
    span: SourceSpan


DirectiveApplication = Annotated[
    ServerDirective | GenerateDirective | ResolversDirective | ResolveDirective | DeprecatedDirective,
    _Field(discriminator="name"),
]

_D = TypeVar("_D", ServerDirective, GenerateDirective, ResolversDirective, ResolveDirective, DeprecatedDirective)


class _Directed(_Node):
    directives: list[DirectiveApplication] = _Field(default_factory=list)

    def find_directive(self, directive_type: type[_D]) -> _D | None:
        """Return the first applied directive of *directive_type*, if any."""
        for directive in self.directives:
            if isinstance(directive, directive_type):
                return directive
        return None


# ------------------------------------------------------------------
# Members
# ------------------------------------------------------------------


class InputValueDecl(_Node):
    """A field argument: ``name: Type = default``."""

    name: str
    type_ref: TypeRef
    default_value: ConstValue | None = None
    description: str | None = None
    span: SourceSpan


class FieldDecl(_Directed):
    """A field of an object type, interface, or one of their extensions."""

    name: str
    type_ref: TypeRef
    arguments: list[InputValueDecl] = _Field(default_factory=list)
    description: str | None = None
    span: SourceSpan

    @property
    def generate(self) -> GenerateDirective | None:
        return self.find_directive(GenerateDirective)

    @property
    def resolve(self) -> ResolveDirective | None:
        return self.find_directive(ResolveDirective)

    @property
    def deprecated(self) -> DeprecatedDirective | None:
        return self.find_directive(DeprecatedDirective)


class EnumValueDecl(_Directed):
    """A single value of an enum declaration."""

    name: str
    description: str | None = None
    span: SourceSpan

    @property
    def server_value(self) -> str | None:
        """The ``@server(value)`` literal, if one was given."""
        directive = self.find_directive(ServerDirective)
        return directive.value if directive is not None else None

    @property
    def internal_value(self) -> str:
        """The value both generated representations use for this enum value."""
        server_value = self.server_value
        return server_value if server_value is not None else self.name

    @property
    def deprecated(self) -> DeprecatedDirective | None:
        return self.find_directive(DeprecatedDirective)


# ------------------------------------------------------------------
# Top-level declarations
# ------------------------------------------------------------------


class _Declaration(_Directed):
    name: str
    description: str | None = None
    span: SourceSpan
    name_span: SourceSpan

    @property
    def is_extension(self) -> bool:
        return False

    @property
    def type_kind(self) -> TypeKind:
        raise NotImplementedError


class EnumDecl(_Declaration):
    """``enum Name { ... }``"""

    kind: Literal["enum"] = "enum"
    values: list[EnumValueDecl] = _Field(default_factory=list)

    @property
    def type_kind(self) -> TypeKind:
        return TypeKind.ENUM


class EnumExtension(EnumDecl):
    """``extend enum Name { ... }``, parsed only so that it can be rejected."""

    kind: Literal["enum_extension"] = "enum_extension"  # type: ignore[assignment]

    @property
    def is_extension(self) -> bool:
        return True


class _CompositeDeclaration(_Declaration):
    interfaces: list[NamedTypeRef] = _Field(default_factory=list)
    fields: list[FieldDecl] = _Field(default_factory=list)

    @property
    def generate(self) -> GenerateDirective | None:
        return self.find_directive(GenerateDirective)

    @property
    def resolvers(self) -> ResolversDirective | None:
        return self.find_directive(ResolversDirective)


class ObjectTypeDecl(_CompositeDeclaration):
    """``type Name implements I @directives { ... }``"""

    kind: Literal["object"] = "object"

    @property
    def type_kind(self) -> TypeKind:
        return TypeKind.OBJECT


class ObjectTypeExtension(ObjectTypeDecl):
    """``extend type Name ... { ... }``"""

    kind: Literal["object_extension"] = "object_extension"  # type: ignore[assignment]

    @property
    def is_extension(self) -> bool:
        return True


class InterfaceDecl(_CompositeDeclaration):
    """``interface Name @directives { ... }``"""

    kind: Literal["interface"] = "interface"

    @property
    def type_kind(self) -> TypeKind:
        return TypeKind.INTERFACE


class InterfaceExtension(InterfaceDecl):
    """``extend interface Name ... { ... }``"""

    kind: Literal["interface_extension"] = "interface_extension"  # type: ignore[assignment]

    @property
    def is_extension(self) -> bool:
        return True


Declaration = Annotated[
    EnumDecl | EnumExtension | ObjectTypeDecl | ObjectTypeExtension | InterfaceDecl | InterfaceExtension,
    _Field(discriminator="kind"),
]

CompositeDeclaration = ObjectTypeDecl | ObjectTypeExtension | InterfaceDecl | InterfaceExtension


# Resolve forward references for recursive models.
ListTypeRef.model_rebuild()
NonNullTypeRef.model_rebuild()
ObjectValueField.model_rebuild()
ConstValue.model_rebuild()
