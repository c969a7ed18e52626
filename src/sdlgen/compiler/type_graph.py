# Copyright 2026 sdlgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Merging of declarations from all schema files into one type graph.

The graph is built in two passes. The collect pass groups declarations by
type name and merges each group into a single :class:`TypeDefinition`,
reporting duplicate and conflicting declarations. The resolve pass then
checks every type reference by name lookup, so forward references across
files and mutually recursive types need no special handling.
"""

from __future__ import annotations

import logging
import posixpath
import re
from collections.abc import Collection, Sequence

from sdlgen.compiler.diagnostics import Diagnostic, DiagnosticKind, RelatedSpan, StageResult
from sdlgen.model.declarations import (
    BUILTIN_SCALARS,
    CompositeDeclaration,
    Declaration,
    EnumDecl,
    ListTypeRef,
    NamedTypeRef,
    NonNullTypeRef,
    TypeKind,
    TypeRef,
    named_type,
)
from sdlgen.model.graph import FieldDefinition, FieldResolver, ResolverModule, TypeDefinition, TypeGraph
from sdlgen.model.source import SourceSpan

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


def build_type_graph(
    declarations: Sequence[Declaration],
    *,
    custom_scalars: Collection[str] = (),
) -> StageResult[TypeGraph]:
    """Merge *declarations* into a reference-checked type graph.

    Checks performed:
    - Exactly one base declaration per type name (duplicates are merge
      conflicts citing both spans; extensions without a base are errors).
    - Extensions must match the kind of their base; enums cannot be extended.
    - Extensions may not redefine the base's description.
    - Field and enum value names are unique across a base and all of its
      extensions.
    - A field carrying ``@resolve`` must sit in a declaration (or, for an
      extension, under a base) that carries ``@resolvers``.
    - Every referenced type name resolves to a declared type or a scalar;
      ``implements`` names resolve to interfaces and implementations provide
      every interface field with a compatible type; argument types are
      scalars or enums.

    Args:
        declarations: Declarations from all files, in a deterministic order
            (files sorted by path, declarations in source order).
        custom_scalars: Additional scalar names that may be referenced.

    Returns:
        The merged graph and all merge, reference and classification
        diagnostics. Types with errors still appear in the graph.
    """
    scalars = BUILTIN_SCALARS | frozenset(custom_scalars)
    builder = _GraphBuilder(scalars)
    builder.collect(declarations)
    builder.resolve()
    logger.debug("Merged %d declaration(s) into %d type(s)", len(declarations), len(builder.graph))
    return StageResult(builder.graph, builder.diagnostics)


# ################
# Implementation
# ################

_KIND_LABELS: dict[TypeKind, str] = {
    TypeKind.ENUM: "an enum",
    TypeKind.OBJECT: "an object type",
    TypeKind.INTERFACE: "an interface",
}


class _GraphBuilder:
    """Accumulates the type graph and its diagnostics."""

    def __init__(self, scalars: frozenset[str]) -> None:
        self._scalars = scalars
        self.graph = TypeGraph()
        self.diagnostics: list[Diagnostic] = []

    def _error(
        self,
        kind: DiagnosticKind,
        message: str,
        span: SourceSpan,
        type_name: str,
        *related: RelatedSpan,
    ) -> None:
        self.diagnostics.append(Diagnostic.error(kind, message, span, related=related, type_name=type_name))

    # ------------------------------------------------------------------
    # Collect pass
    # ------------------------------------------------------------------

    def collect(self, declarations: Sequence[Declaration]) -> None:
        groups: dict[str, list[Declaration]] = {}
        for decl in declarations:
            groups.setdefault(decl.name, []).append(decl)
        for name, group in groups.items():
            if name in self._scalars:
                for decl in group:
                    self._error(
                        DiagnosticKind.MERGE_CONFLICT,
                        f"Type '{name}' conflicts with the scalar of the same name",
                        decl.name_span,
                        name,
                    )
                continue
            self._merge_group(name, group)

    def _merge_group(self, name: str, group: list[Declaration]) -> None:
        bases = [d for d in group if not d.is_extension]
        extensions = [d for d in group if d.is_extension]
        if not bases:
            for ext in extensions:
                self._error(
                    DiagnosticKind.REFERENCE,
                    f"Cannot extend '{name}': no base definition of '{name}' exists",
                    ext.name_span,
                    name,
                )
            return

        base = bases[0]
        first_seen = RelatedSpan(span=base.name_span, note=f"'{name}' first defined here")
        for duplicate in bases[1:]:
            if duplicate.type_kind is base.type_kind:
                message = f"Duplicate definition of '{name}'"
            else:
                message = f"'{name}' is already defined as {_KIND_LABELS[base.type_kind]}"
            self._error(DiagnosticKind.MERGE_CONFLICT, message, duplicate.name_span, name, first_seen)

        type_def = TypeDefinition(
            name=name,
            kind=base.type_kind,
            description=base.description,
            span=base.span,
            name_span=base.name_span,
        )
        self.graph.types[name] = type_def

        valid_extensions: list[Declaration] = []
        for ext in extensions:
            if ext.type_kind is TypeKind.ENUM:
                self._error(
                    DiagnosticKind.MERGE_CONFLICT,
                    f"Enum '{name}' cannot be extended",
                    ext.name_span,
                    name,
                    first_seen,
                )
                continue
            if ext.type_kind is not base.type_kind:
                self._error(
                    DiagnosticKind.MERGE_CONFLICT,
                    f"Cannot extend {_KIND_LABELS[base.type_kind]} '{name}' as {_KIND_LABELS[ext.type_kind]}",
                    ext.name_span,
                    name,
                    first_seen,
                )
                continue
            if ext.description is not None:
                self._error(
                    DiagnosticKind.MERGE_CONFLICT,
                    f"An extension of '{name}' cannot redefine its description",
                    ext.span,
                    name,
                    first_seen,
                )
            type_def.extension_spans.append(ext.span)
            valid_extensions.append(ext)

        if isinstance(base, EnumDecl):
            self._merge_enum(type_def, base)
        else:
            self._merge_composite(type_def, base, valid_extensions)  # type: ignore[arg-type]

    def _merge_enum(self, type_def: TypeDefinition, decl: EnumDecl) -> None:
        seen: dict[str, SourceSpan] = {}
        for value in decl.values:
            if value.name in seen:
                self._error(
                    DiagnosticKind.MERGE_CONFLICT,
                    f"Duplicate value '{value.name}' in enum '{type_def.name}'",
                    value.span,
                    type_def.name,
                    RelatedSpan(span=seen[value.name], note=f"'{value.name}' first declared here"),
                )
                continue
            seen[value.name] = value.span
            type_def.values.append(value)

    def _merge_composite(
        self,
        type_def: TypeDefinition,
        base: CompositeDeclaration,
        extensions: list[CompositeDeclaration],
    ) -> None:
        decls = [base, *extensions]
        modules = self._collect_modules(type_def, decls)
        base_module = modules.get(id(base))

        implemented: dict[str, SourceSpan] = {}
        seen_fields: dict[str, SourceSpan] = {}
        for decl in decls:
            for iface in decl.interfaces:
                if iface.name in implemented:
                    self._error(
                        DiagnosticKind.MERGE_CONFLICT,
                        f"'{type_def.name}' implements '{iface.name}' more than once",
                        iface.span,
                        type_def.name,
                        RelatedSpan(span=implemented[iface.name], note="first listed here"),
                    )
                    continue
                implemented[iface.name] = iface.span
                type_def.interfaces.append(iface)

            module = modules.get(id(decl), base_module)
            enclosing_generate = decl.generate
            resolvers_span = decl.resolvers.span if decl.resolvers is not None else None
            for field_decl in decl.fields:
                if field_decl.name in seen_fields:
                    self._error(
                        DiagnosticKind.MERGE_CONFLICT,
                        f"Duplicate field '{field_decl.name}' in '{type_def.name}'",
                        field_decl.span,
                        type_def.name,
                        RelatedSpan(span=seen_fields[field_decl.name], note=f"'{field_decl.name}' first declared here"),
                    )
                    continue
                seen_fields[field_decl.name] = field_decl.span

                resolve = field_decl.resolve
                resolver: FieldResolver | None = None
                if resolve is not None:
                    if module is None:
                        self._error(
                            DiagnosticKind.CLASSIFICATION,
                            f"Field '{type_def.name}.{field_decl.name}' uses @resolve but no enclosing "
                            "declaration carries @resolvers",
                            field_decl.span,
                            type_def.name,
                            RelatedSpan(span=resolve.span, note="@resolve applied here"),
                        )
                    else:
                        resolver = FieldResolver(module=module, function=resolve.function, span=resolve.span)
                        type_def.resolver_bindings[field_decl.name] = resolver

                type_def.fields.append(
                    FieldDefinition(
                        name=field_decl.name,
                        type_ref=field_decl.type_ref,
                        arguments=field_decl.arguments,
                        description=field_decl.description,
                        deprecated=field_decl.deprecated,
                        generate=field_decl.generate,
                        enclosing_generate=enclosing_generate,
                        resolvers_span=resolvers_span,
                        resolver=resolver,
                        resolve_span=resolve.span if resolve is not None else None,
                        span=field_decl.span,
                    )
                )

    def _collect_modules(
        self,
        type_def: TypeDefinition,
        decls: list[CompositeDeclaration],
    ) -> dict[int, ResolverModule]:
        """Create one resolver module per distinct ``@resolvers`` target.

        Returns a mapping from ``id(declaration)`` to the module bound by that
        declaration. Two declarations naming the same file share a module.
        """
        by_path: dict[str, tuple[str, SourceSpan]] = {}
        decl_paths: dict[int, str] = {}
        for decl in decls:
            directive = decl.resolvers
            if directive is None:
                continue
            path = _module_path(decl.span.file, directive.file)
            by_path.setdefault(path, (directive.file, directive.span))
            decl_paths[id(decl)] = path

        names = _interface_names(type_def.name, list(by_path))
        modules_by_path: dict[str, ResolverModule] = {}
        for path, (file, span) in by_path.items():
            module = ResolverModule(file=file, path=path, interface_name=names[path], span=span)
            modules_by_path[path] = module
            type_def.resolver_modules.append(module)
        return {decl_id: modules_by_path[path] for decl_id, path in decl_paths.items()}

    # ------------------------------------------------------------------
    # Resolve pass
    # ------------------------------------------------------------------

    def resolve(self) -> None:
        for type_def in self.graph:
            if type_def.kind is TypeKind.ENUM:
                continue
            valid_interfaces = self._check_interfaces(type_def)
            for field_def in type_def.fields:
                self._check_field_references(type_def, field_def)
            for iface in valid_interfaces:
                self._check_implementation(type_def, iface)

    def _check_interfaces(self, type_def: TypeDefinition) -> list[TypeDefinition]:
        valid: list[TypeDefinition] = []
        for ref in type_def.interfaces:
            target = self.graph.get(ref.name)
            if target is None:
                self._error(
                    DiagnosticKind.REFERENCE,
                    f"'{type_def.name}' implements unknown interface '{ref.name}'",
                    ref.span,
                    type_def.name,
                )
            elif target.kind is not TypeKind.INTERFACE:
                self._error(
                    DiagnosticKind.REFERENCE,
                    f"'{type_def.name}' cannot implement '{ref.name}', which is {_KIND_LABELS[target.kind]}",
                    ref.span,
                    type_def.name,
                    RelatedSpan(span=target.name_span, note=f"'{ref.name}' defined here"),
                )
            elif target is type_def:
                self._error(
                    DiagnosticKind.REFERENCE,
                    f"Interface '{type_def.name}' cannot implement itself",
                    ref.span,
                    type_def.name,
                )
            else:
                valid.append(target)
        return valid

    def _check_field_references(self, type_def: TypeDefinition, field_def: FieldDefinition) -> None:
        ref = named_type(field_def.type_ref)
        if ref.name not in self._scalars and ref.name not in self.graph:
            self._error(
                DiagnosticKind.REFERENCE,
                f"Unknown type '{ref.name}' referenced by field '{type_def.name}.{field_def.name}'",
                ref.span,
                type_def.name,
            )
        for argument in field_def.arguments:
            arg_ref = named_type(argument.type_ref)
            if arg_ref.name in self._scalars:
                continue
            target = self.graph.get(arg_ref.name)
            if target is None:
                self._error(
                    DiagnosticKind.REFERENCE,
                    f"Unknown type '{arg_ref.name}' referenced by argument "
                    f"'{argument.name}' of '{type_def.name}.{field_def.name}'",
                    arg_ref.span,
                    type_def.name,
                )
            elif target.kind is not TypeKind.ENUM:
                self._error(
                    DiagnosticKind.REFERENCE,
                    f"Argument '{argument.name}' of '{type_def.name}.{field_def.name}' must have a scalar "
                    f"or enum type, but '{arg_ref.name}' is {_KIND_LABELS[target.kind]}",
                    arg_ref.span,
                    type_def.name,
                )

    def _check_implementation(self, type_def: TypeDefinition, iface: TypeDefinition) -> None:
        for iface_field in iface.fields:
            own = type_def.get_field(iface_field.name)
            related = RelatedSpan(span=iface_field.span, note=f"'{iface.name}.{iface_field.name}' declared here")
            if own is None:
                self._error(
                    DiagnosticKind.REFERENCE,
                    f"'{type_def.name}' implements '{iface.name}' but does not declare field '{iface_field.name}'",
                    type_def.name_span,
                    type_def.name,
                    related,
                )
            elif not self._is_valid_implementation_type(own.type_ref, iface_field.type_ref):
                self._error(
                    DiagnosticKind.REFERENCE,
                    f"Field '{type_def.name}.{own.name}' must have a type compatible with "
                    f"'{iface.name}.{iface_field.name}'",
                    own.type_ref.span,
                    type_def.name,
                    related,
                )

    def _is_valid_implementation_type(self, sub: TypeRef, sup: TypeRef) -> bool:
        """GraphQL's covariant field type rule for interface implementations."""
        if isinstance(sup, NonNullTypeRef):
            return isinstance(sub, NonNullTypeRef) and self._is_valid_implementation_type(sub.of_type, sup.of_type)
        if isinstance(sub, NonNullTypeRef):
            return self._is_valid_implementation_type(sub.of_type, sup)
        if isinstance(sup, ListTypeRef):
            return isinstance(sub, ListTypeRef) and self._is_valid_implementation_type(sub.of_type, sup.of_type)
        if isinstance(sub, ListTypeRef):
            return False
        assert isinstance(sub, NamedTypeRef) and isinstance(sup, NamedTypeRef)
        if sub.name == sup.name:
            return True
        target = self.graph.get(sub.name)
        return target is not None and any(ref.name == sup.name for ref in target.interfaces)


# ------------------------------------------------------------------
# Module-level helper functions
# ------------------------------------------------------------------


def _module_path(sdl_file: str, file: str) -> str:
    """Resolve a ``@resolvers(file)`` path against its declaring SDL file."""
    return posixpath.normpath(posixpath.join(posixpath.dirname(sdl_file), file.replace("\\", "/")))


def _interface_names(type_name: str, paths: list[str]) -> dict[str, str]:
    """Name the resolver interfaces of one type.

    A single module yields ``<Type>Resolvers``; several modules are told apart
    by the PascalCase stem of their file name (suffixed with a counter when
    two stems coincide).
    """
    if len(paths) == 1:
        return {paths[0]: f"{type_name}Resolvers"}
    names: dict[str, str] = {}
    used: set[str] = set()
    for path in paths:
        stem = posixpath.splitext(posixpath.basename(path))[0]
        base = f"{type_name}{_pascal_case(stem)}Resolvers"
        name = base
        counter = 2
        while name in used:
            name = f"{base}{counter}"
            counter += 1
        used.add(name)
        names[path] = name
    return names


def _pascal_case(text: str) -> str:
    return "".join(part[:1].upper() + part[1:] for part in re.split(r"[^A-Za-z0-9]+", text) if part)
