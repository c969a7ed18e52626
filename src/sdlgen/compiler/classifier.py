# Copyright 2026 sdlgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Projection of every object and interface field onto the output axes."""

from __future__ import annotations

import logging

from sdlgen.compiler.diagnostics import Diagnostic, DiagnosticKind, RelatedSpan, StageResult
from sdlgen.model.declarations import Projection, TypeKind
from sdlgen.model.graph import ClassifiedField, FieldDefinition, TypeDefinition, TypeGraph

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


def classify_field(field_def: FieldDefinition) -> Projection:
    """Compute the projection of a single field.

    Precedence, highest first:

    1. the field's own ``@generate(for: ...)``;
    2. the ``@generate`` of the declaration (base type or extension) that
       contains the field;
    3. ``GraphQL`` when the field carries ``@resolve`` or is declared inside a
       declaration carrying ``@resolvers``, ``Both`` otherwise.
    """
    if field_def.generate is not None:
        return field_def.generate.target
    if field_def.enclosing_generate is not None:
        return field_def.enclosing_generate.target
    if field_def.resolve_span is not None or field_def.resolvers_span is not None:
        return Projection.GRAPHQL_ONLY
    return Projection.BOTH


def classify(graph: TypeGraph) -> StageResult[TypeGraph]:
    """Classify every field of every object and interface in *graph*.

    A field projected only onto the GraphQL axis has no server value to read
    from, so it must be backed by ``@resolve``; a field without it is
    reported as a classification error. ``@resolve`` on a server or
    two-sided field is allowed but never required.

    Returns:
        A new graph whose object and interface definitions hold
        :class:`~sdlgen.model.graph.ClassifiedField` instances, and the
        classification diagnostics.
    """
    diagnostics: list[Diagnostic] = []
    types: dict[str, TypeDefinition] = {}
    for type_def in graph:
        if type_def.kind is TypeKind.ENUM:
            types[type_def.name] = type_def
            continue
        fields: list[FieldDefinition] = []
        for field_def in type_def.fields:
            projection = classify_field(field_def)
            if projection is Projection.GRAPHQL_ONLY and field_def.resolve_span is None:
                related = []
                source = field_def.generate or field_def.enclosing_generate
                if source is not None:
                    related.append(RelatedSpan(span=source.span, note="projection set by @generate here"))
                elif field_def.resolvers_span is not None:
                    related.append(
                        RelatedSpan(span=field_def.resolvers_span, note="projection implied by @resolvers here")
                    )
                diagnostics.append(
                    Diagnostic.error(
                        DiagnosticKind.CLASSIFICATION,
                        f"GraphQL-only field '{type_def.name}.{field_def.name}' must be resolved with @resolve",
                        field_def.span,
                        related=related,
                        type_name=type_def.name,
                    )
                )
            fields.append(
                ClassifiedField(
                    **dict(field_def),
                    projection=projection,
                    resolved=field_def.resolve_span is not None,
                )
            )
        types[type_def.name] = type_def.model_copy(update={"fields": fields})
    for type_def in types.values():
        diagnostics.extend(_check_inherited_server_fields(type_def, types))
    logger.debug("Classified %d type(s)", len(types))
    return StageResult(TypeGraph(types=types), diagnostics)


# ################
# Implementation
# ################


def _check_inherited_server_fields(type_def: TypeDefinition, types: dict[str, TypeDefinition]) -> list[Diagnostic]:
    """Report fields kept off the server axis although an implemented interface puts them there.

    The server type of *type_def* extends the server type of each interface,
    so every server-side interface field is inherited whatever the
    implementing field's own projection is.
    """
    diagnostics: list[Diagnostic] = []
    for ref in type_def.interfaces:
        iface = types.get(ref.name)
        if iface is None or iface.kind is not TypeKind.INTERFACE or iface.name == type_def.name:
            continue
        for iface_field in iface.server_fields():
            own = type_def.get_field(iface_field.name)
            if not isinstance(own, ClassifiedField) or own.projection.on_server:
                continue
            diagnostics.append(
                Diagnostic.error(
                    DiagnosticKind.CLASSIFICATION,
                    f"Field '{type_def.name}.{own.name}' is not generated on the server, but "
                    f"'{iface.name}.{iface_field.name}' is, and the server type of '{type_def.name}' "
                    f"extends '{iface.name}'",
                    own.span,
                    related=[
                        RelatedSpan(span=iface_field.span, note=f"'{iface.name}.{iface_field.name}' declared here")
                    ],
                    type_name=type_def.name,
                )
            )
    return diagnostics
