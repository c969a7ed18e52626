# Copyright 2026 sdlgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for field projection and classification."""

import pytest

from sdlgen.compiler.classifier import classify, classify_field
from sdlgen.compiler.diagnostics import Diagnostic, DiagnosticKind
from sdlgen.compiler.parser import parse
from sdlgen.compiler.type_graph import build_type_graph
from sdlgen.model.declarations import GenerateDirective, NamedTypeRef, Projection
from sdlgen.model.graph import FieldDefinition, TypeGraph
from sdlgen.model.source import SourceSpan

# ###############
# Test Helpers
# ###############

_SPAN = SourceSpan(file="schema.graphql", start_line=1, start_column=1, end_line=1, end_column=2)


def _field(
    *,
    generate: Projection | None = None,
    enclosing: Projection | None = None,
    resolved: bool = False,
    in_resolvers: bool = False,
) -> FieldDefinition:
    return FieldDefinition(
        name="f",
        type_ref=NamedTypeRef(name="Int", span=_SPAN),
        generate=GenerateDirective(target=generate, span=_SPAN) if generate else None,
        enclosing_generate=GenerateDirective(target=enclosing, span=_SPAN) if enclosing else None,
        resolve_span=_SPAN if resolved else None,
        resolvers_span=_SPAN if in_resolvers else None,
        span=_SPAN,
    )


def _classify(source: str) -> tuple[TypeGraph, list[Diagnostic]]:
    parsed = parse(source, "schema.graphql")
    assert parsed.diagnostics == [], parsed.diagnostics
    built = build_type_graph(parsed.value)
    assert built.diagnostics == [], built.diagnostics
    result = classify(built.value)
    return result.value, result.diagnostics


def _projections(graph: TypeGraph, type_name: str) -> dict[str, Projection]:
    type_def = graph.get(type_name)
    assert type_def is not None
    return {f.name: f.projection for f in type_def.classified_fields()}


# ###############
# Projection Precedence
# ###############


class TestClassifyField:
    def test_default_is_both(self) -> None:
        assert classify_field(_field()) is Projection.BOTH

    def test_resolve_defaults_to_graphql(self) -> None:
        assert classify_field(_field(resolved=True)) is Projection.GRAPHQL_ONLY

    def test_resolvers_declaration_defaults_to_graphql(self) -> None:
        assert classify_field(_field(in_resolvers=True)) is Projection.GRAPHQL_ONLY

    def test_enclosing_directive_beats_resolvers_default(self) -> None:
        assert classify_field(_field(enclosing=Projection.SERVER_ONLY, in_resolvers=True)) is Projection.SERVER_ONLY

    @pytest.mark.parametrize("target", list(Projection))
    def test_field_directive_wins(self, target: Projection) -> None:
        field = _field(generate=target, enclosing=Projection.SERVER_ONLY, resolved=True)
        assert classify_field(field) is target

    def test_enclosing_directive_beats_resolve_default(self) -> None:
        assert classify_field(_field(enclosing=Projection.BOTH, resolved=True)) is Projection.BOTH

    def test_projection_axes(self) -> None:
        assert (Projection.SERVER_ONLY.on_server, Projection.SERVER_ONLY.on_graphql) == (True, False)
        assert (Projection.GRAPHQL_ONLY.on_server, Projection.GRAPHQL_ONLY.on_graphql) == (False, True)
        assert (Projection.BOTH.on_server, Projection.BOTH.on_graphql) == (True, True)


# ###############
# Graph Classification
# ###############


class TestClassify:
    def test_plain_field_is_both(self) -> None:
        graph, diagnostics = _classify("type MyType { myField: String }")
        assert diagnostics == []
        assert _projections(graph, "MyType") == {"myField": Projection.BOTH}

    def test_resolved_field_is_graphql_only(self) -> None:
        graph, diagnostics = _classify(
            'type MyType @resolvers(file: "f.ts") { myResolvedField: String @resolve(function: "myResolvedField") }'
        )
        assert diagnostics == []
        my_type = graph.get("MyType")
        assert my_type is not None
        field = my_type.classified_fields()[0]
        assert field.projection is Projection.GRAPHQL_ONLY
        assert field.resolved
        assert not my_type.has_server_type
        assert my_type.server_fields() == []

    def test_graphql_only_without_resolve_is_an_error(self) -> None:
        graph, diagnostics = _classify("type MyType { myField: String @generate(for: GraphQL) }")
        assert len(diagnostics) == 1
        diag = diagnostics[0]
        assert diag.kind is DiagnosticKind.CLASSIFICATION
        assert diag.message == "GraphQL-only field 'MyType.myField' must be resolved with @resolve"
        assert diag.span.start_column == 15
        assert diag.type_name == "MyType"
        assert diag.related[0].note == "projection set by @generate here"
        assert "MyType" in graph

    def test_missing_resolve_inside_resolvers_declaration(self) -> None:
        _, diagnostics = _classify('type MyType @resolvers(file: "f.ts") { myResolvedField: String }')
        assert [d.message for d in diagnostics] == [
            "GraphQL-only field 'MyType.myResolvedField' must be resolved with @resolve"
        ]
        diag = diagnostics[0]
        assert diag.span.start_column == 40
        assert diag.related[0].note == "projection implied by @resolvers here"
        assert diag.related[0].span.start_column == 13

    def test_resolvers_default_stays_with_its_declaration(self) -> None:
        graph, diagnostics = _classify(
            "type User { id: ID! }\n"
            'extend type User @resolvers(file: "user.ts") { avatar: String @resolve(function: "avatar") }'
        )
        assert diagnostics == []
        assert _projections(graph, "User") == {"id": Projection.BOTH, "avatar": Projection.GRAPHQL_ONLY}

    def test_enclosing_generate_error_points_at_directive(self) -> None:
        _, diagnostics = _classify("type T @generate(for: GraphQL) { a: Int }")
        assert len(diagnostics) == 1
        assert diagnostics[0].related[0].span.start_column == 8

    def test_server_only_type(self) -> None:
        graph, diagnostics = _classify("type T @generate(for: Server) { a: Int, b: Int @generate(for: Both) }")
        assert diagnostics == []
        assert _projections(graph, "T") == {"a": Projection.SERVER_ONLY, "b": Projection.BOTH}

    def test_resolve_on_server_field_is_allowed(self) -> None:
        graph, diagnostics = _classify(
            'type T @resolvers(file: "t.ts") { a: Int @generate(for: Both) @resolve(function: "a") }'
        )
        assert diagnostics == []
        t = graph.get("T")
        assert t is not None
        field = t.classified_fields()[0]
        assert field.projection is Projection.BOTH
        assert field.resolved

    def test_extension_generate_applies_to_its_own_fields(self) -> None:
        graph, diagnostics = _classify("type T { a: Int }\nextend type T @generate(for: Server) { b: Int }")
        assert diagnostics == []
        assert _projections(graph, "T") == {"a": Projection.BOTH, "b": Projection.SERVER_ONLY}

    def test_server_interface_field_must_stay_on_the_server(self) -> None:
        _, diagnostics = _classify(
            "interface Named { name: String }\n"
            'type User implements Named @resolvers(file: "u.ts") { name: String @resolve(function: "name") }\n'
            "extend type User { id: ID! }"
        )
        assert [d.message for d in diagnostics] == [
            "Field 'User.name' is not generated on the server, but 'Named.name' is, "
            "and the server type of 'User' extends 'Named'"
        ]
        diag = diagnostics[0]
        assert diag.kind is DiagnosticKind.CLASSIFICATION
        assert diag.type_name == "User"
        assert (diag.span.start_line, diag.span.start_column) == (2, 55)
        assert diag.related[0].note == "'Named.name' declared here"
        assert (diag.related[0].span.start_line, diag.related[0].span.start_column) == (1, 19)

    def test_server_side_implementation_of_interface_field(self) -> None:
        graph, diagnostics = _classify(
            "interface Named { name: String }\n"
            'type User implements Named @resolvers(file: "u.ts") {\n'
            '  name: String @generate(for: Both) @resolve(function: "name")\n'
            "}"
        )
        assert diagnostics == []
        assert _projections(graph, "User") == {"name": Projection.BOTH}

    def test_graphql_only_interface_field_may_be_resolved(self) -> None:
        _, diagnostics = _classify(
            'interface Computed @resolvers(file: "c.ts") { score: Int @resolve(function: "score") }\n'
            "type Item implements Computed { id: ID! }\n"
            'extend type Item @resolvers(file: "i.ts") { score: Int @resolve(function: "score") }'
        )
        assert diagnostics == []

    def test_enums_pass_through(self) -> None:
        graph, diagnostics = _classify("enum E { A B }")
        assert diagnostics == []
        e = graph.get("E")
        assert e is not None
        assert [v.name for v in e.values] == ["A", "B"]
        assert e.has_server_type

    def test_input_graph_is_not_modified(self) -> None:
        parsed = parse("type T { a: Int }", "schema.graphql")
        graph = build_type_graph(parsed.value).value
        classify(graph)
        t = graph.get("T")
        assert t is not None
        with pytest.raises(TypeError, match="has not been classified"):
            t.classified_fields()
