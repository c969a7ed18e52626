# Copyright 2026 sdlgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Unit tests for the whole-schema consistency checks."""

from pathlib import Path

from sdlgen.compiler.classifier import classify
from sdlgen.compiler.diagnostics import DiagnosticKind, Severity
from sdlgen.compiler.parser import parse
from sdlgen.compiler.type_graph import build_type_graph
from sdlgen.model.graph import TypeGraph
from sdlgen.validation.checks import ValidationResult, validate

# ###############
# Test Helpers
# ###############


def _graph(source: str, file: str = "schema.graphql", *, clean: bool = True) -> TypeGraph:
    staged = parse(source, file).then(build_type_graph).then(classify)
    if clean:
        assert staged.diagnostics == [], staged.diagnostics
    return staged.value


def _warnings(result: ValidationResult) -> list[str]:
    return [w.message for w in result.warnings]


def _errors(result: ValidationResult) -> list[str]:
    return [e.message for e in result.errors]


def _assert_clean(source: str) -> None:
    result = validate(_graph(source))
    assert result.warnings == []
    assert result.errors == []


# ###############
# Dead Types
# ###############


class TestDeadTypes:
    def test_type_with_server_fields(self) -> None:
        _assert_clean("type User { id: ID! }")

    def test_type_with_resolver_binding(self) -> None:
        _assert_clean('type Query @resolvers(file: "q.ts") { me: String @resolve(function: "me") }')

    def test_graphql_only_without_binding(self) -> None:
        # The missing @resolve is a classification error; the advisory comes on top.
        result = validate(_graph("type Ghost @generate(for: GraphQL) { id: ID }", clean=False))
        assert _warnings(result) == ["Type 'Ghost' has no server-side fields and no resolver binding"]
        warning = result.warnings[0]
        assert warning.severity is Severity.WARNING
        assert warning.type_name == "Ghost"
        assert warning.span.start_column == 6

    def test_enums_are_never_dead(self) -> None:
        _assert_clean("enum Role { ADMIN }")


# ###############
# Resolver Bindings
# ###############


class TestResolverBindings:
    def test_unused_binding(self) -> None:
        result = validate(_graph('type T @resolvers(file: "t.ts") { a: Int @generate(for: Both) }'))
        assert _warnings(result) == ["Resolver module 't.ts' of 'T' is not used by any @resolve field"]
        assert result.warnings[0].span.start_column == 8

    def test_only_the_unused_module_is_reported(self) -> None:
        source = (
            'type T @resolvers(file: "used.ts") { a: Int @resolve(function: "a") }\n'
            'extend type T @resolvers(file: "idle.ts") { b: Int @generate(for: Both) }'
        )
        assert _warnings(validate(_graph(source))) == [
            "Resolver module 'idle.ts' of 'T' is not used by any @resolve field"
        ]

    def test_filesystem_is_not_consulted_by_default(self) -> None:
        _assert_clean('type T @resolvers(file: "missing.ts") { a: Int @resolve(function: "a") }')

    def test_missing_module(self, tmp_path: Path) -> None:
        graph = _graph('type T @resolvers(file: "../src/t.ts") { a: Int @resolve(function: "a") }', "schema/t.graphql")
        result = validate(graph, resolver_root=tmp_path)
        assert _warnings(result) == ["Resolver module '../src/t.ts' of 'T' does not exist (expected 'src/t.ts')"]

    def test_existing_module(self, tmp_path: Path) -> None:
        (tmp_path / "src").mkdir()
        (tmp_path / "src" / "t.ts").write_text("export function a() { return 1; }\n", encoding="utf-8")
        graph = _graph('type T @resolvers(file: "../src/t.ts") { a: Int @resolve(function: "a") }', "schema/t.graphql")
        assert validate(graph, resolver_root=tmp_path).warnings == []

    def test_function_bound_to_two_fields(self) -> None:
        source = 'type T @resolvers(file: "t.ts") { a: String @resolve(function: "f"), b: Int @resolve(function: "f") }'
        result = validate(_graph(source))
        assert _warnings(result) == ["Field 'T.b' is resolved by 'f', which already resolves 'T.a'"]
        warning = result.warnings[0]
        assert warning.span.start_column == 77
        assert warning.related[0].span.start_column == 45
        assert warning.related[0].note == "'f' first bound here"

    def test_same_function_name_in_different_modules(self) -> None:
        _assert_clean(
            'type T @resolvers(file: "a.ts") { a: Int @resolve(function: "f") }\n'
            'extend type T @resolvers(file: "b.ts") { b: Int @resolve(function: "f") }'
        )


# ###############
# Interface Cycles
# ###############


class TestInterfaceCycles:
    def test_two_interfaces(self) -> None:
        source = "interface A implements B { id: ID! }\ninterface B implements A { id: ID! }"
        result = validate(_graph(source))
        assert _errors(result) == [
            "Interface 'A' takes part in an implementation cycle: A -> B -> A",
            "Interface 'B' takes part in an implementation cycle: A -> B -> A",
        ]
        first = result.errors[0]
        assert first.kind is DiagnosticKind.REFERENCE
        assert first.type_name == "A"
        assert first.span.start_line == 1
        assert first.span.start_column == 24
        assert first.related[0].note == "'A' defined here"

    def test_chain_is_not_a_cycle(self) -> None:
        source = "interface A { id: ID! }\ninterface B implements A { id: ID! }\ntype T implements B & A { id: ID! }"
        assert validate(_graph(source)).errors == []

    def test_disjoint_cycles(self) -> None:
        source = (
            "interface A implements B { id: ID! }\n"
            "interface B implements A { id: ID! }\n"
            "interface C implements D { id: ID! }\n"
            "interface D implements C { id: ID! }"
        )
        result = validate(_graph(source))
        assert [e.type_name for e in result.errors] == ["A", "B", "C", "D"]
        assert result.has_errors


class TestValidationResult:
    def test_diagnostics_lists_errors_first(self) -> None:
        source = (
            "interface A implements B { id: ID! }\n"
            "interface B implements A { id: ID! }\n"
            'type T @resolvers(file: "t.ts") { a: Int @generate(for: Both) }'
        )
        result = validate(_graph(source))
        assert [d.severity for d in result.diagnostics] == [Severity.ERROR, Severity.ERROR, Severity.WARNING]

    def test_empty(self) -> None:
        result = ValidationResult()
        assert not result.has_errors
        assert result.diagnostics == []
