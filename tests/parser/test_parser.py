# Copyright 2026 sdlgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the SDL recursive-descent parser."""

import pytest

from sdlgen.compiler.diagnostics import Diagnostic, DiagnosticKind
from sdlgen.compiler.parser import ParseError, parse
from sdlgen.model.declarations import (
    Declaration,
    DeprecatedDirective,
    EnumDecl,
    EnumExtension,
    GenerateDirective,
    InterfaceDecl,
    InterfaceExtension,
    ListTypeRef,
    NamedTypeRef,
    NonNullTypeRef,
    ObjectTypeDecl,
    ObjectTypeExtension,
    Projection,
    ResolveDirective,
    ResolversDirective,
    ValueKind,
    format_type_ref,
)
from sdlgen.model.source import SourceSpan

# ###############
# Test Helpers
# ###############


def _parse(source: str) -> list[Declaration]:
    """Parse a source string that is expected to be free of diagnostics."""
    result = parse(source, "schema.graphql")
    assert result.diagnostics == [], result.diagnostics
    return result.value


def _parse_one(source: str) -> Declaration:
    decls = _parse(source)
    assert len(decls) == 1
    return decls[0]


def _diagnostics(source: str) -> list[Diagnostic]:
    return parse(source, "schema.graphql").diagnostics


def _messages(source: str) -> list[str]:
    return [d.message for d in _diagnostics(source)]


# ###############
# Empty Input
# ###############


class TestEmptyInput:
    def test_empty_string(self) -> None:
        assert _parse("") == []

    def test_comments_and_whitespace_only(self) -> None:
        assert _parse("# nothing here\n\n   # still nothing\n") == []


# ###############
# Object Types and Interfaces
# ###############


class TestObjectTypes:
    def test_minimal_type(self) -> None:
        decl = _parse_one("type MyType { myField: String }")
        assert isinstance(decl, ObjectTypeDecl)
        assert decl.name == "MyType"
        assert [f.name for f in decl.fields] == ["myField"]
        assert decl.fields[0].type_ref == NamedTypeRef(
            name="String",
            span=SourceSpan(file="schema.graphql", start_line=1, start_column=24, end_line=1, end_column=30),
        )

    def test_type_without_body(self) -> None:
        decl = _parse_one("type Marker")
        assert isinstance(decl, ObjectTypeDecl)
        assert decl.fields == []

    def test_descriptions(self) -> None:
        decl = _parse_one('"""A user."""\ntype User {\n  "The name."\n  name: String\n}')
        assert isinstance(decl, ObjectTypeDecl)
        assert decl.description == "A user."
        assert decl.fields[0].description == "The name."

    def test_spans(self) -> None:
        decl = _parse_one('"Doc"\ntype User {\n  name: String!\n}')
        assert decl.span == SourceSpan(file="schema.graphql", start_line=1, start_column=1, end_line=4, end_column=2)
        assert decl.name_span == SourceSpan(
            file="schema.graphql", start_line=2, start_column=6, end_line=2, end_column=10
        )
        field = decl.fields[0]  # type: ignore[union-attr]
        assert field.span == SourceSpan(file="schema.graphql", start_line=3, start_column=3, end_line=3, end_column=16)

    def test_implements(self) -> None:
        decl = _parse_one("type A implements & Node & Named { id: ID! }")
        assert isinstance(decl, ObjectTypeDecl)
        assert [i.name for i in decl.interfaces] == ["Node", "Named"]

    def test_keywords_as_field_names(self) -> None:
        decl = _parse_one("type A { type: String, input: Int, enum: Boolean }")
        assert [f.name for f in decl.fields] == ["type", "input", "enum"]  # type: ignore[union-attr]

    def test_interface(self) -> None:
        decl = _parse_one("interface Node implements Entity { id: ID! }")
        assert isinstance(decl, InterfaceDecl)
        assert decl.interfaces[0].name == "Entity"

    def test_extensions(self) -> None:
        decls = _parse("extend type A { b: Int }\nextend interface I { c: Int }\nextend enum E { X }")
        assert [type(d) for d in decls] == [ObjectTypeExtension, InterfaceExtension, EnumExtension]
        assert all(d.is_extension for d in decls)

    def test_extension_span_starts_at_extend(self) -> None:
        decl = _parse_one("extend type A { b: Int }")
        assert (decl.span.start_line, decl.span.start_column) == (1, 1)
        assert decl.name_span.start_column == 13


class TestArguments:
    def test_field_arguments(self) -> None:
        decl = _parse_one('type Q { users(first: Int = 10, "Sort order" order: Order = ASC): [User] }')
        args = decl.fields[0].arguments  # type: ignore[union-attr]
        assert [a.name for a in args] == ["first", "order"]
        assert args[0].default_value is not None
        assert args[0].default_value.kind is ValueKind.INT
        assert args[0].default_value.text == "10"
        assert args[1].description == "Sort order"
        assert args[1].default_value is not None
        assert args[1].default_value.kind is ValueKind.ENUM
        assert args[1].default_value.text == "ASC"

    @pytest.mark.parametrize(
        ("literal", "kind", "text"),
        [
            ('"x"', ValueKind.STRING, "x"),
            ("1.5", ValueKind.FLOAT, "1.5"),
            ("true", ValueKind.BOOLEAN, "true"),
            ("false", ValueKind.BOOLEAN, "false"),
            ("null", ValueKind.NULL, "null"),
        ],
    )
    def test_scalar_defaults(self, literal: str, kind: ValueKind, text: str) -> None:
        decl = _parse_one(f"type Q {{ f(a: String = {literal}): Int }}")
        default = decl.fields[0].arguments[0].default_value  # type: ignore[union-attr]
        assert default is not None
        assert default.kind is kind
        assert default.text == text

    def test_list_and_object_defaults(self) -> None:
        decl = _parse_one("type Q { f(a: [Int] = [1, 2], b: Int = {x: 1, y: [true]}): Int }")
        list_default, object_default = (a.default_value for a in decl.fields[0].arguments)  # type: ignore[union-attr]
        assert list_default is not None and object_default is not None
        assert list_default.kind is ValueKind.LIST
        assert [item.text for item in list_default.items] == ["1", "2"]
        assert object_default.kind is ValueKind.OBJECT
        assert [f.name for f in object_default.fields] == ["x", "y"]
        assert object_default.fields[1].value.items[0].kind is ValueKind.BOOLEAN

    def test_empty_argument_list_is_an_error(self) -> None:
        assert _messages("type Q { f(): Int }") == ["Expected at least one argument definition"]


class TestTypeReferences:
    @pytest.mark.parametrize("text", ["String", "String!", "[String]", "[String!]!", "[[Int]!]"])
    def test_round_trip(self, text: str) -> None:
        decl = _parse_one(f"type A {{ f: {text} }}")
        assert format_type_ref(decl.fields[0].type_ref) == text  # type: ignore[union-attr]

    def test_structure(self) -> None:
        decl = _parse_one("type A { f: [String!]! }")
        ref = decl.fields[0].type_ref  # type: ignore[union-attr]
        assert isinstance(ref, NonNullTypeRef)
        assert isinstance(ref.of_type, ListTypeRef)
        assert isinstance(ref.of_type.of_type, NonNullTypeRef)
        assert isinstance(ref.of_type.of_type.of_type, NamedTypeRef)
        assert (ref.span.start_column, ref.span.end_column) == (13, 23)


# ###############
# Enums
# ###############


class TestEnums:
    def test_plain_enum(self) -> None:
        decl = _parse_one("enum MyEnum { Value1 Value2 }")
        assert isinstance(decl, EnumDecl)
        assert [v.name for v in decl.values] == ["Value1", "Value2"]
        assert [v.internal_value for v in decl.values] == ["Value1", "Value2"]

    def test_server_values(self) -> None:
        decl = _parse_one('enum Role { ADMIN @server(value: "admin") USER }')
        assert isinstance(decl, EnumDecl)
        assert decl.values[0].server_value == "admin"
        assert decl.values[0].internal_value == "admin"
        assert decl.values[1].server_value is None

    def test_deprecated_value(self) -> None:
        decl = _parse_one('enum E { OLD @deprecated(reason: "Use NEW") NEW }')
        assert isinstance(decl, EnumDecl)
        deprecated = decl.values[0].deprecated
        assert isinstance(deprecated, DeprecatedDirective)
        assert deprecated.reason == "Use NEW"

    @pytest.mark.parametrize("name", ["true", "false", "null"])
    def test_reserved_value_names(self, name: str) -> None:
        diagnostics = _diagnostics(f"enum E {{ {name} }}")
        assert [d.message for d in diagnostics] == [f"'{name}' cannot be used as an enum value"]
        assert diagnostics[0].kind is DiagnosticKind.SYNTAX
        assert diagnostics[0].type_name == "E"

    def test_empty_enum_body_is_an_error(self) -> None:
        assert _messages("enum E { }") == ["Expected at least one enum value"]


# ###############
# Directives
# ###############


class TestDirectives:
    def test_project_directives(self) -> None:
        decl = _parse_one(
            'type A @generate(for: Server) @resolvers(file: "./a.ts") {\n'
            '  f: Int @generate(for: Both) @resolve(function: "getF")\n'
            "}"
        )
        assert isinstance(decl, ObjectTypeDecl)
        assert isinstance(decl.generate, GenerateDirective)
        assert decl.generate.target is Projection.SERVER_ONLY
        assert isinstance(decl.resolvers, ResolversDirective)
        assert decl.resolvers.file == "./a.ts"
        field = decl.fields[0]
        assert field.generate is not None and field.generate.target is Projection.BOTH
        assert isinstance(field.resolve, ResolveDirective)
        assert field.resolve.function == "getF"

    def test_directive_span(self) -> None:
        decl = _parse_one('type A { f: Int @resolve(function: "f") }')
        span = decl.fields[0].resolve.span  # type: ignore[union-attr]
        assert (span.start_column, span.end_column) == (17, 40)

    def test_deprecated_without_reason(self) -> None:
        decl = _parse_one("type A { f: Int @deprecated }")
        deprecated = decl.fields[0].deprecated  # type: ignore[union-attr]
        assert isinstance(deprecated, DeprecatedDirective)
        assert deprecated.reason is None

    def test_unknown_directive_is_dropped(self) -> None:
        result = parse("type A @cached { f: Int }", "schema.graphql")
        assert [d.message for d in result.diagnostics] == ["Unknown directive '@cached'"]
        assert result.diagnostics[0].kind is DiagnosticKind.DIRECTIVE
        assert result.diagnostics[0].type_name == "A"
        assert len(result.value) == 1
        assert result.value[0].directives == []

    @pytest.mark.parametrize(
        ("source", "message"),
        [
            ('type A @server(value: "x") { f: Int }', "Directive '@server' is not allowed on object types"),
            ('enum E @resolvers(file: "f.ts") { X }', "Directive '@resolvers' is not allowed on enum definitions"),
            ("enum E { X @generate(for: Both) }", "Directive '@generate' is not allowed on enum values"),
            ('type A { f(a: Int @deprecated): Int }', "Directive '@deprecated' is not allowed on argument definitions"),
            ('interface I { f: Int @server(value: "x") }', "Directive '@server' is not allowed on field definitions"),
        ],
    )
    def test_misplaced_directive(self, source: str, message: str) -> None:
        assert _messages(source) == [message]

    def test_repeated_directive(self) -> None:
        diagnostics = _diagnostics("type A { f: Int @deprecated @deprecated }")
        assert [d.message for d in diagnostics] == ["Directive '@deprecated' may not be repeated"]
        assert diagnostics[0].related[0].note == "first applied here"
        assert diagnostics[0].related[0].span.start_column == 17

    @pytest.mark.parametrize(
        ("source", "message"),
        [
            ("type A { f: Int @resolve }", "Directive '@resolve' requires argument 'function'"),
            ("type A { f: Int @resolve(function: 1) }", "Argument 'function' of '@resolve' must be a String"),
            (
                'type A { f: Int @resolve(function: "not valid") }',
                "Argument 'function' of '@resolve' must be an identifier, got 'not valid'",
            ),
            (
                'type A { f: Int @generate(for: "Server") }',
                "Argument 'for' of '@generate' must be one of Server, GraphQL, Both",
            ),
            (
                "type A { f: Int @generate(for: Everywhere) }",
                "Argument 'for' of '@generate' must be one of Server, GraphQL, Both, got 'Everywhere'",
            ),
            ('type A @resolvers(file: "  ") { f: Int }', "Argument 'file' of '@resolvers' must not be empty"),
            (
                'enum E { X @server(value: "a", value: "b") }',
                "Argument 'value' of '@server' is given more than once",
            ),
        ],
    )
    def test_invalid_arguments(self, source: str, message: str) -> None:
        assert _messages(source) == [message]

    def test_unknown_argument_also_misses_the_required_one(self) -> None:
        assert _messages('type A { f: Int @resolve(fn: "x") }') == [
            "Unknown argument 'fn' for directive '@resolve'",
            "Directive '@resolve' requires argument 'function'",
        ]

    def test_directive_errors_keep_the_declaration(self) -> None:
        result = parse("type A { f: Int @resolve(function: 1), g: String }", "schema.graphql")
        assert len(result.diagnostics) == 1
        assert [f.name for f in result.value[0].fields] == ["f", "g"]  # type: ignore[union-attr]
        assert result.value[0].fields[0].resolve is None  # type: ignore[union-attr]

    def test_empty_directive_arguments_is_a_syntax_error(self) -> None:
        diagnostics = _diagnostics("type A { f: Int @deprecated() }")
        assert [d.message for d in diagnostics] == ["Expected at least one directive argument"]
        assert diagnostics[0].kind is DiagnosticKind.SYNTAX


# ###############
# Syntax Errors
# ###############


class TestSyntaxErrors:
    @pytest.mark.parametrize("keyword", ["scalar", "union", "input", "directive", "schema"])
    def test_unsupported_definitions(self, keyword: str) -> None:
        diagnostics = _diagnostics(f"{keyword} Thing\ntype A {{ f: Int }}")
        assert [d.message for d in diagnostics] == [f"'{keyword}' definitions are not supported"]
        assert diagnostics[0].kind is DiagnosticKind.SYNTAX

    def test_unsupported_definition_does_not_hide_the_next_one(self) -> None:
        result = parse("union U = A | B\ntype A { f: Int }", "schema.graphql")
        assert [d.name for d in result.value] == ["A"]

    def test_empty_field_list(self) -> None:
        assert _messages("type A { }") == ["Expected at least one field definition"]

    def test_missing_colon(self) -> None:
        diagnostics = _diagnostics("type A { f Int }")
        assert [d.message for d in diagnostics] == ["Expected ':', got 'Int'"]
        assert diagnostics[0].span.start_column == 12
        assert diagnostics[0].type_name == "A"

    def test_unexpected_end_of_file(self) -> None:
        assert _messages("type A { f: Int") == ["Expected a name, got end of file"]

    def test_invalid_extend_target(self) -> None:
        assert _messages("extend scalar Date") == [
            "Expected 'type', 'interface' or 'enum' after 'extend', got 'scalar'"
        ]

    def test_stray_token(self) -> None:
        diagnostics = _diagnostics("Foo")
        assert [d.message for d in diagnostics] == ["Expected a type, interface or enum definition, got 'Foo'"]
        assert diagnostics[0].type_name is None

    def test_invalid_token_message_is_reported(self) -> None:
        assert _messages("type A { f: ? }") == ["Unexpected character '?'"]

    def test_unterminated_string_is_reported(self) -> None:
        assert _messages('type A { "oops\n f: Int }') == ["Unterminated string literal"]

    def test_parse_error_carries_position(self) -> None:
        span = SourceSpan(file="f", start_line=3, start_column=4, end_line=3, end_column=5)
        exc = ParseError("Bad", span)
        assert (exc.line, exc.column, exc.message) == (3, 4, "Bad")
        assert str(exc) == "Line 3, column 4: Bad"


class TestRecovery:
    def test_recovers_at_next_declaration(self) -> None:
        source = "type A {\n  f:\n}\n\ntype B {\n  g: Int\n}\n"
        result = parse(source, "schema.graphql")
        assert len(result.diagnostics) == 1
        assert [d.name for d in result.value] == ["B"]

    def test_recovers_after_missing_closing_brace(self) -> None:
        source = "type A {\n  f: Int\n\ntype B {\n  g: Int\n}\n"
        result = parse(source, "schema.graphql")
        assert len(result.diagnostics) == 1
        assert result.diagnostics[0].type_name == "A"
        assert [d.name for d in result.value] == ["B"]

    def test_keeps_description_of_next_declaration(self) -> None:
        source = 'type A { f: }\n"The B type."\ntype B { g: Int }\n'
        result = parse(source, "schema.graphql")
        assert [d.name for d in result.value] == ["B"]
        assert result.value[0].description == "The B type."

    def test_reports_independent_errors(self) -> None:
        source = "type A { f: }\ntype B { g Int }\nenum C { }\ntype D { ok: Int }\n"
        result = parse(source, "schema.graphql")
        assert [d.type_name for d in result.diagnostics] == ["A", "B", "C"]
        assert [d.name for d in result.value] == ["D"]

    def test_keywords_inside_object_values(self) -> None:
        source = "type A { f: Int @bad(x: {type: 1}) }\nextend type A { g: Int }\n"
        result = parse(source, "schema.graphql")
        assert [d.message for d in result.diagnostics] == ["Unknown directive '@bad'"]
        assert [type(d) for d in result.value] == [ObjectTypeDecl, ObjectTypeExtension]

    def test_diagnostics_carry_the_file(self) -> None:
        result = parse("type A { f: }", "dir/a.graphql")
        assert result.diagnostics[0].span.file == "dir/a.graphql"
