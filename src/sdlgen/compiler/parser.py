# Copyright 2026 sdlgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Recursive-descent parser for GraphQL SDL files.

Converts a token stream produced by the lexer into an ordered list of
declarations. A syntax error aborts only the declaration it occurs in: the
parser records a diagnostic, skips to the next top-level declaration and
carries on. Directives are validated against a fixed table of known
directives, their allowed locations and their argument schemas.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum

from sdlgen.compiler.diagnostics import Diagnostic, DiagnosticKind, RelatedSpan, StageResult
from sdlgen.model.declarations import (
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
    TypeRef,
    ValueKind,
)
from sdlgen.model.source import SourceSpan
from sdlgen.parser.lexer import Token, TokenType, tokenize

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


class ParseError(Exception):
    """Raised inside the parser when a declaration is syntactically invalid.

    Never escapes :func:`parse`; it is converted into a syntax diagnostic.

    Attributes:
        span: Location of the offending token.
        line: 1-based line number of the error.
        column: 1-based column number of the error.
    """

    def __init__(self, message: str, span: SourceSpan) -> None:
        super().__init__(f"Line {span.start_line}, column {span.start_column}: {message}")
        self.message = message
        self.span = span
        self.line = span.start_line
        self.column = span.start_column


def parse(source: str, file: str = "<string>") -> StageResult[list[Declaration]]:
    """Parse SDL source text into declarations.

    Args:
        source: The full text of a ``.graphql`` file.
        file: Path used in the spans of all produced nodes and diagnostics.

    Returns:
        The declarations that parsed successfully, in source order, together
        with syntax and directive diagnostics.
    """
    tokens = tokenize(source)
    result = _Parser(tokens, file).parse()
    logger.debug("Parsed %s: %d declaration(s), %d diagnostic(s)", file, len(result.value), len(result.diagnostics))
    return result


# ################
# Implementation
# ################

_NAME_TOKEN_TYPES: frozenset[TokenType] = frozenset(
    {
        TokenType.NAME,
        TokenType.TYPE,
        TokenType.ENUM,
        TokenType.INTERFACE,
        TokenType.EXTEND,
        TokenType.IMPLEMENTS,
        TokenType.SCALAR,
        TokenType.UNION,
        TokenType.INPUT,
        TokenType.DIRECTIVE,
        TokenType.SCHEMA,
        TokenType.TRUE,
        TokenType.FALSE,
        TokenType.NULL,
    }
)

_DEFINITION_KEYWORDS: frozenset[TokenType] = frozenset(
    {
        TokenType.TYPE,
        TokenType.ENUM,
        TokenType.INTERFACE,
        TokenType.EXTEND,
        TokenType.SCALAR,
        TokenType.UNION,
        TokenType.INPUT,
        TokenType.DIRECTIVE,
        TokenType.SCHEMA,
    }
)

_UNSUPPORTED_DEFINITIONS: frozenset[TokenType] = frozenset(
    {
        TokenType.SCALAR,
        TokenType.UNION,
        TokenType.INPUT,
        TokenType.DIRECTIVE,
        TokenType.SCHEMA,
    }
)

_STRING_TOKENS: frozenset[TokenType] = frozenset({TokenType.STRING, TokenType.BLOCK_STRING})

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")


class _Location(Enum):
    """Places a directive may be applied to."""

    ENUM = "enum definitions"
    ENUM_VALUE = "enum values"
    OBJECT = "object types"
    INTERFACE = "interfaces"
    FIELD = "field definitions"
    ARGUMENT = "argument definitions"


@dataclass(frozen=True)
class _ArgumentSpec:
    kind: ValueKind
    required: bool
    label: str


@dataclass(frozen=True)
class _DirectiveSpec:
    locations: frozenset[_Location]
    arguments: dict[str, _ArgumentSpec] = field(default_factory=dict)


_DIRECTIVES: dict[str, _DirectiveSpec] = {
    "server": _DirectiveSpec(
        frozenset({_Location.ENUM_VALUE}),
        {"value": _ArgumentSpec(ValueKind.STRING, True, "a String")},
    ),
    "generate": _DirectiveSpec(
        frozenset({_Location.OBJECT, _Location.INTERFACE, _Location.FIELD}),
        {"for": _ArgumentSpec(ValueKind.ENUM, True, "one of Server, GraphQL, Both")},
    ),
    "resolvers": _DirectiveSpec(
        frozenset({_Location.OBJECT, _Location.INTERFACE}),
        {"file": _ArgumentSpec(ValueKind.STRING, True, "a String")},
    ),
    "resolve": _DirectiveSpec(
        frozenset({_Location.FIELD}),
        {"function": _ArgumentSpec(ValueKind.STRING, True, "a String")},
    ),
    "deprecated": _DirectiveSpec(
        frozenset({_Location.FIELD, _Location.ENUM_VALUE}),
        {"reason": _ArgumentSpec(ValueKind.STRING, False, "a String")},
    ),
}


class _Parser:
    """Recursive-descent parser for SDL token streams."""

    def __init__(self, tokens: list[Token], file: str) -> None:
        self._tokens = tokens
        self._file = file
        self._pos = 0
        self._diagnostics: list[Diagnostic] = []
        # Name of the declaration being parsed; attached to its diagnostics.
        self._decl_name: str | None = None

    def parse(self) -> StageResult[list[Declaration]]:
        """Parse the full token stream, recovering from syntax errors."""
        declarations: list[Declaration] = []
        while not self._at_end():
            start = self._pos
            self._decl_name = None
            try:
                declarations.append(self._parse_definition())
            except ParseError as exc:
                self._diagnostics.append(
                    Diagnostic.error(DiagnosticKind.SYNTAX, exc.message, exc.span, type_name=self._decl_name)
                )
                self._synchronize(start)
        return StageResult(declarations, self._diagnostics)

    # ------------------------------------------------------------------
    # Token access helpers
    # ------------------------------------------------------------------

    def _current(self) -> Token:
        """Return the current (un-consumed) token."""
        return self._tokens[self._pos]

    def _previous(self) -> Token:
        """Return the most recently consumed token."""
        return self._tokens[max(self._pos - 1, 0)]

    def _peek_type(self, offset: int = 0) -> TokenType:
        index = min(self._pos + offset, len(self._tokens) - 1)
        return self._tokens[index].type

    def _at_end(self) -> bool:
        """Return True if the current token is the EOF token."""
        return self._peek_type() == TokenType.EOF

    def _advance(self) -> Token:
        """Consume and return the current token, stopping at EOF."""
        tok = self._tokens[self._pos]
        if self._pos < len(self._tokens) - 1:
            self._pos += 1
        return tok

    def _check(self, *types: TokenType) -> bool:
        """Return True if the current token matches any of the given types (without
        consuming).
        """
        return self._peek_type() in types

    def _expect(self, *types: TokenType) -> Token:
        """Consume the current token if it matches any of the given types.

        Raises ParseError if the current token does not match.
        """
        tok = self._current()
        if tok.type not in types:
            expected = ", ".join(repr(t.value) for t in types)
            raise self._unexpected(tok, f"Expected {expected}")
        return self._advance()

    def _expect_name(self) -> Token:
        """Consume the current token as a name.

        GraphQL keywords are contextual, so keywords are accepted in name
        positions (e.g. a field named ``type``).
        """
        tok = self._current()
        if tok.type not in _NAME_TOKEN_TYPES:
            raise self._unexpected(tok, "Expected a name")
        return self._advance()

    def _unexpected(self, tok: Token, expectation: str) -> ParseError:
        if tok.type == TokenType.INVALID:
            return ParseError(tok.message or "Invalid token", self._span(tok))
        found = "end of file" if tok.type == TokenType.EOF else repr(tok.value)
        return ParseError(f"{expectation}, got {found}", self._span(tok))

    # ------------------------------------------------------------------
    # Spans
    # ------------------------------------------------------------------

    def _span(self, tok: Token) -> SourceSpan:
        return SourceSpan(
            file=self._file,
            start_line=tok.line,
            start_column=tok.column,
            end_line=tok.end_line,
            end_column=tok.end_column,
        )

    def _span_from(self, start: Token) -> SourceSpan:
        """Span from *start* through the most recently consumed token."""
        return self._span(start).to(self._span(self._previous()))

    # ------------------------------------------------------------------
    # Error recovery
    # ------------------------------------------------------------------

    def _synchronize(self, start: int) -> None:
        """Skip ahead to the next top-level declaration after a syntax error.

        A declaration boundary is a definition keyword (optionally preceded by
        its description) found either at brace depth zero relative to the
        failed declaration, or in column 1 at or just before the point of
        failure (a keyword read as a field name fails on the next token). The
        search starts after the failed declaration's own keyword so that the
        parser always makes progress.
        """
        error_pos = self._pos
        index = start
        while self._tokens[index].type in _STRING_TOKENS:
            index += 1
        if self._tokens[index].type == TokenType.EXTEND:
            index += 1
        index += 1
        depth = 0
        while index < len(self._tokens) - 1:
            tok = self._tokens[index]
            if tok.type in (TokenType.LBRACE, TokenType.LPAREN, TokenType.LBRACKET):
                depth += 1
            elif tok.type in (TokenType.RBRACE, TokenType.RPAREN, TokenType.RBRACKET):
                depth = max(0, depth - 1)
            elif tok.type in _DEFINITION_KEYWORDS and self._tokens[index - 1].type != TokenType.EXTEND:
                if depth == 0 or (tok.column == 1 and index >= error_pos - 1):
                    if self._tokens[index - 1].type in _STRING_TOKENS and index - 1 > start:
                        index -= 1
                    break
            index += 1
        self._pos = min(index, len(self._tokens) - 1)

    # ------------------------------------------------------------------
    # Top-level declarations
    # ------------------------------------------------------------------

    def _parse_definition(self) -> Declaration:
        """Parse one top-level declaration."""
        start = self._current()
        description = self._parse_description()
        tok = self._current()
        if tok.type == TokenType.TYPE:
            self._advance()
            return self._parse_composite(start, description, ObjectTypeDecl, _Location.OBJECT)
        if tok.type == TokenType.INTERFACE:
            self._advance()
            return self._parse_composite(start, description, InterfaceDecl, _Location.INTERFACE)
        if tok.type == TokenType.ENUM:
            self._advance()
            return self._parse_enum(start, description, EnumDecl)
        if tok.type == TokenType.EXTEND:
            self._advance()
            inner = self._current()
            if inner.type == TokenType.TYPE:
                self._advance()
                return self._parse_composite(start, description, ObjectTypeExtension, _Location.OBJECT)
            if inner.type == TokenType.INTERFACE:
                self._advance()
                return self._parse_composite(start, description, InterfaceExtension, _Location.INTERFACE)
            if inner.type == TokenType.ENUM:
                self._advance()
                return self._parse_enum(start, description, EnumExtension)
            raise self._unexpected(inner, "Expected 'type', 'interface' or 'enum' after 'extend'")
        if tok.type in _UNSUPPORTED_DEFINITIONS:
            raise ParseError(f"'{tok.value}' definitions are not supported", self._span(tok))
        raise self._unexpected(tok, "Expected a type, interface or enum definition")

    def _parse_description(self) -> str | None:
        if self._check(*_STRING_TOKENS):
            return self._advance().value
        return None

    # ------------------------------------------------------------------
    # Object types and interfaces
    # ------------------------------------------------------------------

    def _parse_composite(
        self,
        start: Token,
        description: str | None,
        decl_type: type[ObjectTypeDecl] | type[InterfaceDecl],
        location: _Location,
    ) -> ObjectTypeDecl | InterfaceDecl:
        """Parse: Name [implements A & B] @directives* [{ field* }]"""
        name_tok = self._expect_name()
        self._decl_name = name_tok.value
        interfaces: list[NamedTypeRef] = []
        if self._check(TokenType.IMPLEMENTS):
            interfaces = self._parse_implements()
        directives = self._parse_directives(location)
        fields: list[FieldDecl] = []
        if self._check(TokenType.LBRACE):
            self._advance()  # consume {
            if self._check(TokenType.RBRACE):
                raise ParseError("Expected at least one field definition", self._span(self._current()))
            while not self._check(TokenType.RBRACE):
                fields.append(self._parse_field())
            self._expect(TokenType.RBRACE)
        return decl_type(
            name=name_tok.value,
            description=description,
            interfaces=interfaces,
            directives=directives,
            fields=fields,
            span=self._span_from(start),
            name_span=self._span(name_tok),
        )

    def _parse_implements(self) -> list[NamedTypeRef]:
        """Parse: implements [&] Name (& Name)*"""
        self._expect(TokenType.IMPLEMENTS)
        if self._check(TokenType.AMP):
            self._advance()
        names = [self._parse_named_type()]
        while self._check(TokenType.AMP):
            self._advance()
            names.append(self._parse_named_type())
        return names

    def _parse_named_type(self) -> NamedTypeRef:
        tok = self._expect_name()
        return NamedTypeRef(name=tok.value, span=self._span(tok))

    def _parse_field(self) -> FieldDecl:
        """Parse: [description] name [(arguments)] : Type @directives*"""
        start = self._current()
        description = self._parse_description()
        name_tok = self._expect_name()
        arguments: list[InputValueDecl] = []
        if self._check(TokenType.LPAREN):
            arguments = self._parse_arguments_definition()
        self._expect(TokenType.COLON)
        type_ref = self._parse_type_ref()
        directives = self._parse_directives(_Location.FIELD)
        return FieldDecl(
            name=name_tok.value,
            type_ref=type_ref,
            arguments=arguments,
            description=description,
            directives=directives,
            span=self._span_from(start),
        )

    def _parse_arguments_definition(self) -> list[InputValueDecl]:
        """Parse: ( inputValue+ )"""
        self._expect(TokenType.LPAREN)
        if self._check(TokenType.RPAREN):
            raise ParseError("Expected at least one argument definition", self._span(self._current()))
        arguments: list[InputValueDecl] = []
        while not self._check(TokenType.RPAREN):
            start = self._current()
            description = self._parse_description()
            name_tok = self._expect_name()
            self._expect(TokenType.COLON)
            type_ref = self._parse_type_ref()
            default_value: ConstValue | None = None
            if self._check(TokenType.EQUALS):
                self._advance()
                default_value = self._parse_const_value()
            # No directive is allowed here; parsing reports each one.
            self._parse_directives(_Location.ARGUMENT)
            arguments.append(
                InputValueDecl(
                    name=name_tok.value,
                    type_ref=type_ref,
                    default_value=default_value,
                    description=description,
                    span=self._span_from(start),
                )
            )
        self._expect(TokenType.RPAREN)
        return arguments

    # ------------------------------------------------------------------
    # Enums
    # ------------------------------------------------------------------

    def _parse_enum(self, start: Token, description: str | None, decl_type: type[EnumDecl]) -> EnumDecl:
        """Parse: Name @directives* [{ value* }]"""
        name_tok = self._expect_name()
        self._decl_name = name_tok.value
        directives = self._parse_directives(_Location.ENUM)
        values: list[EnumValueDecl] = []
        if self._check(TokenType.LBRACE):
            self._advance()  # consume {
            if self._check(TokenType.RBRACE):
                raise ParseError("Expected at least one enum value", self._span(self._current()))
            while not self._check(TokenType.RBRACE):
                values.append(self._parse_enum_value())
            self._expect(TokenType.RBRACE)
        return decl_type(
            name=name_tok.value,
            description=description,
            directives=directives,
            values=values,
            span=self._span_from(start),
            name_span=self._span(name_tok),
        )

    def _parse_enum_value(self) -> EnumValueDecl:
        """Parse: [description] NAME @directives*"""
        start = self._current()
        description = self._parse_description()
        tok = self._current()
        if tok.type in (TokenType.TRUE, TokenType.FALSE, TokenType.NULL):
            raise ParseError(f"'{tok.value}' cannot be used as an enum value", self._span(tok))
        name_tok = self._expect_name()
        directives = self._parse_directives(_Location.ENUM_VALUE)
        return EnumValueDecl(
            name=name_tok.value,
            description=description,
            directives=directives,
            span=self._span_from(start),
        )

    # ------------------------------------------------------------------
    # Type references
    # ------------------------------------------------------------------

    def _parse_type_ref(self) -> TypeRef:
        """Parse: Name | [Type] followed by an optional '!'."""
        start = self._current()
        type_ref: TypeRef
        if self._check(TokenType.LBRACKET):
            self._advance()  # consume [
            inner = self._parse_type_ref()
            self._expect(TokenType.RBRACKET)
            type_ref = ListTypeRef(of_type=inner, span=self._span_from(start))
        else:
            type_ref = self._parse_named_type()
        if self._check(TokenType.BANG):
            self._advance()
            type_ref = NonNullTypeRef(of_type=type_ref, span=self._span_from(start))
        return type_ref

    # ------------------------------------------------------------------
    # Constant values
    # ------------------------------------------------------------------

    def _parse_const_value(self) -> ConstValue:
        tok = self._current()
        if tok.type in _STRING_TOKENS:
            self._advance()
            return ConstValue(kind=ValueKind.STRING, text=tok.value, span=self._span(tok))
        if tok.type == TokenType.INT:
            self._advance()
            return ConstValue(kind=ValueKind.INT, text=tok.value, span=self._span(tok))
        if tok.type == TokenType.FLOAT:
            self._advance()
            return ConstValue(kind=ValueKind.FLOAT, text=tok.value, span=self._span(tok))
        if tok.type in (TokenType.TRUE, TokenType.FALSE):
            self._advance()
            return ConstValue(kind=ValueKind.BOOLEAN, text=tok.value, span=self._span(tok))
        if tok.type == TokenType.NULL:
            self._advance()
            return ConstValue(kind=ValueKind.NULL, text=tok.value, span=self._span(tok))
        if tok.type == TokenType.LBRACKET:
            self._advance()
            items: list[ConstValue] = []
            while not self._check(TokenType.RBRACKET):
                items.append(self._parse_const_value())
            self._expect(TokenType.RBRACKET)
            return ConstValue(kind=ValueKind.LIST, items=items, span=self._span_from(tok))
        if tok.type == TokenType.LBRACE:
            self._advance()
            entries: list[ObjectValueField] = []
            while not self._check(TokenType.RBRACE):
                field_name = self._expect_name()
                self._expect(TokenType.COLON)
                entries.append(ObjectValueField(name=field_name.value, value=self._parse_const_value()))
            self._expect(TokenType.RBRACE)
            return ConstValue(kind=ValueKind.OBJECT, fields=entries, span=self._span_from(tok))
        if tok.type in _NAME_TOKEN_TYPES:
            self._advance()
            return ConstValue(kind=ValueKind.ENUM, text=tok.value, span=self._span(tok))
        raise self._unexpected(tok, "Expected a constant value")

    # ------------------------------------------------------------------
    # Directives
    # ------------------------------------------------------------------

    def _parse_directives(self, location: _Location) -> list[DirectiveApplication]:
        """Parse a run of directive applications.

        Unknown, misplaced, repeated or malformed directives are reported as
        directive diagnostics and dropped; they do not abort the declaration.
        """
        directives: list[DirectiveApplication] = []
        seen: dict[str, SourceSpan] = {}
        while self._check(TokenType.AT):
            directive = self._parse_directive(location)
            if directive is None:
                continue
            if directive.name in seen:
                self._directive_error(
                    f"Directive '@{directive.name}' may not be repeated",
                    directive.span,
                    related=[RelatedSpan(span=seen[directive.name], note="first applied here")],
                )
                continue
            seen[directive.name] = directive.span
            directives.append(directive)
        return directives

    def _parse_directive(self, location: _Location) -> DirectiveApplication | None:
        """Parse: @name [(arg: value, ...)] and validate it structurally."""
        start = self._expect(TokenType.AT)
        name_tok = self._expect_name()
        arguments: list[tuple[Token, ConstValue]] = []
        if self._check(TokenType.LPAREN):
            self._advance()  # consume (
            if self._check(TokenType.RPAREN):
                raise ParseError("Expected at least one directive argument", self._span(self._current()))
            while not self._check(TokenType.RPAREN):
                arg_name = self._expect_name()
                self._expect(TokenType.COLON)
                arguments.append((arg_name, self._parse_const_value()))
            self._expect(TokenType.RPAREN)
        span = self._span_from(start)
        name = name_tok.value

        spec = _DIRECTIVES.get(name)
        if spec is None:
            self._directive_error(f"Unknown directive '@{name}'", span)
            return None
        if location not in spec.locations:
            self._directive_error(f"Directive '@{name}' is not allowed on {location.value}", span)
            return None

        values: dict[str, ConstValue] = {}
        valid = True
        for arg_tok, value in arguments:
            arg_spec = spec.arguments.get(arg_tok.value)
            if arg_spec is None:
                self._directive_error(
                    f"Unknown argument '{arg_tok.value}' for directive '@{name}'", self._span(arg_tok)
                )
                valid = False
            elif arg_tok.value in values:
                self._directive_error(
                    f"Argument '{arg_tok.value}' of '@{name}' is given more than once", self._span(arg_tok)
                )
                valid = False
            elif value.kind != arg_spec.kind:
                self._directive_error(
                    f"Argument '{arg_tok.value}' of '@{name}' must be {arg_spec.label}", value.span
                )
                valid = False
            else:
                values[arg_tok.value] = value
        for arg_name, arg_spec in spec.arguments.items():
            if arg_spec.required and arg_name not in values and not any(t.value == arg_name for t, _ in arguments):
                self._directive_error(f"Directive '@{name}' requires argument '{arg_name}'", span)
                valid = False
        if not valid:
            return None
        return self._build_directive(name, values, span)

    def _build_directive(
        self, name: str, values: dict[str, ConstValue], span: SourceSpan
    ) -> DirectiveApplication | None:
        if name == "server":
            return ServerDirective(value=values["value"].text, span=span)
        if name == "generate":
            target = values["for"]
            try:
                projection = Projection(target.text)
            except ValueError:
                self._directive_error(
                    f"Argument 'for' of '@generate' must be one of Server, GraphQL, Both, got '{target.text}'",
                    target.span,
                )
                return None
            return GenerateDirective(target=projection, span=span)
        if name == "resolvers":
            file_value = values["file"]
            if not file_value.text.strip():
                self._directive_error("Argument 'file' of '@resolvers' must not be empty", file_value.span)
                return None
            return ResolversDirective(file=file_value.text, span=span)
        if name == "resolve":
            function = values["function"]
            if not _IDENTIFIER_RE.match(function.text):
                self._directive_error(
                    f"Argument 'function' of '@resolve' must be an identifier, got {function.text!r}",
                    function.span,
                )
                return None
            return ResolveDirective(function=function.text, span=span)
        reason = values.get("reason")
        return DeprecatedDirective(reason=reason.text if reason is not None else None, span=span)

    def _directive_error(self, message: str, span: SourceSpan, *, related: list[RelatedSpan] | None = None) -> None:
        self._diagnostics.append(
            Diagnostic.error(
                DiagnosticKind.DIRECTIVE,
                message,
                span,
                related=related or [],
                type_name=self._decl_name,
            )
        )
