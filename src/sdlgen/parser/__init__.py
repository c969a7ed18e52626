# Copyright 2026 sdlgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Lexical scanning of GraphQL SDL files."""

from sdlgen.parser.lexer import KEYWORDS, Token, TokenType, dedent_block_string, tokenize

__all__ = [
    "KEYWORDS",
    "Token",
    "TokenType",
    "dedent_block_string",
    "tokenize",
]
