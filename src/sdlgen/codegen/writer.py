# Copyright 2026 sdlgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""TypeScript text helpers shared by the emitters.

Generated modules are assembled line by line in a :class:`SourceWriter`.
Imports are collected into an :class:`ImportBlock` while the body is written
and rendered in a fixed order afterwards, so output is byte-for-byte stable.
"""

from __future__ import annotations

import posixpath
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field

from pydantic import BaseModel, ConfigDict

# ###############
# Public Interface
# ###############

GENERATED_BANNER = "// This file is generated by sdlgen from GraphQL SDL sources. Do not edit."

SERVER_DIR = "server"
GRAPHQL_DIR = "graphql"
RESOLVERS_DIR = "resolvers"
INDEX_MODULE = "index"


class GeneratedFile(BaseModel):
    """One emitted output file.

    Attributes:
        path: POSIX path relative to the output directory.
        content: Full file text, ending with a newline.
        type_name: The type graph entry the file was generated from, or
            ``None`` for aggregate files such as index barrels.
    """

    model_config = ConfigDict(frozen=True)

    path: str
    content: str
    type_name: str | None = None


@dataclass(frozen=True)
class ContextType:
    """The type given to the ``context`` parameter of resolver functions.

    Attributes:
        name: Exported type name.
        module: Import specifier, as seen from the generated subdirectories.
    """

    name: str
    module: str


@dataclass(frozen=True)
class EmitOptions:
    """Options shared by all emitters.

    Attributes:
        output_directory: Output directory as a POSIX path relative to the
            same root as the schema source paths; used to compute import
            specifiers for resolver modules.
        context_type: Type of the resolver ``context`` parameter. When
            ``None`` the parameter is typed ``unknown``.
    """

    output_directory: str = "generated"
    context_type: ContextType | None = None


class SourceWriter:
    """Accumulates indented lines of TypeScript."""

    INDENT = "  "

    def __init__(self) -> None:
        self._lines: list[str] = []
        self._depth = 0

    def line(self, text: str = "") -> None:
        self._lines.append(f"{self.INDENT * self._depth}{text}" if text else "")

    def lines(self, texts: Iterable[str]) -> None:
        for text in texts:
            self.line(text)

    @contextmanager
    def indented(self) -> Iterator[None]:
        self._depth += 1
        try:
            yield
        finally:
            self._depth -= 1

    def doc_comment(self, description: str | None, tags: Iterable[str] = ()) -> None:
        """Write a JSDoc block for *description* and *tags*, if there is anything to say."""
        self.lines(doc_comment_lines(description, tags))

    def text(self) -> str:
        return "\n".join(self._lines).rstrip("\n") + "\n"


@dataclass
class ImportBlock:
    """Named imports grouped by module specifier.

    Library modules are rendered before relative ones; within each group
    modules and names are sorted. A module imported both for types and for
    values is rendered as a single value import.
    """

    _values: dict[str, set[str]] = field(default_factory=dict)
    _types: dict[str, set[str]] = field(default_factory=dict)
    _namespaces: dict[str, str] = field(default_factory=dict)

    def add(self, module: str, name: str) -> None:
        self._values.setdefault(module, set()).add(name)

    def add_type(self, module: str, name: str) -> None:
        self._types.setdefault(module, set()).add(name)

    def add_namespace(self, module: str, alias: str) -> None:
        self._namespaces[module] = alias

    def render(self) -> list[str]:
        result: list[str] = []
        for module in sorted(set(self._values) | set(self._types) | set(self._namespaces), key=_module_sort_key):
            if module in self._namespaces:
                result.append(f"import * as {self._namespaces[module]} from {ts_string(module)};")
            values = self._values.get(module, set())
            types = self._types.get(module, set()) - values
            if values:
                result.append(_named_import(sorted(values | types), module, type_only=False))
            elif types:
                result.append(_named_import(sorted(types), module, type_only=True))
        return result


def generated_module(header: ImportBlock, body: SourceWriter) -> str:
    """Assemble a full module: banner, imports, then body."""
    parts = [GENERATED_BANNER, ""]
    imports = header.render()
    if imports:
        parts.extend(imports)
        parts.append("")
    return "\n".join(parts) + "\n" + body.text()


def doc_comment_lines(description: str | None, tags: Iterable[str] = ()) -> list[str]:
    """Return JSDoc comment lines for *description* and *tags*.

    A single short line collapses to ``/** text */``.
    """
    content = description.splitlines() if description else []
    tag_lines = list(tags)
    if content and tag_lines:
        content.append("")
    content.extend(tag_lines)
    if not content:
        return []
    content = [_escape_comment(text) for text in content]
    if len(content) == 1:
        return [f"/** {content[0]} */"]
    return ["/**", *(f" * {text}".rstrip() for text in content), " */"]


def ts_string(value: str) -> str:
    """Render *value* as a single-quoted TypeScript string literal."""
    escaped = []
    for ch in value:
        if ch == "\\":
            escaped.append("\\\\")
        elif ch == "'":
            escaped.append("\\'")
        elif ch == "\n":
            escaped.append("\\n")
        elif ch == "\r":
            escaped.append("\\r")
        elif ch == "\t":
            escaped.append("\\t")
        elif ord(ch) < 0x20 or ch in "\u2028\u2029":
            escaped.append(f"\\u{ord(ch):04x}")
        else:
            escaped.append(ch)
    return "'" + "".join(escaped) + "'"


def relative_specifier(from_dir: str, target: str) -> str:
    """Return an import specifier for *target* as seen from *from_dir*.

    Both arguments are POSIX paths relative to the same root. A ``.ts`` or
    ``.js`` suffix on *target* is dropped.
    """
    stem, ext = posixpath.splitext(target)
    if ext in (".ts", ".js", ".tsx", ".mts"):
        target = stem
    rel = posixpath.relpath("/" + target.lstrip("/"), "/" + from_dir.strip("/"))
    return rel if rel.startswith("../") else f"./{rel}"


def module_path(directory: str, type_name: str) -> str:
    """Output path of the module generated for *type_name* in *directory*."""
    return f"{directory}/{type_name}.ts"


def lower_first(name: str) -> str:
    return name[:1].lower() + name[1:]


def emit_indexes(files: Iterable[GeneratedFile]) -> list[GeneratedFile]:
    """Build an ``index.ts`` barrel for each output directory in *files*.

    Each barrel re-exports the modules of its directory in name order.
    """
    by_dir: dict[str, list[str]] = {}
    for generated in files:
        directory, name = posixpath.split(generated.path)
        stem = posixpath.splitext(name)[0]
        if stem != INDEX_MODULE:
            by_dir.setdefault(directory, []).append(stem)
    indexes = []
    for directory in sorted(by_dir):
        lines = [GENERATED_BANNER, ""]
        lines.extend(f"export * from './{stem}';" for stem in sorted(by_dir[directory]))
        indexes.append(GeneratedFile(path=f"{directory}/{INDEX_MODULE}.ts", content="\n".join(lines) + "\n"))
    return indexes


# ################
# Implementation
# ################


def _named_import(names: list[str], module: str, *, type_only: bool) -> str:
    keyword = "import type" if type_only else "import"
    return f"{keyword} {{ {', '.join(names)} }} from {ts_string(module)};"


def _module_sort_key(module: str) -> tuple[int, str]:
    return (1 if module.startswith(".") else 0, module)


def _escape_comment(text: str) -> str:
    return text.replace("*/", "*\\/")
