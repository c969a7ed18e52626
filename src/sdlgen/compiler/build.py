# Copyright 2026 sdlgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""End-to-end compilation of a set of SDL sources.

The pipeline runs every stage even when earlier stages reported errors, so a
single run surfaces as many independent problems as possible:

1. parse each file (optionally on a thread pool), ordered by path;
2. merge all declarations into one type graph;
3. classify every field;
4. check that server-side type references can be mapped;
5. run the consistency checks;
6. emit server, GraphQL runtime and resolver-interface modules for every
   type not touched by an error.

A type is also left out when the code generated for it would import a type
that was left out; such types get a warning naming the blocked reference.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path

from sdlgen.codegen import EmitOptions, GeneratedFile, emit_graphql, emit_indexes, emit_resolvers, emit_server
from sdlgen.codegen.writer import GENERATED_BANNER, GRAPHQL_DIR, RESOLVERS_DIR, SERVER_DIR
from sdlgen.compiler.artifact import MANIFEST_FILENAME, serialize_graph
from sdlgen.compiler.classifier import classify
from sdlgen.compiler.diagnostics import Diagnostic, RelatedSpan, StageResult, blocked_types, sort_diagnostics
from sdlgen.compiler.parser import parse
from sdlgen.compiler.type_graph import build_type_graph
from sdlgen.compiler.type_mapper import ScalarMapping, TypeMapper, check_type_mappings
from sdlgen.model.declarations import Declaration, TypeKind, named_type
from sdlgen.model.graph import TypeDefinition, TypeGraph
from sdlgen.model.source import SourceSpan
from sdlgen.validation.checks import validate

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


class CompilerError(Exception):
    """Raised when generated output cannot be written.

    Problems in the schema itself are never raised; they are reported as
    diagnostics on the :class:`CompilationResult`.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)


@dataclass(frozen=True)
class SchemaSource:
    """One SDL file handed over by the source loader.

    Attributes:
        path: Stable POSIX path used in every diagnostic and span.
        text: Full file contents.
    """

    path: str
    text: str


@dataclass(frozen=True)
class CompileOptions:
    """Knobs for :func:`compile_sources`.

    Attributes:
        scalars: Custom scalar mappings in addition to the built-in ones.
        emit: Options passed to every emitter.
        jobs: Number of parser threads; ``1`` parses sequentially.
        resolver_root: Directory the source paths are relative to. When
            set, bound resolver modules are checked for existence.
    """

    scalars: Sequence[ScalarMapping] = ()
    emit: EmitOptions = field(default_factory=EmitOptions)
    jobs: int = 1
    resolver_root: Path | None = None


@dataclass
class CompilationResult:
    """Everything one compiler run produced.

    Attributes:
        graph: The classified type graph, including types with errors.
        files: Generated files for all emitted types plus index barrels and
            the graph manifest, ordered by path.
        diagnostics: All diagnostics, ordered by source location.
        suppressed: Names of types for which nothing was emitted.
        sources: Source text by path, for rendering diagnostics.
    """

    graph: TypeGraph
    files: list[GeneratedFile] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    suppressed: set[str] = field(default_factory=set)
    sources: dict[str, str] = field(default_factory=dict)

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.is_error]

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if not d.is_error]

    @property
    def has_errors(self) -> bool:
        return any(d.is_error for d in self.diagnostics)


def compile_sources(
    sources: Iterable[SchemaSource | tuple[str, str]],
    options: CompileOptions | None = None,
) -> CompilationResult:
    """Compile SDL sources into generated TypeScript modules.

    Args:
        sources: ``(path, text)`` pairs or :class:`SchemaSource` objects.
            Their order does not matter; files are processed sorted by path.
        options: Compilation options; defaults apply when omitted.

    Returns:
        A :class:`CompilationResult`. Output is deterministic: identical
        input produces identical files.
    """
    options = options or CompileOptions()
    ordered = sorted((_as_source(s) for s in sources), key=lambda s: s.path)
    scalar_map = {s.name: s for s in options.scalars}

    parsed = _parse_all(ordered, options.jobs)
    staged = parsed.then(lambda decls: build_type_graph(decls, custom_scalars=scalar_map)).then(classify)
    graph = staged.value
    diagnostics = list(staged.diagnostics)
    diagnostics.extend(check_type_mappings(graph, scalar_map))
    diagnostics.extend(validate(graph, resolver_root=options.resolver_root).diagnostics)

    blocked = blocked_types(diagnostics)
    suppressed, notes = _propagate_suppression(graph, blocked)
    diagnostics.extend(notes)

    mapper = TypeMapper(graph, scalar_map)
    files: list[GeneratedFile] = []
    for type_def in graph.sorted_types():
        if type_def.name in suppressed:
            continue
        files.extend(_emit_type(type_def, mapper, options.emit))
    files.extend(emit_indexes(files))
    files.append(GeneratedFile(path=MANIFEST_FILENAME, content=serialize_graph(graph, exclude=suppressed) + "\n"))
    files.sort(key=lambda f: f.path)

    logger.debug(
        "Compiled %d file(s): %d type(s), %d suppressed, %d output file(s)",
        len(ordered),
        len(graph),
        len(suppressed),
        len(files),
    )
    return CompilationResult(
        graph=graph,
        files=files,
        diagnostics=sort_diagnostics(diagnostics),
        suppressed=suppressed,
        sources={s.path: s.text for s in ordered},
    )


def write_outputs(result: CompilationResult, output_dir: Path) -> list[Path]:
    """Write every generated file of *result* below *output_dir*.

    Files are only rewritten when their content changed, so repeated runs
    on unchanged input leave modification times alone. Previously generated
    modules that *result* no longer contains (types that were removed or now
    have errors) are deleted; files without the generated banner are never
    touched.

    Returns:
        The paths of all generated files.

    Raises:
        CompilerError: If a file cannot be written or removed.
    """
    written: list[Path] = []
    for generated in result.files:
        target = output_dir / generated.path
        try:
            if not (target.is_file() and target.read_text(encoding="utf-8") == generated.content):
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_text(generated.content, encoding="utf-8")
        except OSError as exc:
            raise CompilerError(f"Cannot write output file '{target}': {exc}") from exc
        written.append(target)
    removed = _remove_stale_modules(output_dir, {generated.path for generated in result.files})
    logger.debug("Wrote %d file(s) to %s, removed %d stale file(s)", len(written), output_dir, len(removed))
    return written


# ################
# Implementation
# ################


def _as_source(source: SchemaSource | tuple[str, str]) -> SchemaSource:
    if isinstance(source, SchemaSource):
        return source
    path, text = source
    return SchemaSource(path=path, text=text)


def _parse_all(sources: list[SchemaSource], jobs: int) -> StageResult[list[Declaration]]:
    """Parse every source and concatenate the results in path order."""
    if jobs > 1 and len(sources) > 1:
        with ThreadPoolExecutor(max_workers=jobs) as pool:
            results = list(pool.map(lambda s: parse(s.text, s.path), sources))
    else:
        results = [parse(s.text, s.path) for s in sources]
    declarations: list[Declaration] = []
    diagnostics: list[Diagnostic] = []
    for result in results:
        declarations.extend(result.value)
        diagnostics.extend(result.diagnostics)
    return StageResult(declarations, diagnostics)


def _references(type_def: TypeDefinition) -> list[tuple[str, SourceSpan]]:
    """Return ``(type name, span)`` for every type the generated code of *type_def* imports."""
    refs: list[tuple[str, SourceSpan]] = [(ref.name, ref.span) for ref in type_def.interfaces]
    for field_def in type_def.fields:
        ref = named_type(field_def.type_ref)
        refs.append((ref.name, ref.span))
        for arg in field_def.arguments:
            arg_ref = named_type(arg.type_ref)
            refs.append((arg_ref.name, arg_ref.span))
    return refs


def _propagate_suppression(graph: TypeGraph, blocked: set[str]) -> tuple[set[str], list[Diagnostic]]:
    """Extend *blocked* to every type whose output would import a suppressed type.

    Returns the full suppressed set and one warning per newly suppressed type.
    """
    suppressed = {name for name in blocked if name in graph}
    notes: list[Diagnostic] = []
    changed = True
    while changed:
        changed = False
        for type_def in graph.sorted_types():
            if type_def.name in suppressed or type_def.kind is TypeKind.ENUM:
                continue
            for name, span in _references(type_def):
                if name in suppressed and name != type_def.name:
                    target = graph.get(name)
                    assert target is not None
                    notes.append(
                        Diagnostic.warning(
                            f"'{type_def.name}' is not generated because it refers to '{name}', which has errors",
                            span,
                            related=[RelatedSpan(span=target.name_span, note=f"'{name}' defined here")],
                            type_name=type_def.name,
                        )
                    )
                    suppressed.add(type_def.name)
                    changed = True
                    break
    return suppressed, notes


def _emit_type(type_def: TypeDefinition, mapper: TypeMapper, options: EmitOptions) -> list[GeneratedFile]:
    files = [emit_graphql(type_def, mapper, options)]
    server = emit_server(type_def, mapper, options)
    if server is not None:
        files.append(server)
    resolvers = emit_resolvers(type_def, mapper, options)
    if resolvers is not None:
        files.append(resolvers)
    return files


def _remove_stale_modules(output_dir: Path, keep: set[str]) -> list[Path]:
    """Delete generated modules below *output_dir* whose relative path is not in *keep*."""
    removed: list[Path] = []
    for subdir in (SERVER_DIR, GRAPHQL_DIR, RESOLVERS_DIR):
        directory = output_dir / subdir
        if not directory.is_dir():
            continue
        for path in sorted(directory.glob("*.ts")):
            if path.relative_to(output_dir).as_posix() in keep or not path.is_file():
                continue
            try:
                if not path.read_text(encoding="utf-8").startswith(GENERATED_BANNER):
                    continue
                path.unlink()
            except (OSError, UnicodeDecodeError) as exc:
                raise CompilerError(f"Cannot remove stale output file '{path}': {exc}") from exc
            removed.append(path)
    return removed
