# Copyright 2026 sdlgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Consistency checks over a classified type graph.

These checks run after classification and look at the schema as a whole
rather than at single declarations. Most of them are advisories: the schema
compiles, but something in it is probably unintentional.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from sdlgen.compiler.diagnostics import Diagnostic, DiagnosticKind, RelatedSpan
from sdlgen.model.declarations import TypeKind
from sdlgen.model.graph import TypeDefinition, TypeGraph
from sdlgen.model.source import SourceSpan

# ###############
# Public Interface
# ###############


@dataclass
class ValidationResult:
    """Result of running the consistency checks.

    Attributes:
        warnings: Advisories; they never block emission.
        errors: Problems that block emission of the types they touch.
    """

    warnings: list[Diagnostic] = field(default_factory=list)
    errors: list[Diagnostic] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        """Return True if any errors were found."""
        return len(self.errors) > 0

    @property
    def diagnostics(self) -> list[Diagnostic]:
        return [*self.errors, *self.warnings]


def validate(graph: TypeGraph, *, resolver_root: Path | None = None) -> ValidationResult:
    """Run all consistency checks on a classified type graph.

    Checks performed:

    1. **Dead types** (warning): an object or interface with no server-side
       fields and no resolver binding produces neither a server type nor
       any resolver to source its GraphQL fields from.

    2. **Unused resolver bindings** (warning): a ``@resolvers`` module that
       no ``@resolve`` field of the type uses.

    3. **Missing resolver modules** (warning): when *resolver_root* is
       given, every bound module path must exist below it.

    4. **Interface cycles** (error): interfaces implementing each other in a
       cycle, e.g. ``A implements B`` and ``B implements A``.

    5. **Shared resolver functions** (warning): two fields of one type bound
       to the same function of the same module, which leaves the resolver
       interface with one overload per field.

    Args:
        graph: The classified type graph.
        resolver_root: Directory that schema source paths are relative to.
            When ``None`` the filesystem is not consulted.

    Returns:
        A :class:`ValidationResult` with all warnings and errors found.
    """
    warnings: list[Diagnostic] = []
    errors: list[Diagnostic] = []

    warnings.extend(_check_dead_types(graph))
    warnings.extend(_check_unused_bindings(graph))
    warnings.extend(_check_shared_functions(graph))
    if resolver_root is not None:
        warnings.extend(_check_resolver_files(graph, resolver_root))
    errors.extend(_check_interface_cycles(graph))

    return ValidationResult(warnings=warnings, errors=errors)


# ################
# Implementation
# ################


def _composite_types(graph: TypeGraph) -> list[TypeDefinition]:
    return [t for t in graph.sorted_types() if t.kind is not TypeKind.ENUM]


def _detect_cycle(graph: dict[str, list[str]]) -> list[str] | None:
    """Detect a cycle in a directed graph using DFS.

    Uses a three-colour marking scheme (white/grey/black) to distinguish
    unvisited, in-progress, and fully-explored nodes.

    Returns:
        A list of node names forming the cycle with the start node repeated
        at the end (e.g. ``["A", "B", "A"]``), or ``None`` if the graph is
        acyclic.
    """
    white, grey, black = 0, 1, 2
    color: dict[str, int] = {}
    path: list[str] = []

    def _dfs(node: str) -> list[str] | None:
        color[node] = grey
        path.append(node)
        for neighbor in graph.get(node, []):
            state = color.get(neighbor, white)
            if state == grey:
                return path[path.index(neighbor) :] + [neighbor]
            if state == white:
                result = _dfs(neighbor)
                if result is not None:
                    return result
        path.pop()
        color[node] = black
        return None

    for node in graph:
        if color.get(node, white) == white:
            result = _dfs(node)
            if result is not None:
                return result
    return None


def _check_dead_types(graph: TypeGraph) -> list[Diagnostic]:
    """Return warnings for objects and interfaces that generate nothing useful."""
    warnings: list[Diagnostic] = []
    for type_def in _composite_types(graph):
        if type_def.server_fields() or type_def.resolver_modules:
            continue
        warnings.append(
            Diagnostic.warning(
                f"Type '{type_def.name}' has no server-side fields and no resolver binding",
                type_def.name_span,
                type_name=type_def.name,
            )
        )
    return warnings


def _check_unused_bindings(graph: TypeGraph) -> list[Diagnostic]:
    warnings: list[Diagnostic] = []
    for type_def in _composite_types(graph):
        used = {binding.module.path for binding in type_def.resolver_bindings.values()}
        for module in type_def.resolver_modules:
            if module.path not in used:
                warnings.append(
                    Diagnostic.warning(
                        f"Resolver module '{module.file}' of '{type_def.name}' is not used by any @resolve field",
                        module.span,
                        type_name=type_def.name,
                    )
                )
    return warnings


def _check_shared_functions(graph: TypeGraph) -> list[Diagnostic]:
    warnings: list[Diagnostic] = []
    for type_def in _composite_types(graph):
        first_use: dict[tuple[str, str], tuple[str, SourceSpan]] = {}
        for field_def in type_def.fields:
            binding = type_def.resolver_bindings.get(field_def.name)
            if binding is None:
                continue
            key = (binding.module.path, binding.function)
            if key not in first_use:
                first_use[key] = (field_def.name, binding.span)
                continue
            other, other_span = first_use[key]
            warnings.append(
                Diagnostic.warning(
                    f"Field '{type_def.name}.{field_def.name}' is resolved by '{binding.function}', "
                    f"which already resolves '{type_def.name}.{other}'",
                    binding.span,
                    related=[RelatedSpan(span=other_span, note=f"'{binding.function}' first bound here")],
                    type_name=type_def.name,
                )
            )
    return warnings


def _check_resolver_files(graph: TypeGraph, root: Path) -> list[Diagnostic]:
    warnings: list[Diagnostic] = []
    for type_def in _composite_types(graph):
        for module in type_def.resolver_modules:
            if not (root / module.path).is_file():
                warnings.append(
                    Diagnostic.warning(
                        f"Resolver module '{module.file}' of '{type_def.name}' does not exist "
                        f"(expected '{module.path}')",
                        module.span,
                        type_name=type_def.name,
                    )
                )
    return warnings


def _check_interface_cycles(graph: TypeGraph) -> list[Diagnostic]:
    """Return one error per interface taking part in an ``implements`` cycle."""
    edges: dict[str, list[str]] = {}
    for type_def in graph.sorted_types():
        if type_def.kind is TypeKind.INTERFACE:
            edges[type_def.name] = [
                ref.name for ref in type_def.interfaces if ref.name in graph and ref.name != type_def.name
            ]

    errors: list[Diagnostic] = []
    reported: set[str] = set()
    while True:
        remaining = {name: targets for name, targets in edges.items() if name not in reported}
        cycle = _detect_cycle(remaining)
        if cycle is None:
            return errors
        chain = " -> ".join(cycle)
        for name in cycle[:-1]:
            type_def = graph.get(name)
            assert type_def is not None
            following = cycle[cycle.index(name) + 1]
            ref = next(r for r in type_def.interfaces if r.name == following)
            errors.append(
                Diagnostic.error(
                    DiagnosticKind.REFERENCE,
                    f"Interface '{name}' takes part in an implementation cycle: {chain}",
                    ref.span,
                    related=[RelatedSpan(span=type_def.name_span, note=f"'{name}' defined here")],
                    type_name=name,
                )
            )
            reported.add(name)
