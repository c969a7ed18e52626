# Copyright 2026 sdlgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Diagnostics shared by every compiler stage.

A :class:`Diagnostic` cannot be constructed without a
:class:`~sdlgen.model.source.SourceSpan`, and spans only ever point into the
original SDL sources, never into generated output. Stages do not raise on
schema problems; they return a :class:`StageResult` pairing whatever they
managed to produce with the diagnostics they collected.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic import Field as _Field

from sdlgen.model.source import SourceSpan

# ###############
# Public Interface
# ###############


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"


class DiagnosticKind(Enum):
    """Error taxonomy.

    ``ADVISORY`` is used for warning-level style and consistency notes.
    """

    SYNTAX = "syntax"
    MERGE_CONFLICT = "merge-conflict"
    REFERENCE = "reference"
    CLASSIFICATION = "classification"
    DIRECTIVE = "directive"
    ADVISORY = "advisory"


class RelatedSpan(BaseModel):
    """A secondary location, e.g. the first of two conflicting declarations."""

    model_config = ConfigDict(frozen=True)

    span: SourceSpan
    note: str


class Diagnostic(BaseModel):
    """A problem found in the schema, located in the original SDL source.

    Attributes:
        severity: Errors block emission for the types they touch; warnings
            never do.
        kind: Category within the error taxonomy.
        message: Human-readable description.
        span: Primary location.
        related: Secondary locations.
        type_name: Name of the type graph entry this diagnostic touches, if any.
    """

    model_config = ConfigDict(frozen=True)

    severity: Severity
    kind: DiagnosticKind
    message: str
    span: SourceSpan
    related: list[RelatedSpan] = _Field(default_factory=list)
    type_name: str | None = None

    @classmethod
    def error(
        cls,
        kind: DiagnosticKind,
        message: str,
        span: SourceSpan,
        *,
        related: Iterable[RelatedSpan] = (),
        type_name: str | None = None,
    ) -> Diagnostic:
        return cls(
            severity=Severity.ERROR,
            kind=kind,
            message=message,
            span=span,
            related=list(related),
            type_name=type_name,
        )

    @classmethod
    def warning(
        cls,
        message: str,
        span: SourceSpan,
        *,
        related: Iterable[RelatedSpan] = (),
        type_name: str | None = None,
    ) -> Diagnostic:
        return cls(
            severity=Severity.WARNING,
            kind=DiagnosticKind.ADVISORY,
            message=message,
            span=span,
            related=list(related),
            type_name=type_name,
        )

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR


T = TypeVar("T")
U = TypeVar("U")


@dataclass
class StageResult(Generic[T]):
    """The partial output of a stage together with its diagnostics."""

    value: T
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return any(d.is_error for d in self.diagnostics)

    def then(self, stage: Callable[[T], StageResult[U]]) -> StageResult[U]:
        """Feed the value into the next stage, accumulating diagnostics."""
        result = stage(self.value)
        return StageResult(result.value, self.diagnostics + result.diagnostics)


def sort_diagnostics(diagnostics: Iterable[Diagnostic]) -> list[Diagnostic]:
    """Order diagnostics by file, line and column (stable for equal keys)."""
    return sorted(diagnostics, key=lambda d: d.span.sort_key())


def blocked_types(diagnostics: Iterable[Diagnostic]) -> set[str]:
    """Return the names of all types touched by at least one error."""
    return {d.type_name for d in diagnostics if d.is_error and d.type_name is not None}


def render_diagnostic(diagnostic: Diagnostic, sources: Mapping[str, str] | None = None) -> str:
    """Render *diagnostic* as human-readable text.

    Args:
        diagnostic: The diagnostic to render.
        sources: Optional mapping from file path to source text. When the
            primary span's file is present, the offending line is quoted with
            a caret underline.

    Returns:
        A multi-line string without a trailing newline.
    """
    span = diagnostic.span
    lines = [f"{span}: {diagnostic.severity.value}[{diagnostic.kind.value}]: {diagnostic.message}"]
    if sources is not None and span.file in sources:
        lines.extend(_quote_source(sources[span.file], span))
    for related in diagnostic.related:
        lines.append(f"  note: {related.note} at {related.span}")
    return "\n".join(lines)


# ################
# Implementation
# ################


def _quote_source(text: str, span: SourceSpan) -> list[str]:
    """Return the source line of *span* followed by a caret underline."""
    source_lines = text.splitlines()
    if not 1 <= span.start_line <= len(source_lines):
        return []
    line = source_lines[span.start_line - 1]
    if span.end_line == span.start_line:
        width = max(1, span.end_column - span.start_column)
    else:
        width = max(1, len(line) - span.start_column + 1)
    gutter = str(span.start_line)
    return [
        f"  {gutter} | {line}",
        f"  {' ' * len(gutter)} | {' ' * (span.start_column - 1)}{'^' * width}",
    ]
