# Copyright 2026 sdlgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Source provenance for every syntactic node of a schema file."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

# ###############
# Public Interface
# ###############


class SourceSpan(BaseModel):
    """A region of an SDL source file.

    Lines and columns are 1-based. ``end_column`` is exclusive, i.e. it points
    one past the last character of the region.
    """

    model_config = ConfigDict(frozen=True)

    file: str
    start_line: int
    start_column: int
    end_line: int
    end_column: int

    def to(self, other: SourceSpan) -> SourceSpan:
        """Return a span covering this span through the end of *other*."""
        return SourceSpan(
            file=self.file,
            start_line=self.start_line,
            start_column=self.start_column,
            end_line=other.end_line,
            end_column=other.end_column,
        )

    def sort_key(self) -> tuple[str, int, int]:
        return (self.file, self.start_line, self.start_column)

    def __str__(self) -> str:
        return f"{self.file}:{self.start_line}:{self.start_column}"
