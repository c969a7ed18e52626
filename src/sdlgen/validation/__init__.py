# Copyright 2026 sdlgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Consistency checks for classified type graphs (dead types, unused bindings, etc.)."""

from sdlgen.validation.checks import ValidationResult, validate

__all__ = [
    "ValidationResult",
    "validate",
]
