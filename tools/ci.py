#!/usr/bin/env python3
# Copyright 2026 sdlgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Run all CI checks locally: format, lint, type check, tests, and build."""

import subprocess
import sys
import time
from pathlib import Path

from yachalk import chalk

# ###############
# Public Interface
# ###############

STEPS: list[tuple[str, list[str]]] = [
    ("Format check", ["uv", "run", "ruff", "format", "--check", "src/", "tests/", "tools/"]),
    ("Lint", ["uv", "run", "ruff", "check", "src/", "tests/", "tools/"]),
    ("Type check", ["uv", "run", "ty", "check", "src/"]),
    ("Tests", ["uv", "run", "pytest", "--cov=sdlgen", "--cov-report=term-missing"]),
    ("Build", ["uv", "build"]),
]


def main(argv: list[str] | None = None) -> int:
    """Run the CI steps named in *argv* (all of them by default) and report results."""
    selected = _select_steps(argv if argv is not None else sys.argv[1:])
    if selected is None:
        return 2

    results: list[tuple[str, bool, float]] = []
    for name, cmd in selected:
        _banner(name)
        start = time.monotonic()
        try:
            returncode = subprocess.run(cmd, cwd=_repo_root()).returncode
        except FileNotFoundError as exc:
            print(chalk.red(f"Cannot run '{cmd[0]}': {exc}"))
            returncode = 127
        results.append((name, returncode == 0, time.monotonic() - start))

    _banner("  Summary")
    all_passed = True
    for name, passed, elapsed in results:
        colour = chalk.green if passed else chalk.red
        print(colour(f"  {'PASS' if passed else 'FAIL'}  {name} ({elapsed:.1f}s)"))
        all_passed = all_passed and passed

    print()
    return 0 if all_passed else 1


# ################
# Implementation
# ################


def _banner(title: str) -> None:
    sep = chalk.blue("=" * 60)
    print(f"\n{sep}")
    print(chalk.blue(title))
    print(sep)


def _select_steps(names: list[str]) -> list[tuple[str, list[str]]] | None:
    """Return the steps whose lower-cased name starts with one of *names*."""
    if not names:
        return STEPS
    wanted = [n.lower() for n in names]
    selected = [step for step in STEPS if any(step[0].lower().startswith(w) for w in wanted)]
    if not selected:
        known = ", ".join(name for name, _ in STEPS)
        print(chalk.red(f"No CI step matches {' '.join(names)!r}; known steps: {known}"))
        return None
    return selected


def _repo_root() -> Path:
    return Path(__file__).parent.parent


if __name__ == "__main__":
    sys.exit(main())
