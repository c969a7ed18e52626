# Copyright 2026 sdlgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Entry point for the sdlgen command-line interface."""

import argparse
import logging
import sys
from pathlib import Path

from yachalk import chalk

from sdlgen.codegen.writer import EmitOptions
from sdlgen.compiler.build import CompilationResult, CompileOptions, CompilerError, compile_sources, write_outputs
from sdlgen.compiler.diagnostics import Diagnostic, render_diagnostic
from sdlgen.workspace.config import (
    CONFIG_FILENAME,
    ConfigError,
    WorkspaceConfig,
    load_workspace_config,
    render_default_config,
)
from sdlgen.workspace.loader import SourceLoadError, discover_schema_files, load_sources, source_path

# ###############
# Public Interface
# ###############


def main() -> None:
    """Run the sdlgen CLI."""
    parser = argparse.ArgumentParser(
        prog="sdlgen",
        description="sdlgen - GraphQL SDL to TypeScript schema compiler",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    # init subcommand
    init_parser = subparsers.add_parser(
        "init",
        help="Create a starter configuration file",
        description=f"Write a starter {CONFIG_FILENAME} into a directory.",
    )
    init_parser.add_argument(
        "directory",
        nargs="?",
        default=".",
        help="Directory to initialize (default: current directory)",
    )

    # check subcommand
    check_parser = subparsers.add_parser(
        "check",
        help="Check the schema for errors",
        description="Compile all schema files and report diagnostics without writing output.",
    )
    check_parser.add_argument(
        "directory",
        nargs="?",
        default=".",
        help=f"Directory containing {CONFIG_FILENAME} (default: current directory)",
    )

    # generate subcommand
    generate_parser = subparsers.add_parser(
        "generate",
        help="Generate TypeScript sources from the schema",
        description="Compile all schema files and write the generated modules to the output directory.",
    )
    generate_parser.add_argument(
        "directory",
        nargs="?",
        default=".",
        help=f"Directory containing {CONFIG_FILENAME} (default: current directory)",
    )

    args = parser.parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    if args.command is None:
        parser.print_help()
        sys.exit(0)

    sys.exit(_dispatch(args))


# ################
# Implementation
# ################


def _dispatch(args: argparse.Namespace) -> int:
    """Dispatch to the appropriate subcommand handler."""
    if args.command == "init":
        return _cmd_init(args)
    if args.command == "check":
        return _cmd_check(args)
    if args.command == "generate":
        return _cmd_generate(args)
    return 0


def _error(message: str) -> None:
    print(chalk.red(f"Error: {message}"), file=sys.stderr)


def _cmd_init(args: argparse.Namespace) -> int:
    """Handle the init subcommand."""
    directory = Path(args.directory).resolve()

    if not directory.is_dir():
        _error(f"directory '{directory}' does not exist.")
        return 1

    config_file = directory / CONFIG_FILENAME
    if config_file.exists():
        _error(f"configuration already exists at '{config_file}'.")
        return 1

    config_file.write_text(render_default_config(), encoding="utf-8")
    print(f"Created sdlgen configuration at '{config_file}'.")
    return 0


def _cmd_check(args: argparse.Namespace) -> int:
    """Handle the check subcommand."""
    compiled = _compile_workspace(Path(args.directory))
    if compiled is None:
        return 1
    _, result = compiled
    return 1 if result.has_errors else 0


def _cmd_generate(args: argparse.Namespace) -> int:
    """Handle the generate subcommand."""
    compiled = _compile_workspace(Path(args.directory))
    if compiled is None:
        return 1
    output_dir, result = compiled
    try:
        written = write_outputs(result, output_dir)
    except CompilerError as exc:
        _error(str(exc))
        return 1
    print(f"Wrote {len(written)} file(s) to '{output_dir}'.")
    if result.suppressed:
        names = ", ".join(sorted(result.suppressed))
        print(chalk.yellow(f"Skipped {len(result.suppressed)} type(s) with errors: {names}"))
    return 1 if result.has_errors else 0


def _compile_workspace(directory: Path) -> tuple[Path, CompilationResult] | None:
    """Load the configuration and sources of a workspace and compile them.

    Prints diagnostics and a summary. Returns ``None`` after printing an
    error when the workspace itself cannot be loaded.
    """
    directory = directory.resolve()
    if not directory.is_dir():
        _error(f"directory '{directory}' does not exist.")
        return None

    config_file = directory / CONFIG_FILENAME
    if not config_file.exists():
        _error(f"no {CONFIG_FILENAME} found in '{directory}'. Run 'sdlgen init' to create one.")
        return None

    try:
        config = load_workspace_config(config_file)
    except ConfigError as exc:
        _error(str(exc))
        return None

    output_dir = (directory / config.output_directory).resolve()
    try:
        files = discover_schema_files(
            directory,
            config.schema_directories,
            [*config.exclude_directories, config.output_directory],
        )
        sources = load_sources(directory, files)
    except SourceLoadError as exc:
        _error(str(exc))
        return None

    if not sources:
        print("No .graphql files found in the workspace.")
    else:
        print(f"Compiling {len(sources)} schema file(s)...")
    result = compile_sources(sources, _compile_options(directory, output_dir, config))

    for diagnostic in result.diagnostics:
        _print_diagnostic(diagnostic, result)
    if result.diagnostics:
        print(f"{len(result.errors)} error(s), {len(result.warnings)} warning(s).")
    elif sources:
        print("No issues found.")
    return output_dir, result


def _compile_options(directory: Path, output_dir: Path, config: WorkspaceConfig) -> CompileOptions:
    return CompileOptions(
        scalars=config.scalars,
        emit=EmitOptions(output_directory=source_path(directory, output_dir), context_type=config.context_type),
        jobs=config.jobs,
        resolver_root=directory,
    )


def _print_diagnostic(diagnostic: Diagnostic, result: CompilationResult) -> None:
    header, _, rest = render_diagnostic(diagnostic, result.sources).partition("\n")
    if diagnostic.is_error:
        print(chalk.red(header), file=sys.stderr)
        if rest:
            print(rest, file=sys.stderr)
    else:
        print(chalk.yellow(header))
        if rest:
            print(rest)
