# File: codeforge/cli.py
"""
CodeForge - Command-Line Interface
==================================

Thin ``argparse`` front end over the loader and the orchestrator.

Usage examples::

    # Check a data model (and optionally a project config)
    codeforge validate --model blog.yaml
    codeforge validate --model blog.yaml --config codeforge.json --strict

    # Generate everything into ./out
    codeforge generate all --model blog.yaml --config codeforge.json -o ./out

    # Only the OpenAPI/AsyncAPI documents, without touching the disk
    codeforge generate specs --model blog.yaml --dry-run

    # Start from a sample model and config
    codeforge sample ecommerce -o ./shop

Exit codes:
    0 - success
    1 - validation error
    2 - generation error
    3 - export error
    4 - input/argument error
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, NoReturn, Optional, Sequence

from codeforge.errors import CodeForgeError, ValidationError
from codeforge.generator import (
    TARGETS,
    GenerationReport,
    ProjectGenerator,
    check_project_config,
    load_project_config,
)
from codeforge.loader import LoadReport, ModelLoader, decode, format_from_path
from codeforge.models import DataModel, ProjectConfig
from codeforge.samples import SAMPLE_KINDS, write_sample
from codeforge.utils import Timer
from codeforge.validators import ValidationResult

# ---------------------------------------------------------------------------
# Logger (configured in _setup_logging)
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("codeforge")


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

EXIT_SUCCESS: int = 0
EXIT_VALIDATION_ERROR: int = 1
EXIT_GENERATION_ERROR: int = 2
EXIT_EXPORT_ERROR: int = 3
EXIT_INPUT_ERROR: int = 4


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(verbosity: int) -> None:
    """
    Configure the ``codeforge`` logger.

    Args:
        verbosity: 0 = WARNING, 1 = INFO, 2+ = DEBUG.
    """
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity >= 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    handler: logging.StreamHandler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s",
            datefmt="%H:%M:%S",
        )
    )

    root_logger: logging.Logger = logging.getLogger("codeforge")
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.propagate = False


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-m", "--model",
        type=str,
        required=True,
        metavar="PATH",
        help="Path to the data model document (JSON or YAML).",
    )
    parser.add_argument(
        "-c", "--config",
        type=str,
        default=None,
        metavar="PATH",
        help="Path to the project config (JSON or YAML). Defaults are used when omitted.",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        default=False,
        help="Enable the stricter advisory checks (descriptions, string lengths, enum casing).",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v for INFO, -vv for DEBUG).",
    )


def _build_parser() -> argparse.ArgumentParser:
    from codeforge import __version__

    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="codeforge",
        description=(
            "CodeForge - API code generator.\n\n"
            "Turns a declarative data model into OpenAPI/AsyncAPI documents "
            "and a NestJS + TypeORM backend."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"CodeForge v{__version__}")

    commands = parser.add_subparsers(dest="command", metavar="COMMAND")
    commands.required = True

    validate = commands.add_parser("validate", help="Validate a data model.")
    _add_common_arguments(validate)

    generate = commands.add_parser("generate", help="Generate artifacts from a data model.")
    generate.add_argument(
        "target",
        nargs="?",
        default="all",
        choices=TARGETS,
        help="What to generate (default: all).",
    )
    _add_common_arguments(generate)
    generate.add_argument(
        "-o", "--output",
        type=str,
        default=None,
        metavar="DIR",
        help="Output directory (default: generation.outputDir from the config).",
    )
    generate.add_argument(
        "--dry-run",
        action="store_true",
        default=False,
        help="List the files that would be generated without writing them.",
    )
    generate.add_argument(
        "--force",
        action="store_true",
        default=False,
        help="Overwrite existing files regardless of generation.overwrite.",
    )
    sample = commands.add_parser("sample", help="Write a sample data model and project config.")
    sample.add_argument(
        "kind",
        nargs="?",
        default="blog",
        choices=SAMPLE_KINDS,
        help="Which sample to write (default: blog).",
    )
    sample.add_argument(
        "-o", "--output",
        type=str,
        default=".",
        metavar="DIR",
        help="Directory to write into (default: current directory).",
    )
    sample.add_argument(
        "--force",
        action="store_true",
        default=False,
        help="Replace existing sample files.",
    )
    sample.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v for INFO, -vv for DEBUG).",
    )
    return parser


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def _existing_file(raw_path: str, what: str) -> Optional[Path]:
    path: Path = Path(raw_path).resolve()
    if not path.is_file():
        logger.error("%s file not found: %s", what, path)
        return None
    return path


def _load_config(config_arg: Optional[str], model: DataModel) -> ProjectConfig:
    if config_arg is None:
        logger.info("No project config given, using defaults for '%s'.", model.name)
        return ProjectConfig.default_for(model)
    config_path: Optional[Path] = _existing_file(config_arg, "Config")
    if config_path is None:
        raise FileNotFoundError(config_arg)
    return load_project_config(config_path)


# ---------------------------------------------------------------------------
# validate
# ---------------------------------------------------------------------------


def _run_validate(args: argparse.Namespace) -> int:
    model_path: Optional[Path] = _existing_file(args.model, "Model")
    if model_path is None:
        return EXIT_INPUT_ERROR
    config_path: Optional[Path] = None
    if args.config is not None:
        config_path = _existing_file(args.config, "Config")
        if config_path is None:
            return EXIT_INPUT_ERROR

    loader: ModelLoader = ModelLoader(strict=args.strict)
    with Timer("validation") as t:
        try:
            report: LoadReport = loader.check(
                model_path.read_text(encoding="utf-8"), format_from_path(model_path)
            )
            config_checks: Optional[ValidationResult] = None
            if config_path is not None:
                config_checks = check_project_config(
                    decode(config_path.read_text(encoding="utf-8"), format_from_path(config_path))
                )
        except CodeForgeError as exc:
            logger.error("%s", exc)
            return EXIT_INPUT_ERROR

    errors: List[str] = list(report.errors)
    warnings: List[str] = list(report.warnings)
    if config_checks is not None:
        errors.extend(config_checks.errors)
        warnings.extend(config_checks.warnings)

    print("=" * 50)
    print("  Data Model Validation Report")
    print("=" * 50)
    print(f"  File:     {model_path.name}")
    if config_path is not None:
        print(f"  Config:   {config_path.name}")
    if report.model is not None:
        print(f"  Entities: {len(report.model.entities)}")
    print(f"  Time:     {t.elapsed:.3f}s")
    print(f"  Valid:    {'Yes' if not errors else 'No'}")
    if errors:
        print(f"\n  Errors ({len(errors)}):")
        for err in errors:
            print(f"    ✗ {err}")
    if warnings:
        print(f"\n  Warnings ({len(warnings)}):")
        for warn in warnings:
            print(f"    ⚠ {warn}")
    print("=" * 50)

    return EXIT_VALIDATION_ERROR if errors else EXIT_SUCCESS


# ---------------------------------------------------------------------------
# generate
# ---------------------------------------------------------------------------


def _exit_code_for(report: GenerationReport) -> int:
    if report.success:
        return EXIT_SUCCESS
    if report.validation_errors:
        return EXIT_VALIDATION_ERROR
    if report.generation_errors:
        return EXIT_GENERATION_ERROR
    return EXIT_EXPORT_ERROR


def _run_generate(args: argparse.Namespace) -> int:
    model_path: Optional[Path] = _existing_file(args.model, "Model")
    if model_path is None:
        return EXIT_INPUT_ERROR

    try:
        model: DataModel = ModelLoader(strict=args.strict).parse_file(model_path)
        config: ProjectConfig = _load_config(args.config, model)
    except ValidationError as exc:
        logger.error("%s", exc)
        return EXIT_VALIDATION_ERROR
    except (CodeForgeError, OSError) as exc:
        logger.error("Failed to load input: %s", exc)
        return EXIT_INPUT_ERROR

    if args.force:
        config = config.model_copy(
            update={"generation": config.generation.model_copy(update={"overwrite": True})}
        )

    output_dir: Path = Path(args.output or config.generation.output_dir).resolve()
    generator: ProjectGenerator = ProjectGenerator(strict=args.strict)

    if args.dry_run:
        logger.info("Dry-run mode: files will not be written to disk.")
        report: GenerationReport = generator.generate(config, model, args.target)
        print(f"Files that would be written to {output_dir}:")
        for generated in report.files:
            print(f"  {generated.path}  ({generated.line_count} lines)")
    else:
        logger.info("Output: %s", output_dir)
        report = generator.generate(config, model, args.target, output_dir=output_dir)

    print(report.summary())
    return _exit_code_for(report)


# ---------------------------------------------------------------------------
# sample
# ---------------------------------------------------------------------------


def _run_sample(args: argparse.Namespace) -> int:
    try:
        written: List[Path] = write_sample(args.kind, Path(args.output), overwrite=args.force)
    except OSError as exc:
        logger.error("Failed to write sample: %s", exc)
        return EXIT_INPUT_ERROR

    model_path, config_path = written
    print(f"Sample '{args.kind}' written:")
    for path in written:
        print(f"  {path}")
    print("\nNext steps:")
    print(f"  codeforge validate -m {model_path} -c {config_path}")
    print(f"  codeforge generate all -m {model_path} -c {config_path}")
    return EXIT_SUCCESS


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def cli_main(argv: Optional[Sequence[str]] = None) -> NoReturn:
    """
    Parse *argv* (default ``sys.argv[1:]``), run the command and exit.
    """
    parser: argparse.ArgumentParser = _build_parser()
    args: argparse.Namespace = parser.parse_args(argv)
    _setup_logging(args.verbose)

    if args.command == "validate":
        exit_code: int = _run_validate(args)
    elif args.command == "sample":
        exit_code = _run_sample(args)
    else:
        exit_code = _run_generate(args)

    if exit_code != EXIT_SUCCESS:
        logger.error("%s failed with exit code %d.", args.command, exit_code)
    sys.exit(exit_code)


def main() -> None:
    """Console-script entry point."""
    cli_main()


__all__: List[str] = [
    "cli_main",
    "main",
    "EXIT_SUCCESS",
    "EXIT_VALIDATION_ERROR",
    "EXIT_GENERATION_ERROR",
    "EXIT_EXPORT_ERROR",
    "EXIT_INPUT_ERROR",
]

logger.debug("codeforge.cli loaded — %d public symbols.", len(__all__))
