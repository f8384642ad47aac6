# File: codeforge/generator.py
"""
CodeForge - Generation Orchestrator
===================================
Connects the phases together::

    model file ──ModelLoader──▶ DataModel ─┐
                                           ├─▶ generators ─▶ GenerationReport ─▶ ProjectExporter
    config file ─load_project_config─▶ ProjectConfig ─┘

Targets and output layout:

    specs    OpenAPI (+ AsyncAPI when ``features.asyncapi``) under ``specs/``
    backend  NestJS/TypeORM tree under ``backend/``
    docker   Dockerfile, docker-compose.yml, .dockerignore at the root
    all      specs + backend, plus docker when ``features.docker``

Every generator is independent: a failed one is recorded in the report and
the remaining ones still run.  The report carries the files of every
generator that succeeded.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Mapping, Optional, Tuple, Type, Union

from pydantic import ValidationError as PydanticValidationError

from codeforge.errors import CodeForgeError, ConfigError, ValidationError
from codeforge.exporters import ExportResult, ProjectExporter
from codeforge.generators import (
    AsyncAPIGenerator,
    BackendGenerator,
    BaseGenerator,
    DockerGenerator,
    OpenAPIGenerator,
)
from codeforge.loader import ModelLoader, decode, format_from_path, format_pydantic_errors
from codeforge.models import DataModel, GeneratedFile, GenerationResult, ProjectConfig
from codeforge.utils import Timer
from codeforge.validators import ValidationResult, validate_project_config

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("codeforge.generator")

TARGETS: Tuple[str, ...] = ("specs", "backend", "docker", "all")

SPECS_PREFIX: str = "specs"
BACKEND_PREFIX: str = "backend"


# ---------------------------------------------------------------------------
# Generation report
# ---------------------------------------------------------------------------


@dataclass(frozen=False, slots=True)
class GenerationStepMetric:
    """Timing and outcome for a single generator run."""

    step_name: str = ""
    success: bool = True
    elapsed_seconds: float = 0.0
    detail: str = ""


@dataclass(frozen=False, slots=True)
class GenerationReport:
    """Aggregated outcome of :meth:`ProjectGenerator.generate`."""

    success: bool = False
    project_name: str = ""
    target: str = "all"
    files: List[GeneratedFile] = field(default_factory=list)
    total_elapsed_seconds: float = 0.0

    step_metrics: List[GenerationStepMetric] = field(default_factory=list)
    validation_errors: List[str] = field(default_factory=list)
    validation_warnings: List[str] = field(default_factory=list)
    generation_errors: List[str] = field(default_factory=list)
    generation_warnings: List[str] = field(default_factory=list)

    export: Optional[ExportResult] = None

    @property
    def total_files(self) -> int:
        return len(self.files)

    @property
    def total_lines(self) -> int:
        return sum(f.line_count for f in self.files)

    @property
    def total_bytes(self) -> int:
        return sum(f.size_bytes for f in self.files)

    @property
    def file_paths(self) -> List[str]:
        return [f.path for f in self.files]

    def summary(self) -> str:
        """Human-readable multi-line summary."""
        lines: List[str] = []
        status: str = "SUCCESS" if self.success else "FAILED"
        lines.append("=" * 60)
        lines.append("  CodeForge Generation Report")
        lines.append("=" * 60)
        lines.append(f"  Status:          {status}")
        lines.append(f"  Project:         {self.project_name}")
        lines.append(f"  Target:          {self.target}")
        lines.append(f"  Files generated: {self.total_files}")
        lines.append(f"  Total lines:     {self.total_lines:,}")
        lines.append(f"  Total bytes:     {self.total_bytes:,}")
        lines.append(f"  Total time:      {self.total_elapsed_seconds:.3f}s")

        if self.step_metrics:
            lines.append("-" * 60)
            lines.append("  Steps:")
            for step in self.step_metrics:
                icon: str = "✓" if step.success else "✗"
                lines.append(
                    f"    {icon} {step.step_name:<20s} {step.elapsed_seconds:>7.3f}s  {step.detail}"
                )

        sections: List[Tuple[str, List[str], str]] = [
            ("Validation Errors", self.validation_errors, "✗"),
            ("Validation Warnings", self.validation_warnings, "⚠"),
            ("Generation Errors", self.generation_errors, "✗"),
            ("Generation Warnings", self.generation_warnings, "⚠"),
        ]
        if self.export is not None:
            sections.append(("Export Errors", list(self.export.errors), "✗"))
            sections.append(("Export Warnings", list(self.export.warnings), "⚠"))
        for title, messages, icon in sections:
            if messages:
                lines.append("-" * 60)
                lines.append(f"  {title} ({len(messages)}):")
                lines.extend(f"    {icon} {message}" for message in messages)

        lines.append("=" * 60)
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Config loading
# ---------------------------------------------------------------------------


def parse_project_config(raw: Any) -> Tuple[ProjectConfig, ValidationResult]:
    """
    Check *raw* with :func:`validate_project_config` and build the model.

    Raises:
        ConfigError: the mapping is missing required settings or holds
            values of the wrong type.
    """
    if not isinstance(raw, Mapping):
        raise ConfigError([f"expected a mapping at top level, got {type(raw).__name__}"])
    checks: ValidationResult = validate_project_config(raw)
    if checks.has_errors:
        raise ConfigError(checks.errors)
    try:
        config: ProjectConfig = ProjectConfig.model_validate(dict(raw))
    except PydanticValidationError as exc:
        raise ConfigError(format_pydantic_errors(exc)) from exc
    for warning in checks.warnings:
        logger.warning("%s", warning)
    return config, checks


def check_project_config(raw: Any) -> ValidationResult:
    """Non-raising counterpart of :func:`parse_project_config`."""
    if not isinstance(raw, Mapping):
        result: ValidationResult = ValidationResult()
        result.add_error(
            "CONFIG_NOT_MAPPING",
            f"expected a mapping at top level, got {type(raw).__name__}",
        )
        return result
    result = validate_project_config(raw)
    if not result.has_errors:
        try:
            ProjectConfig.model_validate(dict(raw))
        except PydanticValidationError as exc:
            for message in format_pydantic_errors(exc):
                result.add_error("CONFIG_INVALID", message)
    return result


def load_project_config(path: Union[str, Path]) -> ProjectConfig:
    """Read a JSON/YAML project config file."""
    config_path: Path = Path(path)
    raw: Any = decode(config_path.read_text(encoding="utf-8"), format_from_path(config_path))
    config, _ = parse_project_config(raw)
    logger.info("Loaded project config '%s' from %s.", config.project.name, config_path)
    return config


# ---------------------------------------------------------------------------
# ProjectGenerator
# ---------------------------------------------------------------------------


class ProjectGenerator:
    """
    "Generate all" orchestrator.

    Usage::

        report = ProjectGenerator().generate(config, model, target="all")
        print(report.summary())

        # Straight from files, writing the result to disk
        report = ProjectGenerator().generate_from_files(
            Path("model.yaml"), Path("codeforge.json"), output_dir=Path("./out"),
        )

    Each call builds fresh generator instances, so one orchestrator may be
    reused for many models.
    """

    def __init__(self, *, strict: bool = False) -> None:
        self._strict: bool = strict
        logger.debug("ProjectGenerator initialised: strict=%s.", strict)

    # -----------------------------------------------------------------
    # Planning
    # -----------------------------------------------------------------

    @staticmethod
    def plan(config: ProjectConfig, target: str = "all") -> List[Tuple[Type[BaseGenerator], str]]:
        """Generators (with their path prefix) that *target* runs, in order."""
        if target not in TARGETS:
            raise ValueError(f"Unknown target {target!r}; expected one of: {', '.join(TARGETS)}")

        steps: List[Tuple[Type[BaseGenerator], str]] = []
        if target in ("specs", "all"):
            steps.append((OpenAPIGenerator, SPECS_PREFIX))
            if config.features.asyncapi:
                steps.append((AsyncAPIGenerator, SPECS_PREFIX))
        if target in ("backend", "all"):
            steps.append((BackendGenerator, BACKEND_PREFIX))
        if target == "docker" or (target == "all" and config.features.docker):
            steps.append((DockerGenerator, ""))
        return steps

    # -----------------------------------------------------------------
    # In-memory generation
    # -----------------------------------------------------------------

    def generate(
        self,
        config: ProjectConfig,
        model: DataModel,
        target: str = "all",
        *,
        output_dir: Optional[Path] = None,
    ) -> GenerationReport:
        """
        Run every generator *target* selects and aggregate their results.

        When *output_dir* is given the collected files are exported there.
        """
        report: GenerationReport = GenerationReport(project_name=config.project.name, target=target)
        started: float = time.perf_counter()

        for generator_cls, prefix in self.plan(config, target):
            with Timer(generator_cls.target) as timer:
                result: GenerationResult = generator_cls.generate(config, model)

            report.generation_errors.extend(result.errors)
            report.generation_warnings.extend(result.warnings)
            if result.success:
                report.files.extend(f.with_prefix(prefix) for f in result.files)
                detail: str = f"{len(result.files)} files"
            else:
                detail = "; ".join(result.errors)
            report.step_metrics.append(GenerationStepMetric(
                step_name=generator_cls.target,
                success=result.success,
                elapsed_seconds=timer.elapsed,
                detail=detail,
            ))

        if output_dir is not None and report.files:
            exporter: ProjectExporter = ProjectExporter(
                config.generation,
                output_dir,
                project_name=config.project.name,
                write_manifest=True,
            )
            with Timer("export") as timer:
                report.export = exporter.export(report.files)
            report.step_metrics.append(GenerationStepMetric(
                step_name="Export",
                success=report.export.success,
                elapsed_seconds=timer.elapsed,
                detail=f"{report.export.manifest.total_files} written, {len(report.export.skipped)} skipped",
            ))

        return self._finalise_report(report, time.perf_counter() - started)

    # -----------------------------------------------------------------
    # From files
    # -----------------------------------------------------------------

    def generate_from_files(
        self,
        model_path: Path,
        config_path: Optional[Path] = None,
        target: str = "all",
        *,
        output_dir: Optional[Path] = None,
    ) -> GenerationReport:
        """
        Load, validate and generate.

        Load and validation failures end up in ``validation_errors`` rather
        than being raised.  Without *config_path* a default config named
        after the model is used.
        """
        report: GenerationReport = GenerationReport(target=target)
        started: float = time.perf_counter()

        with Timer("load") as timer:
            try:
                model: DataModel = ModelLoader(strict=self._strict).parse_file(model_path)
                config: ProjectConfig = (
                    load_project_config(config_path)
                    if config_path is not None
                    else ProjectConfig.default_for(model)
                )
            except ValidationError as exc:
                report.validation_errors.extend(exc.messages)
            except (CodeForgeError, OSError) as exc:
                report.validation_errors.append(str(exc))

        report.step_metrics.append(GenerationStepMetric(
            step_name="Load",
            success=not report.validation_errors,
            elapsed_seconds=timer.elapsed,
            detail=f"from {Path(model_path).name}",
        ))
        if report.validation_errors:
            return self._finalise_report(report, time.perf_counter() - started)

        generated: GenerationReport = self.generate(config, model, target, output_dir=output_dir)
        generated.step_metrics.insert(0, report.step_metrics[0])
        return self._finalise_report(generated, time.perf_counter() - started)

    # -----------------------------------------------------------------
    # Internal
    # -----------------------------------------------------------------

    @staticmethod
    def _finalise_report(report: GenerationReport, elapsed: float) -> GenerationReport:
        report.total_elapsed_seconds = elapsed
        export_failed: bool = report.export is not None and not report.export.success
        report.success = not (report.validation_errors or report.generation_errors or export_failed)

        if report.success:
            logger.info(
                "Generation '%s' complete: %d files in %.3fs.",
                report.target,
                report.total_files,
                elapsed,
            )
        else:
            logger.error(
                "Generation '%s' finished with %d error(s).",
                report.target,
                len(report.validation_errors) + len(report.generation_errors),
            )
        return report


__all__: List[str] = [
    "TARGETS",
    "GenerationReport",
    "GenerationStepMetric",
    "ProjectGenerator",
    "check_project_config",
    "load_project_config",
    "parse_project_config",
]

logger.debug("codeforge.generator loaded — %d public symbols.", len(__all__))
