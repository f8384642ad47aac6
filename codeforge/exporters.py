# File: codeforge/exporters.py
"""
CodeForge - Project Exporter (File-System Writer)
=================================================
Persists the :class:`GeneratedFile` list returned by the generators.

Responsibilities:
    1. Resolve every forward-slash relative path below the output directory,
       refusing paths that would escape it.
    2. Write each file atomically (temporary sibling, then move).
    3. Honour ``generation.overwrite``: existing files with different content
       are skipped unless overwriting is enabled.
    4. Honour ``generation.backup``: a replaced file is first copied to
       ``<name>.bak``.
    5. Optionally record a manifest with per-file checksums.

A failed write is recorded and the batch continues; every individual file is
either fully written or untouched.
"""

from __future__ import annotations

import logging
import shutil
import time
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Any, Dict, List, Optional, Sequence, Tuple

from codeforge.models import GeneratedFile, GenerationSettings
from codeforge.utils import Timer, dump_json, sha256_hex, write_file

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("codeforge.exporters")

MANIFEST_FILENAME: str = "codeforge-manifest.json"
BACKUP_SUFFIX: str = ".bak"


# ---------------------------------------------------------------------------
# Result data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class FileRecord:
    """One file written to disk."""

    relative_path: str
    absolute_path: str
    size_bytes: int
    line_count: int
    sha256: str
    backup_path: Optional[str] = None


@dataclass(frozen=False, slots=True)
class ExportManifest:
    project_name: str = ""
    generator_version: str = ""
    export_timestamp: str = ""
    output_directory: str = ""
    files: List[FileRecord] = field(default_factory=list)

    @property
    def total_files(self) -> int:
        return len(self.files)

    @property
    def total_bytes(self) -> int:
        return sum(r.size_bytes for r in self.files)

    @property
    def total_lines(self) -> int:
        return sum(r.line_count for r in self.files)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "projectName": self.project_name,
            "generatorVersion": self.generator_version,
            "exportTimestamp": self.export_timestamp,
            "outputDirectory": self.output_directory,
            "totalFiles": self.total_files,
            "totalBytes": self.total_bytes,
            "totalLines": self.total_lines,
            "files": [
                {"path": r.relative_path, "sizeBytes": r.size_bytes, "sha256": r.sha256}
                for r in self.files
            ],
        }


@dataclass(frozen=True, slots=True)
class ExportResult:
    """Outcome of :meth:`ProjectExporter.export`."""

    success: bool
    manifest: ExportManifest
    skipped: Tuple[str, ...]
    errors: Tuple[str, ...]
    warnings: Tuple[str, ...]
    elapsed_seconds: float

    @property
    def written_paths(self) -> List[str]:
        return [r.relative_path for r in self.manifest.files]


# ---------------------------------------------------------------------------
# ProjectExporter
# ---------------------------------------------------------------------------


class ProjectExporter:
    """
    Writes generated files below one output directory.

    Usage::

        exporter = ProjectExporter(config.generation, Path("./out"))
        result = exporter.export(report.files)

    Not thread-safe; use one exporter per output directory.
    """

    def __init__(
        self,
        settings: GenerationSettings,
        output_dir: Optional[Path] = None,
        *,
        project_name: str = "",
        write_manifest: bool = False,
    ) -> None:
        self._settings: GenerationSettings = settings
        self._output_dir: Path = Path(output_dir or settings.output_dir).resolve()
        self._project_name: str = project_name
        self._write_manifest: bool = write_manifest

        self._records: List[FileRecord] = []
        self._skipped: List[str] = []
        self._errors: List[str] = []
        self._warnings: List[str] = []

        logger.debug(
            "ProjectExporter initialised: output_dir=%s, overwrite=%s, backup=%s.",
            self._output_dir,
            settings.overwrite,
            settings.backup,
        )

    @property
    def output_dir(self) -> Path:
        return self._output_dir

    # -----------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------

    def export(self, files: Sequence[GeneratedFile]) -> ExportResult:
        with Timer("export") as timer:
            for generated in files:
                try:
                    self._export_one(generated)
                except (OSError, ValueError) as exc:
                    message: str = f"Failed to write {generated.path}: {type(exc).__name__}: {exc}"
                    self._errors.append(message)
                    logger.error(message)

            if self._write_manifest and self._records:
                self._write_manifest_file()

        manifest: ExportManifest = self._build_manifest()
        result: ExportResult = ExportResult(
            success=not self._errors,
            manifest=manifest,
            skipped=tuple(self._skipped),
            errors=tuple(self._errors),
            warnings=tuple(self._warnings),
            elapsed_seconds=timer.elapsed,
        )

        if result.success:
            logger.info(
                "Export completed: %d written, %d skipped, %d bytes in %.3fs.",
                manifest.total_files,
                len(self._skipped),
                manifest.total_bytes,
                timer.elapsed,
            )
        else:
            logger.error(
                "Export completed with %d error(s) in %.3fs.",
                len(self._errors),
                timer.elapsed,
            )
        return result

    def resolve(self, relative_path: str) -> Path:
        """Absolute target for *relative_path*; rejects paths outside the output."""
        posix: PurePosixPath = PurePosixPath(relative_path)
        if posix.is_absolute() or ".." in posix.parts:
            raise ValueError(f"Refusing to write outside the output directory: {relative_path}")
        return self._output_dir.joinpath(*posix.parts)

    # -----------------------------------------------------------------
    # Internal
    # -----------------------------------------------------------------

    def _export_one(self, generated: GeneratedFile) -> None:
        target: Path = self.resolve(generated.path)
        backup_path: Optional[str] = None

        if target.exists():
            existing: str = target.read_text(encoding="utf-8", errors="replace")
            if existing == generated.content:
                logger.debug("Unchanged: %s", generated.path)
                self._skipped.append(generated.path)
                return
            if not self._settings.overwrite:
                warning: str = (
                    f"Skipped existing file {generated.path} "
                    "(enable generation.overwrite to replace it)"
                )
                self._warnings.append(warning)
                self._skipped.append(generated.path)
                logger.warning(warning)
                return
            if self._settings.backup:
                backup: Path = target.with_name(target.name + BACKUP_SUFFIX)
                shutil.copy2(target, backup)
                backup_path = str(backup)
                logger.debug("Backed up %s to %s", target, backup)

        size: int = write_file(target, generated.content)
        self._records.append(
            FileRecord(
                relative_path=generated.path,
                absolute_path=str(target),
                size_bytes=size,
                line_count=generated.line_count,
                sha256=sha256_hex(generated.content),
                backup_path=backup_path,
            )
        )

    def _build_manifest(self) -> ExportManifest:
        from codeforge import __version__

        return ExportManifest(
            project_name=self._project_name,
            generator_version=__version__,
            export_timestamp=time.strftime("%Y-%m-%dT%H:%M:%S%z"),
            output_directory=str(self._output_dir),
            files=list(self._records),
        )

    def _write_manifest_file(self) -> None:
        manifest_path: Path = self._output_dir / MANIFEST_FILENAME
        try:
            write_file(manifest_path, dump_json(self._build_manifest().to_dict()))
            logger.debug("Wrote manifest to %s.", manifest_path)
        except OSError as exc:
            self._warnings.append(f"Could not write manifest: {exc}")
            logger.warning("Failed to write manifest: %s", exc)


__all__: List[str] = [
    "BACKUP_SUFFIX",
    "MANIFEST_FILENAME",
    "ExportManifest",
    "ExportResult",
    "FileRecord",
    "ProjectExporter",
]

logger.debug("codeforge.exporters loaded — %d public symbols.", len(__all__))
