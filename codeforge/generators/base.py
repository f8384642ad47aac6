# File: codeforge/generators/base.py
"""
CodeForge - Generator Base Class
================================
Shared contract for every artifact generator::

    generate(config, model) -> GenerationResult

``generate`` never raises.  Subclasses implement :meth:`build_files`; any
exception escaping it is logged and turned into ``success=False`` with a
descriptive error string, so an orchestrator can still run the remaining
generators.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from codeforge.models import (
    DataModel,
    FileKind,
    GeneratedFile,
    GenerationResult,
    ProjectConfig,
)

logger: logging.Logger = logging.getLogger("codeforge.generators")


class BaseGenerator:
    """Template-method base: subclasses supply ``target`` and ``build_files``."""

    target: str = "base"

    def __init__(self, config: ProjectConfig, model: DataModel) -> None:
        self._config: ProjectConfig = config
        self._model: DataModel = model
        self._warnings: List[str] = []

    @property
    def config(self) -> ProjectConfig:
        return self._config

    @property
    def model(self) -> DataModel:
        return self._model

    def warn(self, message: str) -> None:
        logger.warning("[%s] %s", self.target, message)
        self._warnings.append(message)

    def build_files(self) -> List[GeneratedFile]:
        raise NotImplementedError

    @classmethod
    def generate(cls, config: ProjectConfig, model: DataModel) -> GenerationResult:
        """Run a fresh generator instance and wrap its outcome."""
        generator = cls(config, model)
        try:
            files: List[GeneratedFile] = generator.build_files()
        except Exception as exc:
            message: str = f"{cls.target} generation failed: {type(exc).__name__}: {exc}"
            logger.error(message, exc_info=True)
            return GenerationResult(
                success=False,
                errors=[message],
                warnings=list(generator._warnings),
            )

        logger.info(
            "Generated %d %s file(s) for '%s'.",
            len(files),
            cls.target,
            model.name,
        )
        return GenerationResult(
            success=True,
            files=files,
            warnings=list(generator._warnings),
        )


def make_file(
    path: str,
    content: str,
    kind: FileKind = FileKind.SOURCE,
    language: Optional[str] = None,
) -> GeneratedFile:
    """Build a :class:`GeneratedFile`, guaranteeing a trailing newline."""
    if content and not content.endswith("\n"):
        content += "\n"
    return GeneratedFile(path=path, content=content, type=kind, language=language)


__all__: List[str] = ["BaseGenerator", "make_file"]
