"""
tests/test_generator.py
Integration tests for the orchestrator, the exporter, the Docker generator
and the command-line interface.

All file I/O happens in pytest's tmp_path; CLI runs go through
``cli_main`` and are checked by their exit codes.
"""

from __future__ import annotations

import copy
import json
import pathlib
from typing import Any, Dict, List

import pytest
import yaml

from codeforge.cli import (
    EXIT_EXPORT_ERROR,
    EXIT_GENERATION_ERROR,
    EXIT_INPUT_ERROR,
    EXIT_SUCCESS,
    EXIT_VALIDATION_ERROR,
    cli_main,
)
from codeforge.errors import ConfigError
from codeforge.exporters import BACKUP_SUFFIX, MANIFEST_FILENAME, ProjectExporter
from codeforge.generator import (
    ProjectGenerator,
    load_project_config,
    parse_project_config,
)
from codeforge.generators import (
    AsyncAPIGenerator,
    BackendGenerator,
    DockerGenerator,
    OpenAPIGenerator,
)
from codeforge.generators.base import make_file
from codeforge.models import DataModel, GeneratedFile, GenerationSettings, ProjectConfig


def _run_cli(argv: List[str]) -> int:
    with pytest.raises(SystemExit) as exc_info:
        cli_main(argv)
    return int(exc_info.value.code)


# ===========================================================================
# Tests for ProjectGenerator.plan
# ===========================================================================


class TestPlan:
    """Which generators each target runs."""

    def test_specs_with_asyncapi(self, project_config: ProjectConfig) -> None:
        assert ProjectGenerator.plan(project_config, "specs") == [
            (OpenAPIGenerator, "specs"),
            (AsyncAPIGenerator, "specs"),
        ]

    def test_specs_without_asyncapi(self, config_dict: Dict[str, Any]) -> None:
        config_dict["features"]["asyncapi"] = False
        config = ProjectConfig.model_validate(config_dict)
        assert ProjectGenerator.plan(config, "specs") == [(OpenAPIGenerator, "specs")]

    def test_all_without_docker(self, project_config: ProjectConfig) -> None:
        generators = [cls for cls, _ in ProjectGenerator.plan(project_config, "all")]
        assert generators == [OpenAPIGenerator, AsyncAPIGenerator, BackendGenerator]

    def test_all_with_docker(self, full_feature_config: ProjectConfig) -> None:
        steps = ProjectGenerator.plan(full_feature_config, "all")
        assert steps[-1] == (DockerGenerator, "")

    def test_docker_target_ignores_flag(self, project_config: ProjectConfig) -> None:
        assert ProjectGenerator.plan(project_config, "docker") == [(DockerGenerator, "")]

    def test_unknown_target(self, project_config: ProjectConfig) -> None:
        with pytest.raises(ValueError, match="Unknown target"):
            ProjectGenerator.plan(project_config, "frontend")


# ===========================================================================
# Tests for ProjectGenerator.generate
# ===========================================================================


class TestProjectGenerator:
    """In-memory orchestration."""

    def test_specs_paths(self, project_config: ProjectConfig, blog_model: DataModel) -> None:
        report = ProjectGenerator().generate(project_config, blog_model, "specs")
        assert report.success, report.generation_errors
        assert report.file_paths == [
            "specs/openapi.json",
            "specs/openapi.yaml",
            "specs/asyncapi.json",
            "specs/asyncapi.yaml",
        ]

    def test_all_paths(self, full_feature_config: ProjectConfig, blog_model: DataModel) -> None:
        report = ProjectGenerator().generate(full_feature_config, blog_model, "all")
        assert report.success
        paths = report.file_paths
        assert "backend/src/user/user.entity.ts" in paths
        assert "backend/package.json" in paths
        assert {"Dockerfile", "docker-compose.yml", ".dockerignore"} <= set(paths)
        assert len(paths) == len(set(paths)), "Paths must be unique"
        assert [m.step_name for m in report.step_metrics] == [
            "OpenAPI", "AsyncAPI", "Backend", "Docker",
        ]

    def test_totals(self, project_config: ProjectConfig, blog_model: DataModel) -> None:
        report = ProjectGenerator().generate(project_config, blog_model, "specs")
        assert report.total_files == 4
        assert report.total_lines == sum(f.line_count for f in report.files)
        assert report.total_bytes > 0

    def test_partial_failure_keeps_other_outputs(
        self,
        project_config: ProjectConfig,
        blog_model: DataModel,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        def boom(self: BackendGenerator) -> List[GeneratedFile]:
            raise RuntimeError("template missing")

        monkeypatch.setattr(BackendGenerator, "build_files", boom)
        report = ProjectGenerator().generate(project_config, blog_model, "all")
        assert not report.success
        assert report.generation_errors == [
            "Backend generation failed: RuntimeError: template missing"
        ]
        assert "specs/openapi.json" in report.file_paths
        assert not any(p.startswith("backend/") for p in report.file_paths)
        backend_step = [m for m in report.step_metrics if m.step_name == "Backend"][0]
        assert not backend_step.success

    def test_summary(self, project_config: ProjectConfig, blog_model: DataModel) -> None:
        summary = ProjectGenerator().generate(project_config, blog_model, "specs").summary()
        assert "CodeForge Generation Report" in summary
        assert "SUCCESS" in summary
        assert "blog-api" in summary

    def test_export_to_output_dir(
        self, project_config: ProjectConfig, blog_model: DataModel, output_dir: pathlib.Path
    ) -> None:
        report = ProjectGenerator().generate(
            project_config, blog_model, "all", output_dir=output_dir
        )
        assert report.success, report.summary()
        assert report.export is not None and report.export.success
        assert (output_dir / "specs" / "openapi.yaml").is_file()
        assert (output_dir / "backend" / "src" / "post" / "post.entity.ts").is_file()
        written = json.loads((output_dir / "specs" / "openapi.json").read_text(encoding="utf-8"))
        assert written["openapi"] == "3.0.3"

    def test_export_writes_manifest(
        self, project_config: ProjectConfig, blog_model: DataModel, output_dir: pathlib.Path
    ) -> None:
        report = ProjectGenerator().generate(
            project_config, blog_model, "specs", output_dir=output_dir
        )
        assert report.success, report.summary()
        manifest = json.loads((output_dir / MANIFEST_FILENAME).read_text(encoding="utf-8"))
        assert manifest["projectName"] == "blog-api"
        assert [entry["path"] for entry in manifest["files"]] == report.file_paths


# ===========================================================================
# Tests for generate_from_files and config loading
# ===========================================================================


class TestFromFiles:
    """File-based entry points."""

    def test_generate_from_files(
        self, blog_yaml_path: pathlib.Path, config_json_path: pathlib.Path
    ) -> None:
        report = ProjectGenerator().generate_from_files(blog_yaml_path, config_json_path, "specs")
        assert report.success, report.summary()
        assert report.project_name == "blog-api"
        assert report.step_metrics[0].step_name == "Load"

    def test_default_config(self, blog_json_path: pathlib.Path) -> None:
        report = ProjectGenerator().generate_from_files(blog_json_path, target="specs")
        assert report.success
        assert report.project_name == "Blog"
        assert report.file_paths == ["specs/openapi.json", "specs/openapi.yaml"]

    def test_invalid_model_reported(
        self, blog_dict: Dict[str, Any], tmp_path: pathlib.Path
    ) -> None:
        blog_dict["entities"][0]["fields"][0]["isPrimaryKey"] = False
        path = tmp_path / "broken.json"
        path.write_text(json.dumps(blog_dict), encoding="utf-8")
        report = ProjectGenerator().generate_from_files(path)
        assert not report.success
        assert report.validation_errors == ["Entity User: must have at least one primary key field"]
        assert report.files == []

    def test_missing_file_reported(self, tmp_path: pathlib.Path) -> None:
        report = ProjectGenerator().generate_from_files(tmp_path / "nope.yaml")
        assert not report.success
        assert len(report.validation_errors) == 1

    def test_load_yaml_config(self, config_dict: Dict[str, Any], tmp_path: pathlib.Path) -> None:
        path = tmp_path / "codeforge.yml"
        path.write_text(yaml.safe_dump(config_dict), encoding="utf-8")
        config = load_project_config(path)
        assert config.project.name == "blog-api"
        assert config.database.effective_port == 5432
        assert config.features.asyncapi is True

    def test_config_errors(self, config_dict: Dict[str, Any]) -> None:
        config_dict["project"]["version"] = "one"
        config_dict["database"]["type"] = "oracle"
        with pytest.raises(ConfigError) as exc_info:
            parse_project_config(config_dict)
        assert len(exc_info.value.messages) == 2
        assert str(exc_info.value).startswith("Project configuration invalid:")

    def test_config_type_errors(self, config_dict: Dict[str, Any]) -> None:
        config_dict["database"]["port"] = "not-a-port"
        with pytest.raises(ConfigError) as exc_info:
            parse_project_config(config_dict)
        assert any(m.startswith("/database/port") for m in exc_info.value.messages)

    def test_config_not_a_mapping(self) -> None:
        with pytest.raises(ConfigError):
            parse_project_config(["project"])

    def test_config_warnings_returned(self, config_dict: Dict[str, Any]) -> None:
        del config_dict["features"]
        config, checks = parse_project_config(config_dict)
        assert config.features.swagger is True
        assert checks.warnings == ["features section is missing, using defaults"]


# ===========================================================================
# Tests for ProjectExporter
# ===========================================================================


class TestProjectExporter:
    """Writing generated files to disk."""

    @staticmethod
    def _files(content: str = "hello") -> List[GeneratedFile]:
        return [make_file("a/one.txt", content), make_file("two.txt", content)]

    def test_writes_files(self, output_dir: pathlib.Path) -> None:
        result = ProjectExporter(GenerationSettings(), output_dir).export(self._files())
        assert result.success
        assert result.written_paths == ["a/one.txt", "two.txt"]
        assert (output_dir / "a" / "one.txt").read_text(encoding="utf-8") == "hello\n"
        assert result.manifest.total_files == 2

    def test_unchanged_files_skipped_silently(self, output_dir: pathlib.Path) -> None:
        ProjectExporter(GenerationSettings(), output_dir).export(self._files())
        result = ProjectExporter(GenerationSettings(), output_dir).export(self._files())
        assert result.success
        assert result.skipped == ("a/one.txt", "two.txt")
        assert result.warnings == ()

    def test_existing_files_kept_without_overwrite(self, output_dir: pathlib.Path) -> None:
        ProjectExporter(GenerationSettings(), output_dir).export(self._files("old"))
        result = ProjectExporter(GenerationSettings(), output_dir).export(self._files("new"))
        assert result.success
        assert len(result.warnings) == 2
        assert "enable generation.overwrite" in result.warnings[0]
        assert (output_dir / "two.txt").read_text(encoding="utf-8") == "old\n"

    def test_overwrite_with_backup(self, output_dir: pathlib.Path) -> None:
        ProjectExporter(GenerationSettings(), output_dir).export(self._files("old"))
        settings = GenerationSettings(overwrite=True, backup=True)
        result = ProjectExporter(settings, output_dir).export(self._files("new"))
        assert result.success
        assert (output_dir / "two.txt").read_text(encoding="utf-8") == "new\n"
        backup = output_dir / ("two.txt" + BACKUP_SUFFIX)
        assert backup.read_text(encoding="utf-8") == "old\n"
        assert result.manifest.files[1].backup_path == str(backup.resolve())

    def test_overwrite_without_backup(self, output_dir: pathlib.Path) -> None:
        ProjectExporter(GenerationSettings(), output_dir).export(self._files("old"))
        ProjectExporter(GenerationSettings(overwrite=True), output_dir).export(self._files("new"))
        assert not (output_dir / ("two.txt" + BACKUP_SUFFIX)).exists()

    @pytest.mark.parametrize("path", ["../escape.txt", "/etc/passwd", "a/../../b.txt"])
    def test_path_escape_rejected(self, output_dir: pathlib.Path, path: str) -> None:
        files = [make_file(path, "x"), make_file("safe.txt", "y")]
        result = ProjectExporter(GenerationSettings(), output_dir).export(files)
        assert not result.success
        assert len(result.errors) == 1 and path in result.errors[0]
        assert (output_dir / "safe.txt").is_file(), "Remaining files are still written"

    def test_manifest(self, output_dir: pathlib.Path) -> None:
        exporter = ProjectExporter(
            GenerationSettings(), output_dir, project_name="blog-api", write_manifest=True
        )
        exporter.export(self._files())
        manifest = json.loads((output_dir / MANIFEST_FILENAME).read_text(encoding="utf-8"))
        assert manifest["projectName"] == "blog-api"
        assert manifest["totalFiles"] == 2
        assert len(manifest["files"][0]["sha256"]) == 64

    def test_output_dir_defaults_to_settings(self, tmp_path: pathlib.Path) -> None:
        settings = GenerationSettings(output_dir=str(tmp_path / "from-settings"))
        assert ProjectExporter(settings).output_dir == (tmp_path / "from-settings").resolve()


# ===========================================================================
# Tests for DockerGenerator
# ===========================================================================


class TestDockerGenerator:
    """Container files."""

    def test_files(self, project_config: ProjectConfig, blog_model: DataModel) -> None:
        result = DockerGenerator.generate(project_config, blog_model)
        assert result.success
        assert result.file_paths == ["Dockerfile", "docker-compose.yml", ".dockerignore"]

    def test_dockerfile(self, project_config: ProjectConfig, blog_model: DataModel) -> None:
        content = DockerGenerator.generate(project_config, blog_model).get_file("Dockerfile").content
        assert "FROM node:18-alpine AS builder" in content
        assert "COPY backend/ ." in content
        assert "HEALTHCHECK" in content and "/api/v1/health" in content

    def test_compose_with_postgres(self, project_config: ProjectConfig, blog_model: DataModel) -> None:
        content = DockerGenerator.generate(project_config, blog_model).get_file(
            "docker-compose.yml"
        ).content
        compose = yaml.safe_load(content)
        assert set(compose["services"]) == {"app", "database"}
        assert compose["services"]["database"]["image"] == "postgres:15-alpine"
        assert compose["services"]["app"]["depends_on"] == ["database"]
        assert "db_data" in compose["volumes"]

    def test_compose_with_sqlite(self, config_dict: Dict[str, Any], blog_model: DataModel) -> None:
        data = copy.deepcopy(config_dict)
        data["database"]["type"] = "sqlite"
        config = ProjectConfig.model_validate(data)
        compose = yaml.safe_load(
            DockerGenerator.generate(config, blog_model).get_file("docker-compose.yml").content
        )
        assert list(compose["services"]) == ["app"]
        assert "app_data:/app/data" in compose["services"]["app"]["volumes"]


# ===========================================================================
# Tests for the CLI
# ===========================================================================


class TestCLI:
    """``codeforge validate`` and ``codeforge generate``."""

    def test_validate_ok(
        self, blog_yaml_path: pathlib.Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        assert _run_cli(["validate", "--model", str(blog_yaml_path)]) == EXIT_SUCCESS
        out = capsys.readouterr().out
        assert "Valid:    Yes" in out

    def test_validate_with_config(
        self, blog_yaml_path: pathlib.Path, config_json_path: pathlib.Path
    ) -> None:
        argv = ["validate", "-m", str(blog_yaml_path), "-c", str(config_json_path)]
        assert _run_cli(argv) == EXIT_SUCCESS

    def test_validate_invalid_model(
        self,
        blog_dict: Dict[str, Any],
        tmp_path: pathlib.Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        blog_dict["entities"][1]["name"] = "User"
        path = tmp_path / "dup.yaml"
        path.write_text(yaml.safe_dump(blog_dict), encoding="utf-8")
        assert _run_cli(["validate", "--model", str(path)]) == EXIT_VALIDATION_ERROR
        assert "Duplicate entity name 'User'" in capsys.readouterr().out

    def test_validate_invalid_config(
        self, blog_yaml_path: pathlib.Path, config_dict: Dict[str, Any], tmp_path: pathlib.Path
    ) -> None:
        config_dict["project"]["version"] = "1"
        path = tmp_path / "bad.json"
        path.write_text(json.dumps(config_dict), encoding="utf-8")
        argv = ["validate", "-m", str(blog_yaml_path), "-c", str(path)]
        assert _run_cli(argv) == EXIT_VALIDATION_ERROR

    def test_validate_reports_model_and_config_errors_together(
        self,
        blog_dict: Dict[str, Any],
        config_dict: Dict[str, Any],
        tmp_path: pathlib.Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        blog_dict["version"] = "bad"
        model_path = tmp_path / "bad.yaml"
        model_path.write_text(yaml.safe_dump(blog_dict), encoding="utf-8")
        config_dict["database"]["type"] = "oracle"
        config_path = tmp_path / "bad.json"
        config_path.write_text(json.dumps(config_dict), encoding="utf-8")

        argv = ["validate", "-m", str(model_path), "-c", str(config_path)]
        assert _run_cli(argv) == EXIT_VALIDATION_ERROR
        out = capsys.readouterr().out
        assert "/version:" in out
        assert "database.type must be one of: postgresql, mysql, mongodb, sqlite" in out

    def test_validate_prints_config_warnings(
        self,
        blog_yaml_path: pathlib.Path,
        config_dict: Dict[str, Any],
        tmp_path: pathlib.Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        del config_dict["features"]
        config_path = tmp_path / "nofeatures.json"
        config_path.write_text(json.dumps(config_dict), encoding="utf-8")

        argv = ["validate", "-m", str(blog_yaml_path), "-c", str(config_path)]
        assert _run_cli(argv) == EXIT_SUCCESS
        out = capsys.readouterr().out
        assert "Valid:    Yes" in out
        assert "features section is missing, using defaults" in out

    def test_missing_model_file(self, tmp_path: pathlib.Path) -> None:
        assert _run_cli(["validate", "--model", str(tmp_path / "missing.yaml")]) == EXIT_INPUT_ERROR

    def test_unparseable_model(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "broken.json"
        path.write_text("{", encoding="utf-8")
        assert _run_cli(["validate", "--model", str(path)]) == EXIT_INPUT_ERROR

    def test_generate_specs(
        self,
        blog_yaml_path: pathlib.Path,
        config_json_path: pathlib.Path,
        output_dir: pathlib.Path,
    ) -> None:
        argv = [
            "generate", "specs",
            "--model", str(blog_yaml_path),
            "--config", str(config_json_path),
            "-o", str(output_dir),
        ]
        assert _run_cli(argv) == EXIT_SUCCESS
        assert (output_dir / "specs" / "openapi.json").is_file()
        assert (output_dir / "specs" / "asyncapi.yaml").is_file()
        assert not (output_dir / "backend").exists()

    def test_generate_dry_run(
        self,
        blog_yaml_path: pathlib.Path,
        output_dir: pathlib.Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        argv = ["generate", "backend", "-m", str(blog_yaml_path), "-o", str(output_dir), "--dry-run"]
        assert _run_cli(argv) == EXIT_SUCCESS
        assert "backend/src/user/user.entity.ts" in capsys.readouterr().out
        assert list(output_dir.iterdir()) == []

    def test_generate_force_overwrites(
        self, blog_yaml_path: pathlib.Path, output_dir: pathlib.Path
    ) -> None:
        stale = output_dir / "specs" / "openapi.json"
        stale.parent.mkdir(parents=True)
        stale.write_text("{}", encoding="utf-8")
        base = ["generate", "specs", "-m", str(blog_yaml_path), "-o", str(output_dir)]
        assert _run_cli(base) == EXIT_SUCCESS
        assert stale.read_text(encoding="utf-8") == "{}"
        assert _run_cli(base + ["--force"]) == EXIT_SUCCESS
        assert json.loads(stale.read_text(encoding="utf-8"))["openapi"] == "3.0.3"

    def test_generate_invalid_model(
        self, blog_dict: Dict[str, Any], tmp_path: pathlib.Path, output_dir: pathlib.Path
    ) -> None:
        blog_dict["enums"] = [{"name": "Role", "values": ["A"]}]
        path = tmp_path / "bad-enum.json"
        path.write_text(json.dumps(blog_dict), encoding="utf-8")
        argv = ["generate", "-m", str(path), "-o", str(output_dir)]
        assert _run_cli(argv) == EXIT_VALIDATION_ERROR

    def test_generation_error_exit_code(
        self,
        blog_yaml_path: pathlib.Path,
        output_dir: pathlib.Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        def boom(self: OpenAPIGenerator) -> List[GeneratedFile]:
            raise RuntimeError("no")

        monkeypatch.setattr(OpenAPIGenerator, "build_files", boom)
        argv = ["generate", "specs", "-m", str(blog_yaml_path), "-o", str(output_dir)]
        assert _run_cli(argv) == EXIT_GENERATION_ERROR

    def test_export_error_exit_code(
        self, blog_yaml_path: pathlib.Path, output_dir: pathlib.Path
    ) -> None:
        (output_dir / "specs").write_text("a file where a directory should be", encoding="utf-8")
        argv = ["generate", "specs", "-m", str(blog_yaml_path), "-o", str(output_dir)]
        assert _run_cli(argv) == EXIT_EXPORT_ERROR

    def test_unknown_target_rejected_by_parser(self, blog_yaml_path: pathlib.Path) -> None:
        assert _run_cli(["generate", "frontend", "-m", str(blog_yaml_path)]) == 2
