"""
End-to-end tests for the models generator.

Runs the whole pipeline on a temporary models directory, with the real
scanner, planner and text builder, and a fake compiler in DLL modes.
"""

from __future__ import annotations

import pytest
from conftest import FakeCompiler

from models_builder.pipeline import (
    GenerationInProgressError,
    GenerationState,
    GenerationStatus,
    JsonSchemaProvider,
    LocalFileStore,
    ModelsGenerator,
    ModelsMode,
    StaticSchemaProvider,
)
from models_builder.pipeline.compilers import CompileStatus
from models_builder.pipeline.errors import DiagnosticKind
from models_builder.pipeline.locking import generation_lock

HAND_AUTHORED_TITLE = """
namespace Site.Models
{
    public partial class Article
    {
        public string Title => "Hand-written";
    }
}
"""


class FailingSchemaProvider(StaticSchemaProvider):
    def __init__(self, exc: Exception):
        self.exc = exc

    def get_schema(self):
        raise self.exc


class ReadOnlyFileStore(LocalFileStore):
    def write_text(self, path, content):
        raise PermissionError(f"read-only: {path}")


def snapshot(models_dir) -> dict[str, str]:
    return {p.name: p.read_text(encoding="utf-8") for p in sorted(models_dir.iterdir())}


@pytest.fixture
def status() -> GenerationStatus:
    return GenerationStatus()


@pytest.fixture
def generator(config, article_schema, status) -> ModelsGenerator:
    return ModelsGenerator(config, StaticSchemaProvider(article_schema), status=status)


class TestGenerate:
    """Successful generation runs."""

    def test_article_with_seo_mixin(self, generator, models_dir, status):
        report = generator.generate()

        assert report.success
        assert report.state == GenerationState.DONE
        assert report.error is None
        assert [p.name for p in report.generated_files] == ["Seo.generated.cs", "Article.generated.cs"]
        article = (models_dir / "Article.generated.cs").read_text(encoding="utf-8")
        assert "namespace Site.Models" in article
        assert "public partial class Article : PublishedContentModel, ISeo" in article
        for alias in ["title", "bodyText", "metaTitle", "metaDescription"]:
            assert f'[ImplementPropertyType("{alias}")]' in article
        seo = (models_dir / "Seo.generated.cs").read_text(encoding="utf-8")
        assert "public partial interface ISeo : IPublishedContent" in seo
        assert status.last_error is None

    def test_hand_authored_property_is_not_generated(self, generator, models_dir):
        (models_dir / "Article.cs").write_text(HAND_AUTHORED_TITLE, encoding="utf-8")
        report = generator.generate()

        assert report.success
        article = (models_dir / "Article.generated.cs").read_text(encoding="utf-8")
        assert '[ImplementPropertyType("title")]' not in article
        assert "public string Title" not in article
        assert '[ImplementPropertyType("metaTitle")]' in article
        assert (models_dir / "Article.cs").read_text(encoding="utf-8") == HAND_AUTHORED_TITLE

    def test_generation_is_idempotent(self, generator, models_dir):
        (models_dir / "Article.cs").write_text(HAND_AUTHORED_TITLE, encoding="utf-8")
        generator.generate()
        first = snapshot(models_dir)
        generator.generate()
        assert snapshot(models_dir) == first

    def test_stale_generated_files_are_removed(self, generator, models_dir):
        (models_dir / "Removed.generated.cs").write_text("stale", encoding="utf-8")
        (models_dir / "Notes.txt").write_text("keep", encoding="utf-8")
        generator.generate()
        assert not (models_dir / "Removed.generated.cs").exists()
        assert (models_dir / "Notes.txt").read_text(encoding="utf-8") == "keep"

    def test_models_directory_is_created(self, config, article_schema, tmp_path):
        config.models_directory = str(tmp_path / "new" / "Models")
        report = ModelsGenerator(config, StaticSchemaProvider(article_schema)).generate()
        assert report.success
        assert (tmp_path / "new" / "Models" / "Article.generated.cs").is_file()

    def test_models_namespace_attribute(self, generator, models_dir):
        (models_dir / "Assembly.cs").write_text('[assembly: ModelsNamespace("Site.Content")]\n', encoding="utf-8")
        generator.generate()
        article = (models_dir / "Article.generated.cs").read_text(encoding="utf-8")
        assert "namespace Site.Content\n" in article

    def test_unparseable_file_does_not_stop_generation(self, generator, models_dir):
        (models_dir / "Broken.cs").write_text("public partial class Broken {\n", encoding="utf-8")
        report = generator.generate()
        assert report.success
        assert [d.kind for d in report.diagnostics] == [DiagnosticKind.PARSE_FAILURE]
        assert (models_dir / "Article.generated.cs").is_file()

    def test_success_clears_status(self, generator, status):
        status.report("Failed to build models.")
        status.flag_out_of_date()
        generator.generate()
        assert status.last_error is None
        assert not status.is_out_of_date

    def test_report_to_dict(self, generator):
        data = generator.generate().to_dict()
        assert data["success"] is True
        assert data["state"] == "done"
        assert len(data["generatedFiles"]) == 2
        assert data["artifact"] is None


class TestGenerateFailures:
    """Runs that end in the failed state."""

    def test_schema_unavailable_touches_nothing(self, config, models_dir, status, tmp_path):
        (models_dir / "Article.cs").write_text(HAND_AUTHORED_TITLE, encoding="utf-8")
        (models_dir / "Article.generated.cs").write_text("previous", encoding="utf-8")
        before = snapshot(models_dir)

        generator = ModelsGenerator(config, JsonSchemaProvider(tmp_path / "missing.json"), status=status)
        report = generator.generate()

        assert not report.success
        assert report.state == GenerationState.FAILED
        assert snapshot(models_dir) == before
        assert status.last_error.startswith("Failed to build models.")
        assert "SchemaUnavailableError" in status.last_error

    def test_generation_not_enabled(self, config, article_schema, models_dir, status):
        config.models_mode = ModelsMode.PURE_LIVE
        report = ModelsGenerator(config, StaticSchemaProvider(article_schema), status=status).generate()
        assert report.state == GenerationState.FAILED
        assert report.error == "Models generation is not enabled."
        assert list(models_dir.iterdir()) == []
        assert status.last_error is None

    def test_concurrent_generation_is_rejected(self, generator, models_dir):
        with generation_lock(models_dir):
            with pytest.raises(GenerationInProgressError):
                generator.generate()
        assert not (models_dir / "Article.generated.cs").exists()

    def test_write_failure(self, config, article_schema, status):
        generator = ModelsGenerator(
            config,
            StaticSchemaProvider(article_schema),
            file_store=ReadOnlyFileStore(),
            status=status,
        )
        report = generator.generate()
        assert report.state == GenerationState.FAILED
        assert "EmitIOError" in status.last_error

    def test_unexpected_error_is_reported_and_raised(self, config, status):
        generator = ModelsGenerator(config, FailingSchemaProvider(RuntimeError("boom")), status=status)
        with pytest.raises(RuntimeError):
            generator.generate()
        assert "RuntimeError: boom" in status.last_error
        # The lock is released
        with generation_lock(config.models_directory):
            pass


class TestGenerateDll:
    """DLL modes compile the models after emitting them."""

    def test_compiles_hand_authored_and_generated_sources(self, config, article_schema, models_dir, tmp_path):
        config.models_mode = ModelsMode.DLL
        (models_dir / "Article.cs").write_text(HAND_AUTHORED_TITLE, encoding="utf-8")
        compiler = FakeCompiler()
        report = ModelsGenerator(config, StaticSchemaProvider(article_schema), compiler=compiler).generate()

        assert report.success
        namespace, files, output_dir = compiler.calls[0]
        assert namespace == "Site.Models"
        assert output_dir == tmp_path / "bin"
        assert sorted(p.rsplit("/", 1)[-1] for p in files) == ["Article.cs", "Article.generated.cs", "Seo.generated.cs"]
        assert report.compile_result.artifact_path == tmp_path / "bin" / "Site.Models.dll"
        assert report.to_dict()["artifact"].endswith("Site.Models.dll")

    def test_compile_failure_keeps_generated_sources(self, config, article_schema, models_dir, status):
        config.models_mode = ModelsMode.LIVE_DLL
        compiler = FakeCompiler(CompileStatus.FAILED)
        report = ModelsGenerator(config, StaticSchemaProvider(article_schema), status=status, compiler=compiler).generate()

        assert report.state == GenerationState.FAILED
        assert (models_dir / "Article.generated.cs").is_file()
        assert "CS0103" in report.error
        assert "CompilationFailedError" in status.last_error

    def test_app_data_mode_does_not_compile(self, generator, fake_compiler):
        generator.compiler = fake_compiler
        generator.generate()
        assert fake_compiler.calls == []
