"""
Shared fixtures for the models builder tests.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from models_builder.pipeline.compilers import Compiler, CompileResult, CompileStatus, CompilerDiagnostic
from models_builder.pipeline.config import ModelsBuilderConfig, ModelsMode
from models_builder.pipeline.schema import PropertyModel, SchemaSnapshot, TypeModel


def prop(alias: str, value_type: str = "string", **kwargs) -> PropertyModel:
    """Shorthand for a property model."""
    return PropertyModel(alias=alias, value_type=value_type, **kwargs)


def content_type(alias: str, *properties: PropertyModel, **kwargs) -> TypeModel:
    """Shorthand for a content type model."""
    return TypeModel(alias=alias, properties=tuple(properties), **kwargs)


class FakeCompiler(Compiler):
    """Compiler recording its calls instead of running csc."""

    def __init__(self, status: CompileStatus = CompileStatus.SUCCEEDED):
        self.status = status
        self.calls: list[tuple[str, dict[str, str], Path]] = []

    def compile(self, namespace: str, files: dict[str, str], output_dir: Path) -> CompileResult:
        self.calls.append((namespace, dict(files), Path(output_dir)))
        if self.status == CompileStatus.SUCCEEDED:
            artifact = Path(output_dir) / f"{namespace}.dll"
            artifact.parent.mkdir(parents=True, exist_ok=True)
            artifact.write_bytes(b"MZ")
            return CompileResult(status=self.status, artifact_path=artifact)
        return CompileResult(
            status=self.status,
            diagnostics=[
                CompilerDiagnostic(
                    path="Article.cs",
                    line=3,
                    column=5,
                    code="CS0103",
                    message="The name 'oops' does not exist in the current context",
                )
            ],
            message="Failed to compile models (exit code 1).",
        )


@pytest.fixture
def article_schema() -> SchemaSnapshot:
    """Article composed of the Seo mixin."""
    seo = content_type(
        "seo",
        prop("metaTitle", display_name="Meta Title"),
        prop("metaDescription"),
        is_mixin=True,
    )
    article = content_type(
        "article",
        prop("title", description="The article title"),
        prop("bodyText", "IHtmlString"),
        mixin_aliases=("seo",),
    )
    return SchemaSnapshot((seo, article))


@pytest.fixture
def models_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "Models"
    directory.mkdir()
    return directory


@pytest.fixture
def config(tmp_path: Path, models_dir: Path) -> ModelsBuilderConfig:
    return ModelsBuilderConfig(
        models_mode=ModelsMode.APP_DATA,
        models_namespace="Site.Models",
        models_directory=str(models_dir),
        bin_directory=str(tmp_path / "bin"),
    )


@pytest.fixture
def fake_compiler() -> FakeCompiler:
    return FakeCompiler()
