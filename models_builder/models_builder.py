import json
from pathlib import Path

import click

from .logging import configure_logging
from .pipeline import (
    GenerationInProgressError,
    GenerationStatus,
    JsonSchemaProvider,
    ModelsBuilderConfig,
    ModelsBuilderError,
    ModelsGenerator,
    ModelsMode,
    build_dashboard,
    load_config,
)


def _load_config(config_path):
    try:
        return load_config(config_path) if config_path is not None else ModelsBuilderConfig()
    except (OSError, ValueError, ModelsBuilderError) as e:
        raise click.ClickException(f"Cannot load configuration {config_path}: {e}") from e


@click.group()
def models_builder():
    """Generate published content models from a content-type schema."""


@models_builder.command()
@click.option("--config", "-c", default=None, type=click.Path(exists=True, resolve_path=True))
@click.option("--schema", "-s", required=True, type=click.Path(resolve_path=True), help="JSON content-type schema")
@click.option("--models-dir", "-o", default=None, type=click.Path(resolve_path=True))
@click.option("--bin-dir", default=None, type=click.Path(resolve_path=True))
@click.option("--namespace", "-n", default=None, type=str)
@click.option("--mode", "-m", default=None, type=click.Choice([m.value for m in ModelsMode], case_sensitive=False))
@click.option("--status-dir", default=None, type=click.Path(resolve_path=True), help="Persist status in this directory")
@click.option("--blocking", is_flag=True, default=False, help="Wait for a concurrent generation instead of failing")
@click.option("--verbose", "-v", is_flag=True, default=False)
@click.option("--log-file", default=None, type=click.Path(resolve_path=True))
def generate(config, schema, models_dir, bin_dir, namespace, mode, status_dir, blocking, verbose, log_file):
    """Generate models and print the resulting dashboard as JSON."""
    configure_logging(verbose=verbose, log_file=Path(log_file) if log_file else None)

    config = _load_config(config)

    # Command line options override the config file
    if models_dir is not None:
        config.models_directory = models_dir
    if bin_dir is not None:
        config.bin_directory = bin_dir
    if namespace is not None:
        config.models_namespace = namespace
    if mode is not None:
        config.models_mode = ModelsMode(mode.lower())

    status = GenerationStatus(status_dir, out_of_date_enabled=config.flag_out_of_date_models)
    generator = ModelsGenerator(config, JsonSchemaProvider(schema), status=status)

    try:
        report = generator.generate(blocking=blocking)
    except GenerationInProgressError as e:
        raise click.ClickException(str(e)) from e

    out = build_dashboard(config, status)
    out.update(report.to_dict())
    out["message"] = "Models have been generated." if report.success else report.error
    click.echo(json.dumps(out, indent=2))

    if not report.success:
        raise SystemExit(1)


@models_builder.command()
@click.option("--config", "-c", default=None, type=click.Path(exists=True, resolve_path=True))
@click.option("--status-dir", required=True, type=click.Path(resolve_path=True))
def status(config, status_dir):
    """Print the persisted generation status as JSON."""
    config = _load_config(config)
    sink = GenerationStatus(status_dir, out_of_date_enabled=config.flag_out_of_date_models)
    click.echo(json.dumps(build_dashboard(config, sink), indent=2))


@models_builder.command("flag-out-of-date")
@click.option("--config", "-c", default=None, type=click.Path(exists=True, resolve_path=True))
@click.option("--status-dir", required=True, type=click.Path(resolve_path=True))
def flag_out_of_date(config, status_dir):
    """Flag models as out of date, e.g. after the schema has changed."""
    config = _load_config(config)
    sink = GenerationStatus(status_dir, out_of_date_enabled=config.flag_out_of_date_models)
    sink.flag_out_of_date()
    click.echo(json.dumps(build_dashboard(config, sink), indent=2))


if __name__ == "__main__":
    models_builder()
