"""CLI entry point for controller-stub-gen."""

import logging
from pathlib import Path

import click
import yaml
from pydantic import ValidationError

from controller_stub_gen.config import StubConfig, load_config
from controller_stub_gen.generator.stub import StubWriter
from controller_stub_gen.generator.validator import validate_model
from controller_stub_gen.parser.base import Model
from controller_stub_gen.parser.detect import find_controller_sources
from controller_stub_gen.parser.java import scan_paths
from controller_stub_gen.processor import process_round

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING, format=LOG_FORMAT)


def _load_config(config_path: Path | None, **overrides) -> StubConfig:
    try:
        return load_config(config_path, **overrides)
    except (yaml.YAMLError, ValidationError, ValueError) as e:
        raise click.BadParameter(str(e), param_hint="--config")


def _build_model(sources: tuple[Path, ...], config: StubConfig, writer: StubWriter | None = None) -> Model:
    """Scan sources and run one processing round."""
    files: list[Path] = []
    for source in sources:
        files.extend(find_controller_sources(source, config.source_pattern, config.encoding))
    click.echo(f"Scanning {len(files)} controller source(s)...", err=True)
    facts = scan_paths(files, encoding=config.encoding)
    return process_round(facts, writer=writer, order=config.path_variable_order)


sources_argument = click.argument(
    "sources", nargs=-1, required=True, type=click.Path(exists=True, path_type=Path)
)
config_option = click.option(
    "-c", "--config", "config_path", default=None, type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML settings file (defaults to ./stubgen.yaml when present).",
)
order_option = click.option(
    "--order", default=None, type=click.Choice(["textual", "declaration"]),
    help="Order of path variables in generated format calls.",
)
verbose_option = click.option("-v", "--verbose", is_flag=True, help="Log every processed fact.")


@click.group()
def main():
    """Controller Stub Gen: generate WireMock stubs from Spring controllers."""
    pass


@main.command()
@sources_argument
@click.option("-o", "--output", default=None, type=click.Path(file_okay=False, path_type=Path), help="Output directory for generated stubs.")
@config_option
@order_option
@verbose_option
def generate(sources: tuple[Path, ...], output: Path | None, config_path: Path | None, order: str | None, verbose: bool):
    """Generate stub and stub base classes for every controller found."""
    configure_logging(verbose)
    config = _load_config(config_path, output_dir=output, path_variable_order=order)

    writer = StubWriter(config)
    model = _build_model(sources, config, writer)
    click.echo(f"Found {len(model.controllers)} controllers.")

    for path in writer.written:
        click.echo(f"  Created {path}")
    click.echo(f"Generated {len(writer.written)} files in {config.output_dir}")


@main.command("model")
@sources_argument
@click.option("-o", "--output", default=None, type=click.Path(dir_okay=False, path_type=Path), help="Write the model JSON to this file.")
@config_option
@order_option
@verbose_option
def dump_model(sources: tuple[Path, ...], output: Path | None, config_path: Path | None, order: str | None, verbose: bool):
    """Print the normalized endpoint model as JSON."""
    configure_logging(verbose)
    config = _load_config(config_path, path_variable_order=order)

    model = _build_model(sources, config)
    text = model.model_dump_json(indent=2)
    if output is None:
        click.echo(text)
    else:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(text + "\n", encoding="utf-8")
        click.echo(f"Model saved to {output}")


@main.command()
@sources_argument
@config_option
@verbose_option
def check(sources: tuple[Path, ...], config_path: Path | None, verbose: bool):
    """Report endpoints that cannot be stubbed faithfully."""
    configure_logging(verbose)
    config = _load_config(config_path)

    model = _build_model(sources, config)
    errors = validate_model(model)
    for key, message in errors.items():
        click.echo(f"{key}: {message}")
    if errors:
        raise SystemExit(1)
    click.echo("All endpoints OK.")
