# src/glosspipe/cli.py
"""glosspipe Command Line Interface.

Entry point for the glosspipe CLI tool.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

import typer
from dynaconf.vendor.ruamel.yaml.parser import ParserError as YamlParserError
from dynaconf.vendor.ruamel.yaml.scanner import ScannerError as YamlScannerError
from pydantic import ValidationError

from glosspipe import __version__
from glosspipe.contracts.enums import ConflictStrategy
from glosspipe.contracts.errors import DependencyCycleError, DuplicateExtensionError, ExtensionNotFoundError
from glosspipe.contracts.results import ProcessingResult
from glosspipe.core.config import PipelineSettings, load_settings
from glosspipe.core.logging import configure_logging
from glosspipe.core.serialization import document_from_dict, node_to_dict
from glosspipe.engine.processor import Processor
from glosspipe.plugins.presets import get_preset
from glosspipe.plugins.registry import ExtensionRegistry

__all__ = [
    "app",
]

app = typer.Typer(
    name="glosspipe",
    help="glosspipe: extension pipelines for annotated document trees.",
    no_args_is_help=True,
)

extensions_app = typer.Typer(help="Extension registry commands.")
app.add_typer(extensions_app, name="extensions")


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"glosspipe version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """glosspipe: extension pipelines for annotated document trees."""


def _build_registry() -> ExtensionRegistry:
    """Registry with built-ins plus any entry point plugins installed."""
    registry = ExtensionRegistry()
    registry.register_builtin_extensions()
    registry.load_entrypoint_plugins()
    return registry


def _format_error(title: str, message: str, hint: str | None = None) -> None:
    """Display a formatted error with an optional hint."""
    from rich.console import Console
    from rich.panel import Panel
    from rich.text import Text

    console = Console(stderr=True)

    content = Text()
    content.append(message, style="white")
    if hint:
        content.append("\n\n")
        content.append("Hint: ", style="yellow bold")
        content.append(hint, style="yellow")

    console.print(Panel(content, title=f"[red bold]{title}[/]", border_style="red", padding=(0, 1)))


def _load_pipeline_settings(settings: Path | None) -> PipelineSettings:
    if settings is None:
        return PipelineSettings()
    try:
        return load_settings(settings.expanduser())
    except (YamlParserError, YamlScannerError) as e:
        typer.echo(f"YAML syntax error in {settings}: {e.problem}", err=True)
        raise typer.Exit(1) from None
    except FileNotFoundError:
        typer.echo(f"Error: Settings file not found: {settings}", err=True)
        raise typer.Exit(1) from None
    except ValidationError as e:
        typer.echo("Configuration errors:", err=True)
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            typer.echo(f"  - {loc}: {error['msg']}", err=True)
        raise typer.Exit(1) from None


def _print_summary(result: ProcessingResult) -> None:
    meta = result.metadata
    typer.echo(f"Applied: {', '.join(meta.applied_extensions) or '(none)'}", err=True)
    if meta.skipped_extensions:
        typer.secho(f"Skipped: {', '.join(meta.skipped_extensions)}", fg=typer.colors.YELLOW, err=True)
    for record in meta.errors:
        typer.secho(f"  [{record.kind}] {record.extension_id}: {record.message}", fg=typer.colors.RED, err=True)
    for warning in meta.warnings:
        typer.secho(f"  warning: {warning.message}", fg=typer.colors.YELLOW, err=True)
    if meta.aborted:
        typer.secho("Run stopped at the first failure (strict mode).", fg=typer.colors.RED, err=True)
    typer.echo(f"Done in {meta.stats.total_time:.3f}s", err=True)


@app.command()
def process(
    document: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        help="Document tree as JSON.",
    ),
    extension: list[str] = typer.Option(
        [],
        "--extension",
        "-e",
        help="Extension id to apply (repeatable). Runs after extensions from --settings.",
    ),
    settings: Path | None = typer.Option(
        None,
        "--settings",
        "-s",
        help="Path to settings YAML file.",
    ),
    lenient: bool | None = typer.Option(
        None,
        "--lenient/--strict",
        help="Continue past failing extensions (overrides settings).",
    ),
    conflict_strategy: ConflictStrategy | None = typer.Option(
        None,
        "--conflict-strategy",
        "-c",
        help="What happens when two extensions write the same field.",
    ),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the processed document here instead of stdout.",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Emit logs as JSON.",
    ),
) -> None:
    """Run extensions over a document and write the processed tree as JSON."""
    config = _load_pipeline_settings(settings)
    configure_logging(json_output=json_logs or config.logging.json_output, level=config.logging.level)

    try:
        tree = document_from_dict(json.loads(document.read_text(encoding="utf-8")))
    except (json.JSONDecodeError, ValueError, KeyError) as e:
        _format_error("Invalid Document", f"{document}: {e}")
        raise typer.Exit(1) from None

    overrides: dict[str, Any] = {}
    if lenient is not None:
        overrides["lenient"] = lenient
    if conflict_strategy is not None:
        overrides["conflict_strategy"] = conflict_strategy
    options = config.options.model_copy(update=overrides)

    processor = Processor(options, registry=_build_registry())
    try:
        for preset_id in config.presets:
            processor.use(get_preset(preset_id))
    except KeyError as e:
        _format_error("Unknown Preset", str(e.args[0]))
        raise typer.Exit(1) from None
    for entry in config.extensions:
        processor.use(entry.id, entry.options)
    for extension_id in extension:
        processor.use(extension_id)

    try:
        result = asyncio.run(processor.process_with_meta(tree))
    except ExtensionNotFoundError as e:
        _format_error("Unknown Extension", str(e), hint="Run 'glosspipe extensions list' to see registered ids.")
        raise typer.Exit(1) from None
    except (DependencyCycleError, DuplicateExtensionError) as e:
        _format_error("Invalid Extension List", str(e))
        raise typer.Exit(1) from None

    rendered = json.dumps(node_to_dict(result.document), ensure_ascii=False, indent=2)
    if output is None:
        typer.echo(rendered)
    else:
        output.write_text(rendered + "\n", encoding="utf-8")

    _print_summary(result)
    if result.metadata.errors:
        raise typer.Exit(1)


@extensions_app.command("list")
def extensions_list() -> None:
    """List registered extensions."""
    registry = _build_registry()
    extensions = registry.get_all()
    if not extensions:
        typer.echo("(none available)")
        return
    for ext in extensions:
        typer.echo(f"  {ext.id:20} - {ext.description or ext.name}")
        if ext.dependencies:
            typer.echo(f"  {'':20}   depends on: {', '.join(ext.dependencies)}")


if __name__ == "__main__":
    app()
