"""
CLI integration for client SDK generation.

Provides the argument groups and command handling used by the
``entity-sdkgen`` command line.
"""

import argparse
from pathlib import Path
from typing import Any, Dict

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from . import (
    GenerationResult,
    GeneratorConfig,
    GeneratorError,
    ConfigError,
    get_backend_info,
    get_generator,
    get_registry,
    is_backend_supported,
    list_all_backend_info,
    list_supported_backends,
    load_config,
    load_schema_source,
)
from .core.types import UnresolvedPolicy, VectorEncoding
from ..logging_config import get_logger

logger = get_logger(__name__)


class CLIError(Exception):
    """Exception raised for CLI-related errors."""

    pass


console = Console()


def add_codegen_args(parser: argparse.ArgumentParser):
    """Add client SDK generation arguments to a CLI parser."""

    input_group = parser.add_mutually_exclusive_group(required=False)
    input_group.add_argument("schema", nargs="?", help="Entity schema JSON file")
    input_group.add_argument("--url", help="URL to fetch the entity schema from")

    codegen_group = parser.add_argument_group("code generation")
    codegen_group.add_argument(
        "--backend",
        "-b",
        metavar="BACKEND",
        help="Target client backend (use --list-backends to see options)",
    )
    codegen_group.add_argument(
        "--output",
        "-o",
        metavar="DIR",
        help="Output directory for generated files (created if missing)",
    )
    codegen_group.add_argument(
        "--config", metavar="FILE", help="JSON configuration file for code generation"
    )

    options_group = parser.add_argument_group("generation options")
    options_group.add_argument(
        "--namespace",
        metavar="NAME",
        help="Namespace for generated declarations (Unity)",
    )
    options_group.add_argument(
        "--vector-encoding",
        choices=[encoding.value for encoding in VectorEncoding],
        help="Vector component encoding",
    )
    options_group.add_argument(
        "--unresolved-policy",
        choices=[policy.value for policy in UnresolvedPolicy],
        help="What to do with data types the backend cannot map",
    )
    options_group.add_argument(
        "--no-comments",
        action="store_true",
        help="Don't write header comments into generated files",
    )
    options_group.add_argument(
        "--verbose",
        action="store_true",
        help="Show generation result metadata",
    )

    info_group = parser.add_argument_group("information")
    info_group.add_argument(
        "--list-backends",
        action="store_true",
        help="List supported client backends and exit",
    )
    info_group.add_argument(
        "--backend-info",
        metavar="BACKEND",
        help="Show detailed information about a backend and exit",
    )


def handle_codegen_command(args: argparse.Namespace) -> int:
    """
    Handle client SDK generation from parsed CLI arguments.

    Returns:
        Exit code (0 for success, 1 for any failure)
    """
    try:
        if getattr(args, "list_backends", False):
            return _list_backends()

        if getattr(args, "backend_info", None):
            return _show_backend_info(args.backend_info)

        if not args.backend:
            raise CLIError("--backend is required for code generation")
        if not _validate_backend(args.backend):
            return 1
        if not args.output:
            raise CLIError("--output is required for code generation")
        if not (args.schema or args.url):
            raise CLIError("Input source required (schema file or --url)")

        config = _build_config(args)
        return _generate_and_report(args, config)

    except CLIError as e:
        console.print(f"[red]✗ Error:[/red] {e}")
        return 1
    except GeneratorError as e:
        logger.debug("Generation failed", exc_info=True)
        console.print(f"[red]✗[/red] {e}")
        return 1


def _list_backends() -> int:
    """List supported backends in a table."""
    backend_info = list_all_backend_info()

    if not backend_info:
        console.print("[yellow]⚠️ No client backends available[/yellow]")
        return 0

    table = Table(title="📋 Supported Backends", box=box.ROUNDED, title_style="bold cyan")
    table.add_column("Backend", style="bold green", no_wrap=True)
    table.add_column("Extension", style="cyan")
    table.add_column("Types File", style="cyan")
    table.add_column("Generator Class", style="dim")
    table.add_column("Aliases", style="blue")

    for name, info in sorted(backend_info.items()):
        aliases = ", ".join(info["aliases"]) if info["aliases"] else "[dim]none[/dim]"
        table.add_row(name, info["file_extension"], info["types_file"], info["class"], aliases)

    console.print()
    console.print(table)
    console.print()
    console.print(
        Panel(
            "[bold]Usage:[/bold] entity-sdkgen [dim]entities.json[/dim] "
            "--backend [cyan]BACKEND[/cyan] --output [cyan]DIR[/cyan]",
            title="💡 Quick Start",
            border_style="blue",
        )
    )
    return 0


def _show_backend_info(backend: str) -> int:
    """Show details and default configuration of one backend."""
    if not _validate_backend(backend):
        return 1

    info = get_backend_info(backend)

    info_text = (
        f"[bold]Backend:[/bold] {info['name']}\n"
        f"[bold]File Extension:[/bold] {info['file_extension']}\n"
        f"[bold]Types File:[/bold] {info['types_file']}\n"
        f"[bold]Generator Class:[/bold] {info['class']}\n"
        f"[bold]Module:[/bold] {info['module']}"
    )
    if info["aliases"]:
        info_text += f"\n[bold]Aliases:[/bold] {', '.join(info['aliases'])}"

    console.print()
    console.print(Panel(info_text, title=f"🔧 {info['name']} Generator", border_style="green"))

    generator = get_generator(backend)
    config_table = Table(
        title="⚙️  Default Configuration",
        box=box.SIMPLE,
        show_header=True,
        header_style="bold cyan",
    )
    config_table.add_column("Setting", style="bold")
    config_table.add_column("Value", style="green")
    config_table.add_row("Namespace", generator.config.namespace or "[dim]none[/dim]")
    config_table.add_row("Class Suffix", generator.config.class_suffix)
    config_table.add_row("Entity Base Class", generator.config.entity_base_class)
    config_table.add_row("Vector Encoding", info["vector_encoding"])
    config_table.add_row("Unresolved Policy", info["unresolved_policy"])
    config_table.add_row("Fallback Type", info["fallback_type"])

    console.print()
    console.print(config_table)
    return 0


def _validate_backend(backend: str) -> bool:
    if is_backend_supported(backend):
        return True
    console.print(f"[red]✗ Unsupported backend '{backend}'[/red]")
    console.print(f"[dim]Supported backends: {', '.join(list_supported_backends())}[/dim]")
    return False


def _build_config(args: argparse.Namespace) -> GeneratorConfig:
    """Merge backend defaults, the config file and CLI options."""
    overrides: Dict[str, Any] = {}

    if args.namespace is not None:
        overrides["namespace"] = args.namespace
    if args.vector_encoding:
        overrides["vector_encoding"] = args.vector_encoding
    if args.unresolved_policy:
        overrides["unresolved_policy"] = args.unresolved_policy
    if args.no_comments:
        overrides["add_comments"] = False

    try:
        return load_config(
            _canonical_backend(args.backend),
            custom_config=overrides,
            config_file=args.config,
        )
    except ConfigError as e:
        raise CLIError(f"Configuration error: {e}") from e


def _canonical_backend(backend: str) -> str:
    return get_registry().canonical_name(backend)


def _generate_and_report(args: argparse.Namespace, config: GeneratorConfig) -> int:
    """Load the schema, run the generator and print the outcome."""
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        load_task = progress.add_task("[cyan]Loading entity schema...", total=None)
        schema = load_schema_source(file_path=args.schema, url=args.url)
        progress.remove_task(load_task)

        gen_task = progress.add_task(f"[green]Generating {args.backend} client SDK...", total=None)
        generator = get_generator(args.backend, config)
        result = generator.run(schema, Path(args.output))
        progress.remove_task(gen_task)

    _print_warnings(result)

    if not result.success:
        console.print(f"[red]✗ Code generation failed:[/red] {result.error_message}")
        if result.files:
            console.print(f"[dim]{len(result.files)} file(s) were written before the failure[/dim]")
        return 1

    console.print(
        f"[green]✓[/green] Generated {len(result.files)} file(s) into [cyan]{args.output}[/cyan]"
    )
    for path in result.files:
        console.print(f"  [dim]•[/dim] {path.name}")

    if getattr(args, "verbose", False) and result.metadata:
        _print_metadata(result)

    return 0


def _print_warnings(result: GenerationResult):
    if result.warnings:
        console.print("\n[yellow]⚠️  Warnings:[/yellow]")
        for warning in result.warnings:
            console.print(f"  [yellow]•[/yellow] {warning}")
        console.print()


def _print_metadata(result: GenerationResult):
    metadata_table = Table(
        title="📊 Generation Metadata",
        box=box.SIMPLE,
        show_header=True,
        header_style="bold cyan",
    )
    metadata_table.add_column("Property", style="bold")
    metadata_table.add_column("Value", style="green")

    for key, value in result.metadata.items():
        metadata_table.add_row(key.replace("_", " ").title(), str(value))

    console.print()
    console.print(metadata_table)
