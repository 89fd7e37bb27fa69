# clab_graph/cli/main.py

import logging
from enum import Enum
from pathlib import Path
from typing import Annotated

import typer
from rich import print as rprint
from rich.markup import escape

from clab_graph.cli.common import create_container_provider
from clab_graph.services.compiler.topology_compiler import TopologyCompiler
from clab_graph.services.export.graph_exporter import (
    GraphExporter,
    OutputFormat,
    render_summary,
)
from clab_graph.utils.logging_config import setup_logging


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


app = typer.Typer(
    name="clab-graph",
    help="Compile a containerlab topology and its annotations into a graph model",
    add_completion=True,
)

log_level_option = typer.Option(
    LogLevel.INFO,
    "--log-level",
    "-l",
    help="Set logging level",
)

log_file_option = typer.Option(
    None,
    "--log-file",
    "-f",
    help="Optional log file path",
)

annotations_option = typer.Option(
    None,
    "--annotations",
    "-a",
    help="Annotation sidecar (defaults to <topology>.annotations.json when present)",
    exists=True,
    file_okay=True,
    dir_okay=False,
    readable=True,
)

inspect_data_option = typer.Option(
    None,
    "--inspect-data",
    help="Captured 'containerlab inspect --format json' output",
    exists=True,
    dir_okay=False,
    readable=True,
)

interface_data_option = typer.Option(
    None,
    "--interface-data",
    help="Captured 'containerlab inspect interfaces --format json' output",
    exists=True,
    dir_okay=False,
    readable=True,
)

live_option = typer.Option(
    False, "--live", help="Query the running lab with the containerlab binary"
)

lab_name_option = typer.Option(
    None, "--lab-name", help="Override the lab name used for container lookups"
)


def complete_topology_files(
    _ctx: typer.Context, _param: typer.Option, incomplete: str
) -> list[str]:
    """Complete topology file paths for CLI autocomplete."""

    current = Path(incomplete) if incomplete else Path.cwd()
    if not current.is_dir():
        current = current.parent
    return [
        str(path)
        for pattern in ("*.clab.yml", "*.clab.yaml", "*.json")
        for path in current.glob(pattern)
        if incomplete in str(path)
    ]


def default_annotations_path(topology: Path) -> Path | None:
    candidate = topology.with_name(f"{topology.name}.annotations.json")
    return candidate if candidate.is_file() else None


def compile_from_options(
    topology: Path,
    annotations: Path | None,
    inspect_data: Path | None,
    interface_data: Path | None,
    live: bool,
    lab_name: str | None,
):
    provider = create_container_provider(
        topology=topology,
        inspect_data=inspect_data,
        interface_data=interface_data,
        live=live,
    )
    annotations = annotations or default_annotations_path(topology)
    compiler = TopologyCompiler(provider=provider)
    return compiler.compile_file(
        str(topology), str(annotations) if annotations else None, lab_name
    )


topology_option = typer.Option(
    "--topology",
    "-t",
    help="Path to containerlab topology file (.clab.yml or JSON)",
    exists=True,
    file_okay=True,
    dir_okay=False,
    readable=True,
    shell_complete=complete_topology_files,
)


@app.command(name="compile", help="Compile a topology into graph elements")
def compile_cmd(
    topology: Annotated[Path, topology_option],
    annotations: Path | None = annotations_option,
    inspect_data: Path | None = inspect_data_option,
    interface_data: Path | None = interface_data_option,
    live: bool = live_option,
    lab_name: str | None = lab_name_option,
    output_file: str | None = typer.Option(
        None, "--output", "-o", help="Output file path; prints to stdout when omitted"
    ),
    output_format: OutputFormat = typer.Option(
        OutputFormat.JSON, "--format", help="Output format"
    ),
    log_level: LogLevel = log_level_option,
    log_file: str | None = log_file_option,
):
    """CLI command to compile a containerlab topology into a graph model."""

    setup_logging(log_level.value, log_file)
    logger = logging.getLogger(__name__)

    try:
        result = compile_from_options(
            topology, annotations, inspect_data, interface_data, live, lab_name
        )
        exporter = GraphExporter(result, output_format, logger)
        if output_file:
            exporter.write(output_file)
        else:
            typer.echo(exporter.dumps(), nl=False)
    except Exception as e:
        rprint(f"[red]Error: {e!s}[/red]")
        raise typer.Exit(code=1) from e


@app.command(name="summary", help="Print a readable summary of the compiled graph")
def summary_cmd(
    topology: Annotated[Path, topology_option],
    annotations: Path | None = annotations_option,
    inspect_data: Path | None = inspect_data_option,
    interface_data: Path | None = interface_data_option,
    live: bool = live_option,
    lab_name: str | None = lab_name_option,
    log_level: LogLevel = log_level_option,
    log_file: str | None = log_file_option,
):
    """Compile the topology and print nodes, links and pending migrations."""

    setup_logging(log_level.value, log_file)

    try:
        result = compile_from_options(
            topology, annotations, inspect_data, interface_data, live, lab_name
        )
        rprint(escape(render_summary(result)))
    except Exception as e:
        rprint(f"[red]Error: {e!s}[/red]")
        raise typer.Exit(code=1) from e


if __name__ == "__main__":
    app()
