"""ioflows - Command Line Interface.

Extracts which primary inputs flow into each primary output of the
combinational modules in a Yosys JSON netlist.
"""

import json
import re
import sys
from fnmatch import fnmatch
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table
from rich.panel import Panel

from .analyzers.dependency_resolver import DependencyResolver
from .analyzers.io_flow_analyzer import IOFlowAnalyzer
from .exceptions import IOFlowError
from .graph.graph_builder import FaninGraphBuilder
from .graph.graph_queries import FaninQueries
from .parsers.base_parser import ParseResult
from .parsers.yosys_json_parser import YosysJSONParser
from .utils.config import AnalysisSettings, config
from .utils.logger import setup_logger


console = Console()
err_console = Console(stderr=True)

BIT_LABEL = re.compile(r"^(?P<name>.+?)(?:\[(?P<offset>\d+)\])?$")


def _load_netlist(netlist: Path) -> ParseResult:
    """Parse a netlist, exiting with an error message if it cannot be read."""
    parser = YosysJSONParser({"skip_blackboxes": config.get("selection.skip_blackboxes", True)})
    if not parser.can_parse(netlist):
        extensions = ", ".join(parser.supported_extensions())
        err_console.print(f"[yellow]{netlist.name}: expected {extensions}, reading as Yosys JSON[/yellow]")
    result = parser.parse_file(netlist)

    if not result.success:
        for error in result.errors:
            err_console.print(f"[red]{error}[/red]")
        sys.exit(1)

    # stdout is reserved for results, which may be JSON
    for warning in result.warnings:
        err_console.print(f"[yellow]{warning}[/yellow]")

    return result


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option(
    "--config", "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML configuration file (default: ./config/config.yaml)"
)
@click.pass_context
def cli(ctx, verbose, config_path):
    """ioflows - Extract input-to-output flows from gate-level netlists."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose

    config.load(config_path)
    level = "DEBUG" if verbose else config.log_level
    setup_logger(level=level, log_file=config.log_file)


@cli.command()
@click.argument("netlist", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--module", "-m", "patterns", multiple=True, help="Module name pattern (e.g., 'alu_*')")
@click.option(
    "--output", "-o",
    type=click.Path(path_type=Path),
    default=None,
    help="Output JSON file for the dependency report"
)
@click.option("--json", "as_json", is_flag=True, help="Print the JSON report to stdout")
def analyze(netlist, patterns, output, as_json):
    """Compute input dependencies of every output bit.

    Example:
        ioflows analyze design.json
        ioflows analyze design.json -m "adder*" -o flows.json
    """
    parsed = _load_netlist(netlist)
    analyzer = IOFlowAnalyzer(AnalysisSettings.from_config(config))
    report = analyzer.analyze_design(parsed.modules, list(patterns) or config.module_patterns)

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
    else:
        console.print(Panel(
            f"[bold blue]ioflows[/bold blue]\n"
            f"Netlist: [cyan]{netlist}[/cyan]",
            title="I/O Flows",
            border_style="blue"
        ))
        _display_summary(report)
        for result in report.results:
            console.print(result.format(), markup=False)
            console.print()

    if output:
        report.export_json(output)
        if not as_json:
            console.print(f"[green]Report exported to:[/green] {output}")

    if report.errors:
        sys.exit(2)


@cli.command()
@click.argument("netlist", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--module", "-m", "patterns", multiple=True, help="Module name pattern")
@click.option("--json", "as_json", is_flag=True, help="Print statistics as JSON")
def inspect(netlist, patterns, as_json):
    """Show fan-in graph statistics for each module.

    Example:
        ioflows inspect design.json
        ioflows inspect design.json --json
    """
    parsed = _load_netlist(netlist)
    settings = AnalysisSettings.from_config(config)
    analyzer = IOFlowAnalyzer(settings)
    patterns = list(patterns) or config.module_patterns

    table = Table(title=f"Modules ({parsed.module_count})")
    table.add_column("Module", style="green")
    table.add_column("Kind", style="cyan")
    table.add_column("Bits", style="yellow", justify="right")
    table.add_column("Alias", style="yellow", justify="right")
    table.add_column("Gate", style="yellow", justify="right")
    table.add_column("Cells", style="magenta", justify="right")
    records = []

    for module in parsed.modules:
        if not any(fnmatch(module.name, p) for p in patterns):
            continue

        if analyzer.classifier.is_sequential(module):
            table.add_row(module.name, "sequential", "-", "-", "-", str(len(module.cells)))
            records.append({"module": module.name, "is_sequential": True})
            continue

        try:
            stats = analyzer.builder.build(module).stats
        except IOFlowError as e:
            table.add_row(module.name, "[red]error[/red]", "-", "-", "-", str(len(module.cells)))
            records.append({"module": module.name, "error": type(e).__name__, "message": str(e)})
            err_console.print(f"[red]{e}[/red]")
            continue

        records.append({**stats.to_dict(), "is_sequential": False})

        table.add_row(
            module.name, "combinational",
            str(stats.total_bits), str(stats.alias_edges), str(stats.gate_edges),
            str(sum(stats.cells_by_kind.values()))
        )

    if as_json:
        click.echo(json.dumps(records, indent=2))
    else:
        console.print(table)


@cli.command()
@click.argument("netlist", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("module_name")
@click.argument("output_bit")
def trace(netlist, module_name, output_bit):
    """Show the inputs of one output bit and the driver path from each.

    Example:
        ioflows trace design.json top "sum[3]"
    """
    parsed = _load_netlist(netlist)
    module = parsed.get_module(module_name)
    if module is None:
        console.print(f"[red]No module named '{module_name}'[/red]")
        sys.exit(1)

    match = BIT_LABEL.match(output_bit)
    wire = module.wire(match.group("name")) if match else None
    offset = int(match.group("offset") or 0) if match else 0
    if wire is None or offset >= wire.width:
        console.print(f"[red]No bit '{output_bit}' in module '{module_name}'[/red]")
        sys.exit(1)
    bit = wire.bit(offset)

    settings = AnalysisSettings.from_config(config)
    analyzer = IOFlowAnalyzer(settings)
    if analyzer.classifier.is_sequential(module):
        console.print(f"[yellow]Module '{module_name}' is sequential; tracing is not supported[/yellow]")
        return

    try:
        fanin_graph = FaninGraphBuilder(settings).build(module)
        deps = sorted(DependencyResolver(module, fanin_graph).resolve(bit))
    except IOFlowError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(2)

    console.print(f"[bold]{bit.label}[/bold] depends on {len(deps)} input bits\n")
    queries = FaninQueries(fanin_graph)
    for dep in deps:
        path = queries.find_path(dep, bit)
        if path.found:
            console.print(path.format(), markup=False)
        else:
            console.print(f"{dep.label} (input)")
        console.print()

    console.print(f"[dim]Cells in cone: {len(queries.cone_cells(bit))}[/dim]")


# ===== HELPER FUNCTIONS =====

def _display_summary(report):
    """Display a summary table for the report."""
    table = Table(title="Modules")
    table.add_column("Module", style="green")
    table.add_column("Kind", style="cyan")
    table.add_column("Inputs", style="yellow", justify="right")
    table.add_column("Outputs", style="yellow", justify="right")
    table.add_column("Max fan-in", style="magenta", justify="right")

    for result in report.results:
        if result.is_sequential:
            table.add_row(result.module, "sequential", str(len(result.inputs)), str(len(result.outputs)), "-")
            continue
        widest = max((len(deps) for deps in result.dependencies.values()), default=0)
        table.add_row(
            result.module, "combinational",
            str(len(result.inputs)), str(len(result.outputs)), str(widest)
        )

    console.print(table)
    console.print()

    if report.errors:
        console.print(Panel(
            "\n".join(f"[red]{e['module']}[/red]: {e['message']}" for e in report.errors),
            title="Errors", border_style="red"
        ))


if __name__ == "__main__":
    cli()
