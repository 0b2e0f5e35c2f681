"""Typer-based CLI for Clarity codebase diagrams."""

from __future__ import annotations

import logging
import shutil
import sys
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from . import __version__, config, config_manager
from .classifier import EntryPointClassifier, analyze_entry_points
from .graph_export import FORMATS, export_graph, graph_to_json
from .ingestion import ingest_files, route_filename
from .layout import DIRECTIONS
from .llm import LocalLLM
from .session import VIEWS, AppState, load_session, render_view, session_stats
from .storage import DataStore

app = typer.Typer(
    help="🗺️  Clarity CLI: codebase structure, call graphs and layers as diagrams.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

console = Console()
err_console = Console(stderr=True)

PROVIDERS = tuple(config_manager.DEFAULT_CONFIGS)

DataDirOption = typer.Option(None, "--data-dir", "-d", help="Directory holding structure/calls/arch JSON.")


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"Clarity CLI v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Log progress to stderr."),
):
    """Clarity CLI: render analyzer output as positioned node/edge graphs."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def _load_state(data_dir: Optional[Path], files: Optional[List[Path]] = None) -> AppState:
    """Session state from the data directory plus any extra files given."""
    state = load_session(data_dir)
    if files:
        for report in ingest_files(files, state):
            if not report.ok:
                err_console.print(f"[yellow]⚠ {report.error}[/yellow]")
    return state


@app.command("load")
def load(
    files: List[Path] = typer.Argument(..., exists=True, dir_okay=False, help="Analyzer JSON files to load."),
    data_dir: Optional[Path] = DataDirOption,
):
    """Validate analyzer JSON files and copy them into the data directory.

    Files are matched by name: 'structure', 'calls' or 'arch' (first match wins).
    """
    store = DataStore(data_dir)
    state = AppState()

    table = Table(title="Loaded datasets")
    table.add_column("File")
    table.add_column("Dataset")
    table.add_column("Status")

    loaded = failed = 0
    for path in files:
        if route_filename(path.name) is None:
            table.add_row(path.name, "-", "[dim]ignored[/dim]")
            continue
        for report in ingest_files([path], state):
            if report.ok:
                target = store.path_for(report.slot)
                target.parent.mkdir(parents=True, exist_ok=True)
                shutil.copyfile(path, target)
                table.add_row(report.name, report.slot, f"[green]✓ {target}[/green]")
                loaded += 1
            else:
                table.add_row(report.name, report.slot or "-", f"[red]✗ {report.error}[/red]")
                failed += 1

    console.print(table)
    if failed and not loaded:
        raise typer.Exit(code=1)


@app.command("render")
def render(
    view: str = typer.Option("calls", "--view", "-V", help="View to render: calls, structure or arch."),
    files: Optional[List[Path]] = typer.Argument(None, exists=True, dir_okay=False, help="Extra JSON files to load."),
    data_dir: Optional[Path] = DataDirOption,
    hide_tests: bool = typer.Option(
        config.HIDE_TESTS_DEFAULT, "--hide-tests/--show-tests", help="Drop test files from the graph."
    ),
    entry: Optional[str] = typer.Option(
        None, "--entry", "-e", help="Only show the call chain from '<file>::<function>'."
    ),
    hide_utilities: bool = typer.Option(False, "--hide-utilities", help="Hide heavily called helper functions."),
    utility_threshold: int = typer.Option(5, min=1, max=20, help="Incoming calls that make a function a utility."),
    direction: str = typer.Option(
        config.LAYOUT_DIRECTION, "--direction", help="Layout direction: TB, BT, LR or RL."
    ),
    fmt: str = typer.Option("json", "--format", "-f", help="Output format: json, dot or html."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output file (stdout for json if omitted)."),
):
    """Build the graph for one view and export it."""
    fmt = fmt.lower()
    if fmt not in FORMATS:
        raise typer.BadParameter(f"Format must be one of: {', '.join(FORMATS)}")
    if view not in VIEWS:
        raise typer.BadParameter(f"View must be one of: {', '.join(VIEWS)}")
    direction = direction.upper()
    if direction not in DIRECTIONS:
        raise typer.BadParameter(f"Direction must be one of: {', '.join(DIRECTIONS)}")
    if entry is not None and "::" not in entry:
        raise typer.BadParameter("Entry point must look like '<file>::<function>'.")

    state = _load_state(data_dir, files)
    if not state.has_data():
        raise typer.BadParameter("No data loaded. Use 'clarity load <files>' or pass JSON files.")
    if getattr(state, view) is None:
        raise typer.BadParameter(f"No {view} data loaded. Use 'clarity load <files>' or pass the {view} JSON file.")

    state.set_active_view(view)
    state.set_hide_tests(hide_tests)
    state.set_selected_entry_point(entry)
    state.set_hide_utilities(hide_utilities)
    state.set_utility_threshold(utility_threshold)
    state.set_direction(direction)

    graph = render_view(state)

    if output is None:
        if fmt != "json":
            output = Path.cwd() / f"clarity_{view}.{fmt}"
        else:
            typer.echo(graph_to_json(graph, view))
            return

    export_graph(graph, output, fmt, view)
    typer.echo(f"Exported {view} graph ({len(graph.nodes)} nodes, {len(graph.edges)} edges) to {output}")


@app.command("stats")
def stats(data_dir: Optional[Path] = DataDirOption):
    """Summarize the loaded datasets."""
    state = _load_state(data_dir)
    summary = session_stats(state)
    if not summary:
        typer.echo("No datasets found.")
        raise typer.Exit(code=0)

    for section, values in summary.items():
        table = Table(title=section.capitalize(), show_header=False)
        table.add_column("Metric", style="cyan")
        table.add_column("Value")
        for key, value in values.items():
            if isinstance(value, (list, tuple)):
                value = ", ".join(str(v) for v in value) or "-"
            elif isinstance(value, dict):
                value = ", ".join(f"{k}={v}" for k, v in value.items())
            table.add_row(key, str(value))
        console.print(table)


@app.command("entries")
def entries(
    data_dir: Optional[Path] = DataDirOption,
    user_facing: bool = typer.Option(False, "--user-facing", "-u", help="Only list user-facing entry points."),
    show: Optional[str] = typer.Option(None, "--show", "-s", help="Show details for '<file>::<function>'."),
):
    """List classified entry points."""
    state = _load_state(data_dir)
    if state.classifications is None:
        typer.echo("No classifications yet. Run 'clarity classify'.")
        raise typer.Exit(code=0)

    if show:
        item = state.classification_for(show)
        if item is None:
            typer.echo(f"Entry point '{show}' not classified.", err=True)
            raise typer.Exit(code=1)
        console.print(f"[bold]{item.function}[/bold] [dim]({item.type})[/dim]")
        console.print(item.description)
        if item.userAction:
            console.print(f"[italic]{item.userAction}[/italic]")
        console.print(f"[dim]{item.file}  confidence={item.confidence:.2f}[/dim]")
        return

    state.set_show_only_user_facing(user_facing)
    table = Table(title=f"Entry points (analyzed {state.classifications.analyzedAt or 'unknown'})")
    table.add_column("Function", style="bold")
    table.add_column("Type")
    table.add_column("User-facing")
    table.add_column("Description")
    table.add_column("File", style="dim")
    for item in state.entry_points():
        table.add_row(
            item.function,
            item.type,
            "[green]yes[/green]" if item.isUserFacing else "no",
            item.description,
            item.file,
        )
    console.print(table)


@app.command("classify")
def classify(
    data_dir: Optional[Path] = DataDirOption,
    llm_provider: Optional[str] = typer.Option(None, help="LLM provider: openrouter, openai, anthropic, ollama."),
    llm_model: Optional[str] = typer.Option(None, help="LLM model name (defaults to the configured or provider default)."),
    llm_api_key: Optional[str] = typer.Option(None, help="API key for cloud LLM providers (defaults to the configured key)."),
    save: bool = typer.Option(True, "--save/--no-save", help="Write classifications.json to the data directory."),
):
    """Classify entry points from the arch dataset with an LLM."""
    store = DataStore(data_dir)
    state = _load_state(data_dir)
    classifier = EntryPointClassifier(LocalLLM(model=llm_model, provider=llm_provider, api_key=llm_api_key))

    with console.status("Analyzing entry points..."):
        result = analyze_entry_points(state, classifier, store if save else None)

    if not result.ok:
        typer.echo(f"❌ {result.error}", err=True)
        raise typer.Exit(code=1)

    items = result.data.classifications
    user_facing = sum(1 for c in items if c.isUserFacing)
    typer.echo(f"Analyzed {len(items)} entries ({user_facing} user-facing).")


@app.command("set-llm")
def set_llm(
    provider: str = typer.Argument(..., help="LLM provider: openrouter, openai, anthropic, ollama"),
    model: Optional[str] = typer.Option(None, "--model", "-m", help="Model name (uses provider default if not set)."),
    api_key: Optional[str] = typer.Option(None, "--api-key", "-k", help="API key for cloud providers."),
    endpoint: Optional[str] = typer.Option(None, "--endpoint", "-e", help="Custom endpoint URL."),
):
    """Switch the LLM provider used by 'clarity classify'."""
    provider = provider.lower().strip()
    if provider not in PROVIDERS:
        typer.echo(f"Unknown provider '{provider}'. Choose from: {', '.join(PROVIDERS)}", err=True)
        raise typer.Exit(code=1)

    defaults = config_manager.get_provider_config(provider)
    resolved_model = model or defaults.get("model", "")
    resolved_endpoint = endpoint or defaults.get("endpoint", "")

    if not config_manager.save_config(provider, resolved_model, api_key or "", resolved_endpoint):
        typer.echo("Could not write configuration.", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"LLM set to {provider} ({resolved_model}).")


@app.command("unset-llm")
def unset_llm():
    """Remove the saved LLM configuration and fall back to the defaults."""
    if not config_manager.CONFIG_FILE.exists():
        typer.echo("No LLM configuration found. Nothing to unset.")
        raise typer.Exit(code=0)
    if not config_manager.clear_llm_config():
        typer.echo("Could not write configuration.", err=True)
        raise typer.Exit(code=1)
    typer.echo("LLM configuration cleared.")


@app.command("set-view")
def set_view(
    hide_tests: Optional[bool] = typer.Option(
        None, "--hide-tests/--show-tests", help="Default for hiding test files."
    ),
    direction: Optional[str] = typer.Option(None, "--direction", help="Default layout direction: TB, BT, LR or RL."),
):
    """Save view defaults used by 'clarity render'."""
    values = {}
    if hide_tests is not None:
        values["hide_tests"] = hide_tests
    if direction is not None:
        direction = direction.upper()
        if direction not in DIRECTIONS:
            raise typer.BadParameter(f"Direction must be one of: {', '.join(DIRECTIONS)}")
        values["direction"] = direction
    if not values:
        typer.echo("Nothing to change. Pass --hide-tests/--show-tests or --direction.")
        raise typer.Exit(code=0)
    if not config_manager.save_view_config(**values):
        typer.echo("Could not write configuration.", err=True)
        raise typer.Exit(code=1)
    typer.echo("View defaults saved: " + ", ".join(f"{k}={v}" for k, v in values.items()))


@app.command("show-llm")
def show_llm():
    """Show current LLM provider configuration."""
    cfg = config_manager.load_config()
    api_key = cfg.get("api_key", "")

    table = Table(title="LLM Configuration", show_header=False)
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    table.add_row("Provider", cfg.get("provider", "openrouter"))
    table.add_row("Model", cfg.get("model", ""))
    if cfg.get("endpoint"):
        table.add_row("Endpoint", cfg["endpoint"])
    if api_key:
        table.add_row("API Key", api_key[:8] + "•" * min(len(api_key) - 8, 16))
    else:
        table.add_row("API Key", "[dim](not set)[/dim]")
    table.add_row("Config", str(config_manager.CONFIG_FILE))
    console.print(table)


if __name__ == "__main__":
    app()
