"""
CLI for translate-md.

Provides commands for translating a directory of extracted documents,
previewing what a run would do, reformatting extracted Markdown, cleaning
fence artifacts out of existing translations, and writing a starter
configuration.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from translate_md.config import Settings, create_default_config, load_settings
from translate_md.exceptions import ConfigError, DocumentReadError
from translate_md.llm import create_llm_provider
from translate_md.logging_setup import configure_logging
from translate_md.scanner import read_document
from translate_md.translation import (
    FormatOutcome,
    MarkdownFormatter,
    RunReport,
    TaskOutcome,
    TaskState,
    TranslationClient,
    TranslationOrchestrator,
    remove_fence_lines,
)
from translate_md.translation.formatter import count_states

app = typer.Typer(
    name="translate-md",
    help="Translate extracted Markdown/HTML documents into several languages.",
    add_completion=False,
)

console = Console()

DEFAULT_CLEANUP_DIR = Path("extracted_md") / "translated"

STATE_STYLES = {
    TaskState.DONE: "green",
    TaskState.SKIPPED_EXISTS: "dim",
    TaskState.SKIPPED_NO_TRANSLATE: "yellow",
    TaskState.COPIED: "cyan",
    TaskState.TRANSLATING: "blue",
    TaskState.FAILED: "red",
}


def _require_input_dir(input_dir: Path | None, command: str) -> Path:
    """Validate the input directory argument, exiting with code 1 on error."""
    if input_dir is None:
        console.print("[red]Please provide the input directory path as an argument.[/red]")
        console.print(f"Usage: translate-md {command} <input_directory>")
        raise typer.Exit(1)

    input_dir = input_dir.expanduser().resolve()
    if not input_dir.is_dir():
        console.print(f"[red]Error accessing input directory: {input_dir}[/red]")
        raise typer.Exit(1)
    return input_dir


def _load_settings_or_exit(
    config: Path | None,
    formats: Path | None,
    concurrency: int | None = None,
) -> Settings:
    """Load settings, exiting with code 1 on configuration errors."""
    try:
        settings = load_settings(config, formats_path=formats)
    except ConfigError as e:
        console.print(f"[red]Configuration error: {escape(str(e))}[/red]")
        console.print("Run 'translate-md init' to create a config file.")
        raise typer.Exit(1) from None

    if concurrency is not None:
        if concurrency < 1:
            console.print("[red]--concurrency must be at least 1[/red]")
            raise typer.Exit(1)
        settings = settings.model_copy(
            update={
                "processing": settings.processing.model_copy(update={"concurrency": concurrency})
            }
        )
    return settings


def _create_output_dir(output_dir: Path) -> None:
    """Create the output root, exiting with code 1 if that is not possible."""
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        console.print(f"[red]Cannot create output directory {output_dir}: {escape(str(e))}[/red]")
        raise typer.Exit(1) from None


def _progress() -> Progress:
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        TimeElapsedColumn(),
        console=console,
    )


def _build_orchestrator(
    settings: Settings,
    output_dir: Path,
    on_outcome=None,
) -> TranslationOrchestrator:
    provider = create_llm_provider(settings.service)
    client = TranslationClient(provider, settings.service)
    return TranslationOrchestrator(settings, client, output_dir, on_outcome=on_outcome)


def _display_settings(settings: Settings, input_dir: Path, output_dir: Path) -> None:
    """Display the configuration being used."""
    config_table = Table(show_header=False, box=None, padding=(0, 2))
    config_table.add_column("Key", style="cyan")
    config_table.add_column("Value", style="green")

    config_table.add_row("Input", str(input_dir))
    config_table.add_row("Output", str(output_dir))
    config_table.add_row("Endpoint", settings.service.endpoint)
    config_table.add_row("Model", settings.service.model)
    config_table.add_row("Source language", settings.source_language)
    config_table.add_row("Languages", ", ".join(settings.languages))
    config_table.add_row("Concurrency", str(settings.processing.concurrency))
    config_table.add_row(
        "Chunking",
        f"> {settings.processing.large_file_threshold} chars, "
        f"chunks of {settings.processing.chunk_size}",
    )

    console.print(
        Panel(config_table, title="[bold blue]translate-md[/bold blue]", border_style="blue")
    )


def _display_report(report: RunReport) -> None:
    counts = report.counts()
    table = Table(title="Translation Summary")
    table.add_column("State")
    table.add_column("Tasks", justify="right")
    for state in TaskState:
        if counts[state]:
            style = STATE_STYLES.get(state, "white")
            table.add_row(f"[{style}]{state.value}[/{style}]", str(counts[state]))
    console.print(table)

    for doc in report.unreadable:
        label = escape(f"{doc.document}: unreadable ({doc.read_error})")
        console.print(f"[red]✗ {label}[/red]")
    for outcome in report.outcomes:
        if outcome.state is TaskState.FAILED:
            label = escape(f"{outcome.document} [{outcome.language}]: {outcome.error}")
            console.print(f"[red]✗ {label}[/red]")


@app.command()
def translate(
    input_dir: Path | None = typer.Argument(None, help="Directory with documents to translate"),
    config: Path | None = typer.Option(None, "--config", "-c", help="Config file"),
    formats: Path | None = typer.Option(
        None, "--formats", "-f", help="JSON file mapping language codes to instructions"
    ),
    output: Path | None = typer.Option(None, "--output", "-o", help="Output directory"),
    concurrency: int | None = typer.Option(
        None, "--concurrency", "-j", help="Languages translated in parallel"
    ),
) -> None:
    """Translate every document into every configured language."""
    input_dir = _require_input_dir(input_dir, "translate")
    settings = _load_settings_or_exit(config, formats, concurrency)
    configure_logging(settings.logging, console)

    output_dir = (
        output.expanduser().resolve() if output else settings.paths.resolve_output_dir(input_dir)
    )
    _create_output_dir(output_dir)
    _display_settings(settings, input_dir, output_dir)

    with _progress() as progress:
        progress_task = progress.add_task("Translating", total=None)

        def on_outcome(outcome: TaskOutcome) -> None:
            progress.update(
                progress_task,
                advance=1,
                description=escape(f"{outcome.document} [{outcome.language}]"),
            )

        orchestrator = _build_orchestrator(settings, output_dir, on_outcome)
        try:
            entries = orchestrator.discover(input_dir)
        except (FileNotFoundError, NotADirectoryError) as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(1) from None

        progress.update(progress_task, total=len(entries) * len(settings.languages))
        report = asyncio.run(orchestrator.run(input_dir, entries))

    _display_report(report)
    console.print(f"\n[green]Output saved to: {output_dir}[/green]")
    console.print("\n[bold green]Done![/bold green]")


@app.command()
def plan(
    input_dir: Path | None = typer.Argument(None, help="Directory with documents to translate"),
    config: Path | None = typer.Option(None, "--config", "-c", help="Config file"),
    formats: Path | None = typer.Option(
        None, "--formats", "-f", help="JSON file mapping language codes to instructions"
    ),
    output: Path | None = typer.Option(None, "--output", "-o", help="Output directory"),
) -> None:
    """Show what a translate run would do, without calling the service."""
    input_dir = _require_input_dir(input_dir, "plan")
    settings = _load_settings_or_exit(config, formats)
    output_dir = (
        output.expanduser().resolve() if output else settings.paths.resolve_output_dir(input_dir)
    )
    orchestrator = _build_orchestrator(settings, output_dir)
    entries = orchestrator.discover(input_dir)

    if not entries:
        console.print(f"[yellow]No documents found in {input_dir}[/yellow]")
        return

    languages = list(settings.languages)
    table = Table(title=f"Plan for {len(entries)} document(s)")
    table.add_column("Document", style="cyan")
    table.add_column("Chars", justify="right")
    table.add_column("Chunks", justify="right")
    for language in languages:
        table.add_column(language)

    async def build_rows() -> None:
        for entry in entries:
            try:
                document = await read_document(input_dir, entry)
            except DocumentReadError as e:
                error_cells = [f"[red]{escape(e.reason)}[/red]"] * len(languages)
                table.add_row(str(entry.relative_path), "-", "-", *error_cells)
                continue

            if document.length > settings.processing.large_file_threshold:
                chunks = str(len(list(orchestrator.splitter.split(document.content))))
            else:
                chunks = "1"

            cells = []
            for task in orchestrator.build_tasks(document):
                state = await orchestrator.resolve_state(task)
                style = STATE_STYLES.get(state, "white")
                label = "translate" if state is TaskState.TRANSLATING else state.value
                cells.append(f"[{style}]{label}[/{style}]")
            table.add_row(document.name, str(document.length), chunks, *cells)

    asyncio.run(build_rows())
    console.print(table)


@app.command(name="format")
def format_markdown(
    input_dir: Path | None = typer.Argument(None, help="Directory with extracted Markdown"),
    config: Path | None = typer.Option(None, "--config", "-c", help="Config file"),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Output directory (default: formatted_md next to input)"
    ),
    concurrency: int | None = typer.Option(
        None, "--concurrency", "-j", help="Documents reformatted in parallel"
    ),
) -> None:
    """Clean up the formatting of every Markdown document."""
    input_dir = _require_input_dir(input_dir, "format")
    settings = _load_settings_or_exit(config, None, concurrency)
    configure_logging(settings.logging, console)

    output_dir = (
        output.expanduser().resolve() if output else settings.paths.resolve_formatted_dir(input_dir)
    )
    _create_output_dir(output_dir)

    with _progress() as progress:
        progress_task = progress.add_task("Formatting", total=None)

        def on_outcome(outcome: FormatOutcome) -> None:
            progress.update(progress_task, advance=1, description=escape(outcome.document))

        provider = create_llm_provider(settings.service)
        formatter = MarkdownFormatter(
            settings,
            TranslationClient(provider, settings.service),
            output_dir,
            on_outcome=on_outcome,
        )
        entries = formatter.discover(input_dir)
        progress.update(progress_task, total=len(entries))
        outcomes = asyncio.run(formatter.run(input_dir, entries))

    if not outcomes:
        console.print(f"[yellow]No Markdown documents found in {input_dir}[/yellow]")
        return

    table = Table(title="Formatting Summary")
    table.add_column("State")
    table.add_column("Documents", justify="right")
    counts = count_states(outcomes)
    for state in TaskState:
        if counts[state]:
            style = STATE_STYLES.get(state, "white")
            table.add_row(f"[{style}]{state.value}[/{style}]", str(counts[state]))
    console.print(table)

    for outcome in outcomes:
        if not outcome.succeeded:
            console.print(f"[red]✗ {escape(f'{outcome.document}: {outcome.error}')}[/red]")
    console.print(f"\n[green]Output saved to: {output_dir}[/green]")


@app.command()
def cleanup(
    target_dir: Path | None = typer.Argument(
        None, help="Directory with translated Markdown files (default: the output directory)"
    ),
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Config file whose paths.output_dir is the default"
    ),
) -> None:
    """Remove stray code-fence lines from translated Markdown files."""
    if target_dir is None:
        target_dir = DEFAULT_CLEANUP_DIR
        if config is not None:
            settings = _load_settings_or_exit(config, None)
            if settings.paths.output_dir is not None:
                target_dir = settings.paths.output_dir

    if not target_dir.is_dir():
        console.print(f"[red]Error: Target directory not found: {target_dir}[/red]")
        raise typer.Exit(1)

    updated = 0
    unchanged = 0
    for path in sorted(target_dir.rglob("*.md")):
        if not path.is_file():
            continue
        try:
            content = path.read_text(encoding="utf-8")
            new_content = remove_fence_lines(content)
            # Only write back if content has changed
            if new_content != content:
                path.write_text(new_content, encoding="utf-8")
                updated += 1
                console.print(f"  [green]Updated:[/green] {path}")
            else:
                unchanged += 1
        except (OSError, UnicodeDecodeError) as e:
            console.print(f"[red]Error processing file {path}: {e}[/red]")

    console.print(f"\n[green]Cleanup complete: {updated} updated, {unchanged} unchanged[/green]")


@app.command()
def init(
    output_path: Path = typer.Argument(Path("config.yaml"), help="Config file to create"),
) -> None:
    """Create a default configuration file."""
    if output_path.exists():
        overwrite = typer.confirm(f"{output_path} already exists. Overwrite?")
        if not overwrite:
            raise typer.Abort()

    create_default_config(output_path)
    console.print(f"[green]Created config file: {output_path}[/green]")
    console.print("\nSet your API key and languages, then run:")
    console.print("  translate-md translate ./extracted_md --config config.yaml")


def main() -> None:
    """Entry point for CLI."""
    app()


if __name__ == "__main__":
    main()
