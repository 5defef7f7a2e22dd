"""
CLI entry point for phrasecore.
"""

# Standard library imports
import logging
from pathlib import Path
from typing import Optional

# Third-party imports
import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

# Local application imports
from phrasecore.config import Settings
from phrasecore.db import open_store
from phrasecore.library import PhraseLibrary
from phrasecore.logging_config import setup_logging
from phrasecore.models import Phrase
from phrasecore.review_controller import ReviewRoundController
from phrasecore.risk import risk_score
from phrasecore.scheduler import RiskWeightedSelector
from phrasecore.timers import VirtualTimerScheduler
from phrasecore.cli.review_ui import start_training_flow


console = Console()

app = typer.Typer(
    name="phrasecore",
    help="Phrasecore: drill phrase/translation pairs against the clock.",
    add_completion=False,
    rich_markup_mode="markdown",
)


# ---------------------------------------------------------------------------
# Helpers for resolving the --store path (falls back to PHRASECORE_STORE_PATH)
# ---------------------------------------------------------------------------


def _resolve_settings(store: Optional[Path]) -> Settings:
    """Build settings, letting an explicit --store override the environment."""
    if store is not None:
        return Settings(store_path=store)
    return Settings()


_store_option = typer.Option(  # noqa: B008
    None,
    "--store",
    "-s",
    help="Phrase store file (.json for JSON, anything else for DuckDB). "
    "Falls back to PHRASECORE_STORE_PATH.",
)


def _exit_if_unsaved(library: PhraseLibrary, store_path: Path) -> None:
    if library.has_unsaved_changes:
        console.print(
            f"[bold red]Error: could not save phrases to {escape(str(store_path))}.[/bold red]"
        )
        raise typer.Exit(code=1)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Show debug logging."
    ),
):
    """Configure logging before any command runs."""
    level = logging.DEBUG if verbose else Settings().log_level.upper()
    setup_logging(level)


# ---------------------------------------------------------------------------
# Phrase list commands
# ---------------------------------------------------------------------------


@app.command()
def add(
    text: str = typer.Argument(..., help="The phrase to study."),
    translation: str = typer.Argument(..., help="Its translation."),
    store: Optional[Path] = _store_option,
):
    """Add a phrase to the top of the collection."""
    settings = _resolve_settings(store)
    with open_store(settings.store_path) as phrase_store:
        library = PhraseLibrary(phrase_store, subscribe=False)
        phrase = library.add_phrase(text, translation)
        _exit_if_unsaved(library, settings.store_path)
    if phrase is None:
        console.print(
            "[bold red]Error: phrase and translation must not be blank.[/bold red]"
        )
        raise typer.Exit(code=1)
    console.print(
        f"[green]Added[/green] [bold]{escape(phrase.text)}[/bold] "
        f"[dim]({phrase.id})[/dim]"
    )


@app.command()
def edit(
    phrase_id: str = typer.Argument(..., help="Id of the phrase to edit."),
    text: Optional[str] = typer.Option(None, "--text", help="New phrase text."),
    translation: Optional[str] = typer.Option(
        None, "--translation", help="New translation."
    ),
    store: Optional[Path] = _store_option,
):
    """Change the text and/or translation of a phrase, keeping its progress."""
    settings = _resolve_settings(store)
    with open_store(settings.store_path) as phrase_store:
        library = PhraseLibrary(phrase_store, subscribe=False)
        existing = library.get(phrase_id)
        if existing is None:
            console.print(f"[bold red]Error: no phrase with id {phrase_id}.[/bold red]")
            raise typer.Exit(code=1)
        updated = library.edit_phrase(
            phrase_id,
            text if text is not None else existing.text,
            translation if translation is not None else existing.translation,
        )
        _exit_if_unsaved(library, settings.store_path)
    if updated is None:
        console.print(
            "[bold red]Error: phrase and translation must not be blank.[/bold red]"
        )
        raise typer.Exit(code=1)
    console.print(f"[green]Updated[/green] [bold]{escape(updated.text)}[/bold]")


@app.command()
def delete(
    phrase_id: str = typer.Argument(..., help="Id of the phrase to delete."),
    yes: bool = typer.Option(
        False, "--yes", "-y", help="Bypass confirmation prompt."
    ),
    store: Optional[Path] = _store_option,
):
    """Permanently delete a phrase."""
    settings = _resolve_settings(store)
    with open_store(settings.store_path) as phrase_store:
        library = PhraseLibrary(phrase_store, subscribe=False)
        phrase = library.get(phrase_id)
        if phrase is None:
            console.print(f"[bold red]Error: no phrase with id {phrase_id}.[/bold red]")
            raise typer.Exit(code=1)
        if not yes:
            confirmed = typer.confirm(
                f"Delete '{phrase.text}'? This action cannot be undone."
            )
            if not confirmed:
                console.print("Delete cancelled.")
                raise typer.Exit()
        library.delete_phrase(phrase_id)
        _exit_if_unsaved(library, settings.store_path)
    console.print(f"[green]Deleted[/green] [bold]{escape(phrase.text)}[/bold]")


def _build_phrase_table(phrases: list[Phrase]) -> Table:
    table = Table(title="Phrase Collection")
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Phrase", style="bold")
    table.add_column("Translation")
    table.add_column("Success", justify="right")
    table.add_column("Fails", justify="right")
    table.add_column("Risk", justify="right")
    table.add_column("Added", no_wrap=True)
    for phrase in phrases:
        success_style = "green" if phrase.success_count > 0 else "dim"
        failure_style = "red" if phrase.failure_count > 0 else "dim"
        table.add_row(
            phrase.id,
            escape(phrase.text),
            escape(phrase.translation),
            f"[{success_style}]{phrase.success_count}[/{success_style}]",
            f"[{failure_style}]{phrase.failure_count}[/{failure_style}]",
            f"{risk_score(phrase):.2f}",
            phrase.created_at.astimezone().strftime("%Y-%m-%d"),
        )
    return table


@app.command("list")
def list_phrases(
    search: Optional[str] = typer.Option(
        None, "--search", "-q", help="Only show phrases containing this text."
    ),
    store: Optional[Path] = _store_option,
):
    """List phrases, newest first, with their review statistics."""
    settings = _resolve_settings(store)
    with open_store(settings.store_path) as phrase_store:
        library = PhraseLibrary(phrase_store, subscribe=False)
        phrases = library.search(search) if search else library.phrases

    if not phrases:
        console.print("[yellow]No phrases found.[/yellow]")
        if not search:
            console.print("Start by adding your first phrase.")
        return
    console.print(_build_phrase_table(phrases))


# ---------------------------------------------------------------------------
# Train command
# ---------------------------------------------------------------------------


@app.command()
def train(
    rounds: Optional[int] = typer.Option(
        None, "--rounds", "-n", min=1, help="Stop after this many rounds."
    ),
    delay: bool = typer.Option(
        True,
        "--delay/--no-delay",
        help="Pause while the translation is shown.",
    ),
    store: Optional[Path] = _store_option,
):
    """
    Drill phrases in timed rounds, favouring the ones you miss most.

    Answer each phrase with `k` (know it) or `d` (don't know) before the
    countdown runs out; `q` returns to the list.
    """
    settings = _resolve_settings(store)
    timers = VirtualTimerScheduler()
    with open_store(settings.store_path) as phrase_store:
        controller = ReviewRoundController(
            store=phrase_store,
            timers=timers,
            selector=RiskWeightedSelector(config=settings.selector_config()),
            config=settings.review_config(),
        )
        start_training_flow(
            controller,
            timers,
            phrase_store,
            max_rounds=rounds,
            pause=delay,
        )


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main():
    """
    Run the CLI application.

    If an unexpected exception occurs, print a bold red error message to the console and exit the process with status code 1.
    """
    try:
        app()
    except Exception as e:
        console.print(f"[bold red]UNEXPECTED ERROR: {e}[/bold red]")
        raise SystemExit(1)


if __name__ == "__main__":
    main()
