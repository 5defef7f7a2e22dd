"""
Command-line interface for timed training rounds.
"""

import logging
import time
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from phrasecore.db.store import PhraseStore
from phrasecore.models import ReviewPhase
from phrasecore.review_controller import ReviewRoundController
from phrasecore.timers import VirtualTimerScheduler

logger = logging.getLogger(__name__)
console = Console()

KNOW_ANSWERS = {"k", "know", "y", "yes"}
DONT_KNOW_ANSWERS = {"d", "dont", "don't", "n", "no"}
QUIT_ANSWERS = {"q", "quit", "back"}


def _get_user_answer() -> Optional[str]:
    """
    Prompt for an answer.

    Returns:
        The normalized input, or None when input is exhausted (treated as a
        request to leave the session).
    """
    try:
        raw = console.input(
            "[bold]\\[k] know it  \\[d] don't know  \\[q] back to list: [/bold]"
        )
    except EOFError:
        return None
    return raw.strip().lower()


def _display_phrase(controller: ReviewRoundController) -> None:
    phrase = controller.current_phrase
    console.print(
        Panel(
            f"[bold]{escape(phrase.text)}[/bold]",
            title="Phrase",
            subtitle=f"{controller.time_left}s to answer",
            border_style="magenta",
        )
    )


def _display_reveal(controller: ReviewRoundController) -> None:
    """Show the translation and the outcome of the round just completed."""
    phrase = controller.current_phrase
    outcome = controller.history[-1]
    if outcome.timed_out:
        verdict = "[bold red]Time's up![/bold red]"
    elif outcome.is_correct:
        verdict = "[bold green]Known.[/bold green]"
    else:
        verdict = "[bold red]Not known.[/bold red]"
    console.print(verdict)
    console.print(Panel(escape(phrase.translation), title="Translation", border_style="blue"))
    console.print(
        f"[dim]Success: {phrase.success_count} | Fails: {phrase.failure_count}[/dim]"
    )
    if not outcome.saved:
        console.print(
            "[bold yellow]Progress could not be saved; it is kept for this "
            "session only.[/bold yellow]"
        )


def _print_summary(controller: ReviewRoundController) -> None:
    known = sum(1 for o in controller.history if o.is_correct)
    timed_out = sum(1 for o in controller.history if o.timed_out)
    missed = len(controller.history) - known
    console.print(
        f"[bold cyan]Training finished.[/bold cyan] Rounds: {len(controller.history)}, "
        f"known: [green]{known}[/green], missed: [red]{missed}[/red] "
        f"(timed out: {timed_out})."
    )


def start_training_flow(
    controller: ReviewRoundController,
    timers: VirtualTimerScheduler,
    store: PhraseStore,
    max_rounds: Optional[int] = None,
    pause: bool = True,
) -> None:
    """
    Run training rounds until the user returns to the list, input ends, the
    round limit is reached or no phrases remain.

    The controller runs on a virtual clock. Each prompt advances it by the
    wall-clock time the user took, so an answer given after the countdown
    expired arrives too late: the round counts as timed out and the answer
    is discarded. After the reveal the clock advances by the transition
    delay, which starts the next round.

    Args:
        controller: Controller wired to `timers` and `store`.
        timers: The virtual scheduler driving the controller.
        store: Polled before each answer to pick up changes made elsewhere.
        max_rounds: Stop after this many completed rounds.
        pause: Sleep for the transition delay while the translation is shown.
    """
    console.print("[bold cyan]Starting training...[/bold cyan]")
    if controller.start() is ReviewPhase.Finished:
        console.print("[bold yellow]No phrases available.[/bold yellow]")
        console.print("Add some phrases first to start training.")
        controller.return_to_list()
        return

    while controller.phase is ReviewPhase.Presenting:
        phrase_id = controller.current_phrase.id
        console.rule(f"[bold]Round {len(controller.history) + 1}[/bold]")
        _display_phrase(controller)

        started = time.monotonic()
        choice = _get_user_answer()
        elapsed = time.monotonic() - started

        store.poll_changes()
        current = controller.current_phrase
        if controller.phase is ReviewPhase.Presenting and (
            current is None or current.id != phrase_id
        ):
            console.print(
                "[yellow]That phrase was removed elsewhere; skipping it.[/yellow]"
            )
            if choice is None or choice in QUIT_ANSWERS:
                break
            continue

        # Stop at the reveal; a late answer belongs to the timed-out round.
        timers.advance(
            elapsed, until=lambda: controller.phase is not ReviewPhase.Presenting
        )
        if choice is None or choice in QUIT_ANSWERS:
            break
        if (
            controller.phase is ReviewPhase.Presenting
            and controller.current_phrase.id == phrase_id
        ):
            if choice in KNOW_ANSWERS:
                controller.answer(True)
            elif choice in DONT_KNOW_ANSWERS:
                controller.answer(False)
            else:
                console.print("[red]Please type k, d or q.[/red]")
                continue

        if controller.phase is not ReviewPhase.Revealed:
            continue
        _display_reveal(controller)
        console.print("")

        if max_rounds is not None and len(controller.history) >= max_rounds:
            break
        delay = controller.config.transition_delay
        if pause:
            time.sleep(delay)
        timers.advance(delay)

    if controller.phase is ReviewPhase.Finished:
        console.print("[bold yellow]No phrases left to train.[/bold yellow]")
    controller.return_to_list()
    _print_summary(controller)
