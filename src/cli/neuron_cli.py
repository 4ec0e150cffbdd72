"""
NeurOn CLI - memory training with AI-generated puzzles.

Usage:
    neuron play                    # Interactive session from level 1
    neuron play --level 4          # Start further in
    neuron puzzle --mode logic     # Fetch and show one puzzle
    neuron puzzle --json           # ...as raw JSON
    neuron config                  # Show effective settings
"""

from __future__ import annotations

import asyncio
import sys
from typing import Annotated

import typer
from loguru import logger
from rich.console import Console
from rich.prompt import Prompt
from rich.table import Table

from config import Settings, get_settings
from src.delivery.console_view import ConsoleView, render_puzzle_card, render_summary
from src.game.controller import GameController, Phase
from src.game.models import GameMode, SessionState
from src.generation import PuzzleRequester, PuzzleUnavailableError, create_transport
from src.generation.puzzle_requester import puzzle_to_json

# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="neuron",
    help="🧠 NeurOn - Brain Vibration Protocol: AI-generated memory training",
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=True,
)

console = Console()

QUIT_INPUTS = {"q", "quit", "exit"}


def configure_logging(settings: Settings) -> None:
    """Route loguru to stderr (and optionally a file) at the configured level."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=settings.log_level,
        format="<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {message}",
    )
    if settings.log_file:
        logger.add(
            settings.log_file,
            level="DEBUG",
            rotation="10 MB",
            retention=3,
            encoding="utf-8",
        )


def build_requester(settings: Settings) -> PuzzleRequester:
    """Create the requester or exit with a readable error."""
    try:
        transport = create_transport(settings)
    except ValueError as e:
        console.print(f"[red]✗[/red] {e}. Set GEMINI_API_KEY in the environment or .env")
        raise typer.Exit(code=1)
    return PuzzleRequester(transport, settings=settings)


def parse_mode(value: str) -> GameMode:
    try:
        return GameMode(value.upper())
    except ValueError:
        choices = ", ".join(m.value.lower() for m in GameMode)
        raise typer.BadParameter(f"mode must be one of: {choices}")


# =============================================================================
# Commands
# =============================================================================


@app.command()
def play(
    level: Annotated[int, typer.Option("--level", "-l", min=1, help="Starting level")] = 1,
    mode: Annotated[
        str, typer.Option("--mode", "-m", help="Starting mode: sequence, logic or reverse")
    ] = "sequence",
) -> None:
    """
    Start an interactive memory session.

    Memorize the numbers while the countdown runs, then type them back.
    Type 'q' at any prompt to end the session.
    """
    settings = get_settings()
    start_mode = parse_mode(mode)
    requester = build_requester(settings)
    state = SessionState(level=level, mode=start_mode)

    try:
        final_state = asyncio.run(_run_session(requester, state, settings))
    except KeyboardInterrupt:
        console.print("\n[yellow]Session interrupted.[/yellow]")
        return

    console.print(render_summary(final_state))


async def _run_session(
    requester: PuzzleRequester,
    state: SessionState,
    settings: Settings,
) -> SessionState:
    """Drive the controller from terminal input until the user quits."""
    view = ConsoleView(console)
    controller = GameController(requester, state=state, on_change=view.render, settings=settings)
    controller.start()

    try:
        while True:
            phase = await controller.wait_for(
                Phase.MEMORIZING, Phase.RECALL, Phase.EXPLANATION, Phase.OFFLINE
            )

            if phase is Phase.MEMORIZING:
                await controller.wait_for(Phase.RECALL)
                continue

            if phase is Phase.RECALL:
                answer = await asyncio.to_thread(Prompt.ask, "[cyan]Recall[/cyan]", console=console)
                if answer.strip().lower() in QUIT_INPUTS:
                    break
                controller.submit_answer(answer)
                continue

            choice = await asyncio.to_thread(
                Prompt.ask,
                "[bold]Restart neural synthesis?[/bold] (r = retry, q = quit)",
                choices=["r", "q"],
                default="r",
                console=console,
            )
            if choice == "q":
                break
            controller.retry()
    finally:
        controller.close()
        await requester.close()

    return controller.state


@app.command()
def puzzle(
    level: Annotated[int, typer.Option("--level", "-l", min=1, help="Puzzle level")] = 1,
    mode: Annotated[
        str, typer.Option("--mode", "-m", help="sequence, logic or reverse")
    ] = "sequence",
    as_json: Annotated[bool, typer.Option("--json", help="Print raw JSON")] = False,
) -> None:
    """Fetch a single puzzle and print it (answer included)."""
    settings = get_settings()
    puzzle_mode = parse_mode(mode)
    requester = build_requester(settings)

    async def _fetch():
        try:
            return await requester.fetch_puzzle(
                level,
                puzzle_mode,
                on_status=lambda msg: console.print(f"[yellow]{msg}[/yellow]"),
            )
        finally:
            await requester.close()

    try:
        result = asyncio.run(_fetch())
    except PuzzleUnavailableError as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(code=1)

    if as_json:
        console.print_json(puzzle_to_json(result))
    else:
        console.print(render_puzzle_card(result, puzzle_mode))


@app.command("config")
def show_config() -> None:
    """Show the effective configuration."""
    settings = get_settings()

    table = Table(title="NeurOn Configuration", border_style="cyan")
    table.add_column("Setting", style="dim")
    table.add_column("Value")

    table.add_row("gemini_api_key", settings.masked_api_key())
    for name in (
        "ai_model",
        "ai_transport",
        "gemini_api_base_url",
        "ai_temperature",
        "request_timeout_seconds",
        "retry_delay_seconds",
        "max_fetch_attempts",
        "memorize_seconds_per_item",
        "memorize_min_seconds",
        "success_delay_seconds",
        "vibration_seconds",
        "log_level",
        "log_file",
    ):
        table.add_row(name, str(getattr(settings, name)))

    console.print(table)
    if not settings.has_ai_configured():
        console.print("[yellow]⚠ No Gemini API key configured.[/yellow]")


# =============================================================================
# Entry Point
# =============================================================================


def main() -> None:
    """CLI entry point."""
    configure_logging(get_settings())
    app()


if __name__ == "__main__":
    main()
