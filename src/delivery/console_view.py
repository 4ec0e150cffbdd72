"""
NeurOn terminal rendering.

Cyan/violet "neural" look built from rich panels. Pure presentation: every
function reads controller/game state and returns a renderable.
"""

from __future__ import annotations

from rich import box
from rich.align import Align
from rich.console import Console, Group, RenderableType
from rich.panel import Panel
from rich.style import Style
from rich.table import Table
from rich.text import Text

from src.game.controller import Feedback, FeedbackKind, GameController, Phase
from src.game.models import GameMode, Puzzle, SessionState
from src.game.timer import MemorizationTimer

# =============================================================================
# THEME
# =============================================================================

NEURON_THEME = {
    "primary": "#22D3EE",  # cyan - numbers, timer
    "secondary": "#8B5CF6",  # violet - level
    "accent": "#F59E0B",  # amber - streak
    "success": "#34D399",
    "error": "#FB7185",
    "dim": "#94A3B8",
    "white": "#F8FAFC",
}

STYLES = {
    "primary": Style(color=NEURON_THEME["primary"], bold=True),
    "secondary": Style(color=NEURON_THEME["secondary"], bold=True),
    "accent": Style(color=NEURON_THEME["accent"], bold=True),
    "success": Style(color=NEURON_THEME["success"], bold=True),
    "error": Style(color=NEURON_THEME["error"], bold=True),
    "dim": Style(color=NEURON_THEME["dim"]),
}

FEEDBACK_STYLES = {
    FeedbackKind.SUCCESS: STYLES["success"],
    FeedbackKind.ERROR: STYLES["error"],
    FeedbackKind.INFO: STYLES["primary"],
}


def format_number(value: int | float) -> str:
    """3.0 -> '3', 2.5 -> '2.5'."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


# =============================================================================
# Components
# =============================================================================


def render_header() -> Text:
    txt = Text(justify="center")
    txt.append("NeurOn\n", style=Style(color=NEURON_THEME["primary"], bold=True, italic=True))
    txt.append("BRAIN VIBRATION PROTOCOL", style=STYLES["dim"])
    return txt


def render_hud(state: SessionState) -> Panel:
    """Score / level / streak strip."""
    table = Table.grid(expand=True)
    table.add_column(justify="left")
    table.add_column(justify="center")
    table.add_column(justify="right")
    table.add_row(
        Text("CURRENT IQ INDEX", style=STYLES["dim"]),
        Text("NEURAL STAGE", style=STYLES["dim"]),
        Text("SYNAPSE STREAK", style=STYLES["dim"]),
    )
    table.add_row(
        Text(f"{state.score:,}", style=STYLES["primary"]),
        Text(str(state.level), style=STYLES["secondary"]),
        Text(f"×{state.streak}", style=STYLES["accent"]),
    )
    return Panel(table, box=box.ROUNDED, border_style=STYLES["dim"], padding=(0, 2))


def render_progress_bar(fraction: float, width: int = 30) -> Text:
    filled = int(round(fraction * width))
    bar = Text()
    bar.append("█" * filled, style=STYLES["primary"])
    bar.append("░" * (width - filled), style=STYLES["dim"])
    return bar


def render_numbers(
    puzzle: Puzzle,
    timer: MemorizationTimer | None,
    vibrate: bool = False,
) -> Panel:
    """Number cells plus the retention countdown."""
    cells = Text(justify="center")
    for i, num in enumerate(puzzle.sequence):
        if i:
            cells.append("  ")
        cells.append(f" {format_number(num)} ", style=Style(color=NEURON_THEME["white"], bold=True, reverse=True))

    body: list[RenderableType] = [Align.center(cells)]
    if timer is not None:
        countdown = Text(f"\nNEURAL RETENTION: {timer.time_left}s\n", style=STYLES["primary"], justify="center")
        body.append(countdown)
        body.append(Align.center(render_progress_bar(timer.progress)))

    return Panel(
        Group(*body),
        box=box.HEAVY if vibrate else box.ROUNDED,
        border_style=STYLES["success"] if vibrate else STYLES["primary"],
        padding=(1, 2),
    )


def render_feedback(feedback: Feedback | None) -> Text:
    if feedback is None:
        return Text("")
    return Text(feedback.message, style=FEEDBACK_STYLES[feedback.kind], justify="center")


def render_instructions(mode: GameMode, memorizing: bool) -> Text:
    txt = Text(justify="center")
    txt.append(mode.heading(memorizing) + "\n", style=Style(color=NEURON_THEME["white"], bold=True))
    txt.append(mode.instruction, style=STYLES["dim"])
    return txt


def render_question(puzzle: Puzzle) -> Text:
    return Text(puzzle.question, style=STYLES["secondary"], justify="center")


def render_explanation(puzzle: Puzzle) -> Panel:
    """The "Neural Breakpoint" view shown after a wrong answer."""
    txt = Text()
    txt.append("LOGIC BREAKDOWN\n", style=STYLES["error"])
    txt.append(puzzle.explanation + "\n\n", style=Style(color=NEURON_THEME["white"]))
    txt.append("Correct Answer: ", style=STYLES["primary"])
    txt.append(puzzle.answer, style=Style(color=NEURON_THEME["primary"], bold=True))
    return Panel(
        txt,
        title="[bold]Neural Breakpoint[/bold]",
        border_style=STYLES["error"],
        box=box.ROUNDED,
        padding=(1, 2),
    )


def render_loading(feedback: Feedback | None) -> Panel:
    message = render_feedback(feedback) if feedback else Text("Downloading Neural Data...", style=STYLES["primary"])
    return Panel(Align.center(message), box=box.ROUNDED, border_style=STYLES["dim"], padding=(1, 2))


def render_puzzle_card(puzzle: Puzzle, mode: GameMode | None = None) -> Panel:
    """Static, full view of a puzzle (used by `neuron puzzle`)."""
    txt = Text()
    if mode is not None:
        txt.append(f"{mode.value}\n", style=STYLES["secondary"])
    txt.append("Sequence: ", style=STYLES["dim"])
    txt.append(", ".join(format_number(n) for n in puzzle.sequence) + "\n", style=STYLES["primary"])
    txt.append("Question: ", style=STYLES["dim"])
    txt.append(puzzle.question + "\n")
    txt.append("Answer: ", style=STYLES["dim"])
    txt.append(puzzle.answer + "\n", style=STYLES["success"])
    txt.append("Explanation: ", style=STYLES["dim"])
    txt.append(puzzle.explanation)
    for i, hint in enumerate(puzzle.hints, start=1):
        txt.append(f"\nHint {i}: ", style=STYLES["dim"])
        txt.append(hint, style=STYLES["accent"])
    return Panel(txt, title="[bold]Puzzle[/bold]", border_style=STYLES["primary"], box=box.ROUNDED)


def render_summary(state: SessionState) -> Panel:
    txt = Text()
    txt.append(f"Final IQ Index: {state.score:,}\n", style=STYLES["primary"])
    txt.append(f"Neural Stage reached: {state.level}", style=STYLES["secondary"])
    return Panel(txt, title="[bold]Session Ended[/bold]", border_style=STYLES["dim"], box=box.ROUNDED)


# =============================================================================
# Screen
# =============================================================================


def render_screen(controller: GameController) -> Group:
    """Compose the whole screen for the controller's current phase."""
    parts: list[RenderableType] = [render_header(), render_hud(controller.state)]
    puzzle = controller.puzzle
    phase = controller.phase

    if phase in (Phase.LOADING, Phase.IDLE, Phase.OFFLINE) or puzzle is None:
        parts.append(render_loading(controller.feedback))
    elif phase is Phase.EXPLANATION:
        parts.append(render_feedback(controller.feedback))
        parts.append(render_explanation(puzzle))
    elif phase is Phase.MEMORIZING:
        parts.append(render_instructions(controller.state.mode, memorizing=True))
        parts.append(render_numbers(puzzle, controller.timer, controller.state.is_vibrating))
    else:
        parts.append(render_instructions(controller.state.mode, memorizing=False))
        parts.append(render_question(puzzle))
        feedback = render_feedback(controller.feedback)
        if controller.state.is_vibrating:
            parts.append(Panel(feedback, box=box.HEAVY, border_style=STYLES["success"]))
        else:
            parts.append(feedback)

    return Group(*parts)


class ConsoleView:
    """Redraws the screen on every controller change."""

    def __init__(self, console: Console | None = None, clear: bool = True):
        self.console = console or Console()
        self.clear = clear

    def render(self, controller: GameController) -> None:
        if controller.phase is Phase.CLOSED:
            return
        if self.clear:
            self.console.clear()
        self.console.print(render_screen(controller))
