"""
NeurOn terminal delivery.

Components:
- console_view: rich renderables for HUD, puzzle, countdown and feedback
- ConsoleView: redraws the screen on every controller change
"""

from .console_view import ConsoleView, render_puzzle_card, render_screen, render_summary

__all__ = [
    "ConsoleView",
    "render_puzzle_card",
    "render_screen",
    "render_summary",
]
