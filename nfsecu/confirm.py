from __future__ import annotations

from typing import Protocol

from rich.console import Console
from rich.markup import escape

from .console import console as default_console

DECLINE_ANSWERS = {"n", "no"}


def is_decline(answer: str) -> bool:
    return answer.strip().lower() in DECLINE_ANSWERS


class Confirmer(Protocol):
    def confirm(self, prompt: str) -> bool: ...


class ConsoleConfirmer:
    """Ask on the terminal. Only an explicit no declines; Enter means yes."""

    def __init__(self, console: Console | None = None):
        self.console = console or default_console

    def confirm(self, prompt: str) -> bool:
        try:
            answer = self.console.input(f"  [yellow]?[/yellow] {escape(prompt)} [dim](Y/n)[/dim] ")
        except EOFError:
            # No terminal to answer from: treat as a refusal.
            self.console.print()
            return False
        return not is_decline(answer)
