from __future__ import annotations

from rich.console import Console
from rich.markup import escape

console = Console(highlight=False, soft_wrap=True)
err_console = Console(stderr=True, highlight=False, soft_wrap=True)


def banner() -> None:
    console.print()
    console.print("  [bold]NiceFox Secu[/bold]")
    console.print("  [dim]AI-powered pentesting for web developers[/dim]")
    console.print()


def step_done(message: str) -> None:
    console.print(f"  [green]✓[/green] {escape(message)}")


def step_progress(message: str) -> None:
    console.print(f"  [yellow]→[/yellow] {escape(message)}")


def warn(message: str) -> None:
    console.print(f"  [yellow]![/yellow] {escape(message)}")


def fail(message: str, hint: str | None = None) -> None:
    err_console.print()
    err_console.print(f"  [red]✗[/red] {escape(message)}")
    if hint:
        err_console.print()
        for line in hint.splitlines():
            err_console.print(f"    [cyan]{escape(line)}[/cyan]")
    err_console.print()


def next_steps(document_path: str) -> None:
    console.print()
    console.print("  [bold]Ready![/bold] Open your AI coding agent from your project directory and paste:")
    console.print()
    console.print(f"    [cyan]{escape(instruction_line(document_path))}[/cyan]")
    console.print()
    console.print("  [dim]Works with Claude Code, Codex, opencode, Cursor, Kimi, aider...[/dim]")
    console.print()


def instruction_line(document_path: str) -> str:
    return f"Read {document_path} and start the pentest"
