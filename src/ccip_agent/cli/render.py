"""CLI renderer for the chat console."""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager

from prompt_toolkit import PromptSession
from prompt_toolkit.patch_stdout import patch_stdout
from rich.console import Console
from rich.markup import escape
from rich.status import Status

TRANSFER_PROGRESS = "Processing cross-chain transfer (this may take several minutes)..."


class Renderer:
    """CLI renderer using Rich for terminal output."""

    def __init__(self, console: Console | None = None) -> None:
        self.console: Console = console or Console()
        self._prompt_session: PromptSession[str] | None = None
        self._print_lock = threading.Lock()
        self._status: Status | None = None

    def info(self, message: str) -> None:
        """Render an info message."""
        self._print(message)

    def error(self, message: str) -> None:
        """Render an error message."""
        self._print(f"[bold red]Error:[/bold red] {escape(message)}")

    def warning(self, message: str) -> None:
        """Render a warning message."""
        self._print(f"[yellow]Warning:[/yellow] {escape(message)}")

    def welcome(self, *, server_url: str, session_id: str | None, tools: list[str]) -> None:
        """Render welcome message and connection details."""
        self._print("[bold blue]Interactive Llama + tool chat.[/bold blue] Type 'exit' to quit.")
        self._print("[dim]Note: Cross-chain operations may take up to 5 minutes to complete.[/dim]")
        self._print(f"[bold]Tool server:[/bold] [cyan]{escape(server_url)}[/cyan] session={escape(session_id or '-')}")
        if tools:
            self._print(f"[bold]Available tools:[/bold] [green]{escape(', '.join(tools))}[/green]")

    def assistant_message(self, message: str) -> None:
        """Render assistant message."""
        self._print(f"[bold yellow]Assistant:[/bold yellow] {escape(message)}")

    def tool_result(self, name: str, output: str, *, is_error: bool) -> None:
        """Render the text returned by one tool call."""
        color = "red" if is_error else "green"
        self._print(f"[{color}]Tool {escape(name)} result:[/{color}]\n{escape(output)}")

    @contextmanager
    def progress(self, message: str) -> Iterator[None]:
        """Show a spinner while one turn is in flight."""
        with self.console.status(message, spinner="dots") as status:
            self._status = status
            try:
                yield
            finally:
                self._status = None

    def on_turn_event(self, kind: str, content: str) -> None:
        """Switch the spinner text when the turn moves to a tool call or follow-up."""
        if self._status is None:
            return
        if kind == "tool":
            message = TRANSFER_PROGRESS if content == "moveToken" else f"Invoking tool {content}..."
        elif kind == "followup":
            message = "Summarizing the result..."
        else:
            return
        self._status.update(message)

    async def get_user_input(self) -> str:
        """Prompt user for input."""
        if self._prompt_session is None:
            self._prompt_session = PromptSession()
        with patch_stdout(raw=True):
            return await self._prompt_session.prompt_async("You: ")

    def _print(self, message: str) -> None:
        with self._print_lock:
            self.console.print(message)
