"""Terminal renderer for the chat shell."""

from __future__ import annotations

import threading

from prompt_toolkit import PromptSession
from prompt_toolkit.patch_stdout import patch_stdout
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from molchat.types import ApiKeyStatus, ChatMessage, SelectionInfo

SHELL_HINT = (
    "Shell: :load <path-or-url>, :click <chain> <residue> [atom], :hover ..., "
    ":key [<value>|clear], :commands, :quit"
)

_ROLE_STYLES = {
    "assistant": ("bold yellow", "molchat"),
    "system": ("bold magenta", "system"),
    "user": ("bold cyan", "you"),
}


class Renderer:
    """Rich output plus a prompt_toolkit input line."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()
        self._prompt_session: PromptSession[str] = PromptSession()
        self._print_lock = threading.Lock()

    def welcome(self, model: str, status: ApiKeyStatus) -> None:
        self._print("[bold blue]molchat[/bold blue] - talk to your molecule.")
        self._print(f"[bold]Model:[/bold] [magenta]{escape(model)}[/magenta]")
        self.key_status(status)
        self._print(f"[dim]{escape(SHELL_HINT)}[/dim]")

    def key_status(self, status: ApiKeyStatus) -> None:
        style = "green" if status.valid else "red"
        self._print(f"[{style}]{escape(describe_key_status(status))}[/{style}]")

    def selection(self, info: SelectionInfo | None) -> None:
        if info is None:
            self._print("[dim]Selection cleared.[/dim]")
            return
        self._print(f"[bold green]Selected:[/bold green] {escape(info.description)}")

    def info(self, message: str) -> None:
        self._print(escape(message))

    def error(self, message: str) -> None:
        self._print(f"[bold red]Error:[/bold red] {escape(message)}")

    def message(self, message: ChatMessage) -> None:
        style, label = _ROLE_STYLES[message.role]
        self._print(f"[{style}]{label}:[/{style}] {escape(message.text)}")
        if message.commands_executed:
            self._print(f"[dim]ran: {', '.join(message.commands_executed)}[/dim]")

    def catalog(self, rows: list[tuple[str, str]]) -> None:
        table = Table(title="Commands", show_lines=False)
        table.add_column("name", style="cyan", no_wrap=True)
        table.add_column("description")
        for name, description in rows:
            table.add_row(name, description)
        with self._print_lock:
            self.console.print(table)

    async def get_user_input(self) -> str:
        with patch_stdout(raw=True):
            return await self._prompt_session.prompt_async("molchat> ")

    def _print(self, message: str) -> None:
        with self._print_lock:
            self.console.print(message)


def describe_key_status(status: ApiKeyStatus) -> str:
    if not status.present:
        return "API key: none (direct commands only)"
    state = "valid" if status.valid else "invalid (direct commands only)"
    return f"API key: {state}, from {status.source}"
