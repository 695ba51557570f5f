"""CLI entry points for molchat."""

from __future__ import annotations

import asyncio
from typing import Any

import typer

from molchat.ai.service import LanguageModelService, validate_key_format
from molchat.cli.render import Renderer, describe_key_status
from molchat.commands.builtin import builtin_descriptors
from molchat.config import Settings, load_settings
from molchat.errors import KeyValidationError, ServiceError
from molchat.logging_utils import configure_logging
from molchat.session import Session, build_session
from molchat.types import ChatMessage, SelectionInfo
from molchat.viewer.headless import HeadlessViewer

app = typer.Typer(
    name="molchat",
    help="Drive a molecular viewer with commands and natural language.",
    add_completion=False,
)

QUIT_WORDS = frozenset({":quit", ":q", "quit", "exit"})


def _settings(model: str | None, api_key: str | None) -> Settings:
    return load_settings(model=model, api_key=api_key)


@app.command()
def chat(
    structure: str | None = typer.Option(None, "--structure", "-s", help="Structure file path or URL to load first"),
    model: str | None = typer.Option(None, "--model", help="Model in provider:model form"),
    api_key: str | None = typer.Option(None, "--api-key", help="API key for the model provider"),
) -> None:
    """Start an interactive session."""

    settings = _settings(model, api_key)
    configure_logging(profile="chat", level=settings.log_level)
    asyncio.run(_chat_loop(build_session(settings), Renderer(), structure))


@app.command()
def run(
    message: str = typer.Argument(..., help="Command or natural-language request"),
    structure: str | None = typer.Option(None, "--structure", "-s", help="Structure file path or URL to load first"),
    model: str | None = typer.Option(None, "--model", help="Model in provider:model form"),
    api_key: str | None = typer.Option(None, "--api-key", help="API key for the model provider"),
) -> None:
    """Run one message through the session pipeline."""

    settings = _settings(model, api_key)
    configure_logging(level=settings.log_level)
    session = build_session(settings)
    try:
        for reply in asyncio.run(_run_once(session, message, structure)):
            typer.echo(f"[{reply.role}] {reply.text}")
    finally:
        session.close()


@app.command("commands")
def list_commands() -> None:
    """Show the command catalog."""

    for descriptor in builtin_descriptors():
        typer.echo(f"{descriptor.name}: {descriptor.description}")


@app.command("check-key")
def check_key(
    api_key: str | None = typer.Argument(None, help="Key to check; defaults to MOLCHAT_API_KEY"),
    offline: bool = typer.Option(False, "--offline", help="Only check the key format"),
) -> None:
    """Validate an API key, then try it against the model."""

    settings = load_settings()
    configure_logging(level=settings.log_level)
    key = api_key or settings.api_key
    if not key:
        typer.echo("No API key given. Pass one or set MOLCHAT_API_KEY.", err=True)
        raise typer.Exit(1)
    try:
        validate_key_format(key)
    except KeyValidationError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc

    service = LanguageModelService(settings)
    if api_key:
        service.update_api_key(key)
    typer.echo(describe_key_status(service.api_key_status()))
    if offline:
        typer.echo("API key format looks valid.")
        return

    try:
        ok = asyncio.run(service.test_key(key))
    except ServiceError as exc:
        typer.echo(exc.message, err=True)
        raise typer.Exit(1) from exc
    if not ok:
        typer.echo("The model returned an empty reply.", err=True)
        raise typer.Exit(1)
    typer.echo(f"API key works with {service.model}.")


async def _run_once(session: Session, message: str, structure: str | None) -> list[ChatMessage]:
    replies: list[ChatMessage] = []
    if structure:
        replies.append(await session.load_structure(structure))
    replies.append(await session.handle_input(message))
    await session.drain()
    return replies


async def _chat_loop(session: Session, renderer: Renderer, structure: str | None) -> None:
    def _on_selection(_sender: Any, info: SelectionInfo | None = None, **_kwargs: Any) -> None:
        renderer.selection(info)

    def _on_key_changed(service: LanguageModelService, **_kwargs: Any) -> None:
        renderer.key_status(service.api_key_status())

    session.tracker.changed.connect(_on_selection, weak=False)
    session.service.key_changed.connect(_on_key_changed, weak=False)
    renderer.welcome(session.service.model, session.service.api_key_status())
    try:
        if structure:
            renderer.message(await session.load_structure(structure))
        while True:
            try:
                line = (await renderer.get_user_input()).strip()
            except (KeyboardInterrupt, EOFError):
                renderer.info("Goodbye!")
                break
            if not line:
                continue
            if line.casefold() in QUIT_WORDS:
                renderer.info("Goodbye!")
                break
            if line.startswith(":"):
                await _handle_shell_directive(session, renderer, line)
                continue
            renderer.message(await session.handle_input(line))
    finally:
        session.tracker.changed.disconnect(_on_selection)
        session.service.key_changed.disconnect(_on_key_changed)
        session.close()


async def _handle_shell_directive(session: Session, renderer: Renderer, line: str) -> None:
    name, *args = line[1:].split() or [""]
    if name == "load" and args:
        renderer.message(await session.load_structure(args[0], args[1] if len(args) > 1 else None))
        return
    if name in {"click", "hover"} and len(args) >= 2 and args[1].isdigit():
        engine = session.engine
        if not isinstance(engine, HeadlessViewer):
            renderer.error("Interaction emulation needs the headless viewer.")
            return
        atom = args[2] if len(args) > 2 else None
        try:
            if name == "click":
                await engine.click_atom(args[0].upper(), int(args[1]), atom)
            else:
                await engine.hover_atom(args[0].upper(), int(args[1]), atom)
        except LookupError as exc:
            renderer.error(str(exc))
            return
        await session.drain()
        return
    if name == "key":
        _update_key(session, renderer, args)
        return
    if name == "commands":
        renderer.catalog([(item.name, item.description) for item in session.registry.descriptors()])
        return
    renderer.error(f"Unknown shell directive: {line}")


def _update_key(session: Session, renderer: Renderer, args: list[str]) -> None:
    service = session.service
    if not args:
        renderer.key_status(service.api_key_status())
        return
    try:
        service.update_api_key(None if args[0] == "clear" else args[0])
    except KeyValidationError as exc:
        renderer.error(str(exc))
