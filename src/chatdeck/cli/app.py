"""Main CLI application using Typer."""
import asyncio

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..chat.models import ConversationState, Role
from ..chat.session import ChatSession
from ..config import get_gateway, get_log_level
from ..llm import RequestPipeline
from ..logging_config import configure_logging
from ..providers import (
    categorize_models,
    get_provider,
    list_providers,
    mask_credential,
    model_display_name,
    search_models,
    validate_credential,
)

# Load environment variables
load_dotenv()

# Create Typer app
app = typer.Typer(
    name="chatdeck",
    help="Multi-chat client for OpenAI-compatible LLM providers",
    no_args_is_help=True,
    add_completion=True,
)

# Console for rich output
console = Console()


@app.callback()
def _setup() -> None:
    configure_logging(get_log_level())


def open_session() -> ChatSession:
    """Open a session over the configured storage."""
    try:
        return ChatSession.open(get_gateway(), RequestPipeline())
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)


def _print_reply(state: ConversationState) -> None:
    if state.error:
        console.print(f"[red]Error: {state.error}[/red]")
        return
    chat = state.current_chat
    if chat and chat.messages and chat.messages[-1].role == Role.ASSISTANT:
        console.print(f"[bold green]Assistant:[/bold green] {chat.messages[-1].content}\n")


@app.command()
def providers():
    """List the supported providers."""
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Id", style="cyan")
    table.add_column("Name")
    table.add_column("Base URL", style="dim")
    table.add_column("Key prefix", style="yellow")
    table.add_column("Models", justify="right")

    for provider in list_providers():
        table.add_row(
            provider.id,
            provider.display_name,
            provider.base_url or "(user supplied)",
            provider.credential_prefix or "-",
            str(len(provider.models)),
        )
    console.print(table)


@app.command()
def models(
    provider_id: str = typer.Argument("openrouter", help="Provider id"),
    search: str = typer.Option("", "--search", "-s", help="Case-insensitive filter"),
    category: str = typer.Option("all", "--category", "-c", help="Model category"),
):
    """List a provider's models, optionally filtered."""
    provider = get_provider(provider_id)
    if provider is None:
        console.print(f"[red]Error: Unknown provider: {provider_id}[/red]")
        raise typer.Exit(code=1)

    matches = search_models(provider.models, term=search, category=category)
    if not matches:
        console.print("[yellow]No models found[/yellow]")
        categories = ", ".join(categorize_models(provider.models))
        console.print(f"[dim]Categories: {categories}[/dim]")
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Model id", style="cyan")
    table.add_column("Name")
    for model in matches:
        table.add_row(model, model_display_name(model))
    console.print(table)


@app.command(name="set-key")
def set_key(
    api_key: str = typer.Argument(..., help="API key for the provider"),
    provider_id: str | None = typer.Option(
        None,
        "--provider",
        "-p",
        help="Switch to this provider as well"
    ),
):
    """Store the API key (and optionally switch provider)."""
    session = open_session()
    target = provider_id or session.state.settings.provider

    if not validate_credential(api_key, target):
        console.print(f"[red]Error: That does not look like a valid {target} API key[/red]")
        raise typer.Exit(code=1)

    if provider_id:
        session.update_settings(provider=provider_id)
    session.set_api_key(api_key.strip())
    console.print(f"[green]API key saved for {target}:[/green] {mask_credential(api_key.strip())}")


@app.command()
def config(
    provider_id: str | None = typer.Option(None, "--provider", "-p", help="Provider id"),
    model: str | None = typer.Option(None, "--model", "-m", help="Model id"),
    temperature: float | None = typer.Option(None, "--temperature", "-t", help="0.0 to 2.0"),
    max_tokens: int | None = typer.Option(None, "--max-tokens", help="Maximum reply tokens"),
    base_url: str | None = typer.Option(None, "--base-url", help="Override the provider URL"),
):
    """Show or change the settings."""
    session = open_session()
    updates = {
        key: value for key, value in {
            "provider": provider_id,
            "model": model,
            "temperature": temperature,
            "max_tokens": max_tokens,
            "base_url": base_url,
        }.items()
        if value is not None
    }
    if updates:
        try:
            session.update_settings(**updates)
        except ValueError as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(code=1)

    settings = session.state.settings
    table = Table(show_header=False, box=None)
    table.add_column("Setting", style="bold cyan", width=14)
    table.add_column("Value")
    table.add_row("Provider", settings.provider)
    table.add_row("Model", settings.model)
    table.add_row("Base URL", settings.base_url or "(provider default)")
    table.add_row("Temperature", str(settings.temperature))
    table.add_row("Max tokens", str(settings.max_tokens))
    table.add_row("API key", mask_credential(settings.api_key) if settings.api_key else "NOT SET")
    console.print(table)


@app.command()
def chats():
    """List saved chats, newest first."""
    session = open_session()
    state = session.state
    if not state.chats:
        console.print("[dim]No chats yet.[/dim]")
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("", width=1)
    table.add_column("Id", style="dim")
    table.add_column("Title", style="cyan")
    table.add_column("Messages", justify="right")
    table.add_column("Updated", style="dim")
    for chat in state.chats:
        marker = "*" if chat.id == state.current_chat_id else ""
        table.add_row(
            marker,
            chat.id,
            chat.title,
            str(len(chat.messages)),
            chat.updated_at.astimezone().strftime("%Y-%m-%d %H:%M"),
        )
    console.print(table)


@app.command()
def send(
    text: str = typer.Argument(..., help="Message to send"),
    new: bool = typer.Option(False, "--new", "-n", help="Start a new chat first"),
):
    """Send one message in the current chat and print the reply."""
    async def _send():
        session = open_session()
        try:
            if not session.is_api_key_set():
                console.print("[red]Error: No API key set. Run: chatdeck set-key <key>[/red]")
                raise typer.Exit(code=1)
            if new:
                session.create_new_chat()
            await session.send_message(text)
            _print_reply(session.state)
            if session.state.error:
                raise typer.Exit(code=1)
        finally:
            await session.close()

    asyncio.run(_send())


@app.command()
def chat():
    """Interactive chat mode."""
    async def _chat():
        session = open_session()

        if not session.is_api_key_set():
            console.print("[red]Error: No API key set. Run: chatdeck set-key <key>[/red]")
            await session.close()
            raise typer.Exit(code=1)

        settings = session.state.settings
        console.print(Panel(
            f"Provider: {settings.provider}  Model: {settings.model}\n"
            "Commands: /new, /list, /switch <id>, /delete <id>, /quit",
            title="chatdeck",
            border_style="cyan",
        ))
        current = session.get_current_chat()
        if current:
            console.print(f"[dim]Continuing: {current.title}[/dim]\n")

        try:
            while True:
                try:
                    user_input = console.input("[bold yellow]You:[/bold yellow] ")
                except (KeyboardInterrupt, EOFError):
                    console.print("\n[dim]Goodbye![/dim]")
                    break

                command, _, argument = user_input.strip().partition(" ")
                if command in ("/quit", "/exit", "/q"):
                    console.print("[dim]Goodbye![/dim]")
                    break
                if command == "/new":
                    session.create_new_chat()
                    console.print("[dim]Started a new chat.[/dim]")
                    continue
                if command == "/list":
                    for item in session.state.chats:
                        marker = "*" if item.id == session.state.current_chat_id else " "
                        console.print(f"{marker} [dim]{item.id}[/dim] {item.title}")
                    continue
                if command == "/switch":
                    if session.state.find_chat(argument.strip()) is None:
                        console.print(f"[red]No chat with id {argument.strip()}[/red]")
                        continue
                    session.select_chat(argument.strip())
                    console.print(f"[dim]Switched to: {session.get_current_chat().title}[/dim]")
                    continue
                if command == "/delete":
                    if session.state.find_chat(argument.strip()) is None:
                        console.print(f"[red]No chat with id {argument.strip()}[/red]")
                        continue
                    session.delete_chat(argument.strip())
                    console.print("[dim]Deleted.[/dim]")
                    continue

                with console.status("[dim]Thinking...[/dim]"):
                    await session.send_message(user_input)
                _print_reply(session.state)
        finally:
            await session.close()

    asyncio.run(_chat())


@app.command()
def clear(
    yes: bool = typer.Option(
        False,
        "--yes",
        "-y",
        help="Skip confirmation prompt"
    )
):
    """Delete all chats (settings and API key are kept)."""
    if not yes:
        console.print("[yellow]WARNING: This will delete all saved chats![/yellow]")
        confirm = typer.confirm("Are you sure you want to continue?")
        if not confirm:
            console.print("[dim]Aborted.[/dim]")
            return

    session = open_session()
    count = len(session.state.chats)
    session.clear_all_chats()
    console.print(f"[green]Deleted {count} chats.[/green]")


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
