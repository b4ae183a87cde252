"""Main CLI application using Typer."""
import asyncio

import typer
from dotenv import load_dotenv
from rich.console import Console, Group
from rich.live import Live
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..chat import ConversationController
from ..client import ChatBackendError, ChatRequest
from ..transcript import ChatMessage, split_thought_answer
from ..ui.config import THINKING_LABEL, TRACE_CLOSED_TITLE, LogLevel
from ..ui.formatting import format_citations, format_timestamp, session_label
from .providers import get_backend, get_top_k

# Load environment variables
load_dotenv()

# Create Typer app
app = typer.Typer(
    name="agentchat",
    help="Chat with agents served by an agent-serving API",
    no_args_is_help=True,
    add_completion=True,
)

# Console for rich output
console = Console()

_LEVEL_STYLES = {
    "debug": "dim white",
    "info": "cyan",
    "warning": "yellow",
    "error": "red",
}


def _console_debug_callback(log_level: str):
    """Build a debug callback printing to the console at or above a level."""
    threshold = LogLevel.from_string(log_level)

    def callback(level: str, component: str, message: str) -> None:
        if LogLevel.from_string(level) < threshold:
            return
        style = _LEVEL_STYLES.get(level, "white")
        line = Text(f"{level.upper():<5} ", style=style)
        line.append(f"[{component}] ", style="bold")
        line.append(message, style="dim")
        console.print(line)

    return callback


def _render_reply(content: str, show_trace: bool) -> Group:
    """Render an assistant reply, split into reasoning and answer."""
    split = split_thought_answer(content)
    parts = []
    if split.in_progress:
        parts.append(Text(THINKING_LABEL, style="bold yellow"))
    if show_trace and split.trace:
        parts.append(Panel(Text(split.trace), title=TRACE_CLOSED_TITLE, border_style="dim"))
    if split.answer is not None:
        parts.append(Markdown(split.answer))
    return Group(*parts)


def _print_message(message: ChatMessage, show_trace: bool) -> None:
    header = Text(message.role, style="bold green" if message.is_user else "bold magenta")
    timestamp = format_timestamp(message.created_at)
    if timestamp:
        header.append(f" · {timestamp}", style="dim")
    console.print(header)
    if message.is_assistant:
        console.print(_render_reply(message.content, show_trace))
    else:
        console.print(Text(message.content))
    if message.citations:
        console.print(format_citations(message.citations))
    console.print()


@app.command()
def chat(
    agent_id: str = typer.Argument(..., help="Agent to chat with"),
    session: str = typer.Option(
        "",
        "--session",
        "-s",
        help="Session to open (default: newest session)"
    ),
    top_k: int | None = typer.Option(
        None,
        "--top-k",
        "-k",
        min=1,
        help="Result-size hint sent with each message (default: AGENTCHAT_TOP_K or 8)"
    ),
    base_url: str | None = typer.Option(
        None,
        "--base-url",
        "-u",
        help="Root URL of the API (default: AGENTCHAT_BASE_URL)"
    ),
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Show log panel with level: debug (all), info, warning, or error"
    ),
):
    """Launch the interactive TUI chat interface."""
    async def _chat():
        from ..ui import run_tui

        async with get_backend(base_url, console) as backend:
            await run_tui(
                backend=backend,
                agent_id=agent_id,
                session_id=session,
                top_k=get_top_k(top_k, console),
                log_level=log_level,
            )
        console.print("\n[dim]Goodbye![/dim]")

    try:
        asyncio.run(_chat())
    except KeyboardInterrupt:
        pass


@app.command()
def ask(
    agent_id: str = typer.Argument(..., help="Agent to ask"),
    message: str = typer.Argument(..., help="Message to send"),
    session: str = typer.Option(
        "",
        "--session",
        "-s",
        help="Session to continue (default: start a new one)"
    ),
    top_k: int | None = typer.Option(
        None,
        "--top-k",
        "-k",
        min=1,
        help="Result-size hint (default: AGENTCHAT_TOP_K or 8)"
    ),
    no_stream: bool = typer.Option(
        False,
        "--no-stream",
        help="Wait for the whole answer instead of streaming it"
    ),
    show_trace: bool = typer.Option(
        False,
        "--show-trace",
        "-t",
        help="Show the reasoning trace before the answer"
    ),
    base_url: str | None = typer.Option(
        None,
        "--base-url",
        "-u",
        help="Root URL of the API (default: AGENTCHAT_BASE_URL)"
    ),
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Print log lines at level: debug (all), info, warning, or error"
    ),
):
    """Send one message and print the reply."""
    if not message.strip():
        console.print("[red]Error: Message is empty[/red]")
        raise typer.Exit(code=1)

    async def _ask_blocking(backend):
        request = ChatRequest(
            session_id=session,
            message=message.strip(),
            top_k=get_top_k(top_k, console),
            stream=False,
        )
        with console.status("[dim]Waiting for the answer...[/dim]"):
            response = await backend.chat(agent_id, request)
        console.print(_render_reply(response.answer, show_trace))
        if response.citations:
            console.print(format_citations(tuple(response.citations)))
        return response.session_id

    async def _ask_streaming(backend):
        controller = ConversationController(
            backend, agent_id, session_id=session, top_k=get_top_k(top_k, console)
        )
        if log_level is not None:
            controller.set_debug_callback(_console_debug_callback(log_level))

        try:
            with Live(console=console, refresh_per_second=12) as live:
                def on_update(kind):
                    last = controller.transcript[-1] if controller.transcript else None
                    if last is not None and last.is_assistant:
                        live.update(_render_reply(last.content, show_trace))

                controller.set_update_callback(on_update)
                sent = await controller.send(message)
        finally:
            await controller.aclose()

        if controller.error:
            raise ChatBackendError(controller.error)
        if not sent:
            raise ChatBackendError("Message was not sent")

        last = controller.transcript[-1]
        if last.is_assistant and last.citations:
            console.print(format_citations(last.citations))
        return controller.active_session_id

    async def _ask():
        async with get_backend(base_url, console) as backend:
            try:
                if no_stream:
                    session_id = await _ask_blocking(backend)
                else:
                    session_id = await _ask_streaming(backend)
            except ChatBackendError as e:
                console.print(f"[red]Error: {e}[/red]")
                raise typer.Exit(code=1)

        if session_id:
            console.print(f"\n[dim]Session: {session_id}[/dim]")

    asyncio.run(_ask())


@app.command()
def sessions(
    agent_id: str = typer.Argument(..., help="Agent whose sessions to list"),
    base_url: str | None = typer.Option(
        None,
        "--base-url",
        "-u",
        help="Root URL of the API (default: AGENTCHAT_BASE_URL)"
    ),
):
    """List the chat sessions of an agent, newest first."""
    async def _sessions():
        async with get_backend(base_url, console) as backend:
            try:
                items = await backend.list_sessions(agent_id)
            except ChatBackendError as e:
                console.print(f"[red]Error: {e}[/red]")
                raise typer.Exit(code=1)

        if not items:
            console.print("[yellow]No sessions found[/yellow]")
            return

        table = Table(show_header=True, header_style="bold cyan")
        table.add_column("Session", style="cyan")
        table.add_column("Title")
        table.add_column("Created", style="dim", width=11)
        table.add_column("Updated", style="green", width=11)

        for item in items:
            table.add_row(
                item.session_id,
                item.title or "",
                format_timestamp(item.created_at),
                format_timestamp(item.updated_at),
            )

        console.print(table)

    asyncio.run(_sessions())


@app.command()
def history(
    agent_id: str = typer.Argument(..., help="Agent the session belongs to"),
    session_id: str = typer.Argument(..., help="Session to print"),
    show_trace: bool = typer.Option(
        False,
        "--show-trace",
        "-t",
        help="Show reasoning traces of assistant messages"
    ),
    base_url: str | None = typer.Option(
        None,
        "--base-url",
        "-u",
        help="Root URL of the API (default: AGENTCHAT_BASE_URL)"
    ),
):
    """Print the persisted transcript of a session."""
    async def _history():
        async with get_backend(base_url, console) as backend:
            try:
                messages = await backend.list_messages(agent_id, session_id)
            except ChatBackendError as e:
                console.print(f"[red]Error: {e}[/red]")
                raise typer.Exit(code=1)

        if not messages:
            console.print("[yellow]No messages in this session[/yellow]")
            return

        for message in messages:
            _print_message(message, show_trace)

    asyncio.run(_history())


@app.command(name="delete-session")
def delete_session(
    agent_id: str = typer.Argument(..., help="Agent the session belongs to"),
    session_id: str = typer.Argument(..., help="Session to delete"),
    yes: bool = typer.Option(
        False,
        "--yes",
        "-y",
        help="Skip confirmation prompt"
    ),
    base_url: str | None = typer.Option(
        None,
        "--base-url",
        "-u",
        help="Root URL of the API (default: AGENTCHAT_BASE_URL)"
    ),
):
    """Delete a chat session and its messages."""
    async def _delete():
        if not yes:
            confirm = typer.confirm(f"Delete session {session_id}?")
            if not confirm:
                console.print("[dim]Aborted.[/dim]")
                return

        async with get_backend(base_url, console) as backend:
            try:
                await backend.delete_session(agent_id, session_id)
            except ChatBackendError as e:
                console.print(f"[red]Error: {e}[/red]")
                raise typer.Exit(code=1)

        console.print(f"[green]Deleted session {session_id}[/green]")

    asyncio.run(_delete())


@app.command()
def agent(
    agent_id: str = typer.Argument(..., help="Agent to describe"),
    base_url: str | None = typer.Option(
        None,
        "--base-url",
        "-u",
        help="Root URL of the API (default: AGENTCHAT_BASE_URL)"
    ),
):
    """Show an agent's details and its most recent sessions."""
    async def _agent():
        async with get_backend(base_url, console) as backend:
            try:
                detail, items = await asyncio.gather(
                    backend.get_agent(agent_id),
                    backend.list_sessions(agent_id),
                )
            except ChatBackendError as e:
                console.print(f"[red]Error: {e}[/red]")
                raise typer.Exit(code=1)

        table = Table(show_header=False, box=None)
        table.add_column("Field", style="bold cyan", width=15)
        table.add_column("Value")

        table.add_row("Name", detail.name)
        table.add_row("Id", detail.agent_id)
        table.add_row("Description", detail.description or "")
        table.add_row("Tags", ", ".join(detail.tags) or "None")
        table.add_row("Files", detail.summary)
        table.add_row("Updated", format_timestamp(detail.updated_at) or "Unknown")
        table.add_row("Sessions", str(len(items)))

        console.print(table)
        for item in items[:5]:
            console.print(session_label(item))

    asyncio.run(_agent())


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
