"""Interactive chat loop."""

import asyncio

import click
from rich.console import Console
from rich.panel import Panel

from chat.session import ChatSession
from cli.utils import get_components
from learning.errors import StoreError, ValidationError

console = Console()

EXIT_WORDS = {"exit", "quit", ":q"}


async def _chat_loop(session: ChatSession, prompt) -> None:
    opening = await session.start()
    console.print(Panel(opening, title="Assistant", border_style="blue"))

    while True:
        try:
            text = prompt()
        except (EOFError, KeyboardInterrupt, click.Abort):
            console.print()
            break
        if text.strip().lower() in EXIT_WORDS:
            break
        try:
            result = await session.send(text)
        except ValidationError:
            continue
        except StoreError as e:
            console.print(f"[red]Message not sent:[/] {e}")
            continue

        reply = result.reply
        subtitle = f"searched: {reply.search_query}" if reply.search_performed else None
        console.print(Panel(reply.message, title="Assistant", subtitle=subtitle, border_style="blue"))
        if result.assistant_message is None:
            console.print("[yellow]Reply shown but not saved to history.[/]")


@click.command("chat")
def chat():
    """Chat with the assistant. It learns your style and topics as you go."""
    c = get_components()
    session = ChatSession(
        c["user_id"],
        c["conversations"],
        c["learning"],
        config=c["session_config"],
    )
    asyncio.run(_chat_loop(session, lambda: click.prompt("You", prompt_suffix="> ")))
