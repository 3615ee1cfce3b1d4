"""Inspect what the assistant has learned about you."""

import asyncio

import click
from rich.console import Console
from rich.table import Table

from chat.session import ChatSession
from cli.utils import get_components
from learning.models import confidence_band

console = Console()

_BAND_STYLES = {"high": "green", "medium": "yellow", "low": "dim"}


@click.command("evolution")
def evolution():
    """Show learned preferences, topics and personality traits."""
    c = get_components()
    session = ChatSession(c["user_id"], c["conversations"], c["learning"])
    snapshot = asyncio.run(session.personality_snapshot())

    if not (snapshot.preferences or snapshot.topics or snapshot.traits):
        console.print("Nothing learned yet. Start with [bold]assistant chat[/].")
        return

    if snapshot.preferences:
        table = Table(title="Preferences")
        table.add_column("Type")
        table.add_column("Key")
        table.add_column("Value")
        table.add_column("Confidence", width=10)
        table.add_column("Evidence", width=8)
        for p in snapshot.preferences:
            style = _BAND_STYLES[confidence_band(p.confidence)]
            table.add_row(
                p.preference_type.replace("_", " "),
                p.preference_key,
                p.preference_value,
                f"[{style}]{p.confidence:.0%}[/]",
                str(len(p.learned_from)),
            )
        console.print(table)

    if snapshot.topics:
        table = Table(title="Topics")
        table.add_column("Topic")
        table.add_column("Mentions", width=8)
        table.add_column("Keywords")
        table.add_column("Last mentioned", width=16)
        for t in snapshot.topics:
            table.add_row(
                t.topic,
                str(t.mention_count),
                ", ".join(t.related_keywords),
                t.last_mentioned.strftime("%Y-%m-%d %H:%M"),
            )
        console.print(table)

    for trait in snapshot.traits:
        table = Table(title=f"Trait: {trait.trait_name} = {trait.trait_value}")
        table.add_column("When", width=16)
        table.add_column("Value")
        table.add_column("Reason")
        for change in trait.history:
            table.add_row(change.timestamp.strftime("%Y-%m-%d %H:%M"), change.value, change.reason)
        console.print(table)


@click.command("history")
@click.option("--limit", "-n", default=5, show_default=True, help="Conversations to list")
def history(limit: int):
    """List recent conversations."""
    c = get_components()
    conversations = asyncio.run(c["conversations"].get_recent_conversations(c["user_id"], limit))
    if not conversations:
        console.print("No conversations yet.")
        return

    table = Table(title="Recent conversations")
    table.add_column("ID", style="dim", width=8)
    table.add_column("Started", width=16)
    table.add_column("Last active", width=16)
    table.add_column("Summary")
    for conv in conversations:
        table.add_row(
            conv.id[:8],
            conv.started_at.strftime("%Y-%m-%d %H:%M"),
            conv.last_interaction.strftime("%Y-%m-%d %H:%M"),
            conv.context_summary or "-",
        )
    console.print(table)
