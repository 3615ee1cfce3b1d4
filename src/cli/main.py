"""CLI entry point for the learning assistant."""

import sys
from pathlib import Path

import click

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from cli.commands import chat, evolution, history
from cli.config import load_config_model
from cli.logging_config import setup_logging


@click.group()
@click.version_option(version="0.1.0")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.option("--json-logs", is_flag=True, help="Emit logs as JSON")
def cli(verbose: bool, json_logs: bool):
    """Learning assistant - a chat companion that adapts to you."""
    log_cfg = load_config_model().logging
    setup_logging(
        json_mode=json_logs or log_cfg.json_logs,
        level="DEBUG" if verbose else log_cfg.level,
    )


cli.add_command(chat)
cli.add_command(evolution)
cli.add_command(history)


if __name__ == "__main__":
    cli()
