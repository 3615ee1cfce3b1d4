"""Shared CLI utilities."""

from rich.console import Console

console = Console()


def get_components():
    """Initialize stores and identity from config."""
    from chat.conversation_store import ConversationStore
    from chat.identity import load_or_create_user_id
    from cli.config import get_paths, get_session_config, load_config
    from learning.store import LearningStore

    config = load_config()
    paths = get_paths(config)

    return {
        "config": config,
        "paths": paths,
        "session_config": get_session_config(config),
        "user_id": load_or_create_user_id(paths["identity_file"]),
        "conversations": ConversationStore(paths["db_path"]),
        "learning": LearningStore(paths["db_path"]),
    }
