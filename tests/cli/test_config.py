"""Tests for configuration loading and validation."""

from pathlib import Path
from unittest.mock import patch

import pytest

from cli.config import get_paths, get_session_config, load_config, load_config_model
from cli.config_models import AssistantConfig, LearningConfig


def test_defaults():
    cfg = AssistantConfig()
    assert cfg.learning.adaptability_interval == 5
    assert cfg.learning.formality_confidence == 0.7
    assert cfg.logging.level == "WARNING"
    assert not str(cfg.paths.db_path).startswith("~")


def test_load_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "paths:\n"
        f"  db_path: {tmp_path / 'a.db'}\n"
        "learning:\n"
        "  adaptability_interval: 3\n"
        "logging:\n"
        "  level: debug\n"
    )
    cfg = load_config_model(path)
    assert cfg.paths.db_path == tmp_path / "a.db"
    assert cfg.learning.adaptability_interval == 3
    assert cfg.logging.level == "DEBUG"


def test_invalid_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("learning: [unclosed\n")
    with pytest.raises(ValueError, match="Invalid YAML"):
        load_config_model(path)


def test_invalid_values(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("learning:\n  formality_confidence: 1.5\n")
    with pytest.raises(ValueError, match="Config validation failed"):
        load_config_model(path)


def test_interval_must_be_positive():
    with pytest.raises(ValueError):
        LearningConfig(adaptability_interval=0)


def test_helpers(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("learning:\n  formality_min_history: 1\n")
    config = load_config(path)
    session_cfg = get_session_config(config)
    assert session_cfg["formality_min_history"] == 1
    assert session_cfg["adaptability_min_preferences"] == 3
    paths = get_paths(config)
    assert isinstance(paths["db_path"], Path)


def test_get_components_wires_stores_and_identity(tmp_path):
    from cli.utils import get_components

    config = {
        "paths": {"db_path": str(tmp_path / "a.db"), "identity_file": str(tmp_path / "user_id")},
        "learning": {"adaptability_interval": 3},
    }
    with patch("cli.config.load_config", return_value=config):
        c = get_components()
    assert c["user_id"].startswith("user_")
    assert (tmp_path / "user_id").read_text().strip() == c["user_id"]
    assert c["conversations"].db_path == tmp_path / "a.db"
    assert c["learning"].db_path == tmp_path / "a.db"
    assert c["session_config"]["adaptability_interval"] == 3
