from __future__ import annotations

from pathlib import Path

import pytest

from docshell.config import ConfigError, ShellConfig, load_config
from docshell.options import CustomAccount, Disabled


def _write_project_config(root: Path) -> Path:
    config_text = (
        "output: build/index.html\n"
        "env_passthrough:\n"
        "  - NODE_ENV\n"
        "  - MISSING_VAR\n"
        "document:\n"
        "  title: Homepage | nib\n"
        "  description: Health insurance\n"
        "  visualWebsiteOptimizer:\n"
        "    accountId: 111111\n"
        "  env:\n"
        "    API_URL: https://api.example.com\n"
    )
    cfg_path = root / "docshell.yml"
    cfg_path.write_text(config_text, encoding="utf-8")
    return cfg_path


def test_load_config_from_directory_resolves_output(tmp_path: Path) -> None:
    project = tmp_path / "project"
    project.mkdir()
    _write_project_config(project)

    cfg = load_config(project)

    assert cfg.output == (project / "build" / "index.html").resolve()
    assert cfg.document.title == "Homepage | nib"
    assert cfg.document.description == "Health insurance"
    assert cfg.document.optimizer == CustomAccount(111111)


def test_load_config_accepts_config_file_path(tmp_path: Path) -> None:
    config_file = _write_project_config(tmp_path)

    cfg = load_config(config_file)

    assert cfg.output == (tmp_path / "build" / "index.html").resolve()


def test_load_config_uses_defaults_when_directory_has_no_config(tmp_path: Path) -> None:
    cfg = load_config(tmp_path)

    assert cfg.output is None
    assert cfg.env_passthrough == []
    assert cfg.document.optimizer == Disabled()


def test_load_config_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yml")


def test_load_config_rejects_non_mapping_root(tmp_path: Path) -> None:
    config_file = tmp_path / "docshell.yml"
    config_file.write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(config_file)


def test_load_config_rejects_invalid_document(tmp_path: Path) -> None:
    config_file = tmp_path / "docshell.yml"
    config_file.write_text("document:\n  visualWebsiteOptimizer:\n    accountId: -5\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(config_file)


def test_load_config_rejects_misspelled_account_key(tmp_path: Path) -> None:
    config_file = tmp_path / "docshell.yml"
    config_file.write_text("document:\n  visualWebsiteOptimizer:\n    accountID: 424242\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(config_file)


def test_load_config_rejects_malformed_yaml(tmp_path: Path) -> None:
    config_file = tmp_path / "docshell.yml"
    config_file.write_text("document: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(config_file)


def test_document_options_merges_passthrough_env(tmp_path: Path) -> None:
    cfg = load_config(_write_project_config(tmp_path))

    options = cfg.document_options({"NODE_ENV": "production"})

    assert options.env == {"NODE_ENV": "production", "API_URL": "https://api.example.com"}
    assert cfg.document.env == {"API_URL": "https://api.example.com"}


def test_document_options_explicit_env_wins() -> None:
    cfg = ShellConfig(env_passthrough="API_URL", document={"env": {"API_URL": "explicit"}})

    options = cfg.document_options({"API_URL": "from-environment"})

    assert options.env == {"API_URL": "explicit"}
