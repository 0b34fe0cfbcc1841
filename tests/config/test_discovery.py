"""Tests for config discovery and loading."""

from pathlib import Path

import click
import pytest
from pydantic import ValidationError

from linknav.config.discovery import (
    CONFIG_ENV_VAR,
    CONFIG_FILENAME,
    find_config,
    find_vault_root,
    load_config,
    read_toml,
)
from linknav.config.models import LinkNavConfig


@pytest.fixture(autouse=True)
def _no_env_config(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)


class TestFindConfig:
    def test_in_start_dir(self, tmp_path: Path) -> None:
        config_file = tmp_path / CONFIG_FILENAME
        config_file.write_text("[traversal]\nmax_depth = 2\n")
        assert find_config(tmp_path) == config_file

    def test_walks_up_from_subfolder(self, tmp_path: Path) -> None:
        config_file = tmp_path / CONFIG_FILENAME
        config_file.write_text("")
        child = tmp_path / "Projects" / "Alpha"
        child.mkdir(parents=True)
        assert find_config(child) == config_file

    def test_none_when_absent(self, tmp_path: Path) -> None:
        child = tmp_path / "empty"
        child.mkdir()
        assert find_config(child) is None

    def test_env_var_wins(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / CONFIG_FILENAME).write_text("")
        custom = tmp_path / "elsewhere.toml"
        custom.write_text("")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(custom))
        assert find_config(tmp_path) == custom

    def test_env_var_pointing_nowhere(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / CONFIG_FILENAME).write_text("")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "missing.toml"))
        assert find_config(tmp_path) is None


class TestFindVaultRoot:
    def test_obsidian_marker(self, tmp_path: Path) -> None:
        (tmp_path / ".obsidian").mkdir()
        child = tmp_path / "Daily"
        child.mkdir()
        assert find_vault_root(child) == tmp_path.resolve()

    def test_config_file_marks_root(self, tmp_path: Path) -> None:
        (tmp_path / CONFIG_FILENAME).write_text("")
        assert find_vault_root(tmp_path) == tmp_path.resolve()

    def test_nearest_marker_wins(self, tmp_path: Path) -> None:
        (tmp_path / ".obsidian").mkdir()
        inner = tmp_path / "nested-vault"
        (inner / ".obsidian").mkdir(parents=True)
        assert find_vault_root(inner) == inner.resolve()

    def test_marker_must_be_directory(self, tmp_path: Path) -> None:
        (tmp_path / ".obsidian").write_text("not a folder")
        assert find_vault_root(tmp_path) != tmp_path.resolve()


class TestReadToml:
    def test_parses(self, tmp_path: Path) -> None:
        path = tmp_path / CONFIG_FILENAME
        path.write_text("[cache]\nmax_size = 3\n")
        assert read_toml(path) == {"cache": {"max_size": 3}}

    def test_invalid(self, tmp_path: Path) -> None:
        path = tmp_path / CONFIG_FILENAME
        path.write_text("[cache\n")
        with pytest.raises(click.ClickException, match="Invalid TOML"):
            read_toml(path)

class TestLoadConfig:
    def test_defaults_without_file(self, tmp_path: Path) -> None:
        assert load_config(cwd=tmp_path) == LinkNavConfig()

    def test_sparse_overrides(self, tmp_path: Path) -> None:
        config_file = tmp_path / CONFIG_FILENAME
        config_file.write_text("[cache]\nmax_size = 50\n\n[canvas]\nsearch_links = false\n")

        config = load_config(config_file)

        assert config.cache.max_size == 50
        assert config.cache.timeout == 300_000
        assert config.canvas.search_links is False
        assert config.canvas.show_links is True

    def test_discovers_from_cwd(self, tmp_path: Path) -> None:
        (tmp_path / CONFIG_FILENAME).write_text("[traversal]\nmax_depth = 4\n")
        assert load_config(cwd=tmp_path).traversal.max_depth == 4

    def test_invalid_value_rejected(self, tmp_path: Path) -> None:
        config_file = tmp_path / CONFIG_FILENAME
        config_file.write_text("[traversal]\nmax_depth = 0\n")
        with pytest.raises(ValidationError):
            load_config(config_file)
