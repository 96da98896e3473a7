"""Tests for loader configuration."""

from __future__ import annotations

from pathlib import Path

import pytest

from geoffload.config import (
    DEFAULT_DATABASE,
    DEFAULT_ENCODING,
    ENV_DATABASE,
    ConfigError,
    LoaderConfig,
    load_config,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Run every test in an empty directory with no GEOFFLOAD_* variables."""
    monkeypatch.delenv("GEOFFLOAD_DATABASE", raising=False)
    monkeypatch.delenv("GEOFFLOAD_ENCODING", raising=False)
    monkeypatch.chdir(tmp_path)


class TestLoaderConfig:
    """Tests for LoaderConfig."""

    def test_defaults(self) -> None:
        config = LoaderConfig()
        assert config.database == DEFAULT_DATABASE
        assert config.encoding == DEFAULT_ENCODING

    def test_from_dict(self) -> None:
        config = LoaderConfig.from_dict({"database": "data/g.db", "encoding": "latin-1"})
        assert config.database == Path("data/g.db")
        assert config.encoding == "latin-1"

    def test_from_dict_ignores_unknown_keys(self) -> None:
        assert LoaderConfig.from_dict({"colour": "blue"}) == LoaderConfig()


class TestLoadConfig:
    """Tests for load_config."""

    def test_no_file_gives_defaults(self) -> None:
        assert load_config() == LoaderConfig()

    def test_reads_default_file(self, tmp_path: Path) -> None:
        (tmp_path / "geoffload.yaml").write_text("database: other.db\n")
        assert load_config().database == Path("other.db")

    def test_reads_explicit_file(self, tmp_path: Path) -> None:
        path = tmp_path / "custom.yaml"
        path.write_text("encoding: utf-16\n")
        assert load_config(path).encoding == "utf-16"

    def test_env_overrides_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "geoffload.yaml").write_text("database: other.db\n")
        monkeypatch.setenv(ENV_DATABASE, "env.db")
        assert load_config().database == Path("env.db")

    def test_empty_file(self, tmp_path: Path) -> None:
        (tmp_path / "geoffload.yaml").write_text("")
        assert load_config() == LoaderConfig()

    def test_missing_explicit_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "missing.yaml")

    def test_non_mapping_raises(self, tmp_path: Path) -> None:
        (tmp_path / "geoffload.yaml").write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_config()

    def test_invalid_yaml_raises(self, tmp_path: Path) -> None:
        (tmp_path / "geoffload.yaml").write_text("database: [unclosed\n")
        with pytest.raises(ConfigError, match="Cannot read"):
            load_config()
