"""Configuration loading tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from graphbuild.config import CONFIG_FILENAME, BuildConfig, ConfigError, load_config


def test_defaults_without_config_file(tmp_path: Path) -> None:
    config = load_config(tmp_path / "subgraph.yaml")

    assert config.root == tmp_path.resolve()
    assert config.output_format == "wasm"
    assert config.toolchain.executable == "asc"
    assert config.resolved_output_dir() == tmp_path.resolve() / "dist"


def test_load_config_reads_values(tmp_path: Path) -> None:
    (tmp_path / CONFIG_FILENAME).write_text(
        """
output_dir: out
output_format: wast
ipfs: localhost:5001
verbosity: debug
toolchain:
  executable: npx
  extra_args:
    - asc
    - --optimize
""",
        encoding="utf-8",
    )

    config = load_config(tmp_path)

    assert config.output_dir == tmp_path.resolve() / "out"
    assert config.output_format == "wast"
    assert config.ipfs == "localhost:5001"
    assert config.resolved_verbosity() == "debug"
    assert config.toolchain.executable == "npx"
    assert config.toolchain.extra_args == ["asc", "--optimize"]


def test_empty_config_file_uses_defaults(tmp_path: Path) -> None:
    (tmp_path / CONFIG_FILENAME).write_text("\n", encoding="utf-8")

    config = load_config(tmp_path)

    assert config.output_dir is None
    assert config.toolchain.extra_args == []


@pytest.mark.parametrize(
    "content",
    ["output_format: exe\n", "- a\n- b\n", "output_dir: [unclosed\n"],
)
def test_invalid_config_raises(tmp_path: Path, content: str) -> None:
    (tmp_path / CONFIG_FILENAME).write_text(content, encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_cli_overrides_take_precedence(tmp_path: Path) -> None:
    base = BuildConfig(root=tmp_path, ipfs="file-node:5001", verbosity="verbose")

    merged = base.with_overrides(output_dir=str(tmp_path / "x"), output_format="wast", ipfs="cli-node")

    assert merged.output_dir == (tmp_path / "x").resolve()
    assert merged.output_format == "wast"
    assert merged.ipfs == "cli-node"
    assert merged.verbosity == "verbose"
    assert base.with_overrides().ipfs == "file-node:5001"

    with pytest.raises(ConfigError):
        base.with_overrides(output_format="exe")


def test_verbosity_falls_back_to_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOG_LEVEL", "verbose")
    assert BuildConfig(root=tmp_path).resolved_verbosity() == "verbose"

    monkeypatch.delenv("LOG_LEVEL")
    assert BuildConfig(root=tmp_path).resolved_verbosity() == "info"
