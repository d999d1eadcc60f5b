"""Configuration loading for graphbuild (.graphbuild.yml)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".graphbuild.yml"
OUTPUT_FORMATS = ("wasm", "wast")
DEFAULT_OUTPUT_DIR = "dist"
DEFAULT_VERBOSITY = "info"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class ToolchainConfig:
    """AssemblyScript compiler invocation settings."""

    executable: str = "asc"
    extra_args: List[str] = field(default_factory=list)


@dataclass
class BuildConfig:
    """Effective build settings: file values merged with CLI overrides."""

    root: Path
    output_dir: Optional[Path] = None
    output_format: str = "wasm"
    ipfs: Optional[str] = None
    verbosity: Optional[str] = None
    toolchain: ToolchainConfig = field(default_factory=ToolchainConfig)

    def resolved_output_dir(self) -> Path:
        return self.output_dir or (self.root / DEFAULT_OUTPUT_DIR)

    def resolved_verbosity(self) -> str:
        return self.verbosity or os.environ.get("LOG_LEVEL") or DEFAULT_VERBOSITY

    def with_overrides(
        self,
        *,
        output_dir: Optional[str] = None,
        output_format: Optional[str] = None,
        ipfs: Optional[str] = None,
        verbosity: Optional[str] = None,
    ) -> "BuildConfig":
        """Return a copy with any non-empty CLI values applied on top."""
        fmt = output_format or self.output_format
        _check_format(fmt)
        return BuildConfig(
            root=self.root,
            output_dir=Path(output_dir).expanduser().resolve() if output_dir else self.output_dir,
            output_format=fmt,
            ipfs=ipfs or self.ipfs,
            verbosity=verbosity or self.verbosity,
            toolchain=self.toolchain,
        )


def load_config(path: Path) -> BuildConfig:
    """Load configuration for the project containing ``path`` (a manifest or directory)."""
    config_file = _resolve_config_path(path)
    root = config_file.parent

    if not config_file.exists():
        return BuildConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    output_dir_str = _as_str(data.get("output_dir"))
    output_format = _as_str(data.get("output_format")) or "wasm"
    _check_format(output_format)

    toolchain = ToolchainConfig()
    toolchain_data = _as_dict(data.get("toolchain"))
    if toolchain_data:
        toolchain.executable = _as_str(toolchain_data.get("executable")) or toolchain.executable
        toolchain.extra_args = _as_str_list(toolchain_data.get("extra_args"))

    return BuildConfig(
        root=root,
        output_dir=(root / output_dir_str) if output_dir_str else None,
        output_format=output_format,
        ipfs=_as_str(data.get("ipfs")),
        verbosity=_as_str(data.get("verbosity")),
        toolchain=toolchain,
    )


def _resolve_config_path(path: Path) -> Path:
    path = path.expanduser()
    if path.is_dir():
        return (path / CONFIG_FILENAME).resolve()
    return (path.parent / CONFIG_FILENAME).resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _check_format(value: str) -> None:
    if value not in OUTPUT_FORMATS:
        choices = ", ".join(OUTPUT_FORMATS)
        raise ConfigError(f"Unsupported output format '{value}' (expected one of: {choices})")


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "BuildConfig",
    "CONFIG_FILENAME",
    "ConfigError",
    "OUTPUT_FORMATS",
    "ToolchainConfig",
    "load_config",
]
