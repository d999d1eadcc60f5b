"""Subgraph manifest loading (subgraph.yaml)."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List

import yaml

from .models import Abi, DataSource, ManifestDocument


class ManifestError(RuntimeError):
    """Raised when a manifest is unreadable or misses a required field."""


def read_manifest_data(path: Path) -> Dict[str, Any]:
    """Return the raw mapping stored in the manifest at ``path``."""
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ManifestError(f"Manifest not found: {path}") from exc
    except OSError as exc:
        raise ManifestError(f"Failed to read manifest {path}: {exc}") from exc

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ManifestError(f"Failed to parse {path.name}: {exc}") from exc
    if not isinstance(data, dict):
        raise ManifestError(f"{path.name} must contain a mapping at the root")
    return data


def parse_manifest(data: Dict[str, Any]) -> ManifestDocument:
    """Extract the fields dependency discovery and compilation rely on."""
    schema = _require_mapping(data, "schema", "schema")
    schema_file = _require_str(schema, "file", "schema.file")

    raw_sources = data.get("dataSources")
    if not isinstance(raw_sources, list):
        raise ManifestError("Missing required field 'dataSources' (expected a list)")

    data_sources: List[DataSource] = []
    for index, raw in enumerate(raw_sources):
        where = f"dataSources[{index}]"
        if not isinstance(raw, dict):
            raise ManifestError(f"{where} must be a mapping")
        mapping = _require_mapping(raw, "mapping", f"{where}.mapping")
        mapping_file = _require_str(mapping, "file", f"{where}.mapping.file")

        raw_abis = mapping.get("abis")
        if not isinstance(raw_abis, list):
            raise ManifestError(f"Missing required field '{where}.mapping.abis' (expected a list)")
        abis = []
        for abi_index, raw_abi in enumerate(raw_abis):
            abi_where = f"{where}.mapping.abis[{abi_index}]"
            if not isinstance(raw_abi, dict):
                raise ManifestError(f"{abi_where} must be a mapping")
            abis.append(
                Abi(
                    name=_require_str(raw_abi, "name", f"{abi_where}.name"),
                    file=_require_str(raw_abi, "file", f"{abi_where}.file"),
                )
            )

        name = raw.get("name")
        if not isinstance(name, str) or not name:
            name = abis[0].name if abis else f"DataSource{index}"
        if any(source.name == name for source in data_sources):
            raise ManifestError(
                f"Duplicate data source name '{name}' in {where}; give each data source a unique name"
            )
        data_sources.append(DataSource(name=name, mapping_file=mapping_file, abis=tuple(abis)))

    return ManifestDocument(schema_file=schema_file, data_sources=tuple(data_sources))


def load_manifest(path: Path) -> ManifestDocument:
    return parse_manifest(read_manifest_data(path))


def _require_mapping(data: Dict[str, Any], key: str, where: str) -> Dict[str, Any]:
    value = data.get(key)
    if not isinstance(value, dict):
        raise ManifestError(f"Missing required field '{where}'")
    return value


def _require_str(data: Dict[str, Any], key: str, where: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ManifestError(f"Missing required field '{where}'")
    return value


__all__ = ["ManifestError", "load_manifest", "parse_manifest", "read_manifest_data"]
