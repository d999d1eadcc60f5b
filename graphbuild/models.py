"""Core data models shared across graphbuild components."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import FrozenSet, List, Optional, Tuple

WatchSet = FrozenSet[Path]


@dataclass(frozen=True)
class Abi:
    """A named contract ABI referenced by a mapping."""

    name: str
    file: str


@dataclass(frozen=True)
class DataSource:
    """One data source: a mapping file and the ABIs it binds against."""

    name: str
    mapping_file: str
    abis: Tuple[Abi, ...]


@dataclass(frozen=True)
class ManifestDocument:
    """Structural view of a subgraph manifest; paths are manifest-relative."""

    schema_file: str
    data_sources: Tuple[DataSource, ...]


@dataclass(frozen=True)
class BuildTrigger:
    """A detected filesystem change that asks for a rebuild."""

    path: Path
    timestamp: datetime
    kind: str = "modified"


@dataclass
class Artifacts:
    """Files produced by a successful compile."""

    output_dir: Path
    manifest: Optional[Path] = None
    bindings: List[Path] = field(default_factory=list)
    binaries: List[Path] = field(default_factory=list)
