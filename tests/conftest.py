from __future__ import annotations

from pathlib import Path

import pytest

from tests._fixtures.subgraph_builder import SubgraphBuilder


@pytest.fixture
def subgraph_builder(tmp_path: Path) -> SubgraphBuilder:
    """Provide a reusable subgraph project builder rooted at the pytest tmp_path."""
    return SubgraphBuilder(tmp_path)
