from __future__ import annotations

from pathlib import Path

import pytest

from graphbuild.manifest import ManifestError, load_manifest, parse_manifest
from graphbuild.models import Abi


def _manifest(**overrides) -> dict:
    data = {
        "schema": {"file": "schema.graphql"},
        "dataSources": [
            {
                "name": "Tokens",
                "mapping": {
                    "file": "mapping.ts",
                    "abis": [{"name": "Example", "file": "abi/Example.json"}],
                },
            }
        ],
    }
    data.update(overrides)
    return data


def test_parse_manifest_extracts_dependencies() -> None:
    document = parse_manifest(_manifest())

    assert document.schema_file == "schema.graphql"
    source = document.data_sources[0]
    assert source.name == "Tokens"
    assert source.mapping_file == "mapping.ts"
    assert source.abis == (Abi(name="Example", file="abi/Example.json"),)


def test_data_source_name_defaults_to_first_abi() -> None:
    data = _manifest()
    del data["dataSources"][0]["name"]

    document = parse_manifest(data)

    assert document.data_sources[0].name == "Example"


@pytest.mark.parametrize(
    ("data", "field"),
    [
        ({"dataSources": []}, "schema"),
        ({"schema": {"file": ""}, "dataSources": []}, "schema.file"),
        ({"schema": {"file": "s.graphql"}}, "dataSources"),
        ({"schema": {"file": "s.graphql"}, "dataSources": [{}]}, "dataSources[0].mapping"),
        (
            {"schema": {"file": "s.graphql"}, "dataSources": [{"mapping": {"abis": []}}]},
            "dataSources[0].mapping.file",
        ),
        (
            {"schema": {"file": "s.graphql"}, "dataSources": [{"mapping": {"file": "m.ts"}}]},
            "dataSources[0].mapping.abis",
        ),
        (
            {
                "schema": {"file": "s.graphql"},
                "dataSources": [{"mapping": {"file": "m.ts", "abis": [{"name": "A"}]}}],
            },
            "dataSources[0].mapping.abis[0].file",
        ),
    ],
)
def test_parse_manifest_names_missing_field(data: dict, field: str) -> None:
    with pytest.raises(ManifestError) as excinfo:
        parse_manifest(data)
    assert field in str(excinfo.value)


def test_load_manifest_from_disk(subgraph_builder) -> None:
    subgraph_builder.write_example()

    document = subgraph_builder.load()

    assert document.data_sources[0].name == "ExampleSubgraph"
    assert document.data_sources[0].abis[0].file == "./abi/Example.json"


def test_load_manifest_errors(tmp_path: Path) -> None:
    with pytest.raises(ManifestError) as missing:
        load_manifest(tmp_path / "subgraph.yaml")
    assert "not found" in str(missing.value)

    listing = tmp_path / "list.yaml"
    listing.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ManifestError):
        load_manifest(listing)

    broken = tmp_path / "broken.yaml"
    broken.write_text("schema: [unclosed\n", encoding="utf-8")
    with pytest.raises(ManifestError):
        load_manifest(broken)


def test_duplicate_data_source_names_are_rejected() -> None:
    source = {"mapping": {"file": "mapping.ts", "abis": [{"name": "Example", "file": "a.json"}]}}

    with pytest.raises(ManifestError) as excinfo:
        parse_manifest(_manifest(dataSources=[dict(source), dict(source)]))
    assert "Duplicate data source name 'Example'" in str(excinfo.value)

    explicit = _manifest()
    explicit["dataSources"].append(dict(explicit["dataSources"][0]))
    with pytest.raises(ManifestError):
        parse_manifest(explicit)
