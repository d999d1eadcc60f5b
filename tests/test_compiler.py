from __future__ import annotations

import subprocess
from pathlib import Path
from typing import List

import pytest
import yaml

from graphbuild.compiler import GENERATED_DIRNAME, CompileError, Compiler
from graphbuild.config import BuildConfig, ToolchainConfig


class FakeAsc:
    """Stands in for the AssemblyScript compiler by writing the target file."""

    def __init__(self, *, error: Exception | None = None) -> None:
        self.calls: List[dict] = []
        self.error = error

    def __call__(self, args, *, cwd: Path, env=None) -> str:
        args = list(args)
        self.calls.append({"args": args, "cwd": cwd})
        if self.error is not None:
            raise self.error
        Path(args[3]).write_bytes(b"\0asm")
        return ""


def _config(root: Path, **overrides) -> BuildConfig:
    return BuildConfig(root=root, output_dir=root / "build", **overrides)


def test_compile_writes_bindings_binaries_and_manifest(subgraph_builder) -> None:
    manifest = subgraph_builder.write_example()
    root = subgraph_builder.path()
    runner = FakeAsc()

    artifacts = Compiler(_config(root), runner=runner).compile(manifest)

    generated = root / GENERATED_DIRNAME
    assert artifacts.bindings == [
        generated / "schema.ts",
        generated / "ExampleSubgraph" / "Example.ts",
    ]
    bindings = (generated / "ExampleSubgraph" / "Example.ts").read_text(encoding="utf-8")
    assert "export class ExampleEvent__Params {" in bindings
    assert "return this._event.parameters[0].value.toString();" in bindings
    assert "export class ExampleEntity extends Entity {" in (generated / "schema.ts").read_text(
        encoding="utf-8"
    )

    binary = root / "build" / "ExampleSubgraph" / "ExampleSubgraph.wasm"
    assert artifacts.binaries == [binary]
    assert runner.calls[0]["args"] == [
        "asc",
        str(root / "mapping.ts"),
        "--binaryFile",
        str(binary),
        "--validate",
    ]
    assert runner.calls[0]["cwd"] == root

    assert artifacts.manifest == root / "build" / "subgraph.yaml"
    compiled = yaml.safe_load(artifacts.manifest.read_text(encoding="utf-8"))
    assert compiled["schema"]["file"] == "schema.graphql"
    mapping = compiled["dataSources"][0]["mapping"]
    assert mapping["file"] == "ExampleSubgraph/ExampleSubgraph.wasm"
    assert mapping["abis"][0]["file"] == "ExampleSubgraph/Example.json"
    assert mapping["kind"] == "ethereum/events"
    assert (root / "build" / "schema.graphql").exists()
    assert (root / "build" / "ExampleSubgraph" / "Example.json").exists()


def test_compile_text_format_and_extra_args(subgraph_builder) -> None:
    manifest = subgraph_builder.write_example()
    root = subgraph_builder.path()
    runner = FakeAsc()
    config = _config(
        root,
        output_format="wast",
        toolchain=ToolchainConfig(executable="npx-asc", extra_args=["--optimize"]),
    )

    artifacts = Compiler(config, runner=runner).compile(manifest)

    args = runner.calls[0]["args"]
    assert args[0] == "npx-asc"
    assert args[2] == "--textFile"
    assert args[-1] == "--optimize"
    assert artifacts.binaries[0].suffix == ".wast"


def test_unchanged_bindings_are_not_rewritten(subgraph_builder) -> None:
    manifest = subgraph_builder.write_example()
    root = subgraph_builder.path()
    compiler = Compiler(_config(root), runner=FakeAsc())

    compiler.compile(manifest)
    target = root / GENERATED_DIRNAME / "ExampleSubgraph" / "Example.ts"
    first = target.stat().st_mtime_ns
    compiler.compile(manifest)

    assert target.stat().st_mtime_ns == first


def test_missing_toolchain_is_reported(subgraph_builder) -> None:
    manifest = subgraph_builder.write_example()
    compiler = Compiler(
        _config(subgraph_builder.path()), runner=FakeAsc(error=FileNotFoundError("asc"))
    )

    with pytest.raises(CompileError) as excinfo:
        compiler.compile(manifest)
    assert "Unable to locate 'asc'" in str(excinfo.value)


def test_toolchain_failure_includes_output(subgraph_builder) -> None:
    manifest = subgraph_builder.write_example()
    failure = subprocess.CalledProcessError(1, ["asc"], output="", stderr="ERROR TS2304: Cannot find name")
    compiler = Compiler(_config(subgraph_builder.path()), runner=FakeAsc(error=failure))

    with pytest.raises(CompileError) as excinfo:
        compiler.compile(manifest)
    message = str(excinfo.value)
    assert "ExampleSubgraph" in message
    assert "exit code 1" in message
    assert "TS2304" in message


def test_missing_mapping_fails_before_toolchain(subgraph_builder) -> None:
    manifest = subgraph_builder.write_example()
    subgraph_builder.path("mapping.ts").unlink()
    runner = FakeAsc()

    with pytest.raises(CompileError) as excinfo:
        Compiler(_config(subgraph_builder.path()), runner=runner).compile(manifest)
    assert "mapping.ts" in str(excinfo.value)
    assert runner.calls == []


@pytest.mark.parametrize(
    ("files", "fragment"),
    [
        ({"subgraph.yaml": "schema: {}\n"}, "schema.file"),
        ({"abi/Example.json": "{\"abi\": {}}"}, "must be a JSON array"),
        ({"schema.graphql": "type Broken @entity {"}, "Invalid GraphQL schema"),
    ],
)
def test_input_errors_become_compile_errors(subgraph_builder, files, fragment) -> None:
    manifest = subgraph_builder.write_example()
    subgraph_builder.write(files)

    with pytest.raises(CompileError) as excinfo:
        Compiler(_config(subgraph_builder.path()), runner=FakeAsc()).compile(manifest)
    assert fragment in str(excinfo.value)
