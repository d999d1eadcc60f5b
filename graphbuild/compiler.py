"""Compile pipeline: bindings generation plus the AssemblyScript toolchain."""

from __future__ import annotations

import copy
import shutil
import subprocess
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional

import yaml

from .bindings import AbiError, BindingEmitter, SchemaError, load_abi, load_schema
from .codegen import CodeGenError, render_document
from .config import BuildConfig
from .logging import get_logger
from .manifest import ManifestError, parse_manifest, read_manifest_data
from .models import Artifacts, DataSource, ManifestDocument
from .progress import step, with_step

GENERATED_DIRNAME = "generated"
OUTPUT_MANIFEST = "subgraph.yaml"
OUTPUT_SCHEMA = "schema.graphql"

_FORMAT_FLAGS = {"wasm": "--binaryFile", "wast": "--textFile"}


class CompileError(RuntimeError):
    """Raised when a subgraph cannot be compiled."""


class Compiler:
    """Builds a subgraph manifest into bindings, binaries and an output manifest."""

    def __init__(
        self,
        config: BuildConfig,
        *,
        runner: Callable[..., str] | None = None,
        emitter: BindingEmitter | None = None,
    ) -> None:
        self.config = config
        self.emitter = emitter or BindingEmitter()
        self.logger = get_logger("compiler")
        self._runner = runner or self._default_runner

    def compile(self, manifest_path: Path) -> Artifacts:
        """Run one full build; every failure surfaces as :class:`CompileError`."""
        manifest_path = Path(manifest_path).expanduser().resolve()
        try:
            return self._compile(manifest_path)
        except CompileError:
            raise
        except (ManifestError, AbiError, SchemaError, CodeGenError) as exc:
            raise CompileError(str(exc)) from exc
        except OSError as exc:
            raise CompileError(f"Failed to write build output: {exc}") from exc

    def _compile(self, manifest_path: Path) -> Artifacts:
        base_dir = manifest_path.parent
        output_dir = self.config.resolved_output_dir()
        artifacts = Artifacts(output_dir=output_dir)

        with with_step(self.logger, "Load subgraph manifest", "Failed to load subgraph manifest"):
            raw = read_manifest_data(manifest_path)
            document = parse_manifest(raw)

        with with_step(self.logger, "Generate bindings", "Failed to generate bindings"):
            artifacts.bindings.extend(self._generate_bindings(document, base_dir))

        output_dir.mkdir(parents=True, exist_ok=True)
        with with_step(self.logger, "Compile subgraph", "Failed to compile subgraph"):
            for source in document.data_sources:
                artifacts.binaries.append(self._compile_mapping(source, base_dir, output_dir))

        with with_step(self.logger, "Write subgraph manifest", "Failed to write subgraph manifest"):
            artifacts.manifest = self._write_manifest(raw, document, base_dir, output_dir)

        self.logger.info("Build completed: %s", artifacts.manifest)
        return artifacts

    # ------------------------------------------------------------------
    # Bindings

    def _generate_bindings(self, document: ManifestDocument, base_dir: Path) -> List[Path]:
        generated_dir = base_dir / GENERATED_DIRNAME
        written: List[Path] = []

        schema = load_schema(base_dir / document.schema_file)
        if schema.entities:
            target = generated_dir / "schema.ts"
            self._write_if_changed(target, render_document(self.emitter.emit_schema(schema)))
            written.append(target)

        for source in document.data_sources:
            for abi_ref in source.abis:
                abi = load_abi(abi_ref.name, base_dir / abi_ref.file)
                target = generated_dir / source.name / f"{abi.name}.ts"
                self._write_if_changed(target, render_document(self.emitter.emit(abi)))
                step(self.logger, "Write types for contract:", abi.name)
                written.append(target)
        return written

    def _write_if_changed(self, target: Path, content: str) -> None:
        if target.exists() and target.read_text(encoding="utf-8") == content:
            return
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")

    # ------------------------------------------------------------------
    # Toolchain

    def _compile_mapping(self, source: DataSource, base_dir: Path, output_dir: Path) -> Path:
        mapping = base_dir / source.mapping_file
        if not mapping.exists():
            raise CompileError(f"Mapping file for data source '{source.name}' not found: {mapping}")

        fmt = self.config.output_format
        target = output_dir / source.name / f"{source.name}.{fmt}"
        target.parent.mkdir(parents=True, exist_ok=True)
        toolchain = self.config.toolchain
        args = [
            toolchain.executable,
            str(mapping),
            _FORMAT_FLAGS[fmt],
            str(target),
            "--validate",
            *toolchain.extra_args,
        ]
        self.logger.debug("Running %s", " ".join(args))
        try:
            self._runner(args, cwd=base_dir)
        except FileNotFoundError as exc:
            raise CompileError(
                f"Unable to locate '{toolchain.executable}'. Install the AssemblyScript compiler "
                "or configure toolchain.executable."
            ) from exc
        except subprocess.CalledProcessError as exc:
            detail = (exc.stderr or exc.stdout or "").strip()
            raise CompileError(
                f"Failed to compile data source '{source.name}' (exit code {exc.returncode}): {detail}"
            ) from exc
        step(self.logger, "Compile data source:", f"{source.name} => {target}")
        return target

    # ------------------------------------------------------------------
    # Output manifest

    def _write_manifest(
        self,
        raw: Dict[str, Any],
        document: ManifestDocument,
        base_dir: Path,
        output_dir: Path,
    ) -> Path:
        compiled = copy.deepcopy(raw)
        fmt = self.config.output_format

        shutil.copyfile(base_dir / document.schema_file, output_dir / OUTPUT_SCHEMA)
        compiled["schema"]["file"] = OUTPUT_SCHEMA

        for raw_source, source in zip(compiled["dataSources"], document.data_sources):
            mapping = raw_source["mapping"]
            mapping["file"] = f"{source.name}/{source.name}.{fmt}"
            for raw_abi, abi in zip(mapping["abis"], source.abis):
                abi_name = Path(abi.file).name
                shutil.copyfile(base_dir / abi.file, output_dir / source.name / abi_name)
                raw_abi["file"] = f"{source.name}/{abi_name}"

        target = output_dir / OUTPUT_MANIFEST
        target.write_text(yaml.safe_dump(compiled, sort_keys=False), encoding="utf-8")
        return target

    @staticmethod
    def _default_runner(
        args: Iterable[str],
        *,
        cwd: Path,
        env: Optional[dict[str, str]] = None,
    ) -> str:
        completed = subprocess.run(
            list(args),
            cwd=str(cwd),
            env=env,
            check=True,
            text=True,
            capture_output=True,
        )
        return completed.stdout


__all__ = ["CompileError", "Compiler", "GENERATED_DIRNAME", "OUTPUT_MANIFEST"]
