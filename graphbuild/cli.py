"""CLI entrypoint for graphbuild."""

from __future__ import annotations

import argparse
import sys
import threading
from pathlib import Path

from .compiler import CompileError, Compiler
from .config import OUTPUT_FORMATS, BuildConfig, ConfigError, load_config
from .logging import VERBOSITY_LEVELS, configure_logging, get_logger
from .manifest import ManifestError
from .upload import IpfsClient, UploadError, publish_artifacts
from .watch import WatchSession


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="graphbuild",
        description="Compile a subgraph manifest into typed bindings and mapping binaries.",
        epilog="IPFS: pass a node address with -i/--ipfs to upload the build output.",
    )
    parser.add_argument(
        "manifest",
        help="Path to the subgraph manifest (e.g. subgraph.yaml).",
    )
    parser.add_argument(
        "-o",
        "--output-dir",
        default=None,
        help="Output directory for build artifacts (defaults to ./dist next to the manifest).",
    )
    parser.add_argument(
        "-t",
        "--output-format",
        choices=OUTPUT_FORMATS,
        default=None,
        help="Output format for compiled mappings (default: wasm).",
    )
    parser.add_argument(
        "-i",
        "--ipfs",
        default=None,
        help="IPFS node to use for uploading files.",
    )
    parser.add_argument(
        "-w",
        "--watch",
        action="store_true",
        help="Rebuild when the manifest or any file it references changes.",
    )
    parser.add_argument(
        "--verbosity",
        choices=tuple(VERBOSITY_LEVELS),
        default=None,
        help="The log level to use (default: LOG_LEVEL or info).",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for graphbuild."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    manifest_path = Path(args.manifest).expanduser().resolve()

    try:
        config = load_config(manifest_path).with_overrides(
            output_dir=args.output_dir,
            output_format=args.output_format,
            ipfs=args.ipfs,
            verbosity=args.verbosity,
        )
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    try:
        configure_logging(verbosity=config.resolved_verbosity())
    except ValueError as exc:
        parser.exit(1, f"{exc}\n")
    logger = get_logger("cli")
    compiler = Compiler(config)

    if args.watch:
        session = WatchSession(manifest_path, lambda: _build(compiler, manifest_path, config))
        stop_event = threading.Event()
        try:
            session.run(stop_event)
        except ManifestError as exc:
            parser.exit(1, f"{exc}\n")
        except KeyboardInterrupt:
            stop_event.set()
            logger.info("Stopped watching")
        return

    try:
        _build(compiler, manifest_path, config)
    except (CompileError, UploadError) as exc:
        parser.exit(1, f"graphbuild failed: {exc}\nRun with --verbosity debug for more details.\n")


def _build(compiler: Compiler, manifest_path: Path, config: BuildConfig) -> None:
    artifacts = compiler.compile(manifest_path)
    if artifacts.manifest is not None:
        print(f"Build completed: {_relativize(artifacts.manifest)}")
    if config.ipfs:
        content_id = publish_artifacts(artifacts, IpfsClient(config.ipfs))
        print(f"Subgraph: {content_id}")


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
