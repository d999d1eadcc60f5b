"""FastAPI application entrypoint for graphbuild service mode."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Callable, List, Optional

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..compiler import CompileError, Compiler
from ..config import BuildConfig, ConfigError, load_config
from ..models import Artifacts


class BuildRequest(BaseModel):
    manifest: str
    output_dir: Optional[str] = None
    output_format: Optional[str] = None


class BuildResponse(BaseModel):
    status: str
    manifest: Optional[str] = None
    bindings: List[str] = []
    binaries: List[str] = []


class HealthResponse(BaseModel):
    status: str


CompilerFactory = Callable[[BuildConfig], Compiler]


def _default_compiler(config: BuildConfig) -> Compiler:
    return Compiler(config)


def create_app(compiler_factory: CompilerFactory = _default_compiler) -> FastAPI:
    """Create the FastAPI application exposing graphbuild operations."""

    app = FastAPI(title="graphbuild service", version="0.1.0")

    async def get_compiler_factory() -> CompilerFactory:
        return compiler_factory

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/build", response_model=BuildResponse)
    async def build(
        payload: BuildRequest,
        factory: CompilerFactory = Depends(get_compiler_factory),
    ) -> BuildResponse:
        manifest_path = Path(payload.manifest).expanduser().resolve()
        if not manifest_path.exists():
            raise FileNotFoundError(f"Manifest not found: {manifest_path}")
        config = load_config(manifest_path).with_overrides(
            output_dir=payload.output_dir,
            output_format=payload.output_format,
        )
        # A fresh compiler per request keeps builds independent of each other.
        compiler = factory(config)

        def _run_build() -> Artifacts:
            return compiler.compile(manifest_path)

        loop = asyncio.get_running_loop()
        artifacts = await loop.run_in_executor(None, _run_build)
        return BuildResponse(
            status="ok",
            manifest=str(artifacts.manifest) if artifacts.manifest else None,
            bindings=[str(path) for path in artifacts.bindings],
            binaries=[str(path) for path in artifacts.binaries],
        )

    @app.exception_handler(FileNotFoundError)
    async def file_not_found_handler(
        _: Any, exc: FileNotFoundError
    ) -> JSONResponse:  # pragma: no cover - simple mapping
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(CompileError)
    async def compile_error_handler(_: Any, exc: CompileError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(ConfigError)
    async def config_error_handler(_: Any, exc: ConfigError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(host: str = "127.0.0.1", port: int = 8000) -> None:  # pragma: no cover - integration path
    import uvicorn

    uvicorn.run(create_app(), host=host, port=port)


__all__ = ["BuildRequest", "BuildResponse", "create_app", "run_service"]
