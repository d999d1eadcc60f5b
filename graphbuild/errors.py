"""Error types raised by graphbuild, gathered in one place for callers."""

from .bindings.abi import AbiError
from .bindings.schema import SchemaError
from .codegen.types import CodeGenError
from .compiler import CompileError
from .config import ConfigError
from .manifest import ManifestError
from .upload import UploadError
from .watcher import FileSystemError

__all__ = [
    "AbiError",
    "CodeGenError",
    "CompileError",
    "ConfigError",
    "FileSystemError",
    "ManifestError",
    "SchemaError",
    "UploadError",
]
