"""Contract and entity binding generation."""

from .abi import AbiError, AbiEvent, AbiFunction, AbiParam, ContractAbi, load_abi, parse_abi
from .emitter import BindingEmitter
from .schema import EntityDefinition, EntityField, SchemaError, SchemaSurface, load_schema, parse_schema

__all__ = [
    "AbiError",
    "AbiEvent",
    "AbiFunction",
    "AbiParam",
    "BindingEmitter",
    "ContractAbi",
    "EntityDefinition",
    "EntityField",
    "SchemaError",
    "SchemaSurface",
    "load_abi",
    "load_schema",
    "parse_abi",
    "parse_schema",
]
