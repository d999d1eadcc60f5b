"""Entity schema surface read from a GraphQL schema file."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Set, Tuple

from graphql import (
    EnumTypeDefinitionNode,
    GraphQLError,
    ListTypeNode,
    NamedTypeNode,
    NonNullTypeNode,
    ObjectTypeDefinitionNode,
    TypeNode,
    parse,
)

from ..codegen.types import CodeGenError, TypeRef, array_type, named_type, nullable_type

ENTITY_DIRECTIVE = "entity"

_SCALAR_TYPES: Dict[str, str] = {
    "ID": "string",
    "String": "string",
    "Int": "i32",
    "Boolean": "boolean",
    "BigInt": "BigInt",
    "BigDecimal": "BigDecimal",
    "Bytes": "Bytes",
}


class SchemaError(RuntimeError):
    """Raised when the GraphQL schema cannot be read."""


@dataclass(frozen=True)
class EntityField:
    name: str
    type: TypeRef
    nullable: bool


@dataclass(frozen=True)
class EntityDefinition:
    name: str
    fields: Tuple[EntityField, ...]


@dataclass(frozen=True)
class SchemaSurface:
    entities: Tuple[EntityDefinition, ...] = ()


def parse_schema(text: str) -> SchemaSurface:
    """Collect ``@entity`` object types from GraphQL SDL text."""
    try:
        document = parse(text)
    except GraphQLError as exc:
        raise SchemaError(f"Invalid GraphQL schema: {exc.message}") from exc

    object_names: Set[str] = set()
    enum_names: Set[str] = set()
    for definition in document.definitions:
        if isinstance(definition, ObjectTypeDefinitionNode):
            object_names.add(definition.name.value)
        elif isinstance(definition, EnumTypeDefinitionNode):
            enum_names.add(definition.name.value)

    # References to other types and enum values are stored as string ids.
    references = object_names | enum_names
    entities: List[EntityDefinition] = []
    for definition in document.definitions:
        if not isinstance(definition, ObjectTypeDefinitionNode):
            continue
        directives = {directive.name.value for directive in definition.directives or ()}
        if ENTITY_DIRECTIVE not in directives:
            continue
        fields = tuple(
            EntityField(
                name=field.name.value,
                type=_translate(field.type, references),
                nullable=not isinstance(field.type, NonNullTypeNode),
            )
            for field in definition.fields or ()
        )
        entities.append(EntityDefinition(name=definition.name.value, fields=fields))
    return SchemaSurface(entities=tuple(entities))


def load_schema(path: Path) -> SchemaSurface:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SchemaError(f"Failed to read schema {path}: {exc}") from exc
    return parse_schema(text)


def _translate(node: TypeNode, references: Set[str]) -> TypeRef:
    if isinstance(node, NonNullTypeNode):
        return _bare_type(node.type, references)
    return nullable_type(_bare_type(node, references))


def _bare_type(node: TypeNode, references: Set[str]) -> TypeRef:
    # Element nullability inside lists has no runtime representation.
    if isinstance(node, NonNullTypeNode):
        return _bare_type(node.type, references)
    if isinstance(node, ListTypeNode):
        return array_type(_bare_type(node.type, references))
    if isinstance(node, NamedTypeNode):
        return named_type(_scalar(node.name.value, references))
    raise CodeGenError(f"Unsupported GraphQL type node: {node!r}")  # pragma: no cover


def _scalar(name: str, references: Set[str]) -> str:
    if name in _SCALAR_TYPES:
        return _SCALAR_TYPES[name]
    if name in references:
        return "string"
    raise CodeGenError(f"Unsupported GraphQL type '{name}'")


__all__ = [
    "EntityDefinition",
    "EntityField",
    "SchemaError",
    "SchemaSurface",
    "load_schema",
    "parse_schema",
]
