"""Type expressions used by the code generator."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple, Union

ARRAY_CONTAINER = "Array"
MAYBE_SIGIL = "?"

PRIMITIVE_TYPES = frozenset(
    {
        "boolean",
        "u8",
        "i8",
        "u16",
        "i16",
        "u32",
        "i32",
        "u64",
        "i64",
        "f32",
        "f64",
        "usize",
        "isize",
    }
)


class CodeGenError(RuntimeError):
    """Raised when a declaration cannot be expressed in generated source."""


@dataclass(frozen=True)
class NamedType:
    name: str


@dataclass(frozen=True)
class ArrayType:
    inner: "TypeRef"


@dataclass(frozen=True)
class NullableType:
    inner: "TypeRef"


@dataclass(frozen=True)
class UnionType:
    variants: Tuple["TypeRef", ...]


@dataclass(frozen=True)
class MaybeType:
    """Legacy optional notation, rendered as ``?Name``."""

    inner: "TypeRef"


TypeRef = Union[NamedType, ArrayType, NullableType, UnionType, MaybeType]


def named_type(name: str) -> NamedType:
    return NamedType(name)


def array_type(inner: TypeRef) -> ArrayType:
    return ArrayType(inner)


def nullable_type(inner: TypeRef) -> NullableType:
    return NullableType(inner)


def union_type(*variants: TypeRef) -> UnionType:
    return UnionType(tuple(variants))


def maybe_type(inner: TypeRef) -> MaybeType:
    return MaybeType(inner)


def render_type(type_ref: TypeRef) -> str:
    """Render a type expression to source text."""
    if isinstance(type_ref, NamedType):
        return type_ref.name
    if isinstance(type_ref, ArrayType):
        return f"{ARRAY_CONTAINER}<{render_type(type_ref.inner)}>"
    if isinstance(type_ref, NullableType):
        return f"{render_type(type_ref.inner)} | null"
    if isinstance(type_ref, UnionType):
        return " | ".join(render_type(variant) for variant in type_ref.variants)
    if isinstance(type_ref, MaybeType):
        inner = type_ref.inner
        bare = inner.name if isinstance(inner, NamedType) else render_type(inner)
        return f"{MAYBE_SIGIL}{bare}"
    raise CodeGenError(f"Unsupported type expression: {type_ref!r}")


def is_primitive(type_ref: TypeRef) -> bool:
    """Return True when values of this type can be used without coercion."""
    return isinstance(type_ref, NamedType) and type_ref.name in PRIMITIVE_TYPES


def capitalize(type_ref: NamedType) -> NamedType:
    """Return a copy of ``type_ref`` with an upper-cased first letter."""
    name = type_ref.name
    return NamedType(name[:1].upper() + name[1:])


def referenced_names(type_ref: TypeRef) -> Tuple[str, ...]:
    """Return every named type mentioned by ``type_ref`` in encounter order."""
    if isinstance(type_ref, NamedType):
        return (type_ref.name,)
    if isinstance(type_ref, (ArrayType, NullableType, MaybeType)):
        return referenced_names(type_ref.inner)
    if isinstance(type_ref, UnionType):
        names: list[str] = []
        for variant in type_ref.variants:
            names.extend(referenced_names(variant))
        return tuple(names)
    raise CodeGenError(f"Unsupported type expression: {type_ref!r}")


__all__ = [
    "ARRAY_CONTAINER",
    "ArrayType",
    "CodeGenError",
    "MaybeType",
    "NamedType",
    "NullableType",
    "PRIMITIVE_TYPES",
    "TypeRef",
    "UnionType",
    "array_type",
    "capitalize",
    "is_primitive",
    "maybe_type",
    "named_type",
    "nullable_type",
    "referenced_names",
    "render_type",
    "union_type",
]
