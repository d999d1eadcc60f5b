"""Typed source generation: type expressions, declarations and rendering."""

from .declarations import (
    Class,
    ClassMember,
    Declaration,
    GeneratedDocument,
    Getter,
    Method,
    ModuleImport,
    ModuleImports,
    Param,
    Setter,
    StaticMethod,
    ValueFromCoercion,
    ValueToCoercion,
    getter,
    klass,
    klass_member,
    method,
    module_import,
    module_imports,
    param,
    setter,
    static_method,
)
from .render import render, render_document
from .types import (
    ArrayType,
    CodeGenError,
    MaybeType,
    NamedType,
    NullableType,
    TypeRef,
    UnionType,
    array_type,
    capitalize,
    is_primitive,
    maybe_type,
    named_type,
    nullable_type,
    render_type,
    union_type,
)

__all__ = [
    "ArrayType",
    "Class",
    "ClassMember",
    "CodeGenError",
    "Declaration",
    "GeneratedDocument",
    "Getter",
    "MaybeType",
    "Method",
    "ModuleImport",
    "ModuleImports",
    "NamedType",
    "NullableType",
    "Param",
    "Setter",
    "StaticMethod",
    "TypeRef",
    "UnionType",
    "ValueFromCoercion",
    "ValueToCoercion",
    "array_type",
    "capitalize",
    "getter",
    "is_primitive",
    "klass",
    "klass_member",
    "maybe_type",
    "method",
    "module_import",
    "module_imports",
    "named_type",
    "nullable_type",
    "param",
    "render",
    "render_document",
    "render_type",
    "setter",
    "static_method",
    "union_type",
]
