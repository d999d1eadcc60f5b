"""Declaration tree consumed by :mod:`graphbuild.codegen.render`."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple, Union

from .types import TypeRef


@dataclass(frozen=True)
class Param:
    name: str
    type: TypeRef


@dataclass(frozen=True)
class Method:
    """Instance method. ``return_type`` of ``None`` omits the annotation."""

    name: str
    params: Tuple[Param, ...] = ()
    return_type: Optional[TypeRef] = None
    body: str = ""


@dataclass(frozen=True)
class StaticMethod:
    name: str
    params: Tuple[Param, ...] = ()
    return_type: Optional[TypeRef] = None
    body: str = ""


@dataclass(frozen=True)
class Getter:
    name: str
    return_type: TypeRef
    body: str = ""


@dataclass(frozen=True)
class Setter:
    name: str
    param: Param
    body: str = ""


@dataclass(frozen=True)
class ClassMember:
    name: str
    type: TypeRef


ClassMethod = Union[Method, StaticMethod, Getter, Setter]


@dataclass
class Class:
    """Class declaration; members and methods keep their insertion order."""

    name: str
    extends: Optional[str] = None
    export: bool = False
    members: List[ClassMember] = field(default_factory=list)
    methods: List[ClassMethod] = field(default_factory=list)

    def add_member(self, member: ClassMember) -> "Class":
        self.members.append(member)
        return self

    def add_method(self, method: ClassMethod) -> "Class":
        self.methods.append(method)
        return self


@dataclass(frozen=True)
class ModuleImport:
    alias: str
    module: str


@dataclass(frozen=True)
class ModuleImports:
    names: Union[str, Tuple[str, ...]]
    module: str


@dataclass(frozen=True)
class ValueToCoercion:
    """Unboxes ``expr`` into a value of ``type``."""

    expr: str
    type: TypeRef


@dataclass(frozen=True)
class ValueFromCoercion:
    """Boxes ``expr`` (a value of ``type``) into ``value_class``."""

    expr: str
    type: TypeRef
    value_class: str = "Value"


Declaration = Union[
    Param,
    Method,
    StaticMethod,
    Getter,
    Setter,
    ClassMember,
    Class,
    ModuleImport,
    ModuleImports,
    ValueToCoercion,
    ValueFromCoercion,
]


@dataclass(frozen=True)
class GeneratedDocument:
    declarations: Tuple[Declaration, ...] = ()


def param(name: str, type_ref: TypeRef) -> Param:
    return Param(name, type_ref)


def method(
    name: str,
    params: Sequence[Param] = (),
    return_type: Optional[TypeRef] = None,
    body: str = "",
) -> Method:
    return Method(name, tuple(params), return_type, body)


def static_method(
    name: str,
    params: Sequence[Param] = (),
    return_type: Optional[TypeRef] = None,
    body: str = "",
) -> StaticMethod:
    return StaticMethod(name, tuple(params), return_type, body)


def getter(name: str, return_type: TypeRef, body: str = "") -> Getter:
    return Getter(name, return_type, body)


def setter(name: str, value: Param, body: str = "") -> Setter:
    return Setter(name, value, body)


def klass(name: str, *, extends: Optional[str] = None, export: bool = False) -> Class:
    return Class(name, extends=extends, export=export)


def klass_member(name: str, type_ref: TypeRef) -> ClassMember:
    return ClassMember(name, type_ref)


def module_import(alias: str, module: str) -> ModuleImport:
    return ModuleImport(alias, module)


def module_imports(names: Union[str, Sequence[str]], module: str) -> ModuleImports:
    if isinstance(names, str):
        return ModuleImports(names, module)
    return ModuleImports(tuple(names), module)


__all__ = [
    "Class",
    "ClassMember",
    "ClassMethod",
    "Declaration",
    "GeneratedDocument",
    "Getter",
    "Method",
    "ModuleImport",
    "ModuleImports",
    "Param",
    "Setter",
    "StaticMethod",
    "ValueFromCoercion",
    "ValueToCoercion",
    "getter",
    "klass",
    "klass_member",
    "method",
    "module_import",
    "module_imports",
    "param",
    "setter",
    "static_method",
]
