"""Deterministic source rendering for declaration trees."""

from __future__ import annotations

from typing import Callable, Dict, Sequence

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
)
from .types import ArrayType, CodeGenError, NamedType, NullableType, TypeRef, render_type

_INDENT = "  "

# Runtime value accessors are named to<Suffix>/from<Suffix>; arrays append "Array".
COERCION_SUFFIXES: Dict[str, str] = {
    "Address": "Address",
    "BigDecimal": "BigDecimal",
    "BigInt": "BigInt",
    "Bytes": "Bytes",
    "boolean": "Boolean",
    "i32": "I32",
    "string": "String",
}


def coercion_suffix(type_ref: TypeRef) -> str:
    """Return the accessor suffix for ``type_ref`` or raise :class:`CodeGenError`."""
    if isinstance(type_ref, NullableType):
        return coercion_suffix(type_ref.inner)
    if isinstance(type_ref, ArrayType):
        inner = type_ref.inner
        if isinstance(inner, NamedType) and inner.name in COERCION_SUFFIXES:
            return f"{COERCION_SUFFIXES[inner.name]}Array"
    elif isinstance(type_ref, NamedType) and type_ref.name in COERCION_SUFFIXES:
        return COERCION_SUFFIXES[type_ref.name]
    raise CodeGenError(f"No value coercion registered for type '{_describe(type_ref)}'")


def value_to_type_function(type_ref: TypeRef) -> str:
    return f"to{coercion_suffix(type_ref)}"


def value_from_type_function(type_ref: TypeRef) -> str:
    return f"from{coercion_suffix(type_ref)}"


def render(declaration: Declaration) -> str:
    """Render a single declaration to source text."""
    renderer = _RENDERERS.get(type(declaration))
    if renderer is None:
        raise CodeGenError(f"Unsupported declaration: {type(declaration).__name__}")
    return renderer(declaration)


def render_document(document: GeneratedDocument) -> str:
    """Render every declaration of ``document`` separated by blank lines."""
    parts = [render(declaration) for declaration in document.declarations]
    return "\n\n".join(parts) + "\n"


def _render_param(node: Param) -> str:
    return f"{node.name}: {render_type(node.type)}"


def _render_params(params: Sequence[Param]) -> str:
    return ", ".join(_render_param(item) for item in params)


def _render_body(body: str) -> list[str]:
    lines = body.strip("\n").splitlines()
    return [f"{_INDENT * 2}{line}" if line.strip() else "" for line in lines]


def _render_callable(prefix: str, node: Method | StaticMethod) -> str:
    signature = f"{_INDENT}{prefix}{node.name}({_render_params(node.params)})"
    if node.return_type is not None:
        signature += f": {render_type(node.return_type)}"
    return "\n".join([signature + " {", *_render_body(node.body), f"{_INDENT}}}"])


def _render_method(node: Method) -> str:
    return _render_callable("", node)


def _render_static_method(node: StaticMethod) -> str:
    return _render_callable("static ", node)


def _render_getter(node: Getter) -> str:
    signature = f"{_INDENT}get {node.name}(): {render_type(node.return_type)} {{"
    return "\n".join([signature, *_render_body(node.body), f"{_INDENT}}}"])


def _render_setter(node: Setter) -> str:
    signature = f"{_INDENT}set {node.name}({_render_param(node.param)}) {{"
    return "\n".join([signature, *_render_body(node.body), f"{_INDENT}}}"])


def _render_member(node: ClassMember) -> str:
    return f"{_INDENT}{node.name}: {render_type(node.type)};"


def _render_class(node: Class) -> str:
    header = f"class {node.name}"
    if node.export:
        header = f"export {header}"
    if node.extends:
        header += f" extends {node.extends}"
    blocks: list[str] = []
    if node.members:
        blocks.append("\n".join(_render_member(member) for member in node.members))
    blocks.extend(render(item) for item in node.methods)
    body = "\n\n".join(blocks)
    if not body:
        return header + " {}"
    return f"{header} {{\n{body}\n}}"


def _render_module_import(node: ModuleImport) -> str:
    return f'import * as {node.alias} from "{node.module}";'


def _render_module_imports(node: ModuleImports) -> str:
    names = node.names if isinstance(node.names, str) else ", ".join(node.names)
    return f'import {{ {names} }} from "{node.module}";'


def _render_value_to(node: ValueToCoercion) -> str:
    return f"{node.expr}.{value_to_type_function(node.type)}()"


def _render_value_from(node: ValueFromCoercion) -> str:
    return f"{node.value_class}.{value_from_type_function(node.type)}({node.expr})"


def _describe(type_ref: TypeRef) -> str:
    try:
        return render_type(type_ref)
    except CodeGenError:
        return repr(type_ref)


_RENDERERS: Dict[type, Callable] = {
    Param: _render_param,
    Method: _render_method,
    StaticMethod: _render_static_method,
    Getter: _render_getter,
    Setter: _render_setter,
    ClassMember: _render_member,
    Class: _render_class,
    ModuleImport: _render_module_import,
    ModuleImports: _render_module_imports,
    ValueToCoercion: _render_value_to,
    ValueFromCoercion: _render_value_from,
}


__all__ = [
    "COERCION_SUFFIXES",
    "coercion_suffix",
    "render",
    "render_document",
    "value_from_type_function",
    "value_to_type_function",
]
