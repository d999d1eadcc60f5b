"""Builds typed AssemblyScript bindings for contracts and entities."""

from __future__ import annotations

from typing import Iterable, List, Sequence

from ..codegen.declarations import (
    Class,
    GeneratedDocument,
    ValueFromCoercion,
    ValueToCoercion,
    getter,
    klass,
    klass_member,
    method,
    module_imports,
    param,
    setter,
    static_method,
)
from ..codegen.render import render
from ..codegen.types import (
    NullableType,
    TypeRef,
    named_type,
    nullable_type,
    referenced_names,
    render_type,
)
from .abi import AbiEvent, AbiFunction, AbiParam, ContractAbi
from .schema import EntityDefinition, EntityField, SchemaSurface

RUNTIME_MODULE = "@graphprotocol/graph-ts"

# Canonical order of runtime symbols in the generated import list.
RUNTIME_SYMBOLS = (
    "EthereumEvent",
    "SmartContract",
    "EthereumValue",
    "Entity",
    "Value",
    "store",
    "Bytes",
    "Address",
    "BigInt",
    "BigDecimal",
)


class _ImportTracker:
    """Records the runtime symbols a document actually references."""

    def __init__(self) -> None:
        self._used: set[str] = set()

    def use(self, *names: str) -> None:
        self._used.update(name for name in names if name in RUNTIME_SYMBOLS)

    def use_type(self, type_ref: TypeRef) -> TypeRef:
        self.use(*referenced_names(type_ref))
        return type_ref

    def names(self) -> List[str]:
        return [name for name in RUNTIME_SYMBOLS if name in self._used]


class BindingEmitter:
    """Turns ABI and schema surfaces into generated documents.

    Emission is pure: the same surfaces always produce equal documents and
    nothing is read from or written to disk here.
    """

    def __init__(self, runtime_module: str = RUNTIME_MODULE) -> None:
        self.runtime_module = runtime_module

    def emit(self, abi: ContractAbi) -> GeneratedDocument:
        """Return event classes and the contract wrapper for ``abi``."""
        tracker = _ImportTracker()
        classes: List[Class] = []
        for event in _unique_by_name(abi.events):
            classes.extend(self._event_classes(event, tracker))
        classes.append(self._contract_class(abi, tracker))
        return self._document(tracker, classes)

    def emit_schema(self, schema: SchemaSurface) -> GeneratedDocument:
        """Return one entity class per ``@entity`` type in ``schema``."""
        tracker = _ImportTracker()
        classes = [self._entity_class(entity, tracker) for entity in schema.entities]
        return self._document(tracker, classes)

    # ------------------------------------------------------------------
    # Contracts

    def _event_classes(self, event: AbiEvent, tracker: _ImportTracker) -> List[Class]:
        params_name = f"{event.name}__Params"
        tracker.use("EthereumEvent")

        event_class = klass(event.name, extends="EthereumEvent", export=True)
        event_class.add_method(
            getter("params", named_type(params_name), f"return new {params_name}(this);")
        )

        params_class = klass(params_name, export=True)
        params_class.add_member(klass_member("_event", named_type(event.name)))
        params_class.add_method(
            method(
                "constructor",
                [param("event", named_type(event.name))],
                body="this._event = event;",
            )
        )
        for index, item in enumerate(event.inputs):
            coercion = ValueToCoercion(
                f"this._event.parameters[{index}].value", tracker.use_type(item.type)
            )
            params_class.add_method(
                getter(_param_name(item, index), item.type, f"return {render(coercion)};")
            )
        return [event_class, params_class]

    def _contract_class(self, abi: ContractAbi, tracker: _ImportTracker) -> Class:
        tracker.use("SmartContract", "Address")
        contract = klass(abi.name, extends="SmartContract", export=True)
        contract.add_method(
            static_method(
                "bind",
                [param("address", named_type("Address"))],
                named_type(abi.name),
                f'return new {abi.name}("{abi.name}", address);',
            )
        )
        for function in _unique_by_name(abi.functions):
            if function.is_view and len(function.outputs) == 1:
                contract.add_method(self._call_method(function, tracker))
        return contract

    def _call_method(self, function: AbiFunction, tracker: _ImportTracker):
        params = [
            param(_param_name(item, index), tracker.use_type(item.type))
            for index, item in enumerate(function.inputs)
        ]
        arguments = ", ".join(
            render(ValueFromCoercion(item.name, item.type, value_class="EthereumValue"))
            for item in params
        )
        if params:
            tracker.use("EthereumValue")
        output = tracker.use_type(function.outputs[0].type)
        result = ValueToCoercion("result[0]", output)
        body = "\n".join(
            [
                f'let result = super.call("{function.name}", [{arguments}]);',
                f"return {render(result)};",
            ]
        )
        return method(function.name, params, output, body)

    # ------------------------------------------------------------------
    # Entities

    def _entity_class(self, entity: EntityDefinition, tracker: _ImportTracker) -> Class:
        tracker.use("Entity", "Value", "store")
        name = entity.name
        entity_class = klass(name, extends="Entity", export=True)
        id_type = named_type("string")
        entity_class.add_method(
            method(
                "constructor",
                [param("id", id_type)],
                body="\n".join(
                    ["super();", f'this.set("id", {render(ValueFromCoercion("id", id_type))});']
                ),
            )
        )
        entity_class.add_method(
            method(
                "save",
                return_type=named_type("void"),
                body=f'store.set("{name}", this.get("id").toString(), this);',
            )
        )
        loaded = nullable_type(named_type(name))
        entity_class.add_method(
            static_method(
                "load",
                [param("id", id_type)],
                loaded,
                f'return store.get("{name}", id) as {render_type(loaded)};',
            )
        )
        for field in entity.fields:
            tracker.use_type(field.type)
            entity_class.add_method(_field_getter(field))
            entity_class.add_method(_field_setter(field))
        return entity_class

    # ------------------------------------------------------------------

    def _document(self, tracker: _ImportTracker, classes: Sequence[Class]) -> GeneratedDocument:
        declarations: list = []
        names = tracker.names()
        if names:
            declarations.append(module_imports(names, self.runtime_module))
        declarations.extend(classes)
        return GeneratedDocument(tuple(declarations))


def _field_getter(field: EntityField):
    bare = _non_null(field.type)
    read = f'let value = this.get("{field.name}");'
    coercion = render(ValueToCoercion("value", bare))
    if field.nullable:
        body = "\n".join(
            [
                read,
                "if (value === null) {",
                "  return null;",
                "} else {",
                f"  return {coercion};",
                "}",
            ]
        )
    else:
        body = "\n".join([read, f"return {coercion};"])
    return getter(field.name, field.type, body)


def _field_setter(field: EntityField):
    bare = _non_null(field.type)
    if field.nullable:
        boxed = render(ValueFromCoercion(f"value as {render_type(bare)}", bare))
        body = "\n".join(
            [
                "if (value === null) {",
                f'  this.unset("{field.name}");',
                "} else {",
                f'  this.set("{field.name}", {boxed});',
                "}",
            ]
        )
    else:
        body = f'this.set("{field.name}", {render(ValueFromCoercion("value", bare))});'
    return setter(field.name, param("value", field.type), body)


def _non_null(type_ref: TypeRef) -> TypeRef:
    return type_ref.inner if isinstance(type_ref, NullableType) else type_ref


def _param_name(item: AbiParam, index: int) -> str:
    return item.name or f"param{index}"


def _unique_by_name(items: Iterable) -> List:
    # Overloads share a name; only the first declaration is bound.
    seen: set[str] = set()
    unique = []
    for item in items:
        if item.name in seen:
            continue
        seen.add(item.name)
        unique.append(item)
    return unique


__all__ = ["BindingEmitter", "RUNTIME_MODULE", "RUNTIME_SYMBOLS"]
