"""Contract ABI surface: events and functions with AssemblyScript types."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, List, Optional, Tuple

from ..codegen.types import CodeGenError, TypeRef, array_type, named_type

_ARRAY_SUFFIX = re.compile(r"^(?P<inner>.+)\[(?P<size>\d*)\]$")
_SIZED_INT = re.compile(r"^(?P<sign>u?)int(?P<bits>\d*)$")


class AbiError(RuntimeError):
    """Raised when an ABI file cannot be read or has an unexpected shape."""


@dataclass(frozen=True)
class AbiParam:
    """ABI parameter. ``type`` is translated when read, so unbound entries may use any Solidity type."""

    name: str
    solidity_type: str
    indexed: bool = False

    @property
    def type(self) -> TypeRef:
        return solidity_to_type(self.solidity_type)


@dataclass(frozen=True)
class AbiEvent:
    name: str
    inputs: Tuple[AbiParam, ...]


@dataclass(frozen=True)
class AbiFunction:
    name: str
    inputs: Tuple[AbiParam, ...]
    outputs: Tuple[AbiParam, ...]
    state_mutability: str = "nonpayable"

    @property
    def is_view(self) -> bool:
        return self.state_mutability in {"view", "pure"}


@dataclass(frozen=True)
class ContractAbi:
    """Typed view over a contract's JSON ABI."""

    name: str
    events: Tuple[AbiEvent, ...] = ()
    functions: Tuple[AbiFunction, ...] = ()


def solidity_to_type(solidity_type: str) -> TypeRef:
    """Translate a Solidity ABI type name into a generated-code type."""
    value = solidity_type.strip()
    match = _ARRAY_SUFFIX.match(value)
    if match:
        return array_type(solidity_to_type(match.group("inner")))
    if value == "address":
        return named_type("Address")
    if value == "bool":
        return named_type("boolean")
    if value == "string":
        return named_type("string")
    if value.startswith("bytes"):
        return named_type("Bytes")
    int_match = _SIZED_INT.match(value)
    if int_match:
        bits = int(int_match.group("bits") or 256)
        unsigned = bool(int_match.group("sign"))
        # Unsigned values of 32 bits or more do not fit into an i32.
        limit = 24 if unsigned else 32
        if bits <= limit:
            return named_type("i32")
        return named_type("BigInt")
    raise CodeGenError(f"Unsupported ABI type '{solidity_type}'")


def parse_abi(name: str, entries: Iterable[Any]) -> ContractAbi:
    """Build a :class:`ContractAbi` from decoded JSON ABI entries."""
    events: List[AbiEvent] = []
    functions: List[AbiFunction] = []
    for entry in entries:
        if not isinstance(entry, dict):
            raise AbiError(f"ABI '{name}' contains a non-object entry")
        kind = entry.get("type", "function")
        if kind == "event":
            events.append(
                AbiEvent(
                    name=_require_name(name, entry),
                    inputs=_parse_params(name, entry.get("inputs")),
                )
            )
        elif kind == "function":
            functions.append(
                AbiFunction(
                    name=_require_name(name, entry),
                    inputs=_parse_params(name, entry.get("inputs")),
                    outputs=_parse_params(name, entry.get("outputs")),
                    state_mutability=_mutability(entry),
                )
            )
    return ContractAbi(name=name, events=tuple(events), functions=tuple(functions))


def load_abi(name: str, path: Path) -> ContractAbi:
    """Read a JSON ABI (plain list or an artifact with an ``abi`` key) from disk."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise AbiError(f"ABI file for '{name}' not found: {path}") from exc
    except (OSError, json.JSONDecodeError) as exc:
        raise AbiError(f"Failed to read ABI '{name}' from {path}: {exc}") from exc
    if isinstance(data, dict):
        data = data.get("abi")
    if not isinstance(data, list):
        raise AbiError(f"ABI '{name}' in {path} must be a JSON array")
    return parse_abi(name, data)


def _require_name(abi_name: str, entry: dict) -> str:
    value = entry.get("name")
    if not isinstance(value, str) or not value:
        raise AbiError(f"ABI '{abi_name}' has an entry without a name")
    return value


def _parse_params(abi_name: str, raw: Optional[Any]) -> Tuple[AbiParam, ...]:
    if raw is None:
        return ()
    if not isinstance(raw, list):
        raise AbiError(f"ABI '{abi_name}' has malformed parameters")
    params: List[AbiParam] = []
    for item in raw:
        if not isinstance(item, dict) or not isinstance(item.get("type"), str):
            raise AbiError(f"ABI '{abi_name}' has a parameter without a type")
        solidity_type = item["type"]
        params.append(
            AbiParam(
                name=item.get("name") or "",
                solidity_type=solidity_type,
                indexed=bool(item.get("indexed", False)),
            )
        )
    return tuple(params)


def _mutability(entry: dict) -> str:
    value = entry.get("stateMutability")
    if isinstance(value, str):
        return value
    # Pre-0.4.16 ABIs only carry the "constant" flag.
    return "view" if entry.get("constant") else "nonpayable"


__all__ = [
    "AbiError",
    "AbiEvent",
    "AbiFunction",
    "AbiParam",
    "ContractAbi",
    "load_abi",
    "parse_abi",
    "solidity_to_type",
]
