"""Rendering of types, operators, constants and map expressions in Boogie syntax."""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from decimal import Decimal
from typing import Union

from scverify.ir import BinaryOp, TypeName, UnaryOp

_TYPES: dict[TypeName, str] = {
    TypeName.INT: "int",
    TypeName.FLOAT: "real",
    # Boogie has no native string type; the name is emitted as is.
    TypeName.STRING: "string",
    TypeName.BOOL: "bool",
}

_UNARY_OPS: dict[UnaryOp, str] = {
    UnaryOp.NOT: "!",
    UnaryOp.NEG: "-",
}

_BINARY_OPS: dict[BinaryOp, str] = {
    BinaryOp.ADD: "+",
    BinaryOp.SUB: "-",
    BinaryOp.MUL: "*",
    BinaryOp.DIV: "/",
    BinaryOp.LT: "<",
    BinaryOp.LTE: "<=",
    BinaryOp.GT: ">",
    BinaryOp.GTE: ">=",
    BinaryOp.EQ: "==",
    BinaryOp.NEQ: "!=",
    BinaryOp.AND: "&&",
    BinaryOp.OR: "||",
}

TypeLike = Union[TypeName, str]


def type_to_boogie(ty: TypeName) -> str:
    """Boogie type name for a source type."""
    return _TYPES[ty]


def unary_op_to_boogie(op: UnaryOp) -> str:
    return _UNARY_OPS[op]


def binary_op_to_boogie(op: BinaryOp) -> str:
    return _BINARY_OPS[op]


def _float_to_boogie(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    text = format(Decimal(repr(value)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def constant_to_boogie(value: Union[int, float, bool, str]) -> str:
    """Literal text for a constant: plain decimals, lower-case booleans,
    double-quoted strings."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return _float_to_boogie(value)
    if isinstance(value, str):
        return f'"{value}"'
    raise TypeError(f"unsupported constant: {value!r}")


def _type_text(ty: TypeLike) -> str:
    return type_to_boogie(ty) if isinstance(ty, TypeName) else ty


def map_type(key_types: Iterable[TypeLike], value_type: TypeLike) -> str:
    """Nested map type ``[k1][k2]...[kn]v``."""
    keys = "".join(f"[{_type_text(k)}]" for k in key_types)
    return keys + _type_text(value_type)


def nested_map_access(name: str, keys: Iterable[str]) -> str:
    """Read ``name[k1][k2]...[kn]``."""
    return name + "".join(f"[{k}]" for k in keys)


def nested_map_update(name: str, keys: Sequence[str], value: str) -> str:
    """Expression for ``name`` with the entry at ``keys`` replaced by ``value``.

    Inner levels are rebuilt from the current map contents, so every other
    entry is left as it was.
    """
    keys = list(keys)
    if not keys:
        raise ValueError("a map update needs at least one key")
    inner = value
    for depth in range(len(keys) - 1, 0, -1):
        path = nested_map_access(name, keys[:depth])
        inner = f"{path}[{keys[depth]} := {inner}]"
    return f"{name}[{keys[0]} := {inner}]"