"""Control-flow program model consumed by the SC-graph and the verifier.

Identifiers are plain integers. Hop identifiers are unique across the whole
program, so a hop id alone tells which function it belongs to.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Optional, Union


class TypeName(Enum):
    """Primitive value types of the source language."""

    INT = auto()
    FLOAT = auto()
    BOOL = auto()
    STRING = auto()


class UnaryOp(Enum):
    NOT = auto()
    NEG = auto()


class BinaryOp(Enum):
    ADD = auto()
    SUB = auto()
    MUL = auto()
    DIV = auto()
    LT = auto()
    LTE = auto()
    GT = auto()
    GTE = auto()
    EQ = auto()
    NEQ = auto()
    AND = auto()
    OR = auto()


@dataclass(frozen=True)
class Var:
    """Reference to a variable of the enclosing function."""

    var_id: int


@dataclass(frozen=True)
class Const:
    """Literal constant: int, float, bool or str."""

    value: Union[int, float, bool, str]


Operand = Union[Var, Const]


@dataclass(frozen=True)
class Use:
    operand: Operand


@dataclass(frozen=True)
class TableAccess:
    """Read of one field of a table row selected by its primary key values."""

    table: int
    pk_fields: tuple[int, ...]
    pk_values: tuple[Operand, ...]
    field: int


@dataclass(frozen=True)
class UnaryExpr:
    op: UnaryOp
    operand: Operand


@dataclass(frozen=True)
class BinaryExpr:
    op: BinaryOp
    left: Operand
    right: Operand


Rvalue = Union[Use, TableAccess, UnaryExpr, BinaryExpr]


@dataclass(frozen=True)
class Assign:
    var: int
    rvalue: Rvalue


@dataclass(frozen=True)
class TableAssign:
    """Write of one field of a table row selected by its primary key values."""

    table: int
    pk_fields: tuple[int, ...]
    pk_values: tuple[Operand, ...]
    field: int
    value: Operand


Statement = Union[Assign, TableAssign]


@dataclass(frozen=True)
class Goto:
    target: int


@dataclass(frozen=True)
class Branch:
    condition: Operand
    then_block: int
    else_block: int


@dataclass(frozen=True)
class Return:
    value: Optional[Operand] = None


@dataclass(frozen=True)
class Abort:
    pass


@dataclass(frozen=True)
class HopExit:
    next_hop: Optional[int] = None


Terminator = Union[Goto, Branch, Return, Abort, HopExit]


@dataclass
class Field:
    name: str
    ty: TypeName
    is_primary: bool = False


@dataclass
class Table:
    """A table: its field ids in declaration order and its primary key field ids."""

    name: str
    fields: list[int] = field(default_factory=list)
    primary_keys: list[int] = field(default_factory=list)


@dataclass
class Variable:
    name: str
    ty: TypeName
    is_parameter: bool = False


@dataclass
class BasicBlock:
    statements: list[Statement] = field(default_factory=list)
    terminator: Terminator = field(default_factory=Abort)


@dataclass
class Hop:
    """A run of basic blocks executed on one node."""

    node_id: int
    blocks: list[int] = field(default_factory=list)
    entry_block: Optional[int] = None


@dataclass
class Function:
    name: str
    parameters: list[int] = field(default_factory=list)
    variables: dict[int, Variable] = field(default_factory=dict)
    blocks: dict[int, BasicBlock] = field(default_factory=dict)
    hops: dict[int, Hop] = field(default_factory=dict)
    hop_order: list[int] = field(default_factory=list)

    def function_for(self, hop_id: int) -> Optional["Function"]:
        """Return this function if it owns ``hop_id``, otherwise None."""
        return self if hop_id in self.hops else None


@dataclass
class CfgNode:
    name: str


@dataclass
class CfgProgram:
    functions: dict[int, Function] = field(default_factory=dict)
    tables: dict[int, Table] = field(default_factory=dict)
    fields: dict[int, Field] = field(default_factory=dict)
    nodes: dict[int, CfgNode] = field(default_factory=dict)

    def function_of_hop(self, hop_id: int) -> int:
        """Return the id of the function that owns ``hop_id``."""
        for function_id, function in self.functions.items():
            if function.function_for(hop_id) is not None:
                return function_id
        raise KeyError(f"hop {hop_id} belongs to no function")