import dataclasses

import pytest

from scverify.ir import (
    Abort,
    Assign,
    BasicBlock,
    BinaryExpr,
    BinaryOp,
    CfgProgram,
    Const,
    Function,
    Hop,
    Return,
    TableAccess,
    Var,
)


def _program():
    f = Function(name="f", hops={10: Hop(node_id=0), 11: Hop(node_id=1)}, hop_order=[10, 11])
    g = Function(name="g", hops={20: Hop(node_id=0)}, hop_order=[20])
    return CfgProgram(functions={1: f, 2: g})


def test_function_of_hop_finds_owner():
    program = _program()
    assert program.function_of_hop(10) == 1
    assert program.function_of_hop(11) == 1
    assert program.function_of_hop(20) == 2


def test_function_of_hop_unknown_raises():
    with pytest.raises(KeyError):
        _program().function_of_hop(99)


def test_function_for_returns_self_or_none():
    program = _program()
    f = program.functions[1]
    assert f.function_for(10) is f
    assert f.function_for(20) is None


def test_operands_are_hashable_and_compare_by_value():
    values = {Const(1), Const(1), Var(3), Var(3)}
    assert values == {Const(1), Var(3)}
    expr = BinaryExpr(BinaryOp.ADD, Var(1), Const(2))
    assert expr == BinaryExpr(BinaryOp.ADD, Var(1), Const(2))


def test_operands_are_immutable():
    with pytest.raises(dataclasses.FrozenInstanceError):
        Var(1).var_id = 2


def test_mutable_defaults_are_not_shared():
    a = BasicBlock()
    b = BasicBlock()
    a.statements.append(Assign(0, TableAccess(1, (2,), (Var(0),), 3)))
    assert b.statements == []
    assert isinstance(b.terminator, Abort)


def test_return_without_value():
    assert Return().value is None
    assert Return(Var(4)).value == Var(4)