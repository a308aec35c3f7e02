"""Generation of Boogie programs that check whether two final hops commute."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import Any

from scverify.boogie_expr import (
    binary_op_to_boogie,
    constant_to_boogie,
    map_type,
    nested_map_access,
    nested_map_update,
    type_to_boogie,
    unary_op_to_boogie,
)
from scverify.ir import (
    Abort,
    Assign,
    BinaryExpr,
    Branch,
    CfgProgram,
    Const,
    Field,
    Function,
    Goto,
    HopExit,
    Operand,
    Return,
    Rvalue,
    Statement,
    Table,
    TableAccess,
    TableAssign,
    Terminator,
    UnaryExpr,
    Use,
    Var,
)

_RULE = "// -------------------------------------------------------------------"
_INDENT = "    "


class BoogieCodeGenerator:
    """Builds one Boogie procedure for a verification unit.

    The unit must provide ``function_a``, ``function_b``, ``final_a``,
    ``final_b``, ``merges`` and ``relevant_tables``.
    """

    def __init__(self, unit: Any, cfg: CfgProgram) -> None:
        self.unit = unit
        self.cfg = cfg
        self._lines: list[str] = []
        self._indent = 0

    def generate(self) -> str:
        """Return the complete Boogie source for the unit."""
        self._lines = []
        self._indent = 0
        self._header_comment()
        self._main_procedure()
        return "".join(line + "\n" for line in self._lines)

    # -- output helpers -------------------------------------------------

    def _writeln(self, line: str = "") -> None:
        self._lines.append(_INDENT * self._indent + line)

    @contextmanager
    def _indented(self) -> Iterator[None]:
        self._indent += 1
        try:
            yield
        finally:
            self._indent = max(0, self._indent - 1)

    # -- lookups ---------------------------------------------------------

    @property
    def _func_a(self) -> Function:
        return self.cfg.functions[self.unit.function_a]

    @property
    def _func_b(self) -> Function:
        return self.cfg.functions[self.unit.function_b]

    def _value_fields(self, table: Table) -> list[Field]:
        fields = (self.cfg.fields[fid] for fid in table.fields)
        return [f for f in fields if not f.is_primary]

    def _key_types(self, table: Table) -> list[str]:
        return [type_to_boogie(self.cfg.fields[pk].ty) for pk in table.primary_keys]

    def _all_tables_used(self) -> list[int]:
        tables = dict.fromkeys(self.unit.relevant_tables)
        for function in (self._func_a, self._func_b):
            for hop in function.hops.values():
                for block_id in hop.blocks:
                    for statement in function.blocks[block_id].statements:
                        if isinstance(statement, TableAssign):
                            tables[statement.table] = None
                        elif isinstance(statement, Assign) and isinstance(
                            statement.rvalue, TableAccess
                        ):
                            tables[statement.rvalue.table] = None
        return list(tables)

    def _function_for_hop(self, hop_id: int) -> int:
        if self._func_a.function_for(hop_id) is not None:
            return self.unit.function_a
        return self.unit.function_b

    # -- sections --------------------------------------------------------

    def _header_comment(self) -> None:
        self._writeln(_RULE)
        self._writeln(
            f"// Commutativity verification for functions: "
            f"{self._func_a.name} and {self._func_b.name}"
        )
        self._writeln(
            f"// Testing if hops {self.unit.final_a} and {self.unit.final_b} commute"
        )
        self._writeln(f"// Number of prefix interleavings: {len(self.unit.merges)}")
        self._writeln(_RULE)
        self._writeln("")

    def _main_procedure(self) -> None:
        func_a, func_b = self._func_a, self._func_b
        params = [
            f"{func_a.variables[p].name}: {type_to_boogie(func_a.variables[p].ty)}"
            for p in func_a.parameters
        ]
        params += [
            f"{func_b.name}_{func_b.variables[p].name}: "
            f"{type_to_boogie(func_b.variables[p].ty)}"
            for p in func_b.parameters
        ]
        self._writeln(f"procedure main({', '.join(params)}) {{")
        with self._indented():
            self._declarations()
            self._verification_logic()
        self._writeln("}")

    def _declarations(self) -> None:
        self._writeln(_RULE)
        self._writeln("// All variable declarations (Boogie requirement: variables at top)")
        self._writeln(_RULE)

        all_tables = self._all_tables_used()
        for prefix in ("", "init_"):
            for table_id in all_tables:
                table = self.cfg.tables[table_id]
                ty = map_type(self._key_types(table), "")
                for f in self._value_fields(table):
                    self._writeln(
                        f"var {prefix}{table.name}_{f.name}: {ty}{type_to_boogie(f.ty)};"
                    )

        for table_id in self.unit.relevant_tables:
            table = self.cfg.tables[table_id]
            keys = self._key_types(table)
            for f in self._value_fields(table):
                ty = map_type(keys, f.ty)
                self._writeln(f"var final_AB_{table.name}_{f.name}: {ty};")
                self._writeln(f"var final_BA_{table.name}_{f.name}: {ty};")

        self._local_declarations()
        self._writeln("")

    def _local_declarations(self) -> None:
        declared: set[str] = set()
        for var in self._func_a.variables.values():
            if not var.is_parameter and var.name not in declared:
                self._writeln(f"var {var.name}: {type_to_boogie(var.ty)};")
                declared.add(var.name)
        func_b = self._func_b
        for var in func_b.variables.values():
            if var.is_parameter:
                continue
            name = f"{func_b.name}_{var.name}"
            if name not in declared:
                self._writeln(f"var {name}: {type_to_boogie(var.ty)};")
                declared.add(name)

    def _table_assignments(self, all_tables: Sequence[int], fmt: str) -> None:
        for table_id in all_tables:
            table = self.cfg.tables[table_id]
            for f in self._value_fields(table):
                self._writeln(fmt.format(name=f"{table.name}_{f.name}"))

    def _verification_logic(self) -> None:
        all_tables = self._all_tables_used()
        self._writeln(_RULE)
        self._writeln("// Initialize tables with havoc")
        self._writeln(_RULE)
        self._table_assignments(all_tables, "havoc {name};")

        self._writeln("")
        self._writeln("// Save initial state")
        self._table_assignments(all_tables, "init_{name} := {name};")
        self._writeln("")

        for index, merge in enumerate(self.unit.merges):
            self._interleaving_check(index, merge, all_tables)

    def _interleaving_check(
        self, index: int, merge: Sequence[int], all_tables: Sequence[int]
    ) -> None:
        unit = self.unit
        self._writeln(_RULE)
        self._writeln(f"// Merge #{index}: Prefix interleaving")
        self._writeln(_RULE)

        self._writeln("// First execution: [final_a, final_b]")
        self._hop_sequence(merge)
        self._hop_execution(unit.final_a, unit.function_a)
        self._hop_execution(unit.final_b, unit.function_b)
        self._state_save("AB")

        self._writeln("")
        self._writeln("// Restore initial state")
        self._table_assignments(all_tables, "{name} := init_{name};")

        self._writeln("")
        self._writeln("// Second execution: [final_b, final_a]")
        self._hop_sequence(merge)
        self._hop_execution(unit.final_b, unit.function_b)
        self._hop_execution(unit.final_a, unit.function_a)
        self._state_save("BA")

        self._writeln("")
        self._writeln("// Compare final states")
        self._state_comparison()
        self._writeln("")

    def _hop_sequence(self, hops: Sequence[int]) -> None:
        for hop_id in hops:
            self._hop_execution(hop_id, self._function_for_hop(hop_id))

    def _hop_execution(self, hop_id: int, function_id: int) -> None:
        function = self.cfg.functions[function_id]
        hop = function.hops[hop_id]
        node = self.cfg.nodes[hop.node_id]
        self._writeln(f"// Executing hop {hop_id} on {node.name}")

        # The number of lines written so far is unique per hop execution.
        exec_id = len(self._lines)

        if hop.entry_block is not None:
            self._writeln(f"goto {self._label(exec_id, function_id, hop.entry_block)};")
        for block_id in hop.blocks:
            self._basic_block(block_id, function_id, exec_id)
        self._writeln(f"hop_end_{exec_id}:")

    @staticmethod
    def _label(exec_id: int, function_id: int, block_id: int) -> str:
        return f"bb_{exec_id}_{function_id}_{block_id}"

    def _basic_block(self, block_id: int, function_id: int, exec_id: int) -> None:
        block = self.cfg.functions[function_id].blocks[block_id]
        self._writeln(f"{self._label(exec_id, function_id, block_id)} :")
        with self._indented():
            for statement in block.statements:
                self._statement(statement, function_id)
            self._terminator(block.terminator, function_id, exec_id)
        self._writeln("")

    def _terminator(self, terminator: Terminator, function_id: int, exec_id: int) -> None:
        if isinstance(terminator, Goto):
            self._writeln(f"goto {self._label(exec_id, function_id, terminator.target)};")
            return
        if isinstance(terminator, Branch):
            condition = self._operand(terminator.condition, function_id)
            self._writeln(f"if ({condition}) {{")
            with self._indented():
                self._writeln(
                    f"goto {self._label(exec_id, function_id, terminator.then_block)};"
                )
            self._writeln("} else {")
            with self._indented():
                self._writeln(
                    f"goto {self._label(exec_id, function_id, terminator.else_block)};"
                )
            self._writeln("}")
            return
        if isinstance(terminator, Return):
            if terminator.value is None:
                self._writeln("// Return (void)")
            else:
                self._writeln(
                    f"// Return value: {self._operand(terminator.value, function_id)}"
                )
        elif isinstance(terminator, Abort):
            self._writeln("// Abort")
        elif isinstance(terminator, HopExit):
            self._writeln("// Hop exit")
        else:
            raise TypeError(f"unknown terminator: {terminator!r}")
        self._writeln(f"goto hop_end_{exec_id};")

    def _statement(self, statement: Statement, function_id: int) -> None:
        if isinstance(statement, Assign):
            name = self._variable_name(statement.var, function_id)
            self._writeln(f"{name} := {self._rvalue(statement.rvalue, function_id)};")
        elif isinstance(statement, TableAssign):
            table = self.cfg.tables[statement.table]
            target = f"{table.name}_{self.cfg.fields[statement.field].name}"
            keys = [self._operand(k, function_id) for k in statement.pk_values]
            value = self._operand(statement.value, function_id)
            self._writeln(f"{target} := {nested_map_update(target, keys, value)};")
        else:
            raise TypeError(f"unknown statement: {statement!r}")

    def _rvalue(self, rvalue: Rvalue, function_id: int) -> str:
        if isinstance(rvalue, Use):
            return self._operand(rvalue.operand, function_id)
        if isinstance(rvalue, TableAccess):
            table = self.cfg.tables[rvalue.table]
            name = f"{table.name}_{self.cfg.fields[rvalue.field].name}"
            keys = [self._operand(k, function_id) for k in rvalue.pk_values]
            return nested_map_access(name, keys)
        if isinstance(rvalue, UnaryExpr):
            operand = self._operand(rvalue.operand, function_id)
            return f"({unary_op_to_boogie(rvalue.op)} {operand})"
        if isinstance(rvalue, BinaryExpr):
            left = self._operand(rvalue.left, function_id)
            right = self._operand(rvalue.right, function_id)
            return f"({left} {binary_op_to_boogie(rvalue.op)} {right})"
        raise TypeError(f"unknown rvalue: {rvalue!r}")

    def _operand(self, operand: Operand, function_id: int) -> str:
        if isinstance(operand, Var):
            return self._variable_name(operand.var_id, function_id)
        if isinstance(operand, Const):
            return constant_to_boogie(operand.value)
        raise TypeError(f"unknown operand: {operand!r}")

    def _variable_name(self, var_id: int, function_id: int) -> str:
        function = self.cfg.functions[function_id]
        name = function.variables[var_id].name
        if function_id == self.unit.function_b:
            return f"{function.name}_{name}"
        return name

    def _state_save(self, suffix: str) -> None:
        self._writeln(f"// Save final state {suffix}")
        self._table_assignments(self.unit.relevant_tables, f"final_{suffix}_{{name}} := {{name}};")

    def _state_comparison(self) -> None:
        for table_id in self.unit.relevant_tables:
            table = self.cfg.tables[table_id]
            key_types = self._key_types(table)
            for f in self._value_fields(table):
                name = f"{table.name}_{f.name}"
                if len(key_types) == 1:
                    self._writeln(
                        f"assert (forall k: {key_types[0]} :: "
                        f"final_AB_{name} [k] == final_BA_{name} [k]);"
                    )
                else:
                    names = [f"k{i}" for i in range(1, len(key_types) + 1)]
                    bound = ", ".join(f"{n}: {t}" for n, t in zip(names, key_types))
                    ab = nested_map_access(f"final_AB_{name}", names)
                    ba = nested_map_access(f"final_BA_{name}", names)
                    self._writeln(f"assert (forall {bound} :: {ab}  == {ba}  );")


def generate_boogie_for_unit(unit: Any, cfg: CfgProgram) -> str:
    """Boogie source checking the commutativity described by ``unit``."""
    return BoogieCodeGenerator(unit, cfg).generate()