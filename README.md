# scverify

`scverify` works on a program that has already been lowered to a
control-flow graph of *hops* (pieces of a transaction that each run on one
node). It builds the program's **SC-graph** (serializability conflict graph)
and checks whether conflicting hops commute by generating Boogie programs and
running the `boogie` verifier on them.

## Modules

- `scverify.ir` – the program model: `TypeName`, `UnaryOp`, `BinaryOp`,
  operands (`Var`, `Const`), rvalues (`Use`, `TableAccess`, `UnaryExpr`,
  `BinaryExpr`), statements (`Assign`, `TableAssign`), terminators (`Goto`,
  `Branch`, `Return`, `Abort`, `HopExit`), and `Field`, `Table`, `Variable`,
  `BasicBlock`, `Hop`, `Function`, `CfgNode`, collected in a `CfgProgram`.
  Identifiers are plain integers; hop ids are unique across the program, and
  `CfgProgram.function_of_hop(hop_id)` returns the owning function's id (or
  raises `KeyError`).
- `scverify.sc_graph` – `SCGraph(cfg_program)` creates one node per hop,
  `EdgeType.S` edges along each function's `hop_order`, and `EdgeType.C`
  edges between hops of different functions that run on the same node.
  - `find_mixed_cycles()` returns each simple cycle that uses at least one
    S-edge and one C-edge, once, as a canonical list of hop ids.
  - `stats()` returns `(nodes, s_edges, c_edges)`.
  - `get_sc_node_id(cfg_hop_id)` returns the node index of a hop, or `None`.
- `scverify.interleaving.enumerate_interleavings(a, b)` – every merge of two
  sequences that keeps the order within each, taking from `a` first.
- `scverify.boogie_expr` – Boogie text for types, operators, constants,
  nested map types, reads and updates.
- `scverify.commutativity` – `VerificationUnit`, `hop_prefix(function,
  final_hop)` and `create_verification_unit(c_edge, cfg, sc_graph, live_out,
  written_tables)`, which collects the prefixes before the two conflicting
  hops, all their interleavings, the tables written by the final hops and the
  variables live at their exit.
- `scverify.code_generation` – `BoogieCodeGenerator` and
  `generate_boogie_for_unit(unit, cfg)`: one `procedure main` that havocs the
  tables, then for every interleaved prefix runs the two final hops in both
  orders and asserts that the written tables end up equal.
- `scverify.boogie_files` – `BoogieFile`, `generate_filename` (gives
  `<funcA>_<finalA>_<funcB>_<finalB>.bpl`), `write_file`, `write_files`,
  `write_temp_file` (into `tmp/` under the working directory) and
  `cleanup_files`. Write failures raise `BoogieFileError`.
- `scverify.execution` – `execute_boogie(file_path)` runs
  `boogie <file> /quiet` and returns a `VerificationResult`. A run with exit
  status 0 and no output is a success (`result.ok`); otherwise `message`
  holds the verifier's stdout, its stderr, or the exit code.
- `scverify.manager` – `VerificationManager(live_out, written_tables,
  runner=execute_boogie)` runs the whole pipeline.

## Example

```python
from scverify.interleaving import enumerate_interleavings
from scverify.ir import CfgNode, CfgProgram, Function, Hop
from scverify.manager import VerificationManager
from scverify.sc_graph import SCGraph

print(enumerate_interleavings([1, 2], ["x"]))
# [[1, 2, 'x'], [1, 'x', 2], ['x', 1, 2]]

program = CfgProgram(
    functions={
        0: Function("f", hops={10: Hop(0), 11: Hop(1)}, hop_order=[10, 11]),
        1: Function("g", hops={20: Hop(0), 21: Hop(1)}, hop_order=[20, 21]),
    },
    nodes={0: CfgNode("server"), 1: CfgNode("client")},
)

graph = SCGraph(program)
print(graph.stats())               # (4, 2, 2)
print(graph.find_mixed_cycles())   # [[10, 11, 21, 20]]

def live_out(function):
    return {}      # block id -> variable ids live at the block's exit

def written_tables(function):
    return {}      # block id -> table ids written up to the block's exit

with VerificationManager(live_out, written_tables) as manager:
    manager.run_commutativity_pipeline(program, graph)
    manager.save_boogie_files("boogie_out")

# C-edges whose hops were proved to commute are now gone from the graph.
print(manager.results)
print(graph.find_mixed_cycles())
```

Temporary files are written to `tmp/` in the working directory and removed
when the pipeline finishes or the manager is closed. Pass another `runner`
(any callable taking a `Path` and returning a `VerificationResult`) to
verify files some other way.

## What it does not do

- It does not parse source programs; a `CfgProgram` has to be built by the
  caller.
- It performs no dataflow analysis of its own: live variables and written
  tables come from the `live_out` and `written_tables` callables.
- It has no command-line interface.
- It does not contain a verifier; the `boogie` executable must be on `PATH`
  for `execute_boogie` to succeed.

## Requirements

Python 3.10 or later. No third-party packages are needed at run time.