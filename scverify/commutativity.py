"""Construction of the verification unit for one conflict edge."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field

from scverify.interleaving import enumerate_interleavings
from scverify.ir import CfgProgram, Function
from scverify.sc_graph import Edge, SCGraph

BlockFacts = Callable[[Function], Mapping[int, Iterable[int]]]
"""Analysis result per function: for each block id, the ids that hold at its exit."""


@dataclass
class VerificationUnit:
    """Everything needed to check whether two final hops commute.

    ``merges`` holds every interleaving of the two prefixes,
    ``relevant_tables`` the tables written by the final hops and
    ``relevant_vars`` the variables live at the exit of the final hops.
    """

    prefix_a: list[int]
    prefix_b: list[int]
    final_a: int
    final_b: int
    function_a: int
    function_b: int
    merges: list[list[int]] = field(default_factory=list)
    relevant_tables: list[int] = field(default_factory=list)
    relevant_vars: list[int] = field(default_factory=list)


def hop_prefix(function: Function, final_hop: int) -> list[int]:
    """Hops of ``function`` in program order, up to but not including ``final_hop``."""
    prefix = []
    for hop_id in function.hop_order:
        if hop_id == final_hop:
            break
        prefix.append(hop_id)
    return prefix


def _facts_at_hop_exit(
    function: Function, hop_id: int, facts: Mapping[int, Iterable[int]], into: dict[int, None]
) -> None:
    hop = function.hops.get(hop_id)
    if hop is None:
        return
    for block_id in hop.blocks:
        for item in facts.get(block_id, ()):
            into[item] = None


def create_verification_unit(
    c_edge: Edge,
    cfg: CfgProgram,
    sc_graph: SCGraph,
    live_out: BlockFacts,
    written_tables: BlockFacts,
) -> VerificationUnit:
    """Build the unit for the C-edge between hops A_m and B_k.

    ``live_out`` gives the variables live at each block's exit and
    ``written_tables`` the tables written up to each block's exit.
    """
    node_a = sc_graph.nodes[c_edge.source]
    node_b = sc_graph.nodes[c_edge.target]

    function_a, final_a = node_a.cfg_function_id, node_a.cfg_hop_id
    function_b, final_b = node_b.cfg_function_id, node_b.cfg_hop_id
    func_a = cfg.functions[function_a]
    func_b = cfg.functions[function_b]

    prefix_a = hop_prefix(func_a, final_a)
    prefix_b = hop_prefix(func_b, final_b)

    live_a = live_out(func_a)
    live_b = live_out(func_b)
    writes_a = written_tables(func_a)
    writes_b = written_tables(func_b)

    variables: dict[int, None] = {}
    _facts_at_hop_exit(func_a, final_a, live_a, variables)
    _facts_at_hop_exit(func_b, final_b, live_b, variables)

    tables: dict[int, None] = {}
    _facts_at_hop_exit(func_a, final_a, writes_a, tables)
    _facts_at_hop_exit(func_b, final_b, writes_b, tables)

    return VerificationUnit(
        prefix_a=prefix_a,
        prefix_b=prefix_b,
        final_a=final_a,
        final_b=final_b,
        function_a=function_a,
        function_b=function_b,
        merges=enumerate_interleavings(prefix_a, prefix_b),
        relevant_tables=list(tables),
        relevant_vars=list(variables),
    )