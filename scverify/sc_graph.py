"""Serializability conflict graph over the hops of a program."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from enum import Enum
from itertools import combinations
from typing import Optional

from scverify.ir import CfgProgram


class EdgeType(Enum):
    """S: program order within a function. C: possible conflict across functions."""

    S = "S"
    C = "C"


@dataclass(frozen=True)
class SCGraphNode:
    cfg_hop_id: int
    cfg_function_id: int
    cfg_node_id: int


@dataclass(frozen=True)
class Edge:
    """Undirected edge between two SC-graph node indices."""

    source: int
    target: int
    edge_type: EdgeType


def _canonicalize_cycle(cycle: list[int]) -> list[int]:
    if not cycle:
        return []
    n = len(cycle)
    start = cycle.index(min(cycle))
    forward = cycle[start:] + cycle[:start]
    reverse = [cycle[(start - i) % n] for i in range(n)]
    return min(forward, reverse)


class SCGraph:
    """SC-graph: one node per hop, S-edges along hop order, C-edges between
    hops of different functions that run on the same node."""

    def __init__(self, cfg_program: CfgProgram) -> None:
        self.nodes: list[SCGraphNode] = []
        self.edges: list[Edge] = []
        self._hop_to_node: dict[int, int] = {}

        for function_id, function in cfg_program.functions.items():
            for hop_id, hop in function.hops.items():
                self._hop_to_node[hop_id] = len(self.nodes)
                self.nodes.append(SCGraphNode(hop_id, function_id, hop.node_id))

        for function in cfg_program.functions.values():
            order = function.hop_order
            for previous, current in zip(order, order[1:]):
                self.edges.append(
                    Edge(self._hop_to_node[previous], self._hop_to_node[current], EdgeType.S)
                )

        hops_on_node: dict[int, list[int]] = defaultdict(list)
        for function in cfg_program.functions.values():
            for hop_id, hop in function.hops.items():
                hops_on_node[hop.node_id].append(hop_id)

        for hop_ids in hops_on_node.values():
            for first, second in combinations(hop_ids, 2):
                a = self._hop_to_node[first]
                b = self._hop_to_node[second]
                if self.nodes[a].cfg_function_id != self.nodes[b].cfg_function_id:
                    self.edges.append(Edge(min(a, b), max(a, b), EdgeType.C))

    def _adjacency(self) -> list[list[tuple[int, EdgeType]]]:
        adjacency: list[list[tuple[int, EdgeType]]] = [[] for _ in self.nodes]
        for edge in self.edges:
            adjacency[edge.source].append((edge.target, edge.edge_type))
            if edge.target != edge.source:
                adjacency[edge.target].append((edge.source, edge.edge_type))
        return adjacency

    def find_mixed_cycles(self) -> list[list[int]]:
        """Unique simple cycles holding at least one S-edge and one C-edge,
        each given as a canonical list of hop ids."""
        adjacency = self._adjacency()
        cycles: list[list[int]] = []
        seen: set[tuple[int, ...]] = set()

        for start in range(len(self.nodes)):
            path = [start]
            on_path = {start}

            def visit(current: int, parent: Optional[int], s_count: int, c_count: int) -> None:
                for neighbor, edge_type in adjacency[current]:
                    if neighbor == parent:
                        continue
                    s_next = s_count + (edge_type is EdgeType.S)
                    c_next = c_count + (edge_type is EdgeType.C)
                    if neighbor == start:
                        if len(path) >= 2 and s_next and c_next:
                            cycle = _canonicalize_cycle(
                                [self.nodes[i].cfg_hop_id for i in path]
                            )
                            key = tuple(cycle)
                            if key not in seen:
                                seen.add(key)
                                cycles.append(cycle)
                    elif neighbor not in on_path:
                        path.append(neighbor)
                        on_path.add(neighbor)
                        visit(neighbor, current, s_next, c_next)
                        on_path.discard(neighbor)
                        path.pop()

            visit(start, None, 0, 0)
        return cycles

    def stats(self) -> tuple[int, int, int]:
        """Number of nodes, S-edges and C-edges."""
        s_edges = sum(1 for e in self.edges if e.edge_type is EdgeType.S)
        c_edges = sum(1 for e in self.edges if e.edge_type is EdgeType.C)
        return len(self.nodes), s_edges, c_edges

    def get_sc_node_id(self, cfg_hop_id: int) -> Optional[int]:
        return self._hop_to_node.get(cfg_hop_id)