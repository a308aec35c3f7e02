"""The commutativity verification pipeline over an SC-graph."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Union

from scverify.boogie_files import (
    BoogieFile,
    BoogieFileError,
    cleanup_files,
    generate_filename,
    write_files,
    write_temp_file,
)
from scverify.code_generation import generate_boogie_for_unit
from scverify.commutativity import BlockFacts, create_verification_unit
from scverify.execution import VerificationResult, execute_boogie
from scverify.ir import CfgProgram
from scverify.sc_graph import Edge, EdgeType, SCGraph

Runner = Callable[[Path], VerificationResult]


class VerificationManager:
    """Generates, runs and records a Boogie check for every C-edge.

    Used as a context manager it removes its temporary files on exit.
    """

    def __init__(
        self,
        live_out: BlockFacts,
        written_tables: BlockFacts,
        runner: Runner = execute_boogie,
    ) -> None:
        self.live_out = live_out
        self.written_tables = written_tables
        self.runner = runner
        self.boogie_files: list[BoogieFile] = []
        self.results: dict[Edge, VerificationResult] = {}
        self.temp_file_paths: list[Path] = []

    def run_commutativity_pipeline(self, cfg: CfgProgram, sc_graph: SCGraph) -> None:
        """Verify every C-edge and drop from ``sc_graph`` those proved to commute."""
        c_edges = [e for e in sc_graph.edges if e.edge_type is EdgeType.C]
        proved: set[Edge] = set()

        for edge in c_edges:
            unit = create_verification_unit(
                edge, cfg, sc_graph, self.live_out, self.written_tables
            )
            boogie_file = BoogieFile(
                generate_filename(unit, cfg), generate_boogie_for_unit(unit, cfg)
            )
            self.boogie_files.append(boogie_file)

            try:
                temp_path = write_temp_file(boogie_file)
            except BoogieFileError as exc:
                self.results[edge] = VerificationResult.failure(str(exc))
                continue

            self.temp_file_paths.append(temp_path)
            result = self.runner(temp_path)
            if result.ok:
                proved.add(edge)
            self.results[edge] = result

        sc_graph.edges[:] = [
            e for e in sc_graph.edges if not (e.edge_type is EdgeType.C and e in proved)
        ]
        self.cleanup_temp_files()

    def cleanup_temp_files(self) -> None:
        """Remove the temporary files written so far."""
        cleanup_files(self.temp_file_paths)
        self.temp_file_paths.clear()

    def save_boogie_files(self, output_dir: Union[str, Path]) -> None:
        """Write every generated Boogie file into ``output_dir``."""
        write_files(self.boogie_files, output_dir)

    def __enter__(self) -> "VerificationManager":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cleanup_temp_files()