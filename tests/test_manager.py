import pytest

from scverify.boogie_files import BoogieFileError
from scverify.execution import VerificationResult
from scverify.ir import (
    BasicBlock,
    CfgNode,
    CfgProgram,
    Const,
    Field,
    Function,
    Hop,
    Return,
    Table,
    TableAssign,
    TypeName,
    Var,
    Variable,
)
from scverify.manager import VerificationManager
from scverify.sc_graph import EdgeType, SCGraph


def _write():
    return TableAssign(0, (0,), (Const(1),), 1, Var(0))


@pytest.fixture
def cfg():
    deposit = Function(
        name="deposit",
        parameters=[0],
        variables={0: Variable("amount", TypeName.INT, True)},
        blocks={0: BasicBlock([], Return()), 1: BasicBlock([_write()], Return())},
        hops={0: Hop(1, [0], 0), 1: Hop(0, [1], 1)},
        hop_order=[0, 1],
    )
    withdraw = Function(
        name="withdraw",
        parameters=[0],
        variables={0: Variable("amount", TypeName.INT, True)},
        blocks={0: BasicBlock([_write()], Return())},
        hops={2: Hop(0, [0], 0)},
        hop_order=[2],
    )
    return CfgProgram(
        functions={0: deposit, 1: withdraw},
        tables={0: Table("accounts", [0, 1], [0])},
        fields={0: Field("id", TypeName.INT, True), 1: Field("val", TypeName.INT)},
        nodes={0: CfgNode("server"), 1: CfgNode("client")},
    )


@pytest.fixture(autouse=True)
def _in_tmp(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)


def _writes(function):
    return {1: [0]} if function.name == "deposit" else {0: [0]}


def _manager(runner):
    return VerificationManager(lambda f: {}, _writes, runner)


def test_proved_edge_is_removed(cfg, tmp_path):
    graph = SCGraph(cfg)
    manager = _manager(lambda path: VerificationResult.success())
    manager.run_commutativity_pipeline(cfg, graph)
    assert graph.stats() == (3, 1, 0)
    assert [r.ok for r in manager.results.values()] == [True]
    assert [f.filename for f in manager.boogie_files] == ["deposit_1_withdraw_2.bpl"]
    assert manager.temp_file_paths == []
    assert not (tmp_path / "tmp" / "deposit_1_withdraw_2.bpl").exists()


def test_failed_edge_is_kept(cfg):
    graph = SCGraph(cfg)
    manager = _manager(lambda path: VerificationResult.failure("no"))
    manager.run_commutativity_pipeline(cfg, graph)
    assert graph.stats() == (3, 1, 1)
    c_edge = next(e for e in graph.edges if e.edge_type is EdgeType.C)
    assert manager.results[c_edge].message == "no"


def test_runner_sees_generated_code(cfg):
    graph = SCGraph(cfg)
    seen = []

    def runner(path):
        seen.append(path.read_text())
        return VerificationResult.success()

    manager = _manager(runner)
    manager.run_commutativity_pipeline(cfg, graph)
    assert seen == [manager.boogie_files[0].code]
    assert "procedure main(" in seen[0]


def test_unwritable_temp_dir_records_failure(cfg, tmp_path):
    (tmp_path / "tmp").write_text("")
    graph = SCGraph(cfg)
    calls = []
    manager = _manager(lambda path: calls.append(path) or VerificationResult.success())
    manager.run_commutativity_pipeline(cfg, graph)
    assert calls == []
    (result,) = manager.results.values()
    assert result.message.startswith("Failed to create tmp directory")
    assert graph.stats()[2] == 1


def test_save_boogie_files(cfg, tmp_path):
    graph = SCGraph(cfg)
    manager = _manager(lambda path: VerificationResult.success())
    manager.run_commutativity_pipeline(cfg, graph)
    manager.save_boogie_files(tmp_path / "out")
    saved = tmp_path / "out" / "deposit_1_withdraw_2.bpl"
    assert saved.read_text() == manager.boogie_files[0].code


def test_save_boogie_files_error(cfg, tmp_path):
    (tmp_path / "out").write_text("")
    manager = _manager(lambda path: VerificationResult.success())
    manager.run_commutativity_pipeline(cfg, SCGraph(cfg))
    with pytest.raises(BoogieFileError):
        manager.save_boogie_files(tmp_path / "out")


def test_context_manager_cleans_up(tmp_path):
    leftover = tmp_path / "left.bpl"
    leftover.write_text("x")
    with _manager(lambda path: VerificationResult.success()) as manager:
        manager.temp_file_paths.append(leftover)
    assert not leftover.exists()
    assert manager.temp_file_paths == []