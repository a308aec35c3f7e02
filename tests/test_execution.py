import subprocess
from unittest import mock

from scverify.execution import VerificationResult, execute_boogie


def _completed(code, out=b"", err=b""):
    return subprocess.CompletedProcess(args=[], returncode=code, stdout=out, stderr=err)


def test_result_constructors():
    assert VerificationResult.success().ok
    failed = VerificationResult.failure("boom")
    assert not failed.ok
    assert failed.message == "boom"


@mock.patch("scverify.execution.subprocess.run")
def test_quiet_success(run, tmp_path):
    run.return_value = _completed(0)
    path = tmp_path / "a.bpl"
    result = execute_boogie(path)
    assert result == VerificationResult.success()
    assert run.call_args.args[0] == ["boogie", str(path), "/quiet"]


@mock.patch("scverify.execution.subprocess.run")
def test_stdout_becomes_message(run):
    run.return_value = _completed(0, out=b"assertion might not hold", err=b"ignored")
    result = execute_boogie("a.bpl")
    assert result.message == "assertion might not hold"


@mock.patch("scverify.execution.subprocess.run")
def test_stderr_used_when_stdout_empty(run):
    run.return_value = _completed(1, err=b"parse error")
    assert execute_boogie("a.bpl").message == "parse error"


@mock.patch("scverify.execution.subprocess.run")
def test_silent_nonzero_exit(run):
    run.return_value = _completed(3)
    assert execute_boogie("a.bpl").message == "Boogie verification failed with exit code: 3"


@mock.patch("scverify.execution.subprocess.run")
def test_signal_reports_minus_one(run):
    run.return_value = _completed(-9)
    assert execute_boogie("a.bpl").message == "Boogie verification failed with exit code: -1"


@mock.patch("scverify.execution.subprocess.run", side_effect=FileNotFoundError("no boogie"))
def test_missing_verifier(run):
    result = execute_boogie("a.bpl")
    assert not result.ok
    assert result.message.startswith("Failed to run Boogie:")