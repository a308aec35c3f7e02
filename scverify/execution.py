"""Running the Boogie verifier on a generated file."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union


@dataclass(frozen=True)
class VerificationResult:
    """Outcome of one verifier run; ``message`` is set only on failure."""

    message: Optional[str] = None

    @classmethod
    def success(cls) -> "VerificationResult":
        return cls(None)

    @classmethod
    def failure(cls, message: str) -> "VerificationResult":
        return cls(message)

    @property
    def ok(self) -> bool:
        return self.message is None


def execute_boogie(file_path: Union[str, Path]) -> VerificationResult:
    """Run ``boogie <file> /quiet``; silence with exit status 0 means everything was proved."""
    try:
        completed = subprocess.run(
            ["boogie", str(file_path), "/quiet"], capture_output=True
        )
    except OSError as exc:
        return VerificationResult.failure(f"Failed to run Boogie: {exc}")

    if completed.returncode == 0 and not completed.stdout and not completed.stderr:
        return VerificationResult.success()

    if completed.stdout:
        message = completed.stdout.decode("utf-8", errors="replace")
    elif completed.stderr:
        message = completed.stderr.decode("utf-8", errors="replace")
    else:
        code = completed.returncode if completed.returncode >= 0 else -1
        message = f"Boogie verification failed with exit code: {code}"
    return VerificationResult.failure(message)