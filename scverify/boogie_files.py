"""Naming, writing and removal of generated Boogie files."""

from __future__ import annotations

import sys
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Union

from scverify.ir import CfgProgram

TEMP_DIR = Path("tmp")

PathLike = Union[str, Path]


@dataclass(frozen=True)
class BoogieFile:
    filename: str
    code: str


class BoogieFileError(OSError):
    """A Boogie file or its directory could not be written."""


def generate_filename(unit: Any, cfg: CfgProgram) -> str:
    """File name ``<funcA>_<finalA>_<funcB>_<finalB>.bpl`` for a verification unit."""
    func_a = cfg.functions[unit.function_a]
    func_b = cfg.functions[unit.function_b]
    return f"{func_a.name}_{unit.final_a}_{func_b.name}_{unit.final_b}.bpl"


def write_file(file: BoogieFile, directory: PathLike) -> Path:
    """Write ``file`` into ``directory`` and return its path."""
    path = Path(directory) / file.filename
    try:
        path.write_text(file.code)
    except OSError as exc:
        raise BoogieFileError(f"Failed to write Boogie file {path}: {exc}") from exc
    return path


def write_files(files: Iterable[BoogieFile], directory: PathLike) -> list[Path]:
    """Write every file into ``directory``, creating it if needed."""
    directory = Path(directory)
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise BoogieFileError(f"Failed to create directory {directory}: {exc}") from exc
    return [write_file(file, directory) for file in files]


def write_temp_file(file: BoogieFile) -> Path:
    """Write ``file`` into the ``tmp`` directory under the working directory."""
    try:
        TEMP_DIR.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise BoogieFileError(f"Failed to create tmp directory: {exc}") from exc
    return write_file(file, TEMP_DIR)


def cleanup_files(file_paths: Iterable[PathLike]) -> None:
    """Remove the given files, warning on stderr about any that cannot be removed."""
    for file_path in file_paths:
        try:
            Path(file_path).unlink()
        except OSError as exc:
            print(f"Warning: Failed to remove file {file_path}: {exc}", file=sys.stderr)