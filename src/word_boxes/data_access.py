from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable

from contracts.errors import ConfigurationError


def check_input_file(path: Path) -> Path:
    """
    Resolve the source document path and fail fast if it cannot be read.
    """

    resolved = path.expanduser().resolve()
    if not resolved.exists():
        raise ConfigurationError("Input file not found", detail={"path": str(path)})
    if not resolved.is_file():
        raise ConfigurationError("Input path is not a file", detail={"path": str(path)})
    if not os.access(resolved, os.R_OK):
        raise ConfigurationError("Input file is not readable", detail={"path": str(path)})
    return resolved


def check_output_file(path: Path) -> Path:
    """
    Resolve an output path and fail fast if it cannot be written.

    The parent directory must already exist; no implicit output directories.
    """

    resolved = path.expanduser().resolve()
    parent = resolved.parent
    if resolved.exists() and resolved.is_dir():
        raise ConfigurationError("Output path is a directory", detail={"path": str(path)})
    if not parent.is_dir():
        raise ConfigurationError("Output directory does not exist", detail={"path": str(path), "dir": str(parent)})
    if not os.access(parent, os.W_OK | os.X_OK):
        raise ConfigurationError("Output directory is not writable", detail={"path": str(path), "dir": str(parent)})
    if resolved.exists() and not os.access(resolved, os.W_OK):
        raise ConfigurationError("Output file is not writable", detail={"path": str(path)})
    return resolved


def check_distinct(paths: Iterable[Path]) -> None:
    seen: dict[Path, Path] = {}
    for p in paths:
        key = p.expanduser().resolve()
        if key in seen:
            raise ConfigurationError(
                "Input and output paths must all be distinct",
                detail={"path": str(p), "conflicts_with": str(seen[key])},
            )
        seen[key] = p
