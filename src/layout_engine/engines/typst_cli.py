from __future__ import annotations

import logging
import subprocess
import tempfile
from pathlib import Path

from contracts.errors import CompilationError

from .pdfium_engine import PdfiumEngine

logger = logging.getLogger(__name__)


class TypstCliEngine(PdfiumEngine):
    """
    Typst via the `typst` CLI: the source is compiled to a temporary PDF, whose
    frame tree and rasters are then read with PDFium.

    The project root handed to typst is the directory of the source file, so
    relative imports and images resolve as they would for `typst compile`.
    """

    def __init__(self, *, typst_bin: str = "typst", timeout_s: float = 120.0) -> None:
        self.typst_bin = typst_bin
        self.timeout_s = timeout_s

    def backend_id(self) -> str:
        return "typst"

    def backend_version(self) -> str | None:
        try:
            proc = subprocess.run(
                [self.typst_bin, "--version"],
                check=False,
                capture_output=True,
                text=True,
                timeout=5,
            )
        except (OSError, subprocess.TimeoutExpired):
            return None
        out = proc.stdout.strip()
        return out if proc.returncode == 0 and out else None

    def _load_pdf_bytes(self, *, source_file: Path) -> bytes:
        root = source_file.resolve().parent

        with tempfile.TemporaryDirectory(prefix="word-boxes-") as tmp:
            out_pdf = Path(tmp) / "document.pdf"
            cmd = [self.typst_bin, "compile", "--root", str(root), str(source_file), str(out_pdf)]
            logger.debug("running %s", " ".join(cmd))

            try:
                proc = subprocess.run(
                    cmd,
                    check=False,
                    capture_output=True,
                    text=True,
                    timeout=self.timeout_s,
                )
            except FileNotFoundError as e:
                raise CompilationError(
                    "typst binary not found on PATH",
                    detail={"expected_command": self.typst_bin},
                ) from e
            except subprocess.TimeoutExpired as e:
                raise CompilationError(
                    "typst compilation timed out",
                    detail={"source_file": str(source_file), "timeout_s": self.timeout_s},
                ) from e

            if proc.returncode != 0:
                raise CompilationError(
                    "typst compilation failed",
                    detail={
                        "source_file": str(source_file),
                        "returncode": proc.returncode,
                        "stderr": proc.stderr[-4000:],
                    },
                )

            if not out_pdf.exists():
                raise CompilationError(
                    "typst reported success but wrote no PDF",
                    detail={"source_file": str(source_file)},
                )
            return out_pdf.read_bytes()
