from __future__ import annotations

from typing import Any


class WordBoxError(Exception):
    """
    Base class for fatal extraction failures.

    `code` is a stable identifier for logs and exit summaries; `detail` carries
    the diagnostic context (page index, frame index, file path, ...).
    """

    code = "WORDBOX_ERROR"

    def __init__(self, message: str, *, detail: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail: dict[str, Any] = dict(detail or {})

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "detail": dict(self.detail)}

    def __str__(self) -> str:
        if not self.detail:
            return self.message
        ctx = ", ".join(f"{k}={v!r}" for k, v in sorted(self.detail.items()))
        return f"{self.message} ({ctx})"


class CompilationError(WordBoxError):
    code = "COMPILATION_FAILED"


class MalformedLayoutError(WordBoxError):
    code = "MALFORMED_LAYOUT"


class ConfigurationError(WordBoxError, ValueError):
    code = "CONFIGURATION_INVALID"


class OutputIOError(WordBoxError, OSError):
    code = "OUTPUT_IO_FAILED"
