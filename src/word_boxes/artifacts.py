from __future__ import annotations

import io
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Iterable, Mapping

from PIL import Image

from contracts.errors import OutputIOError
from contracts.layout import Document
from contracts.words import WordRecord

logger = logging.getLogger(__name__)


def serialize_word_records(records: Iterable[WordRecord]) -> str:
    payload = [r.to_dict() for r in records]
    return json.dumps(payload, ensure_ascii=False, sort_keys=True, indent=2) + "\n"


def serialize_layout(document: Document) -> str:
    return json.dumps(document.to_dict(), ensure_ascii=False, sort_keys=True, separators=(",", ":")) + "\n"


def encode_png(image: Image.Image) -> bytes:
    buf = io.BytesIO()
    image.save(buf, format="PNG")
    return buf.getvalue()


def commit_outputs(outputs: Mapping[Path, bytes]) -> list[Path]:
    """
    Write all outputs or none of them.

    Every payload is first written to a hidden temporary sibling of its target;
    targets are only replaced once all temporaries are complete. On failure the
    temporaries, and any targets already replaced by this call, are removed.
    """

    staged: list[tuple[Path, Path]] = []
    committed: list[Path] = []
    current: Path | None = None
    try:
        for target, data in outputs.items():
            current = target
            fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=target.parent)
            tmp = Path(tmp_name)
            staged.append((tmp, target))
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.chmod(tmp, 0o644)

        for tmp, target in staged:
            current = target
            os.replace(tmp, target)
            committed.append(target)
    except OSError as e:
        for tmp, _ in staged:
            tmp.unlink(missing_ok=True)
        for target in committed:
            target.unlink(missing_ok=True)
        raise OutputIOError(
            "Failed to write output file",
            detail={"path": None if current is None else str(current), "error": repr(e)},
        ) from e

    for target in committed:
        logger.info("wrote %s", target)
    return committed
