from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any

from contracts.errors import ConfigurationError
from contracts.words import BBox, WordRecord


def _load_json(p: Path) -> Any:
    try:
        return json.loads(p.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise ConfigurationError("Cannot read words JSON", detail={"path": str(p), "error": repr(e)}) from e


def _bbox_str(b: BBox) -> str:
    return f"({b.x:.2f},{b.y:.2f})-({b.x1:.2f},{b.y1:.2f})"


def load_records(p: Path) -> list[WordRecord]:
    raw = _load_json(p)
    if not isinstance(raw, list):
        raise ConfigurationError("Words JSON must be an array", detail={"path": str(p)})
    try:
        return [WordRecord.from_dict(d) for d in raw]
    except (KeyError, TypeError, ValueError) as e:
        raise ConfigurationError("Invalid word record", detail={"path": str(p), "error": repr(e)}) from e


def add_arguments(ap: argparse.ArgumentParser) -> None:
    ap.add_argument("words", type=Path, help="Words JSON written by `word-boxes extract`.")
    ap.add_argument("--page", type=int, default=None, help="Only print this page (0-based).")
    ap.add_argument("--max-words", type=int, default=0, help="If >0, truncate each page after N records.")


def run(args: argparse.Namespace) -> int:
    records = load_records(args.words)

    by_page: dict[int, list[WordRecord]] = {}
    for r in records:
        by_page.setdefault(r.page, []).append(r)

    for page in sorted(by_page):
        if args.page is not None and page != args.page:
            continue
        page_records = by_page[page]
        kinds: dict[str, int] = {}
        for r in page_records:
            kinds[r.kind.value] = kinds.get(r.kind.value, 0) + 1

        print(f"\n=== PAGE {page:03d} ===")
        print("records=" + str(len(page_records)) + " " + " ".join(f"{k}={v}" for k, v in sorted(kinds.items())))

        for i, r in enumerate(page_records):
            if args.max_words and i >= args.max_words:
                print(f"... (truncated at {args.max_words})")
                break
            print(f"{i:>5} {r.kind.value:<10} bbox={_bbox_str(r.bbox)} text={r.text!r}")

    return 0


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(prog="word-boxes-inspect")
    add_arguments(ap)
    return run(ap.parse_args(argv))


if __name__ == "__main__":
    raise SystemExit(main())
