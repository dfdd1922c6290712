from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from contracts.errors import WordBoxError
from layout_engine import EngineConfig, EngineName

from . import debug_print
from .config import DEFAULT_DPI, ExtractionConfig
from .logging_config import configure_logging
from .module import ExtractionOutputs, run_extraction

logger = logging.getLogger(__name__)


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="word-boxes",
        description="Compile a document and write the pixel bounding box of every word as JSON.",
    )
    p.add_argument("-v", "--verbose", action="count", default=0, help="Repeat for more log output.")
    sub = p.add_subparsers(dest="command", required=True)

    ex = sub.add_parser("extract", help="Extract word boxes from a source document.")
    ex.add_argument("input", type=Path, help="Source document (.typ, .pdf, layout .json, or plain text).")
    ex.add_argument("output", type=Path, help="Path to write the words JSON array.")
    ex.add_argument("--render", type=Path, default=None, help="Optional PNG of the rendered pages.")
    ex.add_argument("--render-boxes", type=Path, default=None, help="Optional PNG with word boxes drawn on top.")
    ex.add_argument("--include-delimiters", action="store_true", default=False)
    ex.add_argument("--include-whitespace", action="store_true", default=False)
    ex.add_argument("--dpi", type=float, default=DEFAULT_DPI, help="Output resolution (72 = 1 pixel per point).")
    ex.add_argument(
        "--engine",
        choices=[e.value for e in EngineName],
        default=EngineName.AUTO.value,
        help="Layout backend; `auto` picks one from the input suffix.",
    )
    ex.add_argument("--workers", type=int, default=1, help="Pages processed in parallel.")
    ex.add_argument("--typst-bin", default="typst", help="typst executable for the typst engine.")
    ex.add_argument("--timeout-s", type=float, default=120.0, help="Compiler timeout in seconds.")
    ex.add_argument("--dump-layout", type=Path, default=None, help="Optional path to write the compiled frame tree.")
    ex.add_argument("-v", "--verbose", action="count", default=0, dest="sub_verbose")

    ins = sub.add_parser("inspect", help="Print a words JSON per page.")
    debug_print.add_arguments(ins)
    ins.add_argument("-v", "--verbose", action="count", default=0, dest="sub_verbose")
    return p


def _extract(args: argparse.Namespace) -> int:
    config = ExtractionConfig(
        include_delimiters=args.include_delimiters,
        include_whitespace=args.include_whitespace,
        dpi=args.dpi,
        workers=args.workers,
    )
    engine_config = EngineConfig(
        engine=EngineName(args.engine),
        typst_bin=args.typst_bin,
        timeout_s=args.timeout_s,
    )
    outputs = ExtractionOutputs(
        words_json=args.output,
        render=args.render,
        render_boxes=args.render_boxes,
        layout_json=args.dump_layout,
    )

    result = run_extraction(
        source_file=args.input,
        outputs=outputs,
        config=config,
        engine_config=engine_config,
    )
    print(json.dumps(result.summary(), sort_keys=True, separators=(",", ":"), ensure_ascii=False))
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_arg_parser().parse_args(argv)
    configure_logging(args.verbose + getattr(args, "sub_verbose", 0))

    try:
        if args.command == "extract":
            return _extract(args)
        return debug_print.run(args)
    except WordBoxError as e:
        logger.error("%s: %s", e.code, e)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
