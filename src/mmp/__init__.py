import argparse
import logging
import sys
from collections.abc import Sequence
from typing import cast

from mmp.diag import ProcessorError
from mmp.log import get_logger, setup_base_logger
from mmp.options import DEFAULT_MAX_DEPTH, ProcessorOptions
from mmp.processor import ExpandResult, Processor, expand_file, expand_source
from mmp.sources import open_output

__all__ = ["ExpandResult", "Processor", "ProcessorOptions", "expand_file", "expand_source", "main"]
__version__ = "0.1.0"

logger = get_logger()


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mmp",
        description="Expand macros, conditionals, includes and snippets in a template file.",
        epilog="Example: mmp --verbose --in doc/src/index.html --out doc/index.html",
    )
    parser.add_argument("--in", dest="input", required=True, help="input template path")
    parser.add_argument("--out", dest="output", required=True, help="output file path")
    parser.add_argument(
        "-D",
        dest="defines",
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="define macro before processing",
    )
    parser.add_argument("-I", dest="include_dirs", action="append", default=[], help="include path")
    parser.add_argument(
        "--max-depth",
        type=int,
        default=DEFAULT_MAX_DEPTH,
        help="maximum include/snippet nesting depth",
    )
    parser.add_argument(
        "--diag-format",
        choices=("human", "json"),
        default="human",
        help="diagnostic output format",
    )
    parser.add_argument("--verbose", action="store_true", help="report progress during processing")
    parser.add_argument(
        "--dump-macro-table",
        action="store_true",
        help="print final macro table",
    )
    parser.add_argument(
        "--dump-include-trace",
        action="store_true",
        help="print include resolution trace",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_arg_parser()
    effective_argv = list(argv) if argv is not None else sys.argv[1:]
    try:
        args = parser.parse_args(effective_argv)
    except SystemExit as error:
        return cast(int, error.code)
    try:
        options = ProcessorOptions(
            defines=tuple(args.defines),
            include_dirs=tuple(args.include_dirs),
            max_depth=args.max_depth,
            verbose=args.verbose,
            diag_format=args.diag_format,
        )
    except ValueError as error:
        print(f"mmp: error: {error}", file=sys.stderr)
        return 2
    setup_base_logger(level=logging.INFO if options.verbose else logging.WARNING)
    try:
        with open_output(args.output) as out:
            processor = Processor(out, options=options)
            processor.process_file(args.input)
    except ProcessorError as error:
        print(f"mmp: error: {error}", file=sys.stderr)
        return 1
    except (OSError, UnicodeError) as error:
        print(f"mmp: I/O error: {error}", file=sys.stderr)
        return 1
    for diagnostic in processor.errors.diagnostics:
        if options.diag_format == "json":
            print(diagnostic.to_json(), file=sys.stderr)
        else:
            print(diagnostic, file=sys.stderr)
    if options.verbose:
        logger.info("Dump macro definitions:")
        for line in processor.macros.dump():
            logger.info("  %s", line)
    if args.dump_include_trace:
        for line in processor.include_trace:
            print(line)
    if args.dump_macro_table:
        for line in processor.macros.dump():
            print(line)
    count = processor.errors.count
    print(f"mmp: {count} error{'' if count == 1 else 's'}: {args.input}")
    return 0 if count == 0 else 1
