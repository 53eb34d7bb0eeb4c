"""
Command-line interface for the TEMPEX expression evaluator.

Provides argument parsing and orchestration for evaluating a temporal
expression, given as text or in wire format, over an event trace
supplied as a CSV file.
"""

from __future__ import annotations

import argparse
import io
import sys
from pathlib import Path
from typing import Optional

import tempex
from tempex.core.codec import decode, encode
from tempex.core.matcher import Clock, Evaluator
from tempex.parser.ast_nodes import Expression
from tempex.parser.expression import names_of, parse_expression
from tempex.utils.logger import EvaluationLogger, LogLevel
from tempex.utils.trace_reader import TraceReader


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the TEMPEX CLI."""
    parser = argparse.ArgumentParser(
        prog="tempex",
        description=(
            "TEMPEX: evaluate temporal expressions "
            "(AND, OR, NOT, THEN, AFTER) over timestamped event traces"
        ),
    )

    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "-x",
        "--expression",
        type=Path,
        help="Path to a file containing a textual expression",
    )
    source.add_argument(
        "-j",
        "--json",
        type=Path,
        help="Path to a file containing a wire-encoded expression",
    )

    required = parser.add_argument_group("required arguments")
    required.add_argument(
        "-t",
        "--trace",
        type=Path,
        required=True,
        help="Path to trace file (.csv) with name,timestamp columns",
    )

    parser.add_argument(
        "-o",
        "--output",
        choices=["silent", "normal", "verbose"],
        default="normal",
        help="Output level (default: normal)",
    )
    parser.add_argument(
        "-d",
        "--debug",
        type=int,
        choices=[0, 1, 2, 3],
        default=0,
        help="Debug level 0-3 (default: 0)",
    )
    parser.add_argument(
        "--now",
        default=None,
        metavar="TIME",
        help="Fix the current time (epoch nanoseconds or ISO-8601)",
    )
    parser.add_argument(
        "--sort",
        action="store_true",
        help="Sort trace events by timestamp instead of requiring sorted input",
    )
    parser.add_argument(
        "--encode",
        action="store_true",
        help="Print the wire encoding of the expression",
    )
    parser.add_argument(
        "--names",
        action="store_true",
        help="Print the event names referenced by the expression",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"tempex {tempex.__version__}",
    )

    return parser


def _resolve_log_level(output: str, debug: int) -> LogLevel:
    """Determine the effective log level from output and debug settings."""
    if debug >= 3:
        return LogLevel.DEBUG
    if output == "verbose" or debug >= 1:
        return LogLevel.VERBOSE
    if output == "silent":
        return LogLevel.SILENT
    return LogLevel.NORMAL


def _fixed_clock(value: Optional[str]) -> Optional[Clock]:
    """Build a constant clock from the --now argument, if given."""
    if value is None:
        return None
    instant = TraceReader.parse_timestamp(value)
    return lambda: instant


def _load_expression(args: argparse.Namespace) -> Expression:
    """Read the expression from the text or wire-format file."""
    if args.json is not None:
        if not args.json.exists():
            raise FileNotFoundError(f"Expression file not found: {args.json}")
        return decode(args.json.read_bytes())

    if not args.expression.exists():
        raise FileNotFoundError(f"Expression file not found: {args.expression}")
    lines = [
        line
        for line in args.expression.read_text(encoding="utf-8").splitlines()
        if line.strip() and not line.strip().startswith("#")
    ]
    if not lines:
        raise ValueError("Expression file is empty")
    return parse_expression(" ".join(lines))


def main() -> None:
    """Entry point for the ``tempex`` CLI command."""
    parser = _build_parser()
    args = parser.parse_args()

    try:
        _run(args)
    except SystemExit:
        raise
    except Exception as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(2)


def _run(args: argparse.Namespace) -> None:
    """Execute the evaluation pipeline."""
    if not args.trace.exists():
        print(f"Error: Trace file not found: {args.trace}", file=sys.stderr)
        sys.exit(2)

    log_level = _resolve_log_level(args.output, args.debug)
    stream = sys.stdout if args.output != "silent" else io.StringIO()
    logger = EvaluationLogger(level=log_level, stream=stream)

    expr = _load_expression(args)
    logger.info("Loaded expression", expression=expr)

    if args.encode:
        print(encode(expr).decode("utf-8"))
    if args.names:
        print("\n".join(sorted(names_of(expr))))

    events = TraceReader(args.trace).read_events(sort=args.sort)
    if any(b.timestamp < a.timestamp for a, b in zip(events, events[1:])):
        raise ValueError("Trace events are not sorted by timestamp (use --sort)")
    logger.info("Loaded trace", path=args.trace, events=len(events))

    evaluator = Evaluator(clock=_fixed_clock(args.now), logger=logger)
    index, satisfied = evaluator.evaluate_with_index(expr, events)

    logger.verdict(satisfied, index)
    logger.statistics(
        {
            "events": len(events),
            "event_names": len(names_of(expr)),
            "witness_index": index,
        }
    )

    sys.exit(0 if satisfied else 1)
