"""
rbmap-inspect - Load a persisted map, validate it and print its contents.
"""

import argparse
import json
import logging
import os
from typing import Any

from rbmap.engine.serializer import open_map
from rbmap.models.exceptions import InvariantViolationError, SerializationError

logger = logging.getLogger(__name__)


def _parse_key(raw: str | None) -> Any:
    """Keys are given as JSON (``42``, ``"abc"``); bare words are strings."""
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rbmap-inspect",
        description="Validate and print a map written by rbmap.engine.serializer.",
    )
    parser.add_argument("path", help="Path to the persisted map")
    parser.add_argument(
        "--check",
        action="store_true",
        help="Only validate; exit 1 on corruption or invariant violations",
    )
    parser.add_argument("--entries", action="store_true", help="Print entries")
    parser.add_argument("--start", help="First key to print (inclusive, JSON)")
    parser.add_argument("--end", help="Key to stop before (exclusive, JSON)")
    parser.add_argument(
        "--reverse", action="store_true", help="Print in descending key order"
    )
    parser.add_argument(
        "--limit", type=int, default=0, help="Print at most this many entries"
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s - %(levelname)s - %(message)s",
    )
    args = build_parser().parse_args(argv)
    if args.limit < 0:
        logger.error(f"--limit must be >= 0, got {args.limit}")
        return 2

    try:
        tree = open_map(args.path)
    except FileNotFoundError as e:
        logger.error(str(e))
        return 2
    except SerializationError as e:
        logger.error(f"Cannot load {args.path}: {e}")
        return 1

    try:
        black_height = tree.validate()
    except InvariantViolationError as e:
        logger.error(f"{args.path} is not a valid red-black tree: {e}")
        return 1

    if args.check:
        print(f"OK {args.path}: {tree.size()} entries")
        return 0

    print(f"entries:      {tree.size()}")
    print(f"comparator:   {tree.comparator.name}")
    print(f"black height: {black_height}")
    if tree:
        print(f"first key:    {json.dumps(tree.first_key())}")
        print(f"last key:     {json.dumps(tree.last_key())}")

    if args.entries or args.start is not None or args.end is not None:
        view = tree.descending_view() if args.reverse else tree
        printed = 0
        for key, value in view.iterator(_parse_key(args.start), _parse_key(args.end)):
            if args.limit and printed >= args.limit:
                break
            print(f"{json.dumps(key)}\t{json.dumps(value)}")
            printed += 1

    return 0
