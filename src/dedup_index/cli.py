"""Administrative command line for a shared dedup index.

Usage:
    dedup-index --url redis://127.0.0.1:6379/0 --prefix crawl stats
    dedup-index --prefix crawl check 231986 999999
    dedup-index --prefix crawl reset
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys

import redis

from .core.config import DEFAULT_FILTER_PARAMS, FilterParams, StorageConfig
from .core.errors import DedupIndexError
from .core.storage import RedisBloomStorage
from .retry import with_backoff

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool) -> None:
    """Setup logging to stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s | %(levelname)s | %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def request_id(value: str) -> int:
    """argparse type for unsigned 64-bit request ids."""
    try:
        parsed = int(value, 0)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid request id: {value!r}") from e
    if not 0 <= parsed < 2**64:
        raise argparse.ArgumentTypeError(f"request id out of range: {value}")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="dedup-index", description="Shared dedup index admin tool")
    p.add_argument(
        "--url",
        default=os.environ.get("REDIS_URL", "redis://127.0.0.1:6379/0"),
        help="Redis URL (default: $REDIS_URL)",
    )
    p.add_argument(
        "--prefix",
        default=os.environ.get("DEDUP_PREFIX", ""),
        help="Key namespace prefix (default: $DEDUP_PREFIX)",
    )
    p.add_argument(
        "--width", type=int, default=DEFAULT_FILTER_PARAMS.width, help="Filter width in bits"
    )
    p.add_argument(
        "--hash-count",
        type=int,
        default=DEFAULT_FILTER_PARAMS.hash_count,
        help="Bit positions per request id",
    )
    p.add_argument(
        "--retries",
        type=int,
        default=1,
        help="Attempts per call on connection errors (1 = no retry)",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    sub = p.add_subparsers(dest="command", required=True)
    mark = sub.add_parser("mark", help="Mark request ids as visited")
    mark.add_argument("ids", nargs="+", type=request_id)
    check = sub.add_parser("check", help="Check whether request ids were visited")
    check.add_argument("ids", nargs="+", type=request_id)
    sub.add_parser("stats", help="Show filter fill and estimated size")
    sub.add_parser("reset", help="Delete the bloom filter key only")
    sub.add_parser("clear", help="Delete the filter, cookies, request keys and queue")
    return p


def run(args: argparse.Namespace, out=None) -> int:
    """Execute one command against the configured storage."""
    out = out or sys.stdout
    config = StorageConfig.from_url(args.url, prefix=args.prefix)
    params = FilterParams(width=args.width, hash_count=args.hash_count)

    def call(fn, *fn_args):
        return with_backoff(lambda: fn(*fn_args), max_retries=args.retries)

    with RedisBloomStorage(config, params=params) as storage:
        if args.command == "mark":
            for rid in args.ids:
                call(storage.visited, rid)
            logger.info(f"Marked {len(args.ids)} request ids as visited")
        elif args.command == "check":
            for rid in args.ids:
                print(f"{rid}\t{'visited' if call(storage.is_visited, rid) else 'new'}", file=out)
        elif args.command == "stats":
            print(json.dumps(call(storage.stats), indent=2), file=out)
        elif args.command == "reset":
            call(storage.reset)
            logger.info(f"Reset bloom filter {storage.keys.bloom}")
        elif args.command == "clear":
            call(storage.clear)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Parse arguments and run the command."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.retries < 1:
        parser.error("--retries must be at least 1")
    setup_logging(args.verbose)
    try:
        return run(args)
    except (DedupIndexError, redis.RedisError) as e:
        logger.error(f"{args.command} failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
