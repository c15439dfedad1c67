#!/usr/bin/env python3
"""
Command-line front-end for the reference search service.

Searches the `<collection>.json` files under --data-dir (or REFSEARCH_DATA_DIR),
using the remote backend from REFSEARCH_REMOTE_BASE_URL when set. Output is JSON.

Examples:
  python scripts/refsearch_cli.py --data-dir ./data search "basmati rice"
  python scripts/refsearch_cli.py search PRD-MAN-024
  python scripts/refsearch_cli.py suggest piz
  python scripts/refsearch_cli.py related SHP-MAN-001 --limit 5
  python scripts/refsearch_cli.py encode PRD Mandsaur 23
  python scripts/refsearch_cli.py decode PRD-MAN-024
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any, List, Optional

# Allow running from a source checkout without installing the package
_project_root = Path(__file__).resolve().parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from refsearch_server.core.config import DEFAULT_MAX_RESULTS, DEFAULT_RELATED_LIMIT
from refsearch_server.core.logger import setup_logger
from refsearch_server.reference.codec import decode, encode, route_path
from refsearch_server.search.service import SearchService, build_search_service


def _print_json(data: Any) -> None:
    print(json.dumps(data, ensure_ascii=False, indent=2))


def _decode_payload(raw: str) -> dict:
    parts = decode(raw)
    if parts is None:
        return {"reference_id": raw, "valid": False, "path": route_path(raw)}
    return {
        "reference_id": raw,
        "valid": True,
        "entity_type": parts.kind.value,
        "prefix": parts.prefix,
        "district_code": parts.district_code,
        "sequence": parts.sequence,
        "path": route_path(raw),
    }


async def _run_service_command(service: SearchService, args: argparse.Namespace) -> Any:
    if args.command == "search":
        location = None
        if args.lat is not None and args.lng is not None:
            location = {"lat": args.lat, "lng": args.lng}
        return await service.search(args.term, location, args.limit)
    if args.command == "suggest":
        return await service.suggest(args.term)
    if args.command == "related":
        return await service.related_items(args.reference_id, args.limit)
    raise ValueError(f"Unknown command: {args.command}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Reference search: universal search, suggestions, related items, Reference IDs.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--data-dir", type=Path, default=None, help="Directory with <collection>.json files")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_search = sub.add_parser("search", help="Universal search")
    p_search.add_argument("term", help="Search term or Reference ID")
    p_search.add_argument("--lat", type=float, default=None)
    p_search.add_argument("--lng", type=float, default=None)
    p_search.add_argument("--limit", type=int, default=DEFAULT_MAX_RESULTS)

    p_suggest = sub.add_parser("suggest", help="Type-ahead suggestions")
    p_suggest.add_argument("term")

    p_related = sub.add_parser("related", help="Items related to a Reference ID")
    p_related.add_argument("reference_id")
    p_related.add_argument("--limit", type=int, default=DEFAULT_RELATED_LIMIT)

    p_encode = sub.add_parser("encode", help="Build the next Reference ID for a partition")
    p_encode.add_argument("entity_type", help="Prefix (PRD) or kind (product)")
    p_encode.add_argument("district")
    p_encode.add_argument("current_count", type=int)

    p_decode = sub.add_parser("decode", help="Decode a Reference ID")
    p_decode.add_argument("reference_id")
    return parser


def run_cli(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logger(level=args.log_level)

    if args.command == "encode":
        try:
            _print_json({"reference_id": encode(args.entity_type, args.district, args.current_count)})
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        return 0
    if args.command == "decode":
        _print_json(_decode_payload(args.reference_id.strip()))
        return 0

    service = build_search_service(args.data_dir)
    _print_json(asyncio.run(_run_service_command(service, args)))
    return 0


if __name__ == "__main__":
    sys.exit(run_cli())
