# src/main.py — v3
"""CLI entry point — caches, invalidate, analyze, identify commands.

Usage:
    inspectcache caches [--family procedures|defect_identifier]
    inspectcache invalidate <scope> [--family ...]
    inspectcache analyze <defect.json>
    inspectcache identify <photo> [--media-type image/png]
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from inspectcache.config.scopes import DEFECT_IDENTIFIER_FAMILY, PROCEDURES_FAMILY
from inspectcache.version import __version__

logger = logging.getLogger(__name__)

_FAMILIES = [PROCEDURES_FAMILY, DEFECT_IDENTIFIER_FAMILY]


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        _setup_logging(args.verbose)
        return asyncio.run(args.func(args))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="inspectcache",
        description=f"inspectcache v{__version__} — cached-context inspection analysis",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- caches ---
    p_caches = subparsers.add_parser(
        "caches", help="List cache records",
    )
    p_caches.add_argument(
        "--family", choices=_FAMILIES, default=None,
        help="Only list one scope family (default: all)",
    )
    p_caches.set_defaults(func=_cmd_caches)

    # --- invalidate ---
    p_invalidate = subparsers.add_parser(
        "invalidate", help="Drop the cache record of a scope",
    )
    p_invalidate.add_argument("scope", help="Scope key (client name)")
    p_invalidate.add_argument(
        "--family", choices=_FAMILIES, default=PROCEDURES_FAMILY,
        help=f"Scope family (default: {PROCEDURES_FAMILY})",
    )
    p_invalidate.set_defaults(func=_cmd_invalidate)

    # --- analyze ---
    p_analyze = subparsers.add_parser(
        "analyze", help="Analyze a defect described in a JSON file",
    )
    p_analyze.add_argument("file", type=Path, help="Path to defect JSON")
    p_analyze.set_defaults(func=_cmd_analyze)

    # --- identify ---
    p_identify = subparsers.add_parser(
        "identify", help="Identify defect types in a photo",
    )
    p_identify.add_argument("file", type=Path, help="Path to photo")
    p_identify.add_argument(
        "--media-type", default="image/jpeg",
        help="Image media type (default: image/jpeg)",
    )
    p_identify.set_defaults(func=_cmd_identify)

    return parser


async def _cmd_caches(args: argparse.Namespace) -> int:
    """Print every cache record of the selected families."""
    from inspectcache.cache.cache_factory import create_cache_store
    from inspectcache.config.scopes import get_family
    from inspectcache.config.settings import Settings

    settings = Settings()
    families = [args.family] if args.family else _FAMILIES
    for name in families:
        family = get_family(name, settings)
        store = create_cache_store(family.collection, settings)
        records = await store.list_records()
        print(f"\n{family.name} ({len(records)} record(s)):")
        for record in records:
            print(f"  {record.scope}")
            print(f"    Handle:     {record.cache_handle}")
            print(f"    Documents:  {len(record.document_ids)}")
            print(f"    Characters: {record.character_count}")
            print(f"    Expires:    {record.expires_at.isoformat()}")
            print(f"    Usage:      {record.usage_count}")
    return 0


async def _cmd_invalidate(args: argparse.Namespace) -> int:
    """Drop one scope's cache record."""
    from inspectcache.cache.cache_factory import create_cache_store
    from inspectcache.cache.invalidation import invalidate
    from inspectcache.config.scopes import get_family
    from inspectcache.config.settings import Settings

    settings = Settings()
    family = get_family(args.family, settings)
    store = create_cache_store(family.collection, settings)
    deleted = await invalidate(store, args.scope)
    print("Invalidated" if deleted else "No cache to invalidate", args.scope)
    return 0


async def _cmd_analyze(args: argparse.Namespace) -> int:
    """Analyze one defect."""
    from inspectcache.api.facade import analyze_defect

    file_path: Path = args.file
    if not file_path.exists():
        logger.error("File not found: %s", file_path)
        return 1

    defect = json.loads(file_path.read_text(encoding="utf-8"))
    analysis = await analyze_defect(defect)
    print(json.dumps({
        "cacheHit": analysis.cache_hit,
        "cacheHandle": str(analysis.cache_handle),
        **analysis.result.model_dump(by_alias=True),
    }, indent=2))
    return 0


async def _cmd_identify(args: argparse.Namespace) -> int:
    """Identify defect types in one photo."""
    from inspectcache.api.facade import identify_photo

    file_path: Path = args.file
    if not file_path.exists():
        logger.error("File not found: %s", file_path)
        return 1

    identification = await identify_photo(
        file_path.read_bytes(), media_type=args.media_type
    )
    print(json.dumps({
        "cacheHit": identification.cache_hit,
        "cacheHandle": str(identification.cache_handle),
        "processingTime": round(identification.processing_time_s, 1),
        **identification.result.model_dump(by_alias=True),
    }, indent=2))
    return 0


def _setup_logging(verbose: bool) -> None:
    """Configure logging from settings; --verbose forces DEBUG."""
    from inspectcache.config.settings import load_settings
    from inspectcache.logging.logger import setup_logging

    settings = load_settings()
    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=settings.log_file,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )
    # Quiet noisy libraries
    logging.getLogger("botocore").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


if __name__ == "__main__":
    sys.exit(main())
