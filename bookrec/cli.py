"""
bookrec command line

Run the recommendation engine against JSON fixtures.

Examples:
    python -m bookrec recommend --library library.json --catalog catalog.json
    python -m bookrec recommend --library library.json --catalog catalog.json --seed 7 --limit 20 --json
    python -m bookrec explain --library library.json --catalog catalog.json 9780261103344
"""

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, List, Optional

import numpy as np

from .controller import RecommendationController
from .models.book import ensure_interacted_books
from .models.config import RecommendationConfig
from .services.catalog_loader import CatalogLoader, StaticCatalog
from .services.library_store import UserLibrary
from .settings import Settings, get_settings
from .stages.orchestrator import select_valid_interacted_books
from .stages.similarity import score_candidate
from .utils.normalize import normalize_isbn

logger = logging.getLogger("bookrec")


def _load_library(path: Path) -> Dict[str, Dict[str, Any]]:
    """Library file: isbn -> entry mapping, or a list of entries with an isbn."""
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        return data
    if isinstance(data, list):
        return {str(e["isbn"]): e for e in data if isinstance(e, dict) and e.get("isbn")}
    raise ValueError(f"Library {path} must be an object or a list of entries")


def _build_config(settings: Settings, args: argparse.Namespace) -> RecommendationConfig:
    config = settings.build_config()
    overrides = {}
    if args.batch_size is not None:
        overrides["batch_size"] = args.batch_size
    if args.min_score is not None:
        overrides["min_score_threshold"] = args.min_score
    if overrides:
        config = RecommendationConfig.model_validate(config.model_dump() | overrides)
    return config


def _catalog_path(settings: Settings, args: argparse.Namespace) -> Path:
    path = args.catalog or settings.catalog_path
    if path is None:
        raise ValueError("No catalog given: pass --catalog or set BOOKREC_CATALOG_PATH")
    return Path(path)


def _format_row(score: float, isbn: str, title: str, reason: str) -> str:
    return f"{score:6.2f}  {isbn:<16}  {title[:48]:<48}  {reason}"


def cmd_recommend(args: argparse.Namespace, settings: Settings) -> int:
    config = _build_config(settings, args)
    library = UserLibrary(_load_library(args.library), config=config)
    catalog = StaticCatalog.from_file(_catalog_path(settings, args))
    seed = args.seed if args.seed is not None else settings.seed
    rng = np.random.default_rng(seed)

    with RecommendationController(library, catalog, config=config, rng=rng) as controller:
        recommendations = list(controller.recommendations)
        logger.debug("interaction hash: %s", controller.interaction_hash)
        error = controller.snapshot.last_error

    if error:
        print(f"Recommendation pass failed: {error}", file=sys.stderr)
    if args.limit is not None:
        recommendations = recommendations[: args.limit]

    if args.json:
        payload = [
            {
                "isbn": r.isbn,
                "title": r.title,
                "score": r.score,
                "reasons": [reason.message for reason in r.reasons],
            }
            for r in recommendations
        ]
        print(json.dumps(payload, indent=2, ensure_ascii=False))
        return 0

    if not recommendations:
        print("No recommendations available at this time.")
        return 0
    for r in recommendations:
        first_reason = r.reasons[0].message if r.reasons else ""
        print(_format_row(r.score, r.isbn, r.title, first_reason))
    return 0


def cmd_explain(args: argparse.Namespace, settings: Settings) -> int:
    config = _build_config(settings, args)
    raw_library = _load_library(args.library)
    catalog = CatalogLoader(_catalog_path(settings, args)).load()

    book = catalog.get_book(args.isbn)
    if book is None:
        print(f"ISBN {args.isbn} not found in catalog", file=sys.stderr)
        return 1

    owned = {normalize_isbn(b.isbn) for b in ensure_interacted_books(raw_library)}
    owned.update(normalize_isbn(k) for k in raw_library)
    if normalize_isbn(book.isbn) in owned:
        print(f"{book.title} ({book.isbn}) is already in your library and is never recommended.")
        return 0

    interacted = select_valid_interacted_books(raw_library, config)
    result = score_candidate(interacted, book, config)
    verdict = "recommendable" if result.score >= config.min_score_threshold else "below threshold"
    print(f"{book.title} ({book.isbn})")
    print(f"  score: {result.score:.2f} ({verdict}, threshold {config.min_score_threshold:g})")
    for reason in result.reasons:
        print(f"  - {reason.message}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bookrec",
        description="Personalized book recommendations from a user library and a catalog",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__.split("Examples:", 1)[1],
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (default: BOOKREC_LOG_LEVEL or INFO)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--library", "-l", type=Path, required=True, help="Path to the user library JSON")
    common.add_argument("--catalog", "-c", type=Path, default=None, help="Path to the catalog JSON")
    common.add_argument("--batch-size", type=int, default=None, help="Max books in the batch")
    common.add_argument("--min-score", type=float, default=None, help="Relevance threshold")

    rec = subparsers.add_parser("recommend", parents=[common], help="Print a recommendation batch")
    rec.add_argument("--seed", type=int, default=None, help="RNG seed for reproducible shuffles")
    rec.add_argument("--limit", type=int, default=None, help="Only print the first N books")
    rec.add_argument("--json", action="store_true", help="Print JSON instead of a table")
    rec.set_defaults(handler=cmd_recommend)

    exp = subparsers.add_parser("explain", parents=[common], help="Score one catalog book and list its reasons")
    exp.add_argument("isbn", help="ISBN of the catalog book")
    exp.set_defaults(handler=cmd_explain)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = get_settings()
        if args.log_level:
            settings = replace(settings, log_level=args.log_level.strip().upper())
        ok, errors = settings.validate()
        if not ok:
            for error in errors:
                print(f"error: {error}", file=sys.stderr)
            return 2

        logging.basicConfig(
            level=settings.log_level,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
        return args.handler(args, settings)
    except (OSError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
