"""
Command-Line Interface for BookTheme
====================================

Usage:
    booktheme <command> BOOKS SONGS [options]

Commands:
    match       Best theme song (or top N) for one book
    assign      Unique theme song for every book
    lookup      Rescore a book's song from a saved assignment mapping

Options:
    --book          Book id (match, lookup)
    --num, -n       Number of matches to list (match)
    --top           List the top matches, BOOKTHEME_TOP_N of them by default (match)
    --output, -o    Write the book id -> song id mapping to a file (assign)
    --format        Output format: json or simple (default: json)
    --range-policy  passthrough, clamp or reject out-of-range values
    --verbose, -v   Verbose logging

Examples:
    booktheme match data/books.json data/songs.json --book norwegian-wood
    booktheme match data/books.json data/songs.json --book norwegian-wood -n 5
    booktheme match data/books.json data/songs.json --book norwegian-wood --top
    booktheme assign data/books.json data/songs.json -o bookSongMapping.json
    booktheme lookup data/books.json data/songs.json bookSongMapping.json --book norwegian-wood
"""

import argparse
import json
import logging
import sys
import traceback
from typing import Dict, List, Optional

from .catalog import find_by_id, index_by_id, load_books, load_mapping, load_songs, save_mapping
from .config import OUTPUT_FORMATS, RANGE_POLICIES, EngineConfig
from .exceptions import BookThemeError
from .explainer import explain_match
from .features import Book
from .matcher import MatchEngine, MatchResult, assignment_to_mapping
from .utils import configure_logging

logger = logging.getLogger(__name__)


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI."""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument('books', type=str, help='Path to the books JSON file')
    common.add_argument('songs', type=str, help='Path to the songs JSON file')
    common.add_argument(
        '--format',
        type=str,
        choices=OUTPUT_FORMATS,
        default='json',
        help='Output format (default: json)'
    )
    common.add_argument(
        '--range-policy',
        type=str,
        choices=RANGE_POLICIES,
        default=None,
        help='Handling of mood/audio values outside [0, 1] (default: passthrough)'
    )
    common.add_argument(
        '--penalty-floor',
        type=float,
        default=None,
        help='Cap the summed penalty at this value, e.g. -0.15 (default: uncapped)'
    )
    common.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable verbose output'
    )

    parser = argparse.ArgumentParser(
        prog='booktheme',
        description='📚🎵 BookTheme - Theme songs for books, matched by vibe',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment Variables:
  BOOKTHEME_RANGE_POLICY   passthrough, clamp or reject
  BOOKTHEME_PENALTY_FLOOR  lower bound for the summed penalty
  BOOKTHEME_TOP_N          number of matches listed by --top (default: 5)
        """
    )
    subparsers = parser.add_subparsers(dest='command', required=True)

    match_parser = subparsers.add_parser('match', parents=[common], help='Best theme song for one book')
    match_parser.add_argument('--book', type=str, required=True, help='Book id')
    match_parser.add_argument(
        '-n', '--num',
        type=int,
        default=None,
        help='List the top N matches instead of the single best one'
    )
    match_parser.add_argument(
        '--top',
        action='store_true',
        help='List the top matches (count from BOOKTHEME_TOP_N unless -n is given)'
    )

    assign_parser = subparsers.add_parser('assign', parents=[common], help='Unique theme song for every book')
    assign_parser.add_argument(
        '-o', '--output',
        type=str,
        default=None,
        help='Write the book id -> song id mapping to this file'
    )

    lookup_parser = subparsers.add_parser('lookup', parents=[common], help='Rescore a saved assignment')
    lookup_parser.add_argument('mapping', type=str, help='Path to the book id -> song id mapping')
    lookup_parser.add_argument('--book', type=str, required=True, help='Book id')

    return parser


def format_result(book: Book, result: MatchResult, fmt: str) -> str:
    """Format a single match."""
    if fmt == 'simple':
        return f"📖 {book.title or book.id}\n🎵 {explain_match(book, result)}"

    data = result.to_dict()
    data["book_id"] = book.id
    return json.dumps(data, indent=2)


def format_results(book: Book, results: List[MatchResult], fmt: str) -> str:
    """Format a ranked list of matches for one book."""
    if fmt == 'simple':
        lines = [
            f"📖 Top {len(results)} theme songs for: {book.title or book.id}",
            "-" * 50,
        ]
        for i, result in enumerate(results, 1):
            song = result.song
            lines.append(f"{i:2}. {song.title}" + (f" - {song.artist}" if song.artist else ""))
            lines.append(f"    Score: {result.total_score:.4f} ({result.compatibility}%)")
            for factor in result.top_factors:
                lines.append(f"    Why: {factor.description}")
            lines.append(f"    Song ID: {song.id}")
            lines.append("")
        return '\n'.join(lines)

    return json.dumps(
        {"book_id": book.id, "matches": [r.to_dict() for r in results]},
        indent=2,
    )


def format_assignments(
    books: Dict[str, Book],
    assignments: Dict[str, MatchResult],
    fmt: str
) -> str:
    """Format a full unique assignment."""
    if fmt == 'simple':
        lines = [f"📚 Assigned {len(assignments)} of {len(books)} books", "-" * 50]
        for book_id, result in assignments.items():
            book = books[book_id]
            lines.append(
                f"{book.title or book_id}  ->  {result.song.title or result.song.id}"
                f"  ({result.compatibility}%)"
            )
        return '\n'.join(lines)

    return json.dumps(
        {book_id: result.to_dict() for book_id, result in assignments.items()},
        indent=2,
    )


def run(args: argparse.Namespace) -> str:
    """Execute a parsed command and return its formatted output."""
    config = EngineConfig.from_env(
        range_policy=args.range_policy,
        penalty_floor=args.penalty_floor,
    )
    engine = MatchEngine(config)

    books = load_books(args.books)
    songs = load_songs(args.songs)
    logger.info("Loaded %d books and %d songs", len(books), len(songs))

    if args.command == 'match':
        book = find_by_id(books, args.book)
        if args.top or args.num is not None:
            return format_results(book, engine.find_top_matches(book, songs, args.num), args.format)
        return format_result(book, engine.find_best_match(book, songs), args.format)

    if args.command == 'assign':
        book_index = index_by_id(books)
        index_by_id(songs)
        assignments = engine.assign_unique(books, songs)
        if args.output:
            save_mapping(assignment_to_mapping(assignments), args.output)
        return format_assignments(book_index, assignments, args.format)

    # lookup
    book = find_by_id(books, args.book)
    mapping = load_mapping(args.mapping)
    return format_result(book, engine.lookup_assigned(book, songs, mapping), args.format)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    configure_logging(args.verbose)

    try:
        output = run(args)
    except (BookThemeError, OSError, ValueError) as e:
        print(f"❌ Error: {e}", file=sys.stderr)
        if args.verbose:
            traceback.print_exc()
        return 1

    print(output)
    if args.command == 'assign' and args.output:
        print(f"✅ Mapping saved to: {args.output}", file=sys.stderr)

    return 0


if __name__ == '__main__':
    sys.exit(main())
