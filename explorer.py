#!/usr/bin/env python3
"""Book Graph Explorer CLI - query and mutate the in-memory book graph."""
import argparse
import sys
import json
from tabulate import tabulate
from bookgraph.config import Config
from bookgraph.errors import BookGraphError
from bookgraph.parse import parse_request, parse_selection
from bookgraph.service import GraphService
import logging

logger = logging.getLogger(__name__)


def configure_logging(level: str):
    """Configure root logging for the CLI."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(levelname)s - %(message)s'
    )


def _cell(value):
    """Flatten a nested result value for a table cell."""
    if isinstance(value, list):
        return ", ".join(str(_cell(item)) for item in value) or "-"
    if isinstance(value, dict):
        return value.get("title") or value.get("id") or json.dumps(value)
    if value is None:
        return "N/A"
    return value


def display_result(result, format_type: str):
    """Display a query result in specified format."""
    if format_type == "json":
        print(json.dumps(result, indent=2))
        return

    if result is None:
        print("null")
        return

    rows = result if isinstance(result, list) else [result]

    if format_type == "table":
        if not rows:
            print("(no results)")
            return
        headers = list(rows[0].keys())
        table = [[_cell(row.get(header)) for header in headers] for row in rows]
        print("\n" + tabulate(table, headers=headers, tablefmt="grid"))

    elif format_type == "compact":
        for i, row in enumerate(rows, 1):
            label = row.get("title") or row.get("content") or ""
            print(f"{i}. [{row.get('id', '?')}] {label}")


def _fields(args):
    if not args.fields:
        return None
    return parse_selection(json.loads(args.fields))


def list_books(service: GraphService, args):
    display_result(service.books(_fields(args)), args.format)


def list_reviews(service: GraphService, args):
    display_result(service.reviews(_fields(args)), args.format)


def show_book(service: GraphService, args):
    book = service.book(args.id, _fields(args))
    if book is None:
        logger.info(f"No book with id {args.id}")
    display_result(book, args.format)


def delete_book(service: GraphService, args):
    deleted = service.delete_book(args.id, _fields(args))
    if deleted is None:
        logger.info(f"Nothing deleted: no book with id {args.id}")
    else:
        logger.info(f"✅ Deleted book {args.id}")
    display_result(deleted, args.format)


def add_review(service: GraphService, args):
    review = service.add_review(args.rating, args.content, args.book_id, _fields(args))
    logger.info(f"✅ Added review {review.get('id', '')}")
    display_result(review, args.format)


def run_requests(service: GraphService, args):
    """Execute a JSON list of requests in order against one store."""
    with open(args.file, encoding="utf-8") as f:
        payload = json.load(f)

    if isinstance(payload, dict):
        payload = [payload]

    for data in payload:
        request = parse_request(data)
        print(json.dumps(service.execute(request), indent=2))


def show_stats(service: GraphService, args):
    """Show store statistics."""
    stats = service.stats()

    print("\n" + "=" * 50)
    print("STORE STATISTICS")
    print("=" * 50)
    print(f"Total books: {stats['total_books']}")
    print(f"Total reviews: {stats['total_reviews']}")
    print(f"Dangling reviews: {stats['dangling_reviews']}")
    print("=" * 50 + "\n")


def export_data(service: GraphService, args):
    """Export the store as a seed file."""
    data = service.snapshot()

    if args.output:
        with open(args.output, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2)
        logger.info(f"✅ Exported {len(data['books'])} books and {len(data['reviews'])} reviews to {args.output}")
    else:
        print(json.dumps(data, indent=2))


COMMANDS = {
    "books": list_books,
    "reviews": list_reviews,
    "book": show_book,
    "delete-book": delete_book,
    "add-review": add_review,
    "run": run_requests,
    "stats": show_stats,
    "export": export_data,
}


def build_parser(config: Config) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Book Graph Explorer - in-memory book and review graph",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # List books with their reviews
  %(prog)s books

  # Pick fields
  %(prog)s book 1 --fields '["title", {"reviews": ["rating"]}]'

  # Run several requests against one store
  %(prog)s run requests.json

  # Start from a custom catalogue
  %(prog)s --seed catalogue.json stats
        """
    )
    parser.add_argument("--seed", help="JSON seed file (default: SEED_FILE or built-in data)")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    def add_output_options(sub):
        sub.add_argument("--fields", help="JSON selection set, e.g. '[\"id\", {\"reviews\": [\"id\"]}]'")
        sub.add_argument("--format", choices=["table", "json", "compact"],
                         default=config.DEFAULT_FORMAT, help="Output format")

    add_output_options(subparsers.add_parser("books", help="List all books"))
    add_output_options(subparsers.add_parser("reviews", help="List all reviews"))

    book_parser = subparsers.add_parser("book", help="Show one book")
    book_parser.add_argument("id", help="Book ID")
    add_output_options(book_parser)

    delete_parser = subparsers.add_parser("delete-book", help="Delete a book")
    delete_parser.add_argument("id", help="Book ID")
    add_output_options(delete_parser)

    review_parser = subparsers.add_parser("add-review", help="Add a review")
    review_parser.add_argument("--rating", type=int, required=True, help="Rating")
    review_parser.add_argument("--content", required=True, help="Review text")
    review_parser.add_argument("--book-id", required=True, help="Reviewed book ID")
    add_output_options(review_parser)

    run_parser = subparsers.add_parser("run", help="Execute requests from a JSON file")
    run_parser.add_argument("file", help="JSON request or list of requests")

    subparsers.add_parser("stats", help="Show store statistics")

    export_parser = subparsers.add_parser("export", help="Export the store as JSON")
    export_parser.add_argument("--output", help="Output file (default: stdout)")

    return parser


def main(argv=None):
    """Main CLI entry point."""
    config = Config()
    configure_logging(config.LOG_LEVEL)

    parser = build_parser(config)
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        with GraphService.from_config(config, seed_file=args.seed) as service:
            COMMANDS[args.command](service, args)

    except KeyboardInterrupt:
        logger.info("\n⚠️  Interrupted by user")
        sys.exit(0)
    except (BookGraphError, json.JSONDecodeError, OSError) as e:
        logger.error(f"❌ Error: {e}")
        sys.exit(1)
    except Exception as e:
        logger.error(f"❌ Error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
