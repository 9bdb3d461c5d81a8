"""CLI entry point."""

import argparse
import os
import sys

from .config import load_config
from .errors import InputError, ItemNotFoundError
from .exporter import collection_filename, filter_sentinels, record_filename, to_json, write_json
from .fetcher import Fetcher
from .logger import setup_logger
from .sources import ALL_SOURCES
from .store import CollectionStore


def run_source(config, store, source_name, inputs, add=False, provider=None):
    """Scrape a batch of inputs and optionally add the results to the collection."""
    fetcher = Fetcher(config.fetch)
    try:
        source = ALL_SOURCES[source_name](config, fetcher=fetcher, provider=provider)
        result = source.run(inputs)
    finally:
        fetcher.close()

    for label, record in result.records:
        data = record.to_dict()
        if add:
            item = store.add(record)
            data = item.to_dict()
        print(f"--- {label}")
        print(to_json(data))

    for label, message in result.errors:
        print(f"  {label}: FAILED: {message}", file=sys.stderr)

    print(f"\n{result.success_count} processed, {result.error_count} failed.")
    if add and result.success_count:
        print(f"{result.success_count} item(s) added to your collection.")
    return 1 if result.errors and not result.records else 0


def show_items(store):
    """Display the collected items."""
    items = store.list_items()
    print("\n" + "=" * 78)
    print(f"  COLLECTION ({len(items)} items)")
    print("=" * 78)
    print(f"{'ID':<34} {'Title':<26} {'Pub. Date/Year':<16}")
    print("-" * 78)
    for item in items:
        r = item.record
        print(f"{item.id:<34} {r.title[:25]:<26} {r.publication_date[:15]:<16}")
    print()


def export_collection(config, store, out_dir=None, skip_missing=False):
    items = store.export_all()
    if skip_missing:
        items = [filter_sentinels(i) for i in items]
    path = write_json(items, out_dir or config.collection.export_dir, collection_filename())
    print(f"All {len(items)} items exported to {path} and collection cleared.")


def export_item(config, store, item_id, out_dir=None, skip_missing=False):
    item = store.get(item_id)
    data = item.record.to_dict()
    if skip_missing:
        data = filter_sentinels(data)
    path = write_json(data, out_dir or config.collection.export_dir,
                      record_filename(item.record.title))
    print(f"Downloaded data for {item.record.title!r} to {path}.")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Book metadata scraper and JSON exporter")
    parser.add_argument("--config", type=str,
                        default=os.environ.get("BOOK_SCRAPER_CONFIG", "config.yaml"),
                        help="Path to config file")
    sub = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (("url", "Scrape live product page URLs"),
                            ("file", "Scrape saved .html/.htm files"),
                            ("image", "Read book cover photos with a vision model")):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("inputs", nargs="+")
        p.add_argument("--add", action="store_true", help="Add results to the collection")
        if name == "image":
            p.add_argument("--provider", choices=["anthropic", "openai"], default=None,
                           help="Vision provider (defaults to the config value)")

    sub.add_parser("list", help="Show the collected items")

    p = sub.add_parser("remove", help="Remove an item from the collection")
    p.add_argument("item_id")

    for name, help_text in (("export", "Export the whole collection and clear it"),
                            ("export-item", "Export one collected item")):
        p = sub.add_parser(name, help=help_text)
        if name == "export-item":
            p.add_argument("item_id")
        p.add_argument("--out", type=str, default=None, help="Output directory")
        p.add_argument("--skip-missing", action="store_true",
                       help="Write empty strings instead of 'not found' values")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    config = load_config(args.config)
    setup_logger(config.log_dir)
    store = CollectionStore(config.db_path, config.collection.namespace)

    try:
        if args.command in ALL_SOURCES:
            return run_source(config, store, args.command, args.inputs, add=args.add,
                              provider=getattr(args, "provider", None))
        if args.command == "list":
            show_items(store)
        elif args.command == "remove":
            item = store.remove(args.item_id)
            print(f"{item.record.title!r} removed from collection.")
        elif args.command == "export":
            export_collection(config, store, args.out, args.skip_missing)
        elif args.command == "export-item":
            export_item(config, store, args.item_id, args.out, args.skip_missing)
    except (InputError, ItemNotFoundError) as e:
        print(str(e), file=sys.stderr)
        return 1
    finally:
        store.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
