"""
Open an LCS experiment log in the viewer.
Run: python view_log.py logs/example.log
"""

import argparse
import logging
import sys

from lcsview.app import create_app
from lcsview.config import ViewerConfig, load_config
from lcsview.errors import LogViewerError
from lcsview.importers import IMPORTERS
from lcsview.timeline_store import TimelineStore


def build_parser():
    parser = argparse.ArgumentParser(description="View LCS experiment logs")
    parser.add_argument("log", nargs="?", help="Log file to open on startup")
    parser.add_argument("--config", help="JSON file with viewer settings")
    parser.add_argument("--format", choices=sorted(IMPORTERS),
                        help="Log format (overrides the config file)")
    parser.add_argument("--columns",
                        help="Comma-separated column names (overrides the config file)")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8050)
    parser.add_argument("--debug", action="store_true")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser


def build_config(args) -> ViewerConfig:
    config = load_config(args.config) if args.config else ViewerConfig()
    if args.format:
        config.importer = args.format
    if args.columns:
        config.column_names = tuple(c.strip() for c in args.columns.split(",")
                                    if c.strip())
    return config.validate()


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    try:
        config = build_config(args)
    except (LogViewerError, OSError) as e:
        print(f"❌ {e}", file=sys.stderr)
        return 2

    store = TimelineStore(args.log, config)
    if args.log:
        try:
            store.load()
        except LogViewerError as e:
            print(f"❌ {e}", file=sys.stderr)
            return 1

    app = create_app(store, config)
    print("📜 LCS Log Viewer starting...")
    if args.log:
        print(f"   {store.num_snapshots} iterations from {args.log}")
    print(f"   Open http://{args.host}:{args.port} in your browser")
    app.run(debug=args.debug, host=args.host, port=args.port)
    return 0


if __name__ == "__main__":
    sys.exit(main())
