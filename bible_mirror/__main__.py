"""Entry point for bible-mirror."""

import argparse
import logging
from pathlib import Path
from typing import List, Optional

from textual.logging import TextualHandler

from bible_mirror.config import get_config


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="bible-mirror",
        description="Bilingual Bible reader with synchronized display surfaces.",
    )
    parser.add_argument(
        "mode",
        nargs="?",
        choices=("read", "display"),
        default="read",
        help="read: the reader (default); display: a surface following a reader "
        "running in another terminal",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to config.json (default: ~/.config/bible-mirror/config.json)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level, e.g. DEBUG (default: from config)",
    )
    return parser.parse_args(argv)


def setup_logging(level: str) -> None:
    """Route log records to the Textual devtools console."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        handlers=[TextualHandler()],
    )


def main(argv: Optional[List[str]] = None) -> None:
    """Run the bible-mirror application."""
    args = parse_args(argv)
    config = get_config(args.config)
    setup_logging(args.log_level or config.log_level)

    # Imported here so logging is configured before the apps load
    from bible_mirror.app import DisplayApp, ReaderApp

    if args.mode == "display":
        app = DisplayApp(config)
    else:
        app = ReaderApp(config)
    app.run()


if __name__ == "__main__":
    main()
