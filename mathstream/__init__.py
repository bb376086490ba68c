"""Safe markdown and math rendering for streamed LLM replies."""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from mathstream.progress import ProgressHandler
from mathstream.render import RenderConfig, render_message
from mathstream.stream import export_sessions, replay_chunks

logger = logging.getLogger(__name__)

DEFAULT_EXPORT_DIR = "mathstream-export"


def main(argv: Optional[list[str]] = None) -> int:
    """
    main entry point for mathstream CLI.

    Args:
        argv: command line arguments (defaults to sys.argv[1:])

    Returns:
        exit code (0 success, 1 partial failure, 2 fatal error)
    """
    parser = argparse.ArgumentParser(
        description="Render LLM replies (markdown with LaTeX) to sanitized HTML"
    )
    parser.add_argument(
        "source",
        help="markdown file, session JSON file or directory, or chunk capture",
    )
    parser.add_argument(
        "dest",
        nargs="?",
        default=None,
        help=(
            "output file for markdown/replay (default: stdout), or output "
            f"directory for sessions (default: {DEFAULT_EXPORT_DIR})"
        ),
    )
    parser.add_argument(
        "--replay",
        action="store_true",
        help='treat source as a {"chunks": [...]} stream capture',
    )
    parser.add_argument(
        "--render-every",
        type=int,
        default=1,
        help="chunks per intermediate render when replaying (default: 1)",
    )
    parser.add_argument(
        "--no-auto-wrap",
        action="store_true",
        help="don't wrap bare LaTeX such as f(\\alpha) in math delimiters",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="process sessions but don't write files",
    )
    parser.add_argument(
        "--overwrite",
        action="store_true",
        help="replace existing output files",
    )
    parser.add_argument(
        "--progress",
        action="store_true",
        help="show progress bar",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="suppress non-error output",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="enable debug logging",
    )

    args = parser.parse_args(argv)

    # configures logging
    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="[%(levelname)s] %(message)s",
    )

    # validates source path exists
    source_path = Path(args.source)
    if not source_path.exists():
        logger.error("Source not found: %s", args.source)
        return 2

    try:
        config = RenderConfig.default(auto_wrap=not args.no_auto_wrap)

        if args.replay:
            with ProgressHandler(quiet=args.quiet, show_progress=args.progress) as handler:
                handler.start_replay(source_path.name)
                html, count = replay_chunks(
                    source_path, config, render_every=args.render_every
                )
            logger.debug("Replayed %d chunk(s)", count)
            return _write_output(html, args.dest)

        if source_path.is_dir() or source_path.suffix == ".json":
            return export_sessions(
                source=source_path,
                destination=Path(args.dest or DEFAULT_EXPORT_DIR),
                config=config,
                dry_run=args.dry_run,
                overwrite=args.overwrite,
                quiet=args.quiet,
                progress=args.progress,
            )

        text = source_path.read_text(encoding="utf-8")
        return _write_output(render_message(text, config), args.dest)
    except Exception as e:  # pylint: disable=broad-exception-caught
        logger.error("Fatal error: %s", e)
        return 2


def _write_output(html: str, dest: Optional[str]) -> int:
    """writes rendered HTML to dest, or stdout if dest is None."""
    if dest is None:
        sys.stdout.write(html)
        return 0

    output_path = Path(dest)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(html, encoding="utf-8")
    return 0
