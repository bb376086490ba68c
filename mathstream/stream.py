"""Streaming message rendering and batch processing of saved sessions."""

import json
from collections.abc import Iterator
from pathlib import Path
from typing import Any, Optional

import ijson

from mathstream.core.models import Session
from mathstream.core.parser import process_session
from mathstream.exporters.html import HTMLExporter
from mathstream.progress import ProgressHandler
from mathstream.render import RenderConfig, render_message


class StreamClosedError(RuntimeError):
    """raised when a chunk arrives for a finished or aborted message."""


class StreamingMessage:
    """
    accumulates streamed chunks and re-renders the whole reply.

    Every render reprocesses the full text so far, so cost grows with the
    reply; render_every > 1 batches chunks between renders.
    """

    def __init__(self, config: RenderConfig, render_every: int = 1) -> None:
        if render_every < 1:
            raise ValueError("render_every must be at least 1")
        self.config = config
        self.render_every = render_every
        self.text = ""
        self.html = ""
        self.closed = False
        self._pending = 0

    def append(self, chunk: str) -> Optional[str]:
        """
        adds a chunk and renders if the batch is full.

        Args:
            chunk: text fragment from the provider

        Returns:
            rendered HTML of the text so far, or None if the render was batched

        Raises:
            StreamClosedError: if the message was finished or aborted
        """
        if self.closed:
            raise StreamClosedError("message stream is closed")

        self.text += chunk if isinstance(chunk, str) else ""
        self._pending += 1
        if self._pending < self.render_every:
            return None

        self._pending = 0
        self.html = render_message(self.text, self.config)
        return self.html

    def finish(self) -> str:
        """renders the final text and closes the message."""
        if self.closed:
            raise StreamClosedError("message stream is closed")

        self.closed = True
        self._pending = 0
        self.html = render_message(self.text, self.config)
        return self.html

    def abort(self) -> None:
        """discards the accumulated text and closes the message."""
        self.closed = True
        self.text = ""
        self.html = ""
        self._pending = 0


def replay_chunks(
    path: Path, config: RenderConfig, render_every: int = 1
) -> tuple[str, int]:
    """
    replays a captured chunk stream through a StreamingMessage.

    Args:
        path: JSON file of the form {"chunks": ["...", ...]}
        config: render configuration
        render_every: chunks per intermediate render

    Returns:
        tuple of (final HTML, number of chunks replayed)
    """
    message = StreamingMessage(config, render_every=render_every)
    count = 0
    with open(path, "rb") as f:
        for chunk in ijson.items(f, "chunks.item"):
            message.append(chunk if isinstance(chunk, str) else "")
            count += 1
    return message.finish(), count


def discover_files(source: Path) -> list[Path]:
    """
    discovers session JSON files from source path.

    Args:
        source: path to JSON file or directory

    Returns:
        list of paths to JSON files

    Raises:
        FileNotFoundError: if source doesn't exist
    """
    if not source.exists():
        raise FileNotFoundError(f"Source not found: {source}")

    if source.is_file():
        return [source] if source.suffix == ".json" else []

    if source.is_dir():
        return sorted(source.glob("*.json"))

    return []


def iter_sessions(file_path: Path) -> Iterator[Session]:
    """
    yields sessions from a file holding one session dict or a list of them.

    list files are stream-parsed so large exports are not loaded at once.
    """
    with open(file_path, "rb") as f:
        first_char = _peek_first_char(f)
        f.seek(0)

        if first_char == ord("{"):
            yield process_session(json.load(f))
        elif first_char == ord("["):
            for item in ijson.items(f, "item"):
                if isinstance(item, dict):
                    yield process_session(item)


def _peek_first_char(f: Any) -> int:
    """returns first non-whitespace byte from file."""
    while True:
        char = f.read(1)
        if not char:
            return 0
        if not char.isspace():
            return int(char[0])


def export_sessions(
    source: Path,
    destination: Path,
    config: RenderConfig,
    dry_run: bool = False,
    overwrite: bool = False,
    quiet: bool = False,
    progress: bool = False,
) -> int:
    """
    renders saved sessions to standalone HTML files.

    Args:
        source: path to JSON file or directory
        destination: output directory
        config: render configuration
        dry_run: if True, don't write files
        overwrite: if True, replace existing files
        quiet: if True, suppress non-error output
        progress: if True, show progress bar

    Returns:
        exit code (0 success, 1 partial failure)
    """
    with ProgressHandler(quiet=quiet, show_progress=progress) as handler:
        handler.start_discovery()

        files = discover_files(source)
        if not files:
            handler.log_info(f"No JSON files found in {source}")
            return 0

        handler.log_info(f"Found {len(files)} session file(s) to process")
        handler.set_total(len(files))

        exporter = HTMLExporter(config)
        processed = 0
        failed = 0

        for file_path in files:
            try:
                count = 0
                for session in iter_sessions(file_path):
                    if count:
                        handler.adjust_total(1)
                    count += 1
                    handler.update(session.title)
                    exporter.export(
                        session, str(destination), dry_run=dry_run, overwrite=overwrite
                    )
                    processed += 1
                if not count:
                    handler.update(file_path.name)
            except Exception as e:  # pylint: disable=broad-exception-caught
                handler.log_error(f"Failed: {file_path.name}: {e}")
                handler.update(file_path.name)
                failed += 1

        handler.finish(processed, failed)

        if failed > 0:
            return 1
        return 0
