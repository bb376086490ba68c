"""tests for streaming renders and session batch export."""

import json
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from mathstream.render import RenderConfig
from mathstream.stream import (
    StreamClosedError,
    StreamingMessage,
    discover_files,
    export_sessions,
    iter_sessions,
    replay_chunks,
)


def _config() -> RenderConfig:
    markdown = MagicMock()
    markdown.parse.side_effect = lambda text: f"<p>{text}</p>"
    engine = MagicMock()
    engine.render_to_string.side_effect = lambda latex, _options: f"<math>{latex}</math>"
    sanitizer = MagicMock()
    sanitizer.sanitize.side_effect = lambda html, **_kwargs: html
    return RenderConfig(markdown=markdown, math_engine=engine, sanitizer=sanitizer)


def _session(session_id: str, title: str) -> dict[str, object]:
    return {
        "id": session_id,
        "title": title,
        "createdAt": "2024-01-01T00:00:00Z",
        "updatedAt": "2024-01-02T00:00:00Z",
        "messages": [
            {"id": "m1", "type": "user", "text": "What is $x$?"},
            {"id": "m2", "type": "ai", "text": "It is $x = 1$."},
        ],
    }


def test_append_renders_accumulated_text() -> None:
    """re-renders the whole text so far on each chunk."""
    message = StreamingMessage(_config())
    assert message.append("Value: $x") == "<p>Value: $x</p>"
    assert message.append("^2$") == "<p>Value: <math>x^2</math></p>"
    assert message.text == "Value: $x^2$"


def test_partial_math_never_raises() -> None:
    """renders truncated math mid-stream as text."""
    message = StreamingMessage(_config())
    html = message.append("Start \\(\\frac{1}{")
    assert html
    assert "\\frac{1}{" in html


def test_render_every_batches_chunks() -> None:
    """skips intermediate renders until the batch fills."""
    config = _config()
    message = StreamingMessage(config, render_every=3)
    assert message.append("a") is None
    assert message.append("b") is None
    assert message.append("c") == "<p>abc</p>"
    assert config.markdown.parse.call_count == 1  # type: ignore[union-attr]


def test_render_every_must_be_positive() -> None:
    """rejects batch sizes below one."""
    with pytest.raises(ValueError):
        StreamingMessage(_config(), render_every=0)


def test_finish_renders_final_text_and_closes() -> None:
    """renders pending text on finish and rejects later chunks."""
    message = StreamingMessage(_config(), render_every=10)
    message.append("done")
    assert message.finish() == "<p>done</p>"
    with pytest.raises(StreamClosedError):
        message.append("more")
    with pytest.raises(StreamClosedError):
        message.finish()


def test_abort_discards_text() -> None:
    """drops accumulated text on abort."""
    message = StreamingMessage(_config())
    message.append("partial")
    message.abort()
    assert message.text == ""
    assert message.html == ""
    with pytest.raises(StreamClosedError):
        message.append("x")


def test_replay_chunks(tmp_path: Path) -> None:
    """replays a chunk capture into the final HTML."""
    capture = tmp_path / "capture.json"
    capture.write_text(
        json.dumps({"chunks": ["Area ", "is \\(", "\\pi r^2", "\\)"]}), encoding="utf-8"
    )
    html, count = replay_chunks(capture, _config())
    assert count == 4
    assert html == "<p>Area is <math>\\pi r^2</math></p>"


def test_discover_single_json_file(tmp_path: Path) -> None:
    """discovers a single JSON file."""
    json_file = tmp_path / "session.json"
    json_file.write_text("{}", encoding="utf-8")
    assert discover_files(json_file) == [json_file]


def test_discover_directory_of_json_files(tmp_path: Path) -> None:
    """discovers all JSON files in a directory."""
    (tmp_path / "a.json").write_text("{}", encoding="utf-8")
    (tmp_path / "b.json").write_text("{}", encoding="utf-8")
    (tmp_path / "readme.txt").write_text("ignore me", encoding="utf-8")
    files = discover_files(tmp_path)
    assert [f.name for f in files] == ["a.json", "b.json"]


def test_discover_nonexistent_path_raises_error() -> None:
    """raises FileNotFoundError for nonexistent path."""
    with pytest.raises(FileNotFoundError):
        discover_files(Path("/nonexistent/path"))


def test_iter_sessions_from_dict_and_list(tmp_path: Path) -> None:
    """reads single-session files and streamed session lists."""
    single = tmp_path / "single.json"
    single.write_text(json.dumps(_session("s1", "One")), encoding="utf-8")
    many = tmp_path / "many.json"
    many.write_text(
        json.dumps([_session("s2", "Two"), _session("s3", "Three")]), encoding="utf-8"
    )

    assert [s.id for s in iter_sessions(single)] == ["s1"]
    assert [s.title for s in iter_sessions(many)] == ["Two", "Three"]


def test_export_sessions_writes_html(tmp_path: Path) -> None:
    """exports every session to an HTML file."""
    source = tmp_path / "sessions"
    source.mkdir()
    (source / "a.json").write_text(json.dumps(_session("s1", "Alpha")), encoding="utf-8")
    (source / "b.json").write_text(
        json.dumps([_session("s2", "Beta"), _session("s3", "Gamma")]), encoding="utf-8"
    )
    dest = tmp_path / "out"

    result = export_sessions(source, dest, _config(), quiet=True)

    assert result == 0
    assert sorted(p.name for p in dest.iterdir()) == [
        "Session-Alpha.html",
        "Session-Beta.html",
        "Session-Gamma.html",
    ]
    assert "<math>x = 1</math>" in (dest / "Session-Alpha.html").read_text(
        encoding="utf-8"
    )


def test_export_sessions_reports_partial_failure(tmp_path: Path) -> None:
    """returns 1 when a file fails to parse."""
    source = tmp_path / "sessions"
    source.mkdir()
    (source / "good.json").write_text(json.dumps(_session("s1", "Good")), encoding="utf-8")
    (source / "bad.json").write_text("{not json", encoding="utf-8")

    assert export_sessions(source, tmp_path / "out", _config(), quiet=True) == 1


def test_export_sessions_dry_run_writes_nothing(tmp_path: Path) -> None:
    """writes no files in dry-run mode."""
    source = tmp_path / "s.json"
    source.write_text(json.dumps(_session("s1", "Dry")), encoding="utf-8")
    dest = tmp_path / "out"

    assert export_sessions(source, dest, _config(), dry_run=True, quiet=True) == 0
    assert not dest.exists()
