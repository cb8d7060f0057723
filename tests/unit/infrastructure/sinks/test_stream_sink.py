# tests/unit/infrastructure/sinks/test_stream_sink.py
from __future__ import annotations

import io
import threading
from pathlib import Path

import pytest

from gcl_request_log.domain.exceptions.logging import SinkWriteError
from gcl_request_log.domain.interfaces.line_sink import LineSink
from gcl_request_log.infrastructure.sinks.stream_sink import (
    FileLineSink,
    StandardStreamSink,
    TextStreamSink,
    open_line_sink,
)


def test_standard_stream_sinks_follow_swapped_streams(capsys: pytest.CaptureFixture[str]) -> None:
    StandardStreamSink("stdout").append('{"a":1}\n')
    StandardStreamSink("stderr").append('{"b":2}\n')

    captured = capsys.readouterr()
    assert captured.out == '{"a":1}\n'
    assert captured.err == '{"b":2}\n'


def test_standard_stream_sink_rejects_other_names() -> None:
    with pytest.raises(ValueError):
        StandardStreamSink("stdin")  # type: ignore[arg-type]


def test_text_stream_sink_writes_whole_records_concurrently() -> None:
    buf = io.StringIO()
    sink = TextStreamSink(buf)

    def _writer(n: int) -> None:
        for i in range(100):
            sink.append(f"writer-{n}-{i}\n")

    threads = [threading.Thread(target=_writer, args=(n,)) for n in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    lines = buf.getvalue().splitlines()
    assert len(lines) == 400
    assert all(line.startswith("writer-") for line in lines)


def test_closed_stream_raises_sink_write_error() -> None:
    buf = io.StringIO()
    buf.close()
    with pytest.raises(SinkWriteError) as info:
        TextStreamSink(buf).append("x\n")
    assert info.value.code == "SINK_WRITE_ERROR"


def test_file_sink_appends_lines(tmp_path: Path) -> None:
    path = tmp_path / "requests.log"
    path.write_text("existing\n", encoding="utf-8")

    sink = FileLineSink(path)
    sink.append("first\n")
    sink.append("second\n")
    sink.close()

    assert path.read_text(encoding="utf-8") == "existing\nfirst\nsecond\n"
    with pytest.raises(SinkWriteError):
        sink.append("after close\n")


def test_open_line_sink(tmp_path: Path) -> None:
    stdout = open_line_sink("stdout")
    assert isinstance(stdout, StandardStreamSink) and stdout.name == "stdout"
    assert isinstance(open_line_sink(" stderr "), StandardStreamSink)

    file_sink = open_line_sink(str(tmp_path / "app.log"))
    assert isinstance(file_sink, FileLineSink)
    assert isinstance(file_sink, LineSink)
    file_sink.close()

    with pytest.raises(ValueError):
        open_line_sink("  ")
