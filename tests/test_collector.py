import io

from playground.collector import StreamCollector
from playground.models import Console


def test_reads_lines_until_end_of_stream():
    stream = io.StringIO("first\nsecond\r\nthird", newline="")

    collector = StreamCollector(Console.STDERR, stream).start()
    collector.join(timeout=5)

    assert not collector.is_alive()
    assert [line.line for line in collector.output_lines] == ["first", "second", "third"]
    assert {line.console for line in collector.output_lines} == {Console.STDERR}
    assert stream.closed
    assert collector.error is None


def test_timestamps_follow_read_order():
    stream = io.StringIO("".join(f"{i}\n" for i in range(50)))

    collector = StreamCollector(Console.STDOUT, stream).start()
    collector.join(timeout=5)

    timestamps = [line.timestamp for line in collector.output_lines]
    assert timestamps == sorted(timestamps)
    assert all(ts.tzinfo is not None for ts in timestamps)


def test_empty_lines_are_kept():
    stream = io.StringIO("a\n\nb\n")

    collector = StreamCollector(Console.STDOUT, stream).start()
    collector.join(timeout=5)

    assert [line.line for line in collector.output_lines] == ["a", "", "b"]


class BrokenStream(io.StringIO):
    def __iter__(self):
        yield "partial\n"
        raise OSError("read failed")


def test_read_error_recorded_and_thread_finishes(caplog):
    collector = StreamCollector(Console.STDOUT, BrokenStream()).start()
    collector.join(timeout=5)

    assert not collector.is_alive()
    assert [line.line for line in collector.output_lines] == ["partial"]
    assert isinstance(collector.error, OSError)
    assert "read failed" in caplog.text
