"""Unit tests for the dot_every progress operator."""

import functools
import io

import pytest

from funcops.operators.progress import dot_every


def identity(x):
    return x


class Tally:
    """Callable object without a __name__"""

    def __init__(self):
        self.seen = []

    def __call__(self, x):
        self.seen.append(x)
        return len(self.seen)


class TestDotEvery:
    """Test progress markers emitted every n calls"""

    @pytest.mark.parametrize("calls,n", [(0, 3), (2, 3), (3, 3), (10, 3), (100, 10), (7, 1)])
    def test_marker_count_is_calls_floor_divided_by_n(self, calls, n, metrics):
        stream = io.StringIO()
        noisy = dot_every(identity, n, stream=stream, metrics=metrics)

        for i in range(calls):
            noisy(i)

        assert stream.getvalue() == "." * (calls // n)

    def test_all_calls_forwarded_unchanged(self, metrics):
        seen = []

        def record(*args, **kwargs):
            seen.append((args, kwargs))
            return len(seen)

        noisy = dot_every(record, 2, stream=io.StringIO(), metrics=metrics)
        results = [noisy(i, tag=i) for i in range(5)]

        assert results == [1, 2, 3, 4, 5]
        assert seen == [((i,), {"tag": i}) for i in range(5)]

    def test_marker_written_before_nth_call(self, metrics):
        stream = io.StringIO()
        snapshots = []

        def snapshot():
            snapshots.append(stream.getvalue())

        noisy = dot_every(snapshot, 2, stream=stream, metrics=metrics)
        noisy()
        noisy()

        assert snapshots == ["", "."]

    def test_custom_marker(self, metrics):
        stream = io.StringIO()
        noisy = dot_every(identity, 2, marker="#", stream=stream, metrics=metrics)

        for i in range(4):
            noisy(i)

        assert stream.getvalue() == "##"

    def test_defaults_from_settings(self, monkeypatch, metrics):
        from funcops.config import reset_config

        monkeypatch.setenv("FUNCOPS_DOT_INTERVAL", "4")
        monkeypatch.setenv("FUNCOPS_DOT_MARKER", "*")
        reset_config()

        stream = io.StringIO()
        noisy = dot_every(identity, stream=stream, metrics=metrics)
        for i in range(9):
            noisy(i)

        assert stream.getvalue() == "**"

    def test_writes_to_stdout_by_default(self, capsys, metrics):
        noisy = dot_every(identity, 1, metrics=metrics)

        noisy(1)
        noisy(2)

        assert capsys.readouterr().out == ".."

    def test_failing_calls_still_counted(self, metrics):
        stream = io.StringIO()

        def fail(x):
            raise ValueError(x)

        noisy = dot_every(fail, 2, stream=stream, metrics=metrics)
        for i in range(4):
            with pytest.raises(ValueError):
                noisy(i)

        assert stream.getvalue() == ".."

    def test_counters_are_private_per_wrapper(self, metrics):
        first, second = io.StringIO(), io.StringIO()
        a = dot_every(identity, 2, stream=first, metrics=metrics)
        b = dot_every(identity, 2, stream=second, metrics=metrics)

        for i in range(4):
            a(i)
        b(0)

        assert first.getvalue() == ".."
        assert second.getvalue() == ""

    def test_invalid_interval(self, metrics):
        with pytest.raises(ValueError):
            dot_every(identity, 0, metrics=metrics)

    def test_progress_metrics(self, metrics, registry):
        noisy = dot_every(identity, 3, stream=io.StringIO(), metrics=metrics)
        for i in range(7):
            noisy(i)

        assert registry.get_sample_value(
            "funcops_progress_markers_total", {"function": "identity"}
        ) == 2
        assert registry.get_sample_value(
            "funcops_calls_total", {"operator": "dot_every", "function": "identity"}
        ) == 7

    def test_partial_is_wrapped(self, metrics, registry):
        stream = io.StringIO()
        noisy = dot_every(functools.partial(pow, 2), 2, stream=stream, metrics=metrics)

        assert [noisy(i) for i in range(4)] == [1, 2, 4, 8]
        assert stream.getvalue() == ".."
        assert registry.get_sample_value(
            "funcops_progress_markers_total", {"function": "pow"}
        ) == 2

    def test_callable_object_is_wrapped(self, metrics, registry):
        stream = io.StringIO()
        tally = Tally()
        noisy = dot_every(tally, 3, stream=stream, metrics=metrics)

        assert [noisy(c) for c in "abc"] == [1, 2, 3]
        assert tally.seen == ["a", "b", "c"]
        assert stream.getvalue() == "."
        assert registry.get_sample_value(
            "funcops_calls_total", {"operator": "dot_every", "function": "Tally"}
        ) == 3
