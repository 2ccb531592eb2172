"""Tests for lcsview/app.py — LCS Log Viewer."""

import io
import os
import sys
import tempfile

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import lcsview.app as viewer
from lcsview.app import create_app, _render_status, _render_classifier_table
from lcsview.app import _render_histogram, _render_comparison
from lcsview.app import _navigate, _load_log, _current_snapshot
from lcsview.config import ViewerConfig
from lcsview.histograms import NO_DATA_MESSAGE
from lcsview.log_writer import write_text_log
from lcsview.snapshot import Snapshot
from lcsview.timeline_store import TimelineStore


COLUMNS = ("Condition", "Action", "Fitness")


def _log_text(iterations):
    return "".join(
        f"iteration {it}\ninput 01\n0#-1 0.5\n1#-0 0.75\nMatchSet\n0#-1 0.5\n"
        f"ActionSet\n0#-1 0.5\n"
        for it in iterations
    )


def _loaded_store(iterations=(10, 20, 30)):
    store = TimelineStore(io.StringIO(_log_text(iterations)),
                          ViewerConfig(column_names=COLUMNS))
    store.load()
    create_app(store)
    return store


def _empty_store():
    store = TimelineStore(None, ViewerConfig(column_names=COLUMNS))
    create_app(store)
    return store


# ── App Creation ────────────────────────────────────────────────────────────

class TestAppCreation:
    def test_create_app(self):
        app = create_app(_loaded_store())
        assert app is not None
        assert app.layout is not None

    def test_create_without_data(self):
        app = create_app(TimelineStore(None))
        assert app.layout is not None

    def test_store_config_is_used(self):
        store = _loaded_store()
        assert viewer._config is store.config


# ── Store access ────────────────────────────────────────────────────────────

class TestCurrentSnapshot:
    def test_none_means_first(self):
        store = _loaded_store()
        assert _current_snapshot(None) is store.get_first_element()

    def test_position(self):
        store = _loaded_store()
        assert _current_snapshot(1) is store.get_snapshot(1)

    def test_stale_position_falls_back_to_first(self):
        store = _loaded_store()
        assert _current_snapshot(7) is store.get_first_element()

    def test_empty(self):
        _empty_store()
        assert _current_snapshot(None) is None
        assert _current_snapshot(0) is None


def _iteration_at(position):
    return viewer._store.get_snapshot(position).iteration


class TestNavigate:
    def test_first_last(self):
        _loaded_store()
        assert _navigate("btn-first", 1) == (0, "")
        assert _navigate("btn-last", 0) == (2, "")

    def test_next_prev(self):
        _loaded_store()
        assert _navigate("btn-next", 0) == (1, "")
        assert _navigate("btn-prev", 1) == (0, "")

    def test_stepping_stops_at_ends(self):
        _loaded_store()
        assert _navigate("btn-next", 2) == (2, "")
        assert _navigate("btn-prev", 0) == (0, "")

    def test_next_follows_links_across_repeated_iteration(self):
        store = _loaded_store([1, 2, 2, 3])
        position = 0
        visited = []
        for _ in range(3):
            position, _ = _navigate("btn-next", position)
            visited.append(store.get_snapshot(position))
        assert visited == [store.get_snapshot(1), store.get_snapshot(2),
                           store.get_snapshot(3)]
        assert _iteration_at(position) == 3.0

    def test_prev_follows_links_across_repeated_iteration(self):
        store = _loaded_store([1, 2, 2, 3])
        position = 3
        for expected in (2, 1, 0):
            position, _ = _navigate("btn-prev", position)
            assert position == expected

    def test_next_through_unordered_data(self):
        _loaded_store([5, 1, 9])
        position = 0
        iterations = []
        for _ in range(2):
            position, _ = _navigate("btn-next", position)
            iterations.append(_iteration_at(position))
        assert iterations == [1.0, 9.0]

    def test_search(self):
        _loaded_store()
        assert _navigate("btn-search", 0, "24") == (1, "")
        assert _navigate("iteration-input", 0, " 25 ") == (2, "")

    def test_invalid_search_text(self):
        _loaded_store()
        assert _navigate("btn-search", 1, "abc") == (1, "No valid value")
        assert _navigate("btn-search", 1, None) == (1, "No valid value")

    def test_no_data(self):
        _empty_store()
        assert _navigate("btn-next", None) == (None, "No data loaded.")


class TestLoadLog:
    def test_load_swaps_store(self):
        _empty_store()
        tmpdir = tempfile.mkdtemp()
        path = os.path.join(tmpdir, "run.log")
        with open(path, "w") as f:
            f.write(_log_text([3, 4]))
        message, first = _load_log(path)
        assert first == 0
        assert _current_snapshot(first).iteration == 3.0
        assert "Loaded 2 iterations" in message
        assert viewer._store.num_snapshots == 2

    def test_missing_file_keeps_current_store(self):
        store = _loaded_store()
        message, first = _load_log("/nonexistent/missing.log")
        assert first is None
        assert message.startswith("❌")
        assert viewer._store is store

    def test_blank_path(self):
        store = _loaded_store()
        message, first = _load_log("  ")
        assert first is None
        assert viewer._store is store

    def test_bad_jsonl_record_keeps_rest_of_file(self):
        create_app(TimelineStore(None, ViewerConfig(column_names=COLUMNS,
                                                    importer="jsonl")))
        tmpdir = tempfile.mkdtemp()
        path = os.path.join(tmpdir, "run.jsonl")
        with open(path, "w") as f:
            f.write('{"iteration": 1}\n'
                    '{"iteration": 2, "population": 5}\n'
                    '{"iteration": 3}\n')
        message, first = _load_log(path)
        assert first == 0
        assert "Loaded 3 iterations" in message

    def test_log_without_iterations(self):
        _loaded_store()
        tmpdir = tempfile.mkdtemp()
        path = os.path.join(tmpdir, "empty.log")
        open(path, "w").close()
        message, first = _load_log(path)
        assert first is None
        assert "No iterations" in message
        assert viewer._store.num_snapshots == 0


# ── Render Helpers ──────────────────────────────────────────────────────────

class TestRenderStatus:
    def test_no_data(self):
        _empty_store()
        assert _render_status(None) == "No data loaded."

    def test_with_snapshot(self):
        store = _loaded_store()
        text = _render_status(store.get_last_element())
        assert "Iterations: 3" in text
        assert "Iteration: 30" in text
        assert "[P] 2" in text


class TestRenderClassifierTable:
    def test_no_snapshot(self):
        assert _render_classifier_table(None, "population").children == "No data."

    def test_empty_set(self):
        snap = Snapshot(columns=COLUMNS, iteration=1)
        result = _render_classifier_table(snap, "match_set")
        assert result.children == "No classifiers."

    def test_rows_and_header(self):
        store = _loaded_store()
        result = _render_classifier_table(store.get_first_element(), "population")
        rows = result.children[0].children
        assert len(rows) == 3
        assert [th.children for th in rows[0].children] == ["#"] + list(COLUMNS)

    def test_sorted_descending(self):
        store = _loaded_store()
        result = _render_classifier_table(store.get_first_element(), "population",
                                          sort_column="Fitness", descending=True)
        first_row = result.children[0].children[1]
        assert [td.children for td in first_row.children] == ["1", "1#", "0", "0.75"]

    def test_truncated(self):
        snap = Snapshot(columns=COLUMNS, iteration=1)
        for i in range(viewer.MAX_TABLE_ROWS + 5):
            snap.population.add_row(["0#", "1", str(i)])
        result = _render_classifier_table(snap, "population")
        assert len(result.children[0].children) == viewer.MAX_TABLE_ROWS + 1
        assert f"{viewer.MAX_TABLE_ROWS}/{viewer.MAX_TABLE_ROWS + 5}" in \
            result.children[1].children


class TestRenderHistogram:
    def test_no_data(self):
        _empty_store()
        fig, info = _render_histogram(None, "population", "Fitness")
        assert len(fig.data) == 0
        assert info == "iteration: <?> | # classifiers: 0"

    def test_column_histogram(self):
        store = _loaded_store()
        fig, info = _render_histogram(store.get_first_element(), "population",
                                      "Fitness")
        assert len(fig.data) == 1
        assert sorted(fig.data[0].x) == [0.5, 0.75]
        assert info == "iteration: 10 | # classifiers: 2"

    def test_limits_with_comma(self):
        store = _loaded_store()
        fig, info = _render_histogram(store.get_first_element(), "population",
                                      "Fitness", lower_text="0,6")
        assert list(fig.data[0].x) == [0.75]
        assert info.endswith("# classifiers: 1/2")

    def test_nothing_within_limits(self):
        store = _loaded_store()
        fig, info = _render_histogram(store.get_first_element(), "population",
                                      "Fitness", lower_text="5")
        assert len(fig.data) == 0
        assert fig.layout.annotations[0].text == NO_DATA_MESSAGE

    def test_specificity(self):
        store = _loaded_store()
        fig, _ = _render_histogram(store.get_first_element(), "action_set",
                                   "Specificity")
        assert list(fig.data[0].x) == [0.5]

    def test_unknown_histogram(self):
        store = _loaded_store()
        fig, _ = _render_histogram(store.get_first_element(), "population",
                                   "Numerosity")
        assert len(fig.data) == 0


class TestRenderComparison:
    def test_no_snapshot(self):
        fig = _render_comparison(None, "population", 0)
        assert len(fig.data) == 0

    def test_compare_row(self):
        store = _loaded_store()
        fig = _render_comparison(store.get_first_element(), "population", 1)
        names = [trace.name for trace in fig.data]
        assert names == ["max", "min", "selected"]
        selected = fig.data[2]
        assert list(selected.x) == ["Action", "Fitness"]
        assert list(selected.y) == [0.0, 0.75]
        assert "Classifier  1# 0 0.75" in fig.layout.title.text

    def test_missing_row(self):
        store = _loaded_store()
        fig = _render_comparison(store.get_first_element(), "match_set", 4)
        assert len(fig.data) == 0
        assert fig.layout.title.text == "No classifier 4 in Match Set"

    def test_bad_row_value(self):
        store = _loaded_store()
        fig = _render_comparison(store.get_first_element(), "population", None)
        assert len(fig.data) == 0

    def test_fractional_row_rejected(self):
        store = _loaded_store()
        fig = _render_comparison(store.get_first_element(), "population", 1.5)
        assert len(fig.data) == 0
        assert fig.layout.title.text == "No classifier 1.5 in Population"

    def test_whole_float_row_accepted(self):
        store = _loaded_store()
        fig = _render_comparison(store.get_first_element(), "population", 1.0)
        assert list(fig.data[2].y) == [0.0, 0.75]


# ── Integration ─────────────────────────────────────────────────────────────

class TestIntegration:
    def test_demo_log_workflow(self):
        from generate_demo_log import generate_snapshots

        tmpdir = tempfile.mkdtemp()
        path = write_text_log(generate_snapshots(iterations=6, seed=3),
                              os.path.join(tmpdir, "demo.log"))
        create_app(TimelineStore(None))
        message, current = _load_log(path)
        assert _iteration_at(current) == 0.0

        current, _ = _navigate("btn-next", current)
        assert _iteration_at(current) == 50.0
        current, _ = _navigate("btn-last", current)
        assert _iteration_at(current) == 250.0
        current, _ = _navigate("btn-search", current, "120")
        assert _iteration_at(current) == 100.0

        snapshot = _current_snapshot(current)
        fig, info = _render_histogram(snapshot, "population", "Fitness")
        assert len(fig.data) == 1
        assert "# classifiers: 60" in info
