"""Tests for lcsview/histograms.py"""

import os
import sys
import numpy as np
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from lcsview.histograms import (
    NO_DATA_MESSAGE, HistogramData, Histogram, SpecificityHistogram,
    UniversalHistogram, HISTOGRAMS, parse_limit, reconcile_limits,
    within_limits,
)
from lcsview.snapshot import Snapshot


COLUMNS = ("Condition", "Action", "Fitness")


def _snapshot(rows, set_name="population"):
    snap = Snapshot(columns=COLUMNS, iteration=1)
    for row in rows:
        snap.classifier_set(set_name).add_row(row)
    return snap


class BrokenHistogram(Histogram):
    def __init__(self):
        super().__init__("Broken")

    def calculate(self, table):
        raise ValueError("no")


class TestUniversalHistogram:
    def test_values(self):
        snap = _snapshot([["0#", "1", "0.5"], ["1#", "0", "0.25"]])
        data = UniversalHistogram("Fitness").compute(snap, "population")
        assert list(data.values) == [0.5, 0.25]
        assert data.total == 2
        assert data.error is None
        assert data.title == "Fitness"

    def test_skips_non_numeric_cells(self):
        snap = _snapshot([["0#", "1", "0.5"], ["1#", "0", "n/a"]])
        data = UniversalHistogram("Fitness").compute(snap, "population")
        assert list(data.values) == [0.5]
        assert data.total == 2

    def test_unknown_column(self):
        snap = _snapshot([["0#", "1", "0.5"]])
        data = UniversalHistogram("Numerosity").compute(snap, "population")
        assert data.visible == 0
        assert data.error == NO_DATA_MESSAGE

    def test_selected_set_only(self):
        snap = _snapshot([["0#", "1", "0.5"]], set_name="action_set")
        data = UniversalHistogram("Fitness").compute(snap, "population")
        assert data.error == NO_DATA_MESSAGE
        data = UniversalHistogram("Fitness").compute(snap, "action_set")
        assert list(data.values) == [0.5]

    def test_str_is_description(self):
        assert str(UniversalHistogram("Fitness")) == "Fitness"


class TestSpecificityHistogram:
    def test_fraction_of_specified_positions(self):
        snap = _snapshot([["0##1", "1", "0"], ["####", "0", "0"],
                          ["0101", "0", "0"]])
        data = SpecificityHistogram().compute(snap, "population")
        assert list(data.values) == [0.5, 0.0, 1.0]
        assert data.title == "Specificity"

    def test_empty_condition_skipped(self):
        table = _snapshot([["", "1", "0"], ["0#", "1", "0"]]).population
        assert list(SpecificityHistogram().calculate(table)) == [0.5]

    def test_registered(self):
        assert HISTOGRAMS["specificity"] is SpecificityHistogram


class TestCompute:
    def test_limits_applied(self):
        snap = _snapshot([["0", "0", str(v)] for v in (1, 2, 3, 4, 5)])
        data = UniversalHistogram("Fitness").compute(snap, "population",
                                                     lower=2, upper=4)
        assert list(data.values) == [2.0, 3.0, 4.0]
        assert data.summary() == "# classifiers: 3/5"

    def test_nothing_within_limits(self):
        snap = _snapshot([["0", "0", "1"]])
        data = UniversalHistogram("Fitness").compute(snap, "population",
                                                     lower=10)
        assert data.error == NO_DATA_MESSAGE

    def test_calculation_error(self):
        snap = _snapshot([["0", "0", "1"]])
        data = BrokenHistogram().compute(snap, "population")
        assert data.error == "Broken cannot be displayed as histogram."
        assert data.visible == 0

    def test_summary_without_limits(self):
        data = HistogramData(title="x", values=np.array([1.0, 2.0]), total=2)
        assert data.summary() == "# classifiers: 2"


class TestLimits:
    def test_within_limits_unbounded(self):
        values = np.array([-1.0, 0.0, 1.0])
        assert within_limits(values, None, None).all()

    def test_within_limits_inclusive(self):
        values = np.array([1.0, 2.0, 3.0])
        assert list(within_limits(values, 1.0, 2.0)) == [True, True, False]

    @pytest.mark.parametrize("text,expected", [
        ("1.5", 1.5),
        ("1,5", 1.5),
        ("1.000,5", 1000.5),
        ("1,000,5", 1000.5),
        ("  -3 ", -3.0),
        (2, 2.0),
    ])
    def test_parse_limit(self, text, expected):
        assert parse_limit(text) == expected

    @pytest.mark.parametrize("text", [None, "", "   ", "abc"])
    def test_parse_limit_no_limit(self, text):
        assert parse_limit(text) is None

    def test_reconcile_in_order(self):
        assert reconcile_limits(1.0, 2.0) == (1.0, 2.0)
        assert reconcile_limits(None, 2.0) == (None, 2.0)
        assert reconcile_limits(5.0, None) == (5.0, None)

    def test_reconcile_lower_edited(self):
        assert reconcile_limits(5.0, 2.0, edited="lower") == (5.0, 5.0)

    def test_reconcile_upper_edited(self):
        assert reconcile_limits(5.0, 2.0, edited="upper") == (2.0, 2.0)
