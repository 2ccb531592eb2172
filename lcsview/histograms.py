"""
histograms.py — Histogram data for classifier-set columns.

A histogram turns one classifier set of a snapshot into a numpy array of
values. The app draws the values with plotly; this module only decides
which values go into the chart.
"""

import logging
from abc import ABCMeta, abstractmethod
from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from lcsview.comparison import parse_float

logger = logging.getLogger(__name__)


NO_DATA_MESSAGE = "No data available (within the given limits)."


@dataclass
class HistogramData:
    """Values of one histogram, after limits have been applied."""
    title: str
    values: np.ndarray = field(default_factory=lambda: np.array([]))
    total: int = 0                  # classifiers in the selected set
    error: Optional[str] = None

    @property
    def visible(self) -> int:
        return len(self.values)

    def summary(self) -> str:
        if self.visible != self.total:
            return f"# classifiers: {self.visible}/{self.total}"
        return f"# classifiers: {self.total}"


class Histogram(metaclass=ABCMeta):
    """Base class for histograms over a classifier set.

    Subclasses implement calculate(), which maps a ClassifierTable to the
    values to plot. Raising ValueError there marks the histogram as not
    displayable for that table.
    """

    def __init__(self, description: str):
        self.description = description

    def __str__(self) -> str:
        return self.description

    @abstractmethod
    def calculate(self, table) -> np.ndarray:
        raise NotImplementedError()

    def compute(self, snapshot, set_name: str,
                lower: float | None = None,
                upper: float | None = None) -> HistogramData:
        """Histogram values for one set of a snapshot, within the limits."""
        table = snapshot.classifier_set(set_name)
        data = HistogramData(title=self.description, total=len(table))
        try:
            values = np.asarray(self.calculate(table), dtype=np.float64)
        except ValueError:
            data.error = f"{self} cannot be displayed as histogram."
            return data

        data.values = values[within_limits(values, lower, upper)]
        if data.visible == 0:
            data.error = NO_DATA_MESSAGE
        return data


class UniversalHistogram(Histogram):
    """Histogram of the numeric values of one column."""

    def __init__(self, column: str):
        super().__init__(column)
        self.column = column

    def calculate(self, table) -> np.ndarray:
        if table.column_index(self.column) is None:
            logger.warning("No data for column '%s'", self.column)
            return np.array([])
        values = [parse_float(cell) for cell in table.column_values(self.column)]
        return np.array([v for v in values if v is not None], dtype=np.float64)


class SpecificityHistogram(Histogram):
    """Share of specified (non-#) positions in each classifier condition."""

    def __init__(self, column: str = "Condition"):
        super().__init__("Specificity")
        self.column = column

    def calculate(self, table) -> np.ndarray:
        if table.column_index(self.column) is None:
            logger.warning("Column '%s' not found", self.column)
            return np.array([])
        result = []
        for condition in table.column_values(self.column):
            if not condition:
                continue
            specified = sum(1 for c in condition if c != "#")
            result.append(specified / len(condition))
        return np.array(result, dtype=np.float64)


# Extra histograms selectable by name in the configuration
HISTOGRAMS = {
    "specificity": SpecificityHistogram,
}


# ---------------------------------------------------------------------------
# Limits
# ---------------------------------------------------------------------------

def within_limits(values: np.ndarray, lower: float | None,
                  upper: float | None) -> np.ndarray:
    """Boolean mask of values inside the inclusive [lower, upper] range.
    A missing limit leaves that side unbounded."""
    mask = np.ones(len(values), dtype=bool)
    if lower is not None:
        mask &= values >= lower
    if upper is not None:
        mask &= values <= upper
    return mask


def parse_limit(text) -> Optional[float]:
    """Parse a limit typed by the user. Accepts "," as decimal separator;
    of several separators only the last one counts. Blank or invalid text
    means no limit."""
    if text is None:
        return None
    if isinstance(text, (int, float)):
        return float(text)
    text = str(text).strip().replace(",", ".")
    while text.count(".") > 1:
        i = text.index(".")
        text = text[:i] + text[i + 1:]
    try:
        return float(text)
    except ValueError:
        return None


def reconcile_limits(lower: float | None, upper: float | None,
                     edited: str = "lower") -> tuple:
    """Keep lower <= upper. If they cross, the limit not being edited is
    moved onto the edited one."""
    if lower is None or upper is None or upper >= lower:
        return lower, upper
    if edited == "upper":
        return upper, upper
    return lower, lower
