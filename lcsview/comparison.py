"""
comparison.py — Compare one classifier against the rest of its table.

For every numeric column, the selected classifier's value is reported
together with the column minimum and maximum, which the app draws as a
min/max/selected bar chart.
"""

import math
from dataclasses import dataclass
from typing import Optional

import numpy as np


def parse_float(value) -> Optional[float]:
    """Parse a table cell as a float, or None if it is not a number."""
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def table_sort_key(value) -> tuple:
    """Sort key for table cells: numbers by value, then text.

    NaN sorts after every other number.
    """
    number = parse_float(value)
    if number is None:
        return (2, str(value))
    if math.isnan(number):
        return (1, 0.0)
    return (0, number)


@dataclass
class ComparisonDataSet:
    """Min, max and selected value of one table column."""
    column_name: str
    min: float
    max: float
    selected: float

    def __str__(self) -> str:
        return (f"{self.column_name}: min {self.min}, max {self.max}, "
                f"selected {self.selected}")


def numeric_columns(table) -> list[int]:
    """Indices of the columns whose cells all parse as floats."""
    return [i for i in range(len(table.columns)) if table.is_numeric_column(i)]


def compare_row(table, row_index: int) -> list[ComparisonDataSet]:
    """Compare one row with its table, one data set per numeric column."""
    if not 0 <= row_index < len(table.rows):
        raise IndexError(f"Row {row_index} out of range (0..{len(table.rows) - 1})")

    result = []
    for col in numeric_columns(table):
        values = np.array([float(row[col]) for row in table.rows])
        result.append(ComparisonDataSet(
            column_name=table.columns[col],
            min=float(np.min(values)),
            max=float(np.max(values)),
            selected=float(values[row_index]),
        ))
    return result


def describe_row(table, row_index: int) -> str:
    """One-line description of a classifier row."""
    row = table.rows[row_index]
    return "Classifier " + "".join(f" {cell}" for cell in row)
