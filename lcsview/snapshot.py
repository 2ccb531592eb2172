"""
snapshot.py — One iteration of an LCS experiment log.

A Snapshot holds the iteration number, the agent input, and the three
classifier sets (population, match set, action set) recorded for that
iteration. Each set is a ClassifierTable sharing one column schema.
"""

from dataclasses import dataclass, field
from typing import Optional

from lcsview.comparison import parse_float, table_sort_key


# Compares less than any real iteration number.
UNSET_ITERATION = float("-inf")

SET_NAMES = ("population", "match_set", "action_set")
SET_LABELS = {
    "population": "Population",
    "match_set": "Match Set",
    "action_set": "Action Set",
}


# ---------------------------------------------------------------------------
# Classifier table
# ---------------------------------------------------------------------------

@dataclass
class ClassifierTable:
    """Rows of one classifier set, addressable by column name."""
    columns: tuple
    rows: list = field(default_factory=list)   # list[list[str]]

    def __post_init__(self):
        self.columns = tuple(self.columns)

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self):
        return iter(self.rows)

    @property
    def row_count(self) -> int:
        return len(self.rows)

    def add_row(self, values) -> list[str]:
        """Append a row. The row must have one value per column."""
        values = [str(v) for v in values]
        if len(values) != len(self.columns):
            raise ValueError(
                f"Row has {len(values)} values, expected {len(self.columns)}"
            )
        self.rows.append(values)
        return values

    def column_index(self, name: str) -> Optional[int]:
        """Index of a column, or None if the schema has no such column."""
        try:
            return self.columns.index(name)
        except ValueError:
            return None

    def column_values(self, name: str) -> list[str]:
        """All cells of a column (empty for an unknown column)."""
        idx = self.column_index(name)
        if idx is None:
            return []
        return [row[idx] for row in self.rows]

    def is_numeric_column(self, index: int) -> bool:
        """True if every cell in the column parses as a float."""
        return all(parse_float(row[index]) is not None for row in self.rows)

    def sorted_indices(self, column: str | None, descending: bool = False) -> list[int]:
        """Row indices ordered by a column, numerically where cells are
        numbers. Unknown or missing columns keep the log order."""
        idx = self.column_index(column) if column else None
        order = list(range(len(self.rows)))
        if idx is None:
            return order
        return sorted(order, key=lambda i: table_sort_key(self.rows[i][idx]),
                      reverse=descending)

    def sorted_rows(self, column: str | None, descending: bool = False) -> list[list[str]]:
        """Rows ordered by a column (see sorted_indices)."""
        return [self.rows[i] for i in self.sorted_indices(column, descending)]


# ---------------------------------------------------------------------------
# Snapshot
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class Snapshot:
    """Recorded state of all classifier sets for one training iteration.

    ``next`` and ``previous`` link to the chronologically adjacent
    snapshots. A snapshot without neighbours links to itself, so stepping
    past either end of a timeline stays on that end.
    """
    columns: tuple = ()
    iteration: float = UNSET_ITERATION
    input: str = ""
    population: Optional[ClassifierTable] = None
    match_set: Optional[ClassifierTable] = None
    action_set: Optional[ClassifierTable] = None
    next: Optional["Snapshot"] = field(default=None, repr=False)
    previous: Optional["Snapshot"] = field(default=None, repr=False)

    def __post_init__(self):
        self.columns = tuple(self.columns)
        self.iteration = float(self.iteration)
        if self.population is None:
            self.population = ClassifierTable(self.columns)
        if self.match_set is None:
            self.match_set = ClassifierTable(self.columns)
        if self.action_set is None:
            self.action_set = ClassifierTable(self.columns)
        if self.next is None:
            self.next = self
        if self.previous is None:
            self.previous = self

    @property
    def is_set(self) -> bool:
        return self.iteration != UNSET_ITERATION

    def classifier_set(self, name: str) -> ClassifierTable:
        """Return the population, match set or action set by name."""
        if name not in SET_NAMES:
            raise KeyError(f"Unknown classifier set '{name}'")
        return getattr(self, name)

    def set_sizes(self) -> dict[str, int]:
        return {name: len(self.classifier_set(name)) for name in SET_NAMES}

    # -- Serialization -------------------------------------------------------

    def to_dict(self) -> dict:
        """JSON-serializable form. Sibling links are not included."""
        d = {"iteration": self.iteration, "input": self.input}
        for name in SET_NAMES:
            d[name] = [list(row) for row in self.classifier_set(name).rows]
        return d
