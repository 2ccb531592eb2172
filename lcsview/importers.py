"""
importers.py — Turn raw LCS log streams into Snapshots.

An importer reads one iteration per call from a text stream and returns it
as a Snapshot, or None once the stream holds no further iteration. The
TimelineStore only depends on the Importer interface; which importer is
used is chosen by name through the viewer configuration.

Default text grammar:

    iteration 12
    input 010110
    0##10-1 10.0 0.0 0.01 1 0     <- population rows
    MatchSet
    01#10-1 10.0 0.0 0.01 1 0     <- match set rows
    ActionSet
    01#10-1 10.0 0.0 0.01 1 0     <- action set rows
"""

import json
import logging
from abc import ABCMeta, abstractmethod
from typing import Optional

from lcsview.snapshot import Snapshot

logger = logging.getLogger(__name__)


class Importer(metaclass=ABCMeta):
    """Reads Snapshots from a stream, one iteration per call.

    Snapshots must be returned in the order they appear in the stream, and
    that order must be ascending in iteration number.
    """

    def __init__(self, columns):
        self.columns = tuple(columns)

    @abstractmethod
    def next_snapshot(self, stream) -> Optional[Snapshot]:
        """Return the next unprocessed iteration, or None at end of stream."""
        raise NotImplementedError()


class DefaultImporter(Importer):
    """Importer for the line-oriented LCS log format."""

    ITERATION_MARKER = "iteration"
    INPUT_MARKER = "input"
    MATCH_SET_MARKER = "MatchSet"
    ACTION_SET_MARKER = "ActionSet"
    ROW_PREFIXES = ("0", "1", "#")

    def __init__(self, columns):
        super().__init__(columns)
        if len(self.columns) < 2:
            raise ValueError("The default log format needs at least the "
                             "condition and action columns")
        # One buffered line: the header that ended the previous iteration.
        self._stream = None
        self._pending: Optional[str] = None

    def next_snapshot(self, stream) -> Optional[Snapshot]:
        if stream is None:
            return None
        if stream is not self._stream:
            self._stream = stream
            self._pending = None

        line = self._pending if self._pending is not None else stream.readline()
        self._pending = None

        # Find the next valid iteration header
        iteration = None
        while line:
            if line.startswith(self.ITERATION_MARKER):
                iteration = self._parse_iteration(line)
                if iteration is not None:
                    break
            line = stream.readline()
        if iteration is None:
            return None

        snapshot = Snapshot(columns=self.columns, iteration=iteration)

        line = stream.readline()
        if line.startswith(self.INPUT_MARKER):
            snapshot.input = line[len(self.INPUT_MARKER):].strip()
            line = stream.readline()

        current = "population"
        while line:
            if line.startswith(self.ITERATION_MARKER):
                self._pending = line
                break
            if line.startswith(self.ROW_PREFIXES):
                row = self.split_classifier(line)
                if row is not None:
                    snapshot.classifier_set(current).add_row(row)
            elif line.startswith(self.MATCH_SET_MARKER):
                if current == "population":
                    current = "match_set"
            elif line.startswith(self.ACTION_SET_MARKER):
                current = "action_set"
            line = stream.readline()

        logger.debug("Read iteration %s: %s", snapshot.iteration,
                     snapshot.set_sizes())
        return snapshot

    def _parse_iteration(self, line: str) -> Optional[float]:
        text = line[len(self.ITERATION_MARKER):].strip()
        try:
            return float(text)
        except ValueError:
            logger.warning("Skipping iteration with invalid number: %r",
                           line.rstrip("\n"))
            return None

    def split_classifier(self, line: str) -> Optional[list[str]]:
        """Split a classifier line into condition, action and the remaining
        columns, e.g. ``0##10001#00-0 10.0 0.0 0.01 1 0``.

        Returns None (and logs) for rows that do not fit the schema.
        """
        tokens = line.split()
        condition, sep, action = tokens[0].partition("-")
        if not sep:
            logger.warning("Skipping classifier without action: %r",
                           line.rstrip("\n"))
            return None
        needed = len(self.columns) - 2
        rest = tokens[1:]
        if len(rest) < needed:
            logger.warning("Skipping classifier with %d of %d values: %r",
                           len(rest) + 2, len(self.columns), line.rstrip("\n"))
            return None
        return [condition, action] + rest[:needed]


class JsonlImporter(Importer):
    """Importer for logs with one JSON object per iteration."""

    def next_snapshot(self, stream) -> Optional[Snapshot]:
        if stream is None:
            return None
        for line in iter(stream.readline, ""):
            line = line.strip()
            if not line:
                continue
            try:
                record = json.loads(line)
                if not isinstance(record, dict):
                    raise TypeError(f"expected an object, got "
                                    f"{type(record).__name__}")
                iteration = float(record["iteration"])
            except (ValueError, KeyError, TypeError) as e:
                logger.warning("Skipping unreadable record (%s): %.80s", e, line)
                continue
            return self._build(record, iteration)
        return None

    def _build(self, record: dict, iteration: float) -> Snapshot:
        snapshot = Snapshot(
            columns=self.columns,
            iteration=iteration,
            input=str(record.get("input", "")),
        )
        for name in ("population", "match_set", "action_set"):
            table = snapshot.classifier_set(name)
            rows = record.get(name) or []
            if not isinstance(rows, list):
                logger.warning("Skipping %s of iteration %s: expected a list, "
                               "got %s", name, iteration, type(rows).__name__)
                continue
            for row in rows:
                try:
                    table.add_row(row)
                except (ValueError, TypeError) as e:
                    logger.warning("Skipping %s row in iteration %s: %s",
                                   name, iteration, e)
        return snapshot


IMPORTERS = {
    "default": DefaultImporter,
    "jsonl": JsonlImporter,
}
