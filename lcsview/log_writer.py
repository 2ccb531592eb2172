"""
log_writer.py — Write snapshots back out as LCS log files.

Text output follows the grammar read by DefaultImporter; JSONL output
follows JsonlImporter.
"""

import json
import os

from lcsview.importers import DefaultImporter


def format_classifier(row) -> str:
    """Render a row as ``<condition>-<action> <value> <value> ...``."""
    return " ".join([f"{row[0]}-{row[1]}"] + list(row[2:]))


def format_iteration(iteration) -> str:
    """Shortest text that reads back as the same iteration number."""
    iteration = float(iteration)
    if iteration.is_integer():
        return str(int(iteration))
    return repr(iteration)


def format_snapshot(snapshot) -> str:
    """Render one iteration in the default text grammar."""
    lines = [
        f"{DefaultImporter.ITERATION_MARKER} {format_iteration(snapshot.iteration)}",
        f"{DefaultImporter.INPUT_MARKER} {snapshot.input}",
    ]
    lines.extend(format_classifier(row) for row in snapshot.population)
    lines.append(DefaultImporter.MATCH_SET_MARKER)
    lines.extend(format_classifier(row) for row in snapshot.match_set)
    lines.append(DefaultImporter.ACTION_SET_MARKER)
    lines.extend(format_classifier(row) for row in snapshot.action_set)
    return "\n".join(lines) + "\n"


def _prepare(path: str):
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)


def write_text_log(snapshots, path: str) -> str:
    """Write snapshots as a text log. Returns the path."""
    _prepare(path)
    with open(path, "w", encoding="utf-8") as f:
        for snapshot in snapshots:
            f.write(format_snapshot(snapshot))
    return path


def write_jsonl_log(snapshots, path: str) -> str:
    """Write snapshots as JSONL, one iteration per line. Returns the path."""
    _prepare(path)
    with open(path, "w", encoding="utf-8") as f:
        for snapshot in snapshots:
            f.write(json.dumps(snapshot.to_dict(), separators=(",", ":")) + "\n")
    return path
