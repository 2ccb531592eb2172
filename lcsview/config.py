"""
config.py — Viewer configuration.

One ViewerConfig is built at startup and handed to the TimelineStore and
the app. It fixes the column schema shared by all classifier sets, the
importer used to read logs, and the histograms offered in the chart panel.
"""

import codecs
import json
import os
from dataclasses import dataclass, field, asdict

from lcsview.errors import ConfigError
from lcsview.histograms import HISTOGRAMS, UniversalHistogram
from lcsview.importers import IMPORTERS


DEFAULT_COLUMNS = (
    "Condition", "Action", "Prediction", "PredictionError", "Fitness",
    "TimeStamp",
)


@dataclass
class ViewerConfig:
    """Settings shared by the store and the presentation layer."""
    column_names: tuple = DEFAULT_COLUMNS
    importer: str = "default"
    auto_chart: bool = True        # one histogram per column
    histograms: list = field(default_factory=lambda: ["specificity"])
    encoding: str = "utf-8"

    def __post_init__(self):
        self.column_names = tuple(self.column_names)
        self.histograms = list(self.histograms)

    def validate(self) -> "ViewerConfig":
        """Raise ConfigError if the configuration cannot be used."""
        if not all(isinstance(c, str) for c in self.column_names):
            raise ConfigError(f"Column names must be strings: {self.column_names}")
        if not all(isinstance(h, str) for h in self.histograms):
            raise ConfigError(f"Histogram names must be strings: {self.histograms}")
        if not isinstance(self.importer, str):
            raise ConfigError(f"Importer name must be a string: {self.importer!r}")
        if not isinstance(self.auto_chart, bool):
            raise ConfigError(f"auto_chart must be true or false: {self.auto_chart!r}")
        try:
            codecs.lookup(self.encoding)
        except (LookupError, TypeError) as e:
            raise ConfigError(f"Unknown encoding {self.encoding!r}") from e
        if len(self.column_names) < 2:
            raise ConfigError("At least two columns (condition and action) "
                              "are required")
        if len(set(self.column_names)) != len(self.column_names):
            raise ConfigError(f"Duplicate column names: {self.column_names}")
        if self.importer not in IMPORTERS:
            raise ConfigError(f"Unknown importer '{self.importer}' "
                              f"(available: {', '.join(sorted(IMPORTERS))})")
        for name in self.histograms:
            if name not in HISTOGRAMS:
                raise ConfigError(f"Unknown histogram '{name}' "
                                  f"(available: {', '.join(sorted(HISTOGRAMS))})")
        return self

    def create_importer(self):
        """Instantiate the configured importer for this column schema."""
        self.validate()
        return IMPORTERS[self.importer](self.column_names)

    def available_histograms(self) -> list:
        """Histograms offered in the chart panel, in display order."""
        result = []
        if self.auto_chart:
            result.extend(UniversalHistogram(c) for c in self.column_names)
        result.extend(HISTOGRAMS[name]() for name in self.histograms)
        return result

    # -- Serialization -------------------------------------------------------

    def to_dict(self) -> dict:
        d = asdict(self)
        d["column_names"] = list(self.column_names)
        return d

    @staticmethod
    def from_dict(d: dict) -> "ViewerConfig":
        defaults = ViewerConfig()
        column_names = d.get("column_names", defaults.column_names)
        histograms = d.get("histograms", defaults.histograms)
        for key, value in (("column_names", column_names),
                           ("histograms", histograms)):
            if not isinstance(value, (list, tuple)):
                raise ConfigError(f"'{key}' must be a list, "
                                  f"got {type(value).__name__}")
        config = ViewerConfig(
            column_names=column_names,
            importer=d.get("importer", defaults.importer),
            auto_chart=d.get("auto_chart", defaults.auto_chart),
            histograms=histograms,
            encoding=d.get("encoding", defaults.encoding),
        )
        return config.validate()


def load_config(path: str) -> ViewerConfig:
    """Read a ViewerConfig from a JSON file."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            d = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ConfigError(f"Invalid config file {path}: {e}") from e
    if not isinstance(d, dict):
        raise ConfigError(f"Config file {path} must hold a JSON object")
    return ViewerConfig.from_dict(d)


def save_config(config: ViewerConfig, path: str):
    """Write a ViewerConfig to a JSON file."""
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(config.to_dict(), f, indent=2)
