"""Tests for view_log.py command-line handling."""

import json
import os
import sys
import tempfile
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from view_log import build_config, build_parser, main
from lcsview.config import DEFAULT_COLUMNS
from lcsview.errors import ConfigError


class TestBuildConfig:
    def test_defaults(self):
        args = build_parser().parse_args([])
        config = build_config(args)
        assert args.log is None
        assert args.port == 8050
        assert config.column_names == DEFAULT_COLUMNS
        assert config.importer == "default"

    def test_overrides(self):
        args = build_parser().parse_args(
            ["run.jsonl", "--format", "jsonl", "--columns", "Condition, Action,Fitness"])
        config = build_config(args)
        assert args.log == "run.jsonl"
        assert config.importer == "jsonl"
        assert config.column_names == ("Condition", "Action", "Fitness")

    def test_config_file(self):
        tmpdir = tempfile.mkdtemp()
        path = os.path.join(tmpdir, "viewer.json")
        with open(path, "w") as f:
            json.dump({"column_names": ["Condition", "Action"],
                       "histograms": []}, f)
        config = build_config(build_parser().parse_args(["--config", path]))
        assert config.column_names == ("Condition", "Action")
        assert config.histograms == []

    def test_invalid_columns(self):
        args = build_parser().parse_args(["--columns", "Condition"])
        with pytest.raises(ConfigError):
            build_config(args)


class TestMain:
    def test_bad_config_exit_code(self):
        assert main(["--columns", "Condition"]) == 2

    def test_missing_log_exit_code(self):
        assert main(["/nonexistent/missing.log"]) == 1

    def test_config_file_with_wrong_types_exit_code(self):
        tmpdir = tempfile.mkdtemp()
        path = os.path.join(tmpdir, "viewer.json")
        with open(path, "w") as f:
            json.dump({"column_names": 5}, f)
        assert main(["--config", path]) == 2
