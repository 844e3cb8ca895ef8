# jinjaview — Jinja2 view layer for Starlette applications
# Copyright (C) 2024-2026 Dr Horst Herb
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

"""Tests for jinjaview.config."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from jinjaview.config import DEFAULTS, load_config, merge_config, split_include_path
from jinjaview.errors import ConfigError


class TestMergeConfig:
    def test_later_layers_win(self):
        merged = merge_config({"a": 1, "b": 1}, {"b": 2}, {"c": 3})
        assert merged == {"a": 1, "b": 2, "c": 3}

    def test_none_layers_skipped(self):
        assert merge_config(None, {"a": 1}, None) == {"a": 1}

    def test_inputs_not_mutated(self):
        base = {"a": 1, "filters": {"x": str}}
        override = {"a": 2, "filters": {"y": repr}}
        merge_config(base, override)
        assert base == {"a": 1, "filters": {"x": str}}
        assert override == {"a": 2, "filters": {"y": repr}}

    def test_nested_keys_merged_one_level(self):
        merged = merge_config(
            {"filters": {"upper": str.upper}, "globals": {"site": "a"}},
            {"filters": {"lower": str.lower}, "globals": {"site": "b"}},
        )
        assert set(merged["filters"]) == {"upper", "lower"}
        assert merged["globals"] == {"site": "b"}

    def test_other_mappings_replaced(self):
        merged = merge_config({"views": {"A": {}}}, {"views": {"B": {}}})
        assert merged["views"] == {"B": {}}

    def test_defaults(self):
        assert DEFAULTS["content_type"] == "text/html; charset=utf-8"
        assert DEFAULTS["context_var"] == "c"


class TestSplitIncludePath:
    def test_none(self):
        assert split_include_path(None) == []

    def test_string_split_on_pathsep(self):
        value = os.pathsep.join(["/srv/a", "", "/srv/b"])
        assert split_include_path(value) == [Path("/srv/a"), Path("/srv/b")]

    def test_path(self):
        assert split_include_path(Path("/srv")) == [Path("/srv")]

    def test_list_with_callables(self):
        def dynamic():
            return "/srv/dyn"

        entries = split_include_path(["/srv/a", Path("/srv/b"), dynamic])
        assert entries == [Path("/srv/a"), Path("/srv/b"), dynamic]

    def test_invalid_entry(self):
        with pytest.raises(ConfigError, match="Invalid include_path entry"):
            split_include_path(["/srv", 42])

    def test_invalid_value(self):
        with pytest.raises(ConfigError):
            split_include_path(42)


class TestLoadConfig:
    def test_reads_yaml(self, tmp_path):
        path = tmp_path / "app.yaml"
        path.write_text(
            "name: TestApp\n"
            "default_view: Appconfig\n"
            "views:\n"
            "  Appconfig:\n"
            "    trim_blocks: true\n"
            "    template_extension: .html\n"
        )
        config = load_config(path)
        assert config["name"] == "TestApp"
        assert config["views"]["Appconfig"]["trim_blocks"] is True

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(path) == {}

    def test_non_mapping_rejected(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="must contain a mapping"):
            load_config(path)

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("name: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="Cannot read"):
            load_config(tmp_path / "nope.yaml")
