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

"""Tests for the template provider registry."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from jinja2 import ChoiceLoader, DictLoader, Environment, PrefixLoader

from jinjaview.errors import ConfigError
from jinjaview.loaders import IncludePathLoader
from jinjaview.providers import (
    _REGISTRY,
    build_loader,
    get_provider,
    list_providers,
    register_provider,
)


def _make_view(tmp_path) -> MagicMock:
    view = MagicMock()
    view.include_path = [tmp_path]
    view.config = {"encoding": "utf-8"}
    return view


class TestBuiltinRegistration:
    def test_builtins_registered(self):
        names = list_providers()
        for name in ("file", "package", "dict", "function", "prefix"):
            assert name in names

    def test_get_provider_returns_callable(self):
        for name in ("file", "dict", "function"):
            assert callable(get_provider(name))

    def test_unknown_provider_raises(self):
        with pytest.raises(ConfigError, match="Unknown provider"):
            get_provider("nonexistent_provider")

    def test_unimportable_provider_raises(self):
        with pytest.raises(ConfigError, match="Cannot import provider"):
            get_provider("no_such_module.Loader")


class TestBuildLoader:
    def test_default_is_shared_include_path(self, tmp_path):
        view = _make_view(tmp_path)
        loader = build_loader(view)
        assert isinstance(loader, IncludePathLoader)
        assert loader.search_path is view.include_path

    def test_file_provider_with_own_paths(self, tmp_path):
        view = _make_view(tmp_path)
        other = tmp_path / "other"
        loader = build_loader(view, [{"name": "file", "args": {"paths": [str(other)]}}])
        assert loader.search_path == [other]
        assert loader.search_path is not view.include_path

    def test_single_spec_not_wrapped(self, tmp_path):
        loader = build_loader(_make_view(tmp_path), [
            {"name": "dict", "args": {"mapping": {"a.html": "A"}}},
        ])
        assert isinstance(loader, DictLoader)

    def test_chain_in_spec_order(self, tmp_path):
        (tmp_path / "page.html").write_text("from file")
        view = _make_view(tmp_path)

        loader = build_loader(view, [
            {"name": "dict", "args": {"mapping": {"page.html": "from dict"}}},
            "file",
        ])
        assert isinstance(loader, ChoiceLoader)

        env = Environment(loader=loader)
        assert env.get_template("page.html").render() == "from dict"

    def test_chain_falls_through(self, tmp_path):
        (tmp_path / "only_file.html").write_text("from file")
        loader = build_loader(_make_view(tmp_path), [
            {"name": "dict", "args": {"mapping": {}}},
            {"name": "file"},
        ])
        env = Environment(loader=loader)
        assert env.get_template("only_file.html").render() == "from file"

    def test_function_provider(self, tmp_path):
        loader = build_loader(_make_view(tmp_path), [
            {"name": "function", "args": {"load_func": lambda name: f"<{name}>"}},
        ])
        env = Environment(loader=loader, autoescape=False)
        assert env.get_template("x.html").render() == "<x.html>"

    def test_prefix_provider(self, tmp_path):
        loader = build_loader(_make_view(tmp_path), [
            {
                "name": "prefix",
                "args": {
                    "mapping": {
                        "mail": {"name": "dict", "args": {"mapping": {"welcome.txt": "hi"}}},
                    },
                },
            },
        ])
        assert isinstance(loader, PrefixLoader)
        assert Environment(loader=loader).get_template("mail/welcome.txt").render() == "hi"

    def test_import_path_loader_class(self, tmp_path):
        loader = build_loader(_make_view(tmp_path), [
            {"name": "jinja2.loaders:DictLoader", "args": {"mapping": {"a": "A"}}},
        ])
        assert isinstance(loader, DictLoader)

    def test_loader_instance_used_as_is(self, tmp_path):
        instance = DictLoader({})
        assert build_loader(_make_view(tmp_path), [instance]) is instance

    def test_spec_without_name(self, tmp_path):
        with pytest.raises(ConfigError, match="without a name"):
            build_loader(_make_view(tmp_path), [{"args": {}}])

    def test_invalid_spec(self, tmp_path):
        with pytest.raises(ConfigError, match="Invalid provider spec"):
            build_loader(_make_view(tmp_path), [42])


class TestCustomRegistration:
    def test_register_custom_provider(self, tmp_path):
        calls = []

        def fake_provider(view, **args):
            calls.append(args)
            return DictLoader({"custom.html": "custom"})

        register_provider("test_custom", fake_provider)
        try:
            assert "test_custom" in list_providers()
            loader = build_loader(_make_view(tmp_path), [
                {"name": "test_custom", "args": {"token": "t"}},
            ])
            assert calls == [{"token": "t"}]
            assert Environment(loader=loader).get_template("custom.html").render() == "custom"
        finally:
            # Clean up to avoid polluting other tests
            _REGISTRY.pop("test_custom", None)
