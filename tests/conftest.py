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

"""Shared fixtures for jinjaview tests."""

from __future__ import annotations

from pathlib import Path

import pytest
from starlette.requests import Request

from jinjaview.application import Application
from jinjaview.context import Context


def make_request(path: str = "/", query_string: bytes = b"") -> Request:
    scope = {
        "type": "http",
        "method": "GET",
        "scheme": "http",
        "server": ("testserver", 80),
        "root_path": "",
        "path": path,
        "query_string": query_string,
        "headers": [],
    }
    return Request(scope)


@pytest.fixture
def root(tmp_path: Path) -> Path:
    root = tmp_path / "root"
    (root / "base").mkdir(parents=True)
    return root


@pytest.fixture
def app(root: Path) -> Application:
    return Application("TestApp", root=root)


@pytest.fixture
def make_context(app: Application):
    def _make(action: str = "", path: str = "/", query_string: bytes = b"") -> Context:
        return Context(app, make_request(path, query_string), action=action)

    return _make
