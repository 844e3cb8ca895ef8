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

"""Per-request context handed to actions and views.

One :class:`Context` is created for every request.  Actions fill its
``stash``; the end action forwards it to a view, which writes the rendered
output into ``c.response``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from starlette.requests import Request

if TYPE_CHECKING:
    from jinjaview.application import Application
    from jinjaview.view import View


@dataclass
class ResponseState:
    """Mutable response under construction for the current request."""

    status: int = 200
    headers: dict[str, str] = field(default_factory=dict)
    body: str | bytes | None = None

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")

    @content_type.setter
    def content_type(self, value: str) -> None:
        self.headers["content-type"] = value

    @property
    def is_redirect(self) -> bool:
        return 300 <= self.status < 400

    def redirect(self, url: str, status: int = 302) -> None:
        self.status = status
        self.headers["location"] = str(url)


class Context:
    """Request context: stash, response state and collected errors.

    Args:
        app: The application handling the request.
        request: The Starlette request.
        action: Path of the matched action (e.g. ``"user/list"``).
    """

    def __init__(self, app: Application, request: Request, action: str = "") -> None:
        self.app = app
        self.request = request
        self.action = action
        self.stash: dict[str, Any] = {}
        self.response = ResponseState()
        self.errors: list[str] = []

    # Short aliases for use in templates: c.req.base_url, c.res.status
    @property
    def req(self) -> Request:
        return self.request

    @property
    def res(self) -> ResponseState:
        return self.response

    @property
    def config(self) -> dict[str, Any]:
        return self.app.config

    @property
    def debug(self) -> bool:
        return self.app.debug

    @property
    def log(self) -> logging.Logger:
        return self.app.log

    def error(self, message: Any) -> None:
        self.errors.append(str(message))

    def param(self, name: str, default: str | None = None) -> str | None:
        """Return a query string parameter."""
        return self.request.query_params.get(name, default)

    def uri_for(self, name: str, **path_params: Any) -> str:
        return str(self.request.url_for(name, **path_params))

    def view(self, name: str | None = None) -> View:
        return self.app.view(name)

    def forward(self, view_name: str | None = None) -> bool:
        """Process this request with the named (or default) view."""
        return self.view(view_name).process(self)
