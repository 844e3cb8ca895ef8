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

"""Jinja2 view layer for Starlette applications.

Actions fill a per-request stash; a :class:`View` picks the template, merges
the stash with a few framework values (``c``, ``base``, ``name``) and writes
the rendered output into the response.

Usage::

    from jinjaview import Application, View

    app = Application("MyApp", root="templates", config={
        "default_view": "HTML",
        "views": {"HTML": {"template_extension": ".html"}},
    })
    app.register_view("HTML", View)

    @app.route("/hello")
    def hello(c):
        c.stash["message"] = c.param("message", "hi")

    asgi_app = app.asgi()
"""

from jinjaview.application import Application
from jinjaview.config import load_config, merge_config
from jinjaview.context import Context, ResponseState
from jinjaview.errors import ConfigError, RenderError, ViewError
from jinjaview.providers import get_provider, list_providers, register_provider
from jinjaview.view import View

__all__ = [
    "Application",
    "ConfigError",
    "Context",
    "RenderError",
    "ResponseState",
    "View",
    "ViewError",
    "get_provider",
    "list_providers",
    "load_config",
    "merge_config",
    "register_provider",
]
