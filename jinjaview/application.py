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

"""Host application: views, actions and the Starlette request cycle.

Request flow::

    Starlette route -> Context -> action(c) -> end(c) -> view.process(c)
                    -> Starlette Response

The default end action forwards to a view unless the action already produced
a body or a redirect.  The view is picked by the ``view`` query parameter,
falling back to ``config["default_view"]``.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any

from starlette.applications import Starlette
from starlette.concurrency import run_in_threadpool
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response
from starlette.routing import Route

from jinjaview.config import load_config, merge_config
from jinjaview.context import Context
from jinjaview.errors import ConfigError
from jinjaview.view import View

logger = logging.getLogger(__name__)

Action = Callable[[Context], Any]


def _action_path(path: str) -> str:
    """Derive an action path from a route path, dropping parameter segments."""
    segments = [s for s in path.strip("/").split("/") if s and "{" not in s]
    return "/".join(segments)


class Application:
    """A named application with configuration, views and routes.

    Args:
        name: Application name, exposed to templates as ``name``.
        root: Template root directory.  Views without an ``include_path``
            search ``root`` and ``root/base``.
        config: Application configuration.  The ``views`` mapping holds
            per-view configuration sections keyed by view name.
        debug: Enable debug logging and render timing.
    """

    def __init__(
        self,
        name: str,
        root: str | Path | None = None,
        config: dict[str, Any] | None = None,
        debug: bool = False,
    ) -> None:
        self.config = merge_config(config, {"name": name})
        self.config["root"] = Path(root or self.config.get("root") or Path.cwd())
        self.debug = bool(debug or self.config.get("debug"))
        self.log = logging.getLogger(name)

        self._view_specs: dict[str, tuple[type[View], dict[str, Any]]] = {}
        self._views: dict[str, View] = {}
        self._routes: list[Route] = []
        self._end: Action = self.default_end
        self._asgi: Starlette | None = None
        self._setup_done = False

    @classmethod
    def from_config_file(cls, path: str | Path, **kwargs: Any) -> Application:
        """Create an application from a YAML config file.

        The file must define ``name``; *kwargs* override the file, and a
        ``config`` mapping among them is merged on top of the file's.
        """
        config = merge_config(load_config(path), kwargs.pop("config", None))
        name = kwargs.pop("name", None) or config.get("name")
        if not name:
            raise ConfigError(f"Config file {path} does not define a name")
        return cls(name, config=config, **kwargs)

    # --- Views ---

    def register_view(self, name: str, cls: type[View] = View, **arguments: Any) -> None:
        """Register a view class; it is constructed by :meth:`setup`."""
        self._view_specs[name] = (cls, arguments)
        if self._setup_done:
            self._load_view(name)

    def setup(self) -> None:
        """Construct all registered views.  Safe to call more than once."""
        for name in self._view_specs:
            if name not in self._views:
                self._load_view(name)
        self._setup_done = True

    def _load_view(self, name: str) -> None:
        cls, arguments = self._view_specs[name]
        self._views[name] = cls(self, name=name, **arguments)
        if self.debug:
            self.log.debug('Loaded view "%s" (%s)', name, cls.__name__)

    def view(self, name: str | None = None) -> View:
        """Return a view by name, or the default view."""
        self.setup()
        if name is None:
            name = self.config.get("default_view")
        if name is None and len(self._views) == 1:
            return next(iter(self._views.values()))
        try:
            return self._views[name]
        except KeyError:
            raise ConfigError(
                f"Unknown view {name!r}. Available: {sorted(self._views)}"
            ) from None

    @property
    def views(self) -> dict[str, View]:
        self.setup()
        return dict(self._views)

    # --- Actions ---

    def route(
        self,
        path: str,
        name: str | None = None,
        methods: Iterable[str] = ("GET",),
        action: str | None = None,
    ) -> Callable[[Action], Action]:
        """Register *func* as the action for *path*."""

        def decorator(func: Action) -> Action:
            action_path = _action_path(path) if action is None else action
            self._routes.append(
                Route(
                    path,
                    self._make_endpoint(func, action_path),
                    methods=list(methods),
                    name=name or func.__name__,
                )
            )
            self._asgi = None
            return func

        return decorator

    def end(self, func: Action) -> Action:
        """Replace the end action run after every action."""
        self._end = func
        return func

    def default_end(self, c: Context) -> None:
        if c.response.is_redirect or c.response.body:
            return
        c.forward(c.param("view") or None)

    def _make_endpoint(self, func: Action, action_path: str) -> Callable[[Request], Any]:
        async def endpoint(request: Request) -> Response:
            c = Context(self, request, action=action_path)
            try:
                for step in (func, self._end):
                    await self._run_step(step, c)
            except Exception as exc:
                self.log.exception("Caught exception in action %s", action_path or "/")
                c.error(f"Caught exception in {action_path or '/'}: {exc}")
            return self.finalize(c)

        return endpoint

    @staticmethod
    async def _run_step(step: Action, c: Context) -> None:
        """Await coroutine steps; run plain functions in the threadpool."""
        if inspect.iscoroutinefunction(step):
            await step(c)
            return
        result = await run_in_threadpool(step, c)
        if inspect.isawaitable(result):
            await result

    # --- Responses ---

    def finalize(self, c: Context) -> Response:
        """Convert the context's response state into a Starlette response."""
        if c.errors:
            body = "\n".join(c.errors) if self.debug else "Internal Server Error"
            return PlainTextResponse(body, status_code=500)

        state = c.response
        headers = dict(state.headers)
        media_type = headers.pop("content-type", None)
        return Response(
            content=state.body if state.body is not None else b"",
            status_code=state.status,
            headers=headers,
            media_type=media_type,
        )

    def asgi(self) -> Starlette:
        """Return the Starlette application, constructing views first."""
        if self._asgi is None:
            self.setup()
            logger.debug(
                "Building ASGI app for %s: %d routes, views %s",
                self.config["name"], len(self._routes), sorted(self._views),
            )
            self._asgi = Starlette(debug=self.debug, routes=list(self._routes))
        return self._asgi

    async def __call__(self, scope: Any, receive: Any, send: Any) -> None:
        await self.asgi()(scope, receive, send)
