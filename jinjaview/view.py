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

"""Jinja2 view for jinjaview applications.

A view is constructed once per application at startup.  It merges its
configuration layers, builds the Jinja2 environment (loader chain, options,
filters) and then renders a template into the response on every request it
is forwarded to.

Usage::

    from jinjaview import Application, View

    class Page(View):
        config = {"template_extension": ".html", "trim_blocks": True}

    app = Application("MyApp", root="templates", config={"default_view": "Page"})
    app.register_view("Page", Page)

    @app.route("/hello")
    def hello(c):
        c.stash["message"] = "hi"      # rendered with hello.html
"""

from __future__ import annotations

import functools
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from jinja2 import (
    ChainableUndefined,
    ChoiceLoader,
    DebugUndefined,
    Environment,
    FileSystemBytecodeCache,
    StrictUndefined,
    Template,
    TemplateNotFound,
    TemplateSyntaxError,
    Undefined,
    select_autoescape,
)
from markupsafe import Markup

from jinjaview.config import DEFAULTS, merge_config, split_include_path
from jinjaview.errors import ConfigError, RenderError
from jinjaview.loaders import IncludePathLoader
from jinjaview.providers import build_loader
from jinjaview.timer import Timer

if TYPE_CHECKING:
    from jinjaview.application import Application
    from jinjaview.context import Context

logger = logging.getLogger(__name__)

# Config keys passed straight through to jinja2.Environment.
ENVIRONMENT_OPTIONS = (
    "block_start_string",
    "block_end_string",
    "variable_start_string",
    "variable_end_string",
    "comment_start_string",
    "comment_end_string",
    "line_statement_prefix",
    "line_comment_prefix",
    "trim_blocks",
    "lstrip_blocks",
    "newline_sequence",
    "keep_trailing_newline",
    "extensions",
    "optimized",
    "undefined",
    "finalize",
    "autoescape",
    "cache_size",
    "auto_reload",
)

UNDEFINED_TYPES: dict[str, type[Undefined]] = {
    "default": Undefined,
    "strict": StrictUndefined,
    "debug": DebugUndefined,
    "chainable": ChainableUndefined,
}


def _resolve_undefined(value: Any) -> type[Undefined]:
    if isinstance(value, type) and issubclass(value, Undefined):
        return value
    try:
        return UNDEFINED_TYPES[str(value).lower()]
    except KeyError:
        raise ConfigError(
            f"Unknown undefined type {value!r}. Available: {sorted(UNDEFINED_TYPES)}"
        ) from None


class View:
    """Render Jinja2 templates into the response of a request context.

    Class attributes:
        config – class-level configuration layer.  A subclass's ``config``
            is merged on top of its parents' rather than replacing it.

    Args:
        app: The owning application.
        name: Component name, used to find the ``app.config["views"]``
            section.  Defaults to the class name.
        **arguments: Highest-priority configuration layer.
    """

    config: dict[str, Any] = {}

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        inherited = merge_config(
            *(getattr(base, "config", None) for base in reversed(cls.__bases__))
        )
        cls.config = merge_config(inherited, cls.__dict__.get("config"))

    def __init__(self, app: Application, name: str | None = None, **arguments: Any) -> None:
        self.app = app
        self.name = name or type(self).__name__

        app_layer = (app.config.get("views") or {}).get(self.name)
        config = merge_config(DEFAULTS, type(self).config, app_layer, arguments)

        include_path = split_include_path(config.get("include_path"))
        if not include_path:
            root = Path(app.config.get("root") or Path.cwd())
            include_path = [root, root / "base"]
        config["include_path"] = include_path
        self.config = config
        self._include_path = include_path

        timer = config["timer"]
        if timer is None:
            timer = app.debug
        self._timer = Timer() if timer else None
        self._exposed = self._resolve_exposed_methods()
        self._environment = self._build_environment()

        if app.debug:
            app.log.debug(
                "View %s: include path %s",
                self.name, [str(p) for p in include_path],
            )

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r}>"

    # --- Construction ---

    def _build_environment(self) -> Environment:
        config = self.config
        options = {key: config[key] for key in ENVIRONMENT_OPTIONS if key in config}
        options.setdefault("autoescape", select_autoescape())
        if "undefined" in options:
            options["undefined"] = _resolve_undefined(options["undefined"])

        compile_dir = config.get("compile_dir")
        if compile_dir:
            directory = Path(compile_dir).expanduser()
            directory.mkdir(parents=True, exist_ok=True)
            options["bytecode_cache"] = FileSystemBytecodeCache(str(directory))

        env = Environment(loader=build_loader(self, config.get("providers")), **options)
        env.filters.update(config.get("filters") or {})
        env.globals.update(config.get("globals") or {})
        env.tests.update(config.get("tests") or {})
        return env

    def _resolve_exposed_methods(self) -> dict[str, Any]:
        exposed = {}
        for method_name in self.config.get("expose_methods") or []:
            method = getattr(self, method_name, None)
            if not callable(method):
                raise ConfigError(
                    f"{type(self).__name__} has no method {method_name!r} to expose"
                )
            exposed[method_name] = method
        return exposed

    # --- Properties ---

    @property
    def environment(self) -> Environment:
        return self._environment

    @property
    def include_path(self) -> list[Any]:
        """The live include path shared with the file provider."""
        return self._include_path

    @include_path.setter
    def include_path(self, value: Any) -> None:
        self._include_path[:] = split_include_path(value)

    @property
    def content_type(self) -> str:
        return self.config["content_type"]

    @property
    def template_extension(self) -> str:
        return self.config["template_extension"] or ""

    # --- Rendering ---

    def template_vars(self, c: Context) -> dict[str, Any]:
        """Framework-derived variables added to every template scope."""
        variables: dict[str, Any] = {
            "base": str(c.request.base_url),
            "name": self.app.config.get("name"),
        }
        context_var = self.config.get("context_var")
        if context_var:
            variables[context_var] = c
        for method_name, method in self._exposed.items():
            variables[method_name] = functools.partial(method, c)
        return variables

    def has_template(self, template: str) -> bool:
        """Check whether *template* can be found by the loader chain."""
        try:
            self._environment.get_template(template)
            return True
        except TemplateNotFound:
            return False

    def render(self, c: Context, template: str, args: dict[str, Any] | None = None) -> str:
        """Render *template* and return the output.

        The scope is *args* if given, else the stash; the values from
        :meth:`template_vars` take precedence over both.

        Raises :class:`~jinjaview.errors.RenderError` on any failure.
        """
        scope = dict(c.stash if args is None else args)
        scope.update(self.template_vars(c))
        env = self._environment_for(c)

        if c.debug:
            c.log.debug('Rendering template "%s"', template)

        try:
            output = self._render_one(env, "process", template, scope)
            wrapper = self.config.get("wrapper")
            if wrapper:
                scope["content"] = Markup(output)
                output = self._render_one(env, "wrapper", wrapper, scope)
        except TemplateSyntaxError as exc:
            location = exc.filename or exc.name or template
            raise RenderError(template, f"{location} line {exc.lineno}: {exc.message}") from exc
        except TemplateNotFound as exc:
            raise RenderError(template, f"template not found: {exc.name}") from exc
        except Exception as exc:
            raise RenderError(template, f"{type(exc).__name__}: {exc}") from exc
        return output

    def process(self, c: Context) -> bool:
        """Render the request's template into ``c.response``.

        The template is ``c.stash["template"]``, or the matched action path
        plus ``template_extension``.  Returns ``False`` when there is nothing
        to render or rendering failed (the error is added to ``c.errors``).
        """
        if not c.response.content_type:
            c.response.content_type = self.content_type

        template = c.stash.get("template")
        if not template and c.action:
            template = c.action + self.template_extension
        if not template:
            if c.debug:
                c.log.debug("No template specified for rendering")
            return False

        try:
            output = self.render(c, template)
        except RenderError as exc:
            c.log.error(str(exc))
            c.error(str(exc))
            return False

        c.response.body = output
        return True

    def _render_one(self, env: Environment, kind: str, name: str, scope: dict[str, Any]) -> str:
        tmpl: Template = env.get_template(name)
        if self._timer is None:
            return tmpl.render(scope)
        return self._timer.run(kind, name, lambda: tmpl.render(scope))

    def _environment_for(self, c: Context) -> Environment:
        """Return the environment to use for this request.

        ``c.stash["additional_template_paths"]`` is searched before the
        configured providers.  The overlay gets its own template cache so
        per-request lookups never leak into other requests.
        """
        extra = split_include_path(c.stash.get("additional_template_paths"))
        if not extra:
            return self._environment
        loader = ChoiceLoader([
            IncludePathLoader(extra, encoding=self.config["encoding"]),
            self._environment.loader,
        ])
        return self._environment.overlay(loader=loader)
