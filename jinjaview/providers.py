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

"""Template provider registry.

A *provider* is a factory producing a Jinja2 loader for a view.  A view's
``providers`` setting lists the providers to chain together; templates are
looked up in each provider in turn (a Jinja2 ``ChoiceLoader``).

All registered providers share a uniform calling convention::

    factory(view, **args) -> jinja2.BaseLoader

Providers are registered by name and built-ins are lazily registered on
first access.  New providers can be registered at runtime via
:func:`register_provider`.  A provider name containing a dot or colon is
imported (``"mypkg.loaders:DatabaseLoader"``) instead of looked up.

Example ``providers`` setting::

    providers:
      - name: file
      - name: package
        args: {package_name: myapp, package_path: templates}
"""

from __future__ import annotations

import importlib
import inspect
import logging
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from jinja2 import (
    BaseLoader,
    ChoiceLoader,
    DictLoader,
    FunctionLoader,
    PackageLoader,
    PrefixLoader,
)

from jinjaview.config import split_include_path
from jinjaview.errors import ConfigError
from jinjaview.loaders import IncludePathLoader

if TYPE_CHECKING:
    from jinjaview.view import View

logger = logging.getLogger(__name__)

ProviderFactory = Callable[..., BaseLoader]

# Registry: provider name -> factory
_REGISTRY: dict[str, ProviderFactory] = {}


def register_provider(name: str, factory: ProviderFactory) -> None:
    """Register a loader factory under *name*."""
    _REGISTRY[name] = factory


def list_providers() -> list[str]:
    """Return names of all registered providers."""
    _ensure_builtins()
    return list(_REGISTRY.keys())


def get_provider(name: str) -> ProviderFactory:
    """Return the factory for a provider name or import path.

    Raises :class:`~jinjaview.errors.ConfigError` if the provider is not
    registered and cannot be imported.
    """
    _ensure_builtins()
    factory = _REGISTRY.get(name)
    if factory is not None:
        return factory
    if "." in name or ":" in name:
        return _import_provider(name)
    raise ConfigError(
        f"Unknown provider {name!r}. Available: {sorted(_REGISTRY.keys())}"
    )


def build_loader(view: View, specs: list[Any] | None = None) -> BaseLoader:
    """Build the loader chain for *view* from provider *specs*.

    With no specs the view's include path is used on its own.
    """
    if not specs:
        return _file_provider(view)
    loaders = [_build_one(view, spec) for spec in specs]
    if len(loaders) == 1:
        return loaders[0]
    return ChoiceLoader(loaders)


def _build_one(view: View, spec: Any) -> BaseLoader:
    if isinstance(spec, BaseLoader):
        return spec
    if isinstance(spec, str):
        name, args = spec, {}
    elif isinstance(spec, Mapping):
        name = spec.get("name")
        args = spec.get("args") or {}
        if not name:
            raise ConfigError(f"Provider spec without a name: {spec!r}")
        if not isinstance(args, Mapping):
            raise ConfigError(f"Provider args for {name!r} must be a mapping")
    else:
        raise ConfigError(f"Invalid provider spec: {spec!r}")

    factory = get_provider(name)
    logger.debug("Building provider %s with args %s", name, sorted(args))
    return factory(view, **args)


def _import_provider(path: str) -> ProviderFactory:
    """Resolve ``module:attr`` or ``module.attr`` to a provider factory."""
    if ":" in path:
        module_name, _, attr = path.partition(":")
    else:
        module_name, _, attr = path.rpartition(".")
    try:
        module = importlib.import_module(module_name)
        target = getattr(module, attr)
    except (ImportError, AttributeError) as exc:
        raise ConfigError(f"Cannot import provider {path!r}: {exc}") from exc

    if inspect.isclass(target) and issubclass(target, BaseLoader):
        return lambda view, **args: target(**args)
    if callable(target):
        return target
    raise ConfigError(f"Provider {path!r} is neither a loader class nor callable")


# ---------------------------------------------------------------------------
# Built-in providers
# ---------------------------------------------------------------------------


def _file_provider(view: View, paths: Any = None, encoding: str | None = None) -> BaseLoader:
    search_path = view.include_path if paths is None else split_include_path(paths)
    return IncludePathLoader(search_path, encoding=encoding or view.config["encoding"])


def _package_provider(
    view: View, package_name: str, package_path: str = "templates",
    encoding: str | None = None,
) -> BaseLoader:
    return PackageLoader(
        package_name, package_path, encoding=encoding or view.config["encoding"],
    )


def _dict_provider(view: View, mapping: Mapping[str, str]) -> BaseLoader:
    return DictLoader(dict(mapping))


def _function_provider(view: View, load_func: Callable[[str], Any]) -> BaseLoader:
    return FunctionLoader(load_func)


def _prefix_provider(
    view: View, mapping: Mapping[str, Any], delimiter: str = "/",
) -> BaseLoader:
    return PrefixLoader(
        {prefix: _build_one(view, spec) for prefix, spec in mapping.items()},
        delimiter=delimiter,
    )


def _ensure_builtins() -> None:
    """Register built-in providers that have not been overridden."""
    builtins = {
        "file": _file_provider,
        "package": _package_provider,
        "dict": _dict_provider,
        "function": _function_provider,
        "prefix": _prefix_provider,
    }
    for name, factory in builtins.items():
        _REGISTRY.setdefault(name, factory)
