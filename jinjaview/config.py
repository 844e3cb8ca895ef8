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

"""Configuration layers for views.

A view's effective configuration is built from several layers, merged in
order (later layers win)::

    DEFAULTS  <  View.config (class)  <  app.config["views"][name]  <  kwargs

Usage::

    from jinjaview.config import DEFAULTS, load_config, merge_config

    app_config = load_config("myapp.yaml")
    merged = merge_config(DEFAULTS, {"trim_blocks": True}, None, overrides)
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, Callable, Union

import yaml

from jinjaview.errors import ConfigError

logger = logging.getLogger(__name__)

# Keys whose mapping values are merged one level deep instead of replaced.
NESTED_KEYS = ("filters", "globals", "tests")

DEFAULTS: dict[str, Any] = {
    "content_type": "text/html; charset=utf-8",
    "template_extension": "",
    "context_var": "c",
    "encoding": "utf-8",
    "expose_methods": [],
    "timer": None,
}

IncludeEntry = Union[Path, Callable[[], Any]]


def merge_config(*layers: Mapping[str, Any] | None) -> dict[str, Any]:
    """Merge configuration mappings left to right.

    ``None`` layers are skipped and no input mapping is modified.
    """
    merged: dict[str, Any] = {}
    for layer in layers:
        if not layer:
            continue
        for key, value in layer.items():
            if key in NESTED_KEYS and isinstance(value, Mapping):
                merged[key] = {**merged.get(key, {}), **value}
            else:
                merged[key] = value
    return merged


def split_include_path(value: Any) -> list[IncludeEntry]:
    """Normalise an include path setting into a list of entries.

    Strings are split on :data:`os.pathsep`.  Callables are kept as-is and
    resolved on every template lookup.
    """
    if value is None:
        return []
    if isinstance(value, str):
        return [Path(part) for part in value.split(os.pathsep) if part]
    if isinstance(value, Path):
        return [value]
    if callable(value):
        return [value]
    if not isinstance(value, Iterable):
        raise ConfigError(f"Invalid include_path: {value!r}")

    entries: list[IncludeEntry] = []
    for item in value:
        if callable(item):
            entries.append(item)
        elif isinstance(item, str):
            entries.extend(split_include_path(item))
        elif isinstance(item, Path):
            entries.append(item)
        else:
            raise ConfigError(f"Invalid include_path entry: {item!r}")
    return entries


def load_config(path: str | Path) -> dict[str, Any]:
    """Read application configuration from a YAML file."""
    path = Path(path).expanduser()
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(
            f"Config file {path} must contain a mapping, got {type(data).__name__}"
        )
    logger.debug("Loaded config from %s (%d keys)", path, len(data))
    return data
