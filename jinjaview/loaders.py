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

"""Jinja2 loader over a view's include path.

Resolution order when rendering ``view.render(c, "page.html")``:

1. ``<include_path[0]>/page.html``
2. ``<include_path[1]>/page.html``
3. ... and so on until a file is found.

The include path list is shared with the view, not copied, so entries
appended or removed at runtime are honoured on the next lookup.  Entries may
also be callables returning a directory (or a list of directories); those are
re-evaluated on every lookup.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable

from jinja2 import BaseLoader, Environment, TemplateNotFound
from jinja2.loaders import split_template_path

logger = logging.getLogger(__name__)


def _mtime(path: Path) -> float | None:
    try:
        return path.stat().st_mtime
    except OSError:
        return None


class IncludePathLoader(BaseLoader):
    """Jinja2 loader that searches an ordered, mutable list of directories."""

    def __init__(self, search_path: list[Any], encoding: str = "utf-8") -> None:
        self.search_path = search_path
        self.encoding = encoding

    def directories(self) -> list[Path]:
        """Resolve the current search path into concrete directories."""
        dirs: list[Path] = []
        for entry in self.search_path:
            if callable(entry):
                resolved = entry()
                if resolved is None:
                    continue
                if isinstance(resolved, (str, Path)):
                    dirs.append(Path(resolved))
                else:
                    dirs.extend(Path(p) for p in resolved)
            else:
                dirs.append(Path(entry))
        return dirs

    def find(self, template: str) -> Path | None:
        """Return the first file matching *template* on the current path."""
        pieces = split_template_path(template)
        for directory in self.directories():
            path = directory.joinpath(*pieces)
            if path.is_file():
                return path
        return None

    def get_source(
        self, environment: Environment, template: str,
    ) -> tuple[str, str, Callable[[], bool]]:
        path = self.find(template)
        if path is None:
            raise TemplateNotFound(template)
        source = path.read_text(encoding=self.encoding)
        mtime = _mtime(path)

        # Stale once the file changes or the search path resolves elsewhere.
        def uptodate() -> bool:
            return self.find(template) == path and _mtime(path) == mtime

        return source, str(path), uptodate

    def list_templates(self) -> list[str]:
        found: set[str] = set()
        for directory in self.directories():
            if not directory.is_dir():
                continue
            for path in directory.rglob("*"):
                if path.is_file():
                    found.add(path.relative_to(directory).as_posix())
        return sorted(found)
