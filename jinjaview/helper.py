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

"""Scaffolding for new view classes.

Usage::

    jinjaview-create-view Page myapp/views --extension .html

writes ``myapp/views/page.py`` containing a :class:`~jinjaview.View`
subclass ready to be registered with ``app.register_view("Page", Page)``.
"""

from __future__ import annotations

import argparse
import logging
import re
from pathlib import Path

from jinja2 import Environment

from jinjaview.loaders import IncludePathLoader

logger = logging.getLogger(__name__)

SKELETON_DIR = Path(__file__).parent / "skeletons"


def _snake_case(name: str) -> str:
    name = re.sub(r"(?<=[a-z0-9])([A-Z])", r"_\1", name)
    return re.sub(r"\W+", "_", name).strip("_").lower()


def create_view(
    name: str,
    directory: str | Path,
    base: str = "jinjaview.View",
    template_extension: str = ".html",
    app_name: str | None = None,
    force: bool = False,
) -> Path:
    """Write a view module skeleton and return its path.

    Raises :class:`FileExistsError` if the module exists and *force* is
    not set.
    """
    if not name.isidentifier():
        raise ValueError(f"View name {name!r} is not a valid class name")
    base_module, _, base_class = base.rpartition(".")
    if not base_module:
        raise ValueError(f"Base class {base!r} must be a dotted path")

    directory = Path(directory).expanduser()
    target = directory / f"{_snake_case(name)}.py"
    if target.exists() and not force:
        raise FileExistsError(f"{target} already exists (use force to overwrite)")

    env = Environment(
        loader=IncludePathLoader([SKELETON_DIR]),
        keep_trailing_newline=True,
        autoescape=False,  # Generates Python source, not HTML
    )
    source = env.get_template("view.py.j2").render(
        class_name=name,
        base_module=base_module,
        base_class=base_class,
        template_extension=template_extension,
        app_name=app_name,
    )

    directory.mkdir(parents=True, exist_ok=True)
    target.write_text(source, encoding="utf-8")
    logger.info("Created view %s in %s", name, target)
    return target


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="jinjaview-create-view",
        description="Create a jinjaview View subclass skeleton.",
    )
    parser.add_argument("name", help="class name of the new view, e.g. Page")
    parser.add_argument("directory", nargs="?", default=".", help="target directory")
    parser.add_argument("--base", default="jinjaview.View", help="dotted base class")
    parser.add_argument("--extension", default=".html", help="template extension")
    parser.add_argument("--app-name", default=None, help="application name for the docstring")
    parser.add_argument("--force", action="store_true", help="overwrite an existing module")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    try:
        path = create_view(
            args.name,
            args.directory,
            base=args.base,
            template_extension=args.extension,
            app_name=args.app_name,
            force=args.force,
        )
    except (ValueError, FileExistsError) as exc:
        logger.error("%s", exc)
        return 1
    print(path)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
