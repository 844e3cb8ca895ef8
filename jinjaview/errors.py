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

"""Exception hierarchy for jinjaview."""

from __future__ import annotations


class ViewError(Exception):
    """Base class for all view errors."""


class ConfigError(ViewError):
    """Raised when a view or application is misconfigured."""


class RenderError(ViewError):
    """Raised when a template cannot be rendered.

    The underlying Jinja2 exception is chained as ``__cause__``.
    """

    def __init__(self, template: str, reason: str) -> None:
        self.template = template
        self.reason = reason
        super().__init__(f'Couldn\'t render template "{template}": {reason}')
