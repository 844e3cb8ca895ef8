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

"""Render timing annotations.

When a view's ``timer`` option is on, rendered output is bracketed with HTML
comments recording how long each step took::

    <!-- TIMER START: process page.html -->
    ...
    <!-- TIMER END: process page.html (0.001234 seconds) -->
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import TypeVar

T = TypeVar("T")


class Timer:
    """Time render steps and annotate their output."""

    def __init__(self, clock: Callable[[], float] = time.perf_counter) -> None:
        self._clock = clock

    def measure(self, func: Callable[[], T]) -> tuple[T, float]:
        """Call *func* and return ``(result, elapsed_seconds)``."""
        start = self._clock()
        result = func()
        return result, self._clock() - start

    @staticmethod
    def wrap(kind: str, name: str, output: str, elapsed: float) -> str:
        return (
            f"<!-- TIMER START: {kind} {name} -->\n"
            f"{output}"
            f"<!-- TIMER END: {kind} {name} ({elapsed:.6f} seconds) -->\n"
        )

    def run(self, kind: str, name: str, func: Callable[[], str]) -> str:
        output, elapsed = self.measure(func)
        return self.wrap(kind, name, output, elapsed)
