# This file is part of Dindbuild, a tool for building docker-in-docker images for docker-engine releases.
#
# Copyright 2025 Canonical Ltd.
#
# SPDX-License-Identifier: GPL-3.0-only
#
# Dindbuild is free software: you can redistribute it and/or modify it under
# the terms of the GNU General Public License version 3, as published by the
# Free Software Foundation.
#
# Dindbuild is distributed in the hope that it will be useful, but WITHOUT
# ANY WARRANTY; without even the implied warranties of MERCHANTABILITY,
# SATISFACTORY QUALITY, or FITNESS FOR A PARTICULAR PURPOSE. See the GNU
# General Public License for more details.
#
# You should have received a copy of the GNU General Public License along with
# Dindbuild. If not, see <http://www.gnu.org/licenses/>.

"""TTY-aware spinner shown while long pipeline steps run.

Uses a Rich spinner when stdout is a TTY and plain activity lines otherwise.
Output goes straight to the real terminal (sys.__stdout__) so it never lands
in the captured run logs.
"""

from __future__ import annotations

import contextlib
import sys
from collections.abc import Iterator

from rich.console import Console
from rich.live import Live
from rich.spinner import Spinner


def is_tty() -> bool:
    """Return True if stdout is a TTY."""
    try:
        if sys.__stdout__ is None:
            return False  # pragma: no cover
        return sys.__stdout__.isatty()
    except (AttributeError, ValueError):  # pragma: no cover
        return False


@contextlib.contextmanager
def activity_spinner(phase: str, description: str, disable: bool = False) -> Iterator[None]:
    """Show a spinner for ``description`` while the wrapped block runs.

    The completed line is printed once the block exits normally. If the
    block raises, the line is printed with a ``failed`` suffix and the
    exception propagates.
    """
    text = f"[{phase}] {description}"

    if disable or not is_tty():
        with contextlib.suppress(Exception):  # pragma: no cover
            print(text, file=sys.__stdout__, flush=True)
        yield
        return

    console = Console(file=sys.__stdout__, force_terminal=True)
    spinner = Spinner("dots", text=text)
    failed = False
    try:
        with Live(spinner, console=console, refresh_per_second=12, transient=True):
            yield
    except BaseException:
        failed = True
        raise
    finally:
        with contextlib.suppress(Exception):  # pragma: no cover
            print(f"{text} (failed)" if failed else text, file=sys.__stdout__, flush=True)
