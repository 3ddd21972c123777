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

"""Build recipe (Dockerfile) patching.

The recipe template downloads an engine package with a ``RUN curl`` line.
That line is the anchor for the edits that point the image at one exact
``.deb`` from the channel pool and install it.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from dindbuild.channel import Channel

RECIPE_FILENAME = "Dockerfile"
SUPPORT_SCRIPT_FILENAME = "wrapdocker"
RECIPE_ANCHOR = "RUN curl"


class EditMode(str, Enum):
    INSERT_BEFORE = "insert_before"
    INSERT_AFTER = "insert_after"
    REPLACE_LINE = "replace_line"


@dataclass(frozen=True)
class TextEdit:
    """One line-level edit applied at every line containing an anchor."""

    mode: EditMode
    text: str


def apply_edit(content: str, anchor: str, edit: TextEdit) -> tuple[str, int]:
    """Apply ``edit`` at every line of ``content`` containing ``anchor``.

    Returns:
        Tuple of (new content, number of anchor lines matched).
    """
    lines = content.split("\n")
    new_lines: list[str] = []
    matched = 0
    for line in lines:
        if anchor not in line:
            new_lines.append(line)
            continue
        matched += 1
        if edit.mode is EditMode.INSERT_BEFORE:
            new_lines.extend([edit.text, line])
        elif edit.mode is EditMode.INSERT_AFTER:
            new_lines.extend([line, edit.text])
        else:
            new_lines.append(edit.text)
    return "\n".join(new_lines), matched


def deb_version(version: str) -> str:
    """Undo version normalization: the first ``-`` becomes ``~`` again."""
    return version.replace("-", "~", 1)


def deb_filename(version: str, package: str = "docker-engine", distro: str = "trusty", arch: str = "amd64") -> str:
    """Return the pool file name of ``version``.

    Examples:
        >>> deb_filename("1.9.0-rc1")
        'docker-engine_1.9.0~rc1-0~trusty_amd64.deb'
    """
    return f"{package}_{deb_version(version)}-0~{distro}_{arch}.deb"


def recipe_edits(channel: Channel, version: str, cfg: Mapping[str, Any]) -> list[TextEdit]:
    """Return the ordered edits that embed ``version`` into the recipe.

    The resulting recipe reads, around the anchor::

        ENV TYPE <channel>
        ENV DEB_FILE <deb file>
        RUN mkdir deb
        RUN curl -sS <pool>/$DEB_FILE > deb/$DEB_FILE
        RUN dpkg -i deb/$DEB_FILE
    """
    package = cfg["package"]
    filename = deb_filename(version, package["name"], package["distro"], package["arch"])
    pool_url = cfg["mirrors"]["package_pool"].format(channel="$TYPE", package=package["name"])
    return [
        TextEdit(EditMode.INSERT_BEFORE, f"ENV TYPE {channel.value}"),
        TextEdit(EditMode.INSERT_BEFORE, f"ENV DEB_FILE {filename}"),
        TextEdit(EditMode.REPLACE_LINE, f"RUN curl -sS {pool_url}$DEB_FILE > deb/$DEB_FILE"),
        TextEdit(EditMode.INSERT_BEFORE, "RUN mkdir deb"),
        TextEdit(EditMode.INSERT_AFTER, "RUN dpkg -i deb/$DEB_FILE"),
    ]
