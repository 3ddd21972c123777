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

"""Membership helpers over small ordered string sequences.

Candidate and tag lists hold tens of entries, so linear scans are used and
insertion order is preserved.
"""

from __future__ import annotations

from collections.abc import Sequence


def index_of(items: Sequence[str], value: str) -> int:
    """Return the index of the first ``value`` in ``items``, or -1."""
    for i, item in enumerate(items):
        if item == value:
            return i
    return -1


def contains(items: Sequence[str], value: str) -> bool:
    return index_of(items, value) >= 0


def append_unique(items: list[str], value: str) -> bool:
    """Append ``value`` unless already present. Returns True if appended."""
    if contains(items, value):
        return False
    items.append(value)
    return True
