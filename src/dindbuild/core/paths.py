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

"""Path helpers and build workspace creation for Dindbuild."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any


def resolve_paths(cfg: Mapping[str, Any]) -> dict[str, Path]:
    """Return resolved Path objects for configured paths."""
    paths: Mapping[str, Any] = cfg.get("paths", {})
    resolved: dict[str, Path] = {}
    for key, val in paths.items():
        resolved[key] = Path(str(val)).expanduser().resolve()
    return resolved


def build_workspace(build_root: Path, channel: str, tag: str) -> Path:
    """Create and return the build context directory for one image.

    The directory is reused across runs for the same channel and tag; files
    left by an earlier failed attempt are overwritten.
    """
    workspace = build_root / channel / tag
    workspace.mkdir(parents=True, exist_ok=True)
    return workspace
