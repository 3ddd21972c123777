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

"""CLI application definition for Dindbuild."""

from __future__ import annotations

from typer import Typer

from dindbuild.commands.build import build
from dindbuild.commands.plan import plan

app: Typer = Typer(
    name="dindbuild",
    help="Build docker-in-docker images for unbuilt docker-engine releases.",
    add_completion=False,
)

# Register commands
app.command(name="build")(build)
app.command(name="plan")(plan)
