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

"""Dindbuild-specific exception types with associated exit codes."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class DiscoveryErrorKind(str, Enum):
    """Failure class for upstream and registry lookups."""

    NETWORK = "network"
    DECODE = "decode"


@dataclass
class DindbuildError(Exception):
    """Base class for Dindbuild errors with an exit code."""

    message: str = "An error occurred"
    exit_code: int = field(default=1)

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"{self.message} (exit {self.exit_code})"


@dataclass
class ConfigError(DindbuildError):
    exit_code: int = field(default=1)


@dataclass
class DiscoveryError(DindbuildError):
    """Error raised when the package index, pool listing or tag list cannot be read."""

    exit_code: int = field(default=2)
    kind: DiscoveryErrorKind = DiscoveryErrorKind.NETWORK
    source: str = ""


@dataclass
class BuilderError(DindbuildError):
    """Error raised by a Builder operation.

    ``stage`` names the pipeline step that failed (see
    :class:`dindbuild.build.orchestrator.Stage`); ``output`` carries whatever
    the external tool printed before failing.
    """

    exit_code: int = field(default=3)
    stage: str = ""
    output: str = ""
