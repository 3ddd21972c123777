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

"""Build module for Dindbuild.

Provides the Builder capability, recipe patching, smoke-test verification
and the orchestrator that ties them together for one image.
"""

from dindbuild.build.errors import (
    EXIT_BUILD_FAILED,
    EXIT_CONFIG_ERROR,
    EXIT_DISCOVERY_FAILED,
    EXIT_PUBLISH_FAILED,
    EXIT_SUCCESS,
    EXIT_VERIFY_FAILED,
    exit_code_for_outcome,
    log_phase_event,
    phase_error,
)

__all__ = [
    "EXIT_BUILD_FAILED",
    "EXIT_CONFIG_ERROR",
    "EXIT_DISCOVERY_FAILED",
    "EXIT_PUBLISH_FAILED",
    "EXIT_SUCCESS",
    "EXIT_VERIFY_FAILED",
    "exit_code_for_outcome",
    "log_phase_event",
    "phase_error",
]
