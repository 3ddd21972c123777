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

"""Exit codes and error reporting helpers for the build pipeline.

Every milestone is reported twice: a human-readable activity line on the
terminal and a structured event in the run's ``events.jsonl``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from dindbuild.build.orchestrator import PUBLISH_STAGES, BuildOutcome, FailureKind, Stage
from dindbuild.core.run import activity

if TYPE_CHECKING:
    from dindbuild.core.run import RunContext

EXIT_SUCCESS = 0
EXIT_CONFIG_ERROR = 1
EXIT_DISCOVERY_FAILED = 2
EXIT_BUILD_FAILED = 3
EXIT_VERIFY_FAILED = 4
EXIT_PUBLISH_FAILED = 5


def log_phase_event(
    run: RunContext,
    phase: str,
    message: str,
    event_key: str,
    **event_data: Any,
) -> None:
    """Log a phase activity message and structured event together.

    Example:
        log_phase_event(
            run, "discover", f"tags pulled from {repository}: ...",
            "discover.tags",
            tags=tags,
        )
    """
    activity(phase, message)
    run.log_event({"event": event_key, **event_data})


def phase_error(
    run: RunContext,
    phase: str,
    message: str,
    exit_code: int,
    *,
    event_key: str | None = None,
    summary_error: str | None = None,
    **event_data: Any,
) -> int:
    """Log a phase error and write summary, returning the exit code.

    The event key defaults to ``"{phase}.error"``.

    Returns:
        The exit_code parameter, for use in `return phase_error(...)`.
    """
    activity(phase, f"ERROR: {message}")

    run.log_event({
        "event": event_key or f"{phase}.error",
        "message": message,
        "exit_code": exit_code,
        **event_data,
    })

    run.write_summary(
        status="failed",
        error=summary_error or message,
        exit_code=exit_code,
    )

    return exit_code


def exit_code_for_outcome(outcome: BuildOutcome) -> int:
    """Map a build outcome to the process exit code."""
    if outcome.failure is FailureKind.NONE:
        return EXIT_SUCCESS
    if outcome.failure is FailureKind.VERIFICATION_FAILED or outcome.stage is Stage.VERIFY:
        return EXIT_VERIFY_FAILED
    if outcome.stage in PUBLISH_STAGES:
        return EXIT_PUBLISH_FAILED
    return EXIT_BUILD_FAILED
