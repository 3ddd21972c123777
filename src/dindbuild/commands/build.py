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

"""Implementation of `dindbuild build` command.

Builds at most ONE docker-engine version per invocation: the first candidate
of the channel that has no published tag yet. Run it repeatedly to backfill
several versions.

The registry's tag listing lags behind recent pushes. Wait at least
MIN_RUN_INTERVAL_MINUTES between runs, otherwise the version pushed by the
previous run looks unbuilt and is built and pushed again.
"""

from __future__ import annotations

import os
import sys
from collections.abc import Mapping
from typing import Any

import typer

from dindbuild.build.builder import Builder, DockerBuilder
from dindbuild.build.errors import (
    EXIT_CONFIG_ERROR,
    EXIT_DISCOVERY_FAILED,
    EXIT_SUCCESS,
    exit_code_for_outcome,
    log_phase_event,
    phase_error,
)
from dindbuild.build.orchestrator import BuildOrchestrator
from dindbuild.commands.plan import decide_for, discover, report_no_build
from dindbuild.config import BuildSettings, load_settings
from dindbuild.core.exceptions import ConfigError, DiscoveryError
from dindbuild.core.paths import build_workspace, resolve_paths
from dindbuild.core.run import RunContext, activity
from dindbuild.http_client import create_session
from dindbuild.planning.reconcile import BuildDecision

MIN_RUN_INTERVAL_MINUTES = 10


def run_build(
    settings: BuildSettings,
    cfg: Mapping[str, Any],
    run: RunContext,
    builder: Builder | None = None,
    no_spinner: bool = False,
) -> int:
    """Discover, decide, and build/verify/publish the chosen version.

    Args:
        settings: Run inputs.
        cfg: Loaded configuration.
        run: RunContext for logging.
        builder: Builder to drive; a DockerBuilder on the run's session by
            default.
        no_spinner: Disable the activity spinner.

    Returns:
        Exit code.
    """
    session = create_session(cfg)
    try:
        try:
            discovery = discover(settings, session, cfg, run, no_spinner=no_spinner)
        except DiscoveryError as e:
            return phase_error(
                run, "discover", e.message, EXIT_DISCOVERY_FAILED,
                kind=e.kind.value, source=e.source,
            )

        decision = decide_for(settings, discovery)
        if not isinstance(decision, BuildDecision):
            report_no_build(run, decision)
            return EXIT_SUCCESS

        return _build_decision(settings, cfg, run, decision, builder or DockerBuilder.from_config(cfg, session), no_spinner)
    finally:
        session.close()


def _build_decision(
    settings: BuildSettings,
    cfg: Mapping[str, Any],
    run: RunContext,
    decision: BuildDecision,
    builder: Builder,
    no_spinner: bool,
) -> int:
    image = settings.image_ref(decision.publish_tag)
    log_phase_event(
        run,
        "build",
        f"building docker-engine version {decision.version}",
        "build.selected",
        version=decision.version,
        image=image,
        is_latest=decision.is_latest,
    )

    workspace = build_workspace(resolve_paths(cfg)["build_root"], settings.channel.value, decision.publish_tag)
    orchestrator = BuildOrchestrator(settings, builder, workspace, cfg, run=run, no_spinner=no_spinner)
    outcome = orchestrator.build(decision)

    exit_code = exit_code_for_outcome(outcome)
    if exit_code != EXIT_SUCCESS:
        stage = outcome.stage.value if outcome.stage else "build"
        return phase_error(
            run, stage, outcome.message, exit_code,
            image=outcome.image, failure=outcome.failure.value,
            published=outcome.published,
        )

    for ref in outcome.published:
        activity("publish", f"pushed {ref}")
    activity("publish", f"wait at least {MIN_RUN_INTERVAL_MINUTES} minutes before the next run")
    run.write_summary(
        outcome="built",
        version=decision.version,
        image=outcome.image,
        published=outcome.published,
        exit_code=EXIT_SUCCESS,
    )
    return EXIT_SUCCESS


def build(
    channel: str = typer.Option("", "--channel", help="Channel: main, testing or experimental [env: VERSION_TYPE]"),
    namespace: str = typer.Option("", "--namespace", help="Registry namespace [env: NAMESPACE]"),
    repo: str = typer.Option("", "--repo", help="Registry repository [env: REPO]"),
    email: str = typer.Option("", "--email", help="Registry account email [env: EMAIL]"),
    version: str = typer.Option("", "--version", help="Build only this version [env: VERSION_NUMBER]"),
    no_spinner: bool = typer.Option(False, "--no-spinner", help="Disable the activity spinner"),
) -> None:
    """Build, verify and publish the next unbuilt docker-engine version.

    The registry password is read from the PASSWORD environment variable.
    Wait at least 10 minutes between runs: the registry's tag listing lags
    behind pushes, and an early rerun rebuilds the version just published.

    Exit codes:
      0 - Success, or nothing to build
      1 - Configuration error
      2 - Discovery failed
      3 - Build failed
      4 - Image verification failed
      5 - Tag or push failed
    """
    overrides = {
        "VERSION_TYPE": channel,
        "NAMESPACE": namespace,
        "REPO": repo,
        "EMAIL": email,
        "VERSION_NUMBER": version,
    }

    # Inputs are checked before the run directory or config file is created.
    try:
        settings = load_settings(os.environ, overrides)
    except ConfigError as e:
        activity("config", f"ERROR: {e.message}")
        sys.exit(EXIT_CONFIG_ERROR)

    with RunContext("build") as run:
        run.log_event({
            "event": "config.loaded",
            "channel": settings.channel.value,
            "repository": settings.repository,
            "pinned_version": settings.pinned_version,
        })
        exit_code = run_build(settings, run.cfg, run, no_spinner=no_spinner)

    sys.exit(exit_code)
