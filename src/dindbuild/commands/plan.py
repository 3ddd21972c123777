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

"""Implementation of `dindbuild plan` command.

Discovers the channel's newest version, the repository's published tags and
the channel's candidate versions, then reports which version the next
`dindbuild build` would pick. Nothing is built, tagged or pushed.
"""

from __future__ import annotations

import os
import sys
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import requests
import typer

from dindbuild.build.errors import (
    EXIT_CONFIG_ERROR,
    EXIT_DISCOVERY_FAILED,
    EXIT_SUCCESS,
    log_phase_event,
    phase_error,
)
from dindbuild.config import BuildSettings, load_settings
from dindbuild.core.exceptions import ConfigError, DiscoveryError
from dindbuild.core.run import RunContext, activity
from dindbuild.http_client import create_session
from dindbuild.planning.reconcile import (
    AlreadyBuilt,
    BuildDecision,
    Decision,
    RequestedVersionUnavailable,
    decide,
)
from dindbuild.registry.tags import list_tags
from dindbuild.spinner import activity_spinner
from dindbuild.upstream.index import fetch_newest_version
from dindbuild.upstream.pool import available_versions


@dataclass
class Discovery:
    """What the upstream repository and the registry currently hold."""

    latest: str | None
    published: list[str]
    candidates: list[str]


def discover(
    settings: BuildSettings,
    session: requests.Session,
    cfg: Mapping[str, Any],
    run: RunContext,
    no_spinner: bool = False,
) -> Discovery:
    """Fetch the newest version, the published tags and the candidates.

    Raises:
        DiscoveryError: If any of the three lookups fails.
    """
    channel = settings.channel

    with activity_spinner("discover", f"Reading {channel.value} package index", disable=no_spinner):
        latest = fetch_newest_version(channel, session, cfg)
    if latest:
        log_phase_event(run, "discover", f"latest docker-engine version: {latest}", "discover.latest", latest=latest)

    with activity_spinner("discover", f"Fetching tags of {settings.repository}", disable=no_spinner):
        published = list_tags(settings.namespace, settings.repo, session, cfg)
    log_phase_event(
        run,
        "discover",
        f"tags pulled from {settings.repository}: {' '.join(published)}",
        "discover.tags",
        tags=published,
    )

    with activity_spinner("discover", f"Listing {channel.value} pool", disable=no_spinner):
        candidates = available_versions(channel, session, cfg)
    log_phase_event(
        run,
        "discover",
        f"available docker-engine versions are: {candidates}",
        "discover.candidates",
        candidates=candidates,
    )

    return Discovery(latest=latest, published=published, candidates=candidates)


def decide_for(settings: BuildSettings, discovery: Discovery) -> Decision:
    return decide(
        channel=settings.channel,
        latest=discovery.latest,
        published=discovery.published,
        candidates=discovery.candidates,
        pinned=settings.pinned_version,
    )


def report_no_build(run: RunContext, decision: AlreadyBuilt | RequestedVersionUnavailable) -> None:
    """Report a decision that ends the run without building."""
    if isinstance(decision, RequestedVersionUnavailable):
        log_phase_event(
            run,
            "decide",
            f"specified version {decision.requested} not available to build",
            "decide.unavailable",
            requested=decision.requested,
        )
        run.write_summary(outcome="requested_version_unavailable", requested=decision.requested)
        return

    for version in decision.checked:
        activity("decide", f"version {version} already built and pushed")
    log_phase_event(
        run,
        "decide",
        "nothing to build: every available version is already built and pushed",
        "decide.already_built",
        checked=decision.checked,
    )
    run.write_summary(outcome="already_built")


def run_plan(
    settings: BuildSettings,
    cfg: Mapping[str, Any],
    run: RunContext,
    no_spinner: bool = False,
) -> int:
    """Discover and decide; return the exit code."""
    session = create_session(cfg)
    try:
        discovery = discover(settings, session, cfg, run, no_spinner=no_spinner)
    except DiscoveryError as e:
        return phase_error(
            run, "discover", e.message, EXIT_DISCOVERY_FAILED,
            kind=e.kind.value, source=e.source,
        )
    finally:
        session.close()

    decision = decide_for(settings, discovery)
    if not isinstance(decision, BuildDecision):
        report_no_build(run, decision)
        return EXIT_SUCCESS

    image = settings.image_ref(decision.publish_tag)
    log_phase_event(
        run,
        "decide",
        f"next build: docker-engine {decision.version} as {image}",
        "decide.build",
        version=decision.version,
        image=image,
        is_latest=decision.is_latest,
    )
    if decision.is_latest:
        activity("decide", f"would also publish {settings.image_ref(decision.channel.latest_alias)}")
    run.write_summary(outcome="build", version=decision.version, image=image)
    return EXIT_SUCCESS


def plan(
    channel: str = typer.Option("", "--channel", help="Channel: main, testing or experimental [env: VERSION_TYPE]"),
    namespace: str = typer.Option("", "--namespace", help="Registry namespace [env: NAMESPACE]"),
    repo: str = typer.Option("", "--repo", help="Registry repository [env: REPO]"),
    version: str = typer.Option("", "--version", help="Only consider this version [env: VERSION_NUMBER]"),
    no_spinner: bool = typer.Option(False, "--no-spinner", help="Disable the activity spinner"),
) -> None:
    """Show which docker-engine version the next build would pick.

    Exit codes:
      0 - Success (including nothing to build)
      1 - Configuration error
      2 - Discovery failed
    """
    overrides = {
        "VERSION_TYPE": channel,
        "NAMESPACE": namespace,
        "REPO": repo,
        "VERSION_NUMBER": version,
    }

    # Inputs are checked before the run directory or config file is created.
    try:
        settings = load_settings(os.environ, overrides, require_credentials=False)
    except ConfigError as e:
        activity("config", f"ERROR: {e.message}")
        sys.exit(EXIT_CONFIG_ERROR)

    with RunContext("plan") as run:
        run.log_event({"event": "config.loaded", "channel": settings.channel.value, "repository": settings.repository})
        exit_code = run_plan(settings, run.cfg, run, no_spinner=no_spinner)

    sys.exit(exit_code)
