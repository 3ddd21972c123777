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

"""Candidate versions from the upstream pool directory listing.

The pool directory is an HTML autoindex. Rather than parsing it, every
whitespace-delimited token naming a ``<package>_<version>-0~<distro>_<arch>.deb``
file contributes its version.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import requests

from dindbuild.channel import Channel
from dindbuild.http_client import fetch_text, http_timeout
from dindbuild.stringset import append_unique
from dindbuild.upstream.index import normalize_version

logger = logging.getLogger(__name__)

DEFAULT_PACKAGE = "docker-engine"


def parse_pool_listing(text: str, channel: Channel, package: str = DEFAULT_PACKAGE) -> list[str]:
    """Extract the distinct candidate versions from a pool listing.

    Args:
        text: Raw listing body.
        channel: Active channel. Experimental keeps only the newest version.
        package: Package name whose files are listed.

    Returns:
        Versions in ascending order, without duplicates.
    """
    marker = f"{package}_"
    versions: list[str] = []
    for token in text.split():
        if marker not in token:
            continue
        value = token.split("_")[1].split("-")[0]
        if not value:
            continue
        append_unique(versions, normalize_version(value))

    versions.sort()
    if channel is Channel.EXPERIMENTAL and versions:
        # Experimental images only track the bleeding edge.
        versions = [versions[-1]]
    return versions


def package_pool_url(cfg: Mapping[str, Any], channel: Channel) -> str:
    return cfg["mirrors"]["package_pool"].format(
        channel=channel.value,
        package=cfg["package"]["name"],
    )


def available_versions(
    channel: Channel,
    session: requests.Session,
    cfg: Mapping[str, Any],
) -> list[str]:
    """Fetch the channel's pool listing and return its candidate versions.

    Raises:
        DiscoveryError: If the listing cannot be fetched.
    """
    url = package_pool_url(cfg, channel)
    logger.debug("fetching pool listing %s", url)
    text = fetch_text(session, url, source="pool listing", timeout=http_timeout(cfg))
    versions = parse_pool_listing(text, channel, package=cfg["package"]["name"])
    logger.info("found %d candidate versions in %s", len(versions), url)
    return versions
