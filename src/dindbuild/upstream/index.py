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

"""Newest-version lookup from the apt package index.

The ``Packages`` index is read as plain text: the first ``Version:`` field
wins, which for the docker-engine repository is the most recent upload.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import requests

from dindbuild.channel import Channel
from dindbuild.http_client import fetch_text, http_timeout

logger = logging.getLogger(__name__)

VERSION_FIELD = "version:"
DISTRO_BUILD_MARKER = "-0"


def normalize_version(raw: str) -> str:
    """Turn the first ``~`` into ``-`` (``1.9.0~rc1`` -> ``1.9.0-rc1``)."""
    return raw.replace("~", "-", 1)


def parse_version(index_text: str) -> str | None:
    """Return the first normalized version reported by an index, or None.

    Examples:
        >>> parse_version("Package: docker-engine\\nVersion: 1.9.0~rc1-0~trusty\\n")
        '1.9.0-rc1'
        >>> parse_version("Package: docker-engine\\n") is None
        True
    """
    tokens = index_text.split()
    for i, token in enumerate(tokens):
        if token.lower() != VERSION_FIELD:
            continue
        if i + 1 >= len(tokens):
            return None
        raw = tokens[i + 1].split(DISTRO_BUILD_MARKER, 1)[0]
        return normalize_version(raw)
    return None


def package_index_url(cfg: Mapping[str, Any], channel: Channel) -> str:
    package = cfg["package"]
    return cfg["mirrors"]["package_index"].format(
        channel=channel.value,
        distro=package["distro"],
        arch=package["arch"],
        package=package["name"],
    )


def fetch_newest_version(
    channel: Channel,
    session: requests.Session,
    cfg: Mapping[str, Any],
) -> str | None:
    """Fetch the channel's package index and return its newest version.

    Returns None when the index reports no version.

    Raises:
        DiscoveryError: If the index cannot be fetched.
    """
    url = package_index_url(cfg, channel)
    logger.debug("fetching package index %s", url)
    text = fetch_text(session, url, source="package index", timeout=http_timeout(cfg))
    version = parse_version(text)
    if version is None:
        logger.info("package index %s reported no version", url)
    return version
