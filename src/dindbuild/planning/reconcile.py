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

"""Decide which docker-engine version to build next.

Given the published tags of the target repository and the candidate versions
of a channel, pick the first candidate that has not been published yet. Only
one version is chosen per run; candidates are scanned in the order given, so
for the stable and testing channels (ascending order) the oldest missing
version is backfilled first.

Tag naming per channel:

- stable: the tag is the version (``1.8.0``).
- testing: versions without an ``rc`` marker get ``-rc1`` appended
  (``1.9.0`` -> ``1.9.0-rc1``).
- experimental: the tag is the version cut at the first ``~``
  (``1.10.0-dev~git20151203.1234`` -> ``1.10.0-dev``).
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from dindbuild.channel import Channel
from dindbuild.stringset import contains

logger = logging.getLogger(__name__)

RC_MARKER = "rc"
FIRST_RC_SUFFIX = "-rc1"
BUILD_SUFFIX_SEPARATOR = "~"


@dataclass(frozen=True)
class BuildDecision:
    """The single version selected for this run.

    Attributes:
        channel: Channel the version belongs to.
        version: Normalized upstream version.
        publish_tag: Tag the image is built and published under.
        is_latest: Whether this is also the channel's newest version, in
            which case the channel alias is published too.
    """

    channel: Channel
    version: str
    publish_tag: str
    is_latest: bool = False

    def image_ref(self, namespace: str, repo: str) -> str:
        return f"{namespace}/{repo}:{self.publish_tag}"

    @property
    def expected_version(self) -> str:
        """Version the engine inside the image must report."""
        return strip_build_suffix(self.version)


@dataclass(frozen=True)
class AlreadyBuilt:
    """Every candidate already has a published tag."""

    checked: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class RequestedVersionUnavailable:
    """A pinned version was requested but is not among the candidates."""

    requested: str
    candidates: list[str] = field(default_factory=list)


Decision = BuildDecision | AlreadyBuilt | RequestedVersionUnavailable


def strip_build_suffix(version: str) -> str:
    """Return the part of ``version`` before the first ``~``."""
    return version.split(BUILD_SUFFIX_SEPARATOR, 1)[0]


def publish_tag_for(channel: Channel, version: str) -> str:
    """Return the tag an image of ``version`` is published under."""
    if channel is Channel.TESTING and RC_MARKER not in version:
        return version + FIRST_RC_SUFFIX
    if channel is Channel.EXPERIMENTAL:
        return strip_build_suffix(version)
    return version


def is_already_built(channel: Channel, version: str, published: Sequence[str]) -> bool:
    """Return True if ``version`` already has a published tag.

    Both the channel's tag and the version cut at ``~`` count, since
    experimental tags on the registry drop the build suffix.
    """
    return contains(published, publish_tag_for(channel, version)) or contains(
        published, strip_build_suffix(version)
    )


def decide(
    channel: Channel,
    latest: str | None,
    published: Sequence[str],
    candidates: Sequence[str],
    pinned: str | None = None,
) -> Decision:
    """Choose at most one version to build.

    Args:
        channel: Active channel.
        latest: Newest version reported by the package index, if any.
        published: Tags already in the registry.
        candidates: Candidate versions in scan order.
        pinned: Build only this version when set.

    Returns:
        A BuildDecision for the first unbuilt candidate, AlreadyBuilt if
        there is none, or RequestedVersionUnavailable if ``pinned`` is not a
        candidate.
    """
    if pinned:
        if not contains(candidates, pinned):
            return RequestedVersionUnavailable(requested=pinned, candidates=list(candidates))
        candidates = [pinned]

    checked: list[str] = []
    for version in candidates:
        if is_already_built(channel, version, published):
            logger.info("version %s already built and pushed", version)
            checked.append(version)
            continue
        return BuildDecision(
            channel=channel,
            version=version,
            publish_tag=publish_tag_for(channel, version),
            is_latest=version == latest,
        )

    return AlreadyBuilt(checked=checked)
