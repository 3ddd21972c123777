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

"""Release channels of the docker-engine apt repository."""

from __future__ import annotations

from enum import Enum


class Channel(str, Enum):
    """Release channel, valued by its name in the upstream pool."""

    STABLE = "main"
    TESTING = "testing"
    EXPERIMENTAL = "experimental"

    @property
    def latest_alias(self) -> str:
        """Return the floating tag that tracks the newest build of the channel."""
        return LATEST_ALIASES[self]

    @property
    def publishes_primary_tag(self) -> bool:
        """Experimental builds only ever publish the floating alias."""
        return self is not Channel.EXPERIMENTAL


LATEST_ALIASES: dict[Channel, str] = {
    Channel.STABLE: "latest",
    Channel.TESTING: "rc-latest",
    Channel.EXPERIMENTAL: "dev-latest",
}

CHANNEL_ALIASES: dict[str, Channel] = {
    "stable": Channel.STABLE,
}


def parse_channel(value: str) -> Channel:
    """Parse a channel selector such as ``main``, ``stable`` or ``testing``.

    Raises:
        ValueError: If the selector names no known channel.
    """
    key = value.strip().lower()
    if key in CHANNEL_ALIASES:
        return CHANNEL_ALIASES[key]
    try:
        return Channel(key)
    except ValueError:
        valid = ", ".join(c.value for c in Channel)
        raise ValueError(f"Unknown channel '{value}'. Expected one of: {valid}") from None
