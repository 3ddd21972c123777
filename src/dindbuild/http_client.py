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

"""Shared HTTP session for upstream and registry lookups."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import requests

from dindbuild.core.exceptions import DiscoveryError, DiscoveryErrorKind

USER_AGENT = "dindbuild"


def create_session(cfg: Mapping[str, Any]) -> requests.Session:
    """Create the session used for every lookup in a run.

    TLS verification follows ``behavior.verify_tls``.
    """
    behavior = cfg.get("behavior", {})
    session = requests.Session()
    session.verify = bool(behavior.get("verify_tls", True))
    session.headers["User-Agent"] = USER_AGENT
    return session


def http_timeout(cfg: Mapping[str, Any]) -> float | None:
    """Return the configured request timeout; None means transport defaults."""
    value = cfg.get("behavior", {}).get("http_timeout")
    return float(value) if value is not None else None


def fetch_text(
    session: requests.Session,
    url: str,
    source: str,
    timeout: float | None = None,
) -> str:
    """GET ``url`` and return its body as text.

    Args:
        session: Session to use.
        url: URL to fetch.
        source: Short name of what is being fetched, used in errors.
        timeout: Request timeout in seconds.

    Raises:
        DiscoveryError: On transport failure or a non-2xx status.
    """
    try:
        resp = session.get(url, timeout=timeout)
    except requests.RequestException as e:
        raise DiscoveryError(
            message=f"failed to fetch {source}: {e}",
            kind=DiscoveryErrorKind.NETWORK,
            source=source,
        ) from e

    if not resp.ok:
        raise DiscoveryError(
            message=f"failed to fetch {source}: HTTP {resp.status_code}",
            kind=DiscoveryErrorKind.NETWORK,
            source=source,
        )
    return resp.text
