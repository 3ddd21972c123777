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

"""Published tags of a registry repository."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

import requests

from dindbuild.core.exceptions import DiscoveryError, DiscoveryErrorKind
from dindbuild.http_client import fetch_text, http_timeout

logger = logging.getLogger(__name__)


def parse_tags(payload: Any) -> list[str]:
    """Project decoded tag records to their names, sorted ascending.

    Each record must be an object carrying a string ``name``; other fields
    (``layer`` and so on) are ignored. Duplicates are kept as returned.

    Raises:
        DiscoveryError: If the payload is not a list of such records.
    """
    if not isinstance(payload, list):
        raise DiscoveryError(
            message=f"unexpected tag listing: expected a list, got {type(payload).__name__}",
            kind=DiscoveryErrorKind.DECODE,
            source="tag listing",
        )

    names: list[str] = []
    for record in payload:
        name = record.get("name") if isinstance(record, dict) else None
        if not isinstance(name, str):
            raise DiscoveryError(
                message=f"unexpected tag record: {record!r}",
                kind=DiscoveryErrorKind.DECODE,
                source="tag listing",
            )
        names.append(name)
    return sorted(names)


def registry_tags_url(cfg: Mapping[str, Any], namespace: str, repo: str) -> str:
    return cfg["mirrors"]["registry_tags"].format(namespace=namespace, repo=repo)


def list_tags(
    namespace: str,
    repo: str,
    session: requests.Session,
    cfg: Mapping[str, Any],
) -> list[str]:
    """Return the published tag names of ``namespace/repo``.

    An empty repository yields an empty list.

    Raises:
        DiscoveryError: NETWORK if the listing cannot be fetched, DECODE if
            it is not the expected JSON.
    """
    url = registry_tags_url(cfg, namespace, repo)
    logger.debug("fetching tags %s", url)
    text = fetch_text(session, url, source="tag listing", timeout=http_timeout(cfg))
    try:
        payload = json.loads(text)
    except ValueError as e:
        raise DiscoveryError(
            message=f"failed to decode tag listing: {e}",
            kind=DiscoveryErrorKind.DECODE,
            source="tag listing",
        ) from e
    return parse_tags(payload)
