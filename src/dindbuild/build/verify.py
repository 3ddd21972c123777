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

"""Smoke-test output check for built images.

The smoke command starts the engine inside the image and prints
``docker version``. Engines from 1.8.0 on print ``Version: X`` lines for
both client and server; 1.7.x prints ``Client version: X`` and
``Server version: X`` instead.
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


def _is_version_token(tokens: list[str], i: int) -> bool:
    token = tokens[i]
    if token == "Version:":
        return True
    # The Server/Client qualifier only applies to the lowercase form.
    return token == "version:" and i > 0 and tokens[i - 1] in ("Server", "Client")


def check_reported_version(output: str, expected: str) -> bool:
    """Return True if every version reported in ``output`` equals ``expected``.

    Scanning stops at the first mismatching report. Output with no version
    report at all does not pass.
    """
    tokens = output.split()
    works = False
    for i in range(len(tokens) - 1):
        if not _is_version_token(tokens, i):
            continue
        reported = tokens[i + 1]
        if reported != expected:
            logger.warning("image reports version %s, expected %s", reported, expected)
            return False
        works = True
    return works
