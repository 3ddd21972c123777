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

"""Tests for dindbuild.build.verify module."""

from __future__ import annotations

from collections.abc import Callable

from dindbuild.build.verify import check_reported_version

LEGACY_OUTPUT = """\
Client version: 1.7.1
Client API version: 1.19
Go version (client): go1.4.2
OS/Arch (client): linux/amd64
Server version: 1.7.1
Server API version: 1.19
"""


class TestCheckReportedVersion:
    """Tests for check_reported_version function."""

    def test_matching_version(self, version_output: Callable[[str], str]) -> None:
        assert check_reported_version(version_output("1.9.1"), "1.9.1")

    def test_mismatching_version(self, version_output: Callable[[str], str]) -> None:
        assert not check_reported_version(version_output("1.9.0"), "1.9.1")

    def test_server_mismatch_after_client_match(self) -> None:
        output = "Client:\n Version: 1.9.1\nServer:\n Version: 1.8.3\n"
        assert not check_reported_version(output, "1.9.1")

    def test_legacy_client_server_lines(self) -> None:
        assert check_reported_version(LEGACY_OUTPUT, "1.7.1")

    def test_legacy_mismatch(self) -> None:
        assert not check_reported_version(LEGACY_OUTPUT, "1.7.0")

    def test_api_and_go_versions_are_ignored(self) -> None:
        output = "API version: 1.21\nGo version: go1.4.3\nVersion: 1.9.1\n"
        assert check_reported_version(output, "1.9.1")

    def test_no_version_reported(self) -> None:
        assert not check_reported_version("Cannot connect to the Docker daemon.", "1.9.1")

    def test_empty_output(self) -> None:
        assert not check_reported_version("", "1.9.1")

    def test_version_field_at_end(self) -> None:
        assert not check_reported_version("starting...\nVersion:", "1.9.1")
