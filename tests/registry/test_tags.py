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

"""Tests for dindbuild.registry.tags module."""

from __future__ import annotations

import json
from typing import Any

import pytest
import requests
import responses

from dindbuild.core.exceptions import DiscoveryError, DiscoveryErrorKind
from dindbuild.registry import tags

TAGS_URL = "https://registry.example.test/v1/repositories/acme/dind-with-ssh/tags"


class TestParseTags:
    """Tests for parse_tags function."""

    def test_names_sorted(self) -> None:
        payload = [
            {"layer": "a1b2c3d4", "name": "latest"},
            {"layer": "e5f6a7b8", "name": "1.8.0"},
            {"layer": "e5f6a7b8", "name": "1.7.1"},
        ]

        assert tags.parse_tags(payload) == ["1.7.1", "1.8.0", "latest"]

    def test_duplicate_names_are_kept(self) -> None:
        payload = [
            {"layer": "a1b2c3d4", "name": "1.8.0"},
            {"layer": "e5f6a7b8", "name": "1.7.1"},
            {"layer": "a1b2c3d4", "name": "1.8.0"},
        ]

        assert tags.parse_tags(payload) == ["1.7.1", "1.8.0", "1.8.0"]

    def test_empty_repository(self) -> None:
        assert tags.parse_tags([]) == []

    def test_not_a_list(self) -> None:
        with pytest.raises(DiscoveryError) as excinfo:
            tags.parse_tags({"detail": "not found"})
        assert excinfo.value.kind is DiscoveryErrorKind.DECODE

    @pytest.mark.parametrize("record", [{"layer": "abc"}, {"name": 1}, "1.8.0"])
    def test_malformed_record(self, record: Any) -> None:
        with pytest.raises(DiscoveryError) as excinfo:
            tags.parse_tags([record])
        assert excinfo.value.kind is DiscoveryErrorKind.DECODE


class TestListTags:
    """Tests for list_tags function."""

    def test_url(self, cfg: dict[str, Any]) -> None:
        assert tags.registry_tags_url(cfg, "acme", "dind-with-ssh") == TAGS_URL

    @responses.activate
    def test_returns_names(self, cfg: dict[str, Any]) -> None:
        body = json.dumps([{"layer": "", "name": "1.9.0"}, {"layer": "", "name": "1.8.0"}])
        responses.add(responses.GET, TAGS_URL, body=body, status=200)

        assert tags.list_tags("acme", "dind-with-ssh", requests.Session(), cfg) == ["1.8.0", "1.9.0"]

    @responses.activate
    def test_invalid_json(self, cfg: dict[str, Any]) -> None:
        responses.add(responses.GET, TAGS_URL, body="<html>oops</html>", status=200)

        with pytest.raises(DiscoveryError) as excinfo:
            tags.list_tags("acme", "dind-with-ssh", requests.Session(), cfg)

        assert excinfo.value.kind is DiscoveryErrorKind.DECODE
        assert excinfo.value.exit_code == 2

    @responses.activate
    def test_network_failure(self, cfg: dict[str, Any]) -> None:
        responses.add(responses.GET, TAGS_URL, status=500)

        with pytest.raises(DiscoveryError) as excinfo:
            tags.list_tags("acme", "dind-with-ssh", requests.Session(), cfg)

        assert excinfo.value.kind is DiscoveryErrorKind.NETWORK
