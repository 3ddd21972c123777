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

"""Tests for dindbuild.stringset module."""

from __future__ import annotations

from dindbuild import stringset


class TestIndexOf:
    def test_found(self) -> None:
        assert stringset.index_of(["1.7.0", "1.7.1", "1.8.0"], "1.7.1") == 1

    def test_first_occurrence(self) -> None:
        assert stringset.index_of(["a", "b", "a"], "a") == 0

    def test_missing(self) -> None:
        assert stringset.index_of(["1.7.0"], "1.8.0") == -1

    def test_empty(self) -> None:
        assert stringset.index_of([], "") == -1

    def test_exact_match_only(self) -> None:
        assert stringset.index_of(["1.8.0-rc1"], "1.8.0") == -1


class TestAppendUnique:
    def test_appends_new_values_in_order(self) -> None:
        items: list[str] = []
        assert stringset.append_unique(items, "1.8.0")
        assert stringset.append_unique(items, "1.7.1")
        assert items == ["1.8.0", "1.7.1"]

    def test_skips_duplicates(self) -> None:
        items = ["1.8.0"]
        assert not stringset.append_unique(items, "1.8.0")
        assert items == ["1.8.0"]

    def test_contains(self) -> None:
        assert stringset.contains(["x"], "x")
        assert not stringset.contains(["x"], "y")
