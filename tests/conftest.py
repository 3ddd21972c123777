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

"""Pytest fixtures and configuration for Dindbuild tests."""

from __future__ import annotations

import tempfile
from collections.abc import Generator
from pathlib import Path
from typing import Any
from unittest import mock

import pytest
import responses

from dindbuild.channel import Channel
from dindbuild.config import BuildSettings, load_config

PACKAGES_INDEX = """\
Package: docker-engine
Version: 1.9.1-0~trusty
Architecture: amd64
Maintainer: Docker <support@docker.com>
Installed-Size: 37493
Depends: iptables, init-system-helpers (>= 1.18~), libapparmor1 (>= 2.6~devel)
Filename: pool/main/d/docker-engine/docker-engine_1.9.1-0~trusty_amd64.deb
Description: Docker: the open-source application container engine

Package: docker-engine
Version: 1.9.0-0~trusty
Architecture: amd64
Filename: pool/main/d/docker-engine/docker-engine_1.9.0-0~trusty_amd64.deb
"""

POOL_LISTING = """\
<html>
<head><title>Index of /repo/pool/main/d/docker-engine/</title></head>
<body>
<h1>Index of /repo/pool/main/d/docker-engine/</h1><hr><pre><a href="../">../</a>
<a href="docker-engine_1.7.1-0~trusty_amd64.deb">docker-engine_1.7.1-0~trusty_amd64.deb</a> 14-Jul-2015 22:52 4657468
<a href="docker-engine_1.7.1-0~wily_amd64.deb">docker-engine_1.7.1-0~wily_amd64.deb</a> 14-Jul-2015 22:52 4657468
<a href="docker-engine_1.8.0-0~trusty_amd64.deb">docker-engine_1.8.0-0~trusty_amd64.deb</a> 11-Aug-2015 17:01 7101342
<a href="docker-engine_1.9.1-0~trusty_amd64.deb">docker-engine_1.9.1-0~trusty_amd64.deb</a> 20-Nov-2015 22:41 7822152
</pre><hr></body>
</html>
"""

RECIPE_TEMPLATE = """\
FROM ubuntu:14.04
RUN apt-get update -qq && apt-get install -qqy openssh-server iptables ca-certificates
RUN curl -sSL https://get.docker.com/ubuntu/ | sh
ADD ./wrapdocker /usr/local/bin/wrapdocker
RUN chmod +x /usr/local/bin/wrapdocker
VOLUME /var/lib/docker
CMD ["/usr/sbin/sshd", "-D"]
"""

DOCKER_VERSION_OUTPUT = """\
Client:
 Version:      {version}
 API version:  1.21
 Go version:   go1.4.3
 OS/Arch:      linux/amd64

Server:
 Version:      {version}
 API version:  1.21
 Go version:   go1.4.3
 OS/Arch:      linux/amd64
"""


@pytest.fixture
def temp_home(monkeypatch: pytest.MonkeyPatch) -> Generator[Path, None, None]:
    """Create a temporary home directory and set HOME/XDG paths."""
    with tempfile.TemporaryDirectory() as tmpdir:
        home = Path(tmpdir)
        monkeypatch.setenv("HOME", str(home))
        monkeypatch.setenv("XDG_CONFIG_HOME", str(home / ".config"))
        monkeypatch.setenv("XDG_CACHE_HOME", str(home / ".cache"))
        monkeypatch.setattr(Path, "home", lambda: home)
        yield home


@pytest.fixture
def mock_config(temp_home: Path) -> Path:
    """Create a minimal config file in the temp home."""
    config_dir = temp_home / ".config" / "dindbuild"
    config_dir.mkdir(parents=True, exist_ok=True)
    config_file = config_dir / "config.yaml"
    config_file.write_text("""
paths:
  cache_root: "~/.cache/dindbuild"
  build_root: "~/.cache/dindbuild/build"
  runs_root: "~/.cache/dindbuild/runs"

mirrors:
  package_index: "https://apt.example.test/repo/dists/ubuntu-{distro}/{channel}/binary-{arch}/Packages"
  package_pool: "https://apt.example.test/repo/pool/{channel}/d/{package}/"
  registry_tags: "https://registry.example.test/v1/repositories/{namespace}/{repo}/tags"
  recipe_template: "https://raw.example.test/dind-with-ssh-jenkins/Dockerfile"
  support_script: "https://raw.example.test/dind/wrapdocker"

behavior:
  verify_tls: true
  http_timeout: null
""")
    return config_file


@pytest.fixture
def cfg(mock_config: Path) -> dict[str, Any]:
    """Loaded configuration pointing at example.test endpoints."""
    return load_config()


@pytest.fixture
def settings() -> BuildSettings:
    return BuildSettings(
        channel=Channel.STABLE,
        namespace="acme",
        repo="dind-with-ssh",
        password="s3cret",
        email="ops@acme.example",
    )


@pytest.fixture
def build_env(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Set the environment variables a build run reads."""
    env = {
        "VERSION_TYPE": "main",
        "NAMESPACE": "acme",
        "REPO": "dind-with-ssh",
        "PASSWORD": "s3cret",
        "EMAIL": "ops@acme.example",
    }
    for key, value in env.items():
        monkeypatch.setenv(key, value)
    monkeypatch.delenv("VERSION_NUMBER", raising=False)
    return env


@pytest.fixture
def mock_responses() -> Generator[responses.RequestsMock, None, None]:
    """Activate responses mock for HTTP requests."""
    with responses.RequestsMock() as rsps:
        yield rsps


@pytest.fixture
def fake_builder() -> mock.MagicMock:
    """A Builder whose operations succeed and whose engine reports 1.9.1."""
    builder = mock.MagicMock()
    builder.fetch_template.return_value = RECIPE_TEMPLATE.encode()
    builder.run_container.return_value = DOCKER_VERSION_OUTPUT.format(version="1.9.1")
    return builder


@pytest.fixture
def non_tty_stdout(monkeypatch: pytest.MonkeyPatch) -> None:
    """Mock sys.__stdout__.isatty() to return False."""
    mock_stdout = mock.MagicMock()
    mock_stdout.isatty.return_value = False
    monkeypatch.setattr("sys.__stdout__", mock_stdout)


@pytest.fixture
def tty_stdout(monkeypatch: pytest.MonkeyPatch) -> None:
    """Mock sys.__stdout__.isatty() to return True."""
    mock_stdout = mock.MagicMock()
    mock_stdout.isatty.return_value = True
    mock_stdout.write = lambda x: None
    mock_stdout.flush = lambda: None
    monkeypatch.setattr("sys.__stdout__", mock_stdout)


@pytest.fixture
def packages_index() -> str:
    return PACKAGES_INDEX


@pytest.fixture
def pool_listing() -> str:
    return POOL_LISTING


@pytest.fixture
def recipe_template() -> str:
    return RECIPE_TEMPLATE


@pytest.fixture
def version_output() -> Any:
    """Return a factory for `docker version` output reporting a version."""

    def _make(version: str) -> str:
        return DOCKER_VERSION_OUTPUT.format(version=version)

    return _make
