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

"""Configuration utilities for Dindbuild.

Two layers exist. The on-disk YAML file holds endpoints, paths and tool
behaviour and is merged with :data:`DEFAULT_CONFIG`. The per-run inputs
(channel, registry account, pinned version) come from the environment or
CLI options and are frozen into a :class:`BuildSettings` once at startup;
nothing below the CLI reads the environment.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from dindbuild.channel import Channel, parse_channel
from dindbuild.core.exceptions import ConfigError

DEFAULT_CONFIG: dict[str, Any] = {
    "paths": {
        "cache_root": "~/.cache/dindbuild",
        "build_root": "~/.cache/dindbuild/build",
        "runs_root": "~/.cache/dindbuild/runs",
    },
    "mirrors": {
        "package_index": "https://apt.dockerproject.org/repo/dists/ubuntu-{distro}/{channel}/binary-{arch}/Packages",
        "package_pool": "https://apt.dockerproject.org/repo/pool/{channel}/d/{package}/",
        "registry_tags": "https://registry.hub.docker.com/v1/repositories/{namespace}/{repo}/tags",
        "recipe_template": "https://raw.githubusercontent.com/lenoyavidan/dockerfiles/master/dind-with-ssh-jenkins/Dockerfile",
        "support_script": "https://raw.githubusercontent.com/jpetazzo/dind/master/wrapdocker",
    },
    "package": {
        "name": "docker-engine",
        "distro": "trusty",
        "arch": "amd64",
    },
    "behavior": {
        "verify_tls": True,
        "http_timeout": None,
        "container_tool": "docker",
        "use_sudo": False,
        "smoke_command": "(/usr/local/bin/wrapdocker &);sleep 5;docker version",
    },
}

# Environment variables read by the CLI, in validation order.
REQUIRED_ENV = ("VERSION_TYPE", "NAMESPACE", "REPO", "PASSWORD", "EMAIL")
PINNED_VERSION_ENV = "VERSION_NUMBER"


def get_config_path() -> Path:
    """Return the path to the config file."""
    return Path.home() / ".config" / "dindbuild" / "config.yaml"


def ensure_config_exists() -> None:
    """Create the config file with defaults if it does not exist."""
    cfg_path = get_config_path()
    cfg_dir = cfg_path.parent
    cfg_dir.mkdir(parents=True, exist_ok=True)
    if not cfg_path.exists():
        cfg_path.write_text(yaml.safe_dump(DEFAULT_CONFIG))


def load_config() -> dict[str, Any]:
    """Load configuration from disk and merge with defaults.

    The returned dictionary is a per-section merge of DEFAULT_CONFIG and
    values stored in the on-disk config file.
    """
    ensure_config_exists()
    cfg_path = get_config_path()
    try:
        raw = yaml.safe_load(cfg_path.read_text()) or {}
    except yaml.YAMLError:
        raw = {}
    if not isinstance(raw, dict):
        raw = {}

    merged: dict[str, Any] = {}
    for key, val in DEFAULT_CONFIG.items():
        if key in raw and isinstance(raw[key], dict):
            merged[key] = {**val, **raw[key]}
        elif isinstance(val, dict):
            merged[key] = dict(val)
        else:
            merged[key] = raw.get(key, val)

    for pkey, pval in merged.get("paths", {}).items():
        merged["paths"][pkey] = str(Path(pval).expanduser())

    return merged


@dataclass(frozen=True)
class BuildSettings:
    """Immutable inputs for one run.

    Attributes:
        channel: Release channel to track.
        namespace: Registry namespace (also the login account).
        repo: Registry repository.
        password: Registry password.
        email: Registry account email.
        pinned_version: Build exactly this version when set.
    """

    channel: Channel
    namespace: str
    repo: str
    password: str = field(repr=False)
    email: str
    pinned_version: str | None = None

    @property
    def repository(self) -> str:
        return f"{self.namespace}/{self.repo}"

    def image_ref(self, tag: str) -> str:
        """Return ``namespace/repo:tag``."""
        return f"{self.repository}:{tag}"


def load_settings(
    environ: Mapping[str, str],
    overrides: Mapping[str, str | None] | None = None,
    require_credentials: bool = True,
) -> BuildSettings:
    """Build :class:`BuildSettings` from environment-style values.

    Args:
        environ: Mapping keyed by the environment variable names
            (``VERSION_TYPE``, ``NAMESPACE``, ...).
        overrides: Values given on the command line, keyed the same way;
            a non-empty override wins over ``environ``.
        require_credentials: If False, PASSWORD and EMAIL may be absent
            (read-only commands never log in).

    Raises:
        ConfigError: If a required value is missing or the channel is unknown.
    """
    values: dict[str, str] = {}
    for name in (*REQUIRED_ENV, PINNED_VERSION_ENV):
        value = (overrides or {}).get(name) or environ.get(name) or ""
        values[name] = value.strip()

    required = REQUIRED_ENV if require_credentials else REQUIRED_ENV[:3]
    for name in required:
        if not values[name]:
            raise ConfigError(message=f"${name} not set")

    try:
        channel = parse_channel(values["VERSION_TYPE"])
    except ValueError as e:
        raise ConfigError(message=str(e)) from e

    return BuildSettings(
        channel=channel,
        namespace=values["NAMESPACE"],
        repo=values["REPO"],
        password=values["PASSWORD"],
        email=values["EMAIL"],
        pinned_version=values[PINNED_VERSION_ENV] or None,
    )
