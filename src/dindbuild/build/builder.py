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

"""Builder capability: the external I/O behind an image build.

:class:`Builder` is the narrow interface the orchestrator drives.
:class:`DockerBuilder` implements it with HTTP downloads through the run's
``requests`` session, file edits in Python, and the docker CLI through
``subprocess``. Every operation raises :class:`BuilderError` on failure.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any, Protocol

import requests

from dindbuild.build.recipe import TextEdit, apply_edit
from dindbuild.core.exceptions import BuilderError

logger = logging.getLogger(__name__)

# Options passed to `docker run` for the smoke test; the engine inside the
# image needs a privileged container.
RUN_OPTIONS = ["--rm", "--privileged", "-e", "LOG=file"]


class Builder(Protocol):
    """Operations the build pipeline delegates to the outside world."""

    def fetch_template(self, url: str) -> bytes: ...

    def write_local(self, path: Path, data: bytes) -> None: ...

    def patch_text(self, path: Path, anchor: str, edit: TextEdit) -> None: ...

    def run_image_build(self, tag: str, context_dir: Path) -> None: ...

    def run_container(self, image: str, command: str) -> str: ...

    def tag_image(self, src: str, dst: str) -> None: ...

    def push_image(self, ref: str) -> None: ...

    def login(self, account: str, secret: str) -> None: ...


class DockerBuilder:
    """Builder backed by the docker CLI."""

    def __init__(
        self,
        session: requests.Session,
        tool: str = "docker",
        use_sudo: bool = False,
        timeout: float | None = None,
    ) -> None:
        self.session = session
        self.tool = tool
        self.use_sudo = use_sudo
        self.timeout = timeout

    @classmethod
    def from_config(cls, cfg: Mapping[str, Any], session: requests.Session) -> DockerBuilder:
        behavior = cfg.get("behavior", {})
        timeout = behavior.get("http_timeout")
        return cls(
            session=session,
            tool=behavior.get("container_tool", "docker"),
            use_sudo=bool(behavior.get("use_sudo", False)),
            timeout=float(timeout) if timeout is not None else None,
        )

    def _command(self, *args: str) -> list[str]:
        cmd = [self.tool, *args]
        if self.use_sudo:
            cmd.insert(0, "sudo")
        return cmd

    def _run(self, stage: str, args: Sequence[str], input_text: str | None = None) -> str:
        """Run the container tool and return its combined output."""
        cmd = self._command(*args)
        logger.debug("running %s", " ".join(cmd))
        try:
            result = subprocess.run(
                cmd,
                input=input_text,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                encoding="utf-8",
                errors="replace",
                check=False,
            )
        except OSError as e:
            raise BuilderError(message=f"{cmd[0]} could not be run: {e}", stage=stage) from e

        output = result.stdout or ""
        if result.returncode != 0:
            logger.error("%s exited with %d: %s", " ".join(cmd), result.returncode, output.strip())
            raise BuilderError(
                message=f"{' '.join(args[:1])} exited with code {result.returncode}",
                stage=stage,
                output=output,
            )
        return output

    def fetch_template(self, url: str) -> bytes:
        try:
            resp = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise BuilderError(message=f"failed to fetch {url}: {e}", stage="materialize") from e
        if not resp.ok:
            raise BuilderError(message=f"failed to fetch {url}: HTTP {resp.status_code}", stage="materialize")
        return resp.content

    def write_local(self, path: Path, data: bytes) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            raise BuilderError(message=f"failed to write {path}: {e}", stage="materialize") from e

    def patch_text(self, path: Path, anchor: str, edit: TextEdit) -> None:
        try:
            content = path.read_text(encoding="utf-8")
        except OSError as e:
            raise BuilderError(message=f"failed to read {path}: {e}", stage="patch") from e

        patched, matched = apply_edit(content, anchor, edit)
        if matched == 0:
            raise BuilderError(message=f"anchor '{anchor}' not found in {path.name}", stage="patch")

        try:
            path.write_text(patched, encoding="utf-8")
        except OSError as e:
            raise BuilderError(message=f"failed to write {path}: {e}", stage="patch") from e

    def run_image_build(self, tag: str, context_dir: Path) -> None:
        self._run("build", ["build", "-t", tag, str(context_dir)])

    def run_container(self, image: str, command: str) -> str:
        return self._run("verify", ["run", *RUN_OPTIONS, image, "bash", "-c", command])

    def tag_image(self, src: str, dst: str) -> None:
        self._run("tag_latest", ["tag", src, dst])

    def push_image(self, ref: str) -> None:
        self._run("publish", ["push", ref])

    def login(self, account: str, secret: str) -> None:
        self._run("authenticate", ["login", "--username", account, "--password-stdin"], input_text=secret)
