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

"""Drive the Builder through one image build, verification and publish.

Steps run strictly in order and the first failure ends the run. Nothing is
retried or rolled back: a recipe left in the workspace or an image tagged
but not pushed stays behind for the operator.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, TypeVar

from dindbuild.build.builder import Builder
from dindbuild.build.recipe import (
    RECIPE_ANCHOR,
    RECIPE_FILENAME,
    SUPPORT_SCRIPT_FILENAME,
    recipe_edits,
)
from dindbuild.build.verify import check_reported_version
from dindbuild.config import BuildSettings
from dindbuild.core.exceptions import BuilderError
from dindbuild.core.run import activity
from dindbuild.planning.reconcile import BuildDecision
from dindbuild.spinner import activity_spinner

if TYPE_CHECKING:
    from dindbuild.core.run import RunContext

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Stage(str, Enum):
    AUTHENTICATE = "authenticate"
    MATERIALIZE = "materialize"
    PATCH = "patch"
    BUILD = "build"
    VERIFY = "verify"
    TAG_LATEST = "tag_latest"
    PUBLISH_LATEST = "publish_latest"
    PUBLISH_PRIMARY = "publish_primary"


class FailureKind(str, Enum):
    NONE = "none"
    BUILD_STAGE = "build_stage"
    VERIFICATION_FAILED = "verification_failed"


PUBLISH_STAGES = frozenset({Stage.TAG_LATEST, Stage.PUBLISH_LATEST, Stage.PUBLISH_PRIMARY})


@dataclass
class BuildOutcome:
    """Result of one build attempt.

    Attributes:
        image: Image reference the build was tagged with.
        works: Whether the smoke test reported the expected version.
        failure: Failure class, NONE on success.
        stage: Stage that failed, if any.
        message: Human-readable failure message.
        published: References pushed to the registry, in push order.
    """

    image: str
    works: bool = False
    failure: FailureKind = FailureKind.NONE
    stage: Stage | None = None
    message: str = ""
    published: list[str] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.failure is FailureKind.NONE


class _StageFailed(Exception):
    """Internal signal carrying the outcome of a failed stage."""


class BuildOrchestrator:
    """Build, verify and publish the image for one BuildDecision."""

    def __init__(
        self,
        settings: BuildSettings,
        builder: Builder,
        workspace: Path,
        cfg: Mapping[str, Any],
        run: RunContext | None = None,
        no_spinner: bool = False,
    ) -> None:
        self.settings = settings
        self.builder = builder
        self.workspace = workspace
        self.cfg = cfg
        self.run = run
        self.no_spinner = no_spinner

    def _event(self, event: str, **data: Any) -> None:
        if self.run is not None:
            self.run.log_event({"event": event, **data})

    def _step(self, outcome: BuildOutcome, stage: Stage, description: str, fn: Callable[[], T]) -> T:
        """Run one stage, recording a BuilderError as the run's failure."""
        self._event(f"{stage.value}.start")
        try:
            with activity_spinner(stage.value, description, disable=self.no_spinner):
                result = fn()
        except BuilderError as e:
            outcome.failure = FailureKind.BUILD_STAGE
            outcome.stage = stage
            outcome.message = e.message
            logger.error("stage %s failed: %s", stage.value, e.message)
            self._event(f"{stage.value}.error", message=e.message, output=e.output)
            raise _StageFailed() from e
        self._event(f"{stage.value}.done")
        return result

    def build(self, decision: BuildDecision) -> BuildOutcome:
        """Run every stage for ``decision`` and report how far it got."""
        image = self.settings.image_ref(decision.publish_tag)
        outcome = BuildOutcome(image=image)
        try:
            self._build(decision, outcome)
        except _StageFailed:
            logger.debug("build of %s stopped at %s", image, outcome.stage)
        return outcome

    def _build(self, decision: BuildDecision, outcome: BuildOutcome) -> None:
        settings = self.settings
        mirrors = self.cfg["mirrors"]
        image = outcome.image
        recipe_path = self.workspace / RECIPE_FILENAME
        script_path = self.workspace / SUPPORT_SCRIPT_FILENAME

        self._step(
            outcome,
            Stage.AUTHENTICATE,
            f"Logging in to {settings.namespace}",
            lambda: self.builder.login(settings.namespace, settings.password),
        )

        def materialize() -> None:
            self.builder.write_local(recipe_path, self.builder.fetch_template(mirrors["recipe_template"]))
            self.builder.write_local(script_path, self.builder.fetch_template(mirrors["support_script"]))

        self._step(outcome, Stage.MATERIALIZE, f"Fetching recipe into {self.workspace}", materialize)

        def patch() -> None:
            for edit in recipe_edits(decision.channel, decision.version, self.cfg):
                self.builder.patch_text(recipe_path, RECIPE_ANCHOR, edit)

        self._step(outcome, Stage.PATCH, f"Embedding {decision.version} into the recipe", patch)

        self._step(
            outcome,
            Stage.BUILD,
            f"Building {image}",
            lambda: self.builder.run_image_build(image, self.workspace),
        )

        smoke_command = self.cfg["behavior"]["smoke_command"]
        output = self._step(
            outcome,
            Stage.VERIFY,
            f"Verifying {image} reports {decision.expected_version}",
            lambda: self.builder.run_container(image, smoke_command),
        )
        outcome.works = check_reported_version(output, decision.expected_version)
        if not outcome.works:
            outcome.failure = FailureKind.VERIFICATION_FAILED
            outcome.stage = Stage.VERIFY
            outcome.message = f"image {image} not built properly"
            self._event("verify.mismatch", image=image, expected=decision.expected_version)
            return
        activity("verify", "build succeeded")

        if decision.is_latest:
            alias = settings.image_ref(decision.channel.latest_alias)
            self._step(outcome, Stage.TAG_LATEST, f"Tagging {alias}", lambda: self.builder.tag_image(image, alias))
            self._step(
                outcome,
                Stage.PUBLISH_LATEST,
                f"Pushing {decision.channel.latest_alias} to {settings.repository}",
                lambda: self.builder.push_image(alias),
            )
            outcome.published.append(alias)

        if not decision.channel.publishes_primary_tag:
            return

        self._step(
            outcome,
            Stage.PUBLISH_PRIMARY,
            f"Pushing {decision.publish_tag} to {settings.repository}",
            lambda: self.builder.push_image(image),
        )
        outcome.published.append(image)
