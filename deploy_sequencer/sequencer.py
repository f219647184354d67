# /*
# Copyright 2026 The Grove Authors.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# */

"""Ordered teardown and apply of manifest steps."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from deploy_sequencer import console, logger
from deploy_sequencer.client import ClusterClient
from deploy_sequencer.config import ClusterContext, ManifestStep
from deploy_sequencer.errors import ApplyError, DeleteError


class Action(str, Enum):
    DELETE = "delete"
    APPLY = "apply"


class Outcome(str, Enum):
    DELETED = "deleted"
    ABSENT = "absent"
    APPLIED = "applied"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class StepResult:
    step: ManifestStep
    action: Action
    outcome: Outcome
    detail: str = ""


@dataclass
class SequenceReport:
    """Per-step results of a sequencer run, in execution order."""

    results: list[StepResult] = field(default_factory=list)

    def record(self, step: ManifestStep, action: Action, outcome: Outcome, detail: str = "") -> StepResult:
        result = StepResult(step=step, action=action, outcome=outcome, detail=detail)
        self.results.append(result)
        return result

    def names(self, action: Action, *outcomes: Outcome) -> list[str]:
        """Step names for *action*, optionally filtered to *outcomes*, in execution order."""
        return [
            r.step.name for r in self.results
            if r.action == action and (not outcomes or r.outcome in outcomes)
        ]

    @property
    def deleted(self) -> list[str]:
        return self.names(Action.DELETE, Outcome.DELETED)

    @property
    def applied(self) -> list[str]:
        return self.names(Action.APPLY, Outcome.APPLIED)

    @property
    def skipped(self) -> list[str]:
        # a missing file is skipped in both phases; list it once
        return list(dict.fromkeys(r.step.name for r in self.results if r.outcome == Outcome.SKIPPED))

    @property
    def failures(self) -> list[StepResult]:
        return [r for r in self.results if r.outcome == Outcome.FAILED]

    @property
    def ok(self) -> bool:
        return not self.failures


@dataclass(frozen=True)
class SequencePolicy:
    """Failure policy for each phase.

    Attributes:
        fail_fast_apply: Raise on the first apply failure instead of continuing.
        fail_fast_delete: Raise on the first non-NotFound delete failure instead
            of recording it and continuing the teardown.
    """

    fail_fast_apply: bool = True
    fail_fast_delete: bool = False


class DeploymentSequencer:
    """Deletes manifest steps in reverse order, then applies them in order.

    Steps whose manifest file is not present locally are skipped in both
    phases. The step list is fixed at construction.

    Args:
        client: Cluster client used for every delete and apply.
        steps: Manifest steps; sorted by ``order``.
        context: Target namespace and cluster.
        policy: Failure policy for the delete and apply phases.
    """

    def __init__(
        self,
        client: ClusterClient,
        steps: Iterable[ManifestStep],
        context: ClusterContext,
        policy: SequencePolicy | None = None,
    ) -> None:
        self.client = client
        self.context = context
        self.policy = policy or SequencePolicy()
        self._steps = tuple(sorted(steps, key=lambda s: s.order))
        names = [s.name for s in self._steps]
        if len(set(names)) != len(names):
            raise ValueError(f"Duplicate step names in {names}")

    @property
    def apply_order(self) -> list[ManifestStep]:
        return list(self._steps)

    @property
    def delete_order(self) -> list[ManifestStep]:
        return list(reversed(self._steps))

    def teardown(self, report: SequenceReport | None = None) -> SequenceReport:
        """Delete every present step in reverse order.

        Args:
            report: Report to append to, or None to start a new one.

        Returns:
            The report with one delete result per step.

        Raises:
            DeleteError: On a non-NotFound failure when ``fail_fast_delete`` is set.
        """
        report = report if report is not None else SequenceReport()
        for step in self.delete_order:
            if not step.present:
                logger.debug("skipping delete of %s: %s not found locally", step.name, step.path)
                report.record(step, Action.DELETE, Outcome.SKIPPED)
                continue
            try:
                deleted = self.client.delete_resource(path=step.path, namespace=self.context.namespace)
            except DeleteError as err:
                report.record(step, Action.DELETE, Outcome.FAILED, str(err))
                if self.policy.fail_fast_delete:
                    raise DeleteError(str(err), step_name=step.name, report=report) from err
                console.print(f"[yellow]\u26a0\ufe0f  {err}[/yellow]")
                continue
            if deleted:
                report.record(step, Action.DELETE, Outcome.DELETED)
                console.print(f"[green]  \u2713 Deleted {step.path.name}[/green]")
            else:
                report.record(step, Action.DELETE, Outcome.ABSENT)
                console.print(f"[yellow]   {step.path.name}: nothing to delete[/yellow]")
        return report

    def apply(self, report: SequenceReport | None = None) -> SequenceReport:
        """Apply every present step in order.

        Args:
            report: Report to append to, or None to start a new one.

        Returns:
            The report with one apply result per step run.

        Raises:
            ApplyError: On the first failure when ``fail_fast_apply`` is set; the
                remaining steps are not applied.
        """
        report = report if report is not None else SequenceReport()
        for step in self.apply_order:
            if not step.present:
                logger.debug("skipping apply of %s: %s not found locally", step.name, step.path)
                report.record(step, Action.APPLY, Outcome.SKIPPED)
                continue
            try:
                self.client.apply_manifest(step.path, namespace=self.context.namespace)
            except ApplyError as err:
                report.record(step, Action.APPLY, Outcome.FAILED, str(err))
                if self.policy.fail_fast_apply:
                    raise ApplyError(str(err), step_name=step.name, report=report) from err
                console.print(f"[red]\u2717 {err}[/red]")
                continue
            report.record(step, Action.APPLY, Outcome.APPLIED)
            console.print(f"[green]  \u2713 Applied {step.path.name}[/green]")
        return report

    def run(self) -> SequenceReport:
        """Teardown then apply, collecting both phases in one report."""
        report = self.teardown()
        return self.apply(report)
