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

"""Orchestration functions that compose domain modules into workflows."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass

from rich.panel import Panel
from rich.table import Table

from deploy_sequencer import console
from deploy_sequencer.client import ClusterClient, KubectlClient
from deploy_sequencer.config import (
    ClusterConfig,
    ClusterContext,
    ReadinessPoll,
    SequenceConfig,
    build_steps,
)
from deploy_sequencer.errors import ClientError, StepError
from deploy_sequencer.preconditions import ensure, ensure_all, namespace_precondition
from deploy_sequencer.readiness import PollResult, wait_for_ingress_address
from deploy_sequencer.sequencer import DeploymentSequencer, Outcome, SequencePolicy, SequenceReport
from deploy_sequencer.targets import Target
from deploy_sequencer.utils import require_command

# ============================================================================
# Internal helpers
# ============================================================================


def _check_prerequisites(tools: list[str]) -> None:
    """Check that every CLI tool is on PATH before touching the cluster.

    Raises:
        MissingToolError: For the first missing tool.
    """
    console.print(Panel.fit("Checking prerequisites", style="bold blue"))
    for cmd in tools:
        require_command(cmd)
    console.print("[green]\u2705 All required tools are available[/green]")


_OUTCOME_STYLES = {
    Outcome.DELETED: "green",
    Outcome.APPLIED: "green",
    Outcome.ABSENT: "yellow",
    Outcome.SKIPPED: "dim",
    Outcome.FAILED: "red",
}


def print_report(report: SequenceReport) -> None:
    """Print a per-step table of the sequencer report."""
    table = Table(title="Manifest steps")
    table.add_column("Step")
    table.add_column("Action")
    table.add_column("Outcome")
    table.add_column("Detail", overflow="fold")
    for result in report.results:
        style = _OUTCOME_STYLES[result.outcome]
        table.add_row(
            result.step.name,
            result.action.value,
            f"[{style}]{result.outcome.value}[/{style}]",
            result.detail,
        )
    console.print(table)


def _print_partial_report(err: StepError) -> None:
    """Print the steps completed before a fail-fast abort."""
    if err.report is not None:
        console.print(f"[red]\u274c Aborted at step '{err.step_name}'[/red]")
        print_report(err.report)


# ============================================================================
# Public API
# ============================================================================


@dataclass(frozen=True)
class RedeployResult:
    """Final state of a redeploy run."""

    context: ClusterContext
    report: SequenceReport
    address: PollResult | None


def prepare_target(target: Target, client: ClusterClient, seq_cfg: SequenceConfig) -> ClusterContext:
    """Check tools, ensure cluster preconditions, and point kubectl at the target.

    Args:
        target: Minikube or AKS target.
        client: Cluster client.
        seq_cfg: Sequence config, for the ingress controller timeout.

    Returns:
        The cluster context all later operations use.

    Raises:
        MissingToolError: If a required tool is missing (before any mutation).
        PreconditionError: If a precondition cannot be created.
        ClientError: If credentials or the context switch fail.
    """
    _check_prerequisites(target.tools)

    console.print(Panel.fit(f"Preparing {target.kind.value} cluster", style="bold blue"))
    ensure_all(target.cluster_preconditions())
    target.connect()

    context = target.context()
    client.use_context(context.kube_context, context.namespace)
    console.print(f"[green]\u2705 Using context '{context.kube_context}', "
                  f"namespace '{context.namespace}'[/green]")

    ensure(namespace_precondition(client, context.namespace))
    ensure(target.ingress_precondition(client, seq_cfg))
    return context


def build_sequencer(
    client: ClusterClient,
    context: ClusterContext,
    seq_cfg: SequenceConfig,
    policy: SequencePolicy | None = None,
) -> DeploymentSequencer:
    """Build a sequencer for the configured manifests."""
    steps = build_steps(seq_cfg.manifests, seq_cfg.manifest_dir)
    return DeploymentSequencer(client, steps, context, policy)


def redeploy(sequencer: DeploymentSequencer) -> SequenceReport:
    """Delete existing resources in reverse order, then deploy in order.

    Raises:
        ApplyError: If an apply fails under a fail-fast policy.
        DeleteError: If a delete fails under a fail-fast policy.
    """
    console.print(Panel.fit("Deleting existing resources", style="bold blue"))
    report = sequencer.teardown()
    console.print(Panel.fit("Deploying resources", style="bold blue"))
    sequencer.apply(report)
    return report


def await_ingress_address(
    client: ClusterClient,
    target: Target,
    seq_cfg: SequenceConfig,
    sleep: Callable[[float], None] = time.sleep,
) -> PollResult:
    """Poll the target's ingress address source within the configured bounds."""
    kind, name, namespace = target.readiness_target(seq_cfg)
    bounds = ReadinessPoll(max_attempts=seq_cfg.poll_attempts, interval=seq_cfg.poll_interval)
    result = wait_for_ingress_address(client, kind, name, namespace, bounds, sleep=sleep)
    if result.ready:
        console.print(f"[green]\u2705 External address: {result.value}[/green]")
    else:
        console.print("[yellow]\u26a0\ufe0f  External address not yet assigned[/yellow]")
        console.print(f"[yellow]   Check later with: kubectl get {kind} {name} -n {namespace}[/yellow]")
    return result


def show_status(client: ClusterClient, namespace: str) -> None:
    """Print the resources currently in *namespace*; failures are reported, not raised."""
    console.print(Panel.fit(f"Resources in namespace '{namespace}'", style="bold blue"))
    try:
        console.print(client.describe_namespace(namespace), markup=False, highlight=False)
    except ClientError as err:
        console.print(f"[yellow]\u26a0\ufe0f  {err}[/yellow]")


def run_redeploy(
    target: Target,
    seq_cfg: SequenceConfig,
    *,
    client: ClusterClient | None = None,
    policy: SequencePolicy | None = None,
    skip_readiness: bool = False,
    sleep: Callable[[float], None] = time.sleep,
) -> RedeployResult:
    """Run the full workflow: prepare target, teardown, apply, poll, report.

    Args:
        target: Minikube or AKS target.
        seq_cfg: Manifest sequence and polling settings.
        client: Cluster client, or None for a kubectl-backed one.
        policy: Sequencer failure policy, or None for the default.
        skip_readiness: Whether to skip the ingress address poll.
        sleep: Sleep function used between readiness attempts.

    Returns:
        The context, per-step report, and address poll result.

    Raises:
        SequencerError: If a fatal step fails.
    """
    client = client or KubectlClient()
    context = prepare_target(target, client, seq_cfg)

    sequencer = build_sequencer(client, context, seq_cfg, policy)
    try:
        report = redeploy(sequencer)
    except StepError as err:
        _print_partial_report(err)
        show_status(client, context.namespace)
        raise
    console.print("[green]\u2705 Deployment completed[/green]" if report.ok
                  else "[red]\u274c Deployment completed with failures[/red]")

    address = None
    if not skip_readiness:
        console.print(Panel.fit("Waiting for ingress", style="bold blue"))
        address = await_ingress_address(client, target, seq_cfg, sleep=sleep)

    print_report(report)
    show_status(client, context.namespace)
    return RedeployResult(context=context, report=report, address=address)


def _direct_context(cluster_cfg: ClusterConfig) -> ClusterContext:
    current = cluster_cfg.kube_context or "current-context"
    return ClusterContext(namespace=cluster_cfg.namespace, cluster=current, kube_context=current)


def run_teardown(
    cluster_cfg: ClusterConfig,
    seq_cfg: SequenceConfig,
    *,
    client: ClusterClient | None = None,
    policy: SequencePolicy | None = None,
) -> SequenceReport:
    """Delete the configured manifests in reverse order on an existing cluster.

    Raises:
        DeleteError: If a delete fails under a fail-fast policy.
    """
    client = client or KubectlClient(context=cluster_cfg.kube_context)
    sequencer = build_sequencer(client, _direct_context(cluster_cfg), seq_cfg, policy)
    console.print(Panel.fit("Deleting existing resources", style="bold blue"))
    try:
        report = sequencer.teardown()
    except StepError as err:
        _print_partial_report(err)
        raise
    print_report(report)
    return report


def run_apply(
    cluster_cfg: ClusterConfig,
    seq_cfg: SequenceConfig,
    *,
    client: ClusterClient | None = None,
    policy: SequencePolicy | None = None,
) -> SequenceReport:
    """Apply the configured manifests in order on an existing cluster.

    Raises:
        ApplyError: If an apply fails under a fail-fast policy.
    """
    client = client or KubectlClient(context=cluster_cfg.kube_context)
    sequencer = build_sequencer(client, _direct_context(cluster_cfg), seq_cfg, policy)
    console.print(Panel.fit("Deploying resources", style="bold blue"))
    try:
        report = sequencer.apply()
    except StepError as err:
        _print_partial_report(err)
        raise
    print_report(report)
    return report
