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

"""Composite setup subcommands (minikube, aks)."""

from __future__ import annotations

from pathlib import Path

import typer

from deploy_sequencer.commands.options import (
    ManifestDirOption,
    NamespaceOption,
    PlanOption,
    PollAttemptsOption,
    PollIntervalOption,
    load_config,
    load_target_config,
)
from deploy_sequencer.config import SequenceConfig, display_config
from deploy_sequencer.orchestrator import run_redeploy
from deploy_sequencer.sequencer import SequencePolicy
from deploy_sequencer.targets import AksTarget, MinikubeTarget, Target, TargetKind

app = typer.Typer(help="Full redeploy workflows: prepare cluster, delete, apply, wait.")


def _run(target: Target, seq_cfg: SequenceConfig, skip_readiness: bool, fail_fast_delete: bool) -> None:
    display_config(target.cluster_cfg, seq_cfg, target.settings)
    result = run_redeploy(
        target,
        seq_cfg,
        policy=SequencePolicy(fail_fast_delete=fail_fast_delete),
        skip_readiness=skip_readiness,
    )
    if not result.report.ok:
        raise typer.Exit(code=1)


@app.command()
def minikube(
    namespace: str | None = NamespaceOption,
    manifest_dir: Path | None = ManifestDirOption,
    plan: Path | None = PlanOption,
    poll_attempts: int | None = PollAttemptsOption,
    poll_interval: float | None = PollIntervalOption,
    profile: str | None = typer.Option(None, "--profile", help="Minikube profile"),
    driver: str | None = typer.Option(None, "--driver", help="Minikube driver"),
    skip_readiness: bool = typer.Option(
        False, "--skip-readiness", help="Skip waiting for the ingress address"),
    fail_fast_delete: bool = typer.Option(
        False, "--fail-fast-delete", help="Stop at the first delete failure other than not-found"),
) -> None:
    """Reset and redeploy the stack on Minikube."""
    cluster_cfg, seq_cfg = load_config(
        namespace=namespace, manifest_dir=manifest_dir, plan=plan,
        poll_attempts=poll_attempts, poll_interval=poll_interval,
    )
    minikube_cfg = load_target_config(TargetKind.MINIKUBE, profile=profile, driver=driver)
    target = MinikubeTarget(minikube_cfg, cluster_cfg)
    _run(target, seq_cfg, skip_readiness, fail_fast_delete)


@app.command()
def aks(
    namespace: str | None = NamespaceOption,
    manifest_dir: Path | None = ManifestDirOption,
    plan: Path | None = PlanOption,
    poll_attempts: int | None = PollAttemptsOption,
    poll_interval: float | None = PollIntervalOption,
    resource_group: str | None = typer.Option(None, "--resource-group", help="Azure resource group"),
    cluster_name: str | None = typer.Option(None, "--cluster-name", help="AKS cluster name"),
    region: str | None = typer.Option(None, "--region", help="Azure region"),
    node_count: int | None = typer.Option(None, "--node-count", help="Agent node count"),
    node_size: str | None = typer.Option(None, "--node-size", help="Agent node VM size"),
    skip_readiness: bool = typer.Option(
        False, "--skip-readiness", help="Skip waiting for the ingress address"),
    fail_fast_delete: bool = typer.Option(
        False, "--fail-fast-delete", help="Stop at the first delete failure other than not-found"),
) -> None:
    """Provision AKS if needed, then reset and redeploy the stack."""
    cluster_cfg, seq_cfg = load_config(
        namespace=namespace, manifest_dir=manifest_dir, plan=plan,
        poll_attempts=poll_attempts, poll_interval=poll_interval,
    )
    aks_cfg = load_target_config(
        TargetKind.AKS,
        resource_group=resource_group,
        cluster_name=cluster_name,
        region=region,
        node_count=node_count,
        node_size=node_size,
    )
    target = AksTarget(aks_cfg, cluster_cfg)
    _run(target, seq_cfg, skip_readiness, fail_fast_delete)
