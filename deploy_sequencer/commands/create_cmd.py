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

"""Create subcommands (minikube-cluster, aks-cluster, namespace, ingress)."""

from __future__ import annotations

import typer

from deploy_sequencer.client import KubectlClient
from deploy_sequencer.commands.options import NamespaceOption, load_config, load_target_config
from deploy_sequencer.constants import TOOLS_AKS, TOOLS_MINIKUBE
from deploy_sequencer.preconditions import ensure, ensure_all, namespace_precondition
from deploy_sequencer.targets import AksTarget, TargetKind, make_target
from deploy_sequencer.utils import require_command

app = typer.Typer(help="Create cluster prerequisites (create-if-absent).")


@app.command("minikube-cluster")
def minikube_cluster(
    profile: str | None = typer.Option(None, "--profile", help="Minikube profile"),
    driver: str | None = typer.Option(None, "--driver", help="Minikube driver"),
) -> None:
    """Start the Minikube profile if it is not running."""
    for cmd in TOOLS_MINIKUBE:
        require_command(cmd)
    minikube_cfg = load_target_config(TargetKind.MINIKUBE, profile=profile, driver=driver)
    cluster_cfg, _ = load_config()
    target = make_target(TargetKind.MINIKUBE, cluster_cfg, minikube_cfg=minikube_cfg)
    ensure_all(target.cluster_preconditions())


@app.command("aks-cluster")
def aks_cluster(
    resource_group: str | None = typer.Option(None, "--resource-group", help="Azure resource group"),
    cluster_name: str | None = typer.Option(None, "--cluster-name", help="AKS cluster name"),
    region: str | None = typer.Option(None, "--region", help="Azure region"),
    node_count: int | None = typer.Option(None, "--node-count", help="Agent node count"),
    node_size: str | None = typer.Option(None, "--node-size", help="Agent node VM size"),
) -> None:
    """Create the resource group and AKS cluster if absent, then fetch credentials."""
    for cmd in TOOLS_AKS:
        require_command(cmd)
    aks_cfg = load_target_config(
        TargetKind.AKS,
        resource_group=resource_group,
        cluster_name=cluster_name,
        region=region,
        node_count=node_count,
        node_size=node_size,
    )
    cluster_cfg, _ = load_config()
    target = AksTarget(aks_cfg, cluster_cfg)
    ensure_all(target.cluster_preconditions())
    target.connect()


@app.command()
def namespace(
    namespace: str | None = NamespaceOption,
) -> None:
    """Create the target namespace if absent."""
    require_command("kubectl")
    cluster_cfg, _ = load_config(namespace=namespace)
    client = KubectlClient(context=cluster_cfg.kube_context)
    ensure(namespace_precondition(client, cluster_cfg.namespace))


@app.command()
def ingress(
    target: TargetKind = typer.Option(TargetKind.MINIKUBE, "--target", help="Cluster target"),
) -> None:
    """Install the ingress controller for the target if absent."""
    cluster_cfg, seq_cfg = load_config()
    resolved = make_target(target, cluster_cfg)
    for cmd in resolved.tools:
        require_command(cmd)
    client = KubectlClient(context=cluster_cfg.kube_context)
    ensure(resolved.ingress_precondition(client, seq_cfg))
