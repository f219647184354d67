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

"""Minikube and AKS targets: required tools, cluster preconditions, and kube context."""

from __future__ import annotations

import json
from enum import Enum

import sh
from rich.panel import Panel

from deploy_sequencer import console
from deploy_sequencer.client import ClusterClient
from deploy_sequencer.config import AksConfig, ClusterConfig, ClusterContext, MinikubeConfig, SequenceConfig
from deploy_sequencer.constants import (
    AZ_NOT_FOUND_MARKERS,
    DEFAULT_APP_INGRESS,
    INGRESS_NGINX_SERVICE,
    MINIKUBE_INGRESS_ADDON,
    NS_INGRESS_NGINX,
    TOOLS_AKS,
    TOOLS_MINIKUBE,
)
from deploy_sequencer.errors import ClientError
from deploy_sequencer.preconditions import Precondition, ingress_controller_precondition
from deploy_sequencer.utils import first_line, only_not_found, run_az, run_minikube


class TargetKind(str, Enum):
    MINIKUBE = "minikube"
    AKS = "aks"


# ============================================================================
# Minikube
# ============================================================================

def minikube_cluster_precondition(cfg: MinikubeConfig) -> Precondition:
    """Precondition for a running Minikube profile."""
    def _exists() -> bool:
        ok, _, _ = run_minikube(["status", "--profile", cfg.profile])
        return ok

    def _create() -> None:
        sh.minikube("start", f"--driver={cfg.driver}", "--profile", cfg.profile)

    return Precondition(name=f"Minikube profile '{cfg.profile}'", exists=_exists, create=_create)


def minikube_ingress_precondition(cfg: MinikubeConfig) -> Precondition:
    """Precondition for the Minikube ingress addon."""
    def _exists() -> bool:
        ok, stdout, stderr = run_minikube(["addons", "list", "--profile", cfg.profile, "--output", "json"])
        if not ok:
            raise ClientError(f"Failed to list minikube addons: {first_line(stderr)}")
        try:
            addons = json.loads(stdout)
        except json.JSONDecodeError as err:
            raise ClientError(f"Unparsable minikube addons output: {err}") from err
        return addons.get(MINIKUBE_INGRESS_ADDON, {}).get("Status") == "enabled"

    def _create() -> None:
        sh.minikube("addons", "enable", MINIKUBE_INGRESS_ADDON, "--profile", cfg.profile)

    return Precondition(name="Minikube ingress addon", exists=_exists, create=_create)


class MinikubeTarget:
    """Local Minikube cluster target."""

    kind = TargetKind.MINIKUBE
    tools = TOOLS_MINIKUBE

    def __init__(self, cfg: MinikubeConfig, cluster_cfg: ClusterConfig) -> None:
        self.cfg = cfg
        self.cluster_cfg = cluster_cfg

    @property
    def settings(self) -> MinikubeConfig:
        return self.cfg

    def context(self) -> ClusterContext:
        return ClusterContext(
            namespace=self.cluster_cfg.namespace,
            cluster=self.cfg.profile,
            kube_context=self.cluster_cfg.kube_context or self.cfg.profile,
        )

    def cluster_preconditions(self) -> list[Precondition]:
        return [minikube_cluster_precondition(self.cfg)]

    def connect(self) -> None:
        # minikube start already writes the kubeconfig context
        return None

    def ingress_precondition(self, client: ClusterClient, seq_cfg: SequenceConfig) -> Precondition:
        return minikube_ingress_precondition(self.cfg)

    def readiness_target(self, seq_cfg: SequenceConfig) -> tuple[str, str, str]:
        """Resource holding the address: the application Ingress, via the addon."""
        return (
            seq_cfg.readiness_kind or "ingress",
            seq_cfg.readiness_name or DEFAULT_APP_INGRESS,
            seq_cfg.readiness_namespace or self.cluster_cfg.namespace,
        )


# ============================================================================
# AKS
# ============================================================================

def resource_group_precondition(cfg: AksConfig) -> Precondition:
    """Precondition for the Azure resource group."""
    def _exists() -> bool:
        ok, stdout, stderr = run_az(["group", "exists", "--name", cfg.resource_group])
        if not ok:
            raise ClientError(f"Failed to query resource group: {first_line(stderr)}")
        return stdout.strip().lower() == "true"

    def _create() -> None:
        sh.az("group", "create", "--name", cfg.resource_group,
              "--location", cfg.region, "--output", "none")

    return Precondition(name=f"Resource group '{cfg.resource_group}'", exists=_exists, create=_create)


def aks_cluster_precondition(cfg: AksConfig) -> Precondition:
    """Precondition for the AKS managed cluster."""
    def _exists() -> bool:
        ok, _, stderr = run_az([
            "aks", "show",
            "--resource-group", cfg.resource_group,
            "--name", cfg.cluster_name,
            "--output", "none",
        ])
        if ok:
            return True
        if only_not_found(stderr, AZ_NOT_FOUND_MARKERS):
            return False
        raise ClientError(f"Failed to query AKS cluster: {first_line(stderr)}")

    def _create() -> None:
        sh.az(
            "aks", "create",
            "--resource-group", cfg.resource_group,
            "--name", cfg.cluster_name,
            "--location", cfg.region,
            "--node-count", str(cfg.node_count),
            "--node-vm-size", cfg.node_size,
            "--generate-ssh-keys",
            "--output", "none",
        )

    return Precondition(name=f"AKS cluster '{cfg.cluster_name}'", exists=_exists, create=_create)


class AksTarget:
    """Azure Kubernetes Service target."""

    kind = TargetKind.AKS
    tools = TOOLS_AKS

    def __init__(self, cfg: AksConfig, cluster_cfg: ClusterConfig) -> None:
        self.cfg = cfg
        self.cluster_cfg = cluster_cfg

    @property
    def settings(self) -> AksConfig:
        return self.cfg

    def context(self) -> ClusterContext:
        return ClusterContext(
            namespace=self.cluster_cfg.namespace,
            cluster=self.cfg.cluster_name,
            kube_context=self.cluster_cfg.kube_context or self.cfg.cluster_name,
        )

    def cluster_preconditions(self) -> list[Precondition]:
        return [resource_group_precondition(self.cfg), aks_cluster_precondition(self.cfg)]

    def connect(self) -> None:
        """Merge the cluster credentials into the local kubeconfig.

        Raises:
            ClientError: If ``az aks get-credentials`` fails.
        """
        console.print(Panel.fit("Fetching AKS credentials", style="bold blue"))
        try:
            sh.az(
                "aks", "get-credentials",
                "--resource-group", self.cfg.resource_group,
                "--name", self.cfg.cluster_name,
                "--overwrite-existing",
            )
        except sh.ErrorReturnCode as err:
            stderr = err.stderr.decode(errors="replace") if err.stderr else ""
            raise ClientError(f"Failed to fetch AKS credentials: {first_line(stderr)}") from err
        console.print(f"[green]\u2705 Credentials merged for '{self.cfg.cluster_name}'[/green]")

    def ingress_precondition(self, client: ClusterClient, seq_cfg: SequenceConfig) -> Precondition:
        return ingress_controller_precondition(client, seq_cfg.ingress_timeout)

    def readiness_target(self, seq_cfg: SequenceConfig) -> tuple[str, str, str]:
        """Resource holding the address: the ingress-nginx LoadBalancer service."""
        return (
            seq_cfg.readiness_kind or "service",
            seq_cfg.readiness_name or INGRESS_NGINX_SERVICE,
            seq_cfg.readiness_namespace or NS_INGRESS_NGINX,
        )


Target = MinikubeTarget | AksTarget


def make_target(
    kind: TargetKind,
    cluster_cfg: ClusterConfig,
    minikube_cfg: MinikubeConfig | None = None,
    aks_cfg: AksConfig | None = None,
) -> Target:
    """Build a target from its kind, loading settings from env vars if not given."""
    if kind == TargetKind.AKS:
        return AksTarget(aks_cfg or AksConfig(), cluster_cfg)
    return MinikubeTarget(minikube_cfg or MinikubeConfig(), cluster_cfg)
