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

"""Configuration classes, the immutable run model, and manifest plan loading."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from rich.panel import Panel

from deploy_sequencer import console
from deploy_sequencer.constants import (
    DEFAULT_AKS_CLUSTER_NAME,
    DEFAULT_INGRESS_TIMEOUT_SECONDS,
    DEFAULT_MANIFESTS,
    DEFAULT_MINIKUBE_DRIVER,
    DEFAULT_MINIKUBE_PROFILE,
    DEFAULT_NAMESPACE,
    DEFAULT_NODE_COUNT,
    DEFAULT_NODE_SIZE,
    DEFAULT_POLL_ATTEMPTS,
    DEFAULT_POLL_INTERVAL_SECONDS,
    DEFAULT_REGION,
    DEFAULT_RESOURCE_GROUP,
)


# ============================================================================
# Configuration classes
# ============================================================================

class ClusterConfig(BaseSettings):
    """Target namespace and kube context, auto-loaded from DEPLOY_* env vars.

    Attributes:
        namespace: Kubernetes namespace all manifests are applied to.
        kube_context: kubectl context to switch to, or None for the target default.
    """

    model_config = SettingsConfigDict(env_prefix="DEPLOY_", extra="ignore", frozen=True)

    namespace: str = Field(default=DEFAULT_NAMESPACE, pattern=r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?$")
    kube_context: str | None = None


class MinikubeConfig(BaseSettings):
    """Minikube profile settings, auto-loaded from DEPLOY_MINIKUBE_* env vars."""

    model_config = SettingsConfigDict(env_prefix="DEPLOY_MINIKUBE_", extra="ignore", frozen=True)

    profile: str = DEFAULT_MINIKUBE_PROFILE
    driver: str = DEFAULT_MINIKUBE_DRIVER


class AksConfig(BaseSettings):
    """Azure AKS settings, auto-loaded from DEPLOY_AKS_* env vars.

    Attributes:
        resource_group: Azure resource group holding the cluster.
        cluster_name: AKS managed cluster name.
        region: Azure region for the resource group.
        node_count: Number of agent nodes in the default node pool.
        node_size: VM size of the default node pool.
    """

    model_config = SettingsConfigDict(env_prefix="DEPLOY_AKS_", extra="ignore", frozen=True)

    resource_group: str = DEFAULT_RESOURCE_GROUP
    cluster_name: str = DEFAULT_AKS_CLUSTER_NAME
    region: str = DEFAULT_REGION
    node_count: int = Field(default=DEFAULT_NODE_COUNT, ge=1, le=100)
    node_size: str = DEFAULT_NODE_SIZE


class SequenceConfig(BaseSettings):
    """Manifest sequence and readiness polling, auto-loaded from DEPLOY_* env vars.

    ``DEPLOY_MANIFESTS`` is parsed as a JSON list. The readiness target fields
    default to None, meaning the target's own ingress address source is used.

    Attributes:
        manifest_dir: Directory the manifest filenames are resolved against.
        manifests: Manifest filenames in apply order.
        poll_attempts: Maximum readiness queries before giving up.
        poll_interval: Seconds between readiness queries.
        ingress_timeout: Seconds to wait for the ingress controller pods.
        readiness_kind: Resource kind holding the load-balancer address.
        readiness_name: Resource name holding the load-balancer address.
        readiness_namespace: Namespace of the readiness resource.
    """

    model_config = SettingsConfigDict(env_prefix="DEPLOY_", extra="ignore", frozen=True)

    manifest_dir: Path = Path(".")
    manifests: list[str] = Field(default_factory=lambda: list(DEFAULT_MANIFESTS), min_length=1)
    poll_attempts: int = Field(default=DEFAULT_POLL_ATTEMPTS, ge=1)
    poll_interval: float = Field(default=DEFAULT_POLL_INTERVAL_SECONDS, ge=0)
    ingress_timeout: int = Field(default=DEFAULT_INGRESS_TIMEOUT_SECONDS, ge=1)
    readiness_kind: str | None = None
    readiness_name: str | None = None
    readiness_namespace: str | None = None


# ============================================================================
# Run model
# ============================================================================

@dataclass(frozen=True)
class ManifestStep:
    """One manifest file in the deployment sequence.

    Attributes:
        name: Step identifier, the manifest filename without extension.
        order: Position in the apply sequence (lower applies first).
        path: Local manifest file path.
    """

    name: str
    order: int
    path: Path

    @property
    def present(self) -> bool:
        return self.path.is_file()


@dataclass(frozen=True)
class ClusterContext:
    """Namespace and cluster every apply/delete is aimed at."""

    namespace: str
    cluster: str
    kube_context: str


@dataclass(frozen=True)
class ReadinessPoll:
    """Bounds for a readiness poll.

    Attributes:
        max_attempts: Maximum number of status queries.
        interval: Seconds to sleep between queries.
        condition: Predicate a queried value must satisfy to count as ready.
    """

    max_attempts: int
    interval: float
    condition: Callable[[Any], bool] = field(default=bool)

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.interval < 0:
            raise ValueError("interval must not be negative")


def build_steps(manifests: list[str], manifest_dir: Path) -> list[ManifestStep]:
    """Turn ordered manifest filenames into manifest steps.

    Args:
        manifests: Manifest filenames in apply order.
        manifest_dir: Directory relative filenames are resolved against.

    Returns:
        Steps numbered in the given order.

    Raises:
        ValueError: If two manifests share the same step name.
    """
    steps: list[ManifestStep] = []
    seen: set[str] = set()
    for order, filename in enumerate(manifests):
        path = Path(filename)
        if not path.is_absolute():
            path = manifest_dir / path
        name = path.stem
        if name in seen:
            raise ValueError(f"Duplicate manifest step '{name}'")
        seen.add(name)
        steps.append(ManifestStep(name=name, order=order, path=path))
    return steps


# ============================================================================
# Manifest plan file
# ============================================================================

class ManifestPlan(BaseModel):
    """YAML plan file: an optional namespace plus the ordered manifest list."""

    namespace: str | None = None
    manifests: list[str] = Field(min_length=1)

    @field_validator("manifests", mode="before")
    @classmethod
    def _flatten_entries(cls, value: Any) -> Any:
        # entries are either filenames or {file: ...} mappings
        if not isinstance(value, list):
            return value
        return [entry["file"] if isinstance(entry, dict) and "file" in entry else entry
                for entry in value]


def load_manifest_plan(plan_file: Path) -> ManifestPlan:
    """Load a manifest plan from YAML.

    Args:
        plan_file: Path to the plan file.

    Returns:
        The validated plan.

    Raises:
        ValueError: If the file is missing, unparsable, or invalid.
    """
    try:
        with open(plan_file) as f:
            raw = yaml.safe_load(f) or {}
    except OSError as err:
        raise ValueError(f"Cannot read plan file {plan_file}: {err}") from err
    except yaml.YAMLError as err:
        raise ValueError(f"Invalid YAML in plan file {plan_file}: {err}") from err
    try:
        return ManifestPlan.model_validate(raw)
    except ValidationError as err:
        raise ValueError(f"Invalid plan file {plan_file}: {err}") from err


def resolve_config(
    *,
    namespace: str | None = None,
    manifest_dir: Path | None = None,
    plan_file: Path | None = None,
    poll_attempts: int | None = None,
    poll_interval: float | None = None,
) -> tuple[ClusterConfig, SequenceConfig]:
    """Resolve cluster and sequence config from env vars, a plan file, and CLI overrides.

    CLI overrides win over the plan file, which wins over environment values.
    Plan manifests resolve against the plan file's directory unless
    ``manifest_dir`` is given.

    Raises:
        ValueError: If the plan file or an override is invalid.
    """
    cluster_overrides: dict = {}
    seq_overrides: dict = {}
    if plan_file is not None:
        plan = load_manifest_plan(plan_file)
        if plan.namespace is not None:
            cluster_overrides["namespace"] = plan.namespace
        seq_overrides["manifests"] = plan.manifests
        seq_overrides["manifest_dir"] = plan_file.parent
    if namespace is not None:
        cluster_overrides["namespace"] = namespace
    if manifest_dir is not None:
        seq_overrides["manifest_dir"] = manifest_dir
    if poll_attempts is not None:
        seq_overrides["poll_attempts"] = poll_attempts
    if poll_interval is not None:
        seq_overrides["poll_interval"] = poll_interval

    # init kwargs take priority over DEPLOY_* env vars
    try:
        return ClusterConfig(**cluster_overrides), SequenceConfig(**seq_overrides)
    except ValidationError as err:
        raise ValueError(f"Invalid configuration: {err}") from err


def display_config(
    cluster_cfg: ClusterConfig,
    seq_cfg: SequenceConfig,
    target_cfg: MinikubeConfig | AksConfig | None = None,
) -> None:
    """Print the resolved configuration.

    Args:
        cluster_cfg: Namespace and kube context.
        seq_cfg: Manifest sequence and polling settings.
        target_cfg: Minikube or AKS settings, if a target is involved.
    """
    console.print(Panel.fit("Configuration", style="bold blue"))

    if isinstance(target_cfg, MinikubeConfig):
        console.print("[yellow]Minikube:[/yellow]")
        console.print(f"  profile         : {target_cfg.profile}")
        console.print(f"  driver          : {target_cfg.driver}")
    elif isinstance(target_cfg, AksConfig):
        console.print("[yellow]AKS:[/yellow]")
        console.print(f"  resource_group  : {target_cfg.resource_group}")
        console.print(f"  cluster_name    : {target_cfg.cluster_name}")
        console.print(f"  region          : {target_cfg.region}")
        console.print(f"  node_count      : {target_cfg.node_count}")
        console.print(f"  node_size       : {target_cfg.node_size}")

    console.print("[yellow]Sequence:[/yellow]")
    console.print(f"  namespace       : {cluster_cfg.namespace}")
    console.print(f"  manifest_dir    : {seq_cfg.manifest_dir}")
    console.print(f"  manifests       : {', '.join(seq_cfg.manifests)}")
    console.print(f"  poll            : {seq_cfg.poll_attempts} x {seq_cfg.poll_interval}s")
