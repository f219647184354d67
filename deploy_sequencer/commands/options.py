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

"""Options and config resolution shared by the subcommands."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import typer
from pydantic import ValidationError

from deploy_sequencer.config import AksConfig, ClusterConfig, MinikubeConfig, SequenceConfig, resolve_config
from deploy_sequencer.targets import TargetKind

NamespaceOption = typer.Option(None, "--namespace", "-n", help="Target namespace (overrides DEPLOY_NAMESPACE)")
ManifestDirOption = typer.Option(None, "--manifest-dir", help="Directory holding the manifest files")
PlanOption = typer.Option(None, "--plan", help="YAML plan file with namespace and ordered manifests")
PollAttemptsOption = typer.Option(None, "--poll-attempts", help="Maximum ingress address queries")
PollIntervalOption = typer.Option(None, "--poll-interval", help="Seconds between ingress address queries")


def load_config(
    *,
    namespace: str | None = None,
    manifest_dir: Path | None = None,
    plan: Path | None = None,
    poll_attempts: int | None = None,
    poll_interval: float | None = None,
) -> tuple[ClusterConfig, SequenceConfig]:
    """Resolve config, turning invalid values into a usage error."""
    try:
        return resolve_config(
            namespace=namespace,
            manifest_dir=manifest_dir,
            plan_file=plan,
            poll_attempts=poll_attempts,
            poll_interval=poll_interval,
        )
    except ValueError as err:
        raise typer.BadParameter(str(err)) from err


def load_target_config(kind: TargetKind, **overrides: Any) -> MinikubeConfig | AksConfig:
    """Build Minikube or AKS settings from the given flags, ignoring unset ones.

    Raises:
        typer.BadParameter: If a flag value fails validation.
    """
    values = {key: value for key, value in overrides.items() if value is not None}
    settings_cls = AksConfig if kind == TargetKind.AKS else MinikubeConfig
    try:
        return settings_cls(**values)
    except ValidationError as err:
        raise typer.BadParameter(f"Invalid {kind.value} configuration: {err}") from err
