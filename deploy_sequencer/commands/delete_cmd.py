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

"""Delete subcommands (manifests)."""

from __future__ import annotations

from pathlib import Path

import typer

from deploy_sequencer.commands.options import ManifestDirOption, NamespaceOption, PlanOption, load_config
from deploy_sequencer.orchestrator import run_teardown
from deploy_sequencer.sequencer import SequencePolicy
from deploy_sequencer.utils import require_command

app = typer.Typer(help="Delete deployed resources.")


@app.command()
def manifests(
    namespace: str | None = NamespaceOption,
    manifest_dir: Path | None = ManifestDirOption,
    plan: Path | None = PlanOption,
    fail_fast: bool = typer.Option(
        False, "--fail-fast", help="Stop at the first delete failure other than not-found"),
) -> None:
    """Delete the manifests in reverse order. Absent resources are not errors."""
    require_command("kubectl")
    cluster_cfg, seq_cfg = load_config(namespace=namespace, manifest_dir=manifest_dir, plan=plan)
    report = run_teardown(cluster_cfg, seq_cfg, policy=SequencePolicy(fail_fast_delete=fail_fast))
    if not report.ok:
        raise typer.Exit(code=1)
