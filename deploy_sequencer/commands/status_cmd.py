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

"""Status subcommands (ingress-address, resources)."""

from __future__ import annotations

import typer

from deploy_sequencer.client import KubectlClient
from deploy_sequencer.commands.options import (
    NamespaceOption,
    PollAttemptsOption,
    PollIntervalOption,
    load_config,
)
from deploy_sequencer.orchestrator import await_ingress_address, show_status
from deploy_sequencer.targets import TargetKind, make_target
from deploy_sequencer.utils import require_command

app = typer.Typer(help="Inspect the deployed stack.")


@app.command("ingress-address")
def ingress_address(
    target: TargetKind = typer.Option(TargetKind.MINIKUBE, "--target", help="Cluster target"),
    namespace: str | None = NamespaceOption,
    poll_attempts: int | None = PollAttemptsOption,
    poll_interval: float | None = PollIntervalOption,
) -> None:
    """Wait for the ingress external address and print it."""
    require_command("kubectl")
    cluster_cfg, seq_cfg = load_config(
        namespace=namespace, poll_attempts=poll_attempts, poll_interval=poll_interval,
    )
    client = KubectlClient(context=cluster_cfg.kube_context)
    result = await_ingress_address(client, make_target(target, cluster_cfg), seq_cfg)
    if result.ready:
        typer.echo(result.value)


@app.command()
def resources(
    namespace: str | None = NamespaceOption,
) -> None:
    """Show all resources in the target namespace."""
    require_command("kubectl")
    cluster_cfg, _ = load_config(namespace=namespace)
    show_status(KubectlClient(context=cluster_cfg.kube_context), cluster_cfg.namespace)
