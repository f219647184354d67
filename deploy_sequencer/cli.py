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

"""
cli.py - Unified CLI for resetting and redeploying a manifest stack.

Subcommands:
    create   Create cluster prerequisites (minikube-cluster, aks-cluster, namespace, ingress)
    delete   Delete deployed resources (manifests)
    apply    Apply manifests (manifests)
    setup    Full redeploy workflows (minikube, aks)
    status   Inspect the deployed stack (ingress-address, resources)

Examples:
    # Reset and redeploy on Minikube with the default manifests
    deploy-sequencer setup minikube

    # Same on AKS, with a plan file
    deploy-sequencer setup aks --plan deploy/plan.yaml --node-count 3

    # Delete the stack only
    deploy-sequencer delete manifests --manifest-dir deploy/

For detailed usage information, run: deploy-sequencer --help
"""

from __future__ import annotations

import logging
import sys

import typer

from deploy_sequencer import console
from deploy_sequencer.commands import (
    apply_cmd,
    create_cmd,
    delete_cmd,
    setup_cmd,
    status_cmd,
)

app = typer.Typer(
    help="Reset and redeploy an ordered Kubernetes manifest stack.",
    no_args_is_help=True,
)


@app.callback()
def _main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Initialize logging for all subcommands."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )


app.add_typer(create_cmd.app, name="create")
app.add_typer(delete_cmd.app, name="delete")
app.add_typer(apply_cmd.app, name="apply")
app.add_typer(setup_cmd.app, name="setup")
app.add_typer(status_cmd.app, name="status")


def main() -> None:
    try:
        app()
    except Exception as e:
        console.print(f"[red]\u274c {e}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
