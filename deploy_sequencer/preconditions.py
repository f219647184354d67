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

"""Idempotent create-if-absent checks for cluster prerequisites."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass

import sh

from deploy_sequencer import console, logger
from deploy_sequencer.client import ClusterClient
from deploy_sequencer.constants import (
    INGRESS_NGINX_CLOUD_MANIFEST,
    INGRESS_NGINX_CONTROLLER_SELECTOR,
    INGRESS_NGINX_SERVICE,
    NS_INGRESS_NGINX,
)
from deploy_sequencer.errors import ClientError, PreconditionError, SequencerError


@dataclass(frozen=True)
class Precondition:
    """A named prerequisite with an existence query and a create action.

    Attributes:
        name: Human-readable name used in progress output and errors.
        exists: Returns True if the prerequisite is already in place.
        create: Brings the prerequisite into place.
    """

    name: str
    exists: Callable[[], bool]
    create: Callable[[], None]


def ensure(precondition: Precondition) -> bool:
    """Create *precondition* if it is absent.

    Args:
        precondition: The prerequisite to check.

    Returns:
        True if it was created, False if it already existed.

    Raises:
        PreconditionError: If the existence query or the creation fails.
    """
    try:
        present = precondition.exists()
    except SequencerError as err:
        raise PreconditionError(precondition.name, str(err)) from err

    if present:
        console.print(f"[green]\u2705 {precondition.name} already present[/green]")
        return False

    console.print(f"[yellow]\u2139\ufe0f  {precondition.name} not found, creating...[/yellow]")
    try:
        precondition.create()
    except sh.ErrorReturnCode as err:
        stderr = err.stderr.decode(errors="replace") if err.stderr else ""
        raise PreconditionError(precondition.name, stderr.strip() or str(err)) from err
    except SequencerError as err:
        raise PreconditionError(precondition.name, str(err)) from err
    console.print(f"[green]\u2705 {precondition.name} created[/green]")
    return True


def ensure_all(preconditions: Iterable[Precondition]) -> list[str]:
    """Ensure each precondition in order, stopping at the first failure.

    Returns:
        Names of the preconditions that had to be created.
    """
    created = [p.name for p in preconditions if ensure(p)]
    logger.debug("created preconditions: %s", created)
    return created


# ============================================================================
# Cluster-level preconditions
# ============================================================================

def namespace_precondition(client: ClusterClient, namespace: str) -> Precondition:
    """Precondition for the application namespace."""
    return Precondition(
        name=f"Namespace '{namespace}'",
        exists=lambda: client.resource_exists("namespace", namespace),
        create=lambda: client.create_resource("namespace", namespace),
    )


def ingress_controller_precondition(
    client: ClusterClient,
    timeout: int,
    manifest: str = INGRESS_NGINX_CLOUD_MANIFEST,
) -> Precondition:
    """Precondition for the ingress-nginx controller on a cloud cluster.

    Creation applies the upstream cloud manifest and waits for the controller
    pod to report Ready.

    Args:
        client: Cluster client.
        timeout: Seconds to wait for the controller pod.
        manifest: Manifest path or URL installing the controller.
    """
    def _create() -> None:
        client.apply_manifest(manifest)
        console.print("[yellow]\u2139\ufe0f  Waiting for ingress controller to be ready...[/yellow]")
        if not client.wait_for_condition(
            "pod", INGRESS_NGINX_CONTROLLER_SELECTOR, "Ready", timeout, namespace=NS_INGRESS_NGINX,
        ):
            raise ClientError(f"Ingress controller not ready after {timeout}s")

    return Precondition(
        name="Ingress controller",
        exists=lambda: client.resource_exists("deployment", INGRESS_NGINX_SERVICE, NS_INGRESS_NGINX),
        create=_create,
    )
