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

"""Cluster client interface and its kubectl-backed implementation."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Protocol

from deploy_sequencer.constants import KUBECTL_TIMEOUT
from deploy_sequencer.errors import ApplyError, ClientError, DeleteError
from deploy_sequencer.utils import first_line, only_not_found, run_kubectl


class ClusterClient(Protocol):
    """Operations the sequencer consumes from the cluster control plane."""

    def resource_exists(self, kind: str, name: str, namespace: str | None = None) -> bool: ...

    def create_resource(self, kind: str, name: str, namespace: str | None = None) -> None: ...

    def delete_resource(
        self,
        kind: str | None = None,
        name: str | None = None,
        *,
        path: Path | None = None,
        namespace: str | None = None,
    ) -> bool: ...

    def apply_manifest(self, path: Path | str, namespace: str | None = None) -> None: ...

    def get_status(self, kind: str, name: str, namespace: str | None = None) -> dict | None: ...

    def wait_for_condition(
        self,
        kind: str,
        selector: str,
        condition: str,
        timeout: int,
        namespace: str | None = None,
    ) -> bool: ...

    def use_context(self, context: str, namespace: str) -> None: ...

    def describe_namespace(self, namespace: str) -> str: ...


class KubectlClient:
    """ClusterClient that shells out to kubectl.

    Args:
        context: kubectl context passed as ``--context``, or None for the current one.
        timeout: Per-command subprocess timeout in seconds.
    """

    def __init__(self, context: str | None = None, timeout: int = KUBECTL_TIMEOUT) -> None:
        self.context = context
        self.timeout = timeout

    def _kubectl(
        self,
        args: list[str],
        namespace: str | None = None,
        timeout: int | None = None,
    ) -> tuple[bool, str, str]:
        full_args = list(args)
        if namespace:
            full_args += ["-n", namespace]
        if self.context:
            full_args = ["--context", self.context, *full_args]
        return run_kubectl(full_args, timeout=timeout or self.timeout)

    def resource_exists(self, kind: str, name: str, namespace: str | None = None) -> bool:
        """Return True if ``kind/name`` exists.

        Raises:
            ClientError: If kubectl fails for a reason other than NotFound.
        """
        ok, _, stderr = self._kubectl(["get", kind, name, "-o", "name"], namespace)
        if ok:
            return True
        if only_not_found(stderr):
            return False
        raise ClientError(f"Failed to query {kind}/{name}: {first_line(stderr)}")

    def create_resource(self, kind: str, name: str, namespace: str | None = None) -> None:
        """Create ``kind/name``; an AlreadyExists response counts as success.

        Raises:
            ClientError: If creation fails.
        """
        ok, _, stderr = self._kubectl(["create", kind, name], namespace)
        if not ok and "AlreadyExists" not in stderr:
            raise ClientError(f"Failed to create {kind} {name}: {first_line(stderr)}")

    def delete_resource(
        self,
        kind: str | None = None,
        name: str | None = None,
        *,
        path: Path | None = None,
        namespace: str | None = None,
    ) -> bool:
        """Delete a resource by kind/name or every object in a manifest file.

        Missing objects are not an error. Only a failure whose every error line
        is NotFound is treated that way; anything else is surfaced.

        Returns:
            True if something was deleted, False if nothing existed.

        Raises:
            DeleteError: If kubectl fails for a reason other than NotFound.
            ValueError: If neither a path nor kind and name are given.
        """
        if path is not None:
            args = ["delete", "-f", str(path)]
            target = str(path)
        elif kind and name:
            args = ["delete", kind, name]
            target = f"{kind}/{name}"
        else:
            raise ValueError("delete_resource needs a path or a kind and name")

        ok, stdout, stderr = self._kubectl(args, namespace)
        if ok:
            return True
        if only_not_found(stderr):
            # partial success: some objects deleted, the rest already gone
            return "deleted" in stdout
        raise DeleteError(f"Failed to delete {target}: {first_line(stderr)}")

    def apply_manifest(self, path: Path | str, namespace: str | None = None) -> None:
        """Apply a manifest file or URL.

        Raises:
            ApplyError: If kubectl apply fails.
        """
        ok, _, stderr = self._kubectl(["apply", "-f", str(path)], namespace)
        if not ok:
            raise ApplyError(f"Failed to apply {path}: {first_line(stderr)}")

    def get_status(self, kind: str, name: str, namespace: str | None = None) -> dict | None:
        """Return the ``.status`` of ``kind/name``, or None if it does not exist.

        Raises:
            ClientError: If kubectl fails for a reason other than NotFound or
                returns unparsable output.
        """
        ok, stdout, stderr = self._kubectl(["get", kind, name, "-o", "json"], namespace)
        if not ok:
            if only_not_found(stderr):
                return None
            raise ClientError(f"Failed to get {kind}/{name}: {first_line(stderr)}")
        try:
            return json.loads(stdout).get("status") or {}
        except (json.JSONDecodeError, AttributeError) as err:
            raise ClientError(f"Unparsable status for {kind}/{name}: {err}") from err

    def wait_for_condition(
        self,
        kind: str,
        selector: str,
        condition: str,
        timeout: int,
        namespace: str | None = None,
    ) -> bool:
        """Block on ``kubectl wait`` until *condition* holds or *timeout* seconds pass.

        Returns:
            True if the condition was met, False on timeout or no matching objects.
        """
        ok, _, _ = self._kubectl(
            ["wait", f"--for=condition={condition}", kind,
             "--selector", selector, f"--timeout={timeout}s"],
            namespace,
            timeout=timeout + 10,
        )
        return ok

    def use_context(self, context: str, namespace: str) -> None:
        """Switch kubectl to *context* and make *namespace* its default.

        Raises:
            ClientError: If either kubectl config call fails.
        """
        ok, _, stderr = run_kubectl(["config", "use-context", context], timeout=self.timeout)
        if not ok:
            raise ClientError(f"Failed to switch to context {context}: {first_line(stderr)}")
        ok, _, stderr = run_kubectl(
            ["config", "set-context", "--current", f"--namespace={namespace}"],
            timeout=self.timeout,
        )
        if not ok:
            raise ClientError(f"Failed to set namespace {namespace}: {first_line(stderr)}")

    def describe_namespace(self, namespace: str) -> str:
        """Return ``kubectl get all`` output for *namespace*.

        Raises:
            ClientError: If kubectl fails.
        """
        ok, stdout, stderr = self._kubectl(["get", "all"], namespace)
        if not ok:
            raise ClientError(f"Failed to list resources in {namespace}: {first_line(stderr)}")
        return stdout
