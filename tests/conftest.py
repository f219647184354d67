"""Shared pytest fixtures for deploy_sequencer tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from deploy_sequencer.config import ClusterContext, build_steps
from deploy_sequencer.errors import ApplyError, ClientError, DeleteError

STACK = ["secret.yaml", "pvc.yaml", "db.yaml", "app.yaml", "ingress.yaml"]


class FakeClient:
    """In-memory ClusterClient that records every call."""

    def __init__(self, existing=None, apply_failures=(), delete_failures=(),
                 statuses=None, wait_result=True):
        self.calls: list[tuple] = []
        self.existing: set[tuple] = set(existing or ())
        self.deployed: set[str] = set()
        self.apply_failures = set(apply_failures)
        self.delete_failures = set(delete_failures)
        self.statuses = list(statuses or [])
        self.wait_result = wait_result

    def resource_exists(self, kind, name, namespace=None):
        self.calls.append(("exists", kind, name))
        return (kind, name) in self.existing

    def create_resource(self, kind, name, namespace=None):
        self.calls.append(("create", kind, name))
        self.existing.add((kind, name))

    def delete_resource(self, kind=None, name=None, *, path=None, namespace=None):
        self.calls.append(("delete", path.name))
        if path.name in self.delete_failures:
            raise DeleteError(f"Failed to delete {path}: Forbidden")
        if path.name in self.deployed:
            self.deployed.discard(path.name)
            return True
        return False

    def apply_manifest(self, path, namespace=None):
        name = Path(path).name
        self.calls.append(("apply", name))
        if name in self.apply_failures:
            raise ApplyError(f"Failed to apply {path}: invalid")
        self.deployed.add(name)

    def get_status(self, kind, name, namespace=None):
        self.calls.append(("status", kind, name))
        if not self.statuses:
            return None
        status = self.statuses.pop(0)
        if isinstance(status, Exception):
            raise status
        return status

    def wait_for_condition(self, kind, selector, condition, timeout, namespace=None):
        self.calls.append(("wait", kind, selector, condition))
        return self.wait_result

    def use_context(self, context, namespace):
        self.calls.append(("use_context", context, namespace))

    def describe_namespace(self, namespace):
        self.calls.append(("describe", namespace))
        if namespace == "broken":
            raise ClientError("Failed to list resources in broken")
        return "NAME READY STATUS\npod/app-0 1/1 Running\n"

    def actions(self, kind):
        return [call[1] for call in self.calls if call[0] == kind]


@pytest.fixture
def fake_client():
    return FakeClient()


@pytest.fixture
def manifest_dir(tmp_path):
    """Directory holding the five-step stack, all present."""
    for name in STACK:
        (tmp_path / name).write_text(f"# {name}\n")
    return tmp_path


@pytest.fixture
def stack_steps(manifest_dir):
    return build_steps(STACK, manifest_dir)


@pytest.fixture
def context():
    return ClusterContext(namespace="moodle", cluster="minikube", kube_context="minikube")
