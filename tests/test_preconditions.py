"""Tests for idempotent precondition checks."""

from __future__ import annotations

import pytest
import sh

from conftest import FakeClient
from deploy_sequencer.errors import ClientError, PreconditionError
from deploy_sequencer.preconditions import (
    Precondition,
    ensure,
    ensure_all,
    ingress_controller_precondition,
    namespace_precondition,
)


class TestEnsure:
    """ensure() creates only when absent and is safe to repeat."""

    def test_creates_when_absent(self, fake_client):
        created = ensure(namespace_precondition(fake_client, "moodle"))

        assert created is True
        assert ("namespace", "moodle") in fake_client.existing

    def test_second_run_is_a_no_op(self, fake_client):
        pre = namespace_precondition(fake_client, "moodle")
        ensure(pre)
        state_after_first = set(fake_client.existing)

        created = ensure(pre)

        assert created is False
        assert fake_client.existing == state_after_first
        assert fake_client.actions("create") == ["namespace"]

    def test_present_resource_not_created(self):
        client = FakeClient(existing={("namespace", "moodle")})

        assert ensure(namespace_precondition(client, "moodle")) is False
        assert client.actions("create") == []

    def test_query_failure_is_fatal(self):
        def _boom():
            raise ClientError("connection refused")

        pre = Precondition(name="thing", exists=_boom, create=lambda: None)

        with pytest.raises(PreconditionError, match="thing.*connection refused"):
            ensure(pre)

    def test_create_failure_is_fatal(self):
        def _fail():
            raise sh.ErrorReturnCode_1("az group create", b"", b"AuthorizationFailed")

        pre = Precondition(name="Resource group 'rg'", exists=lambda: False, create=_fail)

        with pytest.raises(PreconditionError, match="AuthorizationFailed"):
            ensure(pre)

    def test_ensure_all_stops_at_first_failure(self):
        order = []

        def _fail():
            raise ClientError("quota exceeded")

        pres = [
            Precondition("a", exists=lambda: order.append("a") or True, create=lambda: None),
            Precondition("b", exists=lambda: order.append("b") or False, create=_fail),
            Precondition("c", exists=lambda: order.append("c") or False, create=lambda: None),
        ]

        with pytest.raises(PreconditionError):
            ensure_all(pres)

        assert order == ["a", "b"]

    def test_ensure_all_returns_created_names(self):
        pres = [
            Precondition("present", exists=lambda: True, create=lambda: None),
            Precondition("absent", exists=lambda: False, create=lambda: None),
        ]

        assert ensure_all(pres) == ["absent"]


class TestIngressController:

    def test_applies_manifest_and_waits(self, fake_client):
        created = ensure(ingress_controller_precondition(fake_client, timeout=60, manifest="ingress.yaml"))

        assert created is True
        assert fake_client.actions("apply") == ["ingress.yaml"]
        assert fake_client.actions("wait") == ["pod"]

    def test_not_ready_is_fatal(self):
        client = FakeClient(wait_result=False)

        with pytest.raises(PreconditionError, match="not ready after 30s"):
            ensure(ingress_controller_precondition(client, timeout=30, manifest="ingress.yaml"))

    def test_existing_controller_untouched(self):
        client = FakeClient(existing={("deployment", "ingress-nginx-controller")})

        assert ensure(ingress_controller_precondition(client, timeout=30)) is False
        assert client.actions("apply") == []
