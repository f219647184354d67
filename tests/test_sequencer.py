"""Tests for the ordered delete/apply sequencer."""

from __future__ import annotations

import pytest

from conftest import STACK, FakeClient
from deploy_sequencer.config import ManifestStep, build_steps
from deploy_sequencer.errors import ApplyError, DeleteError
from deploy_sequencer.sequencer import (
    Action,
    DeploymentSequencer,
    Outcome,
    SequencePolicy,
)


class TestOrdering:
    """Apply runs in step order, delete in exactly the reverse."""

    def test_apply_order_matches_steps(self, fake_client, stack_steps, context):
        sequencer = DeploymentSequencer(fake_client, stack_steps, context)

        sequencer.apply()

        assert fake_client.actions("apply") == STACK

    def test_delete_order_is_reverse_of_apply(self, fake_client, stack_steps, context):
        sequencer = DeploymentSequencer(fake_client, stack_steps, context)

        sequencer.teardown()

        assert fake_client.actions("delete") == list(reversed(STACK))
        assert sequencer.delete_order == list(reversed(sequencer.apply_order))

    def test_steps_sorted_by_order_not_input_position(self, fake_client, stack_steps, context):
        shuffled = [stack_steps[3], stack_steps[0], stack_steps[4], stack_steps[2], stack_steps[1]]

        sequencer = DeploymentSequencer(fake_client, shuffled, context)

        assert [s.name for s in sequencer.apply_order] == ["secret", "pvc", "db", "app", "ingress"]

    def test_run_deletes_everything_before_applying(self, fake_client, stack_steps, context):
        sequencer = DeploymentSequencer(fake_client, stack_steps, context)

        report = sequencer.run()

        kinds = [call[0] for call in fake_client.calls]
        assert kinds == ["delete"] * 5 + ["apply"] * 5
        assert report.applied == ["secret", "pvc", "db", "app", "ingress"]
        assert report.ok

    def test_n_manifests_give_n_deletes_and_n_applies(self, fake_client, stack_steps, context):
        DeploymentSequencer(fake_client, stack_steps, context).run()

        assert len(fake_client.actions("delete")) == len(STACK)
        assert len(fake_client.actions("apply")) == len(STACK)

    def test_duplicate_step_names_rejected(self, fake_client, manifest_dir, context):
        steps = [
            ManifestStep(name="db", order=0, path=manifest_dir / "db.yaml"),
            ManifestStep(name="db", order=1, path=manifest_dir / "app.yaml"),
        ]

        with pytest.raises(ValueError, match="Duplicate"):
            DeploymentSequencer(fake_client, steps, context)


class TestMissingManifests:
    """Steps whose file is missing locally are skipped in both phases."""

    def test_missing_manifest_skipped_without_abort(self, fake_client, manifest_dir, context):
        (manifest_dir / "pvc.yaml").unlink()
        steps = build_steps(STACK, manifest_dir)
        sequencer = DeploymentSequencer(fake_client, steps, context)

        report = sequencer.run()

        assert "pvc.yaml" not in fake_client.actions("delete")
        assert "pvc.yaml" not in fake_client.actions("apply")
        assert fake_client.actions("apply") == ["secret.yaml", "db.yaml", "app.yaml", "ingress.yaml"]
        assert report.skipped == ["pvc"]
        assert report.ok

    def test_all_missing_makes_no_calls(self, fake_client, tmp_path, context):
        steps = build_steps(STACK, tmp_path)

        report = DeploymentSequencer(fake_client, steps, context).run()

        assert fake_client.calls == []
        assert len(report.results) == 10
        assert all(r.outcome == Outcome.SKIPPED for r in report.results)
        assert report.skipped == ["ingress", "app", "db", "pvc", "secret"]

    def test_skipped_follows_execution_order(self, fake_client, manifest_dir, context):
        (manifest_dir / "secret.yaml").unlink()
        (manifest_dir / "ingress.yaml").unlink()
        sequencer = DeploymentSequencer(fake_client, build_steps(STACK, manifest_dir), context)

        report = sequencer.apply()

        assert report.skipped == ["secret", "ingress"]


class TestDeletePolicy:
    """Not-found is success; other delete failures surface per policy."""

    def test_absent_resources_are_not_errors(self, fake_client, stack_steps, context):
        report = DeploymentSequencer(fake_client, stack_steps, context).teardown()

        assert report.ok
        assert report.deleted == []
        assert report.names(Action.DELETE, Outcome.ABSENT) == ["ingress", "app", "db", "pvc", "secret"]

    def test_previously_applied_resources_are_deleted(self, fake_client, stack_steps, context):
        sequencer = DeploymentSequencer(fake_client, stack_steps, context)
        sequencer.apply()

        report = sequencer.teardown()

        assert report.deleted == ["ingress", "app", "db", "pvc", "secret"]

    def test_delete_failure_recorded_and_teardown_continues(self, stack_steps, context):
        client = FakeClient(delete_failures={"db.yaml"})
        sequencer = DeploymentSequencer(client, stack_steps, context)

        report = sequencer.run()

        assert client.actions("delete") == list(reversed(STACK))
        assert client.actions("apply") == STACK
        assert [f.step.name for f in report.failures] == ["db"]
        assert "Forbidden" in report.failures[0].detail
        assert not report.ok

    def test_delete_failure_fail_fast_stops_before_apply(self, stack_steps, context):
        client = FakeClient(delete_failures={"app.yaml"})
        sequencer = DeploymentSequencer(client, stack_steps, context, SequencePolicy(fail_fast_delete=True))

        with pytest.raises(DeleteError) as exc_info:
            sequencer.run()

        assert exc_info.value.step_name == "app"
        assert client.actions("delete") == ["ingress.yaml", "app.yaml"]
        assert client.actions("apply") == []
        assert exc_info.value.report.deleted == []


class TestApplyPolicy:
    """Apply aborts on the first failure unless told to keep going."""

    def test_apply_failure_aborts_remaining(self, stack_steps, context):
        client = FakeClient(apply_failures={"db.yaml"})
        sequencer = DeploymentSequencer(client, stack_steps, context)

        with pytest.raises(ApplyError) as exc_info:
            sequencer.apply()

        assert client.actions("apply") == ["secret.yaml", "pvc.yaml", "db.yaml"]
        assert exc_info.value.step_name == "db"
        assert exc_info.value.report.applied == ["secret", "pvc"]

    def test_keep_going_applies_remaining(self, stack_steps, context):
        client = FakeClient(apply_failures={"db.yaml"})
        sequencer = DeploymentSequencer(client, stack_steps, context, SequencePolicy(fail_fast_apply=False))

        report = sequencer.apply()

        assert client.actions("apply") == STACK
        assert report.applied == ["secret", "pvc", "app", "ingress"]
        assert [f.step.name for f in report.failures] == ["db"]
