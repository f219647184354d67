"""Tests for configuration, plan files, and the run model."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from deploy_sequencer.config import (
    AksConfig,
    ClusterConfig,
    SequenceConfig,
    build_steps,
    load_manifest_plan,
    resolve_config,
)
from deploy_sequencer.constants import DEFAULT_MANIFESTS


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for var in ("DEPLOY_NAMESPACE", "DEPLOY_MANIFESTS", "DEPLOY_MANIFEST_DIR",
                "DEPLOY_POLL_ATTEMPTS", "DEPLOY_POLL_INTERVAL", "DEPLOY_AKS_NODE_COUNT"):
        monkeypatch.delenv(var, raising=False)


class TestSettings:

    def test_defaults(self):
        cluster_cfg, seq_cfg = resolve_config()

        assert cluster_cfg.namespace == "moodle"
        assert seq_cfg.manifests == DEFAULT_MANIFESTS
        assert seq_cfg.poll_attempts == 30
        assert seq_cfg.poll_interval == 10

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("DEPLOY_NAMESPACE", "lms")
        monkeypatch.setenv("DEPLOY_MANIFESTS", '["a.yaml", "b.yaml"]')
        monkeypatch.setenv("DEPLOY_AKS_NODE_COUNT", "5")

        assert ClusterConfig().namespace == "lms"
        assert SequenceConfig().manifests == ["a.yaml", "b.yaml"]
        assert AksConfig().node_count == 5

    def test_cli_override_beats_env(self, monkeypatch):
        monkeypatch.setenv("DEPLOY_NAMESPACE", "lms")

        cluster_cfg, _ = resolve_config(namespace="other")

        assert cluster_cfg.namespace == "other"

    def test_settings_are_frozen(self):
        cfg = ClusterConfig()

        with pytest.raises(ValidationError):
            cfg.namespace = "changed"

    def test_invalid_namespace_rejected(self):
        with pytest.raises(ValueError, match="Invalid configuration"):
            resolve_config(namespace="Not_Valid")

    def test_invalid_poll_attempts_rejected(self):
        with pytest.raises(ValueError):
            resolve_config(poll_attempts=0)


class TestPlanFile:

    def test_load_plan(self, tmp_path):
        plan_file = tmp_path / "plan.yaml"
        plan_file.write_text(
            "namespace: lms\n"
            "manifests:\n"
            "  - 0_secret.yaml\n"
            "  - file: 1_pvc.yaml\n"
        )

        plan = load_manifest_plan(plan_file)

        assert plan.namespace == "lms"
        assert plan.manifests == ["0_secret.yaml", "1_pvc.yaml"]

    def test_plan_resolves_relative_to_its_directory(self, tmp_path):
        plan_file = tmp_path / "plan.yaml"
        plan_file.write_text("manifests: [a.yaml, b.yaml]\n")

        cluster_cfg, seq_cfg = resolve_config(plan_file=plan_file, namespace="cli-ns")

        assert cluster_cfg.namespace == "cli-ns"
        assert seq_cfg.manifests == ["a.yaml", "b.yaml"]
        assert seq_cfg.manifest_dir == tmp_path

    def test_missing_plan(self, tmp_path):
        with pytest.raises(ValueError, match="Cannot read"):
            load_manifest_plan(tmp_path / "absent.yaml")

    def test_empty_manifest_list_rejected(self, tmp_path):
        plan_file = tmp_path / "plan.yaml"
        plan_file.write_text("manifests: []\n")

        with pytest.raises(ValueError, match="Invalid plan"):
            load_manifest_plan(plan_file)

    def test_bad_yaml_rejected(self, tmp_path):
        plan_file = tmp_path / "plan.yaml"
        plan_file.write_text("manifests: [unclosed\n")

        with pytest.raises(ValueError, match="Invalid YAML"):
            load_manifest_plan(plan_file)


class TestBuildSteps:

    def test_names_and_order(self, tmp_path):
        steps = build_steps(["0_secret.yaml", "1_moodle_pvc.yaml"], tmp_path)

        assert [(s.name, s.order) for s in steps] == [("0_secret", 0), ("1_moodle_pvc", 1)]
        assert steps[0].path == tmp_path / "0_secret.yaml"

    def test_absolute_paths_kept(self, tmp_path):
        absolute = tmp_path / "elsewhere" / "x.yaml"

        steps = build_steps([str(absolute)], Path("/ignored"))

        assert steps[0].path == absolute

    def test_present_reflects_file(self, tmp_path):
        (tmp_path / "a.yaml").write_text("kind: Secret\n")

        steps = build_steps(["a.yaml", "b.yaml"], tmp_path)

        assert [s.present for s in steps] == [True, False]

    def test_duplicate_names_rejected(self, tmp_path):
        with pytest.raises(ValueError, match="Duplicate"):
            build_steps(["a.yaml", "sub/a.yaml"], tmp_path)
