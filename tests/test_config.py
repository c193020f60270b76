"""
Tests for configuration management.
"""

import pytest
import yaml

from config import (
    ClusterConfig,
    ConfigurationError,
    env_overrides,
    get_cluster_config,
    load_config_file,
)


class TestClusterConfig:
    """Test ClusterConfig dataclass."""

    def test_default_initialization(self):
        """Test defaults."""
        config = ClusterConfig()

        assert config.cluster_name == "eks-cluster"
        assert config.region == "us-west-2"
        assert config.desired_nodes == 2
        assert config.poll_interval == 30
        assert config.poll_timeout == 3600

    def test_stack_name_from_pattern(self):
        """Test the stack name is derived from the cluster name."""
        config = ClusterConfig(cluster_name="demo")

        assert config.get_stack_name() == "demo-stack"

    def test_explicit_stack_name(self):
        """Test an explicit stack name wins over the pattern."""
        config = ClusterConfig(cluster_name="demo", stack_name="custom")

        assert config.get_stack_name() == "custom"

    def test_to_parameters(self):
        """Test CloudFormation parameters, including extras."""
        config = ClusterConfig(
            cluster_name="demo",
            node_instance_type="m5.large",
            desired_nodes=3,
            extra_parameters={"KubernetesVersion": 1.29},
        )

        assert config.to_parameters() == {
            "ClusterName": "demo",
            "NodeInstanceType": "m5.large",
            "DesiredNodes": "3",
            "KubernetesVersion": "1.29",
        }

    def test_to_tags(self):
        """Test default and custom tags."""
        config = ClusterConfig(cluster_name="demo", tags={"Team": "platform"})

        tags = config.to_tags()

        assert tags["Cluster"] == "demo"
        assert tags["Team"] == "platform"

    def test_from_dict_rejects_unknown_keys(self):
        """Test schema validation catches typos."""
        with pytest.raises(ConfigurationError):
            ClusterConfig.from_dict({"clustr_name": "demo"})

    def test_from_dict_rejects_bad_types(self):
        """Test schema validation catches wrong types."""
        with pytest.raises(ConfigurationError) as exc_info:
            ClusterConfig.from_dict({"desired_nodes": 0})

        assert "Invalid configuration" in str(exc_info.value)

    def test_with_overrides_skips_none(self):
        """Test None overrides keep the existing values."""
        config = ClusterConfig(region="eu-west-1")

        updated = config.with_overrides(region=None, cluster_name="other")

        assert updated.region == "eu-west-1"
        assert updated.cluster_name == "other"
        assert config.cluster_name == "eks-cluster"

    def test_with_overrides_copies_mappings(self):
        """Test the copy does not share parameter and tag dicts with the original."""
        config = ClusterConfig(
            extra_parameters={"KubernetesVersion": "1.29"}, tags={"Team": "platform"}
        )

        updated = config.with_overrides(cluster_name="other")
        updated.extra_parameters["Extra"] = "1"
        updated.tags["Owner"] = "ops"

        assert config.extra_parameters == {"KubernetesVersion": "1.29"}
        assert config.tags == {"Team": "platform"}


class TestConfigLoading:
    """Test loading config from files and environment."""

    def test_load_config_file(self, tmp_path):
        """Test YAML loading."""
        path = tmp_path / "eks.yaml"
        path.write_text(yaml.dump({"cluster_name": "from-file", "desired_nodes": 4}))

        assert load_config_file(path) == {"cluster_name": "from-file", "desired_nodes": 4}

    def test_load_missing_file(self, tmp_path):
        """Test a missing file raises ConfigurationError."""
        with pytest.raises(ConfigurationError):
            load_config_file(tmp_path / "missing.yaml")

    def test_load_invalid_yaml(self, tmp_path):
        """Test unparsable YAML raises ConfigurationError."""
        path = tmp_path / "bad.yaml"
        path.write_text("cluster_name: [unclosed\n")

        with pytest.raises(ConfigurationError):
            load_config_file(path)

    def test_load_non_mapping(self, tmp_path):
        """Test a YAML list is rejected."""
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ConfigurationError):
            load_config_file(path)

    def test_env_overrides(self):
        """Test environment variables map to config fields."""
        values = env_overrides(
            {"EKS_CLUSTER_NAME": "env-cluster", "AWS_REGION": "ap-south-1", "HOME": "/root"}
        )

        assert values == {"cluster_name": "env-cluster", "region": "ap-south-1"}

    def test_precedence(self, tmp_path):
        """Test file < environment < explicit overrides."""
        path = tmp_path / "eks.yaml"
        path.write_text(
            yaml.dump({"cluster_name": "from-file", "region": "us-east-1", "desired_nodes": 5})
        )

        config = get_cluster_config(
            path,
            environ={"AWS_REGION": "eu-central-1"},
            cluster_name="from-cli",
            desired_nodes=None,
        )

        assert config.cluster_name == "from-cli"
        assert config.region == "eu-central-1"
        assert config.desired_nodes == 5

    def test_default_file_in_cwd(self, tmp_path, monkeypatch):
        """Test eks-stack.yaml in the working directory is picked up."""
        (tmp_path / "eks-stack.yaml").write_text(yaml.dump({"cluster_name": "cwd"}))
        monkeypatch.chdir(tmp_path)

        config = get_cluster_config(environ={})

        assert config.cluster_name == "cwd"

    def test_no_file(self, tmp_path, monkeypatch):
        """Test defaults apply when no file exists."""
        monkeypatch.chdir(tmp_path)

        config = get_cluster_config(environ={})

        assert config == ClusterConfig()
