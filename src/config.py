"""
Configuration management for EKS stack utilities.

Handles cluster and stack settings loaded from defaults, an optional YAML
file, and environment variables.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from jsonschema import ValidationError, validate

DEFAULT_CONFIG_FILE = "eks-stack.yaml"

CONFIG_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "cluster_name": {"type": "string", "minLength": 1},
        "region": {"type": "string", "minLength": 1},
        "stack_name": {"type": "string", "minLength": 1},
        "stack_name_pattern": {"type": "string", "minLength": 1},
        "node_instance_type": {"type": "string", "minLength": 1},
        "desired_nodes": {"type": "integer", "minimum": 1},
        "template": {"type": "string", "minLength": 1},
        "poll_interval": {"type": "number", "minimum": 0},
        "poll_timeout": {"type": "number", "minimum": 0},
        "profile": {"type": ["string", "null"]},
        "kubeconfig": {"type": ["string", "null"]},
        "extra_parameters": {
            "type": "object",
            "additionalProperties": {"type": ["string", "number", "boolean"]},
        },
        "tags": {
            "type": "object",
            "additionalProperties": {"type": "string"},
        },
    },
}

# Environment variable -> config field
ENV_OVERRIDES = {
    "EKS_CLUSTER_NAME": "cluster_name",
    "AWS_DEFAULT_REGION": "region",
    "AWS_REGION": "region",
    "EKS_STACK_NAME": "stack_name",
    "AWS_PROFILE": "profile",
}


@dataclass
class ConfigurationError(Exception):
    """Raised when configuration is invalid or cannot be loaded."""

    message: str
    details: Optional[str] = None

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


@dataclass
class ClusterConfig:
    """Configuration for a cluster and the stack that provisions it."""

    cluster_name: str = "eks-cluster"
    region: str = "us-west-2"
    stack_name: Optional[str] = None
    stack_name_pattern: str = "{cluster_name}-stack"

    # Node group
    node_instance_type: str = "t3.medium"
    desired_nodes: int = 2

    # Template path or URL
    template: str = "eks-cluster.yaml"

    # Polling (seconds)
    poll_interval: float = 30
    poll_timeout: float = 3600

    # Local access
    profile: Optional[str] = None
    kubeconfig: Optional[str] = None

    extra_parameters: Dict[str, Any] = field(default_factory=dict)
    tags: Dict[str, str] = field(default_factory=dict)

    def get_stack_name(self) -> str:
        """Get the CloudFormation stack name for the cluster."""
        if self.stack_name:
            return self.stack_name
        return self.stack_name_pattern.format(cluster_name=self.cluster_name)

    def to_parameters(self) -> Dict[str, str]:
        """Map the config to CloudFormation template parameters."""
        parameters = {
            "ClusterName": self.cluster_name,
            "NodeInstanceType": self.node_instance_type,
            "DesiredNodes": str(self.desired_nodes),
        }
        for key, value in self.extra_parameters.items():
            parameters[key] = str(value)
        return parameters

    def to_tags(self) -> Dict[str, str]:
        """Tags applied to the stack."""
        return {"Cluster": self.cluster_name, "ManagedBy": "eks-stack-utils", **self.tags}

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        return {k: v for k, v in self.__dict__.items() if not k.startswith("_")}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ClusterConfig":
        """Create config from dictionary, validating it first."""
        try:
            validate(data, CONFIG_SCHEMA)
        except ValidationError as e:
            raise ConfigurationError("Invalid configuration", e.message)
        return cls(**data)

    def with_overrides(self, **overrides: Any) -> "ClusterConfig":
        """Return a copy with every non-None override applied."""
        data = self.to_dict()
        data["extra_parameters"] = dict(self.extra_parameters)
        data["tags"] = dict(self.tags)
        data.update({k: v for k, v in overrides.items() if v is not None})
        return ClusterConfig(**data)


def load_config_file(path: Union[str, Path]) -> Dict[str, Any]:
    """Load raw configuration values from a YAML file."""
    config_path = Path(path)
    if not config_path.exists():
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Failed to parse {config_path}", str(e))

    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration in {config_path} must be a mapping")
    return data


def env_overrides(environ: Optional[Dict[str, str]] = None) -> Dict[str, str]:
    """Collect config values from environment variables."""
    environ = os.environ if environ is None else environ
    values: Dict[str, str] = {}
    for variable, key in ENV_OVERRIDES.items():
        if environ.get(variable):
            values[key] = environ[variable]
    return values


def get_cluster_config(
    config_file: Optional[Union[str, Path]] = None,
    environ: Optional[Dict[str, str]] = None,
    **overrides: Any,
) -> ClusterConfig:
    """
    Build the effective cluster configuration.

    Precedence, lowest first: defaults, YAML file, environment, overrides.
    The default file is only read when it exists in the working directory.
    """
    data: Dict[str, Any] = {}

    if config_file:
        data.update(load_config_file(config_file))
    elif Path(DEFAULT_CONFIG_FILE).exists():
        data.update(load_config_file(DEFAULT_CONFIG_FILE))

    data.update(env_overrides(environ))

    config = ClusterConfig.from_dict(data)
    return config.with_overrides(**overrides)
