"""
Deployment settings and the configuration sources they are read from.

Settings are read once, at the start of a run, into an immutable
:class:`DeploymentSettings` that is passed to every later stage.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Mapping

import pulumi
from pydantic import BaseModel, Field

from openclaw_vps.errors import MissingConfigurationError

logger = logging.getLogger(__name__)

CONFIG_NAMESPACE = "openclaw-vps"
DEFAULT_INSTANCE_TYPE = "t3.medium"


class DeploymentSettings(BaseModel):
    """
    Resolved configuration for one deployment run.

    Secrets are ``pulumi.Output`` values marked secret; they are only ever
    unwrapped inside ``Output.apply`` and are excluded from ``repr``.

    Example:
        settings = load_settings(PulumiConfigSource())
        settings.instance_type  # "t3.medium" unless configured
    """

    instance_type: str = Field(
        default=DEFAULT_INSTANCE_TYPE, description="EC2 instance type"
    )
    tailscale_auth_key: pulumi.Output = Field(
        repr=False, description="Tailscale auth key (secret)"
    )
    anthropic_api_key: pulumi.Output = Field(
        repr=False, description="Anthropic API key (secret)"
    )
    snapshot_id: str | None = Field(
        default=None, description="EBS snapshot to restore the data volume from"
    )
    availability_zone: str | None = Field(
        default=None, description="Preferred availability zone"
    )

    class Config:
        arbitrary_types_allowed = True
        frozen = True

    def describe(self) -> dict[str, Any]:
        """Non-secret settings, safe to log or print."""
        return {
            "instanceType": self.instance_type,
            "snapshotId": self.snapshot_id,
            "availabilityZone": self.availability_zone,
        }


class ConfigSource(ABC):
    """A store of named configuration values."""

    namespace: str = CONFIG_NAMESPACE

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Get a plain value, or None if unset."""
        pass

    @abstractmethod
    def get_secret(self, key: str) -> pulumi.Output | None:
        """Get a value wrapped as a secret output, or None if unset."""
        pass


class PulumiConfigSource(ConfigSource):
    """
    Reads the stack configuration (``pulumi config set ...``).

    Empty values count as unset, as they do for :class:`MappingConfigSource`.
    """

    def __init__(self, config: pulumi.Config | None = None, namespace: str = CONFIG_NAMESPACE):
        self.namespace = namespace
        self.config = config if config is not None else pulumi.Config(namespace)

    def get(self, key: str) -> str | None:
        return self.config.get(key) or None

    def get_secret(self, key: str) -> pulumi.Output | None:
        # Config.get_secret wraps "" as a secret, so read the raw value once
        # and wrap it here.
        value = self.config.get(key)
        if not value:
            return None
        return pulumi.Output.secret(value)


class MappingConfigSource(ConfigSource):
    """
    Reads configuration from a plain mapping.

    Used for offline rendering and tests. Secret lookups wrap the value in
    ``pulumi.Output.secret``; empty strings count as unset.
    """

    def __init__(self, values: Mapping[str, str], namespace: str = CONFIG_NAMESPACE):
        self.namespace = namespace
        self._values = dict(values)

    def get(self, key: str) -> str | None:
        return self._values.get(key) or None

    def get_secret(self, key: str) -> pulumi.Output | None:
        value = self._values.get(key)
        if not value:
            return None
        return pulumi.Output.secret(value)

    def __repr__(self):
        return f"MappingConfigSource(keys={sorted(self._values)})"


def _require_secret(source: ConfigSource, key: str) -> pulumi.Output:
    value = source.get_secret(key)
    if value is None:
        raise MissingConfigurationError(key, source.namespace, secret=True)
    return value


def load_settings(source: ConfigSource) -> DeploymentSettings:
    """
    Read every recognized key from *source* exactly once.

    Recognized keys: ``instanceType`` (default ``t3.medium``),
    ``tailscaleAuthKey`` (required secret), ``anthropicApiKey`` (required
    secret), ``snapshotId`` and ``availabilityZone`` (optional).

    Raises:
        MissingConfigurationError: If a required secret is not set
    """
    tailscale_auth_key = _require_secret(source, "tailscaleAuthKey")
    anthropic_api_key = _require_secret(source, "anthropicApiKey")

    settings = DeploymentSettings(
        instance_type=source.get("instanceType") or DEFAULT_INSTANCE_TYPE,
        tailscale_auth_key=tailscale_auth_key,
        anthropic_api_key=anthropic_api_key,
        snapshot_id=source.get("snapshotId") or None,
        availability_zone=source.get("availabilityZone") or None,
    )
    logger.info("Loaded settings: %s", settings.describe())
    return settings
