"""
Deployment configuration.

Settings are read from Pulumi stack configuration (or a plain mapping)
once per run and passed to every stage as an immutable model.
"""

from openclaw_vps.config.settings import (
    CONFIG_NAMESPACE,
    DEFAULT_INSTANCE_TYPE,
    ConfigSource,
    DeploymentSettings,
    MappingConfigSource,
    PulumiConfigSource,
    load_settings,
)

__all__ = [
    "CONFIG_NAMESPACE",
    "DEFAULT_INSTANCE_TYPE",
    "ConfigSource",
    "DeploymentSettings",
    "MappingConfigSource",
    "PulumiConfigSource",
    "load_settings",
]
