"""
openclaw-vps: a single spot instance VPS declared with Pulumi.

The deployment is an egress-only security group, a persistent EBS data
volume, an IAM role scoped to managing that volume, a launch template and
an auto-scaling group keeping one spot instance alive. The instance's boot
script is rendered from ``user-data.sh`` with the volume id, the Tailscale
and Anthropic keys (secrets) and the base64 ``docker-compose.yml``.

Core concepts:
- DeploymentSettings: configuration read once per run
- ResourceGraph: ordered declarations; references only point backwards
- Template: ``{{.Name}}`` placeholders rendered from deferred values
- Deployment: the pipeline wiring it all together

Example (``__main__.py`` of a Pulumi project):
    from openclaw_vps import Deployment, PulumiConfigSource, load_settings

    settings = load_settings(PulumiConfigSource())
    Deployment(settings).run().export()
"""

from openclaw_vps.errors import (
    OpenClawError,
    MissingConfigurationError,
    ExternalLookupEmptyError,
    TemplateFileReadError,
    UnresolvedPlaceholderError,
    ResourceDeclarationRejectedError,
    UnusedBindingWarning,
)
from openclaw_vps.config import (
    DeploymentSettings,
    MappingConfigSource,
    PulumiConfigSource,
    load_settings,
)
from openclaw_vps.core import (
    Deployment,
    DeploymentOutputs,
    ResourceGraph,
    ResourceHandle,
    ResourceSpec,
    deploy,
)
from openclaw_vps.render import (
    Template,
    TemplateFiles,
    decode_user_data,
    encode_user_data,
    render,
    render_output,
)

__version__ = "0.1.0"
__all__ = [
    "OpenClawError",
    "MissingConfigurationError",
    "ExternalLookupEmptyError",
    "TemplateFileReadError",
    "UnresolvedPlaceholderError",
    "ResourceDeclarationRejectedError",
    "UnusedBindingWarning",
    "DeploymentSettings",
    "MappingConfigSource",
    "PulumiConfigSource",
    "load_settings",
    "Deployment",
    "DeploymentOutputs",
    "ResourceGraph",
    "ResourceHandle",
    "ResourceSpec",
    "deploy",
    "Template",
    "TemplateFiles",
    "decode_user_data",
    "encode_user_data",
    "render",
    "render_output",
]
