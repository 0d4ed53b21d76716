"""
Deployment: the single-instance VPS as a linear declaration pipeline.

A run looks up external facts, reads the template inputs, declares the
resource graph in dependency order, renders the boot script from deferred
values and exports the stack outputs. Any error aborts the run; outputs
are only exported once every declaration has succeeded.
"""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping

import pulumi

from openclaw_vps.aws.lookups import AwsLookup, ImageQuery, Lookup
from openclaw_vps.aws.resources import AWSResources
from openclaw_vps.config.settings import DeploymentSettings
from openclaw_vps.core.graph import ResourceGraph, ResourceHandle
from openclaw_vps.render.encoding import encode_user_data
from openclaw_vps.render.files import TemplateFiles
from openclaw_vps.render.template import USER_DATA_PLACEHOLDERS, Template

logger = logging.getLogger(__name__)

OUTPUT_NAMES = ("asgName", "volumeId", "securityGroupId", "availabilityZone")


@dataclass(frozen=True)
class DeploymentOutputs:
    """
    Named outputs of a successful run.

    Values are deferred (``pulumi.Output``) except the availability zone,
    which is known from the lookup.
    """

    asg_name: pulumi.Output[str]
    volume_id: pulumi.Output[str]
    security_group_id: pulumi.Output[str]
    availability_zone: str

    def as_dict(self) -> Mapping[str, Any]:
        """Outputs keyed by their exported names (read-only)."""
        return MappingProxyType({
            "asgName": self.asg_name,
            "volumeId": self.volume_id,
            "securityGroupId": self.security_group_id,
            "availabilityZone": self.availability_zone,
        })

    def export(self) -> Mapping[str, Any]:
        """Register every output as a Pulumi stack output."""
        outputs = self.as_dict()
        for name, value in outputs.items():
            pulumi.export(name, value)
        return outputs


@dataclass(frozen=True)
class _Inputs:
    """Everything read before the first declaration."""

    image_id: str
    availability_zone: str
    compose: bytes
    user_data: Template


class Deployment:
    """
    Declares the deployment from resolved settings.

    Example:
        settings = load_settings(PulumiConfigSource())
        outputs = Deployment(settings).run()
        outputs.export()
    """

    def __init__(
        self,
        settings: DeploymentSettings,
        lookup: Lookup | None = None,
        files: TemplateFiles | None = None,
        graph: ResourceGraph | None = None,
        image_query: ImageQuery | None = None,
        prefix: str = "openclaw",
    ):
        """
        Args:
            settings: Configuration resolved at the start of the run
            lookup: Source of the image id and zones (default: AWS invokes)
            files: Template file locations (default: working directory)
            graph: Graph to declare into (default: a new one)
            image_query: Machine image filter (default: Ubuntu 24.04 amd64)
            prefix: Prefix for resource names
        """
        self.settings = settings
        self.lookup = lookup if lookup is not None else AwsLookup()
        self.files = files if files is not None else TemplateFiles()
        self.graph = graph if graph is not None else ResourceGraph()
        self.image_query = image_query if image_query is not None else ImageQuery()
        self.prefix = prefix

    def run(self) -> DeploymentOutputs:
        """
        Declare all resources and return the outputs (not yet exported).

        Raises:
            ExternalLookupEmptyError: If no image or zone matches
            TemplateFileReadError: If a template file cannot be read
            UnresolvedPlaceholderError: If the boot script uses an unknown
                placeholder
            ResourceDeclarationRejectedError: If a declaration is rejected
        """
        inputs = self._prepare()
        return self._declare(inputs)

    def _prepare(self) -> _Inputs:
        """Lookups and file reads. Declares nothing."""
        image_id = self.lookup.machine_image(self.image_query)
        zone = self.lookup.availability_zone(self.settings.availability_zone)

        compose = self.files.compose()
        template = Template.parse(self.files.user_data())
        template.check_bindings(USER_DATA_PLACEHOLDERS)

        return _Inputs(
            image_id=image_id,
            availability_zone=zone,
            compose=compose,
            user_data=template,
        )

    def _declare(self, inputs: _Inputs) -> DeploymentOutputs:
        resources = AWSResources(self.graph, prefix=self.prefix)

        security_group = resources.security_group()
        volume = resources.data_volume(
            inputs.availability_zone,
            snapshot_id=self.settings.snapshot_id,
        )
        role = resources.instance_role()
        resources.volume_policy(role)
        profile = resources.instance_profile(role)

        user_data = self.user_data(inputs.user_data, volume, inputs.compose)
        launch_template = resources.launch_template(
            image_id=inputs.image_id,
            instance_type=self.settings.instance_type,
            user_data=user_data,
            security_group=security_group,
            instance_profile=profile,
            extra_references=(volume,),
        )
        group = resources.scaling_group(launch_template, inputs.availability_zone)

        logger.info(
            "Declared %d resources: %s",
            len(self.graph),
            ", ".join(self.graph.declaration_order()),
        )
        return DeploymentOutputs(
            asg_name=group.get("name"),
            volume_id=volume.id,
            security_group_id=security_group.id,
            availability_zone=inputs.availability_zone,
        )

    def user_data(
        self,
        template: Template,
        volume: ResourceHandle,
        compose: bytes,
    ) -> pulumi.Output[str]:
        """
        Render the boot script and encode it for the launch template.

        The result is secret because the API keys are.
        """
        bindings = {
            "EBSVolumeID": volume.id,
            "TailscaleAuthKey": self.settings.tailscale_auth_key,
            "AnthropicApiKey": self.settings.anthropic_api_key,
            "DockerComposeB64": encode_user_data(compose),
        }
        script = template.render_output(bindings, check=False)
        return script.apply(encode_user_data)


def deploy(
    settings: DeploymentSettings,
    lookup: Lookup | None = None,
    files: TemplateFiles | None = None,
) -> Mapping[str, Any]:
    """
    Run the deployment and export its outputs.

    Returns:
        The exported outputs, keyed by name
    """
    outputs = Deployment(settings, lookup=lookup, files=files).run()
    return outputs.export()
