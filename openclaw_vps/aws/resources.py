"""
AWS resource declarations for the single-instance deployment.

Each method declares one resource through a :class:`ResourceGraph` using
pulumi_aws argument types, and returns its handle.
"""

from typing import Any, TYPE_CHECKING

import pulumi
import pulumi_aws as aws

from openclaw_vps.aws.policies import (
    EC2_ASSUME_ROLE_POLICY,
    VOLUME_MANAGEMENT_ACTIONS,
    allow_policy,
    to_json,
)

if TYPE_CHECKING:
    from openclaw_vps.core.graph import ResourceGraph, ResourceHandle


SECURITY_GROUP = "aws:ec2/securityGroup:SecurityGroup"
VOLUME = "aws:ebs/volume:Volume"
ROLE = "aws:iam/role:Role"
ROLE_POLICY = "aws:iam/rolePolicy:RolePolicy"
INSTANCE_PROFILE = "aws:iam/instanceProfile:InstanceProfile"
LAUNCH_TEMPLATE = "aws:ec2/launchTemplate:LaunchTemplate"
AUTOSCALING_GROUP = "aws:autoscaling/group:Group"

AWS_RESOURCE_KINDS: dict[str, type] = {
    SECURITY_GROUP: aws.ec2.SecurityGroup,
    VOLUME: aws.ebs.Volume,
    ROLE: aws.iam.Role,
    ROLE_POLICY: aws.iam.RolePolicy,
    INSTANCE_PROFILE: aws.iam.InstanceProfile,
    LAUNCH_TEMPLATE: aws.ec2.LaunchTemplate,
    AUTOSCALING_GROUP: aws.autoscaling.Group,
}

DATA_VOLUME_SIZE_GB = 20
ROOT_VOLUME_SIZE_GB = 20
VOLUME_TYPE = "gp3"
ROOT_DEVICE_NAME = "/dev/sda1"
SPOT_ALLOCATION_STRATEGY = "price-capacity-optimized"


class AWSResources:
    """
    Declares the deployment's AWS resources into a graph.

    Resource names are derived from a common prefix (``openclaw`` by
    default), e.g. ``openclaw-sg`` and ``openclaw-asg``.

    Example:
        resources = AWSResources(graph)
        sg = resources.security_group()
        volume = resources.data_volume("us-east-1a", snapshot_id=None)
    """

    def __init__(self, graph: 'ResourceGraph', prefix: str = "openclaw"):
        self.graph = graph
        self.prefix = prefix

    @property
    def instance_name(self) -> str:
        return f"{self.prefix}-vps"

    def security_group(self) -> 'ResourceHandle':
        """
        Security group with no inbound rules and unrestricted egress.

        The instance is reached over Tailscale, which only needs outbound
        connectivity (NAT traversal and DERP relays).
        """
        return self.graph.declare(
            SECURITY_GROUP,
            f"{self.prefix}-sg",
            {
                "description": "OpenClaw VPS - no inbound traffic",
                "egress": [
                    aws.ec2.SecurityGroupEgressArgs(
                        protocol="-1",
                        from_port=0,
                        to_port=0,
                        cidr_blocks=["0.0.0.0/0"],
                        description="Allow all outbound",
                    )
                ],
            },
        )

    def data_volume(
        self,
        availability_zone: str,
        snapshot_id: str | None = None,
        size: int = DATA_VOLUME_SIZE_GB,
    ) -> 'ResourceHandle':
        """
        Persistent EBS volume for application data.

        Args:
            availability_zone: Zone the volume (and the instance) lives in
            snapshot_id: Optional snapshot to restore the volume from
            size: Size in GiB
        """
        properties: dict[str, Any] = {
            "availability_zone": availability_zone,
            "size": size,
            "type": VOLUME_TYPE,
            "tags": {"Name": f"{self.prefix}-data"},
        }
        if snapshot_id:
            properties["snapshot_id"] = snapshot_id

        return self.graph.declare(VOLUME, f"{self.prefix}-data", properties)

    def instance_role(self) -> 'ResourceHandle':
        """IAM role assumable by EC2."""
        return self.graph.declare(
            ROLE,
            f"{self.prefix}-role",
            {"assume_role_policy": to_json(EC2_ASSUME_ROLE_POLICY)},
        )

    def volume_policy(self, role: 'ResourceHandle') -> 'ResourceHandle':
        """Inline policy letting the instance attach and snapshot its volume."""
        return self.graph.declare(
            ROLE_POLICY,
            f"{self.prefix}-ebs-policy",
            {
                "role": role.get("name"),
                "policy": to_json(allow_policy(VOLUME_MANAGEMENT_ACTIONS)),
            },
            references=[role],
        )

    def instance_profile(self, role: 'ResourceHandle') -> 'ResourceHandle':
        return self.graph.declare(
            INSTANCE_PROFILE,
            f"{self.prefix}-profile",
            {"role": role.get("name")},
            references=[role],
        )

    def launch_template(
        self,
        image_id: str,
        instance_type: str,
        user_data: pulumi.Input[str],
        security_group: 'ResourceHandle',
        instance_profile: 'ResourceHandle',
        extra_references: tuple['ResourceHandle', ...] = (),
    ) -> 'ResourceHandle':
        """
        Launch template for the instance.

        Spot configuration is left to the auto-scaling group's mixed
        instances policy.

        Args:
            image_id: AMI id
            instance_type: EC2 instance type
            user_data: Base64-encoded boot script
            security_group: Security group handle
            instance_profile: Instance profile handle
            extra_references: Handles *user_data* was derived from
        """
        return self.graph.declare(
            LAUNCH_TEMPLATE,
            f"{self.prefix}-lt",
            {
                "image_id": image_id,
                "instance_type": instance_type,
                "user_data": user_data,
                "vpc_security_group_ids": [security_group.id],
                "iam_instance_profile": aws.ec2.LaunchTemplateIamInstanceProfileArgs(
                    arn=instance_profile.get("arn"),
                ),
                "block_device_mappings": [
                    aws.ec2.LaunchTemplateBlockDeviceMappingArgs(
                        device_name=ROOT_DEVICE_NAME,
                        ebs=aws.ec2.LaunchTemplateBlockDeviceMappingEbsArgs(
                            volume_size=ROOT_VOLUME_SIZE_GB,
                            volume_type=VOLUME_TYPE,
                        ),
                    )
                ],
                "tags": {"Name": self.instance_name},
            },
            references=[security_group, instance_profile, *extra_references],
        )

    def scaling_group(
        self,
        launch_template: 'ResourceHandle',
        availability_zone: str,
    ) -> 'ResourceHandle':
        """
        Auto-scaling group keeping one spot instance running.

        Capacity is bounded to ``[0, 1]`` with one desired instance. All
        capacity is spot (no on-demand base), allocated with
        ``price-capacity-optimized`` and proactively rebalanced when AWS
        signals an interruption risk.
        """
        return self.graph.declare(
            AUTOSCALING_GROUP,
            f"{self.prefix}-asg",
            {
                "min_size": 0,
                "max_size": 1,
                "desired_capacity": 1,
                "availability_zones": [availability_zone],
                "capacity_rebalance": True,
                "mixed_instances_policy": aws.autoscaling.GroupMixedInstancesPolicyArgs(
                    instances_distribution=aws.autoscaling.GroupMixedInstancesPolicyInstancesDistributionArgs(
                        on_demand_base_capacity=0,
                        on_demand_percentage_above_base_capacity=0,
                        spot_allocation_strategy=SPOT_ALLOCATION_STRATEGY,
                    ),
                    launch_template=aws.autoscaling.GroupMixedInstancesPolicyLaunchTemplateArgs(
                        launch_template_specification=aws.autoscaling.GroupMixedInstancesPolicyLaunchTemplateLaunchTemplateSpecificationArgs(
                            launch_template_id=launch_template.id,
                            version="$Latest",
                        ),
                    ),
                ),
                "tags": [
                    aws.autoscaling.GroupTagArgs(
                        key="Name",
                        value=self.instance_name,
                        propagate_at_launch=True,
                    )
                ],
            },
            references=[launch_template],
        )

    def __repr__(self):
        return f"AWSResources(prefix={self.prefix!r})"
