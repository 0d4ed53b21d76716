"""IAM policy documents for the instance role."""

import json

EC2_ASSUME_ROLE_POLICY = {
    "Version": "2012-10-17",
    "Statement": [{
        "Effect": "Allow",
        "Principal": {"Service": "ec2.amazonaws.com"},
        "Action": "sts:AssumeRole"
    }]
}

# Attach the data volume at boot and take/prune daily snapshots of it.
VOLUME_MANAGEMENT_ACTIONS = (
    "ec2:AttachVolume",
    "ec2:DetachVolume",
    "ec2:DescribeVolumes",
    "ec2:CreateSnapshot",
    "ec2:DeleteSnapshot",
    "ec2:DescribeSnapshots",
    "ec2:CreateTags",
)


def allow_policy(actions, resource: str = "*") -> dict:
    """Single-statement Allow policy for *actions* on *resource*."""
    return {
        "Version": "2012-10-17",
        "Statement": [{
            "Effect": "Allow",
            "Action": list(actions),
            "Resource": resource
        }]
    }


def to_json(document: dict) -> str:
    """Serialize a policy document with stable key order."""
    return json.dumps(document, sort_keys=True)
