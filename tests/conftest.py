"""
Shared fixtures: Pulumi mocks standing in for the engine and AWS.
"""

from pathlib import Path

import pulumi
import pytest

DATA_DIR = Path(__file__).parent / "data"

AMI_IDS_TOKEN = "aws:ec2/getAmiIds:getAmiIds"
AZS_TOKEN = "aws:index/getAvailabilityZones:getAvailabilityZones"


class DeploymentMocks(pulumi.runtime.Mocks):
    """
    Records registered resources and answers the two lookups.

    ``ami_ids`` is the newest-first order AWS would return; ascending
    sort requests get it reversed.
    """

    def __init__(self):
        self.ami_ids = ["ami-0newest", "ami-0middle", "ami-0oldest"]
        self.zones = ["us-east-1a", "us-east-1b", "us-east-1c"]
        self.resources: list[tuple[str, str]] = []
        self.calls: list[str] = []

    def new_resource(self, args: pulumi.runtime.MockResourceArgs):
        self.resources.append((args.typ, args.name))
        outputs = dict(args.inputs)
        outputs.setdefault("name", args.name)
        outputs.setdefault("arn", f"arn:aws:mock::123456789012:{args.name}")
        return [f"{args.name}-id", outputs]

    def call(self, args: pulumi.runtime.MockCallArgs):
        self.calls.append(args.token)
        if args.token == AMI_IDS_TOKEN:
            ids = list(self.ami_ids)
            if args.args.get("sortAscending"):
                ids.reverse()
            return {"id": "ami-lookup", "ids": ids}
        if args.token == AZS_TOKEN:
            return {"id": "us-east-1", "names": list(self.zones)}
        return {}


@pytest.fixture(autouse=True)
def pulumi_mocks(request):
    """Install fresh mocks for every test (exposed as ``self.mocks`` in classes)."""
    mocks = DeploymentMocks()
    pulumi.runtime.set_mocks(mocks, project="openclaw-vps", stack="test", preview=False)
    if request.instance is not None:
        request.instance.mocks = mocks
    return mocks
