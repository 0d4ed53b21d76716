"""AWS resource declarations and lookups."""

from openclaw_vps.aws.lookups import (
    AwsLookup,
    ImageCandidate,
    ImageQuery,
    ImageSelection,
    Lookup,
    StaticLookup,
    select_availability_zone,
    select_image,
)
from openclaw_vps.aws.resources import (
    AWS_RESOURCE_KINDS,
    AWSResources,
)

__all__ = [
    "AwsLookup",
    "ImageCandidate",
    "ImageQuery",
    "ImageSelection",
    "Lookup",
    "StaticLookup",
    "select_availability_zone",
    "select_image",
    "AWS_RESOURCE_KINDS",
    "AWSResources",
]
