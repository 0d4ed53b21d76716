"""
Read-only lookups of external facts: the machine image and the
availability zone the deployment runs in.

Selection is deterministic. Images are ordered by creation date (newest
first by default, see :class:`ImageSelection`) with the image id as the
tie-break; zones are taken in the order the provider lists them.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Iterable, Sequence

import pulumi_aws as aws

from openclaw_vps.errors import ExternalLookupEmptyError

logger = logging.getLogger(__name__)

CANONICAL_OWNER_ID = "099720109477"
UBUNTU_NOBLE_AMD64 = "ubuntu/images/hvm-ssd-gp3/ubuntu-noble-24.04-amd64-server-*"


class ImageSelection(str, Enum):
    """Which matching image to pick."""

    NEWEST = "newest"
    OLDEST = "oldest"


@dataclass(frozen=True)
class ImageQuery:
    """Filter for machine image lookups."""

    name_pattern: str = UBUNTU_NOBLE_AMD64
    owners: tuple[str, ...] = (CANONICAL_OWNER_ID,)
    virtualization_type: str = "hvm"
    selection: ImageSelection = ImageSelection.NEWEST

    def filters(self) -> list[dict]:
        return [
            {"name": "name", "values": [self.name_pattern]},
            {"name": "virtualization-type", "values": [self.virtualization_type]},
        ]

    def __str__(self) -> str:
        owners = ",".join(self.owners)
        return f"name={self.name_pattern} owners={owners} ({self.selection.value})"


@dataclass(frozen=True)
class ImageCandidate:
    """A machine image matching a query."""

    image_id: str
    creation_date: datetime | None = None


def select_image(
    candidates: Sequence[ImageCandidate],
    selection: ImageSelection = ImageSelection.NEWEST,
) -> ImageCandidate:
    """
    Pick one image from *candidates*.

    Dated candidates are ordered by creation date (newest or oldest first)
    and then by image id ascending. Undated candidates follow in the order
    they were listed.

    Raises:
        ExternalLookupEmptyError: If there are no candidates
    """
    if not candidates:
        raise ExternalLookupEmptyError("machine image", f"selection={selection.value}")

    dated = [c for c in candidates if c.creation_date is not None]
    undated = [c for c in candidates if c.creation_date is None]

    # Two stable sorts: id ascending, then date in the requested direction.
    dated.sort(key=lambda c: c.image_id)
    dated.sort(
        key=lambda c: c.creation_date,
        reverse=selection is ImageSelection.NEWEST,
    )
    return (dated + undated)[0]


def select_availability_zone(names: Sequence[str], preferred: str | None = None) -> str:
    """
    Pick the zone to deploy into.

    Returns *preferred* when it is available, otherwise the first listed
    zone.

    Raises:
        ExternalLookupEmptyError: If no zones are available, or *preferred*
            is not one of them
    """
    if not names:
        raise ExternalLookupEmptyError("availability zone", "state=available")
    if preferred is not None:
        if preferred not in names:
            raise ExternalLookupEmptyError(
                "availability zone", f"name={preferred} state=available"
            )
        return preferred
    return names[0]


class Lookup(ABC):
    """Source of external facts needed before declaring resources."""

    @abstractmethod
    def image_candidates(self, query: ImageQuery) -> list[ImageCandidate]:
        """List images matching *query*, in the provider's order."""
        pass

    @abstractmethod
    def availability_zones(self) -> list[str]:
        """List available zone names in the provider's order."""
        pass

    def machine_image(self, query: ImageQuery) -> str:
        """
        Resolve *query* to a single image id.

        Raises:
            ExternalLookupEmptyError: If nothing matches
        """
        candidates = self.image_candidates(query)
        if not candidates:
            raise ExternalLookupEmptyError("machine image", str(query))
        chosen = select_image(candidates, query.selection)
        logger.info("Selected image %s from %d candidate(s)", chosen.image_id, len(candidates))
        return chosen.image_id

    def availability_zone(self, preferred: str | None = None) -> str:
        zone = select_availability_zone(self.availability_zones(), preferred)
        logger.info("Selected availability zone %s", zone)
        return zone


class AwsLookup(Lookup):
    """
    Lookups backed by pulumi_aws invokes.

    ``get_ami_ids`` returns ids only, sorted by creation date in the
    requested direction, so candidates carry no date and the provider's
    order is kept.
    """

    def image_candidates(self, query: ImageQuery) -> list[ImageCandidate]:
        result = aws.ec2.get_ami_ids(
            owners=list(query.owners),
            filters=query.filters(),
            sort_ascending=query.selection is ImageSelection.OLDEST,
        )
        return [ImageCandidate(image_id=image_id) for image_id in (result.ids or [])]

    def availability_zones(self) -> list[str]:
        result = aws.get_availability_zones(state="available")
        return list(result.names or [])


class StaticLookup(Lookup):
    """Lookup answering from fixed values, for offline rendering and tests."""

    def __init__(
        self,
        images: Iterable[ImageCandidate] = (),
        zones: Iterable[str] = (),
    ):
        self.images = list(images)
        self.zones = list(zones)
        self.calls: list[str] = []

    def image_candidates(self, query: ImageQuery) -> list[ImageCandidate]:
        self.calls.append("image_candidates")
        return list(self.images)

    def availability_zones(self) -> list[str]:
        self.calls.append("availability_zones")
        return list(self.zones)
