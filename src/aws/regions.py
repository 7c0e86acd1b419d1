"""Static AWS region identifier validation.

Region identifiers are checked against the partition data shipped with
botocore, so validation never performs a network call.
"""

from functools import lru_cache
from typing import FrozenSet

import botocore.session


# Services present in every commercial, China and GovCloud region.
_REFERENCE_SERVICES = ("ec2", "sts")


@lru_cache(maxsize=1)
def known_regions() -> FrozenSet[str]:
    """Return every region identifier known to the installed botocore.

    Returns:
        Frozen set of region names across all partitions
    """
    session = botocore.session.get_session()
    regions = set()
    for partition in session.get_available_partitions():
        for service in _REFERENCE_SERVICES:
            regions.update(
                session.get_available_regions(service, partition_name=partition)
            )
    return frozenset(regions)


def is_valid_region(region: str) -> bool:
    """Check whether region is a recognized AWS region identifier.

    Args:
        region: Region name (e.g., 'us-east-1')

    Returns:
        True if region is non-empty and known to botocore
    """
    if not region or not isinstance(region, str):
        return False
    return region in known_regions()
