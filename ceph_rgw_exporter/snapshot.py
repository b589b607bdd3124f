"""
Snapshot construction from fetched bucket records.
"""

import logging
from typing import Dict, Iterable

from .models import BucketRecord, Snapshot

logger = logging.getLogger(__name__)


def build_snapshot(records: Iterable[BucketRecord]) -> Snapshot:
    """
    Key records by bucket name.

    RGW should never return the same bucket twice; if it does, the later
    record replaces the earlier one.
    """
    buckets: Dict[str, BucketRecord] = {}
    for record in records:
        if record.name in buckets:
            logger.debug("Duplicate bucket %r in stats response, keeping last", record.name)
        buckets[record.name] = record
    return Snapshot(buckets)
