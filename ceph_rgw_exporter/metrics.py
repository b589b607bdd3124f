"""
Metric descriptors exposed by the exporter.

The table is built explicitly and handed to the collector; nothing here
registers with a global registry.
"""

from dataclasses import dataclass
from typing import Dict, NamedTuple, Optional, Tuple

DEFAULT_NAMESPACE = "ceph_rgw"


@dataclass(frozen=True)
class MetricDescriptor:
    name: str
    documentation: str
    labels: Tuple[str, ...] = ()


class MetricSample(NamedTuple):
    """One gauge value; key refers to an entry of the descriptor table."""
    key: str
    labels: Tuple[str, ...]
    value: float


# key -> (suffix, help, labels)
_METRICS = {
    'bucket_actual_size': ("bucket_actual_size", "s3 bucket size", ("name",)),
    'bucket_utilized_size': ("bucket_utilized_size", "s3 bucket utilized size", ("name",)),
    'bucket_num_objects': ("bucket_num_objects", "s3 bucket number of objects", ("name",)),
    'bucket_num_shards': ("bucket_num_shards", "bucket number of shards", ("name",)),
    'bucket_quota_max_size': ("bucket_quota_max_size", "bucket quota max size", ("name",)),
    'bucket_quota_max_objects': ("bucket_quota_max_objects", "bucket quota max objects", ("name",)),
    'user_usage_size': ("user_usage_size", "size of each user", ("name",)),
    'user_quota_max_size': ("user_quota_max_size", "User limit size", ("user",)),
    'user_quota_max_objects': ("user_quota_max_objects", "User max number of objects", ("user",)),
    'total_usage_size': ("bucket_total_usage_size", "s3 total usage all buckets size", ()),
}


def build_descriptors(namespace: Optional[str] = None) -> Dict[str, MetricDescriptor]:
    """Build the descriptor table, optionally under a different namespace."""
    namespace = namespace or DEFAULT_NAMESPACE
    return {
        key: MetricDescriptor(name=f"{namespace}_{suffix}", documentation=doc, labels=labels)
        for key, (suffix, doc, labels) in _METRICS.items()
    }


DEFAULT_DESCRIPTORS = build_descriptors()
