"""
Aggregations over a single scrape snapshot: per bucket, per owner and totals.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List, Tuple

from .metrics import MetricSample
from .models import OwnerQuota, Snapshot
from .rgw_client import RGWAdminError

logger = logging.getLogger(__name__)

QuotaFetcher = Callable[[str], OwnerQuota]


@dataclass
class OwnerQuotaResult:
    """Quotas fetched for the distinct owners of a snapshot."""
    quotas: Dict[str, OwnerQuota] = field(default_factory=dict)
    failures: Dict[str, RGWAdminError] = field(default_factory=dict)

    @property
    def fetched(self) -> int:
        return len(self.quotas) + len(self.failures)


class SnapshotAnalytics:
    """Aggregations for one snapshot. Holds no state beyond the snapshot."""

    def __init__(self, snapshot: Snapshot):
        self.snapshot = snapshot

    # =========================================================================
    # PER BUCKET
    # =========================================================================

    def bucket_usage(self) -> Dict[str, Tuple[int, int, int, int]]:
        """name -> (size_actual_kb, size_utilized_kb, num_objects, num_shards)"""
        return {
            b.name: (b.size_actual_kb, b.size_utilized_kb, b.num_objects, b.num_shards)
            for b in self.snapshot
        }

    def bucket_quotas(self) -> Dict[str, Tuple[int, int]]:
        """name -> (quota_max_size, quota_max_objects), -1 meaning unlimited."""
        return {b.name: (b.quota_max_size, b.quota_max_objects) for b in self.snapshot}

    # =========================================================================
    # PER OWNER
    # =========================================================================

    def owner_usage(self) -> Dict[str, int]:
        """owner -> sum of size_actual_kb over the owner's buckets."""
        totals: Dict[str, int] = {}
        for b in self.snapshot:
            totals[b.owner] = totals.get(b.owner, 0) + b.size_actual_kb
        return totals

    def owner_bucket_counts(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for b in self.snapshot:
            counts[b.owner] = counts.get(b.owner, 0) + 1
        return counts

    def owner_quotas(self, fetch_quota: QuotaFetcher, workers: int = 1) -> OwnerQuotaResult:
        """
        Fetch the user quota of every distinct owner, once per owner.

        A failed lookup is logged and recorded; the remaining owners are
        still fetched. With workers > 1 lookups run on a bounded thread pool.
        """
        owners = self.snapshot.owners()
        result = OwnerQuotaResult()

        if workers <= 1 or len(owners) <= 1:
            for owner in owners:
                self._fetch_one(fetch_quota, owner, result)
            return result

        with ThreadPoolExecutor(max_workers=min(workers, len(owners))) as executor:
            # Each owner writes its own key, no lock needed
            list(executor.map(lambda o: self._fetch_one(fetch_quota, o, result), owners))

        return result

    @staticmethod
    def _fetch_one(fetch_quota: QuotaFetcher, owner: str, result: OwnerQuotaResult):
        try:
            result.quotas[owner] = fetch_quota(owner)
        except RGWAdminError as e:
            logger.warning("Failed to fetch quota for user %r: %s", owner, e)
            result.failures[owner] = e

    # =========================================================================
    # GLOBAL
    # =========================================================================

    def total_size_actual_kb(self) -> int:
        return sum(b.size_actual_kb for b in self.snapshot)

    def total_objects(self) -> int:
        return sum(b.num_objects for b in self.snapshot)

    # =========================================================================
    # SAMPLES
    # =========================================================================

    def samples(self, quotas: OwnerQuotaResult) -> Iterator[MetricSample]:
        """All gauge values for this snapshot, keyed by descriptor table entry."""
        for name, (actual, utilized, objects, shards) in self.bucket_usage().items():
            labels = (name,)
            yield MetricSample('bucket_actual_size', labels, float(actual))
            yield MetricSample('bucket_utilized_size', labels, float(utilized))
            yield MetricSample('bucket_num_objects', labels, float(objects))
            yield MetricSample('bucket_num_shards', labels, float(shards))

        for name, (max_size, max_objects) in self.bucket_quotas().items():
            labels = (name,)
            yield MetricSample('bucket_quota_max_size', labels, float(max_size))
            yield MetricSample('bucket_quota_max_objects', labels, float(max_objects))

        for owner, size in self.owner_usage().items():
            yield MetricSample('user_usage_size', (owner,), float(size))

        for owner, quota in quotas.quotas.items():
            yield MetricSample('user_quota_max_size', (owner,), quota.max_size)
            yield MetricSample('user_quota_max_objects', (owner,), quota.max_objects)

        yield MetricSample('total_usage_size', (), float(self.total_size_actual_kb()))

    def summary(self) -> Dict[str, int]:
        return {
            'total_buckets': len(self.snapshot),
            'total_owners': len(self.snapshot.owners()),
            'total_objects': self.total_objects(),
            'total_size_actual_kb': self.total_size_actual_kb(),
        }

    def top_buckets_by_size(self, limit: int = 20) -> List:
        return sorted(self.snapshot, key=lambda b: (-b.size_actual_kb, b.name))[:limit]
