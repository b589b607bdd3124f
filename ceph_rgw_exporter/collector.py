"""
Prometheus collector: one full RGW scrape per collect() call.
"""

import logging
import time
from dataclasses import dataclass
from typing import Dict, Iterator, List

from prometheus_client.core import GaugeMetricFamily

from .analytics import OwnerQuotaResult, SnapshotAnalytics
from .metrics import DEFAULT_DESCRIPTORS, MetricDescriptor, MetricSample
from .models import Snapshot
from .rgw_client import RGWAdminClient, RGWAdminError
from .snapshot import build_snapshot

logger = logging.getLogger(__name__)


@dataclass
class ScrapeResult:
    """Everything produced by one scrape."""
    snapshot: Snapshot
    quotas: OwnerQuotaResult
    samples: List[MetricSample]
    duration: float


class RGWStatsCollector:
    """
    Custom collector for prometheus_client.

    Each collect() fetches bucket stats, builds a fresh snapshot, fetches one
    quota per distinct owner and yields every gauge. Nothing is kept between
    scrapes, so concurrent scrapes do not share state.

    If the bucket stats request fails the scrape yields no metrics at all.
    A failed quota lookup only drops that owner's quota gauges.
    """

    def __init__(self, client: RGWAdminClient,
                 descriptors: Dict[str, MetricDescriptor] = None,
                 quota_workers: int = 1):
        self.client = client
        self.descriptors = descriptors or DEFAULT_DESCRIPTORS
        self.quota_workers = quota_workers

    def _families(self) -> Dict[str, GaugeMetricFamily]:
        return {
            key: GaugeMetricFamily(d.name, d.documentation, labels=list(d.labels))
            for key, d in self.descriptors.items()
        }

    def describe(self) -> Iterator[GaugeMetricFamily]:
        """Static metric list; never touches the network."""
        return iter(self._families().values())

    def scrape(self) -> ScrapeResult:
        """
        Run one scrape and return its results.
        Raises RGWAdminError if the bucket stats cannot be fetched.
        """
        start_time = time.time()

        snapshot = build_snapshot(self.client.get_bucket_stats())
        analytics = SnapshotAnalytics(snapshot)
        quotas = analytics.owner_quotas(self.client.get_user_quota, workers=self.quota_workers)
        samples = list(analytics.samples(quotas))

        duration = time.time() - start_time
        logger.info("Scraped %d buckets, %d owners (%d quota failures) in %.2fs",
                    len(snapshot), quotas.fetched, len(quotas.failures), duration)

        return ScrapeResult(snapshot=snapshot, quotas=quotas, samples=samples, duration=duration)

    def collect(self) -> Iterator[GaugeMetricFamily]:
        try:
            result = self.scrape()
        except RGWAdminError as e:
            logger.error("Error updating bucket stats: %s", e)
            return

        families = self._families()
        for sample in result.samples:
            family = families.get(sample.key)
            if family is not None:
                family.add_metric(list(sample.labels), sample.value)

        yield from families.values()
