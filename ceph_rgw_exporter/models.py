"""
Data models for RGW bucket and quota statistics.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterator, List, Mapping, Optional

# RGW reports "no limit" as -1 for both bucket and user quotas
UNLIMITED = -1


@dataclass(frozen=True)
class BucketRecord:
    """One bucket as reported by GET /admin/bucket?stats."""
    name: str
    owner: str = ""

    # Usage from the rgw.main category, in KB
    size_actual_kb: int = 0
    size_utilized_kb: int = 0
    num_objects: int = 0

    # Bucket quota, UNLIMITED when not set
    quota_max_size: int = UNLIMITED
    quota_max_objects: int = UNLIMITED

    num_shards: int = 0


@dataclass(frozen=True)
class OwnerQuota:
    """User quota as reported by GET /admin/user?quota."""
    max_size: float = float(UNLIMITED)
    max_objects: float = float(UNLIMITED)


class Snapshot:
    """
    Read-only view of all buckets fetched during one scrape.

    Built once by build_snapshot() and never modified afterwards. Each
    scrape builds its own instance, so readers never see a map that
    another scrape is rebuilding.
    """

    def __init__(self, buckets: Mapping[str, BucketRecord]):
        self._buckets = MappingProxyType(dict(buckets))

    @property
    def buckets(self) -> Mapping[str, BucketRecord]:
        return self._buckets

    def __len__(self) -> int:
        return len(self._buckets)

    def __iter__(self) -> Iterator[BucketRecord]:
        return iter(self._buckets.values())

    def __contains__(self, name: object) -> bool:
        return name in self._buckets

    def get(self, name: str) -> Optional[BucketRecord]:
        return self._buckets.get(name)

    def owners(self) -> List[str]:
        """Distinct owners, sorted so fetch order is stable."""
        return sorted({record.owner for record in self._buckets.values()})

    def __repr__(self) -> str:
        return f"Snapshot(buckets={len(self)})"


@dataclass
class ExporterConfig:
    """Configuration for the exporter."""
    gateway_url: str = "http://localhost:9000"
    access_key: str = ""
    secret_key: str = ""

    # HTTP exposition
    listen_address: str = ":9290"
    metrics_path: str = "/metrics"
    python_metrics: bool = False

    # Upstream requests; None keeps the requests default (no timeout)
    request_timeout: Optional[float] = None
    verify_tls: bool = True

    # 1 = sequential quota lookups
    quota_workers: int = 1
    max_quota_workers: int = 16

    def __post_init__(self):
        # Ensure reasonable bounds
        self.quota_workers = max(1, min(self.quota_workers, self.max_quota_workers))
        self.gateway_url = self.gateway_url.rstrip('/')
        if not self.metrics_path.startswith('/'):
            self.metrics_path = '/' + self.metrics_path

    def listen_host_port(self):
        """Split listen_address ("host:port" or ":port") into (host, port)."""
        host, _, port = self.listen_address.rpartition(':')
        host = host.strip('[]') or '0.0.0.0'
        return host, int(port)
