"""
Ceph RGW Exporter

Prometheus exporter for Ceph RGW bucket usage and quotas, polled through
the RGW admin API on every scrape.
"""

__version__ = "1.0.0"

from .models import BucketRecord, ExporterConfig, OwnerQuota, Snapshot
from .rgw_client import DecodeError, RGWAdminClient, RGWAdminError, TransportError, UpstreamError
from .snapshot import build_snapshot
from .analytics import SnapshotAnalytics
from .collector import RGWStatsCollector

__all__ = ['BucketRecord', 'ExporterConfig', 'OwnerQuota', 'Snapshot',
           'RGWAdminClient', 'RGWAdminError', 'TransportError', 'UpstreamError', 'DecodeError',
           'build_snapshot', 'SnapshotAnalytics', 'RGWStatsCollector']
