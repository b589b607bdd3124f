"""
RGW Admin API client.
"""

import logging
import time
from typing import Any, Dict, List, Optional
from urllib.parse import quote, urlsplit

import requests

from .models import UNLIMITED, BucketRecord, ExporterConfig, OwnerQuota
from .signer import RGWAdminAuth

logger = logging.getLogger(__name__)

BUCKET_STATS_PATH = "/admin/bucket"
USER_PATH = "/admin/user"


class RGWAdminError(Exception):
    """Base class for failures talking to the RGW admin API."""


class TransportError(RGWAdminError):
    """The gateway could not be reached (connection refused, timeout, TLS...)."""


class UpstreamError(RGWAdminError):
    """The gateway answered with a non-success HTTP status."""

    def __init__(self, message: str, status_code: int, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class DecodeError(RGWAdminError):
    """The response body is not JSON or does not have the expected shape."""


class RGWAdminClient:
    """Interface to the RGW admin REST API."""

    def __init__(self, base_url: str, access_key: str, secret_key: str,
                 timeout: Optional[float] = None, verify: bool = True,
                 session: requests.Session = None):
        self.base_url = base_url.rstrip('/')
        self.access_key = access_key
        self.secret_key = secret_key
        self.timeout = timeout
        self.verify = verify
        self.session = session or requests.Session()
        self.auth = RGWAdminAuth(access_key, secret_key)

        if urlsplit(self.base_url).scheme not in ('http', 'https'):
            raise ValueError(f"Unsupported gateway URL: {base_url!r}")

    @classmethod
    def from_config(cls, config: ExporterConfig) -> 'RGWAdminClient':
        return cls(
            config.gateway_url,
            config.access_key,
            config.secret_key,
            timeout=config.request_timeout,
            verify=config.verify_tls,
        )

    def _get_json(self, path: str, query: str) -> Any:
        """
        Issue one signed GET and decode the JSON body.
        Raises TransportError, UpstreamError or DecodeError.
        """
        url = f"{self.base_url}{path}?{query}"
        start_time = time.time()

        try:
            response = self.session.get(
                url,
                auth=self.auth,
                timeout=self.timeout,
                verify=self.verify,
            )
        except requests.RequestException as e:
            raise TransportError(f"GET {path}?{query} failed: {e}") from e

        # Closing the response releases the connection back to the pool
        with response:
            elapsed = time.time() - start_time
            logger.debug("GET %s?%s -> %s in %.3fs", path, query, response.status_code, elapsed)

            if not response.ok:
                raise UpstreamError(
                    f"GET {path}?{query} returned HTTP {response.status_code}",
                    status_code=response.status_code,
                    body=response.text[:512],
                )

            try:
                return response.json()
            except ValueError as e:
                raise DecodeError(f"GET {path}?{query}: invalid JSON: {e}") from e

    def get_bucket_stats(self) -> List[BucketRecord]:
        """Get stats for ALL buckets in a single request."""
        data = self._get_json(BUCKET_STATS_PATH, "stats")

        if not isinstance(data, list):
            raise DecodeError(f"Unexpected bucket stats format: {type(data).__name__}")

        records = [self._parse_bucket(raw) for raw in data]
        logger.debug("Fetched stats for %d buckets", len(records))
        return records

    def get_user_quota(self, uid: str) -> OwnerQuota:
        """Get the user-level quota for one owner."""
        query = f"quota&uid={quote(uid, safe='')}&quota-type=user"
        data = self._get_json(USER_PATH, query)

        if not isinstance(data, dict):
            raise DecodeError(f"Unexpected user quota format for {uid!r}: {type(data).__name__}")

        return OwnerQuota(
            max_size=_number(data, 'max_size', float),
            max_objects=_number(data, 'max_objects', float),
        )

    def _parse_bucket(self, raw: Any) -> BucketRecord:
        """Parse one element of the bucket stats array."""
        if not isinstance(raw, dict) or not isinstance(raw.get('bucket'), str):
            raise DecodeError(f"Bucket entry without a name: {raw!r:.200}")

        # Every bucket belongs to a user; the owner becomes a quota lookup uid
        owner = raw.get('owner')
        if not isinstance(owner, str) or not owner:
            raise DecodeError(f"Bucket {raw['bucket']!r} has no valid owner: {owner!r:.100}")

        # Empty buckets have no rgw.main entry at all
        usage = raw.get('usage') or {}
        main = (usage.get('rgw.main') or {}) if isinstance(usage, dict) else None
        quota = raw.get('bucket_quota') or {}

        if not isinstance(main, dict) or not isinstance(quota, dict):
            raise DecodeError(f"Malformed usage or quota for bucket {raw['bucket']!r}")

        return BucketRecord(
            name=raw['bucket'],
            owner=owner,
            size_actual_kb=_number(main, 'size_kb_actual', int, default=0),
            size_utilized_kb=_number(main, 'size_kb_utilized', int, default=0),
            num_objects=_number(main, 'num_objects', int, default=0),
            quota_max_size=_number(quota, 'max_size', int),
            quota_max_objects=_number(quota, 'max_objects', int),
            num_shards=_number(raw, 'num_shards', int, default=0),
        )

    def close(self):
        """Clean up resources."""
        self.session.close()


def _number(data: Dict[str, Any], key: str, kind, default=UNLIMITED):
    value = data.get(key, default)
    if value is None:
        return kind(default)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DecodeError(f"Field {key!r} is not numeric: {value!r}")
    return kind(value)
