"""
Request signing for the RGW admin API (AWS signature version 2).

RGW authenticates admin requests with the same scheme as legacy S3:

    StringToSign = METHOD + "\\n" + Content-MD5 + "\\n" + Content-Type + "\\n"
                   + Date + "\\n" + CanonicalizedResource
    Signature    = Base64(HMAC-SHA1(secret_key, StringToSign))
    Authorization: AWS <access_key>:<Signature>

Admin GETs carry no body, so Content-MD5 and Content-Type are empty. The
canonical resource is the path only; admin query parameters are not signed.

The Date header and the signed string must hold the exact same timestamp,
otherwise RGW rejects the request with SignatureDoesNotMatch. sign_request()
therefore formats the date once and returns it together with the signature.
"""

import base64
import hashlib
import hmac
from datetime import datetime, timezone
from email.utils import format_datetime
from typing import Dict, Optional
from urllib.parse import urlsplit

from requests import PreparedRequest
from requests.auth import AuthBase


def http_date(now: Optional[datetime] = None) -> str:
    """Format a UTC instant as an RFC 1123 HTTP date (one second granularity)."""
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return format_datetime(now.astimezone(timezone.utc).replace(microsecond=0), usegmt=True)


def string_to_sign(method: str, date: str, path: str) -> str:
    return f"{method.upper()}\n\n\n{date}\n{path}"


def compute_signature(secret_key: str, canonical: str) -> str:
    digest = hmac.new(secret_key.encode('utf-8'), canonical.encode('utf-8'), hashlib.sha1).digest()
    return base64.b64encode(digest).decode('ascii')


def sign_request(method: str, path: str, access_key: str, secret_key: str,
                 now: Optional[datetime] = None) -> Dict[str, str]:
    """
    Build the Date and Authorization headers for one request.

    Args:
        method: HTTP method, e.g. "GET"
        path: Resource path without query string, e.g. "/admin/bucket"
        access_key: RGW access key (appears in clear in the header)
        secret_key: RGW secret key (HMAC key)
        now: Instant to sign; defaults to the current time

    Returns:
        {'Date': ..., 'Authorization': 'AWS <access_key>:<signature>'}
    """
    date = http_date(now)
    signature = compute_signature(secret_key, string_to_sign(method, date, path))
    return {
        'Date': date,
        'Authorization': f"AWS {access_key}:{signature}",
    }


def host_header(url: str) -> str:
    """Hostname of url with any port suffix stripped."""
    hostname = urlsplit(url).hostname or ''
    if ':' in hostname:
        # IPv6 literal
        return f"[{hostname}]"
    return hostname


class RGWAdminAuth(AuthBase):
    """
    requests auth hook that signs each prepared request.

    The signed resource is the path of the final URL, so the signature
    always matches what is sent. Host is forced to the bare hostname.
    """

    def __init__(self, access_key: str, secret_key: str):
        self.access_key = access_key
        self.secret_key = secret_key

    def __call__(self, request: PreparedRequest) -> PreparedRequest:
        path = urlsplit(request.url).path or '/'
        request.headers.update(sign_request(request.method, path, self.access_key, self.secret_key))
        request.headers['Host'] = host_header(request.url)
        return request
