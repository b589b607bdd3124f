"""
Tests for RGW admin request signing.

Run with: python -m pytest tests/ -v
"""

import base64
import hashlib
import hmac
import os
import sys
import unittest
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import requests

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from ceph_rgw_exporter import signer
from ceph_rgw_exporter.signer import (
    RGWAdminAuth,
    compute_signature,
    host_header,
    http_date,
    sign_request,
    string_to_sign,
)


FIXED = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


class TestHttpDate(unittest.TestCase):

    def test_rfc1123_gmt(self):
        self.assertEqual(http_date(FIXED), "Tue, 02 Jan 2024 03:04:05 GMT")

    def test_naive_datetime_is_utc(self):
        self.assertEqual(http_date(FIXED.replace(tzinfo=None)), "Tue, 02 Jan 2024 03:04:05 GMT")

    def test_other_timezone_converted(self):
        cet = timezone(timedelta(hours=1))
        self.assertEqual(http_date(FIXED.astimezone(cet)), "Tue, 02 Jan 2024 03:04:05 GMT")

    def test_microseconds_dropped(self):
        self.assertEqual(http_date(FIXED.replace(microsecond=999999)), http_date(FIXED))


class TestSignature(unittest.TestCase):

    def test_string_to_sign_layout(self):
        self.assertEqual(
            string_to_sign("get", "Tue, 02 Jan 2024 03:04:05 GMT", "/admin/bucket"),
            "GET\n\n\nTue, 02 Jan 2024 03:04:05 GMT\n/admin/bucket"
        )

    def test_matches_hmac_sha1(self):
        canonical = string_to_sign("GET", http_date(FIXED), "/admin/user")
        expected = base64.b64encode(
            hmac.new(b"secret", canonical.encode(), hashlib.sha1).digest()
        ).decode()
        self.assertEqual(compute_signature("secret", canonical), expected)

    def test_deterministic(self):
        for secret in ["s", "another-secret", "ünïcode", "x" * 200]:
            first = sign_request("GET", "/admin/bucket", "AK", secret, now=FIXED)
            second = sign_request("GET", "/admin/bucket", "AK", secret, now=FIXED)
            self.assertEqual(first, second)

    def test_different_paths_differ(self):
        bucket = sign_request("GET", "/admin/bucket", "AK", "SK", now=FIXED)
        user = sign_request("GET", "/admin/user", "AK", "SK", now=FIXED)
        self.assertNotEqual(bucket['Authorization'], user['Authorization'])


class TestSignRequest(unittest.TestCase):

    def test_headers(self):
        headers = sign_request("GET", "/admin/bucket", "ACCESS", "SECRET", now=FIXED)

        self.assertEqual(headers['Date'], "Tue, 02 Jan 2024 03:04:05 GMT")
        expected_sig = compute_signature(
            "SECRET", "GET\n\n\nTue, 02 Jan 2024 03:04:05 GMT\n/admin/bucket"
        )
        self.assertEqual(headers['Authorization'], f"AWS ACCESS:{expected_sig}")

    def test_date_and_signature_share_one_timestamp(self):
        """The clock is read once; a second tick must not leak into the signature."""
        ticks = iter([FIXED, FIXED + timedelta(seconds=1)])

        class FakeDatetime(datetime):
            @classmethod
            def now(cls, tz=None):
                return next(ticks)

        with patch.object(signer, 'datetime', FakeDatetime):
            headers = sign_request("GET", "/admin/bucket", "AK", "SK")

        expected = compute_signature("SK", string_to_sign("GET", headers['Date'], "/admin/bucket"))
        self.assertEqual(headers['Authorization'], f"AWS AK:{expected}")
        self.assertEqual(headers['Date'], http_date(FIXED))


class TestHostHeader(unittest.TestCase):

    def test_strips_port(self):
        self.assertEqual(host_header("http://rgw.example.com:8080"), "rgw.example.com")

    def test_no_port(self):
        self.assertEqual(host_header("https://rgw.example.com/"), "rgw.example.com")

    def test_ipv6(self):
        self.assertEqual(host_header("http://[::1]:7480"), "[::1]")


class TestRGWAdminAuth(unittest.TestCase):

    def sign(self, url):
        prepared = requests.Request('GET', url).prepare()
        with patch.object(signer, 'datetime') as mock_datetime:
            mock_datetime.now.return_value = FIXED
            return RGWAdminAuth("AK", "SK")(prepared).headers

    def test_signs_path_without_query(self):
        headers = self.sign("http://rgw:7480/admin/user?quota&uid=alice&quota-type=user")

        self.assertEqual(headers['Date'], http_date(FIXED))
        expected = sign_request("GET", "/admin/user", "AK", "SK", now=FIXED)
        self.assertEqual(headers['Authorization'], expected['Authorization'])

    def test_host_without_port(self):
        self.assertEqual(self.sign("http://rgw:7480/admin/bucket?stats")['Host'], "rgw")
        self.assertEqual(self.sign("http://[::1]:7480/admin/bucket?stats")['Host'], "[::1]")


if __name__ == '__main__':
    unittest.main()
