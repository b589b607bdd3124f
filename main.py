#!/usr/bin/env python3
"""
Ceph RGW Exporter - Main entry point.

Usage:
    python main.py serve --radosgw.server http://rgw:8080
    python main.py show --limit 50
"""

from ceph_rgw_exporter.cli import main

if __name__ == '__main__':
    main()
