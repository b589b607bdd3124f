"""
Command line interface for the Ceph RGW exporter.
"""

import argparse
import logging
import os
import sys

from . import __version__
from .models import ExporterConfig
from .rgw_client import RGWAdminClient, RGWAdminError

logger = logging.getLogger(__name__)


def setup_logging(verbosity: int = 0):
    level = logging.DEBUG if verbosity > 1 else logging.INFO if verbosity == 1 else logging.WARNING
    logging.basicConfig(
        level=level,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )


def build_config(args) -> ExporterConfig:
    return ExporterConfig(
        gateway_url=args.gateway_url,
        access_key=args.access_key,
        secret_key=args.secret_key,
        listen_address=getattr(args, 'listen_address', ':9290'),
        metrics_path=getattr(args, 'metrics_path', '/metrics'),
        python_metrics=getattr(args, 'python_metrics', False),
        request_timeout=args.timeout,
        verify_tls=not args.insecure,
        quota_workers=args.quota_workers,
    )


def cmd_serve(args):
    """Run the exporter HTTP server."""
    from .server import serve

    config = build_config(args)
    try:
        serve(config, RGWAdminClient.from_config(config))
    except KeyboardInterrupt:
        logger.info("Stopping ceph_rgw_exporter.")


def cmd_show(args):
    """Run one scrape and print it."""
    from .collector import RGWStatsCollector
    from .dashboard import SnapshotDashboard

    config = build_config(args)
    client = RGWAdminClient.from_config(config)

    try:
        result = RGWStatsCollector(client, quota_workers=config.quota_workers).scrape()
    except RGWAdminError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        client.close()

    SnapshotDashboard(result).show_all(limit=args.limit)


def _add_gateway_args(p):
    p.add_argument('--radosgw.server', dest='gateway_url',
                   default=os.getenv('CEPH_URL', 'http://localhost:9000'),
                   help='HTTP address of the ceph radosgw server (env: CEPH_URL)')
    p.add_argument('--radosgw.access-key', dest='access_key',
                   default=os.getenv('CEPH_ACCESS_KEY', ''),
                   help='Access key used to log in to ceph radosgw (env: CEPH_ACCESS_KEY)')
    p.add_argument('--radosgw.access-secret', dest='secret_key',
                   default=os.getenv('CEPH_ACCESS_SECRET', ''),
                   help='Secret key used to log in to ceph radosgw (env: CEPH_ACCESS_SECRET)')
    p.add_argument('--timeout', type=float, default=None,
                   help='Timeout in seconds for each admin API request (default: none)')
    p.add_argument('--insecure', action='store_true',
                   help='Skip TLS certificate verification')
    p.add_argument('--quota-workers', type=int, default=1,
                   help='Parallel user quota lookups per scrape (default: 1, sequential)')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='ceph-rgw-exporter',
        description='Prometheus exporter for Ceph RGW bucket usage and quotas',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Serve metrics on :9290/metrics
  %(prog)s serve --radosgw.server http://rgw:8080 \\
      --radosgw.access-key KEY --radosgw.access-secret SECRET

  # Credentials from the environment
  CEPH_URL=http://rgw:8080 CEPH_ACCESS_KEY=KEY CEPH_ACCESS_SECRET=SECRET %(prog)s serve

  # One scrape, printed as tables
  %(prog)s show --limit 50
        """
    )

    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('--verbose', '-v', action='count', default=0,
                        help='Increase log verbosity (-v info, -vv debug)')

    subparsers = parser.add_subparsers(dest='command', help='Command')

    # Serve
    serve_p = subparsers.add_parser('serve', help='Run the exporter')
    _add_gateway_args(serve_p)
    serve_p.add_argument('--web.listen-address', dest='listen_address',
                         default=os.getenv('LISTEN_ADDRESS', ':9290'),
                         help='Address to listen on for telemetry (env: LISTEN_ADDRESS)')
    serve_p.add_argument('--web.telemetry-path', dest='metrics_path',
                         default=os.getenv('METRIC_PATH', '/metrics'),
                         help='Path under which to expose metrics (env: METRIC_PATH)')
    serve_p.add_argument('--web.python-metrics', dest='python_metrics', action='store_true',
                         help='Also expose process, platform and gc metrics')
    serve_p.set_defaults(func=cmd_serve)

    # Show
    show_p = subparsers.add_parser('show', help='Run one scrape and print the result')
    _add_gateway_args(show_p)
    show_p.add_argument('--limit', type=int, default=20,
                        help='Buckets to list (default: 20)')
    show_p.set_defaults(func=cmd_show)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return

    setup_logging(args.verbose)

    if not args.access_key or not args.secret_key:
        parser.error('--radosgw.access-key and --radosgw.access-secret are required')

    args.func(args)


if __name__ == '__main__':
    main()
