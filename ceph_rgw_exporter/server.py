"""
HTTP exposition: metrics endpoint plus a small landing page.
"""

import logging
import socket
from socketserver import ThreadingMixIn
from wsgiref.simple_server import WSGIRequestHandler, WSGIServer, make_server

from prometheus_client import (
    GC_COLLECTOR,
    PLATFORM_COLLECTOR,
    PROCESS_COLLECTOR,
    CollectorRegistry,
    Info,
    make_wsgi_app,
)

from . import __version__
from .collector import RGWStatsCollector
from .models import ExporterConfig
from .rgw_client import RGWAdminClient

logger = logging.getLogger(__name__)

LANDING_PAGE = """<html>
<head><title>Ceph RGW Exporter</title></head>
<body>
<h1>Ceph RGW Exporter</h1>
<p><a href='{metrics_path}'>Metrics</a></p>
</body>
</html>
"""


class _ThreadingWSGIServer(ThreadingMixIn, WSGIServer):
    """One thread per request so a slow scrape does not block the landing page."""
    daemon_threads = True


class _ThreadingWSGIServerV6(_ThreadingWSGIServer):
    address_family = socket.AF_INET6


def server_class(host: str):
    """Pick the IPv6 server for literal IPv6 listen hosts such as '::'."""
    if ':' in host:
        return _ThreadingWSGIServerV6
    return _ThreadingWSGIServer


class _QuietHandler(WSGIRequestHandler):
    def log_message(self, format, *args):
        logger.debug("%s - %s", self.address_string(), format % args)


def build_registry(config: ExporterConfig, client: RGWAdminClient) -> CollectorRegistry:
    """Fresh registry holding the RGW collector and build info."""
    registry = CollectorRegistry()

    registry.register(RGWStatsCollector(client, quota_workers=config.quota_workers))

    build_info = Info('ceph_rgw_exporter_build', 'Exporter build information', registry=registry)
    build_info.info({'version': __version__})

    if config.python_metrics:
        for collector in (PROCESS_COLLECTOR, PLATFORM_COLLECTOR, GC_COLLECTOR):
            registry.register(collector)

    return registry


def make_app(registry: CollectorRegistry, metrics_path: str = "/metrics"):
    """WSGI app routing metrics_path to the registry and / to the landing page."""
    metrics_app = make_wsgi_app(registry)
    landing = LANDING_PAGE.format(metrics_path=metrics_path).encode('utf-8')

    def app(environ, start_response):
        path = environ.get('PATH_INFO', '/')
        if path == metrics_path:
            return metrics_app(environ, start_response)
        if path == '/':
            start_response('200 OK', [('Content-Type', 'text/html; charset=utf-8'),
                                      ('Content-Length', str(len(landing)))])
            return [landing]
        start_response('404 Not Found', [('Content-Type', 'text/plain')])
        return [b'Not Found\n']

    return app


def serve(config: ExporterConfig, client: RGWAdminClient = None):
    """Run the exporter until interrupted."""
    client = client or RGWAdminClient.from_config(config)
    registry = build_registry(config, client)
    app = make_app(registry, config.metrics_path)

    host, port = config.listen_host_port()
    httpd = make_server(host, port, app,
                        server_class=server_class(host),
                        handler_class=_QuietHandler)

    logger.info("Starting ceph_rgw_exporter %s", __version__)
    logger.info("Gateway: %s", config.gateway_url)
    logger.info("Listening on %s:%d%s", host, port, config.metrics_path)

    try:
        httpd.serve_forever()
    finally:
        httpd.server_close()
        client.close()
