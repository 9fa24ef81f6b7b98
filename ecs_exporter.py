"""
ECS exporter

Serves Prometheus metrics describing the Amazon ECS inventory of one region,
optionally across several AWS accounts ("islands") reached by assuming a role
per account. Every scrape of the telemetry path runs one collection:

  - ecs_up / ecs_clusters_total per island
  - ecs_services_total per cluster
  - desired / pending / running task counts and deployment count per service

Configuration comes from CLI flags, each defaulting to an ECS_EXPORTER_*
environment variable (see ecs_toolset/config.py), plus an optional YAML file:

    roles:
      blue: arn:aws:iam::111111111111:role/ecs-exporter
      green: arn:aws:iam::222222222222:role/ecs-exporter
"""

from __future__ import annotations

import argparse
import logging
import socket
import sys
from typing import Callable, Iterable, List, Optional, Tuple
from wsgiref.simple_server import WSGIRequestHandler, WSGIServer, make_server

from prometheus_client import (
    CollectorRegistry,
    GCCollector,
    PlatformCollector,
    ProcessCollector,
    make_wsgi_app,
)
from prometheus_client.exposition import ThreadingWSGIServer

from core.metrics import build_metrics
from ecs_collectors.collector import ECSCollector
from ecs_collectors.errors import ConfigError
from ecs_toolset import config as const
from ecs_toolset.settings import load_config

LOGGER = logging.getLogger("ecs_exporter")

LANDING_PAGE = """<html>
<head><title>ECS Exporter</title></head>
<body>
<h1>ECS Exporter</h1>
<p><a href='{path}'>Metrics</a></p>
</body>
</html>"""


class _QuietHandler(WSGIRequestHandler):
    """Route request logs through logging at debug level instead of stderr."""

    def log_message(self, format, *args):  # pylint: disable=redefined-builtin
        LOGGER.debug("[http] %s - %s", self.address_string(), format % args)


class _DualStackServer(ThreadingWSGIServer):
    """Threaded WSGI server whose IPv6 sockets also accept IPv4 clients."""

    def server_bind(self):
        if self.address_family == socket.AF_INET6:
            try:
                self.socket.setsockopt(socket.IPPROTO_IPV6, socket.IPV6_V6ONLY, 0)
            except (AttributeError, OSError) as exc:
                LOGGER.debug("[http] IPv6 socket stays v6-only: %s", exc)
        super().server_bind()


def _server_class(family: int) -> type:
    class _Server(_DualStackServer):
        address_family = family
    return _Server


def parse_listen_address(address: str) -> Tuple[str, int]:
    """Split 'host:port' (host optional, IPv6 in brackets) into a (host, port) pair.

    An empty host means every interface.
    """
    host, sep, port = address.rpartition(":")
    if not sep or not port.isdigit():
        raise ValueError(f"invalid listen address: {address!r}")
    return host.strip("[]"), int(port)


def _resolve_bind(host: str, port: int) -> Tuple[int, str]:
    """Pick the socket family and literal address to bind for ``host``."""
    if not host:
        return (socket.AF_INET6, "::") if socket.has_ipv6 else (socket.AF_INET, "0.0.0.0")
    infos = socket.getaddrinfo(host, port, type=socket.SOCK_STREAM, flags=socket.AI_PASSIVE)
    family, _, _, _, sockaddr = infos[0]
    return family, sockaddr[0]


def make_http_server(host: str, port: int, app: Callable) -> WSGIServer:
    """Bind the exporter's HTTP server; raises OSError when the address is unusable.

    An empty host listens on IPv6 and IPv4 together, or on IPv4 alone when the
    host has no IPv6 stack.
    """
    family, addr = _resolve_bind(host, port)
    try:
        return make_server(addr, port, app, server_class=_server_class(family), handler_class=_QuietHandler)
    except OSError as exc:
        if host or family != socket.AF_INET6:
            raise
        LOGGER.debug("[http] cannot bind [::]:%d (%s), using 0.0.0.0", port, exc)
        return make_server(
            "0.0.0.0", port, app, server_class=_server_class(socket.AF_INET), handler_class=_QuietHandler
        )


def build_registry(collector: ECSCollector) -> CollectorRegistry:
    """Registry with the ECS collector plus the process, platform and GC collectors."""
    registry = CollectorRegistry()
    ProcessCollector(registry=registry)
    PlatformCollector(registry=registry)
    GCCollector(registry=registry)
    registry.register(collector)
    return registry


def build_app(registry: CollectorRegistry, telemetry_path: str) -> Callable:
    """WSGI app: metrics on ``telemetry_path``, landing page on '/', 404 elsewhere."""
    metrics_app = make_wsgi_app(registry)
    landing = LANDING_PAGE.format(path=telemetry_path).encode("utf-8")

    def app(environ, start_response) -> Iterable[bytes]:
        path = environ.get("PATH_INFO", "/") or "/"
        if path == telemetry_path:
            return metrics_app(environ, start_response)
        if path == "/":
            start_response("200 OK", [("Content-Type", "text/html; charset=utf-8")])
            return [landing]
        start_response("404 Not Found", [("Content-Type", "text/plain")])
        return [b"Not Found"]

    return app


def _parse_args(argv: List[str]) -> argparse.Namespace:
    """Parse command-line arguments for the exporter."""
    parser = argparse.ArgumentParser(description="Prometheus exporter for Amazon ECS clusters and services.")
    parser.add_argument(
        "--web.telemetry-path",
        dest="telemetry_path",
        default=const.TELEMETRY_PATH,
        help="The path where metrics will be exposed.",
    )
    parser.add_argument(
        "--web.listen-address",
        dest="listen_address",
        default=const.LISTEN_ADDRESS,
        help="Address to listen on.",
    )
    parser.add_argument(
        "--aws.region",
        dest="region",
        default=const.REGION,
        help="The AWS region to get metrics from.",
    )
    parser.add_argument("--config", default=const.CONFIG_FILE, help="Config file path.")
    parser.add_argument(
        "--page-size",
        type=int,
        default=const.PAGE_SIZE,
        help="Max results per list call and describe_services batch size (default 10).",
    )
    parser.add_argument(
        "--max-workers",
        type=int,
        default=const.MAX_WORKERS,
        help="Cap threads per fan-out level (default: one per task).",
    )
    parser.add_argument("--debug", action="store_true", default=const.DEBUG, help="Run exporter in debug mode.")
    parser.add_argument(
        "--log-level",
        default=const.LOG_LEVEL,
        choices=["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"],
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entrypoint. Returns process exit code."""
    args = _parse_args(list(sys.argv[1:] if argv is None else argv))
    logging.basicConfig(
        stream=sys.stdout,
        level=logging.DEBUG if args.debug else getattr(logging, args.log_level),
        format="%(asctime)s [%(levelname)s] %(name)s %(message)s",
    )

    try:
        cfg = load_config(args.config)
    except ConfigError as exc:
        LOGGER.error("Error loading config: %s", exc)
        return 2
    if not args.region:
        LOGGER.error("Please supply an AWS region")
        return 2
    if args.page_size < 1:
        LOGGER.error("--page-size must be >= 1 (got %d)", args.page_size)
        return 2
    try:
        host, port = parse_listen_address(args.listen_address)
    except ValueError as exc:
        LOGGER.error("%s", exc)
        return 2

    registry = build_registry(
        ECSCollector(
            args.region,
            build_metrics(const.NAMESPACE),
            cfg.roles,
            page_size=args.page_size,
            max_workers=args.max_workers,
            logger=logging.getLogger("ecs_collectors"),
        )
    )

    try:
        httpd = make_http_server(host, port, build_app(registry, args.telemetry_path))
    except OSError as exc:
        LOGGER.error("Cannot listen on %s: %s", args.listen_address, exc)
        return 2
    bound_host, bound_port = httpd.server_address[:2]
    LOGGER.info(
        "Listening on %s:%d (islands: %s)", bound_host, bound_port, ", ".join(sorted(cfg.roles)) or "default"
    )
    try:
        httpd.serve_forever()
    except KeyboardInterrupt:
        LOGGER.info("Shutting down")
    finally:
        httpd.server_close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
