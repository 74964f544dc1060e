"""
HTTP endpoints: the container status page and Prometheus metrics of this process.
"""
import logging
import threading
from typing import Optional

from flask import Flask, Response, redirect
from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, CollectorRegistry, generate_latest
from werkzeug.serving import make_server

from ..CONVERTERS.to_status_view import StatusViewConverter
from ..MANAGERS.snapshot_store import SnapshotStore
from ..UTILS.host_port import split_host_port

logger = logging.getLogger(__name__)


def create_app(store: SnapshotStore, registry: Optional[CollectorRegistry] = None) -> Flask:
    """
    Builds the Flask application.

    :param store: Source of the latest resolved targets.
    :param registry: Metrics registry to expose, the global one if None.
    :return: The application.
    """
    app = Flask(__name__)
    converter = StatusViewConverter()
    registry = registry if registry is not None else REGISTRY

    @app.route('/containers')
    def containers():
        """Status page of all containers from the latest refresh."""
        view = converter.convert(store.latest())
        return Response(converter.render(view), mimetype='text/html')

    @app.route('/metrics')
    def metrics():
        """Prometheus metrics endpoint."""
        return Response(generate_latest(registry), mimetype=CONTENT_TYPE_LATEST)

    @app.route('/health')
    def health():
        """Health check endpoint."""
        if store.wait_for_first(timeout=0):
            return {'status': 'healthy'}, 200
        return {'status': 'initializing'}, 503

    @app.route('/')
    def root():
        return redirect('/containers', code=303)

    return app


class StatusServer:
    """
    Serves the Flask application on a background thread.
    """
    def __init__(self, app: Flask, http_address: str):
        """
        :param app: The application to serve.
        :param http_address: Listen address, e.g. ':9200'.
        """
        host, port = split_host_port(http_address)
        self.server = make_server(host, port, app, threaded=True)
        self.thread = threading.Thread(target=self.server.serve_forever, name="d2sd-http", daemon=True)

    def start(self):
        logger.info(f"Starting http handler on {self.server.host}:{self.server.port}")
        self.thread.start()

    def stop(self):
        self.server.shutdown()
        self.thread.join(timeout=5)
