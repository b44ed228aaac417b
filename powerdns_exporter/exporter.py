#!/usr/bin/env python3
"""
Exporter HTTP service - serves the collector registry to Prometheus
"""

from datetime import datetime

from flask import Flask, Response, jsonify
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, generate_latest

from powerdns_exporter.collector import PowerDNSCollector
from powerdns_exporter.utils.config import Config
from powerdns_exporter.utils.logger import get_logger

logger = get_logger(__name__)

LANDING_PAGE = """<html>
<head><title>PowerDNS Exporter</title></head>
<body>
<h1>PowerDNS Exporter</h1>
<p><a href='{metrics_path}'>Metrics</a></p>
</body>
</html>
"""


def create_app(collector: PowerDNSCollector, metrics_path: str = None) -> Flask:
    """Build the Flask app exposing one PowerDNS collector"""
    metrics_path = metrics_path or Config.METRICS_PATH
    if not metrics_path.startswith('/'):
        metrics_path = '/' + metrics_path
    
    registry = CollectorRegistry()
    registry.register(collector)
    
    app = Flask(__name__)
    app.config['REGISTRY'] = registry
    app.config['COLLECTOR'] = collector
    
    # =============================================
    # ENDPOINTS
    # =============================================
    
    def root():
        """Landing page"""
        return Response(LANDING_PAGE.format(metrics_path=metrics_path), mimetype='text/html')
    
    if metrics_path != '/':
        app.add_url_rule('/', 'root', root, methods=['GET'])
    
    def metrics():
        """Prometheus metrics, one PowerDNS scrape per request"""
        return Response(generate_latest(registry), status=200, headers={'Content-Type': CONTENT_TYPE_LATEST})
    
    app.add_url_rule(metrics_path, 'metrics', metrics, methods=['GET'])
    
    @app.route('/health', methods=['GET'])
    def health():
        """Exporter health, based on the last scrape"""
        state = collector.state
        return jsonify({
            'status': 'healthy' if state.last_up else 'degraded',
            'service': 'powerdns_exporter',
            'server_type': state.server_type,
            'version': state.version,
            'api_url': collector.client.api_url,
            'up': state.last_up,
            'timestamp': datetime.now().isoformat()
        })
    
    logger.info(f"Metrics exposed on {metrics_path}")
    return app
