"""
Reverse proxy middleware

Trusts X-Forwarded-For / X-Forwarded-Proto only when TRUSTED_PROXIES says how
many proxies sit in front of the app. With the default of 0 the headers are
ignored and request.remote_addr is the socket peer.
"""

import logging

from werkzeug.middleware.proxy_fix import ProxyFix

from config import load_app_config

logger = logging.getLogger(__name__)


def init_app(app, config=None):
    """Wrap the WSGI app in ProxyFix when trusted proxies are configured.

    Args:
        app: Flask application instance
        config: AppConfig (defaults to load_app_config())
    """
    config = config or load_app_config()
    if not config.trusted_proxies:
        return

    app.wsgi_app = ProxyFix(
        app.wsgi_app,
        x_for=config.trusted_proxies,
        x_proto=config.trusted_proxies,
    )
    logger.info(f"Trusting forwarding headers from {config.trusted_proxies} proxies")
