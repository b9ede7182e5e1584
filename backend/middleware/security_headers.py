"""
Security headers middleware

Applies protective response headers to every API response: CSP, HSTS on
HTTPS, clickjacking and MIME-sniffing protection, referrer and permissions
policies.
"""

from flask import request

# JSON API: nothing but same-origin fetches and no framing
CSP_DIRECTIVES = (
    "default-src 'self'",
    "connect-src 'self'",
    "img-src 'self' data:",
    "frame-ancestors 'none'",
    "base-uri 'self'",
    "form-action 'self'",
)

PERMISSIONS_POLICY = (
    "geolocation=()",
    "microphone=()",
    "camera=()",
    "payment=()",
    "usb=()",
)


def set_security_headers(response):
    """Apply security headers to a response.

    Args:
        response: Flask response object

    Returns:
        Modified response with security headers
    """
    response.headers["Content-Security-Policy"] = "; ".join(CSP_DIRECTIVES)

    # HSTS is only meaningful over HTTPS
    if request.is_secure:
        response.headers["Strict-Transport-Security"] = (
            "max-age=31536000; includeSubDomains"
        )

    response.headers["X-Frame-Options"] = "DENY"
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    response.headers["Permissions-Policy"] = ", ".join(PERMISSIONS_POLICY)
    response.headers["X-DNS-Prefetch-Control"] = "off"
    response.headers["X-Permitted-Cross-Domain-Policies"] = "none"

    return response


def init_app(app):
    """Register security headers middleware with Flask app.

    Args:
        app: Flask application instance
    """

    @app.after_request
    def apply_security_headers(response):
        return set_security_headers(response)
