import logging
import os

from flask import Flask, jsonify
from flask_cors import CORS

import database
from config import load_app_config

logging.basicConfig(
    level=logging.INFO,
    format="[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

# .env is loaded from the project root by the config package
config = load_app_config()

app = Flask(__name__)

CORS(app, origins=config.cors_origins)

# ============================================================================
# SECURITY CONFIGURATION
# ============================================================================

app.config["SECRET_KEY"] = os.getenv("FLASK_SECRET_KEY", os.urandom(32).hex())

# Bound request bodies (statement uploads); larger requests get 413
app.config["MAX_CONTENT_LENGTH"] = config.max_upload_bytes

# ============================================================================
# MIDDLEWARE
# ============================================================================

from middleware.proxy_fix import init_app as init_proxy_fix
from middleware.rate_limiter import init_app as init_rate_limiter
from middleware.security_headers import init_app as init_security_headers

init_proxy_fix(app, config)
init_security_headers(app)
init_rate_limiter(app, config)

# ============================================================================
# REGISTER BLUEPRINTS
# ============================================================================

from routes import email_bp, health_bp, ledger_bp, reconciliation_bp

app.register_blueprint(health_bp)
app.register_blueprint(ledger_bp)
app.register_blueprint(email_bp)
app.register_blueprint(reconciliation_bp)


@app.errorhandler(413)
def request_too_large(error):
    return (
        jsonify({"error": f"File too large (max {config.max_upload_mb}MB)"}),
        413,
    )


@app.errorhandler(404)
def not_found(error):
    return jsonify({"error": "Not found"}), 404


# Create tables that do not exist yet (migrations handle changes)
database.init_db()


# ============================================================================
# APPLICATION STARTUP
# ============================================================================

if __name__ == "__main__":
    port = int(os.getenv("PORT", "5000"))

    print("\n" + "=" * 50)
    print("Receipt Ledger Backend Starting...")
    print("=" * 50)
    print(f"API available at: http://localhost:{port}")
    print(f"Test health: http://localhost:{port}/api/health")
    print("=" * 50 + "\n")

    app.run(
        debug=os.getenv("FLASK_ENV") == "development",
        use_reloader=False,
        host="0.0.0.0",
        port=port,
    )
