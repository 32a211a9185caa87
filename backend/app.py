from typing import Dict, Optional

from flask import Flask, Response, jsonify
from flask_cors import CORS
from flask_jwt_extended import JWTManager
from flask_pymongo import PyMongo
from pymongo.errors import PyMongoError
from werkzeug.middleware.proxy_fix import ProxyFix

from .auth import AuthorizationGate, CredentialService
from .catalog import Catalog
from .config import build_config
from .errors import ApiError
from .notifications import OrderNotifier
from .orders import OrderWorkflow
from .reports import ReportingEngine
from .routes import register_routes
from .store import MarketStore
from .users import UserDirectory


def create_app(
    config: Optional[Dict[str, object]] = None,
    database=None,
    notifier=None,
) -> Flask:
    """Create and configure the Flask application.

    ``database`` is a pymongo-compatible database; when omitted one is opened
    from ``MONGO_URI``. ``notifier`` defaults to the Resend order notifier.
    """
    app = Flask(__name__)
    app.config.update(build_config(config))
    app.logger.setLevel(app.config["LOG_LEVEL"])

    # Honor proxy headers so secure cookies survive TLS termination upstream.
    trusted_proxy_hops = app.config.get("TRUSTED_PROXY_HOPS", 0)
    if trusted_proxy_hops:
        app.wsgi_app = ProxyFix(
            app.wsgi_app,
            x_for=trusted_proxy_hops,
            x_proto=trusted_proxy_hops,
            x_host=trusted_proxy_hops,
            x_port=trusted_proxy_hops,
        )

    # --- Initialize extensions ---
    CORS(app, supports_credentials=True, origins=app.config["CORS_ORIGINS"])

    JWTManager(app)

    if database is None:
        database = PyMongo(app).db
    store = MarketStore(database)
    app.extensions["market_store"] = store

    if notifier is None:
        notifier = OrderNotifier(
            app.config["RESEND_API_KEY"], app.config["ORDER_SENDER_EMAIL"]
        )
        if not app.config["RESEND_API_KEY"]:
            app.logger.warning("RESEND_API_KEY is not set; order emails will not be sent.")

    # --- Services ---
    catalog = Catalog(store)
    register_routes(
        app,
        credentials=CredentialService(),
        gate=AuthorizationGate(store),
        users=UserDirectory(store),
        catalog=catalog,
        workflow=OrderWorkflow(store, catalog, notifier),
        reports=ReportingEngine(store),
    )

    # --- Error handlers ---
    @app.errorhandler(ApiError)
    def handle_api_error(error: ApiError):
        if error.as_text:
            return Response(error.message, status=error.status_code, mimetype="text/plain")
        return jsonify({"message": error.message}), error.status_code

    @app.errorhandler(PyMongoError)
    def handle_store_error(error: PyMongoError):
        app.logger.exception("Database operation failed: %s", error)
        return jsonify({"message": "Internal server error"}), 500

    return app
