# backend/managefy/__init__.py
import os

from flask import Flask, request
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import HTTPException

from .config import Config
from .errors import ManagefyError
from .extensions import db, migrate
from .json_provider import ManagefyJSONProvider
from .responses import IdConverter, envelope


MIGRATIONS_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "migrations")


def create_app(overrides: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    # Decimal in, Decimal-as-number out
    app.json = ManagefyJSONProvider(app)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db, directory=MIGRATIONS_DIR)

    from .services.mail_service import init_mail
    init_mail(app)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    app.url_map.converters["id"] = IdConverter

    # Register blueprints
    from .routes.users import users_bp
    from .routes.businesses import businesses_bp
    from .routes.user_roles import user_roles_bp
    from .routes.clients import clients_bp
    from .routes.suppliers import suppliers_bp
    from .routes.products import products_bp
    from .routes.sales import sales_bp
    from .routes.notifications import notifications_bp
    from .routes.error_logs import error_logs_bp

    app.register_blueprint(users_bp)
    app.register_blueprint(businesses_bp)
    app.register_blueprint(user_roles_bp)
    app.register_blueprint(clients_bp)
    app.register_blueprint(suppliers_bp)
    app.register_blueprint(products_bp)
    app.register_blueprint(sales_bp)
    app.register_blueprint(notifications_bp)
    app.register_blueprint(error_logs_bp)

    register_error_handlers(app)

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    if app.config.get("MIGRATIONS_RUN"):
        from .services.seed_service import seed_demo_data
        with app.app_context():
            db.create_all()
            if seed_demo_data():
                app.logger.info("Demo data inserted on startup")

    return app


def register_error_handlers(app: Flask) -> None:
    """
    Map every failure to the {data, statusCode, message} envelope.

    The envelope is built first; the Error Log row is written afterwards
    in its own commit, and a failure there never changes the response.
    """
    from .services.error_log_service import record_backend_error

    def _discard_transaction():
        try:
            db.session.rollback()
        except Exception:
            app.logger.exception("Rollback failed while handling an error")

    @app.errorhandler(ManagefyError)
    def handle_managefy_error(exc: ManagefyError):
        _discard_transaction()
        response = envelope(None, exc.status_code, exc.message)
        record_backend_error(exc.message, exc.status_code)
        return response

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(exc: IntegrityError):
        _discard_transaction()
        app.logger.warning("Integrity error: %s", exc.orig)
        message = "Constraint violated: duplicated or invalid data"
        response = envelope(None, 400, message)
        record_backend_error(f"{message} ({exc.orig})", 400)
        return response

    @app.errorhandler(HTTPException)
    def handle_http_exception(exc: HTTPException):
        if exc.code in (404, 405):
            status_code, message = 404, f"Route not found: {request.url}"
        else:
            status_code, message = exc.code or 500, exc.description or exc.name
        response = envelope(None, status_code, message)
        record_backend_error(message, status_code)
        return response

    @app.errorhandler(Exception)
    def handle_unexpected_error(exc: Exception):
        app.logger.exception("Unhandled error on %s %s", request.method, request.path)
        _discard_transaction()
        response = envelope(None, 500, "Internal server error")
        record_backend_error(f"{type(exc).__name__}: {exc}", 500)
        return response
