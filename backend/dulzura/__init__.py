# backend/dulzura/__init__.py
from flask import Flask, request, jsonify
from werkzeug.exceptions import HTTPException

from .config import Config
from .errors import AppError
from .extensions import db, migrate


def create_app(overrides: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Storage backend and content repository are picked once, here
    from .services.photo_storage import build_photo_storage
    from .services.photo_service import PhotoService
    from .services.digital_content_service import build_repository

    app.extensions["photo_service"] = PhotoService(build_photo_storage(app.config))
    app.extensions["digital_content_repository"] = build_repository(app.config)

    # Register blueprints
    from .routes.system import system_bp
    from .routes.auth import auth_bp
    from .routes.categories import categories_bp
    from .routes.products import products_bp
    from .routes.ingredients import ingredients_bp
    from .routes.recipes import recipes_bp
    from .routes.sales import sales_bp
    from .routes.photos import photos_bp
    from .routes.digital_content import content_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(categories_bp)
    app.register_blueprint(products_bp)
    app.register_blueprint(ingredients_bp)
    app.register_blueprint(recipes_bp)
    app.register_blueprint(sales_bp)
    app.register_blueprint(photos_bp)
    app.register_blueprint(content_bp)

    is_production = app.config.get("APP_ENV") == "production"

    if not is_production:
        @app.before_request
        def log_request():
            app.logger.info("%s %s", request.method, request.path)

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        allowed_origins = set(app.config.get("CORS_ORIGINS") or [])
        if origin in allowed_origins:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Credentials"] = "true"
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,DELETE,PATCH,OPTIONS"
        return response

    @app.errorhandler(AppError)
    def handle_app_error(e: AppError):
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        if e.code == 404:
            message = "Ruta no encontrada"
        elif e.code == 413:
            message = "El archivo excede el tamaño máximo permitido"
        else:
            message = e.description
        return jsonify({"success": False, "message": message}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(e: Exception):
        db.session.rollback()
        app.logger.exception("Unhandled error on %s %s", request.method, request.path)
        message = "Error interno del servidor" if is_production else str(e)
        return jsonify({"success": False, "message": message}), 500

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
