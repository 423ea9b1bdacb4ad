import logging

from flask import Flask, jsonify
from .extensions import db, migrate, login_manager
from .config import Config
from .errors import Unauthorized, register_error_handlers

from .blueprints.auth.routes import auth_bp
from .blueprints.categories.routes import categories_bp
from .blueprints.expenses.routes import expenses_bp
from .blueprints.budgets.routes import budgets_bp
from .blueprints.dashboard.routes import dashboard_bp


def configure_logging(app):
    level = app.config.get("LOG_LEVEL", "INFO")
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app.logger.setLevel(level)
    logging.getLogger(__name__).setLevel(level)


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)
    configure_logging(app)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)

    @login_manager.unauthorized_handler
    def unauthorized():
        failure = Unauthorized()
        return jsonify(failure.to_dict()), failure.status_code

    # Ensure tables exist for a smooth first run
    with app.app_context():
        from . import models  # noqa: F401
        db.create_all()

    # Register blueprints
    app.register_blueprint(auth_bp)
    app.register_blueprint(categories_bp)
    app.register_blueprint(expenses_bp)
    app.register_blueprint(budgets_bp)
    app.register_blueprint(dashboard_bp)

    register_error_handlers(app)

    @app.route("/health")
    def health():
        return jsonify({"status": "OK", "message": "Server is running"})

    app.logger.info("Expense tracker API ready (%s)", app.config["SQLALCHEMY_DATABASE_URI"].split("://")[0])
    return app
