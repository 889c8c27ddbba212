"""
Flask application factory.

Creates and configures the Flask app, registers all blueprints.
"""
from flask import Flask


def create_app():
    """Create and configure the Flask application."""
    from planning_sync.config import SECRET_KEY
    from planning_sync.database import import_models
    from planning_sync.logging_config import configure_logging

    app = Flask(__name__)

    configure_logging(app)

    app.secret_key = SECRET_KEY
    app.json.sort_keys = False

    from planning_sync.routes.health import bp as health_bp
    from planning_sync.routes.api import bp as api_bp

    app.register_blueprint(health_bp)
    app.register_blueprint(api_bp)

    # Models must be imported so Base.metadata knows about them.
    # Schema is managed by Alembic; init_db() is only for the seed script.
    import_models()

    return app
