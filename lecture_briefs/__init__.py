import os

from flask import Flask, jsonify

from .config import load_config
from .extensions import init_extensions
from .logging_config import configure_logging, logger


def create_app(config=None):
    """App factory entrypoint.

    Pass an ``AppConfig`` to skip environment loading, as the tests do.
    """
    config = config or load_config()
    configure_logging(config.log_level)

    app = Flask(__name__)
    app.secret_key = config.flask_secret_key or os.urandom(32).hex()
    init_extensions(app, config)

    from .blueprints import briefs_bp, health_bp

    app.register_blueprint(briefs_bp)
    app.register_blueprint(health_bp)

    @app.errorhandler(404)
    def not_found(_error):
        return jsonify({'error': 'Not found'}), 404

    @app.errorhandler(405)
    def method_not_allowed(_error):
        return jsonify({'error': 'Method not allowed'}), 405

    @app.errorhandler(500)
    def internal_error(error):
        logger.error(f"Unhandled error: {error}")
        return jsonify({'error': 'Internal server error'}), 500

    return app
