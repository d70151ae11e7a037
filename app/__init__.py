# ==============================================================================
# app/__init__.py
# ------------------------------------------------------------------------------
# Application factory for creating and configuring the Flask app instance.
# ==============================================================================

import logging
from flask import Flask
from config import Config


def create_app(config_class=Config):
    """
    Application factory function. Creates and configures the Flask application.

    Args:
        config_class (class): The configuration class to use.

    Returns:
        Flask: The configured Flask application instance.
    """
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Configure logging
    logging.basicConfig(level=getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO),
                        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s')

    # Register blueprints with the application
    from app.main import bp as main_bp
    app.register_blueprint(main_bp)

    from app.main.routes import register_error_handlers
    register_error_handlers(app)

    app.logger.info('Outlet Payroll & Incentive Calculator startup complete')

    return app
