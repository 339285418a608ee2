"""Flask application factory."""
import logging
import os

from flask import Flask
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()


def create_app(config_name: str = "default", selector=None, formatter=None):
    """Create and configure the Flask application.

    Args:
        config_name: Key into ``bleprinter.config.config``
        selector: DeviceSelector override (bleak scanning by default)
        formatter: Currency formatter override
    """
    app = Flask(__name__)

    # Load configuration
    from bleprinter.config import config, PrinterSettings
    app.config.from_object(config[config_name])

    if not app.testing:
        from bleprinter.logging_config import setup_logging
        setup_logging(
            log_level=logging.getLevelName(app.config["LOG_LEVEL"]),
            enable_file_logging=app.config["LOG_TO_FILE"],
        )

    # Initialize extensions
    os.makedirs(app.instance_path, exist_ok=True)
    db.init_app(app)

    # Printer client
    from bleprinter.printer import PrinterRuntime, SettingsDeviceStore, create_print_service
    settings = PrinterSettings.from_mapping(app.config)
    app.extensions["printer"] = {
        "runtime": PrinterRuntime(),
        "service": create_print_service(
            settings,
            store=SettingsDeviceStore(app),
            selector=selector,
            formatter=formatter,
        ),
        "settings": settings,
    }

    # Register blueprints
    from bleprinter.routes.api import api_bp
    app.register_blueprint(api_bp, url_prefix="/api")

    # Create tables
    with app.app_context():
        db.create_all()

    return app
