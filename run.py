#!/usr/bin/env python3
import sys
import os
import logging
import signal
from pathlib import Path

from app import create_app

PROJECT_ROOT = Path(__file__).parent


def setup_logging():
    """Setup logging configuration"""
    log_level = logging.DEBUG if os.getenv('FLASK_DEBUG', 'False').lower() == 'true' else logging.INFO

    handlers = [logging.StreamHandler(sys.stdout)]

    # Add file handler if enabled
    if os.getenv('LOG_TO_FILE', 'False').lower() == 'true':
        log_dir = PROJECT_ROOT / 'logs'
        log_dir.mkdir(exist_ok=True)
        file_handler = logging.FileHandler(log_dir / 'compass_navi.log')
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        ))
        handlers.append(file_handler)

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers
    )
    # Reduce noisy third-party loggers
    logging.getLogger('urllib3').setLevel(logging.WARNING)
    logging.getLogger('werkzeug').setLevel(logging.WARNING)


def setup_signal_handlers(app):
    """Setup graceful shutdown signal handlers"""
    def signal_handler(signum, frame):
        logging.info(f"Received signal {signum}, shutting down gracefully...")

        try:
            manager = app.extensions.get('compass_manager')
            if manager and manager.is_running:
                logging.info("Stopping compass...")
                manager.stop()
        except Exception as e:
            logging.error(f"Error stopping compass: {e}")

        logging.info("Shutdown complete")
        sys.exit(0)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)


def validate_environment():
    """Validate environment and configuration"""
    errors = []
    warnings = []

    if sys.version_info < (3, 8):
        errors.append(f"Python 3.8+ required, got {sys.version}")

    env_file = PROJECT_ROOT / '.env'
    if not env_file.exists():
        warnings.append(".env file not found - using defaults")

    for name, default in (('DESTINATION_STORE_PATH', 'data/destinations.json'),
                          ('SNAPSHOT_PATH', 'data/navi_snapshot.json')):
        parent = Path(os.getenv(name, default)).parent
        try:
            parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            errors.append(f"Cannot create directory for {name} ({parent}): {e}")

    if errors:
        for error in errors:
            logging.error(f"❌ {error}")
        logging.error("Cannot start application due to validation errors")
        sys.exit(1)

    if warnings:
        for warning in warnings:
            logging.warning(f"⚠️  {warning}")

    logging.info("✅ Environment validation passed")


def main():
    """Main application entry point"""
    setup_logging()

    logger = logging.getLogger(__name__)
    logger.info("Compass navi starting...")

    try:
        validate_environment()

        logger.info("🧭 Initializing direction coordinator...")
        app = create_app()

        setup_signal_handlers(app)

        host = os.getenv('FLASK_HOST', '0.0.0.0')
        port = int(os.getenv('FLASK_PORT', '5002'))
        debug = os.getenv('FLASK_DEBUG', 'False').lower() == 'true'

        logger.info("🌐 API configuration:")
        logger.info(f"   Host: {host}")
        logger.info(f"   Port: {port}")
        logger.info(f"   Debug: {debug}")
        logger.info(f"   URLs: http://{host}:{port}")
        if host == '0.0.0.0':
            logger.info(f"         http://localhost:{port}")

        logger.info("🚀 Starting Flask development server...")
        app.run(
            host=host,
            port=port,
            debug=debug,
            threaded=True,
            use_reloader=False  # reloader would start a second control loop
        )

    except KeyboardInterrupt:
        logger.info("Application interrupted by user")
    except Exception as e:
        logger.error(f"Failed to start application: {e}", exc_info=True)
        sys.exit(1)


if __name__ == '__main__':
    main()
