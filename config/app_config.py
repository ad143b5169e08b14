import os
from dotenv import load_dotenv

load_dotenv()


class AppConfig:
    """
    Main application configuration

    Consolidates HTTP, CORS and logging settings for the Dustbin Monitor
    """

    # Flask configuration
    FLASK_HOST = os.getenv('FLASK_HOST', '0.0.0.0')
    FLASK_PORT = int(os.getenv('FLASK_PORT', 5000))
    FLASK_DEBUG = os.getenv('FLASK_DEBUG', 'False').lower() == 'true'

    # CORS allow-list (comma-separated). Empty means every origin is allowed.
    ALLOWED_ORIGINS = os.getenv('ALLOWED_ORIGINS', '')

    # Logging configuration
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    LOG_FILE = os.getenv('LOG_FILE', './logs/dustbin_monitor.log')
    LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

    @classmethod
    def get_log_level(cls):
        """Convert string log level to logging constant"""
        import logging
        levels = {
            'DEBUG': logging.DEBUG,
            'INFO': logging.INFO,
            'WARNING': logging.WARNING,
            'ERROR': logging.ERROR,
            'CRITICAL': logging.CRITICAL
        }
        return levels.get(cls.LOG_LEVEL.upper(), logging.INFO)

    @classmethod
    def get_allowed_origins(cls):
        """
        Parse the CORS allow-list

        Returns:
            List of origins, or "*" when no allow-list is configured
        """
        origins = [o.strip() for o in cls.ALLOWED_ORIGINS.split(',') if o.strip()]
        return origins or '*'
