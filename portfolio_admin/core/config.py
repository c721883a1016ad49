import os
from dotenv import load_dotenv

load_dotenv(override=True)


class Config:
    """
    Base configuration for the Portfolio Admin backend.
    Deployments provide secrets and database paths via environment variables.
    """
    # Flask settings
    SECRET_KEY = os.getenv('FLASK_SECRET_KEY', 'dev_secret_key_change_me')
    UPLOAD_FOLDER = os.getenv('UPLOAD_FOLDER', os.path.join(os.getcwd(), 'uploads'))
    MAX_UPLOAD_FILES = int(os.getenv('MAX_UPLOAD_FILES', '10'))

    # Comma separated list of allowed origins for the SPA, '*' allows any
    CORS_ORIGINS = os.getenv('CORS_ORIGINS', '*')

    # Auth tokens are valid for two hours
    TOKEN_MAX_AGE = int(os.getenv('TOKEN_MAX_AGE', str(60 * 60 * 2)))

    # Get DB_DIR from environment, or use a default if not set
    DB_DIR = os.getenv('DB_DIR', os.path.join(os.getcwd(), 'databases'))

    # Database paths - use environment variables or fallback to DB_DIR
    USER_DB = os.getenv('USER_DB', os.path.join(DB_DIR, "users.db"))
    PORTFOLIO_DB = os.getenv('PORTFOLIO_DB', os.path.join(DB_DIR, "portfolio.db"))
    ANALYTICS_DB = os.getenv('ANALYTICS_DB', os.path.join(DB_DIR, "analytics_log.db"))

    # S3-compatible object storage for uploads (local UPLOAD_FOLDER when unset)
    S3_BUCKET = os.getenv('S3_BUCKET')
    S3_REGION = os.getenv('S3_REGION', 'us-east-1')
    S3_ENDPOINT_URL = os.getenv('S3_ENDPOINT_URL')
    S3_ACCESS_KEY = os.getenv('S3_ACCESS_KEY')
    S3_SECRET_KEY = os.getenv('S3_SECRET_KEY')
    S3_FOLDER = os.getenv('S3_FOLDER', 'uploads')

    # Port for local server
    port = int(os.getenv('PORT', '5000'))


def get_config_value(key, default=None):
    """Get configuration value: Flask app config first, then Config, then env var"""
    try:
        from flask import current_app
        val = current_app.config.get(key)
        if val is not None:
            return val
    except RuntimeError:
        pass
    val = getattr(Config, key, None)
    if val is not None:
        return val
    return os.getenv(key, default)
