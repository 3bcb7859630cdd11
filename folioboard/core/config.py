import os
from dotenv import load_dotenv

load_dotenv(override=True)

class Config:
    """
    Base configuration for Folioboard.
    Backend credentials are injected through the environment (or a .env file);
    without them the placeholders below are used and sign-in will fail.
    """
    # Flask settings
    SECRET_KEY = os.getenv('FLASK_SECRET_KEY')

    DB_DIR = os.getenv('DB_DIR', os.path.join(os.getcwd(), 'databases'))
    LOG_DB = os.getenv('LOG_DB', os.path.join(DB_DIR, 'app_logs.db'))

    # Hosted backend (Supabase)
    SUPABASE_URL = os.getenv('SUPABASE_URL') or '<SUPABASE_URL>'
    SUPABASE_ANON_KEY = os.getenv('SUPABASE_ANON_KEY') or '<SUPABASE_ANON_KEY>'

    # Bucket and table names
    STORAGE_BUCKET = os.getenv('STORAGE_BUCKET', 'project-images')
    PROJECTS_TABLE = os.getenv('PROJECTS_TABLE', 'projects')

    # 'supabase' in production, 'memory' for local development without a backend
    GATEWAY_BACKEND = os.getenv('GATEWAY_BACKEND', 'supabase')
    GATEWAY_TIMEOUT = int(os.getenv('GATEWAY_TIMEOUT', '15'))

    # Admin dashboard
    SESSION_STORAGE_KEY = os.getenv('SESSION_STORAGE_KEY', 'folioboard-admin')
    DASHBOARD_IDLE_SECONDS = int(os.getenv('DASHBOARD_IDLE_SECONDS', '3600'))

    BRAND_NAME = os.getenv('BRAND_NAME', 'Folioboard')


PLACEHOLDER_VALUES = ('<SUPABASE_URL>', '<SUPABASE_ANON_KEY>')


def get_config_value(key, default=None):
    """Get configuration value: Flask app config first, then Config, then env var"""
    try:
        from flask import current_app
        val = current_app.config.get(key)
        if val:
            return val
    except RuntimeError:
        pass
    val = getattr(Config, key, None)
    if val:
        return val
    return os.getenv(key, default)
