import os
from dotenv import load_dotenv

load_dotenv()

IS_PRODUCTION = (
    os.getenv('ENVIRONMENT') == 'production' or
    os.getenv('FLASK_ENV') == 'production' or
    os.getenv('PRODUCTION') == '1'
)

DB_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'databases')


class Config:
    SECRET_KEY = os.getenv('FLASK_SECRET_KEY', 'dev-secret-key-change-in-production')

    DB_DIR = DB_DIR
    LOG_DB = os.path.join(DB_DIR, 'app_logs.db')

    # Supabase project (use GATEWAY_BACKEND=memory to run without one)
    SUPABASE_URL = os.getenv('SUPABASE_URL') or '<SUPABASE_URL>'
    SUPABASE_ANON_KEY = os.getenv('SUPABASE_ANON_KEY') or '<SUPABASE_ANON_KEY>'
    GATEWAY_BACKEND = os.getenv('GATEWAY_BACKEND', 'supabase')

    # Sign-in for the memory backend only
    DEV_ADMIN_EMAIL = os.getenv('DEV_ADMIN_EMAIL', 'admin@example.com')
    DEV_ADMIN_PASSWORD = os.getenv('DEV_ADMIN_PASSWORD', 'admin')

    BRAND_NAME = 'My Portfolio'
