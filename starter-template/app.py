"""
Folioboard Starter Template
===========================

A ready-to-run Flask application with the project gallery and admin.

Run with:
    python app.py

Visit:
    http://localhost:5000/projects/                - Public gallery
    http://localhost:5000/admin/projects-editor/   - Admin dashboard
"""

import os

from flask import Flask, redirect, url_for

from config import Config, IS_PRODUCTION
from folioboard import Folioboard

app = Flask(__name__)

app.config['SECRET_KEY'] = Config.SECRET_KEY
app.config['LOG_DB'] = Config.LOG_DB
app.config['BRAND_NAME'] = Config.BRAND_NAME
app.config['GATEWAY_BACKEND'] = Config.GATEWAY_BACKEND
app.config['SUPABASE_URL'] = Config.SUPABASE_URL
app.config['SUPABASE_ANON_KEY'] = Config.SUPABASE_ANON_KEY
app.config['MEMORY_GATEWAY_USERS'] = {Config.DEV_ADMIN_EMAIL: Config.DEV_ADMIN_PASSWORD}

# Session security
app.config['SESSION_COOKIE_SECURE'] = IS_PRODUCTION
app.config['SESSION_COOKIE_HTTPONLY'] = True
app.config['SESSION_COOKIE_SAMESITE'] = 'Lax'

os.makedirs(Config.DB_DIR, exist_ok=True)

folioboard = Folioboard(app)


@app.route('/')
def index():
    """Homepage goes straight to the gallery"""
    return redirect(url_for('projects.projects_list'))


if __name__ == '__main__':
    print("\n" + "=" * 60)
    print("Folioboard Starter Template")
    print("=" * 60)
    print("Gallery:         http://localhost:5000/projects/")
    print("Admin:           http://localhost:5000/admin/projects-editor/")
    print(f"Backend:         {app.config['GATEWAY_BACKEND']}")
    print("=" * 60 + "\n")

    app.run(host='0.0.0.0', port=5000, debug=not IS_PRODUCTION)
