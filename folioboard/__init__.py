"""
Folioboard - Portfolio projects for Flask
=========================================

A public project gallery and an admin dashboard for a portfolio site,
backed by a hosted backend-as-a-service (Supabase) for auth, rows and
image storage.

Usage:
    from flask import Flask
    from folioboard import Folioboard

    app = Flask(__name__)
    Folioboard(app)

    # /projects/                 - public gallery
    # /admin/projects-editor/    - admin dashboard
"""

__version__ = '0.1.0'

from .extension import Folioboard

__all__ = ['Folioboard']
