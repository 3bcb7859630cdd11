"""
Projects Admin Module
=====================

Admin interface for project portfolio management.

Provides:
- Operator sign-in against the hosted backend
- Project creation, editing and deletion
- Thumbnail and gallery (up to 10 images) uploads, deferred until save
"""

from flask import Blueprint

projects_bp = Blueprint(
    'projects_admin',
    __name__,
    url_prefix='/admin/projects-editor',
    template_folder='templates',
    static_folder='static',
    static_url_path='/projects/static'
)

from . import routes
from .controller import DashboardController
from .registry import ControllerRegistry

__all__ = ['projects_bp', 'DashboardController', 'ControllerRegistry']
