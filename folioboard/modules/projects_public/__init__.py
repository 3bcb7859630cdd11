"""
Projects Public Module
======================

Public-facing project gallery: a "featured" strip (at most three projects)
and the full list, rendered as cards with a rotating image strip.
"""

from flask import Blueprint

projects_public_bp = Blueprint(
    'projects',
    __name__,
    url_prefix='/projects',
    template_folder='templates'
)

from . import routes
from .renderer import GalleryRenderer, galleries_ready, projects_rendered

__all__ = ['projects_public_bp', 'GalleryRenderer', 'galleries_ready', 'projects_rendered']
