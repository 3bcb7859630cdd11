"""
Projects Public Routes
======================

Public-facing project portfolio pages and API.
"""

from flask import current_app, jsonify, render_template

from . import projects_public_bp
from .renderer import GalleryRenderer


def _renderer():
    gateway = current_app.extensions['folioboard'].public_gateway
    return GalleryRenderer(gateway, sender=current_app._get_current_object())


@projects_public_bp.app_template_filter('public_url')
def public_url_filter(path):
    """Resolve a bucket path (or pass through an absolute URL) for templates."""
    gateway = current_app.extensions['folioboard'].public_gateway
    return gateway.public_url(path) or ''


# ===== Routes =====

@projects_public_bp.route('/')
def projects_list():
    """Public projects page - featured strip and every project."""
    containers = _renderer().hydrate(featured=True, all_projects=True)
    return render_template('projects_public/projects.html', containers=containers)


@projects_public_bp.route('/featured')
def featured_projects():
    """Featured container on its own, for embedding in a home page."""
    containers = _renderer().hydrate(featured=True, all_projects=False)
    return render_template('projects_public/featured.html', container=containers['featured'])


# ===== API Routes =====

@projects_public_bp.route('/api/projects', methods=['GET'])
def get_projects():
    """Card view models for both containers - public endpoint."""
    return jsonify(_renderer().hydrate(featured=True, all_projects=True))
