"""
Folioboard Modules
==================

Flask blueprint modules: the public projects gallery and the projects admin.
"""

__all__ = ['projects', 'projects_public']
