"""
Folioboard Flask extension
==========================

Registers the public gallery and the admin dashboard on a Flask app and
owns the shared objects they use: the read-only public gateway and the
registry of per-browser dashboard controllers.
"""

import logging

from flask import jsonify

from .core.config import Config, PLACEHOLDER_VALUES
from .gateway import InMemoryGateway, create_gateway
from .modules.projects import ControllerRegistry, projects_bp
from .modules.projects_public import projects_public_bp

logger = logging.getLogger(__name__)

DEFAULT_FEATURES = {
    'projects': True,
    'projects_public': True,
}

CONFIG_KEYS = (
    'SUPABASE_URL', 'SUPABASE_ANON_KEY', 'STORAGE_BUCKET', 'PROJECTS_TABLE',
    'GATEWAY_BACKEND', 'GATEWAY_TIMEOUT', 'SESSION_STORAGE_KEY',
    'DASHBOARD_IDLE_SECONDS', 'LOG_DB', 'BRAND_NAME',
)


class Folioboard:
    """Flask extension: ``Folioboard(app)`` or ``Folioboard().init_app(app)``"""

    def __init__(self, app=None, config=None):
        self.app = None
        self._config = {}
        self._registered = []
        self.public_gateway = None
        self.controllers = None
        self._memory_store = None
        if app is not None:
            self.init_app(app, config)

    def init_app(self, app, config=None):
        self.app = app
        self._config = dict(config or {})

        for key in CONFIG_KEYS:
            app.config.setdefault(key, getattr(Config, key))
        if not app.config.get('SECRET_KEY') and Config.SECRET_KEY:
            app.config['SECRET_KEY'] = Config.SECRET_KEY

        features = dict(DEFAULT_FEATURES)
        features.update(self._config.get('features', {}))

        self.public_gateway = self._gateway_factory(app)()
        self.controllers = ControllerRegistry(
            self._gateway_factory(app),
            idle_seconds=int(app.config['DASHBOARD_IDLE_SECONDS']),
        )

        if features.get('projects_public'):
            app.register_blueprint(projects_public_bp)
            self._registered.append('projects_public')
        if features.get('projects'):
            app.register_blueprint(projects_bp)
            self._registered.append('projects')

        app.add_url_rule('/health', 'folioboard_health', self.health)
        app.context_processor(self._inject_context)

        app.extensions['folioboard'] = self
        logger.info("Folioboard registered modules: %s", ', '.join(self._registered))
        return self

    def _gateway_factory(self, app):
        """Callable building a fresh gateway from the app's configuration"""
        backend = app.config['GATEWAY_BACKEND']
        if backend == 'memory':
            # Every gateway shares one store so public and admin views agree
            if self._memory_store is None:
                self._memory_store = {'rows': {}, 'objects': {}}
            users = app.config.get('MEMORY_GATEWAY_USERS', {})

            def build_memory():
                return InMemoryGateway(users=users, bucket=app.config['STORAGE_BUCKET'],
                                       store=self._memory_store)
            return build_memory

        def build():
            with app.app_context():
                return create_gateway(backend)
        return build

    def get_registered_modules(self):
        return list(self._registered)

    def _inject_context(self):
        return {
            'folioboard_config': dict(self._config),
            'brand_name': self.app.config.get('BRAND_NAME') or 'Folioboard',
        }

    def health(self):
        checks = {
            'gateway_backend': self.app.config['GATEWAY_BACKEND'],
            'gateway_configured': True,
            'dashboards': len(self.controllers),
        }
        status = 'ok'
        if self.app.config['GATEWAY_BACKEND'] == 'supabase':
            configured = not any(
                self.app.config.get(key) in PLACEHOLDER_VALUES + (None, '')
                for key in ('SUPABASE_URL', 'SUPABASE_ANON_KEY')
            )
            checks['gateway_configured'] = configured
            if not configured:
                status = 'warning'
        return jsonify({'status': status, 'checks': checks})
