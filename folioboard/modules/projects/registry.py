"""
Dashboard Registry
==================

Keeps one DashboardController per admin browser, keyed by an id stored in
the Flask session cookie. Each controller gets its own gateway (and so its
own auth session) and its own preview store.
"""

import logging
import threading
import time
import uuid

from .controller import DashboardController

logger = logging.getLogger(__name__)


class ControllerRegistry:
    """Creates, looks up and evicts dashboard controllers"""

    def __init__(self, gateway_factory, idle_seconds=3600, clock=time.monotonic):
        self.gateway_factory = gateway_factory
        self.idle_seconds = idle_seconds
        self.clock = clock
        self._controllers = {}
        self._last_seen = {}
        self._lock = threading.Lock()

    def new_key(self):
        return uuid.uuid4().hex

    def get(self, key, persisted_session=None):
        """Controller for key, created (and its session restored) on first use"""
        with self._lock:
            self._evict_idle()
            controller = self._controllers.get(key)
            if controller is None:
                gateway = self.gateway_factory()
                if persisted_session is not None:
                    gateway.restore_session(persisted_session)
                controller = DashboardController(gateway)
                self._controllers[key] = controller
            self._last_seen[key] = self.clock()
            return controller

    def discard(self, key):
        with self._lock:
            controller = self._controllers.pop(key, None)
            self._last_seen.pop(key, None)
        if controller is not None:
            controller.close()

    def _evict_idle(self):
        now = self.clock()
        stale = [k for k, seen in self._last_seen.items() if now - seen > self.idle_seconds]
        for key in stale:
            logger.info("Evicting idle dashboard %s", key)
            self._controllers.pop(key).close()
            del self._last_seen[key]

    def __len__(self):
        return len(self._controllers)

    def __contains__(self, key):
        return key in self._controllers
