"""
In-Memory Gateway
=================

Dictionary-backed gateway for local development (GATEWAY_BACKEND=memory)
and tests. Behaves like the hosted backend: ids and created_at are assigned
on insert, uploads overwrite, removing a missing object is a no-op.

Failures can be injected per operation with ``fail_next``.
"""

import copy
import time
import uuid
from datetime import datetime, timedelta, timezone

from ..core.storage import is_absolute_url
from .base import BackendGateway
from .errors import AuthError, DataError
from .models import Project, Session

SESSION_TTL = 3600


class InMemoryGateway(BackendGateway):
    """Backend gateway that keeps rows and objects in process memory"""

    def __init__(self, users=None, base_url='http://localhost:54321', bucket='project-images',
                 store=None):
        super().__init__()
        self.users = dict(users or {})
        self.base_url = base_url.rstrip('/')
        self.bucket = bucket
        # Shared between gateways created for different admin sessions
        self.store = store if store is not None else {'rows': {}, 'objects': {}}
        self.failures = {}
        self.calls = []
        self._clock = datetime(2024, 1, 1, tzinfo=timezone.utc)

    @property
    def rows(self):
        return self.store['rows']

    @property
    def objects(self):
        return self.store['objects']

    def fail_next(self, operation, error):
        """Make the next call to ``operation`` raise ``error``"""
        self.failures[operation] = error

    def _record(self, operation, *args):
        self.calls.append((operation,) + args)
        error = self.failures.pop(operation, None)
        if error is not None:
            raise error

    def _next_created_at(self):
        # Strictly increasing so newest-first ordering is deterministic
        latest = max((r['created_at'] for r in self.rows.values()), default=None)
        stamp = self._clock if latest is None else datetime.fromisoformat(latest) + timedelta(seconds=1)
        return stamp.isoformat()

    # ===== Auth =====

    def sign_in(self, email, password):
        self._record('sign_in', email)
        if not email or self.users.get(email) != password:
            raise AuthError('Invalid login credentials', status_code=400)
        session = Session(
            access_token=uuid.uuid4().hex,
            refresh_token=uuid.uuid4().hex,
            expires_at=int(time.time()) + SESSION_TTL,
            user_email=email,
        )
        self._set_session(session)
        return session

    def sign_out(self):
        self._record('sign_out')
        self._set_session(None)

    # ===== Rows =====

    def list_projects(self):
        self._record('list_projects')
        ordered = sorted(self.rows.values(), key=lambda r: r['created_at'], reverse=True)
        return [Project.from_row(copy.deepcopy(r)) for r in ordered]

    def insert_project(self, fields):
        self._record('insert_project', dict(fields))
        row = {
            'title': None, 'summary': None, 'tech_stack': None, 'launched_on': None,
            'cta_url': None, 'is_featured': False, 'thumbnail_url': None,
            'gallery_urls': [], 'gallery_interval': None,
        }
        row.update(copy.deepcopy(fields))
        row['id'] = uuid.uuid4().hex
        row['created_at'] = self._next_created_at()
        self.rows[row['id']] = row
        return Project.from_row(copy.deepcopy(row))

    def update_project(self, project_id, fields):
        self._record('update_project', project_id, dict(fields))
        row = self.rows.get(project_id)
        if row is None:
            raise DataError('JSON object requested, multiple (or no) rows returned')
        changes = copy.deepcopy(fields)
        changes.pop('id', None)
        changes.pop('created_at', None)
        row.update(changes)
        return Project.from_row(copy.deepcopy(row))

    def delete_project(self, project_id):
        self._record('delete_project', project_id)
        self.rows.pop(project_id, None)

    # ===== Blobs =====

    def upload(self, path, file):
        self._record('upload', path)
        self.objects[path] = file.content

    def remove(self, paths):
        filtered = [p for p in (paths or []) if p]
        if not filtered:
            return
        self._record('remove', list(filtered))
        for path in filtered:
            self.objects.pop(path, None)

    def public_url(self, path):
        if not path:
            return None
        if is_absolute_url(path):
            return path
        return f"{self.base_url}/storage/v1/object/public/{self.bucket}/{path}"
