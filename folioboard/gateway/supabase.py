"""
Supabase Gateway
================

Talks to a Supabase project over its REST surface:
- GoTrue for password sign-in (/auth/v1)
- PostgREST for the projects table (/rest/v1)
- Storage for the images bucket (/storage/v1)
"""

import logging
from urllib.parse import quote

import requests

from ..core.logging_service import db_log
from ..core.storage import guess_content_type, is_absolute_url
from .base import BackendGateway
from .errors import AuthError, DataError, StorageError
from .models import Project, Session

logger = logging.getLogger(__name__)

UPLOAD_CACHE_CONTROL = 'max-age=3600'


def _error_message(resp, fallback):
    """Pull the human-readable message out of an error response"""
    try:
        data = resp.json()
    except ValueError:
        data = None

    if isinstance(data, dict):
        for key in ('error_description', 'msg', 'message', 'error'):
            value = data.get(key)
            if value and isinstance(value, str):
                return value
    text = (resp.text or '').strip()
    return text or f"{fallback} (HTTP {resp.status_code})"


class SupabaseGateway(BackendGateway):
    """Backend gateway backed by a hosted Supabase project"""

    def __init__(self, url, anon_key, bucket='project-images', table='projects',
                 timeout=15, http=None):
        super().__init__()
        self.url = (url or '').rstrip('/')
        self.anon_key = anon_key
        self.bucket = bucket
        self.table = table
        self.timeout = timeout
        self.http = http or requests.Session()

    # ===== HTTP helpers =====

    def _headers(self, extra=None):
        token = self._session.access_token if self._session else self.anon_key
        headers = {
            'apikey': self.anon_key,
            'Authorization': f"Bearer {token}",
        }
        if extra:
            headers.update(extra)
        return headers

    def _request(self, method, path, error_cls, fallback, **kwargs):
        headers = self._headers(kwargs.pop('headers', None))
        try:
            resp = self.http.request(method, f"{self.url}{path}", headers=headers,
                                     timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.error("%s %s failed: %s", method, path, e)
            raise error_cls(f"{fallback}: {e}")

        if resp.status_code >= 400:
            message = _error_message(resp, fallback)
            if resp.status_code == 401 and self._session is not None and error_cls is not AuthError:
                # Expired or revoked JWT: the session is gone
                self._set_session(None)
            db_log('WARNING', 'gateway', f"{method} {path} rejected", {
                'status': resp.status_code,
                'message': message,
            })
            raise error_cls(message, status_code=resp.status_code)
        return resp

    def _rows_path(self, query=''):
        return f"/rest/v1/{self.table}{query}"

    def _single_row(self, resp, fallback):
        data = resp.json()
        if isinstance(data, list):
            if len(data) != 1:
                raise DataError(f"{fallback}: expected one row, got {len(data)}")
            data = data[0]
        return Project.from_row(data)

    # ===== Auth =====

    def sign_in(self, email, password):
        resp = self._request(
            'POST', '/auth/v1/token', AuthError, 'Sign in failed',
            params={'grant_type': 'password'},
            json={'email': email, 'password': password},
        )
        session = Session.from_auth_response(resp.json())
        if not session.access_token:
            raise AuthError('Sign in failed: no access token returned')
        if not session.user_email:
            session.user_email = email
        self._set_session(session)
        return session

    def sign_out(self):
        if self._session is None:
            return
        try:
            self._request('POST', '/auth/v1/logout', AuthError, 'Sign out failed')
        except AuthError as e:
            # The token may already be invalid; the local session ends regardless
            logger.warning("Sign out request failed: %s", e.message)
        self._set_session(None)

    # ===== Rows =====

    def list_projects(self):
        resp = self._request(
            'GET', self._rows_path(), DataError, 'Failed to load projects',
            params={'select': '*', 'order': 'created_at.desc'},
        )
        return [Project.from_row(row) for row in resp.json() or []]

    def insert_project(self, fields):
        resp = self._request(
            'POST', self._rows_path(), DataError, 'Failed to create project',
            params={'select': '*'},
            json=fields,
            headers={'Prefer': 'return=representation'},
        )
        return self._single_row(resp, 'Failed to create project')

    def update_project(self, project_id, fields):
        resp = self._request(
            'PATCH', self._rows_path(), DataError, 'Failed to update project',
            params={'id': f"eq.{project_id}", 'select': '*'},
            json=fields,
            headers={'Prefer': 'return=representation'},
        )
        return self._single_row(resp, 'Failed to update project')

    def delete_project(self, project_id):
        self._request(
            'DELETE', self._rows_path(), DataError, 'Failed to delete project',
            params={'id': f"eq.{project_id}"},
        )

    # ===== Blobs =====

    def _object_path(self, path):
        return f"/storage/v1/object/{self.bucket}/{quote(path)}"

    def upload(self, path, file):
        self._request(
            'POST', self._object_path(path), StorageError, 'Upload failed',
            data=file.content,
            headers={
                'Content-Type': file.content_type or guess_content_type(file.filename),
                'cache-control': UPLOAD_CACHE_CONTROL,
                'x-upsert': 'true',
            },
        )

    def remove(self, paths):
        filtered = [p for p in (paths or []) if p]
        if not filtered:
            return
        self._request(
            'DELETE', f"/storage/v1/object/{self.bucket}", StorageError, 'Remove failed',
            json={'prefixes': filtered},
        )

    def public_url(self, path):
        if not path:
            return None
        if is_absolute_url(path):
            return path
        return f"{self.url}/storage/v1/object/public/{self.bucket}/{quote(path)}"
