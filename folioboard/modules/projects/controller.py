"""
Projects Dashboard Controller
=============================

State and behaviour of the admin dashboard for one operator's browser:

- mode: unauthenticated (login form) or authenticated (list + editor)
- editor: closed, create (no current project) or edit (bound to a project)
- the projects cache, kept in step with every successful mutation
- pending media, uploaded only when the editor form is saved

Every UI interaction is a named action in ``handlers``; routes call
``dispatch(action, ...)``.
"""

import logging

from ...core.logging_service import db_log, logger as log_service
from ...core.storage import build_object_path, storage_paths
from ...gateway.errors import AuthError, GatewayError
from ...gateway.models import GALLERY_LIMIT, ProjectFields
from .media import PendingMedia, PreviewStore

logger = logging.getLogger(__name__)

MODE_UNAUTHENTICATED = 'unauthenticated'
MODE_AUTHENTICATED = 'authenticated'

EDITOR_CLOSED = 'closed'
EDITOR_CREATE = 'create'
EDITOR_EDIT = 'edit'

LIST_LOADING = 'Fetching projects…'
LIST_FAILED = 'Failed to load projects.'
LIST_EMPTY = 'No projects yet. Add your first one!'

SAVE_IN_PROGRESS = 'A save is already in progress.'
EDITOR_STALE = 'The editor had moved to another project, so nothing was changed. Check the form and try again.'
DELETE_STALE = 'That project is no longer open in the editor, so nothing was deleted.'

SOURCE = 'projects_admin'


class DashboardController:
    """One admin dashboard: session gate, projects cache and editor"""

    ACTIONS = (
        'login', 'add', 'open', 'refresh', 'sign_out', 'cancel', 'delete', 'submit',
        'thumbnail_change', 'gallery_change', 'gallery_remove', 'pending_remove',
    )

    def __init__(self, gateway, previews=None, gallery_limit=GALLERY_LIMIT):
        self.gateway = gateway
        self.previews = previews if previews is not None else PreviewStore()
        self.gallery_limit = gallery_limit

        self.mode = MODE_UNAUTHENTICATED
        self.initialized = False
        self.projects_cache = []
        self.list_status = None

        self.editor_state = EDITOR_CLOSED
        self.editor_title = 'New project'
        self.current_project = None
        self.draft = ProjectFields()
        self.media = PendingMedia(self.previews, limit=gallery_limit)

        self.login_error = None
        self.editor_error = None
        self.editor_success = None
        self.loading = False

        self.handlers = {
            'login': self.login,
            'add': self.add,
            'open': self.open_project,
            'refresh': self.refresh,
            'sign_out': self.sign_out,
            'cancel': self.cancel,
            'delete': self.delete,
            'submit': self.submit,
            'thumbnail_change': self.thumbnail_change,
            'gallery_change': self.gallery_change,
            'gallery_remove': self.gallery_remove,
            'pending_remove': self.pending_remove,
        }
        self._unsubscribe = gateway.on_session_change(self._handle_session_change)

    def dispatch(self, action, *args, **kwargs):
        handler = self.handlers.get(action)
        if handler is None:
            raise ValueError(f"Unknown dashboard action: {action}")
        return handler(*args, **kwargs)

    def close(self):
        """Detach from the gateway and release every preview"""
        self._unsubscribe()
        self.media.reset()
        self.previews.release_all()

    # ===== Mode =====

    @property
    def authenticated(self):
        return self.mode == MODE_AUTHENTICATED

    @property
    def user_email(self):
        session = self.gateway.get_session()
        return session.user_email if session else None

    def _show_auth(self):
        self.mode = MODE_UNAUTHENTICATED
        self.projects_cache = []
        self.list_status = None
        self._close_editor()

    def _show_dashboard(self):
        self.mode = MODE_AUTHENTICATED
        self.login_error = None

    def _handle_session_change(self, session):
        if session is None and self.mode != MODE_UNAUTHENTICATED:
            logger.info("Session ended; returning to login")
            self._show_auth()

    def ensure_session(self):
        """Show the dashboard when a session exists, the login form otherwise"""
        self.initialized = True
        if self.gateway.get_session() is None:
            self._show_auth()
            return False

        self._show_dashboard()
        try:
            self.load_projects()
        except GatewayError as e:
            logger.error("Initial project load failed: %s", e.message)
        return True

    def login(self, email, password):
        self.login_error = None
        try:
            self.gateway.sign_in(email, password)
        except AuthError as e:
            self.login_error = e.message
            log_service.warning(SOURCE, 'Failed admin login', {'email': email, 'error': e.message})
            return False

        log_service.log_user_action(SOURCE, 'login', user_id=email)
        self.ensure_session()
        return True

    def sign_out(self):
        email = self.user_email
        self.gateway.sign_out()
        self._show_auth()
        log_service.log_user_action(SOURCE, 'sign out', user_id=email)

    # ===== Project list =====

    def load_projects(self):
        self.list_status = LIST_LOADING
        try:
            projects = self.gateway.list_projects()
        except GatewayError as e:
            self.list_status = LIST_FAILED
            db_log('ERROR', SOURCE, 'Failed to load projects', {'error': e.message})
            raise
        self.projects_cache = projects
        self.list_status = None
        return projects

    def refresh(self):
        try:
            self.load_projects()
        except GatewayError as e:
            logger.error("Refresh failed: %s", e.message)

    def list_items(self):
        """Rows for the project list"""
        items = []
        for project in self.projects_cache:
            flags = []
            if project.is_featured:
                flags.append('Featured')
            if project.launched_on:
                flags.append(project.launched_on)
            items.append({
                'id': project.id,
                'title': project.title or 'Untitled project',
                'meta': ' · '.join(flags) or 'Draft',
                'active': self.current_project is not None and self.current_project.id == project.id,
            })
        return items

    @property
    def list_message(self):
        if self.list_status:
            return self.list_status
        return None if self.projects_cache else LIST_EMPTY

    def find_project(self, project_id):
        for project in self.projects_cache:
            if str(project.id) == str(project_id):
                return project
        return None

    # ===== Editor =====

    def reset_editor(self):
        self.current_project = None
        self.editor_title = 'New project'
        self.draft = ProjectFields()
        self.editor_error = None
        self.editor_success = None
        self.media.reset()

    def _close_editor(self):
        self.reset_editor()
        self.editor_state = EDITOR_CLOSED

    def open_editor(self, project=None):
        """Open the editor for a project, or for a new one when project is None"""
        self.reset_editor()
        if project is None:
            self.editor_state = EDITOR_CREATE
            return

        self.editor_state = EDITOR_EDIT
        self.current_project = project
        self.editor_title = f"Editing: {project.title or 'Untitled'}"
        self.draft = ProjectFields.from_project(project)

    def add(self):
        self.open_editor(None)

    def open_project(self, project_id):
        project = self.find_project(project_id)
        if project is None:
            return False
        self.open_editor(project)
        return True

    def cancel(self):
        self._close_editor()

    @property
    def editor_open(self):
        return self.editor_state != EDITOR_CLOSED

    @property
    def can_delete(self):
        return self.current_project is not None

    def bound_to(self, project_id):
        """True when the editor is open on project_id (empty for a new project)"""
        if not self.editor_open:
            return False
        if not project_id:
            return self.current_project is None
        return self.current_project is not None and str(self.current_project.id) == str(project_id)

    def rebind_editor(self, project_id, fields=None):
        """Reopen the editor on the project a form was posted for, keeping what was typed.

        Used when the form came from a page showing another project than the
        one now open. Pending media staged in the editor is discarded and
        nothing is saved. Returns False when that project no longer exists.
        """
        if project_id:
            project = self.find_project(project_id)
            if project is None:
                self._close_editor()
                return False
            self.open_editor(project)
        else:
            self.open_editor(None)
        self.update_draft(fields)
        self.editor_error = EDITOR_STALE
        return True

    def _existing_gallery(self):
        return list(self.current_project.gallery_urls) if self.current_project else []

    def thumbnail_view(self):
        """Image shown in the thumbnail preview, or None for 'None selected'"""
        if self.media.thumbnail is not None:
            return {'preview': self.media.thumbnail_preview,
                    'alt': f"{self.media.thumbnail.filename} preview"}
        if self.current_project and self.current_project.thumbnail_url:
            return {'src': self.gateway.public_url(self.current_project.thumbnail_url),
                    'alt': f"{self.current_project.title} thumbnail"}
        return None

    def gallery_view(self):
        """Persisted images not marked for removal, then queued uploads"""
        items = []
        title = self.current_project.title if self.current_project else ''
        for path in self._existing_gallery():
            if path in self.media.removals:
                continue
            items.append({'kind': 'persisted', 'path': path,
                          'src': self.gateway.public_url(path),
                          'alt': f"{title} gallery image"})
        for entry in self.media.uploads:
            items.append({'kind': 'pending', 'preview': entry.preview,
                          'alt': entry.file.filename})
        return items

    def update_draft(self, fields):
        """Keep what the operator typed while media actions re-render the form"""
        if fields is not None:
            self.draft = fields

    # ===== Media =====

    def thumbnail_change(self, file, fields=None):
        self.update_draft(fields)
        self.media.set_thumbnail(file)

    def remaining_slots(self):
        return self.media.remaining_slots(len(self._existing_gallery()))

    def gallery_change(self, files, fields=None):
        """Queue gallery files; files beyond the free slots are silently dropped"""
        self.update_draft(fields)
        files = [f for f in files if f is not None]
        if not files:
            return []
        return self.media.add_gallery_files(files, len(self._existing_gallery()))

    def gallery_remove(self, path, fields=None):
        """Mark a persisted gallery image for removal on the next save"""
        self.update_draft(fields)
        if path not in self._existing_gallery():
            return False
        self.media.mark_removed(path)
        return True

    def pending_remove(self, preview, fields=None):
        """Discard a queued gallery file without contacting the backend"""
        self.update_draft(fields)
        return self.media.discard_upload(preview)

    # ===== Save =====

    def set_loading_state(self, is_loading):
        self.loading = is_loading

    def _upload(self, project_id, file, prefix):
        path = build_object_path(project_id, file.filename, prefix)
        self.gateway.upload(path, file)
        return path

    def submit(self, fields):
        """Save the editor: create or update the row and reconcile pending media.

        Returns the saved Project, or None when the save failed (the message
        is in ``editor_error``).
        """
        if self.loading:
            self.editor_error = SAVE_IN_PROGRESS
            return None

        self.editor_error = None
        self.editor_success = None
        self.set_loading_state(True)
        self.draft = fields

        try:
            if self.current_project is None:
                saved = self._create(fields)
            else:
                saved = self._update(fields)
        except GatewayError as e:
            self.editor_error = e.message or 'Something went wrong.'
            log_service.error(SOURCE, 'Project save failed', {
                'project_id': self.current_project.id if self.current_project else None,
                'error': e.message,
            }, user_id=self.user_email)
            return None
        finally:
            self.set_loading_state(False)

        return saved

    def _create(self, fields):
        created = self.gateway.insert_project(dict(fields.as_payload(), gallery_urls=[]))
        uploaded = []
        updated = created

        try:
            if self.media.thumbnail is not None:
                path = self._upload(created.id, self.media.thumbnail, 'thumbnail')
                uploaded.append(path)
                updated = self.gateway.update_project(created.id, {'thumbnail_url': path})

            if self.media.uploads:
                paths = []
                for index, entry in enumerate(self.media.uploads[:self.gallery_limit]):
                    path = self._upload(created.id, entry.file, f"gallery-{index}")
                    uploaded.append(path)
                    paths.append(path)
                updated = self.gateway.update_project(created.id, {'gallery_urls': paths})
        except GatewayError:
            self._discard_partial_create(created, uploaded)
            raise

        self.projects_cache.insert(0, updated)
        self.open_editor(updated)
        self.editor_success = 'Project created.'
        log_service.log_user_action(SOURCE, 'create project', user_id=self.user_email,
                                    details={'project_id': updated.id})
        return updated

    def _discard_partial_create(self, created, uploaded):
        """Undo an insert whose media steps failed so no half-built row is left behind"""
        try:
            self.gateway.delete_project(created.id)
            self.gateway.remove(uploaded)
        except GatewayError as e:
            log_service.error(SOURCE, 'Could not discard partially created project', {
                'project_id': created.id,
                'uploaded': uploaded,
                'error': e.message,
            })

    def _update(self, fields):
        project = self.current_project
        payload = fields.as_payload()

        gallery = self._existing_gallery()
        if self.media.removals:
            removed = [path for path in gallery if path in self.media.removals]
            gallery = [path for path in gallery if path not in self.media.removals]
            self.gateway.remove(storage_paths(removed))

        if self.media.uploads:
            start_index = len(gallery)
            free = max(0, self.gallery_limit - start_index)
            for offset, entry in enumerate(self.media.uploads[:free]):
                gallery.append(self._upload(project.id, entry.file, f"gallery-{start_index + offset}"))

        payload['gallery_urls'] = gallery[:self.gallery_limit]

        if self.media.thumbnail is not None:
            payload['thumbnail_url'] = self._upload(project.id, self.media.thumbnail, 'thumbnail')
            if project.thumbnail_url:
                self.gateway.remove(storage_paths([project.thumbnail_url]))

        saved = self.gateway.update_project(project.id, payload)

        self.projects_cache = [saved if p.id == saved.id else p for p in self.projects_cache]
        self.open_editor(saved)
        self.editor_success = 'Project saved.'
        return saved

    # ===== Delete =====

    def delete(self, confirmed=False, project_id=None):
        """Delete the current project; needs explicit confirmation.

        When project_id is given it must name the project open in the editor.
        """
        project = self.current_project
        if project is None or not confirmed:
            return False
        if project_id is not None and str(project_id) != str(project.id):
            self.editor_error = DELETE_STALE
            return False
        if self.loading:
            self.editor_error = SAVE_IN_PROGRESS
            return False

        self.set_loading_state(True)
        self.editor_error = None
        self.editor_success = None

        media = []
        if project.thumbnail_url:
            media.append(project.thumbnail_url)
        media.extend(project.gallery_urls)

        try:
            try:
                self.gateway.delete_project(project.id)
            except GatewayError as e:
                self.editor_error = e.message or 'Failed to delete.'
                log_service.error(SOURCE, 'Project delete failed', {
                    'project_id': project.id, 'error': e.message,
                }, user_id=self.user_email)
                return False

            try:
                self.gateway.remove(storage_paths(media))
            except GatewayError as e:
                # The row is gone; leftover objects are only logged
                db_log('WARNING', SOURCE, 'Storage cleanup after delete failed', {
                    'project_id': project.id, 'paths': media, 'error': e.message,
                })
        finally:
            self.set_loading_state(False)

        self.projects_cache = [p for p in self.projects_cache if p.id != project.id]
        self._close_editor()
        log_service.log_user_action(SOURCE, 'delete project', user_id=self.user_email,
                                    details={'project_id': project.id})
        return True
