"""
Projects Admin Routes
=====================

HTTP surface of the admin dashboard. Each route looks up the operator's
DashboardController, dispatches one named action, and redirects back to
the dashboard page, which renders the controller's state.
"""

import io

from flask import abort, current_app, redirect, render_template, request, send_file, session, url_for

from . import projects_bp
from ...core.storage import guess_content_type
from ...gateway.models import ProjectFields, Session, UploadFile

DASHBOARD_KEY = 'dashboard_id'


# ===== Helpers =====

def _storage_key():
    return current_app.config.get('SESSION_STORAGE_KEY', 'folioboard-admin')


def get_controller():
    """Controller for this browser, restoring a persisted backend session"""
    registry = current_app.extensions['folioboard'].controllers
    key = session.get(DASHBOARD_KEY)
    if not key:
        key = registry.new_key()
        session[DASHBOARD_KEY] = key
    persisted = Session.from_dict(session.get(_storage_key()))
    return registry.get(key, persisted_session=persisted)


def _persist_session(controller):
    """Mirror the gateway session into the cookie so it survives restarts"""
    current = controller.gateway.get_session()
    if current is None:
        session.pop(_storage_key(), None)
    else:
        session[_storage_key()] = current.to_dict()


def _back(controller):
    _persist_session(controller)
    return redirect(url_for('projects_admin.projects_editor'))


def _controller():
    """Controller for this browser, with its session checked on first use"""
    controller = get_controller()
    if not controller.initialized:
        controller.ensure_session()
    return controller


def _form_fields():
    return ProjectFields.from_form(request.form)


def _form_files(name):
    return [f for f in (UploadFile.from_storage(s) for s in request.files.getlist(name)) if f]


def _editor_matches_form(controller, fields):
    """True when the posted editor form belongs to the project open in the editor.

    A form rendered for another project (an older tab, or a dashboard that was
    evicted) reopens that project with the typed fields and an error instead.
    """
    project_id = request.form.get('id', '').strip()
    if controller.bound_to(project_id):
        return True
    controller.rebind_editor(project_id, fields)
    return False


# ===== Routes =====

@projects_bp.route('/')
@projects_bp.route('/editor')
def projects_editor():
    """Projects dashboard - login form or project list and editor"""
    controller = _controller()
    _persist_session(controller)
    return render_template('projects/projects_editor.html', dashboard=controller)


@projects_bp.route('/login', methods=['POST'])
def login():
    controller = get_controller()
    email = request.form.get('email', '').strip()
    password = request.form.get('password', '')
    controller.dispatch('login', email, password)
    return _back(controller)


@projects_bp.route('/logout', methods=['POST'])
def logout():
    controller = get_controller()
    if controller.authenticated:
        controller.dispatch('sign_out')
    return _back(controller)


@projects_bp.route('/refresh', methods=['POST'])
def refresh():
    controller = _controller()
    if controller.authenticated:
        controller.dispatch('refresh')
    return _back(controller)


@projects_bp.route('/new', methods=['POST'])
def new_project():
    controller = _controller()
    if controller.authenticated:
        controller.dispatch('add')
    return _back(controller)


@projects_bp.route('/edit/<project_id>')
def edit_project(project_id):
    controller = _controller()
    if controller.authenticated and not controller.dispatch('open', project_id):
        abort(404)
    return _back(controller)


@projects_bp.route('/cancel', methods=['POST'])
def cancel():
    controller = _controller()
    if controller.authenticated:
        controller.dispatch('cancel')
    return _back(controller)


@projects_bp.route('/save', methods=['POST'])
def save_project():
    """Stage any files chosen in the form, then save the editor"""
    controller = _controller()
    if not controller.authenticated:
        return _back(controller)

    fields = _form_fields()
    if not _editor_matches_form(controller, fields):
        return _back(controller)

    thumbnail = _form_files('thumbnail')
    if thumbnail:
        controller.dispatch('thumbnail_change', thumbnail[0], fields)
    gallery = _form_files('gallery')
    if gallery:
        controller.dispatch('gallery_change', gallery, fields)

    controller.dispatch('submit', fields)
    return _back(controller)


@projects_bp.route('/thumbnail', methods=['POST'])
def change_thumbnail():
    controller = _controller()
    fields = _form_fields()
    if controller.authenticated and _editor_matches_form(controller, fields):
        files = _form_files('thumbnail')
        controller.dispatch('thumbnail_change', files[0] if files else None, fields)
    return _back(controller)


@projects_bp.route('/gallery', methods=['POST'])
def add_gallery_images():
    controller = _controller()
    fields = _form_fields()
    if controller.authenticated and _editor_matches_form(controller, fields):
        controller.dispatch('gallery_change', _form_files('gallery'), fields)
    return _back(controller)


@projects_bp.route('/gallery/remove', methods=['POST'])
def remove_gallery_image():
    controller = _controller()
    fields = _form_fields()
    if controller.authenticated and _editor_matches_form(controller, fields):
        controller.dispatch('gallery_remove', request.form.get('path', ''), fields)
    return _back(controller)


@projects_bp.route('/gallery/pending/<preview>/remove', methods=['POST'])
def remove_pending_image(preview):
    controller = _controller()
    fields = _form_fields()
    if controller.authenticated and _editor_matches_form(controller, fields):
        controller.dispatch('pending_remove', preview, fields)
    return _back(controller)


@projects_bp.route('/delete', methods=['GET', 'POST'])
def delete_project():
    """GET asks for confirmation; POST with confirm=yes and the project id deletes"""
    controller = _controller()
    if not controller.authenticated or not controller.can_delete:
        return _back(controller)

    if request.method == 'GET':
        return render_template('projects/confirm_delete.html', dashboard=controller,
                               project=controller.current_project)

    controller.dispatch('delete', confirmed=request.form.get('confirm') == 'yes',
                        project_id=request.form.get('id', ''))
    return _back(controller)


@projects_bp.route('/previews/<token>')
def preview(token):
    """Serve a file the operator picked but has not saved yet"""
    controller = get_controller()
    file = controller.previews.get(token)
    if file is None:
        abort(404)
    return send_file(io.BytesIO(file.content), mimetype=file.content_type or guess_content_type(file.filename),
                     download_name=file.filename)
