"""
Storage Utility
===============

Object naming and URL helpers shared by the gateway and the admin dashboard.
Objects live in a single bucket under one folder per project:

    project-<id>/thumbnail-<token>.<ext>
    project-<id>/gallery-<n>-<token>.<ext>
"""

import re
import uuid

ABSOLUTE_URL_RE = re.compile(r'^https?:', re.IGNORECASE)

CONTENT_TYPES = {
    'jpg': 'image/jpeg', 'jpeg': 'image/jpeg',
    'png': 'image/png', 'gif': 'image/gif', 'webp': 'image/webp',
    'svg': 'image/svg+xml', 'avif': 'image/avif',
    'heic': 'image/heic', 'heif': 'image/heif',
}


def is_absolute_url(value):
    """True for http(s) URLs, which are used as-is instead of bucket paths."""
    return bool(value) and bool(ABSOLUTE_URL_RE.match(value))


def file_extension(filename, default='jpg'):
    """Lower-cased extension of filename, or default when it has none."""
    if not filename or '.' not in filename:
        return default
    ext = filename.rsplit('.', 1)[-1].lower()
    return ext or default


def guess_content_type(filename):
    """Guess content type from extension"""
    ext = file_extension(filename, default='')
    return CONTENT_TYPES.get(ext, 'application/octet-stream')


def build_object_path(project_id, filename, prefix, token=None):
    """Storage path for a file attached to a project.

    Args:
        project_id: Id of the owning project row.
        filename: Original filename, used only for its extension.
        prefix: "thumbnail" or "gallery-<n>".
        token: Uniqueness token, random when omitted.
    """
    token = token or uuid.uuid4().hex
    ext = file_extension(filename)
    return f"project-{project_id}/{prefix}-{token}.{ext}"


def storage_paths(values):
    """Filter a sequence down to bucket paths (drops empty values and absolute URLs)."""
    return [v for v in values if v and not is_absolute_url(v)]
