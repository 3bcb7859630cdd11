"""
Gateway Models
==============

Typed views over rows of the ``projects`` table, the editor payload,
and the auth session.
"""

import time
from typing import Any, Dict, Optional

GALLERY_LIMIT = 10
DEFAULT_GALLERY_INTERVAL = 4500

TEXT_FIELDS = ('title', 'summary', 'tech_stack', 'launched_on', 'cta_url')


def _text(value):
    if value is None:
        return None
    return str(value)


class Project:
    """A persisted portfolio entry"""

    def __init__(self, id, title=None, summary=None, tech_stack=None,
                 launched_on=None, cta_url=None, is_featured=False,
                 thumbnail_url=None, gallery_urls=None, created_at=None,
                 gallery_interval=None):
        self.id = id
        self.title = title
        self.summary = summary
        self.tech_stack = tech_stack
        self.launched_on = launched_on
        self.cta_url = cta_url
        self.is_featured = bool(is_featured)
        self.thumbnail_url = thumbnail_url
        self.gallery_urls = list(gallery_urls) if isinstance(gallery_urls, (list, tuple)) else []
        self.created_at = created_at
        self.gallery_interval = gallery_interval

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'Project':
        """Build a Project from a row mapping returned by the backend"""
        return cls(
            id=row.get('id'),
            title=_text(row.get('title')),
            summary=_text(row.get('summary')),
            tech_stack=_text(row.get('tech_stack')),
            launched_on=_text(row.get('launched_on')),
            cta_url=_text(row.get('cta_url')),
            is_featured=row.get('is_featured') or False,
            thumbnail_url=row.get('thumbnail_url') or None,
            gallery_urls=row.get('gallery_urls'),
            created_at=row.get('created_at'),
            gallery_interval=row.get('gallery_interval'),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'title': self.title,
            'summary': self.summary,
            'tech_stack': self.tech_stack,
            'launched_on': self.launched_on,
            'cta_url': self.cta_url,
            'is_featured': self.is_featured,
            'thumbnail_url': self.thumbnail_url,
            'gallery_urls': list(self.gallery_urls),
            'created_at': self.created_at,
            'gallery_interval': self.gallery_interval,
        }

    def __eq__(self, other):
        if not isinstance(other, Project):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return f"<Project id={self.id!r} title={self.title!r}>"


class ProjectFields:
    """Editable text fields and the feature flag collected from the editor form"""

    def __init__(self, title='', summary='', tech_stack='', launched_on='',
                 cta_url='', is_featured=False):
        self.title = title
        self.summary = summary
        self.tech_stack = tech_stack
        self.launched_on = launched_on
        self.cta_url = cta_url
        self.is_featured = is_featured

    @classmethod
    def from_form(cls, form) -> 'ProjectFields':
        """Extract the fields from a form mapping, trimming every text value.

        A checkbox is only submitted when ticked, so presence means True.
        """
        return cls(
            title=(form.get('title') or '').strip(),
            summary=(form.get('summary') or '').strip(),
            tech_stack=(form.get('tech_stack') or '').strip(),
            launched_on=(form.get('launched_on') or '').strip(),
            cta_url=(form.get('cta_url') or '').strip(),
            is_featured=bool(form.get('is_featured')),
        )

    @classmethod
    def from_project(cls, project: Project) -> 'ProjectFields':
        return cls(
            title=project.title or '',
            summary=project.summary or '',
            tech_stack=project.tech_stack or '',
            launched_on=project.launched_on or '',
            cta_url=project.cta_url or '',
            is_featured=project.is_featured,
        )

    def as_payload(self) -> Dict[str, Any]:
        """Row payload for insert/update"""
        return {
            'title': self.title.strip(),
            'summary': self.summary.strip(),
            'tech_stack': self.tech_stack.strip(),
            'launched_on': self.launched_on.strip(),
            'cta_url': self.cta_url.strip(),
            'is_featured': bool(self.is_featured),
        }

    def __eq__(self, other):
        if not isinstance(other, ProjectFields):
            return NotImplemented
        return self.as_payload() == other.as_payload()


class Session:
    """An authenticated operator session"""

    def __init__(self, access_token: str, refresh_token: Optional[str] = None,
                 expires_at: Optional[int] = None, user_email: Optional[str] = None):
        self.access_token = access_token
        self.refresh_token = refresh_token
        self.expires_at = expires_at
        self.user_email = user_email

    def is_expired(self, now=None) -> bool:
        if self.expires_at is None:
            return False
        return (now if now is not None else time.time()) >= self.expires_at

    @classmethod
    def from_auth_response(cls, data: Dict[str, Any]) -> 'Session':
        """Build a Session from the auth server's token response"""
        expires_at = data.get('expires_at')
        if expires_at is None and data.get('expires_in'):
            expires_at = int(time.time()) + int(data['expires_in'])
        user = data.get('user') or {}
        return cls(
            access_token=data.get('access_token'),
            refresh_token=data.get('refresh_token'),
            expires_at=expires_at,
            user_email=user.get('email'),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'access_token': self.access_token,
            'refresh_token': self.refresh_token,
            'expires_at': self.expires_at,
            'user_email': self.user_email,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Optional['Session']:
        if not data or not data.get('access_token'):
            return None
        return cls(
            access_token=data['access_token'],
            refresh_token=data.get('refresh_token'),
            expires_at=data.get('expires_at'),
            user_email=data.get('user_email'),
        )


class UploadFile:
    """A file chosen by the operator, held in memory until it is uploaded"""

    def __init__(self, filename: str, content: bytes, content_type: Optional[str] = None):
        self.filename = filename or 'upload'
        self.content = content
        self.content_type = content_type

    @classmethod
    def from_storage(cls, storage) -> Optional['UploadFile']:
        """Wrap a werkzeug FileStorage; empty file inputs yield None"""
        if storage is None or not storage.filename:
            return None
        return cls(storage.filename, storage.read(), storage.mimetype or None)

    def __repr__(self):
        return f"<UploadFile {self.filename!r} {len(self.content)} bytes>"
