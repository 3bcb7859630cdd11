"""
Projects Gallery Renderer
=========================

Builds the card view models for the public "featured" and "all" project
containers, and announces when rendering is done.
"""

import logging

from blinker import Namespace

from ...core.logging_service import db_log
from ...gateway.errors import GatewayError
from ...gateway.models import DEFAULT_GALLERY_INTERVAL, GALLERY_LIMIT

logger = logging.getLogger(__name__)

FEATURED_LIMIT = 3
LOAD_ERROR_MESSAGE = 'Unable to load projects right now.'
EMPTY_MESSAGE = 'No projects yet.'
NO_PREVIEW_MESSAGE = 'No preview available'

_signals = Namespace()

# sent(sender, container=name) once a container holding cards has been rendered,
# so image rotation / drag behaviour can attach to the new markup
galleries_ready = _signals.signal('galleries-ready')

# sent(sender, container=name, count=n) after every container render
projects_rendered = _signals.signal('projects-rendered')


def gallery_images(project, public_url, limit=GALLERY_LIMIT):
    """Ordered image strip for a card.

    Gallery entries resolved to public URLs (unresolvable ones dropped,
    capped at ``limit``); otherwise the thumbnail alone; otherwise nothing.
    """
    if project.gallery_urls:
        resolved = [public_url(path) for path in project.gallery_urls]
        images = [url for url in resolved if url][:limit]
        if images:
            return images
    fallback = public_url(project.thumbnail_url)
    return [fallback] if fallback else []


def build_card(project, public_url):
    """Card view model for one project"""
    title = project.title or 'Untitled Project'
    images = [
        {'src': url, 'alt': f"{title} preview {index + 1}"}
        for index, url in enumerate(gallery_images(project, public_url))
    ]
    return {
        'id': project.id,
        'title': title,
        'tech_stack': project.tech_stack or None,
        'launched_on': project.launched_on or None,
        'cta_url': project.cta_url or None,
        'gallery_interval': project.gallery_interval or DEFAULT_GALLERY_INTERVAL,
        'images': images,
        'placeholder': None if images else NO_PREVIEW_MESSAGE,
    }


def select_featured(projects, limit=FEATURED_LIMIT):
    """Featured projects in fetched (newest-first) order, at most ``limit``"""
    return [p for p in projects if p.is_featured][:limit]


class GalleryRenderer:
    """Fetches projects once and renders the requested containers"""

    def __init__(self, gateway, sender=None):
        self.gateway = gateway
        self.sender = sender if sender is not None else self

    def container(self, name, projects):
        """Render one container: cards, or a single textual placeholder"""
        cards = [build_card(p, self.gateway.public_url) for p in projects]
        view = {
            'name': name,
            'cards': cards,
            'message': None if cards else EMPTY_MESSAGE,
        }
        if cards:
            galleries_ready.send(self.sender, container=name)
        projects_rendered.send(self.sender, container=name, count=len(cards))
        return view

    def failed(self, name):
        return {'name': name, 'cards': [], 'message': LOAD_ERROR_MESSAGE}

    def hydrate(self, featured=True, all_projects=True):
        """Render the requested containers.

        Returns a dict keyed by container name ('featured', 'all'). Fetch
        failures become a per-container message and are never raised.
        """
        if not featured and not all_projects:
            return {}

        names = [name for name, wanted in (('featured', featured), ('all', all_projects)) if wanted]

        try:
            projects = self.gateway.list_projects()
        except GatewayError as e:
            logger.error("Failed to fetch projects: %s", e.message)
            db_log('ERROR', 'projects_public', 'Failed to fetch projects', {'error': e.message})
            return {name: self.failed(name) for name in names}

        containers = {}
        if featured:
            containers['featured'] = self.container('featured', select_featured(projects))
        if all_projects:
            containers['all'] = self.container('all', projects)
        return containers
