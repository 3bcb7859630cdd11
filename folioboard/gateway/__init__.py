"""
Folioboard Backend Gateway
==========================

Typed access to the hosted backend (auth, rows, blobs).

Usage:
    from folioboard.gateway import create_gateway

    gateway = create_gateway()
    projects = gateway.list_projects()
"""

from .base import BackendGateway
from .errors import AuthError, DataError, GatewayError, StorageError
from .memory import InMemoryGateway
from .models import GALLERY_LIMIT, Project, ProjectFields, Session, UploadFile
from .supabase import SupabaseGateway


def create_gateway(backend=None, **overrides):
    """Build a gateway from configuration.

    Args:
        backend: 'supabase' or 'memory'; defaults to the GATEWAY_BACKEND setting.
        overrides: Extra keyword arguments passed to the gateway constructor.
    """
    from ..core.config import get_config_value

    backend = backend or get_config_value('GATEWAY_BACKEND', 'supabase')
    bucket = get_config_value('STORAGE_BUCKET', 'project-images')

    if backend == 'memory':
        return InMemoryGateway(bucket=bucket, **overrides)
    if backend == 'supabase':
        return SupabaseGateway(
            url=get_config_value('SUPABASE_URL'),
            anon_key=get_config_value('SUPABASE_ANON_KEY'),
            bucket=bucket,
            table=get_config_value('PROJECTS_TABLE', 'projects'),
            timeout=int(get_config_value('GATEWAY_TIMEOUT', 15)),
            **overrides
        )
    raise ValueError(f"Unknown gateway backend: {backend}")


__all__ = [
    'BackendGateway', 'SupabaseGateway', 'InMemoryGateway', 'create_gateway',
    'GatewayError', 'AuthError', 'DataError', 'StorageError',
    'Project', 'ProjectFields', 'Session', 'UploadFile', 'GALLERY_LIMIT',
]
