"""
Gateway Errors
==============

Every failure reported by the hosted backend is raised as one of these.
The message is human-readable and shown to the operator as-is.
"""


class GatewayError(Exception):
    """Base class for backend failures"""

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class AuthError(GatewayError):
    """Bad credentials or expired session"""


class DataError(GatewayError):
    """A row operation was rejected"""


class StorageError(DataError):
    """An upload or removal was rejected"""
