"""
Errors raised by the content layer.

A missing singleton row is not an error: repositories return None for it.
"""
from rest_framework import status


class ContentError(Exception):
    """Base class; carries the API error code and HTTP status."""
    code = 'CONTENT_ERROR'
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = 'Content operation failed'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def as_payload(self):
        return {
            'error': {
                'code': self.code,
                'message': self.message,
                'status': self.status_code,
            }
        }


class FetchError(ContentError):
    """A read against the row-store failed."""
    code = 'FETCH_FAILED'
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = 'Failed to fetch content'


class NotFoundError(ContentError):
    """The row targeted by a lookup, update or delete does not exist."""
    code = 'NOT_FOUND'
    status_code = status.HTTP_404_NOT_FOUND
    default_message = 'Not found'


class UploadError(ContentError):
    """Writing a file to the object-store or resolving its URL failed."""
    code = 'UPLOAD_FAILED'
    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = 'Failed to upload file'


class WriteError(ContentError):
    """A create, update or delete against the row-store failed."""
    code = 'WRITE_FAILED'
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = 'Failed to save content'
