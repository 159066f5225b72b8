"""
Error taxonomy shared by the content resources
Each error carries the HTTP status it is rendered with
"""
from fastapi import status


class ContentError(Exception):
    """Base class for every failure surfaced to API callers"""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class DecodeError(ContentError):
    """Unrecognized or malformed request encoding"""

    status_code = status.HTTP_400_BAD_REQUEST


class ValidationError(ContentError):
    """Missing required field, disallowed MIME type, oversized attachment, bad parameter"""

    status_code = status.HTTP_400_BAD_REQUEST


class ConflictError(ContentError):
    status_code = status.HTTP_409_CONFLICT


class NotFoundError(ContentError):
    status_code = status.HTTP_404_NOT_FOUND


class UploadError(ContentError):
    """Media storage provider failure"""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class StoreError(ContentError):
    """Any other persistence layer failure"""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
