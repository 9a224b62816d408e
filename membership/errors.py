"""
Error taxonomy for the membership workflow.

Every error carries the HTTP status it maps to and a message that is safe
to show to the person who made the request. ``detail`` holds diagnostic
information that is only surfaced in development.
"""


class MembershipError(Exception):
    status_code = 400
    default_message = 'An error occurred'

    def __init__(self, message=None, detail=None):
        self.message = message or self.default_message
        self.detail = detail
        super().__init__(self.message)


class ValidationError(MembershipError):
    """Missing or malformed input the submitter can correct."""
    status_code = 400
    default_message = 'Invalid input'


class DuplicateError(MembershipError):
    """A unique field (email or ID number) is already registered."""
    status_code = 409
    default_message = 'A member with this email already exists'

    def __init__(self, message=None, detail=None, field='email'):
        self.field = field
        super().__init__(message, detail)


class MediaRejected(MembershipError):
    """Attachment is not an image or exceeds the size bound."""
    status_code = 400
    default_message = 'Only images allowed'


class NotFound(MembershipError):
    status_code = 404
    default_message = 'Member not found'


class PermissionDenied(MembershipError):
    status_code = 403
    default_message = 'Admin access required'


class StorageFailure(MembershipError):
    """The database could not commit."""
    status_code = 500
    default_message = 'Server error'


class MediaFailure(MembershipError):
    """A media file could not be written or removed."""
    status_code = 500
    default_message = 'Server error'
