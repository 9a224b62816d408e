"""
Uniform JSON envelopes for API responses.

Handlers call ``to_envelope`` explicitly with whatever they produced: a
payload on success or a ``MembershipError`` on failure.
"""

from flask import current_app, jsonify
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge

from membership.errors import MembershipError


def to_envelope(result=None, message='Success', status=None, include_detail=False, **extra):
    """Build the response for ``result``.

    Errors become ``{"success": false, "message", "error"}`` with the
    error's own status code; anything else becomes
    ``{"success": true, "message", "data"}``. ``extra`` keys are merged
    into the top level of the body.
    """
    if isinstance(result, MembershipError):
        body = {
            'success': False,
            'message': result.message,
            'error': _error_detail(result) if include_detail else {},
        }
        code = status or result.status_code
    else:
        body = {'success': True, 'message': message, 'data': result}
        code = status or 200

    body.update(extra)
    response = jsonify(body)
    response.status_code = code
    return response


def _error_detail(error):
    detail = {'type': type(error).__name__}
    if error.detail is not None:
        detail['detail'] = error.detail
    return detail


def unauthorized():
    return to_envelope(MembershipError('Please log in to view this page'), status=401)


def register_error_handlers(app):

    @app.errorhandler(MembershipError)
    def handle_membership_error(error):
        if error.status_code >= 500:
            current_app.logger.error(f"{type(error).__name__}: {error.message} ({error.detail})")
        return to_envelope(error, include_detail=current_app.config['SHOW_ERROR_DETAIL'])

    @app.errorhandler(RequestEntityTooLarge)
    def handle_too_large(error):
        return to_envelope(
            MembershipError('File upload error: request body too large', detail=error.description),
            status=413,
            include_detail=current_app.config['SHOW_ERROR_DETAIL'],
        )

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return to_envelope(MembershipError(error.description), status=error.code)

    @app.errorhandler(Exception)
    def handle_unexpected(error):
        current_app.logger.exception(f"Unhandled error: {error}")
        return to_envelope(
            MembershipError('Internal Server Error', detail=str(error)),
            status=500,
            include_detail=current_app.config['SHOW_ERROR_DETAIL'],
        )
