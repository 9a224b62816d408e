"""
Verification routes for member QR codes
Public lookup behind the URL encoded in every member's QR code, and the
stored photo and QR code images under the paths kept on each record
"""

from flask import Blueprint, send_file
from membership import storage
from membership.errors import NotFound
from membership.media import PHOTO_DIR, QR_DIR, get_media_store
from membership.responses import to_envelope

verification_bp = Blueprint('verification', __name__)


@verification_bp.route('/verify/<record_id>')
def verify(record_id):
    """
    Public verification of a member record
    Anyone can scan the QR code and check membership status
    """
    member = storage.get(record_id)
    return to_envelope(
        {'valid': member.status == 'approved', 'member': member.to_public_dict()},
        'Member found',
    )


@verification_bp.route(f'/<any({PHOTO_DIR}, {QR_DIR}):folder>/<filename>')
def media_file(folder, filename):
    """Serve a stored image by the reference saved on the member"""
    media = get_media_store()
    reference = f'/{folder}/{filename}'

    if not media.exists(reference):
        raise NotFound('Media not found')
    return send_file(media.path_for(reference))
