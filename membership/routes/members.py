import os
from flask import request, send_file
from flask_login import login_required, current_user
from membership.routes import members_bp
from membership.routes.admin import admin_required
from membership.errors import NotFound, ValidationError
from membership.intake import register_member
from membership.media import get_media_store
from membership.responses import to_envelope
from membership import review


@members_bp.route('', methods=['POST'])
def create_member():
    """Public registration form"""
    member = register_member(request.form, request.files.get('photo'))
    return to_envelope(member.to_dict(), 'Member created successfully', 201)


@members_bp.route('', methods=['GET'])
@login_required
@admin_required
def list_members():
    """
    Plain mode returns every member. When ``draw`` is present the request
    follows the DataTables server-side protocol: ``start``, ``length`` and
    ``search`` select the page, and the counts are echoed back.
    """
    draw = request.args.get('draw')
    if draw is None:
        page = review.list_members()
        return to_envelope([m.to_dict() for m in page.members])

    start = max(request.args.get('start', 0, type=int), 0)
    length = request.args.get('length', 10, type=int)
    search = (request.args.get('search[value]') or request.args.get('search') or '').strip()

    page = review.list_members(search=search or None, start=start, length=length)
    return to_envelope(
        [m.to_dict() for m in page.members],
        draw=int(draw) if draw.isdigit() else draw,
        recordsTotal=page.total,
        recordsFiltered=page.filtered,
    )


@members_bp.route('/<record_id>', methods=['GET'])
@login_required
@admin_required
def get_member(record_id):
    return to_envelope(review.get_member(record_id).to_dict())


@members_bp.route('/<record_id>/status', methods=['PUT', 'PATCH'])
@login_required
@admin_required
def update_status(record_id):
    data = request.get_json(silent=True) or request.form
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    member = review.update_status(record_id, data.get('status'), reviewer=current_user)
    return to_envelope(member.to_dict(), f'Member status updated to {member.status}')


@members_bp.route('/<record_id>', methods=['DELETE'])
@login_required
@admin_required
def delete_member(record_id):
    review.delete_member(record_id)
    return to_envelope(None, 'Member deleted successfully')


@members_bp.route('/<record_id>/photo', methods=['GET'])
@login_required
@admin_required
def member_photo(record_id):
    """Stored photo, inline or as a download with ?download=1"""
    member = review.get_member(record_id)
    media = get_media_store()

    if not member.photo or not media.exists(member.photo):
        raise NotFound('Photo not found')

    path = media.path_for(member.photo)
    extension = os.path.splitext(path)[1]
    return send_file(
        path,
        as_attachment=request.args.get('download') == '1',
        download_name=f'{member.member_id}_photo{extension}',
    )
