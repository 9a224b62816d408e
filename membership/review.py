"""
Review and query operations for the admin area: listing, lookup, status
changes, deletion, CSV export and dashboard figures.
"""

import csv
import io
from collections import namedtuple
from datetime import datetime, timedelta

from flask import current_app

from membership import storage
from membership.errors import MediaFailure, ValidationError
from membership.media import get_media_store
from membership.models import MEMBER_STATUSES, REVIEWED_STATUSES

MemberPage = namedtuple('MemberPage', ['members', 'total', 'filtered'])

EXPORT_COLUMNS = [
    ('Member ID', lambda m: m.member_id),
    ('Full Name', lambda m: m.full_name),
    ('Email', lambda m: m.email),
    ('Phone', lambda m: m.phone),
    ('ID Number', lambda m: m.id_number),
    ('Birth Date', lambda m: m.birth_date.strftime('%Y-%m-%d') if m.birth_date else ''),
    ('Birth Place', lambda m: m.birth_place),
    ('Activity', lambda m: m.activity),
    ('Status', lambda m: m.status),
    ('Registered At', lambda m: m.created_at.strftime('%Y-%m-%d %H:%M:%S') if m.created_at else ''),
    ('Approved At', lambda m: m.approved_at.strftime('%Y-%m-%d %H:%M:%S') if m.approved_at else ''),
]


def list_members(search=None, start=0, length=None):
    members, total, filtered = storage.query_members(search=search, start=start, length=length)
    return MemberPage(members, total, filtered)


def get_member(record_id):
    return storage.get(record_id)


def update_status(record_id, status, reviewer=None):
    """Move a member to ``status``.

    Approving or rejecting stamps the reviewer and time; going back to
    pending clears them.
    """
    if status not in MEMBER_STATUSES:
        raise ValidationError(f"Invalid status. Must be one of: {', '.join(MEMBER_STATUSES)}")

    member = storage.get(record_id)
    member.status = status
    if status in REVIEWED_STATUSES:
        member.approved_by = reviewer.id if reviewer is not None else None
        member.approved_at = datetime.utcnow()
    else:
        member.approved_by = None
        member.approved_at = None
    storage.save(member)

    current_app.logger.info(f"Member {member.member_id} set to {status}")
    return member


def delete_member(record_id):
    """Delete a member and its media. Missing files are ignored."""
    member = storage.get(record_id)
    references = [ref for ref in (member.photo, member.qr_code) if ref]
    member_id = member.member_id

    storage.delete(member)

    media = get_media_store()
    for reference in references:
        try:
            media.remove(reference)
        except MediaFailure as e:
            current_app.logger.error(f"Member {member_id} deleted but {reference} was left behind: {e.detail}")

    current_app.logger.info(f"Deleted member {member_id}")


def export_csv():
    """All members, newest first, every field quoted"""
    output = io.StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_ALL, lineterminator='\n')
    writer.writerow([header for header, _ in EXPORT_COLUMNS])
    for member in storage.all_members():
        writer.writerow([value(member) or '' for _, value in EXPORT_COLUMNS])
    return output.getvalue()


def dashboard_stats(now=None):
    one_month_ago = (now or datetime.utcnow()) - timedelta(days=30)
    return {
        'totalMembers': storage.count_members(),
        'activeMembers': storage.count_members(status='approved'),
        'newMembers': storage.count_members(created_since=one_month_ago),
    }


def recent_members(limit=10):
    members, _, _ = storage.query_members(length=limit)
    return [
        {
            'id': m.id,
            'fullName': m.full_name,
            'idNumber': m.id_number or '',
            'activity': m.activity or '',
            'status': m.status,
            'createdAt': m.created_at.isoformat() if m.created_at else None,
        }
        for m in members
    ]
