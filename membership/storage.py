"""
Persistence for member records.

Thin layer over Flask-SQLAlchemy: every write commits immediately and
database errors are translated into the membership error taxonomy, with
unique-index violations surfacing as ``DuplicateError``.
"""

import uuid
from datetime import datetime

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from membership import db
from membership.errors import DuplicateError, NotFound, StorageFailure
from membership.models import Member


def new_record_id():
    return uuid.uuid4().hex


def find_by_email(email):
    try:
        return Member.query.filter_by(email=email.strip().lower()).first()
    except SQLAlchemyError as e:
        db.session.rollback()
        raise StorageFailure(detail=str(e))


def next_member_id(now=None):
    """Next free member ID in format MEM-YYYY-NNNNNN"""
    year = (now or datetime.utcnow()).year
    prefix = f'MEM-{year}-'

    try:
        last_member = Member.query.filter(
            Member.member_id.like(f'{prefix}%')
        ).order_by(Member.member_id.desc()).first()
    except SQLAlchemyError as e:
        db.session.rollback()
        raise StorageFailure(detail=str(e))

    new_number = 1
    if last_member:
        try:
            new_number = int(last_member.member_id.split('-')[-1]) + 1
        except ValueError:
            new_number = 1

    return f'{prefix}{new_number:06d}'


def get(record_id):
    member = db.session.get(Member, record_id)
    if member is None:
        raise NotFound()
    return member


def create(member):
    email, id_number = member.email, member.id_number
    db.session.add(member)
    try:
        db.session.commit()
    except IntegrityError as e:
        db.session.rollback()
        raise _uniqueness_error(email, id_number, e)
    except SQLAlchemyError as e:
        db.session.rollback()
        raise StorageFailure(detail=str(e))
    return member


def save(member):
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        raise StorageFailure(detail=str(e))
    return member


def delete(member):
    db.session.delete(member)
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        raise StorageFailure(detail=str(e))


def _uniqueness_error(email, id_number, error):
    # Work out which unique index rejected the row by looking for the holder.
    if Member.query.filter_by(email=email).first():
        return DuplicateError(detail=str(error.orig))
    if id_number and Member.query.filter_by(id_number=id_number).first():
        return DuplicateError(
            'A member with this ID number already exists',
            detail=str(error.orig),
            field='idNumber',
        )
    return StorageFailure(detail=str(error.orig))


def _newest_first(query):
    return query.order_by(Member.created_at.desc(), Member.member_id.desc())


def search_filter(search):
    # Literal substring match: LIKE wildcards in the input are escaped
    escaped = search.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')
    term = f'%{escaped}%'
    return db.or_(
        Member.full_name.ilike(term, escape='\\'),
        Member.email.ilike(term, escape='\\'),
        Member.phone.ilike(term, escape='\\'),
        Member.id_number.ilike(term, escape='\\'),
    )


def query_members(search=None, start=0, length=None):
    """Return ``(members, total, filtered)`` for one page, newest first.

    ``total`` ignores the search; ``filtered`` counts the matches.
    ``length`` of ``None`` (or negative) returns everything from ``start``.
    """
    total = Member.query.count()
    query = Member.query
    if search:
        query = query.filter(search_filter(search))
        filtered = query.count()
    else:
        filtered = total

    query = _newest_first(query)
    if start:
        query = query.offset(start)
    if length is not None and length >= 0:
        query = query.limit(length)
    return query.all(), total, filtered


def all_members():
    return _newest_first(Member.query).all()


def count_members(status=None, created_since=None):
    query = Member.query
    if status:
        query = query.filter(Member.status == status)
    if created_since:
        query = query.filter(Member.created_at >= created_since)
    return query.count()
