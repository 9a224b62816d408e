"""
Member intake pipeline

Turns a public registration form into a stored member record:

    guard photo -> validate -> duplicate check -> save photo ->
    allocate identity -> render QR code -> assign member ID -> commit

Every file written along the way registers an undo action. If a later
step fails the undo actions run newest first, so a failed registration
never leaves files behind. A QR code that fails to render is logged and
skipped; the member is saved without one.
"""

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from flask import current_app

from membership import storage
from membership.errors import DuplicateError, MembershipError, ValidationError
from membership.media import accept_photo, get_media_store
from membership.models import Member
from membership.qr_generator import render_verification_code, verification_url

EMAIL_RE = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')


@dataclass
class Submission:
    """Normalised registration form"""
    full_name: str
    email: str
    phone: str
    birth_date: Optional[str] = None
    birth_place: str = ''
    activity: str = ''
    id_number: Optional[str] = None

    @classmethod
    def from_form(cls, form):
        def field(name):
            return (form.get(name) or '').strip()

        return cls(
            full_name=field('fullName'),
            email=field('email').lower(),
            phone=field('phone'),
            birth_date=field('birthDate') or None,
            birth_place=field('birthPlace'),
            activity=field('activity'),
            id_number=field('idNumber').upper() or None,
        )

    def validate(self):
        if not (self.full_name and self.email and self.phone):
            raise ValidationError('Full name, email and phone are required')
        if not EMAIL_RE.match(self.email):
            raise ValidationError('Invalid email format')
        self.parsed_birth_date()

    def parsed_birth_date(self):
        if not self.birth_date:
            return None
        try:
            if 'T' in self.birth_date:
                # ISO timestamp from a date picker, e.g. 1990-04-02T00:00:00
                return datetime.fromisoformat(self.birth_date).date()
            return datetime.strptime(self.birth_date, '%Y-%m-%d').date()
        except ValueError:
            raise ValidationError('Invalid birth date, expected YYYY-MM-DD')


class Compensations:
    """Undo actions for side effects that happened outside the database"""

    def __init__(self):
        self._actions = []

    def add(self, description, action, *args):
        self._actions.append((description, action, args))

    def run(self):
        while self._actions:
            description, action, args = self._actions.pop()
            try:
                action(*args)
                current_app.logger.warning(f"Rolled back {description}")
            except MembershipError as e:
                current_app.logger.error(f"Failed to roll back {description}: {e.detail or e.message}")


def register_member(form, photo=None):
    """Register a member from form fields and an optional photo upload.

    Raises ``MediaRejected``, ``ValidationError``, ``DuplicateError``,
    ``StorageFailure`` or ``MediaFailure``; on any of them no record and no
    media file from this attempt remain.
    """
    media = get_media_store()

    upload = None
    if photo is not None and photo.filename:
        upload = accept_photo(photo, current_app.config['MAX_PHOTO_SIZE'])

    submission = Submission.from_form(form)
    submission.validate()

    if storage.find_by_email(submission.email):
        raise DuplicateError()

    undo = Compensations()
    try:
        photo_ref = None
        if upload:
            photo_ref = media.save_photo(upload)
            undo.add(f"photo {photo_ref}", media.remove, photo_ref)

        record_id = storage.new_record_id()

        qr_ref = None
        try:
            url = verification_url(current_app.config['BASE_URL'], record_id)
            qr_ref = media.save_qr_code(record_id, render_verification_code(url))
            undo.add(f"QR code {qr_ref}", media.remove, qr_ref)
        except Exception as e:
            # Don't fail the registration if QR generation fails
            current_app.logger.warning(f"QR code generation failed for {record_id}: {e}")

        member = Member(
            id=record_id,
            full_name=submission.full_name,
            email=submission.email,
            phone=submission.phone,
            birth_date=submission.parsed_birth_date(),
            birth_place=submission.birth_place,
            activity=submission.activity,
            id_number=submission.id_number,
            photo=photo_ref,
            qr_code=qr_ref,
            status='pending',
            member_id=storage.next_member_id(),
        )
        storage.create(member)
    except Exception:
        undo.run()
        raise

    current_app.logger.info(f"Registered member {member.member_id} ({member.email})")
    return member
