import io
import os

import pytest
from PIL import Image
from sqlalchemy.exc import OperationalError

from membership import intake, storage
from membership.errors import DuplicateError, MediaRejected, StorageFailure, ValidationError
from membership.intake import Submission, register_member
from membership.models import Member


def test_register_without_photo(ctx, jane, media_files):
    member = register_member(jane)

    assert member.status == 'pending'
    assert member.member_id.startswith('MEM-')
    assert member.photo is None
    assert member.qr_code == f'/qrcodes/{member.id}.png'
    assert member.approved_by is None
    assert member.approved_at is None
    assert media_files() == {'uploads': [], 'qrcodes': [f'{member.id}.png']}


def test_qr_code_is_a_png(ctx, jane):
    member = register_member(jane)
    path = os.path.join(ctx.config['MEDIA_ROOT'], 'qrcodes', f'{member.id}.png')

    with Image.open(path) as img:
        assert img.format == 'PNG'


def test_register_normalises_fields(ctx):
    member = register_member({
        'fullName': '  Jane Doe ',
        'email': ' Jane@X.COM ',
        'phone': '12345678',
        'idNumber': 'ab-123',
        'birthDate': '1990-04-02',
        'birthPlace': 'Arusha',
        'activity': 'Farming',
    })

    assert member.full_name == 'Jane Doe'
    assert member.email == 'jane@x.com'
    assert member.id_number == 'AB-123'
    assert member.birth_date.isoformat() == '1990-04-02'
    assert member.to_dict()['birthPlace'] == 'Arusha'


def test_optional_fields_default(ctx, jane):
    data = register_member(jane).to_dict()

    assert data['birthDate'] is None
    assert data['birthPlace'] == ''
    assert data['idNumber'] == ''
    assert data['activity'] == ''
    assert data['photo'] is None


def test_photo_is_stored_byte_for_byte(ctx, jane, upload, png_bytes):
    original = png_bytes(color=(1, 2, 3))
    member = register_member(jane, upload(original))

    assert member.photo.startswith('/uploads/member-')
    assert member.photo.endswith('.png')
    path = os.path.join(ctx.config['MEDIA_ROOT'], member.photo.lstrip('/'))
    with open(path, 'rb') as f:
        assert f.read() == original


def test_empty_file_field_means_no_photo(ctx, jane, upload):
    member = register_member(jane, upload(b'', filename=''))
    assert member.photo is None


@pytest.mark.parametrize('missing', ['fullName', 'email', 'phone'])
def test_missing_required_field(ctx, jane, upload, media_files, missing):
    form = dict(jane, **{missing: '  '})

    with pytest.raises(ValidationError):
        register_member(form, upload())

    assert Member.query.count() == 0
    assert media_files() == {'uploads': [], 'qrcodes': []}


def test_invalid_email(ctx, jane):
    with pytest.raises(ValidationError, match='Invalid email format'):
        register_member(dict(jane, email='not-an-email'))


def test_invalid_birth_date(ctx, jane):
    with pytest.raises(ValidationError):
        register_member(dict(jane, birthDate='02/04/1990'))


def test_non_image_rejected(ctx, jane, upload, media_files):
    with pytest.raises(MediaRejected, match='Only images allowed'):
        register_member(jane, upload(b'hello', filename='notes.txt', content_type='text/plain'))

    assert Member.query.count() == 0
    assert media_files() == {'uploads': [], 'qrcodes': []}


def test_oversized_photo_rejected(ctx, jane, upload, media_files):
    ctx.config['MAX_PHOTO_SIZE'] = 1024

    with pytest.raises(MediaRejected, match='too large'):
        register_member(jane, upload(b'\x89PNG' + b'0' * 2048))

    assert Member.query.count() == 0
    assert media_files()['uploads'] == []


def test_duplicate_email(ctx, jane, upload, media_files):
    first = register_member(jane)

    with pytest.raises(DuplicateError):
        register_member(dict(jane, email='JANE@x.com', fullName='Other'), upload())

    assert Member.query.count() == 1
    assert media_files() == {'uploads': [], 'qrcodes': [f'{first.id}.png']}


def test_duplicate_caught_at_commit_cleans_up(ctx, jane, upload, media_files, monkeypatch):
    first = register_member(jane)
    # Simulate a concurrent registration that passed the pre-check
    monkeypatch.setattr(storage, 'find_by_email', lambda email: None)

    with pytest.raises(DuplicateError) as excinfo:
        register_member(jane, upload())

    assert excinfo.value.field == 'email'
    assert Member.query.count() == 1
    assert media_files() == {'uploads': [], 'qrcodes': [f'{first.id}.png']}


def test_duplicate_id_number(ctx, jane, media_files):
    first = register_member(dict(jane, idNumber='x1'))

    with pytest.raises(DuplicateError) as excinfo:
        register_member({'fullName': 'John', 'email': 'john@x.com', 'phone': '1', 'idNumber': 'X1'})

    assert excinfo.value.field == 'idNumber'
    assert media_files()['qrcodes'] == [f'{first.id}.png']


def test_members_without_id_number_do_not_collide(ctx, jane):
    register_member(jane)
    register_member({'fullName': 'John', 'email': 'john@x.com', 'phone': '1'})

    assert Member.query.count() == 2


def test_qr_failure_is_not_fatal(ctx, jane, upload, media_files, monkeypatch):
    def broken(url):
        raise RuntimeError('renderer unavailable')

    monkeypatch.setattr(intake, 'render_verification_code', broken)

    member = register_member(jane, upload())

    assert member.qr_code is None
    assert member.photo is not None
    assert Member.query.count() == 1
    assert media_files()['qrcodes'] == []
    assert len(media_files()['uploads']) == 1


def test_storage_failure_removes_media(ctx, jane, upload, media_files, monkeypatch):
    def failing_create(member):
        raise StorageFailure(detail='disk full')

    monkeypatch.setattr(storage, 'create', failing_create)

    with pytest.raises(StorageFailure):
        register_member(jane, upload())

    assert Member.query.count() == 0
    assert media_files() == {'uploads': [], 'qrcodes': []}


def test_member_ids_are_sequential(ctx, jane):
    first = register_member(jane)
    second = register_member({'fullName': 'John', 'email': 'john@x.com', 'phone': '1'})

    prefix, number = first.member_id.rsplit('-', 1)
    assert second.member_id == f'{prefix}-{int(number) + 1:06d}'


def test_submission_from_form_blank_optionals():
    submission = Submission.from_form({'fullName': 'A', 'email': 'A@B.CO', 'phone': '1', 'idNumber': ' '})

    assert submission.email == 'a@b.co'
    assert submission.id_number is None
    assert submission.birth_date is None
    submission.validate()


class BrokenQuery:
    def filter(self, *args, **kwargs):
        raise OperationalError('SELECT', {}, Exception('database is locked'))

    filter_by = filter


class BrokenMemberTable:
    query = BrokenQuery()
    member_id = Member.member_id
    email = Member.email


def test_lookup_failure_is_storage_failure(ctx, jane, upload, media_files, monkeypatch):
    monkeypatch.setattr(storage, 'Member', BrokenMemberTable)

    with pytest.raises(StorageFailure):
        register_member(jane, upload())

    assert media_files() == {'uploads': [], 'qrcodes': []}


def test_member_id_failure_removes_media(ctx, jane, upload, media_files, monkeypatch):
    monkeypatch.setattr(storage, 'find_by_email', lambda email: None)
    monkeypatch.setattr(storage, 'Member', BrokenMemberTable)

    with pytest.raises(StorageFailure):
        register_member(jane, upload())

    monkeypatch.undo()
    assert Member.query.count() == 0
    assert media_files() == {'uploads': [], 'qrcodes': []}


def test_birth_date_with_trailing_junk(ctx, jane):
    with pytest.raises(ValidationError):
        register_member(dict(jane, birthDate='1990-04-02garbage'))


def test_birth_date_as_iso_timestamp(ctx, jane):
    member = register_member(dict(jane, birthDate='1990-04-02T00:00:00'))
    assert member.birth_date.isoformat() == '1990-04-02'
