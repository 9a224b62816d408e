"""
Media store for member photos and verification-code images.

Files live under ``MEDIA_ROOT`` in two folders and are referenced from
member records by their public path (``/uploads/<file>``,
``/qrcodes/<file>``). Writes go through a temporary file and an atomic
rename so a reader never sees a half-written image.
"""

import os
import tempfile
import uuid
from collections import namedtuple

from flask import current_app
from werkzeug.utils import secure_filename

from membership.errors import MediaFailure, MediaRejected, NotFound

PHOTO_DIR = 'uploads'
QR_DIR = 'qrcodes'

PhotoUpload = namedtuple('PhotoUpload', ['data', 'extension', 'mimetype'])


def accept_photo(file, max_size):
    """Check an uploaded photo and read it into memory.

    Rejects anything whose MIME type is not ``image/*`` and anything larger
    than ``max_size`` bytes. Nothing is written to disk here.
    """
    if not file.mimetype or not file.mimetype.startswith('image/'):
        raise MediaRejected('Only images allowed')

    data = file.read(max_size + 1)
    if len(data) > max_size:
        raise MediaRejected('File too large', detail=f'Maximum photo size is {max_size} bytes')
    if not data:
        raise MediaRejected('Uploaded photo is empty')

    extension = os.path.splitext(secure_filename(file.filename or ''))[1].lower()
    return PhotoUpload(data, extension, file.mimetype)


class MediaStore:

    def __init__(self, root):
        self.root = root

    def save_photo(self, upload):
        filename = f"member-{uuid.uuid4().hex}{upload.extension}"
        return self._write(PHOTO_DIR, filename, upload.data)

    def save_qr_code(self, record_id, data):
        return self._write(QR_DIR, f"{record_id}.png", data)

    def path_for(self, reference):
        """Absolute path of a stored reference; unknown shapes are NotFound."""
        parts = (reference or '').strip('/').split('/')
        if len(parts) != 2 or parts[0] not in (PHOTO_DIR, QR_DIR):
            raise NotFound('Media not found')
        folder, filename = parts
        if not filename or secure_filename(filename) != filename:
            raise NotFound('Media not found')
        return os.path.join(self.root, folder, filename)

    def exists(self, reference):
        try:
            return os.path.isfile(self.path_for(reference))
        except NotFound:
            return False

    def remove(self, reference):
        """Delete a stored file. Returns False if it was already gone."""
        path = self.path_for(reference)
        try:
            os.remove(path)
        except FileNotFoundError:
            return False
        except OSError as e:
            raise MediaFailure(detail=f"Could not remove {reference}: {e}")
        return True

    def _write(self, folder, filename, data):
        directory = os.path.join(self.root, folder)
        tmp_path = None
        try:
            os.makedirs(directory, exist_ok=True)
            with tempfile.NamedTemporaryFile(dir=directory, prefix='.tmp-', delete=False) as tmp:
                tmp_path = tmp.name
                tmp.write(data)
            os.replace(tmp_path, os.path.join(directory, filename))
        except OSError as e:
            if tmp_path and os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise MediaFailure(detail=f"Could not write {folder}/{filename}: {e}")
        return f"/{folder}/{filename}"


def get_media_store():
    """Media store rooted at the current app's MEDIA_ROOT"""
    return MediaStore(current_app.config['MEDIA_ROOT'])
